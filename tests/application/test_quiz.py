"""Tests for the end-to-end quiz flow and its explain artefacts."""

from __future__ import annotations

from pathlib import Path

import pytest

from skinfit.application.answers import load_answers
from skinfit.application.catalog_source import InMemoryCatalog, load_catalog
from skinfit.application.questionnaire_source import load_questionnaire
from skinfit.application.quiz import (
    RECOMMENDATION_COLUMNS,
    candidate_to_dict,
    classification_to_dict,
    outcome_to_dict,
    run_quiz,
    write_outcome,
)
from skinfit.domain.policies import POLICIES_BY_ARCHETYPE
from skinfit.domain.taxonomy import Archetype, Locale, TagCode
from skinfit.exceptions import DependencyMissingError, PolicyNotConfiguredError
from tests.fakes import InMemoryFileSystem, RecordingCatalog
from tests.support.builders import (
    BEHAVIOR_PATH,
    CATALOG_PATH,
    PREFERENCE_PATH,
    REPO_ROOT,
    definition,
    one_per_archetype,
    product,
    seed_shipped_data,
    tiebreaker,
)


def _quiz():
    return definition([one_per_archetype("Q1"), one_per_archetype("Q2"), tiebreaker()])


def test_run_quiz_recommends_for_final_archetype() -> None:
    catalog = RecordingCatalog.returning(
        [product("p1", tags=(TagCode.ACNE_CARE,)), product("p2", tags=(TagCode.LOW_PH,))]
    )

    outcome = run_quiz(
        definition=_quiz(),
        answers={"Q1": "Q1_SC", "Q2": "Q2_SC"},
        catalog=catalog,
    )

    assert outcome.archetype is Archetype.SC
    assert outcome.policy == POLICIES_BY_ARCHETYPE[Archetype.SC]
    assert [candidate.product.id for candidate in outcome.recommendations] == ["p1", "p2"]
    assert catalog.queries[0].archetype is Archetype.SC


def test_run_quiz_applies_limit_override() -> None:
    catalog = RecordingCatalog.returning([product(f"p{index}") for index in range(5)])

    outcome = run_quiz(definition=_quiz(), answers={}, catalog=catalog, limit=2)

    assert outcome.archetype is Archetype.CC
    assert outcome.policy.limit == 2
    assert len(outcome.recommendations) == 2


def test_run_quiz_requires_catalog() -> None:
    with pytest.raises(DependencyMissingError, match="CatalogQuery"):
        run_quiz(definition=_quiz(), answers={}, catalog=None)


def test_run_quiz_fails_for_unconfigured_archetype() -> None:
    policies = {Archetype.DS: POLICIES_BY_ARCHETYPE[Archetype.DS]}

    with pytest.raises(PolicyNotConfiguredError):
        run_quiz(definition=_quiz(), answers={}, catalog=RecordingCatalog(), policies=policies)


def test_classification_to_dict_is_json_safe() -> None:
    outcome = run_quiz(
        definition=_quiz(),
        answers={"Q1": "Q1_DS", "Q2": "Q2_HS", "TIEBREAKER": "TIEBREAKER_HS"},
        catalog=RecordingCatalog(),
    )

    payload = classification_to_dict(outcome.classification)

    assert payload == {
        "final_archetype": "HS",
        "scores": {"DS": 1.0, "OB": 0.0, "HS": 1.0, "CC": 0.0, "SC": 0.0},
        "top_archetypes": ["DS", "HS"],
        "tie_breaker_used": True,
        "tie_breaker_answer": "HS",
        "answered_codes": ["Q1", "Q2", "TIEBREAKER"],
    }


def test_candidate_to_dict_includes_breakdown() -> None:
    outcome = run_quiz(
        definition=_quiz(),
        answers={"Q1": "Q1_HS"},
        catalog=RecordingCatalog.returning(
            [product("p1", tags=(TagCode.GENTLE,), safety_score=70)]
        ),
    )

    payload = candidate_to_dict(outcome.recommendations[0], Locale.EN)

    assert payload["product_id"] == "p1"
    assert payload["category"] == "TONER"
    assert payload["score"] == pytest.approx(5.0)
    assert payload["breakdown"] == {
        "tag_score": 4.0,
        "safety_bonus": pytest.approx(1.0),
        "matched_boost_tags": [{"code": "GENTLE", "weight": 4}],
        "safety_score": 70,
    }


def test_write_outcome_writes_result_and_csv() -> None:
    fs = InMemoryFileSystem()
    outcome = run_quiz(
        definition=_quiz(),
        answers={"Q1": "Q1_HS"},
        catalog=RecordingCatalog.returning(
            [
                product("p1", tags=(TagCode.GENTLE, TagCode.FRAGRANCE_FREE), safety_score=90),
                product("p2", tags=(TagCode.SOOTHING,)),
            ]
        ),
    )

    outs = write_outcome(outcome, out_dir="out", fs=fs, locale=Locale.KO)

    assert outs == {
        "result": Path("out/result.json"),
        "recommendations": Path("out/recommendations.csv"),
    }
    assert "out" in fs.directories
    result = fs.read_json(outs["result"])
    assert result == outcome_to_dict(outcome, Locale.KO)
    frame = fs.read_csv(outs["recommendations"])
    assert list(frame.columns) == list(RECOMMENDATION_COLUMNS)
    assert frame["product_id"].tolist() == ["p1", "p2"]
    assert frame["rank"].tolist() == [1, 2]
    assert frame.loc[0, "matched_boost_tags"] == "GENTLE:4;FRAGRANCE_FREE:2"
    assert frame.loc[1, "safety_score"] == ""


def test_write_outcome_requires_filesystem() -> None:
    outcome = run_quiz(definition=_quiz(), answers={}, catalog=RecordingCatalog())

    with pytest.raises(DependencyMissingError, match="FileSystem"):
        write_outcome(outcome, out_dir="out", fs=None)


@pytest.mark.e2e
def test_sample_answers_end_to_end() -> None:
    fs = InMemoryFileSystem()
    seed_shipped_data(fs)
    answers_path = Path("data/samples/answers.example.json")
    fs.write_text((REPO_ROOT / answers_path).read_text(encoding="utf-8"), answers_path)

    outcome = run_quiz(
        definition=load_questionnaire(
            behavior_path=BEHAVIOR_PATH, preference_path=PREFERENCE_PATH, fs=fs
        ),
        answers=load_answers(path=answers_path, fs=fs),
        catalog=InMemoryCatalog(load_catalog(path=CATALOG_PATH, fs=fs)),
    )

    assert outcome.archetype is Archetype.HS
    assert outcome.classification.scores[Archetype.HS] == 6.0
    assert outcome.classification.tie_breaker_used is False
    assert [candidate.product.id for candidate in outcome.recommendations] == [
        "p-001",
        "p-006",
        "p-002",
    ]
    assert outcome.recommendations[0].score == pytest.approx(13.1)
