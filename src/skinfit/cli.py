"""CLI for the skinfit recommender.

Commands:
- classify: Classify a saved answers file into a skin archetype
- recommend: Rank catalogue products for an archetype
- run: Classify answers, recommend products and write explain artefacts
- policies: Show the per-archetype recommendation policies
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Annotated, Protocol

import typer
from rich import print as rprint
from rich.console import Console
from rich.table import Table

from . import __version__
from .application.answers import load_answers
from .application.questionnaire_source import load_questionnaire
from .application.quiz import run_quiz, write_outcome
from .config import RecommenderConfig
from .config_file import load_recommender_config_file
from .domain.policies import POLICIES_BY_ARCHETYPE, policy_for, with_limit
from .domain.questionnaire import ClassificationResult
from .domain.questionnaire import classify as classify_answers
from .domain.recommendation import ScoredCandidate, recommend
from .domain.taxonomy import ARCHETYPE_ORDER, Locale, parse_archetype, parse_locale
from .exceptions import DependencyMissingError, SkinfitError
from .observability import set_log_level
from .protocols import CatalogQuery, FileSystem


class DependenciesBuilder(Protocol):
    """Protocol for constructing CLI dependencies."""

    def __call__(
        self,
        *,
        config: RecommenderConfig,
        load_catalog: bool,
    ) -> CliDependencies:
        """Build dependencies for CLI commands."""
        ...


@dataclass(frozen=True)
class CliDependencies:
    """Concrete dependencies required by the CLI."""

    fs: FileSystem
    catalog: CatalogQuery | None
    on_close: Callable[[], None] | None = None

    def close(self) -> None:
        """Release resources held by the catalogue for this invocation."""
        if self.on_close is not None:
            self.on_close()


@dataclass(frozen=True)
class CliContext:
    """Runtime CLI context for a single command invocation."""

    config: RecommenderConfig
    deps_builder: DependenciesBuilder

    def build_dependencies(
        self,
        *,
        load_catalog: bool,
        config: RecommenderConfig | None = None,
    ) -> CliDependencies:
        """Return dependencies using the configured builder."""
        config_value = config or self.config
        return self.deps_builder(config=config_value, load_catalog=load_catalog)


class CliContextNotInitialisedError(typer.BadParameter):
    """Raised when CLI context is missing."""

    def __init__(self) -> None:
        super().__init__("CLI context is not initialised. Use the skinfit entry point.")


class ArchetypeOptionError(typer.BadParameter):
    """Raised when --archetype is not one of the archetype codes."""

    def __init__(self, value: str) -> None:
        codes = ", ".join(archetype.value for archetype in ARCHETYPE_ORDER)
        super().__init__(f"Unknown archetype {value!r}; expected one of {codes}.")


def _get_context(ctx: typer.Context) -> CliContext:
    if not isinstance(ctx.obj, CliContext):
        raise CliContextNotInitialisedError()
    return ctx.obj


def _version_callback(value: bool) -> None:
    if value:
        rprint(f"skinfit {__version__}")
        raise typer.Exit()


def _locale_option(value: str | None) -> Locale | None:
    return None if value is None else parse_locale(value)


def _require_catalog(catalog: CatalogQuery | None) -> CatalogQuery:
    if catalog is None:
        raise DependencyMissingError("CatalogQuery", reason="The dependencies builder skipped it.")
    return catalog


def _print_classification(result: ClassificationResult) -> None:
    rprint(f"[green]✓ Skin type:[/green] [bold]{result.final_archetype}[/bold]")
    table = Table("Archetype", "Score")
    for archetype in ARCHETYPE_ORDER:
        table.add_row(archetype.value, f"{result.scores[archetype]:g}")
    Console().print(table)
    rprint(f"  Top: {', '.join(archetype.value for archetype in result.top_archetypes)}")
    tie_breaker = result.tie_breaker_answer.value if result.tie_breaker_answer else "-"
    rprint(f"  Tie-break used: {result.tie_breaker_used} (answer: {tie_breaker})")


def _print_recommendations(candidates: list[ScoredCandidate], locale: Locale) -> None:
    if not candidates:
        rprint("[yellow]No products matched this policy.[/yellow]")
        return
    table = Table("#", "Product", "Category", "Score", "Boost tags", "Safety")
    for rank, candidate in enumerate(candidates, start=1):
        breakdown = candidate.breakdown
        table.add_row(
            str(rank),
            candidate.product.display_name(locale),
            candidate.product.category.value,
            f"{candidate.score:.2f}",
            ", ".join(f"{match.code}+{match.weight:g}" for match in breakdown.matched_boost_tags),
            "-" if breakdown.safety_score is None else str(breakdown.safety_score),
        )
    Console().print(table)


def create_app(deps_builder: DependenciesBuilder) -> typer.Typer:
    """Create a Typer app wired with the provided dependencies builder."""
    app = typer.Typer(
        add_completion=False,
        help="Skin type quiz classifier and policy-driven product recommender",
    )

    @app.callback()
    def main(
        ctx: typer.Context,
        config_path: Annotated[
            Path | None,
            typer.Option(
                "--config",
                "-c",
                help="TOML config file overriding environment values",
            ),
        ] = None,
        verbose: Annotated[
            bool,
            typer.Option("--verbose", "-v", help="Log skipped answers and other details"),
        ] = False,
        version: Annotated[
            bool,
            typer.Option(
                "--version",
                callback=_version_callback,
                is_eager=True,
                help="Show the package version and exit",
            ),
        ] = False,
    ) -> None:
        """Initialise CLI context."""
        _ = version
        config = RecommenderConfig.from_env()
        if config_path is not None:
            fs = deps_builder(config=config, load_catalog=False).fs
            try:
                file_config = load_recommender_config_file(path=config_path, fs=fs)
            except SkinfitError as exc:
                raise typer.BadParameter(str(exc), param_hint="--config") from exc
            config = config.with_file_overrides(file_config)
        if verbose:
            set_log_level(logging.DEBUG)
        ctx.obj = CliContext(config=config, deps_builder=deps_builder)

    @app.command()
    def classify(
        ctx: typer.Context,
        answers_path: Annotated[
            Path,
            typer.Option("--answers", "-a", help="JSON file mapping question codes to choice ids"),
        ],
    ) -> None:
        """Classify saved quiz answers into a skin archetype."""
        state = _get_context(ctx)
        config = state.config
        deps = state.build_dependencies(load_catalog=False)
        definition = load_questionnaire(
            behavior_path=Path(config.behavior_path),
            preference_path=Path(config.preference_path),
            fs=deps.fs,
        )
        answers = load_answers(path=answers_path, fs=deps.fs)
        result = classify_answers(definition, answers)
        _print_classification(result)

    @app.command(name="recommend")
    def recommend_command(
        ctx: typer.Context,
        archetype_code: Annotated[
            str,
            typer.Option("--archetype", "-t", help="Archetype code (DS, OB, HS, CC or SC)"),
        ],
        limit: Annotated[
            int | None,
            typer.Option("--limit", "-n", min=0, help="Override the policy result limit"),
        ] = None,
        locale: Annotated[
            str | None,
            typer.Option("--locale", "-l", help="Display locale (KO, EN or FR)"),
        ] = None,
    ) -> None:
        """Rank catalogue products for a skin archetype."""
        try:
            archetype = parse_archetype(archetype_code)
        except ValueError as exc:
            raise ArchetypeOptionError(archetype_code) from exc

        state = _get_context(ctx)
        config = state.config.with_overrides(
            locale=_locale_option(locale),
            result_limit=limit,
        )
        deps = state.build_dependencies(load_catalog=True, config=config)
        ctx.call_on_close(deps.close)
        policy = policy_for(archetype)
        if config.result_limit is not None:
            policy = with_limit(policy, config.result_limit)
        candidates = recommend(archetype, policy, _require_catalog(deps.catalog))
        rprint(f"[green]✓ Recommendations for {archetype}:[/green]")
        _print_recommendations(candidates, config.locale)

    @app.command()
    def run(
        ctx: typer.Context,
        answers_path: Annotated[
            Path,
            typer.Option("--answers", "-a", help="JSON file mapping question codes to choice ids"),
        ],
        out_dir: Annotated[
            str | None,
            typer.Option("--output-dir", "-o", help="Directory for result.json and CSV"),
        ] = None,
        locale: Annotated[
            str | None,
            typer.Option("--locale", "-l", help="Display locale (KO, EN or FR)"),
        ] = None,
        limit: Annotated[
            int | None,
            typer.Option("--limit", "-n", min=0, help="Override the policy result limit"),
        ] = None,
    ) -> None:
        """Classify answers, recommend products and write explain artefacts."""
        state = _get_context(ctx)
        config = state.config.with_overrides(
            locale=_locale_option(locale),
            output_dir=out_dir,
            result_limit=limit,
        )
        deps = state.build_dependencies(load_catalog=True, config=config)
        ctx.call_on_close(deps.close)
        definition = load_questionnaire(
            behavior_path=Path(config.behavior_path),
            preference_path=Path(config.preference_path),
            fs=deps.fs,
        )
        answers = load_answers(path=answers_path, fs=deps.fs)
        outcome = run_quiz(
            definition=definition,
            answers=answers,
            catalog=_require_catalog(deps.catalog),
            limit=config.result_limit,
        )
        outs = write_outcome(outcome, out_dir=config.output_dir, fs=deps.fs, locale=config.locale)

        _print_classification(outcome.classification)
        _print_recommendations(list(outcome.recommendations), config.locale)
        rprint("[green]✓ Quiz run complete:[/green]")
        for k, v in outs.items():
            rprint(f"  {k}: {v}")

    @app.command()
    def policies() -> None:
        """Show the recommendation policy for every archetype."""
        table = Table("Archetype", "Categories", "Required (any)", "Excluded", "Boosts", "Limit")
        for archetype in ARCHETYPE_ORDER:
            policy = POLICIES_BY_ARCHETYPE[archetype]
            table.add_row(
                archetype.value,
                ", ".join(sorted(category.value for category in policy.preferred_categories)),
                ", ".join(sorted(tag.value for tag in policy.required_tags_any)) or "-",
                ", ".join(sorted(tag.value for tag in policy.excluded_tags)) or "-",
                ", ".join(f"{tag}={weight:g}" for tag, weight in policy.boost_tags.items()),
                str(policy.limit),
            )
        Console().print(table)

    _ = (main, classify, recommend_command, run, policies)
    return app
