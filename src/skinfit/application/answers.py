"""Loading for user answer documents (``{"Q1": "Q1_A", ...}``)."""

from __future__ import annotations

from pathlib import Path

from ..domain.questionnaire import AnswersMap
from ..exceptions import AnswersFileNotFoundError
from ..io_validation import IncomingDataError, validate_as
from ..protocols import FileSystem


def parse_answers(payload: object) -> AnswersMap:
    """Validate an answers payload into a question-code to choice-id mapping.

    Blank choice ids are treated as unanswered.

    Raises:
        IncomingDataError: If the payload is not a mapping of strings to strings or null,
            or if two keys name the same question once surrounding whitespace is removed.
    """
    raw = validate_as(dict[str, str | None], payload)
    answers: dict[str, str | None] = {}
    for key, choice_id in raw.items():
        code = key.strip()
        if code in answers:
            raise IncomingDataError(f"Duplicate answer for question {code!r}.")
        text = choice_id.strip() if choice_id is not None else ""
        answers[code] = text or None
    return answers


def load_answers(*, path: Path, fs: FileSystem) -> AnswersMap:
    """Read and validate an answers JSON document."""
    if not fs.exists(path):
        raise AnswersFileNotFoundError(str(path))
    return parse_answers(fs.read_json(path))
