"""
Content payload: the immutable data contract driving one escape room.

The payload is produced upstream (authoring form or generation service) and
is trusted as-is. Parsing here only turns JSON into typed, frozen models;
array-length conventions (10 questions per set, 7 pairs, 8 gaps) are not
enforced.

Wire names follow the upstream camelCase schema (introText, mcqSet1,
correctIndex, textWithPlaceholders, ...). Python attribute names are
accepted on input as well.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .exceptions import PayloadLoadError

SAMPLE_PAYLOAD_PATH = Path(__file__).parent / "data" / "sample_payload.json"


class _PayloadModel(BaseModel):
    """Shared config: frozen, alias-aware."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)


class MCQItem(_PayloadModel):
    """A single multiple-choice question."""

    question: str
    options: tuple[str, ...]
    correct_index: int = Field(alias="correctIndex")

    def is_correct(self, choice: int | None) -> bool:
        return choice is not None and choice == self.correct_index


class MatchPair(_PayloadModel):
    """A left/right pair. Identity is its position in the set, never its text."""

    left: str
    right: str


class ClozeSpec(_PayloadModel):
    """Fill-gap text with positional answers and optional distractors."""

    text_with_placeholders: str = Field(alias="textWithPlaceholders")
    answers: tuple[str, ...]
    distractors: tuple[str, ...] = ()

    @field_validator("distractors", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return () if value is None else value

    def fragments(self, marker: str = "[GAP]") -> list[str]:
        """Text pieces around each placeholder (placeholder count + 1 pieces)."""
        return self.text_with_placeholders.split(marker)

    def placeholder_count(self, marker: str = "[GAP]") -> int:
        return self.text_with_placeholders.count(marker)

    @property
    def word_bank(self) -> tuple[str, ...]:
        """Multiset of placeable words: answers followed by distractors."""
        return self.answers + self.distractors


class OpenQuestionItem(_PayloadModel):
    """Free-response question with a model answer for self-review."""

    question: str
    model_answer: str = Field(alias="modelAnswer")


class ContentPayload(_PayloadModel):
    """Everything one escape room session needs."""

    title: str
    intro_text: str = Field(alias="introText")
    mcq_set_1: tuple[MCQItem, ...] = Field(alias="mcqSet1")
    mcq_set_2: tuple[MCQItem, ...] = Field(alias="mcqSet2")
    matching_set_1: tuple[MatchPair, ...] = Field(alias="matchingSet1")
    matching_set_2: tuple[MatchPair, ...] = Field(alias="matchingSet2")
    fill_gap: ClozeSpec = Field(alias="fillGap")
    open_questions: tuple[OpenQuestionItem, ...] = Field(alias="openQuestions")


# =============================================================================
# Loading / dumping
# =============================================================================


def parse_payload(data: dict | str) -> ContentPayload:
    """
    Build a ContentPayload from a decoded dict or a JSON string.

    Raises:
        PayloadLoadError: If the JSON is malformed or the structure cannot be
            read as a payload (missing sections, wrong types).
    """
    try:
        if isinstance(data, str):
            return ContentPayload.model_validate_json(data)
        return ContentPayload.model_validate(data)
    except ValidationError as exc:
        raise PayloadLoadError(
            f"Payload structure not readable ({exc.error_count()} problem(s)): {exc}"
        ) from exc


def load_payload(path: str | Path) -> ContentPayload:
    """Read a payload JSON file from disk."""
    path = Path(path)
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise PayloadLoadError(f"Cannot read payload file {path}: {exc}") from exc

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise PayloadLoadError(f"Invalid JSON in {path}: {exc}") from exc

    payload = parse_payload(data)
    logger.debug("Loaded payload '{}' from {}", payload.title, path)
    return payload


def load_sample_payload() -> ContentPayload:
    """Load the demo payload shipped with the package."""
    return load_payload(SAMPLE_PAYLOAD_PATH)


def dump_payload(payload: ContentPayload) -> dict:
    """Convert to a JSON-ready dict using the upstream wire names."""
    return payload.model_dump(mode="json", by_alias=True)
