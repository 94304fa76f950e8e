"""
Stage evaluators for escape room challenges.

Each challenge type (MCQ, matching, cloze, open questions) has its own module
with a stateless evaluator and the runtime state it operates on:
- new_state(): fresh per-session state for the stage content
- is_complete(): the completion predicate gating advancement
- progress(): done/total counts for display
plus the type-specific actions (select, place, reveal, ...).
"""

from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .base import StageEvaluator


class StageKind(str, Enum):
    """Challenge types a stage can hold."""
    MCQ = "mcq"
    MATCHING = "matching"
    CLOZE = "cloze"
    OPEN_QUESTIONS = "open_questions"


# Evaluator registry - populated by @register decorator
EVALUATORS: dict[StageKind, "StageEvaluator"] = {}


def register(kind: StageKind):
    """Decorator to register a stage evaluator."""
    def decorator(cls):
        EVALUATORS[kind] = cls()
        return cls
    return decorator


def get_evaluator(kind: str | StageKind) -> "StageEvaluator | None":
    """Get the evaluator for a stage kind."""
    if isinstance(kind, str):
        try:
            kind = StageKind(kind.lower())
        except ValueError:
            return None
    return EVALUATORS.get(kind)


# Import evaluators to trigger registration
from . import mcq
from . import matching
from . import cloze
from . import open_questions

__all__ = [
    "StageKind",
    "EVALUATORS",
    "get_evaluator",
    "register",
]
