"""
Base protocol and types for stage evaluators.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol


class Mark(str, Enum):
    """Correctness shown for a single answered item."""
    NONE = "none"  # unanswered, or not checked yet
    CORRECT = "correct"
    INCORRECT = "incorrect"


@dataclass(frozen=True)
class StageProgress:
    """How far the learner is through a stage."""
    done: int
    total: int

    @property
    def complete(self) -> bool:
        return self.done >= self.total


class StageEvaluator(Protocol):
    """Protocol for stage evaluators."""

    def new_state(self, content: Any) -> Any:
        """Create fresh runtime state for this stage's content."""
        ...

    def is_complete(self, state: Any, content: Any) -> bool:
        """Completion predicate that gates advancing past the stage."""
        ...

    def progress(self, state: Any, content: Any) -> StageProgress:
        """Done/total counts for display."""
        ...
