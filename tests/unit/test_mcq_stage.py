"""
Unit tests for the MCQ stage evaluator.
"""

import pytest

from escape_room.stages import EVALUATORS, StageKind, get_evaluator
from escape_room.stages.base import Mark


class TestEvaluatorRegistry:
    """Test the evaluator registry."""

    def test_all_evaluators_registered(self):
        """Every stage kind should have an evaluator."""
        assert set(EVALUATORS) == set(StageKind)

    def test_get_evaluator_by_string(self):
        assert get_evaluator("mcq") is EVALUATORS[StageKind.MCQ]

    def test_get_evaluator_by_enum(self):
        assert get_evaluator(StageKind.CLOZE) is not None

    def test_get_evaluator_invalid_type(self):
        """Should return None for unknown kinds."""
        assert get_evaluator("true_false") is None


class TestMcqEvaluator:
    """Test MCQ selection, marks and completion."""

    @pytest.fixture
    def evaluator(self):
        return get_evaluator(StageKind.MCQ)

    @pytest.fixture
    def items(self, payload):
        return payload.mcq_set_1

    @pytest.fixture
    def state(self, evaluator, items):
        return evaluator.new_state(items)

    def test_fresh_state_is_incomplete(self, evaluator, state, items):
        assert not evaluator.is_complete(state, items)
        assert evaluator.mark(state, items, 0) == Mark.NONE

    def test_all_correct_completes(self, evaluator, state, items):
        evaluator.select(state, items, 0, 1)
        evaluator.select(state, items, 1, 0)

        assert evaluator.is_complete(state, items)

    def test_wrong_answer_blocks_completion(self, evaluator, state, items):
        evaluator.select(state, items, 0, 0)
        evaluator.select(state, items, 1, 0)

        assert not evaluator.is_complete(state, items)
        assert evaluator.mark(state, items, 0) == Mark.INCORRECT
        assert evaluator.mark(state, items, 1) == Mark.CORRECT

    def test_correcting_a_wrong_answer_completes(self, evaluator, state, items):
        """Last selection wins."""
        evaluator.select(state, items, 0, 2)
        evaluator.select(state, items, 1, 0)
        evaluator.select(state, items, 0, 1)

        assert evaluator.is_complete(state, items)

    def test_reselecting_same_option_is_not_a_change(self, evaluator, state, items):
        assert evaluator.select(state, items, 0, 1) is True
        assert evaluator.select(state, items, 0, 1) is False

    def test_out_of_range_indices_are_ignored(self, evaluator, state, items):
        assert evaluator.select(state, items, 5, 0) is False
        assert evaluator.select(state, items, 0, 9) is False
        assert evaluator.select(state, items, -1, 0) is False
        assert state.choices == {}

    def test_check_lists_unanswered(self, evaluator, state, items):
        evaluator.select(state, items, 1, 0)

        feedback = evaluator.check(state, items)

        assert "Please answer all questions" in feedback
        assert "1" in feedback

    def test_check_reports_score(self, evaluator, state, items):
        evaluator.select(state, items, 0, 0)
        evaluator.select(state, items, 1, 0)

        assert evaluator.check(state, items).startswith("1/2 correct")

    def test_check_all_correct(self, evaluator, state, items):
        evaluator.select(state, items, 0, 1)
        evaluator.select(state, items, 1, 0)

        assert "All answers correct" in evaluator.check(state, items)

    def test_progress_counts_correct_answers(self, evaluator, state, items):
        evaluator.select(state, items, 0, 1)
        evaluator.select(state, items, 1, 1)

        progress = evaluator.progress(state, items)

        assert (progress.done, progress.total) == (1, 2)
        assert not progress.complete

    def test_empty_set_is_complete(self, evaluator):
        state = evaluator.new_state(())
        assert evaluator.is_complete(state, ())
