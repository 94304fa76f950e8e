"""
Unit tests for the open-question tracker.
"""

import pytest

from escape_room.stages import StageKind, get_evaluator


class TestOpenQuestionEvaluator:
    """Reveal, then acknowledge; every question must be acknowledged."""

    @pytest.fixture
    def evaluator(self):
        return get_evaluator(StageKind.OPEN_QUESTIONS)

    @pytest.fixture
    def items(self, payload):
        return payload.open_questions

    @pytest.fixture
    def state(self, evaluator, items):
        return evaluator.new_state(items)

    def test_review_refused_before_reveal(self, evaluator, state, items):
        assert evaluator.can_mark_reviewed(state, 0) is False
        assert evaluator.mark_reviewed(state, items, 0) is False
        assert state.reviewed == set()

    def test_reveal_then_review(self, evaluator, state, items):
        assert evaluator.reveal(state, items, 0) is True
        assert evaluator.can_mark_reviewed(state, 0) is True
        assert evaluator.mark_reviewed(state, items, 0) is True
        assert evaluator.can_mark_reviewed(state, 0) is False

    def test_reveal_twice_is_no_op(self, evaluator, state, items):
        evaluator.reveal(state, items, 1)

        assert evaluator.reveal(state, items, 1) is False

    def test_completion_needs_all_reviewed(self, evaluator, state, items):
        evaluator.reveal(state, items, 0)
        evaluator.mark_reviewed(state, items, 0)
        evaluator.reveal(state, items, 1)

        assert not evaluator.is_complete(state, items)

        evaluator.mark_reviewed(state, items, 1)

        assert evaluator.is_complete(state, items)
        assert evaluator.progress(state, items).complete

    def test_out_of_range_index_is_ignored(self, evaluator, state, items):
        assert evaluator.reveal(state, items, 5) is False
        assert evaluator.mark_reviewed(state, items, 5) is False
