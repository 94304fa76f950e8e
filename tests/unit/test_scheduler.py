"""
Unit tests for the cooperative deferred scheduler.
"""

from escape_room.scheduler import DeferredScheduler, ManualClock, ManualScheduler


class TestDeferredScheduler:
    """Tasks fire once their deadline passes, and only when drained."""

    def test_task_fires_only_when_due(self):
        clock = ManualClock()
        scheduler = DeferredScheduler(clock=clock)
        fired = []
        scheduler.call_later(0.5, lambda: fired.append("a"))

        assert scheduler.run_due() == 0
        clock.advance(0.6)
        assert scheduler.run_due() == 1
        assert fired == ["a"]

    def test_task_fires_once(self):
        scheduler = ManualScheduler()
        fired = []
        task = scheduler.call_later(0.1, lambda: fired.append(1))

        scheduler.advance(1.0)
        scheduler.advance(1.0)

        assert fired == [1]
        assert task.fired and not task.active

    def test_cancelled_task_never_fires(self):
        scheduler = ManualScheduler()
        fired = []
        task = scheduler.call_later(0.1, lambda: fired.append(1))

        task.cancel()

        assert scheduler.advance(1.0) == 0
        assert fired == []
        assert scheduler.next_deadline() is None

    def test_tasks_fire_in_deadline_order(self):
        scheduler = ManualScheduler()
        fired = []
        scheduler.call_later(0.3, lambda: fired.append("late"))
        scheduler.call_later(0.1, lambda: fired.append("early"))

        scheduler.advance(1.0)

        assert fired == ["early", "late"]

    def test_next_deadline_and_pending(self):
        scheduler = ManualScheduler(start=10.0)
        scheduler.call_later(0.5, lambda: None)

        assert scheduler.next_deadline() == 10.5
        assert scheduler.pending == 1

    def test_cancel_all(self):
        scheduler = ManualScheduler()
        first = scheduler.call_later(0.1, lambda: None)
        scheduler.call_later(0.2, lambda: None)

        scheduler.cancel_all()

        assert first.cancelled
        assert scheduler.pending == 0
        assert scheduler.advance(1.0) == 0

    def test_negative_delay_is_due_immediately(self):
        scheduler = ManualScheduler()
        fired = []
        scheduler.call_later(-1, lambda: fired.append(1))

        assert scheduler.run_due() == 1
