"""Tests for derived task state."""

from datetime import datetime, timedelta

from app.models.task import Task, apply_completion_state, derive_completed_at

NOW = datetime(2026, 1, 1, 12, 0, 0)


class TestDeriveCompletedAt:
    def test_pending_has_no_timestamp(self):
        assert derive_completed_at(False, None, NOW) is None
        assert derive_completed_at(False, NOW - timedelta(days=1), NOW) is None

    def test_completing_stamps_now(self):
        assert derive_completed_at(True, None, NOW) == NOW

    def test_staying_completed_keeps_original_timestamp(self):
        earlier = NOW - timedelta(hours=3)
        assert derive_completed_at(True, earlier, NOW) == earlier


class TestApplyCompletionState:
    def test_toggle_cycle(self):
        task = Task(text="t", completed=False, completed_at=None)

        task.completed = True
        apply_completion_state(task, NOW)
        assert task.completed_at == NOW

        task.completed = False
        apply_completion_state(task, NOW + timedelta(minutes=1))
        assert task.completed_at is None

        later = NOW + timedelta(minutes=2)
        task.completed = True
        apply_completion_state(task, later)
        assert task.completed_at == later


class TestIsOverdue:
    def test_past_due_pending_task(self):
        task = Task(text="t", completed=False, due_date=datetime.utcnow() - timedelta(days=1))
        assert task.is_overdue

    def test_completed_task_is_never_overdue(self):
        task = Task(text="t", completed=True, due_date=datetime.utcnow() - timedelta(days=1))
        assert not task.is_overdue

    def test_no_due_date(self):
        assert not Task(text="t", completed=False, due_date=None).is_overdue

    def test_future_due_date(self):
        assert not Task(text="t", completed=False, due_date=datetime.utcnow() + timedelta(days=1)).is_overdue
