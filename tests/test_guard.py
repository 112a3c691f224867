"""Tests for extract_studio.core.guard."""

from __future__ import annotations

import pytest

from extract_studio.core.change_tracker import ChangeTracker
from extract_studio.core.errors import PersistenceError
from extract_studio.core.guard import DecisionOutcome, DestructiveAction, DestructiveActionGuard, GuardState
from extract_studio.integration.backend_bridge import PersistenceResult


class Recorder:
    def __init__(self):
        self.calls = []

    def __call__(self):
        self.calls.append("ran")


@pytest.fixture()
def tracker() -> ChangeTracker:
    return ChangeTracker()


def make_guard(tracker, results=None):
    queued = list(results or [PersistenceResult.saved("/tmp/p.b4e")])
    saved = []

    def save(profile):
        saved.append(profile.snapshot())
        return queued.pop(0)

    return DestructiveActionGuard(tracker, save), saved


class TestCleanProfile:
    def test_runs_immediately(self, tracker):
        guard, saved = make_guard(tracker)
        continuation = Recorder()
        assert guard.request(DestructiveAction.RESET, continuation)
        assert continuation.calls == ["ran"]
        assert guard.state == GuardState.QUIESCENT
        assert saved == []


class TestDirtyProfile:
    def test_request_holds_and_asks(self, tracker):
        tracker.set_url("https://a.com")
        guard, _ = make_guard(tracker)
        asked = []
        guard.decision_required.connect(asked.append)
        continuation = Recorder()
        assert not guard.request(DestructiveAction.LOAD_PROFILE, continuation)
        assert continuation.calls == []
        assert guard.state == GuardState.AWAITING_DECISION
        assert asked == ["load_profile"]

    def test_save_success_cleans_then_continues(self, tracker):
        tracker.set_url("https://a.com")
        guard, saved = make_guard(tracker)
        order = []
        guard.request(DestructiveAction.RESET, lambda: order.append(tracker.is_dirty()))
        assert guard.save() == DecisionOutcome.PROCEEDED
        assert order == [False]
        assert saved[0].url == "https://a.com"
        assert guard.state == GuardState.QUIESCENT

    def test_save_cancelled_keeps_waiting(self, tracker):
        tracker.set_url("https://a.com")
        guard, _ = make_guard(tracker, [PersistenceResult.cancelled(), PersistenceResult.saved("/x.b4e")])
        continuation = Recorder()
        guard.request(DestructiveAction.RESET, continuation)
        assert guard.save() == DecisionOutcome.SAVE_CANCELLED
        assert guard.state == GuardState.AWAITING_DECISION
        assert tracker.is_dirty()
        assert guard.save() == DecisionOutcome.PROCEEDED
        assert continuation.calls == ["ran"]

    def test_save_failure_raises_and_keeps_waiting(self, tracker):
        tracker.set_url("https://a.com")
        guard, _ = make_guard(tracker, [PersistenceResult.failed("disk full")])
        reported = []
        guard.error_reported.connect(reported.append)
        continuation = Recorder()
        guard.request(DestructiveAction.CLOSE, continuation)
        with pytest.raises(PersistenceError, match="disk full"):
            guard.save()
        assert continuation.calls == []
        assert tracker.is_dirty()
        assert guard.state == GuardState.AWAITING_DECISION
        assert reported == ["disk full"]

    def test_discard_skips_persistence(self, tracker):
        tracker.set_url("https://a.com")
        guard, saved = make_guard(tracker)
        continuation = Recorder()
        guard.request(DestructiveAction.RESET, continuation)
        assert guard.discard() == DecisionOutcome.PROCEEDED
        assert saved == []
        assert not tracker.is_dirty()
        assert continuation.calls == ["ran"]

    def test_discard_uses_on_discard_when_given(self, tracker):
        tracker.set_url("https://a.com")
        guard, _ = make_guard(tracker)
        proceed, force = Recorder(), Recorder()
        guard.request(DestructiveAction.CLOSE, proceed, on_discard=force)
        guard.discard()
        assert proceed.calls == []
        assert force.calls == ["ran"]

    def test_cancel_changes_nothing(self, tracker):
        tracker.set_url("https://a.com")
        guard, saved = make_guard(tracker)
        continuation = Recorder()
        guard.request(DestructiveAction.RESET, continuation)
        assert guard.cancel() == DecisionOutcome.ABANDONED
        assert continuation.calls == []
        assert saved == []
        assert tracker.is_dirty()
        assert tracker.current().url == "https://a.com"
        assert guard.state == GuardState.QUIESCENT

    def test_second_request_while_waiting_is_refused(self, tracker):
        tracker.set_url("https://a.com")
        guard, _ = make_guard(tracker)
        first, second = Recorder(), Recorder()
        guard.request(DestructiveAction.RESET, first)
        assert not guard.request(DestructiveAction.CLOSE, second)
        assert guard.pending_action == DestructiveAction.RESET
        guard.discard()
        assert first.calls == ["ran"]
        assert second.calls == []


class TestDecisionsWithoutRequest:
    @pytest.mark.parametrize("decision", ["save", "discard", "cancel"])
    def test_raises(self, tracker, decision):
        guard, _ = make_guard(tracker)
        with pytest.raises(RuntimeError):
            getattr(guard, decision)()
