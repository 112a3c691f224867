# extract_studio/core/guard.py
"""
Destructive-action guard: reset, loading another profile and closing the
application all discard the live profile, so while it is dirty they are held
back until the user picks Save, Discard or Cancel.
"""
import logging
from enum import Enum
from typing import Callable, Optional

from PySide6.QtCore import QObject, Signal

from .change_tracker import ChangeTracker
from .errors import PersistenceError


class GuardState(str, Enum):
    QUIESCENT = "quiescent"
    AWAITING_DECISION = "awaiting-decision"


class DestructiveAction(str, Enum):
    RESET = "reset"
    LOAD_PROFILE = "load_profile"
    CLOSE = "close"


class DecisionOutcome(str, Enum):
    PROCEEDED = "proceeded"
    SAVE_CANCELLED = "save_cancelled"   # user closed the save dialog; still awaiting
    ABANDONED = "abandoned"


class DestructiveActionGuard(QObject):
    decision_required = Signal(str)   # DestructiveAction value
    state_changed = Signal(str)       # GuardState value
    error_reported = Signal(str)

    def __init__(self, tracker: ChangeTracker, save: Callable, parent=None):
        """
        Args:
            tracker: store whose dirty flag decides whether to negotiate.
            save: callable persisting the current profile, returning a
                PersistenceResult. Used by the Save decision.
        """
        super().__init__(parent)
        self.logger = logging.getLogger("DestructiveActionGuard")
        self.tracker = tracker
        self._save = save
        self.state = GuardState.QUIESCENT
        self.pending_action: Optional[DestructiveAction] = None
        self._continuation: Optional[Callable[[], None]] = None
        self._discard_continuation: Optional[Callable[[], None]] = None

    def request(self, action: DestructiveAction, continuation: Callable[[], None],
                on_discard: Optional[Callable[[], None]] = None) -> bool:
        """
        Run `continuation` now if the profile is clean; otherwise hold it and
        ask for a decision. `on_discard` replaces the continuation for the
        Discard path when the two differ (closing: proceed vs force close).

        Returns True when the action ran immediately.
        """
        action = DestructiveAction(action)
        if self.state == GuardState.AWAITING_DECISION:
            self.logger.warning(
                f"Ignoring '{action.value}' request: still awaiting a decision on '{self.pending_action.value}'.")
            return False

        if not self.tracker.is_dirty():
            self.logger.debug(f"Profile clean, running '{action.value}' immediately.")
            continuation()
            return True

        self.logger.info(f"Unsaved changes: holding '{action.value}' until the user decides.")
        self.pending_action = action
        self._continuation = continuation
        self._discard_continuation = on_discard
        self._set_state(GuardState.AWAITING_DECISION)
        self.decision_required.emit(action.value)
        return False

    def save(self) -> DecisionOutcome:
        self._require_pending("save")
        try:
            result = self._save(self.tracker.current())
        except PersistenceError as e:
            self.logger.error(f"Save before '{self.pending_action.value}' failed: {e}")
            self.error_reported.emit(str(e))
            raise

        if result.success:
            self.logger.info(f"Profile saved to {result.path}; continuing with '{self.pending_action.value}'.")
            self.tracker.mark_baseline()
            return self._resolve(self._continuation)

        if result.canceled:
            self.logger.info("Save dialog cancelled; destructive action stays pending.")
            return DecisionOutcome.SAVE_CANCELLED

        message = result.error or "Unknown error"
        self.logger.error(f"Save before '{self.pending_action.value}' failed: {message}")
        self.error_reported.emit(message)
        raise PersistenceError(message, path=result.path)

    def discard(self) -> DecisionOutcome:
        self._require_pending("discard")
        self.tracker.accept_loss()
        return self._resolve(self._discard_continuation or self._continuation)

    def cancel(self) -> DecisionOutcome:
        self._require_pending("cancel")
        self.logger.info(f"'{self.pending_action.value}' cancelled by user.")
        self._clear()
        return DecisionOutcome.ABANDONED

    # --- internals -----------------------------------------------------------

    def _resolve(self, continuation: Callable[[], None]) -> DecisionOutcome:
        self._clear()
        continuation()
        return DecisionOutcome.PROCEEDED

    def _clear(self):
        self.pending_action = None
        self._continuation = None
        self._discard_continuation = None
        self._set_state(GuardState.QUIESCENT)

    def _require_pending(self, decision: str):
        if self.state != GuardState.AWAITING_DECISION:
            raise RuntimeError(f"Cannot {decision}: no destructive action is pending")

    def _set_state(self, state: GuardState):
        if state != self.state:
            self.state = state
            self.state_changed.emit(state.value)
