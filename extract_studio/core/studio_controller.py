# extract_studio/core/studio_controller.py
"""
Top-level controller: owns the change tracker, the destructive-action guard
and the run controller, and wires them to the engine, persistence, session
store and host shell handed in at construction.
"""
import logging
from typing import Dict, List, Optional

from PySide6.QtCore import QObject, Signal

from ..integration.backend_bridge import (AutomationEngine, HostShell, PersistenceResult, ProfilePersistence,
                                          SessionProfile, SessionStore)
from .change_tracker import ChangeTracker
from .errors import PersistenceError, ValidationError
from .guard import DestructiveAction, DestructiveActionGuard, GuardState
from .models import Extractor, ExtractorErrors, Profile, RunResult
from .run_controller import RunController
from .settings import AppSettings
from .validation import ValidationErrorSet, clear_field_error, validate


class StudioController(QObject):
    status_message = Signal(str)
    validation_changed = Signal()

    def __init__(self, settings: AppSettings, engine: AutomationEngine, persistence: ProfilePersistence,
                 session_store: SessionStore, shell: HostShell, parent=None):
        super().__init__(parent)
        self.logger = logging.getLogger("StudioController")
        self.settings = settings
        self.engine = engine
        self.persistence = persistence
        self.session_store = session_store
        self.shell = shell

        self.tracker = ChangeTracker(parent=self)
        self.guard = DestructiveActionGuard(self.tracker, self.persistence.save, parent=self)
        self.run_controller = RunController(engine, parent=self)
        self._validation_errors: ValidationErrorSet = {}

        self.tracker.dirty_changed.connect(self.shell.set_unsaved_changes)
        self.guard.error_reported.connect(lambda message: self.status_message.emit(f"Save failed: {message}"))
        self.run_controller.run_finished.connect(self._on_run_finished)
        self.run_controller.run_failed.connect(self._on_run_failed)

    # --- lifecycle -----------------------------------------------------------

    def initialize(self) -> bool:
        """Apply the profile the app was opened with, if any. Returns True when one was loaded."""
        try:
            result = self.persistence.load_startup_profile()
        except PersistenceError as e:
            result = PersistenceResult.failed(str(e), e.path)

        if result.success and result.profile is not None:
            self._apply_loaded_profile(result.profile, result.path)
            return True

        self.tracker.mark_baseline()
        if not result.canceled:
            self.logger.error(f"Could not open startup profile {result.path}: {result.error}")
            self.status_message.emit(f"Could not open profile: {result.error}")
        else:
            self.status_message.emit("Ready")
        return False

    def shutdown(self):
        self.run_controller.shutdown()
        self.engine.shutdown()

    # --- profile persistence -------------------------------------------------

    def save_profile(self) -> PersistenceResult:
        result = self.persistence.save(self.tracker.current())
        if result.success:
            self.tracker.mark_baseline()
            self.logger.info(f"Profile saved to {result.path}")
            self.status_message.emit(f"Profile saved: {result.path}")
        elif result.canceled:
            self.status_message.emit("Save cancelled")
        else:
            self.status_message.emit(f"Save failed: {result.error}")
            raise PersistenceError(result.error or "Unknown error", path=result.path)
        return result

    def request_load_profile(self) -> bool:
        return self.guard.request(DestructiveAction.LOAD_PROFILE, self._load_profile)

    def request_reset(self) -> bool:
        return self.guard.request(DestructiveAction.RESET, self._reset)

    def request_close(self) -> bool:
        """
        True when the window may close right away. Otherwise the guard holds
        the close and the shell is told to proceed or force close later.
        """
        if self.guard.state == GuardState.QUIESCENT and not self.tracker.is_dirty():
            self.shutdown()
            return True
        self.guard.request(DestructiveAction.CLOSE, self._proceed_with_close, on_discard=self._force_close)
        return False

    # --- editing ---------------------------------------------------------------

    def edit_extractor(self, extractor_id: str, **changes) -> Extractor:
        """Apply edits and clear the validation flags of the edited fields."""
        extractor = self.tracker.update_extractor(extractor_id, **changes)
        if extractor_id in self._validation_errors:
            for name in changes:
                clear_field_error(self._validation_errors, extractor_id, name)
            self.validation_changed.emit()
        return extractor

    def remove_extractor(self, extractor_id: str) -> bool:
        removed = self.tracker.remove_extractor(extractor_id)
        if self._validation_errors.pop(extractor_id, None) is not None:
            self.validation_changed.emit()
        return removed

    def validation_errors(self) -> Dict[str, ExtractorErrors]:
        return dict(self._validation_errors)

    def sessions(self) -> List[SessionProfile]:
        try:
            return self.session_store.list()
        except OSError as e:
            self.logger.error(f"Could not list sessions: {e}")
            return []

    # --- runs ------------------------------------------------------------------

    def start_run(self) -> Profile:
        """Validate and dispatch the current profile. Raises the errors module's taxonomy."""
        self._set_validation_errors(validate(self.tracker.current().extractors))
        try:
            snapshot = self.run_controller.start(self.tracker.current())
        except ValidationError as e:
            self.status_message.emit(f"Please fix the highlighted fields: {e}")
            raise
        self.status_message.emit("Extraction running...")
        return snapshot

    def _on_run_finished(self, result: RunResult):
        self.status_message.emit(f"Extraction completed: {result.item_count} items saved to {result.file_name}")

    def _on_run_failed(self, reason: str):
        self.status_message.emit(f"Extraction failed: {reason}")

    # --- continuations ---------------------------------------------------------

    def _load_profile(self):
        result = self.persistence.load()
        if result.success and result.profile is not None:
            self._apply_loaded_profile(result.profile, result.path)
        elif result.canceled:
            self.status_message.emit("Load cancelled")
        else:
            self.status_message.emit(f"Load failed: {result.error}")
            raise PersistenceError(result.error or "Unknown error", path=result.path)

    def _apply_loaded_profile(self, profile: Profile, path: Optional[str]):
        self.tracker.replace(profile)
        self.tracker.mark_baseline()
        self._set_validation_errors({})
        self.logger.info(f"Profile loaded from {path} ({len(profile.extractors)} extractors)")
        self.status_message.emit(f"Profile loaded: {path}")

    def _reset(self):
        self.tracker.clear()
        self.tracker.mark_baseline()
        self._set_validation_errors({})
        if not self.run_controller.is_running:
            self.run_controller.reset()
        self.status_message.emit("Profile reset")

    def _proceed_with_close(self):
        self.shutdown()
        self.shell.proceed_with_close()

    def _force_close(self):
        self.shutdown()
        self.shell.force_close()

    def _set_validation_errors(self, errors: ValidationErrorSet):
        self._validation_errors = errors
        self.validation_changed.emit()
