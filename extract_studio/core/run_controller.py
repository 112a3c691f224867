# extract_studio/core/run_controller.py
"""
Run lifecycle for a single extraction: validate, dispatch to the automation
engine, then follow its log / data / terminal events until the run ends.

    idle --start--> running --complete--> completed
                           --failure---> error
    completed|error --start--> running
"""
import logging
from typing import List, Optional

from PySide6.QtCore import QObject, Signal

from utils.log_sanitizer import sanitize_url

from ..integration.backend_bridge import AutomationEngine, Subscription
from .errors import ConfigError, RunInProgressError, ValidationError
from .filenames import derive_output_file_name
from .models import LogLevel, LogMessage, Profile, ResultItem, RunResult, RunState
from .validation import validate

_PY_LOG_LEVELS = {
    LogLevel.INFO: logging.INFO,
    LogLevel.SUCCESS: logging.INFO,
    LogLevel.WARNING: logging.WARNING,
    LogLevel.ERROR: logging.ERROR,
}


class RunController(QObject):
    state_changed = Signal(str)
    log_appended = Signal(object)
    item_appended = Signal(object)
    run_finished = Signal(object)   # RunResult
    run_failed = Signal(str)

    def __init__(self, engine: AutomationEngine, parent=None):
        super().__init__(parent)
        self.logger = logging.getLogger("RunController")
        self.engine = engine
        self.state = RunState.IDLE
        self.logs: List[LogMessage] = []
        self.results: List[ResultItem] = []
        self.last_result: Optional[RunResult] = None
        self.last_error: Optional[str] = None
        self.dispatched_profile: Optional[Profile] = None
        self._subscription: Optional[Subscription] = None

    @property
    def is_running(self) -> bool:
        return self.state == RunState.RUNNING

    def check_startable(self, profile: Profile):
        """Raise the error that would stop `profile` from running, if any."""
        if self.is_running:
            raise RunInProgressError("An extraction is already running")
        if not profile.url.strip():
            raise ConfigError("Please enter a URL")
        if not profile.extractors:
            raise ConfigError("Please add at least one extractor")
        errors = validate(profile.extractors)
        if errors:
            raise ValidationError(errors)

    def start(self, profile: Profile) -> Profile:
        """
        Dispatch `profile` to the engine and return the snapshot that was sent.

        Raises RunInProgressError, ConfigError or ValidationError before any
        engine interaction; the run state is untouched in that case.
        """
        self.check_startable(profile)

        snapshot = profile.snapshot()
        snapshot.file_name = derive_output_file_name(snapshot.url, snapshot.file_name, snapshot.export_format)

        self.logs = []
        self.results = []
        self.last_result = None
        self.last_error = None
        self.dispatched_profile = snapshot
        self._set_state(RunState.RUNNING)

        self._subscription = self.engine.subscribe(
            self._on_log, self._on_data_item, self._on_complete, self._on_failure)

        self.logger.info(f"Starting extraction of {sanitize_url(snapshot.url)} with "
                         f"{len(snapshot.extractors)} extractors -> {snapshot.file_name}")
        try:
            self.engine.start_run(snapshot)
        except Exception as e:
            self.logger.error(f"Engine refused to start the run: {e}", exc_info=True)
            if self.is_running:
                self._on_failure(str(e))
        return snapshot

    def reset(self):
        """Clear run output and return to idle. Not allowed while running."""
        if self.is_running:
            raise RunInProgressError("Cannot reset while an extraction is running")
        self.logs = []
        self.results = []
        self.last_result = None
        self.last_error = None
        self._set_state(RunState.IDLE)

    def shutdown(self):
        self._close_subscription()

    # --- engine events -------------------------------------------------------

    def _accepting_events(self) -> bool:
        return self._subscription is not None and not self._subscription.closed

    def _on_log(self, message: LogMessage):
        if not self._accepting_events():
            return
        self.logs.append(message)
        self.logger.log(_PY_LOG_LEVELS.get(message.level, logging.INFO), f"[engine] {message.text}")
        self.log_appended.emit(message)

    def _on_data_item(self, item: ResultItem):
        if not self._accepting_events():
            return
        self.results.append(item)
        self.item_appended.emit(item)

    def _on_complete(self, item_count: int, file_name: str):
        if not self._accepting_events():
            return
        self._close_subscription()
        self.last_result = RunResult(item_count=item_count, file_name=file_name)
        self.logger.info(f"Extraction completed: {item_count} items saved to {file_name}")
        self._set_state(RunState.COMPLETED)
        self.run_finished.emit(self.last_result)

    def _on_failure(self, reason: str):
        if not self._accepting_events():
            return
        self._close_subscription()
        self.last_error = reason
        self.logger.error(f"Extraction failed: {reason}")
        self._set_state(RunState.ERROR)
        self.run_failed.emit(reason)

    def _close_subscription(self):
        if self._subscription is not None:
            self._subscription.close()
            self._subscription = None

    def _set_state(self, state: RunState):
        if state != self.state:
            self.state = state
            self.state_changed.emit(state.value)
