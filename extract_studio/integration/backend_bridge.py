# extract_studio/integration/backend_bridge.py
"""
Integration bridge between the Extract Studio controllers and their external
collaborators: the automation engine, profile persistence, the session store
and the host shell. Controllers only ever talk to these interfaces.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, List, Optional

from PySide6.QtCore import QObject, Signal

from ..core.models import LogMessage, Profile, ResultItem


class EngineEventHub(QObject):
    """Event surface for the most recently started run."""
    log = Signal(object)          # LogMessage
    data_item = Signal(object)    # ResultItem
    complete = Signal(int, str)   # item_count, file_name
    failure = Signal(str)         # reason


class Subscription:
    """Handle for a set of hub connections; close() detaches them all once."""

    def __init__(self, hub: EngineEventHub, connections: List[tuple]):
        self._hub = hub
        self._connections = connections
        self.closed = False

    def close(self):
        if self.closed:
            return
        self.closed = True
        for signal, slot in self._connections:
            try:
                signal.disconnect(slot)
            except (RuntimeError, TypeError):
                # Already disconnected (hub torn down with the engine)
                pass
        self._connections = []

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False


class AutomationEngine(ABC):
    """Runs extractions. start_run() dispatches and returns immediately."""

    def __init__(self):
        self.events = EngineEventHub()

    @abstractmethod
    def start_run(self, profile: Profile) -> None:
        ...

    def subscribe(self,
                  on_log: Callable[[LogMessage], None],
                  on_item: Callable[[ResultItem], None],
                  on_complete: Callable[[int, str], None],
                  on_failure: Callable[[str], None]) -> Subscription:
        connections = [
            (self.events.log, on_log),
            (self.events.data_item, on_item),
            (self.events.complete, on_complete),
            (self.events.failure, on_failure),
        ]
        for signal, slot in connections:
            signal.connect(slot)
        return Subscription(self.events, connections)

    def shutdown(self) -> None:
        """Release engine resources on application exit."""


@dataclass
class PersistenceResult:
    success: bool
    canceled: bool = False
    error: Optional[str] = None
    path: Optional[str] = None
    profile: Optional[Profile] = None

    @classmethod
    def saved(cls, path: str) -> "PersistenceResult":
        return cls(success=True, path=path)

    @classmethod
    def loaded(cls, profile: Profile, path: str) -> "PersistenceResult":
        return cls(success=True, profile=profile, path=path)

    @classmethod
    def cancelled(cls) -> "PersistenceResult":
        return cls(success=False, canceled=True)

    @classmethod
    def failed(cls, error: str, path: Optional[str] = None) -> "PersistenceResult":
        return cls(success=False, error=error, path=path)


class ProfilePersistence(ABC):
    @abstractmethod
    def save(self, profile: Profile) -> PersistenceResult:
        ...

    @abstractmethod
    def load(self) -> PersistenceResult:
        ...

    @abstractmethod
    def load_startup_profile(self) -> PersistenceResult:
        """Profile the process was opened with; canceled=True when there is none."""


@dataclass
class SessionProfile:
    id: str
    name: str
    domain: str = ""
    created_at: str = ""
    last_used: str = ""


class SessionStore(ABC):
    @abstractmethod
    def list(self) -> List[SessionProfile]:
        ...


class HostShell(ABC):
    """Window-level collaborator. Close requests enter through the guard."""

    @abstractmethod
    def set_unsaved_changes(self, unsaved: bool) -> None:
        ...

    @abstractmethod
    def proceed_with_close(self) -> None:
        ...

    @abstractmethod
    def force_close(self) -> None:
        ...


class NullHostShell(HostShell):
    """Shell used when no window is attached (headless runs, tests)."""

    def __init__(self):
        self.logger = logging.getLogger("NullHostShell")
        self.unsaved = False
        self.closed = False

    def set_unsaved_changes(self, unsaved: bool) -> None:
        self.unsaved = unsaved

    def proceed_with_close(self) -> None:
        self.logger.info("Close approved after save.")
        self.closed = True

    def force_close(self) -> None:
        self.logger.info("Close forced without saving.")
        self.closed = True
