"""Shared fixtures and fakes for Extract Studio tests."""

from __future__ import annotations

from typing import List, Optional

import pytest
from PySide6.QtCore import QCoreApplication

from extract_studio.core.models import Extractor, ExtractorMode, LogLevel, LogMessage, Profile
from extract_studio.core.settings import AppSettings
from extract_studio.integration.backend_bridge import (AutomationEngine, NullHostShell, PersistenceResult,
                                                       ProfilePersistence, SessionProfile, SessionStore)


@pytest.fixture(scope="session", autouse=True)
def qt_app():
    """Signals and QObjects need a core application; no display required."""
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app


@pytest.fixture(autouse=True)
def isolated_user_dirs(tmp_path, monkeypatch):
    """Keep default settings folders out of the real home directory."""
    import config

    monkeypatch.setattr(config, "DEFAULT_OUTPUTS_DIR", tmp_path / "default-outputs")
    monkeypatch.setattr(config, "DEFAULT_SAVES_DIR", tmp_path / "default-saves")


class FakeEngine(AutomationEngine):
    """Engine that records dispatches; tests drive its events by hand."""

    def __init__(self, start_error: Optional[Exception] = None):
        super().__init__()
        self.started: List[Profile] = []
        self.start_error = start_error
        self.shutdown_calls = 0

    def start_run(self, profile: Profile) -> None:
        if self.start_error is not None:
            raise self.start_error
        self.started.append(profile)

    def shutdown(self) -> None:
        self.shutdown_calls += 1

    def log(self, text: str, level: LogLevel = LogLevel.INFO):
        self.events.log.emit(LogMessage(level=level, text=text))

    def item(self, record: dict):
        self.events.data_item.emit(record)

    def complete(self, item_count: int, file_name: str):
        self.events.complete.emit(item_count, file_name)

    def fail(self, reason: str):
        self.events.failure.emit(reason)


class FakePersistence(ProfilePersistence):
    """Returns queued results; records every profile it was asked to save."""

    def __init__(self):
        self.saved: List[Profile] = []
        self.save_results: List[PersistenceResult] = []
        self.load_results: List[PersistenceResult] = []
        self.startup_result = PersistenceResult.cancelled()

    def save(self, profile: Profile) -> PersistenceResult:
        self.saved.append(profile.snapshot())
        if self.save_results:
            return self.save_results.pop(0)
        return PersistenceResult.saved("/tmp/profile.b4e")

    def load(self) -> PersistenceResult:
        if self.load_results:
            return self.load_results.pop(0)
        return PersistenceResult.cancelled()

    def load_startup_profile(self) -> PersistenceResult:
        return self.startup_result


class FakeSessionStore(SessionStore):
    def __init__(self, sessions: Optional[List[SessionProfile]] = None):
        self.sessions = sessions or []

    def list(self) -> List[SessionProfile]:
        return list(self.sessions)


@pytest.fixture()
def engine() -> FakeEngine:
    return FakeEngine()


@pytest.fixture()
def persistence() -> FakePersistence:
    return FakePersistence()


@pytest.fixture()
def shell() -> NullHostShell:
    return NullHostShell()


@pytest.fixture()
def app_settings(tmp_path) -> AppSettings:
    return AppSettings(outputs_path=str(tmp_path / "outputs"), saves_path=str(tmp_path / "saves"))


def make_extractor(extractor_id: str = "e1", field_name: str = "title", selector: str = "h2",
                   mode: ExtractorMode = ExtractorMode.TEXT, attribute_name: str = "") -> Extractor:
    return Extractor(id=extractor_id, field_name=field_name, selector=selector, mode=mode,
                     attribute_name=attribute_name)


def make_profile(**overrides) -> Profile:
    profile = Profile(url="https://www.example.com/list", extractors=[make_extractor()])
    for name, value in overrides.items():
        setattr(profile, name, value)
    return profile


SAMPLE_HTML = """\
<!DOCTYPE html>
<html>
<body>
    <div class="product">
        <h2> Widget </h2>
        <span class="price">$10</span>
        <img src="/img/widget.png" class="thumb large">
        <div class="links"><a href="/p/widget">Widget details</a></div>
    </div>
    <div class="product">
        <h2>Gadget</h2>
        <span class="price">$20</span>
        <img class="thumb">
        <div class="links"></div>
    </div>
    <div class="product">
        <h2>Gizmo</h2>
        <div class="links"><a href="https://other.example.org/gizmo">Gizmo</a></div>
    </div>
</body>
</html>
"""
