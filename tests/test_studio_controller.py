"""Tests for extract_studio.core.studio_controller."""

from __future__ import annotations

import pytest
from conftest import FakeSessionStore, make_extractor, make_profile

from extract_studio.core.errors import ConfigError, PersistenceError, ValidationError
from extract_studio.core.guard import GuardState
from extract_studio.core.models import Profile, RunState
from extract_studio.core.studio_controller import StudioController
from extract_studio.integration.backend_bridge import PersistenceResult, SessionProfile


@pytest.fixture()
def controller(app_settings, engine, persistence, shell) -> StudioController:
    studio = StudioController(app_settings, engine, persistence, FakeSessionStore(), shell)
    studio.initialize()
    return studio


class TestInitialize:
    def test_startup_profile_applied_clean(self, app_settings, engine, persistence, shell):
        persistence.startup_result = PersistenceResult.loaded(make_profile(), "/p/start.b4e")
        studio = StudioController(app_settings, engine, persistence, FakeSessionStore(), shell)
        assert studio.initialize()
        assert studio.tracker.current() == make_profile()
        assert not studio.tracker.is_dirty()
        assert shell.unsaved is False

    def test_startup_failure_reported_not_raised(self, app_settings, engine, persistence, shell):
        persistence.startup_result = PersistenceResult.failed("corrupt", "/p/bad.b4e")
        studio = StudioController(app_settings, engine, persistence, FakeSessionStore(), shell)
        messages = []
        studio.status_message.connect(messages.append)
        assert not studio.initialize()
        assert studio.tracker.current() == Profile.empty()
        assert messages == ["Could not open profile: corrupt"]

    def test_no_startup_profile(self, controller):
        assert controller.tracker.current() == Profile.empty()
        assert not controller.tracker.is_dirty()


class TestDirtyForwarding:
    def test_shell_follows_dirty_state(self, controller, shell):
        controller.tracker.set_url("https://a.com")
        assert shell.unsaved is True
        controller.save_profile()
        assert shell.unsaved is False


class TestSaveProfile:
    def test_save_failure_raises_and_stays_dirty(self, controller, persistence):
        controller.tracker.set_url("https://a.com")
        persistence.save_results.append(PersistenceResult.failed("read-only"))
        with pytest.raises(PersistenceError):
            controller.save_profile()
        assert controller.tracker.is_dirty()

    def test_save_cancelled_stays_dirty(self, controller, persistence):
        controller.tracker.set_url("https://a.com")
        persistence.save_results.append(PersistenceResult.cancelled())
        assert controller.save_profile().canceled
        assert controller.tracker.is_dirty()


class TestLoadProfile:
    def test_clean_load_applies_immediately(self, controller, persistence):
        persistence.load_results.append(PersistenceResult.loaded(make_profile(file_name="f"), "/p/a.b4e"))
        assert controller.request_load_profile()
        assert controller.tracker.current().file_name == "f"
        assert not controller.tracker.is_dirty()

    def test_dirty_load_waits_for_decision(self, controller, persistence):
        controller.tracker.set_url("https://mine.com")
        persistence.load_results.append(PersistenceResult.loaded(make_profile(file_name="other"), "/p/o.b4e"))
        assert not controller.request_load_profile()
        assert controller.guard.state == GuardState.AWAITING_DECISION
        assert controller.tracker.current().url == "https://mine.com"
        controller.guard.discard()
        assert controller.tracker.current().file_name == "other"
        assert not controller.tracker.is_dirty()

    def test_save_then_load(self, controller, persistence):
        controller.tracker.set_url("https://mine.com")
        persistence.load_results.append(PersistenceResult.loaded(make_profile(), "/p/o.b4e"))
        controller.request_load_profile()
        controller.guard.save()
        assert persistence.saved[0].url == "https://mine.com"
        assert controller.tracker.current() == make_profile()

    def test_load_failure_raises(self, controller, persistence):
        persistence.load_results.append(PersistenceResult.failed("bad json", "/p/x.b4e"))
        with pytest.raises(PersistenceError, match="bad json"):
            controller.request_load_profile()
        assert controller.tracker.current() == Profile.empty()


class TestReset:
    def test_reset_clears_profile_and_run(self, controller, engine):
        controller.tracker.replace(make_profile())
        controller.tracker.mark_baseline()
        controller.start_run()
        engine.complete(1, "out.json")
        assert controller.request_reset()
        assert controller.tracker.current() == Profile.empty()
        assert controller.run_controller.state == RunState.IDLE

    def test_reset_keeps_running_run(self, controller, engine):
        controller.tracker.replace(make_profile())
        controller.tracker.mark_baseline()
        controller.start_run()
        controller.request_reset()
        assert controller.tracker.current() == Profile.empty()
        assert controller.run_controller.state == RunState.RUNNING

    def test_dirty_reset_discard_clears(self, controller):
        controller.tracker.set_url("https://a.com")
        assert not controller.request_reset()
        controller.guard.discard()
        assert controller.tracker.current() == Profile.empty()
        assert not controller.tracker.is_dirty()
        assert controller.guard.state == GuardState.QUIESCENT

    def test_dirty_reset_save_failure_keeps_edits(self, controller, persistence):
        controller.tracker.set_url("https://a.com")
        persistence.save_results.append(PersistenceResult.failed("disk full"))
        controller.request_reset()
        with pytest.raises(PersistenceError, match="disk full"):
            controller.guard.save()
        assert controller.tracker.current().url == "https://a.com"
        assert controller.tracker.is_dirty()
        assert controller.guard.state == GuardState.AWAITING_DECISION

    def test_dirty_reset_cancel_keeps_edits(self, controller):
        controller.tracker.set_url("https://a.com")
        assert not controller.request_reset()
        controller.guard.cancel()
        assert controller.tracker.current().url == "https://a.com"
        assert controller.tracker.is_dirty()


class TestClose:
    def test_clean_close_proceeds(self, controller, shell, engine):
        assert controller.request_close()
        assert engine.shutdown_calls == 1
        assert not shell.closed

    def test_dirty_close_save_proceeds(self, controller, shell):
        controller.tracker.set_url("https://a.com")
        assert not controller.request_close()
        controller.guard.save()
        assert shell.closed

    def test_dirty_close_discard_forces(self, controller, shell):
        controller.tracker.set_url("https://a.com")
        controller.request_close()
        controller.guard.discard()
        assert shell.closed

    def test_dirty_close_cancel_stays_open(self, controller, shell):
        controller.tracker.set_url("https://a.com")
        controller.request_close()
        controller.guard.cancel()
        assert not shell.closed


class TestRuns:
    def test_validation_errors_exposed_and_cleared_on_edit(self, controller, engine):
        controller.tracker.replace(make_profile(extractors=[make_extractor("a", field_name="", selector="")]))
        with pytest.raises(ValidationError):
            controller.start_run()
        assert controller.validation_errors()["a"].missing_fields() == ["field_name", "selector"]
        controller.edit_extractor("a", field_name="title")
        assert controller.validation_errors()["a"].missing_fields() == ["selector"]
        controller.edit_extractor("a", selector="h1")
        assert controller.validation_errors() == {}
        assert engine.started == []

    def test_missing_url(self, controller):
        controller.tracker.replace(make_profile(url=""))
        with pytest.raises(ConfigError):
            controller.start_run()

    def test_run_does_not_touch_dirty_state(self, controller, engine):
        controller.tracker.replace(make_profile())
        controller.tracker.mark_baseline()
        controller.start_run()
        engine.item({"title": "x"})
        engine.complete(1, "out.json")
        assert not controller.tracker.is_dirty()
        assert controller.tracker.current().file_name == ""

    def test_status_after_completion(self, controller, engine):
        messages = []
        controller.status_message.connect(messages.append)
        controller.tracker.replace(make_profile())
        controller.start_run()
        engine.complete(2, "out.json")
        assert messages[-1] == "Extraction completed: 2 items saved to out.json"

    def test_removing_extractor_drops_its_errors(self, controller):
        controller.tracker.replace(make_profile(extractors=[make_extractor("a", field_name="")]))
        with pytest.raises(ValidationError):
            controller.start_run()
        controller.remove_extractor("a")
        assert controller.validation_errors() == {}


class TestSessions:
    def test_lists_sessions(self, app_settings, engine, persistence, shell):
        store = FakeSessionStore([SessionProfile(id="s1", name="Shop login")])
        studio = StudioController(app_settings, engine, persistence, store, shell)
        assert [s.id for s in studio.sessions()] == ["s1"]
