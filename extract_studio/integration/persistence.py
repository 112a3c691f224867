# extract_studio/integration/persistence.py
"""
File-backed profile persistence. Path selection is delegated to injected
pickers so the GUI can use Qt file dialogs and tests plain callables.
"""
import logging
import time
from pathlib import Path
from typing import Callable, Optional

import config

from ..core.errors import PersistenceError
from ..core.models import Profile
from ..core.profile_io import read_profile_file, write_profile_file
from ..core.settings import AppSettings
from .backend_bridge import PersistenceResult, ProfilePersistence

# picker(suggested_path) -> chosen path, or None when the user cancelled
PathPicker = Callable[[str], Optional[str]]


class FileProfilePersistence(ProfilePersistence):
    def __init__(self, settings: AppSettings, choose_save_path: PathPicker, choose_open_path: PathPicker,
                 startup_path: Optional[str] = None, logger_instance=None):
        self.settings = settings
        self.choose_save_path = choose_save_path
        self.choose_open_path = choose_open_path
        self.startup_path = startup_path
        self.logger = logger_instance if logger_instance else logging.getLogger("FileProfilePersistence")

    def suggested_save_path(self) -> str:
        stamp = int(time.time() * 1000)
        return str(Path(self.settings.saves_path) / f"profile_{stamp}{config.PROFILE_EXTENSION}")

    def save(self, profile: Profile) -> PersistenceResult:
        path = self.choose_save_path(self.suggested_save_path())
        if not path:
            return PersistenceResult.cancelled()
        try:
            target = write_profile_file(profile, path)
        except PersistenceError as e:
            self.logger.error(f"Error saving profile to {path}: {e}")
            return PersistenceResult.failed(str(e), e.path or path)
        return PersistenceResult.saved(str(target))

    def load(self) -> PersistenceResult:
        path = self.choose_open_path(self.settings.saves_path)
        if not path:
            return PersistenceResult.cancelled()
        return self._read(path)

    def load_startup_profile(self) -> PersistenceResult:
        """Consumes the startup path: a second call reports no file."""
        path, self.startup_path = self.startup_path, None
        if not path:
            return PersistenceResult.cancelled()
        if Path(path).suffix.lower() != config.PROFILE_EXTENSION:
            return PersistenceResult.failed(f"Not a {config.PROFILE_EXTENSION} profile file", path)
        return self._read(path)

    def _read(self, path: str) -> PersistenceResult:
        try:
            profile = read_profile_file(path)
        except PersistenceError as e:
            self.logger.error(f"Error loading profile from {path}: {e}")
            return PersistenceResult.failed(str(e), path)
        return PersistenceResult.loaded(profile, str(path))
