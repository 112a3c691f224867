# extract_studio/core/settings.py
"""
User-level application settings (folders, debug switches), persisted as JSON
in the user data directory and handed to the controllers at construction.
"""
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

import config

_FORBIDDEN_KEYS = {"__proto__", "constructor", "prototype"}


class DebugSettings(BaseModel):
    model_config = ConfigDict(extra="ignore")

    enabled: bool = False
    advanced_logs: bool = False
    show_browser: bool = False


class AppSettings(BaseModel):
    model_config = ConfigDict(extra="ignore")

    outputs_path: str = Field(default_factory=lambda: str(config.DEFAULT_OUTPUTS_DIR))
    saves_path: str = Field(default_factory=lambda: str(config.DEFAULT_SAVES_DIR))
    debug: DebugSettings = Field(default_factory=DebugSettings)
    request_timeout: float = Field(default=config.DEFAULT_REQUEST_TIMEOUT, gt=0)


def sanitize_settings(raw: Any) -> Dict[str, Any]:
    """Drop non-dict input and prototype-style keys before merging."""
    if not isinstance(raw, dict):
        return {}
    return {key: value for key, value in raw.items() if key not in _FORBIDDEN_KEYS}


class SettingsManager:
    def __init__(self, settings_dir: Optional[Path] = None, logger_instance=None):
        self.logger = logger_instance if logger_instance else logging.getLogger("SettingsManager")
        self.settings_dir = Path(settings_dir) if settings_dir else config.USER_DATA_DIR
        self.settings_path = self.settings_dir / config.SETTINGS_FILE_NAME
        self.settings = AppSettings()
        self.load()
        self.ensure_directories()

    def load(self) -> AppSettings:
        if not self.settings_path.exists():
            self.logger.info(f"No settings at {self.settings_path}, writing defaults.")
            self.save()
            return self.settings
        try:
            with open(self.settings_path, "r", encoding="utf-8") as f:
                raw = json.load(f)
            merged = {**self.settings.model_dump(), **sanitize_settings(raw)}
            self.settings = AppSettings.model_validate(merged)
            self.logger.info(f"Settings loaded from {self.settings_path}")
        except (OSError, json.JSONDecodeError, ValidationError) as e:
            self.logger.error(f"Error loading settings from {self.settings_path}, using defaults: {e}")
            self.settings = AppSettings()
        return self.settings

    def save(self):
        try:
            self.settings_dir.mkdir(parents=True, exist_ok=True)
            with open(self.settings_path, "w", encoding="utf-8") as f:
                json.dump(self.settings.model_dump(), f, indent=2)
        except OSError as e:
            self.logger.error(f"Error saving settings to {self.settings_path}: {e}")

    def update(self, changes: Dict[str, Any]) -> AppSettings:
        """
        Merge `changes` into the current settings, persist, and create folders.
        The settings object is updated in place; engine and controllers hold it.
        """
        merged = {**self.settings.model_dump(), **sanitize_settings(changes)}
        updated = AppSettings.model_validate(merged)
        for name in AppSettings.model_fields:
            setattr(self.settings, name, getattr(updated, name))
        self.save()
        self.ensure_directories()
        return self.settings

    def ensure_directories(self):
        for folder in (self.settings.outputs_path, self.settings.saves_path):
            try:
                Path(folder).mkdir(parents=True, exist_ok=True)
            except OSError as e:
                self.logger.error(f"Error creating directory {folder}: {e}")
