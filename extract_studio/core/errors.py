# extract_studio/core/errors.py
"""
Error taxonomy for the profile and run controllers. None of these is fatal:
each leaves the raising component in a state where the user can try again.
"""
from typing import Dict, Optional

from .models import ExtractorErrors


class StudioError(Exception):
    """Base class for recoverable Extract Studio errors."""


class ValidationError(StudioError):
    """One or more extractors are missing required fields."""

    def __init__(self, errors: Dict[str, ExtractorErrors]):
        self.errors = errors
        count = len(errors)
        super().__init__(f"{count} extractor{'s' if count != 1 else ''} "
                         f"{'have' if count != 1 else 'has'} missing fields")


class ConfigError(StudioError):
    """The profile as a whole cannot run (no URL, no extractors)."""


class PersistenceError(StudioError):
    """Saving or loading a profile failed."""

    def __init__(self, message: str, path: Optional[str] = None):
        self.path = path
        super().__init__(message)


class EngineFailure(StudioError):
    """The automation engine ended a run with a failure."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason)


class RunInProgressError(StudioError):
    """A run was started while another is still in flight."""
