# extract_studio/core/change_tracker.py
"""
Holds the live profile and a snapshot of what was last known to be on disk.
Dirtiness is always derived by value comparison against that snapshot,
recomputed after every mutation.
"""
import logging
from typing import Optional

from PySide6.QtCore import QObject, Signal

from .models import ExportFormat, Extractor, ExtractorMode, Profile, new_extractor

_EDITABLE_EXTRACTOR_FIELDS = ("field_name", "selector", "mode", "attribute_name")


class ChangeTracker(QObject):
    profile_changed = Signal()
    dirty_changed = Signal(bool)

    def __init__(self, profile: Optional[Profile] = None, parent=None):
        super().__init__(parent)
        self.logger = logging.getLogger("ChangeTracker")
        self._profile = profile if profile is not None else Profile.empty()
        self._baseline = self._profile.snapshot()
        self._dirty = False

    # --- queries -----------------------------------------------------------

    def current(self) -> Profile:
        return self._profile

    def baseline(self) -> Profile:
        return self._baseline.snapshot()

    def is_dirty(self) -> bool:
        return self._dirty

    # --- baseline ----------------------------------------------------------

    def mark_baseline(self):
        """Record the current profile as matching durable storage."""
        self._baseline = self._profile.snapshot()
        self._set_dirty(False)

    def accept_loss(self):
        """Discard: treat unsaved edits as accepted without persisting them."""
        self.logger.info("Unsaved changes discarded by user.")
        self.mark_baseline()

    # --- profile-level mutations --------------------------------------------

    def set_url(self, url: str):
        self._profile.url = url
        self._changed()

    def set_file_name(self, file_name: str):
        self._profile.file_name = file_name
        self._changed()

    def set_export_format(self, export_format):
        self._profile.export_format = ExportFormat(export_format)
        self._changed()

    def set_debug_mode(self, enabled: bool):
        self._profile.debug_mode = bool(enabled)
        self._changed()

    def set_session_reference(self, session_id: Optional[str]):
        self._profile.session_reference = session_id or None
        self._changed()

    def replace(self, profile: Profile):
        """Swap in a whole profile (used on load). Caller marks the baseline."""
        self._profile = profile
        self._changed()

    def clear(self):
        self.replace(Profile.empty())

    # --- extractor mutations -------------------------------------------------

    def add_extractor(self, extractor: Optional[Extractor] = None) -> Extractor:
        extractor = extractor if extractor is not None else new_extractor()
        self._profile.extractors.append(extractor)
        self._changed()
        return extractor

    def remove_extractor(self, extractor_id: str) -> bool:
        before = len(self._profile.extractors)
        self._profile.extractors = [e for e in self._profile.extractors if e.id != extractor_id]
        removed = len(self._profile.extractors) != before
        if removed:
            self._changed()
        return removed

    def update_extractor(self, extractor_id: str, **changes) -> Extractor:
        extractor = self._profile.find_extractor(extractor_id)
        if extractor is None:
            raise KeyError(f"Unknown extractor: {extractor_id}")
        for name, value in changes.items():
            if name not in _EDITABLE_EXTRACTOR_FIELDS:
                raise AttributeError(f"Extractor field '{name}' is not editable")
            if name == "mode":
                value = ExtractorMode(value)
            elif value is None:
                value = ""
            setattr(extractor, name, value)
        self._changed()
        return extractor

    def move_extractor(self, extractor_id: str, new_index: int) -> bool:
        extractors = self._profile.extractors
        for index, extractor in enumerate(extractors):
            if extractor.id == extractor_id:
                break
        else:
            raise KeyError(f"Unknown extractor: {extractor_id}")
        new_index = max(0, min(new_index, len(extractors) - 1))
        if new_index == index:
            return False
        extractors.insert(new_index, extractors.pop(index))
        self._changed()
        return True

    # --- internals -----------------------------------------------------------

    def _changed(self):
        self._set_dirty(self._profile != self._baseline)
        self.profile_changed.emit()

    def _set_dirty(self, dirty: bool):
        if dirty == self._dirty:
            return
        self._dirty = dirty
        self.logger.debug(f"Profile dirty state -> {dirty}")
        self.dirty_changed.emit(dirty)
