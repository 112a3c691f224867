# extract_studio/components/profile_form.py
"""
Profile-level fields: target URL, output file name, export format, debug
mode and the optional browser session.
"""
from typing import List

from PySide6.QtWidgets import *
from PySide6.QtGui import QFont

import config

from ..core.change_tracker import ChangeTracker
from ..core.models import ExportFormat
from ..integration.backend_bridge import SessionProfile


class ProfileForm(QWidget):
    def __init__(self, tracker: ChangeTracker, parent=None):
        super().__init__(parent)
        self.tracker = tracker
        self.init_ui()
        self.tracker.profile_changed.connect(self.sync_from_profile)
        self.sync_from_profile()

    def init_ui(self):
        layout = QVBoxLayout(self)
        header = QLabel("🌐 Target")
        header.setFont(QFont("Arial", 14, QFont.Bold))
        header.setStyleSheet("color: #4CAF50; margin: 10px 0;")

        group = QGroupBox("Profile")
        form_layout = QFormLayout(group)

        self.url_input = QLineEdit()
        self.url_input.setPlaceholderText("https://example.com/products")
        self.url_input.setMaxLength(config.MAX_URL_LENGTH)

        self.file_name_input = QLineEdit()
        self.file_name_input.setPlaceholderText("Leave blank for <site>-<timestamp>")
        self.file_name_input.setMaxLength(config.MAX_FILE_NAME_LENGTH)

        self.format_combo = QComboBox()
        for export_format in ExportFormat:
            self.format_combo.addItem(config.EXPORT_FORMAT_DISPLAY_NAMES[export_format.value], export_format.value)

        self.session_combo = QComboBox()
        self.session_combo.addItem("No session", "")

        self.debug_check = QCheckBox("Debug mode (verbose run log)")

        form_layout.addRow("URL*:", self.url_input)
        form_layout.addRow("File Name:", self.file_name_input)
        form_layout.addRow("Export Format:", self.format_combo)
        form_layout.addRow("Session:", self.session_combo)
        form_layout.addRow("", self.debug_check)

        layout.addWidget(header)
        layout.addWidget(group)

        # textEdited only fires for user edits, so syncing back never loops
        self.url_input.textEdited.connect(self.tracker.set_url)
        self.file_name_input.textEdited.connect(self.tracker.set_file_name)
        self.format_combo.activated.connect(
            lambda index: self.tracker.set_export_format(self.format_combo.itemData(index)))
        self.session_combo.activated.connect(
            lambda index: self.tracker.set_session_reference(self.session_combo.itemData(index)))
        self.debug_check.clicked.connect(self.tracker.set_debug_mode)

    def set_sessions(self, sessions: List[SessionProfile]):
        current = self.tracker.current().session_reference or ""
        self.session_combo.clear()
        self.session_combo.addItem("No session", "")
        for session in sessions:
            label = f"{session.name} ({session.domain})" if session.domain else session.name
            self.session_combo.addItem(label, session.id)
        self._select_session(current)

    def sync_from_profile(self):
        profile = self.tracker.current()
        if self.url_input.text() != profile.url:
            self.url_input.setText(profile.url)
        if self.file_name_input.text() != profile.file_name:
            self.file_name_input.setText(profile.file_name)
        self.format_combo.setCurrentIndex(max(0, self.format_combo.findData(profile.export_format.value)))
        self.debug_check.setChecked(profile.debug_mode)
        self._select_session(profile.session_reference or "")

    def _select_session(self, session_id: str):
        index = self.session_combo.findData(session_id)
        if index < 0:
            # Referenced session no longer exists; keep showing the reference
            self.session_combo.addItem(f"Missing session ({session_id})", session_id)
            index = self.session_combo.count() - 1
        self.session_combo.setCurrentIndex(index)
