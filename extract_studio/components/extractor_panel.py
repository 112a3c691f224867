# extract_studio/components/extractor_panel.py
"""
UI component for defining and ordering the extractors of a profile.
"""
from typing import Dict, List

from PySide6.QtWidgets import *
from PySide6.QtCore import Signal
from PySide6.QtGui import QFont

import config

from ..core.models import ExtractorErrors, ExtractorMode
from ..core.studio_controller import StudioController

COLUMNS = ["Field Name", "Selector", "Mode", "Attribute"]
INVALID_STYLE = "border: 2px solid #f44336;"


class ExtractorPanel(QWidget):
    preview_requested = Signal(str)  # extractor id

    def __init__(self, controller: StudioController, parent=None):
        super().__init__(parent)
        self.controller = controller
        self.tracker = controller.tracker
        self._row_ids: List[str] = []
        self._editors: Dict[str, Dict[str, QWidget]] = {}
        self.init_ui()
        self.tracker.profile_changed.connect(self.sync_from_profile)
        self.controller.validation_changed.connect(self.show_validation_errors)
        self.sync_from_profile()

    def init_ui(self):
        layout = QVBoxLayout(self)
        header = QLabel("🧩 Extractors")
        header.setFont(QFont("Arial", 14, QFont.Bold))
        header.setStyleSheet("color: #4CAF50; margin: 10px 0;")

        self.table = QTableWidget(0, len(COLUMNS))
        self.table.setHorizontalHeaderLabels(COLUMNS)
        self.table.setSelectionBehavior(QAbstractItemView.SelectRows)
        self.table.setSelectionMode(QAbstractItemView.SingleSelection)
        self.table.verticalHeader().setVisible(False)
        self.table.horizontalHeader().setSectionResizeMode(1, QHeaderView.Stretch)

        actions_layout = QHBoxLayout()
        self.add_btn = QPushButton("➕ Add")
        self.remove_btn = QPushButton("🗑️ Remove")
        self.up_btn = QPushButton("⬆️ Up")
        self.down_btn = QPushButton("⬇️ Down")
        self.preview_btn = QPushButton("🧪 Preview")
        for btn in [self.add_btn, self.remove_btn, self.up_btn, self.down_btn, self.preview_btn]:
            btn.setMaximumHeight(35)
            actions_layout.addWidget(btn)

        layout.addWidget(header)
        layout.addWidget(self.table)
        layout.addLayout(actions_layout)

        self.add_btn.clicked.connect(self.add_extractor)
        self.remove_btn.clicked.connect(self.remove_selected)
        self.up_btn.clicked.connect(lambda: self.move_selected(-1))
        self.down_btn.clicked.connect(lambda: self.move_selected(1))
        self.preview_btn.clicked.connect(self.preview_selected)

    # --- actions ---------------------------------------------------------------

    def add_extractor(self):
        extractor = self.tracker.add_extractor()
        row = self._row_ids.index(extractor.id)
        self.table.selectRow(row)
        self._editors[extractor.id]["field_name"].setFocus()

    def selected_id(self):
        row = self.table.currentRow()
        return self._row_ids[row] if 0 <= row < len(self._row_ids) else None

    def remove_selected(self):
        extractor_id = self.selected_id()
        if extractor_id is None:
            QMessageBox.warning(self, "No Extractor Selected", "Select an extractor to remove.")
            return
        self.controller.remove_extractor(extractor_id)

    def move_selected(self, offset: int):
        extractor_id = self.selected_id()
        if extractor_id is None:
            return
        if self.tracker.move_extractor(extractor_id, self._row_ids.index(extractor_id) + offset):
            self.table.selectRow(self._row_ids.index(extractor_id))

    def preview_selected(self):
        extractor_id = self.selected_id()
        if extractor_id is None:
            QMessageBox.warning(self, "No Extractor Selected", "Select an extractor to preview.")
            return
        self.preview_requested.emit(extractor_id)

    # --- model sync ------------------------------------------------------------

    def sync_from_profile(self):
        extractors = self.tracker.current().extractors
        ids = [e.id for e in extractors]
        if ids != self._row_ids:
            self._rebuild(extractors)
            return
        for extractor in extractors:
            editors = self._editors[extractor.id]
            for name in ("field_name", "selector", "attribute_name"):
                if editors[name].text() != getattr(extractor, name):
                    editors[name].setText(getattr(extractor, name))
            mode_combo = editors["mode"]
            mode_combo.setCurrentIndex(mode_combo.findData(extractor.mode.value))
            editors["attribute_name"].setEnabled(extractor.mode == ExtractorMode.ATTRIBUTE)

    def _rebuild(self, extractors):
        self.table.setRowCount(0)
        self._row_ids = []
        self._editors = {}
        for row, extractor in enumerate(extractors):
            self.table.insertRow(row)
            self._row_ids.append(extractor.id)

            field_input = QLineEdit(extractor.field_name)
            field_input.setPlaceholderText("e.g., title")
            field_input.setMaxLength(config.MAX_FIELD_NAME_LENGTH)
            selector_input = QLineEdit(extractor.selector)
            selector_input.setPlaceholderText("e.g., .product h2")
            selector_input.setMaxLength(config.MAX_SELECTOR_LENGTH)
            mode_combo = QComboBox()
            for mode in ExtractorMode:
                mode_combo.addItem(config.EXTRACTOR_MODE_DISPLAY_NAMES[mode.value], mode.value)
            mode_combo.setCurrentIndex(mode_combo.findData(extractor.mode.value))
            attribute_input = QLineEdit(extractor.attribute_name)
            attribute_input.setPlaceholderText("e.g., href, src")
            attribute_input.setEnabled(extractor.mode == ExtractorMode.ATTRIBUTE)

            for column, widget in enumerate([field_input, selector_input, mode_combo, attribute_input]):
                self.table.setCellWidget(row, column, widget)
            self._editors[extractor.id] = {"field_name": field_input, "selector": selector_input,
                                           "mode": mode_combo, "attribute_name": attribute_input}

            field_input.textEdited.connect(self._edit_handler(extractor.id, "field_name"))
            selector_input.textEdited.connect(self._edit_handler(extractor.id, "selector"))
            attribute_input.textEdited.connect(self._edit_handler(extractor.id, "attribute_name"))
            mode_combo.activated.connect(
                lambda index, eid=extractor.id, combo=mode_combo: self.controller.edit_extractor(
                    eid, mode=combo.itemData(index)))
        self.show_validation_errors()

    def _edit_handler(self, extractor_id: str, field_name: str):
        return lambda text: self.controller.edit_extractor(extractor_id, **{field_name: text})

    def show_validation_errors(self):
        errors = self.controller.validation_errors()
        for extractor_id, editors in self._editors.items():
            flagged = errors.get(extractor_id, ExtractorErrors()).missing_fields()
            for name in ("field_name", "selector", "attribute_name"):
                editors[name].setStyleSheet(INVALID_STYLE if name in flagged else "")
                editors[name].setToolTip("This field is required" if name in flagged else "")
