# extract_studio/components/dialogs.py
"""
Custom dialog boxes used in Extract Studio.
"""
import csv
import json
from typing import List, Optional

from PySide6.QtWidgets import *
from PySide6.QtGui import QColor

from ..core.guard import DestructiveAction
from ..core.models import ResultItem
from ..core.settings import AppSettings

ACTION_DESCRIPTIONS = {
    DestructiveAction.RESET: "resetting the profile",
    DestructiveAction.LOAD_PROFILE: "loading another profile",
    DestructiveAction.CLOSE: "closing Extract Studio",
}


class UnsavedChangesDialog(QDialog):
    SAVE = "save"
    DISCARD = "discard"
    CANCEL = "cancel"

    def __init__(self, action: DestructiveAction, parent=None):
        super().__init__(parent)
        self.choice = self.CANCEL
        self.setWindowTitle("Unsaved Changes")
        self.setModal(True)
        layout = QVBoxLayout(self)
        message = QLabel(f"The current profile has unsaved changes.\n"
                         f"Save them before {ACTION_DESCRIPTIONS[DestructiveAction(action)]}?")
        message.setWordWrap(True)

        button_layout = QHBoxLayout()
        self.save_btn = QPushButton("💾 Save")
        self.save_btn.setProperty("class", "success")
        self.discard_btn = QPushButton("🗑️ Discard")
        self.cancel_btn = QPushButton("Cancel")
        button_layout.addStretch()
        button_layout.addWidget(self.cancel_btn)
        button_layout.addWidget(self.discard_btn)
        button_layout.addWidget(self.save_btn)

        layout.addWidget(message)
        layout.addLayout(button_layout)

        self.save_btn.clicked.connect(lambda: self._choose(self.SAVE))
        self.discard_btn.clicked.connect(lambda: self._choose(self.DISCARD))
        self.cancel_btn.clicked.connect(self.reject)
        self.save_btn.setDefault(True)

    def _choose(self, choice: str):
        self.choice = choice
        self.accept()


class ResultsViewerDialog(QDialog):
    def __init__(self, results: List[ResultItem], parent=None, title="Extracted Records"):
        super().__init__(parent)
        self.results = results
        self.setWindowTitle(title)
        self.setModal(True)
        self.resize(900, 700)
        self.init_ui()

    def init_ui(self):
        layout = QVBoxLayout(self)
        self.table_widget = QTableWidget()
        self.table_widget.setAlternatingRowColors(True)
        self.table_widget.setEditTriggers(QAbstractItemView.NoEditTriggers)
        if not self.results:
            self.table_widget.setRowCount(1)
            self.table_widget.setColumnCount(1)
            self.table_widget.setItem(0, 0, QTableWidgetItem("No records extracted."))
        else:
            headers = list(self.results[0].keys())
            self.table_widget.setColumnCount(len(headers))
            self.table_widget.setHorizontalHeaderLabels(headers)
            self.table_widget.setRowCount(len(self.results))
            for row_idx, record in enumerate(self.results):
                for col_idx, header in enumerate(headers):
                    value = record.get(header)
                    self.table_widget.setItem(row_idx, col_idx,
                                              QTableWidgetItem("" if value is None else str(value)[:500]))
            self.table_widget.resizeColumnsToContents()
        self.table_widget.horizontalHeader().setStretchLastSection(True)

        button_layout = QHBoxLayout()
        self.save_btn = QPushButton("💾 Save as...")
        self.save_btn.clicked.connect(self.save_data)
        self.close_button = QPushButton("Close")
        self.close_button.clicked.connect(self.accept)
        button_layout.addWidget(QLabel(f"Displaying {len(self.results)} records"))
        button_layout.addStretch()
        button_layout.addWidget(self.save_btn)
        button_layout.addWidget(self.close_button)
        layout.addWidget(self.table_widget)
        layout.addLayout(button_layout)

    def save_data(self):
        if not self.results:
            QMessageBox.warning(self, "No Data", "There is no data to save.")
            return
        filename, selected_filter = QFileDialog.getSaveFileName(self, "Save Records", "records.json",
                                                                "JSON files (*.json);;CSV files (*.csv)")
        if not filename:
            return
        try:
            if selected_filter.startswith("CSV"):
                with open(filename, 'w', encoding='utf-8', newline='') as f:
                    writer = csv.DictWriter(f, fieldnames=list(self.results[0].keys()), extrasaction="ignore")
                    writer.writeheader()
                    writer.writerows(self.results)
            else:
                with open(filename, 'w', encoding='utf-8') as f:
                    json.dump(self.results, f, indent=2, ensure_ascii=False)
            QMessageBox.information(self, "Save Complete", f"Records saved to\n{filename}")
        except OSError as e:
            QMessageBox.critical(self, "Save Error", f"Could not save records: {e}")


class PreviewResultDialog(QDialog):
    def __init__(self, field_name: str, url: str, values: Optional[List[Optional[str]]] = None,
                 error: Optional[str] = None, parent=None):
        super().__init__(parent)
        self.setWindowTitle(f"Preview: {field_name}")
        self.setModal(True)
        self.resize(700, 450)
        layout = QVBoxLayout(self)
        self.results_table = QTableWidget(0, 2)
        self.results_table.setHorizontalHeaderLabels(["#", "Value"])
        self.results_table.setAlternatingRowColors(True)
        self.results_table.setWordWrap(True)
        self.results_table.verticalHeader().setVisible(False)

        if error is not None:
            self.results_table.setRowCount(1)
            self.results_table.setItem(0, 0, QTableWidgetItem("❌"))
            error_item = QTableWidgetItem(error)
            error_item.setBackground(QColor(255, 200, 200))
            self.results_table.setItem(0, 1, error_item)
            summary = "Preview failed"
        elif not values:
            self.results_table.setRowCount(1)
            self.results_table.setItem(0, 1, QTableWidgetItem("No elements matched this selector."))
            summary = "0 matches"
        else:
            self.results_table.setRowCount(len(values))
            for row, value in enumerate(values):
                self.results_table.setItem(row, 0, QTableWidgetItem(str(row + 1)))
                value_item = QTableWidgetItem("(no value)" if value is None else value[:500])
                if value is None:
                    value_item.setBackground(QColor(255, 230, 180))
                self.results_table.setItem(row, 1, value_item)
            summary = f"First {len(values)} matches"
        self.results_table.resizeRowsToContents()
        self.results_table.horizontalHeader().setStretchLastSection(True)

        close_btn = QPushButton("Close")
        close_btn.clicked.connect(self.accept)
        layout.addWidget(QLabel(f"{summary} on {url}"))
        layout.addWidget(self.results_table)
        layout.addWidget(close_btn)


class SettingsDialog(QDialog):
    def __init__(self, settings: AppSettings, parent=None):
        super().__init__(parent)
        self.settings = settings
        self.setWindowTitle("Settings")
        self.setModal(True)
        self.resize(600, 300)
        self.init_ui()

    def init_ui(self):
        layout = QVBoxLayout(self)

        folders_group = QGroupBox("Folders")
        folders_layout = QFormLayout(folders_group)
        self.outputs_input = QLineEdit(self.settings.outputs_path)
        self.saves_input = QLineEdit(self.settings.saves_path)
        folders_layout.addRow("Outputs:", self._with_browse(self.outputs_input, "Select Outputs Folder"))
        folders_layout.addRow("Saved Profiles:", self._with_browse(self.saves_input, "Select Profiles Folder"))

        run_group = QGroupBox("Run")
        run_layout = QFormLayout(run_group)
        self.timeout_spin = QDoubleSpinBox()
        self.timeout_spin.setRange(1, 600)
        self.timeout_spin.setSuffix(" s")
        self.timeout_spin.setValue(self.settings.request_timeout)
        self.debug_check = QCheckBox("Enable debug logging for every run")
        self.debug_check.setChecked(self.settings.debug.enabled)
        self.advanced_logs_check = QCheckBox("Advanced logs")
        self.advanced_logs_check.setChecked(self.settings.debug.advanced_logs)
        run_layout.addRow("Request Timeout:", self.timeout_spin)
        run_layout.addRow("", self.debug_check)
        run_layout.addRow("", self.advanced_logs_check)

        button_layout = QHBoxLayout()
        self.ok_btn = QPushButton("💾 Save Settings")
        self.ok_btn.setProperty("class", "success")
        self.cancel_btn = QPushButton("Cancel")
        button_layout.addStretch()
        button_layout.addWidget(self.cancel_btn)
        button_layout.addWidget(self.ok_btn)

        layout.addWidget(folders_group)
        layout.addWidget(run_group)
        layout.addLayout(button_layout)

        self.ok_btn.clicked.connect(self.on_ok_clicked)
        self.cancel_btn.clicked.connect(self.reject)

    def _with_browse(self, line_edit: QLineEdit, caption: str) -> QWidget:
        container = QWidget()
        row = QHBoxLayout(container)
        row.setContentsMargins(0, 0, 0, 0)
        browse_btn = QPushButton("📁")
        browse_btn.setMaximumWidth(40)
        browse_btn.clicked.connect(lambda: self._browse(line_edit, caption))
        row.addWidget(line_edit)
        row.addWidget(browse_btn)
        return container

    def _browse(self, line_edit: QLineEdit, caption: str):
        folder = QFileDialog.getExistingDirectory(self, caption, line_edit.text())
        if folder:
            line_edit.setText(folder)

    def on_ok_clicked(self):
        if not self.outputs_input.text().strip() or not self.saves_input.text().strip():
            QMessageBox.warning(self, "Missing Folder", "Both folders are required.")
            return
        self.accept()

    def get_changes(self) -> dict:
        return {
            "outputs_path": self.outputs_input.text().strip(),
            "saves_path": self.saves_input.text().strip(),
            "request_timeout": self.timeout_spin.value(),
            "debug": {
                "enabled": self.debug_check.isChecked(),
                "advanced_logs": self.advanced_logs_check.isChecked(),
                "show_browser": self.settings.debug.show_browser,
            },
        }
