# extract_studio/components/run_panel.py
"""
Run controls: start button, status line, live log and the records received
so far.
"""
import html

from PySide6.QtWidgets import *
from PySide6.QtGui import QColor, QFont

from ..core.models import LogLevel, LogMessage, ResultItem, RunResult, RunState
from ..core.run_controller import RunController

LOG_COLORS = {
    LogLevel.INFO: "#ffffff",
    LogLevel.SUCCESS: "#4CAF50",
    LogLevel.WARNING: "#ffb74d",
    LogLevel.ERROR: "#f44336",
}

STATE_LABELS = {
    RunState.IDLE: ("Ready", "#cccccc"),
    RunState.RUNNING: ("⏳ Extracting...", "#ffb74d"),
    RunState.COMPLETED: ("✅ Completed", "#4CAF50"),
    RunState.ERROR: ("❌ Failed", "#f44336"),
}


def log_line_html(message: LogMessage) -> str:
    color = LOG_COLORS.get(message.level, "#ffffff")
    time_part = message.timestamp[11:19]
    return (f'<span style="color:#888888">{time_part}</span> '
            f'<span style="color:{color}">{html.escape(message.text)}</span>')


class RunPanel(QWidget):
    def __init__(self, run_controller: RunController, parent=None):
        super().__init__(parent)
        self.run_controller = run_controller
        self.init_ui()
        run_controller.state_changed.connect(self.on_state_changed)
        run_controller.log_appended.connect(self.append_log)
        run_controller.item_appended.connect(self.append_item)
        run_controller.run_finished.connect(self.on_run_finished)
        run_controller.run_failed.connect(self.on_run_failed)
        self.on_state_changed(run_controller.state.value)

    def init_ui(self):
        layout = QVBoxLayout(self)
        header = QLabel("🚀 Run")
        header.setFont(QFont("Arial", 14, QFont.Bold))
        header.setStyleSheet("color: #4CAF50; margin: 10px 0;")

        controls_layout = QHBoxLayout()
        self.start_btn = QPushButton("▶️ Start Extraction")
        self.start_btn.setProperty("class", "success")
        self.view_results_btn = QPushButton("📋 View Results")
        self.view_results_btn.setEnabled(False)
        self.status_label = QLabel()
        controls_layout.addWidget(self.start_btn)
        controls_layout.addWidget(self.view_results_btn)
        controls_layout.addStretch()
        controls_layout.addWidget(self.status_label)

        tabs = QTabWidget()
        self.log_view = QTextEdit()
        self.log_view.setReadOnly(True)
        self.results_table = QTableWidget()
        self.results_table.setAlternatingRowColors(True)
        self.results_table.setEditTriggers(QAbstractItemView.NoEditTriggers)
        tabs.addTab(self.log_view, "📜 Log")
        tabs.addTab(self.results_table, "📊 Results")

        layout.addWidget(header)
        layout.addLayout(controls_layout)
        layout.addWidget(tabs)

    def on_state_changed(self, state_value: str):
        state = RunState(state_value)
        text, color = STATE_LABELS[state]
        self.status_label.setText(text)
        self.status_label.setStyleSheet(f"color: {color}; font-weight: bold;")
        self.start_btn.setEnabled(state != RunState.RUNNING)
        if state in (RunState.IDLE, RunState.RUNNING) and not self.run_controller.logs:
            self.log_view.clear()
            self.results_table.clear()
            self.results_table.setRowCount(0)
            self.results_table.setColumnCount(0)
        self.view_results_btn.setEnabled(bool(self.run_controller.results))

    def append_log(self, message: LogMessage):
        self.log_view.append(log_line_html(message))

    def append_item(self, item: ResultItem):
        if self.results_table.columnCount() == 0:
            headers = list(item.keys())
            self.results_table.setColumnCount(len(headers))
            self.results_table.setHorizontalHeaderLabels(headers)
        row = self.results_table.rowCount()
        self.results_table.insertRow(row)
        for column in range(self.results_table.columnCount()):
            header = self.results_table.horizontalHeaderItem(column).text()
            value = item.get(header)
            cell = QTableWidgetItem("" if value is None else str(value)[:500])
            if value is None:
                cell.setBackground(QColor(90, 40, 40))
            self.results_table.setItem(row, column, cell)
        self.view_results_btn.setEnabled(True)

    def on_run_finished(self, result: RunResult):
        self.results_table.resizeColumnsToContents()
        self.results_table.horizontalHeader().setStretchLastSection(True)
        self.status_label.setText(f"✅ {result.item_count} items")

    def on_run_failed(self, reason: str):
        self.status_label.setToolTip(reason)
