# extract_studio/main_application.py
"""
Extract Studio - profile editor and runner for CSS-selector web extraction.
"""
import logging
from typing import Optional

from PySide6.QtWidgets import *
from PySide6.QtCore import *
from PySide6.QtGui import *

import config

from .components.dialogs import PreviewResultDialog, ResultsViewerDialog, SettingsDialog, UnsavedChangesDialog
from .components.extractor_panel import ExtractorPanel
from .components.profile_form import ProfileForm
from .components.run_panel import RunPanel
from .core.errors import PersistenceError, StudioError, ValidationError
from .core.guard import DecisionOutcome, DestructiveAction, GuardState
from .core.models import Extractor
from .core.settings import SettingsManager
from .core.studio_controller import StudioController
from .integration.backend_bridge import HostShell
from .integration.engine import StaticPageEngine
from .integration.persistence import FileProfilePersistence
from .integration.sessions import JsonSessionStore

# Dark Theme Stylesheet
DARK_THEME = """
QMainWindow, QWidget, QDialog {
    background-color: #1e1e1e;
    color: #ffffff;
    font-family: 'Segoe UI', Arial, sans-serif;
    font-size: 11px;
}

QGroupBox {
    font-weight: bold;
    border: 2px solid #404040;
    border-radius: 8px;
    margin-top: 10px;
    padding-top: 10px;
    background-color: #2d2d2d;
}

QGroupBox::title {
    subcontrol-origin: margin;
    left: 10px;
    padding: 0 5px;
    color: #4CAF50;
}

QPushButton {
    background-color: #404040;
    border: 1px solid #606060;
    border-radius: 6px;
    padding: 6px 14px;
    color: white;
    font-weight: bold;
}

QPushButton:hover { border-color: #4CAF50; }
QPushButton:disabled { color: #777777; border-color: #444444; }
QPushButton[class="success"] { background-color: #4CAF50; border-color: #45a049; }
QPushButton[class="success"]:disabled { background-color: #2e5e30; }

QLineEdit, QTextEdit, QPlainTextEdit, QComboBox, QDoubleSpinBox {
    background-color: #3a3a3a;
    border: 2px solid #555555;
    border-radius: 6px;
    padding: 4px;
    color: white;
    selection-background-color: #4CAF50;
}

QLineEdit:focus, QTextEdit:focus { border-color: #4CAF50; }
QLineEdit:disabled { color: #777777; background-color: #2a2a2a; }

QComboBox QAbstractItemView {
    background-color: #3a3a3a;
    selection-background-color: #4CAF50;
    color: white;
}

QTableWidget {
    background-color: #2a2a2a;
    alternate-background-color: #343434;
    gridline-color: #555555;
    border: 1px solid #555555;
}

QHeaderView::section {
    background-color: #404040;
    color: white;
    padding: 6px;
    border: 1px solid #555555;
    font-weight: bold;
}

QTabBar::tab { background-color: #2d2d2d; padding: 6px 14px; }
QTabBar::tab:selected { background-color: #404040; color: #4CAF50; }

QStatusBar {
    background-color: #2a2a2a;
    border-top: 1px solid #555555;
}
"""


class PreviewWorker(QThread):
    values_ready = Signal(list)
    error = Signal(str)

    def __init__(self, engine: StaticPageEngine, url: str, extractor: Extractor, logger_instance):
        super().__init__()
        self.engine = engine
        self.url = url
        self.extractor = extractor
        self.logger = logger_instance

    def run(self):
        try:
            self.values_ready.emit(self.engine.preview_extractor(self.url, self.extractor))
        except StudioError as e:
            self.error.emit(str(e))
        except Exception as e:
            self.logger.error(f"Error in PreviewWorker for '{self.extractor.field_name}': {e}", exc_info=True)
            self.error.emit(f"Preview Error: {type(e).__name__} - {e}")


class WindowShell(HostShell):
    """Host shell backed by the main window."""

    def __init__(self, window: "ExtractStudioWindow"):
        self.window = window

    def set_unsaved_changes(self, unsaved: bool) -> None:
        self.window.setWindowModified(unsaved)

    def proceed_with_close(self) -> None:
        self.window.close_approved = True
        QTimer.singleShot(0, self.window.close)

    def force_close(self) -> None:
        self.proceed_with_close()


class ExtractStudioWindow(QMainWindow):
    def __init__(self, settings_manager: SettingsManager, engine: StaticPageEngine,
                 startup_path: Optional[str] = None):
        super().__init__()
        self.logger = logging.getLogger(config.APP_NAME)
        self.settings_manager = settings_manager
        self.engine = engine
        self.close_approved = False
        self.preview_worker: Optional[PreviewWorker] = None

        settings = settings_manager.settings
        self.persistence = FileProfilePersistence(settings, self.choose_save_path, self.choose_open_path,
                                                  startup_path=startup_path)
        self.controller = StudioController(settings, engine, self.persistence,
                                           JsonSessionStore(config.SESSIONS_DIR), WindowShell(self))

        self.setWindowTitle(f"{config.DEFAULT_WINDOW_TITLE}[*]")
        self.setGeometry(100, 100, config.DEFAULT_WINDOW_WIDTH, config.DEFAULT_WINDOW_HEIGHT)
        self.setMinimumSize(config.MIN_WINDOW_WIDTH, config.MIN_WINDOW_HEIGHT)
        self.setStyleSheet(DARK_THEME)
        self.init_ui()
        self.init_menu()

        self.controller.status_message.connect(lambda message: self.statusBar().showMessage(message, 8000))
        self.controller.guard.decision_required.connect(self.on_decision_required)
        self.extractor_panel.preview_requested.connect(self.preview_extractor)
        self.run_panel.start_btn.clicked.connect(self.start_extraction)
        self.run_panel.view_results_btn.clicked.connect(self.show_results)

        self.profile_form.set_sessions(self.controller.sessions())
        self.controller.initialize()

    def init_ui(self):
        central = QWidget()
        self.setCentralWidget(central)
        layout = QHBoxLayout(central)
        splitter = QSplitter(Qt.Horizontal)

        left = QWidget()
        left_layout = QVBoxLayout(left)
        self.profile_form = ProfileForm(self.controller.tracker)
        self.extractor_panel = ExtractorPanel(self.controller)
        left_layout.addWidget(self.profile_form)
        left_layout.addWidget(self.extractor_panel, 1)

        self.run_panel = RunPanel(self.controller.run_controller)

        splitter.addWidget(left)
        splitter.addWidget(self.run_panel)
        splitter.setSizes([700, 700])
        layout.addWidget(splitter)
        self.statusBar().showMessage("Ready")

    def init_menu(self):
        file_menu = self.menuBar().addMenu("&File")
        actions = [
            ("📂 Open Profile...", QKeySequence.Open, self.open_profile),
            ("💾 Save Profile...", QKeySequence.Save, self.save_profile),
            ("🔄 Reset", None, self.reset_profile),
            ("⚙️ Settings...", None, self.open_settings),
            ("Exit", QKeySequence.Quit, self.close),
        ]
        for label, shortcut, handler in actions:
            action = QAction(label, self)
            if shortcut is not None:
                action.setShortcut(shortcut)
            action.triggered.connect(handler)
            file_menu.addAction(action)
            if label.startswith("⚙️"):
                file_menu.addSeparator()

    # --- path pickers ------------------------------------------------------------

    def choose_save_path(self, suggested: str) -> Optional[str]:
        path, _ = QFileDialog.getSaveFileName(self, "Save Profile", suggested, config.PROFILE_FILE_FILTER)
        return path or None

    def choose_open_path(self, start_dir: str) -> Optional[str]:
        path, _ = QFileDialog.getOpenFileName(self, "Open Profile", start_dir, config.PROFILE_FILE_FILTER)
        return path or None

    # --- menu actions ------------------------------------------------------------

    def open_profile(self):
        self._run_guarded(self.controller.request_load_profile)

    def reset_profile(self):
        self._run_guarded(self.controller.request_reset)

    def save_profile(self):
        try:
            self.controller.save_profile()
        except PersistenceError as e:
            QMessageBox.critical(self, "Save Error", f"Could not save profile: {e}")

    def open_settings(self):
        dialog = SettingsDialog(self.settings_manager.settings, self)
        if dialog.exec() == QDialog.Accepted:
            try:
                self.settings_manager.update(dialog.get_changes())
            except ValueError as e:
                QMessageBox.warning(self, "Invalid Settings", str(e))
                return
            self.statusBar().showMessage("Settings saved", 5000)

    def _run_guarded(self, request):
        try:
            request()
        except StudioError as e:
            QMessageBox.critical(self, "Error", str(e))

    # --- unsaved changes ---------------------------------------------------------

    def on_decision_required(self, action_value: str):
        # Deferred so the dialog does not run inside closeEvent
        QTimer.singleShot(0, lambda: self.ask_unsaved_decision(DestructiveAction(action_value)))

    def ask_unsaved_decision(self, action: DestructiveAction):
        guard = self.controller.guard
        while guard.state == GuardState.AWAITING_DECISION:
            dialog = UnsavedChangesDialog(action, self)
            if dialog.exec() != QDialog.Accepted:
                guard.cancel()
                break
            try:
                if dialog.choice == UnsavedChangesDialog.SAVE:
                    if guard.save() == DecisionOutcome.SAVE_CANCELLED:
                        continue
                else:
                    guard.discard()
            except PersistenceError as e:
                QMessageBox.critical(self, "Save Error", f"Could not save profile: {e}")
            except StudioError as e:
                QMessageBox.critical(self, "Error", str(e))

    # --- runs --------------------------------------------------------------------

    def start_extraction(self):
        try:
            self.controller.start_run()
        except ValidationError as e:
            QMessageBox.warning(self, "Missing Fields", f"{e}. Fill in the highlighted fields.")
        except StudioError as e:
            QMessageBox.warning(self, "Cannot Start", str(e))

    def show_results(self):
        ResultsViewerDialog(self.controller.run_controller.results, self).exec()

    def preview_extractor(self, extractor_id: str):
        extractor = self.controller.tracker.current().find_extractor(extractor_id)
        url = self.controller.tracker.current().url.strip()
        if extractor is None or not extractor.selector.strip():
            QMessageBox.warning(self, "Missing Selector", "Enter a selector to preview.")
            return
        if not url:
            QMessageBox.warning(self, "Missing URL", "Please enter a URL")
            return
        if self.preview_worker is not None and self.preview_worker.isRunning():
            return
        snapshot = Extractor(**vars(extractor))
        self.preview_worker = PreviewWorker(self.engine, url, snapshot, self.logger)
        self.preview_worker.values_ready.connect(
            lambda values: PreviewResultDialog(snapshot.field_name, url, values=values, parent=self).exec())
        self.preview_worker.error.connect(
            lambda message: PreviewResultDialog(snapshot.field_name, url, error=message, parent=self).exec())
        self.statusBar().showMessage(f"Previewing '{snapshot.field_name}'...")
        self.preview_worker.start()

    def closeEvent(self, event):
        if self.close_approved or self.controller.request_close():
            if self.preview_worker is not None and self.preview_worker.isRunning():
                self.preview_worker.wait(3000)
            event.accept()
        else:
            event.ignore()
