#!/usr/bin/env python3
"""
Extract Studio - Main Entry Point

Launch the desktop extraction studio, optionally opening a .b4e profile.
"""

import sys
import argparse
from pathlib import Path

# Add the project root to Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))


def launch_studio(profile_path=None, debug=False):
    """Launch the Extract Studio window"""
    try:
        from PySide6.QtWidgets import QApplication
        from extract_studio.core.settings import SettingsManager
        from extract_studio.integration.engine import StaticPageEngine
        from extract_studio.main_application import ExtractStudioWindow
        from utils.logger import setup_logger
        import config
    except ImportError as e:
        print(f"❌ Failed to import Extract Studio: {e}")
        print("💡 Try installing missing dependencies: pip install -e .")
        return 1

    console_level = "DEBUG" if debug or config.DEBUG_MODE else config.LOG_LEVEL_CONSOLE
    logger = setup_logger(name="", log_file=config.LOG_FILE_PATH, console_level_str=console_level)
    logger.info(f"Starting {config.APP_NAME} {config.VERSION}")

    app = QApplication(sys.argv)
    app.setApplicationName(config.APP_NAME)
    app.setStyle("Fusion")

    settings_manager = SettingsManager()
    if debug:
        settings_manager.settings.debug.enabled = True
    engine = StaticPageEngine(settings_manager.settings)

    window = ExtractStudioWindow(settings_manager, engine, startup_path=profile_path)
    window.show()
    return app.exec()


def main():
    parser = argparse.ArgumentParser(description="Extract Studio - CSS selector web data extractor")
    parser.add_argument("profile", nargs="?", help="Profile (.b4e) to open on startup")
    parser.add_argument("--debug", action="store_true", help="Verbose console logging and debug runs")
    args = parser.parse_args()

    if args.profile and not Path(args.profile).exists():
        print(f"❌ Profile not found: {args.profile}")
        return 1

    return launch_studio(args.profile, args.debug)


if __name__ == "__main__":
    sys.exit(main())
