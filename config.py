# config.py - Main Configuration File for Extract Studio

import os
from pathlib import Path

# =============================================================================
# Application Settings
# =============================================================================
APP_NAME = "ExtractStudio"
VERSION = "1.0.0"

# =============================================================================
# Logging Configuration
# =============================================================================
DEFAULT_LOGGER_NAME = "extract_studio"
LOG_DIR = Path(os.getenv("EXTRACT_STUDIO_LOG_DIR", "logs"))
LOG_FILE_PATH = str(LOG_DIR / "extract_studio.log")
LOG_LEVEL_CONSOLE = "INFO"
LOG_LEVEL_FILE = "DEBUG"

# =============================================================================
# GUI Configuration
# =============================================================================
DEFAULT_WINDOW_TITLE = "Extract Studio - Web Data Extractor"
DEFAULT_WINDOW_WIDTH = 1400
DEFAULT_WINDOW_HEIGHT = 900
MIN_WINDOW_WIDTH = 800
MIN_WINDOW_HEIGHT = 600

# Display names for the extractor modes and export formats
EXTRACTOR_MODE_DISPLAY_NAMES = {
    "text": "Text",
    "attribute": "Attribute",
    "child-link-url": "Child link URL",
    "child-link-text": "Child link text",
}

EXPORT_FORMAT_DISPLAY_NAMES = {
    "json": "JSON",
    "csv": "CSV",
    "excel": "Excel (.xlsx)",
}

# =============================================================================
# User Data / Paths
# =============================================================================
USER_DATA_DIR = Path(os.getenv("EXTRACT_STUDIO_HOME", Path.home() / ".extract_studio"))
SETTINGS_FILE_NAME = "settings.json"
DEFAULT_OUTPUTS_DIR = USER_DATA_DIR / "outputs"
DEFAULT_SAVES_DIR = USER_DATA_DIR / "saves"
SESSIONS_DIR = USER_DATA_DIR / "sessions"

# =============================================================================
# Profile Files
# =============================================================================
PROFILE_EXTENSION = ".b4e"
PROFILE_FILE_FILTER = "Extract Studio Profile (*.b4e);;All Files (*)"
MAX_PROFILE_FILE_BYTES = 10 * 1024 * 1024
MAX_URL_LENGTH = 2000
MAX_FILE_NAME_LENGTH = 255
MAX_FIELD_NAME_LENGTH = 100
MAX_SELECTOR_LENGTH = 500

# =============================================================================
# HTTP/Fetching Configuration
# =============================================================================
USER_AGENT = "ExtractStudio/1.0 (+https://github.com/extract-studio/extract-studio)"
DEFAULT_REQUEST_TIMEOUT = 30
ALLOWED_URL_SCHEMES = ("http", "https")
PREVIEW_SAMPLE_LIMIT = 5

# =============================================================================
# Debug Settings
# =============================================================================
DEBUG_MODE = os.getenv("DEBUG", "false").lower() == "true"
