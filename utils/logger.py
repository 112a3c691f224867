# utils/logger.py

import logging
import sys
from pathlib import Path

import config


def setup_logger(name=None, log_file=None, console_level_str=None, file_level_str=None):
    # name="" configures the root logger, which component loggers propagate to
    logger_name = name if name is not None else config.DEFAULT_LOGGER_NAME
    logger = logging.getLogger(logger_name)

    if logger.handlers:
        return logger
    logger.setLevel(logging.DEBUG)

    actual_log_file = log_file if log_file is not None else config.LOG_FILE_PATH
    actual_console_level_str = console_level_str if console_level_str else config.LOG_LEVEL_CONSOLE
    actual_file_level_str = file_level_str if file_level_str else config.LOG_LEVEL_FILE

    formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s (%(filename)s:%(lineno)d)")

    ch = logging.StreamHandler(sys.stdout)
    ch.setLevel(_parse_level(actual_console_level_str, logging.INFO, "console"))
    ch.setFormatter(formatter)
    logger.addHandler(ch)

    if actual_log_file:
        try:
            Path(actual_log_file).parent.mkdir(parents=True, exist_ok=True)
            fh = logging.FileHandler(actual_log_file, encoding='utf-8')
            fh.setLevel(_parse_level(actual_file_level_str, logging.DEBUG, "file"))
            fh.setFormatter(formatter)
            logger.addHandler(fh)
        except OSError as e:
            logger.error(f"Failed to configure file logger for {actual_log_file}: {e}", exc_info=False)

    logger.propagate = False  # To prevent duplicate logs if root logger is also configured
    return logger


def _parse_level(level_str: str, fallback: int, handler_kind: str) -> int:
    level = logging.getLevelName(str(level_str).upper())
    if isinstance(level, int):
        return level
    print(f"Warning: Invalid {handler_kind} log level '{level_str}' in config. "
          f"Using {logging.getLevelName(fallback)}.", file=sys.stderr)
    return fallback
