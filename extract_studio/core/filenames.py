# extract_studio/core/filenames.py
"""
Output file naming for extraction runs.
"""
import os
import re
import time
from typing import Optional
from urllib.parse import urlparse

from .models import ExportFormat

_KNOWN_EXTENSIONS = re.compile(r"\.(json|csv|xlsx)$", re.IGNORECASE)
_UNSAFE_CHARS = re.compile(r'[<>:"|?*\x00-\x1f]')


def host_label(url: str) -> str:
    host = urlparse(url.strip()).hostname or ""
    if host.startswith("www."):
        host = host[len("www."):]
    return host or "extraction"


def derive_output_file_name(url: str, file_name: str, export_format: ExportFormat,
                            timestamp_ms: Optional[int] = None) -> str:
    """
    Name of the file a run writes to.

    A blank name becomes `<host>-<ms timestamp>` so repeated runs never
    overwrite each other. Any known extension is replaced by the one for
    `export_format`, so re-runs do not accumulate suffixes.
    """
    name = (file_name or "").strip()
    if not name:
        stamp = timestamp_ms if timestamp_ms is not None else int(time.time() * 1000)
        name = f"{host_label(url)}-{stamp}"

    extension = ExportFormat(export_format).extension
    if not name.lower().endswith(extension):
        name = _KNOWN_EXTENSIONS.sub("", name) + extension
    return name


def sanitize_file_name(file_name: str, max_length: int = 255) -> str:
    """Basename only, no reserved characters, no parent references."""
    name = os.path.basename(file_name.replace("\\", "/"))
    name = _UNSAFE_CHARS.sub("_", name).replace("..", "_")
    return name[:max_length] or "untitled"
