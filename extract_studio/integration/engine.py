# extract_studio/integration/engine.py
"""
Static-page automation engine: fetches the target URL with requests, applies
the extractors with BeautifulSoup CSS selectors, streams every record back as
a data item, then writes the export file under the configured outputs folder.
"""
import csv
import json
import logging
from pathlib import Path
from typing import Callable, Dict, List, Optional
from urllib.parse import urljoin, urlparse

import requests
from bs4 import BeautifulSoup
from openpyxl import Workbook
from openpyxl.styles import Font
from PySide6.QtCore import QThread, Signal
from soupsieve import SelectorSyntaxError

import config
from utils.log_sanitizer import sanitize_text, sanitize_url

from ..core.errors import EngineFailure, RunInProgressError
from ..core.filenames import sanitize_file_name
from ..core.models import ExportFormat, Extractor, ExtractorMode, LogLevel, LogMessage, Profile, ResultItem
from ..core.settings import AppSettings
from .backend_bridge import AutomationEngine

LogCallback = Callable[[LogLevel, str], None]


def check_url(url: str) -> str:
    url = (url or "").strip()
    parsed = urlparse(url)
    if parsed.scheme.lower() not in config.ALLOWED_URL_SCHEMES or not parsed.netloc:
        raise EngineFailure(f"Only http and https URLs are supported: {sanitize_url(url)}")
    return url


def fetch_page(url: str, timeout: float) -> str:
    try:
        response = requests.get(url, headers={"User-Agent": config.USER_AGENT}, timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as e:
        raise EngineFailure(f"Failed to load page: {sanitize_text(str(e))}") from e
    return response.text


def _select(soup: BeautifulSoup, extractor: Extractor):
    try:
        return soup.select(extractor.selector)
    except SelectorSyntaxError as e:
        raise EngineFailure(f"Invalid selector for '{extractor.field_name}': {extractor.selector}") from e


def read_value(element, extractor: Extractor, base_url: str = "") -> Optional[str]:
    """Value of one matched element for `extractor`, or None when it has none."""
    if extractor.mode == ExtractorMode.TEXT:
        return element.get_text().strip() or None
    if extractor.mode == ExtractorMode.ATTRIBUTE:
        value = element.get(extractor.attribute_name)
        if isinstance(value, list):  # multi-valued attributes such as class
            value = " ".join(value)
        return value
    link = element.find("a")
    if link is None:
        return None
    if extractor.mode == ExtractorMode.CHILD_LINK_URL:
        href = link.get("href")
        return urljoin(base_url, href) if href is not None else None
    return link.get_text().strip() or None


def extract_records(html: str, extractors: List[Extractor], base_url: str = "",
                    log: Optional[LogCallback] = None, warn_missing: bool = True) -> List[ResultItem]:
    """
    One record per element matched by the first extractor's selector. Record
    i takes the i-th match of every other extractor's own selector.
    """
    if not extractors:
        return []
    log = log or (lambda level, text: None)
    soup = BeautifulSoup(html, "html.parser")
    matches: Dict[str, list] = {extractors[0].id: _select(soup, extractors[0])}
    for extractor in extractors[1:]:
        try:
            matches[extractor.id] = _select(soup, extractor)
        except EngineFailure as e:
            log(LogLevel.WARNING, f"Error for field '{extractor.field_name}': {e.reason}")
            matches[extractor.id] = []
    record_count = len(matches[extractors[0].id])

    records = []
    for index in range(record_count):
        record: ResultItem = {}
        for extractor in extractors:
            elements = matches[extractor.id]
            value = read_value(elements[index], extractor, base_url) if index < len(elements) else None
            if value is None and warn_missing:
                log(LogLevel.WARNING, f"Record {index + 1}: no value for '{extractor.field_name}'")
            record[extractor.field_name] = value
        records.append(record)
    return records


def output_path(file_name: str, outputs_path) -> Path:
    return Path(outputs_path) / sanitize_file_name(file_name, config.MAX_FILE_NAME_LENGTH)


def export_records(records: List[ResultItem], file_name: str, export_format: ExportFormat,
                   outputs_path) -> Path:
    target = output_path(file_name, outputs_path)
    target.parent.mkdir(parents=True, exist_ok=True)
    export_format = ExportFormat(export_format)

    if export_format == ExportFormat.JSON:
        with open(target, "w", encoding="utf-8") as f:
            json.dump(records, f, indent=2, ensure_ascii=False)
    elif export_format == ExportFormat.CSV:
        headers = list(records[0].keys())
        with open(target, "w", encoding="utf-8", newline="") as f:
            writer = csv.DictWriter(f, fieldnames=headers, extrasaction="ignore")
            writer.writeheader()
            writer.writerows(records)
    else:
        headers = list(records[0].keys())
        wb = Workbook()
        ws = wb.active
        ws.title = "Extracted Data"
        ws.append(headers)
        for cell in ws[1]:
            cell.font = Font(bold=True)
        for record in records:
            ws.append([record.get(header) for header in headers])
        wb.save(target)
    return target


class ExtractionWorker(QThread):
    log = Signal(object)
    data_item = Signal(object)
    complete = Signal(int, str)
    failure = Signal(str)

    def __init__(self, profile: Profile, settings: AppSettings, logger_instance: logging.Logger):
        super().__init__()
        self.profile = profile
        self.settings = settings
        self.logger = logger_instance

    def _log(self, level: LogLevel, text: str):
        self.log.emit(LogMessage(level=level, text=text))

    def run(self):
        profile = self.profile
        verbose = profile.debug_mode or self.settings.debug.enabled
        try:
            self._log(LogLevel.INFO, f"Loading {sanitize_url(profile.url)}")
            if profile.session_reference:
                self._log(LogLevel.WARNING,
                          f"Session '{profile.session_reference}' is not replayed by the static page engine")
            url = check_url(profile.url)
            html = fetch_page(url, self.settings.request_timeout)
            if self.settings.debug.advanced_logs:
                self._log(LogLevel.INFO, f"Fetched {len(html)} characters of HTML")

            records = extract_records(html, profile.extractors, base_url=url,
                                      log=self._log, warn_missing=verbose)
            self._log(LogLevel.INFO, f"Found {len(records)} records")

            for index, record in enumerate(records, start=1):
                if self.isInterruptionRequested():
                    self.logger.info("Extraction interrupted; dropping remaining records.")
                    return
                self.data_item.emit(record)
                self._log(LogLevel.INFO, f"Extracted record {index} of {len(records)}")

            if not records:
                self._log(LogLevel.WARNING, "No data found; nothing was exported")
                self.complete.emit(0, str(output_path(profile.file_name, self.settings.outputs_path)))
                return

            target = export_records(records, profile.file_name, profile.export_format,
                                    self.settings.outputs_path)
            self._log(LogLevel.SUCCESS, f"Saved {len(records)} records to {target}")
            self.complete.emit(len(records), str(target))
        except EngineFailure as e:
            self.logger.error(f"Extraction failed: {e.reason}")
            self.failure.emit(e.reason)
        except Exception as e:
            self.logger.error(f"Error in ExtractionWorker for {sanitize_url(profile.url)}: {e}", exc_info=True)
            self.failure.emit(f"{type(e).__name__}: {sanitize_text(str(e))}")


class StaticPageEngine(AutomationEngine):
    def __init__(self, settings: AppSettings, logger_instance=None):
        super().__init__()
        self.settings = settings
        self.logger = logger_instance if logger_instance else logging.getLogger("StaticPageEngine")
        self.worker: Optional[ExtractionWorker] = None

    def start_run(self, profile: Profile) -> None:
        if self.worker is not None and self.worker.isRunning():
            raise RunInProgressError("The engine is already running an extraction")
        check_url(profile.url)

        worker = ExtractionWorker(profile, self.settings, self.logger)
        worker.log.connect(self.events.log)
        worker.data_item.connect(self.events.data_item)
        worker.complete.connect(self.events.complete)
        worker.failure.connect(self.events.failure)
        self.worker = worker
        worker.start()

    def preview_extractor(self, url: str, extractor: Extractor,
                          limit: int = config.PREVIEW_SAMPLE_LIMIT) -> List[Optional[str]]:
        """First `limit` values `extractor` yields on `url`. Blocking."""
        html = fetch_page(check_url(url), self.settings.request_timeout)
        soup = BeautifulSoup(html, "html.parser")
        return [read_value(element, extractor, url) for element in _select(soup, extractor)[:limit]]

    def shutdown(self) -> None:
        if self.worker is not None and self.worker.isRunning():
            self.logger.info("Attempting to stop extraction worker on close...")
            self.worker.requestInterruption()
            if not self.worker.wait(3000):
                self.logger.warning("Extraction worker did not stop gracefully, terminating.")
                self.worker.terminate()
                self.worker.wait()
