"""Tests for extract_studio.integration.engine."""

from __future__ import annotations

import csv
import json
import logging
from unittest.mock import MagicMock, patch

import pytest
import requests
from conftest import SAMPLE_HTML, make_extractor, make_profile
from openpyxl import load_workbook

from extract_studio.core.errors import EngineFailure
from extract_studio.core.models import ExportFormat, ExtractorMode, LogLevel
from extract_studio.integration.engine import (ExtractionWorker, StaticPageEngine, check_url, export_records,
                                               extract_records)

PAGE_URL = "https://shop.test/list"


def page_response(html=SAMPLE_HTML):
    response = MagicMock()
    response.text = html
    response.raise_for_status = MagicMock()
    return response


class TestExtractRecords:
    def test_text_mode_strips(self):
        records = extract_records(SAMPLE_HTML, [make_extractor(selector=".product h2")])
        assert records == [{"title": "Widget"}, {"title": "Gadget"}, {"title": "Gizmo"}]

    def test_first_extractor_sets_record_count(self):
        extractors = [make_extractor("p", "price", ".product .price"), make_extractor("t", "title", ".product h2")]
        records = extract_records(SAMPLE_HTML, extractors)
        assert records == [{"price": "$10", "title": "Widget"}, {"price": "$20", "title": "Gadget"}]

    def test_shorter_match_lists_give_none(self):
        warnings = []
        extractors = [make_extractor("t", "title", ".product h2"), make_extractor("p", "price", ".price")]
        records = extract_records(SAMPLE_HTML, extractors, log=lambda level, text: warnings.append((level, text)))
        assert records[2] == {"title": "Gizmo", "price": None}
        assert warnings == [(LogLevel.WARNING, "Record 3: no value for 'price'")]

    def test_attribute_mode(self):
        extractors = [make_extractor("t", "title", ".product h2"),
                      make_extractor("s", "image", ".product img", ExtractorMode.ATTRIBUTE, "src"),
                      make_extractor("c", "classes", ".product img", ExtractorMode.ATTRIBUTE, "class")]
        records = extract_records(SAMPLE_HTML, extractors)
        assert [r["image"] for r in records] == ["/img/widget.png", None, None]
        assert records[0]["classes"] == "thumb large"

    def test_child_link_modes(self):
        extractors = [make_extractor("u", "link", ".product .links", ExtractorMode.CHILD_LINK_URL),
                      make_extractor("x", "label", ".product .links", ExtractorMode.CHILD_LINK_TEXT)]
        records = extract_records(SAMPLE_HTML, extractors, base_url=PAGE_URL)
        assert [r["link"] for r in records] == ["https://shop.test/p/widget", None,
                                                "https://other.example.org/gizmo"]
        assert [r["label"] for r in records] == ["Widget details", None, "Gizmo"]

    def test_no_matches(self):
        assert extract_records(SAMPLE_HTML, [make_extractor(selector=".missing")]) == []

    def test_invalid_first_selector_fails(self):
        with pytest.raises(EngineFailure, match="Invalid selector"):
            extract_records(SAMPLE_HTML, [make_extractor(selector="div[")])

    def test_invalid_later_selector_gives_none(self):
        warnings = []
        extractors = [make_extractor("a", "title", ".product h2"), make_extractor("b", "bad", "div[")]
        records = extract_records(SAMPLE_HTML, extractors, log=lambda level, text: warnings.append((level, text)),
                                  warn_missing=False)
        assert records == [{"title": "Widget", "bad": None}, {"title": "Gadget", "bad": None},
                           {"title": "Gizmo", "bad": None}]
        assert warnings == [(LogLevel.WARNING, "Error for field 'bad': Invalid selector for 'bad': div[")]

    def test_blank_text_is_none(self):
        html = "<div class='p'><h2>  </h2><span><a href='/x'> </a></span></div>"
        extractors = [make_extractor("t", "title", ".p h2"),
                      make_extractor("l", "label", ".p span", ExtractorMode.CHILD_LINK_TEXT)]
        assert extract_records(html, extractors) == [{"title": None, "label": None}]


class TestExportRecords:
    RECORDS = [{"title": "Widget", "price": "$10"}, {"title": "Gizmo", "price": None}]

    def test_json(self, tmp_path):
        target = export_records(self.RECORDS, "out.json", ExportFormat.JSON, tmp_path)
        assert json.loads(target.read_text(encoding="utf-8")) == self.RECORDS

    def test_csv_header_from_first_record(self, tmp_path):
        target = export_records(self.RECORDS, "out.csv", ExportFormat.CSV, tmp_path)
        with open(target, newline="", encoding="utf-8") as f:
            rows = list(csv.reader(f))
        assert rows == [["title", "price"], ["Widget", "$10"], ["Gizmo", ""]]

    def test_excel_bold_header(self, tmp_path):
        target = export_records(self.RECORDS, "out.xlsx", ExportFormat.EXCEL, tmp_path)
        ws = load_workbook(target).active
        assert [c.value for c in ws[1]] == ["title", "price"]
        assert ws["A1"].font.bold
        assert ws["A2"].value == "Widget"

    def test_file_name_is_sanitized(self, tmp_path):
        target = export_records(self.RECORDS, "../escape.json", ExportFormat.JSON, tmp_path / "outputs")
        assert target == tmp_path / "outputs" / "escape.json"


class TestCheckUrl:
    @pytest.mark.parametrize("url", ["ftp://a.com/x", "file:///etc/passwd", "javascript:alert(1)", "a.com"])
    def test_rejects_non_http(self, url):
        with pytest.raises(EngineFailure):
            check_url(url)

    def test_accepts_https(self):
        assert check_url("  https://a.com/x ") == "https://a.com/x"


class TestExtractionWorker:
    def _run(self, app_settings, profile):
        worker = ExtractionWorker(profile, app_settings, logging.getLogger("test"))
        events = {"log": [], "item": [], "complete": [], "failure": []}
        worker.log.connect(events["log"].append)
        worker.data_item.connect(events["item"].append)
        worker.complete.connect(lambda count, name: events["complete"].append((count, name)))
        worker.failure.connect(events["failure"].append)
        worker.run()
        return events

    def test_successful_run_exports(self, app_settings):
        profile = make_profile(url=PAGE_URL, file_name="products.json",
                               extractors=[make_extractor(selector=".product h2")])
        with patch("extract_studio.integration.engine.requests.get", return_value=page_response()) as get:
            events = self._run(app_settings, profile)
        get.assert_called_once()
        assert get.call_args.kwargs["timeout"] == app_settings.request_timeout
        assert [i["title"] for i in events["item"]] == ["Widget", "Gadget", "Gizmo"]
        count, path = events["complete"][0]
        assert count == 3
        assert json.loads(open(path, encoding="utf-8").read())[0] == {"title": "Widget"}
        assert events["failure"] == []
        assert events["log"][-1].level == LogLevel.SUCCESS

    def test_zero_records_writes_nothing(self, app_settings, tmp_path):
        profile = make_profile(url=PAGE_URL, file_name="none.json",
                               extractors=[make_extractor(selector=".missing")])
        with patch("extract_studio.integration.engine.requests.get", return_value=page_response()):
            events = self._run(app_settings, profile)
        assert events["complete"] == [(0, str(tmp_path / "outputs" / "none.json"))]
        assert not (tmp_path / "outputs" / "none.json").exists()

    def test_network_error_becomes_failure(self, app_settings):
        profile = make_profile(url=PAGE_URL, file_name="x.json")
        with patch("extract_studio.integration.engine.requests.get",
                   side_effect=requests.ConnectionError("connection refused")):
            events = self._run(app_settings, profile)
        assert events["complete"] == []
        assert events["failure"] == ["Failed to load page: connection refused"]


class TestStaticPageEngine:
    def test_start_rejects_bad_scheme(self, app_settings):
        engine = StaticPageEngine(app_settings)
        with pytest.raises(EngineFailure):
            engine.start_run(make_profile(url="ftp://example.com"))
        assert engine.worker is None

    def test_preview_extractor(self, app_settings):
        engine = StaticPageEngine(app_settings)
        extractor = make_extractor(selector=".product h2")
        with patch("extract_studio.integration.engine.requests.get", return_value=page_response()):
            assert engine.preview_extractor(PAGE_URL, extractor, limit=2) == ["Widget", "Gadget"]
