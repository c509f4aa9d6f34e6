# tests/test_export.py
import pytest

from jobrisk.services import export as export_mod
from jobrisk.services.export import (
    ExportError, ReportExporter, render_single_page_pdf, report_filename,
)
from jobrisk.services.models import AssessmentResult


@pytest.mark.parametrize("name, expected", [
    ("Jane Doe", "AI-Risk-Assessment-Jane-Doe.pdf"),
    ("  Jean   Paul  Smith ", "AI-Risk-Assessment-Jean-Paul-Smith.pdf"),
    ("Ana\tMaria", "AI-Risk-Assessment-Ana-Maria.pdf"),
    (None, "AI-Risk-Assessment-Profile.pdf"),
    ("   ", "AI-Risk-Assessment-Profile.pdf"),
])
def test_report_filename(name, expected):
    assert report_filename(name) == expected

def test_report_filename_prefix_and_ext():
    assert report_filename("Jane", prefix="Report", ext="png") == "Report-Jane.png"


class _FakeDoc:
    def __init__(self, pages, payload):
        self.pages = [object()] * pages
        self._payload = payload

    def write_pdf(self):
        return self._payload


class _FakeHTML:
    """Records the page heights it was rendered at; content spans `pages` A4 pages."""
    pages = 1
    heights = []

    def __init__(self, string, base_url=None):
        self.string = string

    def render(self, stylesheets):
        css = stylesheets[0]
        _FakeHTML.heights.append(css.height)
        if css.height == export_mod.PAGE_HEIGHT_MM:
            return _FakeDoc(_FakeHTML.pages, b"%PDF-a4")
        return _FakeDoc(1, b"%PDF-tall")


class _FakeCSS:
    def __init__(self, height):
        self.height = height


@pytest.fixture
def fake_weasy(monkeypatch):
    _FakeHTML.heights = []
    _FakeHTML.pages = 1
    monkeypatch.setattr(export_mod, "HTML", _FakeHTML)
    monkeypatch.setattr(export_mod, "_stylesheet", lambda pages: _FakeCSS(export_mod.PAGE_HEIGHT_MM * pages))
    return _FakeHTML

def test_short_report_rendered_once(fake_weasy):
    assert render_single_page_pdf("<p>hi</p>") == b"%PDF-a4"
    assert fake_weasy.heights == [297]

def test_long_report_stretched_onto_one_page(fake_weasy):
    fake_weasy.pages = 3
    assert render_single_page_pdf("<p>long</p>") == b"%PDF-tall"
    assert fake_weasy.heights == [297, 297 * 3]

def test_runaway_report_is_refused(fake_weasy):
    fake_weasy.pages = export_mod.MAX_PAGES + 1
    with pytest.raises(ExportError):
        render_single_page_pdf("<p>huge</p>")
    assert fake_weasy.heights == [297]

def test_export_css_hides_controls():
    assert ".no-export" in export_mod.EXPORT_CSS
    assert "display: none" in export_mod.EXPORT_CSS


@pytest.fixture
def result(sample_payload):
    return AssessmentResult.from_dict(sample_payload)

def test_exporter_names_file_after_subject(result, fake_weasy):
    rendered = []
    exporter = ReportExporter(lambda r: rendered.append(r) or "<html/>")
    report = exporter(result)
    assert rendered == [result]
    assert report.filename == "AI-Risk-Assessment-Jane-Doe.pdf"
    assert report.data == b"%PDF-a4"
    assert report.mimetype == "application/pdf"

def test_exporter_falls_back_to_profile(sample_payload, fake_weasy):
    sample_payload["name"] = None
    report = ReportExporter(lambda r: "<html/>", prefix="Risk").export(AssessmentResult.from_dict(sample_payload))
    assert report.filename == "Risk-Profile.pdf"

def test_render_failure_becomes_export_error(result):
    def boom(_r):
        raise RuntimeError("template blew up")

    with pytest.raises(ExportError) as exc:
        ReportExporter(boom).export(result)
    assert isinstance(exc.value.__cause__, RuntimeError)

def test_pdf_failure_becomes_export_error(result, monkeypatch):
    def broken(html, base_url=None):
        raise OSError("fonts missing")

    monkeypatch.setattr(export_mod, "render_single_page_pdf", broken)
    with pytest.raises(ExportError):
        ReportExporter(lambda r: "<html/>").export(result)

def test_empty_pdf_is_an_error(result, monkeypatch):
    monkeypatch.setattr(export_mod, "render_single_page_pdf", lambda html, base_url=None: b"")
    with pytest.raises(ExportError):
        ReportExporter(lambda r: "<html/>").export(result)
