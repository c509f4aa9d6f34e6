# jobrisk/services/export.py
from __future__ import annotations

import logging, re
from dataclasses import dataclass
from typing import Callable

from weasyprint import CSS, HTML

from .models import AssessmentResult

logger = logging.getLogger(__name__)

DEFAULT_PREFIX = "AI-Risk-Assessment"
PAGE_WIDTH_MM = 210
PAGE_HEIGHT_MM = 297
MAX_PAGES = 20

EXPORT_CSS = """
@page {{ size: {width}mm {height}mm; margin: 0; }}
html, body {{ background: #f8fafc !important; margin: 0; }}
* {{ box-shadow: none !important; animation: none !important; transition: none !important; }}
.no-export {{ display: none !important; }}
.report {{ padding: 12mm; }}
section, .card {{ break-inside: avoid; }}
"""


class ExportError(Exception):
    pass


@dataclass(frozen=True)
class ExportedReport:
    filename: str
    data: bytes
    mimetype: str = "application/pdf"


def report_filename(name: str | None, prefix: str = DEFAULT_PREFIX, ext: str = "pdf") -> str:
    subject = re.sub(r"\s+", "-", (name or "").strip()) or "Profile"
    return f"{prefix}-{subject}.{ext}"


def _stylesheet(pages: int) -> CSS:
    return CSS(string=EXPORT_CSS.format(width=PAGE_WIDTH_MM, height=PAGE_HEIGHT_MM * pages))


def render_single_page_pdf(html: str, base_url: str | None = None) -> bytes:
    """
    Lay the snapshot out on one page as tall as the content needs.

    A first pass at A4 tells how many pages the content spans; a second pass
    stacks that height onto a single page.
    """
    doc = HTML(string=html, base_url=base_url)
    first = doc.render(stylesheets=[_stylesheet(1)])
    pages = len(first.pages)
    if pages <= 1:
        return first.write_pdf()
    if pages > MAX_PAGES:
        raise ExportError(f"Report too long to export ({pages} pages)")
    tall = doc.render(stylesheets=[_stylesheet(pages)])
    return tall.write_pdf()


class ReportExporter:
    """Turns a result into a downloadable single-page PDF of the results view."""

    def __init__(self, render_html: Callable[[AssessmentResult], str], base_url: str | None = None,
                 prefix: str = DEFAULT_PREFIX) -> None:
        self._render_html = render_html
        self._base_url = base_url
        self.prefix = prefix

    def export(self, result: AssessmentResult) -> ExportedReport:
        filename = report_filename(result.name, prefix=self.prefix)
        try:
            html = self._render_html(result)
            data = render_single_page_pdf(html, base_url=self._base_url)
        except ExportError:
            logger.warning("export refused for %s", filename)
            raise
        except Exception as e:
            logger.exception("export failed for %s", filename)
            raise ExportError("Could not generate the PDF report. Please try again.") from e
        if not data:
            raise ExportError("Could not generate the PDF report. Please try again.")
        logger.info("exported %s (%d bytes)", filename, len(data))
        return ExportedReport(filename=filename, data=data)

    __call__ = export
