"""
Unit tests for excavation_drawing.drawing.pdf_renderer module.

Tests:
- Byte rendering of hand-built pages
- Page count
- Atomic file output
- Error wrapping
"""

import pytest

from excavation_drawing.config import LineType
from excavation_drawing.drawing.output import ReportExportError
from excavation_drawing.drawing.pdf_renderer import render_pdf, render_pdf_bytes
from excavation_drawing.drawing.primitives import Line, Page, Polygon, Rect, Text

from conftest import count_pdf_pages


def _sample_page(number: int = 1) -> Page:
    page = Page(number=number, title="sample", width=210.0, height=297.0)
    page.extend([
        Rect(0, 0, 210, 40, fill=(79, 70, 229), tag="header"),
        Rect(15, 60, 50, 30, fill=(59, 130, 246), stroke=(255, 255, 255),
             line_type=LineType.FACE_BORDER, tag="face:base"),
        Rect(15, 100, 180, 20, fill=(30, 41, 59), radius=3.0, tag="total-box"),
        Polygon([(100, 150), (130, 160), (110, 180)], fill=(239, 68, 68), tag="iso-face:back"),
        Line((15, 200), (195, 200), line_type=LineType.FOLD, tag="fold"),
        Text(105, 20, "GeoViz Dynamic", size=22, font="Helvetica-Bold", align="center"),
        Text(195, 28, "47.00 m²", size=9, align="right"),
        Text(15, 250, "Qtà × 2", size=9),
    ])
    return page


class TestRenderPdfBytes:
    """Tests for render_pdf_bytes."""

    def test_is_pdf(self):
        data = render_pdf_bytes([_sample_page()])
        assert data.startswith(b"%PDF")
        assert data.rstrip().endswith(b"%%EOF")

    def test_page_count(self):
        data = render_pdf_bytes([_sample_page(1), _sample_page(2)])
        assert count_pdf_pages(data) == 2

    def test_empty_page(self):
        page = Page(number=1, title="empty", width=210.0, height=297.0)
        assert count_pdf_pages(render_pdf_bytes([page])) == 1

    def test_no_pages_rejected(self):
        with pytest.raises(ReportExportError):
            render_pdf_bytes([])

    def test_unknown_font_wrapped(self):
        page = Page(number=1, title="bad", width=210.0, height=297.0)
        page.add(Text(10, 10, "x", font="NoSuchFont-Regular"))
        with pytest.raises(ReportExportError):
            render_pdf_bytes([page])

    def test_degenerate_polygon_skipped(self):
        page = Page(number=1, title="p", width=210.0, height=297.0)
        page.add(Polygon([(10, 10)], fill=(0, 0, 0)))
        assert count_pdf_pages(render_pdf_bytes([page])) == 1


class TestRenderPdf:
    """Tests for render_pdf."""

    def test_writes_file(self, tmp_path):
        path = render_pdf([_sample_page(1), _sample_page(2)], tmp_path / "report.pdf")
        assert path.exists()
        assert count_pdf_pages(path.read_bytes()) == 2

    def test_no_temp_files_left(self, tmp_path):
        render_pdf([_sample_page()], tmp_path / "report.pdf")
        assert [p.name for p in tmp_path.iterdir()] == ["report.pdf"]

    def test_failure_keeps_previous_file(self, tmp_path):
        path = tmp_path / "report.pdf"
        path.write_bytes(b"previous")
        with pytest.raises(ReportExportError):
            render_pdf([], path)
        assert path.read_bytes() == b"previous"
