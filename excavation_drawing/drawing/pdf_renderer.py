"""
PDF rendering of report pages with reportlab.

Page items are in mm with a top-left origin; reportlab works in points
with a bottom-left origin, so every y is flipped against the page height.
All pages go into one document, in order.
"""

import io
import logging
from pathlib import Path
from typing import Sequence, Union

from reportlab.lib.units import mm
from reportlab.pdfgen import canvas as pdf_canvas

from excavation_drawing.config import LineType, REPORT_TITLE
from excavation_drawing.drawing.output import ReportExportError, atomic_write_bytes
from excavation_drawing.drawing.primitives import Line, Page, Polygon, Rect, Text
from excavation_drawing.model.colors import RGB

logger = logging.getLogger(__name__)


def _rgb(rgb: RGB):
    r, g, b = rgb
    return r / 255.0, g / 255.0, b / 255.0


class _PageWriter:
    """Draw one ``Page`` on a reportlab canvas."""

    def __init__(self, c: pdf_canvas.Canvas, page: Page):
        self.c = c
        self.page = page

    def X(self, x: float) -> float:
        return x * mm

    def Y(self, y: float) -> float:
        return (self.page.height - y) * mm

    def _stroke_style(self, color: RGB, line_type: LineType) -> None:
        self.c.setStrokeColorRGB(*_rgb(color))
        self.c.setLineWidth(line_type.stroke_width * mm)
        if line_type.dash:
            self.c.setDash([d * mm for d in line_type.dash], 0)
        else:
            self.c.setDash([], 0)

    def rect(self, item: Rect) -> None:
        fill = item.fill is not None
        stroke = item.stroke is not None
        if fill:
            self.c.setFillColorRGB(*_rgb(item.fill))
        if stroke:
            self._stroke_style(item.stroke, item.line_type)
        x, y = self.X(item.x), self.Y(item.y + item.h)
        w, h = item.w * mm, item.h * mm
        if item.radius > 0:
            self.c.roundRect(x, y, w, h, item.radius * mm, stroke=int(stroke), fill=int(fill))
        else:
            self.c.rect(x, y, w, h, stroke=int(stroke), fill=int(fill))

    def polygon(self, item: Polygon) -> None:
        if len(item.points) < 2:
            return
        fill = item.fill is not None
        stroke = item.stroke is not None
        if fill:
            self.c.setFillColorRGB(*_rgb(item.fill))
        if stroke:
            self._stroke_style(item.stroke, item.line_type)
        path = self.c.beginPath()
        x0, y0 = item.points[0]
        path.moveTo(self.X(x0), self.Y(y0))
        for x, y in item.points[1:]:
            path.lineTo(self.X(x), self.Y(y))
        path.close()
        self.c.drawPath(path, stroke=int(stroke), fill=int(fill))

    def line(self, item: Line) -> None:
        self._stroke_style(item.stroke, item.line_type)
        (x1, y1), (x2, y2) = item.start, item.end
        self.c.line(self.X(x1), self.Y(y1), self.X(x2), self.Y(y2))

    def text(self, item: Text) -> None:
        self.c.setFont(item.font, item.size)
        self.c.setFillColorRGB(*_rgb(item.color))
        x, y = self.X(item.x), self.Y(item.y)
        if item.align == 'center':
            self.c.drawCentredString(x, y, item.text)
        elif item.align == 'right':
            self.c.drawRightString(x, y, item.text)
        else:
            self.c.drawString(x, y, item.text)

    def draw(self) -> None:
        for item in self.page:
            if isinstance(item, Rect):
                self.rect(item)
            elif isinstance(item, Polygon):
                self.polygon(item)
            elif isinstance(item, Line):
                self.line(item)
            elif isinstance(item, Text):
                self.text(item)
            else:
                raise TypeError(f"Unsupported page item: {type(item).__name__}")


def render_pdf_bytes(pages: Sequence[Page], title: str = REPORT_TITLE) -> bytes:
    """Serialize ``pages`` into a single PDF document.

    Raises:
        ReportExportError: if reportlab fails or there are no pages.
    """
    if not pages:
        raise ReportExportError("No pages to render")

    buffer = io.BytesIO()
    try:
        first = pages[0]
        c = pdf_canvas.Canvas(buffer, pagesize=(first.width * mm, first.height * mm))
        c.setTitle(title)
        c.setAuthor(REPORT_TITLE)
        for page in pages:
            c.setPageSize((page.width * mm, page.height * mm))
            _PageWriter(c, page).draw()
            c.showPage()
        c.save()
    except Exception as exc:
        raise ReportExportError(f"PDF rendering failed: {exc}") from exc

    return buffer.getvalue()


def render_pdf(pages: Sequence[Page], path: Union[str, Path],
               title: str = REPORT_TITLE) -> Path:
    """Render ``pages`` and write the PDF atomically to ``path``."""
    data = render_pdf_bytes(pages, title)
    out = atomic_write_bytes(path, data)
    logger.info("PDF saved: %s (%d pages)", out, len(pages))
    return out
