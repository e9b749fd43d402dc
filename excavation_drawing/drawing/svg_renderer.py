"""
SVG rendering of report pages.

One SVG per page (SVG has no pagination). The viewBox is the page in mm,
so item coordinates are used as-is; font sizes are converted from points.

Line styles come from ``LineType.get_svg_style`` (stroke width and
dash pattern in mm).
"""

import logging
from pathlib import Path
from typing import List, Sequence, Union

import svgwrite

from excavation_drawing.config import FONT_BOLD, FONT_ITALIC, PT_TO_MM
from excavation_drawing.drawing.output import ReportExportError, atomic_write_bytes
from excavation_drawing.drawing.primitives import Line, Page, Polygon, Rect, Text
from excavation_drawing.model.colors import RGB

logger = logging.getLogger(__name__)

_TEXT_ANCHOR = {'left': 'start', 'center': 'middle', 'right': 'end'}


def _color(rgb: RGB) -> str:
    return svgwrite.rgb(*rgb)


def _font_attrs(font: str) -> dict:
    attrs = {'font_family': 'Helvetica, Arial, sans-serif'}
    if font == FONT_BOLD:
        attrs['font_weight'] = 'bold'
    elif font == FONT_ITALIC:
        attrs['font_style'] = 'italic'
    return attrs


def _add_item(dwg: svgwrite.Drawing, group, item) -> None:
    if isinstance(item, Rect):
        el = dwg.rect(insert=(item.x, item.y), size=(item.w, item.h),
                      fill=_color(item.fill) if item.fill else 'none')
        if item.radius > 0:
            el['rx'] = item.radius
            el['ry'] = item.radius
        if item.stroke:
            el.update({'stroke': _color(item.stroke), **item.line_type.get_svg_style()})
    elif isinstance(item, Polygon):
        el = dwg.polygon(points=item.points,
                         fill=_color(item.fill) if item.fill else 'none')
        if item.stroke:
            el.update({'stroke': _color(item.stroke), **item.line_type.get_svg_style()})
    elif isinstance(item, Line):
        el = dwg.line(start=item.start, end=item.end, stroke=_color(item.stroke),
                      **item.line_type.get_svg_style())
    elif isinstance(item, Text):
        el = dwg.text(item.text, insert=(item.x, item.y), fill=_color(item.color),
                      font_size=f"{item.size * PT_TO_MM:.3f}",
                      text_anchor=_TEXT_ANCHOR.get(item.align, 'start'),
                      **_font_attrs(item.font))
    else:
        raise TypeError(f"Unsupported page item: {type(item).__name__}")

    if item.tag:
        el['data-tag'] = item.tag
    group.add(el)


def page_to_svg(page: Page, filename: str = "page.svg") -> svgwrite.Drawing:
    """Build an svgwrite drawing for one page."""
    dwg = svgwrite.Drawing(
        filename,
        size=(f"{page.width}mm", f"{page.height}mm"),
        viewBox=f"0 0 {page.width} {page.height}",
        debug=False,
    )
    group = dwg.g(id=f"page-{page.number}")
    for item in page:
        _add_item(dwg, group, item)
    dwg.add(group)
    return dwg


def page_svg_path(base_path: Union[str, Path], page_number: int) -> Path:
    """``report.svg`` → ``report_p1.svg``."""
    base = Path(base_path)
    return base.with_name(f"{base.stem}_p{page_number}.svg")


def page_svg_bytes(page: Page, filename: str = "page.svg") -> bytes:
    """UTF-8 SVG document for one page.

    Raises:
        ReportExportError: if svgwrite rejects an item.
    """
    try:
        return page_to_svg(page, filename).tostring().encode('utf-8')
    except Exception as exc:
        raise ReportExportError(f"SVG rendering of page {page.number} failed: {exc}") from exc


def render_svg(pages: Sequence[Page], base_path: Union[str, Path]) -> List[Path]:
    """Write one SVG per page next to ``base_path``; returns the written paths."""
    written = []
    for page in pages:
        path = page_svg_path(base_path, page.number)
        written.append(atomic_write_bytes(path, page_svg_bytes(page, path.name)))
        logger.info("SVG saved: %s", path)
    return written
