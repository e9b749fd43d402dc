"""
Report assembler: two A4 pages built from one dimensions/colors snapshot.

Page 1 - unfolded fabric layout, excavation dimensions, surface table,
overlap detail (only with sfido > 0) and the grand-total box.
Page 2 - isometric view with area callouts, technical specifications and
the color legend.

Blocks are stacked with a top-down cursor in page mm. Everything below the
flattened drawing follows its actual bottom edge, and the drawing region
gives up ``FLAT_OVERLAP_RESERVE_MM`` when the overlap detail has to fit on
the page as well.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Union

from excavation_drawing.config import (
    AMBER,
    CONTENT_TOP_MM,
    FLAT_OVERLAP_RESERVE_MM,
    FONT_BOLD,
    FONT_ITALIC,
    FONT_REGULAR,
    FOOTER_OFFSET_MM,
    HEADER_FILL,
    HEADER_HEIGHT_MM,
    ISO_REGION_HEIGHT_MM,
    ISO_REGION_SIDE_RESERVE_MM,
    ISO_REGION_VPAD_MM,
    LineType,
    OVERLAP_BOX_FILL,
    OVERLAP_TEXT,
    PAGE_HEIGHT_MM,
    PAGE_WIDTH_MM,
    SPEC_BOX_FILL,
    TABLE_HEADER_FILL,
    TEXT_ACCENT,
    TEXT_DARK,
    TEXT_FAINT,
    TEXT_MUTED,
    WHITE,
)
from excavation_drawing.drawing.compositor import annotation_items, composite_faces
from excavation_drawing.drawing.dxf_renderer import export_pattern_dxf
from excavation_drawing.drawing.flat_layout import draw_flat_layout, plan_flat_layout
from excavation_drawing.drawing.output import staged_output
from excavation_drawing.drawing.pdf_renderer import render_pdf_bytes
from excavation_drawing.drawing.primitives import Item, Page, Rect, Text
from excavation_drawing.drawing.svg_renderer import page_svg_bytes, page_svg_path
from excavation_drawing.logging_config import LogContext, log_timing
from excavation_drawing.model.dimensions import (
    ExcavationDimensions,
    SurfaceColors,
    SurfaceData,
    compute_overlap,
    compute_surfaces,
    compute_totals,
)
from excavation_drawing.project_config import ProjectConfig
from excavation_drawing.projection.isometric import IsoProjector

logger = logging.getLogger(__name__)

# (offset from the left margin, heading) of the summary table columns
TABLE_COLUMNS = (
    (3.0, "Colore"),
    (20.0, "Superficie"),
    (75.0, "Dimensioni"),
    (115.0, "Area unitaria"),
    (150.0, "Qtà"),
    (165.0, "Totale"),
)
TABLE_ROW_MM = 7.0

OVERLAP_BLOCK_MM = 32.0
TOTAL_BOX_MM = 20.0
SPEC_BOX_MM = 28.0
SPEC_BOX_OVERLAP_MM = 34.0
LEGEND_SPACING_MM = 38.0

CALCULATION_NOTE = "* Calcolo: 1 base + 2 pareti lunghe + 2 pareti corte"
MIX_NOTE = "(1 base + 2 pareti lunghe + 2 pareti corte)"


def _m(value: float) -> str:
    return f"{value:.2f} m"


def _m2(value: float) -> str:
    return f"{value:.2f} m²"


def report_filename(prefix: str, now: datetime) -> str:
    """``GeoViz_Scavo_2024-05-01.pdf`` for the given prefix and date."""
    return f"{prefix}_{now:%Y-%m-%d}.pdf"


class _PageBuilder:
    """Page plus the margin and a vertical cursor."""

    def __init__(self, number: int, title: str, margin: float):
        self.page = Page(number=number, title=title, width=PAGE_WIDTH_MM, height=PAGE_HEIGHT_MM)
        self.margin = margin
        self.y = CONTENT_TOP_MM

    @property
    def left(self) -> float:
        return self.margin

    @property
    def right(self) -> float:
        return self.page.width - self.margin

    @property
    def content_width(self) -> float:
        return self.page.width - 2 * self.margin

    def add(self, item: Item) -> None:
        self.page.add(item)

    def text(self, x: float, y: float, text: str, size: float = 10.0,
             font: str = FONT_REGULAR, color=TEXT_DARK, align: str = "left",
             tag: str = "") -> None:
        self.page.add(Text(x, y, text, size=size, font=font, color=color, align=align, tag=tag))

    def header(self, title: str, subtitle: str, stamp: str) -> None:
        self.add(Rect(0.0, 0.0, self.page.width, HEADER_HEIGHT_MM, fill=HEADER_FILL, tag="header"))
        self.text(self.left, 18.0, title, size=22.0, font=FONT_BOLD, color=WHITE, tag="header")
        self.text(self.left, 28.0, subtitle, size=11.0, color=WHITE, tag="header")
        self.text(self.right, 28.0, stamp, size=9.0, color=WHITE, align="right", tag="header")

    def section(self, text: str, size: float = 12.0) -> None:
        self.text(self.left, self.y, text, size=size, font=FONT_BOLD, tag="section")

    def footer(self, text: str) -> None:
        self.text(self.page.width / 2, self.page.height - FOOTER_OFFSET_MM, text,
                  size=7.0, color=TEXT_FAINT, align="center", tag="footer")


# ---------------------------------------------------------------------------
# Page 1
# ---------------------------------------------------------------------------

def _dimensions_block(b: _PageBuilder, dims: ExcavationDimensions) -> None:
    b.section("Dimensioni Scavo")
    b.y += 7.0
    b.text(b.left, b.y,
           f"Lunghezza (L): {_m(dims.length)}  |  Larghezza (W): {_m(dims.width)}  |  "
           f"Profondità (D): {_m(dims.depth)}",
           color=TEXT_MUTED, tag="dimensions")
    if dims.has_overlap:
        b.y += 6.0
        b.text(b.left, b.y, f"Sfido per lato (S): {_m(dims.sfido)}",
               color=OVERLAP_TEXT, tag="overlap-dimensions")
    b.y += 12.0


def _table_row(b: _PageBuilder, surface: SurfaceData, colors: SurfaceColors) -> None:
    c_swatch, c_name, c_dims, c_area, c_qty, c_total = (offset for offset, _ in TABLE_COLUMNS)
    tag = f"table-row:{surface.id}"
    b.add(Rect(b.left + c_swatch, b.y - 3.5, 10.0, 5.0, fill=colors.rgb(surface.id),
               stroke=TEXT_FAINT, line_type=LineType.THIN, tag=tag))
    b.text(b.left + c_name, b.y, surface.short_name, size=9.0, tag=tag)
    b.text(b.left + c_dims, b.y, surface.dimensions_label, size=9.0, tag=tag)
    b.text(b.left + c_area, b.y, _m2(surface.area), size=9.0, tag=tag)
    b.text(b.left + c_qty, b.y, f"× {surface.quantity}", size=9.0, tag=tag)
    b.text(b.left + c_total, b.y, _m2(surface.subtotal), size=9.0, font=FONT_BOLD, tag=tag)
    b.y += TABLE_ROW_MM


def _summary_table(b: _PageBuilder, dims: ExcavationDimensions, colors: SurfaceColors) -> None:
    b.section("Riepilogo Superfici TNT")
    b.y += 8.0
    b.add(Rect(b.left, b.y - 5.0, b.content_width, 7.0, fill=TABLE_HEADER_FILL, tag="table-header"))
    for offset, heading in TABLE_COLUMNS:
        b.text(b.left + offset, b.y, heading, size=8.0, font=FONT_BOLD,
               color=TEXT_MUTED, tag="table-header")
    b.y += 8.0
    for surface in compute_surfaces(dims, colors):
        _table_row(b, surface, colors)
    b.y += 5.0


def _overlap_block(b: _PageBuilder, dims: ExcavationDimensions) -> None:
    overlap = compute_overlap(dims)
    tag = "overlap-detail"
    top = b.y
    b.add(Rect(b.left, top, b.content_width, OVERLAP_BLOCK_MM, fill=OVERLAP_BOX_FILL,
               stroke=AMBER, line_type=LineType.THIN, radius=2.0, tag=tag))
    x = b.left + 5.0
    b.text(x, top + 7.0, "Dettaglio Sfido (sormonto per incollaggio)", size=10.0,
           font=FONT_BOLD, color=OVERLAP_TEXT, tag=tag)
    b.text(x, top + 14.0,
           f"Strisce pareti lunghe: 2 × {_m(dims.length)} × {_m(dims.sfido)} = "
           f"{_m2(overlap.long_strip_area)}",
           size=9.0, color=OVERLAP_TEXT, tag=tag)
    b.text(x, top + 20.0,
           f"Strisce pareti corte: 2 × {_m(dims.width)} × {_m(dims.sfido)} = "
           f"{_m2(overlap.short_strip_area)}",
           size=9.0, color=OVERLAP_TEXT, tag=tag)
    b.text(x, top + 26.0, f"Totale sfido: {_m2(overlap.total_strip_area)}",
           size=9.0, font=FONT_BOLD, color=OVERLAP_TEXT, tag=tag)
    b.y = top + OVERLAP_BLOCK_MM + 5.0


def _total_box(b: _PageBuilder, dims: ExcavationDimensions) -> None:
    totals = compute_totals(dims)
    tag = "total-box"
    top = b.y
    b.add(Rect(b.left, top, b.content_width, TOTAL_BOX_MM, fill=TEXT_DARK, radius=3.0, tag=tag))
    b.text(b.left + 5.0, top + 8.0, "TOTALE FORNITURA TNT", size=10.0, color=WHITE, tag=tag)
    b.text(b.left + 5.0, top + 16.0, _m2(totals.total_area), size=18.0,
           font=FONT_BOLD, color=WHITE, tag=tag)

    if dims.has_overlap:
        x = b.left + 95.0
        b.text(x, top + 8.0, f"TOTALE CON SFIDO ({_m(dims.sfido)})", size=10.0,
               color=AMBER, tag="total-box:overlap")
        b.text(x, top + 16.0, _m2(totals.total_area_with_overlap), size=18.0,
               font=FONT_BOLD, color=AMBER, tag="total-box:overlap")
    else:
        b.text(b.right - 5.0, top + 16.0, CALCULATION_NOTE, size=8.0,
               font=FONT_ITALIC, color=TEXT_FAINT, align="right", tag=tag)
    b.y = top + TOTAL_BOX_MM


def build_flat_page(
    dims: ExcavationDimensions,
    colors: SurfaceColors,
    config: ProjectConfig,
    now: datetime,
) -> Page:
    """Page 1: the unfolded layout and the surface summary."""
    b = _PageBuilder(1, "Vista Sviluppata", config.page.margin_mm)
    b.header(config.report.title, config.report.subtitle_flat,
             f"Data: {now:%d/%m/%Y} - Ora: {now:%H:%M:%S}")

    b.section("Vista Sviluppata delle Superfici TNT", size=14.0)
    b.y += 8.0

    avail_h = config.page.flat_max_height_mm
    if dims.has_overlap:
        avail_h -= FLAT_OVERLAP_RESERVE_MM
    layout = plan_flat_layout(
        dims,
        avail_w=b.content_width,
        avail_h=avail_h,
        origin_x=b.left,
        origin_y=b.y + 5.0,
        margin_factor=config.page.flat_margin_factor,
        min_draw=config.overlap.min_draw_mm,
        min_label=config.overlap.min_label_mm,
    )
    b.page.extend(draw_flat_layout(layout, dims, colors))
    b.y = layout.bottom + 15.0

    _dimensions_block(b, dims)
    _summary_table(b, dims, colors)
    if dims.has_overlap:
        _overlap_block(b, dims)
    _total_box(b, dims)

    b.footer("Pagina 1/2 - Vista Sviluppata")
    logger.debug("Page 1: %d items, flat scale %.3f mm/m", len(b.page), layout.scale)
    return b.page


# ---------------------------------------------------------------------------
# Page 2
# ---------------------------------------------------------------------------

def _spec_block(b: _PageBuilder, dims: ExcavationDimensions, colors: SurfaceColors) -> None:
    totals = compute_totals(dims)
    tag = "specs"
    b.section("Specifiche Tecniche")
    b.y += 8.0
    box_h = SPEC_BOX_OVERLAP_MM if dims.has_overlap else SPEC_BOX_MM
    b.add(Rect(b.left, b.y - 3.0, b.content_width, box_h, fill=SPEC_BOX_FILL,
               stroke=TABLE_HEADER_FILL, line_type=LineType.THIN, radius=2.0, tag=tag))

    x = b.left + 5.0
    y = b.y + 4.0
    b.text(x, y, "Dimensioni:", size=9.0, color=TEXT_MUTED, tag=tag)
    b.text(b.left + 30.0, y,
           f"{dims.length:.2f}m × {dims.width:.2f}m × {dims.depth:.2f}m (L×W×D)",
           size=9.0, font=FONT_BOLD, tag=tag)
    b.text(b.left + 110.0, y, "Volume:", size=9.0, color=TEXT_MUTED, tag=tag)
    b.text(b.left + 128.0, y, f"{totals.volume:.2f} m³", size=9.0, font=FONT_BOLD, tag=tag)

    y += 8.0
    b.text(x, y, "Superficie TNT Totale:", size=9.0, color=TEXT_MUTED, tag=tag)
    b.text(b.left + 45.0, y, _m2(totals.total_area), size=9.0, font=FONT_BOLD,
           color=TEXT_ACCENT, tag=tag)
    b.text(b.left + 70.0, y, MIX_NOTE, size=8.0, color=TEXT_FAINT, tag=tag)

    if dims.has_overlap:
        overlap = compute_overlap(dims)
        y += 6.0
        b.text(x, y, f"Con sfido ({_m(dims.sfido)}):", size=9.0, color=OVERLAP_TEXT,
               tag="specs:overlap")
        b.text(b.left + 45.0, y, _m2(totals.total_area_with_overlap), size=9.0,
               font=FONT_BOLD, color=OVERLAP_TEXT, tag="specs:overlap")
        b.text(b.left + 70.0, y,
               f"(+ {_m2(overlap.total_strip_area)} di strisce perimetrali)",
               size=8.0, color=TEXT_FAINT, tag="specs:overlap")

    y += 8.0
    _legend(b, y, dims, colors)
    b.y += box_h


def _legend(b: _PageBuilder, y: float, dims: ExcavationDimensions, colors: SurfaceColors) -> None:
    b.text(b.left + 5.0, y, "Legenda:", size=9.0, color=TEXT_MUTED, tag="legend")
    entries = [(s.id, s.short_name) for s in compute_surfaces(dims, colors)]
    if dims.has_overlap:
        entries.append(('sfido', "Sfido"))

    for i, (color_id, name) in enumerate(entries):
        x = b.left + 28.0 + i * LEGEND_SPACING_MM
        tag = "legend:overlap" if color_id == 'sfido' else "legend"
        b.add(Rect(x, y - 3.0, 8.0, 4.0, fill=colors.rgb(color_id), tag=tag))
        b.text(x + 10.0, y, name, size=8.0, tag=tag)


def build_iso_page(
    dims: ExcavationDimensions,
    colors: SurfaceColors,
    config: ProjectConfig,
    now: datetime,
) -> Page:
    """Page 2: the isometric view and the technical specifications."""
    b = _PageBuilder(2, "Vista 3D Isometrica", config.page.margin_mm)
    b.header(config.report.title, config.report.subtitle_iso, f"Data: {now:%d/%m/%Y}")

    # Callout text lives in the side reserves; the solid stays between them.
    annotation_region = (b.left, b.y, b.content_width, ISO_REGION_HEIGHT_MM)
    drawing_region = (
        b.left + ISO_REGION_SIDE_RESERVE_MM,
        b.y + ISO_REGION_VPAD_MM,
        b.content_width - 2 * ISO_REGION_SIDE_RESERVE_MM,
        ISO_REGION_HEIGHT_MM - 2 * ISO_REGION_VPAD_MM,
    )
    projector = IsoProjector.fit(dims, drawing_region, config.page.iso_margin_factor)

    b.page.extend(composite_faces(projector, dims, colors, config.overlap.min_draw_mm))
    b.page.extend(annotation_items(projector, dims, annotation_region))
    b.y += ISO_REGION_HEIGHT_MM + 8.0

    _spec_block(b, dims, colors)

    b.footer("Pagina 2/2 - Vista 3D Isometrica | Documento generato da GeoViz Dynamic")
    logger.debug("Page 2: %d items, iso scale %.3f mm/m", len(b.page), projector.scale)
    return b.page


# ---------------------------------------------------------------------------
# Report
# ---------------------------------------------------------------------------

def build_report(
    dims: ExcavationDimensions,
    colors: SurfaceColors,
    config: Optional[ProjectConfig] = None,
    now: Optional[datetime] = None,
) -> List[Page]:
    """Both report pages for one snapshot. Always exactly two pages."""
    config = config or ProjectConfig()
    now = now or datetime.now()
    return [
        build_flat_page(dims, colors, config, now),
        build_iso_page(dims, colors, config, now),
    ]


def export_report(
    dims: ExcavationDimensions,
    colors: SurfaceColors,
    output_dir: Union[str, Path] = ".",
    config: Optional[ProjectConfig] = None,
    now: Optional[datetime] = None,
) -> Path:
    """Build the report and write it under ``output_dir``.

    Always writes the PDF; SVG pages and the DXF cutting pattern are added
    when listed in ``config.output.formats``. All files are staged first
    and moved into place together, so a failure in any of them leaves the
    directory as it was.

    Returns:
        Path of the PDF

    Raises:
        ReportExportError: if any artifact cannot be rendered or written
    """
    config = config or ProjectConfig()
    now = now or datetime.now()
    output_dir = Path(output_dir)
    pdf_path = output_dir / report_filename(config.report.filename_prefix, now)

    with LogContext(report=pdf_path.name):
        with log_timing(logger, "Building report pages", length=dims.length,
                        width=dims.width, depth=dims.depth, sfido=dims.sfido):
            pages = build_report(dims, colors, config, now)

        with staged_output() as staging:
            with log_timing(logger, "Rendering PDF", path=str(pdf_path)) as info:
                staging.stage(pdf_path).write_bytes(
                    render_pdf_bytes(pages, title=config.report.title))
                info['pages'] = len(pages)

            if 'svg' in config.output.formats:
                with log_timing(logger, "Rendering SVG pages"):
                    svg_base = pdf_path.with_suffix('.svg')
                    for page in pages:
                        svg_path = page_svg_path(svg_base, page.number)
                        staging.stage(svg_path).write_bytes(page_svg_bytes(page, svg_path.name))

            if 'dxf' in config.output.formats:
                with log_timing(logger, "Rendering DXF pattern"):
                    export_pattern_dxf(dims, colors, staging.stage(pdf_path.with_suffix('.dxf')))

        logger.info("Report exported: %s", pdf_path,
                    extra={"formats": list(config.output.formats)})

    return pdf_path
