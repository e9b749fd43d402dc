"""
DXF export of the unfolded fabric pattern at 1:1 (millimeters).

Uses the same planner as the report's flattened view, at 1000 mm per
meter, so the cutting outline matches page 1 exactly. Overlap strips are
always included when sfido > 0; page visibility thresholds do not apply
to a full-size pattern.

Layer naming:
- BASE, SIDES_LONG, SIDES_SHORT - face outlines
- SFIDO - overlap strips
- FOLD - fold lines (dashed)
- TEXT - labels

DXF y grows upward, so page-style y coordinates are negated.

Usage:
    renderer = DxfRenderer()
    renderer.create_drawing()
    renderer.add_rectangle((0, 0), 4000, 3000, DxfStyle(layer='BASE'))
    renderer.save('pattern.dxf')
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple, Union

import ezdxf
from ezdxf import colors as dxf_colors
from ezdxf import units
from ezdxf.enums import TextEntityAlignment

from excavation_drawing.drawing.flat_layout import FACE_TITLES, layout_at_scale
from excavation_drawing.drawing.output import ReportExportError, atomic_path
from excavation_drawing.model.colors import RGB
from excavation_drawing.model.dimensions import ExcavationDimensions, SurfaceColors

logger = logging.getLogger(__name__)

MM_PER_METER = 1000.0
PATTERN_TEXT_HEIGHT = 50.0

PATTERN_LAYERS = {
    'BASE': {'color': 5, 'linetype': 'CONTINUOUS', 'lineweight': 50},
    'SIDES_LONG': {'color': 1, 'linetype': 'CONTINUOUS', 'lineweight': 50},
    'SIDES_SHORT': {'color': 3, 'linetype': 'CONTINUOUS', 'lineweight': 50},
    'SFIDO': {'color': 2, 'linetype': 'CONTINUOUS', 'lineweight': 35},
    'FOLD': {'color': 8, 'linetype': 'DASHED', 'lineweight': 25},
    'TEXT': {'color': 7, 'linetype': 'CONTINUOUS', 'lineweight': 25},
}

SURFACE_LAYER = {
    'bottom': 'BASE',
    'sides_long': 'SIDES_LONG',
    'sides_short': 'SIDES_SHORT',
}


@dataclass
class DxfStyle:
    """Style parameters for DXF entities."""
    layer: str = 'BASE'
    color: Optional[int] = None  # ACI, None = ByLayer
    true_color: Optional[RGB] = None
    lineweight: Optional[int] = None  # 0.01 mm units, None = ByLayer

    def attribs(self) -> dict:
        attribs = {'layer': self.layer}
        if self.color is not None:
            attribs['color'] = self.color
        if self.true_color is not None:
            attribs['true_color'] = dxf_colors.rgb2int(self.true_color)
        if self.lineweight is not None:
            attribs['lineweight'] = self.lineweight
        return attribs


class DxfRenderer:
    """Thin ezdxf wrapper for the cutting pattern."""

    def __init__(self):
        self.doc: Optional[ezdxf.document.Drawing] = None
        self.msp = None

    def create_drawing(self, dxf_version: str = 'R2010') -> None:
        self.doc = ezdxf.new(dxf_version, setup=True, units=units.MM)
        self.msp = self.doc.modelspace()
        for name, props in PATTERN_LAYERS.items():
            self.doc.layers.add(
                name,
                color=props['color'],
                linetype=props['linetype'],
                lineweight=props['lineweight'],
            )

    def _require(self) -> None:
        if self.msp is None:
            raise RuntimeError("Drawing not created. Call create_drawing() first.")

    def add_line(self, start: Tuple[float, float], end: Tuple[float, float],
                 style: Optional[DxfStyle] = None) -> None:
        self._require()
        self.msp.add_line(start, end, dxfattribs=(style or DxfStyle(layer='FOLD')).attribs())

    def add_polyline(self, points: List[Tuple[float, float]], closed: bool = False,
                     style: Optional[DxfStyle] = None) -> None:
        self._require()
        if len(points) < 2:
            return
        self.msp.add_lwpolyline(points, close=closed, dxfattribs=(style or DxfStyle()).attribs())

    def add_rectangle(self, corner: Tuple[float, float], width: float, height: float,
                      style: Optional[DxfStyle] = None) -> None:
        """Closed rectangle from its bottom-left ``corner``."""
        x, y = corner
        self.add_polyline(
            [(x, y), (x + width, y), (x + width, y + height), (x, y + height)],
            closed=True, style=style,
        )

    def add_text(self, text: str, position: Tuple[float, float],
                 height: float = PATTERN_TEXT_HEIGHT,
                 style: Optional[DxfStyle] = None) -> None:
        """Text centered on ``position``."""
        self._require()
        attribs = (style or DxfStyle(layer='TEXT')).attribs()
        attribs['height'] = height
        self.msp.add_text(text, dxfattribs=attribs).set_placement(
            position, align=TextEntityAlignment.MIDDLE_CENTER
        )

    def save(self, path: Union[str, Path]) -> Path:
        if self.doc is None:
            raise RuntimeError("Drawing not created. Call create_drawing() first.")
        with atomic_path(path) as tmp:
            self.doc.saveas(str(tmp))
        logger.info("DXF saved: %s", path)
        return Path(path)


def build_pattern(dims: ExcavationDimensions, colors: SurfaceColors) -> DxfRenderer:
    """Lay out the full-size pattern: faces, strips, fold lines, labels."""
    layout = layout_at_scale(dims, MM_PER_METER, (0.0, 0.0), min_draw=0.0, min_label=0.0)
    renderer = DxfRenderer()
    renderer.create_drawing()

    for face in layout.faces:
        style = DxfStyle(layer=SURFACE_LAYER[face.surface_id],
                         true_color=colors.rgb(face.surface_id))
        # bottom-left corner in DXF space
        renderer.add_rectangle((face.x, -(face.y + face.h)), face.w, face.h, style)
        cx, cy = face.center
        a, b = face.size_m
        renderer.add_text(f"{FACE_TITLES[face.id]} {a:.2f} x {b:.2f} m", (cx, -cy))

    sfido_style = DxfStyle(layer='SFIDO', true_color=colors.rgb('sfido'))
    for strip in layout.strips:
        renderer.add_rectangle((strip.x, -(strip.y + strip.h)), strip.w, strip.h, sfido_style)

    fold_style = DxfStyle(layer='FOLD')
    for (x1, y1), (x2, y2) in layout.fold_lines + layout.strip_fold_lines:
        renderer.add_line((x1, -y1), (x2, -y2), fold_style)

    return renderer


def export_pattern_dxf(
    dims: ExcavationDimensions,
    colors: SurfaceColors,
    path: Union[str, Path],
) -> Path:
    """Write the 1:1 cutting pattern to ``path``.

    Raises:
        ReportExportError: if the DXF cannot be built or written.
    """
    try:
        renderer = build_pattern(dims, colors)
    except Exception as exc:
        raise ReportExportError(f"DXF pattern failed: {exc}") from exc
    return renderer.save(path)
