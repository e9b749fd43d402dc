"""
Isometric face compositor.

Hidden surfaces are handled by a fixed painter's order, not by depth
sorting: the pit is always the same open prism seen from the same side,
so drawing back wall, left wall, base, right wall and front wall in that
order is always correct. The right and front walls are lightened to fake
a directional light.

Vertex names follow ``projection.isometric.excavation_vertices``:
A–D floor (back-left, back-right, front-right, front-left), E–H rim.
"""

import logging
import math
from typing import Dict, List, Tuple

from excavation_drawing.config import (
    ARROW_BLUE,
    ARROW_HEAD_MM,
    DARKEN_BAND,
    DARKEN_BAND_SIDE,
    EDGE_DARK,
    FONT_BOLD,
    FONT_ITALIC,
    FONT_REGULAR,
    LIGHTEN_FRONT_WALL,
    LIGHTEN_RIGHT_WALL,
    LineType,
    RIM_LINE,
    STRIP_MIN_DRAW_MM,
    TEXT_FAINT,
)
from excavation_drawing.drawing.primitives import Item, Line, Point, Polygon, Text
from excavation_drawing.model.colors import RGB, darken, lighten
from excavation_drawing.model.dimensions import (
    ExcavationDimensions,
    SurfaceColors,
    compute_surfaces,
)
from excavation_drawing.projection.isometric import IsoProjector

logger = logging.getLogger(__name__)

# (face, vertex loop, surface class, lighten delta), back to front
FACE_DRAW_ORDER: List[Tuple[str, Tuple[str, ...], str, int]] = [
    ('back', ('A', 'B', 'F', 'E'), 'sides_long', 0),
    ('left', ('A', 'D', 'H', 'E'), 'sides_short', 0),
    ('base', ('A', 'B', 'C', 'D'), 'bottom', 0),
    ('right', ('B', 'C', 'G', 'F'), 'sides_short', LIGHTEN_RIGHT_WALL),
    ('front', ('D', 'C', 'G', 'H'), 'sides_long', LIGHTEN_FRONT_WALL),
]

# (band, vertex loop, +lighten / -darken of the sfido color), back to front.
# Bands folding from the far walls are darker than those from the near walls.
BAND_DRAW_ORDER: List[Tuple[str, Tuple[str, ...], int]] = [
    ('back', ('E', 'F', 'F_back', 'E_back'), -DARKEN_BAND),
    ('left', ('E', 'H', 'H_left', 'E_left'), -DARKEN_BAND_SIDE),
    ('right', ('F', 'G', 'G_right', 'F_right'), LIGHTEN_RIGHT_WALL),
    ('front', ('H', 'G', 'G_front', 'H_front'), LIGHTEN_FRONT_WALL),
]

SOLID_EDGES = [
    ('A', 'B'), ('B', 'C'), ('C', 'D'), ('D', 'A'),
    ('A', 'E'), ('B', 'F'), ('C', 'G'), ('D', 'H'),
]
RIM_EDGES = [('E', 'F'), ('F', 'G'), ('G', 'H'), ('H', 'E')]
BAND_OUTER_EDGES = [
    ('E_back', 'F_back'), ('H_front', 'G_front'),
    ('E_left', 'H_left'), ('F_right', 'G_right'),
]

# Fixed annotation layout: anchor as fractions of the annotation region,
# tip offset (mm) from the face centroid, text alignment, caption.
ANNOTATIONS = [
    ('back', (0.0, 0.06), (-4.0, -2.0), 'left', "Parete Lunga"),
    ('left', (0.0, 0.55), (-2.0, 0.0), 'left', "Parete Corta"),
    ('base', (0.5, 0.93), (0.0, 2.0), 'center', "Base"),
    ('right', (1.0, 0.40), (2.0, 0.0), 'right', "Parete Corta"),
    ('front', (1.0, 0.80), (4.0, 2.0), 'right', "Parete Lunga"),
]

FACE_TO_SURFACE = {
    'back': 'sides_long',
    'front': 'sides_long',
    'left': 'sides_short',
    'right': 'sides_short',
    'base': 'bottom',
}


def shade(rgb: RGB, delta: int) -> RGB:
    """Lighten for positive ``delta``, darken for negative."""
    if delta > 0:
        return lighten(rgb, delta)
    if delta < 0:
        return darken(rgb, -delta)
    return rgb


def bands_visible(dims: ExcavationDimensions, scale: float,
                  min_draw: float = STRIP_MIN_DRAW_MM) -> bool:
    return dims.has_overlap and dims.sfido * scale > min_draw


def composite_faces(
    projector: IsoProjector,
    dims: ExcavationDimensions,
    colors: SurfaceColors,
    min_draw: float = STRIP_MIN_DRAW_MM,
) -> List[Item]:
    """Filled faces, overlap bands and stroked edges in draw order."""
    verts: Dict[str, Point] = projector.vertices(dims)
    items: List[Item] = []

    for name, loop, surface_id, delta in FACE_DRAW_ORDER:
        items.append(Polygon(
            [verts[v] for v in loop],
            fill=shade(colors.rgb(surface_id), delta),
            tag=f"iso-face:{name}",
        ))

    with_bands = bands_visible(dims, projector.scale, min_draw)
    if with_bands:
        verts.update(projector.overlap_vertices(dims))
        sfido_rgb = colors.rgb('sfido')
        for name, loop, delta in BAND_DRAW_ORDER:
            items.append(Polygon(
                [verts[v] for v in loop],
                fill=shade(sfido_rgb, delta),
                tag=f"iso-band:{name}",
            ))

    for a, b in SOLID_EDGES:
        items.append(Line(verts[a], verts[b], stroke=EDGE_DARK,
                          line_type=LineType.SOLID, tag="iso-edge"))

    if with_bands:
        for a, b in BAND_OUTER_EDGES:
            items.append(Line(verts[a], verts[b], stroke=EDGE_DARK,
                              line_type=LineType.THIN, tag="iso-band-edge"))

    for a, b in RIM_EDGES:
        items.append(Line(verts[a], verts[b], stroke=RIM_LINE,
                          line_type=LineType.RIM, tag="iso-rim"))

    return items


def arrow(start: Point, end: Point, color: RGB = ARROW_BLUE,
          head: float = ARROW_HEAD_MM, tag: str = "arrow") -> List[Item]:
    """Shaft from ``start`` to ``end`` with a two-stroke head at ``end``."""
    angle = math.atan2(end[1] - start[1], end[0] - start[0])
    tx, ty = end
    items: List[Item] = [Line(start, end, stroke=color, line_type=LineType.ARROW, tag=tag)]
    for side in (-1, 1):
        a = angle + side * math.pi / 6
        items.append(Line(end, (tx - head * math.cos(a), ty - head * math.sin(a)),
                          stroke=color, line_type=LineType.ARROW, tag=tag))
    return items


def annotation_items(
    projector: IsoProjector,
    dims: ExcavationDimensions,
    region: Tuple[float, float, float, float],
) -> List[Item]:
    """Area callouts for the five faces plus the open-mouth label.

    Anchors are fixed fractions of ``region`` (x, y, w, h) so the callouts
    never move with the geometry; only the arrow tips follow the faces.
    """
    rx, ry, rw, rh = region
    centers = projector.face_centers(dims)
    areas = {s.id: s.area for s in compute_surfaces(dims)}
    items: List[Item] = []

    for face, (fx, fy), (ox, oy), align, caption in ANNOTATIONS:
        ax, ay = rx + fx * rw, ry + fy * rh
        cx, cy = centers[face]
        tag = f"annotation:{face}"
        items.extend(arrow((ax, ay), (cx + ox, cy + oy), tag=tag))
        area = areas[FACE_TO_SURFACE[face]]
        if align == 'center':
            items.append(Text(ax, ay + 5.0, f"{area:.2f} m²", size=11.0, font=FONT_BOLD,
                              color=ARROW_BLUE, align=align, tag=tag))
            items.append(Text(ax, ay + 9.0, caption, size=7.0, font=FONT_REGULAR,
                              color=ARROW_BLUE, align=align, tag=tag))
        else:
            items.append(Text(ax, ay - 2.0, f"{area:.2f} m²", size=11.0, font=FONT_BOLD,
                              color=ARROW_BLUE, align=align, tag=tag))
            items.append(Text(ax, ay + 5.0, caption, size=7.0, font=FONT_REGULAR,
                              color=ARROW_BLUE, align=align, tag=tag))

    tx, ty = centers['top']
    items.append(Text(tx, ty - 8.0, "BOCCA DI SCAVO (APERTA)", size=8.0,
                      font=FONT_ITALIC, color=TEXT_FAINT, align="center", tag="mouth-label"))
    return items
