"""
Unfolded ("developed") layout of the five excavation faces.

Cross-shaped arrangement, base in the middle:

              [strip]
            [long wall 1]
[s] [short 1] [ BASE ] [short 2] [s]
            [long wall 2]
              [strip]

The overlap strips fringe the outer edge of each wall. Scaling is
uniform so drawn proportions match the real fabric pieces.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import List, Sequence, Tuple

from reportlab.pdfbase import pdfmetrics

from excavation_drawing.config import (
    DEFAULT_SCALE,
    EPS_DIMENSION,
    FACE_LABEL_MIN_MM,
    FLAT_MARGIN_FACTOR,
    FOLD_LINE,
    FONT_BOLD,
    FONT_REGULAR,
    LineType,
    OVERLAP_TEXT,
    PT_TO_MM,
    STRIP_MIN_DRAW_MM,
    STRIP_MIN_LABEL_MM,
    WHITE,
)
from excavation_drawing.drawing.primitives import Item, Line, Point, Rect, Text
from excavation_drawing.model.dimensions import ExcavationDimensions, SurfaceColors

logger = logging.getLogger(__name__)

FACE_TITLES = {
    'base': "BASE",
    'long_1': "PARETE LUNGA 1",
    'long_2': "PARETE LUNGA 2",
    'short_1': "PARETE CORTA 1",
    'short_2': "PARETE CORTA 2",
}

# Face label lines are (title, area, dimensions); subsets tried most complete first
LABEL_FALLBACKS = ((0, 1, 2), (0, 1), (1, 2), (1,), (2,))
LABEL_LINE_SPACING = 1.2
FACE_LABEL_PAD_MM = 1.0

FACE_SURFACE = {
    'base': 'bottom',
    'long_1': 'sides_long',
    'long_2': 'sides_long',
    'short_1': 'sides_short',
    'short_2': 'sides_short',
}


@dataclass(frozen=True)
class FaceRect:
    """One unfolded face, page mm; ``size_m`` is its real (a, b) in meters."""
    id: str
    surface_id: str
    x: float
    y: float
    w: float
    h: float
    size_m: Tuple[float, float]

    @property
    def area_m2(self) -> float:
        return self.size_m[0] * self.size_m[1]

    @property
    def center(self) -> Point:
        return self.x + self.w / 2, self.y + self.h / 2


@dataclass(frozen=True)
class StripRect:
    """Overlap strip along the outer edge of one wall."""
    id: str
    wall_id: str
    x: float
    y: float
    w: float
    h: float
    labeled: bool

    @property
    def center(self) -> Point:
        return self.x + self.w / 2, self.y + self.h / 2


@dataclass
class FlatLayout:
    scale: float
    raw_width: float
    raw_height: float
    faces: List[FaceRect] = field(default_factory=list)
    strips: List[StripRect] = field(default_factory=list)
    fold_lines: List[Tuple[Point, Point]] = field(default_factory=list)
    strip_fold_lines: List[Tuple[Point, Point]] = field(default_factory=list)
    bounds: Tuple[float, float, float, float] = (0.0, 0.0, 0.0, 0.0)

    def face(self, face_id: str) -> FaceRect:
        for f in self.faces:
            if f.id == face_id:
                return f
        raise KeyError(face_id)

    @property
    def bottom(self) -> float:
        return self.bounds[3]


def raw_layout_size(dims: ExcavationDimensions) -> Tuple[float, float]:
    """Unscaled (width, height) of the cross in meters.

    With overlap, 2·sfido is reserved beyond each outer wall edge: the
    strip itself plus an equal clearance for its label.
    """
    reserve = 4 * dims.sfido if dims.has_overlap else 0.0
    width = dims.depth + dims.length + dims.depth + reserve
    height = dims.depth + dims.width + dims.depth + reserve
    return width, height


def compute_flat_scale(
    raw_width: float,
    raw_height: float,
    avail_w: float,
    avail_h: float,
    margin_factor: float = FLAT_MARGIN_FACTOR,
) -> float:
    """Uniform mm-per-meter scale fitting the raw layout into the region.

    An axis with (near-)zero raw size imposes no constraint; when both are
    degenerate the scale is ``DEFAULT_SCALE``. The result is always finite.
    """
    candidates = []
    if raw_width > EPS_DIMENSION:
        candidates.append(avail_w / raw_width)
    if raw_height > EPS_DIMENSION:
        candidates.append(avail_h / raw_height)

    if not candidates:
        logger.debug("Flat layout is degenerate, using default scale")
        return DEFAULT_SCALE

    scale = min(candidates) * margin_factor
    if not math.isfinite(scale) or scale < 0:
        return DEFAULT_SCALE
    return scale


def layout_at_scale(
    dims: ExcavationDimensions,
    scale: float,
    origin: Point,
    min_draw: float = STRIP_MIN_DRAW_MM,
    min_label: float = STRIP_MIN_LABEL_MM,
) -> FlatLayout:
    """Position every face from ``origin``, the base's top-left corner."""
    s_len = dims.length * scale
    s_wid = dims.width * scale
    s_dep = dims.depth * scale
    s_sfido = dims.sfido * scale
    bx, by = origin

    raw_w, raw_h = raw_layout_size(dims)
    layout = FlatLayout(scale=scale, raw_width=raw_w, raw_height=raw_h)

    layout.faces = [
        FaceRect('base', 'bottom', bx, by, s_len, s_wid, (dims.length, dims.width)),
        FaceRect('long_1', 'sides_long', bx, by - s_dep, s_len, s_dep, (dims.length, dims.depth)),
        FaceRect('long_2', 'sides_long', bx, by + s_wid, s_len, s_dep, (dims.length, dims.depth)),
        FaceRect('short_1', 'sides_short', bx - s_dep, by, s_dep, s_wid, (dims.depth, dims.width)),
        FaceRect('short_2', 'sides_short', bx + s_len, by, s_dep, s_wid, (dims.depth, dims.width)),
    ]

    # Base/wall shared edges
    layout.fold_lines = [
        ((bx, by), (bx + s_len, by)),
        ((bx, by + s_wid), (bx + s_len, by + s_wid)),
        ((bx, by), (bx, by + s_wid)),
        ((bx + s_len, by), (bx + s_len, by + s_wid)),
    ]

    if dims.has_overlap and s_sfido > min_draw:
        labeled = s_sfido > min_label
        layout.strips = [
            StripRect('strip_long_1', 'long_1', bx, by - s_dep - s_sfido, s_len, s_sfido, labeled),
            StripRect('strip_long_2', 'long_2', bx, by + s_wid + s_dep, s_len, s_sfido, labeled),
            StripRect('strip_short_1', 'short_1', bx - s_dep - s_sfido, by, s_sfido, s_wid, labeled),
            StripRect('strip_short_2', 'short_2', bx + s_len + s_dep, by, s_sfido, s_wid, labeled),
        ]
        layout.strip_fold_lines = [
            ((bx, by - s_dep), (bx + s_len, by - s_dep)),
            ((bx, by + s_wid + s_dep), (bx + s_len, by + s_wid + s_dep)),
            ((bx - s_dep, by), (bx - s_dep, by + s_wid)),
            ((bx + s_len + s_dep, by), (bx + s_len + s_dep, by + s_wid)),
        ]
    elif dims.has_overlap:
        logger.debug("Overlap strips %.2f mm wide, below draw threshold", s_sfido)

    reserve = 2 * s_sfido if dims.has_overlap else 0.0
    layout.bounds = (
        bx - s_dep - reserve,
        by - s_dep - reserve,
        bx + s_len + s_dep + reserve,
        by + s_wid + s_dep + reserve,
    )
    return layout


def plan_flat_layout(
    dims: ExcavationDimensions,
    avail_w: float,
    avail_h: float,
    origin_x: float,
    origin_y: float,
    margin_factor: float = FLAT_MARGIN_FACTOR,
    min_draw: float = STRIP_MIN_DRAW_MM,
    min_label: float = STRIP_MIN_LABEL_MM,
) -> FlatLayout:
    """Scale the cross to fit ``avail_w × avail_h`` whose top-left is (origin_x, origin_y).

    The cross is centered horizontally in the region and top-aligned.
    """
    raw_w, raw_h = raw_layout_size(dims)
    scale = compute_flat_scale(raw_w, raw_h, avail_w, avail_h, margin_factor)

    reserve = 2 * dims.sfido * scale if dims.has_overlap else 0.0
    s_len = dims.length * scale
    s_dep = dims.depth * scale
    block_w = s_len + 2 * s_dep + 2 * reserve

    bx = origin_x + (avail_w - block_w) / 2 + reserve + s_dep
    by = origin_y + reserve + s_dep

    logger.debug(
        "Flat layout: raw %.2f × %.2f m, scale %.3f mm/m",
        raw_w, raw_h, scale,
    )
    return layout_at_scale(dims, scale, (bx, by), min_draw, min_label)


def text_width_mm(text: str, font: str, size: float) -> float:
    """Rendered width of ``text`` in mm (``size`` in points)."""
    return pdfmetrics.stringWidth(text, font, size) * PT_TO_MM


def _fit_label_lines(
    face: FaceRect,
    lines: Sequence[Tuple[str, str, float]],
) -> List[Tuple[str, str, float]]:
    """Most complete subset of ``lines`` that fits inside the face, or []."""
    avail_w = face.w - 2 * FACE_LABEL_PAD_MM
    avail_h = face.h - 2 * FACE_LABEL_PAD_MM
    for subset in LABEL_FALLBACKS:
        chosen = [lines[i] for i in subset]
        height = sum(size * PT_TO_MM * LABEL_LINE_SPACING for _, _, size in chosen)
        width = max(text_width_mm(text, font, size) for text, font, size in chosen)
        if width <= avail_w and height <= avail_h:
            return chosen
    return []


def _face_items(face: FaceRect, colors: SurfaceColors) -> List[Item]:
    items: List[Item] = [Rect(
        face.x, face.y, face.w, face.h,
        fill=colors.rgb(face.surface_id),
        stroke=WHITE,
        line_type=LineType.FACE_BORDER,
        tag=f"face:{face.id}",
    )]

    if face.w < FACE_LABEL_MIN_MM or face.h < FACE_LABEL_MIN_MM:
        return items

    font_size = min(10.0, max(6.0, min(face.w, face.h) / 4))
    a, b = face.size_m
    lines = [
        (FACE_TITLES[face.id], FONT_BOLD, font_size),
        (f"{face.area_m2:.2f} m²", FONT_BOLD, font_size * 1.3),
        (f"{a:.1f}m × {b:.1f}m", FONT_REGULAR, font_size * 0.7),
    ]
    chosen = _fit_label_lines(face, lines)
    if not chosen:
        logger.debug("Face %s too small for its label", face.id)
        return items

    # Lines stacked around the face center; each baseline sits one em below
    # the top of its line box.
    cx, cy = face.center
    top = cy - sum(size * PT_TO_MM * LABEL_LINE_SPACING for _, _, size in chosen) / 2
    for text, font, size in chosen:
        size_mm = size * PT_TO_MM
        items.append(Text(cx, top + size_mm, text, size=size, font=font, color=WHITE,
                          align="center", tag=f"face-label:{face.id}"))
        top += size_mm * LABEL_LINE_SPACING
    return items


def draw_flat_layout(
    layout: FlatLayout,
    dims: ExcavationDimensions,
    colors: SurfaceColors,
) -> List[Item]:
    """Display list for the unfolded view: strips, faces, then fold lines."""
    items: List[Item] = []
    sfido_rgb = colors.rgb('sfido')

    for strip in layout.strips:
        items.append(Rect(
            strip.x, strip.y, strip.w, strip.h,
            fill=sfido_rgb, stroke=WHITE, line_type=LineType.THIN,
            tag=f"strip:{strip.id}",
        ))
        if strip.labeled:
            cx, cy = strip.center
            items.append(Text(
                cx, cy + 1.0, f"+{dims.sfido:.2f} m", size=6.0,
                font=FONT_BOLD, color=OVERLAP_TEXT, align="center",
                tag=f"strip-label:{strip.id}",
            ))

    for face in layout.faces:
        items.extend(_face_items(face, colors))

    for start, end in layout.fold_lines:
        items.append(Line(start, end, stroke=FOLD_LINE, line_type=LineType.FOLD, tag="fold"))
    for start, end in layout.strip_fold_lines:
        items.append(Line(start, end, stroke=FOLD_LINE, line_type=LineType.FOLD, tag="strip-fold"))

    return items
