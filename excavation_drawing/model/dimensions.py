"""
Excavation dimensions and derived surface areas.

The excavation is an open-topped rectangular pit with five faces: one
base (length × width), two long walls (length × depth) and two short
walls (width × depth). The optional "sfido" is a border strip of fabric
glued along the rim of every wall.

Everything here is a frozen value recomputed from a dimensions/colors
snapshot; inputs are assumed finite and non-negative (the configurator
clamps them before they get here).
"""

import logging
from dataclasses import dataclass
from typing import List

from excavation_drawing.config import DEFAULT_COLORS
from excavation_drawing.model.colors import RGB, parse_hex_color

logger = logging.getLogger(__name__)

SURFACE_IDS = ('bottom', 'sides_long', 'sides_short')

SURFACE_LABELS = {
    'bottom': "Superficie Inferiore (Base)",
    'sides_long': "Pareti Laterali Lunghe (x2)",
    'sides_short': "Pareti Laterali Corte (x2)",
}

SURFACE_SHORT_NAMES = {
    'bottom': "Base",
    'sides_long': "Pareti Lunghe",
    'sides_short': "Pareti Corte",
}

SURFACE_QUANTITIES = {
    'bottom': 1,
    'sides_long': 2,
    'sides_short': 2,
}


def format_dimensions_label(a: float, b: float, decimals: int = 2) -> str:
    """``"{a} × {b} m"`` with fixed-point rounding."""
    return f"{a:.{decimals}f} × {b:.{decimals}f} m"


@dataclass(frozen=True)
class ExcavationDimensions:
    """Pit geometry in meters."""
    length: float
    width: float
    depth: float
    sfido: float = 0.0

    @property
    def has_overlap(self) -> bool:
        """Overlap mode is active only for a positive sfido."""
        return self.sfido > 0

    @property
    def volume(self) -> float:
        return self.length * self.width * self.depth


@dataclass(frozen=True)
class SurfaceColors:
    """Per-face-class colors as ``#RRGGBB`` strings.

    Raises:
        InvalidColorError: on construction if any color is malformed.
    """
    bottom: str = DEFAULT_COLORS['bottom']
    sides_long: str = DEFAULT_COLORS['sides_long']
    sides_short: str = DEFAULT_COLORS['sides_short']
    sfido: str = DEFAULT_COLORS['sfido']

    def __post_init__(self) -> None:
        for name in ('bottom', 'sides_long', 'sides_short', 'sfido'):
            parse_hex_color(getattr(self, name))

    def rgb(self, surface_id: str) -> RGB:
        """RGB channels of one face class (or ``'sfido'``)."""
        return parse_hex_color(getattr(self, surface_id))


@dataclass(frozen=True)
class SurfaceData:
    """Area record for one face class."""
    id: str
    label: str
    area: float
    area_with_overlap: float
    color: str
    quantity: int
    dimensions_label: str
    dimensions_with_overlap_label: str

    @property
    def short_name(self) -> str:
        return SURFACE_SHORT_NAMES[self.id]

    @property
    def subtotal(self) -> float:
        return self.area * self.quantity

    @property
    def subtotal_with_overlap(self) -> float:
        return self.area_with_overlap * self.quantity


@dataclass(frozen=True)
class OverlapSummary:
    """Areas of the rim strips; zero everywhere when sfido is 0."""
    long_strip_area: float
    short_strip_area: float
    total_strip_area: float
    strip_width: float


@dataclass(frozen=True)
class Totals:
    total_area: float
    total_area_with_overlap: float
    volume: float


def face_sizes(dims: ExcavationDimensions) -> dict:
    """(a, b) side lengths of each face class, in meters."""
    return {
        'bottom': (dims.length, dims.width),
        'sides_long': (dims.length, dims.depth),
        'sides_short': (dims.width, dims.depth),
    }


def compute_surfaces(
    dims: ExcavationDimensions,
    colors: SurfaceColors = SurfaceColors(),
) -> List[SurfaceData]:
    """Area records for the base, long walls and short walls (in that order).

    With overlap, each wall grows by ``sfido`` along its depth; the base is
    unchanged.
    """
    surfaces = []
    for surface_id, (a, b) in face_sizes(dims).items():
        if surface_id == 'bottom':
            b_overlap = b
        else:
            b_overlap = b + dims.sfido
        surfaces.append(SurfaceData(
            id=surface_id,
            label=SURFACE_LABELS[surface_id],
            area=a * b,
            area_with_overlap=a * b_overlap,
            color=getattr(colors, surface_id),
            quantity=SURFACE_QUANTITIES[surface_id],
            dimensions_label=format_dimensions_label(a, b),
            dimensions_with_overlap_label=format_dimensions_label(a, b_overlap),
        ))
    return surfaces


def compute_overlap(dims: ExcavationDimensions) -> OverlapSummary:
    """Strip areas: two strips along the long walls, two along the short ones."""
    long_strip = dims.length * dims.sfido * 2
    short_strip = dims.width * dims.sfido * 2
    return OverlapSummary(
        long_strip_area=long_strip,
        short_strip_area=short_strip,
        total_strip_area=long_strip + short_strip,
        strip_width=dims.sfido,
    )


def compute_totals(dims: ExcavationDimensions) -> Totals:
    """Theoretical total (1 base + 2 long + 2 short) and total with overlap."""
    total = sum(s.subtotal for s in compute_surfaces(dims))
    overlap = compute_overlap(dims)
    return Totals(
        total_area=total,
        total_area_with_overlap=total + overlap.total_strip_area,
        volume=dims.volume,
    )
