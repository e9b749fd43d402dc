"""Excavation geometry, derived areas and color handling."""

from excavation_drawing.model.colors import (
    InvalidColorError,
    darken,
    lighten,
    parse_hex_color,
)
from excavation_drawing.model.dimensions import (
    ExcavationDimensions,
    OverlapSummary,
    SurfaceColors,
    SurfaceData,
    Totals,
    compute_overlap,
    compute_surfaces,
    compute_totals,
    format_dimensions_label,
)

__all__ = [
    "ExcavationDimensions",
    "SurfaceColors",
    "SurfaceData",
    "OverlapSummary",
    "Totals",
    "compute_surfaces",
    "compute_overlap",
    "compute_totals",
    "format_dimensions_label",
    "InvalidColorError",
    "parse_hex_color",
    "lighten",
    "darken",
]
