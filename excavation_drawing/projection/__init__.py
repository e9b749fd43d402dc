"""Isometric projection of the excavation prism."""

from excavation_drawing.projection.isometric import (
    IsoProjector,
    excavation_vertices,
    face_centers,
    fit_iso_scale,
    overlap_vertices,
    project_points,
    to_iso,
)

__all__ = [
    "IsoProjector",
    "to_iso",
    "project_points",
    "excavation_vertices",
    "overlap_vertices",
    "face_centers",
    "fit_iso_scale",
]
