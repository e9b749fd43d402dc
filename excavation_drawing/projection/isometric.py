"""
Isometric projection of the excavation onto the report page.

Model space: x along the length, z along the width, y up (0 = pit floor,
depth = rim). Page space: mm, y down. The fixed axonometric transform is

    screen_x = cx + (x − z) · cos 30°
    screen_y = cy − y + (x + z) · sin 30°

Model coordinates are multiplied by the page scale (mm per meter) before
projection. ``to_iso`` and ``project_points`` use the same float
operations, so scalar and vectorized results are bit-identical.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Tuple

import numpy as np

from excavation_drawing.config import (
    COS30,
    DEFAULT_SCALE,
    EPS_DIMENSION,
    ISO_MARGIN_FACTOR,
    ISO_MAX_SCALE,
    SIN30,
)
from excavation_drawing.model.dimensions import ExcavationDimensions

logger = logging.getLogger(__name__)

Point2D = Tuple[float, float]
Point3D = Tuple[float, float, float]

# Rim vertex pushed outward, per wall: (rim vertex, outward unit vector in x/z)
OVERLAP_DIRECTIONS: Dict[str, Tuple[str, Tuple[float, float]]] = {
    'E_back':  ('E', (0.0, -1.0)),
    'F_back':  ('F', (0.0, -1.0)),
    'H_front': ('H', (0.0, 1.0)),
    'G_front': ('G', (0.0, 1.0)),
    'E_left':  ('E', (-1.0, 0.0)),
    'H_left':  ('H', (-1.0, 0.0)),
    'F_right': ('F', (1.0, 0.0)),
    'G_right': ('G', (1.0, 0.0)),
}


def to_iso(x: float, y: float, z: float, center: Point2D) -> Point2D:
    """Project one scaled model point to page coordinates."""
    cx, cy = center
    return cx + (x - z) * COS30, cy - y + (x + z) * SIN30


def project_points(points: np.ndarray, center: Point2D) -> np.ndarray:
    """Vectorized :func:`to_iso` for an (N, 3) array; returns (N, 2)."""
    pts = np.asarray(points, dtype=np.float64).reshape(-1, 3)
    cx, cy = center
    x, y, z = pts[:, 0], pts[:, 1], pts[:, 2]
    sx = cx + (x - z) * COS30
    sy = cy - y + (x + z) * SIN30
    return np.column_stack((sx, sy))


def excavation_vertices(dims: ExcavationDimensions, scale: float) -> Dict[str, Point3D]:
    """The 8 corners of the open prism, centered on the x/z origin.

    A–D lie on the floor (y = 0), E–H on the rim (y = depth):
    A back-left, B back-right, C front-right, D front-left.
    """
    hl = dims.length * scale / 2
    hw = dims.width * scale / 2
    d = dims.depth * scale
    return {
        'A': (-hl, 0.0, -hw),
        'B': (hl, 0.0, -hw),
        'C': (hl, 0.0, hw),
        'D': (-hl, 0.0, hw),
        'E': (-hl, d, -hw),
        'F': (hl, d, -hw),
        'G': (hl, d, hw),
        'H': (-hl, d, hw),
    }


def overlap_vertices(dims: ExcavationDimensions, scale: float) -> Dict[str, Point3D]:
    """Rim vertices extended outward by the scaled sfido along each wall normal."""
    rim = excavation_vertices(dims, scale)
    s = dims.sfido * scale
    result = {}
    for name, (source, (dx, dz)) in OVERLAP_DIRECTIONS.items():
        x, y, z = rim[source]
        result[name] = (x + dx * s, y, z + dz * s)
    return result


def face_centers(dims: ExcavationDimensions, scale: float) -> Dict[str, Point3D]:
    """Centroids of the five faces and of the open mouth."""
    hl = dims.length * scale / 2
    hw = dims.width * scale / 2
    d = dims.depth * scale
    return {
        'base': (0.0, 0.0, 0.0),
        'back': (0.0, d / 2, -hw),
        'front': (0.0, d / 2, hw),
        'left': (-hl, d / 2, 0.0),
        'right': (hl, d / 2, 0.0),
        'top': (0.0, d, 0.0),
    }


def _all_points(dims: ExcavationDimensions, scale: float) -> np.ndarray:
    pts = list(excavation_vertices(dims, scale).values())
    if dims.has_overlap:
        pts.extend(overlap_vertices(dims, scale).values())
    return np.array(pts, dtype=np.float64)


def projected_bounds(
    dims: ExcavationDimensions,
    scale: float,
    center: Point2D = (0.0, 0.0),
) -> Tuple[float, float, float, float]:
    """(min_x, min_y, max_x, max_y) of the projected drawing."""
    proj = project_points(_all_points(dims, scale), center)
    min_x, min_y = proj.min(axis=0)
    max_x, max_y = proj.max(axis=0)
    return float(min_x), float(min_y), float(max_x), float(max_y)


def fit_iso_scale(
    dims: ExcavationDimensions,
    avail_w: float,
    avail_h: float,
    margin_factor: float = ISO_MARGIN_FACTOR,
    max_scale: float = ISO_MAX_SCALE,
) -> float:
    """Largest uniform scale (mm/m) fitting the drawing into ``avail_w × avail_h``.

    Degenerate axes are skipped; if the drawing collapses to a point the
    scale falls back to ``max_scale``. Never exceeds ``max_scale``.
    """
    min_x, min_y, max_x, max_y = projected_bounds(dims, 1.0)
    raw_w = max_x - min_x
    raw_h = max_y - min_y

    candidates = []
    if raw_w > EPS_DIMENSION:
        candidates.append(avail_w / raw_w)
    if raw_h > EPS_DIMENSION:
        candidates.append(avail_h / raw_h)

    if not candidates:
        logger.debug("Isometric drawing is degenerate, using max scale %.1f", max_scale)
        return max_scale

    scale = min(candidates) * margin_factor
    if not np.isfinite(scale) or scale <= 0:
        return DEFAULT_SCALE
    return min(scale, max_scale)


@dataclass(frozen=True)
class IsoProjector:
    """Scale and page center of one isometric drawing."""
    scale: float
    center: Point2D

    @classmethod
    def fit(
        cls,
        dims: ExcavationDimensions,
        region: Tuple[float, float, float, float],
        margin_factor: float = ISO_MARGIN_FACTOR,
        max_scale: float = ISO_MAX_SCALE,
    ) -> 'IsoProjector':
        """Scale the drawing into ``region`` (x, y, w, h) and center it there."""
        rx, ry, rw, rh = region
        scale = fit_iso_scale(dims, rw, rh, margin_factor, max_scale)
        min_x, min_y, max_x, max_y = projected_bounds(dims, scale)
        cx = rx + rw / 2 - (min_x + max_x) / 2
        cy = ry + rh / 2 - (min_y + max_y) / 2
        logger.debug("Isometric fit: scale=%.3f mm/m center=(%.1f, %.1f)", scale, cx, cy)
        return cls(scale=scale, center=(cx, cy))

    def project(self, point: Point3D) -> Point2D:
        x, y, z = point
        return to_iso(x, y, z, self.center)

    def project_named(self, points: Dict[str, Point3D]) -> Dict[str, Point2D]:
        """Project a name → point mapping, keeping names."""
        if not points:
            return {}
        names = list(points)
        proj = project_points(np.array([points[n] for n in names]), self.center)
        return {n: (float(p[0]), float(p[1])) for n, p in zip(names, proj)}

    def vertices(self, dims: ExcavationDimensions) -> Dict[str, Point2D]:
        """Projected prism corners A–H."""
        return self.project_named(excavation_vertices(dims, self.scale))

    def overlap_vertices(self, dims: ExcavationDimensions) -> Dict[str, Point2D]:
        """Projected outward rim vertices (empty without overlap)."""
        if not dims.has_overlap:
            return {}
        return self.project_named(overlap_vertices(dims, self.scale))

    def face_centers(self, dims: ExcavationDimensions) -> Dict[str, Point2D]:
        return self.project_named(face_centers(dims, self.scale))
