"""
Per-face placement data for the 3D view's explode animation.

The renderer itself lives outside this package; it reads the face offsets
from ``ExplodeAnimator`` once per frame after calling ``tick()``. Offsets
are in meters along one scene axis per face (y up, x along the length,
z along the width):

- bottom:           y, sinks ``EXPLODE_SINK`` when exploded
- long_1 / long_2:  z, ∓(width/2 + ``EXPLODE_SPREAD``)
- short_1 / short_2: x, ∓(length/2 + ``EXPLODE_SPREAD``)
"""

import logging
from dataclasses import dataclass
from typing import Dict

from excavation_drawing.model.dimensions import ExcavationDimensions

logger = logging.getLogger(__name__)

LERP_FACTOR = 0.1
EXPLODE_SINK = 0.5
EXPLODE_SPREAD = 1.5
SETTLE_TOLERANCE = 1e-4

SCENE_FACES = ('bottom', 'long_1', 'long_2', 'short_1', 'short_2')


@dataclass(frozen=True)
class FaceOffset:
    axis: str
    value: float


def lerp(current: float, target: float, factor: float = LERP_FACTOR) -> float:
    return current + (target - current) * factor


def face_targets(dims: ExcavationDimensions, exploded: bool) -> Dict[str, FaceOffset]:
    """Resting offset of every face for the given explode state."""
    e = 1.0 if exploded else 0.0
    half_l = dims.length / 2
    half_w = dims.width / 2
    return {
        'bottom': FaceOffset('y', -EXPLODE_SINK * e),
        'long_1': FaceOffset('z', -half_w - EXPLODE_SPREAD * e),
        'long_2': FaceOffset('z', half_w + EXPLODE_SPREAD * e),
        'short_1': FaceOffset('x', -half_l - EXPLODE_SPREAD * e),
        'short_2': FaceOffset('x', half_l + EXPLODE_SPREAD * e),
    }


def label_font_size(area: float) -> float:
    """Height (m) of the in-scene area label, growing with the face area."""
    return min(0.35, max(0.15, area * 0.025))


class ExplodeAnimator:
    """Eases each face toward its target offset by a fixed fraction per frame.

    Usage:
        animator = ExplodeAnimator(dims)
        animator.toggle()
        while not animator.settled:
            offsets = animator.tick()
    """

    def __init__(self, dims: ExcavationDimensions, exploded: bool = False):
        self.dims = dims
        self.exploded = exploded
        self.current: Dict[str, FaceOffset] = face_targets(dims, exploded)

    @property
    def targets(self) -> Dict[str, FaceOffset]:
        return face_targets(self.dims, self.exploded)

    def set_exploded(self, exploded: bool) -> None:
        if exploded != self.exploded:
            logger.debug("Explode view %s", "on" if exploded else "off")
        self.exploded = exploded

    def toggle(self) -> bool:
        self.set_exploded(not self.exploded)
        return self.exploded

    def set_dimensions(self, dims: ExcavationDimensions) -> None:
        """New geometry; faces glide to the new targets on following ticks."""
        self.dims = dims

    def tick(self) -> Dict[str, FaceOffset]:
        """Advance one frame and return the updated offsets."""
        targets = self.targets
        self.current = {
            face: FaceOffset(targets[face].axis,
                             lerp(self.current[face].value, targets[face].value))
            for face in SCENE_FACES
        }
        return self.current

    @property
    def settled(self) -> bool:
        targets = self.targets
        return all(
            abs(self.current[face].value - targets[face].value) <= SETTLE_TOLERANCE
            for face in SCENE_FACES
        )
