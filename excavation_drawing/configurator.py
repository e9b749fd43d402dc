"""
Configurator state: the current excavation, its colors and the explode
toggle, plus the one-call report export used by the front end.

Dimension input arrives from form fields, so values may be strings or
garbage. Anything that does not parse to a finite, non-negative number is
stored as 0 with a warning; the geometry and layout code downstream then
only ever sees valid snapshots.
"""

import logging
import math
from dataclasses import asdict, replace
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

from excavation_drawing.drawing.report import export_report
from excavation_drawing.model.dimensions import (
    ExcavationDimensions,
    OverlapSummary,
    SurfaceColors,
    SurfaceData,
    Totals,
    compute_overlap,
    compute_surfaces,
    compute_totals,
)
from excavation_drawing.project_config import ProjectConfig, load_config
from excavation_drawing.scene import ExplodeAnimator

logger = logging.getLogger(__name__)

DEFAULT_DIMENSIONS = ExcavationDimensions(length=4.0, width=3.0, depth=2.5, sfido=0.0)

DIMENSION_FIELDS = ('length', 'width', 'depth', 'sfido')
COLOR_FIELDS = ('bottom', 'sides_long', 'sides_short', 'sfido')


def sanitize_dimension(name: str, value: Any) -> float:
    """Parse a form value into a finite, non-negative float (0 otherwise)."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        logger.warning("Invalid %s %r, using 0", name, value)
        return 0.0
    if not math.isfinite(number) or number < 0:
        logger.warning("Out-of-range %s %r, using 0", name, value)
        return 0.0
    return number


class ExcavationConfigurator:
    """Holds the excavation being configured.

    Args:
        config: Project configuration, looked up with ``load_config()``
            (``.geoviz.json`` in the working or home directory) when omitted
        dimensions: Initial geometry, 4 × 3 × 2.5 m without sfido by default
        clock: Source of the export timestamp
    """

    def __init__(
        self,
        config: Optional[ProjectConfig] = None,
        dimensions: ExcavationDimensions = DEFAULT_DIMENSIONS,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.config = config or load_config()
        self.dimensions = dimensions
        self.colors = SurfaceColors(**asdict(self.config.colors))
        self.animator = ExplodeAnimator(dimensions)
        self.clock = clock
        self.last_export: Optional[Path] = None

    @property
    def exploded(self) -> bool:
        return self.animator.exploded

    def set_dimensions(self, **values: Any) -> ExcavationDimensions:
        """Update any of length, width, depth, sfido.

        Raises:
            TypeError: for a field name that is not a dimension
        """
        unknown = set(values) - set(DIMENSION_FIELDS)
        if unknown:
            raise TypeError(f"Unknown dimension(s): {', '.join(sorted(unknown))}")

        clean = {name: sanitize_dimension(name, v) for name, v in values.items()}
        self.dimensions = replace(self.dimensions, **clean)
        self.animator.set_dimensions(self.dimensions)
        logger.debug("Dimensions: %s", self.dimensions)
        return self.dimensions

    def set_colors(self, **values: str) -> SurfaceColors:
        """Update face colors; the whole update is rejected if any is invalid.

        Raises:
            InvalidColorError: if a value is not ``#RRGGBB``
            TypeError: for a field name that is not a color slot
        """
        unknown = set(values) - set(COLOR_FIELDS)
        if unknown:
            raise TypeError(f"Unknown color(s): {', '.join(sorted(unknown))}")
        self.colors = replace(self.colors, **values)
        return self.colors

    def toggle_explode(self) -> bool:
        return self.animator.toggle()

    @property
    def surfaces(self) -> List[SurfaceData]:
        return compute_surfaces(self.dimensions, self.colors)

    @property
    def overlap(self) -> OverlapSummary:
        return compute_overlap(self.dimensions)

    @property
    def totals(self) -> Totals:
        return compute_totals(self.dimensions)

    def snapshot(self) -> Dict[str, Any]:
        """Plain-dict view of the current state (for a UI or for logs)."""
        return {
            'dimensions': asdict(self.dimensions),
            'colors': asdict(self.colors),
            'exploded': self.exploded,
            'totals': asdict(self.totals),
        }

    def export(self) -> None:
        """Write the report for the current state into the configured directory.

        The written PDF path is kept in ``last_export``.

        Raises:
            ReportExportError: if the report cannot be written
        """
        output_dir: Union[str, Path] = self.config.output.output_dir or Path.cwd()
        self.last_export = export_report(
            self.dimensions,
            self.colors,
            output_dir=output_dir,
            config=self.config,
            now=self.clock(),
        )
        logger.info("Report exported: %s", self.last_export)
