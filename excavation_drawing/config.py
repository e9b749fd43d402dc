"""
Constants for the excavation report engine.

Page geometry is expressed in millimeters with the origin at the top-left
corner of the sheet and y growing downward. Font sizes are in points.
Model-space values (dimensions, areas) are in meters.
"""

import math
from enum import Enum
from typing import Dict, Optional

# ---------------------------------------------------------------------------
# Page (A4 portrait)
# ---------------------------------------------------------------------------

PAGE_WIDTH_MM = 210.0
PAGE_HEIGHT_MM = 297.0
PAGE_MARGIN_MM = 15.0

# Font sizes are in points, page geometry in mm
PT_TO_MM = 25.4 / 72.0

HEADER_HEIGHT_MM = 40.0
CONTENT_TOP_MM = 50.0
FOOTER_OFFSET_MM = 8.0

REPORT_PAGE_COUNT = 2

# Flattened view: drawing region below the section title
FLAT_MAX_DRAW_HEIGHT_MM = 120.0
FLAT_MARGIN_FACTOR = 0.9
# Height given up by the flat drawing when the overlap detail block is shown
FLAT_OVERLAP_RESERVE_MM = 40.0
MARGIN_FACTOR_RANGE = (0.85, 0.9)

# Faces narrower than this (on either side) are drawn without text
FACE_LABEL_MIN_MM = 8.0

# Isometric view
ISO_ANGLE_RAD = math.pi / 6
COS30 = math.cos(ISO_ANGLE_RAD)
SIN30 = math.sin(ISO_ANGLE_RAD)
ISO_REGION_HEIGHT_MM = 140.0
ISO_REGION_SIDE_RESERVE_MM = 25.0
ISO_REGION_VPAD_MM = 12.0
ARROW_HEAD_MM = 2.0
ISO_MAX_SCALE = 12.0
ISO_MARGIN_FACTOR = 0.85

# Overlap strips: one policy for both pages
STRIP_MIN_DRAW_MM = 2.0
STRIP_MIN_LABEL_MM = 6.0

# Shading deltas for the "front-facing" walls and the overlap bands
LIGHTEN_RIGHT_WALL = 30
LIGHTEN_FRONT_WALL = 20
DARKEN_BAND = 20
DARKEN_BAND_SIDE = 10

EPS_DIMENSION = 1e-9
DEFAULT_SCALE = 1.0

# ---------------------------------------------------------------------------
# Palette (RGB)
# ---------------------------------------------------------------------------

HEADER_FILL = (79, 70, 229)
TEXT_DARK = (30, 41, 59)
TEXT_MUTED = (71, 85, 105)
TEXT_ACCENT = (79, 70, 229)
AMBER = (251, 191, 36)
TEXT_FAINT = (148, 163, 184)
TABLE_HEADER_FILL = (241, 245, 249)
SPEC_BOX_FILL = (248, 250, 252)
OVERLAP_BOX_FILL = (255, 251, 235)
OVERLAP_TEXT = (180, 83, 9)
FOLD_LINE = (100, 116, 139)
EDGE_DARK = (50, 50, 50)
RIM_LINE = (100, 100, 100)
ARROW_BLUE = (59, 130, 246)
WHITE = (255, 255, 255)

DEFAULT_COLORS: Dict[str, str] = {
    'bottom': '#3b82f6',
    'sides_long': '#ef4444',
    'sides_short': '#10b981',
    'sfido': '#f59e0b',
}

# ---------------------------------------------------------------------------
# Report text
# ---------------------------------------------------------------------------

REPORT_TITLE = "GeoViz Dynamic"
REPORT_SUBTITLE_FLAT = "Configuratore Scavo 3D - Report Tecnico"
REPORT_SUBTITLE_ISO = "Vista 3D Isometrica con Quote"
FILENAME_PREFIX = "GeoViz_Scavo"

FONT_REGULAR = "Helvetica"
FONT_BOLD = "Helvetica-Bold"
FONT_ITALIC = "Helvetica-Oblique"


# ---------------------------------------------------------------------------
# Line types
# ---------------------------------------------------------------------------

class LineType(Enum):
    """Stroke styles used on the report pages.

    Each member carries (stroke width in mm, dash pattern in mm or None).
    """
    SOLID = (0.5, None)
    THIN = (0.3, None)
    FACE_BORDER = (0.4, None)
    FOLD = (0.3, (2.0, 2.0))
    RIM = (0.5, (2.0, 1.0))
    ARROW = (0.6, None)

    def __init__(self, stroke_width: float, dash: Optional[tuple]):
        self.stroke_width = stroke_width
        self.dash = dash

    @property
    def svg_pattern(self) -> Optional[str]:
        """Dash pattern as an SVG ``stroke-dasharray`` value."""
        if self.dash is None:
            return None
        return ",".join(f"{d:g}" for d in self.dash)

    def get_svg_style(self) -> Dict[str, str]:
        """SVG stroke attributes for this line type."""
        style = {
            'stroke_width': f"{self.stroke_width:g}",
            'stroke_linecap': 'butt',
        }
        if self.svg_pattern:
            style['stroke_dasharray'] = self.svg_pattern
        return style
