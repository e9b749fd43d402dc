"""Page layout, compositing and PDF/SVG/DXF output of the excavation report."""

from excavation_drawing.drawing.output import ReportExportError
from excavation_drawing.drawing.report import (
    build_report,
    export_report,
    report_filename,
)

__all__ = [
    "ReportExportError",
    "build_report",
    "export_report",
    "report_filename",
]
