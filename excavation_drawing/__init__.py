"""
excavation_drawing - area model and two-page PDF report for a rectangular
excavation lined with TNT fabric.

Entry point for an interactive front end: ``ExcavationConfigurator``.
"""

from excavation_drawing.logging_config import (
    setup_logging,
    get_logger,
    configure_default_logging,
    log_timing,
    timed,
    LogContext,
)

__all__ = [
    "setup_logging",
    "get_logger",
    "configure_default_logging",
    "log_timing",
    "timed",
    "LogContext",
]
