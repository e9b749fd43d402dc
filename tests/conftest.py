"""
Pytest configuration and fixtures for the excavation report engine.

Provides:
- Dimension fixtures (standard pit, pit with sfido, all-zero pit)
- Color and configuration fixtures
- A fixed export timestamp
- Page and PDF assertion helpers
"""

import logging
import math
import re
from datetime import datetime
from pathlib import Path

import pytest

from excavation_drawing.drawing.primitives import Page
from excavation_drawing.model.dimensions import ExcavationDimensions, SurfaceColors
from excavation_drawing.project_config import ProjectConfig

# Project root directory
PROJECT_ROOT = Path(__file__).parent.parent


# ============================================================================
# Dimension Fixtures
# ============================================================================

@pytest.fixture
def standard_dims() -> ExcavationDimensions:
    """4 × 3 × 2.5 m pit without overlap (the configurator default)."""
    return ExcavationDimensions(length=4.0, width=3.0, depth=2.5)


@pytest.fixture
def overlap_dims() -> ExcavationDimensions:
    """Same pit with a 0.20 m sfido."""
    return ExcavationDimensions(length=4.0, width=3.0, depth=2.5, sfido=0.2)


@pytest.fixture
def zero_dims() -> ExcavationDimensions:
    """Fully degenerate input."""
    return ExcavationDimensions(length=0.0, width=0.0, depth=0.0)


@pytest.fixture
def large_dims() -> ExcavationDimensions:
    """Pit large enough that a fixed 12 mm/m scale would overflow the page."""
    return ExcavationDimensions(length=40.0, width=25.0, depth=6.0, sfido=0.5)


# ============================================================================
# Color / Config / Time Fixtures
# ============================================================================

@pytest.fixture
def default_colors() -> SurfaceColors:
    return SurfaceColors()


@pytest.fixture
def custom_colors() -> SurfaceColors:
    return SurfaceColors(bottom='#112233', sides_long='#445566',
                         sides_short='#778899', sfido='#AABBCC')


@pytest.fixture
def default_config() -> ProjectConfig:
    return ProjectConfig()


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2024, 5, 1, 10, 30, 15)


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Undo setup_logging() between tests so caplog keeps receiving records."""
    yield
    package_logger = logging.getLogger("excavation_drawing")
    package_logger.handlers.clear()
    package_logger.filters.clear()
    package_logger.propagate = True
    package_logger.setLevel(logging.NOTSET)


# ============================================================================
# Assertion Helpers
# ============================================================================

OVERLAP_TAGS = (
    'strip', 'strip-label', 'strip-fold', 'iso-band', 'iso-band-edge',
    'overlap-detail', 'overlap-dimensions', 'total-box:overlap',
    'specs:overlap', 'legend:overlap',
)


def assert_no_overlap_content(page: Page) -> None:
    """Assert that a page carries nothing sfido-related."""
    for tag in OVERLAP_TAGS:
        assert page.tagged(tag) == [], f"page {page.number} has {tag!r} items"
    for text in page.texts():
        assert 'sfido' not in text.lower(), f"page {page.number}: {text!r}"


def assert_finite_page(page: Page) -> None:
    assert page.is_finite(), f"page {page.number} has non-finite coordinates"
    for item in page:
        size = getattr(item, 'size', None)
        if size is not None:
            assert math.isfinite(size)


def count_pdf_pages(data: bytes) -> int:
    """Number of page objects in a PDF byte string."""
    return len(re.findall(rb"/Type\s*/Page\b", data))
