"""
Unit tests for excavation_drawing.drawing.compositor module.

Tests:
- Fixed painter's order of the five faces
- Shading of the near walls and of the overlap bands
- Band visibility threshold
- Edge styles
- Annotation arrows and labels
"""

import math

import pytest

from excavation_drawing.config import LineType
from excavation_drawing.drawing.compositor import (
    FACE_DRAW_ORDER,
    annotation_items,
    arrow,
    bands_visible,
    composite_faces,
    shade,
)
from excavation_drawing.drawing.primitives import Line, Page, Polygon, Text
from excavation_drawing.model.colors import darken, lighten
from excavation_drawing.projection.isometric import IsoProjector

PROJECTOR = IsoProjector(scale=12.0, center=(105.0, 110.0))
REGION = (15.0, 50.0, 180.0, 140.0)


def _page(items):
    page = Page(number=2, title="test", width=210.0, height=297.0)
    page.extend(items)
    return page


class TestShade:
    """Tests for shade."""

    def test_positive_lightens(self):
        assert shade((10, 20, 30), 30) == (40, 50, 60)

    def test_negative_darkens(self):
        assert shade((10, 20, 30), -20) == (0, 0, 10)

    def test_zero_unchanged(self):
        assert shade((10, 20, 30), 0) == (10, 20, 30)


class TestCompositeFaces:
    """Tests for composite_faces."""

    def test_painter_order(self, standard_dims, default_colors):
        items = composite_faces(PROJECTOR, standard_dims, default_colors)
        tags = [i.tag for i in items if i.tag.startswith('iso-face:')]
        assert tags == ['iso-face:back', 'iso-face:left', 'iso-face:base',
                        'iso-face:right', 'iso-face:front']

    def test_faces_drawn_before_edges(self, standard_dims, default_colors):
        items = composite_faces(PROJECTOR, standard_dims, default_colors)
        last_face = max(i for i, item in enumerate(items) if item.tag.startswith('iso-face:'))
        first_edge = min(i for i, item in enumerate(items) if item.tag == 'iso-edge')
        assert last_face < first_edge

    def test_near_walls_lightened(self, standard_dims, default_colors):
        page = _page(composite_faces(PROJECTOR, standard_dims, default_colors))
        fills = {i.tag.split(':')[1]: i.fill for i in page.tagged('iso-face')}
        assert fills['back'] == default_colors.rgb('sides_long')
        assert fills['left'] == default_colors.rgb('sides_short')
        assert fills['base'] == default_colors.rgb('bottom')
        assert fills['right'] == lighten(default_colors.rgb('sides_short'), 30)
        assert fills['front'] == lighten(default_colors.rgb('sides_long'), 20)

    def test_face_polygons_are_quads(self, standard_dims, default_colors):
        page = _page(composite_faces(PROJECTOR, standard_dims, default_colors))
        for item in page.tagged('iso-face'):
            assert isinstance(item, Polygon)
            assert len(item.points) == 4

    def test_edges(self, standard_dims, default_colors):
        page = _page(composite_faces(PROJECTOR, standard_dims, default_colors))
        assert len(page.tagged('iso-edge')) == 8
        rim = page.tagged('iso-rim')
        assert len(rim) == 4
        assert all(r.line_type is LineType.RIM and r.line_type.dash for r in rim)

    def test_no_bands_without_sfido(self, standard_dims, default_colors):
        page = _page(composite_faces(PROJECTOR, standard_dims, default_colors))
        assert page.tagged('iso-band') == []
        assert page.tagged('iso-band-edge') == []

    def test_bands_with_sfido(self, overlap_dims, default_colors):
        page = _page(composite_faces(PROJECTOR, overlap_dims, default_colors))
        bands = page.tagged('iso-band')
        assert [b.tag for b in bands] == ['iso-band:back', 'iso-band:left',
                                          'iso-band:right', 'iso-band:front']
        assert len(page.tagged('iso-band-edge')) == 4

    def test_band_shading(self, overlap_dims, default_colors):
        page = _page(composite_faces(PROJECTOR, overlap_dims, default_colors))
        fills = {b.tag.split(':')[1]: b.fill for b in page.tagged('iso-band')}
        sfido = default_colors.rgb('sfido')
        assert fills['back'] == darken(sfido, 20)
        assert fills['right'] == lighten(sfido, 30)
        assert fills['front'] == lighten(sfido, 20)

    def test_bands_after_faces(self, overlap_dims, default_colors):
        items = composite_faces(PROJECTOR, overlap_dims, default_colors)
        last_face = max(i for i, item in enumerate(items) if item.tag.startswith('iso-face:'))
        first_band = min(i for i, item in enumerate(items) if item.tag.startswith('iso-band:'))
        assert last_face < first_band

    def test_bands_hidden_below_threshold(self, overlap_dims, default_colors):
        small = IsoProjector(scale=5.0, center=(105.0, 110.0))
        assert not bands_visible(overlap_dims, small.scale)
        page = _page(composite_faces(small, overlap_dims, default_colors))
        assert page.tagged('iso-band') == []

    def test_zero_dims(self, zero_dims, default_colors):
        page = _page(composite_faces(PROJECTOR, zero_dims, default_colors))
        assert page.is_finite()
        assert len(page.tagged('iso-face')) == len(FACE_DRAW_ORDER)


class TestArrow:
    """Tests for arrow."""

    def test_shaft_and_head(self):
        items = arrow((0.0, 0.0), (10.0, 0.0), head=2.0)
        assert len(items) == 3
        assert all(isinstance(i, Line) for i in items)
        assert items[0].end == (10.0, 0.0)
        for head in items[1:]:
            assert head.start == (10.0, 0.0)
            (x1, y1), (x2, y2) = head.start, head.end
            assert math.hypot(x2 - x1, y2 - y1) == pytest.approx(2.0)
            assert x2 < 10.0

    def test_degenerate_arrow_finite(self):
        for item in arrow((5.0, 5.0), (5.0, 5.0)):
            (x, y) = item.end
            assert math.isfinite(x) and math.isfinite(y)


class TestAnnotations:
    """Tests for annotation_items."""

    def test_five_callouts(self, standard_dims):
        page = _page(annotation_items(PROJECTOR, standard_dims, REGION))
        for face in ('back', 'left', 'base', 'right', 'front'):
            items = page.tagged(f'annotation:{face}')
            assert len([i for i in items if isinstance(i, Line)]) == 3
            assert len([i for i in items if isinstance(i, Text)]) == 2

    def test_area_texts(self, standard_dims):
        page = _page(annotation_items(PROJECTOR, standard_dims, REGION))
        back = [i.text for i in page.tagged('annotation:back') if isinstance(i, Text)]
        assert back == ["10.00 m²", "Parete Lunga"]
        base = [i.text for i in page.tagged('annotation:base') if isinstance(i, Text)]
        assert base == ["12.00 m²", "Base"]

    def test_anchors_are_fixed(self, standard_dims, large_dims):
        """Callout text does not move with the geometry."""
        small = _page(annotation_items(PROJECTOR, standard_dims, REGION))
        other = IsoProjector.fit(large_dims, (40.0, 62.0, 130.0, 116.0))
        large = _page(annotation_items(other, large_dims, REGION))
        pos_small = [(t.x, t.y) for t in small.tagged('annotation') if isinstance(t, Text)]
        pos_large = [(t.x, t.y) for t in large.tagged('annotation') if isinstance(t, Text)]
        assert pos_small == pos_large

    def test_arrow_tips_follow_faces(self, standard_dims):
        page = _page(annotation_items(PROJECTOR, standard_dims, REGION))
        centers = PROJECTOR.face_centers(standard_dims)
        shaft = page.tagged('annotation:base')[0]
        cx, cy = centers['base']
        assert shaft.end == pytest.approx((cx, cy + 2.0))

    def test_mouth_label_above_rim_center(self, standard_dims):
        page = _page(annotation_items(PROJECTOR, standard_dims, REGION))
        (label,) = page.tagged('mouth-label')
        tx, ty = PROJECTOR.face_centers(standard_dims)['top']
        assert label.text == "BOCCA DI SCAVO (APERTA)"
        assert label.x == pytest.approx(tx)
        assert label.y < ty

    def test_texts_inside_region(self, standard_dims):
        page = _page(annotation_items(PROJECTOR, standard_dims, REGION))
        rx, ry, rw, rh = REGION
        for item in page.tagged('annotation'):
            if isinstance(item, Text):
                assert rx <= item.x <= rx + rw
                assert ry - 5.0 <= item.y <= ry + rh + 10.0
