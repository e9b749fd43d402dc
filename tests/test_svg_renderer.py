"""
Unit tests for excavation_drawing.drawing.svg_renderer module.

Tests:
- Element generation per item type
- Page size / viewBox in mm
- One file per page
"""

import xml.etree.ElementTree as ET

from excavation_drawing.config import LineType
from excavation_drawing.drawing.primitives import Line, Page, Polygon, Rect, Text
from excavation_drawing.drawing.report import build_report
from excavation_drawing.drawing.svg_renderer import page_svg_path, page_to_svg, render_svg

SVG_NS = "{http://www.w3.org/2000/svg}"


def _parse(page: Page) -> ET.Element:
    return ET.fromstring(page_to_svg(page).tostring())


def _page(*items) -> Page:
    page = Page(number=1, title="t", width=210.0, height=297.0)
    page.extend(items)
    return page


class TestPageToSvg:
    """Tests for page_to_svg."""

    def test_size_in_mm(self):
        root = _parse(_page())
        assert root.get("width") == "210.0mm"
        assert root.get("height") == "297.0mm"
        assert root.get("viewBox") == "0 0 210.0 297.0"

    def test_rect(self):
        root = _parse(_page(Rect(10, 20, 30, 40, fill=(255, 0, 0), tag="face:base")))
        rect = root.find(f".//{SVG_NS}rect")
        assert rect.get("x") == "10"
        assert rect.get("width") == "30"
        assert rect.get("fill") == "rgb(255,0,0)"
        assert rect.get("data-tag") == "face:base"

    def test_rounded_rect(self):
        root = _parse(_page(Rect(0, 0, 10, 10, fill=(0, 0, 0), radius=2.0)))
        rect = root.find(f".//{SVG_NS}rect")
        assert rect.get("rx") == "2.0"

    def test_dashed_line(self):
        root = _parse(_page(Line((0, 0), (10, 0), line_type=LineType.FOLD, tag="fold")))
        line = root.find(f".//{SVG_NS}line")
        assert line.get("stroke-dasharray") == "2,2"
        assert line.get("stroke-width") == "0.3"

    def test_polygon(self):
        root = _parse(_page(Polygon([(0, 0), (10, 0), (5, 5)], fill=(1, 2, 3))))
        poly = root.find(f".//{SVG_NS}polygon")
        assert poly is not None
        assert poly.get("fill") == "rgb(1,2,3)"

    def test_text_alignment(self):
        root = _parse(_page(Text(105, 10, "Pagina 1/2", align="center"),
                            Text(195, 10, "Data", align="right")))
        texts = root.findall(f".//{SVG_NS}text")
        assert [t.get("text-anchor") for t in texts] == ["middle", "end"]
        assert texts[0].text == "Pagina 1/2"

    def test_bold_font(self):
        root = _parse(_page(Text(0, 0, "BASE", font="Helvetica-Bold")))
        assert root.find(f".//{SVG_NS}text").get("font-weight") == "bold"


class TestRenderSvg:
    """Tests for render_svg."""

    def test_page_path(self, tmp_path):
        assert page_svg_path(tmp_path / "report.svg", 2) == tmp_path / "report_p2.svg"

    def test_one_file_per_page(self, tmp_path, overlap_dims, default_colors, fixed_now):
        pages = build_report(overlap_dims, default_colors, now=fixed_now)
        paths = render_svg(pages, tmp_path / "report.svg")
        assert [p.name for p in paths] == ["report_p1.svg", "report_p2.svg"]
        for path in paths:
            root = ET.parse(path).getroot()
            assert root.tag == f"{SVG_NS}svg"

    def test_report_tags_preserved(self, tmp_path, standard_dims, default_colors, fixed_now):
        pages = build_report(standard_dims, default_colors, now=fixed_now)
        (path, _) = render_svg(pages, tmp_path / "report.svg")
        root = ET.parse(path).getroot()
        tags = {el.get("data-tag") for el in root.iter() if el.get("data-tag")}
        assert "face:base" in tags
        assert "total-box" in tags
        assert not any(t.startswith("strip") for t in tags)
