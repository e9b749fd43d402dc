"""
Backend-neutral page content.

A report page is a display list of rectangles, polygons, lines and text in
page millimeters (origin top-left, y down), drawn in list order. The PDF
and SVG renderers replay the same list, so layout logic never touches a
drawing library directly.

Every item carries a ``tag`` naming what it depicts (``'face:base'``,
``'strip:long'``, ``'overlap-detail'``...) so a page can be queried.
"""

import math
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Sequence, Tuple, Union

from excavation_drawing.config import FONT_REGULAR, LineType, TEXT_DARK
from excavation_drawing.model.colors import RGB

Point = Tuple[float, float]


@dataclass
class Rect:
    x: float
    y: float
    w: float
    h: float
    fill: Optional[RGB] = None
    stroke: Optional[RGB] = None
    line_type: LineType = LineType.THIN
    radius: float = 0.0
    tag: str = ""

    def points(self) -> List[Point]:
        return [(self.x, self.y), (self.x + self.w, self.y),
                (self.x + self.w, self.y + self.h), (self.x, self.y + self.h)]


@dataclass
class Polygon:
    points: List[Point]
    fill: Optional[RGB] = None
    stroke: Optional[RGB] = None
    line_type: LineType = LineType.THIN
    tag: str = ""


@dataclass
class Line:
    start: Point
    end: Point
    stroke: RGB = TEXT_DARK
    line_type: LineType = LineType.THIN
    tag: str = ""

    def points(self) -> List[Point]:
        return [self.start, self.end]


@dataclass
class Text:
    x: float
    y: float
    text: str
    size: float = 10.0
    font: str = FONT_REGULAR
    color: RGB = TEXT_DARK
    align: str = "left"  # left | center | right
    tag: str = ""

    def points(self) -> List[Point]:
        return [(self.x, self.y)]


Item = Union[Rect, Polygon, Line, Text]


def item_points(item: Item) -> List[Point]:
    if isinstance(item, Polygon):
        return list(item.points)
    return item.points()


@dataclass
class Page:
    """One report page."""
    number: int
    title: str
    width: float
    height: float
    items: List[Item] = field(default_factory=list)

    def add(self, item: Item) -> Item:
        self.items.append(item)
        return item

    def extend(self, items: Sequence[Item]) -> None:
        self.items.extend(items)

    def __iter__(self) -> Iterator[Item]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def tagged(self, prefix: str) -> List[Item]:
        """Items whose tag equals ``prefix`` or starts with ``prefix + ':'``."""
        return [i for i in self.items
                if i.tag == prefix or i.tag.startswith(prefix + ":")]

    def texts(self) -> List[str]:
        return [i.text for i in self.items if isinstance(i, Text)]

    def is_finite(self) -> bool:
        """True if every coordinate on the page is a finite number."""
        for item in self.items:
            for x, y in item_points(item):
                if not (math.isfinite(x) and math.isfinite(y)):
                    return False
            if isinstance(item, Rect) and not (math.isfinite(item.w) and math.isfinite(item.h)):
                return False
        return True
