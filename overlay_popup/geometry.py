"""Value types for popup placement arithmetic (pure, no Qt)."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple, Union

Number = Union[int, float]
Bounds = Tuple[float, float, float, float]


def _safe_div(numerator: float, denominator: float) -> float:
    if denominator == 0:
        return 0.0
    return numerator / denominator


@dataclass(frozen=True)
class Size:
    width: float = 0.0
    height: float = 0.0

    def __add__(self, other: "Size") -> "Size":
        return Size(self.width + other.width, self.height + other.height)

    def __sub__(self, other: "Size") -> "Size":
        return Size(self.width - other.width, self.height - other.height)

    def __mul__(self, other: Union["Size", Number]) -> "Size":
        if isinstance(other, Size):
            return Size(self.width * other.width, self.height * other.height)
        return Size(self.width * other, self.height * other)

    __rmul__ = __mul__

    def __truediv__(self, other: Union["Size", Number]) -> "Size":
        if isinstance(other, Size):
            return Size(_safe_div(self.width, other.width), _safe_div(self.height, other.height))
        return Size(_safe_div(self.width, other), _safe_div(self.height, other))

    def __neg__(self) -> "Size":
        return Size(-self.width, -self.height)

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0

    def as_tuple(self) -> Tuple[float, float]:
        return (self.width, self.height)


@dataclass(frozen=True)
class Point:
    x: float = 0.0
    y: float = 0.0

    def __add__(self, other: Size) -> "Point":
        return Point(self.x + other.width, self.y + other.height)

    def __sub__(self, other: Union[Size, "Point"]):
        # Point - Point gives the displacement between them.
        if isinstance(other, Point):
            return Size(self.x - other.x, self.y - other.y)
        return Point(self.x - other.width, self.y - other.height)

    def as_tuple(self) -> Tuple[float, float]:
        return (self.x, self.y)


@dataclass(frozen=True)
class UnitPoint:
    """Fractional coordinate, nominally within [0, 1] on both axes (not enforced)."""

    x: float = 0.0
    y: float = 0.0

    def point_in(self, size: Size) -> Point:
        return Point(self.x * size.width, self.y * size.height)

    def scale(self, size: Size) -> Size:
        return Size(self.x * size.width, self.y * size.height)

    def __mul__(self, other: Size) -> Point:
        return self.point_in(other)

    def as_size(self) -> Size:
        return Size(self.x, self.y)


UnitPoint.zero = UnitPoint(0.0, 0.0)  # type: ignore[attr-defined]
UnitPoint.center = UnitPoint(0.5, 0.5)  # type: ignore[attr-defined]
UnitPoint.top = UnitPoint(0.5, 0.0)  # type: ignore[attr-defined]
UnitPoint.bottom = UnitPoint(0.5, 1.0)  # type: ignore[attr-defined]
UnitPoint.leading = UnitPoint(0.0, 0.5)  # type: ignore[attr-defined]
UnitPoint.trailing = UnitPoint(1.0, 0.5)  # type: ignore[attr-defined]
UnitPoint.top_leading = UnitPoint(0.0, 0.0)  # type: ignore[attr-defined]
UnitPoint.top_trailing = UnitPoint(1.0, 0.0)  # type: ignore[attr-defined]
UnitPoint.bottom_leading = UnitPoint(0.0, 1.0)  # type: ignore[attr-defined]
UnitPoint.bottom_trailing = UnitPoint(1.0, 1.0)  # type: ignore[attr-defined]


@dataclass(frozen=True)
class Rect:
    """Measured bounding box in a shared coordinate space."""

    origin: Point = Point()
    size: Size = Size()

    @classmethod
    def from_xywh(cls, x: Number, y: Number, width: Number, height: Number) -> "Rect":
        return cls(Point(float(x), float(y)), Size(float(width), float(height)))

    @classmethod
    def from_bounds(cls, bounds: Bounds) -> "Rect":
        min_x, min_y, max_x, max_y = bounds
        return cls.from_xywh(min_x, min_y, max_x - min_x, max_y - min_y)

    @property
    def min_x(self) -> float:
        return self.origin.x

    @property
    def min_y(self) -> float:
        return self.origin.y

    @property
    def max_x(self) -> float:
        return self.origin.x + self.size.width

    @property
    def max_y(self) -> float:
        return self.origin.y + self.size.height

    @property
    def mid_x(self) -> float:
        return self.origin.x + self.size.width / 2.0

    @property
    def mid_y(self) -> float:
        return self.origin.y + self.size.height / 2.0

    def contains(self, point: Point) -> bool:
        return self.min_x <= point.x < self.max_x and self.min_y <= point.y < self.max_y

    def as_bounds(self) -> Bounds:
        return (self.min_x, self.min_y, self.max_x, self.max_y)


ZERO_POINT = Point()
ZERO_SIZE = Size()
ZERO_RECT = Rect()
