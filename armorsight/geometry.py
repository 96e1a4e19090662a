"""Planar points, rotated rectangles and light bars."""

from __future__ import annotations

import math
from dataclasses import dataclass

from armorsight.status import point_dist

_FLT_EPSILON = 1.1920928955078125e-07


@dataclass(frozen=True)
class Point:
    """A point or vector in the image plane."""

    x: float = 0.0
    y: float = 0.0

    def __add__(self, other: Point) -> Point:
        return Point(self.x + other.x, self.y + other.y)

    def __sub__(self, other: Point) -> Point:
        return Point(self.x - other.x, self.y - other.y)

    def __neg__(self) -> Point:
        return Point(-self.x, -self.y)

    def __mul__(self, k: float) -> Point:
        return Point(self.x * k, self.y * k)

    __rmul__ = __mul__

    def __truediv__(self, k: float) -> Point:
        return Point(self.x / k, self.y / k)

    def dot(self, other: Point) -> float:
        """Scalar product with another vector."""
        return self.x * other.x + self.y * other.y

    def norm(self) -> float:
        """Euclidean length."""
        return math.hypot(self.x, self.y)


@dataclass(frozen=True)
class RotatedRect:
    """A rectangle of given size rotated by ``angle`` degrees about its centre."""

    center: Point
    width: float
    height: float
    angle: float = 0.0

    def points(self) -> tuple[Point, Point, Point, Point]:
        """The four corners, in the same order as the usual vision convention."""
        rad = math.radians(self.angle)
        b = math.cos(rad) * 0.5
        a = math.sin(rad) * 0.5
        cx, cy = self.center.x, self.center.y
        p0 = Point(cx - a * self.height - b * self.width, cy + b * self.height - a * self.width)
        p1 = Point(cx + a * self.height - b * self.width, cy - b * self.height - a * self.width)
        p2 = Point(2 * cx - p0.x, 2 * cy - p0.y)
        p3 = Point(2 * cx - p1.x, 2 * cy - p1.y)
        return p0, p1, p2, p3

    @classmethod
    def from_points(cls, p1: Point, p2: Point, p3: Point) -> RotatedRect:
        """Build a rectangle from three consecutive corners.

        Raises ValueError if the two given sides are not perpendicular.
        """
        center = (p1 + p3) * 0.5
        vecs = (p1 - p2, p2 - p3)
        largest = max(p1.norm(), p2.norm(), p3.norm())
        n0, n1 = vecs[0].norm(), vecs[1].norm()
        shortest = min(n0, n1)
        if abs(vecs[0].dot(vecs[1])) * shortest > _FLT_EPSILON * 9 * largest * (n0 * n1):
            raise ValueError("the given points do not form a rectangle")
        wd_i = 1 if abs(vecs[1].y) < abs(vecs[1].x) else 0
        ht_i = (wd_i + 1) % 2
        wd = vecs[wd_i]
        if wd.x == 0:
            angle = math.copysign(90.0, wd.y) if wd.y else 0.0
        else:
            angle = math.degrees(math.atan(wd.y / wd.x))
        return cls(center, vecs[wd_i].norm(), vecs[ht_i].norm(), angle)

    def bounding_rect(self) -> tuple[int, int, int, int]:
        """Integer upright box ``(x, y, width, height)`` covering all corners."""
        pts = self.points()
        left = math.floor(min(p.x for p in pts))
        top = math.floor(min(p.y for p in pts))
        right = math.ceil(max(p.x for p in pts))
        bottom = math.ceil(max(p.y for p in pts))
        return left, top, right - left + 1, bottom - top + 1

    def area(self) -> float:
        """Width times height."""
        return self.width * self.height


@dataclass(frozen=True)
class LightBar:
    """A light bar described by its end midpoints, size and tilt."""

    rect: RotatedRect
    top: Point
    bottom: Point
    angle: float
    height: float
    width: float
    light_color: int = 0

    @classmethod
    def from_rotated_rect(cls, box: RotatedRect) -> LightBar:
        """Derive top, bottom, size and tilt angle from a rotated rectangle."""
        p = sorted(box.points(), key=lambda pt: pt.y)
        top = (p[0] + p[1]) / 2
        bottom = (p[2] + p[3]) / 2
        angle = box.angle if top.x < bottom.x else 90 + box.angle
        if abs(bottom.x - top.x) <= 0.01:
            angle = 90.0
        return cls(
            rect=box,
            top=top,
            bottom=bottom,
            angle=angle,
            height=point_dist(top, bottom),
            width=point_dist(p[0], p[1]),
        )