"""Light bar normalisation and pairing of light bars into armor plates."""

from __future__ import annotations

import logging
import math
from collections import deque
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Iterable, Sequence

from armorsight.geometry import Point, RotatedRect

logger = logging.getLogger(__name__)

# Geometric limits for pairing two light bars.
MAX_ANGLE_DIFF = 5.0
MAX_HEIGHT_RATIO = 2.0
MIN_DIST_H_RATIO = 0.8
MAX_DIST_H_RATIO = 7.0
MAX_Y_DIFF_RATIO = 0.5

# Limits for accepting a single light bar.
MIN_LIGHT_AREA = 30.0
MIN_LIGHT_HEIGHT = 30.0
MAX_LIGHT_WIDTH_RATIO = 1.2
MIN_VERTICAL_COMPONENT = 0.8

# Two bars closer than this are treated as duplicates.
DUPLICATE_DX = 30.0
DUPLICATE_DY = 50.0

_IDENTITY = ((1.0, 0.0, 0.0), (0.0, 1.0, 0.0), (0.0, 0.0, 1.0))


class Strategy(IntEnum):
    """How the corners of an armor are built from its two light bars."""

    LINEAR = 0
    COMPLEX = 1
    DIRECT = 2


@dataclass(frozen=True)
class Light:
    """A detected light bar with ordered corners.

    ``bounding_points`` runs top-left, top-right, bottom-right, bottom-left;
    ``orientation`` is a unit vector pointing from top to bottom.
    """

    orientation: Point
    rect: RotatedRect
    top: Point
    bottom: Point
    bounding_points: tuple[Point, Point, Point, Point]
    color: str = "N"

    @property
    def center(self) -> Point:
        return self.rect.center

    @property
    def length(self) -> float:
        """The longer side of the bar's rectangle."""
        return max(self.rect.width, self.rect.height)

    @property
    def thickness(self) -> float:
        """The shorter side of the bar's rectangle."""
        return min(self.rect.width, self.rect.height)


@dataclass
class Armor:
    """An armor plate built from a pair of light bars."""

    id: int = 0
    color: str = "N"
    strategy: Strategy = Strategy.LINEAR
    center: Point = Point()
    radius: float = 0.0
    number_roi_points: list[Point] = field(default_factory=list)
    pnp_points: list[Point] = field(default_factory=list)
    position: tuple[float, float, float] = (0.0, 0.0, 0.0)
    rotation_matrix: tuple[tuple[float, ...], ...] = _IDENTITY
    yaw_history: deque = field(default_factory=lambda: deque(maxlen=3))
    position_history: deque = field(default_factory=deque)
    type: str = ""
    yaw: float = 0.0


def _round_half_away(value: float) -> float:
    return math.copysign(math.floor(abs(value) + 0.5), value)


def _angle_deg(vec: Point) -> float:
    return _round_half_away(math.degrees(math.atan2(vec.y, vec.x)))


def determine_color(roi: Iterable[Iterable[Sequence[int]]]) -> str:
    """Return ``'R'`` if the red channel outweighs blue in BGR pixel rows, else ``'B'``."""
    red = blue = 0
    for row in roi:
        for pixel in row:
            blue += pixel[0]
            red += pixel[2]
    return "R" if red > blue else "B"


def make_light(rect: RotatedRect, color: str) -> Light | None:
    """Normalise a candidate rectangle into a light bar, or None if it is rejected."""
    if rect.area() < MIN_LIGHT_AREA:
        return None
    height = max(rect.width, rect.height)
    width = min(rect.width, rect.height)
    if height < MIN_LIGHT_HEIGHT or width / height > MAX_LIGHT_WIDTH_RATIO:
        return None

    p0, p1, p2, p3 = rect.points()
    shift8 = Point(0.0, width / 8.0)
    if (p0 - p1).norm() > (p1 - p2).norm():
        c = p0.x < p3.x
        if p0.y > p1.y:
            orientation = (p0 + p3) / 2 - (p1 + p2) / 2
            top = (p1 + p2) / 2 - shift8
            bottom = (p0 + p3) / 2 + shift8
            corners = (p1 if c else p2, p2 if c else p1, p3 if c else p0, p0 if c else p3)
        else:
            orientation = (p1 + p2) / 2 - (p0 + p3) / 2
            top = (p0 + p3) / 2 - shift8
            bottom = (p1 + p2) / 2 + shift8
            corners = (p0 if c else p3, p3 if c else p0, p2 if c else p1, p1 if c else p2)
    else:
        c = p0.x < p1.x
        if p1.y > p2.y:
            orientation = (p1 + p0) / 2 - (p2 + p3) / 2
            top = (p2 + p3) / 2 - shift8
            bottom = (p1 + p0) / 2 + shift8
            corners = (p3 if c else p2, p2 if c else p3, p1 if c else p0, p0 if c else p1)
        else:
            shift4 = Point(0.0, width / 4.0)
            orientation = (p2 + p3) / 2 - (p0 + p1) / 2
            top = (p1 + p0) / 2 - shift4
            bottom = (p2 + p3) / 2 + shift4
            corners = (p0 if c else p1, p1 if c else p0, p2 if c else p3, p3 if c else p2)

    length = orientation.norm()
    if length == 0:
        return None
    unit = orientation / length
    if unit.y < MIN_VERTICAL_COMPONENT:
        return None
    return Light(
        orientation=unit,
        rect=rect,
        top=top,
        bottom=bottom,
        bounding_points=corners,
        color=color,
    )


def dedupe_lights(lights: Iterable[Light]) -> list[Light]:
    """Sort lights left to right and drop each one too close to the last kept."""
    kept: list[Light] = []
    for light in sorted(lights, key=lambda item: item.center.x):
        if kept:
            last = kept[-1].center
            if (
                abs(last.x - light.center.x) < DUPLICATE_DX
                and abs(last.y - light.center.y) <= DUPLICATE_DY
            ):
                continue
        kept.append(light)
    return kept


def _resolve_strategy(active: Strategy | int | None) -> Strategy | None:
    if active is None or active == -1:
        return None
    return Strategy(active)


def _pair_score(light1: Light, light2: Light) -> float | None:
    if abs(_angle_deg(light1.orientation) - _angle_deg(light2.orientation)) > MAX_ANGLE_DIFF:
        return None
    h1, h2 = light1.length, light2.length
    if h1 == 0 or h2 == 0:
        return None
    if max(h1, h2) / min(h1, h2) > MAX_HEIGHT_RATIO:
        return None
    centerline = light2.center - light1.center
    distance = centerline.norm()
    avg_height = (h1 + h2) / 2.0
    ratio = distance / avg_height
    if ratio < MIN_DIST_H_RATIO or ratio > MAX_DIST_H_RATIO:
        return None
    if abs(light1.center.y - light2.center.y) / avg_height > MAX_Y_DIFF_RATIO:
        return None
    if distance == 0:
        return None
    direction = centerline / distance
    return abs(light1.orientation.dot(direction)) + abs(light2.orientation.dot(direction))


def _best_pair(lights: Sequence[Light], matched: list[bool]) -> tuple[int, int, float] | None:
    best: tuple[int, int, float] | None = None
    for i, light1 in enumerate(lights):
        if matched[i]:
            continue
        for j in range(i + 1, len(lights)):
            if matched[j]:
                continue
            score = _pair_score(light1, lights[j])
            if score is not None and (best is None or score < best[2]):
                best = (i, j, score)
    return best


def _judge_type(lights: Sequence[Light], i: int, j: int) -> str:
    y_mid = (lights[i].center.y + lights[j].center.y) / 2
    x_mid = (lights[i].center.x + lights[j].center.x) / 2
    armor_type = ""
    for k, other in enumerate(lights):
        if k in (i, j):
            continue
        off_axis = abs(x_mid - other.center.x) != 0
        if y_mid > other.center.y and off_axis:
            armor_type = "long"
        elif y_mid < other.center.y and off_axis:
            armor_type = "short"
    return armor_type


def _complex_corners(
    light1: Light, light2: Light, tilt: float, span: float, inner: float
) -> tuple[list[Point], list[Point]] | None:
    if light1.length >= light2.length:
        a, c = light1.length / 2.0, (light1.top - light2.center).norm()
    else:
        a, c = light2.length / 2.0, (light2.top - light1.center).norm()
    b = span
    if 2 * a * b == 0:
        return None
    cos_val = max(-1.0, min(1.0, (a * a + b * b - c * c) / (2 * a * b)))
    the_angle = abs(math.acos(cos_val)) * 180.0 / math.pi
    angle_rad = (180.0 - (the_angle + tilt * 180.0 / math.pi)) * math.pi / 180.0
    kc, ks = abs(math.cos(angle_rad)), abs(math.sin(angle_rad))

    if light1.length >= light2.length:
        bp = light1.bounding_points
        right_top = light1.top + Point(span * kc, -span * ks * 0.9)
        right_bottom = light1.bottom + Point(span * kc, -span * ks * 1.1)
        right_top_inner = bp[1] + Point(inner * kc, -inner * ks * 0.9)
        right_bottom_inner = bp[2] + Point(inner * kc, -inner * ks * 1.1)
        roi = [bp[1], right_top_inner, right_bottom_inner, bp[2]]
        pnp = roi + [light1.top, right_top, right_bottom, light1.bottom]
    else:
        bp = light2.bounding_points
        left_top = light2.top - Point(span * kc, span * ks * 0.9)
        left_bottom = light2.bottom - Point(span * kc, span * ks * 1.1)
        left_top_inner = bp[0] - Point(inner * kc, inner * ks * 0.9)
        left_bottom_inner = bp[3] - Point(inner * kc, inner * ks * 1.1)
        roi = [left_top_inner, bp[0], bp[3], left_bottom_inner]
        pnp = roi + [left_top, light2.top, light2.bottom, left_bottom]
    return roi, pnp


def _linear_corners(
    light1: Light, light2: Light, total: Point
) -> tuple[list[Point], list[Point]]:
    if light1.length >= light2.length:
        hd = (light1.length - light2.length) / 4.0
        down = Point(hd * total.x, hd * total.y)
        up = Point(hd * total.x, -hd * total.y)
        right_top = light2.top - down
        right_bottom = light2.bottom + up
        right_top_inner = light2.bounding_points[0] - down
        right_bottom_inner = light2.bounding_points[3] + up
        bp = light1.bounding_points
        roi = [bp[1], right_top_inner, right_bottom_inner, bp[2]]
        pnp = roi + [light1.top, right_top, right_bottom, light1.bottom]
    else:
        hd = (light2.length - light1.length) / 4.0
        down = Point(hd * total.x, hd * total.y)
        up = Point(hd * total.x, -hd * total.y)
        left_top = light1.top + up
        left_bottom = light1.bottom - down
        left_top_inner = light1.bounding_points[1] + up
        left_bottom_inner = light1.bounding_points[2] - down
        bp = light2.bounding_points
        roi = [left_top_inner, bp[0], bp[3], left_bottom_inner]
        pnp = roi + [left_top, light2.top, light2.bottom, left_bottom]
    return roi, pnp


def _direct_corners(light1: Light, light2: Light) -> tuple[list[Point], list[Point]]:
    bp1, bp2 = light1.bounding_points, light2.bounding_points
    roi = [bp1[1], bp2[0], bp2[3], bp1[2]]
    pnp = roi + [light1.top, light2.top, light2.bottom, light1.bottom]
    return roi, pnp


def _choose_strategy(light1: Light, light2: Light) -> Strategy:
    h1, h2 = light1.length, light2.length
    w1, w2 = light1.thickness, light2.thickness
    complex_cond = (h1 >= h2 and w2 > 0 and w1 / w2 > 1.0 / 0.7) or (
        h1 < h2 and w1 > 0 and w2 / w1 > 1.0 / 0.7
    )
    return Strategy.COMPLEX if complex_cond else Strategy.LINEAR


def match_armors(
    lights: Sequence[Light], active_strategy: Strategy | int | None = None
) -> list[Armor]:
    """Greedily pair light bars into armors, best-aligned pair first.

    ``active_strategy`` of None or -1 picks the strategy per pair; any other
    value forces that :class:`Strategy` and raises ValueError if unknown.
    """
    forced = _resolve_strategy(active_strategy)
    logger.info("matching %d lights, strategy %s", len(lights), active_strategy)
    armors: list[Armor] = []
    matched = [False] * len(lights)

    while (best := _best_pair(lights, matched)) is not None:
        i, j, score = best
        logger.debug("best pair %d and %d, score %g", i + 1, j + 1, score)
        matched[i] = matched[j] = True
        light1, light2 = lights[i], lights[j]

        span = (light1.center - light2.center).norm()
        total = light1.orientation / 2.0 + light2.orientation / 2.0
        tilt = math.atan2(abs(total.y), abs(total.x))
        inner = (
            (light2.bounding_points[0] + light2.bounding_points[3]) / 2.0
            - (light1.bounding_points[1] + light1.bounding_points[2]) / 2.0
        ).norm()

        strategy = forced if forced is not None else _choose_strategy(light1, light2)
        if strategy is Strategy.COMPLEX:
            corners = _complex_corners(light1, light2, tilt, span, inner)
            if corners is None:
                continue
        elif strategy is Strategy.LINEAR:
            corners = _linear_corners(light1, light2, total)
        else:
            corners = _direct_corners(light1, light2)
        roi, pnp = corners

        if not all(math.isfinite(p.x) and math.isfinite(p.y) for p in pnp):
            logger.warning("pair %d and %d gave non-finite corners, dropped", i + 1, j + 1)
            continue

        armors.append(
            Armor(
                color=light1.color,
                strategy=strategy,
                center=(light1.center + light2.center) / 2.0,
                radius=span / 2.0,
                number_roi_points=roi,
                pnp_points=pnp,
                type=_judge_type(lights, i, j),
            )
        )

    logger.info("matching produced %d armors", len(armors))
    return armors