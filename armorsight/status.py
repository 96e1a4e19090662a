"""Robot state enumerations, physical constants and small helpers."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import IntEnum
from typing import Protocol

# Air drag model parameters.
GRAVITY = 9.78
SMALL_AIR_K = 0.01903
BIG_AIR_K = 0.00556
BIG_LIGHT_AIR_K = 0.00530


class _HasXY(Protocol):
    x: float
    y: float


class EnemyColor(IntEnum):
    """Colour of the enemy team."""

    RED = 1
    BLUE = 2


class EnemyType(IntEnum):
    """Kind of target."""

    SMALL = 1
    BIG = 2
    BUFF_NO = 3
    BUFF_YES = 4


class EnemyState(IntEnum):
    """Motion state of the enemy: plain movement or spinning."""

    RUN = 1
    SPIN = 2


class SpinHeading(IntEnum):
    """Direction of a spinning target."""

    UNKNOWN = 0
    CLOCKWISE = 1
    COUNTER_CLOCKWISE = 2


class AxesState(IntEnum):
    """Which axis of the vehicle an armor belongs to."""

    UNAWARE = 0
    LONG = 1
    SHORT = 2
    HIGH = 3
    LOW = 4


class Balance(IntEnum):
    """Camera white balance: automatic or manual."""

    HIK_ON = 1
    HIK_OFF = 2


class MDCamera(IntEnum):
    """Whether the camera is opened by name."""

    MD_ON = 1
    MD_OFF = 2


@dataclass
class RobotState:
    """Angles and bullet speed reported by the controller."""

    controller_pitch: float = 0.0
    controller_yaw: float = 0.0
    controller_roll: float = 0.0
    quaternion: tuple[float, float, float, float] = (0.0, 0.0, 0.0, 0.0)
    bullet_speed: float = 0.0

    def __post_init__(self) -> None:
        self.quaternion = tuple(float(q) for q in self.quaternion)
        if len(self.quaternion) != 4:
            raise ValueError("quaternion must have exactly four components")


def point_dist(p1: _HasXY, p2: _HasXY) -> float:
    """Euclidean distance between two points with ``x`` and ``y``."""
    return math.hypot(p1.x - p2.x, p1.y - p2.y)


def color_from_name(name: str) -> EnemyColor:
    """Map ``"RED"`` to :attr:`EnemyColor.RED`; anything else is blue."""
    return EnemyColor.RED if name == "RED" else EnemyColor.BLUE