"""Packed serial frames exchanged with the robot controller."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from enum import IntEnum
from typing import ClassVar

HEADER_SOF = 0xA5
END1_SOF = 0x0D
END2_SOF = 0x0A


class CommandId(IntEnum):
    """Command identifiers of the shared protocol."""

    CHASSIS_ODOM = 0x0101
    CHASSIS_CTRL = 0x0102
    RGB = 0x0103
    RC = 0x0104
    VISION = 0x0105


def _pack(layout: struct.Struct, *values) -> bytes:
    try:
        return layout.pack(*values)
    except struct.error as exc:
        raise ValueError(str(exc)) from exc


def _unpack(layout: struct.Struct, data: bytes) -> tuple:
    if len(data) != layout.size:
        raise ValueError(f"expected {layout.size} bytes, got {len(data)}")
    return layout.unpack(data)


@dataclass
class FrameHeader:
    """Frame header: start byte, payload length, sequence number and CRC8."""

    sof: int = HEADER_SOF
    data_length: int = 0
    seq: int = 0
    crc8: int = 0

    _LAYOUT: ClassVar[struct.Struct] = struct.Struct("<BHBB")
    SIZE: ClassVar[int] = _LAYOUT.size

    def pack(self) -> bytes:
        """Serialise to the packed little-endian wire form."""
        return _pack(self._LAYOUT, self.sof, self.data_length, self.seq, self.crc8)

    @classmethod
    def unpack(cls, data: bytes) -> FrameHeader:
        """Parse from wire bytes; raises ValueError on a wrong length."""
        return cls(*_unpack(cls._LAYOUT, data))


@dataclass
class RobotCtrlInfo:
    """Chassis velocity, gimbal angles and fire control sent to the robot."""

    vx: float = 0.0
    vy: float = 0.0
    vw: float = 0.0
    yaw: float = 0.0
    pitch: float = 0.0
    target_lock: int = 0
    fire_command: int = 0

    _LAYOUT: ClassVar[struct.Struct] = struct.Struct("<5f2b")
    SIZE: ClassVar[int] = _LAYOUT.size

    def pack(self) -> bytes:
        """Serialise to the packed little-endian wire form."""
        return _pack(
            self._LAYOUT,
            self.vx,
            self.vy,
            self.vw,
            self.yaw,
            self.pitch,
            self.target_lock,
            self.fire_command,
        )

    @classmethod
    def unpack(cls, data: bytes) -> RobotCtrlInfo:
        """Parse from wire bytes; raises ValueError on a wrong length."""
        return cls(*_unpack(cls._LAYOUT, data))


@dataclass
class VisionInfo:
    """Gimbal attitude and shooting data reported by the robot."""

    id: int = 0
    mode: int = 0
    pitch: float = 0.0
    yaw: float = 0.0
    roll: float = 0.0
    quaternion: tuple[float, float, float, float] = (0.0, 0.0, 0.0, 0.0)
    shoot: float = 0.0

    _LAYOUT: ClassVar[struct.Struct] = struct.Struct("<2H3f4ff")
    SIZE: ClassVar[int] = _LAYOUT.size

    def __post_init__(self) -> None:
        self.quaternion = tuple(float(q) for q in self.quaternion)
        if len(self.quaternion) != 4:
            raise ValueError("quaternion must have exactly four components")

    def pack(self) -> bytes:
        """Serialise to the packed little-endian wire form."""
        return _pack(
            self._LAYOUT,
            self.id,
            self.mode,
            self.pitch,
            self.yaw,
            self.roll,
            *self.quaternion,
            self.shoot,
        )

    @classmethod
    def unpack(cls, data: bytes) -> VisionInfo:
        """Parse from wire bytes; raises ValueError on a wrong length."""
        values = _unpack(cls._LAYOUT, data)
        return cls(
            id=values[0],
            mode=values[1],
            pitch=values[2],
            yaw=values[3],
            roll=values[4],
            quaternion=tuple(values[5:9]),
            shoot=values[9],
        )