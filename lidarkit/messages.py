"""Messages passed around by the driver: packets, scans and point clouds."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Generic, TypeVar

PointT = TypeVar("PointT")


class PacketType(IntEnum):
    """Kind of lidar packet."""

    MSOP = 0
    DIFOP = 1


@dataclass
class PacketMsg:
    """A single raw lidar packet."""

    packet: bytearray = field(default_factory=bytearray)

    def __post_init__(self) -> None:
        self.packet = bytearray(self.packet)

    @classmethod
    def zeroed(cls, length: int) -> PacketMsg:
        """A packet of the given length filled with zero bytes."""
        if length < 0:
            raise ValueError("packet length must not be negative")
        return cls(bytearray(length))

    def copy(self) -> PacketMsg:
        """An independent copy of this packet."""
        return PacketMsg(bytearray(self.packet))


@dataclass
class ScanMsg:
    """The packets that make up one frame."""

    timestamp: float = 0.0
    seq: int = 0
    frame_id: str = ""
    packets: list[PacketMsg] = field(default_factory=list)


@dataclass
class PointCloudMsg(Generic[PointT]):
    """A decoded point cloud with its header."""

    points: list[PointT] = field(default_factory=list)
    timestamp: float = 0.0
    frame_id: str = ""
    seq: int = 0
    height: int = 0
    width: int = 0
    is_dense: bool = False