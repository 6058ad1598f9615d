"""Convert RoboSense point clouds into the Velodyne point layouts."""

from __future__ import annotations

import math
import struct
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import Enum

# Ring remapping for the 128-beam (Ruby) lidar, indexed by position in a column.
RING_ID_MAP_RUBY: tuple[int, ...] = (
    3, 66, 33, 96, 11, 74, 41, 104, 19, 82, 49, 112, 27, 90, 57, 120,
    35, 98, 1, 64, 43, 106, 9, 72, 51, 114, 17, 80, 59, 122, 25, 88,
    67, 34, 97, 0, 75, 42, 105, 8, 83, 50, 113, 16, 91, 58, 121, 24,
    99, 2, 65, 32, 107, 10, 73, 40, 115, 18, 81, 48, 123, 26, 89, 56,
    7, 70, 37, 100, 15, 78, 45, 108, 23, 86, 53, 116, 31, 94, 61, 124,
    39, 102, 5, 68, 47, 110, 13, 76, 55, 118, 21, 84, 63, 126, 29, 92,
    71, 38, 101, 4, 79, 46, 109, 12, 87, 54, 117, 20, 95, 62, 125, 28,
    103, 6, 69, 36, 111, 14, 77, 44, 119, 22, 85, 52, 127, 30, 93, 60,
)

# Ring remapping for the 16-beam lidar, indexed by row.
RING_ID_MAP_16: tuple[int, ...] = (
    0, 1, 2, 3, 4, 5, 6, 7, 15, 14, 13, 12, 11, 10, 9, 8,
)

INPUT_TOPIC = "/rslidar_points"
OUTPUT_TOPIC = "/velodyne_points"
OUTPUT_FRAME_ID = "velodyne"


class OutputType(Enum):
    """Point layouts that can be produced."""

    XYZI = "XYZI"
    XYZIR = "XYZIR"
    XYZIRT = "XYZIRT"


@dataclass
class RsPoint:
    """A RoboSense point; ring and timestamp are absent in XYZI clouds."""

    x: float
    y: float
    z: float
    intensity: float = 0.0
    ring: int = 0
    timestamp: float = 0.0


@dataclass
class VelodynePoint:
    """A Velodyne point; ring and time are None when the layout lacks them."""

    x: float
    y: float
    z: float
    intensity: float = 0.0
    ring: int | None = None
    time: float | None = None


def _float32(value: float) -> float:
    return struct.unpack("f", struct.pack("f", value))[0]


def has_nan(point: RsPoint | VelodynePoint) -> bool:
    """True when any coordinate of the point is NaN."""
    return math.isnan(point.x) or math.isnan(point.y) or math.isnan(point.z)


def _ring_for(point_id: int, height: int, width: int) -> int:
    if height == 16:
        if width <= 0:
            raise ValueError("a 16-row cloud needs a positive width")
        row = point_id // width
        if row >= len(RING_ID_MAP_16):
            raise ValueError(f"point {point_id} lies outside a 16 x {width} cloud")
        return RING_ID_MAP_16[row]
    if height == 128:
        return RING_ID_MAP_RUBY[point_id % height]
    return 0


def convert_xyzi(
    points: Sequence[RsPoint], height: int, width: int
) -> list[VelodynePoint]:
    """Turn an XYZI cloud into XYZIR points, deriving rings from the layout.

    NaN points are dropped. Rings are remapped for 16- and 128-row clouds;
    other heights leave the ring at 0.
    """
    return [
        VelodynePoint(
            x=point.x,
            y=point.y,
            z=point.z,
            intensity=float(point.intensity),
            ring=_ring_for(point_id, height, width),
        )
        for point_id, point in enumerate(points)
        if not has_nan(point)
    ]


def convert_xyzirt(
    points: Iterable[RsPoint], output_type: OutputType | str
) -> list[VelodynePoint]:
    """Turn an XYZIRT cloud into the requested Velodyne layout.

    NaN points are dropped. Times are relative to the first input point,
    whether or not that point was kept. Raises ValueError for an unknown
    output type.
    """
    kind = OutputType(output_type)
    points = list(points)
    base_time = points[0].timestamp if points else 0.0
    converted = []
    for point in points:
        if has_nan(point):
            continue
        new_point = VelodynePoint(
            x=point.x, y=point.y, z=point.z, intensity=float(point.intensity)
        )
        if kind in (OutputType.XYZIR, OutputType.XYZIRT):
            new_point.ring = point.ring
        if kind is OutputType.XYZIRT:
            new_point.time = _float32(point.timestamp - base_time)
        converted.append(new_point)
    return converted