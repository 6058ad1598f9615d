"""Turn lidar packets into frames and point clouds and hand them to callbacks."""

from __future__ import annotations

import time
from collections.abc import Callable, Sequence
from enum import Enum, IntEnum
from typing import Any, Protocol, TypeVar

from lidarkit.driver_param import DriverParam
from lidarkit.messages import PacketMsg, PointCloudMsg, ScanMsg

T = TypeVar("T")

# Reports of a missing DIFOP packet are throttled to one in this many attempts.
_NO_DIFOP_SCAN_LIMIT = 20
_NO_DIFOP_PACKET_LIMIT = 120


class DecodeResult(IntEnum):
    """Outcome of decoding one MSOP packet."""

    DECODE_OK = 0
    FRAME_SPLIT = 1
    DISCARD_PKT = 2
    WRONG_PKT_HEADER = 3
    PKT_NULL = 4


class DriverError(Enum):
    """Problems reported to the exception callbacks."""

    NO_DIFOP_RECEIVED = "no difop packet received"
    WRONG_PKT_HEADER = "wrong packet header"
    PKT_NULL = "empty packet"
    ZERO_POINTS = "frame holds no points"
    PKT_BUF_OVERFLOW = "packet buffer overflow"


class Decoder(Protocol):
    """What the driver needs from a packet decoder."""

    def process_msop_packet(self, data: bytes) -> tuple[DecodeResult, list[Any], int]:
        """Decode one MSOP packet; return the result, its points and the cloud height."""

    def process_difop_packet(self, data: bytes) -> None:
        """Take calibration and status data from a DIFOP packet."""

    def temperature(self) -> float:
        """Latest lidar temperature."""

    def lidar_time(self, data: bytes) -> float:
        """Timestamp carried by a packet, in seconds."""


def to_row_major(points: Sequence[T], height: int) -> list[T]:
    """Reorder a column-major cloud of ``height`` rows into row-major order.

    Points beyond the last full column are dropped.
    """
    if height <= 0:
        raise ValueError("height must be positive")
    width = len(points) // height
    return [points[col * height + row] for row in range(height) for col in range(width)]


def _keep_columns(points: Sequence[T], height: int) -> list[T]:
    return list(points)


class LidarDriver:
    """Collects packets into frames, decodes them and notifies listeners."""

    def __init__(
        self,
        param: DriverParam,
        decoder: Decoder,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.param = param
        self.decoder = decoder
        self._clock = clock
        self._arrange: Callable[[Sequence[Any], int], list[Any]] = (
            to_row_major if param.saved_by_rows else _keep_columns
        )
        self._point_cloud_callbacks: list[Callable[[PointCloudMsg[Any]], None]] = []
        self._scan_callbacks: list[Callable[[ScanMsg], None]] = []
        self._difop_callbacks: list[Callable[[PacketMsg], None]] = []
        self._exception_callbacks: list[Callable[[DriverError], None]] = []
        self.difop_received = False
        self._point_cloud_seq = 0
        self._scan_seq = 0
        self._no_difop_count = 0
        self._points: list[Any] = []
        self._scan = ScanMsg()

    def register_point_cloud_callback(self, callback: Callable[[PointCloudMsg[Any]], None]) -> None:
        """Call ``callback`` with every completed point cloud."""
        self._point_cloud_callbacks.append(callback)

    def register_scan_callback(self, callback: Callable[[ScanMsg], None]) -> None:
        """Call ``callback`` with the packets of every completed frame."""
        self._scan_callbacks.append(callback)

    def register_difop_callback(self, callback: Callable[[PacketMsg], None]) -> None:
        """Call ``callback`` with every DIFOP packet received."""
        self._difop_callbacks.append(callback)

    def register_exception_callback(self, callback: Callable[[DriverError], None]) -> None:
        """Call ``callback`` with every problem the driver meets."""
        self._exception_callbacks.append(callback)

    def lidar_temperature(self) -> float:
        """Latest temperature reported by the decoder."""
        return self.decoder.temperature()

    def _report(self, error: DriverError) -> None:
        for callback in self._exception_callbacks:
            callback(error)

    def _waiting_for_difop(self, limit: int) -> bool:
        if self.difop_received or not self.param.wait_for_difop:
            return False
        self._no_difop_count += 1
        if self._no_difop_count > limit:
            self._report(DriverError.NO_DIFOP_RECEIVED)
            self._no_difop_count = 0
        return True

    def _build_cloud(self, points: list[Any], height: int) -> PointCloudMsg[Any]:
        arranged = self._arrange(points, height)
        width = len(arranged) // height
        msg: PointCloudMsg[Any] = PointCloudMsg(
            points=arranged[: height * width], height=height, width=width
        )
        msg.seq = self._point_cloud_seq
        self._point_cloud_seq += 1
        msg.frame_id = self.param.frame_id
        msg.is_dense = False
        return msg

    def decode_msop_scan(self, scan: ScanMsg) -> PointCloudMsg[Any] | None:
        """Decode all packets of a scan into one point cloud.

        Returns None while waiting for a DIFOP packet or when the frame holds
        no points; problems go to the exception callbacks.
        """
        if self._waiting_for_difop(_NO_DIFOP_SCAN_LIMIT):
            return None
        height = 1
        points: list[Any] = []
        for packet in scan.packets:
            result, packet_points, height = self.decoder.process_msop_packet(bytes(packet.packet))
            if result in (DecodeResult.DECODE_OK, DecodeResult.FRAME_SPLIT):
                points.extend(packet_points)
            elif result is DecodeResult.WRONG_PKT_HEADER:
                self._report(DriverError.WRONG_PKT_HEADER)
            elif result is DecodeResult.PKT_NULL:
                self._report(DriverError.PKT_NULL)
        msg = self._build_cloud(points, height)
        msg.timestamp = scan.timestamp
        if not msg.points:
            self._report(DriverError.ZERO_POINTS)
            return None
        return msg

    def decode_difop_packet(self, packet: PacketMsg) -> None:
        """Pass a DIFOP packet to the decoder and mark DIFOP data as received."""
        self.decoder.process_difop_packet(bytes(packet.packet))
        self.difop_received = True

    def feed_difop(self, packet: PacketMsg) -> None:
        """Handle a DIFOP packet arriving from the lidar."""
        self.decode_difop_packet(packet)
        for callback in self._difop_callbacks:
            callback(packet)

    def feed_msop(self, packet: PacketMsg) -> None:
        """Handle an MSOP packet; emits a frame when the decoder splits one."""
        if self._waiting_for_difop(_NO_DIFOP_PACKET_LIMIT):
            return
        data = bytes(packet.packet)
        result, packet_points, height = self.decoder.process_msop_packet(data)
        self._scan.packets.append(packet)
        if result in (DecodeResult.DECODE_OK, DecodeResult.FRAME_SPLIT):
            self._points.extend(packet_points)
            if result is DecodeResult.FRAME_SPLIT:
                self._finish_frame(data, height)
        elif result is DecodeResult.DISCARD_PKT:
            self._scan.packets.clear()
            self._points = []
        else:
            self._report(DriverError.WRONG_PKT_HEADER)

    def _now(self, data: bytes) -> float:
        if self.param.decoder_param.use_lidar_clock:
            return self.decoder.lidar_time(data)
        return self._clock()

    def _finish_frame(self, data: bytes, height: int) -> None:
        msg = self._build_cloud(self._points, height)
        msg.timestamp = self._now(data)
        if not msg.points:
            self._report(DriverError.ZERO_POINTS)
        elif msg.seq != 0:
            for callback in self._point_cloud_callbacks:
                callback(msg)

        scan = self._scan
        scan.timestamp = self._now(bytes(scan.packets[-1].packet))
        scan.seq = self._scan_seq
        self._scan_seq += 1
        scan.frame_id = self.param.frame_id
        if scan.seq != 0:
            for callback in self._scan_callbacks:
                callback(scan)

        self._points = []
        self._scan = ScanMsg()