"""Driver configuration: lidar models, decoder, input and driver parameters."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import IntEnum

logger = logging.getLogger(__name__)

_RULE = "-" * 54


class LidarType(IntEnum):
    """Supported lidar models."""

    RS16 = 1
    RS32 = 2
    RSBP = 3
    RS128 = 4
    RS128_40 = 5
    RS80 = 6
    RSHELIOS = 7
    RSROCK = 8
    RSM1 = 10


class SplitFrameMode(IntEnum):
    """How the packet stream is cut into frames."""

    SPLIT_BY_ANGLE = 1
    SPLIT_BY_FIXED_PKTS = 2
    SPLIT_BY_CUSTOM_PKTS = 3


def _section(title: str, lines: list[str]) -> str:
    return "\n".join([_RULE, f"             RoboSense {title} ", *lines, _RULE])


def _fmt(value: object) -> str:
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, float):
        return f"{value:g}"
    return str(value)


@dataclass
class CameraTriggerParam:
    """Trigger angles (degrees) mapped to camera frame ids."""

    trigger_map: dict[float, str] = field(default_factory=dict)

    def describe(self) -> str:
        """Return a readable listing, ordered by trigger angle."""
        lines = [
            f"camera_frame_id: {frame_id} trigger_angle : {_fmt(angle)}"
            for angle, frame_id in sorted(self.trigger_map.items())
        ]
        return _section("Camera Trigger Parameters", lines)


@dataclass
class TransformParam:
    """Rigid transform applied to points; metres and radians."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    roll: float = 0.0
    pitch: float = 0.0
    yaw: float = 0.0

    def describe(self) -> str:
        """Return a readable listing of the transform."""
        names = ("x", "y", "z", "roll", "pitch", "yaw")
        lines = [f"{name}: {_fmt(getattr(self, name))}" for name in names]
        return _section("Transform Parameters", lines)


@dataclass
class DecoderParam:
    """Parameters controlling packet decoding."""

    max_distance: float = 200.0
    min_distance: float = 0.2
    start_angle: float = 0.0
    end_angle: float = 360.0
    split_frame_mode: SplitFrameMode = SplitFrameMode.SPLIT_BY_ANGLE
    num_pkts_split: int = 1
    cut_angle: float = 0.0
    use_lidar_clock: bool = False
    transform_param: TransformParam = field(default_factory=TransformParam)
    trigger_param: CameraTriggerParam = field(default_factory=CameraTriggerParam)

    def describe(self) -> str:
        """Return the transform, trigger and decoder listings."""
        names = (
            "max_distance",
            "min_distance",
            "start_angle",
            "end_angle",
            "use_lidar_clock",
        )
        lines = [f"{name}: {_fmt(getattr(self, name))}" for name in names]
        lines.append(f"split_frame_mode: {int(self.split_frame_mode)}")
        lines.append(f"num_pkts_split: {self.num_pkts_split}")
        lines.append(f"cut_angle: {_fmt(self.cut_angle)}")
        return "\n".join(
            [
                self.transform_param.describe(),
                self.trigger_param.describe(),
                _section("Decoder Parameters", lines),
            ]
        )


@dataclass
class InputParam:
    """Where packets come from: a live lidar or a pcap file."""

    device_ip: str = "192.168.1.200"
    multi_cast_address: str = "0.0.0.0"
    host_address: str = "0.0.0.0"
    msop_port: int = 6699
    difop_port: int = 7788
    read_pcap: bool = False
    pcap_rate: float = 1.0
    pcap_repeat: bool = True
    pcap_path: str = "null"
    use_vlan: bool = False
    use_someip: bool = False
    use_custom_proto: bool = False

    def describe(self) -> str:
        """Return a readable listing of the input parameters."""
        names = (
            "multi_cast_address",
            "msop_port",
            "difop_port",
            "read_pcap",
            "pcap_repeat",
            "pcap_path",
            "use_vlan",
            "use_someip",
        )
        lines = [f"{name}: {_fmt(getattr(self, name))}" for name in names]
        return _section("Input Parameters", lines)


@dataclass
class DriverParam:
    """Top-level driver parameters."""

    input_param: InputParam = field(default_factory=InputParam)
    decoder_param: DecoderParam = field(default_factory=DecoderParam)
    angle_path: str = "null"
    frame_id: str = "rslidar"
    lidar_type: LidarType = LidarType.RS16
    wait_for_difop: bool = True
    saved_by_rows: bool = False

    def describe(self) -> str:
        """Return input, decoder and driver listings."""
        lines = [
            f"angle_path: {self.angle_path}",
            f"frame_id: {self.frame_id}",
            f"lidar_type: {lidar_type_to_str(self.lidar_type)}",
        ]
        return "\n".join(
            [
                self.input_param.describe(),
                self.decoder_param.describe(),
                _section("Driver Parameters", lines),
            ]
        )


def lidar_type_to_str(lidar_type: LidarType | int) -> str:
    """Name of a lidar type, or "ERROR" for an unknown value."""
    try:
        return LidarType(lidar_type).name
    except ValueError:
        logger.error("Unknown lidar type value: %r", lidar_type)
        return "ERROR"


def str_to_lidar_type(name: str) -> LidarType:
    """Parse a lidar type name; raise ValueError if it is not supported."""
    try:
        return LidarType[name]
    except KeyError:
        raise ValueError(
            f"Wrong lidar type: {name}. Please setup the correct type: "
            "RS16, RS32, RSBP, RS128, RS80, RSM1, RSHELIOS"
        ) from None