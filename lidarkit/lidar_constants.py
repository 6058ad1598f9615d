"""Fixed per-model constants used when decoding lidar packets."""

from __future__ import annotations

from dataclasses import dataclass

from lidarkit.driver_param import LidarType


@dataclass(frozen=True)
class LidarConstantParameter:
    """Packet identifiers, layout and geometry of one lidar model."""

    msop_id: int = 0
    difop_id: int = 0
    block_id: int = 0
    pkt_rate: int = 0
    blocks_per_pkt: int = 0
    channels_per_block: int = 0
    laser_num: int = 0
    dsr_toffset: float = 0.0
    firing_frequency: float = 0.0
    dis_resolution: float = 0.0
    rx: float = 0.0
    ry: float = 0.0
    rz: float = 0.0


_DIFOP_ID = 0x555511115A00FFA5

_CONSTANTS: dict[LidarType, LidarConstantParameter] = {
    LidarType.RS16: LidarConstantParameter(
        msop_id=0xA050A55A0A05AA55,
        difop_id=_DIFOP_ID,
        block_id=0xEEFF,
        pkt_rate=750,
        blocks_per_pkt=12,
        channels_per_block=32,
        laser_num=16,
        dsr_toffset=2.8,
        firing_frequency=0.009,
        dis_resolution=0.005,
        rx=0.03825,
        ry=-0.01088,
        rz=0.0,
    ),
    LidarType.RS32: LidarConstantParameter(
        msop_id=0xA050A55A0A05AA55,
        difop_id=_DIFOP_ID,
        block_id=0xEEFF,
        pkt_rate=1500,
        blocks_per_pkt=12,
        channels_per_block=32,
        laser_num=32,
        dsr_toffset=1.44,
        firing_frequency=0.018,
        dis_resolution=0.005,
        rx=0.03997,
        ry=-0.01087,
        rz=0.0,
    ),
    LidarType.RSBP: LidarConstantParameter(
        msop_id=0xA050A55A0A05AA55,
        difop_id=_DIFOP_ID,
        block_id=0xEEFF,
        pkt_rate=1500,
        blocks_per_pkt=12,
        channels_per_block=32,
        laser_num=32,
        dsr_toffset=1.28,
        firing_frequency=0.018,
        dis_resolution=0.005,
        rx=0.01473,
        ry=0.0085,
        rz=0.09427,
    ),
    LidarType.RS80: LidarConstantParameter(
        msop_id=0x5A05AA55,
        difop_id=_DIFOP_ID,
        block_id=0xFE,
        pkt_rate=4500,
        blocks_per_pkt=4,
        channels_per_block=80,
        laser_num=80,
        dsr_toffset=3.236,
        firing_frequency=0.018,
        dis_resolution=0.005,
        rx=0.03615,
        ry=-0.017,
        rz=0.0,
    ),
    LidarType.RS128: LidarConstantParameter(
        msop_id=0x5A05AA55,
        difop_id=_DIFOP_ID,
        block_id=0xFE,
        pkt_rate=6000,
        blocks_per_pkt=3,
        channels_per_block=128,
        laser_num=128,
        dsr_toffset=3.236,
        firing_frequency=0.018,
        dis_resolution=0.005,
        rx=0.03615,
        ry=-0.017,
        rz=0.0,
    ),
    LidarType.RS128_40: LidarConstantParameter(
        msop_id=0x5A05AA55,
        difop_id=_DIFOP_ID,
        block_id=0xFE,
        pkt_rate=6000,
        blocks_per_pkt=3,
        channels_per_block=128,
        laser_num=128,
        dsr_toffset=3.236,
        firing_frequency=0.018,
        dis_resolution=0.005,
        rx=0.02892,
        ry=-0.013,
        rz=0.0,
    ),
    LidarType.RSM1: LidarConstantParameter(
        msop_id=0xA55AAA55,
        difop_id=_DIFOP_ID,
        blocks_per_pkt=25,
        channels_per_block=5,
        laser_num=5,
        dis_resolution=0.005,
    ),
    LidarType.RSHELIOS: LidarConstantParameter(
        msop_id=0x5A05AA55,
        difop_id=_DIFOP_ID,
        block_id=0xEEFF,
        pkt_rate=1500,
        blocks_per_pkt=12,
        channels_per_block=32,
        laser_num=32,
        dsr_toffset=1.0,
        firing_frequency=0.018,
        dis_resolution=0.0025,
        rx=0.03498,
        ry=-0.015,
        rz=0.0,
    ),
    LidarType.RSROCK: LidarConstantParameter(
        msop_id=0x000001005A05AA55,
        difop_id=_DIFOP_ID,
        block_id=0xEEFF,
        pkt_rate=1071,
        blocks_per_pkt=6,
        channels_per_block=14 * 4,
        laser_num=4,
        dsr_toffset=1.0,
        firing_frequency=0.018,
        dis_resolution=0.0025,
        rx=0.07526,
        ry=0.00968,
        rz=0.0,
    ),
}


def constant_param_for(lidar_type: LidarType | int) -> LidarConstantParameter:
    """Constants for a lidar model; raise ValueError for an unknown model."""
    try:
        return _CONSTANTS[LidarType(lidar_type)]
    except (ValueError, KeyError):
        raise ValueError(
            f"Wrong LiDAR type {lidar_type!r}. Please check your LiDAR version!"
        ) from None