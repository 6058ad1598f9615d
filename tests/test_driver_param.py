import pytest

from lidarkit.driver_param import (
    CameraTriggerParam,
    DecoderParam,
    DriverParam,
    InputParam,
    LidarType,
    SplitFrameMode,
    TransformParam,
    lidar_type_to_str,
    str_to_lidar_type,
)


def test_lidar_type_values_match_protocol():
    assert str_to_lidar_type("RS16") == 1
    assert str_to_lidar_type("RSROCK") == 8
    assert str_to_lidar_type("RSM1") == 10


def test_split_frame_mode_values():
    assert [SplitFrameMode(v).name for v in (1, 2, 3)] == [
        "SPLIT_BY_ANGLE",
        "SPLIT_BY_FIXED_PKTS",
        "SPLIT_BY_CUSTOM_PKTS",
    ]
    assert DecoderParam().split_frame_mode.value == 1


@pytest.mark.parametrize("lidar_type", list(LidarType))
def test_type_name_round_trip(lidar_type):
    assert str_to_lidar_type(lidar_type_to_str(lidar_type)) is lidar_type


def test_type_to_str_known():
    assert lidar_type_to_str(LidarType.RS128_40) == "RS128_40"


def test_type_to_str_unknown_value():
    assert lidar_type_to_str(9) == "ERROR"


def test_str_to_type_rejects_unknown():
    with pytest.raises(ValueError):
        str_to_lidar_type("RS64")


def test_str_to_type_is_case_sensitive():
    with pytest.raises(ValueError):
        str_to_lidar_type("rs16")


def test_input_defaults():
    p = InputParam()
    assert p.device_ip == "192.168.1.200"
    assert (p.msop_port, p.difop_port) == (6699, 7788)
    assert p.pcap_path == "null"
    assert p.pcap_repeat is True and p.read_pcap is False


def test_decoder_defaults():
    p = DecoderParam()
    assert p.max_distance == 200.0
    assert p.end_angle == 360.0
    assert p.split_frame_mode is SplitFrameMode.SPLIT_BY_ANGLE
    assert p.transform_param == TransformParam()


def test_driver_defaults():
    p = DriverParam()
    assert p.frame_id == "rslidar"
    assert p.lidar_type is LidarType.RS16
    assert p.wait_for_difop is True
    assert p.saved_by_rows is False


def test_defaults_are_not_shared():
    a, b = DriverParam(), DriverParam()
    a.decoder_param.trigger_param.trigger_map[10.0] = "cam"
    assert b.decoder_param.trigger_param.trigger_map == {}


def test_trigger_describe_sorted_by_angle():
    text = CameraTriggerParam({90.0: "right", 10.0: "front"}).describe()
    assert text.index("front") < text.index("right")


def test_driver_describe_contains_sections():
    text = DriverParam(frame_id="base", lidar_type=LidarType.RS80).describe()
    assert "frame_id: base" in text
    assert "lidar_type: RS80" in text
    assert "Input Parameters" in text
    assert "Decoder Parameters" in text
    assert "Transform Parameters" in text