import pytest

from lidarkit.messages import PacketMsg, PacketType, PointCloudMsg, ScanMsg


def test_packet_type_values():
    assert PacketType(0) is PacketType.MSOP
    assert PacketType(1).name == "DIFOP"


def test_zeroed_packet_length_and_content():
    msg = PacketMsg.zeroed(1248)
    assert len(msg.packet) == 1248
    assert set(msg.packet) == {0}


def test_zeroed_rejects_negative():
    with pytest.raises(ValueError):
        PacketMsg.zeroed(-1)


def test_copy_is_equal_and_independent():
    original = PacketMsg(b"\x55\xaa\x05\x0a")
    clone = original.copy()
    assert clone == original
    clone.packet[0] = 0
    assert original.packet[0] == 0x55


def test_packet_from_bytes_is_mutable():
    msg = PacketMsg(b"ab")
    msg.packet.append(ord("c"))
    assert bytes(msg.packet) == b"abc"


def test_scan_defaults_and_independent_lists():
    a, b = ScanMsg(), ScanMsg()
    a.packets.append(PacketMsg.zeroed(2))
    assert b.packets == []
    assert (b.timestamp, b.seq, b.frame_id) == (0.0, 0, "")


def test_point_cloud_defaults():
    msg = PointCloudMsg()
    assert msg.points == []
    assert (msg.height, msg.width, msg.seq) == (0, 0, 0)
    assert msg.is_dense is False


def test_point_cloud_holds_points():
    pts = [(1.0, 2.0, 3.0), (4.0, 5.0, 6.0)]
    msg = PointCloudMsg(points=pts, height=1, width=2, frame_id="rslidar")
    assert msg.points == pts
    assert msg.height * msg.width == len(msg.points)