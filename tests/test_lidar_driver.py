import pytest

from lidarkit.driver_param import DriverParam
from lidarkit.lidar_driver import DecodeResult, DriverError, LidarDriver, to_row_major
from lidarkit.messages import PacketMsg, ScanMsg

_KINDS = {
    0: DecodeResult.DECODE_OK,
    1: DecodeResult.FRAME_SPLIT,
    2: DecodeResult.WRONG_PKT_HEADER,
    3: DecodeResult.DISCARD_PKT,
    4: DecodeResult.PKT_NULL,
}


class FakeDecoder:
    def __init__(self, height=2, temperature=36.5, time_value=1234.5):
        self.height = height
        self.temp = temperature
        self.time_value = time_value
        self.difop_packets = []

    def process_msop_packet(self, data):
        kind, count, base = data[0], data[1], data[2]
        result = _KINDS[kind]
        if result in (DecodeResult.DECODE_OK, DecodeResult.FRAME_SPLIT):
            return result, [base + k for k in range(count)], self.height
        return result, [], self.height

    def process_difop_packet(self, data):
        self.difop_packets.append(data)

    def temperature(self):
        return self.temp

    def lidar_time(self, data):
        return self.time_value


def pkt(kind, count=0, base=0):
    return PacketMsg(bytes([kind, count, base]))


def make_driver(wait_for_difop=False, saved_by_rows=False, use_lidar_clock=False, height=2):
    param = DriverParam(wait_for_difop=wait_for_difop, saved_by_rows=saved_by_rows)
    param.decoder_param.use_lidar_clock = use_lidar_clock
    decoder = FakeDecoder(height=height)
    driver = LidarDriver(param, decoder, clock=lambda: 99.0)
    errors = []
    driver.register_exception_callback(errors.append)
    return driver, decoder, errors


def test_to_row_major_transposes_columns():
    assert to_row_major([0, 1, 2, 3, 4, 5], 2) == [0, 2, 4, 1, 3, 5]


def test_to_row_major_drops_partial_column():
    result = to_row_major(list(range(7)), 2)
    assert len(result) == 6
    assert sorted(result) == list(range(6))


def test_to_row_major_rejects_zero_height():
    with pytest.raises(ValueError):
        to_row_major([1, 2], 0)


def test_decode_scan_waits_for_difop_and_reports():
    driver, _, errors = make_driver(wait_for_difop=True)
    scan = ScanMsg(packets=[pkt(0, 4, 10)])
    results = [driver.decode_msop_scan(scan) for _ in range(21)]
    assert results == [None] * 21
    assert errors == [DriverError.NO_DIFOP_RECEIVED]


def test_decode_scan_after_difop():
    driver, decoder, errors = make_driver(wait_for_difop=True)
    driver.decode_difop_packet(pkt(0))
    assert driver.difop_received is True
    assert decoder.difop_packets == [bytes([0, 0, 0])]
    msg = driver.decode_msop_scan(ScanMsg(timestamp=5.0, packets=[pkt(0, 4, 10)]))
    assert msg.points == [10, 11, 12, 13]
    assert errors == []


def test_decode_scan_builds_cloud():
    driver, _, errors = make_driver()
    scan = ScanMsg(timestamp=7.25, packets=[pkt(0, 4, 10), pkt(1, 2, 20)])
    msg = driver.decode_msop_scan(scan)
    assert msg.points == [10, 11, 12, 13, 20, 21]
    assert msg.height == 2
    assert msg.width == 3
    assert msg.timestamp == 7.25
    assert msg.frame_id == "rslidar"
    assert msg.seq == 0
    assert msg.is_dense is False
    assert errors == []


def test_decode_scan_sequence_increases():
    driver, _, _ = make_driver()
    first = driver.decode_msop_scan(ScanMsg(packets=[pkt(0, 2, 1)]))
    second = driver.decode_msop_scan(ScanMsg(packets=[pkt(0, 2, 1)]))
    assert second.seq == first.seq + 1


def test_decode_scan_truncates_partial_column():
    driver, _, _ = make_driver()
    msg = driver.decode_msop_scan(ScanMsg(packets=[pkt(0, 5, 0)]))
    assert len(msg.points) == msg.height * msg.width
    assert msg.points == [0, 1, 2, 3]


def test_decode_scan_saved_by_rows():
    driver, _, _ = make_driver(saved_by_rows=True)
    msg = driver.decode_msop_scan(ScanMsg(packets=[pkt(0, 6, 0)]))
    assert msg.points == to_row_major([0, 1, 2, 3, 4, 5], 2)


def test_decode_scan_reports_bad_packets():
    driver, _, errors = make_driver()
    msg = driver.decode_msop_scan(ScanMsg(packets=[pkt(2), pkt(4), pkt(0, 2, 3)]))
    assert msg.points == [3, 4]
    assert errors == [DriverError.WRONG_PKT_HEADER, DriverError.PKT_NULL]


def test_decode_scan_zero_points():
    driver, _, errors = make_driver()
    assert driver.decode_msop_scan(ScanMsg(packets=[pkt(0, 0, 0)])) is None
    assert errors == [DriverError.ZERO_POINTS]


def test_feed_difop_runs_callbacks():
    driver, decoder, _ = make_driver()
    seen = []
    driver.register_difop_callback(seen.append)
    packet = pkt(0, 1, 2)
    driver.feed_difop(packet)
    assert seen == [packet]
    assert decoder.difop_packets == [bytes([0, 1, 2])]


def test_feed_msop_first_frame_is_not_delivered():
    driver, _, errors = make_driver()
    clouds, scans = [], []
    driver.register_point_cloud_callback(clouds.append)
    driver.register_scan_callback(scans.append)
    driver.feed_msop(pkt(0, 2, 0))
    driver.feed_msop(pkt(1, 2, 10))
    assert clouds == []
    assert scans == []
    driver.feed_msop(pkt(0, 2, 30))
    driver.feed_msop(pkt(1, 2, 40))
    assert len(clouds) == 1
    assert clouds[0].points == [30, 31, 40, 41]
    assert clouds[0].seq == 1
    assert clouds[0].timestamp == 99.0
    assert len(scans) == 1
    assert scans[0].seq == 1
    assert [bytes(p.packet) for p in scans[0].packets] == [bytes([0, 2, 30]), bytes([1, 2, 40])]
    assert errors == []


def test_feed_msop_uses_lidar_clock():
    driver, decoder, _ = make_driver(use_lidar_clock=True)
    clouds, scans = [], []
    driver.register_point_cloud_callback(clouds.append)
    driver.register_scan_callback(scans.append)
    for _ in range(2):
        driver.feed_msop(pkt(1, 2, 0))
    assert clouds[0].timestamp == decoder.time_value
    assert scans[0].timestamp == decoder.time_value


def test_feed_msop_discard_clears_frame():
    driver, _, _ = make_driver()
    clouds, scans = [], []
    driver.register_point_cloud_callback(clouds.append)
    driver.register_scan_callback(scans.append)
    driver.feed_msop(pkt(1, 2, 0))
    driver.feed_msop(pkt(0, 2, 50))
    driver.feed_msop(pkt(3))
    driver.feed_msop(pkt(1, 2, 60))
    assert clouds[0].points == [60, 61]
    assert len(scans[0].packets) == 1


def test_feed_msop_wrong_header_reported():
    driver, _, errors = make_driver()
    driver.feed_msop(pkt(2))
    assert errors == [DriverError.WRONG_PKT_HEADER]


def test_feed_msop_zero_point_frame_reported():
    driver, _, errors = make_driver()
    driver.feed_msop(pkt(1, 0, 0))
    assert errors == [DriverError.ZERO_POINTS]


def test_feed_msop_waits_for_difop():
    driver, _, errors = make_driver(wait_for_difop=True)
    clouds = []
    driver.register_point_cloud_callback(clouds.append)
    for _ in range(121):
        driver.feed_msop(pkt(1, 2, 0))
    assert clouds == []
    assert errors == [DriverError.NO_DIFOP_RECEIVED]


def test_lidar_temperature_from_decoder():
    driver, decoder, _ = make_driver()
    assert driver.lidar_temperature() == decoder.temp