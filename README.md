# lidarkit

Building blocks for a mobile robot carrying a rotating LiDAR and an RTK GNSS
receiver.

## Modules

- `lidarkit.driver_param`: the `LidarType` and `SplitFrameMode` enums and the
  dataclasses `DriverParam`, `InputParam`, `DecoderParam`, `TransformParam` and
  `CameraTriggerParam`, each with a `describe()` method returning a readable
  listing. `lidar_type_to_str` gives a model's name (or `"ERROR"` for an unknown
  value); `str_to_lidar_type` parses "RS16", "RS32", "RSBP", "RS128",
  "RS128_40", "RS80", "RSHELIOS", "RSROCK" or "RSM1" and raises `ValueError`
  for anything else.
- `lidarkit.messages`: `PacketType` (MSOP / DIFOP), `PacketMsg` (with
  `zeroed(length)` and `copy()`), `ScanMsg` and the generic `PointCloudMsg`.
- `lidarkit.yaml_config`: `load_config(path)` loads a YAML file whose top level
  is a mapping; `yaml_read(node, key, default)` falls back to the default when a
  key is missing or null and otherwise converts to the default's type;
  `yaml_read_required(node, key, type_)` and `yaml_sub_node(node, name)` raise
  `ConfigError` when the value or sub-node is missing.
- `lidarkit.lidar_constants`: `constant_param_for(lidar_type)` returns the
  frozen `LidarConstantParameter` (packet ids, blocks per packet, channels per
  block, laser count, timing, distance resolution, lens offsets) of a model and
  raises `ValueError` for an unknown one.
- `lidarkit.proto_comm`: `ProtoMsgHeader` packs to and unpacks from a 32-byte
  header in either `Endian`; `host_endian()` reports the machine's byte order;
  `split_message(data, seq)` cuts data into zero-padded 5000-byte chunks with
  headers. `ProtoCommunicator` (usable as a context manager) sends and receives
  framed UDP datagrams: `init_sender`, `init_receiver` (returns the bound port),
  `send_proto_msg`, `send_single_msg`, `send_split_msg`, `receive_proto_msg`
  (raises `TimeoutError` when nothing arrives, `ValueError` on a short
  datagram) and `close`.
- `lidarkit.velodyne`: `convert_xyzi(points, height, width)` and
  `convert_xyzirt(points, output_type)` turn lists of `RsPoint` into lists of
  `VelodynePoint`, dropping NaN points (`has_nan`), remapping ring ids for 16-
  and 128-row clouds, and giving each point its time relative to the first input
  point for the `OutputType.XYZIRT` layout.
- `lidarkit.lidar_driver`: `LidarDriver(param, decoder)` assembles frames from
  packets passed to `feed_msop` and `feed_difop`, or decodes a whole `ScanMsg`
  with `decode_msop_scan`. It hands point clouds, scans and DIFOP packets to
  callbacks registered with `register_point_cloud_callback`,
  `register_scan_callback` and `register_difop_callback`, and reports
  `DriverError` values to `register_exception_callback` listeners. While
  `wait_for_difop` is set, MSOP data is ignored until a DIFOP packet has been
  decoded. `to_row_major(points, height)` reorders a column-major cloud by rows.
- `lidarkit.ntrip`: `string_to_base64`, `build_request`, `parse_gga` (returns a
  `GgaFix` in decimal degrees, or None without a usable fix),
  `GgaStreamParser.feed` for cutting `$GN...\r\n` sentences out of a byte
  stream, and `run(NtripConfig)` / `main()` for the relay.

## Installation

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Examples

```python
from lidarkit.driver_param import DriverParam, lidar_type_to_str, str_to_lidar_type
from lidarkit.lidar_constants import constant_param_for
from lidarkit.yaml_config import load_config, yaml_read, yaml_sub_node

config = load_config("config.yaml")
driver_node = yaml_sub_node(config, "driver")
lidar_type = str_to_lidar_type(yaml_read(driver_node, "lidar_type", "RS16"))
print(lidar_type_to_str(lidar_type), constant_param_for(lidar_type).laser_num)
print(DriverParam(lidar_type=lidar_type).describe())
```

```python
from lidarkit.proto_comm import Endian, ProtoMsgHeader, split_message

chunks = split_message(b"\x00" * 12000, seq=7)   # three chunks
raw = ProtoMsgHeader(msg_length=10).pack(Endian.BIG)
same = ProtoMsgHeader.unpack(raw, Endian.BIG)
```

```python
from lidarkit.ntrip import GgaStreamParser, build_request, parse_gga

parser = GgaStreamParser()
sentences = parser.feed(
    b"$GNGGA,063244.40,3859.14005,N,11720.17593,E,1,12,0.64,25.9,M,-5.1,M,,*6C\r\n"
)
fix = parse_gga(sentences[0])

username = "user"
password = "password"
request = build_request("AUTO", username, password)
```

## Command line

```
lidarkit-ntrip --help
```

Options: `--host`, `--port`, `--mount-point`, `--username`, `--password`,
`--gga`, `--recv-port`, `--send-port`, `--baudrate`, `--rate`.

The relay opens the correction serial port and the receiver serial port,
connects to the caster, sends the HTTP/1.0 request with Basic authorization,
prints the caster's first reply and sends the initial GGA sentence. It then
loops at `--rate` cycles per second: reading GGA sentences from the receiver,
forwarding a block of up to 1024 bytes of correction data to the correction
port every tenth cycle, and logging the latest fix every second cycle. It stops
when the caster closes the connection or on Ctrl-C, and exits with status 1
when the caster cannot be reached or a serial port cannot be opened.

## What it does not do

- There are no per-model packet decoders. `LidarDriver` needs a decoder object
  supplied by the caller, offering `process_msop_packet`,
  `process_difop_packet`, `temperature` and `lidar_time`.
- There is no live packet capture or pcap reading; packets have to be passed to
  the driver by the caller.
- Nothing is published to or subscribed from a robot middleware: point-cloud
  conversion works on Python lists, and the NTRIP relay only logs fixes (or
  passes them to `NtripConfig.on_fix` when `run` is called directly).