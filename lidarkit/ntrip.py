"""NTRIP client: fetch RTK corrections from a caster and relay them to a GNSS receiver."""

from __future__ import annotations

import argparse
import base64
import logging
import math
import re
import socket
import sys
import time
from collections.abc import Callable
from contextlib import ExitStack
from dataclasses import dataclass

import serial

logger = logging.getLogger(__name__)

GGA_START = "$GN"
GGA_END = "\r\n"
USER_AGENT = "NTRIP ntrip_ros"
BUFFER_SIZE = 1024
MAX_SENTENCE_LENGTH = 90
FORWARD_EVERY = 10
PUBLISH_EVERY = 2

DEFAULT_GGA = (
    "$GNGGA,002638.60,3859.13936,N,11720.17556,E,1,12,0.74,17.6,M,-5.1,M,,*6E\r\n"
)
PASSWORD = "password"

# Fix-quality field of a GGA sentence mapped to the reported status.
_FIX_STATUS = {
    "1": 1,
    "2": 2,
    "3": 3,
    "4": 4,
    "5": 5,
    "6": 6,
    "8": 0,
    "9": 0,
}

_LEADING_FLOAT = re.compile(r"\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def string_to_base64(text: str) -> str:
    """Base64 encoding of the UTF-8 bytes of ``text``."""
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


def build_request(mount_point: str, username: str, password: str) -> str:
    """The HTTP/1.0 request that asks a caster for a mount point's stream."""
    credentials = string_to_base64(f"{username}:{password}")
    lines = [
        f"GET /{mount_point} HTTP/1.0",
        f"User-Agent: {USER_AGENT}",
        "Accept: */*",
        "Connection: close",
        f"Authorization: Basic {credentials}",
        "",
        "",
    ]
    return "\r\n".join(lines)


@dataclass
class GgaFix:
    """Position taken from a GGA sentence, in decimal degrees and metres."""

    latitude: float | None
    longitude: float | None
    altitude: float | None
    status: int
    frame_id: str = "base_link"


def _atof(text: str) -> float:
    match = _LEADING_FLOAT.match(text)
    return float(match.group()) if match else 0.0


def _degrees(field: str, wrap: int) -> float | None:
    """Convert a ddmm.mmmm style field to decimal degrees."""
    if not field:
        return None
    value = _atof(field) / 100
    whole = int(math.fmod(math.floor(value), wrap))
    return whole + (value - whole) * 100 / 60


def parse_gga(sentence: str) -> GgaFix | None:
    """Parse a GGA sentence; None when it holds no usable fix."""
    fields = sentence.split(",")
    if fields and fields[-1] == "":
        fields.pop()
    if len(fields) < 10:
        return None
    status = _FIX_STATUS.get(fields[6])
    if status is None:
        return None
    return GgaFix(
        latitude=_degrees(fields[2], 100),
        longitude=_degrees(fields[4], 1000),
        altitude=_atof(fields[9]) if fields[9] else None,
        status=status,
    )


class GgaStreamParser:
    """Cuts complete ``$GN...\\r\\n`` sentences out of a serial byte stream."""

    def __init__(self) -> None:
        self._buffer = ""

    @property
    def pending(self) -> str:
        """Data kept back while waiting for the rest of a sentence."""
        return self._buffer

    def feed(self, data: bytes | bytearray | str) -> list[str]:
        """Add received data; return the sentences it completed, in order."""
        if isinstance(data, (bytes, bytearray)):
            data = bytes(data).decode("latin-1")
        self._buffer += data
        sentences: list[str] = []
        while self._buffer:
            start = self._buffer.find(GGA_START)
            if start == -1:
                # Keep a short tail in case a start marker is split across reads.
                if len(self._buffer) > 2:
                    self._buffer = self._buffer[-3:]
                break
            end = self._buffer.find(GGA_END, start)
            if end == -1:
                self._buffer = self._buffer[start:]
                break
            sentences.append(self._buffer[start:end + len(GGA_END)])
            self._buffer = self._buffer[end + len(GGA_END):]
        return sentences


@dataclass
class NtripConfig:
    """Caster, credentials and serial ports used by :func:`run`."""

    host: str = "localhost"
    port: int = 8002
    mount_point: str = "AUTO"
    username: str = "user"
    password: str = PASSWORD
    gga_sentence: str = DEFAULT_GGA
    recv_port: str = "/dev/ttyACM0"
    send_port: str = "/dev/ttyUSB5"
    baudrate: int = 115200
    rate_hz: float = 10.0
    timeout: float = 10.0
    max_cycles: int | None = None
    on_fix: Callable[[GgaFix], None] | None = None


def _recv_chunk(sock: socket.socket) -> bytes | None:
    """Read up to BUFFER_SIZE bytes; None when nothing came in time."""
    try:
        return sock.recv(BUFFER_SIZE)
    except socket.timeout:
        return None


def _report_fix(config: NtripConfig, fix: GgaFix) -> None:
    if config.on_fix is not None:
        config.on_fix(fix)
    else:
        logger.info(
            "fix status=%d lat=%s lon=%s alt=%s",
            fix.status,
            fix.latitude,
            fix.longitude,
            fix.altitude,
        )


def run(config: NtripConfig) -> None:
    """Relay corrections from the caster to the receiver until stopped.

    Raises ConnectionError when the caster cannot be reached or the
    request cannot be sent.
    """
    parser = GgaStreamParser()
    latest: GgaFix | None = None
    period = 1.0 / config.rate_hz

    with ExitStack() as stack:
        send_port = serial.Serial(
            port=config.send_port,
            baudrate=config.baudrate,
            bytesize=serial.EIGHTBITS,
            parity=serial.PARITY_NONE,
            stopbits=serial.STOPBITS_ONE,
        )
        stack.callback(send_port.close)
        recv_port = serial.Serial(
            port=config.recv_port, baudrate=config.baudrate, timeout=1.0
        )
        stack.callback(recv_port.close)
        logger.info("Serial ports opened, connecting to the caster")

        try:
            sock = socket.create_connection(
                (config.host, config.port), timeout=config.timeout
            )
        except OSError as exc:
            raise ConnectionError("Failed to connect to the NTRIP server.") from exc
        stack.callback(sock.close)

        request = build_request(config.mount_point, config.username, config.password)
        try:
            sock.sendall(request.encode("utf-8"))
        except OSError as exc:
            raise ConnectionError("Failed to send request to the server.") from exc

        response = _recv_chunk(sock) or b""
        print(response.decode("latin-1"))
        sock.sendall(config.gga_sentence.encode("ascii"))

        cycle = 0
        next_tick = time.monotonic()
        while config.max_cycles is None or cycle < config.max_cycles:
            cycle += 1
            sentence = ""
            waiting = recv_port.in_waiting
            if waiting:
                for sentence in parser.feed(recv_port.read(waiting)):
                    logger.info("%s", sentence.rstrip())
                    fix = parse_gga(sentence)
                    if fix is not None:
                        latest = fix
            if len(sentence) > MAX_SENTENCE_LENGTH:
                continue
            if cycle % FORWARD_EVERY == 0:
                corrections = _recv_chunk(sock)
                if corrections == b"":
                    logger.warning("The caster closed the connection")
                    break
                if corrections:
                    send_port.write(corrections)
            if cycle % PUBLISH_EVERY == 0 and latest is not None:
                _report_fix(config, latest)

            next_tick += period
            delay = next_tick - time.monotonic()
            if delay > 0:
                time.sleep(delay)
            else:
                next_tick = time.monotonic()

    print("NTRIP data received and sent to serial port.")


def main(argv: list[str] | None = None) -> int:
    """Command-line entry point."""
    defaults = NtripConfig()
    cli = argparse.ArgumentParser(
        description="Relay NTRIP corrections to a GNSS receiver."
    )
    cli.add_argument("--host", default=defaults.host)
    cli.add_argument("--port", type=int, default=defaults.port)
    cli.add_argument("--mount-point", default=defaults.mount_point)
    cli.add_argument("--username", default=defaults.username)
    cli.add_argument("--password", default=defaults.password)
    cli.add_argument("--gga", default=defaults.gga_sentence)
    cli.add_argument("--recv-port", default=defaults.recv_port)
    cli.add_argument("--send-port", default=defaults.send_port)
    cli.add_argument("--baudrate", type=int, default=defaults.baudrate)
    cli.add_argument("--rate", type=float, default=defaults.rate_hz)
    args = cli.parse_args(argv)

    gga = args.gga if args.gga.endswith(GGA_END) else args.gga + GGA_END
    config = NtripConfig(
        host=args.host,
        port=args.port,
        mount_point=args.mount_point,
        username=args.username,
        password=args.password,
        gga_sentence=gga,
        recv_port=args.recv_port,
        send_port=args.send_port,
        baudrate=args.baudrate,
        rate_hz=args.rate,
    )
    try:
        run(config)
    except (ConnectionError, serial.SerialException) as exc:
        print(exc, file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        return 0
    return 0


if __name__ == "__main__":
    sys.exit(main())