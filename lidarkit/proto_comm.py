"""UDP transport for serialized messages, with a fixed-size framing header."""

from __future__ import annotations

import socket
import struct
import sys
import time
from dataclasses import dataclass
from enum import IntEnum

SPLIT_SIZE = 5000
MAX_RECEIVE_LENGTH = 5200

_FIELD_COUNT = 5
_FIELDS_SIZE = _FIELD_COUNT * 4
# The header is 16-byte aligned, so five 32-bit fields occupy 32 bytes.
HEADER_SIZE = (_FIELDS_SIZE + 15) // 16 * 16

_SPLIT_PAUSE = 2e-6


class Endian(IntEnum):
    """Byte order of data on the wire."""

    BIG = 0
    LITTLE = 1

    @property
    def struct_prefix(self) -> str:
        return ">" if self is Endian.BIG else "<"


def host_endian() -> Endian:
    """Byte order of the running machine."""
    return Endian.LITTLE if sys.byteorder == "little" else Endian.BIG


@dataclass
class ProtoMsgHeader:
    """Framing header that precedes every datagram."""

    frame_num: int = 0
    total_msg_cnt: int = 0
    msg_id: int = 0
    msg_length: int = 0
    total_msg_length: int = 0

    def _values(self) -> tuple[int, int, int, int, int]:
        return (
            self.frame_num,
            self.total_msg_cnt,
            self.msg_id,
            self.msg_length,
            self.total_msg_length,
        )

    def pack(self, endian: Endian = Endian.BIG) -> bytes:
        """Encode the header as HEADER_SIZE bytes in the given byte order."""
        fields = struct.pack(f"{endian.struct_prefix}{_FIELD_COUNT}I", *self._values())
        return fields + bytes(HEADER_SIZE - _FIELDS_SIZE)

    @classmethod
    def unpack(cls, data: bytes, endian: Endian = Endian.BIG) -> ProtoMsgHeader:
        """Decode a header from the first HEADER_SIZE bytes of ``data``."""
        if len(data) < HEADER_SIZE:
            raise ValueError(
                f"header needs {HEADER_SIZE} bytes, got {len(data)}"
            )
        values = struct.unpack_from(f"{endian.struct_prefix}{_FIELD_COUNT}I", data)
        return cls(*values)


def split_message(data: bytes, seq: int) -> list[tuple[ProtoMsgHeader, bytes]]:
    """Cut serialized data into SPLIT_SIZE chunks, each with its header.

    Every chunk is exactly SPLIT_SIZE bytes; the last one is zero padded.
    """
    total = len(data)
    count = -(-total // SPLIT_SIZE)
    parts = []
    for msg_id in range(count):
        chunk = data[msg_id * SPLIT_SIZE:(msg_id + 1) * SPLIT_SIZE]
        header = ProtoMsgHeader(
            frame_num=seq,
            total_msg_cnt=count,
            msg_id=msg_id,
            msg_length=SPLIT_SIZE,
            total_msg_length=total,
        )
        parts.append((header, bytes(chunk).ljust(SPLIT_SIZE, b"\0")))
    return parts


class ProtoCommunicator:
    """Sends and receives framed messages over UDP."""

    def __init__(self, timeout: float = 1.0) -> None:
        self.timeout = timeout
        self._send_sock: socket.socket | None = None
        self._recv_sock: socket.socket | None = None
        self._destination: tuple[str, int] | None = None

    def __enter__(self) -> ProtoCommunicator:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def init_sender(self, port: int | str, ip: str) -> None:
        """Open a broadcast-capable socket aimed at ``ip``:``port``."""
        try:
            sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
            try:
                sock.setsockopt(socket.SOL_SOCKET, socket.SO_BROADCAST, 1)
                sock.bind(("0.0.0.0", 0))
                infos = socket.getaddrinfo(
                    ip, int(port), socket.AF_INET, socket.SOCK_DGRAM
                )
            except BaseException:
                sock.close()
                raise
        except (OSError, ValueError) as exc:
            raise OSError(f"Proto sender cannot be set up for {ip}:{port}: {exc}") from exc
        if self._send_sock is not None:
            self._send_sock.close()
        self._send_sock = sock
        self._destination = infos[0][4][:2]

    def init_receiver(self, port: int) -> int:
        """Bind the receiving socket; return the port actually bound."""
        sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        try:
            sock.bind(("0.0.0.0", port))
        except OSError as exc:
            sock.close()
            raise OSError(f"Proto receiver port {port} is already used: {exc}") from exc
        sock.settimeout(self.timeout)
        if self._recv_sock is not None:
            self._recv_sock.close()
        self._recv_sock = sock
        return sock.getsockname()[1]

    def send_proto_msg(self, payload: bytes, header: ProtoMsgHeader) -> int:
        """Send one datagram of header plus ``header.msg_length`` payload bytes."""
        if self._send_sock is None or self._destination is None:
            raise RuntimeError("sender is not initialised")
        body = bytes(payload[: header.msg_length]).ljust(header.msg_length, b"\0")
        datagram = header.pack(Endian.BIG) + body
        return self._send_sock.sendto(datagram, self._destination)

    def receive_proto_msg(
        self, max_len: int = MAX_RECEIVE_LENGTH
    ) -> tuple[ProtoMsgHeader, bytes]:
        """Receive one datagram and return its header and payload.

        Raises TimeoutError when nothing arrives in time and ValueError
        when the datagram is shorter than its header claims.
        """
        if self._recv_sock is None:
            raise RuntimeError("receiver is not initialised")
        try:
            data = self._recv_sock.recv(max_len + HEADER_SIZE)
        except socket.timeout as exc:
            raise TimeoutError("no proto message received in time") from exc
        header = ProtoMsgHeader.unpack(data, Endian.BIG)
        end = HEADER_SIZE + header.msg_length
        if len(data) < end:
            raise ValueError(
                f"datagram of {len(data)} bytes is shorter than the {end} announced"
            )
        return header, data[HEADER_SIZE:end]

    def send_split_msg(self, data: bytes, seq: int) -> int:
        """Send serialized data in SPLIT_SIZE pieces; return the piece count."""
        parts = split_message(data, seq)
        for header, chunk in parts:
            self.send_proto_msg(chunk, header)
            time.sleep(_SPLIT_PAUSE)
        return len(parts)

    def send_single_msg(self, data: bytes) -> int:
        """Send serialized data as one datagram; return bytes sent."""
        header = ProtoMsgHeader(msg_length=len(data))
        return self.send_proto_msg(data, header)

    def close(self) -> None:
        """Close both sockets."""
        for sock in (self._send_sock, self._recv_sock):
            if sock is not None:
                sock.close()
        self._send_sock = None
        self._recv_sock = None
        self._destination = None