"""Network flow record identifying the local socket a packet belongs to."""

from __future__ import annotations

import struct
import sys
from dataclasses import dataclass, field
from typing import BinaryIO, TextIO

from namonflow.tcpip_headers import (
    AF_INET,
    AF_INET6,
    IPV4_ADDRLEN,
    IPV6_ADDRLEN,
    PROTO_TCP,
    PROTO_UDP,
    PROTO_UDPLITE,
)
from namonflow.utils import inet_ntop

_PROTO_NAMES = {
    PROTO_TCP: "TCP",
    PROTO_UDP: "UDP",
    PROTO_UDPLITE: "UDPLite",
}

_ADDRESS_LENGTHS = {4: IPV4_ADDRLEN, 6: IPV6_ADDRLEN}
_FAMILIES = {4: AF_INET, 6: AF_INET6}

_HEAD = struct.Struct("<B")
_TAIL = struct.Struct("<HBQQ")

UNSUPPORTED_MESSAGE = "Uninitialized/moved record or unsupported IP protocol."


@dataclass(eq=False)
class Netflow:
    """Local endpoint of a flow plus the times of its first and last packet.

    Only the IP version, local address, local port and transport protocol
    identify a flow; the times are carried along but do not take part in
    comparisons.
    """

    ip_version: int = 0
    local_ip: bytes = field(default=b"")
    local_port: int = 0
    proto: int = 0
    start_time: int = 0
    end_time: int = 0

    def __post_init__(self) -> None:
        self.local_ip = bytes(self.local_ip)
        expected = _ADDRESS_LENGTHS.get(self.ip_version)
        if expected is not None and len(self.local_ip) != expected:
            raise ValueError(
                f"IPv{self.ip_version} address must be {expected} bytes, "
                f"got {len(self.local_ip)}"
            )

    def key(self) -> tuple[int, bytes, int, int]:
        """The fields that identify the flow."""
        return (self.ip_version, self.local_ip, self.local_port, self.proto)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Netflow):
            return NotImplemented
        return self.key() == other.key()

    def __hash__(self) -> int:
        return hash(self.key())

    def to_bytes(self) -> bytes:
        """Serialise the record as stored in the custom output block."""
        if self.ip_version not in _ADDRESS_LENGTHS:
            raise ValueError(f"unsupported IP version: {self.ip_version}")
        if not 0 <= self.local_port <= 0xFFFF:
            raise ValueError(f"port out of range: {self.local_port}")
        if not 0 <= self.proto <= 0xFF:
            raise ValueError(f"protocol out of range: {self.proto}")
        for name in ("start_time", "end_time"):
            value = getattr(self, name)
            if not 0 <= value < (1 << 64):
                raise ValueError(f"{name} out of range: {value}")
        return (
            _HEAD.pack(self.ip_version)
            + self.local_ip
            + _TAIL.pack(self.local_port, self.proto, self.start_time, self.end_time)
        )

    def write(self, stream: BinaryIO) -> int:
        """Write the record to a binary stream and return the bytes written."""
        data = self.to_bytes()
        stream.write(data)
        return len(data)

    def describe(self) -> str:
        """One-line human readable description of the record."""
        family = _FAMILIES.get(self.ip_version)
        if family is None:
            return UNSUPPORTED_MESSAGE
        address = inet_ntop(family, self.local_ip)
        proto = _PROTO_NAMES.get(self.proto, str(self.proto))
        return (
            f"{address}:{self.local_port}\t{proto}"
            f"\tTime:{self.start_time}-{self.end_time}"
        )

    def print(self, out: TextIO | None = None) -> None:
        """Print the description to ``out`` (standard output by default)."""
        target = sys.stdout if out is None else out
        target.write(self.describe() + "\n")