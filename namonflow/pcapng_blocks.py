"""Pcap-ng blocks written to the capture output file."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from typing import BinaryIO, Mapping, Sequence, Union

from namonflow.netflow import Netflow

SHB_BLOCK_TYPE = 0x0A0D0D0A
BYTE_ORDER_MAGIC = 0x1A2B3C4D
IDB_BLOCK_TYPE = 0x00000001
EPB_BLOCK_TYPE = 0x00000006
CUSTOM_BLOCK_TYPE = 0x40000BAD
PRIVATE_ENTERPRISE_NUMBER = 0x1234

LINKTYPE_ETHERNET = 1
DEFAULT_SNAPLEN = 8192
USER_APPLICATION = "namon"

OPT_ENDOFOPT = 0
OPT_SHB_OS = 3
OPT_SHB_USERAPPL = 4
OPT_IF_NAME = 2
OPT_IF_TSRESOL = 9
OPT_IF_OS = 12

_U16_MAX = 0xFFFF
_U32_MAX = 0xFFFFFFFF

_OPTION_HEADER = struct.Struct("<HH")
_U32 = struct.Struct("<I")
_SHB_HEAD = struct.Struct("<IIIHHq")
_IDB_HEAD = struct.Struct("<IIHHI")
_EPB_HEAD = struct.Struct("<IIIIIII")
_CUSTOM_HEAD = struct.Struct("<III")
_TSRESOL = struct.Struct("<HHI")

AppName = Union[str, bytes]


def compute_padding_len(num: int, multiple: int) -> int:
    """Number of padding bytes needed to bring ``num`` to a multiple of ``multiple``."""
    if multiple == 0:
        return 0
    # Remainder takes the sign of the dividend, as integer division truncates.
    magnitude = abs(num) % abs(multiple)
    remainder = -magnitude if num < 0 else magnitude
    if remainder == 0:
        return 0
    return multiple - remainder


def _padding(length: int) -> bytes:
    return bytes(compute_padding_len(length, 4))


def _encode(text: AppName) -> bytes:
    return text.encode("utf-8") if isinstance(text, str) else bytes(text)


def _option(code: int, value: bytes) -> bytes:
    if len(value) > _U16_MAX:
        raise ValueError(f"option value too long: {len(value)} bytes")
    return _OPTION_HEADER.pack(code, len(value)) + value + _padding(len(value))


def _end_of_options() -> bytes:
    return _OPTION_HEADER.pack(OPT_ENDOFOPT, 0)


def _write(stream: BinaryIO, data: bytes) -> int:
    stream.write(data)
    return len(data)


@dataclass
class SectionHeaderBlock:
    """Section header block opening each section of the file."""

    os_name: str

    def _options(self) -> bytes:
        userappl = USER_APPLICATION.encode("ascii")
        # The application name is stored with its terminating zero.
        value = userappl + b"\x00"
        return (
            _option(OPT_SHB_OS, _encode(self.os_name))
            + _OPTION_HEADER.pack(OPT_SHB_USERAPPL, len(userappl))
            + value
            + _padding(len(value))
            + _end_of_options()
        )

    @property
    def block_total_length(self) -> int:
        return _SHB_HEAD.size + len(self._options()) + _U32.size

    def to_bytes(self) -> bytes:
        options = self._options()
        total = _SHB_HEAD.size + len(options) + _U32.size
        head = _SHB_HEAD.pack(SHB_BLOCK_TYPE, total, BYTE_ORDER_MAGIC, 1, 0, -1)
        return head + options + _U32.pack(total)

    def write(self, stream: BinaryIO) -> int:
        """Write the block to ``stream`` and return the number of bytes written."""
        return _write(stream, self.to_bytes())


@dataclass
class InterfaceDescriptionBlock:
    """Description of the interface the traffic was captured on."""

    device: str
    os_name: str
    snap_len: int = DEFAULT_SNAPLEN
    link_type: int = LINKTYPE_ETHERNET

    def _options(self) -> bytes:
        return (
            _option(OPT_IF_NAME, _encode(self.device))
            + _TSRESOL.pack(OPT_IF_TSRESOL, 1, 6)
            + _option(OPT_IF_OS, _encode(self.os_name))
            + _end_of_options()
        )

    @property
    def block_total_length(self) -> int:
        return _IDB_HEAD.size + len(self._options()) + _U32.size

    def to_bytes(self) -> bytes:
        if not 0 <= self.snap_len <= _U32_MAX:
            raise ValueError(f"snap length out of range: {self.snap_len}")
        if not 0 <= self.link_type <= _U16_MAX:
            raise ValueError(f"link type out of range: {self.link_type}")
        options = self._options()
        total = _IDB_HEAD.size + len(options) + _U32.size
        head = _IDB_HEAD.pack(IDB_BLOCK_TYPE, total, self.link_type, 0, self.snap_len)
        return head + options + _U32.pack(total)

    def write(self, stream: BinaryIO) -> int:
        """Write the block to ``stream`` and return the number of bytes written."""
        return _write(stream, self.to_bytes())


@dataclass
class EnhancedPacketBlock:
    """A captured packet together with its timestamp and lengths."""

    interface_id: int = 0
    timestamp_high: int = 0
    timestamp_low: int = 0
    original_length: int = 0
    packet_data: bytes = b""

    def __post_init__(self) -> None:
        self.packet_data = bytes(self.packet_data)

    @property
    def captured_length(self) -> int:
        return len(self.packet_data)

    @property
    def timestamp(self) -> int:
        return (self.timestamp_high << 32) | self.timestamp_low

    def set_timestamp(self, timestamp: int) -> None:
        """Split a 64-bit timestamp into its high and low 32-bit halves."""
        if not 0 <= timestamp < (1 << 64):
            raise ValueError(f"timestamp out of range: {timestamp}")
        self.timestamp_low = timestamp & _U32_MAX
        self.timestamp_high = timestamp >> 32

    def set_packet_data(self, data: bytes) -> None:
        """Store a copy of the packet; its length becomes the captured length."""
        data = bytes(data)
        if len(data) > _U32_MAX:
            raise ValueError(f"packet too long: {len(data)} bytes")
        self.packet_data = data

    def to_bytes(self) -> bytes:
        if not 0 <= self.original_length <= _U32_MAX:
            raise ValueError(f"original length out of range: {self.original_length}")
        padding = _padding(self.captured_length)
        total = _EPB_HEAD.size + self.captured_length + len(padding) + _U32.size
        head = _EPB_HEAD.pack(
            EPB_BLOCK_TYPE,
            total,
            self.interface_id,
            self.timestamp_high,
            self.timestamp_low,
            self.captured_length,
            self.original_length,
        )
        return head + self.packet_data + padding + _U32.pack(total)

    def write(self, stream: BinaryIO) -> int:
        """Write the block to ``stream`` and return the number of bytes written."""
        return _write(stream, self.to_bytes())


def _app_name_bytes(name: AppName) -> bytes:
    encoded = _encode(name)
    if not encoded or encoded[-1] != 0:
        encoded += b"\x00"
    if len(encoded) > 0xFF:
        raise ValueError(f"application name too long: {len(encoded)} bytes")
    return encoded


@dataclass
class CustomBlock:
    """Custom block holding the flows found for each application."""

    results: Mapping[AppName, Sequence[Netflow]] = field(default_factory=dict)
    private_enterprise_number: int = PRIVATE_ENTERPRISE_NUMBER

    def _content(self) -> bytes:
        entries = sorted(
            ((_app_name_bytes(name), flows) for name, flows in self.results.items()),
            key=lambda entry: entry[0],
        )
        parts: list[bytes] = []
        for name, flows in entries:
            parts.append(bytes([len(name)]))
            parts.append(name)
            parts.append(_U32.pack(len(flows)))
            parts.extend(flow.to_bytes() for flow in flows)
        return b"".join(parts)

    def to_bytes(self) -> bytes:
        content = self._content()
        padding = _padding(len(content))
        total = _CUSTOM_HEAD.size + len(content) + len(padding) + _U32.size
        head = _CUSTOM_HEAD.pack(
            CUSTOM_BLOCK_TYPE, total, self.private_enterprise_number
        )
        return head + content + padding + _U32.pack(total)

    def write(self, stream: BinaryIO) -> int:
        """Write the block to ``stream``, flush it and return the bytes written."""
        written = _write(stream, self.to_bytes())
        flush = getattr(stream, "flush", None)
        if flush is not None:
            flush()
        return written