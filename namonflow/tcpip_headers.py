"""Protocol constants and link, network and transport layer headers."""

from __future__ import annotations

import struct
from dataclasses import dataclass

# Ethernet
ETHERMTU = 1500
ETHER_ADDRLEN = 6
ETHER_HDRLEN = 14
ETHERTYPE_IPV4 = 0x0800
ETHERTYPE_IPV6 = 0x86DD

# IPv4
IPV4_MAXPACKET = 65535
IPV4_ADDRSTRLEN = 16
IPV4_ADDRLEN = 4
AF_INET = 2

# IPv6
IPV6_ADDRSTRLEN = 46
IPV6_ADDRLEN = 16
IPV6_HDRLEN = 40
AF_INET6 = 10

# Transport protocols
PROTO_UDP = 0x11
PROTO_UDPLITE = 0x88
PROTO_TCP = 0x06
UDP_HDRLEN = 20

_ETHER = struct.Struct("!6s6sH")
_IPV4 = struct.Struct("!BBHHHBBH4s4s")
_IPV6 = struct.Struct("!IHBB16s16s")
_UDP = struct.Struct("!HHHH")
_TCP = struct.Struct("!HHIIBBHHH")


def _require(data: bytes, layout: struct.Struct, what: str) -> bytes:
    data = bytes(data)
    if len(data) < layout.size:
        raise ValueError(
            f"{what} header needs {layout.size} bytes, got {len(data)}"
        )
    return data[: layout.size]


def _check_nibble(value: int, name: str) -> None:
    if not 0 <= value <= 0xF:
        raise ValueError(f"{name} must fit into 4 bits, got {value}")


@dataclass(frozen=True)
class MacAddress:
    """A 48-bit Ethernet hardware address."""

    octets: bytes

    def __post_init__(self) -> None:
        octets = bytes(self.octets)
        if len(octets) != ETHER_ADDRLEN:
            raise ValueError(
                f"MAC address must be {ETHER_ADDRLEN} bytes, got {len(octets)}"
            )
        object.__setattr__(self, "octets", octets)

    def __str__(self) -> str:
        return ":".join(f"{octet:02x}" for octet in self.octets)


@dataclass(frozen=True)
class EthernetHeader:
    """Ethernet II frame header."""

    destination: MacAddress
    source: MacAddress
    ether_type: int

    def pack(self) -> bytes:
        return _ETHER.pack(
            self.destination.octets, self.source.octets, self.ether_type
        )


@dataclass(frozen=True)
class IPv4Header:
    """IPv4 header without options."""

    version: int
    ihl: int
    tos: int
    total_length: int
    identification: int
    fragment_offset: int
    ttl: int
    protocol: int
    checksum: int
    source: bytes
    destination: bytes

    def __post_init__(self) -> None:
        _check_nibble(self.version, "version")
        _check_nibble(self.ihl, "ihl")
        for name in ("source", "destination"):
            address = bytes(getattr(self, name))
            if len(address) != IPV4_ADDRLEN:
                raise ValueError(f"IPv4 {name} address must be 4 bytes")
            object.__setattr__(self, name, address)

    @property
    def header_length(self) -> int:
        """Header length in bytes as given by the IHL field."""
        return self.ihl * 4

    def pack(self) -> bytes:
        return _IPV4.pack(
            (self.version << 4) | self.ihl,
            self.tos,
            self.total_length,
            self.identification,
            self.fragment_offset,
            self.ttl,
            self.protocol,
            self.checksum,
            self.source,
            self.destination,
        )


@dataclass(frozen=True)
class IPv6Header:
    """IPv6 fixed header."""

    version: int
    traffic_class: int
    flow_label: int
    payload_length: int
    next_header: int
    hop_limit: int
    source: bytes
    destination: bytes

    def __post_init__(self) -> None:
        _check_nibble(self.version, "version")
        if not 0 <= self.traffic_class <= 0xFF:
            raise ValueError("traffic class must fit into 8 bits")
        if not 0 <= self.flow_label < (1 << 20):
            raise ValueError("flow label must fit into 20 bits")
        for name in ("source", "destination"):
            address = bytes(getattr(self, name))
            if len(address) != IPV6_ADDRLEN:
                raise ValueError(f"IPv6 {name} address must be 16 bytes")
            object.__setattr__(self, name, address)

    def pack(self) -> bytes:
        control = (self.version << 28) | (self.traffic_class << 20) | self.flow_label
        return _IPV6.pack(
            control,
            self.payload_length,
            self.next_header,
            self.hop_limit,
            self.source,
            self.destination,
        )


@dataclass(frozen=True)
class UdpHeader:
    """UDP (and UDP-Lite) header."""

    source_port: int
    destination_port: int
    length: int
    checksum: int

    def pack(self) -> bytes:
        return _UDP.pack(
            self.source_port, self.destination_port, self.length, self.checksum
        )


@dataclass(frozen=True)
class TcpHeader:
    """TCP header without options."""

    source_port: int
    destination_port: int
    sequence: int
    acknowledgement: int
    data_offset: int
    flags: int
    window: int
    checksum: int
    urgent_pointer: int
    reserved: int = 0

    def __post_init__(self) -> None:
        _check_nibble(self.data_offset, "data offset")
        _check_nibble(self.reserved, "reserved")

    def pack(self) -> bytes:
        return _TCP.pack(
            self.source_port,
            self.destination_port,
            self.sequence,
            self.acknowledgement,
            (self.data_offset << 4) | self.reserved,
            self.flags,
            self.window,
            self.checksum,
            self.urgent_pointer,
        )


def parse_ethernet_header(data: bytes) -> EthernetHeader:
    """Parse an Ethernet header from the start of ``data``."""
    dhost, shost, ether_type = _ETHER.unpack(_require(data, _ETHER, "Ethernet"))
    return EthernetHeader(MacAddress(dhost), MacAddress(shost), ether_type)


def parse_ipv4_header(data: bytes) -> IPv4Header:
    """Parse an IPv4 header from the start of ``data``."""
    (vihl, tos, total_length, ident, offset, ttl, proto, checksum, src, dst) = (
        _IPV4.unpack(_require(data, _IPV4, "IPv4"))
    )
    return IPv4Header(
        version=vihl >> 4,
        ihl=vihl & 0xF,
        tos=tos,
        total_length=total_length,
        identification=ident,
        fragment_offset=offset,
        ttl=ttl,
        protocol=proto,
        checksum=checksum,
        source=src,
        destination=dst,
    )


def parse_ipv6_header(data: bytes) -> IPv6Header:
    """Parse an IPv6 header from the start of ``data``."""
    control, plen, nxt, hlim, src, dst = _IPV6.unpack(_require(data, _IPV6, "IPv6"))
    return IPv6Header(
        version=control >> 28,
        traffic_class=(control >> 20) & 0xFF,
        flow_label=control & 0xFFFFF,
        payload_length=plen,
        next_header=nxt,
        hop_limit=hlim,
        source=src,
        destination=dst,
    )


def parse_udp_header(data: bytes) -> UdpHeader:
    """Parse a UDP header from the start of ``data``."""
    return UdpHeader(*_UDP.unpack(_require(data, _UDP, "UDP")))


def parse_tcp_header(data: bytes) -> TcpHeader:
    """Parse a TCP header from the start of ``data``."""
    (sport, dport, seq, ack, off_x2, flags, win, checksum, urp) = _TCP.unpack(
        _require(data, _TCP, "TCP")
    )
    return TcpHeader(
        source_port=sport,
        destination_port=dport,
        sequence=seq,
        acknowledgement=ack,
        data_offset=off_x2 >> 4,
        flags=flags,
        window=win,
        checksum=checksum,
        urgent_pointer=urp,
        reserved=off_x2 & 0xF,
    )