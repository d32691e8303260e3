import ipaddress

import pytest

from namonflow.tcpip_headers import (
    ETHER_HDRLEN,
    ETHERTYPE_IPV4,
    ETHERTYPE_IPV6,
    IPV6_HDRLEN,
    PROTO_TCP,
    PROTO_UDP,
    EthernetHeader,
    IPv4Header,
    IPv6Header,
    MacAddress,
    TcpHeader,
    UdpHeader,
    parse_ethernet_header,
    parse_ipv4_header,
    parse_ipv6_header,
    parse_tcp_header,
    parse_udp_header,
)

MAC_A = MacAddress(bytes.fromhex("020000000001"))
MAC_B = MacAddress(bytes.fromhex("020000000002"))


def _ipv4_header():
    return IPv4Header(
        version=4,
        ihl=5,
        tos=0,
        total_length=60,
        identification=1234,
        fragment_offset=0,
        ttl=64,
        protocol=PROTO_TCP,
        checksum=0xABCD,
        source=ipaddress.IPv4Address("10.0.0.1").packed,
        destination=ipaddress.IPv4Address("10.0.0.2").packed,
    )


def _ipv6_header():
    return IPv6Header(
        version=6,
        traffic_class=3,
        flow_label=0x12345,
        payload_length=20,
        next_header=PROTO_UDP,
        hop_limit=64,
        source=ipaddress.IPv6Address("2001:db8::1").packed,
        destination=ipaddress.IPv6Address("2001:db8::2").packed,
    )


def test_mac_address_str():
    assert str(MAC_A) == "02:00:00:00:00:01"


def test_mac_address_wrong_length():
    with pytest.raises(ValueError):
        MacAddress(b"\x00\x01")


def test_ethernet_round_trip():
    header = EthernetHeader(MAC_A, MAC_B, ETHERTYPE_IPV6)
    packed = header.pack()
    assert len(packed) == ETHER_HDRLEN
    assert parse_ethernet_header(packed + b"payload") == header


def test_ethernet_type_in_network_order():
    packed = EthernetHeader(MAC_A, MAC_B, ETHERTYPE_IPV4).pack()
    assert packed[12:14] == b"\x08\x00"
    assert packed[:6] == MAC_A.octets
    assert packed[6:12] == MAC_B.octets


def test_ipv4_round_trip():
    header = _ipv4_header()
    packed = header.pack()
    assert len(packed) == header.header_length
    assert packed[0] >> 4 == header.version
    assert parse_ipv4_header(packed) == header


def test_ipv4_bad_address():
    with pytest.raises(ValueError):
        IPv4Header(4, 5, 0, 0, 0, 0, 0, 0, 0, b"\x00" * 3, b"\x00" * 4)


def test_ipv6_round_trip():
    header = _ipv6_header()
    packed = header.pack()
    assert len(packed) == IPV6_HDRLEN
    assert packed[0] >> 4 == header.version
    parsed = parse_ipv6_header(packed)
    assert parsed == header
    assert parsed.flow_label == header.flow_label


def test_ipv6_flow_label_too_large():
    with pytest.raises(ValueError):
        IPv6Header(6, 0, 1 << 20, 0, 0, 0, b"\x00" * 16, b"\x00" * 16)


def test_udp_round_trip():
    header = UdpHeader(53000, 53, 40, 0x1111)
    assert parse_udp_header(header.pack()) == header


def test_tcp_round_trip():
    header = TcpHeader(44321, 443, 0xDEADBEEF, 7, 5, 0x18, 65535, 0x2222, 0, 0)
    packed = header.pack()
    assert packed[12] >> 4 == header.data_offset
    assert parse_tcp_header(packed) == header


@pytest.mark.parametrize(
    "parser",
    [
        parse_ethernet_header,
        parse_ipv4_header,
        parse_ipv6_header,
        parse_udp_header,
        parse_tcp_header,
    ],
)
def test_short_data_rejected(parser):
    with pytest.raises(ValueError):
        parser(b"\x00\x01\x02")