import io
import struct

import pytest

from namonflow.netflow import UNSUPPORTED_MESSAGE, Netflow
from namonflow.tcpip_headers import PROTO_TCP, PROTO_UDP, PROTO_UDPLITE

LOOPBACK4 = bytes([127, 0, 0, 1])
LOOPBACK6 = bytes(15) + b"\x01"


def make4(**kwargs):
    values = dict(
        ip_version=4,
        local_ip=LOOPBACK4,
        local_port=80,
        proto=PROTO_TCP,
        start_time=1,
        end_time=2,
    )
    values.update(kwargs)
    return Netflow(**values)


def test_equality_ignores_times():
    assert make4(start_time=5, end_time=9) == make4()


@pytest.mark.parametrize(
    "change",
    [
        {"local_port": 81},
        {"proto": PROTO_UDP},
        {"local_ip": bytes([10, 0, 0, 1])},
    ],
)
def test_equality_detects_identifying_fields(change):
    assert (make4(**change) == make4()) is False


def test_versions_differ():
    six = Netflow(6, LOOPBACK6, 80, PROTO_TCP)
    assert (six == make4()) is False


def test_hash_consistent_with_equality():
    flows = {make4(start_time=1), make4(start_time=7)}
    assert len(flows) == 1


def test_key():
    assert make4().key() == (4, LOOPBACK4, 80, PROTO_TCP)


def test_wrong_address_length_rejected():
    with pytest.raises(ValueError):
        Netflow(4, LOOPBACK6, 80, PROTO_TCP)
    with pytest.raises(ValueError):
        Netflow(6, LOOPBACK4, 80, PROTO_TCP)


def test_ipv4_serialisation_layout():
    flow = make4(start_time=1000, end_time=2000)
    data = flow.to_bytes()
    assert len(data) == 1 + 4 + 2 + 1 + 8 + 8
    assert data[0] == 4
    assert data[1:5] == LOOPBACK4
    port, proto, start, end = struct.unpack("<HBQQ", data[5:])
    assert (port, proto, start, end) == (80, PROTO_TCP, 1000, 2000)


def test_ipv6_serialisation_layout():
    flow = Netflow(6, LOOPBACK6, 53, PROTO_UDP, 3, 4)
    data = flow.to_bytes()
    assert len(data) == 1 + 16 + 2 + 1 + 8 + 8
    assert data[0] == 6
    assert data[1:17] == LOOPBACK6
    assert struct.unpack("<HBQQ", data[17:]) == (53, PROTO_UDP, 3, 4)


def test_write_returns_count_and_matches_bytes():
    flow = make4()
    stream = io.BytesIO()
    written = flow.write(stream)
    assert written == len(flow.to_bytes())
    assert stream.getvalue() == flow.to_bytes()


def test_serialising_unsupported_version_fails():
    with pytest.raises(ValueError):
        Netflow().to_bytes()


def test_serialising_out_of_range_port_fails():
    with pytest.raises(ValueError):
        make4(local_port=70000).to_bytes()


def test_describe_ipv4_tcp():
    assert make4().describe() == "127.0.0.1:80\tTCP\tTime:1-2"


def test_describe_ipv6_udplite():
    flow = Netflow(6, LOOPBACK6, 10, PROTO_UDPLITE, 3, 4)
    assert flow.describe() == "::1:10\tUDPLite\tTime:3-4"


def test_describe_unknown_protocol_prints_number():
    assert make4(proto=99).describe() == "127.0.0.1:80\t99\tTime:1-2"


def test_describe_uninitialised():
    assert Netflow().describe() == UNSUPPORTED_MESSAGE


def test_print_writes_line():
    out = io.StringIO()
    make4(proto=PROTO_UDP).print(out)
    assert out.getvalue() == "127.0.0.1:80\tUDP\tTime:1-2\n"


def test_print_defaults_to_stdout(capsys):
    make4().print()
    assert capsys.readouterr().out == "127.0.0.1:80\tTCP\tTime:1-2\n"