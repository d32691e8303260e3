# namonflow

Building blocks for recording network traffic together with the local
applications that produced it. The package has no dependencies beyond the
standard library.

## Modules

- `namonflow.tcpip_headers`: protocol constants (`ETHERMTU`, `PROTO_TCP`,
  `PROTO_UDP`, `PROTO_UDPLITE`, `AF_INET`, `AF_INET6` and others) and frozen
  dataclasses for the Ethernet, IPv4, IPv6, UDP and TCP headers
  (`EthernetHeader`, `IPv4Header`, `IPv6Header`, `UdpHeader`, `TcpHeader`,
  plus `MacAddress`). Each header has `pack()`, which returns its wire form.
  The matching `parse_ethernet_header`, `parse_ipv4_header`,
  `parse_ipv6_header`, `parse_udp_header` and `parse_tcp_header` read a header
  from the start of a byte string and raise `ValueError` if it is too short.
- `namonflow.utils`: `inet_ntop(family, address)`, `inet_ntop4` and
  `inet_ntop6` format binary addresses as text (IPv6 in compressed form,
  with embedded IPv4 shown in dotted notation); `ch_to_int` parses a string
  of decimal digits and raises `ValueError` on anything else; `ntohs` swaps
  a 16-bit value between host and network byte order; `concatenate` joins
  strings; `NamonError` is an exception carrying a message and an optional
  system error number.
- `namonflow.netflow`: the `Netflow` dataclass holding the IP version, local
  address, local port, transport protocol and the times of the first and last
  packet. Two records are equal (and hash alike) when their `key()` (version,
  address, port, protocol) is equal; times are ignored. `to_bytes()` and
  `write(stream)` give the little-endian binary record, `describe()` and
  `print(out)` a readable line such as `127.0.0.1:8080\tTCP\tTime:1-2`.
- `namonflow.pcapng_blocks`: pcap-ng blocks, each with `to_bytes()` and
  `write(stream)` (which returns the number of bytes written):
  `SectionHeaderBlock(os_name)`,
  `InterfaceDescriptionBlock(device, os_name, snap_len=8192, link_type=1)`,
  `EnhancedPacketBlock` (with `set_timestamp` and `set_packet_data`) and
  `CustomBlock(results)`, which stores the netflows grouped per application
  name, names in sorted order and zero-terminated. `compute_padding_len`
  gives the padding needed to reach a multiple of a block size; every block
  is padded to a multiple of four bytes.
- `namonflow.ring_buffer`: `RingBuffer(capacity)`, a bounded FIFO that lets one
  thread store items while another drains them. `push` and `push_packet`
  (taking a `PacketHeader` and the packet bytes, stored as an
  `EnhancedPacketBlock`) return `False` and count the item in `dropped` when
  the buffer is full. `write(stream, stop)` writes stored blocks and
  `consume(handler, stop)` passes stored items to a function, both until the
  `threading.Event` `stop` is set; call `notify()` after setting it to wake
  the waiting thread.

## Installation

    pip install .

## Example

    import threading

    from namonflow.netflow import Netflow
    from namonflow.pcapng_blocks import (
        CustomBlock, InterfaceDescriptionBlock, SectionHeaderBlock,
    )
    from namonflow.ring_buffer import PacketHeader, RingBuffer
    from namonflow.tcpip_headers import PROTO_TCP

    with open("capture.pcapng", "wb") as out:
        SectionHeaderBlock("Linux 6.1").write(out)
        InterfaceDescriptionBlock("eth0", "Linux 6.1").write(out)

        packets = RingBuffer(1024)
        stop = threading.Event()
        writer = threading.Thread(target=packets.write, args=(out, stop))
        writer.start()

        header = PacketHeader(ts_sec=1_700_000_000, ts_usec=0, caplen=60, length=60)
        packets.push_packet(header, bytes(60))

        stop.set()
        packets.notify()
        writer.join()

        flow = Netflow(ip_version=4, local_ip=bytes([127, 0, 0, 1]),
                       local_port=8080, proto=PROTO_TCP,
                       start_time=1, end_time=2)
        CustomBlock({"/usr/bin/curl": [flow]}).write(out)

## What the package does not do

It does not capture packets from a network interface, does not find out which
application owns a local socket, and has no command-line program. It provides
the records, header parsing, buffering and file blocks that such a monitor
writes; the packets and the application names must come from the caller.

## Tests

    pip install .[test]
    pytest