"""Netflow records, packet headers, a ring buffer and pcap-ng blocks for application-aware network monitoring."""

__version__ = "1.0.0"
__all__ = ["netflow", "pcapng_blocks", "ring_buffer", "tcpip_headers", "utils"]