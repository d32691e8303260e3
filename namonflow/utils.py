"""Small helpers: number parsing, address formatting, byte order."""

from __future__ import annotations

import os
import socket
import sys

from namonflow.tcpip_headers import AF_INET, AF_INET6, IPV4_ADDRLEN, IPV6_ADDRLEN

_DIGITS = "0123456789"


class NamonError(Exception):
    """Error carrying a message and, optionally, a system error number."""

    def __init__(self, message: str, errno: int | None = None) -> None:
        self.message = message
        self.errno = errno
        text = f"ERROR: {message}\n"
        if errno:
            text += os.strerror(errno) + "\n"
        super().__init__(text)

    def __str__(self) -> str:
        return self.args[0]


def ch_to_int(text: str) -> int:
    """Convert a string of decimal digits into an integer.

    An empty string yields 0; any non-digit character raises ValueError.
    """
    result = 0
    for char in text:
        if char not in _DIGITS:
            raise ValueError(f"not a decimal number: {text!r}")
        result = result * 10 + _DIGITS.index(char)
    return result


def inet_ntop4(address: bytes) -> str:
    """Format a 4-byte IPv4 address in dotted-decimal notation."""
    address = bytes(address)
    if len(address) != IPV4_ADDRLEN:
        raise ValueError(f"IPv4 address must be {IPV4_ADDRLEN} bytes")
    return ".".join(str(octet) for octet in address)


def _longest_zero_run(words: list[int]) -> tuple[int, int] | None:
    best: tuple[int, int] | None = None
    start: int | None = None
    for index, word in enumerate(words + [1]):
        if word == 0:
            if start is None:
                start = index
        elif start is not None:
            length = index - start
            if best is None or length > best[1]:
                best = (start, length)
            start = None
    if best is not None and best[1] < 2:
        return None
    return best


def inet_ntop6(address: bytes) -> str:
    """Format a 16-byte IPv6 address in compressed text form."""
    address = bytes(address)
    if len(address) != IPV6_ADDRLEN:
        raise ValueError(f"IPv6 address must be {IPV6_ADDRLEN} bytes")
    words = [int.from_bytes(address[i:i + 2], "big") for i in range(0, 16, 2)]
    best = _longest_zero_run(words)

    parts: list[str] = []
    for index, word in enumerate(words):
        if best is not None and best[0] <= index < best[0] + best[1]:
            if index == best[0]:
                parts.append(":")
            continue
        if index != 0:
            parts.append(":")
        if (
            index == 6
            and best is not None
            and best[0] == 0
            and (best[1] == 6 or (best[1] == 5 and words[5] == 0xFFFF))
        ):
            parts.append(inet_ntop4(address[12:]))
            break
        parts.append(f"{word:x}")

    if best is not None and best[0] + best[1] == len(words):
        parts.append(":")
    return "".join(parts)


def inet_ntop(family: int, address: bytes) -> str:
    """Format a binary address of the given address family as text."""
    if family in (AF_INET, socket.AF_INET):
        return inet_ntop4(address)
    if family in (AF_INET6, socket.AF_INET6):
        return inet_ntop6(address)
    raise ValueError("inet_ntop: Unexpected address family")


def ntohs(num: int) -> int:
    """Convert a 16-bit value read in host byte order to network byte order."""
    if not 0 <= num <= 0xFFFF:
        raise ValueError(f"not a 16-bit value: {num}")
    return int.from_bytes(num.to_bytes(2, sys.byteorder), "big")


def concatenate(*args: str) -> str:
    """Join all given strings into one."""
    return "".join(args)