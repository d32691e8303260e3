"""Bounded ring buffer that hands items from a capture thread to a worker."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import BinaryIO, Callable, Generic, Optional, TypeVar

from namonflow.pcapng_blocks import EnhancedPacketBlock
from namonflow.utils import NamonError

T = TypeVar("T")

_log = logging.getLogger(__name__)

_USEC_PER_SEC = 1_000_000


@dataclass(frozen=True)
class PacketHeader:
    """Capture metadata of one packet: arrival time and lengths."""

    ts_sec: int
    ts_usec: int
    caplen: int
    length: int

    @property
    def timestamp_usec(self) -> int:
        """Arrival time in microseconds since the epoch."""
        return self.ts_sec * _USEC_PER_SEC + self.ts_usec


class RingBuffer(Generic[T]):
    """Fixed-capacity FIFO that drops new items when it is full.

    One thread pushes items, another waits for them with :meth:`write` or
    :meth:`consume` until a stop event is set.  Whoever sets the stop event
    should call :meth:`notify` so that a waiting consumer wakes up.
    """

    def __init__(
        self, capacity: int, factory: Optional[Callable[[], T]] = None
    ) -> None:
        if capacity < 0:
            raise ValueError(f"capacity must not be negative: {capacity}")
        self._buffer: list = [factory() if factory else None for _ in range(capacity)]
        self._first = 0
        self._last = 0
        self._size = 0
        self._dropped = 0
        self._cond = threading.Condition()

    @property
    def capacity(self) -> int:
        return len(self._buffer)

    @property
    def dropped(self) -> int:
        """Number of items rejected because the buffer was full."""
        return self._dropped

    def __len__(self) -> int:
        return self._size

    def empty(self) -> bool:
        return self._size == 0

    def full(self) -> bool:
        return self._size == len(self._buffer)

    def _store(self, place: Callable[[int], None]) -> bool:
        with self._cond:
            if self.full():
                self._dropped += 1
                return False
            if self._last >= len(self._buffer):
                self._last = 0
            place(self._last)
            self._last += 1
            self._size += 1
            self._cond.notify_all()
        return True

    def push(self, elem: T) -> bool:
        """Store ``elem``; return False if it was dropped because of a full buffer."""

        def place(index: int) -> None:
            self._buffer[index] = elem

        return self._store(place)

    def push_packet(self, header: PacketHeader, packet: bytes) -> bool:
        """Store a captured packet as an enhanced packet block.

        Returns False if the packet was dropped because of a full buffer.
        """
        packet = bytes(packet)
        if header.caplen > len(packet):
            raise ValueError(
                f"captured length {header.caplen} exceeds packet data "
                f"of {len(packet)} bytes"
            )

        def place(index: int) -> None:
            block = self._buffer[index]
            if not isinstance(block, EnhancedPacketBlock):
                block = EnhancedPacketBlock()
                self._buffer[index] = block
            block.original_length = header.length
            block.set_timestamp(header.timestamp_usec)
            block.set_packet_data(packet[: header.caplen])

        return self._store(place)

    def pop(self) -> None:
        """Discard the oldest element."""
        with self._cond:
            if self._size == 0:
                raise IndexError("pop from an empty ring buffer")
            self._first = (self._first + 1) % len(self._buffer)
            self._size -= 1

    def _front(self) -> T:
        return self._buffer[self._first]

    def top(self) -> T:
        """The most recently inserted element."""
        if self._last == 0:
            raise IndexError("nothing has been pushed into the ring buffer")
        return self._buffer[self._last - 1]

    def notify(self) -> None:
        """Wake every thread waiting for new items or for the stop signal."""
        with self._cond:
            self._cond.notify_all()

    def new_item_or_stop(self, stop: threading.Event) -> bool:
        """True when an item is waiting or the consumer should stop."""
        return not self.empty() or stop.is_set()

    def _wait(self, stop: threading.Event) -> None:
        with self._cond:
            self._cond.wait_for(lambda: self.new_item_or_stop(stop))

    def write(self, stream: BinaryIO, stop: threading.Event) -> None:
        """Write stored blocks to ``stream`` until ``stop`` is set."""
        _log.info("Writing to the output file started.")
        while not stop.is_set():
            self._wait(stop)
            try:
                while not self.empty():
                    self._front().write(stream)
                    self.pop()
                stream.flush()
            except OSError as exc:
                _log.error("Output error.")
                raise NamonError("Output file error", exc.errno) from exc
        _log.info("Writing to the output file stopped.")

    def consume(self, handler: Callable[[T], None], stop: threading.Event) -> None:
        """Pass each stored element to ``handler`` until ``stop`` is set."""
        while not stop.is_set():
            self._wait(stop)
            while not self.empty():
                handler(self._front())
                self.pop()
        _log.info("Caching stopped.")