"""
One-directional event channel between the resolver thread and the tunnel registry.
"""
from __future__ import annotations

import queue
import threading
from typing import Generic, Optional, TypeVar

from ..errors import ChannelClosed

T = TypeVar("T")


class EventChannel(Generic[T]):
    """Unbounded FIFO carrying events from one producer thread to one consumer.

    There is no backpressure: if the consumer drains slower than the producer
    emits, events accumulate. Once the consumer closes the channel, the next
    ``send`` raises ``ChannelClosed``.
    """

    def __init__(self) -> None:
        self._queue: queue.SimpleQueue[T] = queue.SimpleQueue()
        self._closed = threading.Event()

    def send(self, item: T) -> None:
        if self._closed.is_set():
            raise ChannelClosed("receiver is dead")
        self._queue.put(item)

    def try_receive(self) -> Optional[T]:
        """Take the oldest pending event without blocking; None when nothing is pending."""
        try:
            return self._queue.get_nowait()
        except queue.Empty:
            return None

    def close(self) -> None:
        self._closed.set()

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def pending(self) -> int:
        """Approximate backlog size."""
        return self._queue.qsize()
