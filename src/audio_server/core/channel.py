"""Multi-producer, single-consumer command channel."""

from __future__ import annotations

import logging
import queue
import threading
from typing import Generic, Iterator, Optional, Tuple, TypeVar

from .commands import Command
from .errors import ChannelClosed

T = TypeVar("T")

logger = logging.getLogger("CommandChannel")

# Put on the queue by the last sender to close.
_CLOSED = object()


class _ChannelState(Generic[T]):
    """State shared by every handle of one channel."""

    def __init__(self) -> None:
        self.queue: "queue.Queue[object]" = queue.Queue()
        self.lock = threading.Lock()
        self.senders = 0
        self.receiver_alive = True


class Sender(Generic[T]):
    """
    Send side of a channel.

    Handles are cheap to clone and safe to share between threads. Sends are
    serialized by the channel lock, so the order in which `send` calls complete
    is the order the receiver observes.
    """

    def __init__(self, state: "_ChannelState[T]"):
        # Callers register the handle in state.senders while holding state.lock.
        self._state = state
        self._closed = False

    def send(self, item: T) -> None:
        state = self._state
        with state.lock:
            if self._closed:
                raise ChannelClosed("sender handle is closed")
            if not state.receiver_alive:
                raise ChannelClosed("receiver has been dropped")
            state.queue.put(item)

    def clone(self) -> "Sender[T]":
        state = self._state
        with state.lock:
            if self._closed:
                raise ChannelClosed("cannot clone a closed sender")
            state.senders += 1
            return type(self)(state)

    def close(self) -> None:
        """Drop this handle. The last handle to close ends the channel."""
        state = self._state
        with state.lock:
            if self._closed:
                return
            self._closed = True
            state.senders -= 1
            if state.senders == 0:
                state.queue.put(_CLOSED)

    @property
    def closed(self) -> bool:
        return self._closed

    def __enter__(self) -> "Sender[T]":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


class Receiver(Generic[T]):
    """Receive side of a channel. Owned by exactly one consumer thread."""

    def __init__(self, state: "_ChannelState[T]"):
        self._state = state
        self._finished = False

    def receive(self, timeout: Optional[float] = None) -> T:
        """
        Block until the next item is available and return it.

        Raises ChannelClosed once every sender is closed and the queue is
        drained, and queue.Empty if `timeout` elapses first.
        """
        if self._finished:
            raise ChannelClosed("all senders have been dropped")
        item = self._state.queue.get(timeout=timeout)
        if item is _CLOSED:
            self._finished = True
            raise ChannelClosed("all senders have been dropped")
        return item  # type: ignore[return-value]

    def close(self) -> None:
        """Drop the receive side; subsequent sends fail."""
        with self._state.lock:
            self._state.receiver_alive = False

    def pending(self) -> int:
        """Approximate number of queued items."""
        return self._state.queue.qsize()

    def __iter__(self) -> Iterator[T]:
        while True:
            try:
                yield self.receive()
            except ChannelClosed:
                return


CommandSender = Sender[Command]
CommandReceiver = Receiver[Command]


def open_channel() -> Tuple["Sender[Command]", "Receiver[Command]"]:
    """Create a command channel and return its (sender, receiver) pair."""
    state: _ChannelState[Command] = _ChannelState()
    logger.debug("Command channel opened")
    with state.lock:
        state.senders += 1
        sender = Sender(state)
    return sender, Receiver(state)
