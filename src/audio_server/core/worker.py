"""Reusable worker thread utilities."""

from __future__ import annotations

import logging
import queue
import threading
from typing import Generic, Protocol, TypeVar

from .channel import Receiver
from .errors import ChannelClosed

T = TypeVar("T")

logger = logging.getLogger(__name__)


class StopSignal(Protocol):
    """Anything with is_set(), e.g. a threading.Event shared by the owner."""

    def is_set(self) -> bool: ...


class ChannelWorker(threading.Thread, Generic[T]):
    """
    Base class for a channel-consuming worker thread.

    Keeps lifecycle + polling logic in one place. Subclasses implement `handle(item)`
    and may override `on_idle()`, which runs whenever a poll interval passes with
    nothing received. The loop ends when the channel reports closed or the stop
    signal is set.
    """

    def __init__(
        self,
        *,
        name: str,
        stop_signal: StopSignal,
        receiver: "Receiver[T]",
        poll_interval_s: float = 0.1,
        daemon: bool = True,
    ):
        super().__init__(name=name, daemon=daemon)
        self._stop_signal = stop_signal
        self._receiver = receiver
        self._poll_interval_s = poll_interval_s

    def run(self) -> None:
        logger.info("%s started", self.name)
        try:
            while not self._stop_signal.is_set():
                try:
                    item = self._receiver.receive(timeout=self._poll_interval_s)
                except queue.Empty:
                    self.on_idle()
                    continue
                except ChannelClosed:
                    logger.info("%s: channel closed", self.name)
                    break

                self.handle(item)
        finally:
            self._receiver.close()
            self.on_exit()
            logger.info("%s stopped", self.name)

    def handle(self, item: T) -> None:
        raise NotImplementedError

    def on_idle(self) -> None:
        """Called when a poll interval passes without an item."""

    def on_exit(self) -> None:
        """Called on the worker thread after the loop ends."""
