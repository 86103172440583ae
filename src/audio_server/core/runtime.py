"""Runtime context shared with request handlers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable

from .channel import CommandSender

if TYPE_CHECKING:
    from ..api.validator import AssetResolver
    from .controller import PlaybackStatus


@dataclass
class RuntimeContext:
    """
    Objects the API layer is allowed to touch.

    Request handlers only ever see a send handle and read-only status; the sink
    and stream stay with the playback controller thread.
    """

    sender: CommandSender
    resolver: "AssetResolver"
    status: "Callable[[], PlaybackStatus]"
    pending: Callable[[], int] = lambda: 0
