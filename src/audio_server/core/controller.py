"""Playback controller: the single thread that owns the output sink."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Optional

from ..audio.output.decoder import decode
from .channel import Receiver
from .commands import Command, Pause, Play, PlayLoop, Resume, Stop
from .errors import DecodeError, DeviceError
from .worker import ChannelWorker, StopSignal

if TYPE_CHECKING:
    from ..audio.output.sink import Sink
    from ..audio.output.types import AudioFormat, BufferSource

logger = logging.getLogger("PlaybackController")

Decoder = Callable[[Path, "AudioFormat"], "BufferSource"]


class PlayerState(str, Enum):
    IDLE = "idle"
    PLAYING = "playing"
    PAUSED = "paused"


@dataclass(frozen=True)
class PlaybackStatus:
    """Immutable snapshot of the controller, safe to read from any thread."""

    state: PlayerState = PlayerState.IDLE
    path: Optional[Path] = None
    looping: bool = False
    commands_applied: int = 0
    last_error: Optional[str] = None


class PlaybackController(ChannelWorker[Command]):
    """
    Applies commands, in arrival order, to the one sink bound to the output stream.

    Only this thread touches the sink. Every Play/PlayLoop stops whatever is
    loaded before installing the new source, so at most one source is ever
    audible. Decode and device failures are logged and leave the state as it
    was; they never end the loop.
    """

    def __init__(
        self,
        *,
        stop_signal: StopSignal,
        receiver: "Receiver[Command]",
        sink: "Sink",
        decoder: Decoder = decode,
        name: str = "PlaybackThread",
        poll_interval_s: float = 0.1,
        daemon: bool = True,
    ):
        super().__init__(
            name=name,
            stop_signal=stop_signal,
            receiver=receiver,
            poll_interval_s=poll_interval_s,
            daemon=daemon,
        )
        self._sink = sink
        self._decode = decoder
        self._status = PlaybackStatus()

    @property
    def status(self) -> PlaybackStatus:
        return self._status

    @property
    def state(self) -> PlayerState:
        return self._status.state

    def handle(self, item: Command) -> None:
        try:
            self.apply(item)
        except DecodeError as e:
            logger.warning("PlaybackController: %s", e)
            self._record_error(str(e))
        except DeviceError as e:
            logger.error("PlaybackController: device rejected %r: %s", item, e)
            self._record_error(str(e))
        except Exception as e:
            logger.exception("PlaybackController: failed to apply %r", item)
            self._record_error(f"{type(e).__name__}: {e}")
        finally:
            self._status = replace(
                self._status, commands_applied=self._status.commands_applied + 1
            )

    def apply(self, command: Command) -> None:
        """Apply one command to the sink. Errors propagate to the caller."""
        if isinstance(command, Play):
            self._apply_play(command.path, loop=False)
        elif isinstance(command, PlayLoop):
            self._apply_play(command.path, loop=True)
        elif isinstance(command, Pause):
            self._apply_pause()
        elif isinstance(command, Resume):
            self._apply_resume()
        elif isinstance(command, Stop):
            self._apply_stop()
        else:
            raise TypeError(f"unknown command: {command!r}")

    def _apply_play(self, path: Path, *, loop: bool) -> None:
        # Decode before touching the sink so a bad file leaves playback as it was.
        source = self._decode(path, self._sink.format)

        self._sink.stop()
        self._transition(PlayerState.IDLE, path=None, looping=False)
        self._sink.append(source.repeat_infinite() if loop else source)
        self._sink.play()
        self._transition(PlayerState.PLAYING, path=path, looping=loop)
        logger.info("PlaybackController: playing %s%s", path, " (loop)" if loop else "")

    def _apply_pause(self) -> None:
        if self.state is not PlayerState.PLAYING:
            logger.debug("PlaybackController: pause ignored in state %s", self.state.value)
            return
        self._sink.pause()
        self._transition(PlayerState.PAUSED)
        logger.info("PlaybackController: paused")

    def _apply_resume(self) -> None:
        if self.state is not PlayerState.PAUSED:
            logger.debug("PlaybackController: resume ignored in state %s", self.state.value)
            return
        self._sink.play()
        self._transition(PlayerState.PLAYING)
        logger.info("PlaybackController: resumed")

    def _apply_stop(self) -> None:
        if self.state is PlayerState.IDLE:
            logger.debug("PlaybackController: stop ignored, already idle")
            return
        self._sink.stop()
        # A paused sink stays paused after stop; the next play() clears it.
        self._transition(PlayerState.IDLE, path=None, looping=False)
        logger.info("PlaybackController: stopped")

    def on_idle(self) -> None:
        # A one-shot source that ran to its end leaves the sink empty.
        if self.state is PlayerState.PLAYING and self._sink.empty():
            logger.info("PlaybackController: finished %s", self._status.path)
            self._transition(PlayerState.IDLE, path=None, looping=False)

    def on_exit(self) -> None:
        self._sink.stop()

    def _transition(self, state: PlayerState, **changes) -> None:
        self._status = replace(self._status, state=state, **changes)

    def _record_error(self, message: str) -> None:
        self._status = replace(self._status, last_error=message)
