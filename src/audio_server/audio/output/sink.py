"""Output stream + sink: AudioSource -> sounddevice output (callback mode)."""

from __future__ import annotations

import logging
import threading
from collections import deque
from typing import Deque, Optional, Tuple, Union

import numpy as np

from ...core.errors import DeviceError
from .types import AudioFormat, AudioSource

logger = logging.getLogger("Sink")

# Callback block size: ~12 ms at 44.1 kHz
PLAYBACK_BLOCKSIZE = 512


class Sink:
    """
    Queue of sources feeding one output stream.

    The audio callback runs on the PortAudio thread and reads through `fill`;
    every other method is called from the playback controller thread. The lock
    only guards that hand-off.
    """

    def __init__(self, fmt: AudioFormat):
        self.format = fmt
        self._lock = threading.Lock()
        self._sources: Deque[AudioSource] = deque()
        self._paused = False

    def append(self, source: AudioSource) -> None:
        if source.format != self.format:
            raise DeviceError(
                f"source format {source.format} does not match stream format {self.format}"
            )
        with self._lock:
            self._sources.append(source)

    def play(self) -> None:
        with self._lock:
            self._paused = False

    def pause(self) -> None:
        with self._lock:
            self._paused = True

    def stop(self) -> None:
        """Drop every queued source."""
        with self._lock:
            self._sources.clear()

    def empty(self) -> bool:
        with self._lock:
            return not self._sources

    def is_paused(self) -> bool:
        with self._lock:
            return self._paused

    def fill(self, outdata: np.ndarray) -> None:
        """Write the next len(outdata) frames into outdata; silence when paused or empty."""
        frames = len(outdata)
        outdata.fill(0)
        with self._lock:
            if self._paused:
                return
            written = 0
            while written < frames and self._sources:
                source = self._sources[0]
                chunk = source.read(frames - written)
                outdata[written : written + len(chunk)] = chunk
                written += len(chunk)
                if source.exhausted:
                    self._sources.popleft()


class OutputDevice:
    """Output stream opened once for the process lifetime, with its bound sink."""

    def __init__(
        self,
        fmt: AudioFormat,
        *,
        device: Optional[Union[int, str]] = None,
        blocksize: int = PLAYBACK_BLOCKSIZE,
    ):
        self.format = fmt
        self.sink = Sink(fmt)
        self._device = device
        self._blocksize = blocksize
        self._stream = None

    def open(self) -> Sink:
        """Open and start the output stream. Raises DeviceError on failure."""
        try:
            import sounddevice as sd
        except OSError as e:
            raise DeviceError(f"PortAudio is not available: {e}") from e

        def callback(outdata: np.ndarray, frames: int, time_info: object, status) -> None:
            if status:
                logger.warning("Sink: callback status=%s", status)
            self.sink.fill(outdata)

        try:
            stream = sd.OutputStream(
                samplerate=self.format.sample_rate,
                channels=self.format.channels,
                dtype="float32",
                blocksize=self._blocksize,
                device=self._device,
                callback=callback,
            )
            stream.start()
        except Exception as e:
            raise DeviceError(f"try open output stream error: {e}") from e

        self._stream = stream
        logger.info(
            "Output stream opened: device=%s sr=%s ch=%s blocksize=%s",
            self._device if self._device is not None else "default",
            self.format.sample_rate,
            self.format.channels,
            self._blocksize,
        )
        return self.sink

    @property
    def is_open(self) -> bool:
        return self._stream is not None

    def close(self) -> None:
        stream, self._stream = self._stream, None
        if stream is None:
            return
        try:
            if stream.active:
                stream.stop()
            stream.close()
        except Exception as e:
            logger.warning("Error closing output stream: %s", e)
        logger.info("Output stream closed")


def open_output(
    fmt: AudioFormat, device: Optional[Union[int, str]] = None
) -> Tuple[OutputDevice, Sink]:
    """Open the output stream and return it with its sink."""
    output = OutputDevice(fmt, device=device)
    sink = output.open()
    return output, sink
