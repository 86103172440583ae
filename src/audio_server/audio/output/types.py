"""Audio output data types."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

import numpy as np


@dataclass(frozen=True)
class AudioFormat:
    """Sample layout of the output stream. Sources are converted to it on decode."""

    sample_rate: int = 44100
    channels: int = 2


class AudioSource(Protocol):
    """A playable source. `read` returns float32 frames shaped (n, channels)."""

    format: AudioFormat

    def read(self, frames: int) -> np.ndarray: ...

    @property
    def exhausted(self) -> bool: ...


class BufferSource:
    """Fully decoded audio held in memory, played once from the start."""

    def __init__(self, frames: np.ndarray, fmt: AudioFormat, name: str = ""):
        if frames.ndim != 2 or frames.shape[1] != fmt.channels:
            raise ValueError(
                f"frames shape {frames.shape} does not match {fmt.channels} channels"
            )
        self.format = fmt
        self.name = name
        self._frames = frames
        self._pos = 0

    def __len__(self) -> int:
        return len(self._frames)

    @property
    def duration_s(self) -> float:
        return len(self._frames) / self.format.sample_rate

    @property
    def exhausted(self) -> bool:
        return self._pos >= len(self._frames)

    def read(self, frames: int) -> np.ndarray:
        chunk = self._frames[self._pos : self._pos + frames]
        self._pos += len(chunk)
        return chunk

    def rewind(self) -> None:
        self._pos = 0

    def repeat_infinite(self) -> "RepeatingSource":
        return RepeatingSource(self)


class RepeatingSource:
    """Wraps a BufferSource so that reads wrap around to the start forever."""

    def __init__(self, inner: BufferSource):
        self.format = inner.format
        self.name = inner.name
        self._inner = inner

    @property
    def exhausted(self) -> bool:
        # An empty file has nothing to repeat.
        return len(self._inner) == 0

    def read(self, frames: int) -> np.ndarray:
        if self.exhausted:
            return self._inner.read(frames)
        parts = []
        remaining = frames
        while remaining > 0:
            chunk = self._inner.read(remaining)
            if len(chunk) == 0:
                self._inner.rewind()
                continue
            parts.append(chunk)
            remaining -= len(chunk)
        if len(parts) == 1:
            return parts[0]
        return np.concatenate(parts)
