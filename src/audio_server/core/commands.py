"""Commands understood by the playback controller."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Union


@dataclass(frozen=True)
class Play:
    """Play a file once, superseding whatever is loaded."""

    path: Path


@dataclass(frozen=True)
class PlayLoop:
    """Play a file forever, superseding whatever is loaded."""

    path: Path


@dataclass(frozen=True)
class Pause:
    pass


@dataclass(frozen=True)
class Resume:
    pass


@dataclass(frozen=True)
class Stop:
    pass


Command = Union[Play, PlayLoop, Pause, Resume, Stop]
