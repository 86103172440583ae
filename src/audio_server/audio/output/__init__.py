"""Audio output subsystem - decoding and playback sink."""

from .decoder import decode
from .sink import OutputDevice, Sink, open_output
from .types import AudioFormat, AudioSource, BufferSource, RepeatingSource

__all__ = [
    "AudioFormat",
    "AudioSource",
    "BufferSource",
    "RepeatingSource",
    "OutputDevice",
    "Sink",
    "decode",
    "open_output",
]
