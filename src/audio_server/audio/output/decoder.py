"""Decode audio files into in-memory sources matching the output format."""

from __future__ import annotations

import logging
from math import gcd
from pathlib import Path
from typing import Union

import numpy as np
import soundfile as sf
from scipy.signal import resample_poly

from ...core.errors import DecodeError
from .types import AudioFormat, BufferSource

logger = logging.getLogger("Decoder")

# Number of frames to read per block while decoding.
_BLOCK_FRAMES = 65536


def _match_channels(data: np.ndarray, channels: int) -> np.ndarray:
    """Up/down-mix (n, src_channels) frames to `channels` columns."""
    src = data.shape[1]
    if src == channels:
        return data
    if channels == 1:
        return data.mean(axis=1, keepdims=True, dtype=np.float32)
    # Mono is duplicated; otherwise channels are mapped round-robin.
    return data[:, [i % src for i in range(channels)]]


def _resample(data: np.ndarray, src_rate: int, dst_rate: int) -> np.ndarray:
    """Polyphase resampling of (n, channels) frames with an anti-aliasing FIR."""
    if src_rate == dst_rate or len(data) == 0:
        return data
    g = gcd(src_rate, dst_rate)
    out = resample_poly(data, dst_rate // g, src_rate // g, axis=0)
    return out.astype(np.float32, copy=False)


def _read_blocks(f: "sf.SoundFile", channels: int) -> np.ndarray:
    """Read the whole file block by block straight into the output channel layout."""
    total = f.frames
    out = np.empty((total, channels), dtype=np.float32)
    written = 0
    for block in f.blocks(blocksize=_BLOCK_FRAMES, dtype="float32", always_2d=True):
        block = _match_channels(block, channels)
        n = min(len(block), total - written)
        out[written : written + n] = block[:n]
        written += n
    return out[:written]


def decode(path: Union[str, Path], fmt: AudioFormat) -> BufferSource:
    """
    Decode the file at `path` into a BufferSource in the given output format.

    Raises DecodeError if the file cannot be opened or is not a format
    libsndfile understands.
    """
    path = Path(path)
    try:
        with sf.SoundFile(str(path)) as f:
            sample_rate = f.samplerate
            src_channels = f.channels
            data = _read_blocks(f, fmt.channels)
    except (RuntimeError, OSError, ValueError, TypeError) as e:
        raise DecodeError(path, e) from e

    logger.debug(
        "Decoded %s: %d frames sr=%s ch=%s", path.name, len(data), sample_rate, src_channels
    )
    data = _resample(data, sample_rate, fmt.sample_rate)
    return BufferSource(np.ascontiguousarray(data, dtype=np.float32), fmt, name=path.name)
