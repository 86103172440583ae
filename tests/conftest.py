import pytest
import numpy as np
import soundfile as sf

from audio_server.audio.output.types import AudioFormat
from tests.fakes import FakeSink


def _tone(seconds: float, sample_rate: int, channels: int) -> np.ndarray:
    t = np.arange(int(seconds * sample_rate)) / sample_rate
    mono = (0.25 * np.sin(2 * np.pi * 440.0 * t)).astype(np.float32)
    return np.repeat(mono[:, None], channels, axis=1)


@pytest.fixture
def audio_format():
    return AudioFormat(sample_rate=44100, channels=2)


@pytest.fixture
def fake_sink(audio_format):
    return FakeSink(audio_format)


@pytest.fixture
def asset_dir(tmp_path):
    """Asset root with a few real audio files, a broken one and a nested one."""
    root = tmp_path / "assets"
    root.mkdir()
    sf.write(str(root / "tone.wav"), _tone(0.1, 44100, 2), 44100)
    sf.write(str(root / "mono_22k.wav"), _tone(0.1, 22050, 1), 22050)
    (root / "broken.wav").write_bytes(b"this is not audio" * 10)
    (root / "sub").mkdir()
    sf.write(str(root / "sub" / "nested.flac"), _tone(0.05, 44100, 2), 44100)
    return root
