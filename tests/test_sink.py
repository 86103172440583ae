"""Tests for the output sink and the sounddevice-backed output device."""

import sys
from unittest.mock import MagicMock, patch

import numpy as np
import pytest

from audio_server.audio.output.sink import OutputDevice, Sink, open_output
from audio_server.audio.output.types import AudioFormat, BufferSource
from audio_server.core.errors import DeviceError


def _source(fmt, n, value=0.5):
    return BufferSource(np.full((n, fmt.channels), value, dtype=np.float32), fmt)


def _out(fmt, frames):
    return np.ones((frames, fmt.channels), dtype=np.float32)


def test_fill_copies_source_and_pads_with_silence(audio_format):
    sink = Sink(audio_format)
    sink.append(_source(audio_format, 10))

    out = _out(audio_format, 16)
    sink.fill(out)

    assert np.all(out[:10] == 0.5)
    assert np.all(out[10:] == 0.0)
    assert sink.empty()


def test_fill_is_silent_and_keeps_position_while_paused(audio_format):
    sink = Sink(audio_format)
    sink.append(_source(audio_format, 10))
    sink.pause()

    out = _out(audio_format, 8)
    sink.fill(out)
    assert np.all(out == 0.0)
    assert sink.is_paused()

    sink.play()
    out = _out(audio_format, 8)
    sink.fill(out)
    assert np.all(out == 0.5)
    assert not sink.empty()


def test_stop_drops_sources(audio_format):
    sink = Sink(audio_format)
    sink.append(_source(audio_format, 100))
    sink.stop()

    out = _out(audio_format, 4)
    sink.fill(out)
    assert sink.empty()
    assert np.all(out == 0.0)


def test_repeating_source_never_empties_sink(audio_format):
    sink = Sink(audio_format)
    sink.append(_source(audio_format, 3).repeat_infinite())

    for _ in range(10):
        out = _out(audio_format, 8)
        sink.fill(out)
        assert np.all(out == 0.5)
    assert not sink.empty()


def test_append_rejects_mismatched_format(audio_format):
    sink = Sink(audio_format)
    other = AudioFormat(sample_rate=48000, channels=audio_format.channels)

    with pytest.raises(DeviceError):
        sink.append(_source(other, 4))


def _fake_sounddevice():
    fake_sd = MagicMock()
    fake_stream = MagicMock()
    fake_stream.active = True
    fake_sd.OutputStream.return_value = fake_stream
    return fake_sd, fake_stream


def test_open_starts_callback_stream_feeding_sink(audio_format):
    fake_sd, fake_stream = _fake_sounddevice()
    with patch.dict(sys.modules, {"sounddevice": fake_sd}):
        output, sink = open_output(audio_format, device="hw:1")

    kwargs = fake_sd.OutputStream.call_args.kwargs
    assert kwargs["samplerate"] == audio_format.sample_rate
    assert kwargs["channels"] == audio_format.channels
    assert kwargs["dtype"] == "float32"
    assert kwargs["device"] == "hw:1"
    fake_stream.start.assert_called_once()
    assert output.is_open
    assert sink is output.sink

    sink.append(_source(audio_format, 4))
    callback = kwargs["callback"]
    out = _out(audio_format, 4)
    callback(out, 4, None, None)
    assert np.all(out == 0.5)


def test_open_failure_raises_device_error(audio_format):
    fake_sd, _ = _fake_sounddevice()
    fake_sd.OutputStream.side_effect = RuntimeError("Error querying device -1")
    with patch.dict(sys.modules, {"sounddevice": fake_sd}):
        output = OutputDevice(audio_format)
        with pytest.raises(DeviceError):
            output.open()
    assert not output.is_open


def test_close_stops_and_closes_stream_once(audio_format):
    fake_sd, fake_stream = _fake_sounddevice()
    with patch.dict(sys.modules, {"sounddevice": fake_sd}):
        output, _ = open_output(audio_format)

    output.close()
    output.close()

    fake_stream.stop.assert_called_once()
    fake_stream.close.assert_called_once()
    assert not output.is_open
