"""Tests for wiring the server together and for the entry point."""

import logging
import os
from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from audio_server import main as main_module
from audio_server.app import AudioServer
from audio_server.config.settings import AudioServerConfig
from audio_server.core.controller import PlayerState
from audio_server.core.errors import DeviceError, StartupError
from tests.fakes import FakeSink, fake_decoder, wait_for


@pytest.fixture
def config(asset_dir):
    return AudioServerConfig(assets_path=asset_dir, sample_rate=44100, channels=2)


@pytest.fixture
def device():
    return MagicMock()


@pytest.fixture
def server(config, device):
    sink = FakeSink()
    factory = MagicMock(return_value=(device, sink))
    srv = AudioServer(config, output_factory=factory, decoder=fake_decoder)
    srv.sink = sink
    srv.factory = factory
    yield srv
    srv.stop(timeout=1)


def test_start_opens_output_with_configured_format(server, config):
    server.start()

    fmt, dev = server.factory.call_args.args
    assert fmt.sample_rate == config.sample_rate
    assert fmt.channels == config.channels
    assert dev is None
    assert server.controller.is_alive()


def test_startup_failure_is_fatal(config):
    factory = MagicMock(side_effect=DeviceError("no default output device"))
    srv = AudioServer(config, output_factory=factory)

    with pytest.raises(StartupError):
        srv.start()
    assert srv.controller is None


def test_http_commands_reach_controller(server):
    server.start()
    client = TestClient(server.create_app())

    assert client.get("/api/v1/play-loop/tone.wav").json()["code"] == "success"
    assert wait_for(lambda: server.status().state is PlayerState.PLAYING)
    assert server.status().looping

    client.get("/api/v1/pause")
    assert wait_for(lambda: server.status().state is PlayerState.PAUSED)

    client.get("/api/v1/stop")
    assert wait_for(lambda: server.status().commands_applied == 3)
    assert server.status().state is PlayerState.IDLE
    assert client.get("/api/v1/status").json()["state"] == "idle"


def test_stop_drains_channel_and_releases_device(server, device, caplog):
    server.start()
    client = TestClient(server.create_app())
    client.get("/api/v1/play/tone.wav")

    with caplog.at_level(logging.WARNING, logger="AudioServer"):
        server.stop(timeout=1)

    assert not server.controller.is_alive()
    assert "still busy" not in caplog.text
    assert server.status().state is PlayerState.PLAYING
    assert server.status().commands_applied == 1
    device.close.assert_called_once()
    # API handle is closed, so further commands are server errors.
    assert client.get("/api/v1/stop").json()["code"] == "serverError"


def test_status_before_start_is_idle(server):
    assert server.status().state is PlayerState.IDLE


def test_main_exits_non_zero_when_output_cannot_open(tmp_path, asset_dir, monkeypatch):
    monkeypatch.chdir(tmp_path)
    with patch.object(main_module.AudioServer, "start", side_effect=StartupError("no device")), \
            patch.object(main_module.uvicorn, "run") as mock_run:
        code = main_module.main(["-p", str(asset_dir)])

    assert code == 1
    mock_run.assert_not_called()


def test_main_runs_uvicorn_with_cli_overrides(tmp_path, asset_dir, monkeypatch):
    monkeypatch.chdir(tmp_path)
    with patch.object(main_module.AudioServer, "start"), \
            patch.object(main_module.AudioServer, "stop") as mock_stop, \
            patch.object(main_module.uvicorn, "run") as mock_run:
        code = main_module.main(["-p", str(asset_dir), "--host", "0.0.0.0", "--port", "9000"])

    assert code == 0
    assert mock_run.call_args.kwargs == {"host": "0.0.0.0", "port": 9000}
    mock_stop.assert_called_once()


def test_main_create_config_writes_example(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert main_module.main(["--create-config"]) == 0
    assert "ASSETS_PATH=./assets" in (tmp_path / ".env.example").read_text()


def test_main_reports_non_numeric_port_in_env(tmp_path, asset_dir, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    with patch.dict(os.environ, {"PORT": "abc"}), \
            patch.object(main_module.AudioServer, "start") as mock_start, \
            patch.object(main_module.uvicorn, "run") as mock_run:
        code = main_module.main(["-p", str(asset_dir)])

    assert code == 2
    assert "Configuration error" in capsys.readouterr().out
    mock_start.assert_not_called()
    mock_run.assert_not_called()


def test_main_reports_unknown_log_level(tmp_path, asset_dir, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    with patch.object(main_module.AudioServer, "start") as mock_start, \
            patch.object(main_module.uvicorn, "run") as mock_run:
        code = main_module.main(["-p", str(asset_dir), "--log-level", "LOUD"])

    assert code == 2
    assert "Configuration error" in capsys.readouterr().out
    mock_start.assert_not_called()
    mock_run.assert_not_called()
