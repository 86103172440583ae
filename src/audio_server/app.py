"""Main AudioServer orchestrator."""

from __future__ import annotations

import logging
import threading
from typing import Callable, Optional, Tuple

from fastapi import FastAPI

from .api.server import create_app
from .api.validator import AssetResolver
from .audio.output.decoder import decode
from .audio.output.sink import OutputDevice, Sink, open_output
from .audio.output.types import AudioFormat
from .config.settings import AudioServerConfig
from .core.channel import open_channel
from .core.controller import Decoder, PlaybackController, PlaybackStatus
from .core.errors import DeviceError, StartupError
from .core.runtime import RuntimeContext

logger = logging.getLogger("AudioServer")

OutputFactory = Callable[[AudioFormat, object], Tuple[OutputDevice, Sink]]


class AudioServer:
    """
    Owns the command channel, the output device and the playback thread.

    Manages:
    - Output stream + sink (opened once in start(), closed in stop())
    - Playback controller thread (sole owner of the sink)
    - Send handles given to the HTTP layer
    """

    def __init__(
        self,
        config: AudioServerConfig,
        *,
        output_factory: OutputFactory = open_output,
        decoder: Decoder = decode,
    ):
        self._config = config
        self._output_factory = output_factory
        self._decoder = decoder
        self.shutdown_signal = threading.Event()
        self.resolver = AssetResolver(config.assets_path)
        self._sender, self._receiver = open_channel()
        self._api_sender = self._sender.clone()
        self._output: Optional[OutputDevice] = None
        self.controller: Optional[PlaybackController] = None

    @property
    def format(self) -> AudioFormat:
        return AudioFormat(sample_rate=self._config.sample_rate, channels=self._config.channels)

    def start(self) -> None:
        """Open the output device and start the playback thread. Raises StartupError."""
        try:
            self._output, sink = self._output_factory(self.format, self._config.device)
        except DeviceError as e:
            raise StartupError(str(e)) from e

        self.controller = PlaybackController(
            stop_signal=self.shutdown_signal,
            receiver=self._receiver,
            sink=sink,
            decoder=self._decoder,
        )
        self.controller.start()
        logger.info("Audio server started")

    def stop(self, timeout: float = 2.0) -> None:
        """Close every send handle, let the controller drain, then release the device."""
        self._api_sender.close()
        self._sender.close()
        if self.controller is not None:
            self.controller.join(timeout)
            if self.controller.is_alive():
                logger.warning("Playback thread still busy after %.1fs, signalling stop", timeout)
                self.shutdown_signal.set()
                self.controller.join(timeout)
        self.shutdown_signal.set()
        if self._output is not None:
            self._output.close()
            self._output = None
        logger.info("Audio server stopped")

    def status(self) -> PlaybackStatus:
        if self.controller is None:
            return PlaybackStatus()
        return self.controller.status

    def runtime(self) -> RuntimeContext:
        return RuntimeContext(
            sender=self._api_sender,
            resolver=self.resolver,
            status=self.status,
            pending=self._receiver.pending,
        )

    def create_app(self) -> FastAPI:
        return create_app(self.runtime())
