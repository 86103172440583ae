"""Error taxonomy for the audio server."""


class AudioServerError(Exception):
    """Base class for all audio server errors."""


class ValidationError(AudioServerError):
    """Caller input is invalid; raised before any command is created."""


class AssetNotFoundError(ValidationError):
    """Requested file does not exist under the asset root (or escapes it)."""

    def __init__(self, name: str, reason: str = "File not found"):
        super().__init__(f"{reason}: {name!r}")
        self.name = name
        self.reason = reason


class EnqueueError(AudioServerError):
    """A command could not be admitted to the command channel."""


class ChannelClosed(EnqueueError):
    """The other side of the command channel has gone away."""


class DecodeError(AudioServerError):
    """File exists but cannot be opened or decoded into a playable source."""

    def __init__(self, path, cause: object = None):
        message = f"decode file {path} error"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)
        self.path = path
        self.cause = cause


class DeviceError(AudioServerError):
    """The audio output device rejected an operation."""


class StartupError(AudioServerError):
    """The output stream or sink could not be acquired at startup. Fatal."""
