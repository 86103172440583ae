import os
from pathlib import Path
from typing import Optional
from pydantic import BaseModel, Field, field_validator
from dotenv import load_dotenv
import logging

logger = logging.getLogger(__name__)

class AudioServerConfig(BaseModel):
    assets_path: Path = Field(default=Path("./assets"), description="Directory that bounds which files may be played")
    host: str = Field(default="127.0.0.1", description="Address the HTTP API binds to")
    port: int = Field(default=3001, ge=1, le=65535, description="Port the HTTP API binds to")
    sample_rate: int = Field(default=44100, gt=0, description="Output stream sample rate in Hz")
    channels: int = Field(default=2, ge=1, le=8, description="Output stream channel count")
    output_device: Optional[str] = Field(default=None, description="sounddevice output device name or index (default device if unset)")
    log_level: str = Field(default="INFO", description="Logging level")

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {value}")
        return level

    @property
    def device(self):
        """Output device as sounddevice expects it: an index if numeric, else a name."""
        if self.output_device is None or self.output_device == "":
            return None
        if self.output_device.isdigit():
            return int(self.output_device)
        return self.output_device

def load_config(config_path: Optional[Path] = None) -> AudioServerConfig:
    if config_path is None:
        config_path = Path(".env")

    if config_path.exists():
        load_dotenv(config_path)
        logger.info(f"Loaded environment variables from {config_path}")
    else:
        logger.warning(f"Config file {config_path} not found, using environment variables only")

    try:
        config = AudioServerConfig(
            assets_path=Path(os.getenv("ASSETS_PATH", "./assets")),
            host=os.getenv("HOST", "127.0.0.1"),
            port=int(os.getenv("PORT", "3001")),
            sample_rate=int(os.getenv("SAMPLE_RATE", "44100")),
            channels=int(os.getenv("CHANNELS", "2")),
            output_device=os.getenv("OUTPUT_DEVICE") or None,
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )

        if not config.assets_path.is_dir():
            logger.warning(f"Assets path {config.assets_path} is not a directory. Every play request will be rejected.")

        return config

    except Exception as e:
        logger.error(f"Failed to load configuration: {e}")
        raise

def create_example_env_file(path: Path = Path(".env.example")):
    example_content = """# Directory holding the playable audio files
ASSETS_PATH=./assets

# HTTP API bind address
HOST=127.0.0.1
PORT=3001

# Output stream format; decoded files are converted to it
SAMPLE_RATE=44100
CHANNELS=2

# sounddevice output device name or index; leave empty for the default device
OUTPUT_DEVICE=

# Logging level
LOG_LEVEL=INFO
"""

    with open(path, "w") as f:
        f.write(example_content)

    logger.info(f"Created example environment file at {path}")

def setup_logging(log_level: str = "INFO"):
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )
