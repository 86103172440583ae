"""Audio Server - Entry point for the API server."""

import argparse
import logging
import sys
from pathlib import Path

import uvicorn

from audio_server.app import AudioServer
from audio_server.config.settings import create_example_env_file, load_config, setup_logging
from audio_server.core.errors import StartupError

logger = logging.getLogger("AudioServer")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Audio Server - network controlled audio playback")
    parser.add_argument("-p", "--assets-path", type=str, default=None, help="Path of the assets")
    parser.add_argument("--host", default=None, help="Host to bind")
    parser.add_argument("--port", type=int, default=None, help="Port to bind")
    parser.add_argument("--log-level", default=None, help="Logging level")
    parser.add_argument("--config", type=str, default=".env", help="Config file path")
    parser.add_argument("--create-config", action="store_true", help="Create example config file")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    if args.create_config:
        create_example_env_file()
        print("Example configuration file created at .env.example")
        print("Please copy it to .env and adjust it.")
        return 0

    setup_logging(args.log_level or "INFO")

    try:
        config = load_config(Path(args.config))
        overrides = {
            "assets_path": Path(args.assets_path) if args.assets_path else None,
            "host": args.host,
            "port": args.port,
            "log_level": args.log_level,
        }
        overrides = {k: v for k, v in overrides.items() if v is not None}
        if overrides:
            config = config.model_validate({**config.model_dump(), **overrides})
    except ValueError as e:
        print(f"Configuration error: {e}")
        print("Please check your configuration file and command line options.")
        return 2

    logging.getLogger().setLevel(config.log_level)

    server = AudioServer(config)
    try:
        server.start()
    except StartupError as e:
        logger.error(f"Cannot open audio output, refusing to serve: {e}")
        return 1

    try:
        uvicorn.run(server.create_app(), host=config.host, port=config.port)
    finally:
        server.stop()
    return 0


if __name__ == "__main__":
    sys.exit(main())
