"""HTTP client for a running audio server."""

import argparse
import logging
import sys
from typing import Optional
from urllib.parse import quote

import requests

from audio_server.api.schemas import ApiResponse, ResponseCode, StatusResponse

logger = logging.getLogger(__name__)


class AudioServerClient:
    def __init__(self, base_url: str = "http://127.0.0.1:3001", timeout: float = 5.0):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = requests.Session()

    def _url(self, path: str) -> str:
        return f"{self.base_url}/api/v1/{path}"

    def _get(self, path: str) -> ApiResponse:
        response = self.session.get(self._url(path), timeout=self.timeout)
        response.raise_for_status()
        return ApiResponse.model_validate(response.json())

    def play(self, name: str) -> ApiResponse:
        return self._get(f"play/{quote(name)}")

    def play_loop(self, name: str) -> ApiResponse:
        return self._get(f"play-loop/{quote(name)}")

    def pause(self) -> ApiResponse:
        return self._get("pause")

    def resume(self) -> ApiResponse:
        return self._get("resume")

    def stop(self) -> ApiResponse:
        return self._get("stop")

    def status(self) -> StatusResponse:
        response = self.session.get(self._url("status"), timeout=self.timeout)
        response.raise_for_status()
        return StatusResponse.model_validate(response.json())


def main(argv: Optional[list] = None) -> int:
    parser = argparse.ArgumentParser(description="Send a command to an audio server")
    parser.add_argument("--url", default="http://127.0.0.1:3001", help="Server base URL")
    parser.add_argument("command", choices=["play", "play-loop", "pause", "resume", "stop", "status"])
    parser.add_argument("name", nargs="?", help="File name under the server's asset root")
    args = parser.parse_args(argv)

    if args.command in ("play", "play-loop") and not args.name:
        parser.error(f"{args.command} requires a file name")

    client = AudioServerClient(base_url=args.url)
    try:
        if args.command == "play":
            result = client.play(args.name)
        elif args.command == "play-loop":
            result = client.play_loop(args.name)
        elif args.command == "status":
            print(client.status().model_dump_json(indent=2))
            return 0
        else:
            result = getattr(client, args.command)()
    except requests.exceptions.ConnectionError:
        logger.error(f"Could not connect to {args.url}")
        print(f"Could not connect to {args.url}", file=sys.stderr)
        return 2
    except requests.exceptions.RequestException as e:
        print(f"Request failed: {e}", file=sys.stderr)
        return 2

    print(result.model_dump_json(indent=2))
    return 0 if result.code == ResponseCode.SUCCESS else 1


if __name__ == "__main__":
    sys.exit(main())
