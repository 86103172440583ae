"""HTTP routes: validate the request, enqueue a command, acknowledge."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request

from ..core.commands import Command, Pause, Play, PlayLoop, Resume, Stop
from ..core.errors import EnqueueError, ValidationError
from ..core.runtime import RuntimeContext
from .schemas import ApiResponse, StatusResponse

logger = logging.getLogger("ApiRouter")

router = APIRouter()


def get_runtime(request: Request) -> RuntimeContext:
    return request.app.state.runtime


def _enqueue(runtime: RuntimeContext, command: Command) -> ApiResponse:
    # Fire-and-forget: decode failures happen later on the controller thread
    # and only show up in the logs and /status.
    try:
        runtime.sender.send(command)
    except EnqueueError as e:
        logger.error(f"Failed to enqueue {command!r}: {e}")
        return ApiResponse.server_error(str(e))
    logger.debug(f"Enqueued {command!r}")
    return ApiResponse.success()


def _play(runtime: RuntimeContext, name: str, *, loop: bool) -> ApiResponse:
    try:
        path = runtime.resolver.resolve(name)
    except ValidationError as e:
        logger.info(f"Rejected play request for {name!r}: {e}")
        return ApiResponse.parameter_error(getattr(e, "reason", str(e)))
    return _enqueue(runtime, PlayLoop(path) if loop else Play(path))


@router.get("/play/{name:path}", response_model=ApiResponse)
def play(name: str, runtime: RuntimeContext = Depends(get_runtime)) -> ApiResponse:
    """Play a file from the asset root once."""
    return _play(runtime, name, loop=False)


@router.get("/play-loop/{name:path}", response_model=ApiResponse)
def play_loop(name: str, runtime: RuntimeContext = Depends(get_runtime)) -> ApiResponse:
    """Play a file from the asset root until stopped or superseded."""
    return _play(runtime, name, loop=True)


@router.get("/pause", response_model=ApiResponse)
def pause(runtime: RuntimeContext = Depends(get_runtime)) -> ApiResponse:
    return _enqueue(runtime, Pause())


@router.get("/resume", response_model=ApiResponse)
def resume(runtime: RuntimeContext = Depends(get_runtime)) -> ApiResponse:
    return _enqueue(runtime, Resume())


@router.get("/stop", response_model=ApiResponse)
def stop(runtime: RuntimeContext = Depends(get_runtime)) -> ApiResponse:
    return _enqueue(runtime, Stop())


@router.get("/status", response_model=StatusResponse)
def status(runtime: RuntimeContext = Depends(get_runtime)) -> StatusResponse:
    """Last state published by the playback controller."""
    snapshot = runtime.status()
    return StatusResponse(
        state=snapshot.state.value,
        path=snapshot.path.name if snapshot.path is not None else None,
        looping=snapshot.looping,
        commands_applied=snapshot.commands_applied,
        pending=runtime.pending(),
        last_error=snapshot.last_error,
    )
