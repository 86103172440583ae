"""Response schemas for the HTTP control API."""

from __future__ import annotations

from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


class ResponseCode(str, Enum):
    """Result of an API operation."""
    SUCCESS = "success"
    PARAMETER_ERROR = "parameterError"  # caller input rejected
    SERVER_ERROR = "serverError"        # command could not be enqueued


class ApiResponse(BaseModel):
    """Body returned by every control endpoint."""
    msg: str
    code: ResponseCode

    @classmethod
    def success(cls) -> "ApiResponse":
        return cls(msg="success", code=ResponseCode.SUCCESS)

    @classmethod
    def parameter_error(cls, msg: str) -> "ApiResponse":
        return cls(msg=msg, code=ResponseCode.PARAMETER_ERROR)

    @classmethod
    def server_error(cls, msg: str) -> "ApiResponse":
        return cls(msg=msg, code=ResponseCode.SERVER_ERROR)


class StatusResponse(BaseModel):
    """Last state published by the playback controller."""
    state: str
    path: Optional[str] = None
    looping: bool = False
    commands_applied: int = 0
    pending: int = Field(default=0, description="Commands queued but not yet applied")
    last_error: Optional[str] = None
