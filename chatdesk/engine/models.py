"""Core data models for the sync engine.

Tagged results for remote calls and the handle names used by the
scheduler. Single source of truth to avoid circular imports.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union

from .errors import RemoteFailure

SUCCESS_STATUS = 200


class RemoteOperation(str, Enum):
    """Operations exposed by the chatbot service."""
    LIST_CONVERSATIONS = "list_conversations"
    GET_CONVERSATION = "get_conversation"
    START_CONVERSATION = "start_conversation"
    CONTINUE_CONVERSATION = "continue_conversation"
    DELETE_CONVERSATION = "delete_conversation"


class PollHandleName(str, Enum):
    """Named slots owned by the PollScheduler. One live handle per name."""
    LIST_POLL = "list_poll"
    ACTIVE_POLL = "active_poll"
    LIST_RESYNC = "list_resync"


@dataclass(frozen=True)
class Ok:
    """Service answered with status_code 200."""
    data: Any = None
    body: dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Fail:
    """Service answered, but with a non-200 status_code."""
    code: int | None
    msg: str = ""

    @property
    def ok(self) -> bool:
        return False


@dataclass(frozen=True)
class TransportError:
    """Request never produced a usable response (network, timeout, bad JSON)."""
    error: str

    @property
    def ok(self) -> bool:
        return False


ApiResult = Union[Ok, Fail, TransportError]


def to_remote_failure(operation: RemoteOperation, result: ApiResult) -> RemoteFailure:
    """Turn a failed result into the RemoteFailure that gets logged and shown."""
    if isinstance(result, Fail):
        return RemoteFailure(operation.value, result.code, result.msg)
    if isinstance(result, TransportError):
        return RemoteFailure(operation.value, None, result.error)
    raise ValueError("cannot build a failure from a successful result")


def result_from_body(body: Any) -> ApiResult:
    """Classify a decoded JSON response body.

    The body's own ``status_code`` field is the only success signal;
    the HTTP status line is ignored.
    """
    if not isinstance(body, dict):
        return TransportError(error=f"unexpected response body: {type(body).__name__}")
    raw_code = body.get("status_code")
    try:
        code = int(raw_code) if raw_code is not None else None
    except (TypeError, ValueError):
        code = None
    if code == SUCCESS_STATUS:
        return Ok(data=body.get("data"), body=body)
    return Fail(code=code, msg=str(body.get("msg") or ""))
