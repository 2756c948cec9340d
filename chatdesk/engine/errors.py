"""Exception hierarchy for the conversation sync engine.

Remote calls never raise into the UI; they return an ApiResult and the
failure path is logged. These exceptions mark the few places where the
engine itself needs to stop a flow.
"""
from __future__ import annotations


class ChatdeskError(Exception):
    """Base exception for all chatdesk errors."""


class IdentityMissing(ChatdeskError):
    """Identity records are absent or unreadable; the view cannot start."""
    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"No usable identity in store: {reason}")


class RemoteFailure(ChatdeskError):
    """The chatbot service answered with a non-200 status or was unreachable."""
    def __init__(self, operation: str, code: int | None, msg: str):
        self.operation = operation
        self.code = code
        self.msg = msg
        code_str = str(code) if code is not None else "transport"
        super().__init__(f"{operation} failed ({code_str}): {msg}")


class ValidationSkip(ChatdeskError):
    """Input was rejected before any network call (e.g. blank message)."""
    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason)


class SchedulerError(ChatdeskError):
    """A poll handle was started while a same-named handle was still alive."""
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Poll handle '{name}' is still active")
