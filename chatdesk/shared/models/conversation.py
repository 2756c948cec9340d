"""Conversation, message and pending-input models."""

from __future__ import annotations

import mimetypes
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

# Messages are consumed verbatim from the server and never interpreted
# by the sync engine.
Message = dict[str, Any]


@dataclass(frozen=True)
class ConversationSummary:
    """One entry of the conversation list. The title is the natural key."""

    title: str
    extra: dict[str, Any] = field(default_factory=dict, compare=False)

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> ConversationSummary:
        extra = {k: v for k, v in payload.items() if k != "titulo"}
        return cls(title=str(payload.get("titulo", "")), extra=extra)

    def to_payload(self) -> dict[str, Any]:
        return {"titulo": self.title, **self.extra}


def parse_summaries(data: Any) -> list[ConversationSummary]:
    """Decode the ``data`` array of a list-conversations response.

    Entries that are not objects or carry no title are dropped.
    """
    if not isinstance(data, list):
        return []
    summaries: list[ConversationSummary] = []
    for item in data:
        if isinstance(item, dict) and item.get("titulo"):
            summaries.append(ConversationSummary.from_payload(item))
    return summaries


def parse_messages(data: Any) -> list[Message] | None:
    """Pull ``messages`` out of a get-conversation ``data`` object.

    Returns None when the payload has no usable message list, so the
    caller can keep its current buffer.
    """
    if not isinstance(data, dict):
        return None
    messages = data.get("messages")
    if not isinstance(messages, list):
        return None
    return list(messages)


@dataclass(frozen=True)
class Attachment:
    """A file picked by the user to send alongside a question."""

    filename: str
    content: bytes
    content_type: str = "application/octet-stream"

    @classmethod
    def from_path(cls, path: str | Path) -> Attachment:
        path = Path(path).expanduser()
        content_type, _ = mimetypes.guess_type(path.name)
        return cls(
            filename=path.name,
            content=path.read_bytes(),
            content_type=content_type or "application/octet-stream",
        )

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass
class PendingInput:
    """What the user has typed/attached but not yet sent."""

    text: str = ""
    attachment: Attachment | None = None

    def clear(self) -> None:
        self.text = ""
        self.attachment = None

    @property
    def is_blank(self) -> bool:
        return not self.text.strip()
