"""Conversation view — scrollable message area for the active conversation."""

from __future__ import annotations

import json
from typing import Any

from rich.markdown import Markdown as RichMarkdown
from rich.text import Text
from textual.containers import VerticalScroll
from textual.widget import Widget
from textual.widgets import Static

from chatdesk.shared.models.conversation import Message

_USER_ROLES = {"user", "usuario", "human"}
_ROLE_KEYS = ("role", "rol", "sender")
_CONTENT_KEYS = ("content", "contenido", "text", "mensaje", "message")


def _esc(text: str) -> str:
    """Escape Rich markup characters in dynamic content."""
    return text.replace("[", "\\[")


def message_role(message: Message) -> str:
    for key in _ROLE_KEYS:
        value = message.get(key)
        if isinstance(value, str) and value:
            return value.lower()
    return "assistant"


def message_text(message: Message) -> str:
    """Best-effort display text; falls back to the raw JSON."""
    for key in _CONTENT_KEYS:
        value: Any = message.get(key)
        if isinstance(value, str):
            return value
    return json.dumps(message, ensure_ascii=False, default=str)


class MessageWidget(Static):
    """One message bubble."""

    DEFAULT_CSS = """
    MessageWidget {
        margin: 1 0 0 0;
        padding: 0 1;
        height: auto;
    }

    MessageWidget.user {
        border-left: thick $accent;
    }

    MessageWidget.assistant {
        border-left: thick $success;
    }
    """

    def __init__(self, message: Message, **kwargs) -> None:
        self.message = message
        role = message_role(message)
        is_user = role in _USER_ROLES
        super().__init__(classes="user" if is_user else "assistant", **kwargs)
        self._is_user = is_user

    def render(self):
        text = message_text(self.message)
        if self._is_user:
            header = Text("Tú", style="bold cyan")
            return Text.assemble(header, "\n", text)
        return RichMarkdown(text)


class ConversationView(Widget):
    """Shows the message buffer of the active conversation."""

    DEFAULT_CSS = """
    ConversationView {
        height: 1fr;
    }

    ConversationView #conversation-title {
        height: auto;
        padding: 0 1;
        text-style: bold;
        background: $boost;
    }
    """

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._messages: list[Message] = []
        self._title: str | None = None

    def compose(self):
        yield Static("Nueva conversación", id="conversation-title")
        yield VerticalScroll(id="message-container")

    @property
    def message_count(self) -> int:
        return len(self._messages)

    def set_title(self, title: str | None) -> None:
        self._title = title
        label = _esc(title) if title else "Nueva conversación"
        self.query_one("#conversation-title", Static).update(label)

    def set_messages(self, messages: list[Message]) -> None:
        """Replace every bubble. Skips the redraw when nothing changed."""
        if messages == self._messages:
            return
        self._messages = list(messages)
        container = self.query_one("#message-container", VerticalScroll)
        container.remove_children()
        if self._messages:
            container.mount_all([MessageWidget(m) for m in self._messages])
            container.scroll_end(animate=False)
