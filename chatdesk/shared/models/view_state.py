"""View state — the observable aggregate the rendering layer draws from.

Every mutation goes through a method here so listeners get exactly one
notification per change. Collections are replaced, never patched, when
fresh data arrives from the service.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum

from chatdesk.engine.errors import RemoteFailure
from chatdesk.shared.models.conversation import (
    Attachment,
    ConversationSummary,
    Message,
    PendingInput,
)
from chatdesk.shared.models.session import Session

logger = logging.getLogger(__name__)


class ViewOption(str, Enum):
    """Which main pane is shown."""
    WELCOME = "bienvenida"
    CHATBOT = "chatbot"


class StateField(str, Enum):
    CONVERSATIONS = "conversations"
    ACTIVE_TITLE = "active_title"
    MESSAGES = "messages"
    PENDING = "pending"
    OPTION = "option"
    MENU = "menu"
    SESSION = "session"
    FAILURE = "failure"


StateListener = Callable[[StateField], None]


@dataclass
class ViewState:
    """Conversation list, active title, message buffer and input buffer."""

    conversations: list[ConversationSummary] = field(default_factory=list)
    active_title: str | None = None
    messages: list[Message] = field(default_factory=list)
    pending: PendingInput = field(default_factory=PendingInput)
    selected_option: ViewOption = ViewOption.WELCOME
    menu_hidden: bool = False
    session: Session | None = None
    last_failure: RemoteFailure | None = None
    _listeners: list[StateListener] = field(default_factory=list, repr=False)

    # ── observation ─────────────────────────────────────────────

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register *listener*; returns a function that unregisters it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _notify(self, changed: StateField) -> None:
        for listener in list(self._listeners):
            try:
                listener(changed)
            except Exception:
                logger.exception("View state listener failed on %s", changed.value)

    # ── conversation list ───────────────────────────────────────

    def replace_conversations(self, summaries: list[ConversationSummary]) -> None:
        self.conversations = list(summaries)
        self._notify(StateField.CONVERSATIONS)

    def append_conversation(self, summary: ConversationSummary) -> None:
        self.conversations = [*self.conversations, summary]
        self._notify(StateField.CONVERSATIONS)

    def remove_conversation(self, title: str) -> None:
        self.conversations = [c for c in self.conversations if c.title != title]
        self._notify(StateField.CONVERSATIONS)

    def has_conversation(self, title: str) -> bool:
        return any(c.title == title for c in self.conversations)

    # ── active conversation ─────────────────────────────────────

    def set_active_title(self, title: str | None) -> None:
        self.active_title = title
        self._notify(StateField.ACTIVE_TITLE)

    def replace_messages(self, messages: list[Message]) -> None:
        self.messages = list(messages)
        self._notify(StateField.MESSAGES)

    def clear_messages(self) -> None:
        self.messages = []
        self._notify(StateField.MESSAGES)

    # ── pending input ───────────────────────────────────────────

    def set_pending_text(self, text: str) -> None:
        self.pending.text = text
        self._notify(StateField.PENDING)

    def set_attachment(self, attachment: Attachment | None) -> None:
        self.pending.attachment = attachment
        self._notify(StateField.PENDING)

    def clear_pending(self) -> None:
        self.pending.clear()
        self._notify(StateField.PENDING)

    def restore_pending(self, text: str, attachment: Attachment | None) -> None:
        self.pending.text = text
        self.pending.attachment = attachment
        self._notify(StateField.PENDING)

    # ── chrome ──────────────────────────────────────────────────

    def select_option(self, option: ViewOption) -> None:
        self.selected_option = option
        self._notify(StateField.OPTION)

    def toggle_menu(self) -> None:
        self.menu_hidden = not self.menu_hidden
        self._notify(StateField.MENU)

    def set_session(self, session: Session | None) -> None:
        self.session = session
        self._notify(StateField.SESSION)

    def record_failure(self, failure: RemoteFailure | None) -> None:
        """Remember the latest remote failure, or clear it with None."""
        if failure is None and self.last_failure is None:
            return
        self.last_failure = failure
        self._notify(StateField.FAILURE)
