"""State renderer extracted from MainScreen.

Listens to ViewState change notifications and pushes the changed part
of the state into the widgets: sidebar, conversation view, welcome
panel, input bar and status bar.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from textual.css.query import NoMatches

from chatdesk.shared.models.view_state import StateField, ViewOption, ViewState
from chatdesk.tui.widgets.conversation import ConversationView
from chatdesk.tui.widgets.conversation_list import ConversationList
from chatdesk.tui.widgets.input_bar import InputBar
from chatdesk.tui.widgets.status_bar import StatusBar
from chatdesk.tui.widgets.welcome import WelcomePanel

if TYPE_CHECKING:
    from chatdesk.tui.screens.main import MainScreen

logger = logging.getLogger(__name__)


class StateRenderer:
    """Draws *ViewState* into the widgets of *MainScreen*.

    Keeps a back-reference to the screen so it can query widgets
    without holding on to them.
    """

    def __init__(self, screen: MainScreen) -> None:
        self._screen = screen

    @property
    def state(self) -> ViewState:
        return self._screen.controller.state

    def render_all(self) -> None:
        for changed in StateField:
            self.on_state_changed(changed)

    def on_state_changed(self, changed: StateField) -> None:
        handler = getattr(self, f"_render_{changed.value}", None)
        if handler is None:
            return
        try:
            handler()
        except NoMatches:
            logger.debug("Widgets for %s not composed; skipping", changed.value)

    # ── per-field rendering ─────────────────────────────────────

    def _render_conversations(self) -> None:
        self._render_sidebar()
        sb = self._screen.query_one("#status-bar", StatusBar)
        sb.conversation_count = len(self.state.conversations)
        if self.state.last_failure is None:
            sb.mark_synced()

    def _render_active_title(self) -> None:
        self._render_sidebar()
        title = self.state.active_title
        self._screen.query_one("#conversation", ConversationView).set_title(title)
        self._screen.query_one("#status-bar", StatusBar).active_title = title or ""

    def _render_sidebar(self) -> None:
        self._screen.query_one("#conversation-list", ConversationList).set_conversations(
            self.state.conversations, self.state.active_title,
        )

    def _render_messages(self) -> None:
        self._screen.query_one("#conversation", ConversationView).set_messages(
            self.state.messages,
        )

    def _render_pending(self) -> None:
        bar = self._screen.query_one(InputBar)
        bar.sync_text(self.state.pending.text)
        bar.show_attachment(self.state.pending.attachment)

    def _render_option(self) -> None:
        chat = self.state.selected_option is ViewOption.CHATBOT
        self._screen.query_one("#welcome", WelcomePanel).display = not chat
        self._screen.query_one("#conversation", ConversationView).display = chat

    def _render_menu(self) -> None:
        sidebar = self._screen.query_one("#sidebar")
        sidebar.display = not self.state.menu_hidden

    def _render_session(self) -> None:
        session = self.state.session
        full_name = session.full_name if session else ""
        self._screen.query_one("#welcome", WelcomePanel).set_name(full_name)
        sb = self._screen.query_one("#status-bar", StatusBar)
        sb.username = session.username if session else "—"

    def _render_failure(self) -> None:
        sb = self._screen.query_one("#status-bar", StatusBar)
        failure = self.state.last_failure
        if failure is None:
            sb.mark_synced()
        else:
            logger.debug("Showing failure in status bar: %s", failure)
            sb.mark_error(str(failure))
