"""chatdesk TUI — Textual application class."""

from __future__ import annotations

import logging
from pathlib import Path

from textual.app import App

from chatdesk.engine.api_client import ChatbotClient
from chatdesk.engine.config import LOGIN_ROUTE, ClientConfig
from chatdesk.shared.services.identity_store import IdentityStore
from chatdesk.tui.screens.main import MainScreen

logger = logging.getLogger(__name__)


class ChatdeskApp(App):
    """Terminal client for the chatbot conversation service."""

    TITLE = "chatdesk"
    SUB_TITLE = "Chatbot"
    CSS_PATH = Path("styles/app.tcss")

    BINDINGS = [
        ("ctrl+q", "quit", "Quit"),
        ("ctrl+n", "new_conversation", "New"),
        ("ctrl+b", "toggle_menu", "Menu"),
        ("ctrl+r", "refresh", "Refresh"),
        ("ctrl+l", "logout", "Logout"),
        ("f1", "toggle_option", "Welcome/Chat"),
        ("ctrl+e", "focus_editor", "Input"),
    ]

    def __init__(
        self,
        config: ClientConfig,
        store: IdentityStore,
        client: ChatbotClient | None = None,
        **kwargs,
    ) -> None:
        super().__init__(**kwargs)
        self.config = config
        self.store = store
        self._client = client
        self.routes_visited: list[str] = []

    def on_mount(self) -> None:
        self.push_screen(MainScreen(self.config, self.store, client=self._client))

    def navigate(self, route: str) -> None:
        """Move to *route*; only the login route exists besides the main view."""
        self.routes_visited.append(route)
        if route != LOGIN_ROUTE:
            logger.warning("Unknown route %s", route)
            return
        from chatdesk.tui.screens.login_required import LoginRequiredScreen

        self.call_later(self.switch_screen, LoginRequiredScreen())

    def _main_screen(self) -> MainScreen | None:
        screen = self.screen
        return screen if isinstance(screen, MainScreen) else None

    def action_new_conversation(self) -> None:
        screen = self._main_screen()
        if screen is not None:
            screen.start_new_conversation()

    def action_toggle_menu(self) -> None:
        screen = self._main_screen()
        if screen is not None:
            screen.toggle_menu()

    def action_toggle_option(self) -> None:
        screen = self._main_screen()
        if screen is not None:
            screen.toggle_option()

    def action_refresh(self) -> None:
        screen = self._main_screen()
        if screen is not None:
            screen.refresh_now()

    def action_logout(self) -> None:
        screen = self._main_screen()
        if screen is not None:
            screen.logout()

    def action_focus_editor(self) -> None:
        from chatdesk.tui.widgets.input_bar import InputBar

        screen = self._main_screen()
        if screen is not None:
            screen.query_one(InputBar).focus_input()
