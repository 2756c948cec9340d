"""Main screen — conversation sidebar, chat pane and input bar."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from textual import work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.screen import Screen
from textual.widgets import Header

from chatdesk.engine.api_client import ChatbotClient
from chatdesk.engine.config import ClientConfig
from chatdesk.engine.controller import ConversationController
from chatdesk.shared.models.view_state import ViewOption
from chatdesk.shared.services.identity_store import IdentityStore
from chatdesk.tui.handlers.state_renderer import StateRenderer
from chatdesk.tui.widgets.conversation import ConversationView
from chatdesk.tui.widgets.conversation_list import ConversationList
from chatdesk.tui.widgets.input_bar import InputBar
from chatdesk.tui.widgets.status_bar import StatusBar
from chatdesk.tui.widgets.welcome import WelcomePanel

logger = logging.getLogger(__name__)


class MainScreen(Screen):
    """Primary workspace: conversation list, chat pane and input."""

    def __init__(
        self,
        config: ClientConfig,
        store: IdentityStore,
        client: ChatbotClient | None = None,
        **kwargs,
    ) -> None:
        super().__init__(**kwargs)
        self.controller = ConversationController(
            config,
            store,
            client=client,
            confirm=self._confirm,
            acknowledge=self._acknowledge,
            navigate=self._navigate,
        )
        self.renderer = StateRenderer(self)
        self._unsubscribe: Callable[[], None] | None = None

    def compose(self) -> ComposeResult:
        yield Header()
        with Horizontal(id="workspace"):
            with Vertical(id="sidebar"):
                yield ConversationList(id="conversation-list")
            with Vertical(id="main-pane"):
                yield WelcomePanel(id="welcome")
                yield ConversationView(id="conversation")
        yield InputBar(id="input-bar")
        yield StatusBar(id="status-bar")

    def on_mount(self) -> None:
        self._unsubscribe = self.controller.state.subscribe(
            self.renderer.on_state_changed
        )
        self.renderer.render_all()
        if self.controller.activate():
            self.query_one(InputBar).focus_input()
            self.call_after_refresh(self.renderer.render_all)

    async def on_unmount(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        await self.controller.deactivate()

    def _navigate(self, route: str) -> None:
        navigate = getattr(self.app, "navigate", None)
        if navigate is None:
            logger.warning("App cannot navigate to %s", route)
            return
        navigate(route)

    # ── dialogs handed to the controller ────────────────────────

    async def _confirm(self, heading: str, text: str) -> bool:
        from chatdesk.tui.screens.delete_confirm import DeleteConfirmScreen

        answer: asyncio.Future[bool] = asyncio.get_running_loop().create_future()

        def _on_dismiss(result: bool | None) -> None:
            if not answer.done():
                answer.set_result(result is True)

        self.app.push_screen(DeleteConfirmScreen(heading, text), callback=_on_dismiss)
        return await answer

    async def _acknowledge(self, heading: str, text: str) -> None:
        from chatdesk.tui.screens.acknowledge import AcknowledgeScreen

        closed: asyncio.Future[None] = asyncio.get_running_loop().create_future()

        def _on_dismiss(_result: None) -> None:
            if not closed.done():
                closed.set_result(None)

        self.app.push_screen(AcknowledgeScreen(heading, text), callback=_on_dismiss)
        await closed

    # ── sidebar ─────────────────────────────────────────────────

    def on_conversation_list_selected(self, event: ConversationList.Selected) -> None:
        if not self.controller.active:
            return
        self.controller.select_option(ViewOption.CHATBOT)
        self.controller.select(event.title)
        self.query_one(InputBar).focus_input()

    def on_conversation_list_delete_requested(
        self, event: ConversationList.DeleteRequested
    ) -> None:
        if self.controller.active:
            self._delete_conversation(event.title)

    @work(name="delete-conversation")
    async def _delete_conversation(self, title: str) -> None:
        await self.controller.request_delete(title)

    # ── input bar ───────────────────────────────────────────────

    def on_input_bar_text_changed(self, event: InputBar.TextChanged) -> None:
        self.controller.set_input_text(event.text)

    def on_input_bar_submitted(self, event: InputBar.Submitted) -> None:
        if not self.controller.active:
            return
        self.controller.select_option(ViewOption.CHATBOT)
        self._send_question()

    @work(name="send-question")
    async def _send_question(self) -> None:
        outcome = await self.controller.send()
        logger.debug("Send finished: %s", outcome.value)

    def on_input_bar_attach_requested(self, event: InputBar.AttachRequested) -> None:
        if not self.controller.attach_file(event.path):
            self.notify(
                f"No se pudo adjuntar {event.path}",
                severity="error",
            )

    def on_input_bar_attachment_removed(self) -> None:
        self.controller.remove_attachment()

    def on_input_bar_new_conversation_requested(self) -> None:
        self.start_new_conversation()

    # ── app-level actions ───────────────────────────────────────

    def start_new_conversation(self) -> None:
        if self.controller.active:
            self.controller.start_new_conversation()
            self.query_one(InputBar).focus_input()

    def toggle_menu(self) -> None:
        self.controller.toggle_menu()

    def toggle_option(self) -> None:
        current = self.controller.state.selected_option
        self.controller.select_option(
            ViewOption.WELCOME if current is ViewOption.CHATBOT else ViewOption.CHATBOT
        )

    @work(name="refresh-now")
    async def refresh_now(self) -> None:
        if self.controller.active:
            await self.controller.refresh_now()

    @work(name="logout")
    async def logout(self) -> None:
        await self.controller.logout()
