"""Conversation controller — wires the sync engine to one view.

The rendering layer talks only to this class. It owns the scheduler,
both pollers, the dispatcher and the deletion workflow, and exposes the
user actions as plain methods. Selection from the sidebar and
activation after a send share the same ``select`` path.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from .active_poller import ActiveConversationPoller
from .api_client import ChatbotClient
from .config import (
    LOGIN_ROUTE,
    AcknowledgeCallback,
    ClientConfig,
    ConfirmCallback,
    NavigateCallback,
)
from .deletion import DeletionWorkflow
from .dispatcher import MessageDispatcher, SendOutcome
from .errors import IdentityMissing
from .list_poller import ConversationListPoller
from .scheduler import PollScheduler
from .session_context import SessionContext
from chatdesk.shared.models.conversation import Attachment
from chatdesk.shared.models.session import Session
from chatdesk.shared.models.view_state import ViewOption, ViewState
from chatdesk.shared.services.identity_store import IdentityStore

logger = logging.getLogger(__name__)


async def _deny(title: str, text: str) -> bool:
    return False


@dataclass
class _Components:
    """Engine parts built once the session is known."""

    list_poller: ConversationListPoller
    active_poller: ActiveConversationPoller
    dispatcher: MessageDispatcher
    deletion: DeletionWorkflow


class ConversationController:
    """User actions and polling lifecycle for the conversation view."""

    def __init__(
        self,
        config: ClientConfig,
        store: IdentityStore,
        *,
        client: ChatbotClient | None = None,
        confirm: ConfirmCallback | None = None,
        acknowledge: AcknowledgeCallback | None = None,
        navigate: NavigateCallback | None = None,
        state: ViewState | None = None,
    ) -> None:
        self._config = config
        self._store = store
        self._client = client or ChatbotClient(config)
        self._confirm = confirm or _deny
        self._acknowledge = acknowledge
        self._navigate = navigate
        self.state = state or ViewState()
        self.scheduler = PollScheduler()
        self.session_context = SessionContext(store)
        self._activation_count = 0
        self._torn_down = False
        self._components: _Components | None = None

    # ── lifecycle ───────────────────────────────────────────────

    @property
    def active(self) -> bool:
        return self._components is not None and not self._torn_down

    @property
    def torn_down(self) -> bool:
        return self._torn_down

    @property
    def session(self) -> Session | None:
        return self.session_context.session

    @property
    def list_poller(self) -> ConversationListPoller | None:
        return self._components.list_poller if self._components else None

    @property
    def active_poller(self) -> ActiveConversationPoller | None:
        return self._components.active_poller if self._components else None

    def activate(self) -> bool:
        """Resolve the session and start the list poller.

        Must run inside the event loop. Returns False when there is no
        usable identity; the view has then been sent to the login route.
        Only the first call has side effects.
        """
        if self._activation_count > 0:
            return self.active
        self._activation_count += 1

        try:
            session = self.session_context.load()
        except IdentityMissing as exc:
            logger.warning("Activation aborted: %s", exc)
            self._go(LOGIN_ROUTE)
            return False

        components = self._build(session)
        self._components = components
        self.state.set_session(session)
        components.list_poller.start(self._config.poll_interval_seconds)
        logger.info("Conversation view active for %s", session.username)
        return True

    def _build(self, session: Session) -> _Components:
        list_poller = ConversationListPoller(
            self._client, self.scheduler, self.state, session,
            interval=self._config.poll_interval_seconds,
        )
        active_poller = ActiveConversationPoller(
            self._client, self.scheduler, self.state, session,
            interval=self._config.active_poll_interval_seconds,
        )
        dispatcher = MessageDispatcher(
            self._client, self.state, session,
            select=self.select,
            restore_input_on_failure=self._config.restore_input_on_failure,
        )
        deletion = DeletionWorkflow(
            self._client, self.scheduler, self.state, session,
            list_poller=list_poller,
            active_poller=active_poller,
            confirm=self._confirm,
            acknowledge=self._acknowledge,
            resync_delay=self._config.delete_resync_delay_seconds,
        )
        return _Components(list_poller, active_poller, dispatcher, deletion)

    async def deactivate(self) -> None:
        """Tear the view down: stop every timer and close the HTTP session."""
        if self._torn_down:
            return
        self._torn_down = True
        await self.scheduler.shutdown()
        await self._client.close()
        logger.info("Conversation view torn down")

    def _go(self, route: str) -> None:
        if self._navigate is None:
            logger.warning("No navigator configured; cannot go to %s", route)
            return
        self._navigate(route)

    def _require(self) -> _Components:
        if self._components is None or self._torn_down:
            raise RuntimeError("ConversationController is not active")
        return self._components

    # ── conversation actions ────────────────────────────────────

    def select(self, title: str) -> bool:
        if self._torn_down:
            # A send that resolves after teardown lands here.
            logger.info("View torn down; not opening %r", title)
            return False
        return self._require().active_poller.select(title)

    def deselect(self) -> None:
        self._require().active_poller.deselect()

    def start_new_conversation(self) -> None:
        """Leave the open conversation so the next send starts a new one."""
        self.deselect()
        self.state.clear_pending()
        self.state.select_option(ViewOption.CHATBOT)

    async def send(self) -> SendOutcome:
        """Send whatever is in the pending input buffer."""
        dispatcher = self._require().dispatcher
        pending = self.state.pending
        return await dispatcher.send(pending.text, pending.attachment)

    async def request_delete(self, title: str) -> bool:
        return await self._require().deletion.request_delete(title)

    async def refresh_now(self) -> None:
        """Fetch the list and the open conversation outside the schedule."""
        components = self._require()
        await components.list_poller.fetch()
        await components.active_poller.refresh()

    # ── input buffer ────────────────────────────────────────────

    def set_input_text(self, text: str) -> None:
        self.state.set_pending_text(text)

    def attach_file(self, path: str | Path) -> bool:
        try:
            attachment = Attachment.from_path(path)
        except OSError as exc:
            logger.error("Cannot attach %s: %s", path, exc)
            return False
        self.state.set_attachment(attachment)
        return True

    def remove_attachment(self) -> None:
        self.state.set_attachment(None)

    # ── chrome ──────────────────────────────────────────────────

    def select_option(self, option: ViewOption | str) -> None:
        self.state.select_option(ViewOption(option))

    def toggle_menu(self) -> None:
        self.state.toggle_menu()

    async def logout(self) -> None:
        """Forget the identity, stop everything and go to the login route."""
        self._store.clear()
        await self.deactivate()
        self._go(LOGIN_ROUTE)
