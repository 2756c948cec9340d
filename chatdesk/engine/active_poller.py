"""Active conversation poller — keeps the open conversation's messages fresh."""
from __future__ import annotations

import logging

from .api_client import ChatbotClient
from .models import Ok, PollHandleName, RemoteOperation, to_remote_failure
from .scheduler import PollScheduler
from chatdesk.shared.models.conversation import parse_messages
from chatdesk.shared.models.session import Session
from chatdesk.shared.models.view_state import ViewState

logger = logging.getLogger(__name__)


class ActiveConversationPoller:
    """Polls the message history of exactly one selected conversation.

    Each refresh remembers which title it was issued for. When its
    response arrives after the selection has moved on, it is dropped
    instead of overwriting the new conversation's buffer.
    """

    def __init__(
        self,
        client: ChatbotClient,
        scheduler: PollScheduler,
        state: ViewState,
        session: Session,
        interval: float = 5.0,
    ) -> None:
        self._client = client
        self._scheduler = scheduler
        self._state = state
        self._session = session
        self._interval = interval

    @property
    def active_title(self) -> str | None:
        return self._state.active_title

    @property
    def running(self) -> bool:
        return self._scheduler.is_active(PollHandleName.ACTIVE_POLL)

    def select(self, title: str) -> bool:
        """Make *title* the active conversation and start polling it.

        Returns False (and does nothing) when *title* is already active.
        """
        if title == self._state.active_title:
            return False
        self._state.set_active_title(title)
        # Cleared before the first refresh resolves so the view never
        # shows the previous conversation under the new title.
        self._state.clear_messages()
        self._scheduler.cancel(PollHandleName.ACTIVE_POLL)
        self._scheduler.start_repeating(
            PollHandleName.ACTIVE_POLL, self.refresh, self._interval,
        )
        logger.info("Selected conversation %r", title)
        return True

    def deselect(self) -> None:
        self._scheduler.cancel(PollHandleName.ACTIVE_POLL)
        if self._state.active_title is not None:
            logger.info("Deselected conversation %r", self._state.active_title)
        self._state.set_active_title(None)
        self._state.clear_messages()

    def stop(self) -> None:
        self._scheduler.cancel(PollHandleName.ACTIVE_POLL)

    async def refresh(self) -> bool:
        """Fetch the active conversation once.

        Returns True when the message buffer was replaced.
        """
        target = self._state.active_title
        if not target:
            return False
        result = await self._client.get_conversation(self._session.username, target)
        if target != self._state.active_title:
            logger.debug(
                "Dropping stale refresh for %r (active is now %r)",
                target, self._state.active_title,
            )
            return False
        if not isinstance(result, Ok):
            failure = to_remote_failure(RemoteOperation.GET_CONVERSATION, result)
            logger.error("Error refreshing conversation %r: %s", target, failure)
            self._state.record_failure(failure)
            return False
        messages = parse_messages(result.data)
        if messages is None:
            logger.warning("Conversation %r response has no message list; keeping buffer", target)
            return False
        self._state.replace_messages(messages)
        return True
