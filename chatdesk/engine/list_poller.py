"""Conversation list poller — keeps the sidebar list in step with the service."""
from __future__ import annotations

import logging

from .api_client import ChatbotClient
from .models import Ok, PollHandleName, RemoteOperation, to_remote_failure
from .scheduler import PollScheduler
from chatdesk.shared.models.conversation import parse_summaries
from chatdesk.shared.models.session import Session
from chatdesk.shared.models.view_state import ViewState

logger = logging.getLogger(__name__)


class ConversationListPoller:
    """Fetches the full conversation list now and on every interval.

    A successful fetch replaces the stored list wholesale. A failed one
    leaves it as it was; the next tick is the retry.
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
    def running(self) -> bool:
        return self._scheduler.is_active(PollHandleName.LIST_POLL)

    def start(self, interval: float | None = None) -> None:
        if interval is not None:
            self._interval = interval
        self._scheduler.start_repeating(
            PollHandleName.LIST_POLL, self.fetch, self._interval,
        )

    def stop(self) -> None:
        self._scheduler.cancel(PollHandleName.LIST_POLL)

    async def fetch(self) -> bool:
        """Fetch once. Returns True when the stored list was replaced."""
        result = await self._client.list_conversations(self._session.username)
        if not isinstance(result, Ok):
            failure = to_remote_failure(RemoteOperation.LIST_CONVERSATIONS, result)
            logger.error("Error loading conversations: %s", failure)
            self._state.record_failure(failure)
            return False
        if not isinstance(result.data, list):
            logger.warning(
                "Conversation list response has no data array (%s); keeping current list",
                type(result.data).__name__,
            )
            return False
        self._state.replace_conversations(parse_summaries(result.data))
        self._state.record_failure(None)
        return True
