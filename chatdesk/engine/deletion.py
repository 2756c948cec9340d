"""Deletion workflow — confirm, delete, prune locally, re-sync later."""
from __future__ import annotations

import logging

from .active_poller import ActiveConversationPoller
from .api_client import ChatbotClient
from .config import AcknowledgeCallback, ConfirmCallback
from .list_poller import ConversationListPoller
from .models import Ok, PollHandleName, RemoteOperation, to_remote_failure
from .scheduler import PollScheduler
from chatdesk.shared.models.session import Session
from chatdesk.shared.models.view_state import ViewState

logger = logging.getLogger(__name__)

CONFIRM_TITLE = "¿Estás seguro?"
DELETED_TITLE = "¡Eliminado!"
DELETED_TEXT = "La conversación ha sido eliminada."


def confirm_text(title: str) -> str:
    return f'¿Quieres eliminar la conversación con el título: "{title}"?'


class DeletionWorkflow:
    """Removes a conversation on the service and from the local view."""

    def __init__(
        self,
        client: ChatbotClient,
        scheduler: PollScheduler,
        state: ViewState,
        session: Session,
        list_poller: ConversationListPoller,
        active_poller: ActiveConversationPoller,
        confirm: ConfirmCallback,
        acknowledge: AcknowledgeCallback | None = None,
        resync_delay: float = 2.0,
    ) -> None:
        self._client = client
        self._scheduler = scheduler
        self._state = state
        self._session = session
        self._list_poller = list_poller
        self._active_poller = active_poller
        self._confirm = confirm
        self._acknowledge = acknowledge
        self._resync_delay = resync_delay

    async def request_delete(self, title: str) -> bool:
        """Ask first; delete only on an explicit yes.

        Returns True when the conversation was deleted.
        """
        confirmed = await self._confirm(CONFIRM_TITLE, confirm_text(title))
        if confirmed is not True:
            logger.debug("Deletion of %r not confirmed", title)
            return False
        return await self.delete(title)

    async def delete(self, title: str) -> bool:
        result = await self._client.delete_conversation(self._session.username, title)
        if not isinstance(result, Ok):
            failure = to_remote_failure(RemoteOperation.DELETE_CONVERSATION, result)
            logger.error("Error deleting conversation %r: %s", title, failure)
            self._state.record_failure(failure)
            return False

        self._state.remove_conversation(title)
        if self._state.active_title == title:
            self._active_poller.deselect()
        logger.info("Deleted conversation %r", title)

        if self._scheduler.closed:
            logger.info("View torn down during deletion of %r; skipping re-sync", title)
            return True

        if self._acknowledge is not None:
            try:
                await self._acknowledge(DELETED_TITLE, DELETED_TEXT)
            except Exception:
                logger.exception("Deletion acknowledgment failed")

        # The local prune can diverge from the service; one extra fetch
        # after a short delay brings the list back in line.
        self._scheduler.schedule_once(
            PollHandleName.LIST_RESYNC,
            self._list_poller.fetch,
            self._resync_delay,
        )
        return True
