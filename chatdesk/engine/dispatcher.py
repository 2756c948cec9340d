"""Message dispatcher — sends a question and activates its conversation.

Starting and continuing a conversation differ only in the remote
operation and in what happens to the title afterwards: a started
conversation gets its title from the service, is added to the list
right away and then goes through the same ``select`` path a click in
the sidebar uses.
"""
from __future__ import annotations

import logging
from collections.abc import Callable
from enum import Enum

from .api_client import ChatbotClient
from .errors import ValidationSkip
from .models import Ok, RemoteOperation, to_remote_failure
from chatdesk.shared.models.conversation import Attachment, ConversationSummary
from chatdesk.shared.models.session import Session
from chatdesk.shared.models.view_state import ViewState

logger = logging.getLogger(__name__)


class SendOutcome(str, Enum):
    SKIPPED = "skipped"
    SENT = "sent"
    FAILED = "failed"


def _validate(text: str) -> None:
    if not text.strip():
        raise ValidationSkip("message text is blank")


class MessageDispatcher:
    """Sends one message at a time on behalf of the input bar."""

    def __init__(
        self,
        client: ChatbotClient,
        state: ViewState,
        session: Session,
        select: Callable[[str], object],
        restore_input_on_failure: bool = False,
    ) -> None:
        self._client = client
        self._state = state
        self._session = session
        self._select = select
        self._restore_input_on_failure = restore_input_on_failure

    async def send(
        self,
        text: str,
        attachment: Attachment | None = None,
    ) -> SendOutcome:
        try:
            _validate(text)
        except ValidationSkip as exc:
            logger.debug("Send skipped: %s", exc.reason)
            return SendOutcome.SKIPPED

        dispatch_title = self._state.active_title
        username = self._session.username

        # Optimistic reset: the user can start typing the next message
        # while this one is in flight.
        self._state.clear_pending()

        if dispatch_title:
            operation = RemoteOperation.CONTINUE_CONVERSATION
            result = await self._client.continue_conversation(
                username, text, dispatch_title, attachment,
            )
        else:
            operation = RemoteOperation.START_CONVERSATION
            result = await self._client.start_conversation(username, text, attachment)

        if not isinstance(result, Ok):
            failure = to_remote_failure(operation, result)
            logger.error("Error sending message: %s", failure)
            self._state.record_failure(failure)
            self._maybe_restore(text, attachment)
            return SendOutcome.FAILED

        if dispatch_title:
            # The open conversation may have changed while the request was
            # in flight; re-selecting whatever is active now is a no-op.
            current = self._state.active_title
            if current:
                self._select(current)
            return SendOutcome.SENT

        new_title = result.body.get("titulo")
        if not isinstance(new_title, str) or not new_title:
            logger.error("Start conversation succeeded without a title: %r", result.body)
            return SendOutcome.FAILED

        if not self._state.has_conversation(new_title):
            self._state.append_conversation(ConversationSummary(title=new_title))
        if self._state.active_title is None:
            self._select(new_title)
        else:
            logger.info(
                "Started %r while %r was opened; not switching",
                new_title, self._state.active_title,
            )
        return SendOutcome.SENT

    def _maybe_restore(self, text: str, attachment: Attachment | None) -> None:
        if not self._restore_input_on_failure:
            return
        if not self._state.pending.is_blank or self._state.pending.attachment is not None:
            # The user already typed something new; keep it.
            return
        self._state.restore_pending(text, attachment)
