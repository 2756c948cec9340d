"""HTTP client for the remote chatbot service.

Every call returns an ApiResult instead of raising: the pollers and
workflows inspect the tag and keep their prior state on failure.
Only asyncio.CancelledError escapes, so a cancelled poll tick still
unwinds cleanly.
"""
from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

import aiohttp

from .config import ClientConfig
from .models import ApiResult, RemoteOperation, TransportError, result_from_body
from chatdesk.shared.models.conversation import Attachment

logger = logging.getLogger(__name__)


class ChatbotClient:
    """Thin async wrapper over the five chatbot operations."""

    def __init__(
        self,
        config: ClientConfig,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self._config = config
        self._session = session
        self._owns_session = session is None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=self._config.request_timeout_seconds)
            self._session = aiohttp.ClientSession(timeout=timeout)
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        """Close the underlying HTTP session if this client created it."""
        if self._session is not None and self._owns_session and not self._session.closed:
            await self._session.close()
        self._session = None

    # ── transport ───────────────────────────────────────────────

    async def _post(
        self,
        operation: RemoteOperation,
        *,
        json_body: dict[str, Any] | None = None,
        form: aiohttp.FormData | None = None,
    ) -> ApiResult:
        url = self._config.endpoint_url(operation)
        try:
            async with self._get_session().post(url, json=json_body, data=form) as resp:
                text = await resp.text()
        except asyncio.CancelledError:
            raise
        except asyncio.TimeoutError:
            return TransportError(
                error=f"timed out after {self._config.request_timeout_seconds:.1f}s",
            )
        except aiohttp.ClientError as exc:
            return TransportError(error=f"{type(exc).__name__}: {exc}")

        try:
            body = json.loads(text)
        except json.JSONDecodeError:
            snippet = text[:120].replace("\n", " ")
            return TransportError(
                error=f"non-JSON response (HTTP {resp.status}): {snippet}",
            )
        return result_from_body(body)

    @staticmethod
    def _question_form(
        username: str,
        question: str,
        title: str,
        attachment: Attachment | None,
    ) -> aiohttp.FormData:
        form = aiohttp.FormData()
        form.add_field("username", username)
        form.add_field("pregunta", question)
        form.add_field("titulo", title)
        if attachment is not None:
            form.add_field(
                "image",
                attachment.content,
                filename=attachment.filename,
                content_type=attachment.content_type,
            )
        return form

    # ── operations ──────────────────────────────────────────────

    async def list_conversations(self, username: str) -> ApiResult:
        return await self._post(
            RemoteOperation.LIST_CONVERSATIONS,
            json_body={"username": username},
        )

    async def get_conversation(self, username: str, title: str) -> ApiResult:
        return await self._post(
            RemoteOperation.GET_CONVERSATION,
            json_body={"username": username, "titulo": title},
        )

    async def start_conversation(
        self,
        username: str,
        question: str,
        attachment: Attachment | None = None,
    ) -> ApiResult:
        return await self._post(
            RemoteOperation.START_CONVERSATION,
            form=self._question_form(username, question, "", attachment),
        )

    async def continue_conversation(
        self,
        username: str,
        question: str,
        title: str,
        attachment: Attachment | None = None,
    ) -> ApiResult:
        return await self._post(
            RemoteOperation.CONTINUE_CONVERSATION,
            form=self._question_form(username, question, title, attachment),
        )

    async def delete_conversation(self, username: str, title: str) -> ApiResult:
        return await self._post(
            RemoteOperation.DELETE_CONVERSATION,
            json_body={"username": username, "titulo": title},
        )
