"""Shared fixtures: an in-memory chatbot service and a stored identity."""
from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from chatdesk.engine.config import ClientConfig
from chatdesk.engine.models import ApiResult, Fail, Ok
from chatdesk.engine.scheduler import PollScheduler
from chatdesk.engine.session_context import store_identity
from chatdesk.shared.models.conversation import Attachment
from chatdesk.shared.models.session import Session
from chatdesk.shared.models.view_state import ViewState
from chatdesk.shared.services.identity_store import IdentityStore


def ok(data=None, **extra) -> Ok:
    body = {"status_code": 200, "data": data, **extra}
    return Ok(data=data, body=body)


class FakeChatbotClient:
    """Stands in for ChatbotClient; keeps conversations in a dict.

    ``gates`` lets a test hold a get_conversation response for a title
    until it sets the event; ``holds`` does the same per operation name.
    ``overrides`` replaces the next result of an operation with a canned
    one.
    """

    def __init__(self, conversations: dict[str, list[dict]] | None = None) -> None:
        self.conversations: dict[str, list[dict]] = dict(conversations or {})
        self.calls: list[tuple] = []
        self.gates: dict[str, asyncio.Event] = {}
        self.holds: dict[str, asyncio.Event] = {}
        self.overrides: dict[str, list[ApiResult]] = {}
        self.next_title = "Nueva conversación"
        self.closed = False

    def queue(self, operation: str, *results: ApiResult) -> None:
        self.overrides.setdefault(operation, []).extend(results)

    def _override(self, operation: str) -> ApiResult | None:
        pending = self.overrides.get(operation)
        if pending:
            return pending.pop(0)
        return None

    async def _wait_hold(self, operation: str) -> None:
        hold = self.holds.get(operation)
        if hold is not None:
            await hold.wait()

    def count(self, operation: str) -> int:
        return sum(1 for call in self.calls if call[0] == operation)

    async def list_conversations(self, username: str) -> ApiResult:
        self.calls.append(("list_conversations", username))
        canned = self._override("list_conversations")
        if canned is not None:
            return canned
        return ok([{"titulo": title} for title in self.conversations])

    async def get_conversation(self, username: str, title: str) -> ApiResult:
        self.calls.append(("get_conversation", username, title))
        gate = self.gates.get(title)
        if gate is not None:
            await gate.wait()
        canned = self._override("get_conversation")
        if canned is not None:
            return canned
        if title not in self.conversations:
            return Fail(code=404, msg="Conversación no encontrada")
        return ok({"titulo": title, "messages": list(self.conversations[title])})

    async def start_conversation(
        self,
        username: str,
        question: str,
        attachment: Attachment | None = None,
    ) -> ApiResult:
        self.calls.append(("start_conversation", username, question, attachment))
        await self._wait_hold("start_conversation")
        canned = self._override("start_conversation")
        if canned is not None:
            return canned
        title = self.next_title
        self.conversations[title] = [
            {"role": "user", "content": question},
            {"role": "assistant", "content": f"Respuesta a: {question}"},
        ]
        return ok(None, titulo=title)

    async def continue_conversation(
        self,
        username: str,
        question: str,
        title: str,
        attachment: Attachment | None = None,
    ) -> ApiResult:
        self.calls.append(("continue_conversation", username, question, title, attachment))
        canned = self._override("continue_conversation")
        if canned is not None:
            return canned
        self.conversations.setdefault(title, []).extend([
            {"role": "user", "content": question},
            {"role": "assistant", "content": f"Respuesta a: {question}"},
        ])
        return ok(None)

    async def delete_conversation(self, username: str, title: str) -> ApiResult:
        self.calls.append(("delete_conversation", username, title))
        await self._wait_hold("delete_conversation")
        canned = self._override("delete_conversation")
        if canned is not None:
            return canned
        self.conversations.pop(title, None)
        return ok(None)

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def session() -> Session:
    return Session(
        person_id="42",
        first_name="Ana María",
        paternal_surname="López",
        maternal_surname="Ruiz",
        username="alopez",
    )


@pytest.fixture
def state() -> ViewState:
    return ViewState()


@pytest.fixture
def scheduler() -> PollScheduler:
    return PollScheduler()


@pytest.fixture
def fake_client() -> FakeChatbotClient:
    return FakeChatbotClient({
        "Tarea de historia": [
            {"role": "user", "content": "¿Quién fue Bolívar?"},
            {"role": "assistant", "content": "Un líder independentista."},
        ],
        "Receta de pan": [{"role": "user", "content": "¿Cuánta harina?"}],
    })


@pytest.fixture
def store(tmp_path: Path) -> IdentityStore:
    return IdentityStore(tmp_path / "storage.json")


@pytest.fixture
def logged_in_store(store: IdentityStore, session: Session) -> IdentityStore:
    store_identity(store, session)
    return store


@pytest.fixture
def config(tmp_path: Path) -> ClientConfig:
    """Long poll intervals so only the immediate ticks run in a test."""
    return ClientConfig(
        api_url="http://chatbot.test",
        poll_interval_seconds=60.0,
        active_poll_interval_seconds=60.0,
        delete_resync_delay_seconds=0.01,
        storage_path=tmp_path / "storage.json",
        log_dir=tmp_path / "logs",
    )
