"""Tests for MessageDispatcher: optimistic clear, start vs continue, activation."""
from __future__ import annotations

import asyncio

import pytest

from chatdesk.engine.dispatcher import MessageDispatcher, SendOutcome
from chatdesk.engine.models import Fail, TransportError
from chatdesk.shared.models.conversation import Attachment, ConversationSummary
from conftest import ok


class _Selections:
    """Records select() calls and mirrors them into the state like the poller does."""

    def __init__(self, state) -> None:
        self.state = state
        self.titles: list[str] = []

    def __call__(self, title: str) -> bool:
        self.titles.append(title)
        if title == self.state.active_title:
            return False
        self.state.set_active_title(title)
        return True


def _dispatcher(fake_client, state, session, **kwargs):
    selections = _Selections(state)
    dispatcher = MessageDispatcher(fake_client, state, session, select=selections, **kwargs)
    return dispatcher, selections


@pytest.mark.asyncio
@pytest.mark.parametrize("text", ["", "   ", "\n\t"])
async def test_blank_text_is_skipped_without_a_request(fake_client, state, session, text):
    state.set_pending_text(text)
    dispatcher, selections = _dispatcher(fake_client, state, session)

    assert await dispatcher.send(text) is SendOutcome.SKIPPED
    assert fake_client.calls == []
    assert state.pending.text == text
    assert selections.titles == []


@pytest.mark.asyncio
async def test_continue_uses_active_title_and_clears_input_first(fake_client, state, session):
    state.set_active_title("Receta de pan")
    state.set_pending_text("¿Y la levadura?")
    pending_during_request: list[str] = []

    original = fake_client.continue_conversation

    async def spying_continue(*args, **kwargs):
        pending_during_request.append(state.pending.text)
        return await original(*args, **kwargs)

    fake_client.continue_conversation = spying_continue
    dispatcher, selections = _dispatcher(fake_client, state, session)

    assert await dispatcher.send("¿Y la levadura?") is SendOutcome.SENT
    assert pending_during_request == [""]
    assert fake_client.calls[-1][:4] == (
        "continue_conversation", "alopez", "¿Y la levadura?", "Receta de pan",
    )
    assert selections.titles == ["Receta de pan"]


@pytest.mark.asyncio
async def test_new_conversation_is_appended_and_activated(fake_client, state, session):
    fake_client.next_title = "Fotosíntesis"
    state.replace_conversations([ConversationSummary("Receta de pan")])
    dispatcher, selections = _dispatcher(fake_client, state, session)

    assert await dispatcher.send("Explícame la fotosíntesis") is SendOutcome.SENT
    assert fake_client.calls[-1][0] == "start_conversation"
    assert [c.title for c in state.conversations] == ["Receta de pan", "Fotosíntesis"]
    assert selections.titles == ["Fotosíntesis"]
    assert state.active_title == "Fotosíntesis"


@pytest.mark.asyncio
async def test_new_conversation_already_listed_is_not_duplicated(fake_client, state, session):
    fake_client.next_title = "Fotosíntesis"
    state.replace_conversations([ConversationSummary("Fotosíntesis")])
    dispatcher, _ = _dispatcher(fake_client, state, session)

    await dispatcher.send("hola")
    assert [c.title for c in state.conversations] == ["Fotosíntesis"]


@pytest.mark.asyncio
async def test_started_while_user_opened_another_does_not_switch(fake_client, state, session):
    fake_client.next_title = "Nueva"
    release = asyncio.Event()
    original = fake_client.start_conversation

    async def slow_start(*args, **kwargs):
        await release.wait()
        return await original(*args, **kwargs)

    fake_client.start_conversation = slow_start
    dispatcher, selections = _dispatcher(fake_client, state, session)

    sending = asyncio.create_task(dispatcher.send("pregunta"))
    await asyncio.sleep(0)
    state.set_active_title("Receta de pan")  # user clicked the sidebar meanwhile
    release.set()

    assert await sending is SendOutcome.SENT
    assert state.active_title == "Receta de pan"
    assert selections.titles == []
    assert state.has_conversation("Nueva")


@pytest.mark.asyncio
async def test_start_without_title_counts_as_failure(fake_client, state, session):
    fake_client.queue("start_conversation", ok(None))
    dispatcher, selections = _dispatcher(fake_client, state, session)

    assert await dispatcher.send("hola") is SendOutcome.FAILED
    assert selections.titles == []
    assert state.conversations == []


@pytest.mark.asyncio
async def test_failure_leaves_input_cleared_by_default(fake_client, state, session):
    state.set_pending_text("se perderá")
    fake_client.queue("start_conversation", Fail(500, "caído"))
    dispatcher, selections = _dispatcher(fake_client, state, session)

    assert await dispatcher.send("se perderá") is SendOutcome.FAILED
    assert state.pending.text == ""
    assert state.last_failure.operation == "start_conversation"
    assert selections.titles == []


@pytest.mark.asyncio
async def test_failure_restores_input_when_configured(fake_client, state, session):
    attachment = Attachment("foto.png", b"\x89PNG", "image/png")
    state.set_active_title("Receta de pan")
    fake_client.queue("continue_conversation", TransportError("timeout"))
    dispatcher, _ = _dispatcher(fake_client, state, session, restore_input_on_failure=True)

    assert await dispatcher.send("otra vez", attachment) is SendOutcome.FAILED
    assert state.pending.text == "otra vez"
    assert state.pending.attachment == attachment


@pytest.mark.asyncio
async def test_restore_never_overwrites_new_typing(fake_client, state, session):
    release = asyncio.Event()

    async def failing_start(*args, **kwargs):
        await release.wait()
        return Fail(500, "caído")

    fake_client.start_conversation = failing_start
    dispatcher, _ = _dispatcher(fake_client, state, session, restore_input_on_failure=True)

    sending = asyncio.create_task(dispatcher.send("primera"))
    await asyncio.sleep(0)
    state.set_pending_text("segunda")
    release.set()

    assert await sending is SendOutcome.FAILED
    assert state.pending.text == "segunda"


@pytest.mark.asyncio
async def test_attachment_is_forwarded(fake_client, state, session):
    attachment = Attachment("foto.png", b"\x89PNG", "image/png")
    dispatcher, _ = _dispatcher(fake_client, state, session)

    await dispatcher.send("¿Qué ves?", attachment)
    assert fake_client.calls[-1][3] == attachment
