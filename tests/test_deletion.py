"""Tests for DeletionWorkflow: confirmation, local prune and delayed re-sync."""
from __future__ import annotations

import asyncio

import pytest

from chatdesk.engine.active_poller import ActiveConversationPoller
from chatdesk.engine.deletion import (
    CONFIRM_TITLE,
    DELETED_TEXT,
    DELETED_TITLE,
    DeletionWorkflow,
    confirm_text,
)
from chatdesk.engine.list_poller import ConversationListPoller
from chatdesk.engine.models import Fail, PollHandleName


class _Dialogs:
    def __init__(self, answer: object = True) -> None:
        self.answer = answer
        self.confirms: list[tuple[str, str]] = []
        self.acks: list[tuple[str, str]] = []

    async def confirm(self, title: str, text: str):
        self.confirms.append((title, text))
        return self.answer

    async def acknowledge(self, title: str, text: str) -> None:
        self.acks.append((title, text))


async def _workflow(fake_client, scheduler, state, session, dialogs, resync_delay=0.01):
    list_poller = ConversationListPoller(fake_client, scheduler, state, session)
    active_poller = ActiveConversationPoller(fake_client, scheduler, state, session)
    await list_poller.fetch()
    workflow = DeletionWorkflow(
        fake_client, scheduler, state, session,
        list_poller=list_poller,
        active_poller=active_poller,
        confirm=dialogs.confirm,
        acknowledge=dialogs.acknowledge,
        resync_delay=resync_delay,
    )
    return workflow, active_poller


@pytest.mark.asyncio
@pytest.mark.parametrize("answer", [False, None, "yes"])
async def test_nothing_happens_without_explicit_yes(fake_client, scheduler, state, session, answer):
    dialogs = _Dialogs(answer)
    workflow, _ = await _workflow(fake_client, scheduler, state, session, dialogs)

    assert await workflow.request_delete("Receta de pan") is False
    assert dialogs.confirms == [(CONFIRM_TITLE, confirm_text("Receta de pan"))]
    assert fake_client.count("delete_conversation") == 0
    assert state.has_conversation("Receta de pan")
    assert not scheduler.is_active(PollHandleName.LIST_RESYNC)


@pytest.mark.asyncio
async def test_confirmed_delete_prunes_acknowledges_and_resyncs(fake_client, scheduler, state, session):
    dialogs = _Dialogs(True)
    workflow, _ = await _workflow(fake_client, scheduler, state, session, dialogs)
    lists_before = fake_client.count("list_conversations")

    assert await workflow.request_delete("Receta de pan") is True
    assert fake_client.calls[-1] == ("delete_conversation", "alopez", "Receta de pan")
    assert [c.title for c in state.conversations] == ["Tarea de historia"]
    assert dialogs.acks == [(DELETED_TITLE, DELETED_TEXT)]
    assert scheduler.is_active(PollHandleName.LIST_RESYNC)

    await asyncio.sleep(0.03)
    await scheduler.drain()
    assert fake_client.count("list_conversations") == lists_before + 1
    assert [c.title for c in state.conversations] == ["Tarea de historia"]


@pytest.mark.asyncio
async def test_deleting_the_open_conversation_deselects_it(fake_client, scheduler, state, session):
    dialogs = _Dialogs(True)
    workflow, active_poller = await _workflow(fake_client, scheduler, state, session, dialogs)
    active_poller.select("Tarea de historia")
    await asyncio.sleep(0.005)

    await workflow.request_delete("Tarea de historia")
    assert state.active_title is None
    assert state.messages == []
    assert not active_poller.running
    await scheduler.shutdown()


@pytest.mark.asyncio
async def test_deleting_another_conversation_keeps_the_open_one(fake_client, scheduler, state, session):
    dialogs = _Dialogs(True)
    workflow, active_poller = await _workflow(fake_client, scheduler, state, session, dialogs)
    active_poller.select("Tarea de historia")
    await asyncio.sleep(0.005)

    await workflow.request_delete("Receta de pan")
    assert state.active_title == "Tarea de historia"
    assert active_poller.running
    await scheduler.shutdown()


@pytest.mark.asyncio
async def test_failed_delete_changes_nothing(fake_client, scheduler, state, session):
    dialogs = _Dialogs(True)
    workflow, _ = await _workflow(fake_client, scheduler, state, session, dialogs)
    fake_client.queue("delete_conversation", Fail(500, "caído"))

    assert await workflow.request_delete("Receta de pan") is False
    assert state.has_conversation("Receta de pan")
    assert dialogs.acks == []
    assert not scheduler.is_active(PollHandleName.LIST_RESYNC)
    assert state.last_failure.operation == "delete_conversation"


@pytest.mark.asyncio
async def test_acknowledgment_error_does_not_stop_resync(fake_client, scheduler, state, session):
    dialogs = _Dialogs(True)
    workflow, _ = await _workflow(fake_client, scheduler, state, session, dialogs)

    async def broken_ack(title: str, text: str) -> None:
        raise RuntimeError("modal closed")

    workflow._acknowledge = broken_ack
    assert await workflow.request_delete("Receta de pan") is True
    assert scheduler.is_active(PollHandleName.LIST_RESYNC)
    await scheduler.shutdown()


@pytest.mark.asyncio
async def test_delete_resolving_after_teardown_schedules_nothing(fake_client, scheduler, state, session):
    dialogs = _Dialogs(True)
    workflow, _ = await _workflow(fake_client, scheduler, state, session, dialogs)
    lists_before = fake_client.count("list_conversations")
    fake_client.holds["delete_conversation"] = asyncio.Event()

    pending = asyncio.ensure_future(workflow.request_delete("Receta de pan"))
    await asyncio.sleep(0.005)
    await scheduler.shutdown()
    fake_client.holds["delete_conversation"].set()

    assert await pending is True
    assert not scheduler.is_active(PollHandleName.LIST_RESYNC)
    assert dialogs.acks == []
    await asyncio.sleep(0.03)
    assert fake_client.count("list_conversations") == lists_before
