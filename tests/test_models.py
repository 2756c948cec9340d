"""Tests for response classification and failure reporting."""
from __future__ import annotations

import pytest

from chatdesk.engine.errors import RemoteFailure
from chatdesk.engine.models import (
    Fail,
    Ok,
    RemoteOperation,
    TransportError,
    result_from_body,
    to_remote_failure,
)
from chatdesk.shared.models.conversation import parse_messages, parse_summaries


def test_status_200_is_ok_with_data():
    result = result_from_body({"status_code": 200, "data": [{"titulo": "A"}]})
    assert isinstance(result, Ok)
    assert result.data == [{"titulo": "A"}]
    assert result.ok


def test_status_code_as_string_still_counts():
    assert isinstance(result_from_body({"status_code": "200", "data": []}), Ok)


def test_non_200_is_fail_with_message():
    result = result_from_body({"status_code": 500, "msg": "DB caída"})
    assert result == Fail(code=500, msg="DB caída")
    assert not result.ok


def test_missing_status_code_is_fail():
    result = result_from_body({"data": []})
    assert isinstance(result, Fail)
    assert result.code is None


def test_non_object_body_is_transport_error():
    assert isinstance(result_from_body(["not", "an", "object"]), TransportError)


def test_remote_failure_message_names_operation_and_code():
    failure = to_remote_failure(RemoteOperation.DELETE_CONVERSATION, Fail(403, "prohibido"))
    assert isinstance(failure, RemoteFailure)
    assert str(failure) == "delete_conversation failed (403): prohibido"

    transport = to_remote_failure(RemoteOperation.LIST_CONVERSATIONS, TransportError("timeout"))
    assert transport.code is None
    assert "(transport)" in str(transport)


def test_remote_failure_rejects_ok():
    with pytest.raises(ValueError):
        to_remote_failure(RemoteOperation.GET_CONVERSATION, Ok())


def test_parse_summaries_drops_untitled_entries():
    summaries = parse_summaries([
        {"titulo": "A", "fecha": "2024-01-01"},
        {"titulo": ""},
        "basura",
        {"otro": 1},
        {"titulo": "B"},
    ])
    assert [s.title for s in summaries] == ["A", "B"]
    assert summaries[0].extra == {"fecha": "2024-01-01"}
    assert summaries[0].to_payload() == {"titulo": "A", "fecha": "2024-01-01"}


def test_parse_messages_needs_a_message_list():
    assert parse_messages({"messages": [{"role": "user"}]}) == [{"role": "user"}]
    assert parse_messages({"messages": "nope"}) is None
    assert parse_messages(None) is None


def test_engine_package_exposes_components_lazily():
    import chatdesk.engine as engine
    from chatdesk.engine.controller import ConversationController
    from chatdesk.engine.yaml_config import load_yaml_config

    assert engine.ConversationController is ConversationController
    assert engine.load_yaml_config is load_yaml_config
    with pytest.raises(AttributeError):
        engine.NotAThing
