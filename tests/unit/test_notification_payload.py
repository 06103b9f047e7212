from __future__ import annotations

import pydantic
import pytest

from chat_client.application.dto.notification import NotificationPayload


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("true", True), (True, True), ("false", False), ("1", False), ("True", False), (None, False)],
)
def test_is_group_only_accepts_true(raw, expected):
    payload = NotificationPayload.model_validate({"conversationSid": "CH1", "isGroup": raw})

    assert payload.is_group is expected


def test_participants_are_decoded_from_json():
    payload = NotificationPayload.model_validate(
        {"conversationSid": "CH1", "isGroup": "true", "participants": '["a","b"]'},
    )

    assert payload.participants == ["a", "b"]


@pytest.mark.parametrize("raw", ["not json", '{"a": 1}', "", None])
def test_malformed_participants_become_empty(raw):
    payload = NotificationPayload.model_validate({"conversationSid": "CH1", "participants": raw})

    assert payload.participants == []


def test_missing_sid_is_rejected():
    with pytest.raises(pydantic.ValidationError):
        NotificationPayload.model_validate({"isGroup": "true"})


def test_direct_payload_defaults_avatar():
    payload = NotificationPayload.model_validate(
        {"conversationSid": "CH1", "recipientUsername": "bob smith"},
    )

    route = payload.to_route()
    assert route.is_group is False
    assert route.recipient_avatar.endswith("name=bob%20smith&background=808080&color=fff")


def test_explicit_avatar_is_kept():
    payload = NotificationPayload.model_validate(
        {"conversationSid": "CH1", "recipientUsername": "bob", "recipientAvatar": "https://a/b.png"},
    )

    assert payload.to_route().to_params()["recipientAvatar"] == "https://a/b.png"


def test_group_route_without_name_omits_group_name():
    payload = NotificationPayload.model_validate({"conversationSid": "CH1", "isGroup": "true"})

    assert payload.to_route().to_params() == {
        "conversationSid": "CH1",
        "isGroup": True,
        "participants": [],
    }
