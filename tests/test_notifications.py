import asyncio

import pytest

from chatrelay.api.push import services as push_services
from chatrelay.config import settings
from chatrelay.relay.notifications import NotificationDispatcher, PushDeliveryError, send_push


def test_no_token_is_a_no_op(push_recorder):
    assert asyncio.run(NotificationDispatcher().notify("S1", "hello")) is False
    assert push_recorder.calls == []


def test_delivery_uses_fixed_title_and_sound(push_recorder, db):
    push_services.register_push_token(db, "S1", "ExponentPushToken[abc]")

    assert asyncio.run(NotificationDispatcher().notify("S1", "hello")) is True

    call = push_recorder.calls[0]
    assert call["url"] == settings.PUSH_API_URL
    assert call["timeout"] == settings.PUSH_TIMEOUT_SECONDS
    assert call["json"] == {
        "to": "ExponentPushToken[abc]",
        "title": settings.PUSH_TITLE,
        "body": "hello",
        "sound": settings.PUSH_SOUND,
        "data": {"sessionId": "S1"},
    }


def test_image_only_message_gets_generic_body(push_recorder, db):
    push_services.register_push_token(db, "S1", "ExponentPushToken[abc]")

    asyncio.run(NotificationDispatcher().notify("S1", ""))

    assert push_recorder.calls[0]["json"]["body"] == settings.PUSH_IMAGE_BODY


def test_latest_token_wins(push_recorder, db):
    push_services.register_push_token(db, "S1", "ExponentPushToken[old]")
    push_services.register_push_token(db, "S1", "ExponentPushToken[new]")

    asyncio.run(NotificationDispatcher().notify("S1", "hello"))

    assert [call["json"]["to"] for call in push_recorder.calls] == ["ExponentPushToken[new]"]


def test_error_ticket_is_logged_not_raised(push_recorder, db, caplog):
    push_services.register_push_token(db, "S1", "ExponentPushToken[gone]")
    push_recorder.respond_with({
        "data": {
            "status": "error",
            "message": "not a registered push notification recipient",
            "details": {"error": "DeviceNotRegistered"},
        }
    })

    assert asyncio.run(NotificationDispatcher().notify("S1", "hello")) is False
    assert len(push_recorder.calls) == 1
    assert "DeviceNotRegistered" in caplog.text


def test_transport_error_is_not_retried(push_recorder, db):
    push_services.register_push_token(db, "S1", "ExponentPushToken[abc]")
    push_recorder.error = TimeoutError("push service timed out")

    assert asyncio.run(NotificationDispatcher().notify("S1", "hello")) is False
    assert len(push_recorder.calls) == 1


def test_send_push_raises_on_error_ticket_list(push_recorder):
    push_recorder.respond_with({
        "data": [{"status": "error", "message": "bad token", "details": {"error": "InvalidCredentials"}}]
    })

    with pytest.raises(PushDeliveryError, match="InvalidCredentials"):
        send_push("ExponentPushToken[abc]", "hello", "S1")


def test_scheduled_notifications_are_tracked_until_done(push_recorder, db):
    push_services.register_push_token(db, "S1", "ExponentPushToken[abc]")
    dispatcher = NotificationDispatcher()

    async def run():
        dispatcher.schedule("S1", "hello")
        assert dispatcher.pending == 1
        await dispatcher.drain(timeout=5)
        return dispatcher.pending

    assert asyncio.run(run()) == 0
    assert len(push_recorder.calls) == 1
