import asyncio
import json

from sqlalchemy.exc import OperationalError

from chatrelay.api.messages import services
from chatrelay.relay.connections import session_room
from chatrelay.relay.notifications import NotificationDispatcher
from chatrelay.relay.websocket_handler import dispatch_frame


def _frame(name, data=None):
    return json.dumps({"event": name, "data": data})


def _dispatch(hub, conn, *frames):
    notifications = NotificationDispatcher()

    async def run():
        for raw in frames:
            await dispatch_frame(hub, notifications, conn, raw)
        await notifications.drain()

    asyncio.run(run())


def test_failed_join_leaves_connection_unjoined(hub, make_connection, monkeypatch):
    real_count = services.count_messages

    def broken(db, session_id):
        raise OperationalError("SELECT count(*)", {}, Exception("database is down"))

    monkeypatch.setattr(services, "count_messages", broken)
    conn = make_connection()

    _dispatch(hub, conn, _frame("join", {"sessionId": "S1", "displayName": "Alice"}))

    assert conn.websocket.sent == [{"event": "error", "data": {"message": "Failed to join session"}}]
    assert conn.session_id is None
    assert hub.members(session_room("S1")) == set()

    # Once the store is back, the same join goes through and greets.
    monkeypatch.setattr(services, "count_messages", real_count)
    _dispatch(hub, conn, _frame("join", {"sessionId": "S1", "displayName": "Alice"}))

    greetings = conn.websocket.events("message")
    assert len(greetings) == 1
    assert greetings[0]["data"]["display_name"] == "Alice"
    assert conn.session_id == "S1"
    assert hub.members(session_room("S1")) == {conn}


def test_unexpected_store_error_is_reported_and_connection_keeps_working(hub, make_connection, monkeypatch):
    real_create = services.create_message

    def broken(db, message_data):
        raise ValueError("A string literal cannot contain NUL (0x00) characters.")

    conn = make_connection()
    _dispatch(hub, conn, _frame("join", "S1"))
    conn.websocket.sent.clear()

    monkeypatch.setattr(services, "create_message", broken)
    _dispatch(hub, conn, _frame("send-message", {"sessionId": "S1", "text": "nul\u0000", "senderRole": "user"}))

    assert conn.websocket.sent == [{"event": "error", "data": {"message": "Failed to handle send-message"}}]

    monkeypatch.setattr(services, "create_message", real_create)
    _dispatch(hub, conn, _frame("send-message", {"sessionId": "S1", "text": "hi", "senderRole": "user"}))

    assert conn.websocket.events("message")[-1]["data"]["text"] == "hi"
