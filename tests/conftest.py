import os
import tempfile
import threading

# Settings are read at import time; point them at a throwaway database first.
_DB_DIR = tempfile.mkdtemp(prefix="chatrelay-tests-")
os.environ["DATABASE_URL"] = "sqlite:///" + os.path.join(_DB_DIR, "chatrelay.db")
os.environ["ADMIN_PASSWORD"] = "letmein"
os.environ["GREETING_TEXT"] = "Hello, how can I help you?"

import pytest
from fastapi.testclient import TestClient

from chatrelay.db.session import SessionLocal, init_db
from chatrelay.db.models import Message, PushRegistration
from chatrelay.main import app
from chatrelay.relay.connections import Connection, RoomHub


class FakeWebSocket:
    def __init__(self, fail=False):
        self.sent = []
        self.fail = fail

    async def send_json(self, data):
        if self.fail:
            raise RuntimeError("socket closed")
        self.sent.append(data)

    def events(self, name=None):
        return [frame for frame in self.sent if name is None or frame["event"] == name]


class FakePushResponse:
    status_code = 200

    def __init__(self, payload=None):
        self._payload = payload or {"data": {"status": "ok", "id": "ticket-1"}}

    def raise_for_status(self):
        pass

    def json(self):
        return self._payload


class PushRecorder:
    """Stands in for requests.post against the push API."""

    def __init__(self):
        self.calls = []
        self.response = FakePushResponse()
        self.error = None
        self.called = threading.Event()

    def respond_with(self, payload):
        self.response = FakePushResponse(payload)

    def __call__(self, url, json=None, **kwargs):
        self.calls.append({"url": url, "json": json, **kwargs})
        self.called.set()
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture(autouse=True)
def clean_db():
    init_db()
    yield
    db = SessionLocal()
    try:
        db.query(Message).delete()
        db.query(PushRegistration).delete()
        db.commit()
    finally:
        db.close()


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def hub():
    return RoomHub()


@pytest.fixture
def make_connection(hub):
    def factory(fail=False):
        conn = Connection(FakeWebSocket(fail=fail))
        hub.register(conn)
        return conn

    return factory


@pytest.fixture
def push_recorder(monkeypatch):
    recorder = PushRecorder()
    monkeypatch.setattr("chatrelay.relay.notifications.requests.post", recorder)
    return recorder
