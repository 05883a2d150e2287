import asyncio
import logging
from typing import Optional, Set

import requests

from chatrelay.api.push import services as push_services
from chatrelay.config import settings
from chatrelay.db.session import run_db

logger = logging.getLogger(__name__)


class PushDeliveryError(Exception):
    """The push service answered with an error ticket."""


def send_push(token: str, body: str, session_id: Optional[str] = None) -> dict:
    """Single delivery attempt against the Expo push API. Returns the push ticket."""
    payload = {
        "to": token,
        "title": settings.PUSH_TITLE,
        "body": body,
        "sound": settings.PUSH_SOUND,
        "data": {"sessionId": session_id},
    }
    response = requests.post(
        settings.PUSH_API_URL,
        json=payload,
        headers={"Accept": "application/json"},
        timeout=settings.PUSH_TIMEOUT_SECONDS,
    )
    response.raise_for_status()

    ticket = response.json().get("data") or {}
    if isinstance(ticket, list):
        ticket = ticket[0] if ticket else {}
    if ticket.get("status") == "error":
        details = ticket.get("details") or {}
        raise PushDeliveryError(
            f"{ticket.get('message', 'push rejected')} ({details.get('error', 'unknown')})"
        )
    return ticket


class NotificationDispatcher:
    """Fire-and-forget push alerts for admin replies.

    Each notification runs as its own task. Tasks are only tracked so that
    shutdown can wait for the ones still in flight.
    """

    def __init__(self):
        self._tasks: Set[asyncio.Task] = set()

    def schedule(self, session_id: str, message_text: str) -> asyncio.Task:
        task = asyncio.create_task(self.notify(session_id, message_text))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def notify(self, session_id: str, message_text: str) -> bool:
        """Push the message to the session's device, if it registered one.

        Returns whether a delivery was accepted. Every failure is logged
        here and goes no further.
        """
        try:
            token = await run_db(push_services.get_push_token, session_id)
        except Exception as e:
            logger.warning("Push token lookup failed for session %s: %s", session_id, e)
            return False

        if not token:
            logger.debug("No push token for session %s", session_id)
            return False

        body = message_text or settings.PUSH_IMAGE_BODY
        try:
            await asyncio.to_thread(send_push, token, body, session_id)
        except Exception as e:
            logger.warning("Push notification failed for session %s: %s", session_id, e)
            return False

        logger.info("Push notification sent for session %s", session_id)
        return True

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def drain(self, timeout: Optional[float] = None):
        """Wait for in-flight notifications, up to ``timeout`` seconds."""
        if not self._tasks:
            return
        done, pending = await asyncio.wait(set(self._tasks), timeout=timeout)
        self._tasks.difference_update(done)
        if pending:
            logger.warning("Abandoning %d unfinished push notifications", len(pending))
