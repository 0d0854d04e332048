from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from threading import Lock
from typing import Any, List, Protocol

from scan2eat.core.config import BROADCAST_SEND_TIMEOUT_SECONDS

EVENT_CONNECTED = "connected"
EVENT_ORDER_CREATED = "order:new"
EVENT_ORDER_UPDATED = "order:update"
EVENT_MENU_CHANGED = "menu:update"
EVENT_PAYMENT_UPDATED = "paymentUpdate"


class Subscriber(Protocol):
    async def send_json(self, data: Any) -> None: ...


class SubscriberRegistry(ABC):
    @abstractmethod
    def add(self, subscriber: Subscriber) -> None:
        """Registers a connected subscriber."""

    @abstractmethod
    def remove(self, subscriber: Subscriber) -> None:
        """Forgets a subscriber; unknown subscribers are ignored."""

    @abstractmethod
    def snapshot(self) -> List[Subscriber]:
        """Subscribers connected right now."""


class InMemorySubscriberRegistry(SubscriberRegistry):
    """Process-local set of connections, lost on restart."""

    def __init__(self) -> None:
        self._subscribers: list[Subscriber] = []
        self._lock = Lock()

    def add(self, subscriber: Subscriber) -> None:
        with self._lock:
            if subscriber not in self._subscribers:
                self._subscribers.append(subscriber)

    def remove(self, subscriber: Subscriber) -> None:
        with self._lock:
            if subscriber in self._subscribers:
                self._subscribers.remove(subscriber)

    def snapshot(self) -> List[Subscriber]:
        with self._lock:
            return list(self._subscribers)

    def __len__(self) -> int:
        with self._lock:
            return len(self._subscribers)


def build_message(event_name: str, payload: Any = None) -> dict[str, Any]:
    return {"event": event_name, "data": payload}


class LiveUpdateBroadcaster:
    """Best-effort fan-out of events to the subscribers connected at publish time.

    Nothing is queued or retried. A subscriber that fails or does not accept
    the message within ``send_timeout`` seconds is dropped from the registry.
    """

    def __init__(
        self,
        registry: SubscriberRegistry | None = None,
        *,
        send_timeout: float = BROADCAST_SEND_TIMEOUT_SECONDS,
    ) -> None:
        self.registry = registry or InMemorySubscriberRegistry()
        self.send_timeout = send_timeout
        self._logger = logging.getLogger(__name__)

    def connect(self, subscriber: Subscriber) -> None:
        self.registry.add(subscriber)

    def disconnect(self, subscriber: Subscriber) -> None:
        self.registry.remove(subscriber)

    async def publish(self, event_name: str, payload: Any = None) -> int:
        """Pushes the event and returns how many subscribers accepted it."""
        subscribers = self.registry.snapshot()
        if not subscribers:
            self._logger.debug("LiveUpdateBroadcaster: no subscribers for %s", event_name)
            return 0

        message = build_message(event_name, payload)
        results = await asyncio.gather(
            *(self._deliver(subscriber, message) for subscriber in subscribers)
        )
        delivered = sum(1 for ok in results if ok)
        self._logger.info(
            "event published",
            extra={"event": event_name, "subscribers": delivered},
        )
        return delivered

    async def _deliver(self, subscriber: Subscriber, message: dict[str, Any]) -> bool:
        try:
            await asyncio.wait_for(subscriber.send_json(message), timeout=self.send_timeout)
            return True
        except Exception:
            self._logger.warning(
                "LiveUpdateBroadcaster: dropping subscriber after failed %s",
                message["event"],
                exc_info=True,
            )
            self.registry.remove(subscriber)
            return False


broadcaster = LiveUpdateBroadcaster()
