"""Room-based publish/subscribe relay for chat messages and notifications."""

from __future__ import annotations

import collections
import json
import logging
import queue
import threading
from typing import Any

import redis

logger = logging.getLogger(__name__)

USER_ROOM_PREFIX = "user_"


def user_room(user_id: str) -> str:
    """Return the notification room of a user."""
    return f"{USER_ROOM_PREFIX}{user_id}"


def envelope(event: str, data: Any) -> dict[str, Any]:
    """Wrap an event name and its data in the payload published to a room."""
    return {"event": event, "data": data}


class Subscription:
    """Iterable over the payloads published to one topic.

    Iteration yields None whenever no payload arrived within the subscription
    timeout, which lets stream writers emit keep-alives.
    """

    def __iter__(self) -> Subscription:
        return self

    def __next__(self) -> dict[str, Any] | None:
        raise NotImplementedError

    def close(self) -> None:
        raise NotImplementedError


class Relay:
    """Interface shared by the relay backends."""

    def publish(self, topic: str, payload: dict[str, Any]) -> None:
        """Broadcast a payload to every current subscriber of a topic."""
        raise NotImplementedError

    def subscribe(self, topic: str, timeout: float | None = None) -> Subscription:
        """Start receiving payloads published to a topic."""
        raise NotImplementedError


class _QueueSubscription(Subscription):
    def __init__(self, relay: InMemoryRelay, topic: str, timeout: float | None):
        self._relay = relay
        self._topic = topic
        self._timeout = timeout
        self._queue: queue.Queue[dict[str, Any]] = queue.Queue()
        self._closed = False
        relay._register(topic, self._queue)

    def __next__(self) -> dict[str, Any] | None:
        if self._closed:
            raise StopIteration
        try:
            return self._queue.get(timeout=self._timeout)
        except queue.Empty:
            return None

    def close(self) -> None:
        if not self._closed:
            self._closed = True
            self._relay._unregister(self._topic, self._queue)


class InMemoryRelay(Relay):
    """Process-local relay used for tests and single-process development.

    The last ``history`` publications are kept in ``published`` for
    inspection; older ones are dropped.
    """

    def __init__(self, history: int = 100) -> None:
        self._lock = threading.Lock()
        self._subscribers: dict[str, list[queue.Queue]] = {}
        self.published: collections.deque[tuple[str, dict[str, Any]]] = (
            collections.deque(maxlen=history)
        )

    def publish(self, topic: str, payload: dict[str, Any]) -> None:
        with self._lock:
            self.published.append((topic, payload))
            subscribers = list(self._subscribers.get(topic, []))
        for subscriber in subscribers:
            subscriber.put(payload)

    def subscribe(self, topic: str, timeout: float | None = None) -> Subscription:
        return _QueueSubscription(self, topic, timeout)

    def subscriber_count(self, topic: str) -> int:
        with self._lock:
            return len(self._subscribers.get(topic, []))

    def _register(self, topic: str, subscriber: queue.Queue) -> None:
        with self._lock:
            self._subscribers.setdefault(topic, []).append(subscriber)

    def _unregister(self, topic: str, subscriber: queue.Queue) -> None:
        with self._lock:
            subscribers = self._subscribers.get(topic, [])
            if subscriber in subscribers:
                subscribers.remove(subscriber)
            if not subscribers:
                self._subscribers.pop(topic, None)


class _RedisSubscription(Subscription):
    def __init__(self, client: redis.Redis, channel: str, timeout: float | None):
        self._timeout = timeout
        self._pubsub = client.pubsub(ignore_subscribe_messages=True)
        self._pubsub.subscribe(channel)
        self._closed = False

    def __next__(self) -> dict[str, Any] | None:
        if self._closed:
            raise StopIteration
        message = self._pubsub.get_message(timeout=self._timeout or 0.0)
        if message is None:
            return None
        try:
            return json.loads(message["data"])
        except (TypeError, ValueError) as e:
            logger.warning(f"Dropping undecodable relay message: {e}")
            return None

    def close(self) -> None:
        if not self._closed:
            self._closed = True
            self._pubsub.close()


class RedisRelay(Relay):
    """Relay backed by Redis PUBLISH/SUBSCRIBE.

    Every topic maps to the channel ``<prefix><topic>`` so several deployments
    can share one Redis server.
    """

    def __init__(self, client: redis.Redis, prefix: str = "devconnect:") -> None:
        self._client = client
        self._prefix = prefix

    @classmethod
    def from_url(cls, url: str, prefix: str = "devconnect:") -> RedisRelay:
        """Create a relay connected to the Redis server at ``url``."""
        return cls(redis.Redis.from_url(url, decode_responses=True), prefix)

    def channel(self, topic: str) -> str:
        return f"{self._prefix}{topic}"

    def publish(self, topic: str, payload: dict[str, Any]) -> None:
        receivers = self._client.publish(
            self.channel(topic), json.dumps(payload, default=str)
        )
        logger.debug(
            f"Published {payload.get('event')} to {topic} ({receivers} receivers)"
        )

    def subscribe(self, topic: str, timeout: float | None = None) -> Subscription:
        return _RedisSubscription(self._client, self.channel(topic), timeout)


def create_relay(config: dict[str, Any]) -> Relay:
    """Build the relay selected by the ``RELAY_BACKEND`` setting."""
    backend = config.get("RELAY_BACKEND", "memory")
    if backend == "redis":
        return RedisRelay.from_url(
            config["REDIS_URL"], prefix=config.get("RELAY_CHANNEL_PREFIX", "")
        )
    if backend == "memory":
        return InMemoryRelay(history=config.get("RELAY_HISTORY_SIZE", 100))
    raise ValueError(f"Unknown RELAY_BACKEND: {backend}")
