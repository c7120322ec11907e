import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List

from django.conf import settings
from django.core.cache import cache as default_cache
from django.utils import timezone
from django_redis import get_redis_connection

logger = logging.getLogger(__name__)


class Notifier(ABC):
    """Push channel keyed by user id. Delivery is best effort."""

    @abstractmethod
    def notify_user_session_closed(self, user_id: int, session_id: int) -> None:
        ...


class CacheNotifier(Notifier):
    """
    Keeps pending events per user in the cache.

    Connected clients poll ``GET /notifications/``, which drains the inbox.
    Failures are logged and swallowed so a cache outage never blocks
    finalizing a session.

    Read and write are separate cache calls, so concurrent pushes or a push
    during ``drain`` can lose an event. Only used without Redis (development,
    tests); with Redis ``RedisNotifier`` keeps the inbox consistent.
    """

    KEY_TEMPLATE = "notifications:user:{user_id}"
    MAX_EVENTS = 100

    def __init__(self, cache=None, ttl: int = None):
        self.cache = cache or default_cache
        self.ttl = ttl if ttl is not None else getattr(settings, "NOTIFICATION_TTL_SECONDS", 86400)

    def _key(self, user_id: int) -> str:
        return self.KEY_TEMPLATE.format(user_id=user_id)

    def push(self, user_id: int, event: Dict[str, Any]) -> bool:
        try:
            key = self._key(user_id)
            events = self.cache.get(key) or []
            events.append(event)
            self.cache.set(key, events[-self.MAX_EVENTS:], self.ttl)
        except Exception as e:
            logger.warning(f"[Notifier] Could not deliver {event.get('type')} to user {user_id}: {e}")
            return False
        return True

    def notify_user_session_closed(self, user_id: int, session_id: int) -> None:
        delivered = self.push(
            user_id,
            {
                "type": "session_closed",
                "session_id": session_id,
                "at": timezone.now().isoformat(),
            },
        )
        if delivered:
            logger.info(f"[Notifier] User {user_id} notified about closed session {session_id}")

    def drain(self, user_id: int) -> List[Dict[str, Any]]:
        key = self._key(user_id)
        events = self.cache.get(key) or []
        if events:
            self.cache.delete(key)
        return events


class RedisNotifier(CacheNotifier):
    """
    Inbox als Redis-Liste.

    Push (RPUSH, LTRIM, EXPIRE) and drain (LRANGE, DEL) each run as one
    MULTI/EXEC transaction, so no event is lost between reading and clearing
    the inbox.
    """

    def __init__(self, connection=None, ttl: int = None, alias: str = "default"):
        super().__init__(ttl=ttl)
        self.connection = connection if connection is not None else get_redis_connection(alias)

    def push(self, user_id: int, event: Dict[str, Any]) -> bool:
        key = self._key(user_id)
        try:
            pipe = self.connection.pipeline(transaction=True)
            pipe.rpush(key, json.dumps(event))
            pipe.ltrim(key, -self.MAX_EVENTS, -1)
            pipe.expire(key, self.ttl)
            pipe.execute()
        except Exception as e:
            logger.warning(f"[Notifier] Could not deliver {event.get('type')} to user {user_id}: {e}")
            return False
        return True

    def drain(self, user_id: int) -> List[Dict[str, Any]]:
        key = self._key(user_id)
        pipe = self.connection.pipeline(transaction=True)
        pipe.lrange(key, 0, -1)
        pipe.delete(key)
        raw_events, _ = pipe.execute()
        return [json.loads(raw) for raw in raw_events]


def get_notifier() -> CacheNotifier:
    """Returns the Redis inbox when the default cache is django-redis, else the plain cache inbox."""
    backend = settings.CACHES.get("default", {}).get("BACKEND", "")
    if backend.startswith("django_redis."):
        return RedisNotifier()
    return CacheNotifier()
