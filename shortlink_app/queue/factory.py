"""
Factory for the access event queue.

The web process publishes access events and the worker process consumes
them, so a queue is only useful to the analytics recorder when both ends can
reach the same backend. Redis failures are reported instead of papered over
with a process-local queue nobody would ever drain.
"""

import logging
from enum import Enum
from typing import Optional

from .strategies import QueueStrategy, RedisStreamQueue, InMemoryQueue
from shortlink_app.config import settings
from shortlink_app.errors import QueueUnavailableError

logger = logging.getLogger(__name__)


class QueueBackend(Enum):
    """Available queue backends"""
    REDIS_STREAMS = "redis_streams"
    MEMORY = "memory"


class QueueFactory:
    """Builds the process-wide queue from settings (singleton)"""

    _instance: QueueStrategy = None

    @classmethod
    def create(cls, backend: QueueBackend) -> QueueStrategy:
        """
        Create or return the cached queue.

        Raises:
            QueueUnavailableError: Redis did not answer a ping
        """
        if cls._instance is not None:
            return cls._instance

        if backend == QueueBackend.REDIS_STREAMS:
            cls._instance = cls._connect_redis()
        elif backend == QueueBackend.MEMORY:
            cls._instance = InMemoryQueue()
            logger.info("In-memory queue initialized")
        else:
            raise ValueError(f"Unknown queue backend: {backend}")

        return cls._instance

    @classmethod
    def create_for_publishing(cls, backend: QueueBackend) -> Optional[QueueStrategy]:
        """
        Queue the analytics recorder may publish access events to.

        Returns None when no worker could consume what would be published:
        Redis is unreachable, or the backend is process-local. Callers then
        record analytics directly instead.
        """
        try:
            queue = cls.create(backend)
        except QueueUnavailableError as e:
            logger.warning(f"{e}; recording analytics directly")
            return None

        if not queue.shared:
            logger.warning(
                f"Queue backend '{backend.value}' is process-local; recording analytics directly"
            )
            return None
        return queue

    @staticmethod
    def _connect_redis() -> RedisStreamQueue:
        import redis

        try:
            redis_client = redis.from_url(
                settings.redis_url,
                decode_responses=False,
                socket_connect_timeout=2,
                socket_timeout=2,
            )
            redis_client.ping()
        except redis.RedisError as e:
            raise QueueUnavailableError(f"Redis at {settings.redis_url} is unavailable: {e}") from e

        logger.info("Redis queue initialized")
        return RedisStreamQueue(redis_client, settings.queue_consumer_group)

    @classmethod
    def clear_instance(cls):
        """Clear cached instance (for testing)"""
        cls._instance = None
