"""
Queue strategies using Strategy Pattern.
Allows switching between different queue backends (Redis Streams, In-Memory).
"""

import logging
import socket
from abc import ABC, abstractmethod
from collections import deque
from typing import Dict, List

from .models import AccessEvent

logger = logging.getLogger(__name__)


class QueueStrategy(ABC):
    """
    Abstract base class for queue strategies.

    Carries access events from the redirect path to the analytics worker,
    so a slow analytics store never delays a redirect.

    ``shared`` tells whether a consumer in another process (the access event
    worker) can read what this instance publishes.
    """

    shared: bool = False

    @abstractmethod
    async def publish(self, queue_name: str, message: AccessEvent) -> bool:
        """
        Publish a message to the queue.

        Returns:
            True if successful, False otherwise
        """
        pass

    @abstractmethod
    async def consume(
        self,
        queue_name: str,
        batch_size: int = 1,
        block_time: int = 1000
    ) -> List[AccessEvent]:
        """
        Consume messages from the queue.

        Args:
            queue_name: Name of the queue
            batch_size: Maximum number of messages to retrieve
            block_time: Time to wait for messages (milliseconds)
        """
        pass

    @abstractmethod
    async def ack(self, queue_name: str, message_ids: List[str]) -> bool:
        """Acknowledge messages (mark as processed)"""
        pass

    @abstractmethod
    async def get_queue_length(self, queue_name: str) -> int:
        """Get the number of pending messages in queue"""
        pass


class RedisStreamQueue(QueueStrategy):
    """
    Redis Streams implementation for message queue.

    How it works:
    1. Producer publishes messages using XADD
    2. Consumer reads messages using XREADGROUP
    3. Consumer acknowledges messages using XACK
    4. Unacknowledged messages stay pending and can be reclaimed
    """

    shared = True

    def __init__(self, redis_client, consumer_group: str = "analytics_workers"):
        self.redis = redis_client
        self.consumer_group = consumer_group
        self.consumer_name = f"worker-{socket.gethostname()}-{id(self)}"
        self._initialized_streams = set()

    def _ensure_stream_exists(self, queue_name: str):
        """Create the stream and consumer group on first use"""
        if queue_name in self._initialized_streams:
            return

        try:
            self.redis.xgroup_create(
                name=queue_name,
                groupname=self.consumer_group,
                id='0',
                mkstream=True
            )
            logger.info(f"Created Redis stream: {queue_name}")
        except Exception as e:
            # Group already exists
            if "BUSYGROUP" not in str(e):
                logger.warning(f"Stream creation warning: {e}")

        self._initialized_streams.add(queue_name)

    async def publish(self, queue_name: str, message: AccessEvent) -> bool:
        try:
            self._ensure_stream_exists(queue_name)
            self.redis.xadd(queue_name, {'data': message.model_dump_json()})
            return True
        except Exception as e:
            logger.error(f"Redis publish error: {e}")
            return False

    async def consume(
        self,
        queue_name: str,
        batch_size: int = 1,
        block_time: int = 1000
    ) -> List[AccessEvent]:
        try:
            self._ensure_stream_exists(queue_name)

            # '>' means "messages never delivered to other consumers"
            messages = self.redis.xreadgroup(
                groupname=self.consumer_group,
                consumername=self.consumer_name,
                streams={queue_name: '>'},
                count=batch_size,
                block=block_time
            )
        except Exception as e:
            logger.error(f"Redis consume error: {e}")
            return []

        events = []
        for _, stream_messages in messages or []:
            for message_id, message_data in stream_messages:
                try:
                    event = AccessEvent.model_validate_json(message_data[b'data'])
                    event.message_id = message_id.decode('utf-8')
                    events.append(event)
                except Exception as e:
                    logger.warning(f"Failed to parse message {message_id}: {e}")

        return events

    async def ack(self, queue_name: str, message_ids: List[str]) -> bool:
        if not message_ids:
            return True

        try:
            self.redis.xack(queue_name, self.consumer_group, *message_ids)
            return True
        except Exception as e:
            logger.error(f"Redis ack error: {e}")
            return False

    async def get_queue_length(self, queue_name: str) -> int:
        try:
            return self.redis.xlen(queue_name)
        except Exception:
            return 0


class InMemoryQueue(QueueStrategy):
    """
    In-memory queue implementation using Python deque.

    Not persistent and not shared between processes. The worker and the
    recorder only meet on it when they live in the same process (tests).
    """

    def __init__(self):
        self._queues: Dict[str, deque] = {}

    def _get_queue(self, queue_name: str) -> deque:
        return self._queues.setdefault(queue_name, deque())

    async def publish(self, queue_name: str, message: AccessEvent) -> bool:
        self._get_queue(queue_name).append(message)
        return True

    async def consume(
        self,
        queue_name: str,
        batch_size: int = 1,
        block_time: int = 1000
    ) -> List[AccessEvent]:
        """block_time is ignored (no blocking in this simple implementation)"""
        queue = self._get_queue(queue_name)
        return [queue.popleft() for _ in range(min(batch_size, len(queue)))]

    async def ack(self, queue_name: str, message_ids: List[str]) -> bool:
        # Messages are removed on consume
        return True

    async def get_queue_length(self, queue_name: str) -> int:
        return len(self._get_queue(queue_name))
