"""
Message queue module for access analytics.
Implements Strategy Pattern for flexible queue backends.
"""

from .strategies import QueueStrategy, RedisStreamQueue, InMemoryQueue
from .factory import QueueFactory, QueueBackend
from .models import AccessEvent

__all__ = [
    "QueueStrategy",
    "RedisStreamQueue",
    "InMemoryQueue",
    "QueueFactory",
    "QueueBackend",
    "AccessEvent",
]
