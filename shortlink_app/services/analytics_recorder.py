"""
Analytics recorders using Strategy Pattern.

Recording is fire-and-forget relative to the redirect: ``record`` logs
failures and never raises, so a broken analytics backend cannot turn a
successful resolution into an error.
"""

import logging
from abc import ABC, abstractmethod

from shortlink_app.queue.models import AccessEvent
from shortlink_app.queue.strategies import QueueStrategy
from shortlink_app.storage.analytics_store import AnalyticsStore

logger = logging.getLogger(__name__)


class AnalyticsRecorder(ABC):
    """Abstract base class for analytics recorders"""

    @abstractmethod
    async def record(self, event: AccessEvent) -> bool:
        """
        Record one access event.

        Returns:
            True if the event was accepted, False if it was dropped
        """
        pass


class DirectAnalyticsRecorder(AnalyticsRecorder):
    """Writes the entry to the analytics store inside the request"""

    def __init__(self, store: AnalyticsStore):
        self.store = store

    async def record(self, event: AccessEvent) -> bool:
        try:
            await self.store.insert(event.to_entry())
            return True
        except Exception:
            logger.exception(f"Dropping analytics entry for url_id={event.url_id}")
            return False


class QueuedAnalyticsRecorder(AnalyticsRecorder):
    """
    Publishes the event for the access event worker.

    The redirect only pays for one queue append; the worker does the
    database write in batches.
    """

    def __init__(self, queue: QueueStrategy, queue_name: str):
        self.queue = queue
        self.queue_name = queue_name

    async def record(self, event: AccessEvent) -> bool:
        try:
            published = await self.queue.publish(self.queue_name, event)
        except Exception:
            logger.exception(f"Dropping access event for url_id={event.url_id}")
            return False

        if not published:
            logger.warning(f"Queue rejected access event for url_id={event.url_id}")
        return published


class NullAnalyticsRecorder(AnalyticsRecorder):
    """Null Object Pattern - records nothing"""

    async def record(self, event: AccessEvent) -> bool:
        return True
