"""
Access Event Worker

Drains access events published by the queued analytics recorder and
appends them to the analytics store in batches.

Architecture:
- Consumes messages from queue in batches
- One analytics write (single commit) per batch
- Acknowledges only after the write succeeded, so failed batches stay
  pending in Redis and are retried
"""

import asyncio
import logging
import signal
import sys
from typing import Callable, List

from sqlalchemy.orm import Session

from shortlink_app.config import settings
from shortlink_app.database.connection import SessionLocal
from shortlink_app.errors import QueueUnavailableError
from shortlink_app.logging_config import setup_logging
from shortlink_app.queue.models import AccessEvent
from shortlink_app.queue.strategies import QueueStrategy
from shortlink_app.storage.analytics_store import AnalyticsStore, SQLAlchemyAnalyticsStore

logger = logging.getLogger(__name__)


def _sql_store_factory(db: Session) -> AnalyticsStore:
    return SQLAlchemyAnalyticsStore(db)


class AccessEventWorker:
    """Batch consumer moving access events from the queue into analytics storage"""

    def __init__(
        self,
        queue: QueueStrategy,
        db_session_factory: Callable[[], Session] = SessionLocal,
        store_factory: Callable[[Session], AnalyticsStore] = _sql_store_factory,
        queue_name: str = None,
        batch_size: int = None,
    ):
        """
        Args:
            queue: Queue strategy for consuming messages
            db_session_factory: Factory for creating database sessions
            store_factory: Builds the analytics store for a session
            queue_name: Queue to drain (defaults to settings)
            batch_size: Max events per batch (defaults to settings)
        """
        self.queue = queue
        self.db_session_factory = db_session_factory
        self.store_factory = store_factory
        self.queue_name = queue_name or settings.queue_name
        self.batch_size = settings.queue_batch_size if batch_size is None else batch_size
        self.running = False
        self.processed_count = 0

    async def process_batch(self, block_time: int = 1000) -> int:
        """
        Consume and store one batch.

        Returns:
            Number of events stored (0 when the queue was empty)
        """
        messages = await self.queue.consume(
            self.queue_name,
            batch_size=self.batch_size,
            block_time=block_time,
        )
        if not messages:
            return 0

        await self._store(messages)

        message_ids = [msg.message_id for msg in messages if msg.message_id]
        if message_ids:
            await self.queue.ack(self.queue_name, message_ids)

        self.processed_count += len(messages)
        logger.info(f"Stored {len(messages)} access events. Total: {self.processed_count}")
        return len(messages)

    async def _store(self, messages: List[AccessEvent]):
        db = self.db_session_factory()
        try:
            store = self.store_factory(db)
            await store.insert_many([msg.to_entry() for msg in messages])
        finally:
            db.close()

    async def start(self):
        """Run until stop() or a termination signal"""
        self.running = True
        logger.info(f"Access event worker started (queue={self.queue_name}, batch={self.batch_size})")

        signal.signal(signal.SIGINT, self._signal_handler)
        signal.signal(signal.SIGTERM, self._signal_handler)

        while self.running:
            try:
                await self.process_batch()
            except asyncio.CancelledError:
                logger.info("Worker task cancelled.")
                break
            except Exception:
                # Unacknowledged messages stay pending for the next attempt
                logger.exception("Batch processing failed")
                await asyncio.sleep(1)

        logger.info("Access event worker stopped")

    def _signal_handler(self, signum, frame):
        logger.info(f"Received signal {signum}. Shutting down gracefully...")
        self.stop()

    def stop(self):
        self.running = False


async def main():
    """
    Main entry point for the access event worker.

    Usage:
        python -m shortlink_app.hit_processor.hit_worker
    """
    setup_logging(settings.log_level)
    logger.info(
        f"Environment: {settings.environment}, queue backend: {settings.queue_backend}"
    )

    from shortlink_app.queue.factory import QueueFactory, QueueBackend
    try:
        queue = QueueFactory.create(QueueBackend(settings.queue_backend))
    except QueueUnavailableError as e:
        logger.error(f"{e}; nothing to consume")
        sys.exit(1)

    worker = AccessEventWorker(queue=queue)

    try:
        await worker.start()
    except Exception:
        logger.exception("Fatal error")
        sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())
