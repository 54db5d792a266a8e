"""
Analytics stores using Strategy Pattern.

Analytics entries are append-only: the only mutation besides insert is
removing every entry of a mapping when that mapping is deleted.
"""

import itertools
import logging
from abc import ABC, abstractmethod
from typing import Dict, List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from shortlink_app.errors import StoreError
from shortlink_app.models.analytics import AnalyticsEntry

logger = logging.getLogger(__name__)


class AnalyticsStore(ABC):
    """Abstract base class for analytics stores"""

    @abstractmethod
    async def insert(self, entry: AnalyticsEntry) -> AnalyticsEntry:
        """
        Append one entry.

        Raises:
            StoreError: backend failure
        """
        pass

    async def insert_many(self, entries: List[AnalyticsEntry]) -> int:
        """Append a batch of entries (used by the access event worker)"""
        for entry in entries:
            await self.insert(entry)
        return len(entries)

    @abstractmethod
    async def get_by_url_id(self, url_id: int) -> List[AnalyticsEntry]:
        """All entries of one mapping, oldest first"""
        pass

    @abstractmethod
    async def delete_by_url_id(self, url_id: int) -> int:
        """Remove all entries of one mapping. Returns number removed."""
        pass


class SQLAlchemyAnalyticsStore(AnalyticsStore):
    """Analytics store in the main database (analytics table)"""

    def __init__(self, db: Session):
        self.db = db

    async def insert(self, entry: AnalyticsEntry) -> AnalyticsEntry:
        try:
            self.db.add(entry)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreError(str(e)) from e
        return entry

    async def insert_many(self, entries: List[AnalyticsEntry]) -> int:
        # Single commit for the whole batch
        try:
            self.db.add_all(entries)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreError(str(e)) from e
        return len(entries)

    async def get_by_url_id(self, url_id: int) -> List[AnalyticsEntry]:
        try:
            return (
                self.db.query(AnalyticsEntry)
                .filter(AnalyticsEntry.url_id == url_id)
                .order_by(AnalyticsEntry.timestamp, AnalyticsEntry.id)
                .all()
            )
        except SQLAlchemyError as e:
            raise StoreError(str(e)) from e

    async def delete_by_url_id(self, url_id: int) -> int:
        try:
            deleted = (
                self.db.query(AnalyticsEntry)
                .filter(AnalyticsEntry.url_id == url_id)
                .delete(synchronize_session=False)
            )
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreError(str(e)) from e
        return deleted


class InMemoryAnalyticsStore(AnalyticsStore):
    """In-memory analytics store for development and tests"""

    def __init__(self):
        self._entries: Dict[int, List[AnalyticsEntry]] = {}
        self._ids = itertools.count(1)

    async def insert(self, entry: AnalyticsEntry) -> AnalyticsEntry:
        if entry.id is None:
            entry.id = next(self._ids)
        self._entries.setdefault(entry.url_id, []).append(entry)
        return entry

    async def get_by_url_id(self, url_id: int) -> List[AnalyticsEntry]:
        return list(self._entries.get(url_id, []))

    async def delete_by_url_id(self, url_id: int) -> int:
        return len(self._entries.pop(url_id, []))

    def __len__(self) -> int:
        return sum(len(entries) for entries in self._entries.values())
