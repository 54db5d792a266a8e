"""
URL record stores using Strategy Pattern.

The store is the single source of truth for short code uniqueness:
- SQLAlchemyURLStore relies on the unique index on urls.short_code
- InMemoryURLStore checks its dict (development and tests)

Both raise the same errors from shortlink_app.errors, so the collision
resolver and the services never depend on a particular backend.
"""

import itertools
import logging
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Dict, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from shortlink_app.errors import DuplicateCodeError, NotFoundError, StoreError
from shortlink_app.models.url import URL, RedirectKind

logger = logging.getLogger(__name__)

_COLUMNS = ("long_form", "short_code", "redirect_kind", "owner_id", "created_at", "modified_at")


class URLStore(ABC):
    """
    Abstract base class for URL record stores.

    All methods are async for interface consistency with the other
    strategies (queue, analytics); the SQL backend runs sync queries inside.
    """

    @abstractmethod
    async def insert(self, url: URL) -> URL:
        """
        Persist a new record.

        Raises:
            DuplicateCodeError: short_code is already taken
            StoreError: any other backend failure
        """
        pass

    @abstractmethod
    async def get_by_short_code(self, short_code: str) -> URL:
        """
        Raises:
            NotFoundError: no record has this short code
        """
        pass

    @abstractmethod
    async def get_by_long_url_owner_kind(
        self,
        long_form: str,
        redirect_kind: RedirectKind,
        owner_id: int
    ) -> URL:
        """
        Find an owner's existing mapping of a long URL with the given redirect kind.

        Raises:
            NotFoundError: the owner has no such mapping
        """
        pass

    @abstractmethod
    async def update(self, url: URL) -> URL:
        """
        Persist changes to an existing record.

        Raises:
            DuplicateCodeError: an edit renamed the record onto a taken code
            StoreError: any other backend failure
        """
        pass

    @abstractmethod
    async def delete_by_short_code(self, short_code: str) -> bool:
        """Delete a record. Returns False if nothing matched."""
        pass


class SQLAlchemyURLStore(URLStore):
    """URL store backed by the main SQLAlchemy database"""

    def __init__(self, db: Session):
        self.db = db

    @contextmanager
    def _translate_errors(self, short_code: Optional[str] = None):
        """Roll back and map driver errors onto the shortlink error taxonomy"""
        try:
            yield
        except IntegrityError as e:
            self.db.rollback()
            raise DuplicateCodeError(short_code) from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"URL store failure: {e}")
            raise StoreError(str(e)) from e

    async def insert(self, url: URL) -> URL:
        with self._translate_errors(url.short_code):
            self.db.add(url)
            self.db.commit()
            self.db.refresh(url)
        return url

    async def get_by_short_code(self, short_code: str) -> URL:
        with self._translate_errors():
            url = self.db.query(URL).filter(URL.short_code == short_code).first()

        if url is None:
            raise NotFoundError(f"No short URL with code '{short_code}'")
        return url

    async def get_by_long_url_owner_kind(
        self,
        long_form: str,
        redirect_kind: RedirectKind,
        owner_id: int
    ) -> URL:
        with self._translate_errors():
            url = (
                self.db.query(URL)
                .filter(
                    URL.long_form == long_form,
                    URL.redirect_kind == redirect_kind,
                    URL.owner_id == owner_id,
                )
                .order_by(URL.modified_at.desc())
                .first()
            )

        if url is None:
            raise NotFoundError(f"No {redirect_kind.value} short URL for {long_form}")
        return url

    async def update(self, url: URL) -> URL:
        with self._translate_errors(url.short_code):
            self.db.add(url)
            self.db.commit()
            self.db.refresh(url)
        return url

    async def delete_by_short_code(self, short_code: str) -> bool:
        # Analytics rows go with it through ON DELETE CASCADE
        with self._translate_errors():
            deleted = (
                self.db.query(URL)
                .filter(URL.short_code == short_code)
                .delete(synchronize_session=False)
            )
            self.db.commit()
        return bool(deleted)


class InMemoryURLStore(URLStore):
    """
    In-memory URL store keyed by short code.

    Pros:
    - No database needed (unit tests, demos)
    - Lets tests pre-seed colliding codes deterministically

    A rejected update puts the record back to its last stored values, the
    way a session rollback does for the SQL store.

    Cons:
    - Not shared between processes, lost on restart
    """

    def __init__(self):
        self._records: Dict[str, URL] = {}
        # Last accepted column values per id, restored when an update is rejected
        self._saved: Dict[int, dict] = {}
        self._ids = itertools.count(1)

    def _save(self, url: URL):
        self._saved[url.id] = {column: getattr(url, column) for column in _COLUMNS}

    def _restore(self, url: URL):
        for column, value in self._saved.get(url.id, {}).items():
            setattr(url, column, value)

    async def insert(self, url: URL) -> URL:
        if url.short_code in self._records:
            raise DuplicateCodeError(url.short_code)

        if url.id is None:
            url.id = next(self._ids)
        self._records[url.short_code] = url
        self._save(url)
        return url

    async def get_by_short_code(self, short_code: str) -> URL:
        url = self._records.get(short_code)
        if url is None:
            raise NotFoundError(f"No short URL with code '{short_code}'")
        return url

    async def get_by_long_url_owner_kind(
        self,
        long_form: str,
        redirect_kind: RedirectKind,
        owner_id: int
    ) -> URL:
        matches = [
            url for url in self._records.values()
            if url.long_form == long_form
            and url.redirect_kind == redirect_kind
            and url.owner_id == owner_id
        ]
        if not matches:
            raise NotFoundError(f"No {redirect_kind.value} short URL for {long_form}")
        return max(matches, key=lambda url: url.modified_at)

    async def update(self, url: URL) -> URL:
        holder = self._records.get(url.short_code)
        if holder is not None and holder.id != url.id:
            rejected = url.short_code
            self._restore(url)
            raise DuplicateCodeError(rejected)

        # Drop the old key if the edit renamed the record
        for code, record in list(self._records.items()):
            if record.id == url.id and code != url.short_code:
                del self._records[code]

        self._records[url.short_code] = url
        self._save(url)
        return url

    async def delete_by_short_code(self, short_code: str) -> bool:
        url = self._records.pop(short_code, None)
        if url is None:
            return False
        self._saved.pop(url.id, None)
        return True

    def __len__(self) -> int:
        return len(self._records)
