"""
Bounded insert-with-regeneration loop.

Short code uniqueness is enforced by the store, across every process that
shares it, so there is no locking here: a DuplicateCodeError from the store
simply means "try another candidate".
"""

import logging
from datetime import datetime
from typing import Callable, Optional

from shortlink_app.errors import DuplicateCodeError, MaxCollisionError
from shortlink_app.models.url import URL, RedirectKind, utcnow
from shortlink_app.services.short_code_strategies import ShortCodeStrategy
from shortlink_app.storage.url_store import URLStore

logger = logging.getLogger(__name__)


async def create_with_retry(
    store: URLStore,
    generator: ShortCodeStrategy,
    long_form: str,
    short_code: Optional[str],
    redirect_kind: RedirectKind,
    owner_id: int,
    max_attempts: int,
    clock: Callable[[], datetime] = utcnow,
) -> URL:
    """
    Insert a new mapping, regenerating the code after each collision.

    A caller-chosen ``short_code`` gets exactly one attempt and is never
    replaced by a generated one.

    Raises:
        MaxCollisionError: every attempt collided
        StoreError: any other store failure, surfaced on the first occurrence
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    explicit = bool(short_code)
    attempts = 1 if explicit else max_attempts

    for attempt in range(1, attempts + 1):
        candidate = short_code if explicit else generator.generate()
        now = clock()
        url = URL(
            long_form=long_form,
            short_code=candidate,
            redirect_kind=redirect_kind,
            owner_id=owner_id,
            created_at=now,
            modified_at=now,
        )

        try:
            return await store.insert(url)
        except DuplicateCodeError:
            logger.debug(f"Short code collision on '{candidate}' (attempt {attempt}/{attempts})")

    logger.error(f"Giving up on {long_form} after {attempts} colliding attempt(s)")
    raise MaxCollisionError(attempts)
