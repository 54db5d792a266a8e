"""
Resolution engine: short code → redirect target.

Flow:
1. Look up the mapping by short code (no cache; every call hits the store)
2. Expire it if more than the TTL has passed since its last modification
3. Record an access event for non-anonymous mappings (best effort)
4. Hand back the long URL and redirect kind

Not-found and expired are distinct outcomes so callers can tell a visitor
that a link died instead of claiming it never existed.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Callable, Optional

from shortlink_app.errors import ExpiredError, NotFoundError
from shortlink_app.models.url import URL, RedirectKind, utcnow
from shortlink_app.queue.models import AccessEvent
from shortlink_app.services.analytics_recorder import AnalyticsRecorder
from shortlink_app.services.owner import ANONYMOUS_OWNER_ID
from shortlink_app.storage.url_store import URLStore

logger = logging.getLogger(__name__)


class ResolutionStatus(Enum):
    LIVE = "live"
    NOT_FOUND = "not_found"
    EXPIRED = "expired"


@dataclass(frozen=True)
class Resolution:
    status: ResolutionStatus
    short_code: str
    long_form: Optional[str] = None
    redirect_kind: Optional[RedirectKind] = None

    @property
    def is_live(self) -> bool:
        return self.status is ResolutionStatus.LIVE

    def raise_for_status(self) -> "Resolution":
        """Turn a dead outcome into NotFoundError / ExpiredError"""
        if self.status is ResolutionStatus.NOT_FOUND:
            raise NotFoundError(f"No short URL with code '{self.short_code}'")
        if self.status is ResolutionStatus.EXPIRED:
            raise ExpiredError(self.short_code)
        return self


class ResolutionEngine:
    def __init__(
        self,
        store: URLStore,
        recorder: AnalyticsRecorder,
        ttl: timedelta,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.store = store
        self.recorder = recorder
        self.ttl = ttl
        self.clock = clock

    def is_expired(self, url: URL, now: datetime) -> bool:
        # A link exactly ttl old is still live
        return now > url.expires_at(self.ttl)

    async def resolve(
        self,
        short_code: str,
        ip: Optional[str] = None,
        user_agent: Optional[str] = None,
        referrer: Optional[str] = None,
    ) -> Resolution:
        try:
            url = await self.store.get_by_short_code(short_code)
        except NotFoundError:
            return Resolution(ResolutionStatus.NOT_FOUND, short_code)

        if not url.long_form:
            return Resolution(ResolutionStatus.NOT_FOUND, short_code)

        now = self.clock()
        if self.is_expired(url, now):
            logger.info(f"Short URL '{short_code}' expired at {url.expires_at(self.ttl).isoformat()}")
            return Resolution(ResolutionStatus.EXPIRED, short_code)

        # Anonymous links are not tracked
        if url.owner_id != ANONYMOUS_OWNER_ID:
            await self.recorder.record(
                AccessEvent(
                    url_id=url.id,
                    timestamp=now,
                    ip=ip,
                    user_agent=user_agent,
                    referrer=referrer,
                )
            )

        return Resolution(
            ResolutionStatus.LIVE,
            short_code,
            long_form=url.long_form,
            redirect_kind=url.redirect_kind,
        )
