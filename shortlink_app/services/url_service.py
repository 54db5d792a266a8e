import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, List, Optional

from shortlink_app.config import settings
from shortlink_app.errors import NotFoundError
from shortlink_app.models.analytics import AnalyticsEntry
from shortlink_app.models.url import URL, RedirectKind, utcnow
from shortlink_app.services.analytics_recorder import AnalyticsRecorder, DirectAnalyticsRecorder
from shortlink_app.services.collision_resolver import create_with_retry
from shortlink_app.services.owner import Owner
from shortlink_app.services.resolution import Resolution, ResolutionEngine
from shortlink_app.services.short_code_factory import ShortCodeFactory
from shortlink_app.services.short_code_strategies import ShortCodeStrategy
from shortlink_app.storage.analytics_store import AnalyticsStore
from shortlink_app.storage.url_store import URLStore

logger = logging.getLogger(__name__)


@dataclass
class CreationResult:
    url: URL
    created: bool  # False when an existing mapping was reused


class URLService:
    """
    URL Service with dependency injection for stores and the analytics recorder.

    Exposes the whole core surface: create (with dedup and collision
    retry), resolve, edit, delete, plus read-one and analytics listing.
    Everything HTTP-specific stays in the routers.
    """

    def __init__(
        self,
        url_store: URLStore,
        analytics_store: AnalyticsStore,
        recorder: Optional[AnalyticsRecorder] = None,
        short_code_strategy: Optional[ShortCodeStrategy] = None,
        max_attempts: Optional[int] = None,
        ttl: Optional[timedelta] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        """
        Args:
            url_store: Store for URL mappings
            analytics_store: Store for access analytics
            recorder: Analytics recorder (defaults to direct writes to analytics_store)
            short_code_strategy: Code generator (defaults to the configured strategy)
            max_attempts: Insert attempts for generated codes
            ttl: Time after the last modification at which a link expires
            clock: Source of "now" (tests pin it)
        """
        self.url_store = url_store
        self.analytics_store = analytics_store
        self.recorder = recorder or DirectAnalyticsRecorder(analytics_store)
        self.short_code_strategy = short_code_strategy or ShortCodeFactory.create_strategy()
        self.max_attempts = settings.max_insert_attempts if max_attempts is None else max_attempts
        self.ttl = timedelta(seconds=settings.link_ttl_seconds) if ttl is None else ttl
        self.clock = clock
        self.engine = ResolutionEngine(url_store, self.recorder, self.ttl, clock=clock)

    async def create_short_url(
        self,
        long_url: str,
        owner: Owner,
        short_code: Optional[str] = None,
        redirect: Optional[RedirectKind] = None,
    ) -> CreationResult:
        """
        Create a short URL, or reuse the owner's existing one.

        Policy:
        - Anonymous owners cannot alias or pick a redirect kind; all their
          submissions of a URL collapse onto one permanent code
        - Without a custom code, an existing (long URL, kind, owner) mapping
          is reused and its expiry clock restarted
        - A custom code gets one insert attempt, generated codes get
          max_attempts
        """
        if not owner.can_choose_code:
            short_code, redirect = None, None

        redirect_kind = redirect or RedirectKind.PERMANENT

        if not short_code:
            existing = await self._find_reusable(long_url, redirect_kind, owner)
            if existing is not None:
                return CreationResult(url=existing, created=False)

        url = await create_with_retry(
            self.url_store,
            self.short_code_strategy,
            long_form=long_url,
            short_code=short_code,
            redirect_kind=redirect_kind,
            owner_id=owner.id,
            max_attempts=self.max_attempts,
            clock=self.clock,
        )
        logger.info(f"Created short URL '{url.short_code}' for owner {owner.id}")
        return CreationResult(url=url, created=True)

    async def _find_reusable(
        self,
        long_url: str,
        redirect_kind: RedirectKind,
        owner: Owner,
    ) -> Optional[URL]:
        try:
            existing = await self.url_store.get_by_long_url_owner_kind(
                long_url, redirect_kind, owner.id
            )
        except NotFoundError:
            return None

        existing.touch(self.clock())
        return await self.url_store.update(existing)

    async def get_url_by_short_code(self, short_code: str) -> URL:
        """
        Raises:
            NotFoundError: no mapping has this code
        """
        return await self.url_store.get_by_short_code(short_code)

    async def resolve(
        self,
        short_code: str,
        ip: Optional[str] = None,
        user_agent: Optional[str] = None,
        referrer: Optional[str] = None,
    ) -> Resolution:
        return await self.engine.resolve(short_code, ip=ip, user_agent=user_agent, referrer=referrer)

    async def edit_url(
        self,
        url: URL,
        long_url: Optional[str] = None,
        short_code: Optional[str] = None,
        redirect: Optional[RedirectKind] = None,
    ) -> URL:
        """
        Change a mapping's long URL, code or redirect kind.

        Any edit restarts the expiry clock.

        Raises:
            DuplicateCodeError: the new code belongs to another mapping
        """
        if long_url:
            url.long_form = long_url
        if short_code:
            url.short_code = short_code
        if redirect:
            url.redirect_kind = redirect

        url.touch(self.clock())
        return await self.url_store.update(url)

    async def delete_url(self, short_code: str) -> None:
        """
        Delete a mapping and its analytics.

        Raises:
            NotFoundError: no mapping has this code
        """
        url = await self.url_store.get_by_short_code(short_code)
        url_id = url.id

        await self.url_store.delete_by_short_code(short_code)

        # The mapping is already gone; leftover analytics are only logged
        try:
            await self.analytics_store.delete_by_url_id(url_id)
        except Exception:
            logger.exception(f"Failed to delete analytics for url_id={url_id}")

    async def get_analytics(self, url: URL) -> List[AnalyticsEntry]:
        return await self.analytics_store.get_by_url_id(url.id)
