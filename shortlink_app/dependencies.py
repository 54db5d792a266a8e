"""
FastAPI dependencies for dependency injection.

Stores are built per request around the request's database session; the
queue is a process-wide singleton. The caller's identity comes from headers
set by the authentication layer in front of this service.
"""

from functools import lru_cache
from typing import Optional

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from shortlink_app.config import settings
from shortlink_app.database.connection import get_db
from shortlink_app.errors import NotFoundError
from shortlink_app.models.url import URL
from shortlink_app.queue.factory import QueueFactory, QueueBackend
from shortlink_app.queue.strategies import QueueStrategy
from shortlink_app.services.analytics_recorder import (
    AnalyticsRecorder,
    DirectAnalyticsRecorder,
    NullAnalyticsRecorder,
    QueuedAnalyticsRecorder,
)
from shortlink_app.services.owner import ANONYMOUS, Owner
from shortlink_app.services.url_service import URLService
from shortlink_app.storage.analytics_store import SQLAlchemyAnalyticsStore
from shortlink_app.storage.url_store import SQLAlchemyURLStore


@lru_cache()
def get_queue() -> Optional[QueueStrategy]:
    """
    Get queue instance (singleton).

    Only built when the "queue" analytics recorder is configured. None when
    the worker could not drain it; the outcome is cached for the process.
    """
    backend = QueueBackend(settings.queue_backend)
    return QueueFactory.create_for_publishing(backend)


def get_analytics_recorder(db: Session = Depends(get_db)) -> AnalyticsRecorder:
    if settings.analytics_recorder == "queue":
        queue = get_queue()
        if queue is not None:
            return QueuedAnalyticsRecorder(queue, settings.queue_name)
    if settings.analytics_recorder == "null":
        return NullAnalyticsRecorder()
    return DirectAnalyticsRecorder(SQLAlchemyAnalyticsStore(db))


def get_url_service(
    db: Session = Depends(get_db),
    recorder: AnalyticsRecorder = Depends(get_analytics_recorder),
) -> URLService:
    """URLService wired to the request's session"""
    return URLService(
        url_store=SQLAlchemyURLStore(db),
        analytics_store=SQLAlchemyAnalyticsStore(db),
        recorder=recorder,
    )


def get_current_owner(
    x_user_id: Optional[int] = Header(None),
    x_user_premium: bool = Header(False),
) -> Owner:
    """
    Principal resolved upstream by the authentication proxy.

    No X-User-Id header means the request is anonymous.
    """
    if x_user_id is None:
        return ANONYMOUS
    return Owner(id=x_user_id, is_premium=x_user_premium)


def require_user(owner: Owner = Depends(get_current_owner)) -> Owner:
    if owner.is_anonymous:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required"
        )
    return owner


async def get_owned_url(
    short_code: str,
    owner: Owner = Depends(require_user),
    url_service: URLService = Depends(get_url_service),
) -> URL:
    """Load a mapping that belongs to the caller; other owners' links look absent"""
    try:
        url = await url_service.get_url_by_short_code(short_code)
    except NotFoundError:
        url = None

    if url is None or url.owner_id != owner.id:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Short URL not found"
        )
    return url
