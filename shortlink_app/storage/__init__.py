"""
Storage module for URL mappings and access analytics.

Implements the Strategy Pattern: SQLAlchemy-backed stores for the running
service, in-memory stores for development and tests.
"""

from .url_store import URLStore, SQLAlchemyURLStore, InMemoryURLStore
from .analytics_store import (
    AnalyticsStore,
    SQLAlchemyAnalyticsStore,
    InMemoryAnalyticsStore,
)

__all__ = [
    "URLStore",
    "SQLAlchemyURLStore",
    "InMemoryURLStore",
    "AnalyticsStore",
    "SQLAlchemyAnalyticsStore",
    "InMemoryAnalyticsStore",
]
