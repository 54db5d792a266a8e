"""
Database models for the shortlink service.

URL mappings and their access analytics live in the same database so that
deleting a mapping can cascade to its analytics rows.
"""

from .url import URL, RedirectKind
from .analytics import AnalyticsEntry

__all__ = ["URL", "RedirectKind", "AnalyticsEntry"]
