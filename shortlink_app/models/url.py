from datetime import datetime, timedelta, timezone
from enum import Enum

from sqlalchemy import Column, DateTime, Enum as SQLEnum, Integer, String, Text

from shortlink_app.database.connection import Base


class RedirectKind(str, Enum):
    """How a resolved short link redirects the visitor"""
    TEMPORARY = "temporary"
    PERMANENT = "permanent"

    @property
    def status_code(self) -> int:
        return 308 if self is RedirectKind.PERMANENT else 307


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """SQLite hands back naive datetimes; they were written as UTC"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class URL(Base):
    """
    A short code → long URL mapping.

    ``short_code`` uniqueness is enforced by the unique index, never by
    application code: concurrent inserts race and the loser gets an
    IntegrityError which the store turns into DuplicateCodeError.

    ``modified_at`` drives expiry, so every mutation (edit or dedup reuse)
    must refresh it.
    """
    __tablename__ = "urls"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    long_form = Column(Text, nullable=False)
    short_code = Column(String(32), unique=True, nullable=False, index=True)
    redirect_kind = Column(
        SQLEnum(
            RedirectKind,
            native_enum=False,
            length=16,
            values_callable=lambda kinds: [kind.value for kind in kinds],
        ),
        nullable=False,
        default=RedirectKind.PERMANENT,
    )
    owner_id = Column(Integer, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    modified_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    def expires_at(self, ttl: timedelta) -> datetime:
        return as_utc(self.modified_at) + ttl

    def touch(self, now: datetime = None) -> None:
        self.modified_at = now or utcnow()

    def __repr__(self) -> str:
        return f"<URL(id={self.id}, short_code='{self.short_code}', owner_id={self.owner_id})>"
