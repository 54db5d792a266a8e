from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text

from shortlink_app.database.connection import Base
from shortlink_app.models.url import utcnow


class AnalyticsEntry(Base):
    """
    One access of a short link.

    Append-only. Rows disappear only together with their mapping
    (ON DELETE CASCADE on url_id).
    """
    __tablename__ = "analytics"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    url_id = Column(
        Integer,
        ForeignKey("urls.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    ip = Column(String(64), nullable=True)
    user_agent = Column(Text, nullable=True)
    referrer = Column(Text, nullable=True)
    timestamp = Column(DateTime(timezone=True), nullable=False, default=utcnow)
