"""
Data models for queue messages.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from shortlink_app.models.analytics import AnalyticsEntry
from shortlink_app.models.url import utcnow


class AccessEvent(BaseModel):
    """
    One resolution of a tracked short link.

    Built by the resolution engine and handed to the analytics recorder,
    either stored straight away or published to the queue for the worker.
    """

    url_id: int = Field(..., description="ID of the resolved mapping")
    timestamp: datetime = Field(default_factory=utcnow, description="When the link was resolved")

    # Request metadata
    ip: Optional[str] = Field(None, description="Client IP address")
    user_agent: Optional[str] = Field(None, description="User agent string")
    referrer: Optional[str] = Field(None, description="HTTP referer")

    # Set by queue backends that need acknowledgement
    message_id: Optional[str] = Field(None, exclude=True)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "url_id": 42,
                "timestamp": "2025-10-29T10:30:00Z",
                "ip": "192.168.1.1",
                "user_agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) Chrome/120.0",
                "referrer": "https://twitter.com",
            }
        }
    )

    def to_entry(self) -> AnalyticsEntry:
        return AnalyticsEntry(
            url_id=self.url_id,
            ip=self.ip,
            user_agent=self.user_agent,
            referrer=self.referrer,
            timestamp=self.timestamp,
        )
