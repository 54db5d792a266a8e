import re
from datetime import datetime, timedelta
from typing import Any, List, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    HttpUrl,
    computed_field,
    field_validator,
    model_validator,
)

from shortlink_app.config import settings
from shortlink_app.models.url import RedirectKind, as_utc

SHORT_CODE_PATTERN = r"^[a-zA-Z0-9]+$"
_SCHEME_RX = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*://")


def add_http_prefix(value: Any) -> Any:
    """Accept bare hosts like ``example.com`` by defaulting to http"""
    if isinstance(value, str) and value and not _SCHEME_RX.match(value):
        return f"http://{value}"
    return value


class URLCreate(BaseModel):
    long_url: HttpUrl = Field(..., description="The original URL to be shortened")
    short_code: Optional[str] = Field(
        None,
        max_length=settings.custom_code_max_length,
        pattern=SHORT_CODE_PATTERN,
        description="Custom alias (ignored for anonymous callers)",
    )
    redirect: Optional[RedirectKind] = Field(
        None, description="Redirect kind; permanent when omitted"
    )

    @field_validator("long_url", mode="before")
    @classmethod
    def prefix_scheme(cls, value: Any) -> Any:
        return add_http_prefix(value)


class URLEdit(BaseModel):
    long_url: Optional[HttpUrl] = None
    short_code: Optional[str] = Field(
        None,
        max_length=settings.custom_code_max_length,
        pattern=SHORT_CODE_PATTERN,
    )
    redirect: Optional[RedirectKind] = None

    @field_validator("long_url", mode="before")
    @classmethod
    def prefix_scheme(cls, value: Any) -> Any:
        return add_http_prefix(value)

    @model_validator(mode="after")
    def require_change(self) -> "URLEdit":
        if self.long_url is None and not self.short_code and self.redirect is None:
            raise ValueError("Provide at least one of long_url, short_code, redirect")
        return self


class URLResponse(BaseModel):
    """Response schema that serializes the SQLAlchemy URL model

    - from_attributes=True enables ORM mode (reads from model attributes)
    - @computed_field creates derived fields
    """
    id: int
    long_url: str = Field(validation_alias="long_form")
    short_code: str
    redirect: RedirectKind = Field(validation_alias="redirect_kind")
    owner_id: int
    created_at: datetime
    modified_at: datetime

    @computed_field
    @property
    def short_url(self) -> str:
        return f"{settings.base_url}/{self.short_code}"

    @computed_field
    @property
    def expires_at(self) -> datetime:
        return as_utc(self.modified_at) + timedelta(seconds=settings.link_ttl_seconds)

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class AnalyticsEntryResponse(BaseModel):
    ip: Optional[str] = None
    user_agent: Optional[str] = None
    referrer: Optional[str] = None
    timestamp: datetime

    model_config = ConfigDict(from_attributes=True)


class AnalyticsResponse(BaseModel):
    short_code: str
    short_url: str
    total: int
    entries: List[AnalyticsEntryResponse]
