"""Target schemas for API."""
from datetime import date as calendar_date, datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, HttpUrl, TypeAdapter, ValidationError, field_validator

from ..models.target import MIN_INTERVAL_SECONDS

_http_url = TypeAdapter(HttpUrl)


class TargetCreate(BaseModel):
    """Schema for registering a URL to monitor.

    The URL must parse as http(s) but is stored exactly as entered.
    """
    url: str
    interval_seconds: int = Field(default=60, ge=MIN_INTERVAL_SECONDS)

    @field_validator("url")
    @classmethod
    def validate_url(cls, value: str) -> str:
        value = value.strip()
        try:
            _http_url.validate_python(value)
        except ValidationError:
            raise ValueError("url must be an absolute http or https URL")
        return value


class TargetUpdate(BaseModel):
    """Schema for changing a target's check interval."""
    interval_seconds: int = Field(..., ge=MIN_INTERVAL_SECONDS)


class TargetResponse(BaseModel):
    """A target with its cached latest-check fields."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    owner_id: str
    url: str
    interval_seconds: int
    created_at: datetime
    last_checked_at: Optional[datetime] = None
    last_status: str  # Up, Down, Unknown
    last_latency_ms: Optional[int] = None
    last_location: Optional[str] = None


class CheckRecordResponse(BaseModel):
    """One history record, for the latency chart and results table."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    created_at: datetime
    status: str  # Up, Down
    latency_ms: Optional[int] = None
    status_code: Optional[int] = None
    location: Optional[str] = None


class DailyStatusResponse(BaseModel):
    """One cell of the daily status grid."""
    model_config = ConfigDict(from_attributes=True)

    date: calendar_date
    status: str  # Up, Down, NoData


class TargetSummary(BaseModel):
    """Rollups over the trailing window."""
    target_id: int
    window_days: int
    uptime_percent: float
    avg_latency_ms: float
    total_checks: int
    daily_statuses: List[DailyStatusResponse]


class CheckTriggerResponse(BaseModel):
    """Result of asking for an out-of-cadence check."""
    target_id: int
    dispatched: bool
