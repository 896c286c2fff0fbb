"""Status overview schemas for dashboard."""
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel


class TargetOverview(BaseModel):
    """Summary of a target for the dashboard."""
    id: int
    url: str
    status: str  # Up, Down, Unknown
    latency_ms: Optional[int] = None
    uptime_24h: float  # Percentage
    last_checked_at: Optional[datetime] = None
    next_check_in_seconds: int


class StatusOverview(BaseModel):
    """Dashboard overview data for one owner."""
    total_targets: int
    targets_up: int
    targets_down: int
    targets_unknown: int
    overall_uptime_24h: float
    targets: List[TargetOverview]
