"""Probe endpoint schemas."""
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class ProbeRequest(BaseModel):
    """Ad-hoc probe of a URL."""
    url: Optional[str] = None


class ProbeResponse(BaseModel):
    """Wire format consumed by the dashboard: camelCase keys, optional fields omitted."""
    model_config = ConfigDict(populate_by_name=True)

    status: str  # Up, Down
    latency: Optional[int] = None
    status_code: Optional[int] = Field(default=None, alias="statusCode")
    monitoring_location: Optional[str] = Field(default=None, alias="monitoringLocation")
