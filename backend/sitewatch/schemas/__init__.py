"""Pydantic schemas for API request/response models."""
from .target import (
    TargetCreate,
    TargetUpdate,
    TargetResponse,
    CheckRecordResponse,
    DailyStatusResponse,
    TargetSummary,
    CheckTriggerResponse,
)
from .probe import (
    ProbeRequest,
    ProbeResponse,
)
from .status import (
    StatusOverview,
    TargetOverview,
)

__all__ = [
    "TargetCreate",
    "TargetUpdate",
    "TargetResponse",
    "CheckRecordResponse",
    "DailyStatusResponse",
    "TargetSummary",
    "CheckTriggerResponse",
    "ProbeRequest",
    "ProbeResponse",
    "StatusOverview",
    "TargetOverview",
]
