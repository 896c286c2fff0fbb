"""FastAPI dependencies shared by the routers."""
from typing import Optional

from fastapi import Header, HTTPException

from .services.prober import ProberService, prober_service
from .services.scheduler import SchedulerService, scheduler_service

OWNER_HEADER = "x-owner-id"


def parse_owner_id(value: Optional[str]) -> Optional[str]:
    """Normalise an X-Owner-Id header value, None if absent or blank."""
    if not value or not value.strip():
        return None
    return value.strip()


async def get_owner_id(x_owner_id: Optional[str] = Header(default=None)) -> str:
    """Identity of the calling user.

    Authentication happens in front of this service; it forwards the
    authenticated user id in the X-Owner-Id header. HTTP routes and the
    websocket both read it from there.
    """
    owner_id = parse_owner_id(x_owner_id)
    if owner_id is None:
        raise HTTPException(status_code=401, detail="X-Owner-Id header is required")
    return owner_id


def get_scheduler() -> SchedulerService:
    return scheduler_service


def get_prober() -> ProberService:
    return prober_service
