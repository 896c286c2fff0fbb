"""Target CRUD, history and rollup endpoints."""
import logging
from datetime import timedelta
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from .. import crud
from ..config import settings
from ..database import get_db
from ..dependencies import get_owner_id, get_scheduler
from ..models import MonitoredTarget
from ..schemas.target import (
    TargetCreate,
    TargetUpdate,
    TargetResponse,
    CheckRecordResponse,
    DailyStatusResponse,
    TargetSummary,
    CheckTriggerResponse,
)
from ..services.aggregator import summarize, window_start
from ..services.scheduler import SchedulerService
from ..utils.db_utils import retry_on_lock, utcnow

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/targets", tags=["targets"])


async def _get_owned_target(db: AsyncSession, target_id: int, owner_id: str) -> MonitoredTarget:
    target = await crud.get_target(db, target_id, owner_id=owner_id)
    if not target:
        raise HTTPException(status_code=404, detail="Target not found")
    return target


@router.get("", response_model=List[TargetResponse])
async def list_targets(
    owner_id: str = Depends(get_owner_id),
    db: AsyncSession = Depends(get_db),
):
    """List the caller's targets with their latest cached status."""
    return await crud.list_targets_for_owner(db, owner_id)


@router.post("", response_model=TargetResponse, status_code=201)
async def create_target(
    body: TargetCreate,
    owner_id: str = Depends(get_owner_id),
    db: AsyncSession = Depends(get_db),
    scheduler: SchedulerService = Depends(get_scheduler),
):
    """Register a URL and check it right away."""
    target = await crud.create_target(db, owner_id, body.url, body.interval_seconds)
    await retry_on_lock(db.commit)
    await db.refresh(target)

    logger.info(f"Target {target.id} created for owner {owner_id}: {target.url}")
    scheduler.check_now(target.id, target.url)
    return target


@router.get("/{target_id}", response_model=TargetResponse)
async def get_target(
    target_id: int,
    owner_id: str = Depends(get_owner_id),
    db: AsyncSession = Depends(get_db),
):
    return await _get_owned_target(db, target_id, owner_id)


@router.patch("/{target_id}", response_model=TargetResponse)
async def update_target(
    target_id: int,
    update: TargetUpdate,
    owner_id: str = Depends(get_owner_id),
    db: AsyncSession = Depends(get_db),
):
    """Change a target's check interval."""
    target = await _get_owned_target(db, target_id, owner_id)
    await crud.update_interval(db, target, update.interval_seconds)
    await retry_on_lock(db.commit)
    await db.refresh(target)
    return target


@router.delete("/{target_id}", status_code=204)
async def delete_target(
    target_id: int,
    owner_id: str = Depends(get_owner_id),
    db: AsyncSession = Depends(get_db),
):
    """Stop monitoring a target. Its history is deleted with it."""
    target = await _get_owned_target(db, target_id, owner_id)
    await crud.delete_target(db, target)
    await retry_on_lock(db.commit)
    logger.info(f"Target {target_id} deleted by owner {owner_id}")


@router.post("/{target_id}/check", response_model=CheckTriggerResponse, status_code=202)
async def trigger_check(
    target_id: int,
    owner_id: str = Depends(get_owner_id),
    db: AsyncSession = Depends(get_db),
    scheduler: SchedulerService = Depends(get_scheduler),
):
    """Check a target now. Ignored if a check is already running for it."""
    target = await _get_owned_target(db, target_id, owner_id)
    dispatched = scheduler.check_now(target.id, target.url)
    return CheckTriggerResponse(target_id=target.id, dispatched=dispatched)


@router.get("/{target_id}/summary", response_model=TargetSummary)
async def get_target_summary(
    target_id: int,
    days: int = Query(default=settings.summary_window_days, ge=1, le=365),
    owner_id: str = Depends(get_owner_id),
    db: AsyncSession = Depends(get_db),
):
    """Uptime, average latency and the daily status grid for the last ``days`` days."""
    await _get_owned_target(db, target_id, owner_id)

    now = utcnow()
    records = await crud.get_records_in_range(db, target_id, since=window_start(days, now), until=now)
    summary = summarize(records, window_days=days, now=now)

    return TargetSummary(
        target_id=target_id,
        window_days=days,
        uptime_percent=round(summary.uptime_percent, 2),
        avg_latency_ms=round(summary.avg_latency_ms, 2),
        total_checks=summary.total_checks,
        daily_statuses=[
            DailyStatusResponse(date=day.date, status=day.status)
            for day in summary.daily_statuses
        ],
    )


@router.get("/{target_id}/checks", response_model=List[CheckRecordResponse])
async def get_target_checks(
    target_id: int,
    hours: int = Query(default=24, ge=1, le=8760),  # Max 1 year
    limit: int = Query(default=100, ge=1, le=1000),
    owner_id: str = Depends(get_owner_id),
    db: AsyncSession = Depends(get_db),
):
    """Most recent check records in the last ``hours``, oldest first."""
    await _get_owned_target(db, target_id, owner_id)
    since = utcnow() - timedelta(hours=hours)
    return await crud.get_records_in_range(db, target_id, since=since, limit=limit)
