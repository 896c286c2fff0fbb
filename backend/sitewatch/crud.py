"""Persistent store operations for targets and their check history."""
from datetime import datetime
from typing import List, Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from .models import MonitoredTarget, StatusCheckRecord


class StaleTargetError(Exception):
    """The target was deleted while an operation on it was in progress."""

    def __init__(self, target_id: int):
        super().__init__(f"Target {target_id} no longer exists")
        self.target_id = target_id


async def create_target(db: AsyncSession, owner_id: str, url: str, interval_seconds: int) -> MonitoredTarget:
    target = MonitoredTarget(owner_id=owner_id, url=url, interval_seconds=interval_seconds)
    db.add(target)
    await db.flush()
    return target


async def get_target(db: AsyncSession, target_id: int, owner_id: Optional[str] = None) -> Optional[MonitoredTarget]:
    """Get a target by id, optionally restricted to one owner."""
    query = select(MonitoredTarget).where(MonitoredTarget.id == target_id)
    if owner_id is not None:
        query = query.where(MonitoredTarget.owner_id == owner_id)
    result = await db.execute(query)
    return result.scalar_one_or_none()


async def list_targets_for_owner(db: AsyncSession, owner_id: str) -> List[MonitoredTarget]:
    result = await db.execute(
        select(MonitoredTarget)
        .where(MonitoredTarget.owner_id == owner_id)
        .order_by(MonitoredTarget.created_at.desc(), MonitoredTarget.id.desc())
    )
    return list(result.scalars().all())


async def list_all_targets(db: AsyncSession) -> List[MonitoredTarget]:
    result = await db.execute(select(MonitoredTarget).order_by(MonitoredTarget.id))
    return list(result.scalars().all())


async def update_interval(db: AsyncSession, target: MonitoredTarget, interval_seconds: int) -> MonitoredTarget:
    target.interval_seconds = interval_seconds
    await db.flush()
    return target


async def update_cached_fields(
    db: AsyncSession,
    target_id: int,
    status: str,
    latency_ms: Optional[int],
    checked_at: Optional[datetime],
    location: Optional[str],
) -> None:
    """Overwrite the target's cached latest-check columns.

    Raises:
        StaleTargetError: If the target row is gone
    """
    result = await db.execute(
        update(MonitoredTarget)
        .where(MonitoredTarget.id == target_id)
        .values(
            last_status=status,
            last_latency_ms=latency_ms,
            last_checked_at=checked_at,
            last_location=location,
        )
    )
    if result.rowcount == 0:
        raise StaleTargetError(target_id)


async def delete_target(db: AsyncSession, target: MonitoredTarget) -> None:
    await db.delete(target)
    await db.flush()


async def insert_check_record(
    db: AsyncSession,
    target_id: int,
    status: str,
    latency_ms: Optional[int],
    status_code: Optional[int],
    location: Optional[str],
    created_at: datetime,
) -> StatusCheckRecord:
    record = StatusCheckRecord(
        target_id=target_id,
        status=status,
        latency_ms=latency_ms,
        status_code=status_code,
        location=location,
        created_at=created_at,
    )
    db.add(record)
    await db.flush()
    return record


async def get_records_in_range(
    db: AsyncSession,
    target_id: int,
    since: datetime,
    until: Optional[datetime] = None,
    limit: Optional[int] = None,
) -> List[StatusCheckRecord]:
    """History for one target, oldest first.

    With ``limit`` the newest ``limit`` records of the range are returned,
    still in ascending order.
    """
    query = select(StatusCheckRecord).where(
        StatusCheckRecord.target_id == target_id,
        StatusCheckRecord.created_at >= since,
    )
    if until is not None:
        query = query.where(StatusCheckRecord.created_at <= until)

    if limit is not None:
        query = query.order_by(StatusCheckRecord.created_at.desc(), StatusCheckRecord.id.desc()).limit(limit)
        result = await db.execute(query)
        return list(reversed(result.scalars().all()))

    query = query.order_by(StatusCheckRecord.created_at, StatusCheckRecord.id)
    result = await db.execute(query)
    return list(result.scalars().all())


async def get_latest_record(db: AsyncSession, target_id: int) -> Optional[StatusCheckRecord]:
    result = await db.execute(
        select(StatusCheckRecord)
        .where(StatusCheckRecord.target_id == target_id)
        .order_by(StatusCheckRecord.created_at.desc(), StatusCheckRecord.id.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()
