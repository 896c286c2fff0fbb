"""Status overview API for dashboard."""
from datetime import timedelta

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from .. import crud
from ..database import get_db
from ..dependencies import get_owner_id
from ..models.target import STATUS_DOWN, STATUS_UP
from ..schemas.status import StatusOverview, TargetOverview
from ..services.aggregator import summarize
from ..services.evaluator import seconds_until_due
from ..utils.db_utils import utcnow

router = APIRouter(prefix="/api/status", tags=["status"])


@router.get("/overview", response_model=StatusOverview)
async def get_status_overview(
    owner_id: str = Depends(get_owner_id),
    db: AsyncSession = Depends(get_db),
):
    """Live status counts and 24h uptime for the caller's targets."""
    targets = await crud.list_targets_for_owner(db, owner_id)

    now = utcnow()
    cutoff_24h = now - timedelta(hours=24)
    counts = {STATUS_UP: 0, STATUS_DOWN: 0}
    summaries = []
    total_uptime = 0.0

    for target in targets:
        if target.last_status in counts:
            counts[target.last_status] += 1

        records = await crud.get_records_in_range(db, target.id, since=cutoff_24h, until=now)
        # The last 24h span at most two calendar days
        uptime_24h = summarize(records, window_days=2, now=now).uptime_percent
        total_uptime += uptime_24h

        summaries.append(TargetOverview(
            id=target.id,
            url=target.url,
            status=target.last_status,
            latency_ms=target.last_latency_ms,
            uptime_24h=round(uptime_24h, 2),
            last_checked_at=target.last_checked_at,
            next_check_in_seconds=seconds_until_due(target, now),
        ))

    overall_uptime = (total_uptime / len(targets)) if targets else 100.0

    return StatusOverview(
        total_targets=len(targets),
        targets_up=counts[STATUS_UP],
        targets_down=counts[STATUS_DOWN],
        targets_unknown=len(targets) - counts[STATUS_UP] - counts[STATUS_DOWN],
        overall_uptime_24h=round(overall_uptime, 2),
        targets=summaries,
    )
