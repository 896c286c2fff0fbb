"""State reconciler - turns probe outcomes into history records and cached target state.

The history table is authoritative. The ``last_*`` columns on a target are a
materialized view of its newest record; ``repair_cached_fields`` rebuilds
them whenever they lag behind.
"""
import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from .. import crud
from ..database import PersistenceError, async_session
from ..models import StatusCheckRecord
from ..models.target import STATUS_DOWN, STATUS_UNKNOWN, STATUS_UP
from ..utils.db_utils import retry_on_lock, utcnow
from .prober import ProbeResult
from .websocket_manager import websocket_manager

logger = logging.getLogger(__name__)


def is_ok_status(status_code: Optional[int]) -> bool:
    """2xx and 3xx responses count as up."""
    return status_code is not None and 200 <= status_code < 400


def to_logical_status(result: ProbeResult) -> str:
    """Map a raw probe outcome to Up or Down."""
    if result.reachable and is_ok_status(result.http_status_code):
        return STATUS_UP
    return STATUS_DOWN


class StateReconciler:
    """Persists check outcomes and keeps cached target fields in step with history."""

    def __init__(self, session_factory=None, notifier=None):
        self.session_factory = session_factory or async_session
        self.notifier = notifier if notifier is not None else websocket_manager

    async def reconcile(
        self,
        target_id: int,
        result: ProbeResult,
        checked_at: Optional[datetime] = None,
    ) -> Optional[StatusCheckRecord]:
        """Record one completed check for ``target_id``.

        ``checked_at`` defaults to now, i.e. after the probe finished. The
        record is always appended; the cached fields only move forward in time.

        Returns:
            The new record, or None when the target no longer exists

        Raises:
            PersistenceError: If the store rejected the writes
        """
        checked_at = checked_at or utcnow()
        status = to_logical_status(result)
        latency_ms = result.latency_ms if result.reachable else None

        try:
            async with self.session_factory() as session:
                target = await crud.get_target(session, target_id)
                if target is None:
                    logger.warning(f"Target {target_id} was deleted before its check was recorded")
                    return None

                record = await crud.insert_check_record(
                    session,
                    target_id=target_id,
                    status=status,
                    latency_ms=latency_ms,
                    status_code=result.http_status_code,
                    location=result.location,
                    created_at=checked_at,
                )

                if target.last_checked_at is None or target.last_checked_at <= checked_at:
                    await crud.update_cached_fields(
                        session,
                        target_id,
                        status=status,
                        latency_ms=latency_ms,
                        checked_at=checked_at,
                        location=result.location,
                    )
                else:
                    logger.debug(f"Target {target_id} already has a newer check, cache left as is")

                await retry_on_lock(session.commit)
                owner_id, url = target.owner_id, target.url
        except crud.StaleTargetError:
            logger.warning(f"Target {target_id} was deleted while its check was recorded")
            return None
        except IntegrityError as e:
            # Foreign key failure: the target row vanished between read and write
            logger.warning(f"Dropping check for target {target_id}: {e.orig}")
            return None
        except SQLAlchemyError as e:
            raise PersistenceError(f"Could not record check for target {target_id}: {e}") from e

        logger.debug(f"Target {target_id} ({url}): {status} latency={latency_ms}")

        try:
            await self.notifier.broadcast_status_update(
                owner_id=owner_id,
                target_id=target_id,
                url=url,
                status=status,
                latency_ms=latency_ms,
                checked_at=checked_at,
                location=result.location,
            )
        except Exception as e:
            logger.debug(f"Live update for target {target_id} not delivered: {e}")

        return record

    async def repair_cached_fields(self, target_id: int) -> bool:
        """Re-derive a target's cached fields from its newest record.

        Returns True when the cache had drifted and was rewritten.
        """
        try:
            async with self.session_factory() as session:
                target = await crud.get_target(session, target_id)
                if target is None:
                    return False
                repaired = await self._repair(session, target)
                if repaired:
                    await retry_on_lock(session.commit)
                return repaired
        except crud.StaleTargetError:
            return False
        except SQLAlchemyError as e:
            raise PersistenceError(f"Could not repair target {target_id}: {e}") from e

    async def repair_all(self) -> int:
        """Repair every target; returns how many had drifted."""
        repaired = 0
        try:
            async with self.session_factory() as session:
                for target in await crud.list_all_targets(session):
                    if await self._repair(session, target):
                        repaired += 1
                if repaired:
                    await retry_on_lock(session.commit)
        except SQLAlchemyError as e:
            raise PersistenceError(f"Could not repair cached target state: {e}") from e

        if repaired:
            logger.info(f"Repaired cached status for {repaired} target(s)")
        return repaired

    async def _repair(self, session, target) -> bool:
        latest = await crud.get_latest_record(session, target.id)
        if latest is None:
            expected = (STATUS_UNKNOWN, None, None, None)
        else:
            expected = (latest.status, latest.latency_ms, latest.created_at, latest.location)

        current = (target.last_status, target.last_latency_ms, target.last_checked_at, target.last_location)
        if current == expected:
            return False

        status, latency_ms, checked_at, location = expected
        await crud.update_cached_fields(
            session,
            target.id,
            status=status,
            latency_ms=latency_ms,
            checked_at=checked_at,
            location=location,
        )
        return True


# Global instance
state_reconciler = StateReconciler()
