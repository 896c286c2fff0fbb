"""Scheduler service - the check orchestrator.

Design:
- A single APScheduler job ticks every ``tick_seconds`` (default 5s), well
  under the 30s minimum interval, so a target is checked at most one tick
  late.
- Each tick reads every target from the store and asks the evaluator which
  are due. The orchestrator keeps no durable state of its own.
- Due targets are dispatched as independent asyncio tasks so a slow site
  never delays the others. An in-flight set guarantees at most one check
  per target at a time, on top of completion-time stamping of
  ``last_checked_at``.
- A semaphore caps concurrent outbound probes.
"""
import asyncio
import logging
from datetime import datetime
from typing import Dict, List, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from sqlalchemy.exc import SQLAlchemyError

from .. import crud
from ..config import settings
from ..database import PersistenceError, async_session
from ..utils.db_utils import utcnow
from .evaluator import is_due
from .prober import ProberService, prober_service
from .reconciler import StateReconciler, state_reconciler

logger = logging.getLogger(__name__)


class SchedulerService:
    """Recurring tick that dispatches due checks, one in flight per target."""

    def __init__(
        self,
        session_factory=None,
        prober: Optional[ProberService] = None,
        reconciler: Optional[StateReconciler] = None,
        tick_seconds: Optional[int] = None,
        max_concurrent_checks: Optional[int] = None,
    ):
        self.session_factory = session_factory or async_session
        self.prober = prober or prober_service
        self.reconciler = reconciler or state_reconciler
        self.tick_seconds = tick_seconds or settings.tick_seconds
        self.max_concurrent_checks = max_concurrent_checks or settings.max_concurrent_checks
        self.scheduler: Optional[AsyncIOScheduler] = None
        self._running = False
        self._semaphore = asyncio.Semaphore(self.max_concurrent_checks)
        # target id -> task probing and reconciling it
        self._in_flight: Dict[int, asyncio.Task] = {}

    @property
    def is_running(self) -> bool:
        return self._running

    def start(self):
        """Start the recurring tick."""
        if self._running:
            return

        self.scheduler = AsyncIOScheduler()
        self.scheduler.add_job(
            self.run_tick,
            trigger=IntervalTrigger(seconds=self.tick_seconds),
            id="run_checks",
            replace_existing=True,
            max_instances=1,
            misfire_grace_time=self.tick_seconds,
        )
        self.scheduler.start()
        self._running = True
        logger.info(f"Scheduler started (tick={self.tick_seconds}s, max_concurrent={self.max_concurrent_checks})")

    def stop(self):
        """Stop ticking. Checks already in flight run to completion."""
        if self.scheduler and self._running:
            self.scheduler.shutdown(wait=False)
            self._running = False
            logger.info("Scheduler stopped")

    def is_in_flight(self, target_id: int) -> bool:
        return target_id in self._in_flight

    async def run_tick(self, now: Optional[datetime] = None) -> List[int]:
        """Dispatch every due target that is not already being checked.

        Returns the ids dispatched on this tick.
        """
        now = now or utcnow()
        # A check finishing while targets load leaves a stale last_checked_at
        # in the loaded rows, so anything busy at tick start sits this tick out.
        busy = set(self._in_flight)
        try:
            async with self.session_factory() as session:
                targets = await crud.list_all_targets(session)
        except SQLAlchemyError as e:
            logger.error(f"Could not load targets, skipping tick: {e}")
            return []

        dispatched = []
        for target in targets:
            if target.id in busy or target.id in self._in_flight:
                continue
            if not is_due(target, now):
                continue
            if self.dispatch(target.id, target.url):
                dispatched.append(target.id)

        if dispatched:
            logger.debug(f"Dispatched {len(dispatched)} due targets out of {len(targets)} total")
        return dispatched

    def dispatch(self, target_id: int, url: str) -> bool:
        """Start a check for one target unless one is already running.

        Must be called from the event loop. Returns False if the target
        already has a check in flight.
        """
        if target_id in self._in_flight:
            return False
        task = asyncio.create_task(self._check_target(target_id, url))
        self._in_flight[target_id] = task
        task.add_done_callback(lambda _task: self._in_flight.pop(target_id, None))
        return True

    def check_now(self, target_id: int, url: str) -> bool:
        """Check a target immediately, outside the tick cadence (e.g. right after creation)."""
        dispatched = self.dispatch(target_id, url)
        if dispatched:
            logger.info(f"Immediate check dispatched for target {target_id}")
        return dispatched

    async def wait_idle(self):
        """Wait until every in-flight check has finished."""
        while self._in_flight:
            await asyncio.gather(*list(self._in_flight.values()), return_exceptions=True)

    async def drain(self, timeout: Optional[float]) -> List[int]:
        """Wait up to ``timeout`` seconds for in-flight checks to finish.

        Checks still running afterwards are left alone, not cancelled.
        Returns the ids of the targets whose checks were abandoned.
        """
        pending = dict(self._in_flight)
        if not pending:
            return []
        _done, not_done = await asyncio.wait(list(pending.values()), timeout=timeout)
        abandoned = sorted(target_id for target_id, task in pending.items() if task in not_done)
        if abandoned:
            logger.warning(f"Abandoning {len(abandoned)} unfinished checks at shutdown: targets {abandoned}")
        return abandoned

    async def _check_target(self, target_id: int, url: str):
        """Probe and reconcile one target, containing any failure."""
        try:
            async with self._semaphore:
                result = await self.prober.probe(url)
            await self.reconciler.reconcile(target_id, result)
        except PersistenceError as e:
            logger.error(f"Check for target {target_id} not recorded, retrying when next due: {e}")
        except Exception as e:
            logger.error(f"Error checking target {target_id}: {e}")


# Global instance
scheduler_service = SchedulerService()
