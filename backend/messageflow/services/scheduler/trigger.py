"""Trigger cycles: run due schedules now, or every active schedule on demand."""

import logging
import time
from dataclasses import dataclass, field
from typing import Optional

from sqlalchemy.engine import Engine
from sqlmodel import Session

from messageflow.services.scheduler.clock import CalendarClock
from messageflow.services.scheduler.finder import ScheduleWithModel, find_due, list_active
from messageflow.services.scheduler.pipeline import ExecutionPipeline, ExecutionResult

logger = logging.getLogger(__name__)


@dataclass
class ScheduleOutcome:
    schedule_id: int
    schedule_name: str
    status: str  # success | failed
    message: Optional[str] = None


@dataclass
class CycleSummary:
    executed: int = 0
    results: list[ScheduleOutcome] = field(default_factory=list)


@dataclass
class RunAllSummary:
    total: int = 0
    successful: int = 0
    failed: int = 0


class ExecutionTrigger:
    """Selects schedules and feeds them through the pipeline one at a time.

    Store errors while selecting schedules propagate to the caller; errors
    while executing a single schedule are recorded against that schedule and
    the cycle moves on.
    """

    def __init__(self, engine: Engine, pipeline: ExecutionPipeline, clock: CalendarClock, timezone: str):
        self.engine = engine
        self.pipeline = pipeline
        self.clock = clock
        self.timezone = timezone

    async def _run_one(self, schedule: ScheduleWithModel) -> ScheduleOutcome:
        try:
            result: ExecutionResult = await self.pipeline.execute(schedule)
        except Exception as e:
            logger.exception(f"Schedule {schedule.id} ({schedule.name}) raised during execution")
            return ScheduleOutcome(
                schedule_id=schedule.id,
                schedule_name=schedule.name,
                status="failed",
                message=str(e) or type(e).__name__,
            )

        if result.success:
            return ScheduleOutcome(
                schedule_id=schedule.id,
                schedule_name=schedule.name,
                status="success",
                message=f"Message {result.message_id}",
            )
        return ScheduleOutcome(
            schedule_id=schedule.id,
            schedule_name=schedule.name,
            status="failed",
            message=result.error,
        )

    async def run_due_cycle(self) -> CycleSummary:
        now = self.clock.now(self.timezone)
        logger.info(f"Evaluating schedules at {now.hour:02d}:{now.minute:02d} {self.timezone}")

        with Session(self.engine) as session:
            due = find_due(session, now.hour, now.minute, now.day_of_week, now.day_of_month)
        logger.info(f"Found {len(due)} schedules due")

        summary = CycleSummary(executed=len(due))
        for schedule in due:
            summary.results.append(await self._run_one(schedule))
        return summary

    async def run_all_active(self) -> RunAllSummary:
        started = time.monotonic()

        with Session(self.engine) as session:
            schedules = list_active(session)
        logger.info(f"Manual run over {len(schedules)} active schedules")

        summary = RunAllSummary(total=len(schedules))
        for schedule in schedules:
            outcome = await self._run_one(schedule)
            if outcome.status == "success":
                summary.successful += 1
            else:
                summary.failed += 1

        duration_ms = int((time.monotonic() - started) * 1000)
        logger.info(
            f"Manual run completed in {duration_ms}ms. Success: {summary.successful}, Failed: {summary.failed}"
        )
        return summary
