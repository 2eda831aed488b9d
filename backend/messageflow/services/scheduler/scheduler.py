"""Wiring for execution triggers and the optional in-process minute tick."""

import asyncio
import logging
from datetime import datetime, timezone
from functools import partial
from typing import Callable

from sqlalchemy.engine import Engine

from messageflow.core import database
from messageflow.core.config import Settings, settings
from messageflow.services.llm import get_llm_provider
from messageflow.services.llm.base import BaseLLMProvider
from messageflow.services.scheduler.clock import CalendarClock
from messageflow.services.scheduler.pipeline import ExecutionPipeline
from messageflow.services.scheduler.trigger import ExecutionTrigger

logger = logging.getLogger(__name__)


def create_trigger(
    engine: Engine,
    provider: BaseLLMProvider | None = None,
    config: Settings = settings,
) -> ExecutionTrigger:
    """Build a trigger from explicit configuration."""
    pipeline = ExecutionPipeline(
        engine,
        provider or get_llm_provider(config),
        timeout=config.ai_request_timeout,
        use_online=config.use_online_mode,
    )
    clock = CalendarClock(default_timezone=config.default_timezone)
    return ExecutionTrigger(engine, pipeline, clock, timezone=config.cron_timezone)


def _seconds_until_next_minute(now: datetime) -> float:
    return 60 - now.second - now.microsecond / 1_000_000


async def scheduler_loop() -> None:
    """Run one due cycle at the top of every minute.

    Only used when no external cron hits the trigger endpoint. A tick that
    fails, including one whose trigger cannot be built, is logged and the
    loop waits for the next minute.
    """
    logger.info("Scheduler started")

    while True:
        await asyncio.sleep(_seconds_until_next_minute(datetime.now(timezone.utc)))
        try:
            trigger = create_trigger(database.engine)
            summary = await trigger.run_due_cycle()
            for outcome in summary.results:
                logger.info(f"  - {outcome.schedule_name}: {outcome.status} ({outcome.message})")
        except Exception as e:
            logger.error(f"Scheduler error: {e}")


def get_trigger_factory() -> Callable[[], ExecutionTrigger]:
    """FastAPI dependency for the trigger endpoints.

    Returns a builder rather than a trigger so that configuration errors
    surface inside the endpoint's own error handling.
    """
    return partial(create_trigger, database.engine)
