"""Run one schedule against its AI model and record the outcome.

Write sequence per execution:

1. insert a ``running`` TaskExecution with the prompt snapshot
2. call the model under the time budget
3. on failure, mark the execution ``failed`` with the error text
4. on success, insert the Message, mark the execution ``success`` and bump
   the schedule's ``last_execution_time``

All of it is one unit of work on one session, including the model call, so
a slow model holds the transaction open for as long as it takes. If anything
unexpected raises mid-way, the unit of work is rolled back and the failed
execution is written in its own short transaction before re-raising.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.engine import Engine
from sqlmodel import Session

from messageflow.models.message import ContentFormat, Message
from messageflow.models.schedule import ExecutionStatus, ScheduledTask, TaskExecution
from messageflow.services.llm.base import BaseLLMProvider
from messageflow.services.llm.executor import DEFAULT_TIMEOUT_SECONDS, execute_ai_request
from messageflow.services.scheduler.finder import ScheduleWithModel

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class ExecutionResult:
    success: bool
    message_id: Optional[int] = None
    error: Optional[str] = None


class ExecutionPipeline:
    """Executes schedules through an LLM provider, persisting through ``engine``.

    Args:
        engine: SQLAlchemy engine; each execution opens its own session.
        provider: LLM provider the prompt is sent to.
        timeout: Seconds to wait for the model before recording a timeout.
        use_online: Request web-augmented ("online") model variants.
    """

    def __init__(
        self,
        engine: Engine,
        provider: BaseLLMProvider,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        use_online: bool = False,
    ) -> None:
        self.engine = engine
        self.provider = provider
        self.timeout = timeout
        self.use_online = use_online

    async def execute(self, schedule: ScheduleWithModel) -> ExecutionResult:
        logger.info(f"Starting execution for schedule {schedule.id} ({schedule.name})")

        with Session(self.engine) as session:
            scheduled_time = _utcnow()
            execution = TaskExecution(
                scheduled_task_id=schedule.id,
                ai_model_id=schedule.ai_model_id,
                scheduled_execution_time=scheduled_time,
                status=ExecutionStatus.RUNNING.value,
                prompt_snapshot=schedule.prompt_content,
            )
            session.add(execution)
            session.flush()
            logger.debug(f"Task execution {execution.id} created for schedule {schedule.id}")

            start_time = _utcnow()
            execution.actual_start_time = start_time

            try:
                logger.info(
                    f"Calling {schedule.ai_model_company}/{schedule.ai_model_name} for schedule {schedule.id}"
                )
                ai_result = await execute_ai_request(
                    self.provider,
                    schedule.ai_model_company,
                    schedule.ai_model_name,
                    schedule.prompt_content,
                    timeout=self.timeout,
                    use_online=self.use_online,
                )
                finish_time = _utcnow()

                if not ai_result.success:
                    logger.error(f"AI execution failed for schedule {schedule.id}: {ai_result.error}")
                    execution.status = ExecutionStatus.FAILED.value
                    execution.actual_finish_time = finish_time
                    execution.error_message = ai_result.error
                    session.add(execution)
                    session.commit()
                    return ExecutionResult(success=False, error=ai_result.error)

                message = Message(
                    scheduled_task_id=schedule.id,
                    task_execution_id=execution.id,  # type: ignore[arg-type]
                    content=ai_result.content or "",
                    content_format=ContentFormat.TEXT.value,
                    title=schedule.name,
                    execution_completion_time=finish_time,
                )
                session.add(message)

                execution.status = ExecutionStatus.SUCCESS.value
                execution.actual_finish_time = finish_time
                session.add(execution)

                task = session.get(ScheduledTask, schedule.id)
                if task is None:
                    raise LookupError(f"Scheduled task {schedule.id} no longer exists")
                task.last_execution_time = finish_time
                session.add(task)

                session.flush()
                message_id = message.id
                session.commit()

                logger.info(f"Schedule {schedule.id} produced message {message_id}")
                return ExecutionResult(success=True, message_id=message_id)

            except Exception as e:
                logger.error(f"Exception during execution of schedule {schedule.id}: {e}")
                session.rollback()
                self._record_failure(schedule, scheduled_time, start_time, str(e) or type(e).__name__)
                raise

    def _record_failure(
        self,
        schedule: ScheduleWithModel,
        scheduled_time: datetime,
        start_time: datetime,
        error: str,
    ) -> None:
        """Persist a failed execution in its own transaction."""
        try:
            with Session(self.engine) as session:
                session.add(
                    TaskExecution(
                        scheduled_task_id=schedule.id,
                        ai_model_id=schedule.ai_model_id,
                        scheduled_execution_time=scheduled_time,
                        actual_start_time=start_time,
                        actual_finish_time=_utcnow(),
                        status=ExecutionStatus.FAILED.value,
                        error_message=error,
                        prompt_snapshot=schedule.prompt_content,
                    )
                )
                session.commit()
        except Exception:
            logger.exception(f"Could not record failed execution for schedule {schedule.id}")
