"""Select schedules that are due at a given calendar instant."""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlmodel import Session, select

from messageflow.models.ai_model import AIModel
from messageflow.models.schedule import ScheduledTask
from messageflow.services.scheduler.recurrence import matches

logger = logging.getLogger(__name__)


@dataclass
class ScheduleWithModel:
    """Detached snapshot of a schedule joined with its AI model."""

    id: int
    name: str
    ai_model_id: int
    prompt_content: str
    schedule_type: str
    execution_hour: int
    execution_minute: int
    timezone: str
    day_of_week: Optional[int]
    day_of_month: Optional[int]
    last_execution_time: Optional[datetime]
    ai_model_company: str
    ai_model_name: str

    @classmethod
    def from_row(cls, task: ScheduledTask, model: AIModel) -> "ScheduleWithModel":
        return cls(
            id=task.id,  # type: ignore[arg-type]
            name=task.name,
            ai_model_id=task.ai_model_id,
            prompt_content=task.prompt_content,
            schedule_type=task.schedule_type,
            execution_hour=task.execution_hour,
            execution_minute=task.execution_minute,
            timezone=task.timezone,
            day_of_week=task.day_of_week,
            day_of_month=task.day_of_month,
            last_execution_time=task.last_execution_time,
            ai_model_company=model.company_name,
            ai_model_name=model.model_name,
        )


def _active_with_model():
    return (
        select(ScheduledTask, AIModel)
        .join(AIModel, ScheduledTask.ai_model_id == AIModel.id)  # type: ignore[arg-type]
        .where(ScheduledTask.is_active == True)  # noqa: E712
    )


def list_active(session: Session) -> list[ScheduleWithModel]:
    """Every active schedule, newest first, regardless of time."""
    rows = session.exec(
        _active_with_model().order_by(ScheduledTask.created_at.desc())  # type: ignore[attr-defined]
    ).all()
    return [ScheduleWithModel.from_row(task, model) for task, model in rows]


def find_due(
    session: Session, hour: int, minute: int, day_of_week: int, day_of_month: int
) -> list[ScheduleWithModel]:
    """Active schedules set for ``hour:minute`` whose day rule matches."""
    rows = session.exec(
        _active_with_model()
        .where(ScheduledTask.execution_hour == hour)
        .where(ScheduledTask.execution_minute == minute)
        .order_by(ScheduledTask.created_at.desc())  # type: ignore[attr-defined]
    ).all()

    due = [
        ScheduleWithModel.from_row(task, model)
        for task, model in rows
        if matches(task, day_of_week, day_of_month)
    ]
    logger.debug(f"{len(rows)} schedules at {hour:02d}:{minute:02d}, {len(due)} due")
    return due
