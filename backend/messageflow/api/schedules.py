"""REST API for managing scheduled tasks."""

import logging
from dataclasses import asdict
from datetime import datetime, timezone
from typing import Callable, Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from sqlmodel import Session, select

from messageflow.core.database import get_session
from messageflow.models.ai_model import AIModel
from messageflow.models.message import Message
from messageflow.models.schedule import ScheduledTask, ScheduleType, TaskExecution
from messageflow.services.scheduler.scheduler import get_trigger_factory
from messageflow.services.scheduler.trigger import ExecutionTrigger

router = APIRouter()
logger = logging.getLogger(__name__)


class ScheduleCreate(BaseModel):
    name: str = Field(min_length=1)
    ai_model_id: int
    prompt_content: str = Field(min_length=1)
    remark: Optional[str] = None
    schedule_type: ScheduleType = ScheduleType.DAILY
    execution_hour: int = Field(default=0, ge=0, le=23)
    execution_minute: int = Field(default=0, ge=0, le=59)
    timezone: str = "Asia/Shanghai"
    day_of_week: Optional[int] = Field(default=None, ge=0, le=6)
    day_of_month: Optional[int] = Field(default=None, ge=1, le=31)
    effective_start_time: Optional[datetime] = None
    effective_end_time: Optional[datetime] = None


class ScheduleUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    ai_model_id: Optional[int] = None
    prompt_content: Optional[str] = Field(default=None, min_length=1)
    remark: Optional[str] = None
    is_active: Optional[bool] = None
    schedule_type: Optional[ScheduleType] = None
    execution_hour: Optional[int] = Field(default=None, ge=0, le=23)
    execution_minute: Optional[int] = Field(default=None, ge=0, le=59)
    timezone: Optional[str] = None
    day_of_week: Optional[int] = Field(default=None, ge=0, le=6)
    day_of_month: Optional[int] = Field(default=None, ge=1, le=31)
    effective_start_time: Optional[datetime] = None
    effective_end_time: Optional[datetime] = None


# Columns a PATCH may omit but not clear.
_REQUIRED_FIELDS = (
    "name",
    "ai_model_id",
    "prompt_content",
    "is_active",
    "schedule_type",
    "execution_hour",
    "execution_minute",
    "timezone",
)


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def _schedule_to_dict(task: ScheduledTask, model: AIModel) -> dict:
    return {
        "id": task.id,
        "name": task.name,
        "ai_model_id": task.ai_model_id,
        "prompt_content": task.prompt_content,
        "remark": task.remark,
        "is_active": task.is_active,
        "schedule_type": task.schedule_type,
        "execution_hour": task.execution_hour,
        "execution_minute": task.execution_minute,
        "timezone": task.timezone,
        "day_of_week": task.day_of_week,
        "day_of_month": task.day_of_month,
        "effective_start_time": _iso(task.effective_start_time),
        "effective_end_time": _iso(task.effective_end_time),
        "last_execution_time": _iso(task.last_execution_time),
        "next_execution_time": _iso(task.next_execution_time),
        "created_at": task.created_at.isoformat(),
        "updated_at": task.updated_at.isoformat(),
        "ai_model_company": model.company_name,
        "ai_model_name": model.model_name,
    }


def _get_schedule_with_model(session: Session, schedule_id: int) -> tuple[ScheduledTask, AIModel]:
    row = session.exec(
        select(ScheduledTask, AIModel)
        .join(AIModel, ScheduledTask.ai_model_id == AIModel.id)  # type: ignore[arg-type]
        .where(ScheduledTask.id == schedule_id)
    ).first()
    if not row:
        raise HTTPException(status_code=404, detail="Scheduled task not found")
    return row


def _require_model(session: Session, ai_model_id: int) -> None:
    if not session.get(AIModel, ai_model_id):
        raise HTTPException(status_code=400, detail=f"AI model {ai_model_id} does not exist")


@router.get("/")
async def list_schedules(session: Session = Depends(get_session)):
    rows = session.exec(
        select(ScheduledTask, AIModel)
        .join(AIModel, ScheduledTask.ai_model_id == AIModel.id)  # type: ignore[arg-type]
        .order_by(ScheduledTask.created_at.desc())  # type: ignore[attr-defined]
    ).all()
    return [_schedule_to_dict(task, model) for task, model in rows]


@router.post("/", status_code=201)
async def create_schedule(body: ScheduleCreate, session: Session = Depends(get_session)):
    _require_model(session, body.ai_model_id)

    task = ScheduledTask(**body.model_dump(exclude={"schedule_type"}), schedule_type=body.schedule_type.value)
    session.add(task)
    session.commit()
    session.refresh(task)
    logger.debug(f"Created schedule {task.id} ({task.name})")
    return _schedule_to_dict(*_get_schedule_with_model(session, task.id))  # type: ignore[arg-type]


@router.post("/execute")
async def execute_all_schedules(
    build_trigger: Callable[[], ExecutionTrigger] = Depends(get_trigger_factory),
):
    """Run every active schedule now, ignoring its time and day rules."""
    try:
        summary = await build_trigger().run_all_active()
    except Exception as e:
        logger.exception("Manual execution failed")
        return JSONResponse(status_code=500, content={"success": False, "error": str(e)})

    response = {"success": True, **asdict(summary)}
    if summary.total == 0:
        response["message"] = "No active schedules to execute"
    return response


@router.get("/{schedule_id}")
async def get_schedule(schedule_id: int, session: Session = Depends(get_session)):
    return _schedule_to_dict(*_get_schedule_with_model(session, schedule_id))


@router.patch("/{schedule_id}")
async def update_schedule(
    schedule_id: int, body: ScheduleUpdate, session: Session = Depends(get_session)
):
    task = session.get(ScheduledTask, schedule_id)
    if not task:
        raise HTTPException(status_code=404, detail="Scheduled task not found")

    updates = body.model_dump(exclude_unset=True)
    if not updates:
        raise HTTPException(status_code=400, detail="No fields to update")
    for key in _REQUIRED_FIELDS:
        if key in updates and updates[key] is None:
            raise HTTPException(status_code=422, detail=f"{key} cannot be null")

    if "ai_model_id" in updates:
        _require_model(session, updates["ai_model_id"])
    if isinstance(updates.get("schedule_type"), ScheduleType):
        updates["schedule_type"] = updates["schedule_type"].value

    for key, value in updates.items():
        setattr(task, key, value)

    task.updated_at = datetime.now(timezone.utc)
    session.add(task)
    session.commit()
    return _schedule_to_dict(*_get_schedule_with_model(session, schedule_id))


@router.delete("/{schedule_id}")
async def delete_schedule(schedule_id: int, session: Session = Depends(get_session)):
    task = session.get(ScheduledTask, schedule_id)
    if not task:
        raise HTTPException(status_code=404, detail="Scheduled task not found")

    # Messages reference executions, so they go first
    messages = session.exec(select(Message).where(Message.scheduled_task_id == schedule_id)).all()
    for message in messages:
        session.delete(message)
    session.flush()

    executions = session.exec(
        select(TaskExecution).where(TaskExecution.scheduled_task_id == schedule_id)
    ).all()
    for execution in executions:
        session.delete(execution)
    session.flush()

    session.delete(task)
    session.commit()
    return {"status": "deleted"}


@router.get("/{schedule_id}/executions")
async def list_schedule_executions(
    schedule_id: int, limit: int = 20, session: Session = Depends(get_session)
):
    if not session.get(ScheduledTask, schedule_id):
        raise HTTPException(status_code=404, detail="Scheduled task not found")

    executions = session.exec(
        select(TaskExecution)
        .where(TaskExecution.scheduled_task_id == schedule_id)
        .order_by(TaskExecution.scheduled_execution_time.desc())  # type: ignore[attr-defined]
        .limit(limit)
    ).all()
    return [
        {
            "id": e.id,
            "ai_model_id": e.ai_model_id,
            "scheduled_execution_time": e.scheduled_execution_time.isoformat(),
            "actual_start_time": _iso(e.actual_start_time),
            "actual_finish_time": _iso(e.actual_finish_time),
            "status": e.status,
            "error_message": e.error_message,
            "prompt_snapshot": e.prompt_snapshot,
        }
        for e in executions
    ]
