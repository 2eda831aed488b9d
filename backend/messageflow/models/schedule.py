"""Scheduled tasks and their execution history."""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from sqlmodel import Field, SQLModel


class ScheduleType(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class ExecutionStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    SUCCESS = "success"
    FAILED = "failed"
    SKIPPED = "skipped"


class ScheduledTask(SQLModel, table=True):
    __tablename__ = "scheduled_tasks"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    ai_model_id: int = Field(foreign_key="ai_models.id", index=True)
    prompt_content: str  # The instruction sent to the model
    remark: Optional[str] = None
    is_active: bool = Field(default=True, index=True)

    # Recurrence
    schedule_type: str = Field(default=ScheduleType.DAILY.value)  # daily | weekly | monthly
    execution_hour: int = Field(default=0)
    execution_minute: int = Field(default=0)
    timezone: str = Field(default="Asia/Shanghai")
    day_of_week: Optional[int] = None  # 0=Sun..6=Sat, weekly only
    day_of_month: Optional[int] = None  # 1..31, monthly only
    effective_start_time: Optional[datetime] = None
    effective_end_time: Optional[datetime] = None

    last_execution_time: Optional[datetime] = None  # Set on successful runs only
    next_execution_time: Optional[datetime] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class TaskExecution(SQLModel, table=True):
    __tablename__ = "task_executions"

    id: Optional[int] = Field(default=None, primary_key=True)
    scheduled_task_id: int = Field(foreign_key="scheduled_tasks.id", index=True)
    ai_model_id: int = Field(foreign_key="ai_models.id")
    scheduled_execution_time: datetime
    actual_start_time: Optional[datetime] = None
    actual_finish_time: Optional[datetime] = None
    status: str = Field(default=ExecutionStatus.PENDING.value)
    error_message: Optional[str] = None
    prompt_snapshot: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
