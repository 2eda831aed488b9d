"""Messages produced by successful task executions."""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from sqlmodel import Field, SQLModel


class ContentFormat(str, Enum):
    TEXT = "text"
    MARKDOWN = "markdown"
    JSON = "json"
    HTML = "html"


class Message(SQLModel, table=True):
    __tablename__ = "messages"

    id: Optional[int] = Field(default=None, primary_key=True)
    scheduled_task_id: int = Field(foreign_key="scheduled_tasks.id", index=True)
    task_execution_id: int = Field(foreign_key="task_executions.id", unique=True)
    content: str
    content_format: str = Field(default=ContentFormat.TEXT.value)
    title: Optional[str] = None
    summary: Optional[str] = None
    execution_completion_time: datetime
    is_read: bool = Field(default=False)
    read_at: Optional[datetime] = None
    is_favorite: bool = Field(default=False)
    favorited_at: Optional[datetime] = None
    priority: int = Field(default=0)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
