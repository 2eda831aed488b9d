"""AI model registry."""

from datetime import datetime, timezone
from typing import Optional

from sqlmodel import Field, SQLModel


class AIModel(SQLModel, table=True):
    __tablename__ = "ai_models"

    id: Optional[int] = Field(default=None, primary_key=True)
    company_name: str  # Provider prefix, e.g. "openai", "anthropic"
    model_name: str
    remark: Optional[str] = None
    is_active: bool = Field(default=True)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
