"""Shared test fixtures for backend tests."""

import asyncio
from functools import partial
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from messageflow.core.database import get_session
from messageflow.models.ai_model import AIModel
from messageflow.models.schedule import ScheduledTask
from messageflow.services.llm.base import BaseLLMProvider
from messageflow.services.scheduler.finder import ScheduleWithModel
from messageflow.services.scheduler.pipeline import ExecutionPipeline
from messageflow.services.scheduler.scheduler import create_trigger, get_trigger_factory

# In-memory SQLite with StaticPool so all connections (including threads) share one DB
test_engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


def get_test_session():
    with Session(test_engine) as session:
        yield session


class FakeProvider(BaseLLMProvider):
    """Provider that answers from a prompt -> reply table.

    A reply may be a string, an exception instance (raised), or a float
    (seconds to hang before answering, for timeout tests).
    """

    def __init__(self, replies: dict | None = None, default: str = "Generated content"):
        self.replies = replies or {}
        self.default = default
        self.calls: list[tuple[str, str]] = []

    async def complete(self, model_id: str, prompt: str) -> str:
        self.calls.append((model_id, prompt))
        reply = self.replies.get(prompt, self.default)
        if isinstance(reply, Exception):
            raise reply
        if isinstance(reply, float):
            await asyncio.sleep(reply)
            return "too late"
        return reply


def seed_model(company_name="openai", model_name="gpt-4o", is_active=True) -> int:
    with Session(test_engine) as session:
        model = AIModel(company_name=company_name, model_name=model_name, is_active=is_active)
        session.add(model)
        session.commit()
        session.refresh(model)
        return model.id


def seed_schedule(ai_model_id: int, name="Morning Brief", prompt_content="Summarize today's news", **fields) -> int:
    with Session(test_engine) as session:
        task = ScheduledTask(ai_model_id=ai_model_id, name=name, prompt_content=prompt_content, **fields)
        session.add(task)
        session.commit()
        session.refresh(task)
        return task.id


def load_schedule(schedule_id: int) -> ScheduleWithModel:
    with Session(test_engine) as session:
        task = session.get(ScheduledTask, schedule_id)
        model = session.get(AIModel, task.ai_model_id)
        return ScheduleWithModel.from_row(task, model)


@pytest.fixture(autouse=True)
def setup_test_db():
    """Create all tables before each test, drop after."""
    import messageflow.models  # noqa: F401 - register models
    SQLModel.metadata.create_all(test_engine)
    yield
    SQLModel.metadata.drop_all(test_engine)


@pytest.fixture
def provider():
    return FakeProvider()


@pytest.fixture
def pipeline(provider):
    return ExecutionPipeline(test_engine, provider, timeout=1.0)


@pytest.fixture
def client(provider):
    """FastAPI TestClient with the database and LLM provider swapped out."""
    with patch("messageflow.core.database.engine", test_engine):
        from messageflow.main import app

        app.dependency_overrides[get_session] = get_test_session
        app.dependency_overrides[get_trigger_factory] = lambda: partial(create_trigger, test_engine, provider=provider)

        with TestClient(app) as c:
            yield c

        app.dependency_overrides.clear()
