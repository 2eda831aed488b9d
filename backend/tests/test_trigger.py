"""Tests for due-cycle and run-all trigger orchestration."""

from unittest.mock import MagicMock

import pytest
from sqlmodel import Session, create_engine, select

from tests.conftest import FakeProvider, seed_model, seed_schedule, test_engine
from messageflow.models.message import Message
from messageflow.models.schedule import TaskExecution
from messageflow.services.scheduler.clock import CalendarInstant
from messageflow.services.scheduler.pipeline import ExecutionPipeline
from messageflow.services.scheduler.trigger import ExecutionTrigger


def _fixed_clock(hour, minute, day_of_week, day_of_month):
    clock = MagicMock()
    clock.now.return_value = CalendarInstant(hour, minute, day_of_week, day_of_month)
    return clock


def _trigger(provider, clock=None, engine=test_engine):
    pipeline = ExecutionPipeline(engine, provider, timeout=1.0)
    return ExecutionTrigger(engine, pipeline, clock or _fixed_clock(9, 0, 1, 1), timezone="Asia/Shanghai")


@pytest.mark.asyncio
async def test_due_cycle_with_nothing_due(provider):
    seed_schedule(seed_model(), execution_hour=10)

    summary = await _trigger(provider).run_due_cycle()

    assert summary.executed == 0
    assert summary.results == []
    assert provider.calls == []


@pytest.mark.asyncio
async def test_due_cycle_uses_configured_zone(provider):
    clock = _fixed_clock(9, 0, 1, 1)
    await _trigger(provider, clock).run_due_cycle()
    clock.now.assert_called_once_with("Asia/Shanghai")


@pytest.mark.asyncio
async def test_due_cycle_runs_only_due_schedules(provider):
    model_id = seed_model()
    monday = seed_schedule(model_id, name="Monday", schedule_type="weekly", day_of_week=1, execution_hour=9)
    seed_schedule(model_id, name="Tuesday", schedule_type="weekly", day_of_week=2, execution_hour=9)
    seed_schedule(model_id, name="Later", execution_hour=18)

    summary = await _trigger(provider).run_due_cycle()

    assert summary.executed == 1
    [outcome] = summary.results
    assert outcome.schedule_id == monday
    assert outcome.schedule_name == "Monday"
    assert outcome.status == "success"
    with Session(test_engine) as session:
        message = session.exec(select(Message)).one()
    assert outcome.message == f"Message {message.id}"


@pytest.mark.asyncio
async def test_one_failure_does_not_abort_the_cycle():
    model_id = seed_model()
    seed_schedule(model_id, name="Good", prompt_content="good", execution_hour=9)
    seed_schedule(model_id, name="Bad", prompt_content="bad", execution_hour=9)
    provider = FakeProvider(replies={"bad": RuntimeError("model overloaded")})

    summary = await _trigger(provider).run_due_cycle()

    outcomes = {r.schedule_name: r for r in summary.results}
    assert summary.executed == 2
    assert outcomes["Good"].status == "success"
    assert outcomes["Bad"].status == "failed"
    assert outcomes["Bad"].message == "model overloaded"


@pytest.mark.asyncio
async def test_pipeline_exception_is_reported_per_schedule(provider):
    model_id = seed_model()
    seed_schedule(model_id, name="A", execution_hour=9)
    seed_schedule(model_id, name="B", execution_hour=9)
    pipeline = MagicMock()

    async def execute(schedule):
        if schedule.name == "A":
            raise RuntimeError("write conflict")
        return await ExecutionPipeline(test_engine, provider, timeout=1.0).execute(schedule)

    pipeline.execute = execute
    trigger = ExecutionTrigger(test_engine, pipeline, _fixed_clock(9, 0, 1, 1), timezone="UTC")

    summary = await trigger.run_due_cycle()

    outcomes = {r.schedule_name: r for r in summary.results}
    assert outcomes["A"].status == "failed"
    assert outcomes["A"].message == "write conflict"
    assert outcomes["B"].status == "success"


@pytest.mark.asyncio
async def test_store_failure_propagates(provider, tmp_path):
    broken = create_engine(f"sqlite:///{tmp_path / 'missing' / 'db.sqlite'}")

    with pytest.raises(Exception):
        await _trigger(provider, engine=broken).run_due_cycle()


@pytest.mark.asyncio
async def test_run_all_active_tallies_outcomes():
    model_id = seed_model()
    seed_schedule(model_id, name="One", prompt_content="one", execution_hour=1)
    seed_schedule(model_id, name="Two", prompt_content="two", schedule_type="weekly", day_of_week=6)
    seed_schedule(model_id, name="Three", prompt_content="three", schedule_type="monthly", day_of_month=31)
    seed_schedule(model_id, name="Paused", prompt_content="paused", is_active=False)
    provider = FakeProvider(replies={"two": RuntimeError("quota exceeded")})

    summary = await _trigger(provider).run_all_active()

    assert (summary.total, summary.successful, summary.failed) == (3, 2, 1)
    with Session(test_engine) as session:
        statuses = sorted(e.status for e in session.exec(select(TaskExecution)).all())
        assert statuses == ["failed", "success", "success"]
        assert len(session.exec(select(Message)).all()) == 2


@pytest.mark.asyncio
async def test_run_all_active_with_no_schedules(provider):
    summary = await _trigger(provider).run_all_active()
    assert (summary.total, summary.successful, summary.failed) == (0, 0, 0)
