"""Periodic trigger endpoint, hit once a minute by an external cron."""

import logging
from dataclasses import asdict
from typing import Callable

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from messageflow.services.scheduler.scheduler import get_trigger_factory
from messageflow.services.scheduler.trigger import ExecutionTrigger

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/execute-schedules")
async def execute_due_schedules(
    build_trigger: Callable[[], ExecutionTrigger] = Depends(get_trigger_factory),
):
    try:
        summary = await build_trigger().run_due_cycle()
    except Exception as e:
        logger.exception("Due-schedule cycle failed")
        return JSONResponse(status_code=500, content={"success": False, "error": str(e)})

    if summary.executed == 0:
        return {"success": True, "message": "No schedules due", "executed": 0, "results": []}

    return {
        "success": True,
        "executed": summary.executed,
        "results": [asdict(r) for r in summary.results],
    }
