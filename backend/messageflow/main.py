import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from messageflow.core.config import settings
from messageflow.core.database import init_db
from messageflow.api import ai_models, cron, messages, schedules
from messageflow.services.scheduler import scheduler


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Configure logging based on debug setting
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s" if settings.debug
        else "%(levelname)-8s %(name)s: %(message)s",
    )

    init_db()

    # External cron normally drives execution; the in-process tick is opt-in
    scheduler_task = None
    if settings.internal_scheduler_enabled:
        scheduler_task = asyncio.create_task(scheduler.scheduler_loop())

    yield

    if scheduler_task is not None:
        scheduler_task.cancel()
        try:
            await scheduler_task
        except asyncio.CancelledError:
            pass


app = FastAPI(title=settings.app_name, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(cron.router, prefix="/api/cron", tags=["cron"])
app.include_router(ai_models.router, prefix="/api/ai-models", tags=["ai-models"])
app.include_router(schedules.router, prefix="/api/schedules", tags=["schedules"])
app.include_router(messages.router, prefix="/api/messages", tags=["messages"])
app.include_router(messages.favorites_router, prefix="/api/favorites", tags=["favorites"])


@app.get("/api/health")
async def health():
    return {"status": "ok", "app": settings.app_name}
