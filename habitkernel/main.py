from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from habitkernel.config import settings
from habitkernel.deps import schema_registry
from habitkernel.kernel.router import router as kernel_router
from habitkernel.logging_config import setup_logging

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(_: FastAPI):
    setup_logging(json_mode=settings.log_json, level=settings.log_level)
    schema = schema_registry.load()
    logger.info("habitkernel_started", sections=len(schema), schema_path=settings.schema_path)
    yield


app = FastAPI(title="HabitKernel", version="0.1.0", lifespan=lifespan)
app.include_router(kernel_router)


@app.get("/")
async def root() -> dict:
    return {
        "status": "ok",
        "docs": "/docs",
        "health": "/health",
        "kernel": {
            "evaluate": "/kernel/evaluate",
            "schedule_check": "/kernel/schedule/check",
            "schedule_describe": "/kernel/schedule/describe",
            "completion_daily": "/kernel/completion/daily",
            "completion_monthly": "/kernel/completion/monthly",
            "calculated": "/kernel/calculated/{section}",
            "schema": "/kernel/schema",
            "schema_validate": "/kernel/schema/validate",
        },
    }


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}
