"""Poker Drill Engine - FastAPI app entry point."""
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger

from drill_engine.core.config import get_settings
from drill_engine.core.errors import DrillEngineError
from drill_engine.core.logging import configure_logging
from drill_engine.db.base import Base
from drill_engine.db.session import engine
from drill_engine.routers import api

settings = get_settings()
configure_logging(settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting {settings.app_name}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield

    await engine.dispose()
    logger.info(f"{settings.app_name} stopped")


app = FastAPI(
    title=settings.app_name,
    description="Adaptive drill scheduling and skill ratings for leak training",
    lifespan=lifespan,
)


@app.exception_handler(DrillEngineError)
async def drill_engine_error_handler(request: Request, exc: DrillEngineError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(p) for p in first.get("loc", ()))
    detail = f"{location}: {first.get('msg', 'invalid request')}" if location else "invalid request"
    return JSONResponse(status_code=400, content={"error": "validation_error", "detail": detail})


app.include_router(api.router)


@app.get("/health")
async def health():
    return {"status": "ok"}
