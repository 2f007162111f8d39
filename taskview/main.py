"""FastAPI entrypoint for the task view service."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from taskview.api import register_api_handlers
from taskview.config import load_config
from taskview.errors import TaskViewError, error_response
from taskview.logging_config import configure_logging

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        config = load_config()
        configure_logging(config.log_level)
        app.state.config = config
        logger.info(
            "taskview started (default_per_page=%d, raw_fallback=%s)",
            config.default_per_page,
            config.raw_fallback,
        )
        yield

    app = FastAPI(lifespan=lifespan)

    @app.exception_handler(TaskViewError)
    def handle_taskview_error(request: Request, exc: TaskViewError) -> JSONResponse:
        logger.info("Rejected %s: %s", request.url.path, exc.error.code)
        return JSONResponse(status_code=400, content=error_response(exc.error))

    @app.get("/health", status_code=200)
    def health() -> dict[str, str]:
        return {"status": "ok"}

    register_api_handlers(app)
    return app


app = create_app()
