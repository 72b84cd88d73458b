"""FastAPI application entrypoint for the SocialSave download server."""
from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import AsyncIterator, Final, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from socialsave.api.http import router as api_router
from socialsave.core.config import Settings, ensure_directories, get_settings
from socialsave.core.errors import InvalidInput, SocialSaveError
from socialsave.core.logging_cfg import setup_logging
from socialsave.domain.schemas import ErrorResponse
from socialsave.infra.process import ToolInvoker
from socialsave.services.downloader import DownloadOrchestrator
from socialsave.services.extractor import MetadataExtractor
from socialsave.services.sweeper import RetentionSweeper

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None, invoker: Optional[ToolInvoker] = None) -> FastAPI:
    """Create and configure the FastAPI application instance.

    Notes
    -----
    - Services are built once here and stored on ``app.state``; handlers receive them
      through dependencies, so tests can pass their own ``settings`` and ``invoker``.
    - Downloaded artifacts are served read-only from ``settings.public_downloads_path``.
    - The retention sweeper runs as a background task for the lifetime of the app.

    Parameters
    ----------
    settings: Optional[Settings]
        Settings to use; defaults to the cached environment settings.
    invoker: Optional[ToolInvoker]
        Process runner used for every yt-dlp call.

    Returns
    -------
    FastAPI
        The configured FastAPI application.
    """

    settings = settings or get_settings()
    ensure_directories(settings)
    setup_logging(settings.debug)
    invoker = invoker or ToolInvoker()
    downloads_dir = settings.downloads_dir.expanduser().resolve()

    sweeper = RetentionSweeper(
        downloads_dir,
        max_age_seconds=settings.retention_seconds,
        interval_seconds=settings.sweep_interval_seconds,
    )

    @contextlib.asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        task: Optional[asyncio.Task[None]] = None
        if settings.sweep_enabled:
            task = asyncio.create_task(sweeper.run_forever())
        logger.info("Downloads directory: %s", downloads_dir)
        try:
            yield
        finally:
            if task is not None:
                task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await task

    app: FastAPI = FastAPI(title=settings.app_name, lifespan=lifespan)
    app.state.settings = settings
    app.state.sweeper = sweeper
    app.state.extractor = MetadataExtractor(invoker, settings)
    app.state.orchestrator = DownloadOrchestrator(downloads_dir, invoker, settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(SocialSaveError)
    async def handle_service_error(request: Request, exc: SocialSaveError) -> JSONResponse:
        """Map service errors to ``{"success": false, "error": ...}`` bodies."""

        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(error=exc.message).model_dump(),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(_: Request, __: RequestValidationError) -> JSONResponse:
        """Malformed bodies are reported like a missing URL."""

        error = InvalidInput()
        return JSONResponse(
            status_code=error.status_code,
            content=ErrorResponse(error=error.message).model_dump(),
        )

    app.include_router(api_router)
    app.mount(
        settings.public_downloads_path,
        StaticFiles(directory=downloads_dir),
        name="downloads",
    )

    return app


app: Final[FastAPI] = create_app()


if __name__ == "__main__":
    import uvicorn

    _settings: Settings = get_settings()
    uvicorn.run("socialsave.main:app", host=_settings.host, port=_settings.port)
