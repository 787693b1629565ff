from __future__ import annotations

import asyncio
import logging
import sys
import time
from contextlib import asynccontextmanager, suppress

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from media_gateway import __version__
from media_gateway.api.handlers import router as api_router
from media_gateway.config import Settings, get_settings
from media_gateway.dependencies import ServiceContainer, build_services
from media_gateway.media.storage import ScratchStorage

logger = logging.getLogger(__name__)

_SWEEP_INTERVAL_SECONDS = 3600


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stdout,
    )


async def _sweep_loop(storage: ScratchStorage, max_age_seconds: float) -> None:
    while True:
        await asyncio.sleep(_SWEEP_INTERVAL_SECONDS)
        try:
            await asyncio.to_thread(storage.sweep_expired, max_age_seconds)
        except OSError as exc:
            logger.error("Scratch sweep failed: %s", exc, exc_info=True)


@asynccontextmanager
async def lifespan(app: FastAPI):
    services: ServiceContainer = app.state.services
    settings = services.settings
    storage = services.storage
    storage.ensure_root()
    logger.info("Scratch directory: %s", storage.root)

    sweep_task = None
    if settings.output_ttl_seconds > 0:
        storage.sweep_expired(settings.output_ttl_seconds, include_inputs=True)
        sweep_task = asyncio.create_task(_sweep_loop(storage, settings.output_ttl_seconds))

    yield

    if sweep_task is not None:
        sweep_task.cancel()
        with suppress(asyncio.CancelledError):
            await sweep_task
    logger.info("Media gateway stopped")


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(title="Media Conversion Gateway", version=__version__, lifespan=lifespan)
    app.state.services = build_services(settings)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_url],
        allow_methods=["GET", "POST"],
        allow_headers=["Content-Type"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(
            "%s %s %d %.1fms",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
        )
        return response

    app.include_router(api_router)
    logger.info("CORS allowed origin: %s", settings.frontend_url)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "media_gateway.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
    )
