from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from dotenv import load_dotenv
from fastapi import FastAPI

from imagecomment.api.router import api_router
from imagecomment.clipboard import select_probe
from imagecomment.config import get_settings
from imagecomment.diagnostics import DiagnosticChannel
from imagecomment.paste.orchestrator import PasteOrchestrator

logger = structlog.get_logger()

load_dotenv()


@asynccontextmanager
async def lifespan(
    app: FastAPI,
) -> AsyncGenerator[None]:
    settings = get_settings()
    channel = DiagnosticChannel(settings.log_path)
    probe = select_probe(logger=channel.logger)
    app.state.diagnostics = channel
    app.state.orchestrator = PasteOrchestrator(probe, logger=channel.logger)
    logger.info(
        "starting_up",
        version=settings.app_version,
        probe=probe.name,
        log_path=str(settings.log_path),
    )

    yield

    channel.close()
    logger.info("shutting_down")


def create_app() -> FastAPI:
    """Build and return the FastAPI application."""
    settings = get_settings()
    application = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        lifespan=lifespan,
    )
    application.include_router(api_router, prefix="/api/v1")
    return application


app = create_app()
