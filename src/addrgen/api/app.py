"""FastAPI app for addrgen: the generator page and its JSON API."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from addrgen.api.routes import router
from addrgen.api.web import web_router
from addrgen.exceptions import HistoryRecordNotFoundError, MailboxError
from addrgen.generator.session import GeneratorSession
from addrgen.settings import get_settings

logger = logging.getLogger(__name__)

try:
    from importlib.metadata import version

    VERSION = version("addrgen")
except Exception:
    VERSION = "0.0.0"


def create_app(session: GeneratorSession | None = None) -> FastAPI:
    """Build and return the FastAPI application.

    Args:
        session: Pre-built page session. When omitted, one is wired from
            settings on startup (and initialised when
            ``api.initialize_on_startup`` is set).
    """
    settings = get_settings()

    @asynccontextmanager
    async def lifespan(application: FastAPI) -> AsyncIterator[None]:
        owned = application.state.session is None
        if owned:
            from addrgen.generator.session import build_session

            application.state.session = build_session()
            if settings.api.initialize_on_startup:
                application.state.session.initialize()
        yield
        if owned:
            application.state.session.close()

    application = FastAPI(
        title="Real Address Generator",
        description="Synthetic identities at real addresses near a network location.",
        version=VERSION,
        lifespan=lifespan,
    )
    application.state.session = session

    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.api.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @application.exception_handler(HistoryRecordNotFoundError)
    async def _history_not_found(request: Request, exc: HistoryRecordNotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @application.exception_handler(MailboxError)
    async def _mailbox_error(request: Request, exc: MailboxError) -> JSONResponse:
        logger.warning("Mailbox error on %s: %s", request.url.path, exc)
        return JSONResponse(status_code=502, content={"detail": "Disposable inbox unavailable."})

    application.include_router(router)
    application.include_router(web_router)
    return application


app = create_app()


def main() -> None:
    """Entrypoint for direct execution (development)."""
    import uvicorn

    from addrgen.logging_config import configure_logging

    settings = get_settings()
    configure_logging(settings.log_level)
    logger.info("Starting addrgen on %s:%d", settings.api.host, settings.api.port)
    uvicorn.run(create_app(), host=settings.api.host, port=settings.api.port)


if __name__ == "__main__":
    main()
