from __future__ import annotations

import contextlib
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from dotenv import load_dotenv

logger = logging.getLogger(__name__)


@contextlib.asynccontextmanager
async def lifespan(app: FastAPI):
    from endpoints.dependencies import get_repo

    # Housekeeping: reset tokens past their expiry are useless.
    await get_repo().drop_expired_reset_tokens()
    yield


def create_app() -> FastAPI:
    load_dotenv("local.env")

    from endpoints import (
        auth_endpoints,
        entry_endpoints,
        goal_endpoints,
        invitation_endpoints,
        settings_endpoints,
        user_endpoints,
    )
    from endpoints.error_handlers import register_error_handlers
    from persistence.paths import db_path
    from settings import get_settings

    settings = get_settings()

    app = FastAPI(title="dygo API", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    if settings.debug_log_requests:

        @app.middleware("http")
        async def log_requests(request: Request, call_next):
            logger.info("REQUEST: %s %s", request.method, request.url.path)
            return await call_next(request)

    register_error_handlers(app)

    @app.get("/")
    async def root() -> PlainTextResponse:
        return PlainTextResponse("DYGO API OK. Use /api/users, /api/entries, etc.")

    for module in (
        auth_endpoints,
        user_endpoints,
        entry_endpoints,
        goal_endpoints,
        invitation_endpoints,
        settings_endpoints,
    ):
        app.include_router(module.router)

    logger.info("dygo API ready (env=%s, db=%s)", settings.environment, db_path())
    return app


app = create_app()
