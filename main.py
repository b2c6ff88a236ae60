"""
Auth backend — application entry point.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.auth import router as auth_router
from api.middleware import register_error_handlers, register_middleware
from api.profile import router as profile_router
from auth.context import AuthContext
from config.settings import Settings, load_settings
from database.session import build_engine, build_session_factory, create_schema

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(asctime)s  %(levelname)-8s  %(name)s — %(message)s",
        stream=sys.stdout,
    )
    for _noisy in ("httpcore", "httpx", "aiosqlite", "urllib3"):
        logging.getLogger(_noisy).setLevel(logging.WARNING)


def create_app(
    settings: Optional[Settings] = None,
    context: Optional[AuthContext] = None,
) -> FastAPI:
    settings = settings or (context.settings if context else load_settings())
    context = context or AuthContext.from_settings(settings)

    app = FastAPI(
        title="ProjectX Auth",
        version="1.0.0",
        description="Email/password and Discord OAuth authentication backend.",
    )

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_middleware(app)
    register_error_handlers(app)

    engine = build_engine(settings.database_url, echo=False)
    app.state.auth_context = context
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)

    # Routes
    app.include_router(auth_router, prefix="/api/auth")
    app.include_router(profile_router, prefix="/api")

    @app.on_event("startup")
    async def on_startup():
        if not settings.jwt_secret:
            logger.warning("SECRET not set — token issuance will fail")
        if not context.provider.is_configured():
            logger.warning(
                "Discord login skipped — not configured (missing client_id/secret)"
            )

        logger.info("Syncing database schema…")
        await create_schema(engine)
        context.avatars.ensure_root()

        logger.info("Application ready to accept requests.")

    @app.on_event("shutdown")
    async def on_shutdown():
        await engine.dispose()

    return app


if __name__ == "__main__":
    _settings = load_settings()
    configure_logging(_settings)
    uvicorn.run(
        create_app(_settings),
        host=_settings.host,
        port=_settings.port,
        log_level="debug" if _settings.debug else "info",
    )
