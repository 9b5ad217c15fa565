import os
from contextlib import asynccontextmanager

import sentry_sdk
import structlog
from fastapi import FastAPI
from sentry_sdk.integrations.starlette import StarletteIntegration
from starlette.middleware.cors import CORSMiddleware

from scam_reports.api import errors
from scam_reports.api.routers.auth import router as auth_router
from scam_reports.api.routers.health import router as health_router
from scam_reports.api.routers.reports import router as reports_router
from scam_reports.api.routers.upload import router as upload_router
from scam_reports.api.routers.users import router as users_router
from scam_reports.core.config import Settings
from scam_reports.db import Database
from scam_reports.infra.whop import WhopClient
from scam_reports.logging import setup_logging
from scam_reports.middleware.rate_limit import rate_limit_middleware
from scam_reports.middleware.request_id import request_id_middleware


def _init_sentry(env: str) -> None:
    dsn = os.getenv("SENTRY_DSN")
    if not dsn:
        return
    # traces_sample_rate: clamp to [0.0, 0.2]
    try:
        rate_raw = float(os.getenv("SENTRY_TRACES_RATE", "0"))
    except ValueError:
        rate_raw = 0.0
    sentry_sdk.init(
        dsn=dsn,
        environment=env,
        release=os.getenv("RELEASE"),
        integrations=[StarletteIntegration()],
        traces_sample_rate=max(0.0, min(0.2, rate_raw)),
        send_default_pii=False,
    )


def create_app(
    settings: Settings | None = None,
    *,
    database: Database | None = None,
    whop: WhopClient | None = None,
) -> FastAPI:
    """Build the API.

    The database and Whop client are created once in the lifespan and closed
    on shutdown. Callers (tests, embedding apps) may pass their own; those
    are attached immediately and left for the caller to close.
    """
    setup_logging()
    env = os.getenv("APP_ENV", "dev")
    _init_sentry(env)
    settings = settings or Settings()
    logger = structlog.get_logger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned_db = owned_whop = None
        if getattr(app.state, "database", None) is None:
            owned_db = app.state.database = Database(settings.database_url)
        if getattr(app.state, "whop", None) is None:
            owned_whop = app.state.whop = WhopClient.from_settings(settings)
        logger.info("app_startup", env=env)
        try:
            yield
        finally:
            if owned_whop is not None:
                await owned_whop.aclose()
            if owned_db is not None:
                await owned_db.dispose()
            logger.info("app_shutdown", env=env)

    app = FastAPI(title="Scam Report Moderation", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.database = database
    app.state.whop = whop

    # Last registered runs outermost: every response, 429s included, gets an X-Request-ID
    app.middleware("http")(rate_limit_middleware)
    app.middleware("http")(request_id_middleware)

    allow_origins = [o.strip() for o in os.getenv("ALLOW_ORIGINS", "").split(",") if o.strip()]
    if allow_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=allow_origins,
            allow_credentials=True,
            allow_methods=["GET", "POST", "PATCH", "OPTIONS", "HEAD"],
            allow_headers=["*"],
        )

    errors.install(app)

    app.include_router(auth_router)
    app.include_router(reports_router)
    app.include_router(users_router)
    app.include_router(upload_router)
    app.include_router(health_router)
    return app
