# tests/conftest.py
import os

import pytest
import pytest_asyncio
from dotenv import load_dotenv
from httpx import ASGITransport, AsyncClient
from sqlalchemy.pool import NullPool, StaticPool

# Load .env.test if available; TEST_DATABASE_URL there switches the suite to Postgres
load_dotenv(".env.test", override=False)
os.environ.setdefault("TESTING", "1")
os.environ.setdefault("APP_ENV", "test")
os.environ["SENTRY_DSN"] = ""

from scam_reports.core.config import Settings  # noqa: E402 (import after env tweaks)
from scam_reports.db import Database  # noqa: E402
from scam_reports.infra.whop import WhopClient  # noqa: E402
from scam_reports.main import create_app  # noqa: E402
from scam_reports.models import Base  # noqa: E402
from tests.factories.whop import (  # noqa: E402
    APP_ID,
    BASE_URL,
    generate_signing_key,
    make_user_token,
    public_key_pem,
    seeded_whop,
)

DB_URL = os.getenv("TEST_DATABASE_URL") or "sqlite+aiosqlite:///:memory:"
COMPANY_ID = "biz_123"


def _engine_kwargs(url: str) -> dict:
    # in-memory sqlite lives on one connection; Postgres gets a fresh one per checkout
    if url.startswith("sqlite"):
        return {"poolclass": StaticPool}
    return {"poolclass": NullPool}


@pytest.fixture(scope="session")
def signing_key():
    return generate_signing_key()


@pytest.fixture
def settings(signing_key) -> Settings:
    return Settings(
        database_url=DB_URL,
        whop_api_key="test-key",
        whop_app_id=APP_ID,
        whop_api_base_url=BASE_URL,
        whop_token_public_key=public_key_pem(signing_key),
    )


@pytest.fixture
def fake_whop():
    return seeded_whop()


@pytest_asyncio.fixture
async def whop_client(settings, fake_whop):
    client = WhopClient.from_settings(settings, transport=fake_whop.transport())
    try:
        yield client
    finally:
        await client.aclose()


@pytest_asyncio.fixture
async def database():
    db = Database(DB_URL, **_engine_kwargs(DB_URL))
    async with db.engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    try:
        yield db
    finally:
        await db.dispose()


@pytest_asyncio.fixture(name="session")
async def _session(database):
    async with database.session_factory() as s:
        yield s
        if s.in_transaction():
            await s.rollback()


@pytest.fixture
def token_for(signing_key):
    def _token(user_id: str, **kwargs) -> str:
        return make_user_token(signing_key, user_id, **kwargs)

    return _token


@pytest.fixture
def headers_for(token_for):
    """Request headers for a Whop user inside an experience of biz_123."""

    def _headers(user_id: str, company_id: str | None = COMPANY_ID) -> dict[str, str]:
        headers = {"x-whop-user-token": token_for(user_id)}
        if company_id:
            headers["x-whop-company-id"] = company_id
        return headers

    return _headers


@pytest.fixture
def app(settings, database, whop_client):
    return create_app(settings, database=database, whop=whop_client)


@pytest_asyncio.fixture
async def app_client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
