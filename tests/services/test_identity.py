import pytest

from scam_reports.infra.whop import WhopClient
from scam_reports.services.identity import AuthContext, IdentityVerifier
from tests.factories.whop import BASE_URL

URL = "https://app.test/reports"


@pytest.fixture
def verifier(whop_client):
    return IdentityVerifier(whop_client)


@pytest.mark.asyncio
async def test_token_and_company_header(verifier, token_for):
    headers = {"x-whop-user-token": token_for("user_member"), "x-whop-company-id": "biz_123"}

    auth = await verifier.verify(headers, URL)

    assert auth == AuthContext(user_id="user_member", company_id="biz_123")


@pytest.mark.asyncio
async def test_missing_token_is_unauthenticated(verifier):
    assert await verifier.verify({"x-whop-company-id": "biz_123"}, URL) is None


@pytest.mark.asyncio
async def test_invalid_token_is_unauthenticated(verifier, token_for):
    headers = {"x-whop-user-token": token_for("user_member", expires_in=-10)}
    assert await verifier.verify(headers, URL) is None


@pytest.mark.asyncio
async def test_missing_app_id_is_unauthenticated(settings, fake_whop, token_for):
    client = WhopClient(
        api_key="test-key",
        app_id=None,
        base_url=BASE_URL,
        token_public_key=settings.whop_token_public_key,
        transport=fake_whop.transport(),
    )
    try:
        verifier = IdentityVerifier(client)
        assert await verifier.verify({"x-whop-user-token": token_for("user_member")}, URL) is None
    finally:
        await client.aclose()


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "header", ["x-whop-experience-id", "whop-experience-id", "x-experience-id", "experience-id"]
)
async def test_company_from_experience_header(verifier, token_for, header):
    headers = {"x-whop-user-token": token_for("user_member"), header: "exp_1"}

    auth = await verifier.verify(headers, URL)

    assert auth is not None
    assert auth.company_id == "biz_123"


@pytest.mark.asyncio
async def test_company_from_experience_query_param(verifier, token_for):
    headers = {"x-whop-user-token": token_for("user_member")}

    auth = await verifier.verify(headers, f"{URL}?experience=exp_1")

    assert auth.company_id == "biz_123"


@pytest.mark.asyncio
async def test_company_from_company_id_query_param(verifier, token_for):
    headers = {"x-whop-user-token": token_for("user_member")}

    auth = await verifier.verify(headers, f"{URL}?company_id=biz_456")

    assert auth.company_id == "biz_456"


@pytest.mark.asyncio
async def test_company_header_wins_over_experience(verifier, token_for, fake_whop):
    headers = {
        "x-whop-user-token": token_for("user_member"),
        "x-whop-company-id": "biz_456",
        "x-whop-experience-id": "exp_1",
    }

    auth = await verifier.verify(headers, URL)

    assert auth.company_id == "biz_456"
    assert not any(r.url.path.endswith("/experiences/exp_1") for r in fake_whop.requests)


@pytest.mark.asyncio
async def test_unknown_experience_leaves_company_unset(verifier, token_for):
    headers = {"x-whop-user-token": token_for("user_member"), "x-whop-experience-id": "exp_nope"}

    auth = await verifier.verify(headers, URL)

    assert auth == AuthContext(user_id="user_member", company_id=None)


@pytest.mark.asyncio
async def test_no_company_hint_leaves_company_unset(verifier, token_for):
    auth = await verifier.verify({"x-whop-user-token": token_for("user_member")}, URL)
    assert auth.company_id is None
