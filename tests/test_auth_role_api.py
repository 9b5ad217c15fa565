import pytest


@pytest.mark.asyncio
async def test_unauthenticated(app_client):
    res = await app_client.get("/auth/role", headers={"x-whop-company-id": "biz_123"})

    assert res.status_code == 401
    assert res.json() == {"role": "none", "isAuthorized": False}


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("user_id", "role"),
    [
        ("user_owner", "owner"),
        ("user_coowner", "owner"),
        ("user_admin", "admin"),
        ("user_mod", "admin"),
        ("user_member", "member"),
    ],
)
async def test_role_in_company(app_client, headers_for, user_id, role):
    res = await app_client.get("/auth/role", headers=headers_for(user_id))

    assert res.status_code == 200
    assert res.json() == {
        "role": role,
        "userId": user_id,
        "companyId": "biz_123",
        "isAuthorized": True,
    }


@pytest.mark.asyncio
async def test_no_company_context(app_client, headers_for):
    res = await app_client.get("/auth/role", headers=headers_for("user_owner", company_id=None))

    assert res.status_code == 200
    assert res.json() == {
        "role": "none",
        "userId": "user_owner",
        "companyId": None,
        "isAuthorized": False,
    }


@pytest.mark.asyncio
async def test_company_resolved_from_experience(app_client, token_for):
    headers = {"x-whop-user-token": token_for("user_admin"), "x-whop-experience-id": "exp_1"}

    res = await app_client.get("/auth/role", headers=headers)

    assert res.json()["role"] == "admin"
    assert res.json()["companyId"] == "biz_123"


@pytest.mark.asyncio
async def test_whop_outage_degrades_to_member(app_client, headers_for, fake_whop):
    fake_whop.failing.update({"companies", "authorized_users"})

    res = await app_client.get("/auth/role", headers=headers_for("user_owner"))

    assert res.status_code == 200
    assert res.json()["role"] == "member"
