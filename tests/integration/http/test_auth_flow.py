from __future__ import annotations

from agrimandi.domain.value_objects.role import Role

PASSWORD = "harvest-2026"


async def register(client, **overrides):
    body = {"name": "Ravi Patil", "email": "ravi@example.com", "password": PASSWORD}
    body.update(overrides)
    return await client.post("/api/v1/auth/register", json=body)


async def test_register_verify_login_and_me(client, sender):
    response = await register(client, role="farmer", contact="+91 98220 00000")
    assert response.status_code == 201
    account = response.json()["account"]
    assert account["role"] == "farmer"
    assert account["is_verified"] is False

    # Login is refused until the email is verified.
    response = await client.post(
        "/api/v1/auth/login", json={"email": "ravi@example.com", "password": PASSWORD}
    )
    assert response.status_code == 403
    assert response.json()["details"]["reason"] == "unverified"

    token = sender.last_context("verify_email")["token"]
    response = await client.get("/api/v1/auth/verify-email", params={"token": token})
    assert response.status_code == 200
    assert response.json()["account"]["is_verified"] is True

    response = await client.post(
        "/api/v1/auth/login", json={"email": "RAVI@example.com", "password": PASSWORD}
    )
    assert response.status_code == 200
    login = response.json()
    assert login["token_type"] == "bearer"

    response = await client.get(
        "/api/v1/me", headers={"Authorization": f"Bearer {login['access_token']}"}
    )
    assert response.status_code == 200
    me = response.json()
    assert me["id"] == account["id"]
    assert me["contact"] == "+91 98220 00000"
    assert "hashed_password" not in me


async def test_verification_token_is_single_use(client, sender):
    await register(client)
    token = sender.last_context("verify_email")["token"]
    assert (await client.get("/api/v1/auth/verify-email", params={"token": token})).status_code == 200
    response = await client.get("/api/v1/auth/verify-email", params={"token": token})
    assert response.status_code == 422


async def test_duplicate_email_conflicts(client):
    assert (await register(client)).status_code == 201
    response = await register(client, email="Ravi@Example.com")
    assert response.status_code == 409
    assert response.json()["code"] == "conflict"


async def test_admin_registration_needs_code(client, test_settings):
    admin_code = test_settings.admin_registration_code.get_secret_value()
    response = await register(client, email="boss@example.com", role="admin")
    assert response.status_code == 403
    response = await register(client, email="boss@example.com", role="admin", admin_code=admin_code)
    assert response.status_code == 201
    assert response.json()["account"]["role"] == "admin"


async def test_unknown_role_registers_as_buyer(client):
    response = await register(client, role="trader")
    assert response.status_code == 201
    assert response.json()["account"]["role"] == "buyer"


async def test_wrong_password_is_unauthenticated(client, make_account):
    buyer = await make_account(Role.BUYER, email="asha@example.com")
    response = await client.post(
        "/api/v1/auth/login", json={"email": buyer.account.email, "password": "nope-nope"}
    )
    assert response.status_code == 401


async def test_forgot_and_reset_password(client, make_account, sender):
    buyer = await make_account(Role.BUYER, email="asha@example.com")

    response = await client.post("/api/v1/auth/forgot-password", json={"email": "asha@example.com"})
    assert response.status_code == 200
    unknown = await client.post("/api/v1/auth/forgot-password", json={"email": "ghost@example.com"})
    assert unknown.json() == response.json()
    assert sender.kinds_for(buyer.id) == ["reset_password"]

    token = sender.last_context("reset_password")["token"]
    response = await client.post(
        "/api/v1/auth/reset-password", json={"token": token, "password": "fresh-pass"}
    )
    assert response.status_code == 200

    response = await client.post(
        "/api/v1/auth/login", json={"email": "asha@example.com", "password": "fresh-pass"}
    )
    assert response.status_code == 200
    replay = await client.post(
        "/api/v1/auth/reset-password", json={"token": token, "password": "another-pass"}
    )
    assert replay.status_code == 422


async def test_accounts_listing_is_admin_only(client, make_account):
    admin = await make_account(Role.ADMIN)
    farmer = await make_account(Role.FARMER, name="Ravi")
    buyer = await make_account(Role.BUYER)

    response = await client.get("/api/v1/accounts", params={"role": "farmer"}, headers=admin.headers)
    assert response.status_code == 200
    assert [a["id"] for a in response.json()] == [str(farmer.id)]

    response = await client.get("/api/v1/accounts", headers=buyer.headers)
    assert response.status_code == 403
    assert response.json()["details"]["reason"] == "wrong_role"

    response = await client.get("/api/v1/accounts", params={"role": "wizard"}, headers=admin.headers)
    assert response.status_code == 422
