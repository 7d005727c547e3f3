from app.core.security import issue_tokens
from app.tests.factories import identity_of

REGISTRATION = {
    "name": "New Host",
    "email": "newhost@example.com",
    "password": "password123",
    "role": "host",
}


async def test_register_login_refresh_me(client):
    registered = await client.post("/api/auth/register", json=REGISTRATION)
    assert registered.status_code == 201
    body = registered.json()
    assert body["tokenType"] == "bearer"
    assert body["user"]["email"] == REGISTRATION["email"]
    assert body["user"]["role"] == "host"

    login = await client.post(
        "/api/auth/login",
        json={"email": REGISTRATION["email"], "password": REGISTRATION["password"]},
    )
    assert login.status_code == 200

    refreshed = await client.post(
        "/api/auth/refresh", json={"refreshToken": login.json()["refreshToken"]}
    )
    assert refreshed.status_code == 200

    me = await client.get(
        "/api/auth/me",
        headers={"Authorization": f"Bearer {refreshed.json()['accessToken']}"},
    )
    assert me.status_code == 200
    assert me.json()["id"] == body["user"]["id"]
    assert me.json()["name"] == "New Host"


async def test_duplicate_email_is_rejected(client):
    await client.post("/api/auth/register", json=REGISTRATION)
    response = await client.post(
        "/api/auth/register", json={**REGISTRATION, "email": "NewHost@example.com"}
    )

    assert response.status_code == 400
    assert response.json() == {"detail": "Email already registered", "code": "invalid_argument"}


async def test_admin_role_cannot_be_self_assigned(client):
    response = await client.post("/api/auth/register", json={**REGISTRATION, "role": "admin"})

    assert response.status_code == 400


async def test_wrong_password(client):
    await client.post("/api/auth/register", json=REGISTRATION)
    response = await client.post(
        "/api/auth/login", json={"email": REGISTRATION["email"], "password": "wrongpass1"}
    )

    assert response.status_code == 401
    assert response.headers["WWW-Authenticate"] == "Bearer"


async def test_access_token_cannot_refresh(client, renter):
    tokens = issue_tokens(identity_of(renter))
    response = await client.post("/api/auth/refresh", json={"refreshToken": tokens["access_token"]})

    assert response.status_code == 403
    assert response.json()["code"] == "invalid_token"


async def test_health_and_security_headers(client):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert "X-Request-ID" in response.headers
