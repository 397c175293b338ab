"""Users + session tests.

Learn: Tests cover:
1. Registration + duplicate prevention + input validation
2. Login in both transports (cookie and bearer)
3. The auth guard: carriers, their order, and the two 401 kinds
4. Logout
5. Profile read/update and password change
"""

from datetime import datetime, timedelta, timezone

import jwt
import pytest

from tasksapi.config import settings


# ═══════════════════════════════════════════════════════════
# Registration
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_register_user(client):
    """Register returns the public view of the new user, never the hash."""
    r = await client.post(
        "/api/users/register",
        json={"name": "Ada", "email": "ada@example.com", "password": "secret1"},
    )
    assert r.status_code == 201
    user = r.json()
    assert user["name"] == "Ada"
    assert user["email"] == "ada@example.com"
    assert "id" in user
    assert "createdAt" in user
    assert "password" not in user
    assert "passwordHash" not in user


@pytest.mark.asyncio
async def test_register_duplicate_email(client):
    body = {"name": "User 1", "email": "dup@example.com", "password": "password_123"}

    r1 = await client.post("/api/users/register", json=body)
    assert r1.status_code == 201

    r2 = await client.post("/api/users/register", json=body)
    assert r2.status_code == 409
    assert r2.json()["message"] == "User with this email already exists"


@pytest.mark.asyncio
async def test_register_email_is_stored_as_given(client):
    """No case folding: a differently-cased address is a different account."""
    r1 = await client.post(
        "/api/users/register",
        json={"name": "A", "email": "Case@Example.com", "password": "password_123"},
    )
    r2 = await client.post(
        "/api/users/register",
        json={"name": "B", "email": "case@example.com", "password": "password_123"},
    )
    assert r1.status_code == 201
    assert r1.json()["email"] == "Case@Example.com"
    assert r2.status_code == 201


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body, field",
    [
        ({"name": "Short", "email": "short@example.com", "password": "abc"}, "password"),
        ({"name": "Bad", "email": "not-an-email", "password": "password_123"}, "email"),
        ({"name": "", "email": "empty@example.com", "password": "password_123"}, "name"),
        ({"email": "noname@example.com", "password": "password_123"}, "name"),
    ],
)
async def test_register_validation(client, body, field):
    r = await client.post("/api/users/register", json=body)
    assert r.status_code == 400
    data = r.json()
    assert data["message"] == "Validation error"
    assert field in [d["field"] for d in data["details"]]


# ═══════════════════════════════════════════════════════════
# Login
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_login_bearer_mode_returns_token(client, make_user):
    user = await make_user(email="login@example.com")

    r = await client.post(
        "/api/users/login", json={"email": user.email, "password": user.password}
    )
    assert r.status_code == 200
    body = r.json()
    assert body["user"]["email"] == user.email
    assert body["token"]
    assert "set-cookie" not in r.headers

    claims = jwt.decode(
        body["token"], settings.jwt_secret, algorithms=[settings.jwt_algorithm]
    )
    assert claims["userId"] == user.id
    assert claims["exp"] - claims["iat"] == settings.access_token_expire_minutes * 60


@pytest.mark.asyncio
async def test_login_cookie_mode_sets_httponly_cookie(cookie_client):
    await cookie_client.post(
        "/api/users/register",
        json={"name": "Cookie", "email": "cookie@example.com", "password": "password_123"},
    )
    r = await cookie_client.post(
        "/api/users/login",
        json={"email": "cookie@example.com", "password": "password_123"},
    )
    assert r.status_code == 200
    assert "token" not in r.json()
    assert r.json()["user"]["email"] == "cookie@example.com"

    set_cookie = r.headers["set-cookie"]
    assert set_cookie.startswith("token=")
    assert "HttpOnly" in set_cookie
    assert "Path=/" in set_cookie
    assert "Max-Age=86400" in set_cookie
    assert "samesite=lax" in set_cookie.lower()
    # Not production → not Secure
    assert "; secure" not in set_cookie.lower()


@pytest.mark.asyncio
async def test_login_wrong_password(client, make_user):
    user = await make_user()
    r = await client.post(
        "/api/users/login", json={"email": user.email, "password": "wrong_password"}
    )
    assert r.status_code == 401
    assert r.json()["message"] == "Invalid email or password"


@pytest.mark.asyncio
async def test_login_nonexistent_user(client):
    """Unknown email and wrong password are indistinguishable."""
    r = await client.post(
        "/api/users/login",
        json={"email": "nobody@example.com", "password": "whatever"},
    )
    assert r.status_code == 401
    assert r.json()["message"] == "Invalid email or password"


# ═══════════════════════════════════════════════════════════
# Auth guard
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_me_without_token(client):
    r = await client.get("/api/users/me")
    assert r.status_code == 401
    assert r.json()["message"] == "No token provided"
    assert r.headers["WWW-Authenticate"] == "Bearer"


@pytest.mark.asyncio
async def test_me_with_bearer_token(client, alice):
    r = await client.get("/api/users/me", headers=alice.headers)
    assert r.status_code == 200
    me = r.json()
    assert me["id"] == alice.id
    assert me["name"] == "Alice"
    assert me["email"] == "alice@example.com"
    assert "updatedAt" in me


@pytest.mark.asyncio
async def test_bearer_scheme_is_case_insensitive(client, alice):
    r = await client.get(
        "/api/users/me", headers={"Authorization": f"bearer {alice.token}"}
    )
    assert r.status_code == 200


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "header",
    ["Basic abc123", "Bearer", "Bearer a b", "Token xyz"],
)
async def test_malformed_authorization_header_is_no_token(client, header):
    r = await client.get("/api/users/me", headers={"Authorization": header})
    assert r.status_code == 401
    assert r.json()["message"] == "No token provided"


@pytest.mark.asyncio
async def test_garbage_token_is_invalid(client):
    r = await client.get(
        "/api/users/me", headers={"Authorization": "Bearer not.a.jwt"}
    )
    assert r.status_code == 401
    assert r.json()["message"] == "Invalid token"


@pytest.mark.asyncio
async def test_expired_token_is_invalid(client, alice):
    """Expiry is reported exactly like forgery."""
    past = datetime.now(timezone.utc) - timedelta(hours=2)
    token = jwt.encode(
        {"userId": alice.id, "iat": past, "exp": past + timedelta(hours=1)},
        settings.jwt_secret,
        algorithm="HS256",
    )
    r = await client.get(
        "/api/users/me", headers={"Authorization": f"Bearer {token}"}
    )
    assert r.status_code == 401
    assert r.json()["message"] == "Invalid token"


@pytest.mark.asyncio
async def test_token_signed_with_other_secret_is_invalid(client, alice):
    now = datetime.now(timezone.utc)
    token = jwt.encode(
        {"userId": alice.id, "iat": now, "exp": now + timedelta(hours=1)},
        "some-other-secret",
        algorithm="HS256",
    )
    r = await client.get(
        "/api/users/me", headers={"Authorization": f"Bearer {token}"}
    )
    assert r.status_code == 401
    assert r.json()["message"] == "Invalid token"


@pytest.mark.asyncio
async def test_cookie_session_round_trip(cookie_client):
    """register → login (cookie) → /me via the cookie jar → logout → 401."""
    await cookie_client.post(
        "/api/users/register",
        json={"name": "Jar", "email": "jar@example.com", "password": "password_123"},
    )
    r = await cookie_client.post(
        "/api/users/login",
        json={"email": "jar@example.com", "password": "password_123"},
    )
    assert r.status_code == 200

    r = await cookie_client.get("/api/users/me")
    assert r.status_code == 200
    assert r.json()["email"] == "jar@example.com"

    r = await cookie_client.post("/api/users/logout")
    assert r.status_code == 200
    assert r.json() == {"message": "Logout successful"}
    assert "token=" in r.headers["set-cookie"]

    r = await cookie_client.get("/api/users/me")
    assert r.status_code == 401
    assert r.json()["message"] == "No token provided"


@pytest.mark.asyncio
async def test_cookie_wins_over_bearer_header(cookie_client, make_user):
    """A bad cookie is not rescued by a good header: first carrier wins."""
    user = await make_user()

    cookie_client.cookies.set("token", "garbage")
    r = await cookie_client.get("/api/users/me", headers=user.headers)
    assert r.status_code == 401
    assert r.json()["message"] == "Invalid token"

    cookie_client.cookies.set("token", user.token)
    r = await cookie_client.get(
        "/api/users/me", headers={"Authorization": "Bearer garbage"}
    )
    assert r.status_code == 200
    assert r.json()["id"] == user.id


@pytest.mark.asyncio
async def test_logout_requires_auth(client):
    r = await client.post("/api/users/logout")
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_token_survives_logout(client, alice):
    """Tokens are stateless: logout only clears the cookie."""
    r = await client.post("/api/users/logout", headers=alice.headers)
    assert r.status_code == 200

    r = await client.get("/api/users/me", headers=alice.headers)
    assert r.status_code == 200


# ═══════════════════════════════════════════════════════════
# Profile
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_update_profile(client, alice):
    r = await client.put(
        "/api/users/me",
        json={"name": "Alice Liddell", "email": "alice.l@example.com"},
        headers=alice.headers,
    )
    assert r.status_code == 200
    assert r.json()["name"] == "Alice Liddell"
    assert r.json()["email"] == "alice.l@example.com"

    r = await client.post(
        "/api/users/login",
        json={"email": "alice.l@example.com", "password": alice.password},
    )
    assert r.status_code == 200


@pytest.mark.asyncio
async def test_update_profile_keep_own_email(client, alice):
    r = await client.put(
        "/api/users/me", json={"email": alice.email}, headers=alice.headers
    )
    assert r.status_code == 200


@pytest.mark.asyncio
async def test_update_profile_email_taken(client, alice, bob):
    r = await client.put(
        "/api/users/me", json={"email": bob.email}, headers=alice.headers
    )
    assert r.status_code == 409
    assert r.json()["message"] == "Email already in use"


@pytest.mark.asyncio
async def test_change_password(client, alice):
    r = await client.put(
        "/api/users/me/password",
        json={"currentPassword": alice.password, "newPassword": "new_password_456"},
        headers=alice.headers,
    )
    assert r.status_code == 200
    assert r.json() == {"message": "Password changed successfully"}

    r = await client.post(
        "/api/users/login", json={"email": alice.email, "password": alice.password}
    )
    assert r.status_code == 401

    r = await client.post(
        "/api/users/login",
        json={"email": alice.email, "password": "new_password_456"},
    )
    assert r.status_code == 200


@pytest.mark.asyncio
async def test_change_password_wrong_current(client, alice):
    r = await client.put(
        "/api/users/me/password",
        json={"currentPassword": "not-it", "newPassword": "new_password_456"},
        headers=alice.headers,
    )
    assert r.status_code == 401
    assert r.json()["message"] == "Current password is incorrect"


@pytest.mark.asyncio
async def test_me_for_deleted_account(client, alice, session_factory):
    """A valid token whose user no longer exists gets 404 from /me."""
    from sqlalchemy import delete

    from tasksapi.db.models import User

    async with session_factory() as session:
        await session.execute(delete(User))
        await session.commit()

    r = await client.get("/api/users/me", headers=alice.headers)
    assert r.status_code == 404
    assert r.json()["message"] == "User not found"
