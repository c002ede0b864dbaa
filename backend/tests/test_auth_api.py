"""
ResilienceHub Backend — Auth Endpoint Tests
===========================================

What:  /api/auth/* through the full app (middleware, dependencies, handlers).

What we test:
    ✅ Register / login / logout / me
    ✅ Session cookie attributes and remember-me lifetime
    ✅ Logout clears the cookie so the client stops sending it
    ✅ 401 bodies and cookie clearing for rejected tokens
    ✅ Auth endpoints are rate limited per IP
"""

import pytest

from resilience_hub.config import settings
from resilience_hub.models import Role, User, UserStatus
from resilience_hub.services.session_store import SessionStore

from conftest import DEFAULT_PASSWORD

COOKIE = settings.session_cookie_name


def set_cookie_header(response) -> str:
    headers = [h for h in response.headers.get_list("set-cookie") if h.startswith(f"{COOKIE}=")]
    assert len(headers) == 1, headers
    return headers[0]


class TestRegister:

    @pytest.mark.asyncio
    async def test_register_client_sets_cookie(self, client):
        response = await client.post(
            "/api/auth/register",
            json={
                "username": "alice",
                "email": "Alice@Example.com",
                "password": DEFAULT_PASSWORD,
                "name": "Alice",
            },
        )

        assert response.status_code == 201
        body = response.json()
        assert body["username"] == "alice"
        assert body["email"] == "alice@example.com"
        assert body["role"] == "client"
        assert body["status"] == "active"
        assert "password" not in body

        cookie = set_cookie_header(response).lower()
        assert "httponly" in cookie
        assert "path=/" in cookie
        assert "samesite=lax" in cookie
        assert f"max-age={7 * 24 * 3600}" in cookie

    @pytest.mark.asyncio
    async def test_register_with_therapist(self, client, seed):
        therapist = await seed.therapist()

        response = await client.post(
            "/api/auth/register",
            json={
                "username": "bob",
                "email": "bob@example.com",
                "password": DEFAULT_PASSWORD,
                "name": "Bob",
                "therapistId": therapist.id,
            },
        )

        assert response.status_code == 201
        assert response.json()["therapistId"] == therapist.id

    @pytest.mark.asyncio
    async def test_register_with_non_therapist_id_rejected(self, client, seed):
        other_client = await seed.client()

        response = await client.post(
            "/api/auth/register",
            json={
                "username": "bob",
                "email": "bob@example.com",
                "password": DEFAULT_PASSWORD,
                "name": "Bob",
                "therapistId": other_client.id,
            },
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Therapist not found"

    @pytest.mark.asyncio
    async def test_register_admin_forbidden(self, client):
        response = await client.post(
            "/api/auth/register",
            json={
                "username": "mallory",
                "email": "mallory@example.com",
                "password": DEFAULT_PASSWORD,
                "name": "Mallory",
                "role": "admin",
            },
        )

        assert response.status_code == 403
        assert "set-cookie" not in response.headers

    @pytest.mark.asyncio
    async def test_duplicate_username_conflict(self, client, seed):
        await seed.client(username="taken")

        response = await client.post(
            "/api/auth/register",
            json={
                "username": "taken",
                "email": "fresh@example.com",
                "password": DEFAULT_PASSWORD,
                "name": "Fresh",
            },
        )

        assert response.status_code == 409
        assert response.json() == {"message": "Username already exists"}

    @pytest.mark.asyncio
    async def test_invalid_body_returns_400(self, client):
        response = await client.post("/api/auth/register", json={"username": "x"})

        assert response.status_code == 400
        body = response.json()
        assert body["message"] == "Invalid data"
        assert body["errors"]


class TestLogin:

    @pytest.mark.asyncio
    async def test_login_success(self, client, seed):
        user = await seed.client(username="carol")

        response = await client.post(
            "/api/auth/login", json={"username": "carol", "password": DEFAULT_PASSWORD}
        )

        assert response.status_code == 200
        assert response.json()["id"] == user.id
        assert f"max-age={7 * 24 * 3600}" in set_cookie_header(response).lower()

    @pytest.mark.asyncio
    async def test_remember_me_extends_cookie(self, client, seed):
        await seed.client(username="carol")

        response = await client.post(
            "/api/auth/login",
            json={"username": "carol", "password": DEFAULT_PASSWORD, "rememberMe": True},
        )

        assert response.status_code == 200
        assert f"max-age={30 * 24 * 3600}" in set_cookie_header(response).lower()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("username, password", [("carol", "wrong-pass"), ("nobody", DEFAULT_PASSWORD)])
    async def test_bad_credentials_share_one_message(self, client, seed, username, password):
        await seed.client(username="carol")

        response = await client.post(
            "/api/auth/login", json={"username": username, "password": password}
        )

        assert response.status_code == 401
        assert response.json() == {"message": "Invalid credentials"}

    @pytest.mark.asyncio
    async def test_pending_user_activated_on_login(self, client, seed, session_factory):
        user = await seed.client(username="invited", status=UserStatus.PENDING)

        response = await client.post(
            "/api/auth/login", json={"username": "invited", "password": DEFAULT_PASSWORD}
        )

        assert response.status_code == 200
        async with session_factory() as db:
            assert (await db.get(User, user.id)).status == UserStatus.ACTIVE.value


class TestSessionLifecycle:

    @pytest.mark.asyncio
    async def test_me_after_login_and_cookie_cleared_by_logout(self, client, seed):
        await seed.therapist(username="dana")
        await client.post("/api/auth/login", json={"username": "dana", "password": DEFAULT_PASSWORD})
        assert client.cookies.get(COOKIE)

        me = await client.get("/api/auth/me")
        assert me.status_code == 200
        assert me.json()["role"] == Role.THERAPIST.value

        logout = await client.post("/api/auth/logout")
        assert logout.status_code == 200
        assert logout.json() == {"message": "Logged out successfully"}
        cleared = set_cookie_header(logout).lower()
        assert "path=/" in cleared
        assert "httponly" in cleared
        assert "samesite=lax" in cleared

        assert client.cookies.get(COOKIE) is None
        after = await client.get("/api/auth/me")
        assert after.status_code == 401
        assert after.json() == {"message": "Authentication required"}

    @pytest.mark.asyncio
    async def test_logout_deletes_session_row_and_cache_entry(self, client, app, seed, db_session):
        user = await seed.client()
        token = await seed.session_for(user)
        headers = seed.headers(token)

        assert (await client.get("/api/auth/me", headers=headers)).status_code == 200
        assert token in app.state.session_cache

        await client.post("/api/auth/logout", headers=headers)

        assert token not in app.state.session_cache
        db_session.expire_all()
        assert await SessionStore(db_session).get(token) is None
        assert (await client.get("/api/auth/me", headers=headers)).json() == {
            "message": "Invalid session"
        }

    @pytest.mark.asyncio
    async def test_expired_session_rejected_and_deleted(self, client, seed, db_session):
        user = await seed.client()
        token = await seed.expired_session(user, token="expired-token")

        response = await client.get("/api/auth/me", headers=seed.headers(token))

        assert response.status_code == 401
        assert response.json() == {"message": "Session expired"}
        assert "max-age=0" in set_cookie_header(response).lower()
        db_session.expire_all()
        assert await SessionStore(db_session).get(token) is None

    @pytest.mark.asyncio
    async def test_unknown_token_clears_cookie(self, client, seed):
        response = await client.get("/api/auth/me", headers=seed.headers("not-a-session"))

        assert response.status_code == 401
        assert response.json() == {"message": "Invalid session"}
        assert set_cookie_header(response)

    @pytest.mark.asyncio
    async def test_missing_cookie_does_not_set_cookie(self, client):
        response = await client.get("/api/auth/me")

        assert response.status_code == 401
        assert "set-cookie" not in response.headers

    @pytest.mark.asyncio
    async def test_session_of_vanished_user(self, client, seed, db_session):
        user = await seed.client()
        headers = await seed.login(user)
        await db_session.delete(user)
        await db_session.commit()

        response = await client.get("/api/auth/me", headers=headers)

        assert response.status_code == 401
        assert response.json() == {"message": "User not found"}
        assert "set-cookie" not in response.headers

    @pytest.mark.asyncio
    async def test_cache_clear_does_not_change_outcome(self, client, seed, app):
        user = await seed.client()
        headers = await seed.login(user)

        cached_miss = await client.get("/api/auth/me", headers=headers)
        cached_hit = await client.get("/api/auth/me", headers=headers)
        app.state.session_cache.clear()
        after_clear = await client.get("/api/auth/me", headers=headers)

        assert cached_miss.json() == cached_hit.json() == after_clear.json()


class TestRateLimit:

    @pytest.mark.asyncio
    async def test_login_attempts_limited_per_ip(self, client, seed, monkeypatch):
        monkeypatch.setattr(settings, "auth_rate_limit_requests", 2)
        monkeypatch.setattr(settings, "auth_rate_limit_window", 900)
        await seed.client(username="erin")
        attempt = {"username": "erin", "password": "wrong-pass"}

        statuses = [
            (await client.post("/api/auth/login", json=attempt)).status_code for _ in range(2)
        ]
        limited = await client.post("/api/auth/login", json=attempt)

        assert statuses == [401, 401]
        assert limited.status_code == 429
        assert int(limited.headers["Retry-After"]) > 0
        assert "message" in limited.json()

    @pytest.mark.asyncio
    async def test_other_api_paths_use_general_bucket(self, client, seed, monkeypatch):
        monkeypatch.setattr(settings, "auth_rate_limit_requests", 1)
        user = await seed.client()
        headers = await seed.login(user)

        for _ in range(3):
            assert (await client.get("/api/auth/me", headers=headers)).status_code == 200
