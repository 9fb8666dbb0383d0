"""
Tests for staff authentication and the admin session guard.
"""

from datetime import datetime, timedelta, timezone

import pytest

from crud import staff_crud
from schemas.auth import Session
from services.auth_service import AuthEvent, AuthService, InvalidCredentials, as_utc
from services.session_guard import DASHBOARD_PATH, LOGIN_PATH, SessionGuard, redirect_for


@pytest.fixture
async def auth(db):
    service = AuthService(db, session_ttl=timedelta(minutes=30))
    await service.create_staff_user("Staff@Example.com", "calm-hands-42")
    return service


def _session(token="tok"):
    now = datetime.now(timezone.utc)
    return Session(token=token, email="staff@example.com", created_at=now, expires_at=now + timedelta(hours=1))


class TestAuthService:

    @pytest.mark.asyncio
    async def test_sign_in_creates_retrievable_session(self, auth):
        session = await auth.sign_in_with_password("staff@example.com", "calm-hands-42")
        assert session.email == "staff@example.com"

        current = await auth.get_session(session.token)
        assert current is not None
        assert current.token == session.token

    @pytest.mark.asyncio
    async def test_password_is_stored_hashed(self, auth, db):
        user = await db.staff_users.find_one({"email": "staff@example.com"})
        assert user["password"] != "calm-hands-42"
        assert user["password"].startswith("$2b$")

    @pytest.mark.asyncio
    async def test_wrong_password_is_rejected(self, auth):
        with pytest.raises(InvalidCredentials):
            await auth.sign_in_with_password("staff@example.com", "wrong")

    @pytest.mark.asyncio
    async def test_unknown_user_is_rejected(self, auth):
        with pytest.raises(InvalidCredentials):
            await auth.sign_in_with_password("nobody@example.com", "calm-hands-42")

    @pytest.mark.asyncio
    async def test_sign_out_ends_session(self, auth):
        session = await auth.sign_in_with_password("staff@example.com", "calm-hands-42")
        await auth.sign_out(session.token)
        assert await auth.get_session(session.token) is None

    @pytest.mark.asyncio
    async def test_expired_session_is_treated_as_absent(self, auth, db):
        past = datetime.now(timezone.utc) - timedelta(hours=2)
        await staff_crud.create_session(db, Session(
            token="stale", email="staff@example.com", created_at=past, expires_at=past + timedelta(minutes=5)
        ))
        assert await auth.get_session("stale") is None
        assert await db.sessions.count_documents({"token": "stale"}) == 0

    @pytest.mark.asyncio
    async def test_state_change_events_and_unsubscribe(self, auth):
        events = []
        unsubscribe = auth.on_auth_state_change(lambda event, session: events.append(event))

        session = await auth.sign_in_with_password("staff@example.com", "calm-hands-42")
        await auth.refresh_session(session.token)
        await auth.sign_out(session.token)
        unsubscribe()
        await auth.sign_in_with_password("staff@example.com", "calm-hands-42")

        assert events == [AuthEvent.SIGNED_IN, AuthEvent.TOKEN_REFRESHED, AuthEvent.SIGNED_OUT]

    @pytest.mark.asyncio
    async def test_refresh_extends_expiry(self, auth):
        session = await auth.sign_in_with_password("staff@example.com", "calm-hands-42")
        refreshed = await auth.refresh_session(session.token)
        assert refreshed.expires_at >= session.expires_at

    @pytest.mark.asyncio
    async def test_keep_alive_leaves_fresh_session_alone(self, auth, db):
        session = await auth.sign_in_with_password("staff@example.com", "calm-hands-42")
        events = []
        auth.on_auth_state_change(lambda event, s: events.append(event))
        before = (await staff_crud.get_session(db, session.token)).expires_at

        current = await auth.keep_alive(session.token)

        assert current.token == session.token
        assert (await staff_crud.get_session(db, session.token)).expires_at == before
        assert events == []

    @pytest.mark.asyncio
    async def test_keep_alive_refreshes_session_past_half_its_ttl(self, auth, db):
        session = await auth.sign_in_with_password("staff@example.com", "calm-hands-42")
        await staff_crud.extend_session(db, session.token, datetime.now(timezone.utc) + timedelta(minutes=5))
        events = []
        auth.on_auth_state_change(lambda event, s: events.append(event))

        current = await auth.keep_alive(session.token)

        assert current.expires_at > datetime.now(timezone.utc) + timedelta(minutes=25)
        stored = await staff_crud.get_session(db, session.token)
        assert as_utc(stored.expires_at) > datetime.now(timezone.utc) + timedelta(minutes=25)
        assert events == [AuthEvent.TOKEN_REFRESHED]

    @pytest.mark.asyncio
    async def test_keep_alive_without_token(self, auth):
        assert await auth.keep_alive(None) is None


class TestRedirectPolicy:

    def test_admin_route_without_session_goes_to_login(self):
        assert redirect_for("/admin", None) == LOGIN_PATH
        assert redirect_for("/admin/appointments/AP1/status", None) == LOGIN_PATH

    def test_login_route_with_session_goes_to_dashboard(self):
        assert redirect_for("/admin/login", _session()) == DASHBOARD_PATH

    def test_served_routes(self):
        assert redirect_for("/admin/login", None) is None
        assert redirect_for("/admin", _session()) is None
        assert redirect_for("/services", None) is None
        assert redirect_for("/administrator", None) is None


class TestSessionGuardWatch:

    @pytest.mark.asyncio
    async def test_sign_out_ends_watched_session(self, auth):
        session = await auth.sign_in_with_password("staff@example.com", "calm-hands-42")
        guard = SessionGuard(auth)

        async with guard.watch(session.token) as watcher:
            assert watcher.session.token == session.token
            assert not watcher.ended.is_set()
            await auth.sign_out(session.token)
            assert watcher.ended.is_set()
            assert watcher.session is None

    @pytest.mark.asyncio
    async def test_other_sessions_do_not_end_watch(self, auth):
        mine = await auth.sign_in_with_password("staff@example.com", "calm-hands-42")
        other = await auth.sign_in_with_password("staff@example.com", "calm-hands-42")

        async with SessionGuard(auth).watch(mine.token) as watcher:
            await auth.sign_out(other.token)
            assert not watcher.ended.is_set()

    @pytest.mark.asyncio
    async def test_missing_token_yields_ended_watch(self, auth):
        async with SessionGuard(auth).watch(None) as watcher:
            assert watcher.session is None
            assert watcher.ended.is_set()

    @pytest.mark.asyncio
    async def test_subscription_released_even_when_body_raises(self, auth):
        session = await auth.sign_in_with_password("staff@example.com", "calm-hands-42")
        guard = SessionGuard(auth)

        with pytest.raises(RuntimeError):
            async with guard.watch(session.token):
                assert len(auth._listeners) == 1
                raise RuntimeError("view crashed")

        assert auth._listeners == []
