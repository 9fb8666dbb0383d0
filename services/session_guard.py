from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional
from datetime import datetime, timezone
from fastapi import Request, Response
from schemas.auth import Session
from services.auth_service import AuthEvent, AuthService, as_utc
import asyncio
import logging

logger = logging.getLogger(__name__)

SESSION_COOKIE = "clinic_session"
LOGIN_PATH = "/admin/login"
DASHBOARD_PATH = "/admin"


class LoginRequired(Exception):
    """Raised by admin routes when the request carries no live session."""


def is_admin_path(path: str) -> bool:
    return path == DASHBOARD_PATH or path.startswith(DASHBOARD_PATH + "/")


def redirect_for(path: str, session: Optional[Session]) -> Optional[str]:
    """Where a request for ``path`` must go instead, or None to serve it."""
    if path.rstrip("/") == LOGIN_PATH:
        return DASHBOARD_PATH if session is not None else None
    if is_admin_path(path) and session is None:
        return LOGIN_PATH
    return None


class SessionWatch:
    def __init__(self, session: Optional[Session]):
        self.session = session
        self.ended = asyncio.Event()
        if session is None:
            self.ended.set()

    def on_event(self, event: AuthEvent, session: Optional[Session]) -> None:
        if self.session is None or session is None or session.token != self.session.token:
            return
        if event == AuthEvent.SIGNED_OUT:
            self.session = None
            self.ended.set()
        elif event == AuthEvent.TOKEN_REFRESHED:
            self.session = session


class SessionGuard:
    def __init__(self, auth: AuthService):
        self.auth = auth

    async def current_session(self, token: Optional[str]) -> Optional[Session]:
        return await self.auth.get_session(token)

    async def keep_alive(self, token: Optional[str]) -> Optional[Session]:
        return await self.auth.keep_alive(token)

    @asynccontextmanager
    async def watch(self, token: Optional[str]) -> AsyncIterator[SessionWatch]:
        """Track one session for the lifetime of a view.

        The auth-state subscription is released on exit whether or not the
        body raised.
        """
        watcher = SessionWatch(await self.current_session(token))
        unsubscribe = self.auth.on_auth_state_change(watcher.on_event)
        try:
            yield watcher
        finally:
            unsubscribe()


def set_session_cookie(response: Response, session: Session, secure: bool = False) -> None:
    """Cookie lifetime follows the stored session expiry."""
    max_age = int((as_utc(session.expires_at) - datetime.now(timezone.utc)).total_seconds())
    response.set_cookie(
        SESSION_COOKIE,
        session.token,
        max_age=max(max_age, 0),
        httponly=True,
        samesite="lax",
        secure=secure
    )


def get_session_guard(request: Request) -> SessionGuard:
    return request.app.state.container.guard


async def require_session(request: Request, response: Response) -> Session:
    """FastAPI dependency gating the admin routes.

    Activity keeps the session alive: past half its lifetime it is refreshed
    and the cookie is re-issued with the new expiry.
    """
    guard = get_session_guard(request)
    session = await guard.keep_alive(request.cookies.get(SESSION_COOKIE))
    if session is None:
        raise LoginRequired()
    set_session_cookie(response, session, request.app.state.container.settings.session_cookie_secure)
    return session
