from typing import Callable, List, Optional
from datetime import datetime, timedelta, timezone
from enum import Enum
from passlib.context import CryptContext
from schemas.auth import Session
from config.database import Database
from crud import staff_crud
import logging
import secrets

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


class AuthEvent(str, Enum):
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"
    TOKEN_REFRESHED = "TOKEN_REFRESHED"


AuthListener = Callable[[AuthEvent, Optional[Session]], None]


class InvalidCredentials(Exception):
    def __init__(self, message: str = "Invalid login credentials"):
        super().__init__(message)
        self.message = message


def as_utc(value: datetime) -> datetime:
    # The store may hand back naive datetimes; they are UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class AuthService:
    """Password sign-in for clinic staff with server-side session tokens."""

    def __init__(self, db: Database, session_ttl: timedelta = timedelta(hours=8)):
        self.db = db
        self.session_ttl = session_ttl
        self._listeners: List[AuthListener] = []

    def on_auth_state_change(self, callback: AuthListener) -> Callable[[], None]:
        """Register a listener; the returned callable unsubscribes it."""
        self._listeners.append(callback)

        def unsubscribe():
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def _emit(self, event: AuthEvent, session: Optional[Session]) -> None:
        for listener in list(self._listeners):
            try:
                listener(event, session)
            except Exception:
                logger.exception(f"Auth listener failed on {event.value}")

    async def create_staff_user(self, email: str, password: str) -> None:
        await staff_crud.save_staff_user(self.db, email, pwd_context.hash(password))

    async def sign_in_with_password(self, email: str, password: str) -> Session:
        user = await staff_crud.get_staff_user(self.db, email)
        if not user or not pwd_context.verify(password, user["password"]):
            logger.info(f"Rejected sign-in for {email}")
            raise InvalidCredentials()

        now = datetime.now(timezone.utc)
        session = Session(
            token=secrets.token_urlsafe(32),
            email=user["email"],
            created_at=now,
            expires_at=now + self.session_ttl
        )
        await staff_crud.create_session(self.db, session)
        logger.info(f"Staff user {session.email} signed in")
        self._emit(AuthEvent.SIGNED_IN, session)
        return session

    async def get_session(self, token: Optional[str]) -> Optional[Session]:
        if not token:
            return None
        session = await staff_crud.get_session(self.db, token)
        if session is None:
            return None
        if as_utc(session.expires_at) <= datetime.now(timezone.utc):
            await staff_crud.delete_session(self.db, token)
            return None
        return session

    async def refresh_session(self, token: str) -> Optional[Session]:
        session = await self.get_session(token)
        if session is None:
            return None
        session.expires_at = datetime.now(timezone.utc) + self.session_ttl
        await staff_crud.extend_session(self.db, token, session.expires_at)
        self._emit(AuthEvent.TOKEN_REFRESHED, session)
        return session

    async def keep_alive(self, token: Optional[str]) -> Optional[Session]:
        """Current session, refreshed once less than half of its TTL remains."""
        session = await self.get_session(token)
        if session is None:
            return None
        if as_utc(session.expires_at) - datetime.now(timezone.utc) < self.session_ttl / 2:
            return await self.refresh_session(token) or session
        return session

    async def sign_out(self, token: Optional[str]) -> None:
        if not token:
            return
        session = await staff_crud.get_session(self.db, token)
        await staff_crud.delete_session(self.db, token)
        if session is not None:
            logger.info(f"Staff user {session.email} signed out")
            self._emit(AuthEvent.SIGNED_OUT, session)
