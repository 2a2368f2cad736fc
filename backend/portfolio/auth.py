"""
Session providers and the FastAPI authentication dependency.

With Supabase configured, sessions come from its auth (GoTrue) endpoints
and bearer tokens are verified against them. Without it the service runs
in demo mode: a fixed demo user is always signed in.
"""

import time
from abc import ABC, abstractmethod
from typing import Callable, Optional

import httpx
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from portfolio.config import Settings, get_settings
from portfolio.exceptions import AuthenticationError, BackendError, BackendUnavailableError
from portfolio.logging_config import get_logger
from portfolio.schemas import Session, SessionUser
from portfolio.store import RecordStore, get_record_store
from portfolio.store.supabase import error_message

logger = get_logger(__name__)

SessionCallback = Callable[[Optional[Session]], None]

DEMO_USER = SessionUser(id="demo-user", email="demo@portfolio.local")


class SessionProvider(ABC):
    """Produces and revokes sessions and tells subscribers when that happens."""

    # Whether the provider's own session may stand in for a missing bearer token
    shares_session = False

    def __init__(self):
        self._session: Session | None = None
        self._listeners: list[SessionCallback] = []

    async def get_current_session(self) -> Session | None:
        return self._session

    def on_session_change(self, callback: SessionCallback) -> Callable[[], None]:
        """
        Subscribe to sign-in/sign-out events.

        Returns a function that removes the subscription.
        """
        self._listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def _set_session(self, session: Session | None) -> None:
        self._session = session
        for callback in list(self._listeners):
            callback(session)

    @abstractmethod
    async def sign_in(self, email: str, password: str) -> Session: ...

    @abstractmethod
    async def sign_up(self, email: str, password: str) -> Session | None: ...

    @abstractmethod
    async def sign_out(self, access_token: str | None = None) -> None: ...

    @abstractmethod
    async def verify_token(self, token: str) -> SessionUser | None: ...

    async def close(self) -> None:
        pass


class DemoSessionProvider(SessionProvider):
    """Always signed in as the demo user; any credentials are accepted."""

    shares_session = True

    def __init__(self):
        super().__init__()
        self._session = self._demo_session()

    @staticmethod
    def _demo_session() -> Session:
        return Session(
            access_token="demo-token",
            expires_at=int(time.time()) + 3600,
            user=DEMO_USER,
        )

    async def sign_in(self, email: str, password: str) -> Session:
        self._set_session(self._demo_session())
        return self._session

    async def sign_up(self, email: str, password: str) -> Session | None:
        return await self.sign_in(email, password)

    async def sign_out(self, access_token: str | None = None) -> None:
        self._set_session(None)

    async def verify_token(self, token: str) -> SessionUser | None:
        return DEMO_USER


class SupabaseSessionProvider(SessionProvider):
    """Password sessions against Supabase auth (``<SUPABASE_URL>/auth/v1``)."""

    def __init__(
        self,
        url: str,
        anon_key: str,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        super().__init__()
        self._client = httpx.AsyncClient(
            base_url=f"{url.rstrip('/')}/auth/v1",
            headers={"apikey": anon_key},
            timeout=timeout,
            transport=transport,
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def _post(self, context: str, path: str, **kwargs) -> httpx.Response:
        try:
            response = await self._client.post(path, **kwargs)
        except httpx.RequestError as e:
            raise BackendUnavailableError(context, str(e) or e.__class__.__name__) from e
        return response

    @staticmethod
    def _parse_session(payload: dict) -> Session:
        expires_at = payload.get("expires_at")
        if expires_at is None and payload.get("expires_in"):
            expires_at = int(time.time()) + int(payload["expires_in"])
        return Session(
            access_token=payload["access_token"],
            refresh_token=payload.get("refresh_token"),
            token_type=payload.get("token_type", "bearer"),
            expires_at=expires_at,
            user=SessionUser.model_validate(payload["user"]),
        )

    async def sign_in(self, email: str, password: str) -> Session:
        response = await self._post(
            "could not sign in",
            "/token",
            params={"grant_type": "password"},
            json={"email": email, "password": password},
        )
        if response.status_code in (400, 401, 403):
            raise AuthenticationError(error_message(response))
        if response.is_error:
            raise BackendError("could not sign in", error_message(response))

        session = self._parse_session(response.json())
        logger.info(f"Signed in: {session.user.email}")
        self._set_session(session)
        return session

    async def sign_up(self, email: str, password: str) -> Session | None:
        """Register a user; returns None while e-mail confirmation is pending."""
        response = await self._post("could not sign up", "/signup", json={"email": email, "password": password})
        if response.is_error:
            raise BackendError("could not sign up", error_message(response))

        payload = response.json()
        if "access_token" not in payload:
            logger.info(f"Signed up {email}; awaiting e-mail confirmation")
            return None

        session = self._parse_session(payload)
        self._set_session(session)
        return session

    async def sign_out(self, access_token: str | None = None) -> None:
        """Revoke the given token, or the provider's own session when none is given."""
        session = self._session
        if access_token is None:
            if session is None:
                return
            access_token = session.access_token

        response = await self._post(
            "could not sign out",
            "/logout",
            headers={"Authorization": f"Bearer {access_token}"},
        )
        # An already revoked token still counts as signed out
        if response.is_error and response.status_code not in (401, 403, 404):
            raise BackendError("could not sign out", error_message(response))

        if session is not None and session.access_token == access_token:
            logger.info(f"Signed out: {session.user.email}")
            self._set_session(None)

    async def verify_token(self, token: str) -> SessionUser | None:
        try:
            response = await self._client.get("/user", headers={"Authorization": f"Bearer {token}"})
        except httpx.RequestError as e:
            raise BackendUnavailableError("could not verify session", str(e) or e.__class__.__name__) from e

        if response.status_code in (401, 403):
            logger.warning("Rejected bearer token")
            return None
        if response.is_error:
            raise BackendError("could not verify session", error_message(response))
        return SessionUser.model_validate(response.json())


def create_session_provider(settings: Settings) -> SessionProvider:
    if settings.has_supabase_config:
        return SupabaseSessionProvider(
            settings.supabase_url,
            settings.supabase_anon_key,
            timeout=settings.http_timeout,
        )
    return DemoSessionProvider()


_provider: SessionProvider | None = None


def get_session_provider() -> SessionProvider:
    global _provider
    if _provider is None:
        _provider = create_session_provider(get_settings())
    return _provider


async def close_session_provider() -> None:
    global _provider
    if _provider is not None:
        await _provider.close()
        _provider = None


bearer_scheme = HTTPBearer(auto_error=False)


async def get_request_session(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    provider: SessionProvider = Depends(get_session_provider),
) -> Session:
    """
    Resolve the caller's session, or refuse access.

    A bearer token is verified with the provider. Only a provider that
    shares one session among all callers (demo mode) may answer for a
    request without a token.
    """
    if credentials is not None:
        token = credentials.credentials
        user = await provider.verify_token(token)
        if user is None:
            raise AuthenticationError("Invalid or expired session")
        return Session(access_token=token, user=user)

    if provider.shares_session:
        session = await provider.get_current_session()
        if session is not None:
            return session
    raise AuthenticationError()


async def get_current_user(session: Session = Depends(get_request_session)) -> SessionUser:
    logger.debug(f"Authenticated user: {session.user.id} ({session.user.email})")
    return session.user


async def get_user_store(
    session: Session = Depends(get_request_session),
    store: RecordStore = Depends(get_record_store),
) -> RecordStore:
    """The record store acting as the caller."""
    return store.for_access_token(session.access_token)
