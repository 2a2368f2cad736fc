"""
Session routes: sign in, sign up, sign out and the current session.
"""

from fastapi import APIRouter, Depends, status
from fastapi.security import HTTPAuthorizationCredentials

from portfolio.auth import SessionProvider, bearer_scheme, get_request_session, get_session_provider
from portfolio.exceptions import AuthenticationError
from portfolio.schemas import Session, SignInRequest

router = APIRouter()


@router.post("/sign-in", response_model=Session)
async def sign_in(
    credentials: SignInRequest,
    provider: SessionProvider = Depends(get_session_provider),
) -> Session:
    return await provider.sign_in(credentials.email, credentials.password)


@router.post("/sign-up", response_model=Session | None, status_code=status.HTTP_201_CREATED)
async def sign_up(
    credentials: SignInRequest,
    provider: SessionProvider = Depends(get_session_provider),
) -> Session | None:
    """Create an account. Returns null while the e-mail address awaits confirmation."""
    return await provider.sign_up(credentials.email, credentials.password)


@router.post("/sign-out", status_code=status.HTTP_204_NO_CONTENT)
async def sign_out(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    provider: SessionProvider = Depends(get_session_provider),
) -> None:
    """Revoke the caller's token (or the shared demo session)."""
    if credentials is not None:
        await provider.sign_out(credentials.credentials)
    elif provider.shares_session:
        await provider.sign_out()
    else:
        raise AuthenticationError()


@router.get("/session", response_model=Session)
async def current_session(session: Session = Depends(get_request_session)) -> Session:
    return session
