from pydantic import BaseModel


class SignInRequest(BaseModel):
    email: str
    password: str


class SessionUser(BaseModel):
    """The signed-in user as reported by the session provider."""
    id: str
    email: str | None = None


class Session(BaseModel):
    """An authenticated session; only the user's e-mail is relied upon."""
    access_token: str
    refresh_token: str | None = None
    token_type: str = "bearer"
    expires_at: int | None = None
    user: SessionUser
