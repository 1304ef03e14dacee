from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Request
from jose import JWTError, jwt

from hirewise.exceptions import Unauthorized

ALGORITHM = "HS256"
TOKEN_EXPIRE_DAYS = 30
COOKIE_NAME = "session_token"


def create_session_token(secret_key: str, expire_days: int = TOKEN_EXPIRE_DAYS) -> str:
    expire = datetime.now(timezone.utc) + timedelta(days=expire_days)
    to_encode = {"exp": expire, "authenticated": True}
    return jwt.encode(to_encode, secret_key, algorithm=ALGORITHM)


def verify_session_token(token: str, secret_key: str) -> bool:
    try:
        payload = jwt.decode(token, secret_key, algorithms=[ALGORITHM])
        return bool(payload.get("authenticated", False))
    except JWTError:
        return False


@dataclass(frozen=True)
class Credentials:
    """Proof of identity presented with a request, in either accepted form."""

    session_token: Optional[str] = None
    bearer_token: Optional[str] = None


def credentials_from_request(request: Request) -> Credentials:
    bearer = None
    header = request.headers.get("authorization", "")
    scheme, _, value = header.partition(" ")
    if scheme.lower() == "bearer" and value.strip():
        bearer = value.strip()
    return Credentials(session_token=request.cookies.get(COOKIE_NAME), bearer_token=bearer)


class SessionAuthenticator:
    """Accepts a valid session cookie or bearer token; both carry the same signed token."""

    def __init__(self, secret_key: str):
        self.secret_key = secret_key

    def authenticate(self, credentials: Credentials) -> None:
        for token in (credentials.session_token, credentials.bearer_token):
            if token and verify_session_token(token, self.secret_key):
                return
        raise Unauthorized("Not authenticated")
