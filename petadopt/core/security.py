from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt

from petadopt.core.config import settings


def create_access_token(subject: str | int, expires_minutes: int = 60) -> str:
    """Sign an access token. Login lives in the auth service; this is used by
    tooling and tests that need a valid bearer token."""
    expire = datetime.now(UTC) + timedelta(minutes=expires_minutes)
    to_encode = {"sub": str(subject), "exp": expire, "type": "access"}
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


def decode_access_token(token: str) -> str | None:
    try:
        payload = jwt.decode(
            token, settings.secret_key, algorithms=[settings.algorithm]
        )
        if payload.get("type") != "access":
            return None
        sub = payload.get("sub")
        return str(sub) if sub else None
    except JWTError:
        return None
