"""Agent credentials: bcrypt password hashing and signed JWT access/refresh tokens."""

from datetime import datetime, timedelta, timezone

import bcrypt
from jose import JWTError, jwt

from app.config import settings

ACCESS = "access"
REFRESH = "refresh"


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))


def _encode(subject: str, token_type: str, lifetime: timedelta, extra: dict | None = None) -> str:
    now = datetime.now(timezone.utc)
    payload = {"sub": subject, "type": token_type, "iat": now, "exp": now + lifetime}
    if extra:
        payload.update(extra)
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def create_access_token(user_id: str, role: str = "agent", expires_delta: timedelta | None = None) -> str:
    """Short-lived token sent as ``Authorization: Bearer`` on agent endpoints."""
    lifetime = expires_delta or timedelta(minutes=settings.jwt_access_token_expire_minutes)
    return _encode(user_id, ACCESS, lifetime, {"role": role})


def create_refresh_token(user_id: str, expires_delta: timedelta | None = None) -> str:
    lifetime = expires_delta or timedelta(days=settings.jwt_refresh_token_expire_days)
    return _encode(user_id, REFRESH, lifetime)


def decode_token(token: str, expected_type: str | None = None) -> dict:
    """Verify signature and expiry, optionally the ``type`` claim.

    Raises:
        jose.JWTError: invalid, expired, malformed, or of the wrong type.
    """
    payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    if expected_type is not None and payload.get("type") != expected_type:
        raise JWTError(f"Expected a {expected_type} token")
    return payload


def create_token_pair(user_id: str, role: str = "agent") -> dict[str, str]:
    return {
        "access_token": create_access_token(user_id, role),
        "refresh_token": create_refresh_token(user_id),
        "token_type": "bearer",
    }
