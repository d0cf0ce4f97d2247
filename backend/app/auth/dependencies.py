"""FastAPI dependencies that protect agent-only routes."""

import uuid

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.security import ACCESS, decode_token
from app.database import get_db
from app.models.user import User

# Strict bearer: requests without a token never reach the handler
_bearer_scheme = HTTPBearer()


async def get_current_agent(
    credentials: HTTPAuthorizationCredentials = Depends(_bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Validate the Bearer access token and return the active agent.

    Raises:
        HTTPException 401: invalid/expired token, wrong token type, or unknown user.
        HTTPException 403: the agent account is deactivated.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        payload = decode_token(credentials.credentials, expected_type=ACCESS)
        user_id = uuid.UUID(payload.get("sub") or "")
    except (JWTError, ValueError):
        raise credentials_exception from None

    user = await db.get(User, user_id)
    if user is None:
        raise credentials_exception

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is inactive",
        )
    return user
