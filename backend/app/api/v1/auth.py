"""Agent auth API router: login, refresh, me."""

import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException, status
from jose import JWTError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_agent, get_db
from app.auth.security import REFRESH, create_token_pair, decode_token, verify_password
from app.models.user import User
from app.schemas.auth import AgentResponse, AuthResponse, LoginRequest, RefreshRequest, TokenResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/auth", tags=["auth"])


@router.post("/login", response_model=AuthResponse)
async def login(body: LoginRequest, db: AsyncSession = Depends(get_db)) -> AuthResponse:
    """Authenticate an agent with email and password."""
    result = await db.execute(select(User).where(User.email == body.email))
    user = result.scalar_one_or_none()

    if user is None or not verify_password(body.password, user.hashed_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is inactive",
        )

    logger.info("Agent %s logged in", user.id)
    return AuthResponse(
        agent=AgentResponse.model_validate(user),
        tokens=TokenResponse(**create_token_pair(str(user.id), user.role)),
    )


@router.post("/refresh", response_model=TokenResponse)
async def refresh(body: RefreshRequest, db: AsyncSession = Depends(get_db)) -> TokenResponse:
    """Exchange a refresh token for a new token pair."""
    invalid = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid refresh token",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = decode_token(body.refresh_token, expected_type=REFRESH)
        user_id = uuid.UUID(payload.get("sub") or "")
    except (JWTError, ValueError):
        raise invalid from None

    user = await db.get(User, user_id)
    if user is None or not user.is_active:
        raise invalid
    return TokenResponse(**create_token_pair(str(user.id), user.role))


@router.get("/me", response_model=AgentResponse)
async def me(current_agent: User = Depends(get_current_agent)) -> User:
    return current_agent
