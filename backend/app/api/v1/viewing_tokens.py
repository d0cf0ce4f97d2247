"""Booking link API router: agents issue and revoke applicant tokens."""

import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_agent, get_db
from app.config import settings
from app.models.user import User
from app.models.viewing_token import ViewingToken
from app.schemas.viewing_token import IssuedViewingTokenResponse, ViewingTokenCreate, ViewingTokenResponse
from app.services.token_service import booking_url, issue_token, revoke_token

router = APIRouter(prefix="/api/v1/viewing-tokens", tags=["viewing-tokens"])


@router.post(
    "",
    response_model=IssuedViewingTokenResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Issue a booking link for an applicant",
)
async def create_viewing_token(
    body: ViewingTokenCreate,
    db: AsyncSession = Depends(get_db),
    current_agent: User = Depends(get_current_agent),
) -> IssuedViewingTokenResponse:
    token, prop = await issue_token(db, current_agent, body.applicant_id, body.property_id)
    return IssuedViewingTokenResponse(
        **ViewingTokenResponse.model_validate(token).model_dump(),
        booking_url=booking_url(settings.frontend_url, prop.property_code, token.token),
    )


@router.post(
    "/{token_id}/revoke",
    response_model=ViewingTokenResponse,
    summary="Revoke a booking link",
)
async def revoke_viewing_token(
    token_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_agent: User = Depends(get_current_agent),
) -> ViewingToken:
    """Deactivate the link. Existing bookings made through it are kept."""
    return await revoke_token(db, current_agent, token_id)
