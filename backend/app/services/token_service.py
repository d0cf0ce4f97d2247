"""Issue and revoke property-scoped booking links."""

import logging
import secrets
import uuid
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.applicant import Applicant
from app.models.property import Property
from app.models.user import User
from app.models.viewing_token import ViewingToken
from app.reservations.errors import ApplicantNotFound, NotFoundError, PropertyNotFound

logger = logging.getLogger(__name__)


def generate_token() -> str:
    return secrets.token_urlsafe(24)


def booking_url(frontend_url: str, property_code: str, token: str) -> str:
    return f"{frontend_url.rstrip('/')}/book/{property_code}?t={token}"


async def get_owned_property(db: AsyncSession, agent: User, property_id: uuid.UUID) -> Property:
    result = await db.execute(
        select(Property).where(Property.id == property_id, Property.owner_id == agent.id)
    )
    prop = result.scalar_one_or_none()
    if prop is None:
        raise PropertyNotFound()
    return prop


async def issue_token(
    db: AsyncSession,
    agent: User,
    applicant_id: uuid.UUID,
    property_id: uuid.UUID,
) -> tuple[ViewingToken, Property]:
    """Create a fresh active token for an applicant on one of the agent's properties."""
    prop = await get_owned_property(db, agent, property_id)
    if await db.get(Applicant, applicant_id) is None:
        raise ApplicantNotFound()

    token = ViewingToken(
        token=generate_token(),
        property_id=prop.id,
        applicant_id=applicant_id,
        issued_by_id=agent.id,
    )
    db.add(token)
    await db.flush()
    await db.refresh(token)
    logger.info("Issued viewing token %s for applicant %s on %s", token.id, applicant_id, prop.property_code)
    return token, prop


async def revoke_token(db: AsyncSession, agent: User, token_id: uuid.UUID) -> ViewingToken:
    """Deactivate a token; revoking twice keeps the first revocation time."""
    result = await db.execute(
        select(ViewingToken)
        .join(Property, ViewingToken.property_id == Property.id)
        .where(ViewingToken.id == token_id, Property.owner_id == agent.id)
    )
    token = result.scalar_one_or_none()
    if token is None:
        raise NotFoundError("Viewing token not found")

    if token.is_active:
        token.is_active = False
        token.revoked_at = datetime.now(timezone.utc).replace(tzinfo=None)
        await db.flush()
        logger.info("Revoked viewing token %s", token.id)
    return token
