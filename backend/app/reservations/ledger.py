"""Inquiry ledger: keeps ``Inquiry.viewing_time`` in step with the slot store."""

import logging
import uuid
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.inquiry import Inquiry

logger = logging.getLogger(__name__)


async def get_inquiry(db: AsyncSession, applicant_id: uuid.UUID, property_id: uuid.UUID) -> Inquiry | None:
    result = await db.execute(
        select(Inquiry).where(
            Inquiry.applicant_id == applicant_id,
            Inquiry.property_id == property_id,
        )
    )
    return result.scalar_one_or_none()


async def set_viewing_time(
    db: AsyncSession,
    applicant_id: uuid.UUID,
    property_id: uuid.UUID,
    viewing_time: datetime,
    *,
    inquiry_type: str = "sales",
) -> Inquiry:
    """Mirror a new booking's start time onto the pair's inquiry.

    Creates a bare inquiry when the applicant booked without one on file.
    """
    inquiry = await get_inquiry(db, applicant_id, property_id)
    if inquiry is None:
        logger.info(
            "No inquiry for applicant %s on property %s; creating one for the booking",
            applicant_id,
            property_id,
        )
        inquiry = Inquiry(
            applicant_id=applicant_id,
            property_id=property_id,
            inquiry_type=inquiry_type,
        )
        db.add(inquiry)

    inquiry.viewing_time = viewing_time
    await db.flush()
    return inquiry


async def clear_viewing_time(
    db: AsyncSession,
    applicant_id: uuid.UUID,
    property_id: uuid.UUID,
) -> Inquiry | None:
    inquiry = await get_inquiry(db, applicant_id, property_id)
    if inquiry is None:
        return None
    inquiry.viewing_time = None
    await db.flush()
    return inquiry
