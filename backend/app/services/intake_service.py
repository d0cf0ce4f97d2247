"""Lead-capture intake: resolve or create the applicant and upsert their inquiry.

Applicant resolution order: explicit ``applicant_id``, then case-insensitive
email, then phone, else a new applicant. When an existing applicant submits
different name/email/phone values, the old and new values are recorded in
``applicant_identity_changes`` before the applicant row is overwritten.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.applicant import Applicant, ApplicantIdentityChange
from app.models.inquiry import Inquiry
from app.models.property import Property
from app.reservations.errors import ApplicantNotFound, PropertyNotFound, PropertyUnavailable, ValidationError
from app.reservations.ledger import get_inquiry
from app.schemas.inquiry import InquiryBase, RentalInquiryCreate, SalesInquiryCreate

logger = logging.getLogger(__name__)

_IDENTITY_FIELDS = {"property_code", "applicant_id", "full_name", "email", "phone", "gdpr_consent"}


@dataclass
class IntakeResult:
    property_id: uuid.UUID
    applicant_id: uuid.UUID
    inquiry_id: uuid.UUID
    identity_changed: bool
    created_new_applicant: bool


def _norm(value: str | None) -> str:
    return (value or "").strip()


async def get_property_by_code(db: AsyncSession, property_code: str) -> Property | None:
    result = await db.execute(select(Property).where(Property.property_code == property_code))
    return result.scalar_one_or_none()


async def _find_applicant(db: AsyncSession, email: str, phone: str) -> Applicant | None:
    result = await db.execute(
        select(Applicant)
        .where(func.lower(Applicant.email) == email.strip().lower())
        .order_by(Applicant.created_at.asc())
        .limit(1)
    )
    applicant = result.scalar_one_or_none()
    if applicant is not None or not phone:
        return applicant

    result = await db.execute(
        select(Applicant)
        .where(Applicant.phone == phone)
        .order_by(Applicant.created_at.asc())
        .limit(1)
    )
    return result.scalar_one_or_none()


async def _record_identity_change(
    db: AsyncSession,
    applicant: Applicant,
    body: InquiryBase,
    property_id: uuid.UUID,
    changed_by: str,
) -> bool:
    changed = (
        _norm(applicant.full_name) != _norm(body.full_name)
        or _norm(applicant.email) != _norm(body.email)
        or _norm(applicant.phone) != _norm(body.phone)
    )
    if not changed:
        return False

    db.add(
        ApplicantIdentityChange(
            applicant_id=applicant.id,
            property_id=property_id,
            changed_by=changed_by,
            old_full_name=applicant.full_name,
            old_email=applicant.email,
            old_phone=applicant.phone,
            new_full_name=body.full_name,
            new_email=str(body.email),
            new_phone=body.phone,
        )
    )
    logger.warning("Identity of applicant %s changed via %s", applicant.id, changed_by)
    return True


async def capture_inquiry(
    db: AsyncSession,
    body: SalesInquiryCreate | RentalInquiryCreate,
) -> IntakeResult:
    """Store one submitted inquiry form.

    Raises:
        PropertyNotFound: unknown ``property_code``.
        ValidationError: the form does not match the listing's business type.
        PropertyUnavailable: the listing is no longer available.
        ApplicantNotFound: an explicit ``applicant_id`` does not exist.
    """
    inquiry_type = "sales" if isinstance(body, SalesInquiryCreate) else "rental"
    changed_by = "buyer_form" if inquiry_type == "sales" else "rental_form"

    prop = await get_property_by_code(db, body.property_code)
    if prop is None:
        raise PropertyNotFound()
    if inquiry_type == "sales" and not prop.is_sales_listing:
        raise ValidationError("Property is not a sales listing")
    if inquiry_type == "rental" and not prop.is_rental_listing:
        raise ValidationError("Property is not a rental listing")
    if prop.status != "available":
        raise PropertyUnavailable()

    # --- Resolve or create applicant ---
    created = False
    if body.applicant_id is not None:
        applicant = await db.get(Applicant, body.applicant_id)
        if applicant is None:
            raise ApplicantNotFound()
    else:
        applicant = await _find_applicant(db, str(body.email), body.phone)

    identity_changed = False
    if applicant is None:
        applicant = Applicant(full_name=body.full_name, email=str(body.email), phone=body.phone)
        db.add(applicant)
        created = True
    else:
        identity_changed = await _record_identity_change(db, applicant, body, prop.id, changed_by)

    applicant.full_name = body.full_name
    applicant.email = str(body.email)
    applicant.phone = body.phone
    applicant.agreed_to_gdpr = True
    await db.flush()
    if created:
        logger.info("Created applicant %s for property %s", applicant.id, prop.property_code)

    # --- Upsert the (applicant, property) inquiry ---
    details = body.model_dump(exclude=_IDENTITY_FIELDS)
    inquiry = await get_inquiry(db, applicant.id, prop.id)
    if inquiry is None:
        inquiry = Inquiry(applicant_id=applicant.id, property_id=prop.id)
        db.add(inquiry)
    inquiry.inquiry_type = inquiry_type
    for name, value in details.items():
        setattr(inquiry, name, value)
    inquiry.form_submitted_at = datetime.now(timezone.utc).replace(tzinfo=None)
    await db.flush()

    return IntakeResult(
        property_id=prop.id,
        applicant_id=applicant.id,
        inquiry_id=inquiry.id,
        identity_changed=identity_changed,
        created_new_applicant=created,
    )
