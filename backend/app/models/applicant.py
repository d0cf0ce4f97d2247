"""Applicant domain models."""

import uuid
from datetime import datetime

from sqlalchemy import Boolean, ForeignKey, String, func
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base, TimestampMixin, UUIDPrimaryKeyMixin


class Applicant(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A person who submitted an inquiry and may book viewings."""

    __tablename__ = "applicants"

    full_name: Mapped[str] = mapped_column(String(255))
    email: Mapped[str] = mapped_column(String(255), index=True)
    phone: Mapped[str | None] = mapped_column(String(50), index=True)
    agreed_to_gdpr: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    def __repr__(self) -> str:
        return f"<Applicant(id={self.id}, email={self.email!r})>"


class ApplicantIdentityChange(UUIDPrimaryKeyMixin, Base):
    """Audit row written when a resubmitted form changes an applicant's identity fields."""

    __tablename__ = "applicant_identity_changes"

    applicant_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("applicants.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    property_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("properties.id", ondelete="SET NULL"),
        nullable=True,
    )
    changed_by: Mapped[str] = mapped_column(String(50))  # buyer_form, rental_form
    old_full_name: Mapped[str | None] = mapped_column(String(255))
    old_email: Mapped[str | None] = mapped_column(String(255))
    old_phone: Mapped[str | None] = mapped_column(String(50))
    new_full_name: Mapped[str | None] = mapped_column(String(255))
    new_email: Mapped[str | None] = mapped_column(String(255))
    new_phone: Mapped[str | None] = mapped_column(String(50))
    created_at: Mapped[datetime] = mapped_column(server_default=func.now())
