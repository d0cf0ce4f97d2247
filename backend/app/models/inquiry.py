"""Inquiry model: one record per (applicant, property)."""

import uuid
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import Boolean, Date, ForeignKey, Integer, Numeric, String, Text, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base, UUIDPrimaryKeyMixin


class Inquiry(UUIDPrimaryKeyMixin, Base):
    """Lead-capture data for one applicant and one property.

    ``viewing_time`` mirrors the start of the applicant's currently booked
    viewing slot for the property and is written only by the reservation
    engine.
    """

    __tablename__ = "inquiries"

    applicant_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("applicants.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    property_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    inquiry_type: Mapped[str] = mapped_column(String(20), default="sales")  # sales, rental
    viewing_time: Mapped[datetime | None] = mapped_column(nullable=True)

    # Sales financing
    financing_method: Mapped[str | None] = mapped_column(String(100))
    own_funds_pct: Mapped[Decimal | None] = mapped_column(Numeric(5, 2))
    mortgage_pct: Mapped[Decimal | None] = mapped_column(Numeric(5, 2))
    has_advisor: Mapped[str | None] = mapped_column(String(255))
    mortgage_progress: Mapped[str | None] = mapped_column(String(255))
    tied_to_sale: Mapped[bool | None] = mapped_column(Boolean)
    buyer_notes: Mapped[str | None] = mapped_column(Text)

    # Rental details
    move_in_date: Mapped[date | None] = mapped_column(Date)
    lease_length: Mapped[str | None] = mapped_column(String(100))
    occupants: Mapped[int | None] = mapped_column(Integer)
    has_pets: Mapped[bool | None] = mapped_column(Boolean)
    smoker: Mapped[bool | None] = mapped_column(Boolean)
    notes: Mapped[str | None] = mapped_column(Text)

    # Attribution
    utm_source: Mapped[str | None] = mapped_column(String(255))
    utm_medium: Mapped[str | None] = mapped_column(String(255))
    utm_campaign: Mapped[str | None] = mapped_column(String(255))

    form_submitted_at: Mapped[datetime | None] = mapped_column(nullable=True)
    created_at: Mapped[datetime] = mapped_column(server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        UniqueConstraint("applicant_id", "property_id", name="uq_inquiries_applicant_property"),
    )

    def __repr__(self) -> str:
        return f"<Inquiry(id={self.id}, applicant_id={self.applicant_id}, property_id={self.property_id})>"
