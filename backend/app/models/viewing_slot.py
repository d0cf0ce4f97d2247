"""Viewing slot model: bookable time intervals per property."""

import enum
import uuid
from datetime import datetime

from sqlalchemy import CheckConstraint, ForeignKey, Index, String, func, text
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base, UUIDPrimaryKeyMixin


class SlotStatus(str, enum.Enum):
    AVAILABLE = "available"
    BOOKED = "booked"
    CANCELLED = "cancelled"


class ViewingSlot(UUIDPrimaryKeyMixin, Base):
    """A fixed interval during which a property can be viewed.

    ``status`` and ``occupant_id`` always change together: the occupant is set
    exactly when the slot is booked.
    """

    __tablename__ = "viewing_slots"

    property_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    start_at: Mapped[datetime] = mapped_column(nullable=False)
    end_at: Mapped[datetime] = mapped_column(nullable=False)
    status: Mapped[str] = mapped_column(
        String(20),
        default=SlotStatus.AVAILABLE.value,
        nullable=False,
        index=True,
    )
    occupant_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("applicants.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    created_at: Mapped[datetime] = mapped_column(server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        CheckConstraint("end_at > start_at", name="ck_viewing_slots_interval"),
        CheckConstraint(
            "status IN ('available', 'booked', 'cancelled')",
            name="ck_viewing_slots_status",
        ),
        CheckConstraint(
            "(status = 'booked' AND occupant_id IS NOT NULL) OR (status <> 'booked' AND occupant_id IS NULL)",
            name="ck_viewing_slots_occupant",
        ),
        # Storage backstop: one booked slot per (property, applicant).
        Index(
            "uq_viewing_slots_active_booking",
            "property_id",
            "occupant_id",
            unique=True,
            postgresql_where=text("status = 'booked'"),
            sqlite_where=text("status = 'booked'"),
        ),
        Index("ix_viewing_slots_property_start", "property_id", "start_at"),
    )

    def __repr__(self) -> str:
        return f"<ViewingSlot(id={self.id}, property_id={self.property_id}, status={self.status})>"
