"""Property model: listings that applicants inquire about and view."""

import uuid
from datetime import datetime

from sqlalchemy import ForeignKey, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base, UUIDPrimaryKeyMixin

SALES_BUSINESS_TYPES = frozenset({"sale", "sell", "prodej"})
RENTAL_BUSINESS_TYPES = frozenset({"rent", "rental", "pronajem", "pronájem"})


class Property(UUIDPrimaryKeyMixin, Base):
    """A listing (for sale or rent) published by an agent."""

    __tablename__ = "properties"

    owner_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    property_code: Mapped[str] = mapped_column(String(50), unique=True, index=True, nullable=False)
    business_type: Mapped[str] = mapped_column(String(50), nullable=False)  # sale, rent
    configuration: Mapped[str | None] = mapped_column(String(100), default=None)  # e.g. "3+kk"
    address: Mapped[str | None] = mapped_column(String(255), default=None)
    status: Mapped[str] = mapped_column(String(50), server_default="available")  # available, reserved, withdrawn
    created_at: Mapped[datetime] = mapped_column(server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(server_default=func.now(), onupdate=func.now())

    # Relationships
    owner: Mapped["User"] = relationship(back_populates="properties", lazy="selectin")  # type: ignore[name-defined]  # noqa: F821

    @property
    def is_sales_listing(self) -> bool:
        return self.business_type.strip().lower() in SALES_BUSINESS_TYPES

    @property
    def is_rental_listing(self) -> bool:
        return self.business_type.strip().lower() in RENTAL_BUSINESS_TYPES

    @property
    def label(self) -> str:
        """Human-readable "<configuration> <address>" used in notifications."""
        parts = [p for p in (self.configuration, self.address) if p]
        return " ".join(parts) or self.property_code

    def __repr__(self) -> str:
        return f"<Property(id={self.id}, code={self.property_code!r}, type={self.business_type!r})>"
