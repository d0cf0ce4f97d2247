"""Pydantic v2 request/response schemas for viewing slot booking."""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator

from app.reservations.authorization import Credential, DirectCredential, TokenCredential

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class SlotActionRequest(BaseModel):
    """Identify a slot and the acting applicant.

    Exactly one of ``applicant_id`` and ``token`` must be present. Field names
    also accept the camelCase spelling used by the booking page.
    """

    slot_id: uuid.UUID = Field(..., alias="slotId")
    applicant_id: uuid.UUID | None = Field(None, alias="applicantId")
    token: str | None = Field(None, min_length=1, max_length=128)

    model_config = ConfigDict(populate_by_name=True)

    @model_validator(mode="after")
    def check_single_credential(self) -> "SlotActionRequest":
        if (self.applicant_id is None) == (self.token is None):
            raise ValueError("Provide exactly one of applicantId or token")
        return self

    def credential(self) -> Credential:
        if self.applicant_id is not None:
            return DirectCredential(applicant_id=self.applicant_id)
        return TokenCredential(token=self.token or "")


class BookSlotRequest(SlotActionRequest):
    """Schema for booking (or switching to) a viewing slot."""


class CancelSlotRequest(SlotActionRequest):
    """Schema for cancelling a booked viewing slot."""


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class SlotResponse(BaseModel):
    id: uuid.UUID
    property_id: uuid.UUID
    start_at: datetime
    end_at: datetime
    status: str

    model_config = ConfigDict(from_attributes=True)


class AgentSlotResponse(SlotResponse):
    """Slot as seen by the listing agent, including who holds it."""

    occupant_id: uuid.UUID | None = None


class BookingResponse(BaseModel):
    message: str
    slot_id: uuid.UUID
    slot_start: datetime
    slot_time: str  # formatted in the viewing timezone
    released_slot_ids: list[uuid.UUID] = []


class CancellationResponse(BaseModel):
    message: str
    slot_id: uuid.UUID


class BookingPageResponse(BaseModel):
    """Data needed to render an applicant's booking page for one property."""

    property_code: str
    property_label: str
    current_booking: SlotResponse | None = None
    current_booking_time: str | None = None
    available_slots: list[SlotResponse]
