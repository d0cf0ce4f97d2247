"""Pydantic v2 schemas for lead-capture intake (sales and rental inquiries)."""

import uuid
from datetime import date
from decimal import Decimal

from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class InquiryBase(BaseModel):
    """Applicant identity shared by every inquiry form."""

    property_code: str = Field(..., min_length=1, max_length=50)
    applicant_id: uuid.UUID | None = None
    full_name: str = Field(..., max_length=255)
    email: EmailStr
    phone: str = Field(..., min_length=1, max_length=50)
    gdpr_consent: bool

    utm_source: str | None = Field(None, max_length=255)
    utm_medium: str | None = Field(None, max_length=255)
    utm_campaign: str | None = Field(None, max_length=255)

    @field_validator("full_name", "phone", "property_code")
    @classmethod
    def strip_required(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value

    @field_validator("gdpr_consent")
    @classmethod
    def consent_given(cls, value: bool) -> bool:
        if value is not True:
            raise ValueError("GDPR consent must be accepted")
        return value


class SalesInquiryCreate(InquiryBase):
    financing_method: str | None = Field(None, max_length=100)
    own_funds_pct: Decimal | None = Field(None, ge=0, le=100)
    mortgage_pct: Decimal | None = Field(None, ge=0, le=100)
    has_advisor: str | None = Field(None, max_length=255)
    mortgage_progress: str | None = Field(None, max_length=255)
    tied_to_sale: bool | None = None
    buyer_notes: str | None = None

    @model_validator(mode="after")
    def check_financing_split(self) -> "SalesInquiryCreate":
        if (
            self.own_funds_pct is not None
            and self.mortgage_pct is not None
            and self.own_funds_pct + self.mortgage_pct > 100
        ):
            raise ValueError("Sum of own_funds_pct and mortgage_pct must be <= 100")
        return self


class RentalInquiryCreate(InquiryBase):
    move_in_date: date | None = None
    lease_length: str | None = Field(None, max_length=100)
    occupants: int | None = Field(None, ge=1)
    has_pets: bool | None = None
    smoker: bool | None = None
    notes: str | None = None


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class InquiryIntakeResponse(BaseModel):
    ok: bool = True
    property_id: uuid.UUID
    applicant_id: uuid.UUID
    inquiry_id: uuid.UUID
    identity_changed: bool
    created_new_applicant: bool
