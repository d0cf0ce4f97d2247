"""Pydantic v2 schemas for agent-issued booking links."""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict


class ViewingTokenCreate(BaseModel):
    applicant_id: uuid.UUID
    property_id: uuid.UUID


class ViewingTokenResponse(BaseModel):
    id: uuid.UUID
    token: str
    property_id: uuid.UUID
    applicant_id: uuid.UUID
    is_active: bool
    used: bool
    used_at: datetime | None = None
    revoked_at: datetime | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class IssuedViewingTokenResponse(ViewingTokenResponse):
    booking_url: str
