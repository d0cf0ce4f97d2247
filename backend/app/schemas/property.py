"""Pydantic v2 response schemas for agent property listings."""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict


class PropertyResponse(BaseModel):
    id: uuid.UUID
    property_code: str
    business_type: str
    configuration: str | None = None
    address: str | None = None
    status: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PropertyListResponse(BaseModel):
    items: list[PropertyResponse]
    total: int
