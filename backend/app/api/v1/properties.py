"""Agent property API router: listings and their viewing slots."""

import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_agent, get_db
from app.models.property import Property
from app.models.user import User
from app.reservations import store
from app.schemas.property import PropertyListResponse
from app.schemas.viewing import AgentSlotResponse
from app.services.token_service import get_owned_property

router = APIRouter(prefix="/api/v1/properties", tags=["properties"])


@router.get(
    "",
    response_model=PropertyListResponse,
    summary="List the current agent's properties",
)
async def list_properties(
    skip: int = Query(0, ge=0, description="Pagination offset"),
    limit: int = Query(20, ge=1, le=100, description="Pagination limit"),
    db: AsyncSession = Depends(get_db),
    current_agent: User = Depends(get_current_agent),
) -> dict:
    base_filter = Property.owner_id == current_agent.id

    total_result = await db.execute(select(func.count()).select_from(Property).where(base_filter))
    total = total_result.scalar_one()

    result = await db.execute(
        select(Property).where(base_filter).order_by(Property.created_at.desc()).offset(skip).limit(limit)
    )
    return {"items": list(result.scalars().all()), "total": total}


@router.get(
    "/{property_id}/slots",
    response_model=list[AgentSlotResponse],
    summary="All viewing slots of a property with their occupants",
)
async def list_property_slots(
    property_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_agent: User = Depends(get_current_agent),
) -> list:
    prop = await get_owned_property(db, current_agent, property_id)
    return await store.list_property_slots(db, prop.id)
