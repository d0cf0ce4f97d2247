"""Slot store: reads and conditional writes on ``viewing_slots``.

Every write here is a compare-and-swap: the ``WHERE`` clause repeats the
status (and occupant) the caller expects, and the affected row count tells
whether the transition happened.
"""

import uuid
from collections.abc import Sequence
from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.viewing_slot import SlotStatus, ViewingSlot


async def get_slot(db: AsyncSession, slot_id: uuid.UUID) -> ViewingSlot | None:
    """Load a slot, bypassing any stale copy in the session's identity map."""
    result = await db.execute(
        select(ViewingSlot)
        .where(ViewingSlot.id == slot_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def find_booked_slots(
    db: AsyncSession,
    applicant_id: uuid.UUID,
    property_id: uuid.UUID,
    *,
    exclude_slot_id: uuid.UUID | None = None,
    limit: int | None = None,
) -> list[ViewingSlot]:
    """Slots of ``property_id`` currently booked by ``applicant_id``, earliest first."""
    query = select(ViewingSlot).where(
        ViewingSlot.property_id == property_id,
        ViewingSlot.occupant_id == applicant_id,
        ViewingSlot.status == SlotStatus.BOOKED.value,
    )
    if exclude_slot_id is not None:
        query = query.where(ViewingSlot.id != exclude_slot_id)
    query = query.order_by(ViewingSlot.start_at.asc())
    if limit is not None:
        query = query.limit(limit)

    result = await db.execute(query)
    return list(result.scalars().all())


async def claim_slot(db: AsyncSession, slot_id: uuid.UUID, applicant_id: uuid.UUID) -> bool:
    """Book ``slot_id`` for ``applicant_id`` only if it is still available.

    Returns ``False`` when the row was not ``available`` at write time (lost race,
    booked by someone else, or retired).
    """
    result = await db.execute(
        update(ViewingSlot)
        .where(
            ViewingSlot.id == slot_id,
            ViewingSlot.status == SlotStatus.AVAILABLE.value,
        )
        .values(status=SlotStatus.BOOKED.value, occupant_id=applicant_id)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


async def release_slots(
    db: AsyncSession,
    applicant_id: uuid.UUID,
    slot_ids: Sequence[uuid.UUID],
) -> int:
    """Return the given slots to ``available`` if they are still held by ``applicant_id``."""
    if not slot_ids:
        return 0
    result = await db.execute(
        update(ViewingSlot)
        .where(
            ViewingSlot.id.in_(list(slot_ids)),
            ViewingSlot.occupant_id == applicant_id,
            ViewingSlot.status == SlotStatus.BOOKED.value,
        )
        .values(status=SlotStatus.AVAILABLE.value, occupant_id=None)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount


async def release_slot_held_by(db: AsyncSession, slot_id: uuid.UUID, applicant_id: uuid.UUID) -> bool:
    return await release_slots(db, applicant_id, [slot_id]) == 1


async def list_available_slots(
    db: AsyncSession,
    property_id: uuid.UUID,
    *,
    starting_after: datetime | None = None,
) -> list[ViewingSlot]:
    """Available slots of a property ordered by start time."""
    query = select(ViewingSlot).where(
        ViewingSlot.property_id == property_id,
        ViewingSlot.status == SlotStatus.AVAILABLE.value,
    )
    if starting_after is not None:
        query = query.where(ViewingSlot.start_at > starting_after)
    result = await db.execute(query.order_by(ViewingSlot.start_at.asc()))
    return list(result.scalars().all())


async def list_property_slots(db: AsyncSession, property_id: uuid.UUID) -> list[ViewingSlot]:
    result = await db.execute(
        select(ViewingSlot)
        .where(ViewingSlot.property_id == property_id)
        .order_by(ViewingSlot.start_at.asc())
    )
    return list(result.scalars().all())
