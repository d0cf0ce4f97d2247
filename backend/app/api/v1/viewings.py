"""Viewing booking API router: the applicant-facing booking page.

The booking page is opened with its property-scoped link token in every
authorization mode. Booking requires the credential kind of the configured
mode (token, or the raw applicant id in ``direct`` mode); cancellation takes
either. Confirmation and
cancellation emails are sent as background tasks after the transaction is
committed, so a failed email never affects the booking.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, BackgroundTasks, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_authorization_resolver, get_db, get_reservation_engine
from app.reservations import store
from app.reservations.authorization import AuthorizationResolver, TokenCredential
from app.reservations.engine import ReservationEngine
from app.reservations.errors import PropertyNotFound, PropertyUnavailable
from app.reservations.notifications import format_slot_time
from app.schemas.viewing import (
    BookingPageResponse,
    BookingResponse,
    BookSlotRequest,
    CancellationResponse,
    CancelSlotRequest,
    SlotResponse,
)
from app.services.intake_service import get_property_by_code

router = APIRouter(prefix="/api/v1/viewings", tags=["viewings"])


@router.get(
    "/{property_code}",
    response_model=BookingPageResponse,
    summary="Current booking and available slots for a booking link",
)
async def get_booking_page(
    property_code: str,
    token: str = Query(..., alias="t", min_length=1, description="Booking link token"),
    db: AsyncSession = Depends(get_db),
    resolver: AuthorizationResolver = Depends(get_authorization_resolver),
    engine: ReservationEngine = Depends(get_reservation_engine),
) -> BookingPageResponse:
    """Resolve the link and list future available slots, earliest first."""
    prop = await get_property_by_code(db, property_code)
    if prop is None:
        raise PropertyNotFound()
    if prop.status == "withdrawn":
        raise PropertyUnavailable()

    identity = await resolver.resolve(db, TokenCredential(token=token), prop.id, any_kind=True)
    current = await engine.current_booking(db, identity.applicant_id, prop.id)

    now = datetime.now(timezone.utc).replace(tzinfo=None)
    available = await store.list_available_slots(db, prop.id, starting_after=now)

    config = engine.config
    return BookingPageResponse(
        property_code=prop.property_code,
        property_label=prop.label,
        current_booking=SlotResponse.model_validate(current) if current else None,
        current_booking_time=(
            format_slot_time(current.start_at, config.timezone, config.time_format) if current else None
        ),
        available_slots=[SlotResponse.model_validate(s) for s in available],
    )


@router.post(
    "/book",
    response_model=BookingResponse,
    summary="Book a viewing slot (or switch an existing booking to it)",
)
async def book_slot(
    body: BookSlotRequest,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
    engine: ReservationEngine = Depends(get_reservation_engine),
) -> BookingResponse:
    """Claim the slot; any other slot this applicant holds for the property is released."""
    outcome = await engine.book(db, body.slot_id, body.credential())
    await db.commit()

    if outcome.notification is not None:
        background_tasks.add_task(engine.notify, outcome.notification)

    slot = outcome.slot
    return BookingResponse(
        message="Slot booked successfully" if outcome.changed else "Slot already booked",
        slot_id=slot.id,
        slot_start=slot.start_at,
        slot_time=format_slot_time(slot.start_at, engine.config.timezone, engine.config.time_format),
        released_slot_ids=outcome.released_slot_ids,
    )


@router.post(
    "/cancel",
    response_model=CancellationResponse,
    summary="Cancel a booked viewing slot",
)
async def cancel_slot(
    body: CancelSlotRequest,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
    engine: ReservationEngine = Depends(get_reservation_engine),
) -> CancellationResponse:
    outcome = await engine.cancel(db, body.slot_id, body.credential())
    await db.commit()

    if outcome.notification is not None:
        background_tasks.add_task(engine.notify, outcome.notification)

    return CancellationResponse(message="Booking cancelled", slot_id=outcome.slot.id)
