"""Reservation engine: the only writer of slot occupancy and ``Inquiry.viewing_time``.

Booking (``book``):

1. load the target slot (``SlotNotFound``);
2. resolve the credential against the slot's property;
3. reject unless the slot is ``available`` (``SlotUnavailable``);
4. inside one savepoint: release the applicant's prior booking(s) for the
   property, claim the target with a compare-and-swap on ``status``, mirror
   the start time onto the inquiry and mark the token used. A lost CAS rolls
   the savepoint back, so the released slot is restored;
5. compose a confirmation for ``notify``.

Notifications are dispatched by ``notify`` only after the caller commits.
Dispatch failures are logged and swallowed.
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.applicant import Applicant
from app.models.property import Property
from app.models.viewing_slot import SlotStatus, ViewingSlot
from app.models.viewing_token import ViewingToken
from app.reservations import ledger, store
from app.reservations.authorization import AuthorizationResolver, Credential
from app.reservations.config import ReleasePolicy, ReservationConfig
from app.reservations.errors import BookingNotFound, SlotNotFound, SlotUnavailable
from app.reservations.notifications import (
    NotificationDispatcher,
    NotificationIntent,
    ViewingNotification,
    format_slot_time,
)

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    """Current time as naive UTC, matching stored timestamps."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


@dataclass
class BookingOutcome:
    slot: ViewingSlot
    applicant_id: uuid.UUID
    released_slot_ids: list[uuid.UUID] = field(default_factory=list)
    changed: bool = True
    notification: ViewingNotification | None = None


@dataclass
class CancellationOutcome:
    slot: ViewingSlot
    applicant_id: uuid.UUID
    notification: ViewingNotification | None = None


class ReservationEngine:
    """Book, rebook and cancel viewing slots without double-booking."""

    def __init__(
        self,
        config: ReservationConfig,
        resolver: AuthorizationResolver,
        dispatcher: NotificationDispatcher,
    ) -> None:
        self.config = config
        self.resolver = resolver
        self.dispatcher = dispatcher

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    async def book(self, db: AsyncSession, slot_id: uuid.UUID, credential: Credential) -> BookingOutcome:
        """Book ``slot_id`` for the applicant behind ``credential``.

        Raises:
            SlotNotFound: the slot does not exist.
            AuthorizationError: the credential does not resolve for the slot's property.
            SlotUnavailable: the slot is not available or the claim lost a race.
        """
        slot = await store.get_slot(db, slot_id)
        if slot is None:
            raise SlotNotFound()

        identity = await self.resolver.resolve(db, credential, slot.property_id)
        applicant_id = identity.applicant_id
        prop = await db.get(Property, slot.property_id)
        inquiry_type = "sales" if prop is None or prop.is_sales_listing else "rental"

        # A retried request whose first attempt already committed; a single-use
        # link that made this booking may repeat it.
        if slot.status == SlotStatus.BOOKED.value and slot.occupant_id == applicant_id:
            await ledger.set_viewing_time(
                db, applicant_id, slot.property_id, slot.start_at, inquiry_type=inquiry_type
            )
            if identity.token is not None:
                self._mark_token_used(identity.token)
                await db.flush()
            logger.info("Slot %s already booked by applicant %s; nothing to do", slot.id, applicant_id)
            return BookingOutcome(slot=slot, applicant_id=applicant_id, changed=False)

        self.resolver.ensure_unused(identity)
        if slot.status != SlotStatus.AVAILABLE.value:
            logger.warning(
                "Applicant %s requested slot %s which is %s", applicant_id, slot.id, slot.status
            )
            raise SlotUnavailable()

        try:
            async with db.begin_nested():
                released = await self._release_prior(db, applicant_id, slot)
                if not await store.claim_slot(db, slot.id, applicant_id):
                    raise SlotUnavailable()
                await ledger.set_viewing_time(
                    db, applicant_id, slot.property_id, slot.start_at, inquiry_type=inquiry_type
                )
                if identity.token is not None:
                    self._mark_token_used(identity.token)
        except IntegrityError as exc:
            logger.warning("Claim of slot %s by applicant %s hit a uniqueness conflict", slot.id, applicant_id)
            raise SlotUnavailable() from exc
        except SlotUnavailable:
            logger.warning("Applicant %s lost the race for slot %s", applicant_id, slot.id)
            raise

        await db.refresh(slot)
        logger.info(
            "Slot %s booked by applicant %s (released %d prior)", slot.id, applicant_id, len(released)
        )
        notification = await self._compose(db, NotificationIntent.CONFIRMED, applicant_id, slot, prop)
        return BookingOutcome(
            slot=slot,
            applicant_id=applicant_id,
            released_slot_ids=released,
            notification=notification,
        )

    async def cancel(self, db: AsyncSession, slot_id: uuid.UUID, credential: Credential) -> CancellationOutcome:
        """Release the caller's booking of ``slot_id``.

        Either credential kind is accepted whatever the authorization mode;
        the release only succeeds for the slot's current occupant. Cancelling a
        slot that is not booked by the caller (including a second cancel of the
        same booking) raises ``BookingNotFound``.
        """
        slot = await store.get_slot(db, slot_id)
        if slot is None:
            raise BookingNotFound()

        identity = await self.resolver.resolve(db, credential, slot.property_id, any_kind=True)
        applicant_id = identity.applicant_id
        if slot.status != SlotStatus.BOOKED.value or slot.occupant_id != applicant_id:
            raise BookingNotFound()

        async with db.begin_nested():
            if not await store.release_slot_held_by(db, slot.id, applicant_id):
                raise BookingNotFound()
            await ledger.clear_viewing_time(db, applicant_id, slot.property_id)

        await db.refresh(slot)
        logger.info("Slot %s cancelled by applicant %s", slot.id, applicant_id)
        prop = await db.get(Property, slot.property_id)
        notification = await self._compose(db, NotificationIntent.CANCELLED, applicant_id, slot, prop)
        return CancellationOutcome(slot=slot, applicant_id=applicant_id, notification=notification)

    async def current_booking(
        self,
        db: AsyncSession,
        applicant_id: uuid.UUID,
        property_id: uuid.UUID,
    ) -> ViewingSlot | None:
        booked = await store.find_booked_slots(db, applicant_id, property_id, limit=1)
        return booked[0] if booked else None

    # ------------------------------------------------------------------
    # Side effects
    # ------------------------------------------------------------------

    async def notify(self, notification: ViewingNotification | None) -> bool:
        """Dispatch once, best-effort. Returns whether the dispatcher succeeded."""
        if notification is None:
            return False
        try:
            await self.dispatcher.dispatch(notification)
        except Exception:
            logger.exception(
                "Failed to send %s notification to %s",
                notification.intent.value,
                notification.recipient_email,
            )
            return False
        return True

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _release_prior(
        self,
        db: AsyncSession,
        applicant_id: uuid.UUID,
        target: ViewingSlot,
    ) -> list[uuid.UUID]:
        limit = 1 if self.config.release_policy is ReleasePolicy.RELEASE_ONE else None
        prior = await store.find_booked_slots(
            db, applicant_id, target.property_id, exclude_slot_id=target.id, limit=limit
        )
        ids = [s.id for s in prior]
        if ids:
            await store.release_slots(db, applicant_id, ids)
            logger.info("Released prior slot(s) %s of applicant %s", ids, applicant_id)
        return ids

    @staticmethod
    def _mark_token_used(token: ViewingToken) -> None:
        if not token.used:
            token.used = True
            token.used_at = _utcnow()
            logger.info("Viewing token %s marked used", token.id)

    async def _compose(
        self,
        db: AsyncSession,
        intent: NotificationIntent,
        applicant_id: uuid.UUID,
        slot: ViewingSlot,
        prop: Property | None,
    ) -> ViewingNotification | None:
        applicant = await db.get(Applicant, applicant_id)
        if applicant is None or prop is None or not applicant.email:
            logger.warning("Cannot compose %s notification for slot %s", intent.value, slot.id)
            return None
        return ViewingNotification(
            intent=intent,
            recipient_name=applicant.full_name,
            recipient_email=applicant.email,
            property_code=prop.property_code,
            property_label=prop.label,
            slot_time=format_slot_time(slot.start_at, self.config.timezone, self.config.time_format),
        )
