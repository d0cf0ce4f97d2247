"""Authorization resolver: turns a request credential into an applicant id.

Two credential kinds exist:

* ``DirectCredential`` carries the applicant's id. The applicant row must exist.
* ``TokenCredential`` carries a booking-link token scoped to one property.
  The token must exist for that property and be active. Whether a token that
  has already been used may book again is a policy (``allow_token_reuse``);
  by default tokens stay valid until revoked.

The resolver only reads. Marking a token used is the engine's job.
"""

import uuid
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.applicant import Applicant
from app.models.viewing_token import ViewingToken
from app.reservations.config import AuthorizationMode, ReservationConfig
from app.reservations.errors import ApplicantNotFound, InvalidCredential, InvalidToken, TokenInactive


@dataclass(frozen=True)
class DirectCredential:
    applicant_id: uuid.UUID


@dataclass(frozen=True)
class TokenCredential:
    token: str


Credential = DirectCredential | TokenCredential


@dataclass(frozen=True)
class ResolvedIdentity:
    """Outcome of a successful resolution."""

    applicant_id: uuid.UUID
    token: ViewingToken | None = None


class AuthorizationResolver:
    """Validate credentials according to the configured ``AuthorizationMode``."""

    def __init__(self, config: ReservationConfig) -> None:
        self.config = config

    async def resolve(
        self,
        db: AsyncSession,
        credential: Credential,
        property_id: uuid.UUID,
        *,
        enforce_single_use: bool = False,
        any_kind: bool = False,
    ) -> ResolvedIdentity:
        """Return the applicant behind ``credential`` for ``property_id``.

        ``enforce_single_use`` applies the token reuse policy; it is set for
        booking and left off for cancellation so a used link can still
        release its own booking.

        ``any_kind`` accepts either credential kind regardless of the configured
        mode. Cancellation and the booking page use it: they only act on
        bookings the resolved applicant already holds.
        """
        mode = self.config.authorization_mode
        if isinstance(credential, DirectCredential):
            if mode is not AuthorizationMode.DIRECT and not any_kind:
                raise InvalidCredential("Booking link token is required")
            return await self._resolve_direct(db, credential)

        if mode is not AuthorizationMode.TOKEN and not any_kind:
            raise InvalidCredential("applicantId is required")
        identity = await self._resolve_token(db, credential, property_id)
        if enforce_single_use:
            self.ensure_unused(identity)
        return identity

    def ensure_unused(self, identity: ResolvedIdentity) -> None:
        """Reject a used token when the deployment makes links single-use."""
        token = identity.token
        if token is not None and token.used and not self.config.allow_token_reuse:
            raise TokenInactive("Booking link has already been used")

    async def _resolve_direct(self, db: AsyncSession, credential: DirectCredential) -> ResolvedIdentity:
        applicant = await db.get(Applicant, credential.applicant_id)
        if applicant is None:
            raise ApplicantNotFound()
        return ResolvedIdentity(applicant_id=applicant.id)

    async def _resolve_token(
        self,
        db: AsyncSession,
        credential: TokenCredential,
        property_id: uuid.UUID,
    ) -> ResolvedIdentity:
        value = credential.token.strip()
        if not value:
            raise InvalidToken()

        result = await db.execute(
            select(ViewingToken).where(
                ViewingToken.token == value,
                ViewingToken.property_id == property_id,
            )
        )
        token = result.scalar_one_or_none()
        if token is None:
            raise InvalidToken()
        if not token.is_active:
            raise TokenInactive()

        return ResolvedIdentity(applicant_id=token.applicant_id, token=token)
