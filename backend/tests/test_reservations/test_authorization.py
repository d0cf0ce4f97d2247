"""Tests for resolving booking credentials into applicants."""

import uuid

import pytest

from app.models.property import Property
from app.reservations.authorization import AuthorizationResolver, DirectCredential, TokenCredential
from app.reservations.config import AuthorizationMode, ReservationConfig
from app.reservations.errors import ApplicantNotFound, InvalidCredential, InvalidToken, TokenInactive

pytestmark = pytest.mark.asyncio(loop_scope="session")


@pytest.fixture
def token_resolver() -> AuthorizationResolver:
    return AuthorizationResolver(ReservationConfig())


@pytest.fixture
def direct_resolver() -> AuthorizationResolver:
    return AuthorizationResolver(ReservationConfig(authorization_mode=AuthorizationMode.DIRECT))


class TestTokenMode:
    async def test_valid_token(self, db_session, token_resolver, applicant, make_token, test_property):
        token = await make_token(applicant)

        identity = await token_resolver.resolve(db_session, TokenCredential(token=token.token), test_property.id)

        assert identity.applicant_id == applicant.id
        assert identity.token is not None
        assert identity.token.id == token.id

    async def test_surrounding_whitespace_is_ignored(
        self, db_session, token_resolver, applicant, make_token, test_property
    ):
        token = await make_token(applicant)

        identity = await token_resolver.resolve(
            db_session, TokenCredential(token=f"  {token.token} "), test_property.id
        )
        assert identity.applicant_id == applicant.id

    async def test_unknown_token(self, db_session, token_resolver, test_property):
        with pytest.raises(InvalidToken):
            await token_resolver.resolve(db_session, TokenCredential(token="nope"), test_property.id)

    async def test_blank_token(self, db_session, token_resolver, test_property):
        with pytest.raises(InvalidToken):
            await token_resolver.resolve(db_session, TokenCredential(token="   "), test_property.id)

    async def test_token_is_scoped_to_its_property(
        self, db_session, token_resolver, applicant, make_token, test_agent
    ):
        token = await make_token(applicant)
        other = Property(owner_id=test_agent.id, property_code="077-NP55555", business_type="sale")
        db_session.add(other)
        await db_session.flush()

        with pytest.raises(InvalidToken):
            await token_resolver.resolve(db_session, TokenCredential(token=token.token), other.id)

    async def test_revoked_token(self, db_session, token_resolver, applicant, make_token, test_property):
        token = await make_token(applicant, is_active=False)

        with pytest.raises(TokenInactive):
            await token_resolver.resolve(db_session, TokenCredential(token=token.token), test_property.id)

    async def test_used_token_without_single_use_enforcement(
        self, db_session, applicant, make_token, test_property
    ):
        resolver = AuthorizationResolver(ReservationConfig(allow_token_reuse=False))
        token = await make_token(applicant, used=True)

        identity = await resolver.resolve(db_session, TokenCredential(token=token.token), test_property.id)
        assert identity.applicant_id == applicant.id

    async def test_used_token_with_single_use_enforcement(self, db_session, applicant, make_token, test_property):
        resolver = AuthorizationResolver(ReservationConfig(allow_token_reuse=False))
        token = await make_token(applicant, used=True)

        with pytest.raises(TokenInactive) as exc_info:
            await resolver.resolve(
                db_session, TokenCredential(token=token.token), test_property.id, enforce_single_use=True
            )
        assert exc_info.value.detail == "Booking link has already been used"

    async def test_used_token_is_fine_when_reuse_allowed(
        self, db_session, token_resolver, applicant, make_token, test_property
    ):
        token = await make_token(applicant, used=True)

        identity = await token_resolver.resolve(
            db_session, TokenCredential(token=token.token), test_property.id, enforce_single_use=True
        )
        assert identity.applicant_id == applicant.id

    async def test_applicant_id_is_rejected(self, db_session, token_resolver, applicant, test_property):
        with pytest.raises(InvalidCredential):
            await token_resolver.resolve(db_session, DirectCredential(applicant_id=applicant.id), test_property.id)


class TestDirectMode:
    async def test_existing_applicant(self, db_session, direct_resolver, applicant, test_property):
        identity = await direct_resolver.resolve(
            db_session, DirectCredential(applicant_id=applicant.id), test_property.id
        )
        assert identity.applicant_id == applicant.id
        assert identity.token is None

    async def test_unknown_applicant(self, db_session, direct_resolver, test_property):
        with pytest.raises(ApplicantNotFound):
            await direct_resolver.resolve(db_session, DirectCredential(applicant_id=uuid.uuid4()), test_property.id)

    async def test_token_is_rejected(self, db_session, direct_resolver, applicant, make_token, test_property):
        token = await make_token(applicant)
        with pytest.raises(InvalidCredential):
            await direct_resolver.resolve(db_session, TokenCredential(token=token.token), test_property.id)


class TestAnyKind:
    """Cancellation and the booking page accept either credential kind."""

    async def test_applicant_id_in_token_mode(self, db_session, token_resolver, applicant, test_property):
        identity = await token_resolver.resolve(
            db_session, DirectCredential(applicant_id=applicant.id), test_property.id, any_kind=True
        )
        assert identity.applicant_id == applicant.id

    async def test_token_in_direct_mode(self, db_session, direct_resolver, applicant, make_token, test_property):
        token = await make_token(applicant)
        identity = await direct_resolver.resolve(
            db_session, TokenCredential(token=token.token), test_property.id, any_kind=True
        )
        assert identity.applicant_id == applicant.id
        assert identity.token.id == token.id

    async def test_token_checks_still_apply(self, db_session, direct_resolver, applicant, make_token, test_property):
        token = await make_token(applicant, is_active=False)
        with pytest.raises(TokenInactive):
            await direct_resolver.resolve(
                db_session, TokenCredential(token=token.token), test_property.id, any_kind=True
            )

    async def test_unknown_applicant_in_token_mode(self, db_session, token_resolver, test_property):
        with pytest.raises(ApplicantNotFound):
            await token_resolver.resolve(
                db_session, DirectCredential(applicant_id=uuid.uuid4()), test_property.id, any_kind=True
            )
