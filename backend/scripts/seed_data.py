"""Seed the database with a demo agent, listings, viewing slots and a booking link.

Viewing slots are normally produced by the calendar tooling; the ones here
only exist so the booking page has something to show locally.

Run inside Docker:
    docker compose exec backend python -m scripts.seed_data
"""

import asyncio
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

# Add backend to path so imports work when run as a script
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from sqlalchemy import delete, select

from app.auth.security import hash_password
from app.config import settings
from app.database import async_session_factory, engine
from app.models.applicant import Applicant, ApplicantIdentityChange
from app.models.inquiry import Inquiry
from app.models.property import Property
from app.models.user import User
from app.models.viewing_slot import ViewingSlot
from app.models.viewing_token import ViewingToken
from app.services.token_service import booking_url, generate_token

# ---------------------------------------------------------------------------
# Seed data definitions
# ---------------------------------------------------------------------------

DEMO_AGENT = {
    "email": "agent@example.com",
    "password": "demo1234",
    "name": "Demo Agent",
}

PROPERTIES = [
    {
        "property_code": "077-NP09999",
        "business_type": "sale",
        "configuration": "3+kk",
        "address": "Vinohradská 12, Praha 2",
    },
    {
        "property_code": "077-NP08812",
        "business_type": "rent",
        "configuration": "2+1",
        "address": "Milady Horákové 48, Praha 7",
    },
]

DEMO_APPLICANT = {
    "full_name": "Jana Nováková",
    "email": "jana.novakova@example.com",
    "phone": "+420777111222",
    "agreed_to_gdpr": True,
}

# Half-hour viewings, three per afternoon, on the next three weekdays
SLOT_MINUTES = 30
SLOT_STARTS_UTC = [(13, 0), (13, 30), (14, 0)]


def _next_weekdays(count: int) -> list[datetime]:
    day = datetime.now(timezone.utc).replace(tzinfo=None, hour=0, minute=0, second=0, microsecond=0)
    days: list[datetime] = []
    while len(days) < count:
        day += timedelta(days=1)
        if day.weekday() < 5:
            days.append(day)
    return days


async def seed() -> None:
    async with async_session_factory() as session:
        # ------------------------------------------------------------------
        # 1. Clear previous demo data
        # ------------------------------------------------------------------
        existing = await session.execute(select(User).where(User.email == DEMO_AGENT["email"]))
        if existing.scalar_one_or_none() is not None:
            for model in (ViewingToken, ViewingSlot, Inquiry, ApplicantIdentityChange, Applicant, Property, User):
                await session.execute(delete(model))
            await session.flush()
            print("🧹 Removed previous seed data")

        # ------------------------------------------------------------------
        # 2. Agent + listings
        # ------------------------------------------------------------------
        agent = User(
            email=DEMO_AGENT["email"],
            hashed_password=hash_password(DEMO_AGENT["password"]),
            name=DEMO_AGENT["name"],
        )
        session.add(agent)
        await session.flush()

        created_properties: list[Property] = []
        for prop_data in PROPERTIES:
            prop = Property(owner_id=agent.id, **prop_data)
            session.add(prop)
            await session.flush()
            created_properties.append(prop)
            print(f"   🏠 {prop.property_code} ({prop.business_type}) {prop.configuration} {prop.address}")

        # ------------------------------------------------------------------
        # 3. Viewing slots
        # ------------------------------------------------------------------
        slot_count = 0
        for prop in created_properties:
            for day in _next_weekdays(3):
                for hour, minute in SLOT_STARTS_UTC:
                    start = day.replace(hour=hour, minute=minute)
                    session.add(
                        ViewingSlot(
                            property_id=prop.id,
                            start_at=start,
                            end_at=start + timedelta(minutes=SLOT_MINUTES),
                        )
                    )
                    slot_count += 1
        await session.flush()
        print(f"✅ Created {slot_count} viewing slots")

        # ------------------------------------------------------------------
        # 4. Applicant, inquiry and booking link for the sales listing
        # ------------------------------------------------------------------
        applicant = Applicant(**DEMO_APPLICANT)
        session.add(applicant)
        await session.flush()

        sales_listing = created_properties[0]
        session.add(Inquiry(applicant_id=applicant.id, property_id=sales_listing.id, inquiry_type="sales"))
        token = ViewingToken(
            token=generate_token(),
            property_id=sales_listing.id,
            applicant_id=applicant.id,
            issued_by_id=agent.id,
        )
        session.add(token)
        await session.flush()
        await session.commit()

        print()
        print("=" * 60)
        print("📊 Seed Summary")
        print("=" * 60)
        print(f"   Agent:       {DEMO_AGENT['email']} / {DEMO_AGENT['password']}")
        print(f"   Properties:  {len(created_properties)}")
        print(f"   Slots:       {slot_count}")
        print(f"   Booking URL: {booking_url(settings.frontend_url, sales_listing.property_code, token.token)}")
        print("=" * 60)

    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(seed())
