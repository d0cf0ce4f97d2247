"""Tests for the public inquiry intake endpoints."""

import pytest
from httpx import AsyncClient

from app.models.property import Property

pytestmark = pytest.mark.asyncio(loop_scope="session")


def _sales_payload(property_code: str, **overrides) -> dict:
    payload = {
        "property_code": property_code,
        "full_name": "Petr Svoboda",
        "email": "petr.svoboda@example.com",
        "phone": "+420601234567",
        "gdpr_consent": True,
        "financing_method": "mortgage",
        "own_funds_pct": 30,
        "mortgage_pct": 70,
        "utm_source": "facebook",
    }
    payload.update(overrides)
    return payload


class TestSalesInquiry:
    async def test_submit(self, client: AsyncClient, test_property) -> None:
        response = await client.post("/api/v1/inquiries/sales", json=_sales_payload(test_property.property_code))

        assert response.status_code == 200
        data = response.json()
        assert data["ok"] is True
        assert data["property_id"] == str(test_property.id)
        assert data["created_new_applicant"] is True
        assert data["identity_changed"] is False

    async def test_resubmission_reuses_applicant(self, client: AsyncClient, test_property) -> None:
        first = await client.post("/api/v1/inquiries/sales", json=_sales_payload(test_property.property_code))
        second = await client.post(
            "/api/v1/inquiries/sales",
            json=_sales_payload(test_property.property_code, full_name="Petr Svoboda ml."),
        )

        assert second.status_code == 200
        assert second.json()["applicant_id"] == first.json()["applicant_id"]
        assert second.json()["inquiry_id"] == first.json()["inquiry_id"]
        assert second.json()["identity_changed"] is True

    async def test_missing_consent(self, client: AsyncClient, test_property) -> None:
        response = await client.post(
            "/api/v1/inquiries/sales",
            json=_sales_payload(test_property.property_code, gdpr_consent=False),
        )
        assert response.status_code == 400

    async def test_financing_over_100_percent(self, client: AsyncClient, test_property) -> None:
        response = await client.post(
            "/api/v1/inquiries/sales",
            json=_sales_payload(test_property.property_code, own_funds_pct=60, mortgage_pct=60),
        )
        assert response.status_code == 400

    async def test_invalid_email(self, client: AsyncClient, test_property) -> None:
        response = await client.post(
            "/api/v1/inquiries/sales",
            json=_sales_payload(test_property.property_code, email="not-an-email"),
        )
        assert response.status_code == 400

    async def test_unknown_property(self, client: AsyncClient) -> None:
        response = await client.post("/api/v1/inquiries/sales", json=_sales_payload("077-NOPE"))
        assert response.status_code == 404
        assert response.json()["detail"] == "Property not found"

    async def test_reserved_property(self, client: AsyncClient, db_session, test_property) -> None:
        test_property.status = "reserved"
        await db_session.flush()

        response = await client.post("/api/v1/inquiries/sales", json=_sales_payload(test_property.property_code))
        assert response.status_code == 409


class TestRentalInquiry:
    async def test_submit(self, client: AsyncClient, db_session, test_agent) -> None:
        prop = Property(owner_id=test_agent.id, property_code="077-NP08812", business_type="rent")
        db_session.add(prop)
        await db_session.flush()

        response = await client.post(
            "/api/v1/inquiries/rental",
            json={
                "property_code": prop.property_code,
                "full_name": "Eva Dvořáková",
                "email": "eva@example.com",
                "phone": "+420777000111",
                "gdpr_consent": True,
                "move_in_date": "2030-06-01",
                "lease_length": "12 months",
                "occupants": 2,
                "has_pets": True,
            },
        )

        assert response.status_code == 200
        assert response.json()["created_new_applicant"] is True

    async def test_rental_form_for_sales_listing(self, client: AsyncClient, test_property) -> None:
        response = await client.post(
            "/api/v1/inquiries/rental",
            json={
                "property_code": test_property.property_code,
                "full_name": "Eva Dvořáková",
                "email": "eva@example.com",
                "phone": "+420777000111",
                "gdpr_consent": True,
            },
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "Property is not a rental listing"
