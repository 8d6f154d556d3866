"""Shared helpers for API tests."""

import uuid

from httpx import AsyncClient

from donation_hub.core.security import create_mock_access_token


def make_token(
    sub: str = "test-sub",
    email: str = "test@example.com",
    groups: list[str] | None = None,
) -> str:
    """Generate a mock JWT for testing."""
    return create_mock_access_token(sub=sub, email=email, groups=groups)


def auth_headers(
    sub: str = "test-sub",
    email: str = "test@example.com",
    groups: list[str] | None = None,
) -> dict:
    """Return Authorization headers with a mock JWT."""
    return {"Authorization": f"Bearer {make_token(sub=sub, email=email, groups=groups)}"}


def admin_headers(unique: str | None = None) -> dict:
    """Headers for a caller provisioned as admin on first request."""
    unique = unique or uuid.uuid4().hex[:8]
    return auth_headers(
        sub=f"admin-{unique}", email=f"admin-{unique}@example.com", groups=["admin"]
    )


def user_headers(unique: str | None = None) -> dict:
    unique = unique or uuid.uuid4().hex[:8]
    return auth_headers(sub=f"user-{unique}", email=f"user-{unique}@example.com")


def money_payload(**overrides) -> dict:
    payload = {
        "donor_name": "Budi",
        "donor_email": "budi@example.com",
        "donor_phone": "081234567890",
        "donation_type": "money",
        "gross_amount": "200000",
        "payment_method": "bank_transfer",
    }
    payload.update(overrides)
    return payload


def goods_payload(**overrides) -> dict:
    payload = {
        "donor_name": "Siti",
        "donor_email": "siti@example.com",
        "donation_type": "goods",
        "item_list": "10 shirts, 5 jackets",
        "quantity": 15,
        "pickup_address": "Jl. Merdeka 1, Bandung",
    }
    payload.update(overrides)
    return payload


async def submit_donation(client: AsyncClient, payload: dict) -> dict:
    r = await client.post("/api/v1/donations", json=payload)
    assert r.status_code == 201, r.text
    return r.json()


async def set_status(client: AsyncClient, headers: dict, donation_id: str, status: str) -> dict:
    r = await client.patch(
        f"/api/v1/admin/donations/{donation_id}/status",
        json={"status": status},
        headers=headers,
    )
    assert r.status_code == 200, r.text
    return r.json()


async def create_accountability(
    client: AsyncClient, headers: dict, donation_ids: list[str], **overrides
) -> dict:
    body = {
        "location": "Panti Asuhan Harapan",
        "activity_date": "2026-09-01",
        "description": "Distributed clothes and groceries",
        "donation_ids": donation_ids,
    }
    body.update(overrides)
    r = await client.post("/api/v1/admin/accountability", json=body, headers=headers)
    assert r.status_code == 201, r.text
    return r.json()
