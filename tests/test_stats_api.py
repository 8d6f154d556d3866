"""Admin and public statistics over the HTTP surface."""

from decimal import Decimal

from httpx import AsyncClient

from tests.helpers import (
    admin_headers,
    create_accountability,
    goods_payload,
    money_payload,
    set_status,
    submit_donation,
    user_headers,
)


async def _public(client: AsyncClient) -> dict:
    response = await client.get("/api/v1/public/stats")
    assert response.status_code == 200
    return response.json()


async def test_donation_becomes_public_only_once_distributed(client: AsyncClient):
    admin = admin_headers()
    donation = await submit_donation(client, money_payload(gross_amount="200000"))
    assert Decimal(donation["net_amount"]) == Decimal("190000")
    assert donation["status"] == "pending"

    await set_status(client, admin, donation["id"], "approved")
    assert Decimal((await _public(client))["total_amount"]) == 0

    record = await create_accountability(client, admin, [donation["id"]], location="Shelter X")

    listing = await client.get("/api/v1/admin/donations", headers=admin)
    assert listing.json()[0]["distributed"] is True
    public = await _public(client)
    assert Decimal(public["total_amount"]) == Decimal("190000")
    assert public["total_donors"] == 1

    await client.delete(f"/api/v1/admin/accountability/{record['id']}", headers=admin)
    assert Decimal((await _public(client))["total_amount"]) == 0


async def test_rejecting_a_distributed_donation_removes_it(client: AsyncClient):
    admin = admin_headers()
    donation = await submit_donation(client, money_payload())
    await set_status(client, admin, donation["id"], "approved")
    await create_accountability(client, admin, [donation["id"]])

    await set_status(client, admin, donation["id"], "rejected")
    public = await _public(client)
    assert Decimal(public["total_amount"]) == 0
    assert public["total_donors"] == 0


async def test_admin_buckets(client: AsyncClient):
    admin = admin_headers()
    distributed = await submit_donation(client, money_payload(gross_amount="100000"))
    approved = await submit_donation(
        client, money_payload(gross_amount="200000", donor_email="ani@example.com")
    )
    await submit_donation(client, money_payload(gross_amount="300000"))
    rejected = await submit_donation(client, money_payload(gross_amount="400000"))
    goods = await submit_donation(client, goods_payload())

    for donation in (distributed, approved, goods):
        await set_status(client, admin, donation["id"], "approved")
    await set_status(client, admin, rejected["id"], "rejected")
    await create_accountability(client, admin, [distributed["id"], goods["id"]])

    response = await client.get("/api/v1/admin/stats", headers=admin)
    assert response.status_code == 200
    stats = response.json()

    assert stats["total_donations"] == 5
    assert stats["total_donors"] == 3
    assert stats["money_donations_count"] == 4
    assert stats["goods_donations_count"] == 1
    assert Decimal(stats["total_net_amount"]) == Decimal("950000")

    money = stats["money"]
    assert money["pending"]["count"] == 1
    assert Decimal(money["pending"]["amount"]) == Decimal("285000")
    assert Decimal(money["approved_undistributed"]["amount"]) == Decimal("190000")
    assert Decimal(money["distributed"]["amount"]) == Decimal("95000")
    assert Decimal(money["rejected"]["amount"]) == Decimal("380000")
    assert money["verified"]["count"] == 2
    assert Decimal(money["verified"]["amount"]) == Decimal("285000")

    assert stats["goods"]["distributed"] == 1
    assert stats["goods"]["verified"] == 1

    public = await _public(client)
    assert Decimal(public["total_amount"]) == Decimal("95000")
    assert public["goods_donations_count"] == 1
    # budi and siti
    assert public["total_donors"] == 2


async def test_public_stats_are_cacheable(client: AsyncClient):
    response = await client.get("/api/v1/public/stats")
    assert response.headers["cache-control"] == (
        "public, s-maxage=300, stale-while-revalidate=3600"
    )
    assert Decimal(response.json()["total_amount"]) == 0


async def test_admin_stats_require_admin(client: AsyncClient):
    assert (await client.get("/api/v1/admin/stats")).status_code == 401
    response = await client.get("/api/v1/admin/stats", headers=user_headers())
    assert response.status_code == 403
