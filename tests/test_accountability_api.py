"""Accountability record endpoints."""

import uuid

from httpx import AsyncClient

from tests.helpers import (
    admin_headers,
    create_accountability,
    goods_payload,
    money_payload,
    set_status,
    submit_donation,
)

PNG = b"\x89PNG\r\n\x1a\n" + b"0" * 64


async def _approved(client: AsyncClient, admin: dict, **overrides) -> dict:
    donation = await submit_donation(client, money_payload(**overrides))
    await set_status(client, admin, donation["id"], "approved")
    return donation


async def test_create_record(client: AsyncClient):
    admin = admin_headers()
    donation = await _approved(client, admin)

    record = await create_accountability(
        client, admin, [donation["id"], donation["id"]], photo_urls=["http://x/1.jpg"]
    )
    assert record["donation_ids"] == [donation["id"]]
    assert record["photo_urls"] == ["http://x/1.jpg"]
    assert record["warnings"] == []

    me = await client.get("/api/v1/me", headers=admin)
    assert record["created_by"] == me.json()["id"]


async def test_unknown_donation_ids_are_rejected(client: AsyncClient):
    admin = admin_headers()
    missing = str(uuid.uuid4())
    response = await client.post(
        "/api/v1/admin/accountability",
        json={
            "location": "Shelter X",
            "activity_date": "2026-10-01",
            "description": "Food parcels",
            "donation_ids": [missing],
        },
        headers=admin,
    )
    assert response.status_code == 422
    assert missing in response.json()["errors"]["donation_ids"][0]


async def test_required_fields(client: AsyncClient):
    response = await client.post(
        "/api/v1/admin/accountability",
        json={"location": "", "donation_ids": []},
        headers=admin_headers(),
    )
    assert response.status_code == 422
    assert {"location", "activity_date", "description", "donation_ids"} <= set(
        response.json()["errors"]
    )


async def test_unapproved_and_shared_references_warn(client: AsyncClient):
    admin = admin_headers()
    pending = await submit_donation(client, goods_payload())
    approved = await _approved(client, admin)
    await create_accountability(client, admin, [approved["id"]])

    record = await create_accountability(client, admin, [pending["id"], approved["id"]])
    warnings = record["warnings"]
    assert len(warnings) == 2
    assert any(pending["id"] in w and "pending" in w for w in warnings)
    assert any(approved["id"] in w and "already reported" in w for w in warnings)


async def test_update_replaces_references(client: AsyncClient):
    admin = admin_headers()
    first = await _approved(client, admin)
    second = await _approved(client, admin, donor_email="ani@example.com")
    record = await create_accountability(client, admin, [first["id"]])

    response = await client.patch(
        f"/api/v1/admin/accountability/{record['id']}",
        json={"donation_ids": [second["id"]], "location": "Shelter Y"},
        headers=admin,
    )
    assert response.status_code == 200
    assert response.json()["donation_ids"] == [second["id"]]
    assert response.json()["location"] == "Shelter Y"

    listing = await client.get("/api/v1/admin/donations", headers=admin)
    flags = {d["id"]: d["distributed"] for d in listing.json()}
    assert flags == {first["id"]: False, second["id"]: True}


async def test_update_cannot_clear_required_fields(client: AsyncClient):
    admin = admin_headers()
    donation = await _approved(client, admin)
    record = await create_accountability(client, admin, [donation["id"]])

    response = await client.patch(
        f"/api/v1/admin/accountability/{record['id']}",
        json={"location": None},
        headers=admin,
    )
    assert response.status_code == 422
    assert "location" in response.json()["errors"]


async def test_delete_record(client: AsyncClient):
    admin = admin_headers()
    donation = await _approved(client, admin)
    record = await create_accountability(client, admin, [donation["id"]])

    response = await client.delete(f"/api/v1/admin/accountability/{record['id']}", headers=admin)
    assert response.status_code == 204

    gone = await client.get(f"/api/v1/admin/accountability/{record['id']}", headers=admin)
    assert gone.status_code == 404
    assert gone.json()["detail"] == "Accountability record not found"

    again = await client.delete(f"/api/v1/admin/accountability/{record['id']}", headers=admin)
    assert again.status_code == 404


async def test_public_list_filters(client: AsyncClient):
    admin = admin_headers()
    donation = await _approved(client, admin)
    await create_accountability(
        client, admin, [donation["id"]], location="Shelter X 100%", activity_date="2026-08-01"
    )
    await create_accountability(
        client, admin, [donation["id"]], location="Panti Harapan", activity_date="2026-09-15"
    )

    everything = await client.get("/api/v1/accountability")
    assert everything.status_code == 200
    assert [r["location"] for r in everything.json()] == ["Panti Harapan", "Shelter X 100%"]

    by_location = await client.get("/api/v1/accountability", params={"location": "shelter x"})
    assert [r["location"] for r in by_location.json()] == ["Shelter X 100%"]

    wildcard = await client.get("/api/v1/accountability", params={"location": "%"})
    assert [r["location"] for r in wildcard.json()] == ["Shelter X 100%"]

    by_date = await client.get(
        "/api/v1/accountability", params={"date_from": "2026-09-01", "date_to": "2026-09-30"}
    )
    assert [r["location"] for r in by_date.json()] == ["Panti Harapan"]

    inverted = await client.get(
        "/api/v1/accountability", params={"date_from": "2026-10-01", "date_to": "2026-09-01"}
    )
    assert inverted.status_code == 422


async def test_reconciliation_report(client: AsyncClient):
    admin = admin_headers()
    approved = await _approved(client, admin)
    pending = await submit_donation(client, money_payload(donor_email="p@example.com"))
    await create_accountability(client, admin, [approved["id"], pending["id"]])
    await create_accountability(client, admin, [approved["id"]])

    response = await client.get("/api/v1/admin/accountability/reconciliation", headers=admin)
    assert response.status_code == 200
    report = response.json()
    assert report["consistent"] is False
    assert report["distributed_count"] == 1
    assert report["unapproved_donation_ids"] == [pending["id"]]
    assert report["missing_donation_ids"] == []
    assert report["multiply_referenced"] == {approved["id"]: 2}


async def test_photo_upload(client: AsyncClient, fake_s3):
    admin = admin_headers()
    response = await client.post(
        "/api/v1/admin/accountability/photos",
        files=[
            ("files", ("a.png", PNG, "image/png")),
            ("files", ("b.jpg", b"\xff\xd8\xff" + b"0" * 32, "image/jpeg")),
        ],
        headers=admin,
    )
    assert response.status_code == 201
    urls = response.json()["urls"]
    assert len(urls) == 2
    assert all("/test-bucket/accountability/" in url for url in urls)
    assert len(fake_s3.objects) == 2


async def test_photo_upload_rejects_pdf(client: AsyncClient, fake_s3):
    response = await client.post(
        "/api/v1/admin/accountability/photos",
        files=[
            ("files", ("a.png", PNG, "image/png")),
            ("files", ("doc.pdf", b"%PDF-1.4", "application/pdf")),
        ],
        headers=admin_headers(),
    )
    assert response.status_code == 422
    assert "files.1" in response.json()["errors"]
    assert fake_s3.objects == {}


async def test_accountability_writes_require_admin(client: AsyncClient):
    response = await client.post("/api/v1/admin/accountability", json={})
    assert response.status_code == 401


async def test_at_most_ten_photo_urls(client: AsyncClient):
    admin = admin_headers()
    donation = await _approved(client, admin)
    eleven = [f"http://img/{i}.jpg" for i in range(11)]

    response = await client.post(
        "/api/v1/admin/accountability",
        json={
            "location": "Shelter X",
            "activity_date": "2026-10-01",
            "description": "Food parcels",
            "donation_ids": [donation["id"]],
            "photo_urls": eleven,
        },
        headers=admin,
    )
    assert response.status_code == 422
    assert "photo_urls" in response.json()["errors"]

    record = await create_accountability(client, admin, [donation["id"]], photo_urls=eleven[:10])
    assert len(record["photo_urls"]) == 10

    patched = await client.patch(
        f"/api/v1/admin/accountability/{record['id']}", json={"photo_urls": eleven}, headers=admin
    )
    assert patched.status_code == 422
    assert "photo_urls" in patched.json()["errors"]


async def test_photo_upload_accepts_at_most_ten_files(client: AsyncClient, fake_s3):
    response = await client.post(
        "/api/v1/admin/accountability/photos",
        files=[("files", (f"{i}.png", PNG, "image/png")) for i in range(11)],
        headers=admin_headers(),
    )
    assert response.status_code == 422
    assert "files" in response.json()["errors"]
    assert fake_s3.objects == {}


async def test_empty_update_is_rejected(client: AsyncClient):
    admin = admin_headers()
    donation = await _approved(client, admin)
    record = await create_accountability(client, admin, [donation["id"]])

    response = await client.patch(
        f"/api/v1/admin/accountability/{record['id']}", json={}, headers=admin
    )
    assert response.status_code == 422
    assert response.json()["errors"]["non_field_errors"]
