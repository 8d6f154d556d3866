"""Profile administration."""

import uuid

from httpx import AsyncClient

from tests.helpers import admin_headers, user_headers

URL = "/api/v1/admin/users"


async def _create(client: AsyncClient, admin: dict, **overrides) -> dict:
    body = {"email": f"{uuid.uuid4().hex[:8]}@example.com", "full_name": "Rina Kartika"}
    body.update(overrides)
    response = await client.post(URL, json=body, headers=admin)
    assert response.status_code == 201, response.text
    return response.json()


async def test_create_user(client: AsyncClient):
    admin = admin_headers()
    user = await _create(client, admin, email="rina@example.com", full_name="  Rina  ")
    assert user["email"] == "rina@example.com"
    assert user["full_name"] == "Rina"
    assert user["role"] == "user"

    fetched = await client.get(f"{URL}/{user['id']}", headers=admin)
    assert fetched.json()["email"] == "rina@example.com"


async def test_duplicate_email_is_conflict(client: AsyncClient):
    admin = admin_headers()
    await _create(client, admin, email="dup@example.com")
    response = await client.post(
        URL, json={"email": "dup@example.com", "full_name": "Other"}, headers=admin
    )
    assert response.status_code == 409
    assert response.headers["content-type"] == "application/problem+json"


async def test_invalid_email(client: AsyncClient):
    response = await client.post(
        URL, json={"email": "nope", "full_name": "Rina"}, headers=admin_headers()
    )
    assert response.status_code == 422
    assert "email" in response.json()["errors"]


async def test_list_search_and_paging(client: AsyncClient):
    admin = admin_headers()
    await _create(client, admin, full_name="Andi Seller", role="seller")
    await _create(client, admin, full_name="Bima Seller", role="seller")
    await _create(client, admin, full_name="Citra")

    sellers = await client.get(
        URL, params={"role": "seller", "sort_by": "name", "order": "asc"}, headers=admin
    )
    data = sellers.json()
    assert data["total"] == 2
    assert [u["full_name"] for u in data["items"]] == ["Andi Seller", "Bima Seller"]

    page = await client.get(URL, params={"page_size": 2, "page": 2}, headers=admin)
    # three created plus the calling admin
    assert page.json()["total"] == 4
    assert len(page.json()["items"]) == 2

    search = await client.get(URL, params={"q": "citr"}, headers=admin)
    assert [u["full_name"] for u in search.json()["items"]] == ["Citra"]


async def test_change_role(client: AsyncClient):
    admin = admin_headers()
    user = await _create(client, admin)

    response = await client.patch(f"{URL}/{user['id']}", json={"role": "seller"}, headers=admin)
    assert response.status_code == 200
    assert response.json()["role"] == "seller"

    empty = await client.patch(f"{URL}/{user['id']}", json={}, headers=admin)
    assert empty.status_code == 422


async def test_admin_cannot_demote_or_delete_self(client: AsyncClient):
    admin = admin_headers()
    me = (await client.get("/api/v1/me", headers=admin)).json()

    demote = await client.patch(f"{URL}/{me['id']}", json={"role": "user"}, headers=admin)
    assert demote.status_code == 422
    assert "role" in demote.json()["errors"]

    delete = await client.delete(f"{URL}/{me['id']}", headers=admin)
    assert delete.status_code == 422
    assert "id" in delete.json()["errors"]


async def test_delete_user(client: AsyncClient):
    admin = admin_headers()
    user = await _create(client, admin)

    response = await client.delete(f"{URL}/{user['id']}", headers=admin)
    assert response.status_code == 204
    gone = await client.get(f"{URL}/{user['id']}", headers=admin)
    assert gone.status_code == 404
    assert gone.json()["detail"] == "User not found"


async def test_users_admin_only(client: AsyncClient):
    response = await client.get(URL, headers=user_headers())
    assert response.status_code == 403
