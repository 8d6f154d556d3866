"""Public transfer-proof upload."""

from httpx import AsyncClient

from donation_hub.core.config import settings

URL = "/api/v1/uploads/transfer-proof"


async def test_upload_png(client: AsyncClient, fake_s3):
    response = await client.post(URL, files={"file": ("proof.png", b"\x89PNG" * 10, "image/png")})
    assert response.status_code == 201
    data = response.json()
    assert data["content_type"] == "image/png"
    assert data["size_bytes"] == 40
    assert data["url"].startswith("http://minio.test:9000/test-bucket/transfer-proofs/")
    assert data["url"].endswith(".png")

    [stored] = fake_s3.objects.values()
    assert stored["content_type"] == "image/png"


async def test_upload_pdf(client: AsyncClient):
    response = await client.post(
        URL, files={"file": ("proof.pdf", b"%PDF-1.4 ...", "application/pdf")}
    )
    assert response.status_code == 201
    assert response.json()["url"].endswith(".pdf")


async def test_rejects_unsupported_type(client: AsyncClient, fake_s3):
    response = await client.post(URL, files={"file": ("notes.txt", b"hello", "text/plain")})
    assert response.status_code == 422
    assert "Unsupported file type" in response.json()["errors"]["file"][0]
    assert fake_s3.objects == {}


async def test_rejects_empty_file(client: AsyncClient):
    response = await client.post(URL, files={"file": ("empty.png", b"", "image/png")})
    assert response.status_code == 422
    assert response.json()["errors"]["file"] == ["File is empty"]


async def test_rejects_oversized_file(client: AsyncClient, fake_s3):
    big = b"0" * (settings.MAX_UPLOAD_SIZE + 1)
    response = await client.post(URL, files={"file": ("big.jpg", big, "image/jpeg")})
    assert response.status_code == 422
    assert response.json()["errors"]["file"][0].startswith("File too large")
    assert fake_s3.objects == {}


async def test_storage_failure_is_502(client: AsyncClient, fake_s3):
    fake_s3.fail_put = True
    response = await client.post(URL, files={"file": ("proof.png", b"\x89PNG", "image/png")})
    assert response.status_code == 502
    assert response.json()["step"] == "upload"
