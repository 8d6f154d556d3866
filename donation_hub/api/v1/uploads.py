"""Public file upload for transfer proofs."""

from fastapi import APIRouter, Depends, File, UploadFile

from donation_hub.core.config import settings
from donation_hub.schemas.media import UploadResponse
from donation_hub.services import storage
from donation_hub.services.rate_limit import rate_limit

router = APIRouter()

UPLOAD_LIMIT = 10


@router.post(
    "/transfer-proof",
    response_model=UploadResponse,
    status_code=201,
    dependencies=[Depends(rate_limit("uploads", UPLOAD_LIMIT))],
)
async def upload_transfer_proof(file: UploadFile = File(...)) -> UploadResponse:
    """Store a JPEG/PNG/WEBP/PDF transfer proof and return its public URL."""
    data = await file.read(settings.MAX_UPLOAD_SIZE + 1)
    content_type = file.content_type or ""
    storage.validate_upload(len(data), content_type, storage.TRANSFER_PROOF_CONTENT_TYPES)
    url = await storage.upload(data, content_type, storage.TRANSFER_PROOF_PREFIX)
    return UploadResponse(url=url, content_type=content_type, size_bytes=len(data))
