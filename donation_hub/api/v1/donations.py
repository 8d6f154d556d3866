"""Public donation submission.

POST /donations              JSON body
POST /donations/with-proof   multipart: ``payload`` (JSON) + ``file``
"""

from fastapi import APIRouter, Depends, File, Form, UploadFile
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from donation_hub.core.config import settings
from donation_hub.core.dependencies import get_db
from donation_hub.core.exceptions import FieldValidationError, field_errors_from_pydantic
from donation_hub.repositories.donations import DonationRepository
from donation_hub.schemas.donation import DonationCreate, DonationSubmitResponse
from donation_hub.services.donations import create_donation, submit_with_proof
from donation_hub.services.rate_limit import rate_limit

router = APIRouter()

CREATE_LIMIT = 10


@router.post(
    "",
    response_model=DonationSubmitResponse,
    status_code=201,
    dependencies=[Depends(rate_limit("donations:create", CREATE_LIMIT))],
)
async def submit_donation(
    body: DonationCreate,
    db: AsyncSession = Depends(get_db),
) -> DonationSubmitResponse:
    donation = await create_donation(DonationRepository(db), body)
    return DonationSubmitResponse.model_validate(donation)


@router.post(
    "/with-proof",
    response_model=DonationSubmitResponse,
    status_code=201,
    dependencies=[Depends(rate_limit("donations:create", CREATE_LIMIT))],
)
async def submit_donation_with_proof(
    payload: str = Form(...),
    file: UploadFile = File(...),
    db: AsyncSession = Depends(get_db),
) -> DonationSubmitResponse:
    """Upload the transfer proof, then record the money donation."""
    try:
        data = DonationCreate.model_validate_json(payload)
    except ValidationError as exc:
        raise FieldValidationError(field_errors_from_pydantic(exc.errors())) from exc

    proof = await file.read(settings.MAX_UPLOAD_SIZE + 1)
    donation = await submit_with_proof(
        DonationRepository(db), data, proof, file.content_type or ""
    )
    return DonationSubmitResponse.model_validate(donation)
