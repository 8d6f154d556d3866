"""Accountability (distribution report) endpoints.

GET    /accountability                         public list
POST   /admin/accountability                   create
GET    /admin/accountability                   list
POST   /admin/accountability/photos            upload activity photos
GET    /admin/accountability/reconciliation    inconsistency report
GET    /admin/accountability/{id}
PATCH  /admin/accountability/{id}
DELETE /admin/accountability/{id}
"""

import uuid
from datetime import date

from fastapi import APIRouter, Depends, File, Query, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from donation_hub.core.config import settings
from donation_hub.core.dependencies import get_db, require_admin
from donation_hub.core.exceptions import FieldValidationError
from donation_hub.models.profile import Profile
from donation_hub.repositories.accountability import AccountabilityRepository
from donation_hub.schemas.accountability import (
    MAX_PHOTOS,
    AccountabilityCreate,
    AccountabilityResponse,
    AccountabilityUpdate,
    AccountabilityWriteResponse,
    ReconciliationReportResponse,
)
from donation_hub.schemas.media import PhotoUploadResponse
from donation_hub.services import storage
from donation_hub.services.accountability import (
    create_record,
    delete_record,
    load_distribution_state,
    to_response,
    update_record,
)
from donation_hub.services.rate_limit import rate_limit

public_router = APIRouter()
admin_router = APIRouter(dependencies=[Depends(require_admin)])

UPLOAD_LIMIT = 10


async def _list(
    db: AsyncSession,
    location: str | None,
    date_from: date | None,
    date_to: date | None,
) -> list[AccountabilityResponse]:
    if date_from and date_to and date_from > date_to:
        raise FieldValidationError.single("date_to", "Must not be before date_from")
    records = await AccountabilityRepository(db).find(location, date_from, date_to)
    return [to_response(r) for r in records]


@public_router.get("", response_model=list[AccountabilityResponse])
async def list_public_accountability(
    location: str | None = Query(None, max_length=255),
    date_from: date | None = Query(None),
    date_to: date | None = Query(None),
    db: AsyncSession = Depends(get_db),
) -> list[AccountabilityResponse]:
    return await _list(db, location, date_from, date_to)


@admin_router.get("", response_model=list[AccountabilityResponse])
async def list_accountability(
    location: str | None = Query(None, max_length=255),
    date_from: date | None = Query(None),
    date_to: date | None = Query(None),
    db: AsyncSession = Depends(get_db),
) -> list[AccountabilityResponse]:
    return await _list(db, location, date_from, date_to)


@admin_router.post("", response_model=AccountabilityWriteResponse, status_code=201)
async def create_accountability(
    body: AccountabilityCreate,
    admin: Profile = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> AccountabilityWriteResponse:
    """Referenced donations must exist; unapproved or shared ones only warn."""
    return await create_record(db, body, admin)


@admin_router.post(
    "/photos",
    response_model=PhotoUploadResponse,
    status_code=201,
    dependencies=[Depends(rate_limit("uploads", UPLOAD_LIMIT))],
)
async def upload_accountability_photos(
    files: list[UploadFile] = File(...),
) -> PhotoUploadResponse:
    if len(files) > MAX_PHOTOS:
        raise FieldValidationError.single("files", f"At most {MAX_PHOTOS} photos")

    payloads = []
    for index, upload in enumerate(files):
        data = await upload.read(settings.MAX_UPLOAD_SIZE + 1)
        content_type = upload.content_type or ""
        storage.validate_upload(
            len(data), content_type, storage.IMAGE_CONTENT_TYPES, field=f"files.{index}"
        )
        payloads.append((data, content_type))

    urls = [
        await storage.upload(data, content_type, storage.ACCOUNTABILITY_PREFIX)
        for data, content_type in payloads
    ]
    return PhotoUploadResponse(urls=urls)


@admin_router.get("/reconciliation", response_model=ReconciliationReportResponse)
async def reconciliation_report(
    db: AsyncSession = Depends(get_db),
) -> ReconciliationReportResponse:
    report = (await load_distribution_state(db)).report
    return ReconciliationReportResponse(
        consistent=report.is_consistent,
        distributed_count=len(report.distributed_ids),
        missing_donation_ids=sorted(report.missing_ids, key=str),
        unapproved_donation_ids=sorted(report.unapproved_ids, key=str),
        multiply_referenced=report.multiply_referenced,
    )


@admin_router.get("/{record_id}", response_model=AccountabilityResponse)
async def get_accountability(
    record_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
) -> AccountabilityResponse:
    return to_response(await AccountabilityRepository(db).require(record_id))


@admin_router.patch("/{record_id}", response_model=AccountabilityWriteResponse)
async def update_accountability(
    record_id: uuid.UUID,
    body: AccountabilityUpdate,
    db: AsyncSession = Depends(get_db),
) -> AccountabilityWriteResponse:
    return await update_record(db, record_id, body)


@admin_router.delete("/{record_id}", status_code=204)
async def delete_accountability(
    record_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
) -> None:
    await delete_record(db, record_id)
