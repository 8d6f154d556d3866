"""Admin donation management.

GET    /admin/donations               list, each item with derived ``distributed``
GET    /admin/donations/{id}
PATCH  /admin/donations/{id}          partial edit, net amount recomputed
DELETE /admin/donations/{id}          also removes the stored transfer proof
PATCH  /admin/donations/{id}/status   pending | approved | rejected, any direction
"""

import logging
import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from donation_hub.core.dependencies import get_db, require_admin
from donation_hub.models.profile import Profile
from donation_hub.repositories.donations import DonationRepository
from donation_hub.schemas.donation import (
    DonationListItem,
    DonationResponse,
    DonationStatusResponse,
    DonationStatusUpdate,
    DonationUpdate,
)
from donation_hub.services.accountability import load_distribution_state
from donation_hub.services.donations import (
    apply_patch,
    delete_donation,
    display_name,
    to_response,
)
from donation_hub.services.lifecycle import apply_status, normalize_status

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(require_admin)])

DEFAULT_LIMIT = 50


@router.get("", response_model=list[DonationListItem])
async def list_donations(
    status: str | None = Query(None),
    donor_email: str | None = Query(None),
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=200),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
) -> list[DonationListItem]:
    if status:
        status = normalize_status(status)
    donations = await DonationRepository(db).find(
        status=status, donor_email=donor_email, limit=limit, offset=offset
    )
    distributed = (await load_distribution_state(db)).distributed_ids
    return [
        DonationListItem(
            id=d.id,
            display_name=display_name(d),
            donor_email=d.donor_email,
            donation_type=d.donation_type,
            gross_amount=d.gross_amount,
            net_amount=d.net_amount,
            status=d.status,
            distributed=d.id in distributed,
            created_at=d.created_at,
        )
        for d in donations
    ]


@router.get("/{donation_id}", response_model=DonationResponse)
async def get_donation(
    donation_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
) -> DonationResponse:
    return to_response(await DonationRepository(db).require(donation_id))


@router.patch("/{donation_id}", response_model=DonationResponse)
async def update_donation(
    donation_id: uuid.UUID,
    body: DonationUpdate,
    admin: Profile = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> DonationResponse:
    repo = DonationRepository(db)
    donation = await repo.require(donation_id)
    changed = apply_patch(donation, body)
    await repo.save(donation)
    logger.info(
        "Donation %s edited by %s: %s", donation.id, admin.id, ", ".join(changed) or "no changes"
    )
    return to_response(donation)


@router.delete("/{donation_id}", status_code=204)
async def remove_donation(
    donation_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
) -> None:
    repo = DonationRepository(db)
    await delete_donation(repo, await repo.require(donation_id))


@router.patch("/{donation_id}/status", response_model=DonationStatusResponse)
async def change_donation_status(
    donation_id: uuid.UUID,
    body: DonationStatusUpdate,
    admin: Profile = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> DonationStatusResponse:
    repo = DonationRepository(db)
    donation = await repo.require(donation_id)
    previous = apply_status(donation, body.status)
    await repo.save(donation)
    logger.info(
        "Donation %s status %s -> %s by %s", donation.id, previous, donation.status, admin.id
    )
    return DonationStatusResponse(
        id=donation.id,
        status=donation.status,
        previous_status=previous,
        gross_amount=donation.gross_amount,
        net_amount=donation.net_amount,
        updated_at=donation.updated_at,
    )
