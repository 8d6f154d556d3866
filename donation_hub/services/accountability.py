"""Accountability record writes and the reconciled read used by statistics."""

import asyncio
import logging
import uuid
from dataclasses import dataclass
from datetime import UTC, datetime

from sqlalchemy import select
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from donation_hub.core.exceptions import FieldValidationError
from donation_hub.models.accountability import Accountability
from donation_hub.models.donation import Donation
from donation_hub.models.profile import Profile
from donation_hub.repositories.accountability import AccountabilityRepository
from donation_hub.repositories.donations import DonationRepository
from donation_hub.schemas.accountability import (
    AccountabilityCreate,
    AccountabilityResponse,
    AccountabilityUpdate,
    AccountabilityWriteResponse,
)
from donation_hub.services.reconciliation import ReconciliationReport, reconcile

logger = logging.getLogger(__name__)

READ_ATTEMPTS = 2
READ_RETRY_DELAY = 0.2


async def _check_references(
    donations: DonationRepository,
    records: AccountabilityRepository,
    donation_ids: set[uuid.UUID],
    record_id: uuid.UUID | None = None,
) -> list[str]:
    """Reject unknown ids; return warnings for unapproved or shared ones."""
    statuses = await donations.existing_ids(donation_ids)
    missing = sorted(str(did) for did in donation_ids - statuses.keys())
    if missing:
        raise FieldValidationError.single(
            "donation_ids", f"Unknown donation ids: {', '.join(missing)}"
        )

    warnings = [
        f"Donation {did} is {status}, not approved; it will not count as distributed"
        for did, status in sorted(statuses.items(), key=lambda kv: str(kv[0]))
        if status != "approved"
    ]
    shared = await records.referencing_counts(donation_ids, exclude_record=record_id)
    warnings.extend(
        f"Donation {did} is already reported in {count} other accountability record(s)"
        for did, count in sorted(shared.items(), key=lambda kv: str(kv[0]))
    )
    return warnings


def to_response(record: Accountability) -> AccountabilityResponse:
    return AccountabilityResponse(
        id=record.id,
        location=record.location,
        activity_date=record.activity_date,
        description=record.description,
        donation_ids=sorted(record.donation_ids, key=str),
        photo_urls=list(record.photo_urls or []),
        created_by=record.created_by,
        created_at=record.created_at,
        updated_at=record.updated_at,
    )


def _write_response(record: Accountability, warnings: list[str]) -> AccountabilityWriteResponse:
    return AccountabilityWriteResponse(**to_response(record).model_dump(), warnings=warnings)


async def create_record(
    db: AsyncSession, data: AccountabilityCreate, actor: Profile
) -> AccountabilityWriteResponse:
    donation_ids = set(data.donation_ids)
    repo = AccountabilityRepository(db)
    warnings = await _check_references(DonationRepository(db), repo, donation_ids)

    now = datetime.now(UTC)
    record = Accountability(
        location=data.location,
        activity_date=data.activity_date,
        description=data.description,
        photo_urls=list(data.photo_urls),
        created_by=actor.id,
        created_at=now,
        updated_at=now,
    )
    record.set_donation_ids(donation_ids)
    await repo.create(record)

    logger.info(
        "Accountability %s created by %s for %d donation(s)",
        record.id,
        actor.id,
        len(donation_ids),
    )
    for warning in warnings:
        logger.warning("Accountability %s: %s", record.id, warning)
    return _write_response(record, warnings)


async def update_record(
    db: AsyncSession, record_id: uuid.UUID, patch: AccountabilityUpdate
) -> AccountabilityWriteResponse:
    repo = AccountabilityRepository(db)
    record = await repo.require(record_id)
    present = patch.model_dump(exclude_unset=True)

    for field in ("location", "activity_date", "description"):
        if field in present and present[field] is None:
            raise FieldValidationError.single(field, "Field cannot be cleared")

    warnings: list[str] = []
    if present.get("donation_ids") is not None:
        donation_ids = set(present.pop("donation_ids"))
        warnings = await _check_references(DonationRepository(db), repo, donation_ids, record.id)
        record.set_donation_ids(donation_ids)
    elif "donation_ids" in present:
        raise FieldValidationError.single("donation_ids", "At least one donation is required")

    if "photo_urls" in present:
        record.photo_urls = list(present.pop("photo_urls") or [])
    for field, value in present.items():
        setattr(record, field, value)
    record.updated_at = datetime.now(UTC)
    await repo.save(record)

    logger.info("Accountability %s updated (%s)", record.id, ", ".join(sorted(present)) or "links")
    return _write_response(record, warnings)


async def delete_record(db: AsyncSession, record_id: uuid.UUID) -> None:
    """Hard delete. Its donations stop counting as distributed immediately."""
    repo = AccountabilityRepository(db)
    record = await repo.require(record_id)
    released = len(record.donation_ids)
    await repo.delete(record)
    logger.info("Accountability %s deleted, %d donation reference(s) released", record_id, released)


@dataclass
class DistributionState:
    donations: list[Donation]
    records: list[Accountability]
    report: ReconciliationReport

    @property
    def distributed_ids(self) -> set[uuid.UUID]:
        return self.report.distributed_ids


async def _read_all(db: AsyncSession) -> tuple[list[Donation], list[Accountability]]:
    donations = list((await db.execute(select(Donation))).scalars().all())
    records = list((await db.execute(select(Accountability))).scalars().all())
    return donations, records


async def load_distribution_state(db: AsyncSession) -> DistributionState:
    """Fetch current donations and records and reconcile them.

    Pure reads, so a transient database error is retried once.
    """
    for attempt in range(1, READ_ATTEMPTS + 1):
        try:
            donations, records = await _read_all(db)
            break
        except OperationalError as exc:
            if attempt == READ_ATTEMPTS:
                raise
            logger.warning("Statistics read failed (attempt %d), retrying", attempt, exc_info=exc)
            await db.rollback()
            await asyncio.sleep(READ_RETRY_DELAY)

    return DistributionState(
        donations=donations,
        records=records,
        report=reconcile(records, donations),
    )
