"""Accountability record persistence."""

import uuid
from datetime import date

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from donation_hub.core.exceptions import NotFoundError
from donation_hub.models.accountability import Accountability, AccountabilityDonation
from donation_hub.repositories.search import contains


class AccountabilityRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def find(
        self,
        location: str | None = None,
        date_from: date | None = None,
        date_to: date | None = None,
    ) -> list[Accountability]:
        """Most recent activity first. ``location`` is a case-insensitive substring."""
        stmt = select(Accountability).order_by(
            Accountability.activity_date.desc(), Accountability.created_at.desc()
        )
        if location:
            stmt = stmt.where(contains(Accountability.location, location))
        if date_from is not None:
            stmt = stmt.where(Accountability.activity_date >= date_from)
        if date_to is not None:
            stmt = stmt.where(Accountability.activity_date <= date_to)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def get(self, record_id: uuid.UUID) -> Accountability | None:
        result = await self.db.execute(
            select(Accountability).where(Accountability.id == record_id)
        )
        return result.scalar_one_or_none()

    async def require(self, record_id: uuid.UUID) -> Accountability:
        record = await self.get(record_id)
        if record is None:
            raise NotFoundError("Accountability record")
        return record

    async def referencing_counts(
        self,
        donation_ids: set[uuid.UUID],
        exclude_record: uuid.UUID | None = None,
    ) -> dict[uuid.UUID, int]:
        """How many other records already reference each of ``donation_ids``."""
        if not donation_ids:
            return {}
        stmt = select(AccountabilityDonation).where(
            AccountabilityDonation.donation_id.in_(donation_ids)
        )
        if exclude_record is not None:
            stmt = stmt.where(AccountabilityDonation.accountability_id != exclude_record)
        result = await self.db.execute(stmt)
        counts: dict[uuid.UUID, int] = {}
        for link in result.scalars().all():
            counts[link.donation_id] = counts.get(link.donation_id, 0) + 1
        return counts

    async def create(self, record: Accountability) -> Accountability:
        self.db.add(record)
        await self.db.flush()
        return record

    async def save(self, record: Accountability) -> Accountability:
        await self.db.flush()
        return record

    async def delete(self, record: Accountability) -> None:
        await self.db.delete(record)
        await self.db.flush()
