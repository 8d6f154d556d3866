"""Donation persistence over an async SQLAlchemy session."""

import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from donation_hub.core.exceptions import NotFoundError
from donation_hub.models.donation import Donation


class DonationRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def find(
        self,
        status: str | None = None,
        donor_email: str | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[Donation]:
        """Newest first. ``donor_email`` is matched exactly, as stored."""
        stmt = select(Donation).order_by(Donation.created_at.desc(), Donation.id)
        if status:
            stmt = stmt.where(Donation.status == status)
        if donor_email:
            stmt = stmt.where(Donation.donor_email == donor_email)
        if offset:
            stmt = stmt.offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def get(self, donation_id: uuid.UUID) -> Donation | None:
        result = await self.db.execute(select(Donation).where(Donation.id == donation_id))
        return result.scalar_one_or_none()

    async def require(self, donation_id: uuid.UUID) -> Donation:
        donation = await self.get(donation_id)
        if donation is None:
            raise NotFoundError("Donation")
        return donation

    async def existing_ids(self, donation_ids: set[uuid.UUID]) -> dict[uuid.UUID, str]:
        """Map each id that exists to its status."""
        if not donation_ids:
            return {}
        result = await self.db.execute(
            select(Donation.id, Donation.status).where(Donation.id.in_(donation_ids))
        )
        return {row.id: row.status for row in result.all()}

    async def create(self, donation: Donation) -> Donation:
        self.db.add(donation)
        await self.db.flush()
        return donation

    async def save(self, donation: Donation) -> Donation:
        await self.db.flush()
        return donation

    async def delete(self, donation: Donation) -> None:
        await self.db.delete(donation)
        await self.db.flush()
