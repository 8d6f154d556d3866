"""Profile (user identity + role) persistence."""

import uuid

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from donation_hub.core.exceptions import NotFoundError
from donation_hub.models.profile import Profile
from donation_hub.repositories.search import contains

SORT_COLUMNS = {
    "created_at": Profile.created_at,
    "name": Profile.full_name,
    "email": Profile.email,
}


class ProfileRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def find(
        self,
        q: str | None = None,
        role: str | None = None,
        sort_by: str = "created_at",
        order: str = "desc",
        limit: int = 10,
        offset: int = 0,
    ) -> tuple[list[Profile], int]:
        """Return one page of profiles and the total match count."""
        stmt = select(Profile)
        if q:
            stmt = stmt.where(or_(contains(Profile.full_name, q), contains(Profile.email, q)))
        if role:
            stmt = stmt.where(Profile.role == role)

        total = (
            await self.db.execute(select(func.count()).select_from(stmt.subquery()))
        ).scalar_one()

        column = SORT_COLUMNS.get(sort_by, Profile.created_at)
        stmt = stmt.order_by(column.asc() if order == "asc" else column.desc(), Profile.id)
        result = await self.db.execute(stmt.offset(offset).limit(limit))
        return list(result.scalars().all()), total

    async def get(self, profile_id: uuid.UUID) -> Profile | None:
        return await self.db.get(Profile, profile_id)

    async def require(self, profile_id: uuid.UUID) -> Profile:
        profile = await self.get(profile_id)
        if profile is None:
            raise NotFoundError("User")
        return profile

    async def by_subject(self, subject: str) -> Profile | None:
        result = await self.db.execute(select(Profile).where(Profile.auth_subject == subject))
        return result.scalar_one_or_none()

    async def by_email(self, email: str) -> Profile | None:
        result = await self.db.execute(select(Profile).where(Profile.email == email))
        return result.scalar_one_or_none()

    async def create(self, profile: Profile) -> Profile:
        self.db.add(profile)
        await self.db.flush()
        return profile

    async def save(self, profile: Profile) -> Profile:
        await self.db.flush()
        return profile

    async def delete(self, profile: Profile) -> None:
        await self.db.delete(profile)
        await self.db.flush()

    async def names_for(self, profile_ids: set[uuid.UUID]) -> dict[uuid.UUID, str | None]:
        if not profile_ids:
            return {}
        result = await self.db.execute(
            select(Profile.id, Profile.full_name).where(Profile.id.in_(profile_ids))
        )
        return {row.id: row.full_name for row in result.all()}
