"""Marketplace product persistence."""

import uuid

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from donation_hub.core.exceptions import NotFoundError
from donation_hub.models.product import Product
from donation_hub.repositories.search import contains

SORT_COLUMNS = {
    "created_at": Product.created_at,
    "price": Product.price,
    "title": Product.title,
}


class ProductRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def find(
        self,
        q: str | None = None,
        status: str | None = None,
        category: str | None = None,
        condition: str | None = None,
        user_id: uuid.UUID | None = None,
        sort_by: str = "created_at",
        order: str = "desc",
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[list[Product], int]:
        stmt = select(Product)
        if q:
            stmt = stmt.where(contains(Product.title, q))
        if status:
            stmt = stmt.where(Product.status == status)
        if category:
            stmt = stmt.where(Product.category == category)
        if condition:
            stmt = stmt.where(Product.condition == condition)
        if user_id is not None:
            stmt = stmt.where(Product.user_id == user_id)

        total = (
            await self.db.execute(select(func.count()).select_from(stmt.subquery()))
        ).scalar_one()

        column = SORT_COLUMNS.get(sort_by, Product.created_at)
        stmt = stmt.order_by(column.asc() if order == "asc" else column.desc(), Product.id)
        result = await self.db.execute(stmt.offset(offset).limit(limit))
        return list(result.scalars().all()), total

    async def require(self, product_id: uuid.UUID) -> Product:
        product = await self.db.get(Product, product_id)
        if product is None:
            raise NotFoundError("Product")
        return product

    async def create(self, product: Product) -> Product:
        self.db.add(product)
        await self.db.flush()
        return product

    async def save(self, product: Product) -> Product:
        await self.db.flush()
        return product

    async def delete(self, product: Product) -> None:
        await self.db.delete(product)
        await self.db.flush()
