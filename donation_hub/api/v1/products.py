"""Admin CRUD endpoints for marketplace products."""

import logging
import uuid
from typing import Literal

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from donation_hub.core.dependencies import get_db, require_admin
from donation_hub.core.exceptions import FieldValidationError, UpstreamError
from donation_hub.models.product import Product
from donation_hub.models.profile import Profile
from donation_hub.repositories.products import ProductRepository
from donation_hub.repositories.profiles import ProfileRepository
from donation_hub.schemas.common import PageResponse
from donation_hub.schemas.product import (
    Category,
    ProductCreate,
    ProductResponse,
    ProductStatus,
    ProductUpdate,
)
from donation_hub.services import storage
from donation_hub.services.rate_limit import rate_limit

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(require_admin)])

DEFAULT_PAGE_SIZE = 20
LIST_LIMIT = 60
CREATE_LIMIT = 15


def _product_response(product: Product) -> ProductResponse:
    return ProductResponse(
        id=product.id,
        user_id=product.user_id,
        title=product.title,
        description=product.description,
        category=product.category,
        condition=product.condition,
        price=product.price,
        stock=product.stock,
        status=product.status,
        photo_urls=list(product.photo_urls or []),
        created_at=product.created_at,
        updated_at=product.updated_at,
    )


async def _check_owner(db: AsyncSession, user_id: uuid.UUID) -> None:
    if await ProfileRepository(db).get(user_id) is None:
        raise FieldValidationError.single("user_id", "Unknown user")


@router.get(
    "",
    response_model=PageResponse[ProductResponse],
    dependencies=[Depends(rate_limit("products:list", LIST_LIMIT))],
)
async def list_products(
    q: str | None = Query(None, min_length=1, max_length=120),
    status: ProductStatus | None = Query(None),
    category: Category | None = Query(None),
    user_id: uuid.UUID | None = Query(None),
    sort_by: Literal["created_at", "price", "title"] = Query("created_at"),
    order: Literal["asc", "desc"] = Query("desc"),
    page: int = Query(1, ge=1),
    page_size: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
) -> PageResponse[ProductResponse]:
    products, total = await ProductRepository(db).find(
        q=q,
        status=status,
        category=category,
        user_id=user_id,
        sort_by=sort_by,
        order=order,
        limit=page_size,
        offset=(page - 1) * page_size,
    )
    return PageResponse(
        items=[_product_response(p) for p in products],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.post(
    "",
    response_model=ProductResponse,
    status_code=201,
    dependencies=[Depends(rate_limit("products:create", CREATE_LIMIT))],
)
async def create_product(
    body: ProductCreate,
    admin: Profile = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> ProductResponse:
    """Owner defaults to the calling admin."""
    owner = body.user_id or admin.id
    if body.user_id is not None:
        await _check_owner(db, owner)

    product = Product(
        user_id=owner,
        title=body.title,
        description=body.description,
        category=body.category,
        condition=body.condition,
        price=body.price,
        stock=body.stock,
        status=body.status,
        photo_urls=list(body.photo_urls),
    )
    await ProductRepository(db).create(product)
    logger.info("Product %s created by %s", product.id, admin.id)
    return _product_response(product)


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(
    product_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
) -> ProductResponse:
    return _product_response(await ProductRepository(db).require(product_id))


@router.patch("/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: uuid.UUID,
    body: ProductUpdate,
    db: AsyncSession = Depends(get_db),
) -> ProductResponse:
    repo = ProductRepository(db)
    product = await repo.require(product_id)

    update_data = body.model_dump(exclude_unset=True)
    for field in ("title", "category", "condition", "price", "stock", "status", "user_id"):
        if field in update_data and update_data[field] is None:
            raise FieldValidationError.single(field, "Field cannot be cleared")
    if "user_id" in update_data:
        await _check_owner(db, update_data["user_id"])
    if "photo_urls" in update_data:
        update_data["photo_urls"] = list(update_data["photo_urls"] or [])

    for field, value in update_data.items():
        setattr(product, field, value)

    await repo.save(product)
    return _product_response(product)


@router.delete("/{product_id}", status_code=204)
async def delete_product(
    product_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
) -> None:
    """Delete the product, then best-effort removal of its photos."""
    repo = ProductRepository(db)
    product = await repo.require(product_id)
    photos = list(product.photo_urls or [])
    await repo.delete(product)

    for url in photos:
        try:
            await storage.delete(url)
        except UpstreamError:
            logger.warning("Photo %s of deleted product %s left in storage", url, product_id)
