"""Unauthenticated read endpoints for the public site.

GET /public/stats     totals over approved AND distributed donations
GET /public/products  active marketplace products
"""

from typing import Literal

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from donation_hub.core.dependencies import get_db
from donation_hub.repositories.products import ProductRepository
from donation_hub.repositories.profiles import ProfileRepository
from donation_hub.schemas.common import PageResponse
from donation_hub.schemas.product import Category, Condition, PublicProductResponse
from donation_hub.schemas.stats import PublicStatsResponse
from donation_hub.services.accountability import load_distribution_state
from donation_hub.services.rate_limit import rate_limit
from donation_hub.services.statistics import public_rollup

router = APIRouter()

PUBLIC_CACHE_CONTROL = "public, s-maxage=300, stale-while-revalidate=3600"
PRODUCT_LIST_LIMIT = 60


@router.get("/stats", response_model=PublicStatsResponse)
async def public_stats(
    response: Response,
    db: AsyncSession = Depends(get_db),
) -> PublicStatsResponse:
    state = await load_distribution_state(db)
    rollup = public_rollup(state.donations, state.distributed_ids)
    response.headers["Cache-Control"] = PUBLIC_CACHE_CONTROL
    return PublicStatsResponse(
        total_amount=rollup.total_amount,
        total_donors=rollup.total_donors,
        goods_donations_count=rollup.goods_donations_count,
    )


@router.get(
    "/products",
    response_model=PageResponse[PublicProductResponse],
    dependencies=[Depends(rate_limit("products:list", PRODUCT_LIST_LIMIT))],
)
async def public_products(
    response: Response,
    category: Category | None = Query(None),
    condition: Condition | None = Query(None),
    sort_by: Literal["created_at", "price"] = Query("created_at"),
    order: Literal["asc", "desc"] = Query("desc"),
    page: int = Query(1, ge=1),
    page_size: int = Query(12, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
) -> PageResponse[PublicProductResponse]:
    products, total = await ProductRepository(db).find(
        status="active",
        category=category,
        condition=condition,
        sort_by=sort_by,
        order=order,
        limit=page_size,
        offset=(page - 1) * page_size,
    )
    sellers = await ProfileRepository(db).names_for({p.user_id for p in products})

    response.headers["Cache-Control"] = PUBLIC_CACHE_CONTROL
    return PageResponse(
        items=[
            PublicProductResponse(
                id=p.id,
                title=p.title,
                description=p.description,
                category=p.category,
                condition=p.condition,
                price=p.price,
                image_url=(p.photo_urls or [None])[0],
                seller_name=sellers.get(p.user_id),
            )
            for p in products
        ],
        total=total,
        page=page,
        page_size=page_size,
    )
