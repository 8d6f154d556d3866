"""Admin dashboard statistics."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from donation_hub.core.dependencies import get_db, require_admin
from donation_hub.schemas.stats import (
    AdminStatsResponse,
    GoodsBreakdown,
    MoneyBreakdown,
    MoneyBucket,
)
from donation_hub.services.accountability import load_distribution_state
from donation_hub.services.statistics import BUCKETS, AdminRollup, Bucket, admin_rollup

router = APIRouter(dependencies=[Depends(require_admin)])


def _money(bucket: Bucket) -> MoneyBucket:
    return MoneyBucket(count=bucket.count, amount=bucket.amount)


def _to_response(rollup: AdminRollup) -> AdminStatsResponse:
    return AdminStatsResponse(
        total_donations=rollup.total_donations,
        total_donors=rollup.total_donors,
        total_net_amount=rollup.total_net_amount,
        money_donations_count=rollup.money_donations_count,
        goods_donations_count=rollup.goods_donations_count,
        money=MoneyBreakdown(
            **{name: _money(rollup.money[name]) for name in BUCKETS},
            verified=_money(rollup.money_verified),
        ),
        goods=GoodsBreakdown(
            **{name: rollup.goods[name] for name in BUCKETS},
            verified=rollup.goods_verified,
        ),
    )


@router.get("", response_model=AdminStatsResponse)
async def admin_stats(db: AsyncSession = Depends(get_db)) -> AdminStatsResponse:
    state = await load_distribution_state(db)
    return _to_response(admin_rollup(state.donations, state.distributed_ids))
