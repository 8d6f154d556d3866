"""Statistics response schemas."""

from decimal import Decimal

from pydantic import BaseModel


class MoneyBucket(BaseModel):
    count: int
    amount: Decimal


class MoneyBreakdown(BaseModel):
    pending: MoneyBucket
    approved_undistributed: MoneyBucket
    distributed: MoneyBucket
    rejected: MoneyBucket
    verified: MoneyBucket


class GoodsBreakdown(BaseModel):
    pending: int
    approved_undistributed: int
    distributed: int
    rejected: int
    verified: int


class AdminStatsResponse(BaseModel):
    total_donations: int
    total_donors: int
    total_net_amount: Decimal
    money_donations_count: int
    goods_donations_count: int
    money: MoneyBreakdown
    goods: GoodsBreakdown


class PublicStatsResponse(BaseModel):
    total_amount: Decimal
    total_donors: int
    goods_donations_count: int
