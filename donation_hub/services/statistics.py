"""Dashboard and public rollups over donations.

Both rollups take the already-reconciled distributed id set (see
``services.reconciliation``) and never reconcile on their own.

Admin buckets are mutually exclusive per donation:

    pending | approved_undistributed | distributed | rejected

``verified`` is every approved donation (approved_undistributed +
distributed), the figure the dashboard labels "approved".

The public rollup only counts donations that are approved AND distributed,
so it is a strict subset of what the admin sees.

A record that cannot be aggregated is logged and skipped; one bad row must
not take down the public dashboard.
"""

import logging
import uuid
from collections.abc import Iterable
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any

logger = logging.getLogger(__name__)

BUCKETS = ("pending", "approved_undistributed", "distributed", "rejected")
MONEY = "money"
GOODS = "goods"


@dataclass
class Bucket:
    count: int = 0
    amount: Decimal = Decimal(0)


@dataclass
class AdminRollup:
    total_donations: int = 0
    total_donors: int = 0
    total_net_amount: Decimal = Decimal(0)
    money_donations_count: int = 0
    goods_donations_count: int = 0
    money: dict[str, Bucket] = field(default_factory=lambda: {b: Bucket() for b in BUCKETS})
    goods: dict[str, int] = field(default_factory=lambda: {b: 0 for b in BUCKETS})

    @property
    def money_verified(self) -> Bucket:
        approved = self.money["approved_undistributed"]
        distributed = self.money["distributed"]
        return Bucket(
            count=approved.count + distributed.count,
            amount=approved.amount + distributed.amount,
        )

    @property
    def goods_verified(self) -> int:
        return self.goods["approved_undistributed"] + self.goods["distributed"]


@dataclass
class PublicRollup:
    total_amount: Decimal = Decimal(0)
    total_donors: int = 0
    goods_donations_count: int = 0


def _net(donation: Any) -> Decimal:
    value = getattr(donation, "net_amount", None)
    if value is None:
        return Decimal(0)
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def _bucket_for(donation: Any, distributed_ids: set[uuid.UUID]) -> str:
    status = donation.status
    if status == "approved":
        return "distributed" if donation.id in distributed_ids else "approved_undistributed"
    if status in ("pending", "rejected"):
        return status
    raise ValueError(f"unknown status {status!r}")


def _donor_key(donation: Any) -> str | None:
    email = getattr(donation, "donor_email", None)
    return email if email else None


def admin_rollup(donations: Iterable[Any], distributed_ids: set[uuid.UUID]) -> AdminRollup:
    rollup = AdminRollup()
    donors: set[str] = set()

    for donation in donations:
        try:
            bucket = _bucket_for(donation, distributed_ids)
            kind = donation.donation_type
            if kind == MONEY:
                amount = _net(donation)
            elif kind != GOODS:
                raise ValueError(f"unknown donation_type {kind!r}")
        except (AttributeError, TypeError, ValueError, InvalidOperation) as exc:
            logger.warning(
                "Skipping malformed donation %s in admin rollup: %s",
                getattr(donation, "id", "?"),
                exc,
            )
            continue

        rollup.total_donations += 1
        if kind == MONEY:
            rollup.money_donations_count += 1
            rollup.money[bucket].count += 1
            rollup.money[bucket].amount += amount
            rollup.total_net_amount += amount
        else:
            rollup.goods_donations_count += 1
            rollup.goods[bucket] += 1

        donor = _donor_key(donation)
        if donor:
            donors.add(donor)

    rollup.total_donors = len(donors)
    return rollup


def public_rollup(donations: Iterable[Any], distributed_ids: set[uuid.UUID]) -> PublicRollup:
    rollup = PublicRollup()
    donors: set[str] = set()

    for donation in donations:
        try:
            if donation.status != "approved" or donation.id not in distributed_ids:
                continue
            kind = donation.donation_type
            amount = _net(donation) if kind == MONEY else Decimal(0)
        except (AttributeError, TypeError, ValueError, InvalidOperation) as exc:
            logger.warning(
                "Skipping malformed donation %s in public rollup: %s",
                getattr(donation, "id", "?"),
                exc,
            )
            continue

        if kind == MONEY:
            rollup.total_amount += amount
        elif kind == GOODS:
            rollup.goods_donations_count += 1
        donor = _donor_key(donation)
        if donor:
            donors.add(donor)

    rollup.total_donors = len(donors)
    return rollup
