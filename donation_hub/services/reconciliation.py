"""Accountability reconciliation.

A donation is *distributed* iff its id is referenced by at least one
accountability record AND its status is ``approved``. The set is computed
from current records on every call and is never persisted, so deleting or
editing a record un-distributes its donations immediately.

Inputs are duck-typed: records need ``donation_ids`` (any iterable of ids),
donations need ``id`` and ``status``.
"""

import logging
import uuid
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)

APPROVED = "approved"


@dataclass
class ReconciliationReport:
    distributed_ids: set[uuid.UUID] = field(default_factory=set)
    # referenced ids with no matching donation
    missing_ids: set[uuid.UUID] = field(default_factory=set)
    # referenced ids whose donation is not approved
    unapproved_ids: set[uuid.UUID] = field(default_factory=set)
    # donation id -> number of records referencing it, only where > 1
    multiply_referenced: dict[uuid.UUID, int] = field(default_factory=dict)

    @property
    def is_consistent(self) -> bool:
        return not self.missing_ids and not self.unapproved_ids


def referenced_donation_ids(records: Iterable[Any]) -> set[uuid.UUID]:
    """Union of ``donation_ids`` across all records."""
    referenced: set[uuid.UUID] = set()
    for record in records:
        referenced.update(getattr(record, "donation_ids", None) or ())
    return referenced


def distributed_donation_ids(records: Iterable[Any], donations: Iterable[Any]) -> set[uuid.UUID]:
    """Ids of approved donations referenced by any record."""
    referenced = referenced_donation_ids(records)
    return {
        d.id
        for d in donations
        if d.id in referenced and getattr(d, "status", None) == APPROVED
    }


def reconcile(records: Iterable[Any], donations: Iterable[Any]) -> ReconciliationReport:
    """Full reconciliation including the inconsistencies found on the way.

    Inconsistencies are reported and logged, never raised.
    """
    counts: dict[uuid.UUID, int] = {}
    for record in records:
        for donation_id in set(getattr(record, "donation_ids", None) or ()):
            counts[donation_id] = counts.get(donation_id, 0) + 1

    status_by_id = {d.id: getattr(d, "status", None) for d in donations}

    report = ReconciliationReport()
    for donation_id, count in counts.items():
        if count > 1:
            report.multiply_referenced[donation_id] = count
        if donation_id not in status_by_id:
            report.missing_ids.add(donation_id)
        elif status_by_id[donation_id] != APPROVED:
            report.unapproved_ids.add(donation_id)
        else:
            report.distributed_ids.add(donation_id)

    if not report.is_consistent:
        logger.warning(
            "Accountability references excluded from distribution: %d missing, %d not approved",
            len(report.missing_ids),
            len(report.unapproved_ids),
        )
    return report
