"""Donation status lifecycle.

``pending`` is assigned at creation. Admins may overwrite any status with
any other recognised status: there is no precondition on the current value,
so re-approving a rejected donation is allowed. "Distributed" is not a
status; see ``services.reconciliation``.
"""

from datetime import UTC, datetime

from donation_hub.core.exceptions import FieldValidationError
from donation_hub.models.donation import DONATION_STATUSES, Donation

INITIAL_STATUS = "pending"


def normalize_status(requested: str) -> str:
    """Return the canonical status value or raise a field error on ``status``."""
    status = requested.strip().lower()
    if status not in DONATION_STATUSES:
        allowed = ", ".join(DONATION_STATUSES)
        raise FieldValidationError.single("status", f"Status must be one of: {allowed}")
    return status


def apply_status(donation: Donation, requested: str) -> str:
    """Overwrite ``donation.status``; returns the previous status.

    Only ``status`` and ``updated_at`` change. Amounts are left untouched.
    """
    status = normalize_status(requested)
    previous = donation.status
    donation.status = status
    donation.updated_at = datetime.now(UTC)
    return previous
