"""Donation status lifecycle tests."""

from decimal import Decimal

import pytest

from donation_hub.core.exceptions import FieldValidationError
from donation_hub.models.donation import Donation
from donation_hub.services.lifecycle import INITIAL_STATUS, apply_status, normalize_status


def _donation(status: str) -> Donation:
    return Donation(
        donor_name="Budi",
        donor_email="budi@example.com",
        donation_type="money",
        gross_amount=Decimal("100000"),
        net_amount=Decimal("95000"),
        status=status,
    )


def test_initial_status_is_pending():
    assert INITIAL_STATUS == "pending"


@pytest.mark.parametrize(
    ("current", "requested"),
    [
        ("pending", "approved"),
        ("pending", "rejected"),
        ("rejected", "approved"),
        ("approved", "rejected"),
        ("approved", "pending"),
        ("approved", "approved"),
    ],
)
def test_any_status_may_overwrite_any_other(current: str, requested: str):
    donation = _donation(current)
    previous = apply_status(donation, requested)
    assert previous == current
    assert donation.status == requested


def test_status_change_leaves_amounts_alone():
    donation = _donation("pending")
    apply_status(donation, "approved")
    assert donation.gross_amount == Decimal("100000")
    assert donation.net_amount == Decimal("95000")
    assert donation.updated_at is not None


def test_status_is_normalized():
    assert normalize_status("  Approved ") == "approved"


@pytest.mark.parametrize("bad", ["completed", "distributed", ""])
def test_unknown_status_is_field_error(bad: str):
    with pytest.raises(FieldValidationError) as exc_info:
        normalize_status(bad)
    assert "status" in exc_info.value.errors
    assert exc_info.value.status == 422
