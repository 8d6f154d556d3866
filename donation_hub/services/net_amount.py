"""Net distributable amount of a money donation.

``net = gross * (1 - FEE_RATE)``, exact Decimal multiplication with no
intermediate rounding. Currency formatting belongs to the display layer.
"""

from decimal import Decimal

from donation_hub.core.config import settings

FEE_RATE: Decimal = Decimal(str(settings.PLATFORM_FEE_RATE))


def calculate_net_amount(
    gross_amount: Decimal | int | str | None,
    fee_rate: Decimal = FEE_RATE,
) -> Decimal | None:
    """Return the net amount for ``gross_amount``, or None when absent."""
    if gross_amount is None:
        return None
    gross = gross_amount if isinstance(gross_amount, Decimal) else Decimal(str(gross_amount))
    if gross < 0:
        raise ValueError("gross_amount must not be negative")
    return gross * (Decimal(1) - fee_rate)
