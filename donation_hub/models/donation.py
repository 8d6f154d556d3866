import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column

from donation_hub.db.base import Base, utcnow

DONATION_TYPES = ("money", "goods")
DONATION_STATUSES = ("pending", "approved", "rejected")
PAYMENT_METHODS = ("bank_transfer", "e_wallet")


class Donation(Base):
    __tablename__ = "donations"
    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'approved', 'rejected')",
            name="ck_donations_status",
        ),
        CheckConstraint(
            "donation_type IN ('money', 'goods')",
            name="ck_donations_type",
        ),
        CheckConstraint(
            "(donation_type = 'money' AND net_amount IS NOT NULL) "
            "OR (donation_type = 'goods' AND net_amount IS NULL)",
            name="ck_donations_net_amount_money_only",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    donor_name: Mapped[str] = mapped_column(String(100), nullable=False)
    donor_email: Mapped[str] = mapped_column(String(320), nullable=False, index=True)
    donor_phone: Mapped[str | None] = mapped_column(String(20), nullable=True)
    donation_type: Mapped[str] = mapped_column(String(10), nullable=False)

    # money
    gross_amount: Mapped[Decimal | None] = mapped_column(Numeric(14, 2), nullable=True)
    net_amount: Mapped[Decimal | None] = mapped_column(Numeric(16, 4), nullable=True)
    payment_method: Mapped[str | None] = mapped_column(String(20), nullable=True)
    transfer_proof_url: Mapped[str | None] = mapped_column(Text, nullable=True)

    # goods
    item_list: Mapped[str | None] = mapped_column(Text, nullable=True)
    quantity: Mapped[int | None] = mapped_column(Integer, nullable=True)
    pickup_address: Mapped[str | None] = mapped_column(Text, nullable=True)

    notes: Mapped[str | None] = mapped_column(String(500), nullable=True)
    is_anonymous: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    status: Mapped[str] = mapped_column(String(10), nullable=False, default="pending", index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )
