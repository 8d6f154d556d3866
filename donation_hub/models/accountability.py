import uuid
from datetime import date, datetime

from sqlalchemy import JSON, Date, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from donation_hub.db.base import Base, utcnow


class Accountability(Base):
    """One real-world distribution of donations to a location."""

    __tablename__ = "accountability"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    location: Mapped[str] = mapped_column(String(255), nullable=False)
    activity_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    photo_urls: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    created_by: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("profiles.id", ondelete="RESTRICT"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )

    donation_links: Mapped[list["AccountabilityDonation"]] = relationship(
        back_populates="accountability",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    @property
    def donation_ids(self) -> set[uuid.UUID]:
        return {link.donation_id for link in self.donation_links}

    def set_donation_ids(self, donation_ids: set[uuid.UUID]) -> None:
        """Replace the referenced donations, keeping links that survive."""
        keep = [link for link in self.donation_links if link.donation_id in donation_ids]
        existing = {link.donation_id for link in keep}
        self.donation_links = keep + [
            AccountabilityDonation(donation_id=did)
            for did in sorted(donation_ids - existing, key=str)
        ]


class AccountabilityDonation(Base):
    """Association row: accountability record references a donation."""

    __tablename__ = "accountability_donations"

    accountability_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("accountability.id", ondelete="CASCADE"), primary_key=True
    )
    donation_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("donations.id", ondelete="CASCADE"), primary_key=True, index=True
    )

    accountability: Mapped[Accountability] = relationship(back_populates="donation_links")
