"""Donation request/response schemas."""

import re
import uuid
from datetime import datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_PATTERN = re.compile(r"^(\+62|0)\d{9,12}$")

DonationType = Literal["money", "goods"]
PaymentMethod = Literal["bank_transfer", "e_wallet"]

MONEY_FIELDS = ("gross_amount", "payment_method", "transfer_proof_url")
GOODS_FIELDS = ("item_list", "quantity", "pickup_address")


def check_email(v: str | None) -> str | None:
    if v is None:
        return v
    v = v.strip()
    if not EMAIL_PATTERN.match(v):
        raise ValueError("Invalid email address")
    return v


def check_phone(v: str | None) -> str | None:
    if v is None:
        return v
    v = v.strip()
    if v == "":
        return None
    if not PHONE_PATTERN.match(v):
        raise ValueError("Invalid phone number, expected +62 or 0 followed by 9-12 digits")
    return v


def blank_to_none(v: str | None) -> str | None:
    if v is None:
        return v
    v = v.strip()
    return v or None


class DonationCreate(BaseModel):
    donor_name: str | None = Field(None, max_length=100)
    donor_email: str = Field(..., max_length=320)
    donor_phone: str | None = Field(None, max_length=20)
    donation_type: DonationType
    gross_amount: Decimal | None = Field(None, gt=0, max_digits=14, decimal_places=2)
    payment_method: PaymentMethod | None = None
    transfer_proof_url: str | None = Field(None, max_length=2048)
    item_list: str | None = Field(None, max_length=2000)
    quantity: int | None = Field(None, ge=0)
    pickup_address: str | None = Field(None, max_length=500)
    notes: str | None = Field(None, max_length=500)
    is_anonymous: bool = False

    @field_validator("donor_email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        return check_email(v)

    @field_validator("donor_phone")
    @classmethod
    def validate_phone(cls, v: str | None) -> str | None:
        return check_phone(v)

    @field_validator("donor_name", "transfer_proof_url", "item_list", "pickup_address", "notes")
    @classmethod
    def strip_blank(cls, v: str | None) -> str | None:
        return blank_to_none(v)


class DonationUpdate(BaseModel):
    """Partial update. Omitted fields are left untouched."""

    donor_name: str | None = Field(None, min_length=1, max_length=100)
    donor_email: str | None = Field(None, max_length=320)
    donor_phone: str | None = Field(None, max_length=20)
    donation_type: DonationType | None = None
    gross_amount: Decimal | None = Field(None, gt=0, max_digits=14, decimal_places=2)
    payment_method: PaymentMethod | None = None
    transfer_proof_url: str | None = Field(None, max_length=2048)
    item_list: str | None = Field(None, max_length=2000)
    quantity: int | None = Field(None, ge=0)
    pickup_address: str | None = Field(None, max_length=500)
    notes: str | None = Field(None, max_length=500)
    is_anonymous: bool | None = None
    status: str | None = Field(None, min_length=1, max_length=20)

    @field_validator("donor_email")
    @classmethod
    def validate_email(cls, v: str | None) -> str | None:
        return check_email(v)

    @field_validator("donor_phone")
    @classmethod
    def validate_phone(cls, v: str | None) -> str | None:
        return check_phone(v)

    @field_validator("donor_name", "transfer_proof_url", "item_list", "pickup_address", "notes")
    @classmethod
    def strip_blank(cls, v: str | None) -> str | None:
        return blank_to_none(v)

    @model_validator(mode="after")
    def _not_empty(self) -> "DonationUpdate":
        if not self.model_fields_set:
            raise ValueError("No fields to update")
        return self


class DonationStatusUpdate(BaseModel):
    status: str = Field(..., min_length=1, max_length=20)


class DonationResponse(BaseModel):
    id: uuid.UUID
    donor_name: str
    display_name: str
    donor_email: str
    donor_phone: str | None = None
    donation_type: str
    gross_amount: Decimal | None = None
    net_amount: Decimal | None = None
    payment_method: str | None = None
    transfer_proof_url: str | None = None
    item_list: str | None = None
    quantity: int | None = None
    pickup_address: str | None = None
    notes: str | None = None
    is_anonymous: bool
    status: str
    created_at: datetime
    updated_at: datetime


class DonationListItem(BaseModel):
    id: uuid.UUID
    display_name: str
    donor_email: str
    donation_type: str
    gross_amount: Decimal | None = None
    net_amount: Decimal | None = None
    status: str
    distributed: bool
    created_at: datetime


class DonationSubmitResponse(BaseModel):
    id: uuid.UUID
    donation_type: str
    gross_amount: Decimal | None = None
    net_amount: Decimal | None = None
    transfer_proof_url: str | None = None
    status: str
    created_at: datetime

    model_config = {"from_attributes": True}


class DonationStatusResponse(BaseModel):
    id: uuid.UUID
    status: str
    previous_status: str
    gross_amount: Decimal | None = None
    net_amount: Decimal | None = None
    updated_at: datetime
