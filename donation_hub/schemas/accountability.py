"""Accountability (distribution report) schemas."""

import uuid
from datetime import date, datetime

from pydantic import BaseModel, Field, field_validator, model_validator

MAX_PHOTOS = 10


def _dedupe(v: list[uuid.UUID] | None) -> list[uuid.UUID] | None:
    if v is None:
        return v
    return list(dict.fromkeys(v))


class AccountabilityCreate(BaseModel):
    location: str = Field(..., min_length=1, max_length=255)
    activity_date: date
    description: str = Field(..., min_length=1, max_length=2000)
    donation_ids: list[uuid.UUID] = Field(..., min_length=1)
    photo_urls: list[str] = Field(default_factory=list, max_length=MAX_PHOTOS)

    @field_validator("donation_ids")
    @classmethod
    def dedupe_ids(cls, v: list[uuid.UUID] | None) -> list[uuid.UUID] | None:
        return _dedupe(v)


class AccountabilityUpdate(BaseModel):
    location: str | None = Field(None, min_length=1, max_length=255)
    activity_date: date | None = None
    description: str | None = Field(None, min_length=1, max_length=2000)
    donation_ids: list[uuid.UUID] | None = Field(None, min_length=1)
    photo_urls: list[str] | None = Field(None, max_length=MAX_PHOTOS)

    @field_validator("donation_ids")
    @classmethod
    def dedupe_ids(cls, v: list[uuid.UUID] | None) -> list[uuid.UUID] | None:
        return _dedupe(v)

    @model_validator(mode="after")
    def _not_empty(self) -> "AccountabilityUpdate":
        if not self.model_fields_set:
            raise ValueError("No fields to update")
        return self


class AccountabilityResponse(BaseModel):
    id: uuid.UUID
    location: str
    activity_date: date
    description: str
    donation_ids: list[uuid.UUID]
    photo_urls: list[str]
    created_by: uuid.UUID
    created_at: datetime
    updated_at: datetime


class AccountabilityWriteResponse(AccountabilityResponse):
    warnings: list[str] = Field(default_factory=list)


class ReconciliationReportResponse(BaseModel):
    consistent: bool
    distributed_count: int
    missing_donation_ids: list[uuid.UUID]
    unapproved_donation_ids: list[uuid.UUID]
    multiply_referenced: dict[uuid.UUID, int]
