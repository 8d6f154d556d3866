"""Profile (user) request/response schemas."""

import uuid
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, EmailStr, Field, model_validator

Role = Literal["admin", "seller", "user"]


class UserCreate(BaseModel):
    model_config = {"str_strip_whitespace": True}

    email: EmailStr
    full_name: str = Field(..., min_length=2, max_length=120)
    role: Role = "user"


class UserUpdate(BaseModel):
    model_config = {"str_strip_whitespace": True}

    full_name: str | None = Field(None, min_length=2, max_length=120)
    role: Role | None = None

    @model_validator(mode="after")
    def _not_empty(self) -> "UserUpdate":
        if self.full_name is None and self.role is None:
            raise ValueError("No fields to update")
        return self


class ProfileUpdate(BaseModel):
    """Self-service edit from the account page; role is not writable here."""

    model_config = {"str_strip_whitespace": True}

    full_name: str = Field(..., min_length=2, max_length=120)


class UserResponse(BaseModel):
    id: uuid.UUID
    email: str
    full_name: str | None = None
    role: str
    created_at: datetime
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}
