"""Product request/response schemas."""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, Field, model_validator

Category = Literal["men", "women", "kids"]
Condition = Literal["new", "preloved"]
ProductStatus = Literal["active", "inactive"]

MAX_PHOTOS = 10


class ProductCreate(BaseModel):
    user_id: uuid.UUID | None = None
    title: str = Field(..., min_length=1, max_length=255)
    description: str | None = Field(None, max_length=5000)
    category: Category
    condition: Condition
    price: Decimal = Field(..., ge=0, max_digits=14, decimal_places=2)
    stock: int = Field(0, ge=0)
    status: ProductStatus = "active"
    photo_urls: list[str] = Field(default_factory=list, max_length=MAX_PHOTOS)


class ProductUpdate(BaseModel):
    user_id: uuid.UUID | None = None
    title: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = Field(None, max_length=5000)
    category: Category | None = None
    condition: Condition | None = None
    price: Decimal | None = Field(None, ge=0, max_digits=14, decimal_places=2)
    stock: int | None = Field(None, ge=0)
    status: ProductStatus | None = None
    photo_urls: list[str] | None = Field(None, max_length=MAX_PHOTOS)

    @model_validator(mode="after")
    def _not_empty(self) -> "ProductUpdate":
        if not self.model_fields_set:
            raise ValueError("No fields to update")
        return self


class ProductResponse(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    title: str
    description: str | None = None
    category: str
    condition: str
    price: Decimal
    stock: int
    status: str
    photo_urls: list[str]
    created_at: datetime
    updated_at: datetime | None = None


class PublicProductResponse(BaseModel):
    id: uuid.UUID
    title: str
    description: str | None = None
    category: str
    condition: str
    price: Decimal
    image_url: str | None = None
    seller_name: str | None = None
