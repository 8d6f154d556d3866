"""Upload response schemas."""

from pydantic import BaseModel


class UploadResponse(BaseModel):
    url: str
    content_type: str
    size_bytes: int


class PhotoUploadResponse(BaseModel):
    urls: list[str]
