from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ImageResponse(BaseModel):
    id: int
    name: str
    type: Optional[str] = None
    model: Optional[str] = None
    color: Optional[str] = None
    image_url: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ImageCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    type: Optional[str] = Field(None, max_length=100)
    model: Optional[str] = Field(None, max_length=100)
    color: Optional[str] = Field(None, max_length=50)


class ImageUpdateRequest(BaseModel):
    name: Optional[str] = Field(None, max_length=255)
    type: Optional[str] = Field(None, max_length=100)
    model: Optional[str] = Field(None, max_length=100)
    color: Optional[str] = Field(None, max_length=50)

    # image_url, id and created_at are not editable; extra keys are dropped
    model_config = ConfigDict(extra="ignore")


class ImageListResponse(BaseModel):
    images: list[ImageResponse] = []


class ImageEnvelope(BaseModel):
    image: ImageResponse


class ImageCreatedResponse(BaseModel):
    message: str
    image: ImageResponse


class MessageResponse(BaseModel):
    message: str
