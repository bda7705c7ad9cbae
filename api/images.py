from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Path, UploadFile, status

from api.dependencies import get_image_service
from models.image import MAX_IMAGE_ID
from schemas.image import (
    ImageCreatedResponse,
    ImageEnvelope,
    ImageListResponse,
    ImageResponse,
    ImageUpdateRequest,
    MessageResponse,
)
from services.image_service import ImageService

router = APIRouter(prefix="/images", tags=["images"])


def read_upload(upload: Optional[UploadFile], limit: Optional[int]) -> Optional[bytes]:
    if upload is None or not upload.filename:
        return None
    # One byte past the limit is enough to know the upload is too large
    return upload.file.read(limit + 1) if limit is not None else upload.file.read()


@router.get("", response_model=ImageListResponse)
def list_images(service: ImageService = Depends(get_image_service)):
    return {"images": service.list_images()}


@router.get("/{image_id}", response_model=ImageEnvelope)
def get_image(image_id: int = Path(..., ge=1, le=MAX_IMAGE_ID), service: ImageService = Depends(get_image_service)):
    return {"image": service.get_image(image_id)}


@router.post("", response_model=ImageCreatedResponse, status_code=status.HTTP_201_CREATED)
def create_image(
    file: Optional[UploadFile] = File(None),
    image: Optional[UploadFile] = File(None),
    name: Optional[str] = Form(None),
    type: Optional[str] = Form(None),
    model: Optional[str] = Form(None),
    color: Optional[str] = Form(None),
    service: ImageService = Depends(get_image_service)
):
    """Upload an image and store its metadata. The browser client sends the file as `image`."""
    upload = file if file is not None and file.filename else image
    created = service.create_image(
        data=read_upload(upload, service.max_file_size),
        filename=upload.filename if upload else None,
        content_type=upload.content_type if upload else None,
        name=name,
        type=type,
        model=model,
        color=color
    )
    return {"message": "Image created successfully", "image": created}


@router.put("/{image_id}", response_model=ImageResponse)
def update_image(
    payload: ImageUpdateRequest,
    image_id: int = Path(..., ge=1, le=MAX_IMAGE_ID),
    service: ImageService = Depends(get_image_service)
):
    return service.update_image(image_id, payload)


@router.delete("/{image_id}", response_model=MessageResponse)
def delete_image(image_id: int = Path(..., ge=1, le=MAX_IMAGE_ID), service: ImageService = Depends(get_image_service)):
    service.delete_image(image_id)
    return {"message": "Image deleted successfully"}
