import logging
from typing import Optional

from fastapi import HTTPException, status
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from core.storage import ObjectStore, StorageError
from models.image import MAX_IMAGE_ID, ImageRecord
from schemas.image import ImageCreateRequest, ImageResponse, ImageUpdateRequest
from services.image_urls import build_object_key, object_key_from_url, rewrite_url_region

log = logging.getLogger(__name__)

EDITABLE_FIELDS = ("name", "type", "model", "color")


def clean_text(value: Optional[str]) -> Optional[str]:
    return (value or "").strip() or None


def describe_errors(exc: ValidationError) -> str:
    return "; ".join(f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}" for error in exc.errors())


def store_failure(message: str, exc: Exception) -> HTTPException:
    code = exc.code if isinstance(exc, StorageError) else type(exc).__name__
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={"message": message, "error": code},
    )


class ImageService:
    """Image record lifecycle across the metadata table and the object store."""

    def __init__(
        self,
        db: Session,
        object_store: ObjectStore,
        serving_region: Optional[str] = None,
        max_file_size: Optional[int] = None
    ):
        self.db = db
        self.object_store = object_store
        self.serving_region = serving_region
        self.max_file_size = max_file_size

    def serialize(self, record: ImageRecord) -> ImageResponse:
        image = ImageResponse.model_validate(record)
        image.image_url = rewrite_url_region(image.image_url, self.serving_region)
        return image

    def list_images(self) -> list[ImageResponse]:
        try:
            records = self.db.query(ImageRecord).order_by(
                ImageRecord.created_at.desc(),
                ImageRecord.id.desc()
            ).all()
        except SQLAlchemyError as exc:
            log.error("Error fetching images: %s", exc, exc_info=True)
            raise store_failure("Failed to fetch images", exc)
        return [self.serialize(record) for record in records]

    def find_image(self, image_id: int) -> Optional[ImageRecord]:
        if not 0 < image_id <= MAX_IMAGE_ID:
            return None
        try:
            return self.db.query(ImageRecord).filter(ImageRecord.id == image_id).first()
        except SQLAlchemyError as exc:
            log.error("Error fetching image %s: %s", image_id, exc, exc_info=True)
            raise store_failure("Failed to fetch image", exc)

    def get_record(self, image_id: int) -> ImageRecord:
        record = self.find_image(image_id)
        if record is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Image not found")
        return record

    def get_image(self, image_id: int) -> ImageResponse:
        return self.serialize(self.get_record(image_id))

    def create_image(
        self,
        data: Optional[bytes],
        filename: Optional[str],
        content_type: Optional[str],
        name: Optional[str],
        type: Optional[str] = None,
        model: Optional[str] = None,
        color: Optional[str] = None
    ) -> ImageResponse:
        if not data:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No file uploaded")
        if self.max_file_size is not None and len(data) > self.max_file_size:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="File too large")

        name = clean_text(name)
        if not name:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Image name is required")

        try:
            metadata = ImageCreateRequest(
                name=name,
                type=clean_text(type),
                model=clean_text(model),
                color=clean_text(color)
            )
        except ValidationError as exc:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail={"message": "Invalid image metadata", "error": describe_errors(exc)}
            )

        key = build_object_key(filename or "", content_type)
        try:
            image_url = self.object_store.put(key, data, content_type)
        except StorageError as exc:
            raise store_failure("Failed to create image", exc)

        record = ImageRecord(**metadata.model_dump(), image_url=image_url)
        try:
            self.db.add(record)
            self.db.commit()
            self.db.refresh(record)
        except SQLAlchemyError as exc:
            self.db.rollback()
            log.error("Error inserting image row for %s; object left in store: %s", key, exc, exc_info=True)
            raise store_failure("Failed to create image", exc)

        log.info("Created image %s (%s)", record.id, key)
        return self.serialize(record)

    def update_image(self, image_id: int, payload: ImageUpdateRequest) -> ImageResponse:
        record = self.get_record(image_id)

        changes = {}
        for field in EDITABLE_FIELDS:
            value = clean_text(getattr(payload, field))
            if value is not None:
                changes[field] = value

        if not changes:
            return self.serialize(record)

        try:
            for field, value in changes.items():
                setattr(record, field, value)
            self.db.commit()
            self.db.refresh(record)
        except SQLAlchemyError as exc:
            self.db.rollback()
            log.error("Error updating image %s: %s", image_id, exc, exc_info=True)
            raise store_failure("Failed to update image", exc)

        log.info("Updated image %s fields %s", image_id, sorted(changes))
        return self.serialize(record)

    def delete_image(self, image_id: int) -> None:
        record = self.get_record(image_id)
        image_url = str(record.image_url)

        key = object_key_from_url(image_url, self.object_store.bucket_name)
        if key:
            try:
                self.object_store.delete(key)
            except StorageError as exc:
                # The row is still removed; the object may be left behind
                log.warning("Object %s not deleted (%s); removing image %s anyway", key, exc.code, image_id)
        else:
            log.warning("Could not derive an object key from %s; removing image %s anyway", image_url, image_id)

        try:
            deleted = self.db.query(ImageRecord).filter(ImageRecord.id == image_id).delete()
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            log.error("Error deleting image %s: %s", image_id, exc, exc_info=True)
            raise store_failure("Failed to delete image", exc)

        if not deleted:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Image not found")

        log.info("Deleted image %s", image_id)


__all__ = ["ImageService"]
