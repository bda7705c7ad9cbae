from fastapi import Depends
from sqlalchemy.orm import Session

from core.config import Settings, get_settings
from core.database import get_db
from core.storage import ObjectStore, get_object_store
from services.image_service import ImageService


def get_image_service(
    db: Session = Depends(get_db),
    object_store: ObjectStore = Depends(get_object_store),
    settings: Settings = Depends(get_settings)
) -> ImageService:
    return ImageService(
        db,
        object_store,
        serving_region=settings.AWS_REGION,
        max_file_size=settings.MAX_FILE_SIZE
    )
