from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Integer, String, Text, func

from core.database import Base

# Largest id a signed 64-bit INTEGER column can hold
MAX_IMAGE_ID = 2 ** 63 - 1


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ImageRecord(Base):
    __tablename__ = "images"

    id = Column(Integer, primary_key=True, autoincrement=True)

    name = Column(String(255), nullable=False)
    type = Column(String(100), nullable=True)
    model = Column(String(100), nullable=True)
    color = Column(String(50), nullable=True)

    # Public object-store URL, e.g. "https://bucket.s3.eu-west-1.amazonaws.com/photo-20240501t093000z.png"
    image_url = Column(Text, nullable=False)

    created_at = Column(DateTime(timezone=True), default=_utcnow, server_default=func.now(), index=True, nullable=False)
