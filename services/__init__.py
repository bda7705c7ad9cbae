"""
Services module - Business logic layer for the image gallery API.
"""
from services.image_service import ImageService

__all__ = ["ImageService"]
