"""
Хранение изображений объявлений в Cloudinary
"""
import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import BinaryIO, List, Optional

import cloudinary
import cloudinary.uploader
from cloudinary.exceptions import Error as CloudinaryError

from marketplace.config import get_settings
from marketplace.errors import ExternalServiceError

logger = logging.getLogger(__name__)


@dataclass
class StoredImage:
    """Ссылка на загруженное изображение"""
    url: str
    filename: str  # public_id в Cloudinary


class CloudinaryImageStorage:

    def __init__(
        self,
        cloud_name: Optional[str],
        api_key: Optional[str],
        api_secret: Optional[str],
        folder: str = "marketplace_DEV",
        allowed_formats: Optional[List[str]] = None,
    ):
        self.folder = folder
        self.allowed_formats = allowed_formats or ["png", "jpg", "jpeg"]
        cloudinary.config(
            cloud_name=cloud_name,
            api_key=api_key,
            api_secret=api_secret,
            secure=True,
        )

    def upload(self, file: BinaryIO) -> StoredImage:
        try:
            result = cloudinary.uploader.upload(
                file,
                folder=self.folder,
                allowed_formats=self.allowed_formats,
                resource_type="image",
            )
        except CloudinaryError as e:
            logger.error(f"Image upload failed: {e}")
            raise ExternalServiceError("Image upload failed") from e

        logger.info(f"Uploaded image {result['public_id']}")
        return StoredImage(url=result["secure_url"], filename=result["public_id"])

    def destroy(self, filename: str) -> None:
        try:
            result = cloudinary.uploader.destroy(filename, resource_type="image")
        except CloudinaryError as e:
            logger.error(f"Image delete failed for {filename}: {e}")
            raise ExternalServiceError("Image delete failed") from e

        if result.get("result") not in ("ok", "not found"):
            logger.warning(f"Unexpected destroy result for {filename}: {result}")


@lru_cache()
def get_image_storage() -> CloudinaryImageStorage:
    settings = get_settings()
    return CloudinaryImageStorage(
        cloud_name=settings.cloudinary_cloud_name,
        api_key=settings.cloudinary_key,
        api_secret=settings.cloudinary_secret,
        folder=settings.cloudinary_folder,
        allowed_formats=settings.allowed_image_formats,
    )
