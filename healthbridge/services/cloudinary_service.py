import cloudinary
import cloudinary.uploader
from loguru import logger

from healthbridge.core.config import settings
from healthbridge.core.exceptions import UploadError

# Configure Cloudinary
if settings.CLOUDINARY_CLOUD_NAME:
    cloudinary.config(
        cloud_name=settings.CLOUDINARY_CLOUD_NAME,
        api_key=settings.CLOUDINARY_API_KEY,
        api_secret=settings.CLOUDINARY_API_SECRET
    )


def upload_file(file_obj, filename: str, folder: str = "healthbridge") -> str:
    """
    Uploads an image to Cloudinary and returns the secure URL.
    Raises UploadError when the upload fails or no URL comes back.
    """
    try:
        response = cloudinary.uploader.upload(
            file_obj,
            public_id=filename.rsplit('.', 1)[0] if filename else None,
            folder=folder,
            resource_type="image"
        )
    except Exception as e:
        logger.error(f"Cloudinary upload error for {filename}: {e}")
        raise UploadError(details={"filename": filename}) from e

    url = response.get("secure_url")
    if not url:
        logger.error(f"Cloudinary returned no URL for {filename}")
        raise UploadError(details={"filename": filename})
    return url
