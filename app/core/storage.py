import os
import re
import time
import boto3
import logging
from fastapi import UploadFile

from .config import settings
from .errors import ValidationError, PersistenceError

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_EXTENSIONS = [".jpg", ".jpeg", ".png", ".gif", ".webp"]
IMAGE_PREFIX = "post-images"

def _safe_filename(filename: str) -> str:
    return re.sub(r"[^a-zA-Z0-9._-]", "_", filename or "image")

class R2Storage:
    """Handles image storage using Cloudflare R2, falling back to local disk"""

    def __init__(self):
        """Initialize the R2 client with settings from config"""
        self.client = None
        self.bucket = settings.R2_BUCKET_NAME
        self.public_url = settings.R2_PUBLIC_URL
        self.base_url = settings.BASE_URL
        self.upload_dir = settings.UPLOAD_DIRECTORY

        logger.info(f"Initializing R2Storage with bucket '{self.bucket}'")

        if all([settings.R2_ENDPOINT, settings.R2_ACCESS_KEY_ID, settings.R2_SECRET_ACCESS_KEY]):
            try:
                self.client = boto3.client(
                    's3',
                    endpoint_url=settings.R2_ENDPOINT,
                    aws_access_key_id=settings.R2_ACCESS_KEY_ID,
                    aws_secret_access_key=settings.R2_SECRET_ACCESS_KEY
                )
                logger.info("R2Storage S3 client initialized successfully")
            except Exception as e:
                logger.error(f"Failed to create S3 client: {str(e)}")
                logger.warning("R2 storage will not be available due to initialization failure")
        else:
            missing = []
            if not settings.R2_ENDPOINT:
                missing.append("R2_ENDPOINT")
            if not settings.R2_ACCESS_KEY_ID:
                missing.append("R2_ACCESS_KEY_ID")
            if not settings.R2_SECRET_ACCESS_KEY:
                missing.append("R2_SECRET_ACCESS_KEY")
            logger.warning(f"R2 storage not configured - missing: {', '.join(missing)}; using local disk")

    def build_key(self, owner_id: str, filename: str) -> str:
        """Object key scoped to the uploading user"""
        return f"{IMAGE_PREFIX}/{owner_id}/{int(time.time() * 1000)}-{_safe_filename(filename)}"

    def public_url_for(self, key: str) -> str:
        if self.client and self.public_url:
            return f"{self.public_url}/{key}"
        # Served back through the media router
        return f"{self.base_url}{settings.API_V1_STR}/media/{key}"

    async def upload_image(self, owner_id: str, file: UploadFile) -> str:
        """Store an image for `owner_id` and return the URL to embed in markdown"""
        file_extension = os.path.splitext(file.filename or "")[1].lower()
        if file_extension not in ALLOWED_IMAGE_EXTENSIONS:
            raise ValidationError(
                f"Unsupported file format. Please use one of: {', '.join(ALLOWED_IMAGE_EXTENSIONS)}"
            )

        content = await file.read()
        if len(content) > settings.MAX_UPLOAD_SIZE:
            raise ValidationError("File is too large")

        key = self.build_key(owner_id, file.filename)
        logger.info(f"[UPLOAD] Storing '{file.filename}' for user {owner_id} as '{key}'")

        try:
            if self.client:
                self.client.put_object(
                    Bucket=self.bucket,
                    Key=key,
                    Body=content,
                    ContentType=file.content_type or 'application/octet-stream'
                )
            else:
                local_path = os.path.join(self.upload_dir, key)
                os.makedirs(os.path.dirname(local_path), exist_ok=True)
                with open(local_path, "wb") as out_file:
                    out_file.write(content)
        except Exception as e:
            logger.error(f"[UPLOAD] Failed to store '{key}': {str(e)}")
            raise PersistenceError("Failed to upload image")

        return self.public_url_for(key)

    def read_object(self, key: str):
        """Return (body bytes, content type) or None when the object is missing"""
        if self.client:
            try:
                response = self.client.get_object(Bucket=self.bucket, Key=key)
                return response["Body"].read(), response.get("ContentType", "application/octet-stream")
            except Exception as e:
                logger.warning(f"Failed to retrieve {key} from R2: {str(e)}. Falling back to local storage.")

        local_path = os.path.join(self.upload_dir, key)
        if not os.path.isfile(local_path):
            return None
        with open(local_path, "rb") as f:
            return f.read(), None
