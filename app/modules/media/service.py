from app.core.storage import R2Storage, IMAGE_PREFIX
from fastapi import UploadFile
import logging
import posixpath
from starlette.responses import StreamingResponse

from app.core.errors import NotFoundError
from app.modules.moderation.services.gate import ensure_not_suspended
from app.modules.user_management.models.user import User

logger = logging.getLogger(__name__)

CONTENT_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
}

def normalize_media_path(path: str) -> str:
    """Reject keys that escape the image prefix (absolute paths, '..' segments)"""
    normalized = posixpath.normpath(path or "")
    if (
        path.startswith("/")
        or ".." in normalized.split("/")
        or not normalized.startswith(f"{IMAGE_PREFIX}/")
    ):
        raise NotFoundError("File not found")
    return normalized

class MediaService:
    def __init__(self, r2_storage: R2Storage):
        self.r2_storage = r2_storage

    async def upload_image(self, user: User, file: UploadFile) -> str:
        """Store a post image for `user` and return its public URL"""
        ensure_not_suspended(user)
        url = await self.r2_storage.upload_image(user.id, file)
        logger.info(f"User {user.id} uploaded image {url}")
        return url

    def get_media(self, path: str) -> StreamingResponse:
        """Stream an image from R2 storage with local storage fallback"""
        key = normalize_media_path(path)
        found = self.r2_storage.read_object(key)
        if found is None:
            logger.info(f"File {key} not found")
            raise NotFoundError("File not found")

        content, content_type = found
        if not content_type:
            content_type = CONTENT_TYPES.get(posixpath.splitext(key)[1].lower(), "application/octet-stream")

        return StreamingResponse(
            iter([content]),
            media_type=content_type,
            headers={
                "Cache-Control": "public, max-age=86400",
                "Content-Disposition": f"inline; filename={key.split('/')[-1]}",
            },
        )
