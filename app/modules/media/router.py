from fastapi import APIRouter, Depends, File, UploadFile, status
from app.core.context import get_storage
from app.core.config import settings
from app.core.storage import R2Storage
from app.deps import get_current_user
from app.modules.media.service import MediaService
from app.modules.user_management.models.user import User
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix=f"{settings.API_V1_STR}/media", tags=["media"])

def get_media_service(storage: R2Storage = Depends(get_storage)):
    return MediaService(storage)

@router.post("/images", status_code=status.HTTP_201_CREATED)
async def upload_image(
    image: UploadFile = File(...),
    current_user: User = Depends(get_current_user),
    media_service: MediaService = Depends(get_media_service),
):
    """Upload an image for the post editor; the returned URL goes into the markdown"""
    url = await media_service.upload_image(current_user, image)
    return {"url": url}

@router.get("/{path:path}")
def serve_media(path: str, media_service: MediaService = Depends(get_media_service)):
    return media_service.get_media(path)
