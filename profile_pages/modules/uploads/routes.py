from fastapi import APIRouter, Depends, UploadFile, File, Form
from profile_pages.database.supabase_client import get_supabase
from profile_pages.config.settings import settings
from profile_pages.modules.uploads.schemas import ImageUploadResponse, ImageDeleteResponse
from profile_pages.modules.uploads.service import UploadService
from profile_pages.modules.uploads.s3_storage import S3Storage
from profile_pages.modules.auth.service import AuthService
from profile_pages.core.dependencies import get_auth_service, get_access_token
from supabase import Client
from typing import List, Optional
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/uploads", tags=["uploads"])


def get_s3_storage() -> Optional[S3Storage]:
    if not settings.s3_configured:
        return None
    try:
        return S3Storage()
    except Exception as e:
        logger.warning(f"S3 storage initialization failed ({str(e)}), will use Supabase Storage")
        return None


def get_upload_service(
    supabase: Client = Depends(get_supabase),
    auth: AuthService = Depends(get_auth_service),
    token: Optional[str] = Depends(get_access_token),
    s3_storage: Optional[S3Storage] = Depends(get_s3_storage),
) -> UploadService:
    return UploadService(supabase, auth=auth, token=token, s3_storage=s3_storage)


@router.post("/images", response_model=ImageUploadResponse, status_code=201)
async def upload_images(
    files: List[UploadFile] = File(...),
    folder: str = Form("templates"),
    service: UploadService = Depends(get_upload_service)
):
    """Upload one or more images (admin only); returns public URLs in upload order"""
    return ImageUploadResponse(urls=await service.upload_images(files, folder))


@router.delete("/images", response_model=ImageDeleteResponse)
async def delete_image(
    url: str,
    service: UploadService = Depends(get_upload_service)
):
    """Delete an uploaded image by its public URL (admin only)"""
    return ImageDeleteResponse(deleted=service.delete_image(url))
