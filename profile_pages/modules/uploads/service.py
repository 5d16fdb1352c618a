from supabase import Client
from profile_pages.config.settings import settings
from profile_pages.modules.auth.service import AuthService
from profile_pages.modules.uploads.s3_storage import S3Storage
from typing import List, Optional, Tuple
from fastapi import HTTPException, UploadFile
import asyncio
import logging
import os
import re
import secrets
import time

logger = logging.getLogger(__name__)

FOLDER_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")


def bucket_missing_detail(bucket: str) -> str:
    return (
        f"Storage bucket '{bucket}' does not exist. In the Supabase dashboard open "
        f"Storage > Create bucket and create a bucket named '{bucket}' with Public enabled."
    )


def build_object_path(folder: str, extension: str) -> str:
    """<folder>/<epoch-ms>-<random>.<ext>"""
    return f"{folder}/{int(time.time() * 1000)}-{secrets.token_hex(4)}.{extension}"


class UploadService:
    def __init__(
        self,
        supabase: Client,
        auth: Optional[AuthService] = None,
        token: Optional[str] = None,
        s3_storage: Optional[S3Storage] = None,
    ):
        self.supabase = supabase
        self.auth = auth or AuthService(supabase)
        self.token = token
        self.bucket = settings.storage_bucket
        self.s3_storage = s3_storage

    def _require_admin(self):
        self.auth.ensure_admin(self.token)

    def validate_image(self, filename: Optional[str], size: int) -> str:
        """Return the lower-cased extension, or raise before anything is uploaded."""
        allowed = settings.get_allowed_image_extensions()
        extension = os.path.splitext(filename or "")[1].lstrip(".").lower()
        if not extension or extension not in allowed:
            raise HTTPException(
                status_code=400,
                detail=f"Unsupported file type. Allowed types: {', '.join(allowed)}"
            )
        if size > settings.max_upload_bytes:
            limit_mb = settings.max_upload_bytes // (1024 * 1024)
            raise HTTPException(status_code=413, detail=f"File must be {limit_mb} MB or smaller")
        return extension

    async def _read_and_validate(self, file: UploadFile) -> Tuple[bytes, str, str]:
        content = await file.read()
        extension = self.validate_image(file.filename, len(content))
        content_type = file.content_type or f"image/{extension}"
        return content, extension, content_type

    def _store(self, content: bytes, object_path: str, content_type: str) -> str:
        if self.s3_storage:
            try:
                return self.s3_storage.upload_file(content, object_path, content_type)
            except Exception as e:
                raise HTTPException(status_code=500, detail=f"Failed to upload to S3: {str(e)}")

        try:
            self.supabase.storage.from_(self.bucket).upload(
                object_path,
                content,
                file_options={"content-type": content_type, "upsert": "false"}
            )
        except Exception as e:
            error_message = str(e)
            logger.error(f"Supabase Storage upload failed for {object_path}: {error_message}")
            if "not found" in error_message.lower():
                raise HTTPException(status_code=500, detail=bucket_missing_detail(self.bucket))
            raise HTTPException(status_code=500, detail=error_message or "Image upload failed")

        public_url = self.supabase.storage.from_(self.bucket).get_public_url(object_path)
        if not public_url:
            raise HTTPException(status_code=500, detail="Could not resolve the public URL of the uploaded image")
        logger.info(f"Uploaded image {object_path}")
        return public_url

    def _check_folder(self, folder: str) -> str:
        if not FOLDER_PATTERN.match(folder or ""):
            raise HTTPException(status_code=400, detail="Invalid upload folder")
        return folder

    async def upload_image(self, file: UploadFile, folder: str = "templates") -> str:
        """Upload one image (admin only) and return its public URL"""
        self._require_admin()
        folder = self._check_folder(folder)
        content, extension, content_type = await self._read_and_validate(file)
        return await asyncio.to_thread(
            self._store, content, build_object_path(folder, extension), content_type
        )

    async def upload_images(self, files: List[UploadFile], folder: str = "templates") -> List[str]:
        """Validate every file, then upload them concurrently.

        The first failed upload is raised; files that already made it are not removed.
        """
        self._require_admin()
        folder = self._check_folder(folder)
        if not files:
            raise HTTPException(status_code=400, detail="No files were provided")

        prepared = [await self._read_and_validate(f) for f in files]
        urls = await asyncio.gather(*(
            asyncio.to_thread(self._store, content, build_object_path(folder, extension), content_type)
            for content, extension, content_type in prepared
        ))
        return list(urls)

    def delete_image(self, url_or_path: str) -> bool:
        """Delete an uploaded image by public URL or object path (admin only)"""
        self._require_admin()

        if self.s3_storage:
            key = self.s3_storage.key_from_url(url_or_path)
            if not key:
                raise HTTPException(status_code=400, detail="Invalid file path")
            return self.s3_storage.delete_file(key)

        match = re.search(rf"{re.escape(self.bucket)}/(.+)$", url_or_path)
        if not match:
            raise HTTPException(status_code=400, detail="Invalid file path")

        try:
            self.supabase.storage.from_(self.bucket).remove([match.group(1)])
            return True
        except Exception as e:
            logger.error(f"Failed to delete image {match.group(1)}: {e}")
            return False
