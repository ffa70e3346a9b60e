"""Media service: uploads to MinIO and presigned upload URLs."""

import io
import logging
import os
import uuid
from datetime import timedelta
from typing import List

from fastapi import UploadFile
from minio import Minio
from minio.error import S3Error

from tms_backend.core.config import settings
from tms_backend.core.constants import MediaType
from tms_backend.core.exceptions import BadRequestError, StorageError

logger = logging.getLogger("tms")

IMAGE_CONTENT_TYPES = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/webp": ".webp",
}
DOC_CONTENT_TYPES = {
    "application/pdf": ".pdf",
    "application/msword": ".doc",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": ".docx",
    "text/plain": ".txt",
}
MAX_IMAGE_BYTES = 5 * 1024 * 1024
MAX_DOC_BYTES = 10 * 1024 * 1024


class MediaService:
    """Stores user media in the configured MinIO bucket."""

    def __init__(self):
        self.client = Minio(
            settings.MINIO_ENDPOINT,
            access_key=settings.MINIO_ACCESS_KEY,
            secret_key=settings.MINIO_SECRET_KEY,
            secure=settings.MINIO_SECURE,
            region=settings.MINIO_REGION,
        )
        self.bucket = settings.MINIO_BUCKET

    def ensure_bucket(self) -> None:
        """Create the default bucket if it doesn't exist."""
        if not self.client.bucket_exists(self.bucket):
            self.client.make_bucket(self.bucket)

    def object_url(self, key: str) -> str:
        scheme = "https" if settings.MINIO_SECURE else "http"
        return f"{scheme}://{settings.MINIO_ENDPOINT}/{self.bucket}/{key}"

    @staticmethod
    def build_key(media_type: MediaType, user_id: str, extension: str) -> str:
        return f"{media_type.value}/{user_id}/{uuid.uuid4().hex}{extension}"

    def upload_bytes(self, key: str, content: bytes, content_type: str) -> str:
        try:
            self.client.put_object(
                self.bucket,
                key,
                io.BytesIO(content),
                length=len(content),
                content_type=content_type,
            )
        except S3Error as e:
            raise StorageError(f"Failed to upload to MinIO: {e}")
        return self.object_url(key)

    async def upload_files(
        self,
        files: List[UploadFile],
        media_type: MediaType,
        user_id: str,
        documents: bool = False,
    ) -> List[dict]:
        """Validate and upload every file; nothing is uploaded if one is invalid."""
        allowed = DOC_CONTENT_TYPES if documents else IMAGE_CONTENT_TYPES
        max_bytes = MAX_DOC_BYTES if documents else MAX_IMAGE_BYTES

        prepared = []
        for upload in files:
            content_type = upload.content_type or ""
            if content_type not in allowed:
                raise BadRequestError(f"Unsupported file type: {content_type or 'unknown'}")
            content = await upload.read()
            if len(content) > max_bytes:
                raise BadRequestError(f"File {upload.filename} exceeds {max_bytes // (1024 * 1024)}MB")
            ext = os.path.splitext(upload.filename or "")[1].lower() or allowed[content_type]
            prepared.append((content, content_type, ext))

        results = []
        for content, content_type, ext in prepared:
            key = self.build_key(media_type, user_id, ext)
            url = self.upload_bytes(key, content, content_type)
            results.append({"url": url, "key": key, "content_type": content_type, "size": len(content)})
        logger.info("Uploaded %d %s file(s) for user %s", len(results), media_type.value, user_id)
        return results

    def presigned_upload(
        self,
        filename: str,
        content_type: str,
        media_type: MediaType,
        user_id: str,
        documents: bool = False,
    ) -> dict:
        """Presigned PUT URL; images expire quicker than documents."""
        allowed = DOC_CONTENT_TYPES if documents else IMAGE_CONTENT_TYPES
        if content_type not in allowed:
            raise BadRequestError(f"Unsupported file type: {content_type}")
        expires_in = settings.MEDIA_DOC_URL_EXPIRES if documents else settings.MEDIA_IMAGE_URL_EXPIRES
        ext = os.path.splitext(filename)[1].lower() or allowed[content_type]
        key = self.build_key(media_type, user_id, ext)
        try:
            upload_url = self.client.presigned_put_object(
                self.bucket, key, expires=timedelta(seconds=expires_in)
            )
        except S3Error as e:
            raise StorageError(f"Failed to generate presigned URL: {e}")
        return {
            "upload_url": upload_url,
            "object_url": self.object_url(key),
            "key": key,
            "expires_in": expires_in,
        }


media_service = MediaService()
