from typing import BinaryIO, Optional
import boto3
from minio import Minio

from dintask.core.config import settings
from dintask.core.exceptions import StorageError
from dintask.core.logging_config import logger


class StorageClient:
    """S3/MinIO storage client for uploaded images and videos"""

    def __init__(self):
        if settings.USE_MINIO:
            self.client = Minio(
                settings.MINIO_ENDPOINT,
                access_key=settings.AWS_ACCESS_KEY_ID,
                secret_key=settings.AWS_SECRET_ACCESS_KEY,
                secure=settings.MINIO_SECURE
            )
            self.is_minio = True
        else:
            self.client = boto3.client(
                's3',
                aws_access_key_id=settings.AWS_ACCESS_KEY_ID,
                aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY,
                region_name=settings.AWS_REGION
            )
            self.is_minio = False

        self.bucket_name = settings.S3_BUCKET_NAME
        self._ensure_bucket_exists()

    def _ensure_bucket_exists(self):
        try:
            if self.is_minio:
                if not self.client.bucket_exists(self.bucket_name):
                    self.client.make_bucket(self.bucket_name)
                    logger.info(f"Created MinIO bucket: {self.bucket_name}")
            else:
                self.client.head_bucket(Bucket=self.bucket_name)
        except Exception as e:
            # Uploads will surface the real error; don't block startup
            logger.error(f"Error ensuring bucket exists: {e}")

    def upload_fileobj(
        self,
        file_obj: BinaryIO,
        object_name: str,
        content_type: Optional[str] = None,
        file_size: Optional[int] = None
    ) -> str:
        """Upload a file-like object and return its permanent public URL"""
        try:
            if self.is_minio:
                if file_size is None:
                    file_obj.seek(0, 2)
                    file_size = file_obj.tell()
                    file_obj.seek(0)
                self.client.put_object(
                    self.bucket_name,
                    object_name,
                    file_obj,
                    file_size,
                    content_type=content_type or "application/octet-stream"
                )
            else:
                extra_args = {'ContentType': content_type} if content_type else {}
                self.client.upload_fileobj(
                    file_obj,
                    self.bucket_name,
                    object_name,
                    ExtraArgs=extra_args
                )
        except Exception as e:
            logger.error(f"Error uploading file object: {e}")
            raise StorageError(f"Upload failed: {e}")

        logger.info(f"Uploaded file object: {object_name}")
        return public_url(object_name)

    def delete_file(self, object_name: str) -> bool:
        try:
            if self.is_minio:
                self.client.remove_object(self.bucket_name, object_name)
            else:
                self.client.delete_object(Bucket=self.bucket_name, Key=object_name)
            return True
        except Exception as e:
            logger.error(f"Error deleting file: {e}")
            return False


def public_base_url() -> str:
    if settings.STORAGE_PUBLIC_URL:
        return settings.STORAGE_PUBLIC_URL.rstrip("/")
    if settings.USE_MINIO:
        scheme = "https" if settings.MINIO_SECURE else "http"
        return f"{scheme}://{settings.MINIO_ENDPOINT}/{settings.S3_BUCKET_NAME}"
    return f"https://{settings.S3_BUCKET_NAME}.s3.{settings.AWS_REGION}.amazonaws.com"


def public_url(object_name: str) -> str:
    return f"{public_base_url()}/{object_name}"


def object_name_from_url(url: Optional[str]) -> Optional[str]:
    """Key of an object stored by us, None for external or empty URLs"""
    prefix = public_base_url() + "/"
    if not url or not url.startswith(prefix):
        return None
    return url[len(prefix):] or None


_storage_client: Optional[StorageClient] = None


def get_storage_client() -> StorageClient:
    """Created on first upload so importing the app needs no storage backend"""
    global _storage_client
    if _storage_client is None:
        _storage_client = StorageClient()
    return _storage_client
