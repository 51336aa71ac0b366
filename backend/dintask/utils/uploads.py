"""Validation and storage of user uploads (images and short videos)"""
import os
from datetime import datetime

from fastapi import UploadFile
from starlette.concurrency import run_in_threadpool

from dintask.core.config import settings
from dintask.core.exceptions import InvalidFileTypeError, ValidationError
from dintask.core.types import generate_uuid
from dintask.core.logging_config import logger
from dintask.utils.storage_client import get_storage_client, object_name_from_url


def file_extension(filename: str) -> str:
    return os.path.splitext(filename or "")[1].lstrip(".").lower()


def validate_upload(file: UploadFile) -> int:
    """Check extension and size; returns the size in bytes"""
    ext = file_extension(file.filename)
    if ext not in settings.ALLOWED_EXTENSIONS:
        raise InvalidFileTypeError(ext or "unknown", settings.ALLOWED_EXTENSIONS)

    file.file.seek(0, 2)
    size = file.file.tell()
    file.file.seek(0)
    if size > settings.MAX_UPLOAD_SIZE:
        raise ValidationError(
            f"File too large. Maximum size is {settings.MAX_UPLOAD_SIZE // (1024 * 1024)}MB", field="file"
        )
    return size


async def store_upload(file: UploadFile, folder: str = None) -> str:
    """Validate and upload; returns the permanent public URL"""
    size = validate_upload(file)
    folder = folder or settings.UPLOAD_FOLDER
    object_name = f"{folder}/{datetime.utcnow():%Y/%m}/{generate_uuid()}.{file_extension(file.filename)}"
    client = get_storage_client()
    return await run_in_threadpool(
        client.upload_fileobj, file.file, object_name, file.content_type, size
    )


async def discard_upload(url: str) -> bool:
    """Remove a file we stored earlier; URLs pointing elsewhere are left alone"""
    object_name = object_name_from_url(url)
    if object_name is None:
        return False
    deleted = await run_in_threadpool(get_storage_client().delete_file, object_name)
    if deleted:
        logger.info(f"Removed replaced upload: {object_name}")
    return deleted
