from typing import List

from fastapi import APIRouter, Depends, File, UploadFile

from dintask.core.config import settings
from dintask.core.exceptions import ValidationError
from dintask.core.logging_config import logger
from dintask.modules.auth.dependencies import get_current_user
from dintask.utils.uploads import store_upload, validate_upload

router = APIRouter()


@router.post("/")
async def upload_file(
    image: UploadFile = File(...),
    current_user=Depends(get_current_user)
):
    """Single image or short video; returns its storage URL"""
    url = await store_upload(image)
    logger.info(f"[Upload] {current_user.id} stored {image.filename}")
    return {"success": True, "imageUrl": url}


@router.post("/multiple")
async def upload_files(
    files: List[UploadFile] = File(...),
    current_user=Depends(get_current_user)
):
    if not files:
        raise ValidationError("No files uploaded", field="files")
    if len(files) > settings.MAX_FILES_PER_UPLOAD:
        raise ValidationError(f"You can upload at most {settings.MAX_FILES_PER_UPLOAD} files", field="files")

    # Reject the whole batch before anything is stored
    for file in files:
        validate_upload(file)

    urls = [await store_upload(file) for file in files]
    return {"success": True, "urls": urls}
