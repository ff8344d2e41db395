"""
Upload Routes

POST /upload - Presigned PUT URL for a direct-to-bucket upload
GET /upload/formats - Allowed file types per folder and size limit
"""

import logging

from fastapi import APIRouter, Depends

from gigit.core.auth import get_current_user
from gigit.services.storage_service import get_storage_client
from gigit.utils.file_upload import generate_file_key, get_supported_formats, validate_upload
from gigit.schemas.schemas import UploadRequest, UploadResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/upload", tags=["Upload"])


@router.post("", response_model=UploadResponse)
async def create_upload_url(data: UploadRequest, user: dict = Depends(get_current_user)):
    """
    Validate the file and return a presigned upload URL.

    The client PUTs the file to upload_url with the same Content-Type, then
    stores public_url (or key) on the profile/portfolio record.
    """
    validate_upload(data.folder, data.content_type, data.size)

    storage = get_storage_client()
    key = generate_file_key(data.folder, user["user_id"], data.filename)
    upload_url = storage.presign_upload(key, data.content_type)

    logger.info("Presigned upload %s for user %s", key, user["user_id"])
    return UploadResponse(upload_url=upload_url, key=key, public_url=storage.get_public_url(key))


@router.get("/formats")
async def upload_formats():
    return get_supported_formats()
