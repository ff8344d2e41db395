"""
File Upload Utility - validation and object keys for presigned uploads.

Allowed types per folder:
- resumes: PDF, Word (.doc/.docx)
- profiles, portfolios: JPEG, PNG, WebP
- certifications, licenses: PDF, JPEG, PNG

Max file size: 10MB
"""

import re
import time
from typing import Optional
from fastapi import HTTPException


MAX_FILE_SIZE_MB = 10
MAX_FILE_SIZE_BYTES = MAX_FILE_SIZE_MB * 1024 * 1024

ALLOWED_FILE_TYPES = {
    "resumes": [
        "application/pdf",
        "application/msword",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ],
    "profiles": ["image/jpeg", "image/png", "image/webp"],
    "portfolios": ["image/jpeg", "image/png", "image/webp"],
    "certifications": ["application/pdf", "image/jpeg", "image/png"],
    "licenses": ["application/pdf", "image/jpeg", "image/png"],
}

_UNSAFE_FILENAME_CHARS = re.compile(r"[^a-zA-Z0-9.-]")


def sanitize_filename(filename: str) -> str:
    """Replace everything outside letters, digits, dot and dash with '_'."""
    return _UNSAFE_FILENAME_CHARS.sub("_", filename)


def generate_file_key(folder: str, user_id: str, filename: str, timestamp_ms: Optional[int] = None) -> str:
    """Object key: {folder}/{user_id}/{epoch_ms}-{sanitized filename}"""
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    return f"{folder}/{user_id}/{timestamp_ms}-{sanitize_filename(filename)}"


def validate_upload(folder: str, content_type: str, size: Optional[int] = None) -> None:
    """
    Check an upload request against the folder rules.

    Raises:
        HTTPException 400 for an unknown folder or a disallowed type,
        413 when the declared size is over the limit
    """
    if folder not in ALLOWED_FILE_TYPES:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid folder '{folder}'. Allowed: {', '.join(ALLOWED_FILE_TYPES)}"
        )

    allowed = ALLOWED_FILE_TYPES[folder]
    if content_type not in allowed:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid file type. Allowed types for {folder}: {', '.join(allowed)}"
        )

    if size is not None and size > MAX_FILE_SIZE_BYTES:
        raise HTTPException(
            status_code=413,
            detail=f"File too large. Maximum size: {MAX_FILE_SIZE_MB}MB"
        )


def get_supported_formats() -> dict:
    """Get info about supported file formats."""
    return {
        "folders": {folder: list(types) for folder, types in ALLOWED_FILE_TYPES.items()},
        "max_size_mb": MAX_FILE_SIZE_MB,
        "max_size_bytes": MAX_FILE_SIZE_BYTES
    }
