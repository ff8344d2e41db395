"""
Storage Service - S3-compatible object store (Cloudflare R2, MinIO, AWS S3).

Clients upload directly to the bucket with presigned PUT URLs; the API only
signs URLs and never streams file bodies.
"""

import logging
from typing import Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from gigit.core.config import get_settings
from gigit.core.exceptions import StorageNotConfigured

logger = logging.getLogger(__name__)


class StorageClient:
    """Presigned URL and object helpers for the uploads bucket."""

    def __init__(self):
        settings = get_settings()
        if not settings.storage_access_key_id or not settings.storage_secret_access_key:
            raise StorageNotConfigured("Object storage credentials are not configured")

        self.bucket = settings.storage_bucket_name
        self.public_url = settings.storage_public_url.rstrip("/")
        self.expires_in = settings.upload_url_expire_seconds
        self.client = boto3.client(
            "s3",
            endpoint_url=settings.storage_endpoint_url or None,
            aws_access_key_id=settings.storage_access_key_id,
            aws_secret_access_key=settings.storage_secret_access_key,
            region_name=settings.storage_region,
            config=Config(signature_version="s3v4"),
        )

    def presign_upload(self, key: str, content_type: str, expires_in: Optional[int] = None) -> str:
        """Presigned PUT URL; the client must send the same Content-Type."""
        return self.client.generate_presigned_url(
            "put_object",
            Params={"Bucket": self.bucket, "Key": key, "ContentType": content_type},
            ExpiresIn=expires_in or self.expires_in,
        )

    def presign_download(self, key: str, expires_in: Optional[int] = None) -> str:
        return self.client.generate_presigned_url(
            "get_object",
            Params={"Bucket": self.bucket, "Key": key},
            ExpiresIn=expires_in or self.expires_in,
        )

    def delete(self, key: str) -> bool:
        try:
            self.client.delete_object(Bucket=self.bucket, Key=key)
        except (BotoCoreError, ClientError):
            logger.exception("Failed to delete object %s", key)
            return False
        return True

    def get_public_url(self, key: str) -> str:
        return f"{self.public_url}/{key}"

    def extract_key(self, url: str) -> Optional[str]:
        """Key for a URL under the public bucket URL, or None for foreign URLs."""
        prefix = f"{self.public_url}/"
        if not url.startswith(prefix):
            return None
        return url[len(prefix):] or None


# Singleton
_storage_client: StorageClient = None

def get_storage_client() -> StorageClient:
    global _storage_client
    if _storage_client is None:
        _storage_client = StorageClient()
    return _storage_client
