"""Supabase Storage wrapper for company logos.

Bucket: LOGO_BUCKET (default "company_logos"), public read.
Object path: "Company Logos/company-{company_id}-{epoch_ms}.{ext}"
"""

import logging
from typing import Optional
from urllib.parse import unquote, urlparse

from unshared_api.config.env import get_logo_bucket
from unshared_api.errors import ConfigurationError, UpstreamError
from unshared_api.supabase_client import get_supabase_admin_client

logger = logging.getLogger(__name__)

LOGO_FOLDER = "Company Logos"


def logo_object_path(company_id: str, timestamp_ms: int, extension: str) -> str:
    return f"{LOGO_FOLDER}/company-{company_id}-{timestamp_ms}.{extension}"


def path_from_public_url(public_url: str, bucket: str) -> Optional[str]:
    """Recover an object path from a public URL (rows written before logo_path existed).

    Public URLs look like
    https://<ref>.supabase.co/storage/v1/object/public/<bucket>/<path>
    """
    path = unquote(urlparse(public_url).path)
    anchor = f"/{bucket}/"
    index = path.find(anchor)
    if index == -1:
        return None
    object_path = path[index + len(anchor):]
    return object_path or None


class LogoStorage:
    """Upload / remove / public URL over one storage bucket."""

    def __init__(self, client=None, bucket: Optional[str] = None):
        self._client = client
        self.bucket = bucket or get_logo_bucket()

    def _bucket(self):
        if self._client is None:
            try:
                self._client = get_supabase_admin_client()
            except RuntimeError as e:
                raise ConfigurationError() from e
        return self._client.storage.from_(self.bucket)

    def upload(self, path: str, content: bytes, content_type: str) -> str:
        """Upload (upsert) an object and return its public URL."""
        bucket = self._bucket()
        try:
            bucket.upload(
                path,
                content,
                file_options={"content-type": content_type, "upsert": "true"},
            )
        except Exception as e:
            logger.error("logo.upload.failed", extra={"path": path, "error": str(e)})
            raise UpstreamError("Failed to upload logo") from e
        return bucket.get_public_url(path)

    def remove(self, path: str) -> None:
        bucket = self._bucket()
        try:
            bucket.remove([path])
        except Exception as e:
            raise UpstreamError("Failed to remove logo") from e


def get_logo_storage() -> LogoStorage:
    return LogoStorage()
