# 📄 File: app/shared/infrastructure/storage/supabase_storage.py

# 🧭 Purpose (Layman Explanation):
# This file uploads the photo of every scanned plant to cloud storage and hands back a link,
# so the scan history can show the picture later.

# 🧪 Purpose (Technical Summary):
# Supabase Storage client wrapper for scan photo uploads with organized paths,
# public URL generation, and error translation. The supabase-py client is synchronous,
# so calls are moved off the event loop.

# 🔗 Dependencies:
# - supabase: Storage client
# - asyncio: Thread offloading of blocking storage calls

# 🔄 Connected Modules / Calls From:
# Called by: IdentificationService (scan photo upload after a classifier call)
# Connects to: Supabase cloud storage bucket configured by SUPABASE_STORAGE_BUCKET

import asyncio
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from supabase import Client, create_client

from app.shared.config.settings import Settings
from app.shared.core.exceptions import FileStorageError
from app.shared.utils.logging import get_logger

logger = get_logger(__name__)


class SupabaseStorageClient:
    """
    Supabase Storage client for scan photos.

    Handles:
    - Scan photo uploads under scans/{user_id}/
    - Public URL generation
    - Storage error translation
    """

    SCAN_PATH_TEMPLATE = "scans/{user_id}/{timestamp}_{fingerprint}.jpg"

    def __init__(self, settings: Settings, client: Optional[Client] = None):
        """Initialize Supabase Storage client with configuration."""
        self.supabase_url = settings.SUPABASE_URL
        self.supabase_key = settings.SUPABASE_SERVICE_ROLE_KEY
        self.bucket_name = settings.SUPABASE_STORAGE_BUCKET
        self.client: Optional[Client] = client

    async def initialize(self) -> None:
        """Create the Supabase client."""
        if self.client is not None:
            return

        if not (self.supabase_url and self.supabase_key):
            raise FileStorageError("Supabase credentials are not configured", operation="initialize")

        try:
            self.client = create_client(self.supabase_url, self.supabase_key)
            logger.info("Supabase Storage client initialized", bucket=self.bucket_name)
        except Exception as e:
            logger.error(f"Failed to initialize Supabase Storage: {e}")
            raise FileStorageError(f"Storage initialization failed: {e}", operation="initialize") from e

    def build_scan_path(self, user_id: Optional[str], fingerprint: str) -> str:
        """Generate an organized storage path for a scan photo."""
        timestamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
        return self.SCAN_PATH_TEMPLATE.format(
            user_id=user_id or "anonymous",
            timestamp=timestamp,
            fingerprint=fingerprint[:12],
        )

    def _upload_sync(self, storage_path: str, data: bytes, content_type: str) -> str:
        bucket = self.client.storage.from_(self.bucket_name)
        bucket.upload(
            path=storage_path,
            file=data,
            file_options={
                "content-type": content_type,
                "cache-control": "3600",
                "upsert": "true",
            },
        )
        return bucket.get_public_url(storage_path)

    async def upload_scan_image(
        self,
        data: bytes,
        fingerprint: str,
        user_id: Optional[str] = None,
        content_type: str = "image/jpeg",
    ) -> str:
        """
        Upload a normalized scan photo.

        Args:
            data: Normalized image bytes
            fingerprint: Content fingerprint, used in the file name
            user_id: Owner of the scan, "anonymous" when omitted
            content_type: MIME type of the bytes

        Returns:
            Public URL of the stored photo

        Raises:
            FileStorageError: If the upload fails
        """
        if self.client is None:
            await self.initialize()

        storage_path = self.build_scan_path(user_id, fingerprint)

        try:
            public_url = await asyncio.to_thread(self._upload_sync, storage_path, data, content_type)
        except Exception as e:
            raise FileStorageError(
                f"Upload failed: {e}",
                operation="upload",
                storage_path=storage_path,
            ) from e

        logger.info(f"Scan photo uploaded: {storage_path}", size_bytes=len(data))
        return public_url

    async def health_check(self) -> Dict[str, Any]:
        """Report whether the storage client is ready."""
        return {
            "status": "healthy" if self.client is not None else "not_initialized",
            "bucket": self.bucket_name,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
