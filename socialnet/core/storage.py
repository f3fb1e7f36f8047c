"""
AWS S3 image store for post images and avatars.

This provides:
1. Upload of raw image bytes into a folder, returning the public URL
2. Deletion of a previously uploaded image by its URL
3. Replacement (delete old then upload new)
"""

import asyncio
import logging
import uuid
from typing import Optional

from botocore.exceptions import BotoCoreError, ClientError

from socialnet.config import Settings
from socialnet.core.exceptions import ExternalServiceError

logger = logging.getLogger(__name__)


class ImageStore:
    """
    S3-backed image store.

    boto3 calls are blocking, so they run in the default thread pool to
    keep the event loop free.
    """

    def __init__(self, settings: Settings, s3_client=None):
        """Initialize S3 image store."""
        self.settings = settings
        self.s3_client = s3_client
        self.bucket_name = settings.s3_bucket_name

    def _get_s3_client(self):
        """Get or create S3 client."""
        if not self.s3_client:
            self.s3_client = self.settings.get_s3_client()
        if not self.bucket_name or not self.s3_client:
            raise ExternalServiceError("image store", "S3 storage not configured")
        return self.s3_client

    def url_for(self, key: str) -> str:
        return f"{self.settings.s3_base_url}/{key}"

    @staticmethod
    def key_for(folder: str, url: str) -> str:
        """Recover the object key from a URL produced by `upload`."""
        return f"{folder}/{url.rstrip('/').rsplit('/', 1)[-1]}"

    async def upload(
        self, folder: str, image: bytes, content_type: Optional[str] = None
    ) -> str:
        """
        Upload an image into a folder.

        Args:
            folder: Logical folder (posts, avatars)
            image: Raw image bytes
            content_type: MIME type of the image

        Returns:
            Public URL of the stored image

        Raises:
            ExternalServiceError: If S3 rejects the upload
        """
        s3_client = self._get_s3_client()
        key = f"{folder}/{uuid.uuid4().hex}"

        upload_params = {"Bucket": self.bucket_name, "Key": key, "Body": image}
        if content_type:
            upload_params["ContentType"] = content_type

        try:
            loop = asyncio.get_running_loop()
            await loop.run_in_executor(
                None, lambda: s3_client.put_object(**upload_params)
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"S3 upload failed for {key}: {str(e)}")
            raise ExternalServiceError("image store", "Image upload failed") from e

        logger.info(f"Successfully uploaded image to S3: {key}")
        return self.url_for(key)

    async def delete(self, folder: str, url: str) -> None:
        """
        Delete a previously uploaded image.

        Raises:
            ExternalServiceError: If S3 rejects the deletion
        """
        s3_client = self._get_s3_client()
        key = self.key_for(folder, url)

        try:
            loop = asyncio.get_running_loop()
            await loop.run_in_executor(
                None, lambda: s3_client.delete_object(Bucket=self.bucket_name, Key=key)
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"S3 delete failed for {key}: {str(e)}")
            raise ExternalServiceError("image store", "Image deletion failed") from e

        logger.info(f"Successfully deleted image from S3: {key}")

    async def replace(
        self,
        folder: str,
        image: bytes,
        old_url: Optional[str],
        content_type: Optional[str] = None,
    ) -> str:
        """Delete the old image (if any) then upload the new one."""
        if old_url:
            await self.delete(folder, old_url)
        return await self.upload(folder, image, content_type)
