"""
Profile image storage.
Uploads enrollment images to a Supabase Storage bucket and removes them
when an identity is deleted. The returned image_ref is the object path
inside the bucket.
"""

import re
import uuid
from typing import Dict

from face_attendance.core.exceptions import StoreError, ValidationError
from face_attendance.core.logging import get_logger
from face_attendance.infrastructure.supabase import SupabaseClient

logger = get_logger(__name__)

CONTENT_TYPE_EXTENSIONS = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/webp": ".webp",
}

MAX_SLUG_LENGTH = 60


def object_name_of(image_ref: str) -> str:
    """Object name inside the bucket for a bare path or a public URL."""
    return image_ref.rstrip("/").split("/")[-1]


def object_name_for(identity_id: str, content_type: str) -> str:
    """
    Build a unique object name: {slug}_{uuid}.ext

    Raises:
        ValidationError: If the content type is not a supported image type
    """
    ext = CONTENT_TYPE_EXTENSIONS.get(content_type)
    if ext is None:
        raise ValidationError(f"Unsupported image type: {content_type}", field="image")
    slug = re.sub(r"[^a-z0-9]+", "-", identity_id.lower()).strip("-")[:MAX_SLUG_LENGTH] or "identity"
    return f"{slug}_{uuid.uuid4().hex[:12]}{ext}"


class SupabaseImageStorage:
    """Supabase Storage bucket for profile images."""

    def __init__(self, supabase_client: SupabaseClient, bucket: str):
        self.client = supabase_client
        self.bucket_name = bucket
        logger.info(f"Image storage initialized: bucket={bucket}")

    def upload(self, image_bytes: bytes, identity_id: str, content_type: str = "image/jpeg") -> str:
        """
        Upload image bytes.

        Returns:
            image_ref (object path inside the bucket)
        """
        object_name = object_name_for(identity_id, content_type)
        try:
            self.client.bucket(self.bucket_name).upload(
                object_name,
                image_bytes,
                {"content-type": content_type}
            )
        except Exception as e:
            logger.error(f"Image upload failed for {identity_id}: {e}")
            raise StoreError(operation="images.upload") from e

        logger.info(f"Uploaded image {object_name} ({len(image_bytes)} bytes)")
        return object_name

    def delete(self, image_ref: str) -> bool:
        """
        Delete image by reference.
        Accepts a bare object path or a public URL ending in it.
        """
        object_name = object_name_of(image_ref)
        if not object_name:
            return False
        try:
            removed = self.client.bucket(self.bucket_name).remove([object_name])
        except Exception as e:
            logger.error(f"Image delete failed for {image_ref}: {e}")
            raise StoreError(operation="images.delete") from e
        return bool(removed)


class InMemoryImageStorage:
    """Process-local image storage."""

    def __init__(self):
        self.objects: Dict[str, bytes] = {}

    def upload(self, image_bytes: bytes, identity_id: str, content_type: str = "image/jpeg") -> str:
        object_name = object_name_for(identity_id, content_type)
        self.objects[object_name] = bytes(image_bytes)
        logger.debug(f"Stored image {object_name} ({len(image_bytes)} bytes)")
        return object_name

    def delete(self, image_ref: str) -> bool:
        object_name = object_name_of(image_ref)
        return self.objects.pop(object_name, None) is not None
