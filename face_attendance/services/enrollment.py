"""
EnrollmentService - validates and publishes new gallery entries.

Image enrollment order:
1. validate identity_id / display_name
2. reject an existing identity_id before any model work
3. require a READY embedder (ModelsUnavailable otherwise)
4. detect faces; none -> NoFaceDetected; several -> the largest box
5. upload the image
6. Gallery.add

If step 6 fails the uploaded image is deleted again, so a failed
enrollment leaves no orphaned image behind.
"""

from typing import Optional, Sequence

from face_attendance.core.exceptions import (
    AppException,
    DuplicateIdentityError,
    NoFaceDetectedError,
    ValidationError,
)
from face_attendance.core.logging import get_logger
from face_attendance.infrastructure.storage import CONTENT_TYPE_EXTENSIONS, object_name_of
from face_attendance.models.domain.identity import GalleryEntry
from face_attendance.services.face_embedder import FaceEmbedder
from face_attendance.services.gallery import Gallery

logger = get_logger(__name__)


def _require(value: Optional[str], field: str) -> str:
    value = (value or "").strip()
    if not value:
        raise ValidationError(f"{field} is required", field=field)
    return value


class EnrollmentService:
    """Orchestrates Gallery, FaceEmbedder and image storage for enrollment."""

    def __init__(
        self,
        gallery: Gallery,
        embedder: FaceEmbedder,
        image_storage,
        max_image_bytes: int = 5 * 1024 * 1024,
    ):
        self.gallery = gallery
        self.embedder = embedder
        self.images = image_storage
        self.max_image_bytes = max_image_bytes

    async def _validate(self, identity_id: str, display_name: str):
        identity_id = _require(identity_id, "identity_id")
        display_name = _require(display_name, "display_name")
        if await self.gallery.exists(identity_id):
            raise DuplicateIdentityError(identity_id)
        return identity_id, display_name

    async def enroll_embedding(
        self,
        identity_id: str,
        display_name: str,
        embedding: Sequence[float],
        image_ref: str,
    ) -> GalleryEntry:
        """
        Enroll with an embedding computed by the client.
        The caller owns image_ref; this service never deletes it.
        """
        identity_id, display_name = await self._validate(identity_id, display_name)
        image_ref = _require(image_ref, "image_ref")
        return await self.gallery.add(identity_id, display_name, embedding, image_ref)

    async def enroll_image(
        self,
        identity_id: str,
        display_name: str,
        image: bytes,
        content_type: str = "image/jpeg",
    ) -> GalleryEntry:
        """
        Enroll from a profile image.

        Raises:
            ValidationError: missing fields, empty or oversized image
            DuplicateIdentityError: identity_id already enrolled
            ModelsUnavailableError: embedder not ready
            NoFaceDetectedError: no face in the image
            InvalidEmbeddingError: embedder output does not fit the gallery
        """
        identity_id, display_name = await self._validate(identity_id, display_name)
        if not image:
            raise ValidationError("Image is empty", field="image")
        if len(image) > self.max_image_bytes:
            raise ValidationError(f"Image too large (max {self.max_image_bytes} bytes)", field="image")
        if content_type not in CONTENT_TYPE_EXTENSIONS:
            raise ValidationError(f"Unsupported image type: {content_type}", field="image")

        detections = await self.embedder.detect(image)
        if not detections:
            raise NoFaceDetectedError()
        if len(detections) > 1:
            logger.warning(f"{len(detections)} faces in enrollment image of {identity_id}, using the largest")
        detection = max(detections, key=lambda d: d.bounding_box.area)

        image_ref = self.images.upload(image, identity_id, content_type)
        try:
            return await self.gallery.add(
                identity_id, display_name, detection.embedding, image_ref, image_owned=True
            )
        except Exception:
            self._discard_image(image_ref)
            raise

    def _discard_image(self, image_ref: str):
        try:
            self.images.delete(image_ref)
            logger.info(f"Removed image {image_ref} after failed enrollment")
        except AppException as e:
            logger.warning(f"Could not remove orphaned image {image_ref}: {e.message}")

    async def on_identity_removed(self, entry: GalleryEntry):
        """
        Gallery removal listener: delete the profile image.

        Only images uploaded by enroll_image are deleted, and only while no
        other identity refers to the same stored object.
        """
        if not entry.image_ref or not entry.image_owned:
            return
        object_name = object_name_of(entry.image_ref)
        sharing = [
            other.identity_id for other in await self.gallery.list()
            if other.identity_id != entry.identity_id and object_name_of(other.image_ref) == object_name
        ]
        if sharing:
            logger.info(f"Keeping image {entry.image_ref}, still used by {sharing[:5]}")
            return
        try:
            self.images.delete(entry.image_ref)
        except AppException as e:
            logger.warning(f"Could not delete image {entry.image_ref} of {entry.identity_id}: {e.message}")
