"""
Identities API.
- GET    /identities
- GET    /identities/{identity_id}
- POST   /identities
- POST   /identities/enroll
- GET    /identities/{identity_id}/exists
- DELETE /identities/{identity_id}
"""

from fastapi import APIRouter, Depends, File, Form, UploadFile

from face_attendance.core.logging import get_logger
from face_attendance.core.responses import ApiResponse
from face_attendance.models.requests import IdentityCreate
from face_attendance.services.enrollment import EnrollmentService
from face_attendance.services.gallery import Gallery
from .dependencies import get_enrollment, get_gallery

logger = get_logger(__name__)
router = APIRouter()


@router.get("")
async def list_identities(gallery: Gallery = Depends(get_gallery)):
    """List enrolled identities, newest first. Embeddings are not included."""
    entries = await gallery.list()
    return ApiResponse.ok([entry.to_summary() for entry in entries])


@router.post("", status_code=201)
async def create_identity(
    data: IdentityCreate,
    enrollment: EnrollmentService = Depends(get_enrollment),
):
    """Enroll an identity with an embedding computed by the client."""
    entry = await enrollment.enroll_embedding(
        data.identity_id,
        data.display_name,
        data.embedding,
        data.image_ref,
    )
    return ApiResponse.ok(entry)


@router.post("/enroll", status_code=201)
async def enroll_from_image(
    identity_id: str = Form(...),
    display_name: str = Form(...),
    image: UploadFile = File(...),
    enrollment: EnrollmentService = Depends(get_enrollment),
):
    """
    Enroll an identity from a profile image.
    The face embedding is computed server-side by the configured embedder.
    """
    content = await image.read()
    logger.info(f"Enrollment image for {identity_id}: {len(content)} bytes, {image.content_type}")
    entry = await enrollment.enroll_image(
        identity_id,
        display_name,
        content,
        content_type=image.content_type or "image/jpeg",
    )
    return ApiResponse.ok(entry)


@router.get("/{identity_id}")
async def get_identity(identity_id: str, gallery: Gallery = Depends(get_gallery)):
    return ApiResponse.ok(await gallery.get(identity_id))


@router.get("/{identity_id}/exists")
async def identity_exists(identity_id: str, gallery: Gallery = Depends(get_gallery)):
    return ApiResponse.ok({"exists": await gallery.exists(identity_id)})


@router.delete("/{identity_id}")
async def delete_identity(identity_id: str, gallery: Gallery = Depends(get_gallery)):
    """Delete identity together with its attendance records and profile image."""
    entry = await gallery.remove(identity_id)
    return ApiResponse.deleted("Identity", "identity_id", entry.identity_id)
