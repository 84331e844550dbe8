"""
Recognition API.
- POST /recognitions
"""

from fastapi import APIRouter, Depends

from face_attendance.core.responses import ApiResponse
from face_attendance.models.requests import RecognitionRequest
from face_attendance.services.recognition import RecognitionService
from .dependencies import get_recognition

router = APIRouter()


@router.post("")
async def recognize(
    request: RecognitionRequest,
    recognition: RecognitionService = Depends(get_recognition),
):
    """
    Match one frame of query embeddings against the gallery.
    Accepted matches are marked present when mark_attendance is set.
    """
    threshold = request.threshold if request.threshold is not None else recognition.default_threshold
    results = await recognition.recognize(
        request.embeddings,
        threshold=threshold,
        mark_attendance=request.mark_attendance,
        claim=request.claim,
    )
    matched = sum(1 for r in results if r.match is not None)
    return ApiResponse.ok(results, meta={"threshold": threshold, "matched": matched})
