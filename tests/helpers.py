"""Shared test fixtures."""

from typing import List, Optional, Sequence

from face_attendance.models.domain.identity import GalleryEntry
from face_attendance.models.domain.recognition import BoundingBox, Detection
from face_attendance.services.face_embedder import FaceEmbedder


class ScriptedEmbedder(FaceEmbedder):
    """FaceEmbedder returning canned detections."""

    name = "scripted"

    def __init__(self, detections: Optional[List[Detection]] = None, fail: bool = False):
        super().__init__()
        self.detections = detections or []
        self.fail = fail
        self.load_calls = 0
        self.detect_calls = 0

    def _load(self):
        self.load_calls += 1
        if self.fail:
            raise RuntimeError("model pack missing")

    def _detect(self, image: bytes) -> List[Detection]:
        self.detect_calls += 1
        return list(self.detections)


def detection(embedding: Sequence[float], width: float = 100, height: float = 100) -> Detection:
    return Detection(
        bounding_box=BoundingBox(x=0, y=0, width=width, height=height),
        embedding=tuple(embedding),
    )


def entry(identity_id: str, embedding: Sequence[float], display_name: str = None) -> GalleryEntry:
    return GalleryEntry(
        identity_id=identity_id,
        display_name=display_name or identity_id,
        embedding=tuple(embedding),
        image_ref=f"{identity_id}.jpg",
    )
