"""
FaceEmbedder capability.

Turns an image into zero or more detections (bounding box + embedding).
Model loading is tracked by an explicit state machine instead of a
module-level "models loaded" flag:

    UNINITIALIZED -> LOADING -> READY
                             -> FAILED

detect() is only allowed in READY; any other state raises
ModelsUnavailableError, which callers must keep distinct from
"no face found" (an empty detection list).

Concrete embedders implement _load() and _detect().
"""

import asyncio
from enum import Enum
from typing import List, Optional

from face_attendance.core.exceptions import ModelsUnavailableError
from face_attendance.core.logging import get_logger
from face_attendance.models.domain.recognition import Detection

logger = get_logger(__name__)


class EmbedderState(str, Enum):
    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"


class FaceEmbedder:
    """Base class managing the model lifecycle."""

    name = "base"

    def __init__(self):
        self._state = EmbedderState.UNINITIALIZED
        self._error: Optional[str] = None
        self._lock = asyncio.Lock()

    @property
    def state(self) -> EmbedderState:
        return self._state

    @property
    def error(self) -> Optional[str]:
        """Reason for the FAILED state."""
        return self._error

    def is_ready(self) -> bool:
        return self._state == EmbedderState.READY

    async def initialize(self) -> bool:
        """
        Load models once.
        Concurrent callers wait for the same load. A FAILED embedder stays
        failed until reset() is called.

        Returns:
            True if the embedder is READY
        """
        async with self._lock:
            if self._state in (EmbedderState.READY, EmbedderState.FAILED):
                return self.is_ready()

            self._state = EmbedderState.LOADING
            logger.info(f"Loading face embedder '{self.name}'...")
            try:
                await asyncio.to_thread(self._load)
            except Exception as e:
                self._state = EmbedderState.FAILED
                self._error = f"{type(e).__name__}: {e}"
                logger.error(f"Face embedder '{self.name}' failed to load: {self._error}")
                return False

            self._state = EmbedderState.READY
            self._error = None
            logger.info(f"Face embedder '{self.name}' ready")
            return True

    def reset(self):
        """Return a FAILED embedder to UNINITIALIZED so it can be retried."""
        if self._state == EmbedderState.FAILED:
            self._state = EmbedderState.UNINITIALIZED
            self._error = None

    async def detect(self, image: bytes) -> List[Detection]:
        """
        Detect faces and compute their embeddings.

        Returns:
            Detections, possibly empty

        Raises:
            ModelsUnavailableError: embedder is not READY
        """
        if not self.is_ready():
            raise ModelsUnavailableError(self._state.value)
        detections = await asyncio.to_thread(self._detect, image)
        logger.debug(f"Embedder '{self.name}' found {len(detections)} faces")
        return detections

    # ==================== Implementation hooks ====================

    def _load(self):
        raise NotImplementedError

    def _detect(self, image: bytes) -> List[Detection]:
        raise NotImplementedError


class UnconfiguredEmbedder(FaceEmbedder):
    """
    Placeholder when EMBEDDER_BACKEND=none.
    Clients send precomputed embeddings; image enrollment reports
    ModelsUnavailable.
    """

    name = "none"

    def _load(self):
        raise RuntimeError("No face embedder configured (set EMBEDDER_BACKEND)")


def create_embedder(settings) -> FaceEmbedder:
    """Create the embedder for the configured backend."""
    if settings.embedder_backend == "insightface":
        from face_attendance.services.insightface_embedder import InsightFaceEmbedder
        return InsightFaceEmbedder(model_name=settings.insightface_model)
    return UnconfiguredEmbedder()
