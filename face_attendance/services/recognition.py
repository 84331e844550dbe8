"""
RecognitionService - one frame from embeddings to attendance.

Takes the query embeddings of one frame, matches each against a fresh
gallery snapshot and, when asked, marks every accepted identity present.
"""

from datetime import datetime
from typing import List, Optional, Sequence

from pydantic import BaseModel

from face_attendance.core.logging import get_logger
from face_attendance.models.domain.attendance import MarkOutcome
from face_attendance.models.domain.recognition import MatchResult
from face_attendance.services.attendance_ledger import AttendanceLedger
from face_attendance.services.gallery import Gallery
from face_attendance.services.matcher import Matcher

logger = get_logger(__name__)


class FaceRecognition(BaseModel):
    """Outcome for one query embedding."""

    index: int
    match: Optional[MatchResult] = None
    attendance: Optional[MarkOutcome] = None


class RecognitionService:
    def __init__(
        self,
        gallery: Gallery,
        matcher: Matcher,
        ledger: AttendanceLedger,
        default_threshold: float = 0.6,
    ):
        self.gallery = gallery
        self.matcher = matcher
        self.ledger = ledger
        self.default_threshold = default_threshold

    async def recognize(
        self,
        embeddings: Sequence[Sequence[float]],
        threshold: Optional[float] = None,
        mark_attendance: bool = False,
        claim: bool = False,
        at_time: Optional[datetime] = None,
    ) -> List[FaceRecognition]:
        threshold = threshold if threshold is not None else self.default_threshold
        snapshot = await self.gallery.snapshot()
        matches = self.matcher.match_all(embeddings, snapshot, threshold, claim=claim)

        results = []
        for index, match in enumerate(matches):
            outcome = None
            if match is not None and mark_attendance:
                outcome = await self.ledger.mark_present(match.identity_id, match.confidence, at_time)
            results.append(FaceRecognition(index=index, match=match, attendance=outcome))

        accepted = sum(1 for m in matches if m is not None)
        logger.info(f"Recognized {accepted}/{len(matches)} faces against {len(snapshot)} identities")
        return results
