"""
Embedding matcher.

Linear scan over a gallery snapshot using squared Euclidean distance.

Rules:
- candidate = entry with the smallest distance; on an exact tie the entry
  that comes first in snapshot order wins
- accepted only when distance < threshold
- confidence = max(0, 1 - distance / threshold)
- no candidate below threshold means no match (None), never a zero-confidence match

Matching is pure computation on a read-only snapshot, safe to run
concurrently with gallery writes.
"""

import math
from typing import List, Optional, Sequence

import numpy as np

from face_attendance.core.exceptions import InvalidQueryError, ValidationError
from face_attendance.core.logging import get_logger
from face_attendance.models.domain.embedding import to_vector, squared_distances
from face_attendance.models.domain.identity import GallerySnapshot
from face_attendance.models.domain.recognition import MatchResult

logger = get_logger(__name__)


def validate_threshold(threshold: float) -> float:
    if threshold is None or not math.isfinite(threshold) or threshold <= 0:
        raise ValidationError("Threshold must be a positive number", field="threshold")
    return float(threshold)


def confidence_for(distance: float, threshold: float) -> float:
    """Map an accepted distance to [0, 1]: 1.0 at distance 0, towards 0.0 at the threshold."""
    return max(0.0, 1.0 - distance / threshold)


class Matcher:
    """Best-match search over gallery snapshots."""

    def match(
        self,
        query: Sequence[float],
        snapshot: GallerySnapshot,
        threshold: float,
    ) -> Optional[MatchResult]:
        """
        Find the best gallery match for one query embedding.

        Args:
            query: Query embedding
            snapshot: Gallery snapshot to search
            threshold: Squared-distance acceptance threshold

        Returns:
            MatchResult or None if nothing is closer than the threshold

        Raises:
            InvalidQueryError: Query is empty, non-finite or has the wrong dimension
        """
        threshold = validate_threshold(threshold)
        vector = to_vector(query, snapshot.dimension, error_class=InvalidQueryError)
        return self._match_vector(vector, snapshot, threshold, np.ones(len(snapshot), dtype=bool))

    def match_all(
        self,
        queries: Sequence[Sequence[float]],
        snapshot: GallerySnapshot,
        threshold: float,
        claim: bool = False,
    ) -> List[Optional[MatchResult]]:
        """
        Match every face of one frame, in order.

        By default each query is matched independently, so one identity can
        be the best match for several faces. With claim=True an identity
        matched by an earlier query is removed from the candidates for the
        remaining queries of the frame.
        """
        threshold = validate_threshold(threshold)
        # Validate all queries up front so a bad one fails the frame
        vectors = [to_vector(q, snapshot.dimension, error_class=InvalidQueryError) for q in queries]

        available = np.ones(len(snapshot), dtype=bool)
        results = []
        for vector in vectors:
            result = self._match_vector(vector, snapshot, threshold, available)
            if result is not None and claim:
                for idx, entry in enumerate(snapshot.entries):
                    if entry.identity_id == result.identity_id:
                        available[idx] = False
            results.append(result)
        return results

    def _match_vector(
        self,
        vector: np.ndarray,
        snapshot: GallerySnapshot,
        threshold: float,
        available: np.ndarray,
    ) -> Optional[MatchResult]:
        if not snapshot or not available.any():
            return None

        distances = squared_distances(vector, snapshot.matrix)
        distances = np.where(available, distances, np.inf)
        # argmin returns the first index among equal minima
        best = int(np.argmin(distances))
        distance = float(distances[best])

        if not distance < threshold:
            logger.debug(f"No match: best distance {distance:.4f} >= threshold {threshold}")
            return None

        entry = snapshot.entries[best]
        return MatchResult(
            identity_id=entry.identity_id,
            display_name=entry.display_name,
            distance=distance,
            confidence=confidence_for(distance, threshold),
        )
