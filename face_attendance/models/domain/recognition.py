"""
Recognition domain models.
Detections come from the face embedder, match results from the matcher.
"""

from typing import Tuple
from pydantic import BaseModel, ConfigDict, Field


class BoundingBox(BaseModel):
    """Face bounding box coordinates."""

    model_config = ConfigDict(frozen=True)

    x: float = Field(..., description="Left edge X coordinate")
    y: float = Field(..., description="Top edge Y coordinate")
    width: float = Field(..., ge=0, description="Box width")
    height: float = Field(..., ge=0, description="Box height")

    @property
    def area(self) -> float:
        """Bounding box area."""
        return self.width * self.height

    @classmethod
    def from_xyxy(cls, x1: float, y1: float, x2: float, y2: float) -> "BoundingBox":
        """Create from (x1, y1, x2, y2) format."""
        return cls(x=x1, y=y1, width=x2 - x1, height=y2 - y1)


class Detection(BaseModel):
    """One face found by the embedder."""

    model_config = ConfigDict(frozen=True)

    bounding_box: BoundingBox
    embedding: Tuple[float, ...] = Field(..., min_length=1)


class MatchResult(BaseModel):
    """Accepted best match for one query embedding."""

    model_config = ConfigDict(frozen=True)

    identity_id: str
    display_name: str
    distance: float = Field(..., ge=0, description="Squared Euclidean distance")
    confidence: float = Field(..., ge=0, le=1, description="1 - distance / threshold")
