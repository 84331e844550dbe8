"""
Gallery domain models.
An identity is a person enrolled for recognition with exactly one embedding.
"""

from typing import Optional, List, Tuple
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field
import numpy as np


class IdentitySummary(BaseModel):
    """Lightweight identity reference (listing)."""

    model_config = ConfigDict(frozen=True)

    identity_id: str
    display_name: str
    image_ref: Optional[str] = None
    created_at: Optional[datetime] = None


class GalleryEntry(BaseModel):
    """Enrolled identity with its embedding."""

    model_config = ConfigDict(frozen=True)

    identity_id: str = Field(..., min_length=1, description="Unique identity ID")
    display_name: str = Field(..., min_length=1, description="Human readable label")
    embedding: Tuple[float, ...] = Field(..., min_length=1, description="Face embedding vector")
    image_ref: str = Field(..., description="Reference to the stored profile image")
    image_owned: bool = Field(False, description="Image was uploaded by this service and is deleted with the identity")
    created_at: Optional[datetime] = Field(None, description="Enrollment timestamp")

    @property
    def dimension(self) -> int:
        return len(self.embedding)

    def to_summary(self) -> IdentitySummary:
        """Convert to lightweight summary."""
        return IdentitySummary(
            identity_id=self.identity_id,
            display_name=self.display_name,
            image_ref=self.image_ref,
            created_at=self.created_at,
        )


class GallerySnapshot:
    """
    Read-only view of the gallery taken at one point in time.

    Entries keep the order they were loaded in; the matcher relies on that
    order for its tie-break. The embedding matrix is built once per snapshot.
    """

    def __init__(self, entries: List[GalleryEntry], dimension: Optional[int] = None):
        self.entries: Tuple[GalleryEntry, ...] = tuple(entries)
        if dimension is None and self.entries:
            dimension = self.entries[0].dimension
        self.dimension = dimension
        if self.entries:
            self._matrix = np.array([e.embedding for e in self.entries], dtype=np.float64)
        else:
            self._matrix = np.empty((0, dimension or 0), dtype=np.float64)
        self._matrix.setflags(write=False)

    @property
    def matrix(self) -> np.ndarray:
        return self._matrix

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self):
        return iter(self.entries)

    def __bool__(self) -> bool:
        return bool(self.entries)
