"""
Recognition request models.
"""

from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field


class RecognitionRequest(BaseModel):
    """
    One frame worth of query embeddings.

    Fields:
    - embeddings: one embedding per detected face
    - threshold: overrides MATCH_THRESHOLD for this request
    - mark_attendance: mark every accepted match present for today
    - claim: match each identity at most once within the frame
    """

    model_config = ConfigDict(extra="forbid")

    embeddings: List[List[float]] = Field(..., min_length=1, max_length=64)
    threshold: Optional[float] = Field(None, gt=0)
    mark_attendance: bool = False
    claim: bool = False
