"""
Identity request models.
"""

from typing import List
from pydantic import BaseModel, ConfigDict, Field, field_validator


def _strip_required(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("must not be empty")
    return v


class IdentityCreate(BaseModel):
    """Enrollment with an embedding computed by the client."""

    model_config = ConfigDict(extra="forbid")

    identity_id: str = Field(..., max_length=128)
    display_name: str = Field(..., max_length=200)
    image_ref: str = Field(..., max_length=1024)
    embedding: List[float] = Field(..., min_length=1)

    @field_validator("identity_id", "display_name", "image_ref")
    @classmethod
    def validate_not_blank(cls, v):
        return _strip_required(v)
