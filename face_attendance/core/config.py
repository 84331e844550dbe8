"""
Application configuration via Pydantic Settings.
Loads from environment variables with validation and defaults.
"""

from typing import List, Optional
from pydantic_settings import BaseSettings
from pydantic import Field, field_validator
from functools import lru_cache
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

VERSION = "1.0.0"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # === Server ===
    server_host: str = Field(default="0.0.0.0", alias="SERVER_HOST")
    server_port: int = Field(default=8001, alias="SERVER_PORT")
    debug: bool = Field(default=False, alias="DEBUG")

    # === CORS ===
    allowed_origins: str = Field(default="*", alias="ALLOWED_ORIGINS")

    # === Store ===
    store_backend: str = Field(default="supabase", alias="STORE_BACKEND")
    supabase_url: Optional[str] = Field(default=None, alias="SUPABASE_URL")
    supabase_service_role_key: Optional[str] = Field(default=None, alias="SUPABASE_SERVICE_ROLE_KEY")
    image_bucket: str = Field(default="user-images", alias="IMAGE_BUCKET")
    max_image_bytes: int = Field(default=5 * 1024 * 1024, gt=0, alias="MAX_IMAGE_BYTES")

    # === Recognition ===
    match_threshold: float = Field(default=0.6, gt=0, alias="MATCH_THRESHOLD")
    embedding_dim: Optional[int] = Field(default=None, gt=0, alias="EMBEDDING_DIM")
    embedder_backend: str = Field(default="none", alias="EMBEDDER_BACKEND")
    insightface_model: str = Field(default="buffalo_l", alias="INSIGHTFACE_MODEL")

    # === Attendance ===
    attendance_timezone: str = Field(default="UTC", alias="ATTENDANCE_TIMEZONE")

    @field_validator("store_backend")
    @classmethod
    def validate_store_backend(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in ("supabase", "memory"):
            raise ValueError("STORE_BACKEND must be 'supabase' or 'memory'")
        return v

    @field_validator("embedder_backend")
    @classmethod
    def validate_embedder_backend(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in ("none", "insightface"):
            raise ValueError("EMBEDDER_BACKEND must be 'none' or 'insightface'")
        return v

    @field_validator("attendance_timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"Unknown timezone: {v}")
        return v

    @property
    def cors_origins(self) -> List[str]:
        """Parse ALLOWED_ORIGINS into list."""
        return [origin.strip() for origin in self.allowed_origins.split(",")]

    @property
    def timezone(self) -> ZoneInfo:
        return ZoneInfo(self.attendance_timezone)

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        populate_by_name = True
        extra = "ignore"  # Ignore extra env vars


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
