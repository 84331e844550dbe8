"""
Identities repository - handles identities table operations.
"""

import json
from typing import Optional, List, Dict

from face_attendance.repositories.base import BaseRepository
from face_attendance.models.domain.identity import GalleryEntry
from face_attendance.core.exceptions import DuplicateIdentityError
from face_attendance.core.logging import get_logger

logger = get_logger(__name__)


class IdentitiesRepository(BaseRepository[GalleryEntry]):
    """
    Repository for identities table.
    Primary key: identity_id.
    """

    table_name = "identities"
    key_column = "identity_id"

    # ============================================================
    # Query Methods
    # ============================================================

    async def get(self, identity_id: str) -> Optional[GalleryEntry]:
        return await self.get_by_key(identity_id)

    async def list_all(self, newest_first: bool = True) -> List[GalleryEntry]:
        """
        Load every identity.
        Ordered by created_at, identity_id breaks ties.
        """
        try:
            response = (
                self.table
                .select("*")
                .order("created_at", desc=newest_first)
                .order("identity_id")
                .execute()
            )
        except Exception as e:
            self._handle_error("list_all", e)

        return [self._to_model(row) for row in response.data or []]

    # ============================================================
    # Mutations
    # ============================================================

    async def create(self, entry: GalleryEntry) -> GalleryEntry:
        data = {
            "identity_id": entry.identity_id,
            "display_name": entry.display_name,
            "embedding": list(entry.embedding),
            "image_ref": entry.image_ref,
            "image_owned": entry.image_owned,
        }
        created = await self.insert(data)
        logger.info(f"Inserted identity {entry.identity_id}")
        return created

    async def delete(self, identity_id: str) -> bool:
        return await self.delete_where(self.key_column, identity_id) > 0

    # ============================================================
    # Model Conversion
    # ============================================================

    def _to_model(self, data: Dict) -> GalleryEntry:
        return GalleryEntry(
            identity_id=data["identity_id"],
            display_name=data["display_name"],
            embedding=self._parse_embedding(data["embedding"]),
            image_ref=data.get("image_ref") or "",
            image_owned=bool(data.get("image_owned", False)),
            created_at=data.get("created_at"),
        )

    def _duplicate_error(self, data: Dict) -> DuplicateIdentityError:
        return DuplicateIdentityError(data["identity_id"])

    @staticmethod
    def _parse_embedding(value) -> tuple:
        """Embedding column may come back as a JSON array or its string form."""
        if isinstance(value, str):
            value = json.loads(value)
        return tuple(float(x) for x in value)
