"""
Gallery of enrolled identities.

Wraps the identities repository with the gallery rules:
- identity_id is unique (checked here, guaranteed by the store's primary key)
- every embedding has the gallery dimension D; D comes from EMBEDDING_DIM
  when configured, otherwise from the entries already stored, otherwise
  from the first entry added
- removal notifies registered listeners (attendance cascade, image cleanup)

The gallery keeps no entries in memory between calls. snapshot() loads a
fresh read-only copy for each matching request.
"""

from typing import Awaitable, Callable, List, Optional, Sequence

from face_attendance.core.exceptions import (
    DuplicateIdentityError,
    IdentityNotFoundError,
    InvalidEmbeddingError,
)
from face_attendance.core.logging import get_logger
from face_attendance.models.domain.embedding import to_vector, to_list
from face_attendance.models.domain.identity import GalleryEntry, GallerySnapshot

logger = get_logger(__name__)

RemovalListener = Callable[[GalleryEntry], Awaitable[None]]


class Gallery:
    """Enrolled identities and their embeddings."""

    def __init__(self, identities_repo, embedding_dim: Optional[int] = None):
        """
        Args:
            identities_repo: IdentitiesRepository or InMemoryIdentitiesRepository
            embedding_dim: Fixed dimension D (None derives it from stored entries)
        """
        self.repo = identities_repo
        self.embedding_dim = embedding_dim
        self._removal_listeners: List[RemovalListener] = []

    def on_remove(self, listener: RemovalListener):
        """Register an async callback invoked with each removed entry."""
        self._removal_listeners.append(listener)

    # ==================== Queries ====================

    async def get(self, identity_id: str) -> GalleryEntry:
        entry = await self.repo.get(identity_id)
        if entry is None:
            raise IdentityNotFoundError(identity_id)
        return entry

    async def exists(self, identity_id: str) -> bool:
        return await self.repo.exists(identity_id)

    async def list(self) -> List[GalleryEntry]:
        """All entries, newest enrollment first."""
        return await self.repo.list_all(newest_first=True)

    async def snapshot(self) -> GallerySnapshot:
        """
        Load a read-only snapshot for matching.
        Entries are in enrollment order, oldest first.
        """
        entries = await self.repo.list_all(newest_first=False)
        dimension = self.embedding_dim or (entries[0].dimension if entries else None)
        mixed = [e.identity_id for e in entries if e.dimension != dimension]
        if mixed:
            # Rows written outside the service
            logger.warning(f"Skipping {len(mixed)} entries with dimension != {dimension}: {mixed[:5]}")
            entries = [e for e in entries if e.dimension == dimension]
        return GallerySnapshot(entries, dimension)

    async def dimension(self) -> Optional[int]:
        """Current gallery dimension D, None while the gallery is empty and unconfigured."""
        if self.embedding_dim:
            return self.embedding_dim
        entries = await self.repo.list_all(newest_first=False)
        return entries[0].dimension if entries else None

    # ==================== Mutations ====================

    async def add(
        self,
        identity_id: str,
        display_name: str,
        embedding: Sequence[float],
        image_ref: str,
        image_owned: bool = False,
    ) -> GalleryEntry:
        """
        Add a new identity.
        image_owned marks image_ref as uploaded by this service.

        Raises:
            DuplicateIdentityError: identity_id already enrolled
            InvalidEmbeddingError: empty, non-finite or wrong dimension
        """
        vector = to_vector(embedding)

        if await self.repo.exists(identity_id):
            raise DuplicateIdentityError(identity_id)

        dimension = await self.dimension()
        if dimension is not None and vector.size != dimension:
            raise InvalidEmbeddingError(f"expected dimension {dimension}, got {vector.size}")

        entry = GalleryEntry(
            identity_id=identity_id,
            display_name=display_name,
            embedding=tuple(to_list(vector)),
            image_ref=image_ref,
            image_owned=image_owned,
        )
        created = await self.repo.create(entry)
        logger.info(f"Enrolled identity {identity_id} (dim={vector.size})")
        return created

    async def remove(self, identity_id: str) -> GalleryEntry:
        """
        Remove an identity.

        Removal listeners run first, in registration order, and the row is
        deleted only after all of them succeed. A failed listener leaves the
        identity in place, so retrying remove() repeats the whole cascade.
        Listeners must therefore be idempotent.

        Raises:
            IdentityNotFoundError: identity_id not enrolled
        """
        entry = await self.get(identity_id)
        for listener in self._removal_listeners:
            await listener(entry)

        if not await self.repo.delete(identity_id):
            # Deleted concurrently while the listeners ran
            raise IdentityNotFoundError(identity_id)

        logger.info(f"Removed identity {identity_id}")
        return entry
