"""
Base repository with common functionality.
"""

from typing import Optional, List, Dict, Any, TypeVar, Generic
from pydantic import BaseModel

from face_attendance.core.exceptions import AppException, StoreError
from face_attendance.core.logging import get_logger
from face_attendance.infrastructure.supabase import SupabaseClient

logger = get_logger(__name__)

T = TypeVar('T', bound=BaseModel)


class BaseRepository(Generic[T]):
    """
    Base repository providing common database operations.

    Subclasses should:
    - Set `table_name` class attribute
    - Set `key_column` class attribute
    - Implement `_to_model` and `_duplicate_error`
    """

    table_name: str = None
    key_column: str = "id"

    def __init__(self, supabase_client: SupabaseClient):
        """
        Initialize repository.

        Args:
            supabase_client: SupabaseClient instance (from infrastructure/)
        """
        self.client = supabase_client
        self.logger = get_logger(f"repo.{self.__class__.__name__}")

    @property
    def table(self):
        """Get table reference for queries."""
        return self.client.table(self.table_name)

    # ============================================================
    # Generic CRUD Operations
    # ============================================================

    async def get_by_key(self, key: str) -> Optional[T]:
        """
        Get single record by primary key.

        Returns:
            Model instance or None
        """
        try:
            response = self.table.select("*").eq(self.key_column, key).limit(1).execute()
        except Exception as e:
            self._handle_error("get_by_key", e)

        if not response.data:
            return None
        return self._to_model(response.data[0])

    async def exists(self, key: str) -> bool:
        try:
            response = self.table.select(self.key_column).eq(self.key_column, key).limit(1).execute()
        except Exception as e:
            self._handle_error("exists", e)
        return bool(response.data)

    async def insert(self, data: Dict[str, Any]) -> T:
        """
        Insert new record.

        Raises:
            The subclass duplicate error on unique constraint violation
        """
        clean_data = self.client.clean_for_json(data)
        try:
            response = self.table.insert(clean_data).execute()
        except Exception as e:
            if self.client.is_unique_violation(e):
                raise self._duplicate_error(data) from e
            self._handle_error("insert", e)

        if not response.data:
            self._handle_error("insert", RuntimeError("Insert returned no data"))
        return self._to_model(response.data[0])

    async def update_by_key(self, key: str, data: Dict[str, Any]) -> Optional[T]:
        """
        Update existing record.

        Returns:
            Updated model or None if no row matched
        """
        clean_data = self.client.clean_for_json(data)
        try:
            response = self.table.update(clean_data).eq(self.key_column, key).execute()
        except Exception as e:
            self._handle_error("update", e)

        if not response.data:
            return None
        return self._to_model(response.data[0])

    async def delete_where(self, column: str, value: str) -> int:
        """
        Delete all records where column equals value.

        Returns:
            Number of deleted rows
        """
        try:
            response = self.table.delete().eq(column, value).execute()
        except Exception as e:
            self._handle_error("delete", e)
        return len(response.data or [])

    async def select_where(
        self,
        column: str,
        value: Any,
        order_by: Optional[str] = None,
        order_desc: bool = False
    ) -> List[T]:
        try:
            query = self.table.select("*").eq(column, value)
            if order_by:
                query = query.order(order_by, desc=order_desc)
            response = query.execute()
        except Exception as e:
            self._handle_error("select_where", e)
        return [self._to_model(row) for row in response.data or []]

    # ============================================================
    # Helper Methods
    # ============================================================

    def _to_model(self, data: Dict) -> T:
        """
        Convert database row to model instance.
        Override in subclasses for custom transformation.
        """
        raise NotImplementedError

    def _duplicate_error(self, data: Dict[str, Any]) -> AppException:
        """Exception raised when an insert hits a unique constraint."""
        raise NotImplementedError

    def _handle_error(self, operation: str, error: Exception):
        """
        Log the underlying error and raise an opaque StoreError.
        """
        self.logger.error(f"{self.table_name}.{operation} failed: {error}")
        raise StoreError(operation=f"{self.table_name}.{operation}") from error
