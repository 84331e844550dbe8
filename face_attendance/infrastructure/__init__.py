"""
Infrastructure package - external dependencies and integrations.

Modules:
- supabase.py - Unified Supabase client
- storage.py - Profile image storage
- memory.py - Process-local database with the same constraints
- store.py - Backend selection
"""

from face_attendance.infrastructure.store import Store, create_store, create_memory_store

__all__ = [
    'Store',
    'create_store',
    'create_memory_store',
]
