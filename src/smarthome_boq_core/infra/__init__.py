"""
SmartHome BOQ Infrastructure Module
Project, catalog and quotation stores
"""

from .memory_store import InMemoryStore
from .records import (
    catalog_from_records,
    document_from_record,
    document_to_record,
    room_from_record,
    rooms_from_project,
)
from .supabase_store import SupabaseStore

__all__ = [
    "InMemoryStore",
    "SupabaseStore",
    "catalog_from_records",
    "document_from_record",
    "document_to_record",
    "room_from_record",
    "rooms_from_project",
]
