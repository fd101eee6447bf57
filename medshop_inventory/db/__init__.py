# medshop_inventory/db/__init__.py
from .interface import InventoryStore
from .supabase_store import SupabaseStore
from .sql_store import SQLAlchemyStore
from .connection import DatabaseConnection, DatabaseConfig, db


def get_db_type() -> str:
    """Get current database type."""
    return db.db_type


def get_store() -> InventoryStore:
    """Get the inventory store for the configured database type."""
    if db.db_type == "supabase":
        return SupabaseStore(db.get_supabase())
    return SQLAlchemyStore(db.session_factory)


__all__ = [
    'db',
    'get_db_type',
    'get_store',
    'InventoryStore',
    'SupabaseStore',
    'SQLAlchemyStore',
    'DatabaseConnection',
    'DatabaseConfig'
]
