"""
Database package for the hotel booking core.

This package provides modular database operations:
- connection: Connection management (get_db, connect_db, close_db, transaction, init_db)
- schema: Table creation, indexes and overlap triggers
- seed: Demo seed data
"""

from database.connection import get_db, connect_db, close_db, transaction, init_db
from database.schema import drop_tables, create_tables, create_indexes, create_triggers
from database.seed import seed_database

__all__ = [
    # Connection
    'get_db',
    'connect_db',
    'close_db',
    'transaction',
    'init_db',
    # Schema
    'drop_tables',
    'create_tables',
    'create_indexes',
    'create_triggers',
    # Seed
    'seed_database',
]
