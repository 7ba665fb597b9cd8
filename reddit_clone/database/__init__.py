from .connection import metadata, create_database, create_tables, storage_errors

__all__ = ["metadata", "create_database", "create_tables", "storage_errors"]
