"""
Schema Readers Package
Provides one catalog reader per supported database engine
"""
from typing import Any, List

from .base import (
    BaseSchemaReader,
    SchemaReaderRegistry,
    register_reader,
)

# Import readers to register them
from .mysql_adapter import MySQLSchemaReader
from .postgresql_adapter import PostgreSQLSchemaReader, build_query_string
from .sqlite_adapter import SQLiteSchemaReader

from ..config import DatabaseConfig, DatabaseType


def create_reader(config: DatabaseConfig, connection: Any = None) -> BaseSchemaReader:
    """
    Factory function to create a schema reader from configuration

    Args:
        config: Database configuration
        connection: Optional live connection owned by the caller

    Returns:
        Schema reader instance (not yet connected unless ``connection`` was given)

    Raises:
        ConfigurationError: If database type is not supported
    """
    return SchemaReaderRegistry.create_reader(config, connection=connection)


def get_supported_databases() -> List[DatabaseType]:
    """Get list of supported database types"""
    return SchemaReaderRegistry.get_supported_types()


__all__ = [
    # Base classes
    "BaseSchemaReader",
    "SchemaReaderRegistry",
    "register_reader",
    # Concrete readers
    "MySQLSchemaReader",
    "PostgreSQLSchemaReader",
    "SQLiteSchemaReader",
    "build_query_string",
    # Factory functions
    "create_reader",
    "get_supported_databases",
]
