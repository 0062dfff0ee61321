"""
Base Schema Reader Module
Defines the capability interface every database engine implements, using the
Template Method pattern for connection handling and catalog queries
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import replace
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Type
import threading

from ..config import DatabaseConfig, DatabaseType
from ..schema.models import Column, ForeignKey, PrimaryKey
from ..schema.types import TypeMap
from ..utils.errors import (
    ConfigurationError,
    DatabaseConnectionError,
    ErrorContext,
    classify_database_error,
)
from ..utils.logging import get_logger

logger = get_logger(__name__)

Row = Tuple[Any, ...]


class BaseSchemaReader(ABC):
    """
    Abstract base class for schema readers

    A reader either opens its own connection from ``config`` or borrows a
    live ``connection`` supplied by the caller. Borrowed connections are
    never closed by the reader. All catalog queries go through ``_query``,
    which serializes access to the single connection.
    """

    type_map: TypeMap

    def __init__(self, config: DatabaseConfig, connection: Any = None):
        self.config = config
        self._connection = connection
        self._owns_connection = connection is None
        self._lock = threading.Lock()

    @property
    @abstractmethod
    def database_type(self) -> DatabaseType:
        """Return the database type"""
        pass

    @property
    @abstractmethod
    def dialect_name(self) -> str:
        """Return the engine name used in log messages"""
        pass

    @abstractmethod
    def _open_connection(self) -> Any:
        """Open and return a new DB-API connection"""
        pass

    @abstractmethod
    def list_table_names(self, exclude: Sequence[str] = ()) -> List[str]:
        """User tables of the default schema, minus any name in ``exclude``"""
        pass

    @abstractmethod
    def list_columns(self, table_name: str) -> List[Column]:
        """Columns of a table, untranslated, in ordinal order"""
        pass

    @abstractmethod
    def list_primary_key(self, table_name: str) -> Optional[PrimaryKey]:
        """Primary key of a table, or None when it has none"""
        pass

    @abstractmethod
    def list_foreign_keys(self, table_name: str) -> List[ForeignKey]:
        """One entry per (constraint, column) pair"""
        pass

    @abstractmethod
    def uses_returning(self) -> bool:
        """
        Whether inserts hand back generated keys through a RETURNING clause

        False means the generated code has to ask for the last inserted id.
        """
        pass

    def connect(self) -> None:
        """Open the connection unless one is already available"""
        if self._connection is not None:
            return

        try:
            self._connection = self._open_connection()
        except ImportError:
            raise
        except Exception as e:
            raise DatabaseConnectionError(
                f"Unable to connect to {self.dialect_name} database "
                f"'{self.config.sqlite_path or self.config.database}': {e}",
                context=ErrorContext(database_type=self.database_type.value),
                original_error=e,
            ) from e

        self._owns_connection = True
        logger.info(f"Connected to {self.dialect_name} database")

    def disconnect(self) -> None:
        """Close the connection if this reader opened it"""
        if self._connection is None:
            return
        if not self._owns_connection:
            logger.debug("Leaving caller-supplied connection open")
            return

        try:
            self._connection.close()
        finally:
            self._connection = None
        logger.info(f"Disconnected from {self.dialect_name} database")

    def is_connected(self) -> bool:
        """Check if a connection is available"""
        return self._connection is not None

    def translate_column_type(self, column: Column) -> Column:
        """Attach the semantic type (and the non-zero flag) for a column"""
        return replace(
            column,
            semantic_type=self.type_map.translate(column.native_type, column.nullable),
            must_be_non_zero=column.must_be_non_zero
            or self.type_map.must_be_non_zero(column.native_type),
        )

    def _query(
        self,
        sql: str,
        params: Sequence[Any] = (),
        table_name: Optional[str] = None,
    ) -> List[Row]:
        """
        Run a catalog query and return all rows as tuples

        Driver errors are raised as IntrospectionError (or
        DatabaseConnectionError) carrying ``table_name``.
        """
        if self._connection is None:
            raise DatabaseConnectionError(
                f"{self.dialect_name} reader is not connected",
                context=ErrorContext(database_type=self.database_type.value, table_name=table_name),
            )

        with self._lock:
            cursor = self._connection.cursor()
            try:
                cursor.execute(sql, tuple(params))
                return [tuple(row) for row in cursor.fetchall()]
            except Exception as e:
                self._rollback()
                raise classify_database_error(
                    e, table_name=table_name, db_type=self.database_type.value
                ) from e
            finally:
                cursor.close()

    def _rollback(self) -> None:
        # Leaves a borrowed connection usable after a failed statement
        rollback = getattr(self._connection, "rollback", None)
        if rollback is None:
            return
        try:
            rollback()
        except Exception as e:
            logger.debug(f"Rollback after failed catalog query failed: {e}")

    def __enter__(self) -> "BaseSchemaReader":
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.disconnect()


def filter_excluded(names: Iterable[str], exclude: Sequence[str]) -> List[str]:
    """Drop exact-match excluded names, keeping catalog order"""
    excluded = set(exclude)
    return [name for name in names if name not in excluded]


# Type alias for reader classes
ReaderClass = Type[BaseSchemaReader]


class SchemaReaderRegistry:
    """Registry for schema readers using Factory pattern"""

    _readers: Dict[DatabaseType, ReaderClass] = {}
    _lock = threading.Lock()

    @classmethod
    def register(cls, db_type: DatabaseType, reader_class: ReaderClass) -> None:
        """Register a schema reader class"""
        with cls._lock:
            cls._readers[db_type] = reader_class

    @classmethod
    def get_reader_class(cls, db_type: DatabaseType) -> ReaderClass:
        """Get reader class for database type"""
        with cls._lock:
            if db_type not in cls._readers:
                raise ConfigurationError(
                    f"No schema reader registered for database type: {db_type}",
                    config_key="db_type",
                )
            return cls._readers[db_type]

    @classmethod
    def create_reader(cls, config: DatabaseConfig, connection: Any = None) -> BaseSchemaReader:
        """Create reader instance from configuration"""
        reader_class = cls.get_reader_class(DatabaseType(config.db_type))
        return reader_class(config, connection=connection)

    @classmethod
    def get_supported_types(cls) -> List[DatabaseType]:
        """Get list of supported database types"""
        with cls._lock:
            return list(cls._readers.keys())

    @classmethod
    def is_supported(cls, db_type: DatabaseType) -> bool:
        """Check if database type is supported"""
        with cls._lock:
            return db_type in cls._readers


def register_reader(db_type: DatabaseType):
    """Decorator to register a schema reader class"""
    def decorator(cls: ReaderClass) -> ReaderClass:
        SchemaReaderRegistry.register(db_type, cls)
        return cls
    return decorator
