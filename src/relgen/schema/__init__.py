"""
Schema Graph Package
Immutable schema model, type translation tables and the model builder
"""
from .models import (
    NULL_WRAPPER,
    SemanticType,
    Column,
    PrimaryKey,
    ForeignKey,
    Table,
    SchemaGraph,
)
from .types import (
    TypeMap,
    POSTGRESQL_TYPES,
    MYSQL_TYPES,
    SQLITE_TYPES,
    normalize_type_name,
    strip_type_params,
)
from .builder import SchemaModelBuilder, is_join_table

__all__ = [
    "NULL_WRAPPER",
    "SemanticType",
    "Column",
    "PrimaryKey",
    "ForeignKey",
    "Table",
    "SchemaGraph",
    "TypeMap",
    "POSTGRESQL_TYPES",
    "MYSQL_TYPES",
    "SQLITE_TYPES",
    "normalize_type_name",
    "strip_type_params",
    "SchemaModelBuilder",
    "is_join_table",
]
