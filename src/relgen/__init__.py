"""
SQL Relationship Generator
==========================

Inspects a live relational database and derives an immutable schema graph
plus relationship descriptors (to-one, one-to-one, to-many and
many-to-many through join tables) with deterministic, collision-free
accessor names, ready for a code-generation template layer.

Features:
- PostgreSQL, MySQL and SQLite schema readers behind one interface
- Engine-native column types translated to bare / nullable semantic types
- Join-table detection and many-to-many synthesis
- Optional bounded worker pool for per-table introspection
- Descriptor export as dicts, JSON or YAML

Quick Start:
------------

    from relgen import SystemConfig, GenerationPipeline

    config = SystemConfig.from_env()
    result = GenerationPipeline(config).run()

    for table in result.descriptors.tables:
        for rel in table.to_many:
            print(table.table_name, rel.function.name)

With an existing connection:
----------------------------

    import sqlite3
    from relgen import DatabaseConfig, DatabaseType, SystemConfig, generate

    conn = sqlite3.connect("shop.db")
    config = SystemConfig(database=DatabaseConfig(db_type=DatabaseType.SQLITE))
    result = generate(config, connection=conn)
    print(result.descriptors.to_yaml())
"""

__version__ = "1.0.0"
__author__ = "SQL Relgen Team"

# Configuration
from .config import (
    DatabaseType,
    LogLevel,
    DatabaseConfig,
    GeneratorConfig,
    SystemConfig,
)

# Schema Readers
from .adapters import (
    BaseSchemaReader,
    SchemaReaderRegistry,
    create_reader,
    get_supported_databases,
    register_reader,
    MySQLSchemaReader,
    PostgreSQLSchemaReader,
    SQLiteSchemaReader,
)

# Schema Graph
from .schema import (
    SemanticType,
    Column,
    PrimaryKey,
    ForeignKey,
    Table,
    SchemaGraph,
    TypeMap,
    SchemaModelBuilder,
)

# Relationships
from .relationships import (
    ToManyRelationship,
    TableRelationships,
    RelationshipInferenceEngine,
    RelationshipToOneTexts,
    RelationshipToManyTexts,
    TableDescriptors,
    SchemaDescriptors,
    DescriptorAssembler,
    mk_function_name,
)

# Pipeline
from .pipeline import (
    GenerationPipeline,
    GenerationResult,
    generate,
)

# Utilities
from .utils import (
    setup_logging,
    get_logger,
    RelgenError,
    DatabaseConnectionError,
    IntrospectionError,
    SchemaError,
    ConfigurationError,
    UnrecognizedTypeWarning,
)

__all__ = [
    # Version
    "__version__",
    # Configuration
    "DatabaseType",
    "LogLevel",
    "DatabaseConfig",
    "GeneratorConfig",
    "SystemConfig",
    # Readers
    "BaseSchemaReader",
    "SchemaReaderRegistry",
    "create_reader",
    "get_supported_databases",
    "register_reader",
    "MySQLSchemaReader",
    "PostgreSQLSchemaReader",
    "SQLiteSchemaReader",
    # Schema
    "SemanticType",
    "Column",
    "PrimaryKey",
    "ForeignKey",
    "Table",
    "SchemaGraph",
    "TypeMap",
    "SchemaModelBuilder",
    # Relationships
    "ToManyRelationship",
    "TableRelationships",
    "RelationshipInferenceEngine",
    "RelationshipToOneTexts",
    "RelationshipToManyTexts",
    "TableDescriptors",
    "SchemaDescriptors",
    "DescriptorAssembler",
    "mk_function_name",
    # Pipeline
    "GenerationPipeline",
    "GenerationResult",
    "generate",
    # Utilities
    "setup_logging",
    "get_logger",
    "RelgenError",
    "DatabaseConnectionError",
    "IntrospectionError",
    "SchemaError",
    "ConfigurationError",
    "UnrecognizedTypeWarning",
]
