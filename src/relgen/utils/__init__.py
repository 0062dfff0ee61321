"""
Utilities Package for the Relationship Generator
"""
from .logging import (
    setup_logging,
    get_logger,
    set_run_id,
    get_run_id,
    clear_context,
    log_context,
    log_operation,
)

from .errors import (
    ErrorSeverity,
    ErrorCategory,
    ErrorContext,
    RelgenError,
    DatabaseConnectionError,
    IntrospectionError,
    SchemaError,
    ConfigurationError,
    UnrecognizedTypeWarning,
    classify_database_error,
)

__all__ = [
    # Logging
    "setup_logging",
    "get_logger",
    "set_run_id",
    "get_run_id",
    "clear_context",
    "log_context",
    "log_operation",
    # Errors
    "ErrorSeverity",
    "ErrorCategory",
    "ErrorContext",
    "RelgenError",
    "DatabaseConnectionError",
    "IntrospectionError",
    "SchemaError",
    "ConfigurationError",
    "UnrecognizedTypeWarning",
    "classify_database_error",
]
