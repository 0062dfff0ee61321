"""
Error Handling Module for the Relationship Generator
Defines custom exceptions and error handling utilities
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional
from datetime import datetime

from .logging import get_run_id


class ErrorSeverity(str, Enum):
    """Error severity levels"""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """Error categories for classification"""
    DATABASE = "database"
    INTROSPECTION = "introspection"
    SCHEMA = "schema"
    CONFIGURATION = "configuration"
    NETWORK = "network"
    AUTHENTICATION = "authentication"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Additional context for errors"""
    run_id: Optional[str] = None
    database_type: Optional[str] = None
    table_name: Optional[str] = None
    column_name: Optional[str] = None
    timestamp: datetime = field(default_factory=datetime.utcnow)
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "run_id": self.run_id,
            "database_type": self.database_type,
            "table_name": self.table_name,
            "column_name": self.column_name,
            "timestamp": self.timestamp.isoformat(),
            "metadata": self.metadata,
        }


class RelgenError(Exception):
    """Base exception for the relationship generator"""

    def __init__(
        self,
        message: str,
        category: ErrorCategory = ErrorCategory.INTERNAL,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        context: Optional[ErrorContext] = None,
        recoverable: bool = False,
        suggestions: Optional[List[str]] = None,
        original_error: Optional[Exception] = None
    ):
        super().__init__(message)
        self.message = message
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        if self.context.run_id is None:
            self.context.run_id = get_run_id()
        self.recoverable = recoverable
        self.suggestions = suggestions or []
        self.original_error = original_error

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "severity": self.severity.value,
            "recoverable": self.recoverable,
            "suggestions": self.suggestions,
            "context": self.context.to_dict(),
            "original_error": str(self.original_error) if self.original_error else None,
        }

    def __str__(self) -> str:
        return f"[{self.category.value}] {self.message}"


class DatabaseConnectionError(RelgenError):
    """Cannot open, or lost, the database connection"""

    def __init__(
        self,
        message: str,
        context: Optional[ErrorContext] = None,
        original_error: Optional[Exception] = None
    ):
        super().__init__(
            message=message,
            category=ErrorCategory.DATABASE,
            severity=ErrorSeverity.CRITICAL,
            context=context,
            recoverable=False,
            suggestions=[
                "Check database host and port configuration",
                "Verify database credentials",
                "Ensure database server is running",
                "Check network connectivity",
            ],
            original_error=original_error
        )


class IntrospectionError(RelgenError):
    """A catalog query for a specific table failed"""

    def __init__(
        self,
        message: str,
        table_name: Optional[str] = None,
        context: Optional[ErrorContext] = None,
        original_error: Optional[Exception] = None
    ):
        context = context or ErrorContext()
        if table_name:
            context.table_name = table_name

        suggestions = ["Verify the catalog is readable by the configured user"]
        if table_name:
            suggestions.append(f"Inspect the definition of table '{table_name}'")

        super().__init__(
            message=message,
            category=ErrorCategory.INTROSPECTION,
            severity=ErrorSeverity.HIGH,
            context=context,
            recoverable=False,
            suggestions=suggestions,
            original_error=original_error
        )
        self.table_name = table_name

    def __str__(self) -> str:
        if self.table_name:
            return f"[{self.category.value}] table {self.table_name}: {self.message}"
        return super().__str__()


class SchemaError(RelgenError):
    """The assembled schema graph violates one of its invariants"""

    def __init__(
        self,
        message: str,
        table_name: Optional[str] = None,
        column_name: Optional[str] = None,
        context: Optional[ErrorContext] = None,
        original_error: Optional[Exception] = None
    ):
        context = context or ErrorContext()
        context.table_name = context.table_name or table_name
        context.column_name = context.column_name or column_name

        suggestions = ["Verify table/column names exist in the database"]
        if table_name:
            suggestions.append(f"Check if table '{table_name}' exists and is not excluded")
        if column_name:
            suggestions.append(f"Check if column '{column_name}' exists")

        super().__init__(
            message=message,
            category=ErrorCategory.SCHEMA,
            severity=ErrorSeverity.HIGH,
            context=context,
            recoverable=False,
            suggestions=suggestions,
            original_error=original_error
        )
        self.table_name = table_name
        self.column_name = column_name


class ConfigurationError(RelgenError):
    """Configuration errors"""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        context: Optional[ErrorContext] = None,
        original_error: Optional[Exception] = None
    ):
        suggestions = ["Review configuration settings"]
        if config_key:
            suggestions.append(f"Check configuration for key: {config_key}")

        super().__init__(
            message=message,
            category=ErrorCategory.CONFIGURATION,
            severity=ErrorSeverity.HIGH,
            context=context,
            recoverable=False,
            suggestions=suggestions,
            original_error=original_error
        )
        self.config_key = config_key


class UnrecognizedTypeWarning(UserWarning):
    """A native column type had no entry in the translation table"""


def classify_database_error(
    error: Exception,
    table_name: Optional[str] = None,
    db_type: Optional[str] = None,
) -> RelgenError:
    """Classify a raw driver error into the matching RelgenError subclass"""
    if isinstance(error, RelgenError):
        return error

    error_str = str(error).lower()
    context = ErrorContext(database_type=db_type, table_name=table_name)

    if any(term in error_str for term in [
        'could not connect', 'connection refused', 'connection reset',
        'server closed', 'lost connection', 'authentication failed', 'access denied',
        'closed database', 'connection already closed',
    ]):
        return DatabaseConnectionError(
            message=str(error),
            context=context,
            original_error=error
        )

    return IntrospectionError(
        message=str(error),
        table_name=table_name,
        context=context,
        original_error=error
    )
