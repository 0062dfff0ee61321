"""
Logging Utility Module for the Relationship Generator
Provides structured logging with run IDs and context
"""
from __future__ import annotations

import json
import logging
import sys
import threading
import time
import uuid
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Dict, Generator, Optional

# Thread-local storage for run context
_thread_local = threading.local()

_CONTEXT_ATTRS = ('run_id', 'table')


class StructuredFormatter(logging.Formatter):
    """JSON structured log formatter for machine consumption"""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.utcnow().isoformat() + "Z",
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        run_id = getattr(_thread_local, 'run_id', None)
        if run_id:
            log_entry["run_id"] = run_id

        table = getattr(_thread_local, 'table', None)
        if table:
            log_entry["table"] = table

        if hasattr(record, 'extra_fields'):
            log_entry.update(record.extra_fields)

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


class ConsoleFormatter(logging.Formatter):
    """Human-readable console formatter"""

    COLORS = {
        'DEBUG': '\033[36m',     # Cyan
        'INFO': '\033[32m',      # Green
        'WARNING': '\033[33m',   # Yellow
        'ERROR': '\033[31m',     # Red
        'CRITICAL': '\033[35m',  # Magenta
    }
    RESET = '\033[0m'

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, self.RESET)

        prefix_parts = []
        run_id = getattr(_thread_local, 'run_id', None)
        if run_id:
            prefix_parts.append(f"[{run_id[:8]}]")

        table = getattr(_thread_local, 'table', None)
        if table:
            prefix_parts.append(f"[table:{table}]")

        prefix = " ".join(prefix_parts)
        if prefix:
            prefix = f"{prefix} "

        timestamp = datetime.utcnow().strftime("%Y-%m-%d %H:%M:%S.%f")[:-3]

        formatted = (
            f"{color}{timestamp} | {record.levelname:8s}{self.RESET} | "
            f"{record.name:30s} | {prefix}{record.getMessage()}"
        )

        if record.exc_info:
            formatted += f"\n{self.formatException(record.exc_info)}"

        return formatted


class ContextLogger(logging.LoggerAdapter):
    """Logger adapter that includes context information"""

    def process(self, msg: str, kwargs: Dict[str, Any]) -> tuple:
        extra = kwargs.get('extra', {})

        for attr in _CONTEXT_ATTRS:
            if hasattr(_thread_local, attr):
                extra[attr] = getattr(_thread_local, attr)

        kwargs['extra'] = extra
        return msg, kwargs


def setup_logging(
    level: str = "INFO",
    json_format: bool = False,
    log_file: Optional[str] = None
) -> None:
    """
    Configure logging for the application

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: Use JSON structured logging
        log_file: Optional file path for logging
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))

    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    if json_format:
        console_handler.setFormatter(StructuredFormatter())
    else:
        console_handler.setFormatter(ConsoleFormatter())
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(StructuredFormatter())
        root_logger.addHandler(file_handler)

    # Driver chatter stays out of the generator's output
    for logger_name in ['psycopg2', 'mysql.connector']:
        logging.getLogger(logger_name).setLevel(logging.WARNING)


def get_logger(name: str) -> ContextLogger:
    """Get a context-aware logger"""
    base_logger = logging.getLogger(name)
    return ContextLogger(base_logger, {})


def set_run_id(run_id: Optional[str] = None) -> str:
    """Set the generation run ID for the current thread"""
    if run_id is None:
        run_id = str(uuid.uuid4())
    _thread_local.run_id = run_id
    return run_id


def get_run_id() -> Optional[str]:
    """Get the generation run ID for the current thread"""
    return getattr(_thread_local, 'run_id', None)


def clear_context() -> None:
    """Clear all thread-local context"""
    for attr in _CONTEXT_ATTRS:
        if hasattr(_thread_local, attr):
            delattr(_thread_local, attr)


@contextmanager
def log_context(
    run_id: Optional[str] = None,
    table: Optional[str] = None,
) -> Generator[None, None, None]:
    """
    Context manager for setting logging context

    Usage:
        with log_context(run_id=run_id, table="customers"):
            logger.debug("Loading columns")
    """
    previous = {attr: getattr(_thread_local, attr, None) for attr in _CONTEXT_ATTRS}

    try:
        if run_id:
            _thread_local.run_id = run_id
        if table:
            _thread_local.table = table
        yield
    finally:
        for attr, old_value in previous.items():
            if old_value:
                setattr(_thread_local, attr, old_value)
            elif hasattr(_thread_local, attr):
                delattr(_thread_local, attr)


@contextmanager
def log_operation(
    logger: ContextLogger,
    operation: str,
    **extra_fields: Any
) -> Generator[Dict[str, Any], None, None]:
    """
    Context manager for logging operation timing

    Usage:
        with log_operation(logger, "schema_build", database="shop") as ctx:
            graph = builder.build()
            ctx['tables'] = len(graph.tables)
    """
    start_time = time.time()
    context: Dict[str, Any] = {"operation": operation, **extra_fields}

    logger.info(f"Starting {operation}", extra={"extra_fields": context})

    try:
        yield context
        elapsed = time.time() - start_time
        context['duration_ms'] = round(elapsed * 1000, 2)
        context['status'] = 'success'
        logger.info(f"Completed {operation}", extra={"extra_fields": context})
    except Exception as e:
        elapsed = time.time() - start_time
        context['duration_ms'] = round(elapsed * 1000, 2)
        context['status'] = 'error'
        context['error'] = str(e)
        context['error_type'] = type(e).__name__
        logger.error(f"Failed {operation}", extra={"extra_fields": context}, exc_info=True)
        raise
