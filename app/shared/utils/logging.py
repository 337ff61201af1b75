# 📄 File: app/shared/utils/logging.py

# 🧭 Purpose (Layman Explanation):
# This file sets up a smart logging system that records what happens in the app in a structured way,
# so we can see how each plant scan went: how many tries the classifier needed, how long it took,
# and which optional steps (catalog lookup, saving history) quietly failed.

# 🧪 Purpose (Technical Summary):
# Implements structured logging with JSON formatting, contextual information (request/user ids),
# and performance helpers for external API calls and cache operations.

# 🔗 Dependencies:
# - python-json-logger: JSON log formatting
# - logging: Python standard logging
# - contextvars: Request context tracking

# 🔄 Connected Modules / Calls From:
# Used by: identification pipeline components, storage client, API endpoints, app startup

import logging
import os
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional
from uuid import uuid4

from pythonjsonlogger.json import JsonFormatter

# Context variables for request tracking
request_id_var: ContextVar[str] = ContextVar('request_id', default='')
user_id_var: ContextVar[str] = ContextVar('user_id', default='')

SERVICE_NAME = 'plant-scanner-api'

_logging_configured = False
_loggers_cache: Dict[str, "StructuredLogger"] = {}


def _hostname() -> str:
    return os.uname().nodename if hasattr(os, 'uname') else 'unknown'


class ContextualFormatter(logging.Formatter):
    """
    Text formatter that adds request ID, user ID and service data to every record.
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.hostname = _hostname()

    def format(self, record):
        record.request_id = request_id_var.get('')
        record.user_id = user_id_var.get('')
        record.hostname = self.hostname
        record.service = SERVICE_NAME
        record.timestamp = datetime.now(timezone.utc).isoformat()
        return super().format(record)


class JSONFormatter(JsonFormatter):
    """
    JSON formatter for structured logging.

    Outputs one JSON object per record with a consistent structure for
    log aggregation. Structured fields passed through ``extra_fields`` are
    nested under ``extra``.
    """

    def __init__(self):
        super().__init__('%(levelname)s %(name)s %(message)s')
        self.hostname = _hostname()

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record['timestamp'] = datetime.now(timezone.utc).isoformat()
        log_record['level'] = log_record.pop('levelname', record.levelname)
        log_record['logger'] = log_record.pop('name', record.name)
        log_record['module'] = record.module
        log_record['function'] = record.funcName
        log_record['line'] = record.lineno
        log_record['service'] = SERVICE_NAME
        log_record['hostname'] = self.hostname

        if request_id_var.get():
            log_record['request_id'] = request_id_var.get()
        if user_id_var.get():
            log_record['user_id'] = user_id_var.get()

        extra_fields = log_record.pop('extra_fields', None)
        if extra_fields:
            log_record['extra'] = extra_fields


class PerformanceLogger:
    """
    Logger for tracking timing of external calls and cache operations.
    """

    def __init__(self, logger: logging.Logger):
        self.logger = logger

    def log_external_api_call(
        self,
        api_name: str,
        endpoint: str,
        method: str,
        status_code: Optional[int],
        duration_ms: float,
        success: bool,
        extra: Dict = None
    ):
        """Log external API call performance."""
        extra_fields = {
            'event_type': 'external_api_call',
            'api_name': api_name,
            'endpoint': endpoint,
            'method': method,
            'status_code': status_code,
            'duration_ms': duration_ms,
            'success': success,
            **(extra or {})
        }

        level = logging.INFO if success else logging.WARNING
        self.logger.log(
            level,
            f"API {api_name} {method} {endpoint} - {status_code} - {duration_ms:.2f}ms",
            extra={'extra_fields': extra_fields}
        )

    def log_cache_operation(
        self,
        operation: str,
        cache_type: str,
        key: str,
        hit: bool = None,
        extra: Dict = None
    ):
        """Log cache operation."""
        extra_fields = {
            'event_type': 'cache_operation',
            'operation': operation,
            'cache_type': cache_type,
            'cache_key': key,
            **(extra or {})
        }

        if hit is not None:
            extra_fields['cache_hit'] = hit

        self.logger.debug(
            f"Cache {operation} {cache_type} - {key}",
            extra={'extra_fields': extra_fields}
        )


class StructuredLogger:
    """
    Logger with structured logging capabilities.

    Keyword arguments other than exc_info/stack_info/stacklevel become
    structured fields on the record.
    """

    def __init__(self, name: str):
        self.logger = logging.getLogger(name)
        self.performance = PerformanceLogger(self.logger)

    def debug(self, message: str, extra: Dict = None, **kwargs):
        self._log(logging.DEBUG, message, extra, **kwargs)

    def info(self, message: str, extra: Dict = None, **kwargs):
        self._log(logging.INFO, message, extra, **kwargs)

    def warning(self, message: str, extra: Dict = None, **kwargs):
        self._log(logging.WARNING, message, extra, **kwargs)

    def error(self, message: str, extra: Dict = None, exc_info: bool = False, **kwargs):
        self._log(logging.ERROR, message, extra, exc_info=exc_info, **kwargs)

    def critical(self, message: str, extra: Dict = None, exc_info: bool = False, **kwargs):
        self._log(logging.CRITICAL, message, extra, exc_info=exc_info, **kwargs)

    def _log(self, level: int, message: str, extra: Dict = None, **kwargs):
        """Internal log method with extra fields handling."""
        extra_fields = dict(extra or {})

        for key, value in kwargs.items():
            if key not in ['exc_info', 'stack_info', 'stacklevel']:
                extra_fields[key] = value

        clean_kwargs = {k: v for k, v in kwargs.items()
                        if k in ['exc_info', 'stack_info', 'stacklevel']}

        if extra_fields:
            clean_kwargs['extra'] = {'extra_fields': extra_fields}

        self.logger.log(level, message, **clean_kwargs)

    def log_business_event(
        self,
        event_type: str,
        description: str,
        entity_id: str = None,
        entity_type: str = None,
        extra: Dict = None
    ):
        """Log business events for analytics."""
        extra_fields = {
            'event_type': 'business_event',
            'business_event_type': event_type,
            'description': description,
            **(extra or {})
        }

        if entity_id:
            extra_fields['entity_id'] = entity_id
        if entity_type:
            extra_fields['entity_type'] = entity_type

        self.info(description, extra=extra_fields)


def setup_logging(
    log_level: str = 'INFO',
    log_format: str = 'json',
    log_file: str = None,
    enable_console: bool = True
) -> logging.Logger:
    """
    Setup application logging configuration.

    Args:
        log_level: Root log level name
        log_format: 'json' for structured output, anything else for text
        log_file: Optional path of an additional log file
        enable_console: Whether to log to stdout

    Returns:
        The startup logger
    """
    global _logging_configured

    if _logging_configured:
        return logging.getLogger("startup")

    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    if log_format.lower() == 'json':
        formatter = JSONFormatter()
    else:
        formatter = ContextualFormatter('%(timestamp)s - %(name)s - %(levelname)s - %(message)s')

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    if enable_console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(numeric_level)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    logging.getLogger('aiohttp').setLevel(logging.WARNING)
    logging.getLogger('asyncio').setLevel(logging.WARNING)
    logging.getLogger('httpx').setLevel(logging.WARNING)

    _logging_configured = True
    return logging.getLogger("startup")


def get_logger(name: str) -> StructuredLogger:
    """
    Get a structured logger instance.

    Args:
        name: Logger name (usually __name__)

    Returns:
        StructuredLogger instance
    """
    if name in _loggers_cache:
        return _loggers_cache[name]

    logger = StructuredLogger(name)
    _loggers_cache[name] = logger

    return logger


@contextmanager
def log_context(request_id: str = None, user_id: str = None):
    """
    Context manager for adding contextual information to logs.

    Args:
        request_id: Request identifier, generated when omitted
        user_id: User identifier
    """
    if request_id is None:
        request_id = str(uuid4())

    request_token = request_id_var.set(request_id)
    user_token = user_id_var.set(user_id or '')

    try:
        yield {
            'request_id': request_id,
            'user_id': user_id,
        }
    finally:
        request_id_var.reset(request_token)
        user_id_var.reset(user_token)


def log_startup_event(service_name: str, version: str, extra: Dict = None):
    """Log application startup event."""
    logger = get_logger('startup')
    logger.info(
        f"Service {service_name} starting up",
        extra={
            'event_type': 'service_startup',
            'service_name': service_name,
            'version': version,
            **(extra or {})
        }
    )


def log_shutdown_event(service_name: str, extra: Dict = None):
    """Log application shutdown event."""
    logger = get_logger('shutdown')
    logger.info(
        f"Service {service_name} shutting down",
        extra={
            'event_type': 'service_shutdown',
            'service_name': service_name,
            **(extra or {})
        }
    )
