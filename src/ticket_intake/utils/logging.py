# ============================================================================
# src/ticket_intake/utils/logging.py
# ============================================================================
"""
Logging configuration and utilities for the ticket intake pipeline.
"""

import asyncio
import functools
import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from contextvars import ContextVar
from typing import Any, Dict, Optional


def setup_logging(
    level: str = "INFO",
    log_file: Optional[Path] = None,
    format_json: bool = False
) -> None:
    """
    Setup logging configuration.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional file path for logging
        format_json: Whether to use JSON format
    """
    log_level = getattr(logging, level.upper())

    if format_json:
        formatter = JsonFormatter()
    else:
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

    handlers = []

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    handlers.append(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    logging.basicConfig(
        level=log_level,
        handlers=handlers,
        force=True
    )


class JsonFormatter(logging.Formatter):
    """JSON log formatter."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            'timestamp': datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno
        }

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        # Branch context attached by LogContext
        source_id = getattr(record, 'source_id', None)
        if source_id:
            log_data['source_id'] = source_id

        return json.dumps(log_data)


class LogContext:
    """
    Context manager for adding context to logs.

    Context lives in a ContextVar, so concurrent asyncio branches each see
    only their own values.
    """

    def __init__(self, logger: logging.Logger, **context):
        self.logger = logger
        self.context = context
        self._token = None

    def __enter__(self):
        _install_record_factory()
        self._token = _log_context.set({**_log_context.get(), **self.context})
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        _log_context.reset(self._token)


_log_context: ContextVar[Dict[str, Any]] = ContextVar("log_context", default={})
_factory_installed = False


def _install_record_factory() -> None:
    global _factory_installed
    if _factory_installed:
        return
    _factory_installed = True
    old_factory = logging.getLogRecordFactory()

    def record_factory(*args, **kwargs):
        record = old_factory(*args, **kwargs)
        for key, value in _log_context.get().items():
            setattr(record, key, value)
        return record

    logging.setLogRecordFactory(record_factory)


def log_performance(logger: logging.Logger, operation: str):
    """
    Decorator to log operation performance.

    Works on both plain functions and coroutine functions.

    Args:
        logger: Logger instance
        operation: Operation name
    """
    def decorator(func):
        if asyncio.iscoroutinefunction(func):
            @functools.wraps(func)
            async def async_wrapper(*args, **kwargs):
                start_time = datetime.now()
                try:
                    result = await func(*args, **kwargs)
                    duration = (datetime.now() - start_time).total_seconds()
                    logger.info(f"{operation} completed in {duration:.3f}s")
                    return result
                except Exception as e:
                    duration = (datetime.now() - start_time).total_seconds()
                    logger.error(f"{operation} failed after {duration:.3f}s: {str(e)}")
                    raise
            return async_wrapper

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            start_time = datetime.now()

            try:
                result = func(*args, **kwargs)
                duration = (datetime.now() - start_time).total_seconds()
                logger.info(f"{operation} completed in {duration:.3f}s")
                return result

            except Exception as e:
                duration = (datetime.now() - start_time).total_seconds()
                logger.error(f"{operation} failed after {duration:.3f}s: {str(e)}")
                raise

        return wrapper
    return decorator


def mask_license(license_number: Optional[str]) -> str:
    """Mask all but the last four characters of a license number for logs."""
    if not license_number:
        return "<none>"
    visible = license_number[-4:]
    return "*" * max(len(license_number) - 4, 0) + visible
