"""
Structured logging with correlation IDs for workflow executions.

This module provides context-aware logging that automatically includes
the execution id, config rule name and resource id in all log messages
emitted while an execution is running.
"""

import contextvars
import logging
import json
from typing import Any, Optional
from datetime import datetime, timezone

CONTEXT_FIELDS = ('execution_id', 'config_rule_name', 'resource_id')

# Context variables for storing execution context across threads and tasks
execution_context: contextvars.ContextVar[dict] = contextvars.ContextVar(
    'execution_context', default={}
)


class ContextualLogger(logging.LoggerAdapter):
    """
    Logger adapter that automatically injects correlation IDs into log records.

    Usage:
        logger = get_logger(__name__)
        with LoggingContext(execution_id='rem-abc123'):
            logger.info("Classifying event")
    """

    def process(self, msg: str, kwargs: dict) -> tuple[str, dict]:
        """Inject context variables into log extra fields."""
        ctx = execution_context.get({})
        extra = dict(kwargs.get('extra', {}))

        for key in CONTEXT_FIELDS:
            if ctx.get(key) is not None:
                extra[key] = ctx[key]

        kwargs['extra'] = extra
        if ctx.get('execution_id'):
            msg = f"[{ctx['execution_id']}] {msg}"
        return msg, kwargs


class JSONFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.

    Outputs log records as JSON objects with consistent fields.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data = {
            'timestamp': datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno,
        }

        for key in CONTEXT_FIELDS:
            if hasattr(record, key):
                log_data[key] = getattr(record, key)

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_data)


def get_logger(name: str) -> ContextualLogger:
    """
    Get a contextual logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        ContextualLogger instance
    """
    return ContextualLogger(logging.getLogger(name), {})


def set_context(**kwargs: Any) -> contextvars.Token:
    """
    Set execution context for correlation.

    Args:
        **kwargs: Context values (execution_id, config_rule_name, resource_id)

    Returns:
        Token to reset context later
    """
    current = execution_context.get({}).copy()
    current.update(kwargs)
    return execution_context.set(current)


def get_context() -> dict:
    """Get current execution context."""
    return execution_context.get({}).copy()


def clear_context() -> None:
    """Clear execution context."""
    execution_context.set({})


class LoggingContext:
    """
    Context manager for setting logging context.

    Usage:
        with LoggingContext(execution_id='rem-abc123'):
            logger.info("Processing")  # Includes execution_id
    """

    def __init__(self, **kwargs: Any):
        self.kwargs = kwargs
        self.token: Optional[contextvars.Token] = None

    def __enter__(self):
        self.token = set_context(**self.kwargs)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.token:
            execution_context.reset(self.token)
        return False
