"""
Centralized logging configuration for docdb-remediation.

Functions:
    setup_logging: Configure handlers and formatters once per process.
    configure_cli_logging: Map CLI verbosity flags onto setup_logging.
    reset_logging_config: Undo configuration (tests).

Example:
    >>> from docdb_remediation.logging_config import setup_logging
    >>> setup_logging(level='DEBUG', log_file='remediation.log')
"""
import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Optional

from .logging_context import JSONFormatter


# Track if logging has been configured to avoid duplicate configuration
_LOGGING_CONFIGURED = False


def setup_logging(
    level: str = 'INFO',
    log_file: Optional[str | Path] = None,
    log_format: Optional[str] = None,
    include_timestamp: bool = True,
    use_json: bool = False,
    max_bytes: int = 10 * 1024 * 1024,  # 10MB
    backup_count: int = 5
) -> None:
    """
    Configure logging for docdb-remediation.

    Sets up console and optional file logging with consistent formatting.
    Calling it again only updates the level.

    Args:
        level: Log level ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')
        log_file: Optional path to a log file (rotated)
        log_format: Custom log format string
        include_timestamp: Whether to include timestamps in log messages
        use_json: Emit one JSON object per record (e.g. in AWS Lambda)
        max_bytes: Maximum size of log file before rotation
        backup_count: Number of backup log files to keep
    """
    global _LOGGING_CONFIGURED

    root_logger = logging.getLogger()

    if _LOGGING_CONFIGURED:
        root_logger.setLevel(getattr(logging, level.upper()))
        return

    if log_format is None:
        if include_timestamp:
            log_format = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        else:
            log_format = '%(name)s - %(levelname)s - %(message)s'

    formatter = JSONFormatter() if use_json else logging.Formatter(log_format)

    root_logger.setLevel(getattr(logging, level.upper()))

    # Remove any existing handlers to prevent duplicates
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.DEBUG)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            log_path,
            maxBytes=max_bytes,
            backupCount=backup_count
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

        root_logger.info(f"Logging to file: {log_path}")

    # botocore is chatty at DEBUG
    logging.getLogger('botocore').setLevel(logging.WARNING)
    logging.getLogger('urllib3').setLevel(logging.WARNING)

    _LOGGING_CONFIGURED = True
    root_logger.debug(f"Logging configured at {level} level")


def reset_logging_config() -> None:
    """
    Reset logging configuration.

    Primarily useful for testing.
    """
    global _LOGGING_CONFIGURED

    logging.getLogger().handlers.clear()
    _LOGGING_CONFIGURED = False


def configure_cli_logging(
    verbose: bool = False,
    quiet: bool = False,
    debug: bool = False,
    log_file: Optional[str] = None,
    default_level: str = 'WARNING',
    use_json: bool = False
) -> None:
    """
    Configure logging for CLI usage.

    Args:
        verbose: Show INFO messages
        quiet: Only show errors
        debug: Enable DEBUG level logging (overrides the others)
        log_file: Optional log file path
        default_level: Level used when no verbosity flag is given
        use_json: Emit JSON log records
    """
    if debug:
        level = 'DEBUG'
    elif quiet:
        level = 'ERROR'
    elif verbose:
        level = 'INFO'
    else:
        level = default_level

    setup_logging(
        level=level,
        log_file=log_file,
        include_timestamp=debug,
        use_json=use_json
    )
