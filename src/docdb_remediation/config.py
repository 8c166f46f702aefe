"""Configuration management for docdb-remediation.

Configuration can be loaded from environment variables, YAML/TOML files, or
direct instantiation.

Classes:
    RemediationConfig: Main configuration dataclass with validation.

Example:
    >>> from docdb_remediation.config import RemediationConfig
    >>>
    >>> # Load from environment variables
    >>> config = RemediationConfig.from_env()
    >>>
    >>> # Load from file with env overrides
    >>> config = RemediationConfig.from_file("docdb-remediation.yaml")
    >>>
    >>> # Recommended: automatic loading with fallback
    >>> config = RemediationConfig.load()
    >>> config.validate()
"""
import logging
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

from .config_loader import flatten_config, get_env_config, load_config_with_overrides
from .constants import (
    DEFAULT_CONNECT_TIMEOUT_SECONDS,
    DEFAULT_NOTIFICATION_CHANNEL,
    DEFAULT_READ_TIMEOUT_SECONDS,
    MAX_BACKUP_RETENTION_DAYS,
    MIN_BACKUP_RETENTION_DAYS,
    VALID_LOG_LEVELS,
    VALID_NOTIFICATION_CHANNELS,
)
from .exceptions import InvalidConfigError

logger = logging.getLogger(__name__)


@dataclass
class RemediationConfig:
    """
    Configuration for docdb-remediation.

    Configuration can be loaded from:
    1. Configuration files (YAML or TOML)
    2. Environment variables (override file settings)
    3. Direct instantiation with parameters

    Environment variables:
        DOCDB_REMEDIATION_DESIRED_PARAMETER_GROUP: Parameter group to assign
        DOCDB_REMEDIATION_DESIRED_BACKUP_RETENTION_PERIOD: Retention in days
        DOCDB_REMEDIATION_DRY_RUN: Resolve resources but skip mutations
        DOCDB_REMEDIATION_NOTIFICATION_CHANNEL: sns, log or webhook (default: log)
        DOCDB_REMEDIATION_SNS_TOPIC_ARN: Topic for the sns channel
        DOCDB_REMEDIATION_WEBHOOK_URL: URL for the webhook channel
        DOCDB_REMEDIATION_AWS_REGION: AWS region
        DOCDB_REMEDIATION_AWS_PROFILE: AWS profile
        DOCDB_REMEDIATION_CONNECT_TIMEOUT: Control-plane connect timeout (default: 5)
        DOCDB_REMEDIATION_READ_TIMEOUT: Control-plane read timeout (default: 30)
        DOCDB_REMEDIATION_LOG_LEVEL: Logging level (default: "INFO")
        DOCDB_REMEDIATION_LOG_FILE: Log file path (optional)
        DOCDB_REMEDIATION_LOG_JSON: Emit JSON log records

    The desired values are optional here: the action that needs one fails
    with ConfigurationMissingError when it runs without it.
    """
    # Remediation targets
    desired_parameter_group: Optional[str] = None
    desired_backup_retention_period: Optional[int] = None
    dry_run: bool = False

    # Notifications
    notification_channel: str = DEFAULT_NOTIFICATION_CHANNEL
    sns_topic_arn: Optional[str] = None
    webhook_url: Optional[str] = None

    # AWS
    aws_region: Optional[str] = None
    aws_profile: Optional[str] = None
    connect_timeout: int = DEFAULT_CONNECT_TIMEOUT_SECONDS
    read_timeout: int = DEFAULT_READ_TIMEOUT_SECONDS

    # Logging
    log_level: str = "INFO"
    log_file: Optional[str] = None
    log_json: bool = False

    def validate(self) -> None:
        """
        Validate configuration values.

        Raises:
            InvalidConfigError: If any configuration value is invalid
        """
        errors = []

        if self.notification_channel not in VALID_NOTIFICATION_CHANNELS:
            errors.append(
                f"notification_channel must be one of {VALID_NOTIFICATION_CHANNELS}, "
                f"got '{self.notification_channel}'"
            )
        if self.notification_channel == "sns" and not self.sns_topic_arn:
            errors.append("sns_topic_arn must be specified when notification_channel is 'sns'")
        if self.notification_channel == "webhook" and not self.webhook_url:
            errors.append("webhook_url must be specified when notification_channel is 'webhook'")

        if self.desired_backup_retention_period is not None:
            try:
                period = int(self.desired_backup_retention_period)
            except (TypeError, ValueError):
                period = None
            if period is None or not (MIN_BACKUP_RETENTION_DAYS <= period <= MAX_BACKUP_RETENTION_DAYS):
                errors.append(
                    f"desired_backup_retention_period must be between "
                    f"{MIN_BACKUP_RETENTION_DAYS} and {MAX_BACKUP_RETENTION_DAYS} days, "
                    f"got {self.desired_backup_retention_period!r}"
                )

        # File values may arrive as strings; store the coerced integers
        for name in ("connect_timeout", "read_timeout"):
            value = getattr(self, name)
            try:
                timeout = int(value)
            except (TypeError, ValueError):
                errors.append(f"{name} must be an integer number of seconds, got {value!r}")
                continue
            if timeout <= 0:
                errors.append(f"{name} must be positive, got {timeout}")
            else:
                setattr(self, name, timeout)

        if str(self.log_level).upper() not in VALID_LOG_LEVELS:
            errors.append(
                f"log_level must be one of {sorted(VALID_LOG_LEVELS)}, got '{self.log_level}'"
            )

        if errors:
            raise InvalidConfigError("Configuration validation failed:\n  - " + "\n  - ".join(errors))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)

    @classmethod
    def from_env(cls) -> 'RemediationConfig':
        """
        Create configuration from environment variables only.

        Returns:
            RemediationConfig populated from environment variables
        """
        return cls(**flatten_config(get_env_config()))

    @classmethod
    def from_file(cls, config_path: Optional[str] = None) -> 'RemediationConfig':
        """
        Create configuration from file with environment variable overrides.

        If no path is provided, searches standard locations; a file found
        there that cannot be parsed is logged and environment-only
        configuration is used instead. Errors loading an explicit path
        propagate.

        Args:
            config_path: Optional explicit path to config file.

        Returns:
            RemediationConfig instance with merged configuration

        Raises:
            FileNotFoundError: If explicit config_path doesn't exist
            ValueError: If an explicit config file cannot be parsed
        """
        if config_path:
            return cls(**load_config_with_overrides(config_path))

        try:
            return cls(**load_config_with_overrides())
        except (OSError, ValueError) as e:
            logger.error(f"Failed to load configuration from file: {e}")
            logger.warning("Falling back to environment variable configuration")
            return cls.from_env()

    @classmethod
    def load(cls, config_path: Optional[str] = None, use_file: bool = True) -> 'RemediationConfig':
        """
        Load configuration with automatic fallback.

        This is the recommended method for loading configuration.

        Args:
            config_path: Optional explicit path to config file
            use_file: If True, attempts to load from file before env vars

        Returns:
            RemediationConfig instance
        """
        if use_file:
            return cls.from_file(config_path)
        return cls.from_env()
