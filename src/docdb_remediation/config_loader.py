"""
Configuration file loader for docdb-remediation.

Supports loading configuration from YAML and TOML files with environment
variable overrides and a standard search path.

File layout (YAML shown, TOML uses the same sections)::

    remediation:
      desired_parameter_group: blogpost-param-group
      desired_backup_retention_period: 7
      dry_run: false
    notifications:
      channel: sns
      sns_topic_arn: arn:aws:sns:us-east-1:123456789012:compliance
    aws:
      region: us-east-1
    logging:
      level: INFO
"""

import os
import logging
from pathlib import Path
from typing import Any, Callable, Optional

from .constants import ENV_PREFIX

logger = logging.getLogger(__name__)

CONFIG_FILE_STEM = "docdb-remediation"


def _parse_bool(value: str) -> bool:
    return value.lower() in ("true", "1", "yes")


# (environment suffix, file section, file key, parser)
ENV_OVERRIDES: list[tuple[str, str, str, Callable[[str], Any]]] = [
    ("DESIRED_PARAMETER_GROUP", "remediation", "desired_parameter_group", str),
    ("DESIRED_BACKUP_RETENTION_PERIOD", "remediation", "desired_backup_retention_period", int),
    ("DRY_RUN", "remediation", "dry_run", _parse_bool),
    ("NOTIFICATION_CHANNEL", "notifications", "channel", str),
    ("SNS_TOPIC_ARN", "notifications", "sns_topic_arn", str),
    ("WEBHOOK_URL", "notifications", "webhook_url", str),
    ("AWS_REGION", "aws", "region", str),
    ("AWS_PROFILE", "aws", "profile", str),
    ("CONNECT_TIMEOUT", "aws", "connect_timeout", int),
    ("READ_TIMEOUT", "aws", "read_timeout", int),
    ("LOG_LEVEL", "logging", "level", str),
    ("LOG_FILE", "logging", "file", str),
    ("LOG_JSON", "logging", "json", _parse_bool),
]

# (file section, file key) -> RemediationConfig field
FIELD_MAP = {
    ("remediation", "desired_parameter_group"): "desired_parameter_group",
    ("remediation", "desired_backup_retention_period"): "desired_backup_retention_period",
    ("remediation", "dry_run"): "dry_run",
    ("notifications", "channel"): "notification_channel",
    ("notifications", "sns_topic_arn"): "sns_topic_arn",
    ("notifications", "webhook_url"): "webhook_url",
    ("aws", "region"): "aws_region",
    ("aws", "profile"): "aws_profile",
    ("aws", "connect_timeout"): "connect_timeout",
    ("aws", "read_timeout"): "read_timeout",
    ("logging", "level"): "log_level",
    ("logging", "file"): "log_file",
    ("logging", "json"): "log_json",
}


def load_yaml_file(path: Path) -> dict:
    """
    Load configuration from a YAML file.

    Args:
        path: Path to the YAML file

    Returns:
        Dictionary containing configuration data

    Raises:
        FileNotFoundError: If file doesn't exist
        ValueError: If YAML parsing fails
    """
    import yaml

    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    try:
        with open(path, 'r') as f:
            config = yaml.safe_load(f)
            return config if config is not None else {}
    except yaml.YAMLError as e:
        raise ValueError(f"Failed to parse YAML config file {path}: {e}") from e


def load_toml_file(path: Path) -> dict:
    """
    Load configuration from a TOML file.

    Args:
        path: Path to the TOML file

    Returns:
        Dictionary containing configuration data

    Raises:
        FileNotFoundError: If file doesn't exist
        ValueError: If TOML parsing fails
    """
    try:
        # Python 3.11+ has tomllib built-in
        import tomllib
    except ImportError:
        import tomli as tomllib

    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    try:
        with open(path, 'rb') as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ValueError(f"Failed to parse TOML config file {path}: {e}") from e


def load_config_file(path: str) -> dict:
    """
    Load configuration from a YAML or TOML file.

    The file format is determined by the file extension (.yaml, .yml, or .toml).

    Raises:
        ValueError: If file extension is not supported or parsing fails
        FileNotFoundError: If file doesn't exist
    """
    file_path = Path(path)
    suffix = file_path.suffix.lower()

    if suffix in ['.yaml', '.yml']:
        return load_yaml_file(file_path)
    elif suffix == '.toml':
        return load_toml_file(file_path)
    else:
        raise ValueError(
            f"Unsupported config file format: {suffix}. "
            "Supported formats: .yaml, .yml, .toml"
        )


def find_config_file() -> Optional[Path]:
    """
    Search for a configuration file in standard locations.

    Search order:
    1. ./docdb-remediation.yaml, ./docdb-remediation.toml
    2. ~/.docdb-remediation.yaml, ~/.docdb-remediation.toml
    3. /etc/docdb-remediation.yaml, /etc/docdb-remediation.toml

    Returns:
        Path to the first configuration file found, or None
    """
    search_paths = [
        Path.cwd() / f"{CONFIG_FILE_STEM}.yaml",
        Path.cwd() / f"{CONFIG_FILE_STEM}.toml",
        Path.home() / f".{CONFIG_FILE_STEM}.yaml",
        Path.home() / f".{CONFIG_FILE_STEM}.toml",
        Path(f"/etc/{CONFIG_FILE_STEM}.yaml"),
        Path(f"/etc/{CONFIG_FILE_STEM}.toml"),
    ]

    for path in search_paths:
        if path.exists() and path.is_file():
            logger.info(f"Found configuration file: {path}")
            return path

    logger.debug("No configuration file found in standard locations")
    return None


def get_env_config() -> dict:
    """
    Extract configuration from environment variables.

    Values that cannot be parsed are logged and ignored.

    Returns:
        Nested dictionary in the same layout as a config file
    """
    config: dict = {}

    for suffix, section, key, parse in ENV_OVERRIDES:
        name = f"{ENV_PREFIX}{suffix}"
        raw = os.getenv(name)
        if raw is None or raw == "":
            continue
        try:
            value = parse(raw)
        except ValueError:
            logger.warning(f"Invalid {name}={raw!r}, ignoring")
            continue
        config.setdefault(section, {})[key] = value

    return config


def deep_merge(base: dict, override: dict) -> dict:
    """
    Deep merge two dictionaries, with override values taking precedence.
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def flatten_config(config: dict) -> dict:
    """
    Flatten nested configuration to RemediationConfig field names.

    Unknown sections and keys are logged and dropped.
    """
    flat = {}

    for section, values in config.items():
        if not isinstance(values, dict):
            logger.warning(f"Ignoring config entry '{section}' (expected a section)")
            continue
        for key, value in values.items():
            field_name = FIELD_MAP.get((section, key))
            if field_name is None:
                logger.warning(f"Ignoring unknown config option '{section}.{key}'")
                continue
            flat[field_name] = value

    return flat


def merge_config(file_config: dict, env_config: dict) -> dict:
    """
    Merge file-based and environment-based configuration (env wins).

    Returns:
        Flattened configuration dictionary
    """
    return flatten_config(deep_merge(file_config, env_config))


def load_config_with_overrides(config_path: Optional[str] = None) -> dict:
    """
    Load configuration from file with environment variable overrides.

    Args:
        config_path: Optional explicit path to config file.
                    If None, searches standard locations.

    Returns:
        Dictionary containing merged configuration

    Raises:
        FileNotFoundError: If explicit config_path doesn't exist
        ValueError: If config parsing fails
    """
    file_config = {}

    if config_path:
        file_config = load_config_file(config_path)
        logger.info(f"Loaded configuration from: {config_path}")
    else:
        found_path = find_config_file()
        if found_path:
            file_config = load_config_file(str(found_path))
            logger.info(f"Loaded configuration from: {found_path}")

    env_config = get_env_config()
    if env_config:
        logger.info("Applying environment variable overrides")

    return merge_config(file_config, env_config)
