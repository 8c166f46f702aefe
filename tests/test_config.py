"""
Tests for configuration loading, environment overrides and validation.
"""

import os

import pytest

from docdb_remediation.config import RemediationConfig
from docdb_remediation.config_loader import (
    deep_merge,
    find_config_file,
    flatten_config,
    get_env_config,
    load_config_file,
    load_config_with_overrides,
)
from docdb_remediation.exceptions import InvalidConfigError


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """No DOCDB_REMEDIATION_* variables and no config files on the search path."""
    for name in list(os.environ):
        if name.startswith("DOCDB_REMEDIATION_"):
            monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))


YAML_CONFIG = """
remediation:
  desired_parameter_group: blogpost-param-group
  desired_backup_retention_period: 7
notifications:
  channel: sns
  sns_topic_arn: arn:aws:sns:us-east-1:123456789012:compliance
aws:
  region: us-east-1
logging:
  level: DEBUG
"""

TOML_CONFIG = """
[remediation]
desired_parameter_group = "toml-params"
dry_run = true

[aws]
read_timeout = 12
"""


class TestValidation:
    """Defaults and validate()."""

    def test_defaults_are_valid(self):
        config = RemediationConfig()

        config.validate()
        assert config.notification_channel == "log"
        assert config.desired_parameter_group is None
        assert config.dry_run is False

    def test_validate_collects_all_errors(self):
        config = RemediationConfig(
            notification_channel="pager",
            desired_backup_retention_period=90,
            read_timeout=0,
            log_level="LOUD",
        )

        with pytest.raises(InvalidConfigError) as exc_info:
            config.validate()

        message = str(exc_info.value)
        assert "notification_channel" in message
        assert "desired_backup_retention_period" in message
        assert "read_timeout" in message
        assert "log_level" in message

    def test_validate_requires_channel_targets(self):
        with pytest.raises(InvalidConfigError, match="sns_topic_arn"):
            RemediationConfig(notification_channel="sns").validate()
        with pytest.raises(InvalidConfigError, match="webhook_url"):
            RemediationConfig(notification_channel="webhook").validate()

    def test_validate_coerces_numeric_strings(self):
        config = RemediationConfig(connect_timeout="5", read_timeout="12")

        config.validate()

        assert config.connect_timeout == 5
        assert config.read_timeout == 12

    @pytest.mark.parametrize("value", ["fast", None, [5]])
    def test_validate_reports_non_numeric_timeout(self, value):
        with pytest.raises(InvalidConfigError, match="connect_timeout must be an integer"):
            RemediationConfig(connect_timeout=value).validate()

    @pytest.mark.parametrize("period", [1, 7, 35, "14"])
    def test_validate_accepts_retention_in_range(self, period):
        RemediationConfig(desired_backup_retention_period=period).validate()

    @pytest.mark.parametrize("period", [0, 36, "weekly"])
    def test_validate_rejects_retention_out_of_range(self, period):
        with pytest.raises(InvalidConfigError, match="between 1 and 35"):
            RemediationConfig(desired_backup_retention_period=period).validate()


class TestEnvironment:
    """DOCDB_REMEDIATION_* variables."""

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("DOCDB_REMEDIATION_DESIRED_PARAMETER_GROUP", "env-params")
        monkeypatch.setenv("DOCDB_REMEDIATION_DESIRED_BACKUP_RETENTION_PERIOD", "10")
        monkeypatch.setenv("DOCDB_REMEDIATION_DRY_RUN", "yes")
        monkeypatch.setenv("DOCDB_REMEDIATION_LOG_JSON", "false")

        config = RemediationConfig.from_env()

        assert config.desired_parameter_group == "env-params"
        assert config.desired_backup_retention_period == 10
        assert config.dry_run is True
        assert config.log_json is False

    def test_invalid_env_value_is_ignored(self, monkeypatch):
        monkeypatch.setenv("DOCDB_REMEDIATION_READ_TIMEOUT", "slow")

        assert get_env_config() == {}
        assert RemediationConfig.from_env().read_timeout == 30

    def test_empty_env_value_is_ignored(self, monkeypatch):
        monkeypatch.setenv("DOCDB_REMEDIATION_AWS_REGION", "")

        assert "aws" not in get_env_config()


class TestConfigFiles:
    """YAML and TOML files, search path and fallback."""

    def test_load_yaml_file(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text(YAML_CONFIG)

        config = RemediationConfig.from_file(str(path))

        assert config.desired_parameter_group == "blogpost-param-group"
        assert config.desired_backup_retention_period == 7
        assert config.notification_channel == "sns"
        assert config.aws_region == "us-east-1"
        assert config.log_level == "DEBUG"
        config.validate()

    def test_load_toml_file(self, tmp_path):
        path = tmp_path / "settings.toml"
        path.write_text(TOML_CONFIG)

        config = RemediationConfig.from_file(str(path))

        assert config.desired_parameter_group == "toml-params"
        assert config.dry_run is True
        assert config.read_timeout == 12

    def test_env_overrides_file(self, tmp_path, monkeypatch):
        path = tmp_path / "settings.yaml"
        path.write_text(YAML_CONFIG)
        monkeypatch.setenv("DOCDB_REMEDIATION_DESIRED_PARAMETER_GROUP", "override")

        flat = load_config_with_overrides(str(path))

        assert flat["desired_parameter_group"] == "override"
        assert flat["desired_backup_retention_period"] == 7

    def test_string_timeout_in_file_is_coerced(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("aws:\n  connect_timeout: \"5\"\n")

        config = RemediationConfig.from_file(str(path))
        config.validate()

        assert config.connect_timeout == 5

    def test_unsupported_extension(self, tmp_path):
        path = tmp_path / "settings.ini"
        path.write_text("[remediation]")

        with pytest.raises(ValueError, match="Unsupported config file format"):
            load_config_file(str(path))

    def test_explicit_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            RemediationConfig.from_file(str(tmp_path / "missing.yaml"))

    def test_explicit_invalid_yaml_raises(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("remediation: [unclosed")

        with pytest.raises(ValueError, match="Failed to parse YAML"):
            RemediationConfig.from_file(str(path))

    def test_search_path_finds_cwd_file(self, tmp_path):
        (tmp_path / "docdb-remediation.toml").write_text(TOML_CONFIG)

        assert find_config_file() == tmp_path / "docdb-remediation.toml"
        assert RemediationConfig.load().desired_parameter_group == "toml-params"

    def test_broken_search_path_file_falls_back_to_env(self, tmp_path, monkeypatch):
        (tmp_path / "docdb-remediation.yaml").write_text("remediation: [unclosed")
        monkeypatch.setenv("DOCDB_REMEDIATION_DESIRED_PARAMETER_GROUP", "from-env")

        config = RemediationConfig.load()

        assert config.desired_parameter_group == "from-env"

    def test_load_without_file_uses_env(self, tmp_path, monkeypatch):
        (tmp_path / "docdb-remediation.toml").write_text(TOML_CONFIG)

        config = RemediationConfig.load(use_file=False)

        assert config.desired_parameter_group is None


class TestHelpers:
    """Merging and flattening."""

    def test_deep_merge(self):
        merged = deep_merge(
            {"aws": {"region": "us-east-1", "profile": "ops"}, "logging": {"level": "INFO"}},
            {"aws": {"region": "eu-west-1"}}
        )

        assert merged == {
            "aws": {"region": "eu-west-1", "profile": "ops"},
            "logging": {"level": "INFO"},
        }

    def test_flatten_drops_unknown_options(self, caplog):
        flat = flatten_config({
            "aws": {"region": "us-east-1", "colour": "blue"},
            "stray": "value",
        })

        assert flat == {"aws_region": "us-east-1"}
        assert "aws.colour" in caplog.text
        assert "stray" in caplog.text
