"""
Factory functions wiring a RemediationWorkflow from configuration.
"""
import logging
from typing import Optional

from .alerting.notifiers import LogNotifier, Notifier, SNSNotifier, WebhookNotifier
from .config import RemediationConfig
from .exceptions import InvalidConfigError
from .integrations.base import ControlPlane
from .integrations.documentdb import DocumentDBControlPlane
from .remediation.actions import (
    BackupRetentionRemediation,
    DeletionProtectionRemediation,
    ParameterGroupRemediation,
)
from .remediation.resolver import ResourceResolver
from .remediation.workflow import RemediationWorkflow

logger = logging.getLogger(__name__)


def create_control_plane(config: RemediationConfig) -> ControlPlane:
    """Create the DocumentDB control plane described by the configuration."""
    return DocumentDBControlPlane(
        region=config.aws_region,
        profile_name=config.aws_profile,
        connect_timeout=config.connect_timeout,
        read_timeout=config.read_timeout,
    )


def create_notifier(config: RemediationConfig) -> Notifier:
    """
    Create the notifier for the configured channel.

    Raises:
        InvalidConfigError: If the channel is unknown or incomplete
    """
    channel = config.notification_channel

    if channel == "sns":
        if not config.sns_topic_arn:
            raise InvalidConfigError("sns_topic_arn is required for the sns channel")
        return SNSNotifier(
            topic_arn=config.sns_topic_arn,
            region=config.aws_region,
            profile_name=config.aws_profile,
        )
    elif channel == "webhook":
        if not config.webhook_url:
            raise InvalidConfigError("webhook_url is required for the webhook channel")
        return WebhookNotifier(webhook_url=config.webhook_url)
    elif channel == "log":
        return LogNotifier()

    raise InvalidConfigError(f"Unknown notification channel: {channel}")


def build_workflow(
    config: RemediationConfig,
    control_plane: Optional[ControlPlane] = None,
    notifier: Optional[Notifier] = None
) -> RemediationWorkflow:
    """
    Build a fully wired workflow.

    Args:
        config: Remediation configuration
        control_plane: Control plane override (default: DocumentDB)
        notifier: Notifier override (default: configured channel)

    Returns:
        RemediationWorkflow
    """
    control_plane = control_plane or create_control_plane(config)
    notifier = notifier or create_notifier(config)
    resolver = ResourceResolver(control_plane)

    actions = [
        ParameterGroupRemediation(
            resolver,
            control_plane,
            desired_parameter_group=config.desired_parameter_group,
            dry_run=config.dry_run,
        ),
        BackupRetentionRemediation(
            resolver,
            control_plane,
            desired_backup_retention_period=config.desired_backup_retention_period,
            dry_run=config.dry_run,
        ),
        DeletionProtectionRemediation(resolver, control_plane, dry_run=config.dry_run),
    ]

    for action in actions:
        problem = action.validate()
        if problem:
            logger.warning(f"{action}: {problem}; matching events will fail")

    return RemediationWorkflow(actions, notifier)
