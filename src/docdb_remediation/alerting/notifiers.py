"""
Notification channels for remediation workflow notifications.

Supports Amazon SNS, generic JSON webhooks and the logging system. Send
failures raise TransportError; the workflow does not wait for or track
delivery confirmation.
"""
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import requests
from botocore.exceptions import BotoCoreError, ClientError

from ..constants import DEFAULT_WEBHOOK_TIMEOUT_SECONDS, SNS_SUBJECT_MAX_LENGTH
from ..exceptions import TransportError
from ..integrations.documentdb import create_client
from ..models import Notification

logger = logging.getLogger(__name__)


def sanitize_subject(subject: str, max_length: int = SNS_SUBJECT_MAX_LENGTH) -> str:
    """
    Make a subject acceptable to SNS.

    SNS subjects must be ASCII, single line and at most 100 characters.

    Args:
        subject: Raw subject
        max_length: Maximum length

    Returns:
        Sanitized subject
    """
    single_line = " ".join(subject.split())
    ascii_only = single_line.encode("ascii", "ignore").decode("ascii")
    if len(ascii_only) > max_length:
        ascii_only = ascii_only[:max_length - 3].rstrip() + "..."
    return ascii_only


class Notifier(ABC):
    """Abstract base class for notification channels."""

    @abstractmethod
    def send(self, notification: Notification) -> None:
        """
        Send a notification.

        Args:
            notification: Subject and body to send

        Raises:
            TransportError: If the channel rejects the notification
        """
        pass


class LogNotifier(Notifier):
    """
    Notifier that writes to the logging system.

    Used for local runs, dry runs and tests.
    """

    def __init__(self, level: int = logging.INFO):
        self.level = level

    def send(self, notification: Notification) -> None:
        logger.log(self.level, f"[NOTIFICATION] {notification.subject}\n{notification.body}")


class SNSNotifier(Notifier):
    """
    Amazon SNS topic notifier.

    Example:
        >>> notifier = SNSNotifier(
        ...     topic_arn="arn:aws:sns:us-east-1:123456789012:compliance",
        ...     region="us-east-1"
        ... )
        >>> notifier.send(Notification(subject="Hi", body="There"))
    """

    def __init__(
        self,
        topic_arn: str,
        region: Optional[str] = None,
        profile_name: Optional[str] = None,
        client: Any = None
    ):
        """
        Initialize SNS notifier.

        Args:
            topic_arn: Target topic ARN
            region: Optional AWS region
            profile_name: Optional AWS profile name
            client: Pre-built sns client (a new one is created if None)
        """
        self.topic_arn = topic_arn
        self.client = client or create_client("sns", region=region, profile_name=profile_name)

    def send(self, notification: Notification) -> None:
        try:
            response = self.client.publish(
                TopicArn=self.topic_arn,
                Subject=sanitize_subject(notification.subject),
                Message=notification.body,
            )
        except (ClientError, BotoCoreError) as e:
            raise TransportError("sns:Publish", str(e)) from e

        logger.debug(f"SNS notification published: {response.get('MessageId')}")


class WebhookNotifier(Notifier):
    """
    Generic JSON webhook notifier.

    POSTs ``{"subject": ..., "body": ...}`` to the configured URL.
    """

    def __init__(
        self,
        webhook_url: str,
        timeout: int = DEFAULT_WEBHOOK_TIMEOUT_SECONDS,
        headers: Optional[Dict[str, str]] = None
    ):
        """
        Initialize webhook notifier.

        Args:
            webhook_url: Webhook URL
            timeout: Request timeout in seconds
            headers: Extra HTTP headers
        """
        self.webhook_url = webhook_url
        self.timeout = timeout
        self.headers = headers or {}

    def send(self, notification: Notification) -> None:
        payload = {
            "subject": notification.subject,
            "body": notification.body,
        }

        try:
            response = requests.post(
                self.webhook_url,
                json=payload,
                headers=self.headers,
                timeout=self.timeout
            )
            response.raise_for_status()
        except requests.RequestException as e:
            raise TransportError("webhook", str(e)) from e

        logger.debug(f"Webhook notification sent to {self.webhook_url}")
