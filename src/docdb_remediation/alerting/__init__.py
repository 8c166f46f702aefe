"""
Notification channels for docdb-remediation.
"""
from .notifiers import (
    Notifier,
    LogNotifier,
    SNSNotifier,
    WebhookNotifier,
    sanitize_subject,
)

__all__ = [
    "Notifier",
    "LogNotifier",
    "SNSNotifier",
    "WebhookNotifier",
    "sanitize_subject",
]
