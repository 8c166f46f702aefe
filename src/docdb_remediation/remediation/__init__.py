"""
Remediation workflow for non-compliant DocumentDB resources.

This package provides:
- Rule classification
- Resource resolution by durable identifier
- Remediation actions (deletion protection, parameter group, backup retention)
- The state-machine workflow tying them to notifications

Classes:
    RemediationWorkflow: Runs one execution per compliance event
    RuleClassifier: Config rule name to directive
    ResourceResolver: Durable identifier to current name
    RemediationAction: Base class for actions
"""

from .classifier import RuleClassifier
from .resolver import ResourceResolver
from .actions import (
    ActionResult,
    ActionStatus,
    RemediationAction,
    DeletionProtectionRemediation,
    ParameterGroupRemediation,
    BackupRetentionRemediation,
)
from .workflow import (
    RemediationWorkflow,
    WorkflowExecution,
    WorkflowState,
    TRANSITIONS,
    CATCHES,
    transition_table,
)

__all__ = [
    "RuleClassifier",
    "ResourceResolver",
    "ActionResult",
    "ActionStatus",
    "RemediationAction",
    "DeletionProtectionRemediation",
    "ParameterGroupRemediation",
    "BackupRetentionRemediation",
    "RemediationWorkflow",
    "WorkflowExecution",
    "WorkflowState",
    "TRANSITIONS",
    "CATCHES",
    "transition_table",
]
