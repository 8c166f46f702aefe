"""
Trigger adapter for the remediation workflow.

Accepts AWS Config compliance-change notifications, either wrapped in an
EventBridge envelope or as the bare ``detail`` object, and runs one
workflow execution per matching event. ``lambda_handler`` is the AWS
Lambda entry point.
"""
import logging
from typing import Any, Dict, Optional

from pydantic import ValidationError

from .config import RemediationConfig
from .constants import (
    EVENT_DETAIL_TYPE,
    EVENT_MESSAGE_TYPE,
    EVENT_SOURCE,
    RULE_NAME_PREFIX,
)
from .exceptions import InvalidEventError
from .factory import build_workflow
from .logging_config import setup_logging
from .models import ComplianceEvent, ComplianceType, ResourceType
from .remediation.workflow import RemediationWorkflow

logger = logging.getLogger(__name__)

_ACCEPTED_RESOURCE_TYPES = {t.aws_type for t in ResourceType} | {t.value for t in ResourceType}

_workflow: Optional[RemediationWorkflow] = None


def _detail_of(payload: Dict[str, Any]) -> Dict[str, Any]:
    detail = payload.get("detail")
    return detail if isinstance(detail, dict) else payload


def parse_event(payload: Any) -> ComplianceEvent:
    """
    Parse a compliance event from an envelope or bare detail.

    Args:
        payload: Decoded JSON payload

    Returns:
        ComplianceEvent

    Raises:
        InvalidEventError: If the payload is not a valid compliance event
    """
    if not isinstance(payload, dict):
        raise InvalidEventError(f"Expected a JSON object, got {type(payload).__name__}")

    try:
        return ComplianceEvent.model_validate(_detail_of(payload))
    except ValidationError as e:
        raise InvalidEventError(f"Invalid compliance event: {e}") from e


def matches_event_pattern(payload: Dict[str, Any]) -> bool:
    """
    Check a payload against the upstream delivery rule.

    Envelopes must come from AWS Config as compliance change notifications.
    Every payload must name a ``documentdb-`` rule, a cluster or instance
    and a NON_COMPLIANT result.
    """
    if not isinstance(payload, dict):
        return False

    detail = _detail_of(payload)
    if detail is not payload:
        if payload.get("source") != EVENT_SOURCE:
            return False
        if payload.get("detail-type") != EVENT_DETAIL_TYPE:
            return False
        if detail.get("messageType") != EVENT_MESSAGE_TYPE:
            return False

    rule_name = detail.get("configRuleName") or ""
    if not isinstance(rule_name, str) or not rule_name.startswith(RULE_NAME_PREFIX):
        return False

    resource_type = detail.get("resourceType", ResourceType.CLUSTER.value)
    if resource_type not in _ACCEPTED_RESOURCE_TYPES:
        return False

    result = detail.get("newEvaluationResult")
    if isinstance(result, dict) and "complianceType" in result:
        compliance = result["complianceType"]
    else:
        compliance = detail.get("complianceType", ComplianceType.NON_COMPLIANT.value)
    return compliance == ComplianceType.NON_COMPLIANT.value


def handle_payload(payload: Any, workflow: RemediationWorkflow) -> Dict[str, Any]:
    """
    Filter, parse and process one payload.

    Returns:
        ``{"status": "ignored", ...}`` for payloads outside the delivery
        rule, otherwise ``{"status": "completed", ...outcome}``

    Raises:
        InvalidEventError: If a matching payload cannot be parsed
        WorkflowError: If the execution fails
    """
    if not matches_event_pattern(payload):
        logger.info("Ignoring payload that does not match the remediation event pattern")
        return {"status": "ignored", "reason": "event pattern mismatch"}

    event = parse_event(payload)
    outcome = workflow.handle_compliance_event(event)
    return {"status": "completed", **outcome.to_dict()}


def get_workflow() -> RemediationWorkflow:
    """Workflow built from configuration, reused across warm invocations."""
    global _workflow

    if _workflow is None:
        config = RemediationConfig.load()
        config.validate()
        setup_logging(
            level=config.log_level,
            log_file=config.log_file,
            use_json=config.log_json
        )
        _workflow = build_workflow(config)
    return _workflow


def lambda_handler(event: Dict[str, Any], context: Any = None) -> Dict[str, Any]:
    """
    AWS Lambda entry point.

    Uncaught workflow failures propagate so the invocation is recorded as
    failed by the delivery layer.
    """
    request_id = getattr(context, "aws_request_id", None)
    if request_id:
        logger.debug(f"Lambda request {request_id}")
    return handle_payload(event, get_workflow())
