"""
Remediation workflow for docdb-remediation.

A finite-state workflow run once per compliance event:

    notify_entry -> classify -> {parameter_group | backup_retention |
    deletion_protection | unknown_directive} -> executed -> notify_exit

with a catch edge from every remediation state to ``not_found_fallback``
when the target resource no longer exists. The graph is data:
``TRANSITIONS`` maps state -> signal -> next state and ``CATCHES`` maps
state -> error kind -> fallback state. Errors without a catch entry end the
execution with ``WorkflowError``.

Classes:
    WorkflowState: States of the workflow
    WorkflowExecution: Per-execution context
    RemediationWorkflow: Runs executions

Example:
    >>> workflow = RemediationWorkflow(actions, notifier)
    >>> outcome = workflow.handle_compliance_event(event)
    >>> outcome.kind
    <OutcomeKind.EXECUTED: 'executed'>
"""

import dataclasses
import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from ..exceptions import ErrorKind, InvalidConfigError, RemediationError, WorkflowError
from ..logging_context import LoggingContext, get_logger
from ..metrics import (
    track_remediation_duration,
    track_remediation_failure,
    track_remediation_outcome,
)
from ..models import (
    ComplianceEvent,
    Notification,
    RemediationDirective,
    RemediationOutcome,
)
from ..alerting.notifiers import Notifier
from .actions import ActionResult, ActionStatus, RemediationAction
from .classifier import RuleClassifier

logger = get_logger(__name__)


class WorkflowState(str, Enum):
    """States of the remediation workflow."""
    NOTIFY_ENTRY = "notify_entry"
    CLASSIFY = "classify"
    PARAMETER_GROUP = "parameter_group"
    BACKUP_RETENTION = "backup_retention"
    DELETION_PROTECTION = "deletion_protection"
    UNKNOWN_DIRECTIVE = "unknown_directive"
    EXECUTED = "executed"
    NOT_FOUND_FALLBACK = "not_found_fallback"
    NOTIFY_EXIT = "notify_exit"


class Signal(str, Enum):
    """Transition signals other than classifier directives."""
    NEXT = "next"
    SUCCEEDED = "succeeded"


REMEDIATION_STATES: Dict[WorkflowState, RemediationDirective] = {
    WorkflowState.PARAMETER_GROUP: RemediationDirective.PARAMETER_GROUP,
    WorkflowState.BACKUP_RETENTION: RemediationDirective.BACKUP_RETENTION,
    WorkflowState.DELETION_PROTECTION: RemediationDirective.DELETION_PROTECTION,
}

TRANSITIONS: Dict[WorkflowState, Dict[str, WorkflowState]] = {
    WorkflowState.NOTIFY_ENTRY: {Signal.NEXT.value: WorkflowState.CLASSIFY},
    WorkflowState.CLASSIFY: {
        **{directive.value: state for state, directive in REMEDIATION_STATES.items()},
        RemediationDirective.UNKNOWN.value: WorkflowState.UNKNOWN_DIRECTIVE,
    },
    **{
        state: {Signal.SUCCEEDED.value: WorkflowState.EXECUTED}
        for state in REMEDIATION_STATES
    },
    WorkflowState.EXECUTED: {Signal.NEXT.value: WorkflowState.NOTIFY_EXIT},
    WorkflowState.NOT_FOUND_FALLBACK: {Signal.NEXT.value: WorkflowState.NOTIFY_EXIT},
    WorkflowState.UNKNOWN_DIRECTIVE: {Signal.NEXT.value: WorkflowState.NOTIFY_EXIT},
    WorkflowState.NOTIFY_EXIT: {},
}

CATCHES: Dict[WorkflowState, Dict[ErrorKind, WorkflowState]] = {
    state: {ErrorKind.RESOURCE_NOT_FOUND: WorkflowState.NOT_FOUND_FALLBACK}
    for state in REMEDIATION_STATES
}

INITIAL_STATE = WorkflowState.NOTIFY_ENTRY
TERMINAL_STATES = frozenset({WorkflowState.NOTIFY_EXIT})


def transition_table() -> List[Tuple[str, str, str]]:
    """
    Flatten the workflow graph into (state, on, next state) rows.

    Catch edges are listed with ``on`` set to ``error:<kind>``.
    """
    rows = []
    for state, edges in TRANSITIONS.items():
        for signal, target in edges.items():
            rows.append((state.value, signal, target.value))
        for kind, target in CATCHES.get(state, {}).items():
            rows.append((state.value, f"error:{kind.value}", target.value))
    return rows


@dataclass
class WorkflowExecution:
    """Mutable context of one workflow execution; never shared."""

    execution_id: str
    event: ComplianceEvent
    started_at: datetime = field(default_factory=datetime.now)
    directive: RemediationDirective = RemediationDirective.UNKNOWN
    action_result: Optional[ActionResult] = None
    caught_error: Optional[RemediationError] = None
    outcome: Optional[RemediationOutcome] = None
    states: List[WorkflowState] = field(default_factory=list)

    def set_outcome(self, outcome: RemediationOutcome) -> None:
        dry_run = (
            self.action_result is not None
            and self.action_result.status == ActionStatus.SKIPPED
        )
        self.outcome = dataclasses.replace(
            outcome, execution_id=self.execution_id, dry_run=dry_run
        )


class RemediationWorkflow:
    """
    Compliance remediation workflow.

    Holds only read-only collaborators, so one instance may serve many
    concurrent executions. Within an execution, steps run strictly in
    sequence and each external call is made once.
    """

    def __init__(
        self,
        actions: Iterable[RemediationAction],
        notifier: Notifier,
        classifier: Optional[RuleClassifier] = None
    ):
        """
        Initialize workflow.

        Args:
            actions: One action per known remediation directive
            notifier: Channel for entry and exit notifications
            classifier: Rule classifier (default: built-in rule names)

        Raises:
            InvalidConfigError: If a directive has no action
        """
        self.actions: Dict[RemediationDirective, RemediationAction] = {
            action.directive: action for action in actions
        }
        missing = [d.value for d in REMEDIATION_STATES.values() if d not in self.actions]
        if missing:
            raise InvalidConfigError(f"No remediation action for: {', '.join(missing)}")

        self.notifier = notifier
        self.classifier = classifier or RuleClassifier()

        self._handlers: Dict[WorkflowState, Callable[[WorkflowExecution], str]] = {
            WorkflowState.NOTIFY_ENTRY: self._notify_entry,
            WorkflowState.CLASSIFY: self._classify,
            WorkflowState.PARAMETER_GROUP: self._remediate,
            WorkflowState.BACKUP_RETENTION: self._remediate,
            WorkflowState.DELETION_PROTECTION: self._remediate,
            WorkflowState.EXECUTED: self._executed,
            WorkflowState.NOT_FOUND_FALLBACK: self._resource_not_found,
            WorkflowState.UNKNOWN_DIRECTIVE: self._unknown_directive,
            WorkflowState.NOTIFY_EXIT: self._notify_exit,
        }

    def handle_compliance_event(self, event: ComplianceEvent) -> RemediationOutcome:
        """
        Run one workflow execution for a compliance event.

        Completion means the exit notification has been sent.

        Args:
            event: Compliance event

        Returns:
            RemediationOutcome for the branch taken

        Raises:
            WorkflowError: On any failure other than a missing resource;
                the original error is chained as ``__cause__``
        """
        execution = WorkflowExecution(
            execution_id=self._generate_execution_id(),
            event=event
        )
        started = time.monotonic()

        with LoggingContext(
            execution_id=execution.execution_id,
            config_rule_name=event.config_rule_name,
            resource_id=event.resource_id
        ):
            logger.info(
                f"Starting execution for rule '{event.config_rule_name}' "
                f"resourceId={event.resource_id or '<none>'}"
            )
            state = INITIAL_STATE

            while True:
                execution.states.append(state)
                logger.debug(f"Entering state '{state.value}'")

                try:
                    signal = self._handlers[state](execution)
                except Exception as e:
                    fallback = self._catch_target(state, e)
                    if fallback is None:
                        track_remediation_failure(state.value)
                        logger.error(
                            f"Execution failed in state '{state.value}': {e}",
                            exc_info=True
                        )
                        raise WorkflowError(execution.execution_id, state.value, str(e)) from e

                    logger.info(f"Caught {e.kind.value} in '{state.value}': {e}")
                    execution.caught_error = e
                    state = fallback
                    continue

                if state in TERMINAL_STATES:
                    break
                state = TRANSITIONS[state][signal]

            outcome = dataclasses.replace(
                execution.outcome,
                states=[s.value for s in execution.states]
            )
            duration = time.monotonic() - started
            track_remediation_outcome(outcome.kind.value, outcome.directive.value)
            track_remediation_duration(duration, outcome.kind.value)
            logger.info(f"Execution completed with outcome '{outcome.kind.value}' in {duration:.3f}s")

        return outcome

    def _catch_target(self, state: WorkflowState, error: Exception) -> Optional[WorkflowState]:
        if not isinstance(error, RemediationError):
            return None
        return CATCHES.get(state, {}).get(error.kind)

    def _notify_entry(self, execution: WorkflowExecution) -> str:
        self.notifier.send(Notification.for_non_compliance(execution.event))
        return Signal.NEXT.value

    def _classify(self, execution: WorkflowExecution) -> str:
        execution.directive = self.classifier.classify(execution.event.config_rule_name)
        logger.info(f"Classified as '{execution.directive.value}'")
        return execution.directive.value

    def _remediate(self, execution: WorkflowExecution) -> str:
        directive = REMEDIATION_STATES[execution.states[-1]]
        action = self.actions[directive]
        execution.action_result = action.remediate(execution.event.resource_id)
        return Signal.SUCCEEDED.value

    def _executed(self, execution: WorkflowExecution) -> str:
        execution.set_outcome(
            RemediationOutcome.executed(execution.directive, execution.event.resource_id)
        )
        return Signal.NEXT.value

    def _resource_not_found(self, execution: WorkflowExecution) -> str:
        identifier = getattr(execution.caught_error, "identifier", execution.event.resource_id)
        execution.set_outcome(
            RemediationOutcome.resource_not_found(execution.directive, identifier)
        )
        return Signal.NEXT.value

    def _unknown_directive(self, execution: WorkflowExecution) -> str:
        execution.set_outcome(
            RemediationOutcome.unknown_directive(
                execution.event.config_rule_name,
                execution.event.resource_id
            )
        )
        return Signal.NEXT.value

    def _notify_exit(self, execution: WorkflowExecution) -> str:
        self.notifier.send(Notification.for_outcome(execution.outcome))
        return Signal.NEXT.value

    def _generate_execution_id(self) -> str:
        """Generate unique execution ID."""
        return f"rem-{datetime.now().strftime('%Y%m%d%H%M%S')}-{uuid.uuid4().hex[:8]}"
