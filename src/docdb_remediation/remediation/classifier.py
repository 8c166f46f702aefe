"""
Config rule classification.

Maps the name of the rule that raised a compliance event onto exactly one
remediation directive.
"""
from typing import Dict, Optional

from ..models import RemediationDirective

DEFAULT_RULES: Dict[str, RemediationDirective] = {
    directive.value: directive
    for directive in RemediationDirective
    if directive is not RemediationDirective.UNKNOWN
}


class RuleClassifier:
    """
    Exact-match classifier from config rule name to directive.

    Example:
        >>> RuleClassifier().classify("documentdb-cluster-backup-retention")
        <RemediationDirective.BACKUP_RETENTION: 'documentdb-cluster-backup-retention'>
        >>> RuleClassifier().classify("documentdb-something-else")
        <RemediationDirective.UNKNOWN: 'unknown'>
    """

    def __init__(self, rules: Optional[Dict[str, RemediationDirective]] = None):
        self.rules = dict(DEFAULT_RULES if rules is None else rules)

    def classify(self, config_rule_name: Optional[str]) -> RemediationDirective:
        """Return the directive for a rule name, or UNKNOWN."""
        if not config_rule_name:
            return RemediationDirective.UNKNOWN
        return self.rules.get(config_rule_name, RemediationDirective.UNKNOWN)
