"""
Constants shared across the remediation workflow.
"""

# Config rule names, one per remediation directive
PARAMETER_GROUP_RULE = "documentdb-cluster-parameter-group"
BACKUP_RETENTION_RULE = "documentdb-cluster-backup-retention"
DELETION_PROTECTION_RULE = "documentdb-cluster-deletion-protection-enabled"

# Control-plane field names used by modify_db_cluster
FIELD_DELETION_PROTECTION = "DeletionProtection"
FIELD_PARAMETER_GROUP = "DBClusterParameterGroupName"
FIELD_BACKUP_RETENTION_PERIOD = "BackupRetentionPeriod"

# Notification texts
NON_COMPLIANCE_SUBJECT = "A non-compliant event has occurred"
REMEDIATION_EXECUTED_MESSAGE = "The remediation for the non-compliance resource has been executed"
RESOURCE_NOT_FOUND_MESSAGE = "The non-compliance resource was not found"
REMEDIATION_TYPE_NOT_FOUND_MESSAGE = "Remediation type not found"

# SNS subject limits
SNS_SUBJECT_MAX_LENGTH = 100

# Backup retention bounds accepted by DocumentDB (days)
MIN_BACKUP_RETENTION_DAYS = 1
MAX_BACKUP_RETENTION_DAYS = 35

# Upstream event pattern
EVENT_SOURCE = "aws.config"
EVENT_DETAIL_TYPE = "Config Rules Compliance Change"
EVENT_MESSAGE_TYPE = "ComplianceChangeNotification"
RULE_NAME_PREFIX = "documentdb-"

# Defaults
DEFAULT_CONNECT_TIMEOUT_SECONDS = 5
DEFAULT_READ_TIMEOUT_SECONDS = 30
DEFAULT_WEBHOOK_TIMEOUT_SECONDS = 10
DEFAULT_NOTIFICATION_CHANNEL = "log"
VALID_NOTIFICATION_CHANNELS = ("sns", "log", "webhook")
VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
DOCDB_ENGINE = "docdb"
ENV_PREFIX = "DOCDB_REMEDIATION_"
