"""
Version information for docdb-remediation.

This module provides a single source of truth for version information
across the entire codebase.
"""

__version__ = "1.0.0"

VERSION_INFO = {
    "version": __version__,
    "name": "docdb-remediation",
    "full_name": "Amazon DocumentDB Compliance Remediation Workflow",
    "workflow_name": "non-compliance-remediation-workflow",
}


def get_version() -> str:
    """Return the current version string."""
    return __version__


def get_version_info() -> dict:
    """Return detailed version information."""
    return VERSION_INFO.copy()
