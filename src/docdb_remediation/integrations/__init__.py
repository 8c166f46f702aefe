"""
Control-plane integrations for docdb-remediation.

Classes:
    ControlPlane: Capability interface used by remediation actions
    DocumentDBControlPlane: Amazon DocumentDB implementation over boto3
"""
from .base import ControlPlane
from .documentdb import DocumentDBControlPlane

__all__ = [
    "ControlPlane",
    "DocumentDBControlPlane",
]
