"""
Event payload loading for docdb-remediation.
"""
from .event_loader import load_events, load_json, load_jsonl

__all__ = ["load_events", "load_json", "load_jsonl"]
