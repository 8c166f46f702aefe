"""
Load compliance event payloads from files.

``.jsonl`` files hold one payload per line; ``.json`` files hold a single
payload or an array of payloads.
"""
from pathlib import Path
from typing import Any, Dict, Iterator
import json
import logging

from ..exceptions import EventLoadError, InvalidEventError

logger = logging.getLogger(__name__)


def _check_file(path: Path) -> None:
    if not path.exists():
        raise EventLoadError(f"File not found: {path}")
    if not path.is_file():
        raise EventLoadError(f"Not a file: {path}")


def load_jsonl(path: str | Path) -> Iterator[Dict[str, Any]]:
    """
    Load JSONL file line by line.

    Lines that are not valid JSON are logged and skipped.

    Args:
        path: Path to JSONL file

    Yields:
        Parsed JSON objects

    Raises:
        EventLoadError: If file cannot be opened
        InvalidEventError: If file encoding is invalid
    """
    path = Path(path)
    _check_file(path)

    try:
        with path.open(encoding="utf-8") as f:
            for line_number, line in enumerate(f, start=1):
                line = line.strip()
                if not line:
                    continue
                try:
                    yield json.loads(line)
                except json.JSONDecodeError as e:
                    logger.warning(f"Skipping invalid JSON at line {line_number}: {e}")
    except UnicodeDecodeError as e:
        raise InvalidEventError(f"Invalid file encoding: {e}") from e
    except OSError as e:
        raise EventLoadError(f"Failed to read file {path}: {e}") from e


def load_json(path: str | Path) -> Iterator[Dict[str, Any]]:
    """
    Load a JSON file holding one payload or an array of payloads.

    Raises:
        EventLoadError: If file cannot be opened
        InvalidEventError: If the content is not valid JSON
    """
    path = Path(path)
    _check_file(path)

    try:
        with path.open(encoding="utf-8") as f:
            data = json.load(f)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise InvalidEventError(f"Invalid JSON in {path}: {e}") from e
    except OSError as e:
        raise EventLoadError(f"Failed to read file {path}: {e}") from e

    if isinstance(data, list):
        yield from data
    else:
        yield data


def load_events(path: str | Path) -> Iterator[Dict[str, Any]]:
    """Load payloads, choosing the format from the file extension."""
    if Path(path).suffix.lower() == ".jsonl":
        return load_jsonl(path)
    return load_json(path)
