"""
Command-line interface for docdb-remediation.
"""
import argparse
import json
import logging
import sys
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any, Dict, List, Optional

from . import __version__
from .config import RemediationConfig
from .constants import VALID_LOG_LEVELS, VALID_NOTIFICATION_CHANNELS
from .exceptions import RemediationError
from .factory import build_workflow
from .handler import handle_payload
from .ingestion.event_loader import load_events
from .logging_config import configure_cli_logging
from .metrics import get_metrics_text
from .remediation.workflow import RemediationWorkflow, transition_table
from .version import get_version_info

logger = logging.getLogger(__name__)


def _load_config(args: argparse.Namespace) -> RemediationConfig:
    return RemediationConfig.load(getattr(args, "config_file", None))


def _logging_config(args: argparse.Namespace) -> Optional[RemediationConfig]:
    """Configuration consulted for log settings; load errors are reported by the subcommand."""
    try:
        return _load_config(args)
    except (OSError, ValueError):
        return None


def process_payloads(
    payloads: List[Any],
    workflow: RemediationWorkflow,
    workers: int = 1
) -> List[Dict[str, Any]]:
    """
    Run one independent workflow execution per payload.

    Failures are reported in the result list rather than raised, so one
    bad event does not stop the others.

    Args:
        payloads: Decoded event payloads
        workflow: Workflow to run
        workers: Number of executions to run concurrently

    Returns:
        One result dict per payload, in input order
    """
    def process(payload: Any) -> Dict[str, Any]:
        try:
            return handle_payload(payload, workflow)
        except RemediationError as e:
            logger.error(f"Event processing failed: {e}")
            return {
                "status": "failed",
                "error": str(e),
                "error_kind": e.kind.value,
            }

    if workers <= 1:
        return [process(p) for p in payloads]

    with ThreadPoolExecutor(max_workers=workers) as pool:
        return list(pool.map(process, payloads))


def format_result(result: Dict[str, Any]) -> str:
    """One-line human readable summary of a result."""
    status = result["status"]
    if status == "completed":
        dry_run = " [DRY RUN]" if result.get("dry_run") else ""
        return (
            f"[{result['outcome']}]{dry_run} {result['config_rule_name'] or '<no rule>'} "
            f"resourceId={result['resource_id'] or '<none>'} ({result['execution_id']})"
        )
    if status == "ignored":
        return f"[ignored] {result['reason']}"
    return f"[failed] {result['error']}"


def handle_events(args: argparse.Namespace) -> int:
    """
    Handle the handle subcommand.

    Returns:
        Exit code (0 if every event completed or was ignored)
    """
    try:
        config = _load_config(args)
        if args.dry_run:
            config.dry_run = True
        if args.channel:
            config.notification_channel = args.channel
        config.validate()
    except (RemediationError, OSError, ValueError) as e:
        logger.error(f"Configuration error: {e}")
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    try:
        payloads = list(load_events(args.input))
    except RemediationError as e:
        print(f"Failed to load events: {e}", file=sys.stderr)
        return 1

    if not payloads:
        print("No events to process.")
        return 0

    try:
        workflow = build_workflow(config)
    except RemediationError as e:
        logger.error(f"Configuration error: {e}")
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    results = process_payloads(payloads, workflow, workers=args.workers)

    for result in results:
        print(format_result(result))

    if args.output:
        Path(args.output).write_text(json.dumps(results, indent=2))
        logger.info(f"Results written to {args.output}")

    if args.metrics:
        print(get_metrics_text())

    failed = sum(1 for r in results if r["status"] == "failed")
    if failed:
        print(f"{failed} of {len(results)} event(s) failed", file=sys.stderr)
        return 1
    return 0


def handle_states(args: argparse.Namespace) -> int:
    """Print the workflow transition table."""
    rows = transition_table()
    width = max(len(state) for state, _, _ in rows)
    on_width = max(len(on) for _, on, _ in rows)
    for state, on, target in rows:
        print(f"{state:<{width}}  --{on:-<{on_width}}->  {target}")
    return 0


def handle_config(args: argparse.Namespace) -> int:
    """Show or validate configuration."""
    try:
        config = _load_config(args)
    except (OSError, ValueError) as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    if args.action == "validate":
        try:
            config.validate()
        except RemediationError as e:
            print(str(e), file=sys.stderr)
            return 1
        print("Configuration is valid.")
        return 0

    for key, value in config.to_dict().items():
        print(f"{key}: {value}")
    return 0


def handle_version(args: argparse.Namespace) -> int:
    """Show version information."""
    info = get_version_info()
    print(f"{info['name']} {info['version']}")
    print(info["full_name"])
    return 0


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="docdb-remediation",
        description="Remediate non-compliant Amazon DocumentDB resources",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Process a compliance event (EventBridge envelope or bare detail)
  %(prog)s handle event.json

  # Process many events concurrently without changing anything
  %(prog)s handle events.jsonl --workers 4 --dry-run

  # Inspect the workflow and configuration
  %(prog)s states
  %(prog)s config validate
        """
    )

    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")
    parser.add_argument("--quiet", "-q", action="store_true", help="Only log errors")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument("--config-file", metavar="PATH", help="Path to configuration file")
    parser.add_argument("--log-file", metavar="PATH", help="Also log to this file")

    subparsers = parser.add_subparsers(dest="subcommand", help="Available subcommands")

    handle_parser = subparsers.add_parser(
        "handle",
        help="Run the remediation workflow for events in a file"
    )
    handle_parser.add_argument("input", help="Path to a .json or .jsonl events file")
    handle_parser.add_argument(
        "--workers", "-w",
        type=int,
        default=1,
        help="Number of events processed concurrently (default: 1)"
    )
    handle_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Resolve resources but do not modify them"
    )
    handle_parser.add_argument(
        "--channel",
        choices=VALID_NOTIFICATION_CHANNELS,
        help="Override the notification channel"
    )
    handle_parser.add_argument("--output", "-o", help="Write JSON results to this path")
    handle_parser.add_argument(
        "--metrics",
        action="store_true",
        help="Print execution metrics after processing"
    )
    handle_parser.set_defaults(func=handle_events)

    states_parser = subparsers.add_parser("states", help="Show the workflow transition table")
    states_parser.set_defaults(func=handle_states)

    config_parser = subparsers.add_parser("config", help="Show or validate configuration")
    config_parser.add_argument(
        "action",
        nargs="?",
        choices=["show", "validate"],
        default="show",
        help="Config action (default: show)"
    )
    config_parser.set_defaults(func=handle_config)

    version_parser = subparsers.add_parser("version", help="Show version information")
    version_parser.set_defaults(func=handle_version)

    return parser


def main(argv: List[str] = None) -> None:
    """Main entry point for the CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    # Flags win; otherwise fall back to the logging section of the configuration
    config = _logging_config(args)
    default_level = "WARNING"
    if config and str(config.log_level).upper() in VALID_LOG_LEVELS:
        default_level = str(config.log_level).upper()

    configure_cli_logging(
        verbose=args.verbose,
        quiet=args.quiet,
        debug=args.debug,
        log_file=args.log_file or (config.log_file if config else None),
        default_level=default_level,
        use_json=bool(config and config.log_json)
    )

    if not hasattr(args, "func"):
        parser.print_help()
        sys.exit(1)

    sys.exit(args.func(args))


if __name__ == "__main__":
    main()
