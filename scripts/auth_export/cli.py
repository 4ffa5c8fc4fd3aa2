"""CLI entry point: create-table, delete-table, export, scheduler."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import Optional

from scripts.auth_export.config import ExportConfig, load_config
from scripts.auth_export.context import ExportContext, build_context
from scripts.auth_export.errors import ExportError, OperationResult
from scripts.auth_export.logging_config import configure_logging, result_extra
from scripts.auth_export.operations import copy_to_bigquery, create_tables, delete_tables

logger = logging.getLogger("auth_export.cli")

COMMAND_CHOICES = ["create-table", "delete-table", "export"]


def _run_command(
    command: str,
    context: ExportContext,
    verbose: Optional[bool] = None,
    ensure_table: bool = False,
) -> OperationResult:
    """Dispatch one operation by name. Shared by the CLI, scheduler and Cloud Run job.

    verbose=None defers to the context, which carries EXPORT_VERBOSE.
    """
    if command == "create-table":
        return create_tables(context)
    if command == "delete-table":
        return delete_tables(context)
    if command == "export":
        if ensure_table:
            result = create_tables(context)
            if not result.ok:
                return result
        return copy_to_bigquery(context, verbose=verbose)
    raise ValueError(f"Unknown command: {command}")


def _exit_code(result: OperationResult) -> int:
    logger.info(
        "Finished with status %s", result.status.value,
        extra=result_extra(result),
    )
    return 0 if result.ok else 1


def cmd_create_table(args: argparse.Namespace) -> int:
    context = build_context(load_config())
    return _exit_code(_run_command("create-table", context))


def cmd_delete_table(args: argparse.Namespace) -> int:
    context = build_context(load_config())
    return _exit_code(_run_command("delete-table", context))


def cmd_export(args: argparse.Namespace) -> int:
    """Run a one-shot export."""
    context = build_context(load_config())
    try:
        result = _run_command(
            "export",
            context,
            verbose=True if args.verbose else None,
            ensure_table=args.create_table,
        )
    except ExportError as exc:
        logger.error("Export failed: %s", exc)
        return 1
    return _exit_code(result)


def cmd_scheduler(args: argparse.Namespace) -> int:
    """Start the APScheduler-based export loop."""
    from scripts.auth_export.scheduler import start_scheduler

    config: ExportConfig = load_config()
    start_scheduler(config, build_context(config))
    return 0


def main() -> None:
    """Main CLI entry point."""
    configure_logging(os.environ.get("LOG_LEVEL", "INFO"))

    parser = argparse.ArgumentParser(
        prog="auth-export",
        description="Export Firebase Authentication users to BigQuery",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    create_parser = subparsers.add_parser("create-table", help="Create dataset and table if absent")
    create_parser.set_defaults(func=cmd_create_table)

    delete_parser = subparsers.add_parser("delete-table", help="Delete the table if present")
    delete_parser.set_defaults(func=cmd_delete_table)

    export_parser = subparsers.add_parser("export", help="Copy all users to BigQuery")
    export_parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Log progress messages",
    )
    export_parser.add_argument(
        "--create-table",
        action="store_true",
        help="Create dataset and table first if they are missing",
    )
    export_parser.set_defaults(func=cmd_export)

    sched_parser = subparsers.add_parser("scheduler", help="Run the export on an interval")
    sched_parser.set_defaults(func=cmd_scheduler)

    args = parser.parse_args()
    sys.exit(args.func(args))
