"""GCP Cloud Run Job entry point for the authentication export.

Deployed as a Cloud Run Job triggered by Cloud Scheduler.
The EXPORT_COMMAND env var selects the operation (default: export).

Usage:
  python -m scripts.auth_export.entrypoints.gcp_cloudrun
  EXPORT_COMMAND=create-table python -m scripts.auth_export.entrypoints.gcp_cloudrun
  EXPORT_COMMAND=delete-table python -m scripts.auth_export.entrypoints.gcp_cloudrun
"""

from __future__ import annotations

import logging
import os
import sys

from scripts.auth_export.cli import COMMAND_CHOICES, _run_command
from scripts.auth_export.config import load_config
from scripts.auth_export.context import build_context
from scripts.auth_export.logging_config import configure_logging, result_extra

logger = logging.getLogger("auth_export.cloudrun")


def main() -> None:
    configure_logging(os.environ.get("LOG_LEVEL", "INFO"))

    command = os.environ.get("EXPORT_COMMAND", "export")
    if command not in COMMAND_CHOICES:
        logger.error("EXPORT_COMMAND must be one of %s, got %r", COMMAND_CHOICES, command)
        sys.exit(1)

    logger.info("Cloud Run Job started for command=%s", command, extra={"command": command})

    try:
        config = load_config()
        context = build_context(config)
        result = _run_command(command, context, ensure_table=True)
    except Exception as exc:
        logger.error("%s failed: %s", command, exc, exc_info=True, extra={"command": command})
        sys.exit(1)

    logger.info(
        "%s complete: %s", command, result.status.value,
        extra=result_extra(result, command=command),
    )
    if not result.ok:
        sys.exit(1)


if __name__ == "__main__":
    main()
