"""Entry points: create and delete the destination table, run the export."""

from __future__ import annotations

import logging
from typing import Optional

from scripts.auth_export.context import ExportContext
from scripts.auth_export.errors import OperationResult, Status
from scripts.auth_export.pipeline import run_export

logger = logging.getLogger("auth_export.operations")


def _not_configured(what: str) -> OperationResult:
    message = f"please configure {what} before running this operation"
    logger.error(message, extra={"status": Status.NOT_CONFIGURED.value})
    return OperationResult(Status.NOT_CONFIGURED, detail=message)


def create_tables(context: ExportContext) -> OperationResult:
    """Create the dataset and the authentication table if they are missing."""
    warehouse = context.warehouse
    if warehouse is None:
        return _not_configured("BigQuery")

    if not warehouse.dataset_exists():
        warehouse.create_dataset()

    if warehouse.table_exists():
        logger.info(
            "Table %s.%s already exists", warehouse.dataset_id, warehouse.table_id,
            extra={"dataset": warehouse.dataset_id, "table": warehouse.table_id},
        )
        return OperationResult(Status.EXISTS)

    warehouse.create_table()
    return OperationResult(Status.CREATED)


def delete_tables(context: ExportContext) -> OperationResult:
    """Delete the authentication table; absent dataset or table is not an error."""
    warehouse = context.warehouse
    if warehouse is None:
        return _not_configured("BigQuery")

    if not warehouse.dataset_exists():
        logger.info("Dataset not found: %s", warehouse.dataset_id, extra={"dataset": warehouse.dataset_id})
        return OperationResult(Status.NOT_FOUND, detail=f"Dataset not found: {warehouse.dataset_id}")

    if not warehouse.table_exists():
        logger.info("Table not found: %s", warehouse.table_id, extra={"table": warehouse.table_id})
        return OperationResult(Status.NOT_FOUND, detail=f"Table not found: {warehouse.table_id}")

    warehouse.delete_table()
    return OperationResult(Status.DELETED)


def copy_to_bigquery(context: ExportContext, verbose: Optional[bool] = None) -> OperationResult:
    """Copy every Firebase Auth user into the authentication table.

    Raises ExportError when any batch insert fails.
    """
    users = context.users
    warehouse = context.warehouse
    if users is None or warehouse is None:
        return _not_configured("BigQuery and Firebase")

    rows, batches = run_export(
        users,
        warehouse,
        page_size=context.page_size,
        batch_size=context.batch_size,
        max_workers=context.max_concurrent_inserts,
        verbose=context.verbose if verbose is None else verbose,
    )
    return OperationResult(Status.EXPORTED, rows=rows, batches=batches)
