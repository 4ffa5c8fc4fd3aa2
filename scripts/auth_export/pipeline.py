"""Batch pipeline: fetch every user, transform, chunk, insert concurrently."""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor, wait
from typing import Any, Sequence

from scripts.auth_export.errors import ExportError, InsertRowsError
from scripts.auth_export.identity import FirebaseUsers
from scripts.auth_export.transform import user_to_row
from scripts.auth_export.warehouse import Warehouse

logger = logging.getLogger("auth_export.pipeline")

DEFAULT_BATCH_SIZE = 1000
DEFAULT_PAGE_SIZE = 1000
DEFAULT_MAX_CONCURRENT_INSERTS = 10


def chunk_rows(rows: Sequence[Any], size: int = DEFAULT_BATCH_SIZE) -> list[list[Any]]:
    """Split rows into consecutive chunks of at most size.

    An empty input yields a single empty chunk.
    """
    if size <= 0:
        raise ValueError(f"chunk size must be positive, got {size}")
    if not rows:
        return [[]]
    return [list(rows[i : i + size]) for i in range(0, len(rows), size)]


def insert_batches(
    warehouse: Warehouse,
    batches: Sequence[Sequence[dict[str, Any]]],
    max_workers: int = DEFAULT_MAX_CONCURRENT_INSERTS,
) -> int:
    """Insert every non-empty batch concurrently and wait for all of them.

    If any batch fails the whole call fails with ExportError; batches that
    already succeeded stay committed.
    """
    pending = [batch for batch in batches if batch]
    if not pending:
        return 0

    with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="bq-insert") as pool:
        futures = [pool.submit(warehouse.insert_rows, batch) for batch in pending]
        wait(futures)

    inserted = 0
    failure = None
    for future in futures:
        exc = future.exception()
        if exc is None:
            inserted += future.result()
        elif failure is None:
            failure = exc

    if failure is not None:
        raise _aggregate_failure(failure) from failure
    return inserted


def _aggregate_failure(exc: BaseException) -> ExportError:
    if isinstance(exc, InsertRowsError) and exc.errors:
        count = len(exc.errors)
        logger.error("%d errors. Here are the first three:", count)
        for entry in exc.errors[:3]:
            logger.error("%s", entry)
        return ExportError(f"{count} errors.", exc.errors)
    logger.error("%s", exc)
    return ExportError(str(exc))


def run_export(
    users: FirebaseUsers,
    warehouse: Warehouse,
    page_size: int = DEFAULT_PAGE_SIZE,
    batch_size: int = DEFAULT_BATCH_SIZE,
    max_workers: int = DEFAULT_MAX_CONCURRENT_INSERTS,
    verbose: bool = False,
) -> tuple[int, int]:
    """Copy every Firebase user into the warehouse table.

    Returns (rows inserted, batches sent).
    """
    started = time.monotonic()
    records = users.fetch_all(page_size)
    if verbose:
        logger.info("Done: fetch user data", extra={"rows": len(records)})

    rows = [user_to_row(user) for user in records]
    batches = chunk_rows(rows, batch_size)
    sent = sum(1 for batch in batches if batch)

    if verbose:
        logger.info("inserting data ...", extra={"rows": len(rows), "batches": sent})

    inserted = insert_batches(warehouse, batches, max_workers)

    if verbose:
        logger.info(
            "Successfully copied authentication to BigQuery.",
            extra={
                "rows": inserted,
                "batches": sent,
                "duration_s": round(time.monotonic() - started, 3),
            },
        )
    return inserted, sent
