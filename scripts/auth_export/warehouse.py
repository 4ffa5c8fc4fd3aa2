"""Warehouse client adapter: dataset/table lifecycle and row inserts."""

from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

from google.api_core.exceptions import Conflict, NotFound
from google.cloud import bigquery

from scripts.auth_export.errors import InsertRowsError
from scripts.auth_export.schema import DATASET_ID, SCHEMA, TABLE_FRIENDLY_NAME, TABLE_ID

logger = logging.getLogger("auth_export.warehouse")


class Warehouse:
    """Wraps a bigquery.Client bound to the fixed authentication table."""

    def __init__(
        self,
        client: bigquery.Client,
        dataset_id: str = DATASET_ID,
        table_id: str = TABLE_ID,
        location: Optional[str] = None,
    ) -> None:
        self._client = client
        self.dataset_id = dataset_id
        self.table_id = table_id
        self.location = location

    @property
    def dataset_ref(self) -> bigquery.DatasetReference:
        return bigquery.DatasetReference(self._client.project, self.dataset_id)

    @property
    def table_ref(self) -> bigquery.TableReference:
        return self.dataset_ref.table(self.table_id)

    def dataset_exists(self) -> bool:
        try:
            self._client.get_dataset(self.dataset_ref)
        except NotFound:
            return False
        return True

    def table_exists(self) -> bool:
        try:
            self._client.get_table(self.table_ref)
        except NotFound:
            return False
        return True

    def create_dataset(self) -> bool:
        """Create the dataset. Returns False if another writer created it first."""
        dataset = bigquery.Dataset(self.dataset_ref)
        if self.location:
            dataset.location = self.location
        try:
            self._client.create_dataset(dataset)
        except Conflict:
            logger.info("Dataset %s already exists", self.dataset_id, extra={"dataset": self.dataset_id})
            return False
        logger.info("Created dataset %s", self.dataset_id, extra={"dataset": self.dataset_id})
        return True

    def create_table(self) -> None:
        table = bigquery.Table(self.table_ref, schema=SCHEMA)
        table.friendly_name = TABLE_FRIENDLY_NAME
        self._client.create_table(table, exists_ok=True)
        logger.info(
            "Created table %s.%s", self.dataset_id, self.table_id,
            extra={"dataset": self.dataset_id, "table": self.table_id},
        )

    def delete_table(self) -> None:
        self._client.delete_table(self.table_ref)
        logger.info(
            "Deleted table %s.%s", self.dataset_id, self.table_id,
            extra={"dataset": self.dataset_id, "table": self.table_id},
        )

    def insert_rows(self, rows: Sequence[dict[str, Any]]) -> int:
        """Stream rows into the table via insertAll.

        Raises InsertRowsError carrying the per-row errors BigQuery reports.
        Returns the number of rows sent.
        """
        if not rows:
            return 0
        errors = self._client.insert_rows_json(self.table_ref, list(rows))
        if errors:
            raise InsertRowsError(errors)
        return len(rows)
