"""Shared fixtures: Firebase user records and an in-memory BigQuery double."""

from __future__ import annotations

import threading
from types import SimpleNamespace

import pytest
from google.api_core.exceptions import Conflict, NotFound

from scripts.auth_export.context import ExportContext


def make_user(
    uid: str,
    email: str | None = None,
    display_name: str | None = None,
    phone_number: str | None = None,
    photo_url: str | None = None,
    disabled: bool = False,
    email_verified: bool = False,
    creation_timestamp: int | None = None,
    last_sign_in_timestamp: int | None = None,
    tokens_valid_after_timestamp: int = 0,
):
    """Build an object shaped like firebase_admin.auth.UserRecord."""
    return SimpleNamespace(
        uid=uid,
        email=email,
        display_name=display_name,
        phone_number=phone_number,
        photo_url=photo_url,
        disabled=disabled,
        email_verified=email_verified,
        tokens_valid_after_timestamp=tokens_valid_after_timestamp,
        user_metadata=SimpleNamespace(
            creation_timestamp=creation_timestamp,
            last_sign_in_timestamp=last_sign_in_timestamp,
        ),
    )


def make_pages(total: int, page_size: int = 1000) -> list[SimpleNamespace]:
    """Split `total` users into list_users pages chained by page tokens."""
    users = [make_user(f"user-{i}", creation_timestamp=1_600_000_000_000 + i) for i in range(total)]
    chunks = [users[i : i + page_size] for i in range(0, total, page_size)] or [[]]
    pages = []
    for n, chunk in enumerate(chunks):
        token = f"token-{n + 1}" if n + 1 < len(chunks) else ""
        pages.append(SimpleNamespace(users=chunk, next_page_token=token))
    return pages


class FakeBigQueryClient:
    """Just enough of bigquery.Client for the warehouse adapter."""

    def __init__(self, project: str = "test-project") -> None:
        self.project = project
        self.datasets: set[str] = set()
        self.tables: dict[tuple[str, str], object] = {}
        self.inserted: list[list[dict]] = []
        self.insert_errors: dict[str, list] = {}
        self.insert_exception: Exception | None = None
        self.deleted: list[tuple[str, str]] = []
        self.create_table_calls = 0
        self._lock = threading.Lock()

    def get_dataset(self, ref):
        if ref.dataset_id not in self.datasets:
            raise NotFound(f"Dataset {ref.dataset_id} not found")
        return ref

    def create_dataset(self, dataset, exists_ok=False):
        if dataset.dataset_id in self.datasets and not exists_ok:
            raise Conflict(f"Dataset {dataset.dataset_id} already exists")
        self.datasets.add(dataset.dataset_id)
        return dataset

    def get_table(self, ref):
        key = (ref.dataset_id, ref.table_id)
        if key not in self.tables:
            raise NotFound(f"Table {ref.table_id} not found")
        return self.tables[key]

    def create_table(self, table, exists_ok=False):
        self.create_table_calls += 1
        key = (table.dataset_id, table.table_id)
        if key not in self.tables:
            self.tables[key] = table
        return self.tables[key]

    def delete_table(self, ref):
        key = (ref.dataset_id, ref.table_id)
        self.deleted.append(key)
        del self.tables[key]

    def insert_rows_json(self, table_ref, rows):
        if self.insert_exception is not None and rows[0]["userId"] == "user-0":
            raise self.insert_exception
        with self._lock:
            self.inserted.append(rows)
        return self.insert_errors.get(rows[0]["userId"], [])


@pytest.fixture
def bq_client() -> FakeBigQueryClient:
    return FakeBigQueryClient()


@pytest.fixture
def context(bq_client) -> ExportContext:
    return ExportContext(firebase_app=object(), bigquery_client=bq_client)
