from unittest.mock import patch

import pytest

from scripts.auth_export.context import ExportContext
from scripts.auth_export.errors import ExportError, Status
from scripts.auth_export.operations import copy_to_bigquery, create_tables, delete_tables
from scripts.auth_export.schema import DATASET_ID, SCHEMA, TABLE_FRIENDLY_NAME, TABLE_ID

from conftest import make_pages

TABLE_KEY = (DATASET_ID, TABLE_ID)


def test_create_tables_creates_dataset_and_table(context, bq_client):
    result = create_tables(context)

    assert result.status is Status.CREATED
    assert DATASET_ID in bq_client.datasets
    table = bq_client.tables[TABLE_KEY]
    assert [f.name for f in table.schema] == [f.name for f in SCHEMA]
    assert table.schema[0].mode == "REQUIRED"
    assert table.friendly_name == TABLE_FRIENDLY_NAME


def test_create_tables_twice_is_idempotent(context, bq_client):
    create_tables(context)
    schema_before = list(bq_client.tables[TABLE_KEY].schema)

    result = create_tables(context)

    assert result.status is Status.EXISTS
    assert bq_client.create_table_calls == 1
    assert list(bq_client.tables[TABLE_KEY].schema) == schema_before


def test_delete_tables_without_dataset(context, bq_client, caplog):
    caplog.set_level("INFO", logger="auth_export.operations")

    result = delete_tables(context)

    assert result.status is Status.NOT_FOUND
    assert bq_client.deleted == []
    assert f"Dataset not found: {DATASET_ID}" in caplog.text


def test_delete_tables_without_table(context, bq_client):
    bq_client.datasets.add(DATASET_ID)

    result = delete_tables(context)

    assert result.status is Status.NOT_FOUND
    assert result.detail == f"Table not found: {TABLE_ID}"
    assert bq_client.deleted == []


def test_delete_tables_removes_existing_table(context, bq_client):
    create_tables(context)

    result = delete_tables(context)

    assert result.status is Status.DELETED
    assert bq_client.deleted == [TABLE_KEY]
    assert TABLE_KEY not in bq_client.tables


@pytest.mark.parametrize("operation", [create_tables, delete_tables, copy_to_bigquery])
def test_unconfigured_context_reports_instead_of_raising(operation, caplog):
    result = operation(ExportContext())

    assert result.status is Status.NOT_CONFIGURED
    assert not result.ok
    assert "please configure" in caplog.text


def test_copy_requires_firebase_too(bq_client):
    result = copy_to_bigquery(ExportContext(bigquery_client=bq_client))

    assert result.status is Status.NOT_CONFIGURED
    assert bq_client.inserted == []


def test_copy_to_bigquery_reports_counts(context, bq_client):
    context.batch_size = 400
    with patch("scripts.auth_export.identity.auth") as auth_mod:
        auth_mod.list_users.side_effect = make_pages(1000)
        result = copy_to_bigquery(context, verbose=True)

    assert result.status is Status.EXPORTED
    assert (result.rows, result.batches) == (1000, 3)
    assert sorted(len(b) for b in bq_client.inserted) == [200, 400, 400]


def test_copy_to_bigquery_propagates_insert_failure(context, bq_client):
    bq_client.insert_errors["user-0"] = [{"index": 0, "errors": []}]
    with patch("scripts.auth_export.identity.auth") as auth_mod:
        auth_mod.list_users.side_effect = make_pages(10)
        with pytest.raises(ExportError, match="1 errors."):
            copy_to_bigquery(context)


def test_create_tables_tolerates_dataset_created_concurrently(context, bq_client, caplog):
    caplog.set_level("INFO", logger="auth_export.warehouse")
    real_get_dataset = bq_client.get_dataset

    def get_dataset(ref):
        # Another writer creates the dataset between the check and the create
        try:
            return real_get_dataset(ref)
        finally:
            bq_client.datasets.add(ref.dataset_id)

    bq_client.get_dataset = get_dataset

    result = create_tables(context)

    assert result.status is Status.CREATED
    assert f"Dataset {DATASET_ID} already exists" in caplog.text
    assert "Created dataset" not in caplog.text
