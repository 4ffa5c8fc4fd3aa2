"""Destination table layout for exported users."""

from __future__ import annotations

from google.cloud import bigquery

DATASET_ID = "authentication"
TABLE_ID = "authentication"
TABLE_FRIENDLY_NAME = "auth"

SCHEMA = [
    bigquery.SchemaField("userId", "STRING", mode="REQUIRED"),
    bigquery.SchemaField("mail", "STRING"),
    bigquery.SchemaField("creationTime", "INTEGER"),
    bigquery.SchemaField("lastSignInTime", "INTEGER"),
    bigquery.SchemaField("displayName", "STRING"),
    bigquery.SchemaField("photoURL", "STRING"),
    bigquery.SchemaField("phoneNumber", "STRING"),
    bigquery.SchemaField("tokensValidAfterTime", "INTEGER"),
    bigquery.SchemaField("emailVerified", "BOOLEAN"),
    bigquery.SchemaField("disabled", "BOOLEAN"),
]
