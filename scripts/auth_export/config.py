"""Configuration via environment variables with cloud-native secret support.

Supports:
  - Environment variables and .env files (local dev)
  - Inline service-account JSON or a path to a key file
  - GCP Secret Manager (gcp-secret://name) and AWS Secrets Manager
    (aws-secret://name#key) references to a service-account document
  - Application Default Credentials when no document is given
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Optional

from dotenv import load_dotenv

from scripts.auth_export.secrets import load_credential_document

MAX_PAGE_SIZE = 1000


@dataclass(frozen=True)
class FirebaseConfig:
    credentials: Optional[dict[str, Any]] = None  # None = use ADC


@dataclass(frozen=True)
class BigQueryConfig:
    credentials: Optional[dict[str, Any]] = None  # None = use ADC
    project_id: Optional[str] = None
    location: Optional[str] = None


@dataclass(frozen=True)
class SchedulerConfig:
    interval_min: int = 60
    misfire_grace_time: int = 300


@dataclass(frozen=True)
class ExportConfig:
    firebase: FirebaseConfig = field(default_factory=FirebaseConfig)
    bigquery: BigQueryConfig = field(default_factory=BigQueryConfig)
    scheduler: SchedulerConfig = field(default_factory=SchedulerConfig)
    page_size: int = 1000
    batch_size: int = 1000
    max_concurrent_inserts: int = 10
    verbose: bool = False


def _int_env(name: str, default: int, minimum: int = 1, maximum: Optional[int] = None) -> int:
    raw = os.environ.get(name, "")
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")
    if value < minimum or (maximum is not None and value > maximum):
        bounds = f">= {minimum}" if maximum is None else f"between {minimum} and {maximum}"
        raise ValueError(f"{name} must be {bounds}, got {value}")
    return value


def _bool_env(name: str, default: bool = False) -> bool:
    raw = os.environ.get(name, "")
    if not raw:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def load_config() -> ExportConfig:
    """Load configuration from environment variables.

    Credential variables are optional: when unset, the clients fall back to
    Application Default Credentials (Cloud Run service account, gcloud login).
    """
    load_dotenv()

    firebase = FirebaseConfig(
        credentials=load_credential_document(os.environ.get("FIREBASE_CREDENTIALS", "")),
    )

    bigquery = BigQueryConfig(
        credentials=load_credential_document(os.environ.get("BIGQUERY_CREDENTIALS", "")),
        project_id=os.environ.get("BIGQUERY_PROJECT_ID") or None,
        location=os.environ.get("BIGQUERY_LOCATION") or None,
    )

    scheduler = SchedulerConfig(
        interval_min=_int_env("EXPORT_INTERVAL_MIN", 60),
        misfire_grace_time=_int_env("SCHEDULER_MISFIRE_GRACE_TIME", 300),
    )

    return ExportConfig(
        firebase=firebase,
        bigquery=bigquery,
        scheduler=scheduler,
        page_size=_int_env("EXPORT_PAGE_SIZE", 1000, maximum=MAX_PAGE_SIZE),
        batch_size=_int_env("EXPORT_BATCH_SIZE", 1000),
        max_concurrent_inserts=_int_env("EXPORT_MAX_CONCURRENT_INSERTS", 10),
        verbose=_bool_env("EXPORT_VERBOSE"),
    )
