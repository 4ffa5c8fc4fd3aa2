"""Explicit holder for the Firebase app and BigQuery client.

Built once by the caller and passed into every operation, so nothing lives
in module-level state and tests can swap in doubles.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any, Optional

import firebase_admin
from firebase_admin import credentials
from google.cloud import bigquery
from google.oauth2 import service_account

from scripts.auth_export.config import ExportConfig
from scripts.auth_export.identity import FirebaseUsers
from scripts.auth_export.pipeline import (
    DEFAULT_BATCH_SIZE,
    DEFAULT_MAX_CONCURRENT_INSERTS,
    DEFAULT_PAGE_SIZE,
)
from scripts.auth_export.warehouse import Warehouse

logger = logging.getLogger("auth_export.context")

FIREBASE_APP_NAME = "authentication-to-bigquery-export"


class ExportContext:
    def __init__(
        self,
        firebase_app: Any = None,
        bigquery_client: Optional[bigquery.Client] = None,
        location: Optional[str] = None,
        page_size: int = DEFAULT_PAGE_SIZE,
        batch_size: int = DEFAULT_BATCH_SIZE,
        max_concurrent_inserts: int = DEFAULT_MAX_CONCURRENT_INSERTS,
        verbose: bool = False,
        app_name: Optional[str] = None,
    ) -> None:
        self.firebase_app = firebase_app
        self.bigquery_client = bigquery_client
        self.location = location
        self.page_size = page_size
        self.batch_size = batch_size
        self.max_concurrent_inserts = max_concurrent_inserts
        self.verbose = verbose
        # firebase_admin keeps apps in a process-wide registry keyed by name
        self.app_name = app_name or f"{FIREBASE_APP_NAME}-{uuid.uuid4().hex[:8]}"

    def set_firebase_config(self, service_account_info: Optional[dict[str, Any]]) -> None:
        """Initialise this context's Firebase app, replacing the one it had.

        Apps registered by other contexts are left alone. None selects
        Application Default Credentials.
        """
        if service_account_info:
            cred = credentials.Certificate(service_account_info)
        else:
            cred = credentials.ApplicationDefault()

        try:
            existing = firebase_admin.get_app(self.app_name)
        except ValueError:
            existing = None
        if existing is not None:
            firebase_admin.delete_app(existing)

        self.firebase_app = firebase_admin.initialize_app(cred, name=self.app_name)
        logger.debug("Firebase app %s initialised", self.app_name)

    def set_bigquery_config(
        self,
        service_account_info: Optional[dict[str, Any]],
        project_id: Optional[str] = None,
    ) -> None:
        """Create the BigQuery client for the document's project.

        None selects Application Default Credentials.
        """
        if service_account_info:
            creds = service_account.Credentials.from_service_account_info(service_account_info)
            self.bigquery_client = bigquery.Client(
                project=service_account_info.get("project_id") or project_id,
                credentials=creds,
            )
        else:
            self.bigquery_client = bigquery.Client(project=project_id)
        logger.debug("BigQuery client bound to project %s", self.bigquery_client.project)

    @property
    def users(self) -> Optional[FirebaseUsers]:
        if self.firebase_app is None:
            return None
        return FirebaseUsers(self.firebase_app)

    @property
    def warehouse(self) -> Optional[Warehouse]:
        if self.bigquery_client is None:
            return None
        return Warehouse(self.bigquery_client, location=self.location)


def build_context(config: ExportConfig) -> ExportContext:
    """Build a context with both clients configured from config."""
    context = ExportContext(
        location=config.bigquery.location,
        page_size=config.page_size,
        batch_size=config.batch_size,
        max_concurrent_inserts=config.max_concurrent_inserts,
        verbose=config.verbose,
    )
    context.set_firebase_config(config.firebase.credentials)
    context.set_bigquery_config(config.bigquery.credentials, config.bigquery.project_id)
    return context
