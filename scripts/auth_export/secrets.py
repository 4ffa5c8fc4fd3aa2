"""Cloud-native resolution of service-account credential documents.

A credential value may be inline JSON, a path to a key file, or a reference
to a secret holding the JSON in AWS Secrets Manager or GCP Secret Manager.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any, Optional

logger = logging.getLogger("auth_export.secrets")

# Prefixes that indicate a cloud secret reference
_AWS_PREFIX = "aws-secret://"
_GCP_PREFIX = "gcp-secret://"


def resolve_secret(value: str) -> str:
    """Resolve a secret reference to its plaintext value.

    Supported formats:
      - "aws-secret://secret-name"         -> AWS Secrets Manager
      - "aws-secret://secret-name#key"     -> AWS Secrets Manager (JSON key)
      - "gcp-secret://projects/P/secrets/N/versions/V" -> GCP Secret Manager
      - "gcp-secret://name"                -> GCP Secret Manager, latest version
      - anything else                      -> returned as-is
    """
    if value.startswith(_AWS_PREFIX):
        return _resolve_aws_secret(value[len(_AWS_PREFIX):])
    if value.startswith(_GCP_PREFIX):
        return _resolve_gcp_secret(value[len(_GCP_PREFIX):])
    return value


def load_credential_document(value: str) -> Optional[dict[str, Any]]:
    """Turn a credential setting into a parsed service-account document.

    Returns None for an empty value, meaning Application Default Credentials.
    """
    value = value.strip()
    if not value:
        return None

    resolved = resolve_secret(value).strip()
    if resolved.startswith("{"):
        source = "inline JSON" if resolved == value else "secret reference"
        text = resolved
    else:
        source = resolved
        with open(os.path.expanduser(resolved), encoding="utf-8") as fh:
            text = fh.read()

    try:
        document = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Credential document from {source} is not valid JSON: {exc}") from exc
    if not isinstance(document, dict):
        raise ValueError(f"Credential document from {source} must be a JSON object")

    logger.debug("Loaded credential document for project %s", document.get("project_id"))
    return document


def _resolve_aws_secret(ref: str) -> str:
    """Fetch a secret from AWS Secrets Manager.

    ref format: "secret-name" or "secret-name#json_key"
    """
    import boto3

    parts = ref.split("#", 1)
    secret_name = parts[0]
    json_key = parts[1] if len(parts) > 1 else None

    region = os.environ.get("AWS_REGION", "us-east-1")
    client = boto3.client("secretsmanager", region_name=region)

    resp = client.get_secret_value(SecretId=secret_name)
    secret_string = resp["SecretString"]

    if json_key:
        data = json.loads(secret_string)
        value = data[json_key]
        # A nested service-account document comes back as a dict
        return value if isinstance(value, str) else json.dumps(value)
    return secret_string


def _resolve_gcp_secret(ref: str) -> str:
    """Fetch a secret from GCP Secret Manager."""
    from google.cloud import secretmanager

    client = secretmanager.SecretManagerServiceClient()

    if ref.startswith("projects/"):
        name = ref
    else:
        project = os.environ.get("GCP_PROJECT_ID", "")
        if not project:
            project = _gcp_project_from_metadata()
        name = f"projects/{project}/secrets/{ref}/versions/latest"

    response = client.access_secret_version(request={"name": name})
    return response.payload.data.decode("UTF-8")


def _gcp_project_from_metadata() -> str:
    """Fetch the GCP project ID from the metadata server (Cloud Run/GCE only)."""
    import requests

    try:
        resp = requests.get(
            "http://metadata.google.internal/computeMetadata/v1/project/project-id",
            headers={"Metadata-Flavor": "Google"},
            timeout=2,
        )
        resp.raise_for_status()
        return resp.text
    except requests.RequestException as exc:
        raise RuntimeError(
            "Cannot determine GCP project ID. Set GCP_PROJECT_ID env var."
        ) from exc
