"""Operation results and the errors raised by the export."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Sequence


class Status(str, Enum):
    CREATED = "created"
    EXISTS = "exists"
    DELETED = "deleted"
    NOT_FOUND = "not_found"
    NOT_CONFIGURED = "not_configured"
    EXPORTED = "exported"


@dataclass(frozen=True)
class OperationResult:
    """Outcome of a table lifecycle or export call that did not raise."""

    status: Status
    detail: str = ""
    rows: int = 0
    batches: int = 0

    @property
    def ok(self) -> bool:
        return self.status is not Status.NOT_CONFIGURED


class InsertRowsError(Exception):
    """BigQuery rejected rows of a single insert request."""

    def __init__(self, errors: Sequence[Any]) -> None:
        self.errors = list(errors)
        super().__init__(f"{len(self.errors)} errors.")


class ExportError(Exception):
    """The export failed while inserting rows.

    Some batches may already be committed; no partial result is returned.
    """

    def __init__(self, message: str, errors: Optional[Sequence[Any]] = None) -> None:
        self.errors = list(errors) if errors else []
        super().__init__(message)
