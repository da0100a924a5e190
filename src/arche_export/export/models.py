"""Export run result models."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field

from arche_export.core.types import ExportStatus
from arche_export.repository.models import UpsertResult


class ExportResult(BaseModel):
    """Terminal status of one export run and the resources it stored."""

    process_title: str
    status: ExportStatus
    message: str = ""
    transaction_id: str | None = None
    resources: list[UpsertResult] = Field(default_factory=list)
    dumped: list[Path] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status in (ExportStatus.COMMITTED, ExportStatus.SKIPPED)

    def uri_of(self, identifier: str) -> str | None:
        for resource in self.resources:
            if resource.identifier == identifier:
                return resource.uri
        return None
