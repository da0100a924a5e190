"""Repository protocol data models."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from arche_export.core.types import ResourceType, UpsertOutcome


class TransactionInfo(BaseModel):
    """Transaction description returned by ``POST /transaction``."""

    model_config = ConfigDict(populate_by_name=True)

    transaction_id: str = Field(alias="transactionId")
    started_at: datetime | None = Field(default=None, alias="startedAt")
    last_request: datetime | None = Field(default=None, alias="lastRequest")
    state: str = "active"

    @field_validator("transaction_id", mode="before")
    @classmethod
    def _token_as_string(cls, value: object) -> str:
        return str(value)


class UpsertResult(BaseModel):
    """Outcome of storing one resource graph."""

    identifier: str
    uri: str
    resource_type: ResourceType
    outcome: UpsertOutcome
