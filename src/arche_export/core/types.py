"""Core type definitions shared across all export modules."""

from __future__ import annotations

from enum import StrEnum


class ResourceType(StrEnum):
    """Primary type tag of an exported resource."""

    TOP_COLLECTION = "TopCollection"
    COLLECTION = "Collection"
    PUBLICATION = "Publication"
    METADATA = "Metadata"
    FOLDER = "Folder"
    FILE_RESOURCE = "Resource"
    PERSON = "Person"
    ORGANISATION = "Organisation"

    @property
    def is_agent(self) -> bool:
        return self in (ResourceType.PERSON, ResourceType.ORGANISATION)


class ValueKind(StrEnum):
    PLAIN = "plain"
    LANG = "lang"
    TYPED = "typed"
    REFERENCE = "reference"


class TransactionState(StrEnum):
    """Lifecycle of a repository transaction."""

    IDLE = "idle"
    ACTIVE = "active"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"


class UpsertOutcome(StrEnum):
    CREATED = "created"
    UPDATED = "updated"


class ExportStatus(StrEnum):
    """Terminal status of one export run."""

    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"
    FAILED = "failed"
    SKIPPED = "skipped"
