"""Input consumed from the digitization workflow engine."""

from arche_export.workflow.loader import load_process_context
from arche_export.workflow.models import (
    CorporateEntry,
    DocStruct,
    FolderListing,
    MetadataEntry,
    PersonEntry,
    ProcessContext,
    ProjectInfo,
)

__all__ = [
    "CorporateEntry",
    "DocStruct",
    "FolderListing",
    "MetadataEntry",
    "PersonEntry",
    "ProcessContext",
    "ProjectInfo",
    "load_process_context",
]
