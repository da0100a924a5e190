"""Load a process context from a YAML process descriptor.

A descriptor looks like::

    project:
      title: woldan
      properties: {owner: "https://id.acdh.oeaw.ac.at/oeaw"}
    process:
      id: 9470
      title: Alpenpost
    logical:
      type: Monograph
      metadata:
        - {name: TitleDocMain, value: Alpenpost}
        - {name: CatalogIDDigital, value: AC123}
    folders:
      master: {name: Alpenpost_master, path: images/Alpenpost_master}
    metadata_files: [meta.xml]

Relative paths resolve against the descriptor's directory. Folder
directories are listed in sorted order.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from arche_export.core.errors import InputError
from arche_export.workflow.models import (
    DocStruct,
    FolderListing,
    MetadataEntry,
    ProcessContext,
    ProjectInfo,
)

logger = logging.getLogger(__name__)


def _metadata_entries(raw: Any) -> list[dict[str, str]]:
    if raw is None:
        return []
    if isinstance(raw, dict):
        entries = []
        for name, value in raw.items():
            values = value if isinstance(value, list) else [value]
            entries.extend({"name": str(name), "value": str(v)} for v in values)
        return entries
    return [{"name": str(e["name"]), "value": str(e["value"])} for e in raw]


def _doc_struct(raw: dict[str, Any]) -> DocStruct:
    data = dict(raw)
    data["metadata"] = [MetadataEntry(**e) for e in _metadata_entries(data.get("metadata"))]
    data["children"] = [_doc_struct(child) for child in data.get("children") or []]
    return DocStruct(**data)


def _list_folder(name: str, path: Path) -> FolderListing:
    files = sorted(p for p in path.iterdir() if p.is_file())
    logger.debug("Folder %s: %d files in %s", name, len(files), path)
    return FolderListing(name=name, files=files)


def _folders(raw: dict[str, Any], base: Path) -> dict[str, FolderListing]:
    folders: dict[str, FolderListing] = {}
    for role, entry in (raw or {}).items():
        if isinstance(entry, str):
            entry = {"path": entry}
        path = base / entry["path"]
        name = entry.get("name") or path.name
        if not path.is_dir():
            logger.info("Folder %r (%s) does not exist, skipping", role, path)
            continue
        folders[str(role)] = _list_folder(name, path)
    return folders


def load_process_context(path: str | Path) -> ProcessContext:
    """Read a process descriptor; any unreadable or malformed input is an InputError."""
    path = Path(path)
    try:
        with open(path) as fh:
            raw = yaml.safe_load(fh) or {}
    except (OSError, yaml.YAMLError) as exc:
        raise InputError(f"Cannot read process descriptor {path}: {exc}") from exc

    base = path.resolve().parent
    try:
        process = raw["process"]
        project_raw = raw["project"]
        project = ProjectInfo(
            title=str(project_raw["title"]),
            archived=bool(project_raw.get("archived", False)),
            properties={k: str(v) for k, v in (project_raw.get("properties") or {}).items()},
        )
        logical = _doc_struct(raw["logical"])
        return ProcessContext(
            id=process["id"],
            title=str(process["title"]),
            properties={k: str(v) for k, v in (process.get("properties") or {}).items()},
            project=project,
            logical=logical,
            folders=_folders(raw.get("folders") or {}, base),
            metadata_files=[base / p for p in raw.get("metadata_files") or []],
        )
    except (KeyError, TypeError, ValidationError) as exc:
        raise InputError(f"Malformed process descriptor {path}: {exc}") from exc
