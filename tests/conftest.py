"""Shared test fixtures and helpers."""

from __future__ import annotations

from pathlib import Path

import pytest

from arche_export.core.config import ExportConfig, VocabularyConfig
from arche_export.graph.builder import ResourceGraphBuilder
from arche_export.graph.identifiers import IdentifierScheme
from arche_export.vocabulary.registry import VocabularyRegistry
from arche_export.workflow.models import (
    DocStruct,
    FolderListing,
    MetadataEntry,
    PersonEntry,
    ProcessContext,
    ProjectInfo,
)

PREFIX = "https://id.acdh.oeaw.ac.at/"
SCHEMA = "https://vocabs.acdh.oeaw.ac.at/schema#"
LICENSES = "https://vocabs.acdh.oeaw.ac.at/archelicenses/"
BASE = "https://repo.test/api"


def meta(name: str, value: str) -> MetadataEntry:
    return MetadataEntry(name=name, value=value)


def write_files(folder: Path, *names: str) -> list[Path]:
    """Create small files in ``folder`` and return their paths in order."""
    folder.mkdir(parents=True, exist_ok=True)
    paths = []
    for name in names:
        path = folder / name
        path.write_bytes(b"bytes of " + name.encode())
        paths.append(path)
    return paths


def alpenpost_doc(**extra: str) -> DocStruct:
    entries = {
        "TitleDocMain": "Alpenpost",
        "CatalogIDDigital": "AC123",
        "DocLanguage": "ger",
        "AccessLicense": "CC BY 4.0",
        "PublicationYear": "[1862?]",
    }
    entries.update(extra)
    return DocStruct(
        type="Monograph",
        metadata=[meta(k, v) for k, v in entries.items()],
        persons=[PersonEntry(role="Author", first_name="Johann", last_name="Huber")],
    )


def alpenpost_context(
    tmp_path: Path,
    *,
    logical: DocStruct | None = None,
    metadata_files: list[Path] | None = None,
    with_master: bool = True,
) -> ProcessContext:
    """The ``Alpenpost`` process: one master image, catalogue id ``AC123``."""
    folders = {}
    if with_master:
        files = write_files(tmp_path / "Alpenpost_master", "AC123_master_0001.tif")
        folders["master"] = FolderListing(name="Alpenpost_master", files=files)
    return ProcessContext(
        id=9470,
        title="Alpenpost",
        project=ProjectInfo(
            title="woldan",
            properties={"owner": "https://id.acdh.oeaw.ac.at/oeaw"},
        ),
        logical=logical or alpenpost_doc(),
        folders=folders,
        metadata_files=metadata_files or [],
        properties={"curator": "Österreichische Akademie der Wissenschaften"},
    )


@pytest.fixture
def registry() -> VocabularyRegistry:
    return VocabularyRegistry(VocabularyConfig())


@pytest.fixture
def scheme() -> IdentifierScheme:
    return IdentifierScheme(PREFIX, "woldan")


@pytest.fixture
def builder(registry, scheme) -> ResourceGraphBuilder:
    return ResourceGraphBuilder(registry, scheme, ExportConfig())


@pytest.fixture
def context(tmp_path) -> ProcessContext:
    return alpenpost_context(tmp_path)
