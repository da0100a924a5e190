"""Models of the data consumed from the digitization workflow engine."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field


class MetadataEntry(BaseModel):
    name: str
    value: str


class PersonEntry(BaseModel):
    """A person attached to a document node under a role name."""

    role: str
    first_name: str = ""
    last_name: str = ""
    display_name: str = ""
    authority_uri: str | None = None

    @property
    def name(self) -> str:
        if self.display_name:
            return self.display_name
        if self.last_name and self.first_name:
            return f"{self.last_name}, {self.first_name}"
        return self.last_name or self.first_name


class CorporateEntry(BaseModel):
    role: str
    name: str
    authority_uri: str | None = None


class DocStruct(BaseModel):
    """A node of the logical document tree."""

    type: str
    anchor: bool = False
    metadata: list[MetadataEntry] = Field(default_factory=list)
    persons: list[PersonEntry] = Field(default_factory=list)
    corporates: list[CorporateEntry] = Field(default_factory=list)
    children: list[DocStruct] = Field(default_factory=list)

    def values(self, name: str) -> list[str]:
        return [m.value for m in self.metadata if m.name == name and m.value.strip()]

    def value(self, name: str) -> str | None:
        found = self.values(name)
        return found[0] if found else None


class FolderListing(BaseModel):
    """A named image/text folder and the files it contains."""

    name: str
    files: list[Path] = Field(default_factory=list)


class ProjectInfo(BaseModel):
    title: str
    archived: bool = False
    properties: dict[str, str] = Field(default_factory=dict)


class ProcessContext(BaseModel):
    """Everything one export run reads from the workflow engine."""

    id: int | str
    title: str
    project: ProjectInfo
    logical: DocStruct
    folders: dict[str, FolderListing] = Field(default_factory=dict)
    metadata_files: list[Path] = Field(default_factory=list)
    properties: dict[str, str] = Field(default_factory=dict)

    def property_value(self, name: str) -> str | None:
        """Process-level property, falling back to the project-level one."""
        value = self.properties.get(name)
        if value and value.strip():
            return value.strip()
        value = self.project.properties.get(name)
        if value and value.strip():
            return value.strip()
        return None

    @property
    def volume(self) -> DocStruct:
        """The exported document: the first child when the top node is an anchor."""
        if self.logical.anchor and self.logical.children:
            return self.logical.children[0]
        return self.logical

    @property
    def anchor(self) -> DocStruct | None:
        if self.logical.anchor:
            return self.logical
        return None
