"""Deterministic identifiers derived from a resource's position in the hierarchy.

Every non-agent resource is named ``prefix + project/process[/folder[/file]]``.
Segments are percent-encoded individually, so distinct hierarchy positions
never collide and re-running an export with the same inputs reproduces the
same identifiers. Publications live under ``publication:``, a segment prefix
that percent-encoding never emits, so they cannot meet a process
collection. Agents that have no authority identifier are named from their
normalised display name.
"""

from __future__ import annotations

import re
import unicodedata
from urllib.parse import quote

_NON_WORD = re.compile(r"[\W_]+")


def _segment(value: str) -> str:
    value = str(value).strip()
    if not value:
        raise ValueError("Identifier segments must not be empty")
    return quote(value, safe="")


def slugify(name: str) -> str:
    """Accent-fold, case-fold and collapse non-word runs to ``-``.

    Letters of any script survive and are percent-encoded.
    """
    folded = unicodedata.normalize("NFKD", name)
    folded = "".join(ch for ch in folded if not unicodedata.combining(ch))
    slug = _NON_WORD.sub("-", folded.casefold()).strip("-")
    if not slug:
        raise ValueError(f"Cannot derive an identifier from name {name!r}")
    return quote(slug, safe="-")


class IdentifierScheme:
    """Builds identifiers for one project."""

    def __init__(self, prefix: str, project_title: str) -> None:
        self._prefix = prefix if prefix.endswith("/") else prefix + "/"
        self._project = _segment(project_title)

    @property
    def prefix(self) -> str:
        return self._prefix

    def identifier(
        self,
        process_title: str | None = None,
        folder_name: str | None = None,
        file_name: str | None = None,
    ) -> str:
        """``prefix + project [/ process [/ folder [/ file]]]``."""
        parts = [self._project]
        if process_title is not None:
            parts.append(_segment(process_title))
            if folder_name is not None:
                parts.append(_segment(folder_name))
                if file_name is not None:
                    parts.append(_segment(file_name))
            elif file_name is not None:
                parts.append(_segment(file_name))
        elif folder_name is not None or file_name is not None:
            raise ValueError("A folder or file identifier needs a process title")
        return self._prefix + "/".join(parts)

    def top_collection(self) -> str:
        return self.identifier()

    def collection(self, process_title: str) -> str:
        return self.identifier(process_title)

    def folder(self, process_title: str, folder_name: str) -> str:
        return self.identifier(process_title, folder_name)

    def file(self, process_title: str, folder_name: str, file_name: str) -> str:
        return self.identifier(process_title, folder_name, file_name)

    def metadata(self, process_title: str, file_name: str) -> str:
        return self.identifier(process_title, file_name=file_name)

    def publication(self, catalog_id: str) -> str:
        # Project level, so volumes of different processes share their anchor.
        return f"{self._prefix}{self._project}/publication:{_segment(catalog_id)}"

    def person(self, display_name: str) -> str:
        return f"{self._prefix}persons/{slugify(display_name)}"

    def organisation(self, name: str) -> str:
        return f"{self._prefix}organisations/{slugify(name)}"
