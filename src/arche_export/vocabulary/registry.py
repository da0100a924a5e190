"""Fixed property vocabulary and per-deployment mapping tables."""

from __future__ import annotations

import logging
from enum import StrEnum
from pathlib import Path
from typing import Any

import yaml

from arche_export.core.config import VocabularyConfig
from arche_export.core.types import ResourceType

logger = logging.getLogger(__name__)

_DEFAULT_TABLES_PATH = Path(__file__).resolve().parents[3] / "config" / "arche_vocabulary.yml"


class Property(StrEnum):
    """Property names of the repository schema used by the exporter."""

    HAS_TITLE = "hasTitle"
    HAS_ALTERNATIVE_TITLE = "hasAlternativeTitle"
    HAS_IDENTIFIER = "hasIdentifier"
    HAS_NON_LINKED_IDENTIFIER = "hasNonLinkedIdentifier"
    HAS_PID = "hasPid"
    HAS_URL = "hasUrl"
    HAS_DESCRIPTION = "hasDescription"
    HAS_LANGUAGE = "hasLanguage"
    HAS_LIFECYCLE_STATUS = "hasLifeCycleStatus"
    HAS_EXTENT = "hasExtent"
    HAS_NOTE = "hasNote"
    HAS_DATE = "hasDate"
    HAS_LICENSE = "hasLicense"
    HAS_USED_SOFTWARE = "hasUsedSoftware"
    HAS_RELATED_DISCIPLINE = "hasRelatedDiscipline"
    HAS_CATEGORY = "hasCategory"
    HAS_PUBLISHER = "hasPublisher"
    HAS_CITY = "hasCity"
    HAS_AUTHOR = "hasAuthor"
    HAS_EDITOR = "hasEditor"
    HAS_CONTRIBUTOR = "hasContributor"
    HAS_CONTACT = "hasContact"
    HAS_OWNER = "hasOwner"
    HAS_RIGHTS_HOLDER = "hasRightsHolder"
    HAS_LICENSOR = "hasLicensor"
    HAS_DEPOSITOR = "hasDepositor"
    HAS_CURATOR = "hasCurator"
    HAS_METADATA_CREATOR = "hasMetadataCreator"
    HAS_HOSTING = "hasHosting"
    HAS_FIRST_NAME = "hasFirstName"
    HAS_LAST_NAME = "hasLastName"
    IS_PART_OF = "isPartOf"
    IS_METADATA_FOR = "isMetadataFor"


# Copied verbatim from a Collection to every Folder, FileResource and Metadata node.
INHERITABLE_PROPERTIES: frozenset[str] = frozenset({
    Property.HAS_CURATOR,
    Property.HAS_DEPOSITOR,
    Property.HAS_HOSTING,
    Property.HAS_LICENSE,
    Property.HAS_LICENSOR,
    Property.HAS_METADATA_CREATOR,
    Property.HAS_OWNER,
    Property.HAS_RIGHTS_HOLDER,
    Property.HAS_DATE,
})

# Process/project property name -> agent property on the Collection.
AGENT_PROPERTIES: dict[str, Property] = {
    "contact": Property.HAS_CONTACT,
    "owner": Property.HAS_OWNER,
    "rightsHolder": Property.HAS_RIGHTS_HOLDER,
    "licensor": Property.HAS_LICENSOR,
    "depositor": Property.HAS_DEPOSITOR,
    "curator": Property.HAS_CURATOR,
    "metadataCreator": Property.HAS_METADATA_CREATOR,
}

PERSON_ROLES: dict[str, Property] = {
    "Author": Property.HAS_AUTHOR,
    "Cartographer": Property.HAS_AUTHOR,
    "Artist": Property.HAS_AUTHOR,
    "Editor": Property.HAS_EDITOR,
    "OtherPerson": Property.HAS_CONTRIBUTOR,
    "Lithographer": Property.HAS_CONTRIBUTOR,
    "Engraver": Property.HAS_CONTRIBUTOR,
    "Contributor": Property.HAS_CONTRIBUTOR,
    "Printer": Property.HAS_CONTRIBUTOR,
    "PublisherPerson": Property.HAS_CONTRIBUTOR,
}

CORPORATE_ROLES: dict[str, Property] = {
    "Corporation": Property.HAS_AUTHOR,
    "CorporateAuthor": Property.HAS_AUTHOR,
    "CorporateCartographer": Property.HAS_AUTHOR,
    "CorporateEditor": Property.HAS_EDITOR,
    "CorporateOther": Property.HAS_CONTRIBUTOR,
    "CorporateContributor": Property.HAS_CONTRIBUTOR,
    "CorporatePrinter": Property.HAS_CONTRIBUTOR,
    "CorporatePublisher": Property.HAS_CONTRIBUTOR,
}

_DEFAULT_LANGUAGES: dict[str, str] = {
    "de": "deu",
    "en": "eng",
    "fr": "fra",
    "it": "ita",
    "la": "lat",
    "es": "spa",
    "cs": "ces",
    "hu": "hun",
    "pl": "pol",
    "ru": "rus",
    "nl": "nld",
    "sl": "slv",
    "hr": "hrv",
    "sk": "slk",
}

# ISO 639-2/B bibliographic codes as commonly found in library metadata.
_DEFAULT_LANGUAGE_ALIASES: dict[str, str] = {
    "ger": "deu",
    "fre": "fra",
    "cze": "ces",
    "dut": "nld",
    "slo": "slk",
}

_DEFAULT_LICENSES: dict[str, str] = {
    "Public Domain Mark 1.0": "publicdomain-1-0",
    "CC0 1.0": "cc0-1-0",
    "CC BY 4.0": "cc-by-4-0",
    "CC BY-SA 4.0": "cc-by-sa-4-0",
    "CC BY-NC 4.0": "cc-by-nc-4-0",
    "CC BY-NC-SA 4.0": "cc-by-nc-sa-4-0",
    "CC BY-ND 4.0": "cc-by-nd-4-0",
    "CC BY-NC-ND 4.0": "cc-by-nc-nd-4-0",
}


class VocabularyRegistry:
    """Namespace catalogue plus the language and license mapping tables.

    The built-in tables are overlaid with the YAML file named by
    ``VocabularyConfig.tables_path`` when it exists.
    """

    def __init__(
        self,
        config: VocabularyConfig | None = None,
        tables_path: str | Path | None = None,
    ) -> None:
        self.config = config or VocabularyConfig()
        if tables_path is not None:
            self._tables_path = Path(tables_path)
        elif self.config.tables_path:
            self._tables_path = Path(self.config.tables_path)
        else:
            self._tables_path = _DEFAULT_TABLES_PATH
        if not self._tables_path.is_absolute() and not self._tables_path.exists():
            self._tables_path = _DEFAULT_TABLES_PATH.parent.parent / self._tables_path

        self._languages: dict[str, str] = dict(_DEFAULT_LANGUAGES)
        self._language_aliases: dict[str, str] = dict(_DEFAULT_LANGUAGE_ALIASES)
        self._licenses: dict[str, str] = {k.lower(): v for k, v in _DEFAULT_LICENSES.items()}
        self._load_tables()

    def _load_tables(self) -> None:
        if not self._tables_path.exists():
            logger.debug("No vocabulary tables at %s, using built-in defaults", self._tables_path)
            return
        with open(self._tables_path) as fh:
            data: dict[str, Any] = yaml.safe_load(fh) or {}

        for two, three in (data.get("languages") or {}).items():
            self._languages[str(two).lower()] = str(three).lower()
        for alias, three in (data.get("language_aliases") or {}).items():
            self._language_aliases[str(alias).lower()] = str(three).lower()
        for name, target in (data.get("licenses") or {}).items():
            self._licenses[str(name).strip().lower()] = str(target)

    # -- namespaces ----------------------------------------------------------

    @property
    def namespace(self) -> str:
        return self.config.schema_namespace

    @property
    def identifier_prefix(self) -> str:
        return self.config.identifier_prefix

    def term(self, name: str) -> str:
        """Full URI of a schema property or class."""
        return f"{self.config.schema_namespace}{name}"

    def type_uri(self, resource_type: ResourceType) -> str:
        return self.term(resource_type.value)

    def lifecycle(self, status: str) -> str:
        return f"{self.config.lifecycle_vocabulary}{status}"

    def category(self, name: str) -> str:
        return f"{self.config.category_vocabulary}{name}"

    def discipline(self, code: str) -> str:
        if code.startswith(("http://", "https://")):
            return code
        return f"{self.config.discipline_vocabulary}{code}"

    # -- mapping tables ------------------------------------------------------

    def three_letter_code(self, code: str) -> str | None:
        """Map a two- or three-letter language code to its ISO 639-3 form."""
        code = code.strip().lower()
        if code in self._languages:
            return self._languages[code]
        if code in self._language_aliases:
            return self._language_aliases[code]
        if code in self._languages.values():
            return code
        return None

    def two_letter_code(self, code: str) -> str | None:
        """Map a language code to the two-letter tag used on language strings."""
        three = self.three_letter_code(code)
        if three is None:
            return None
        for two, candidate in self._languages.items():
            if candidate == three:
                return two
        return None

    def language_uri(self, code: str) -> str | None:
        three = self.three_letter_code(code)
        if three is None:
            return None
        return f"{self.config.language_vocabulary}{three}"

    def license_uri(self, name: str) -> str | None:
        """Map a license name (or vocabulary URI) to its controlled-vocabulary URI."""
        name = name.strip()
        if name.startswith(self.config.license_vocabulary):
            return name
        target = self._licenses.get(name.lower())
        if target is None:
            return None
        if target.startswith(("http://", "https://")):
            return target
        return f"{self.config.license_vocabulary}{target}"

    @staticmethod
    def is_inheritable(property_name: str) -> bool:
        return property_name in INHERITABLE_PROPERTIES
