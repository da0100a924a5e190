"""Translate workflow data into typed resource nodes.

The builder is pure: it performs no network or filesystem access and only
returns new nodes. One builder instance serves one export run so that agents
referenced several times are minted once.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable

from pydantic import BaseModel, Field

from arche_export.core.config import ExportConfig
from arche_export.core.errors import MissingFieldError
from arche_export.core.types import ResourceType
from arche_export.graph.identifiers import IdentifierScheme
from arche_export.graph.models import ResourceNode
from arche_export.graph.text import compose_titles, date_literal, date_notes
from arche_export.vocabulary.registry import (
    AGENT_PROPERTIES,
    CORPORATE_ROLES,
    PERSON_ROLES,
    Property,
    VocabularyRegistry,
)
from arche_export.workflow.models import (
    CorporateEntry,
    DocStruct,
    FolderListing,
    PersonEntry,
    ProcessContext,
    ProjectInfo,
)

logger = logging.getLogger(__name__)

# Metadata field names read from the document tree.
TITLE = "TitleDocMain"
SORT_TITLE = "TitleDocMainShort"
ORDER_NUMBER = "CurrentNo"
SUBTITLE = "TitleDocSub1"
CATALOG_ID = "CatalogIDDigital"
SHELFMARK = "shelfmarksource"
LANGUAGE = "DocLanguage"
LICENSE = "AccessLicense"
PUBLICATION_YEAR = "PublicationYear"
DATE_OF_ORIGIN = "DateOfOrigin"
PUBLISHER = "PublisherName"
PLACE = "PlaceOfPublication"
HANDLE = "Handle"

# Plain string fields copied as they are onto publications.
_LITERAL_FIELDS: dict[str, Property] = {
    PUBLISHER: Property.HAS_PUBLISHER,
    PLACE: Property.HAS_CITY,
}

_IMAGE_SUFFIXES = {".jpg", ".jpeg", ".tif", ".tiff", ".png", ".jp2"}


class BuildResult(BaseModel):
    """A built node plus the agent nodes minted while building it."""

    node: ResourceNode
    agents: list[ResourceNode] = Field(default_factory=list)


def _is_uri(value: str) -> bool:
    return value.startswith(("http://", "https://"))


def _category_for(path: Path) -> str:
    if path.suffix.lower() in _IMAGE_SUFFIXES:
        return "image"
    return "text"


class ResourceGraphBuilder:
    """Builds TopCollection, Collection, Publication, Metadata, Folder and file nodes."""

    def __init__(
        self,
        registry: VocabularyRegistry,
        scheme: IdentifierScheme,
        config: ExportConfig | None = None,
    ) -> None:
        self.registry = registry
        self.scheme = scheme
        self.config = config or ExportConfig()
        self._agents: dict[str, ResourceNode] = {}

    @property
    def minted_agents(self) -> list[ResourceNode]:
        return list(self._agents.values())

    # -- agents --------------------------------------------------------------

    def _agent(
        self,
        resource_type: ResourceType,
        name: str,
        authority_uri: str | None = None,
        first_name: str = "",
        last_name: str = "",
    ) -> tuple[str, ResourceNode | None]:
        """Return the URI to reference and, if newly minted, the agent node."""
        if authority_uri and authority_uri.strip():
            return authority_uri.strip(), None

        if resource_type == ResourceType.PERSON:
            identifier = self.scheme.person(name)
        else:
            identifier = self.scheme.organisation(name)
        if identifier in self._agents:
            return identifier, None

        node = ResourceNode(identifier=identifier, resource_type=resource_type)
        node.add_lang(Property.HAS_TITLE, name, "und")
        node.add_reference(Property.HAS_IDENTIFIER, identifier)
        if first_name:
            node.add_literal(Property.HAS_FIRST_NAME, first_name)
        if last_name:
            node.add_literal(Property.HAS_LAST_NAME, last_name)
        self._agents[identifier] = node
        logger.debug("Minted %s agent %s", resource_type, identifier)
        return identifier, node

    def _add_person(self, node: ResourceNode, person: PersonEntry, minted: list[ResourceNode]) -> None:
        prop = PERSON_ROLES.get(person.role)
        if prop is None:
            logger.debug("Ignoring person with unmapped role %r", person.role)
            return
        if not person.name and not person.authority_uri:
            return
        uri, agent = self._agent(
            ResourceType.PERSON,
            person.name,
            person.authority_uri,
            first_name=person.first_name,
            last_name=person.last_name,
        )
        if agent is not None:
            minted.append(agent)
        node.add_reference(prop, uri)

    def _add_corporate(self, node: ResourceNode, corporate: CorporateEntry, minted: list[ResourceNode]) -> None:
        prop = CORPORATE_ROLES.get(corporate.role)
        if prop is None:
            logger.debug("Ignoring corporate entity with unmapped role %r", corporate.role)
            return
        if not corporate.name and not corporate.authority_uri:
            return
        uri, agent = self._agent(ResourceType.ORGANISATION, corporate.name, corporate.authority_uri)
        if agent is not None:
            minted.append(agent)
        node.add_reference(prop, uri)

    def _add_property_agents(
        self,
        node: ResourceNode,
        lookup: Callable[[str], str | None],
        minted: list[ResourceNode],
    ) -> None:
        """Agent properties from named process/project properties.

        A value is either an agent URI or an organisation name; several
        agents are separated by ``;``.
        """
        for key, prop in AGENT_PROPERTIES.items():
            raw = lookup(key)
            if not raw:
                continue
            for value in (v.strip() for v in raw.split(";")):
                if not value:
                    continue
                if _is_uri(value):
                    node.add_reference(prop, value)
                    continue
                uri, agent = self._agent(ResourceType.ORGANISATION, value)
                if agent is not None:
                    minted.append(agent)
                node.add_reference(prop, uri)

    # -- shared field handling -----------------------------------------------

    @staticmethod
    def _require(doc: DocStruct, field: str) -> str:
        value = doc.value(field)
        if value is None:
            raise MissingFieldError(field, doc.type)
        return value.strip()

    def _literal_language(self, doc: DocStruct) -> str:
        for code in doc.values(LANGUAGE):
            two = self.registry.two_letter_code(code)
            if two:
                return two
        return self.registry.config.default_language

    def _add_titles(self, node: ResourceNode, doc: DocStruct, lang: str) -> str:
        main_title = self._require(doc, TITLE)
        title, alternative = compose_titles(
            main_title,
            sort_title=doc.value(SORT_TITLE),
            order_number=doc.value(ORDER_NUMBER),
            subtitle=doc.value(SUBTITLE),
        )
        node.add_lang(Property.HAS_TITLE, title, lang)
        node.add_lang(Property.HAS_ALTERNATIVE_TITLE, alternative, lang)
        return title

    def _add_languages(self, node: ResourceNode, doc: DocStruct) -> None:
        for code in doc.values(LANGUAGE):
            uri = self.registry.language_uri(code)
            if uri is None:
                logger.warning("Unknown language code %r on %s, omitted", code, node.identifier)
                continue
            node.add_reference(Property.HAS_LANGUAGE, uri)

    def _add_date(self, node: ResourceNode, doc: DocStruct) -> None:
        date = doc.value(DATE_OF_ORIGIN) or doc.value(PUBLICATION_YEAR)
        if not date:
            return
        value, datatype = date_literal(date)
        if value:
            if datatype:
                node.add_typed(Property.HAS_DATE, value, datatype)
            else:
                node.add_literal(Property.HAS_DATE, value)
        for text, lang in date_notes(date):
            node.add_lang(Property.HAS_NOTE, text, lang)

    def _license(self, doc: DocStruct | None, fallback: str | None) -> str | None:
        if doc is not None:
            name = doc.value(LICENSE)
            if name:
                uri = self.registry.license_uri(name)
                if uri is None:
                    logger.warning("Unknown license %r, hasLicense omitted", name)
                return uri
        for candidate in (fallback, self.registry.config.default_license):
            if candidate:
                uri = self.registry.license_uri(candidate)
                if uri is not None:
                    return uri
                logger.warning("Unknown license %r, hasLicense omitted", candidate)
        return None

    # -- hierarchy nodes -----------------------------------------------------

    def build_top_collection(self, project: ProjectInfo) -> BuildResult:
        """The project-level TopCollection."""
        minted: list[ResourceNode] = []
        lang = self.registry.config.default_language
        node = ResourceNode(
            identifier=self.scheme.top_collection(),
            resource_type=ResourceType.TOP_COLLECTION,
        )
        node.add_lang(Property.HAS_TITLE, project.title, lang)
        node.add_reference(Property.HAS_IDENTIFIER, node.identifier)
        node.add_typed(Property.HAS_URL, self.config.viewer_url, "anyURI")
        description = project.properties.get("description")
        if description:
            node.add_lang(Property.HAS_DESCRIPTION, description, lang)
        status = "completed" if project.archived else "active"
        node.add_reference(Property.HAS_LIFECYCLE_STATUS, self.registry.lifecycle(status))
        node.add_literal(Property.HAS_USED_SOFTWARE, self.config.used_software)
        self._add_property_agents(node, project.properties.get, minted)
        discipline = project.properties.get("relatedDiscipline")
        if discipline:
            node.add_reference(Property.HAS_RELATED_DISCIPLINE, self.registry.discipline(discipline))
        license_uri = self._license(None, project.properties.get("license"))
        if license_uri:
            node.add_reference(Property.HAS_LICENSE, license_uri)
        node.add_reference(Property.HAS_HOSTING, self.config.hosting_agent)
        return BuildResult(node=node, agents=minted)

    def build_collection(self, context: ProcessContext) -> BuildResult:
        """The process-level Collection, built from the exported volume."""
        minted: list[ResourceNode] = []
        doc = context.volume
        lang = self._literal_language(doc)
        catalog_id = self._require(doc, CATALOG_ID)

        node = ResourceNode(
            identifier=self.scheme.collection(context.title),
            resource_type=ResourceType.COLLECTION,
        )
        self._add_titles(node, doc, lang)
        node.add_reference(Property.HAS_IDENTIFIER, node.identifier)
        handle = doc.value(HANDLE)
        if handle:
            node.add_typed(Property.HAS_PID, handle, "anyURI")
        node.add_literal(Property.HAS_NON_LINKED_IDENTIFIER, catalog_id)
        for shelfmark in doc.values(SHELFMARK):
            node.add_literal(Property.HAS_NON_LINKED_IDENTIFIER, shelfmark)
        node.add_literal(Property.HAS_NON_LINKED_IDENTIFIER, str(context.id))
        node.add_typed(
            Property.HAS_URL,
            f"{self.config.viewer_url.rstrip('/')}/image/{catalog_id}",
            "anyURI",
        )
        node.add_lang(
            Property.HAS_DESCRIPTION,
            f"A collection of scans from: {self.config.catalog_url}{catalog_id}",
            "en",
        )
        self._add_languages(node, doc)
        node.add_reference(Property.HAS_LIFECYCLE_STATUS, self.registry.lifecycle("completed"))
        master = context.folders.get("master")
        if master is not None:
            node.add_lang(Property.HAS_EXTENT, f"{len(master.files)} images", "en")
        self._add_date(node, doc)
        self._add_property_agents(node, context.property_value, minted)
        license_uri = self._license(doc, context.property_value("license"))
        if license_uri:
            node.add_reference(Property.HAS_LICENSE, license_uri)
        node.add_reference(Property.HAS_HOSTING, self.config.hosting_agent)
        node.add_reference(Property.IS_PART_OF, self.scheme.top_collection())
        return BuildResult(node=node, agents=minted)

    def build_publication(self, doc: DocStruct, anchor_identifier: str | None = None) -> BuildResult:
        """A Publication for a volume (``isPartOf`` its anchor) or for an anchor."""
        minted: list[ResourceNode] = []
        lang = self._literal_language(doc)
        catalog_id = self._require(doc, CATALOG_ID)

        node = ResourceNode(
            identifier=self.scheme.publication(catalog_id),
            resource_type=ResourceType.PUBLICATION,
        )
        self._add_titles(node, doc, lang)
        node.add_reference(Property.HAS_IDENTIFIER, node.identifier)
        node.add_literal(Property.HAS_NON_LINKED_IDENTIFIER, catalog_id)
        for shelfmark in doc.values(SHELFMARK):
            node.add_literal(Property.HAS_NON_LINKED_IDENTIFIER, shelfmark)
        self._add_languages(node, doc)
        self._add_date(node, doc)
        for field, prop in _LITERAL_FIELDS.items():
            for value in doc.values(field):
                node.add_literal(prop, value)
        for person in doc.persons:
            self._add_person(node, person, minted)
        for corporate in doc.corporates:
            self._add_corporate(node, corporate, minted)
        if anchor_identifier:
            node.add_reference(Property.IS_PART_OF, anchor_identifier)
        return BuildResult(node=node, agents=minted)

    def build_metadata(
        self,
        path: Path,
        collection: ResourceNode,
        process_title: str,
        publication_identifier: str,
    ) -> ResourceNode:
        """A Metadata node describing ``publication_identifier``."""
        node = ResourceNode(
            identifier=self.scheme.metadata(process_title, path.name),
            resource_type=ResourceType.METADATA,
        )
        node.add_lang(Property.HAS_TITLE, path.name, "en")
        node.add_reference(Property.HAS_IDENTIFIER, node.identifier)
        node.add_reference(Property.IS_METADATA_FOR, publication_identifier)
        node.add_reference(Property.IS_PART_OF, collection.identifier)
        node.add_reference(Property.HAS_CATEGORY, self.registry.category("dataset"))
        self.inherit(node, collection)
        return node

    def build_folder(
        self,
        folder: FolderListing,
        collection: ResourceNode,
        process_title: str,
    ) -> ResourceNode:
        node = ResourceNode(
            identifier=self.scheme.folder(process_title, folder.name),
            resource_type=ResourceType.FOLDER,
        )
        node.add_lang(Property.HAS_TITLE, folder.name, "en")
        node.add_reference(Property.HAS_IDENTIFIER, node.identifier)
        node.add_reference(Property.IS_PART_OF, collection.identifier)
        self.inherit(node, collection)
        return node

    def build_file(
        self,
        path: Path,
        folder: ResourceNode,
        folder_name: str,
        collection: ResourceNode,
        process_title: str,
    ) -> ResourceNode:
        node = ResourceNode(
            identifier=self.scheme.file(process_title, folder_name, path.name),
            resource_type=ResourceType.FILE_RESOURCE,
        )
        node.add_lang(Property.HAS_TITLE, path.name, "en")
        node.add_reference(Property.HAS_IDENTIFIER, node.identifier)
        node.add_reference(Property.IS_PART_OF, folder.identifier)
        node.add_reference(Property.HAS_CATEGORY, self.registry.category(_category_for(path)))
        self.inherit(node, collection)
        return node

    def inherit(self, child: ResourceNode, collection: ResourceNode) -> None:
        """Copy every inheritable statement of ``collection`` onto ``child``."""
        for statement in collection.statements:
            if self.registry.is_inheritable(statement.property):
                child.add(statement.model_copy())
