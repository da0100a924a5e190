"""Locate the canonical URI of a resource that already exists in the repository."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from rdflib import URIRef

from arche_export.core.errors import ConflictResolutionError, RepositoryError
from arche_export.graph.turtle import TURTLE_MEDIA_TYPE, parse_turtle
from arche_export.vocabulary.registry import Property, VocabularyRegistry

if TYPE_CHECKING:
    from arche_export.repository.client import RepositoryClient

logger = logging.getLogger(__name__)


class ConflictResolver:
    """Resolves an identifier to a canonical URI through the search endpoint.

    The repository is assumed to keep identifiers unique. When the search
    returns several subjects anyway, the first in sorted order wins and a
    warning is logged.
    """

    def __init__(self, client: RepositoryClient, registry: VocabularyRegistry) -> None:
        self._client = client
        self._registry = registry

    def search(self, identifier: str, transaction_id: str | None = None) -> list[str]:
        """Return every subject whose ``hasIdentifier`` equals ``identifier``."""
        url = f"{self._client.base_url}/search"
        headers = {"Accept": TURTLE_MEDIA_TYPE}
        if transaction_id is not None:
            headers["X-TRANSACTION-ID"] = transaction_id
        predicate = self._registry.term(Property.HAS_IDENTIFIER)
        response = self._client.request(
            "GET",
            url,
            params=[("value[]", identifier), ("property[]", predicate)],
            headers=headers,
        )
        if response.status_code == 404:
            return []
        if response.status_code != 200:
            raise RepositoryError.from_response(url, response.status_code, response.text)

        graph = parse_turtle(response.text)
        subjects = {
            str(subject)
            for subject, value in graph.subject_objects(URIRef(predicate))
            if isinstance(subject, URIRef) and str(value) == identifier
        }
        return sorted(subjects)

    def resolve(self, identifier: str, transaction_id: str | None = None) -> str:
        candidates = self.search(identifier, transaction_id)
        if not candidates:
            raise ConflictResolutionError(identifier)
        if len(candidates) > 1:
            logger.warning(
                "Identifier %s matches %d resources (%s), using %s",
                identifier, len(candidates), ", ".join(candidates), candidates[0],
            )
        return candidates[0]
