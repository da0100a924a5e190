"""Property vocabulary and deployment mapping tables."""

from arche_export.vocabulary.registry import (
    AGENT_PROPERTIES,
    CORPORATE_ROLES,
    INHERITABLE_PROPERTIES,
    PERSON_ROLES,
    Property,
    VocabularyRegistry,
)

__all__ = [
    "AGENT_PROPERTIES",
    "CORPORATE_ROLES",
    "INHERITABLE_PROPERTIES",
    "PERSON_ROLES",
    "Property",
    "VocabularyRegistry",
]
