"""Transactional access to the repository REST API."""

from arche_export.repository.client import TRANSACTION_HEADER, RepositoryClient, Transaction
from arche_export.repository.media import content_type_for
from arche_export.repository.models import TransactionInfo, UpsertResult
from arche_export.repository.resolver import ConflictResolver

__all__ = [
    "ConflictResolver",
    "RepositoryClient",
    "TRANSACTION_HEADER",
    "Transaction",
    "TransactionInfo",
    "UpsertResult",
    "content_type_for",
]
