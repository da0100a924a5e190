"""Transactional client for the repository REST API.

A run opens one transaction, stores every resource graph through
create-or-update, attaches binaries and finally commits or rolls back.
Every call inside the transaction carries the ``X-TRANSACTION-ID`` header.
"""

from __future__ import annotations

import logging
from pathlib import Path
from types import TracebackType
from typing import Any

import httpx

from arche_export.core.config import RepositoryConfig
from arche_export.core.errors import (
    ExportError,
    InputError,
    PermissionDeniedError,
    RepositoryError,
    ResourceMissingError,
    TransactionStateError,
)
from arche_export.core.types import TransactionState, UpsertOutcome
from arche_export.graph.models import ResourceGraph
from arche_export.graph.turtle import TURTLE_MEDIA_TYPE, to_turtle
from arche_export.repository.media import content_type_for
from arche_export.repository.models import TransactionInfo, UpsertResult
from arche_export.repository.resolver import ConflictResolver
from arche_export.vocabulary.registry import Property, VocabularyRegistry

logger = logging.getLogger(__name__)

TRANSACTION_HEADER = "X-TRANSACTION-ID"

_SUCCESS = {200, 201, 202, 203, 204}
_NEVER_REWRITTEN = frozenset({Property.HAS_IDENTIFIER})


class RepositoryClient:
    """HTTP access to one repository; opens transactions."""

    def __init__(
        self,
        config: RepositoryConfig | None = None,
        registry: VocabularyRegistry | None = None,
        *,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.config = config or RepositoryConfig()
        self.registry = registry or VocabularyRegistry()
        auth = (self.config.username, self.config.password) if self.config.username else None
        self._http = httpx.Client(
            auth=auth,
            timeout=httpx.Timeout(self.config.timeout_seconds),
            transport=transport,
        )

    @property
    def base_url(self) -> str:
        return self.config.base_url.rstrip("/")

    # -- public API ----------------------------------------------------------

    def begin(self) -> Transaction:
        """Open a transaction and return its handle."""
        url = f"{self.base_url}/transaction"
        response = self.request("POST", url, headers={"Accept": "application/json"})
        if response.status_code not in _SUCCESS:
            raise RepositoryError.from_response(url, response.status_code, response.text)
        info = self._transaction_info(url, response)
        logger.info("Started transaction %s", info.transaction_id)
        return Transaction(self, info)

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> RepositoryClient:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # -- internal ------------------------------------------------------------

    def request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """Send one request; transport failures become RepositoryError."""
        try:
            return self._http.request(method, url, **kwargs)
        except httpx.TransportError as exc:
            raise RepositoryError(f"Repository call {method} {url} failed: {exc}", uri=url) from exc

    @staticmethod
    def _transaction_info(url: str, response: httpx.Response) -> TransactionInfo:
        data: dict[str, Any] = {}
        if response.content:
            try:
                data = response.json()
            except ValueError as exc:
                raise RepositoryError(
                    f"Repository call {url} returned an unreadable transaction: {response.text}",
                    uri=url,
                    status_code=response.status_code,
                    body=response.text,
                ) from exc
        if "transactionId" not in data and TRANSACTION_HEADER in response.headers:
            data["transactionId"] = response.headers[TRANSACTION_HEADER]
        if "transactionId" not in data:
            raise RepositoryError(
                f"Repository call {url} returned no transaction id",
                uri=url,
                status_code=response.status_code,
                body=response.text,
            )
        return TransactionInfo(**data)


class Transaction:
    """One server-side transaction: ``active`` until committed or rolled back.

    After ``commit()`` or ``rollback()`` the handle is inert and every further
    call raises TransactionStateError. Used as a context manager, a
    transaction still active when an exception escapes is rolled back.
    """

    def __init__(self, client: RepositoryClient, info: TransactionInfo) -> None:
        self._client = client
        self.info = info
        self.state = TransactionState.ACTIVE
        self._resolver = ConflictResolver(client, client.registry)
        self._canonical: dict[str, str] = {}
        self._stored: set[str] = set()

    @property
    def token(self) -> str:
        return self.info.transaction_id

    @property
    def canonical_uris(self) -> dict[str, str]:
        """identifier -> canonical URI for every resource stored so far."""
        return dict(self._canonical)

    def _headers(self, **extra: str) -> dict[str, str]:
        return {TRANSACTION_HEADER: self.token, **extra}

    def _ensure_active(self) -> None:
        if self.state != TransactionState.ACTIVE:
            raise TransactionStateError(f"Transaction {self.token} is {self.state}, not active")

    # -- metadata ------------------------------------------------------------

    def upsert(self, graph: ResourceGraph) -> UpsertResult:
        """Create the graph's primary resource, or update it if it already exists."""
        self._ensure_active()
        node = graph.primary
        graph.rewrite_references(self._canonical, skip=_NEVER_REWRITTEN)

        url = f"{self._client.base_url}/metadata"
        response = self._client.request(
            "POST",
            url,
            content=to_turtle(graph, self._client.registry),
            headers=self._headers(**{
                "Content-Type": TURTLE_MEDIA_TYPE,
                "Accept": TURTLE_MEDIA_TYPE,
            }),
        )

        if response.status_code == 201:
            uri = response.headers.get("Location")
            if not uri:
                raise RepositoryError(
                    f"Repository created {node.identifier} without returning its location",
                    uri=url,
                    status_code=response.status_code,
                    body=response.text,
                )
            node.rebase(uri)
            outcome = UpsertOutcome.CREATED
        elif response.status_code == 409:
            uri = self._resolver.resolve(node.identifier, self.token)
            node.rebase(uri)
            self._update(graph, uri)
            outcome = UpsertOutcome.UPDATED
        else:
            raise RepositoryError.from_response(url, response.status_code, response.text)

        self._canonical[node.identifier] = uri
        self._stored.add(uri)
        logger.info("%s %s %s as %s", outcome.capitalize(), node.resource_type, node.identifier, uri)
        return UpsertResult(
            identifier=node.identifier,
            uri=uri,
            resource_type=node.resource_type,
            outcome=outcome,
        )

    def _update(self, graph: ResourceGraph, uri: str) -> None:
        url = f"{uri}/metadata"
        response = self._client.request(
            "PATCH",
            url,
            content=to_turtle(graph, self._client.registry),
            headers=self._headers(**{
                "Content-Type": TURTLE_MEDIA_TYPE,
                "Accept": TURTLE_MEDIA_TYPE,
            }),
        )
        if response.status_code not in _SUCCESS:
            raise RepositoryError.from_response(url, response.status_code, response.text)

    # -- binaries ------------------------------------------------------------

    def upload_binary(self, uri: str, path: str | Path) -> None:
        """Store the file's bytes as the binary payload of ``uri``.

        Only URIs returned by ``upsert`` in this transaction are accepted.
        """
        self._ensure_active()
        if uri not in self._stored:
            raise TransactionStateError(f"No metadata stored for {uri} in transaction {self.token}")

        path = Path(path)
        content_type = content_type_for(path)
        try:
            with open(path, "rb") as fh:
                response = self._client.request(
                    "PUT",
                    uri,
                    content=fh,
                    headers=self._headers(**{"Content-Type": content_type}),
                )
        except OSError as exc:
            raise InputError(f"Cannot read {path}: {exc}") from exc

        status = response.status_code
        if status in (200, 201, 204):
            logger.debug("Uploaded %s (%s) to %s", path.name, content_type, uri)
            return
        if status in (401, 403):
            raise PermissionDeniedError(
                f"Not authorized to update the resource {uri}",
                uri=uri, status_code=status, body=response.text,
            )
        if status in (404, 410):
            raise ResourceMissingError(
                f"Resource doesn't exist or has been deleted: {uri}",
                uri=uri, status_code=status, body=response.text,
            )
        raise RepositoryError.from_response(uri, status, response.text)

    # -- terminal operations -------------------------------------------------

    def commit(self) -> None:
        self._ensure_active()
        url = f"{self._client.base_url}/transaction"
        response = self._client.request(
            "PUT", url, headers=self._headers(Accept="application/json")
        )
        if response.status_code not in (200, 204):
            raise RepositoryError.from_response(url, response.status_code, response.text)
        self.state = TransactionState.COMMITTED
        logger.info("Committed transaction %s", self.token)

    def rollback(self) -> None:
        self._ensure_active()
        url = f"{self._client.base_url}/transaction"
        self.state = TransactionState.ROLLED_BACK
        response = self._client.request(
            "DELETE", url, headers=self._headers(Accept="application/json")
        )
        if response.status_code not in (200, 204):
            raise RepositoryError.from_response(url, response.status_code, response.text)
        logger.info("Rolled back transaction %s", self.token)

    def __enter__(self) -> Transaction:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if exc_type is not None and self.state == TransactionState.ACTIVE:
            try:
                self.rollback()
            except ExportError as rollback_exc:
                logger.error("Rollback of transaction %s failed: %s", self.token, rollback_exc)
