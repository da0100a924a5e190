"""Wire-level tests for the transactional repository client."""

from __future__ import annotations

import re

import httpx
import pytest
from rdflib import URIRef

from arche_export.core.config import RepositoryConfig
from arche_export.core.errors import (
    ConflictResolutionError,
    InputError,
    PermissionDeniedError,
    RepositoryError,
    ResourceMissingError,
    TransactionStateError,
)
from arche_export.core.types import ResourceType, TransactionState, UpsertOutcome
from arche_export.graph.models import ResourceGraph, ResourceNode
from arche_export.graph.turtle import parse_turtle
from arche_export.repository import RepositoryClient, content_type_for
from arche_export.vocabulary.registry import Property

from tests.conftest import BASE, SCHEMA

COLLECTION = "https://id.acdh.oeaw.ac.at/woldan/Alpenpost"
FOLDER = f"{COLLECTION}/Alpenpost_master"
SEARCH_URL = re.compile(rf"{re.escape(BASE)}/search\?.*")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

@pytest.fixture
def client(registry):
    client = RepositoryClient(
        RepositoryConfig(base_url=BASE, username="goobi", password="secret"), registry
    )
    yield client
    client.close()


def _graph(identifier: str, resource_type=ResourceType.COLLECTION, part_of: str | None = None) -> ResourceGraph:
    node = ResourceNode(identifier=identifier, resource_type=resource_type)
    node.add_lang(Property.HAS_TITLE, "Alpenpost", "de")
    node.add_reference(Property.HAS_IDENTIFIER, identifier)
    if part_of:
        node.add_reference(Property.IS_PART_OF, part_of)
    return ResourceGraph(nodes=[node])


def _begin(httpx_mock, client):
    httpx_mock.add_response(method="POST", url=f"{BASE}/transaction", json={"transactionId": 42})
    return client.begin()


def _created(httpx_mock, location: str) -> None:
    httpx_mock.add_response(
        method="POST", url=f"{BASE}/metadata", status_code=201, headers={"Location": location}
    )


def _search_body(*pairs: tuple[str, str]) -> str:
    return "\n".join(f"<{uri}> <{SCHEMA}hasIdentifier> <{identifier}> ." for uri, identifier in pairs)


def _body(request: httpx.Request):
    return parse_turtle(request.content.decode("utf-8"))


# ---------------------------------------------------------------------------
# Transaction start
# ---------------------------------------------------------------------------

class TestBegin:
    def test_token_from_json(self, httpx_mock, client):
        transaction = _begin(httpx_mock, client)
        assert transaction.token == "42"
        assert transaction.state == TransactionState.ACTIVE
        request = httpx_mock.get_requests()[0]
        assert request.headers["Authorization"].startswith("Basic ")

    def test_token_from_header(self, httpx_mock, client):
        httpx_mock.add_response(
            method="POST", url=f"{BASE}/transaction", status_code=201,
            headers={"X-TRANSACTION-ID": "77"},
        )
        assert client.begin().token == "77"

    def test_error_status(self, httpx_mock, client):
        httpx_mock.add_response(method="POST", url=f"{BASE}/transaction", status_code=503, text="busy")
        with pytest.raises(RepositoryError) as exc_info:
            client.begin()
        assert exc_info.value.status_code == 503
        assert "busy" in str(exc_info.value)

    def test_transport_failure(self, httpx_mock, client):
        httpx_mock.add_exception(httpx.ConnectError("refused"), url=f"{BASE}/transaction")
        with pytest.raises(RepositoryError, match="refused") as exc_info:
            client.begin()
        assert exc_info.value.status_code is None


# ---------------------------------------------------------------------------
# Create-or-update
# ---------------------------------------------------------------------------

class TestUpsert:
    def test_created_rebases_node(self, httpx_mock, client):
        transaction = _begin(httpx_mock, client)
        _created(httpx_mock, f"{BASE}/101")
        graph = _graph(COLLECTION)

        result = transaction.upsert(graph)

        assert result.outcome == UpsertOutcome.CREATED
        assert result.uri == f"{BASE}/101"
        assert result.identifier == COLLECTION
        assert graph.primary.uri == f"{BASE}/101"
        assert transaction.canonical_uris == {COLLECTION: f"{BASE}/101"}

        request = httpx_mock.get_requests()[-1]
        assert request.headers["X-TRANSACTION-ID"] == "42"
        assert request.headers["Content-Type"] == "text/turtle"
        body = _body(request)
        assert (URIRef(COLLECTION), URIRef(f"{SCHEMA}hasIdentifier"), URIRef(COLLECTION)) in body

    def test_references_use_canonical_uris(self, httpx_mock, client):
        transaction = _begin(httpx_mock, client)
        _created(httpx_mock, f"{BASE}/101")
        _created(httpx_mock, f"{BASE}/102")
        transaction.upsert(_graph(COLLECTION))
        transaction.upsert(_graph(FOLDER, ResourceType.FOLDER, part_of=COLLECTION))

        body = _body(httpx_mock.get_requests()[-1])
        assert body.value(URIRef(FOLDER), URIRef(f"{SCHEMA}isPartOf")) == URIRef(f"{BASE}/101")
        assert body.value(URIRef(FOLDER), URIRef(f"{SCHEMA}hasIdentifier")) == URIRef(FOLDER)

    def test_conflict_resolves_and_patches(self, httpx_mock, client):
        transaction = _begin(httpx_mock, client)
        httpx_mock.add_response(method="POST", url=f"{BASE}/metadata", status_code=409)
        httpx_mock.add_response(method="GET", url=SEARCH_URL, text=_search_body((f"{BASE}/7", COLLECTION)))
        httpx_mock.add_response(method="PATCH", url=f"{BASE}/7/metadata", status_code=200)

        result = transaction.upsert(_graph(COLLECTION))

        assert result.outcome == UpsertOutcome.UPDATED
        assert result.uri == f"{BASE}/7"
        patch = httpx_mock.get_requests()[-1]
        assert patch.headers["X-TRANSACTION-ID"] == "42"
        body = _body(patch)
        assert body.value(URIRef(f"{BASE}/7"), URIRef(f"{SCHEMA}hasIdentifier")) == URIRef(COLLECTION)

    def test_create_then_conflict_round_trip(self, httpx_mock, client):
        transaction = _begin(httpx_mock, client)
        _created(httpx_mock, f"{BASE}/101")
        httpx_mock.add_response(method="POST", url=f"{BASE}/metadata", status_code=409)
        httpx_mock.add_response(method="GET", url=SEARCH_URL, text=_search_body((f"{BASE}/101", COLLECTION)))
        httpx_mock.add_response(method="PATCH", url=f"{BASE}/101/metadata", status_code=204)

        first = transaction.upsert(_graph(COLLECTION))
        second = transaction.upsert(_graph(COLLECTION))

        assert first.outcome == UpsertOutcome.CREATED
        assert second.outcome == UpsertOutcome.UPDATED
        assert second.uri == first.uri

    def test_conflict_without_match(self, httpx_mock, client):
        transaction = _begin(httpx_mock, client)
        httpx_mock.add_response(method="POST", url=f"{BASE}/metadata", status_code=409)
        httpx_mock.add_response(method="GET", url=SEARCH_URL, text="")
        with pytest.raises(ConflictResolutionError) as exc_info:
            transaction.upsert(_graph(COLLECTION))
        assert exc_info.value.identifier == COLLECTION

    def test_other_status_is_protocol_error(self, httpx_mock, client):
        transaction = _begin(httpx_mock, client)
        httpx_mock.add_response(method="POST", url=f"{BASE}/metadata", status_code=400, text="bad turtle")
        with pytest.raises(RepositoryError) as exc_info:
            transaction.upsert(_graph(COLLECTION))
        assert exc_info.value.status_code == 400
        assert "400" in str(exc_info.value)
        assert "bad turtle" in str(exc_info.value)

    def test_created_without_location(self, httpx_mock, client):
        transaction = _begin(httpx_mock, client)
        httpx_mock.add_response(method="POST", url=f"{BASE}/metadata", status_code=201)
        with pytest.raises(RepositoryError, match="location"):
            transaction.upsert(_graph(COLLECTION))


# ---------------------------------------------------------------------------
# Binary upload
# ---------------------------------------------------------------------------

class TestUploadBinary:
    def _stored(self, httpx_mock, client):
        transaction = _begin(httpx_mock, client)
        _created(httpx_mock, f"{BASE}/101")
        transaction.upsert(_graph(f"{FOLDER}/AC123_master_0001.tif", ResourceType.FILE_RESOURCE))
        return transaction

    def test_upload_content_type(self, httpx_mock, client, tmp_path):
        transaction = self._stored(httpx_mock, client)
        image = tmp_path / "AC123_master_0001.tif"
        image.write_bytes(b"II*\x00")
        httpx_mock.add_response(method="PUT", url=f"{BASE}/101", status_code=204)

        transaction.upload_binary(f"{BASE}/101", image)

        request = httpx_mock.get_requests()[-1]
        assert request.headers["Content-Type"] == "image/tiff"
        assert request.headers["X-TRANSACTION-ID"] == "42"

    @pytest.mark.parametrize("status", [401, 403])
    def test_permission_denied(self, httpx_mock, client, tmp_path, status):
        transaction = self._stored(httpx_mock, client)
        image = tmp_path / "a.tif"
        image.write_bytes(b"x")
        httpx_mock.add_response(method="PUT", url=f"{BASE}/101", status_code=status)
        with pytest.raises(PermissionDeniedError) as exc_info:
            transaction.upload_binary(f"{BASE}/101", image)
        assert exc_info.value.uri == f"{BASE}/101"

    @pytest.mark.parametrize("status", [404, 410])
    def test_resource_missing(self, httpx_mock, client, tmp_path, status):
        transaction = self._stored(httpx_mock, client)
        image = tmp_path / "a.tif"
        image.write_bytes(b"x")
        httpx_mock.add_response(method="PUT", url=f"{BASE}/101", status_code=status)
        with pytest.raises(ResourceMissingError, match="deleted"):
            transaction.upload_binary(f"{BASE}/101", image)

    def test_other_status(self, httpx_mock, client, tmp_path):
        transaction = self._stored(httpx_mock, client)
        image = tmp_path / "a.tif"
        image.write_bytes(b"x")
        httpx_mock.add_response(method="PUT", url=f"{BASE}/101", status_code=500, text="disk full")
        with pytest.raises(RepositoryError) as exc_info:
            transaction.upload_binary(f"{BASE}/101", image)
        assert not isinstance(exc_info.value, (PermissionDeniedError, ResourceMissingError))
        assert "disk full" in str(exc_info.value)

    def test_unknown_uri_refused(self, httpx_mock, client, tmp_path):
        transaction = _begin(httpx_mock, client)
        image = tmp_path / "a.tif"
        image.write_bytes(b"x")
        with pytest.raises(TransactionStateError):
            transaction.upload_binary(f"{BASE}/999", image)
        assert len(httpx_mock.get_requests()) == 1

    def test_unreadable_file(self, httpx_mock, client, tmp_path):
        transaction = self._stored(httpx_mock, client)
        with pytest.raises(InputError):
            transaction.upload_binary(f"{BASE}/101", tmp_path / "gone.tif")


# ---------------------------------------------------------------------------
# Commit / rollback
# ---------------------------------------------------------------------------

class TestTerminalOperations:
    def test_commit(self, httpx_mock, client):
        transaction = _begin(httpx_mock, client)
        httpx_mock.add_response(method="PUT", url=f"{BASE}/transaction", status_code=204)
        transaction.commit()
        assert transaction.state == TransactionState.COMMITTED
        assert httpx_mock.get_requests()[-1].headers["X-TRANSACTION-ID"] == "42"

    def test_rollback(self, httpx_mock, client):
        transaction = _begin(httpx_mock, client)
        httpx_mock.add_response(method="DELETE", url=f"{BASE}/transaction", status_code=204)
        transaction.rollback()
        assert transaction.state == TransactionState.ROLLED_BACK

    def test_handle_is_inert_after_commit(self, httpx_mock, client):
        transaction = _begin(httpx_mock, client)
        httpx_mock.add_response(method="PUT", url=f"{BASE}/transaction", status_code=204)
        transaction.commit()
        with pytest.raises(TransactionStateError):
            transaction.upsert(_graph(COLLECTION))
        with pytest.raises(TransactionStateError):
            transaction.rollback()
        with pytest.raises(TransactionStateError):
            transaction.commit()

    def test_failed_commit_leaves_transaction_active(self, httpx_mock, client):
        transaction = _begin(httpx_mock, client)
        httpx_mock.add_response(method="PUT", url=f"{BASE}/transaction", status_code=500)
        httpx_mock.add_response(method="DELETE", url=f"{BASE}/transaction", status_code=204)
        with pytest.raises(RepositoryError):
            transaction.commit()
        assert transaction.state == TransactionState.ACTIVE
        transaction.rollback()
        assert transaction.state == TransactionState.ROLLED_BACK

    def test_context_manager_rolls_back_on_error(self, httpx_mock, client):
        httpx_mock.add_response(method="DELETE", url=f"{BASE}/transaction", status_code=204)
        transaction = _begin(httpx_mock, client)
        with pytest.raises(RuntimeError):
            with transaction:
                raise RuntimeError("boom")
        assert transaction.state == TransactionState.ROLLED_BACK
        assert httpx_mock.get_requests()[-1].method == "DELETE"


class TestContentTypes:
    @pytest.mark.parametrize(
        "name, expected",
        [
            ("meta.xml", "application/xml"),
            ("scan.JPG", "image/jpeg"),
            ("scan.jpeg", "image/jpeg"),
            ("scan.tif", "image/tiff"),
            ("scan.TIFF", "image/tiff"),
            ("scan.jp2", "application/octet-stream"),
            ("README", "application/octet-stream"),
        ],
    )
    def test_chosen_by_suffix(self, name, expected):
        assert content_type_for(name) == expected
