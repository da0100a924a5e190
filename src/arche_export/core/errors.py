"""Exception hierarchy for export and repository errors."""

from __future__ import annotations


class ExportError(Exception):
    """Base exception for all export errors."""


class InputError(ExportError):
    """The workflow input cannot be exported (raised before any network call)."""


class MissingFieldError(InputError):
    """A mandatory metadata field is absent from the document tree."""

    def __init__(self, field: str, node: str = "") -> None:
        self.field = field
        self.node = node
        where = f" in {node}" if node else ""
        super().__init__(f"Mandatory field {field!r} is missing{where}")


class RepositoryError(ExportError):
    """The repository answered with an unexpected status, or could not be reached."""

    def __init__(
        self,
        message: str,
        *,
        uri: str = "",
        status_code: int | None = None,
        body: str = "",
    ) -> None:
        self.uri = uri
        self.status_code = status_code
        self.body = body
        super().__init__(message)

    @classmethod
    def from_response(cls, uri: str, status_code: int, body: str) -> RepositoryError:
        return cls(
            f"Repository call {uri} failed with status {status_code}, reason: {body}",
            uri=uri,
            status_code=status_code,
            body=body,
        )


class PermissionDeniedError(RepositoryError):
    """401/403: not authorized to update the resource."""


class ResourceMissingError(RepositoryError):
    """404/410: the resource does not exist or has been deleted."""


class ConflictResolutionError(ExportError):
    """The repository reported a conflict but no resource carries the identifier."""

    def __init__(self, identifier: str) -> None:
        self.identifier = identifier
        super().__init__(
            f"Repository reported {identifier} as existing, "
            "but no resource with this identifier was found"
        )


class TransactionStateError(ExportError):
    """A call was made that the transaction's current state does not allow."""
