"""Error hierarchy for the CouchDB client."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import Nok

_RETRYABLE_STATUSES = {429}


class ErrorCategory(str, Enum):
    """Semantic classification of a failed server response."""

    NOT_FOUND = "not_found"
    DATABASE_DOES_NOT_EXIST = "database_does_not_exist"
    DATABASE_EXISTS = "database_exists"
    UNAUTHORIZED = "unauthorized"
    CONFLICT = "conflict"
    INVALID_REQUEST = "invalid_request"


_CATEGORY_DESCRIPTIONS: dict[ErrorCategory, str] = {
    ErrorCategory.NOT_FOUND: "The resource does not exist",
    ErrorCategory.DATABASE_DOES_NOT_EXIST: "The database does not exist",
    ErrorCategory.DATABASE_EXISTS: "The database already exists",
    ErrorCategory.UNAUTHORIZED: "The client is unauthorized to carry out the operation",
    ErrorCategory.CONFLICT: "The request conflicts with an existing document",
    ErrorCategory.INVALID_REQUEST: "The request is invalid",
}


class CouchError(Exception):
    """Base class for all client errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message
        self.context: list[str] = []

    def __str__(self) -> str:
        if not self.context:
            return self.message
        return ": ".join([*self.context, self.message])

    def add_context(self, description: str) -> CouchError:
        """Prepend a one-line description of the operation that failed."""
        self.context.insert(0, description)
        return self

    @property
    def category(self) -> ErrorCategory | None:
        return None

    def is_not_found(self) -> bool:
        return self.category in (ErrorCategory.NOT_FOUND, ErrorCategory.DATABASE_DOES_NOT_EXIST)

    def is_database_does_not_exist(self) -> bool:
        return self.category is ErrorCategory.DATABASE_DOES_NOT_EXIST

    def is_database_exists(self) -> bool:
        return self.category is ErrorCategory.DATABASE_EXISTS

    def is_unauthorized(self) -> bool:
        return self.category is ErrorCategory.UNAUTHORIZED

    def is_conflict(self) -> bool:
        return self.category is ErrorCategory.CONFLICT

    def is_invalid_request(self) -> bool:
        return self.category is ErrorCategory.INVALID_REQUEST

    def is_unexpected(self) -> bool:
        return False

    def is_retryable(self) -> bool:
        return False


class PathValidationError(CouchError, ValueError):
    """Raised when an identifier or path is malformed; no request is sent."""


class InvalidRevisionError(CouchError, ValueError):
    """Raised when a revision string is not of the form ``<N>-<hex>``."""


class EncodeError(CouchError):
    """Raised when a request body cannot be encoded as JSON."""


class DecodeError(CouchError):
    """Raised when a response body is not valid JSON or has the wrong shape."""


class TransportError(CouchError):
    """Raised on network/transport failures."""

    def is_retryable(self) -> bool:
        return True


class ClientTimeoutError(TransportError):
    """Raised when request times out."""


class ServerResponseError(CouchError):
    """Raised when the server responds with a failure status.

    ``nok`` holds the server's ``{error, reason}`` body when it could be
    decoded. HEAD responses never carry one.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int,
        category: ErrorCategory | None = None,
        nok: Nok | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self._category = category
        self.nok = nok

    @property
    def category(self) -> ErrorCategory | None:
        return self._category

    @property
    def error(self) -> str | None:
        return self.nok.error if self.nok is not None else None

    @property
    def reason(self) -> str | None:
        return self.nok.reason if self.nok is not None else None

    @classmethod
    def from_server_response(
        cls,
        status_code: int,
        nok: Nok | None,
        category: ErrorCategory | None,
    ) -> ServerResponseError:
        if category is None:
            description = f"The server responded with unexpected HTTP status {status_code}"
            error_cls: type[ServerResponseError] = UnexpectedStatusError
        else:
            description = _CATEGORY_DESCRIPTIONS[category]
            error_cls = ServerResponseError

        message = description
        if nok is not None:
            message = f"{description}: {nok.error}: {nok.reason}"
        return error_cls(message, status_code=status_code, category=category, nok=nok)


class UnexpectedStatusError(ServerResponseError):
    """Raised when the status code is outside the action's known table."""

    def is_unexpected(self) -> bool:
        return True

    def is_retryable(self) -> bool:
        return self.status_code in _RETRYABLE_STATUSES or self.status_code >= 500


class ActionAlreadySentError(RuntimeError):
    """Raised when an action is sent a second time (a programming error)."""
