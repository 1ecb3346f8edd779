"""URL path types for databases, documents and views.

A path is the percent-encoded, on-the-wire form (``"/db/_design/app"``); its
components (``DatabaseName``, ``DocumentId``, ...) are never encoded. Paths
built from components always succeed; parsing a path string may fail with
``PathValidationError``.
"""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import quote, unquote

from .errors import PathValidationError
from .names import (
    DESIGN_PREFIX,
    DOCUMENT_PREFIXES,
    DatabaseName,
    DesignDocumentName,
    DocumentId,
    ViewName,
)

VIEW_PREFIX = "_view"

E_EMPTY_SEGMENT = "Path has an empty segment"
E_NO_LEADING_SLASH = "Path does not begin with a slash"
E_TOO_FEW_SEGMENTS = "Path has too few segments"
E_TOO_MANY_SEGMENTS = "Path has too many segments"
E_TRAILING_SLASH = "Path ends with a slash"
E_UNEXPECTED_SEGMENT = "Path contains unexpected segment"
E_BAD_ENCODING = "Path is not valid UTF-8 after percent-decoding"


def encode_segment(value: str) -> str:
    return quote(value, safe="")


def _decode_segment(value: str) -> str:
    try:
        return unquote(value, errors="strict")
    except UnicodeDecodeError as error:
        raise PathValidationError(f"{E_BAD_ENCODING}: {value!r}") from error


class _PathDecoder:
    """Splits a path string into segments with consistent error reporting."""

    def __init__(self, path: str) -> None:
        if not path.startswith("/"):
            raise PathValidationError(f"{E_NO_LEADING_SLASH}: {path!r}")
        self._path = path
        self._cursor = path

    def _next_raw(self) -> str:
        if not self._cursor or self._cursor == "/":
            raise PathValidationError(f"{E_TOO_FEW_SEGMENTS}: {self._path!r}")
        rest = self._cursor[1:]
        segment, _, _ = rest.partition("/")
        if not segment:
            raise PathValidationError(f"{E_EMPTY_SEGMENT}: {self._path!r}")
        self._cursor = rest[len(segment) :]
        return segment

    def _peek_raw(self) -> str | None:
        if not self._cursor:
            return None
        return self._cursor[1:].partition("/")[0]

    def segment(self) -> str:
        return _decode_segment(self._next_raw())

    def exact(self, literal: str) -> None:
        got = self._next_raw()
        if got != literal:
            raise PathValidationError(f"{E_UNEXPECTED_SEGMENT} (got: {got!r}, expected: {literal!r})")

    def document_id(self) -> DocumentId:
        head = self._peek_raw()
        if head in DOCUMENT_PREFIXES:
            self._next_raw()
            return DocumentId(f"{head}/{self.segment()}")
        return DocumentId(self.segment())

    def end(self) -> None:
        if self._cursor == "":
            return
        if self._cursor == "/":
            raise PathValidationError(f"{E_TRAILING_SLASH}: {self._path!r}")
        raise PathValidationError(f"{E_TOO_MANY_SEGMENTS}: {self._path!r}")


def _encode_document_id(doc_id: DocumentId) -> str:
    prefix, base = DocumentId(doc_id).split_prefix()
    if prefix is not None:
        return f"{prefix}/{encode_segment(base)}"
    return encode_segment(base)


@dataclass(frozen=True, slots=True)
class DatabasePath:
    database_name: DatabaseName

    def __post_init__(self) -> None:
        object.__setattr__(self, "database_name", DatabaseName(self.database_name))

    @classmethod
    def parse(cls, path: str) -> DatabasePath:
        decoder = _PathDecoder(path)
        db_name = DatabaseName(decoder.segment())
        decoder.end()
        return cls(db_name)

    def with_document_id(self, doc_id: str) -> DocumentPath:
        return DocumentPath(self.database_name, DocumentId(doc_id))

    def with_design_document_name(self, ddoc_name: str) -> DesignDocumentPath:
        return DesignDocumentPath(self.database_name, DesignDocumentName(ddoc_name))

    def __str__(self) -> str:
        return "/" + encode_segment(self.database_name)


@dataclass(frozen=True, slots=True)
class DocumentPath:
    database_name: DatabaseName
    document_id: DocumentId

    def __post_init__(self) -> None:
        object.__setattr__(self, "database_name", DatabaseName(self.database_name))
        object.__setattr__(self, "document_id", DocumentId(self.document_id))

    @classmethod
    def parse(cls, path: str) -> DocumentPath:
        decoder = _PathDecoder(path)
        db_name = DatabaseName(decoder.segment())
        doc_id = decoder.document_id()
        decoder.end()
        return cls(db_name, doc_id)

    def database_path(self) -> DatabasePath:
        return DatabasePath(self.database_name)

    def __str__(self) -> str:
        return f"/{encode_segment(self.database_name)}/{_encode_document_id(self.document_id)}"


@dataclass(frozen=True, slots=True)
class DesignDocumentPath:
    database_name: DatabaseName
    design_document_name: DesignDocumentName

    def __post_init__(self) -> None:
        object.__setattr__(self, "database_name", DatabaseName(self.database_name))
        object.__setattr__(self, "design_document_name", DesignDocumentName(self.design_document_name))

    @classmethod
    def parse(cls, path: str) -> DesignDocumentPath:
        decoder = _PathDecoder(path)
        db_name = DatabaseName(decoder.segment())
        decoder.exact(DESIGN_PREFIX)
        ddoc_name = DesignDocumentName(decoder.segment())
        decoder.end()
        return cls(db_name, ddoc_name)

    def document_id(self) -> DocumentId:
        return DocumentId.design(self.design_document_name)

    def document_path(self) -> DocumentPath:
        return DocumentPath(self.database_name, self.document_id())

    def with_view_name(self, view_name: str) -> ViewPath:
        return ViewPath(self.database_name, self.design_document_name, ViewName(view_name))

    def __str__(self) -> str:
        return f"/{encode_segment(self.database_name)}/{DESIGN_PREFIX}/{encode_segment(self.design_document_name)}"


@dataclass(frozen=True, slots=True)
class ViewPath:
    database_name: DatabaseName
    design_document_name: DesignDocumentName
    view_name: ViewName

    def __post_init__(self) -> None:
        object.__setattr__(self, "database_name", DatabaseName(self.database_name))
        object.__setattr__(self, "design_document_name", DesignDocumentName(self.design_document_name))
        object.__setattr__(self, "view_name", ViewName(self.view_name))

    @classmethod
    def parse(cls, path: str) -> ViewPath:
        decoder = _PathDecoder(path)
        db_name = DatabaseName(decoder.segment())
        decoder.exact(DESIGN_PREFIX)
        ddoc_name = DesignDocumentName(decoder.segment())
        decoder.exact(VIEW_PREFIX)
        view_name = ViewName(decoder.segment())
        decoder.end()
        return cls(db_name, ddoc_name, view_name)

    def design_document_path(self) -> DesignDocumentPath:
        return DesignDocumentPath(self.database_name, self.design_document_name)

    def __str__(self) -> str:
        return f"{self.design_document_path()}/{VIEW_PREFIX}/{encode_segment(self.view_name)}"


DatabasePathLike = DatabasePath | DatabaseName | str
DocumentPathLike = DocumentPath | DesignDocumentPath | str
ViewPathLike = ViewPath | str


def into_database_path(value: DatabasePathLike) -> DatabasePath:
    if isinstance(value, DatabasePath):
        return value
    if isinstance(value, DatabaseName):
        return DatabasePath(value)
    if isinstance(value, str):
        return DatabasePath.parse(value)
    raise TypeError(f"cannot convert {type(value).__name__} into a database path")


def into_document_path(value: DocumentPathLike) -> DocumentPath:
    if isinstance(value, DocumentPath):
        return value
    if isinstance(value, DesignDocumentPath):
        return value.document_path()
    if isinstance(value, str):
        return DocumentPath.parse(value)
    raise TypeError(f"cannot convert {type(value).__name__} into a document path")


def into_view_path(value: ViewPathLike) -> ViewPath:
    if isinstance(value, ViewPath):
        return value
    if isinstance(value, str):
        return ViewPath.parse(value)
    raise TypeError(f"cannot convert {type(value).__name__} into a view path")
