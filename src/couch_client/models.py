"""Typed payloads decoded from CouchDB responses."""

from __future__ import annotations

import re
from typing import Any, Generic, TypeVar
from uuid import UUID

from pydantic import (
    Base64Bytes,
    BaseModel,
    ConfigDict,
    Field,
    SerializerFunctionWrapHandler,
    TypeAdapter,
    ValidationError,
    model_serializer,
    model_validator,
)

from .errors import DecodeError
from .names import DocumentId, Revision

K = TypeVar("K")
V = TypeVar("V")
ModelT = TypeVar("ModelT")

_NON_DIGITS = re.compile(r"[^0-9]")


class Nok(BaseModel):
    """The ``{"error": ..., "reason": ...}`` body of a failed response."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    error: str
    reason: str


class Vendor(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str
    version: str | None = None


class Root(BaseModel):
    """Content of the server's root resource (``/``)."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    couchdb: str
    uuid: UUID
    vendor: Vendor
    version: str

    @property
    def welcome(self) -> str:
        return self.couchdb

    def version_triple(self) -> tuple[int, int, int] | None:
        return parse_version(self.version)


def parse_version(value: str) -> tuple[int, int, int] | None:
    """Parse ``major.minor.patch``, ignoring any trailing suffix.

    ``"1.6.1_1"`` (seen in Homebrew builds) parses as ``(1, 6, 1)``.
    """
    parts = _NON_DIGITS.split(value)[:3]
    if len(parts) < 3 or not all(part.isdigit() for part in parts):
        return None
    return int(parts[0]), int(parts[1]), int(parts[2])


class Database(BaseModel):
    """Database meta-information returned by ``GET /{db}``."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    db_name: str
    doc_count: int
    doc_del_count: int
    update_seq: Any
    purge_seq: Any = None
    compact_running: bool = False
    disk_size: int | None = None
    data_size: int | None = None
    disk_format_version: int | None = None
    committed_update_seq: int | None = None
    instance_start_time: str | None = None


class WriteResponse(BaseModel):
    """Acknowledgement body of a document write."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: DocumentId
    ok: bool
    rev: Revision


class Attachment(BaseModel):
    """One entry of a document's ``_attachments``.

    Documents fetched without ``attachments=true`` carry stubs: metadata only,
    ``stub`` set and no ``data``.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    content_type: str
    digest: str | None = None
    length: int | None = None
    revpos: int | None = None
    stub: bool = False
    encoding: str | None = None
    encoded_length: int | None = None
    data: Base64Bytes | None = None


class Document(BaseModel):
    """A document's meta-information plus its application-defined content.

    ``_attachments`` is kept in ``attachments``. Other underscore-prefixed
    fields (``_conflicts``, ``_revisions``, ...) are dropped.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: DocumentId = Field(alias="_id")
    rev: Revision = Field(alias="_rev")
    deleted: bool = Field(default=False, alias="_deleted")
    attachments: dict[str, Attachment] = Field(default_factory=dict, alias="_attachments")
    content: dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _split_content(cls, data: Any) -> Any:
        if not isinstance(data, dict) or "_id" not in data:
            return data
        meta = {key: data[key] for key in ("_id", "_rev", "_deleted", "_attachments") if key in data}
        meta["content"] = {key: value for key, value in data.items() if not key.startswith("_")}
        return meta

    def into_content(self, model: type[ModelT]) -> ModelT:
        """Validate the application-defined content into ``model``."""
        try:
            return TypeAdapter(model).validate_python(self.content)
        except ValidationError as error:
            raise DecodeError(f"Document content does not match {getattr(model, '__name__', model)}: {error}") from error


class ViewRow(BaseModel, Generic[K, V]):
    model_config = ConfigDict(frozen=True, extra="forbid")

    id: DocumentId | None = None
    key: K | None = None
    value: V
    doc: dict[str, Any] | None = None


class ViewResult(BaseModel, Generic[K, V]):
    """Rows returned by executing a view."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    total_rows: int | None = None
    offset: int | None = None
    update_seq: Any = None
    rows: list[ViewRow[K, V]]


class ViewFunction(BaseModel):
    """``map`` and optional ``reduce`` source of one view."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    map: str
    reduce: str | None = None

    @model_serializer(mode="wrap")
    def _omit_missing_reduce(self, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
        data = handler(self)
        if data.get("reduce") is None:
            data.pop("reduce", None)
        return data


class Design(BaseModel):
    """Content of a design document.

    Usable as ``PutDocument`` content and with ``Document.into_content``.
    An empty ``views`` mapping is left out when serialized.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    views: dict[str, ViewFunction] = Field(default_factory=dict)

    @model_serializer(mode="wrap")
    def _omit_empty_views(self, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
        data = handler(self)
        if not data.get("views"):
            data.pop("views", None)
        return data


class ChangeItem(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    rev: Revision


class ChangeResult(BaseModel):
    """One row of the changes feed."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    seq: Any
    id: DocumentId
    changes: list[ChangeItem]
    deleted: bool = False


class Changes(BaseModel):
    """Body of ``GET /{db}/_changes``.

    Sequence values are integers on CouchDB 1.x and opaque strings since 2.0.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    last_seq: Any
    results: list[ChangeResult]
    pending: int | None = None
