"""Identifier types for databases, documents, views and revisions."""

from __future__ import annotations

import re
from typing import Any

from pydantic import GetCoreSchemaHandler
from pydantic_core import core_schema

from .errors import InvalidRevisionError

DESIGN_PREFIX = "_design"
LOCAL_PREFIX = "_local"
DOCUMENT_PREFIXES = (DESIGN_PREFIX, LOCAL_PREFIX)

_REVISION_HASH = re.compile(r"^[0-9a-fA-F]{32}$")


class _Name(str):
    __slots__ = ()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({str.__repr__(self)})"

    @classmethod
    def __get_pydantic_core_schema__(cls, source: Any, handler: GetCoreSchemaHandler) -> core_schema.CoreSchema:
        return core_schema.no_info_after_validator_function(
            cls,
            core_schema.str_schema(),
            serialization=core_schema.plain_serializer_function_ser_schema(str),
        )


class DatabaseName(_Name):
    """Name of a database, e.g. ``"alpha"``."""

    __slots__ = ()


class DocumentName(_Name):
    """Name of a document without any ``_design/`` or ``_local/`` prefix."""

    __slots__ = ()


class DesignDocumentName(_Name):
    """Name of a design document without the ``_design/`` prefix."""

    __slots__ = ()


class ViewName(_Name):
    """Name of a view within a design document."""

    __slots__ = ()


class DocumentId(_Name):
    """Document id as the server reports it, e.g. ``"_design/app"``."""

    __slots__ = ()

    @classmethod
    def design(cls, name: str) -> DocumentId:
        return cls(f"{DESIGN_PREFIX}/{name}")

    @classmethod
    def local(cls, name: str) -> DocumentId:
        return cls(f"{LOCAL_PREFIX}/{name}")

    def is_design(self) -> bool:
        return _has_prefix(self, DESIGN_PREFIX)

    def is_local(self) -> bool:
        return _has_prefix(self, LOCAL_PREFIX)

    def split_prefix(self) -> tuple[str | None, str]:
        for prefix in DOCUMENT_PREFIXES:
            if _has_prefix(self, prefix):
                return prefix, str(self)[len(prefix) + 1 :]
        return None, str(self)

    def document_name(self) -> DocumentName:
        return DocumentName(self.split_prefix()[1])


def _has_prefix(value: str, prefix: str) -> bool:
    return value.startswith(prefix + "/")


class Revision:
    """Document revision such as ``42-1234567890abcdef1234567890abcdef``.

    Rendering preserves the hash as given; comparison ignores its case.
    """

    __slots__ = ("_number", "_hash")

    def __init__(self, number: int, digest: str) -> None:
        if number < 1:
            raise InvalidRevisionError(f"Revision number must be positive, got {number}")
        if not _REVISION_HASH.match(digest):
            raise InvalidRevisionError(f"Revision hash must be 32 hex digits, got {digest!r}")
        self._number = number
        self._hash = digest

    @classmethod
    def parse(cls, value: str) -> Revision:
        number, sep, digest = value.partition("-")
        if not sep or not (number.isascii() and number.isdigit()):
            raise InvalidRevisionError(f"Invalid revision {value!r}")
        return cls(int(number), digest)

    @property
    def update_number(self) -> int:
        return self._number

    def __str__(self) -> str:
        return f"{self._number}-{self._hash}"

    def __repr__(self) -> str:
        return f"Revision({str(self)!r})"

    def _key(self) -> tuple[int, str]:
        return self._number, self._hash.lower()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Revision):
            return NotImplemented
        return self._key() == other._key()

    def __lt__(self, other: Revision) -> bool:
        return self._key() < other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    @classmethod
    def __get_pydantic_core_schema__(cls, source: Any, handler: GetCoreSchemaHandler) -> core_schema.CoreSchema:
        return core_schema.no_info_after_validator_function(
            cls._coerce,
            core_schema.union_schema([core_schema.is_instance_schema(cls), core_schema.str_schema()]),
            serialization=core_schema.plain_serializer_function_ser_schema(str),
        )

    @classmethod
    def _coerce(cls, value: Revision | str) -> Revision:
        if isinstance(value, Revision):
            return value
        return cls.parse(value)
