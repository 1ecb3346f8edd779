"""Typed CouchDB client.

This module uses lazy exports so lightweight pieces (names, paths, config)
can be imported without immediately importing the HTTP stack.
"""

from __future__ import annotations

from importlib import import_module
from typing import TYPE_CHECKING, Any

__all__ = [
    "Action",
    "AsyncCouchClient",
    "AsyncTransport",
    "ActionAlreadySentError",
    "ClientConfig",
    "ClientTimeoutError",
    "CouchClient",
    "CouchError",
    "Attachment",
    "Changes",
    "ChangeResult",
    "Database",
    "Design",
    "DatabaseName",
    "DatabasePath",
    "DecodeError",
    "DesignDocumentName",
    "DesignDocumentPath",
    "Document",
    "DocumentId",
    "DocumentName",
    "DocumentPath",
    "EncodeError",
    "ErrorCategory",
    "HookRegistry",
    "InvalidRevisionError",
    "Nok",
    "PathValidationError",
    "RequestCall",
    "Revision",
    "Root",
    "ServerResponseError",
    "ServerResponseFuture",
    "SyncTransport",
    "TransportError",
    "UnexpectedStatusError",
    "ViewFunction",
    "ViewName",
    "ViewPath",
    "ViewResult",
    "ViewRow",
]

_EXPORTS: dict[str, tuple[str, str]] = {
    "AsyncCouchClient": (".client", "AsyncCouchClient"),
    "CouchClient": (".client", "CouchClient"),
    "ClientConfig": (".config", "ClientConfig"),
    "Action": (".actions", "Action"),
    "ServerResponseFuture": (".actions", "ServerResponseFuture"),
    "AsyncTransport": (".transport", "AsyncTransport"),
    "SyncTransport": (".transport", "SyncTransport"),
    "HookRegistry": (".hooks", "HookRegistry"),
    "RequestCall": (".hooks", "RequestCall"),
    "ActionAlreadySentError": (".errors", "ActionAlreadySentError"),
    "ClientTimeoutError": (".errors", "ClientTimeoutError"),
    "CouchError": (".errors", "CouchError"),
    "DecodeError": (".errors", "DecodeError"),
    "EncodeError": (".errors", "EncodeError"),
    "ErrorCategory": (".errors", "ErrorCategory"),
    "InvalidRevisionError": (".errors", "InvalidRevisionError"),
    "PathValidationError": (".errors", "PathValidationError"),
    "ServerResponseError": (".errors", "ServerResponseError"),
    "TransportError": (".errors", "TransportError"),
    "UnexpectedStatusError": (".errors", "UnexpectedStatusError"),
    "DatabaseName": (".names", "DatabaseName"),
    "DesignDocumentName": (".names", "DesignDocumentName"),
    "DocumentId": (".names", "DocumentId"),
    "DocumentName": (".names", "DocumentName"),
    "Revision": (".names", "Revision"),
    "ViewName": (".names", "ViewName"),
    "DatabasePath": (".paths", "DatabasePath"),
    "DesignDocumentPath": (".paths", "DesignDocumentPath"),
    "DocumentPath": (".paths", "DocumentPath"),
    "ViewPath": (".paths", "ViewPath"),
    "Attachment": (".models", "Attachment"),
    "Changes": (".models", "Changes"),
    "ChangeResult": (".models", "ChangeResult"),
    "Database": (".models", "Database"),
    "Design": (".models", "Design"),
    "ViewFunction": (".models", "ViewFunction"),
    "Document": (".models", "Document"),
    "Nok": (".models", "Nok"),
    "Root": (".models", "Root"),
    "ViewResult": (".models", "ViewResult"),
    "ViewRow": (".models", "ViewRow"),
}

if TYPE_CHECKING:
    from .actions import Action, ServerResponseFuture
    from .client import AsyncCouchClient, CouchClient
    from .config import ClientConfig
    from .errors import (
        ActionAlreadySentError,
        ClientTimeoutError,
        CouchError,
        DecodeError,
        EncodeError,
        ErrorCategory,
        InvalidRevisionError,
        PathValidationError,
        ServerResponseError,
        TransportError,
        UnexpectedStatusError,
    )
    from .hooks import HookRegistry, RequestCall
    from .models import (
        Attachment,
        ChangeResult,
        Changes,
        Database,
        Design,
        Document,
        Nok,
        Root,
        ViewFunction,
        ViewResult,
        ViewRow,
    )
    from .names import DatabaseName, DesignDocumentName, DocumentId, DocumentName, Revision, ViewName
    from .paths import DatabasePath, DesignDocumentPath, DocumentPath, ViewPath
    from .transport import AsyncTransport, SyncTransport


def __getattr__(name: str) -> Any:
    module_info = _EXPORTS.get(name)
    if module_info is None:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

    module_name, attribute = module_info
    module = import_module(module_name, __name__)
    value = getattr(module, attribute)
    globals()[name] = value
    return value
