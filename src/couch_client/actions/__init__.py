"""One class per CouchDB operation; see ``Action`` for the send protocol."""

from .base import Action, ServerResponseFuture
from .database import DeleteDatabase, GetAllDatabases, GetChanges, GetDatabase, HeadDatabase, PutDatabase
from .document import DeleteDocument, GetDocument, HeadDocument, PostToDatabase, PutDocument
from .server import GetRoot
from .view import GetView

__all__ = [
    "Action",
    "DeleteDatabase",
    "DeleteDocument",
    "GetAllDatabases",
    "GetChanges",
    "GetDatabase",
    "GetDocument",
    "GetRoot",
    "GetView",
    "HeadDatabase",
    "HeadDocument",
    "PostToDatabase",
    "PutDatabase",
    "PutDocument",
    "ServerResponseFuture",
]
