"""
Database handle and collection registry.

A Database owns one MongoDB connection and the bindings from document
types to the collections that hold them. Bindings are per handle, so
several independent handles can live in the same process.
"""
import logging
import threading
from types import MappingProxyType
from typing import Any, Mapping, Optional

from pymongo import MongoClient
from pymongo.collection import Collection
from pymongo.errors import PyMongoError

from docstore.config import Settings, get_settings
from docstore.core.exceptions import (
    CollectionNotFoundError,
    DatabaseConnectionError,
    DuplicateBindingError,
    HandleClosedError,
    UnboundDocumentError,
)
from docstore.database.connections import close_client, open_client
from docstore.models.base import ReadOnlyDocument

logger = logging.getLogger(__name__)


class Database:
    """
    Access point to a MongoDB database.

    Either give a connection URL and/or client options (the handle opens
    and owns the client), or pass an already connected client (the handle
    uses it but never closes it).
    """

    def __init__(
        self,
        database_name: str,
        connection_url: Optional[str] = None,
        *,
        client_options: Optional[dict[str, Any]] = None,
        client: Optional[MongoClient] = None,
        create_missing_collections: bool = False,
    ):
        self.name = database_name
        self.create_missing_collections = create_missing_collections
        self._connection_url = connection_url
        self._client_options = dict(client_options or {})
        self._collections: dict[type, str] = {}
        self._lock = threading.Lock()
        self._closed = False

        if client is None:
            self._client = open_client(connection_url, **self._client_options)
            self._owns_client = True
        else:
            self._client = client
            self._owns_client = False
        self._db = self._client[database_name]

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "Database":
        """Open a handle from environment settings."""
        settings = settings or get_settings()
        return cls(
            settings.database_name,
            settings.mongo_uri,
            client_options={"serverSelectionTimeoutMS": settings.server_selection_timeout_ms},
            create_missing_collections=settings.create_missing_collections,
        )

    # ==================== Bindings ====================

    def bind(
        self,
        document_type: type,
        collection_name: str,
        create_if_missing: Optional[bool] = None,
    ) -> None:
        """
        Link a document type to a collection of this database.

        Args:
            document_type: ReadOnlyDocument subclass to bind
            collection_name: Name of the collection to link
            create_if_missing: Create the collection when it doesn't exist
                (defaults to the handle's create_missing_collections)

        Raises:
            CollectionNotFoundError: If the collection is missing and creation wasn't requested
            DuplicateBindingError: If the type is already bound on this handle
            HandleClosedError: If the handle was closed
        """
        if not (isinstance(document_type, type) and issubclass(document_type, ReadOnlyDocument)):
            raise TypeError(f"{document_type!r} is not a ReadOnlyDocument subclass")
        if create_if_missing is None:
            create_if_missing = self.create_missing_collections

        with self._lock:
            self._ensure_open()
            try:
                if collection_name not in self._db.list_collection_names():
                    if not create_if_missing:
                        raise CollectionNotFoundError(collection_name)
                    self._db.create_collection(collection_name)
                    logger.info(f"Created collection '{collection_name}' in {self.name}")
            except PyMongoError as e:
                logger.error(f"Could not resolve collection '{collection_name}': {e}")
                raise DatabaseConnectionError(
                    f"Could not resolve collection '{collection_name}': {e}"
                ) from e

            if document_type in self._collections:
                raise DuplicateBindingError(document_type, self._collections[document_type])
            self._collections[document_type] = collection_name

        logger.info(f"Bound {document_type.__name__} to {self.name}.{collection_name}")

    def is_bound(self, document_type: type) -> bool:
        """Check whether a document type has a binding on this handle."""
        return document_type in self._collections

    def collection_name(self, document_type: type) -> str:
        """Get the name of the collection bound to a document type."""
        self._ensure_open()
        try:
            return self._collections[document_type]
        except KeyError:
            raise UnboundDocumentError(document_type) from None

    def collection(self, document_type: type) -> Collection:
        """Get the collection bound to a document type."""
        return self._db[self.collection_name(document_type)]

    @property
    def bindings(self) -> Mapping[type, str]:
        """Read-only snapshot of the type to collection name bindings."""
        return MappingProxyType(dict(self._collections))

    @property
    def closed(self) -> bool:
        """Whether close() was called on this handle."""
        return self._closed

    def _ensure_open(self) -> None:
        if self._closed:
            raise HandleClosedError(f"Database handle for {self.name} is closed.")

    # ==================== Lifecycle ====================

    def close(self) -> None:
        """Release the connection and clear all bindings."""
        if self._closed:
            return
        with self._lock:
            self._collections.clear()
            self._closed = True
        if self._owns_client:
            close_client(self._client)
        logger.info(f"Closed database handle for {self.name}")

    def copy(self) -> "Database":
        """
        Create a new handle with the same connection settings and a copy
        of the binding table.

        A handle that owns its client opens a new one; a handle built on a
        shared client shares it with the copy.
        """
        self._ensure_open()
        duplicate = Database(
            self.name,
            self._connection_url,
            client_options=self._client_options,
            client=None if self._owns_client else self._client,
            create_missing_collections=self.create_missing_collections,
        )
        with self._lock:
            duplicate._collections = dict(self._collections)
        return duplicate

    __copy__ = copy

    def __enter__(self) -> "Database":
        return self

    def __exit__(self, *args) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "closed" if self._closed else f"{len(self._collections)} bindings"
        return f"<Database {self.name} ({state})>"
