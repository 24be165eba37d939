"""
docstore - typed documents bound to MongoDB collections.

    db = Database("app", "mongodb://localhost:27017")
    db.bind(User, "users", create_if_missing=True)

    ann = User(name="Ann", age=30)
    ann.insert(db)
    User.one(db, name="Ann")
"""
from docstore.core.exceptions import (
    CollectionNotFoundError,
    DatabaseConnectionError,
    DocstoreError,
    DocumentDeletedError,
    DocumentStateError,
    DuplicateBindingError,
    HandleClosedError,
    InsertError,
    RegistryError,
    StaleDocumentError,
    UnboundDocumentError,
    UnmappedFieldError,
    WriteError,
)
from docstore.database import Database
from docstore.models import Document, DocumentState, ReadOnlyDocument, WriteResult

__version__ = "0.1.0"

__all__ = [
    "Database",
    "Document",
    "DocumentState",
    "ReadOnlyDocument",
    "WriteResult",
    "DocstoreError",
    "DatabaseConnectionError",
    "RegistryError",
    "CollectionNotFoundError",
    "DuplicateBindingError",
    "UnboundDocumentError",
    "HandleClosedError",
    "DocumentStateError",
    "DocumentDeletedError",
    "UnmappedFieldError",
    "StaleDocumentError",
    "WriteError",
    "InsertError",
]
