"""
Exception hierarchy for the document store layer.

Every error is raised to the caller; nothing here is retried.
"""
from typing import Optional


class DocstoreError(Exception):
    """Base error for the package."""


class DatabaseConnectionError(DocstoreError):
    """Raised when the store cannot be reached or opened."""


# ==================== Registry ====================

class RegistryError(DocstoreError):
    """Base error for collection binding problems."""


class CollectionNotFoundError(RegistryError):
    """Raised when a bind target is absent and creation was not requested."""

    def __init__(self, collection_name: str):
        self.collection_name = collection_name
        super().__init__(f'No collection was found with the name "{collection_name}".')


class DuplicateBindingError(RegistryError):
    """Raised when a document type is bound twice on the same handle."""

    def __init__(self, document_type: type, collection_name: str):
        self.document_type = document_type
        self.collection_name = collection_name
        super().__init__(
            f"{document_type.__name__} is already bound to collection "
            f'"{collection_name}" on this database handle.'
        )


class UnboundDocumentError(RegistryError):
    """Raised when a document type has no binding on the handle in use."""

    def __init__(self, document_type: type):
        self.document_type = document_type
        super().__init__(f"{document_type.__name__} is not bound to any collection.")


class HandleClosedError(RegistryError):
    """Raised when a closed database handle is used."""


# ==================== Documents ====================

class DocumentStateError(DocstoreError):
    """Raised when an operation is not valid for the document's lifecycle state."""


class DocumentDeletedError(DocumentStateError):
    """Raised on any write to a document that was deleted."""


class UnmappedFieldError(DocstoreError):
    """Raised when a field has no wire-name. This is a schema bug, not a transient failure."""

    def __init__(self, document_type: type, field_name: str):
        self.document_type = document_type
        self.field_name = field_name
        super().__init__(
            f"The field {field_name} of {document_type.__name__} "
            "isn't associated with any wire-name."
        )


class StaleDocumentError(DocstoreError):
    """Raised by a diffed update when the stored document no longer exists."""

    def __init__(self, document_type: type, document_id: Optional[str]):
        self.document_type = document_type
        self.document_id = document_id
        super().__init__(
            f"{document_type.__name__} {document_id} no longer exists in the store."
        )


class WriteError(DocstoreError):
    """Raised when the store rejects a write."""


class InsertError(WriteError):
    """Raised when the store rejects an insert."""
