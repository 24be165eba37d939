"""
Document base classes.
"""
from docstore.models.base import DocumentState, ReadOnlyDocument
from docstore.models.document import Document, WriteResult

__all__ = ["Document", "DocumentState", "ReadOnlyDocument", "WriteResult"]
