"""
Read-write document base.

Each write exists once, as a try_* operation returning a WriteResult;
the raising form unwraps that result.
"""
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Iterator, Optional

from bson.errors import BSONError
from pymongo.errors import PyMongoError

from docstore.core.exceptions import (
    DocstoreError,
    DocumentDeletedError,
    DocumentStateError,
    InsertError,
    StaleDocumentError,
    UnboundDocumentError,
    WriteError,
)
from docstore.core.filters import ID_WIRE_NAME, to_object_id
from docstore.models.base import DocumentState, ReadOnlyDocument

if TYPE_CHECKING:
    from docstore.database.registry import Database

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WriteResult:
    """Outcome of a write. Truthy on success; unpacks as (ok, error)."""
    ok: bool
    error: Optional[DocstoreError] = None

    def __bool__(self) -> bool:
        return self.ok

    def __iter__(self) -> Iterator[Any]:
        return iter((self.ok, self.error))

    def raise_for_error(self) -> None:
        if self.error is not None:
            raise self.error


class Document(ReadOnlyDocument):
    """
    Base for mutable document types.

    State machine: TRANSIENT (no id) -> PERSISTED (after insert or read)
    -> DELETED (terminal, every later write fails).
    """

    # ==================== Insert ====================

    def try_insert(self, database: Optional["Database"] = None) -> WriteResult:
        """
        Create this document in its bound collection. The store assigns the id.

        Args:
            database: Handle to insert through; required unless the
                document already carries one
        """
        try:
            self._check_state(DocumentState.TRANSIENT)
            target = database if database is not None else self._database
            if target is None:
                raise UnboundDocumentError(type(self))
            collection = target.collection(type(self))
            try:
                result = collection.insert_one(self.to_wire())
            except (PyMongoError, BSONError) as e:
                logger.error(f"Insert of {type(self).__name__} failed: {e}")
                raise InsertError(f"Insert of {type(self).__name__} failed: {e}") from e
        except DocstoreError as e:
            return WriteResult(False, e)

        self._database = target
        self.__dict__["id"] = str(result.inserted_id)
        self.__pydantic_fields_set__.add("id")
        self._state = DocumentState.PERSISTED
        logger.debug(f"Inserted {type(self).__name__} {self.id}")
        return WriteResult(True)

    def insert(self, database: Optional["Database"] = None) -> None:
        """Raising form of try_insert()."""
        self.try_insert(database).raise_for_error()

    # ==================== Field updates ====================

    def try_set_field(self, field_name: str, new_value: Any) -> WriteResult:
        """
        Replace the stored value of one field, then the in-memory one.

        Args:
            field_name: In-language name of a mapped field
            new_value: Value to store; validated against the field's type
        """
        try:
            self._check_state(DocumentState.PERSISTED)
            wire_name = self.wire_name(field_name)

            candidate = self.model_copy()
            try:
                setattr(candidate, field_name, new_value)
            except ValueError as e:
                raise WriteError(f"Invalid value for {field_name}: {e}") from e
            wire_value = candidate.model_dump(by_alias=True, include={field_name})[wire_name]

            self._write_field(wire_name, wire_value)
        except DocstoreError as e:
            return WriteResult(False, e)

        self.__dict__[field_name] = candidate.__dict__[field_name]
        self.__pydantic_fields_set__.add(field_name)
        return WriteResult(True)

    def set_field(self, field_name: str, new_value: Any) -> None:
        """Raising form of try_set_field()."""
        self.try_set_field(field_name, new_value).raise_for_error()

    def sync_all(self) -> tuple[str, ...]:
        """
        Write every mapped field whose in-memory value differs from the
        stored one.

        The stored state is read first and only changed fields are sent.
        Read and writes are not atomic: a concurrent writer's change to a
        field this document also changed is overwritten (last write wins).

        Returns:
            Wire-names of the fields written, empty when nothing changed

        Raises:
            StaleDocumentError: If the document no longer exists in the store
        """
        self._check_state(DocumentState.PERSISTED)
        database = self._bound_database()
        stored = type(self).one(database, id=self.id)
        if stored is None:
            raise StaleDocumentError(type(self), self.id)

        written = []
        for field_name in self.mapped_fields():
            value = getattr(self, field_name)
            if getattr(stored, field_name) == value:
                continue
            self.set_field(field_name, value)
            written.append(self.wire_name(field_name))

        if written:
            logger.debug(f"Synced {type(self).__name__} {self.id}: {written}")
        else:
            logger.debug(f"Synced {type(self).__name__} {self.id}: no changes")
        return tuple(written)

    # ==================== Delete ====================

    def delete(self) -> None:
        """Remove this document from its collection."""
        self._check_state(DocumentState.PERSISTED)
        collection = self._bound_database().collection(type(self))
        try:
            collection.delete_one(self._identity_filter())
        except (PyMongoError, BSONError) as e:
            logger.error(f"Delete of {type(self).__name__} {self.id} failed: {e}")
            raise WriteError(f"Delete of {type(self).__name__} {self.id} failed: {e}") from e
        self._state = DocumentState.DELETED
        logger.debug(f"Deleted {type(self).__name__} {self.id}")

    # ==================== Helpers ====================

    def _write_field(self, wire_name: str, wire_value: Any) -> None:
        collection = self._bound_database().collection(type(self))
        try:
            collection.update_one(
                self._identity_filter(),
                {"$set": {wire_name: wire_value}},
            )
        except (PyMongoError, BSONError) as e:
            logger.error(f"Update of {type(self).__name__}.{wire_name} failed: {e}")
            raise WriteError(f"Update of {type(self).__name__}.{wire_name} failed: {e}") from e
        logger.debug(f"Set {type(self).__name__} {self.id} {wire_name}")

    def _identity_filter(self) -> dict[str, Any]:
        return {ID_WIRE_NAME: to_object_id(self.id)}

    def _check_state(self, expected: DocumentState) -> None:
        if self._state is DocumentState.DELETED:
            raise DocumentDeletedError(f"{type(self).__name__} {self.id} was deleted")
        if self._state is not expected:
            raise DocumentStateError(
                f"{type(self).__name__} is {self._state.value}, expected {expected.value}"
            )
