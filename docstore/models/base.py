"""
Read-only document base.

Document types are pydantic models. Each field's alias is its wire-name,
the name used when talking to the store; the identity field ``id`` is
stored as ``_id`` and filled by the store on insert.
"""
from enum import Enum
from typing import TYPE_CHECKING, Any, ClassVar, Iterator, Optional, TypeVar

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_validator

from docstore.core.exceptions import UnboundDocumentError, UnmappedFieldError
from docstore.core.filters import ID_FIELD, translate_filter, translate_sort

if TYPE_CHECKING:
    from docstore.database.registry import Database

T = TypeVar("T", bound="ReadOnlyDocument")


class DocumentState(str, Enum):
    """Lifecycle state of a document instance."""
    TRANSIENT = "transient"
    PERSISTED = "persisted"
    DELETED = "deleted"


class ReadOnlyDocument(BaseModel):
    """
    Base for every document type. Provides the read operations.

    Subclasses declare their mapped fields with aliases:

        class User(Document):
            name: str = Field(..., alias="nm")
            age: int = Field(..., alias="ag")
    """

    model_config = ConfigDict(
        populate_by_name=True,
        use_enum_values=True,
        validate_assignment=True,
        validate_default=True,
    )

    id: Optional[str] = Field(
        None, alias="_id", frozen=True, description="Store-assigned ObjectId as string"
    )

    # Field name -> wire-name, built once per class
    __wire_names__: ClassVar[dict[str, str]] = {}

    _database: Optional["Database"] = PrivateAttr(default=None)
    _state: DocumentState = PrivateAttr(default=DocumentState.TRANSIENT)

    @classmethod
    def __pydantic_init_subclass__(cls, **kwargs: Any) -> None:
        super().__pydantic_init_subclass__(**kwargs)
        wire_names = {}
        for name, info in cls.model_fields.items():
            if name == ID_FIELD or info.exclude:
                continue
            wire_names[name] = info.serialization_alias or info.alias or name
        cls.__wire_names__ = wire_names

    @field_validator("id", mode="before")
    @classmethod
    def _object_id_to_str(cls, value: Any) -> Any:
        if isinstance(value, ObjectId):
            return str(value)
        return value

    # ==================== Field metadata ====================

    @classmethod
    def mapped_fields(cls) -> tuple[str, ...]:
        """Names of the fields that are stored under a wire-name."""
        return tuple(cls.__wire_names__)

    @classmethod
    def wire_name(cls, field_name: str) -> str:
        """
        Resolve a field name to its wire-name.

        Raises:
            UnmappedFieldError: If the field isn't mapped
        """
        try:
            return cls.__wire_names__[field_name]
        except KeyError:
            raise UnmappedFieldError(cls, field_name) from None

    # ==================== Instance state ====================

    @property
    def state(self) -> DocumentState:
        return self._state

    @property
    def database(self) -> Optional["Database"]:
        """Handle this document was read or inserted through."""
        return self._database

    def to_wire(self) -> dict[str, Any]:
        """Wire representation of the mapped fields (identity excluded)."""
        return self.model_dump(by_alias=True, exclude={ID_FIELD})

    @classmethod
    def from_wire(cls: type[T], raw: dict[str, Any], database: "Database") -> T:
        """Build a persisted document from a raw store document."""
        document = cls.model_validate(raw)
        document._database = database
        document._state = DocumentState.PERSISTED
        return document

    # ==================== Read operations ====================

    @classmethod
    def query(
        cls: type[T],
        database: "Database",
        predicate: Optional[dict[str, Any]] = None,
        *,
        sort: Optional[list[tuple[str, int]]] = None,
        **criteria: Any,
    ) -> Iterator[T]:
        """
        Lazily iterate the documents matching a predicate.

        The iterator is backed by a server cursor: single pass, not
        restartable. Call query again to re-read.

        Args:
            database: Handle the type is bound on
            predicate: Filter document using field names
            sort: Optional list of (field, direction) pairs
            **criteria: Extra equality conditions

        Raises:
            UnboundDocumentError: If the type isn't bound on the handle
        """
        collection = database.collection(cls)
        cursor = collection.find(translate_filter(cls, predicate, **criteria))
        order = translate_sort(cls, sort)
        if order:
            cursor = cursor.sort(order)
        return (cls.from_wire(raw, database) for raw in cursor)

    @classmethod
    def all(
        cls: type[T],
        database: "Database",
        predicate: Optional[dict[str, Any]] = None,
        *,
        sort: Optional[list[tuple[str, int]]] = None,
        **criteria: Any,
    ) -> list[T]:
        """
        Get a list of every document matching the predicate, or of the
        whole collection when there is none.

        Note: this creates a lot of traffic on large collections. Use one()
        to fetch a single document.
        """
        return list(cls.query(database, predicate, sort=sort, **criteria))

    @classmethod
    def one(
        cls: type[T],
        database: "Database",
        predicate: Optional[dict[str, Any]] = None,
        **criteria: Any,
    ) -> Optional[T]:
        """Get the first document matching the predicate, or None."""
        raw = database.collection(cls).find_one(translate_filter(cls, predicate, **criteria))
        if raw is None:
            return None
        return cls.from_wire(raw, database)

    @classmethod
    def exists(
        cls,
        database: "Database",
        predicate: Optional[dict[str, Any]] = None,
        **criteria: Any,
    ) -> bool:
        """Check whether a document matching the predicate exists."""
        return cls.one(database, predicate, **criteria) is not None

    def _bound_database(self) -> "Database":
        if self._database is None:
            raise UnboundDocumentError(type(self))
        return self._database
