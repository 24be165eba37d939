"""
Global test fixtures for docstore.

This module provides shared fixtures for all tests including:
- Mock MongoDB (mongomock)
- Database handles with and without bindings
- Sample document types
"""

from enum import Enum
from typing import Optional

import mongomock
import pytest
from pydantic import Field

from docstore import Database, Document, ReadOnlyDocument


# =============================================================================
# Document Types
# =============================================================================

class Role(str, Enum):
    USER = "user"
    ADMIN = "admin"


class User(Document):
    """User document with short wire-names."""
    name: str = Field(..., alias="nm")
    age: int = Field(..., alias="ag")
    email: Optional[str] = Field(None, alias="em")
    role: Role = Field(default=Role.USER, alias="rl")
    session_token: Optional[str] = Field(None, exclude=True)


class Note(Document):
    """Document without aliases: wire-names equal field names."""
    title: str
    body: str = ""


class Country(ReadOnlyDocument):
    """Read-only reference data."""
    code: str = Field(..., alias="cd")
    label: str = Field(..., alias="lb")


# =============================================================================
# Document Type Fixtures
# =============================================================================

@pytest.fixture
def user_model() -> type[User]:
    return User


@pytest.fixture
def note_model() -> type[Note]:
    return Note


@pytest.fixture
def country_model() -> type[Country]:
    return Country


# =============================================================================
# MongoDB Fixtures (mongomock)
# =============================================================================

@pytest.fixture
def mock_mongo_client():
    """
    Create a mock MongoDB client using mongomock.

    This provides an in-memory MongoDB that behaves like the real thing
    for testing purposes.
    """
    client = mongomock.MongoClient()
    yield client
    client.close()


@pytest.fixture
def database(mock_mongo_client):
    """A handle on an empty database with no bindings."""
    db = Database("test_db", client=mock_mongo_client)
    yield db
    db.close()


@pytest.fixture
def bound_database(database):
    """A handle with User, Note and Country bound to fresh collections."""
    database.bind(User, "users", create_if_missing=True)
    database.bind(Note, "notes", create_if_missing=True)
    database.bind(Country, "countries", create_if_missing=True)
    return database


@pytest.fixture
def users_collection(bound_database):
    """Raw collection behind User, for checking what was stored."""
    return bound_database.collection(User)


@pytest.fixture
def ann(bound_database) -> User:
    """A persisted user."""
    user = User(name="Ann", age=30, email="ann@example.com")
    user.insert(bound_database)
    return user


@pytest.fixture
def seeded_users(bound_database) -> list[User]:
    """Three persisted users."""
    users = [
        User(name="Ann", age=30),
        User(name="Bob", age=17),
        User(name="Cid", age=45, role=Role.ADMIN),
    ]
    for user in users:
        user.insert(bound_database)
    return users
