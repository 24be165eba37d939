"""
Tests for the database handle and collection registry.

These tests cover:
- Binding document types to collections
- Duplicate and missing collection errors
- Closing and copying handles
"""

import copy
from concurrent.futures import ThreadPoolExecutor

import pytest

from docstore import (
    CollectionNotFoundError,
    Database,
    DuplicateBindingError,
    HandleClosedError,
    UnboundDocumentError,
)


class TestDatabaseBind:
    """Tests for Database.bind."""

    def test_bind_existing_collection(self, database, mock_mongo_client, user_model):
        """Binding to an existing collection should register it."""
        mock_mongo_client["test_db"].create_collection("users")

        database.bind(user_model, "users")

        assert database.is_bound(user_model)
        assert database.collection_name(user_model) == "users"
        assert database.collection(user_model).name == "users"

    def test_bind_missing_collection_fails(self, database, user_model):
        """Missing collection without create_if_missing should raise."""
        with pytest.raises(CollectionNotFoundError) as exc_info:
            database.bind(user_model, "users")

        assert exc_info.value.collection_name == "users"
        assert not database.is_bound(user_model)

    def test_bind_creates_missing_collection(self, database, mock_mongo_client, user_model):
        """create_if_missing should create an empty collection."""
        database.bind(user_model, "users", create_if_missing=True)

        db = mock_mongo_client["test_db"]
        assert "users" in db.list_collection_names()
        assert db["users"].count_documents({}) == 0

    def test_bind_uses_handle_default_for_creation(self, mock_mongo_client, user_model):
        """create_missing_collections on the handle applies when bind doesn't say."""
        db = Database("test_db", client=mock_mongo_client, create_missing_collections=True)

        db.bind(user_model, "users")

        assert "users" in mock_mongo_client["test_db"].list_collection_names()

    def test_duplicate_bind_fails_and_keeps_first(self, database, user_model):
        """Binding a type twice should raise and leave the first binding active."""
        database.bind(user_model, "users", create_if_missing=True)

        with pytest.raises(DuplicateBindingError):
            database.bind(user_model, "people", create_if_missing=True)

        assert database.collection_name(user_model) == "users"

    def test_same_type_on_two_handles(self, mock_mongo_client, user_model):
        """Each handle keeps its own bindings."""
        first = Database("first_db", client=mock_mongo_client)
        second = Database("second_db", client=mock_mongo_client)

        first.bind(user_model, "users", create_if_missing=True)
        second.bind(user_model, "members", create_if_missing=True)

        assert first.collection(user_model).full_name == "first_db.users"
        assert second.collection(user_model).full_name == "second_db.members"

    def test_bind_rejects_non_document_type(self, database):
        """Only document types can be bound."""
        with pytest.raises(TypeError):
            database.bind(dict, "things", create_if_missing=True)

    def test_concurrent_bind_first_writer_wins(self, database, user_model):
        """Concurrent binds of one type should leave exactly one winner."""
        def attempt(i):
            try:
                database.bind(user_model, f"users_{i}", create_if_missing=True)
                return None
            except DuplicateBindingError as e:
                return e

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(attempt, range(16)))

        winners = [r for r in results if r is None]
        assert len(winners) == 1
        assert all(isinstance(r, DuplicateBindingError) for r in results if r is not None)

    def test_bindings_snapshot_is_read_only(self, bound_database, user_model):
        """bindings should expose the table without allowing changes."""
        bindings = bound_database.bindings

        assert bindings[user_model] == "users"
        with pytest.raises(TypeError):
            bindings[user_model] = "other"


class TestUnboundLookup:
    """Tests for lookups of types without a binding."""

    def test_collection_for_unbound_type(self, database, user_model):
        with pytest.raises(UnboundDocumentError):
            database.collection(user_model)

    def test_read_on_unbound_type(self, database, user_model):
        with pytest.raises(UnboundDocumentError):
            user_model.one(database, name="Ann")


class TestDatabaseClose:
    """Tests for closing a handle."""

    def test_close_clears_bindings(self, bound_database, user_model):
        bound_database.close()

        assert bound_database.closed
        assert not bound_database.is_bound(user_model)
        assert len(bound_database.bindings) == 0

    def test_operations_after_close_fail(self, bound_database, user_model, ann):
        """Documents of a type bound through a closed handle must not use it."""
        bound_database.close()

        with pytest.raises(HandleClosedError):
            user_model.one(bound_database, name="Ann")
        with pytest.raises(HandleClosedError):
            ann.set_field("age", 31)
        with pytest.raises(HandleClosedError):
            bound_database.bind(user_model, "users")

    def test_close_is_idempotent(self, database):
        database.close()
        database.close()

        assert database.closed

    def test_context_manager_closes(self, mock_mongo_client):
        with Database("test_db", client=mock_mongo_client) as db:
            assert not db.closed

        assert db.closed


class TestDatabaseCopy:
    """Tests for copying a handle."""

    def test_copy_carries_bindings(self, bound_database, user_model, note_model):
        duplicate = bound_database.copy()

        assert duplicate is not bound_database
        assert duplicate.collection_name(user_model) == "users"
        assert duplicate.collection_name(note_model) == "notes"

    def test_copy_does_not_share_binding_table(self, database, user_model, note_model):
        """Binding on the copy should not affect the original."""
        database.bind(user_model, "users", create_if_missing=True)
        duplicate = copy.copy(database)

        duplicate.bind(note_model, "notes", create_if_missing=True)

        assert duplicate.is_bound(note_model)
        assert not database.is_bound(note_model)

    def test_copy_reads_same_data(self, bound_database, user_model, ann):
        duplicate = bound_database.copy()

        found = user_model.one(duplicate, id=ann.id)

        assert found is not None
        assert found.name == "Ann"
        assert found.database is duplicate

    def test_closing_copy_keeps_original(self, bound_database, user_model):
        duplicate = bound_database.copy()
        duplicate.close()

        assert bound_database.is_bound(user_model)
        assert not bound_database.closed

    def test_copy_of_closed_handle_fails(self, database):
        database.close()

        with pytest.raises(HandleClosedError):
            database.copy()


class TestClosedProperty:
    def test_closed_tracks_close(self, database):
        assert database.closed is False

        database.close()

        assert database.closed is True
