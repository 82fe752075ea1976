"""Tests for the SQLAlchemy-backed document store."""

import pytest
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from patchup.backend.services.document_store import DocumentStore, DocumentStoreError


class TestDocumentStore:
    """Tests for DocumentStore class."""

    def test_set_and_get(self, db_session: Session):
        """Test writing and reading a single document."""
        store = DocumentStore(db_session)
        store.set("Band", "1", {"patchName": "Kick"})
        assert store.get("Band", "1") == {"patchName": "Kick"}

    def test_get_missing_returns_none(self, db_session: Session):
        """Test reading a document that does not exist."""
        assert DocumentStore(db_session).get("Band", "99") is None

    def test_set_overwrites(self, db_session: Session):
        """Test that writing the same id replaces the document."""
        store = DocumentStore(db_session)
        store.set("Band", "1", {"patchName": "Kick"})
        store.set("Band", "1", {"patchName": "Kick In"})
        assert store.get("Band", "1") == {"patchName": "Kick In"}
        assert len(store.list_collection("Band")) == 1

    def test_commit_batch(self, db_session: Session):
        """Test writing several documents at once."""
        store = DocumentStore(db_session)
        count = store.commit_batch(
            "Band",
            [("1", {"patchName": "Kick"}), ("2", {"patchName": "Snare"})],
        )
        assert count == 2
        assert store.list_collection("Band") == {
            "1": {"patchName": "Kick"},
            "2": {"patchName": "Snare"},
        }

    def test_batch_duplicate_ids_last_wins(self, db_session: Session):
        """Test that a repeated id within one batch keeps the later document."""
        store = DocumentStore(db_session)
        store.commit_batch(
            "Band",
            [("1", {"patchName": "Kick"}), ("1", {"patchName": "Snare"})],
        )
        assert store.list_collection("Band") == {"1": {"patchName": "Snare"}}

    def test_collections_are_separate(self, db_session: Session):
        """Test that the same id in two collections does not collide."""
        store = DocumentStore(db_session)
        store.set("Band_A", "1", {"patchName": "Kick"})
        store.set("Band_B", "1", {"patchName": "Vox"})
        assert store.get("Band_A", "1") == {"patchName": "Kick"}
        assert store.get("Band_B", "1") == {"patchName": "Vox"}

    def test_failed_batch_writes_nothing(self, db_session: Session, monkeypatch):
        """Test that a failure mid-batch rolls back earlier writes."""
        store = DocumentStore(db_session)
        original_upsert = store._upsert

        def failing_upsert(collection, document_id, data):
            if document_id == "2":
                raise SQLAlchemyError("disk full")
            original_upsert(collection, document_id, data)

        monkeypatch.setattr(store, "_upsert", failing_upsert)

        with pytest.raises(DocumentStoreError):
            store.commit_batch("Band", [("1", {"a": 1}), ("2", {"a": 2})])

        assert store.list_collection("Band") == {}

    def test_delete_collection(self, db_session: Session):
        """Test removing every document of one collection."""
        store = DocumentStore(db_session)
        store.commit_batch("Band", [("1", {}), ("2", {})])
        store.set("Other", "1", {})

        assert store.delete_collection("Band") == 2
        assert store.list_collection("Band") == {}
        assert store.get("Other", "1") == {}

    def test_list_empty_collection(self, db_session: Session):
        """Test listing a collection with no documents."""
        assert DocumentStore(db_session).list_collection("Nobody") == {}
