"""
Keyed document store backed by SQLAlchemy.

Documents are JSON objects addressed by (collection, document_id).
Writes create or overwrite; batches commit all documents or none.
"""

import logging
from collections.abc import Iterable
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..models_db import PatchDocument

logger = logging.getLogger(__name__)


class DocumentStoreError(Exception):
    """Raised when a document store write fails."""

    pass


class DocumentStore:
    """
    Collection/document persistence over a SQLAlchemy session.

    The store does not own the session; callers manage its lifetime
    (see database.get_db).
    """

    def __init__(self, session: Session):
        self.session = session

    def _upsert(self, collection: str, document_id: str, data: dict[str, Any]) -> None:
        existing = self.session.get(PatchDocument, (collection, document_id))
        if existing is None:
            self.session.add(
                PatchDocument(collection=collection, document_id=document_id, data=data)
            )
        else:
            existing.data = data
        # Flush so a repeated id within the same batch finds the pending row
        self.session.flush()

    def set(self, collection: str, document_id: str, data: dict[str, Any]) -> None:
        """Create or overwrite a single document and commit."""
        self.commit_batch(collection, [(document_id, data)])

    def commit_batch(
        self,
        collection: str,
        documents: Iterable[tuple[str, dict[str, Any]]],
    ) -> int:
        """
        Write several documents to one collection atomically.

        Later documents with the same id overwrite earlier ones.

        Args:
            collection: Target collection name.
            documents: (document_id, data) pairs.

        Returns:
            Number of writes in the batch.

        Raises:
            DocumentStoreError: If the commit fails; nothing is written.
        """
        count = 0
        try:
            for document_id, data in documents:
                self._upsert(collection, document_id, data)
                count += 1
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error("Batch write to '%s' failed: %s", collection, e)
            raise DocumentStoreError(f"Failed to write documents to '{collection}': {e}") from e

        logger.info("Committed %d document(s) to collection '%s'", count, collection)
        return count

    def get(self, collection: str, document_id: str) -> dict[str, Any] | None:
        """Return a document's data, or None if it does not exist."""
        document = self.session.get(PatchDocument, (collection, document_id))
        return document.data if document is not None else None

    def list_collection(self, collection: str) -> dict[str, dict[str, Any]]:
        """Return all documents in a collection keyed by document id."""
        documents = (
            self.session.query(PatchDocument)
            .filter(PatchDocument.collection == collection)
            .all()
        )
        return {document.document_id: document.data for document in documents}

    def delete_collection(self, collection: str) -> int:
        """Delete every document in a collection; returns the number removed."""
        try:
            deleted = (
                self.session.query(PatchDocument)
                .filter(PatchDocument.collection == collection)
                .delete()
            )
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise DocumentStoreError(f"Failed to delete collection '{collection}': {e}") from e
        logger.info("Deleted %d document(s) from collection '%s'", deleted, collection)
        return deleted
