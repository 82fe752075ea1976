"""
SQLAlchemy database models for the PatchUp application.

Patch list entries are stored as JSON documents addressed by a
(collection, document_id) pair, where the collection is the artist's
storage key and the document id is the entry's channel number.
"""

from datetime import datetime

from sqlalchemy import JSON, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from .database import Base


class PatchDocument(Base):
    """
    A single stored patch list entry.

    Writing to an existing (collection, document_id) overwrites the
    previous document.
    """

    __tablename__ = "patch_documents"

    collection: Mapped[str] = mapped_column(
        String(255),
        primary_key=True,
        comment="Sanitized storage key derived from the main artist",
    )
    document_id: Mapped[str] = mapped_column(
        String(255),
        primary_key=True,
        comment="Stringified channel number",
    )
    data: Mapped[dict] = mapped_column(
        JSON,
        nullable=False,
        comment="Patch entry fields as JSON",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=datetime.utcnow,
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<PatchDocument(collection='{self.collection}', document_id='{self.document_id}')>"
