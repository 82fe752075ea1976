"""
Router for stored patch lists.

Handles:
- Retrieving an artist's patch list
- Deleting an artist's patch list
"""

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..models import PatchEntry, PatchListResponse
from ..services.document_store import DocumentStore, DocumentStoreError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/patch-lists", tags=["patch-lists"])


def _channel_sort_key(entry: PatchEntry) -> tuple[int, float, str]:
    """Numeric channels first in numeric order, then the rest by text."""
    value: Any = entry.channel_number
    try:
        return (0, float(value), "")
    except (TypeError, ValueError):
        return (1, 0.0, str(value))


@router.get("/{storage_key}", response_model=PatchListResponse)
async def get_patch_list(
    storage_key: str,
    db: Session = Depends(get_db),
) -> PatchListResponse:
    """
    Get the stored patch list for an artist.

    Args:
        storage_key: Sanitized artist key returned by the upload endpoint.
        db: Database session.

    Returns:
        The artist's entries ordered by channel number.
    """
    documents = DocumentStore(db).list_collection(storage_key)
    if not documents:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No patch list stored for '{storage_key}'",
        )

    entries = sorted(
        (PatchEntry.model_validate(data) for data in documents.values()),
        key=_channel_sort_key,
    )
    return PatchListResponse(storage_key=storage_key, entries=entries)


@router.delete("/{storage_key}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_patch_list(
    storage_key: str,
    db: Session = Depends(get_db),
) -> None:
    """Delete every stored entry for an artist."""
    try:
        deleted = DocumentStore(db).delete_collection(storage_key)
    except DocumentStoreError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e),
        )
    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No patch list stored for '{storage_key}'",
        )
