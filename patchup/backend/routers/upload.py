"""
Router for tech rider upload.

Handles:
- PDF upload, AI extraction, normalization and storage of the patch list
"""

import logging
from pathlib import Path
from typing import Annotated

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from sqlalchemy.orm import Session

from ..config import Settings, get_settings
from ..database import get_db
from ..models import UploadResponse
from ..services.ai import AIService, AIServiceError, get_ai_service
from ..services.document_store import DocumentStore, DocumentStoreError
from ..services.normalizer import ParseError, normalize_extraction
from ..services.pdf_service import PDFConversionError, PDFService, get_pdf_service
from ..services.upload_storage import UploadRejectedError, discard_upload, save_upload

logger = logging.getLogger(__name__)

router = APIRouter(prefix="", tags=["upload"])


async def _process_rider(
    path: Path,
    source_file: str,
    db: Session,
    ai_service: AIService,
    pdf_service: PDFService,
) -> UploadResponse:
    """Render, extract, normalize and store one uploaded rider."""
    try:
        images = pdf_service.render_pages(path)
    except PDFConversionError as e:
        logger.error("PDF conversion failed: %s", e)
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e),
        )

    try:
        raw_text = await ai_service.extract_patch_list(images, source_file)
    except AIServiceError as e:
        logger.error("AI extraction failed: %s", e)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"AI service error: {e}",
        )

    result = normalize_extraction(raw_text)
    if not result.ok:
        # Malformed model output -> 502, unusable rider content -> 422
        if isinstance(result.error, ParseError):
            status_code = status.HTTP_502_BAD_GATEWAY
        else:
            status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
        raise HTTPException(status_code=status_code, detail=result.error.to_detail())

    extraction = result.extraction
    store = DocumentStore(db)
    try:
        saved_count = store.commit_batch(
            extraction.storage_key,
            [(entry.document_id, entry.to_document()) for entry in extraction.entries],
        )
    except DocumentStoreError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e),
        )

    return UploadResponse(
        message="File uploaded and processed successfully.",
        upload_confirmation="File Upload successful.",
        main_artist=extraction.main_artist,
        storage_key=extraction.storage_key,
        entries=extraction.entries,
        instruments_and_backlines=extraction.instruments_and_backlines,
        excluded_count=extraction.excluded_count,
        saved_count=saved_count,
    )


@router.post("/upload", response_model=UploadResponse)
async def upload_rider(
    pdf: Annotated[UploadFile | None, File(description="Tech rider PDF")] = None,
    db: Session = Depends(get_db),
    ai_service: AIService = Depends(get_ai_service),
    pdf_service: PDFService = Depends(get_pdf_service),
    settings: Settings = Depends(get_settings),
) -> UploadResponse:
    """
    Upload a tech rider PDF and store its patch list.

    The upload is kept on disk only while the request is processed and is
    deleted afterwards whether or not extraction succeeded.
    """
    if pdf is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="File upload failed. No file provided.",
        )

    try:
        try:
            path = await save_upload(pdf, settings.upload_dir, settings.max_upload_bytes)
        except UploadRejectedError as e:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=str(e),
            )
        except Exception as e:
            logger.exception("Error receiving the upload")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"File upload failed: {e}",
            )

        try:
            return await _process_rider(path, pdf.filename, db, ai_service, pdf_service)
        except HTTPException:
            raise
        except Exception as e:
            logger.exception("Error processing the PDF")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error processing the PDF: {e}",
            )
        finally:
            discard_upload(path)
    finally:
        await pdf.close()
