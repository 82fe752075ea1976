"""
Temporary storage for uploaded tech rider PDFs.

Uploads are written to the configured upload directory under a unique
name and deleted once the request has been handled.
"""

import logging
import random
import time
from pathlib import Path

from fastapi import UploadFile

logger = logging.getLogger(__name__)

PDF_CONTENT_TYPE = "application/pdf"
CHUNK_SIZE = 1024 * 1024


class UploadRejectedError(Exception):
    """Raised when an upload is not an acceptable PDF."""

    pass


def is_pdf_upload(file: UploadFile) -> bool:
    """Both the declared content type and the extension must say PDF."""
    if not file.filename:
        return False
    content_type = (file.content_type or "").split(";")[0].strip().lower()
    return content_type == PDF_CONTENT_TYPE and file.filename.lower().endswith(".pdf")


def unique_upload_name(fieldname: str = "pdf") -> str:
    """Timestamped, randomized filename, e.g. pdf-1718031234567-123456789.pdf."""
    millis = int(time.time() * 1000)
    suffix = random.randint(0, 10**9 - 1)
    return f"{fieldname}-{millis}-{suffix}.pdf"


async def save_upload(file: UploadFile, upload_dir: Path, max_bytes: int) -> Path:
    """
    Validate and persist an uploaded PDF.

    Args:
        file: The incoming multipart file.
        upload_dir: Directory to store the file in (created if missing).
        max_bytes: Maximum accepted size.

    Returns:
        Path of the stored file.

    Raises:
        UploadRejectedError: Wrong type, empty or oversized upload. Nothing
            is left on disk in that case.
    """
    if not is_pdf_upload(file):
        raise UploadRejectedError("Only PDF files are allowed")

    upload_dir.mkdir(parents=True, exist_ok=True)
    path = upload_dir / unique_upload_name()

    size = 0
    try:
        with open(path, "wb") as out:
            while True:
                chunk = await file.read(CHUNK_SIZE)
                if not chunk:
                    break
                size += len(chunk)
                if size > max_bytes:
                    raise UploadRejectedError(
                        f"File too large (limit is {max_bytes // (1024 * 1024)} MB)"
                    )
                out.write(chunk)
        if size == 0:
            raise UploadRejectedError("Empty file provided")
    except BaseException:
        # Partial or rejected uploads never stay on disk
        discard_upload(path)
        raise

    logger.info("Uploaded: %s (%d bytes) as %s", file.filename, size, path)
    return path


def discard_upload(path: Path) -> bool:
    """
    Delete a stored upload.

    Failures are logged and suppressed so they never change the response.

    Returns:
        True if the file was removed.
    """
    try:
        path.unlink()
    except OSError as e:
        logger.error("Error deleting uploaded file %s: %s", path, e)
        return False
    logger.info("Uploaded file deleted: %s", path.name)
    return True
