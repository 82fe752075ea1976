"""
PDF rendering service using pdf2image (poppler).

Renders stored tech rider PDFs to PIL Images for the vision model.
"""

import logging
from pathlib import Path

from PIL import Image
from pdf2image import convert_from_path
from pdf2image.exceptions import (
    PDFInfoNotInstalledError,
    PDFPageCountError,
    PDFSyntaxError,
)

from ..config import get_settings

logger = logging.getLogger(__name__)

PDF_MAGIC = b"%PDF"


class PDFConversionError(Exception):
    """Raised when PDF conversion fails."""

    pass


class PDFService:
    """
    Service for PDF rendering operations.

    Uses pdf2image (backed by poppler) to convert PDF pages to images.
    """

    def __init__(self, dpi: int = 150, max_pages: int = 10):
        """
        Initialize the PDF service.

        Args:
            dpi: Resolution for PDF to image conversion.
            max_pages: Only the first max_pages pages are rendered.
        """
        self.dpi = dpi
        self.max_pages = max_pages

    def _check_header(self, path: Path) -> None:
        try:
            with open(path, "rb") as f:
                header = f.read(len(PDF_MAGIC))
        except OSError as e:
            raise PDFConversionError(f"Could not read PDF file: {e}") from e

        if not header:
            raise PDFConversionError("Empty PDF file provided")
        if header != PDF_MAGIC:
            raise PDFConversionError(
                "Invalid PDF file: does not start with PDF header"
            )

    def render_pages(self, path: str | Path) -> list[Image.Image]:
        """
        Render the leading pages of a PDF to images.

        Args:
            path: Location of the PDF on disk.

        Returns:
            List of PIL Image objects, one per rendered page.

        Raises:
            PDFConversionError: If the file is not a readable PDF.
        """
        path = Path(path)
        self._check_header(path)

        try:
            logger.info(
                "Rendering PDF %s (dpi=%d, max_pages=%d)",
                path.name,
                self.dpi,
                self.max_pages,
            )
            images = convert_from_path(
                path,
                dpi=self.dpi,
                first_page=1,
                last_page=self.max_pages,
                thread_count=2,
            )
        except PDFInfoNotInstalledError as e:
            logger.error("Poppler not installed: %s", e)
            raise PDFConversionError(
                "Poppler not installed. Install poppler-utils: "
                "brew install poppler (macOS) or apt-get install poppler-utils (Linux)"
            ) from e
        except PDFPageCountError as e:
            logger.error("Could not get PDF page count: %s", e)
            raise PDFConversionError(
                f"Could not determine PDF page count: {e}"
            ) from e
        except PDFSyntaxError as e:
            logger.error("PDF syntax error: %s", e)
            raise PDFConversionError(f"Invalid or corrupted PDF file: {e}") from e
        except Exception as e:
            logger.exception("Unexpected error during PDF rendering")
            raise PDFConversionError(f"PDF rendering failed: {e}") from e

        if not images:
            raise PDFConversionError("No pages found in PDF")

        logger.info("Rendered %d page(s)", len(images))
        return images


_pdf_service: PDFService | None = None


def get_pdf_service() -> PDFService:
    """Get or create the PDF service singleton."""
    global _pdf_service
    if _pdf_service is None:
        settings = get_settings()
        _pdf_service = PDFService(dpi=settings.pdf_dpi, max_pages=settings.max_pages)
    return _pdf_service
