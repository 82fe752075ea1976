"""
Services package for the PatchUp backend.

Contains:
- ai: OpenAI integration for reading tech riders
- normalizer: Turning raw AI text into a validated patch list
- document_store: Keyed JSON document persistence
- pdf_service: PDF to image rendering
- upload_storage: Temporary storage of uploaded files
"""

from .ai import AIService
from .document_store import DocumentStore
from .pdf_service import PDFService

__all__ = ["AIService", "DocumentStore", "PDFService"]
