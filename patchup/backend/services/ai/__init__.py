"""
AI service package for tech rider patch list extraction.

- exceptions: Shared AIServiceError
- extraction: Prompt construction and the OpenAI vision request

The AIService class holds the long-lived OpenAI client and is created
once per process via get_ai_service().
"""

import logging

from PIL import Image

from ...config import get_settings
from .exceptions import AIServiceError
from .extraction import extract_patch_list as _extract_patch_list

logger = logging.getLogger(__name__)

__all__ = [
    "AIService",
    "AIServiceError",
    "extract_patch_list",
    "get_ai_service",
]


class AIService:
    """
    Service for AI-powered tech rider reading.

    Uses an OpenAI vision-capable chat model to transcribe the patch list.
    """

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        use_mock: bool = False,
    ):
        """
        Initialize the AI service.

        Args:
            api_key: OpenAI API key. If None, reads from settings.
            model: OpenAI model to use (must support vision). If None, reads from settings.
            use_mock: If True, return canned text instead of calling OpenAI.
        """
        settings = get_settings()
        if api_key is None:
            api_key = settings.openai_api_key

        self.api_key = api_key
        self.model = model or settings.openai_model
        self.use_mock = use_mock or not self.api_key
        self._client = None

        if self.use_mock:
            logger.warning(
                "AI Service running in MOCK MODE. Set OPENAI_API_KEY in .env for real extraction."
            )

    @property
    def client(self):
        """Lazy-load the OpenAI client."""
        if self._client is None:
            if not self.api_key:
                raise AIServiceError(
                    "OpenAI API key not provided. Set OPENAI_API_KEY environment variable."
                )
            from openai import OpenAI

            self._client = OpenAI(api_key=self.api_key)
        return self._client

    async def extract_patch_list(
        self,
        images: list[Image.Image] | Image.Image,
        source_file: str,
    ) -> str:
        """
        Return the model's raw text for the rider's patch list.

        Delegates to the extraction module.
        """
        return await _extract_patch_list(
            images,
            source_file,
            client=None if self.use_mock else self.client,
            model=self.model,
            use_mock=self.use_mock,
        )


# =============================================================================
# Singleton Factory
# =============================================================================

_ai_service: AIService | None = None


def get_ai_service() -> AIService:
    """Get or create the AI service singleton."""
    global _ai_service
    if _ai_service is None:
        _ai_service = AIService()
    return _ai_service


extract_patch_list = _extract_patch_list
