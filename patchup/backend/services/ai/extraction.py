"""
Patch list extraction from tech rider page images.

Sends rendered pages to an OpenAI vision model and returns the raw
response text. Parsing and validation of that text happen in the
normalizer, not here.
"""

import base64
import io
import logging
from typing import Any

from PIL import Image

from .exceptions import AIServiceError

logger = logging.getLogger(__name__)


# =============================================================================
# Extraction Prompts
# =============================================================================

EXTRACTION_SYSTEM_PROMPT = """You are an experienced live-sound engineer reading a band's technical rider.
Your task is to transcribe the input/patch list from the TECH RIDER section exactly as written.

## Rules:
1. Only transcribe what is printed. If a value is missing, omit the row's key rather than guessing.
2. Column headings vary between riders. Treat these as equivalent:
   - Channel Number: "Ch", "Channel", "Input", "#"
   - Mic/DI: "Mic", "DI", "Mic/DI", "Microphone"
   - Patch Name: "Patch", "Source", "Instrument", "Name"
   - Comments/Stands: "Stand", "Comments", "Notes", "Insert"
3. Keep every row of the table, in order. Do not merge or split rows.
4. Respond with JSON only."""

EXTRACTION_USER_PROMPT = """Extract a JSON object from the TECH RIDER section of this document with these keys:

- "main_artist": the headlining artist or band name (string)
- "instruments_and_backlines": list of instruments/backline items requested (list of strings)
- "patch_list_table": list of rows, each an object with exactly these keys:
  "channelNumber", "micOrDi", "patchName", "commentsOrStand"

Example:
{
  "main_artist": "The Example Band",
  "instruments_and_backlines": ["Drum kit", "Bass amp"],
  "patch_list_table": [
    {"channelNumber": 1, "micOrDi": "Beta 91", "patchName": "Kick In", "commentsOrStand": "none"},
    {"channelNumber": 2, "micOrDi": "SM57", "patchName": "Snare", "commentsOrStand": "short boom"}
  ]
}"""

MOCK_EXTRACTION_TEXT = """```json
{
  "main_artist": "Mock Artist",
  "instruments_and_backlines": ["Drum kit"],
  "patch_list_table": [
    {"channelNumber": 1, "micOrDi": "Beta 91", "patchName": "Kick In", "commentsOrStand": "none"},
    {"channelNumber": 2, "micOrDi": "SM57", "patchName": "Snare", "commentsOrStand": "short boom"},
    {"channelNumber": 3, "micOrDi": "DI", "patchName": "Bass"}
  ]
}
```"""


# =============================================================================
# Helper Functions
# =============================================================================


def _image_to_base64(image: Image.Image) -> str:
    """Convert PIL Image to base64 string for API."""
    buffer = io.BytesIO()
    # Resize if too large (max 2048px on longest side)
    max_size = 2048
    if max(image.size) > max_size:
        ratio = max_size / max(image.size)
        new_size = (int(image.size[0] * ratio), int(image.size[1] * ratio))
        image = image.resize(new_size, Image.Resampling.LANCZOS)

    image.save(buffer, format="PNG", optimize=True)
    buffer.seek(0)
    return base64.b64encode(buffer.getvalue()).decode("utf-8")


def build_message_content(images: list[Image.Image]) -> list[dict[str, Any]]:
    """User message content: the extraction prompt followed by every page."""
    content: list[dict[str, Any]] = [
        {"type": "text", "text": EXTRACTION_USER_PROMPT},
    ]
    for image in images:
        content.append({
            "type": "image_url",
            "image_url": {
                "url": f"data:image/png;base64,{_image_to_base64(image)}",
                "detail": "high",
            },
        })
    return content


# =============================================================================
# Main Extraction Function
# =============================================================================


async def extract_patch_list(
    images: list[Image.Image] | Image.Image,
    source_file: str,
    client: Any,  # OpenAI client
    model: str = "gpt-4.1",
    use_mock: bool = False,
) -> str:
    """
    Ask the model for the rider's patch list.

    Args:
        images: Rendered PDF pages.
        source_file: Original filename, for logging.
        client: OpenAI client instance.
        model: Model name to use.
        use_mock: If True, return canned text instead of calling OpenAI.

    Returns:
        The raw response text, possibly wrapped in a code fence.

    Raises:
        AIServiceError: If the request fails or returns no text.
    """
    if use_mock:
        logger.info("Extracting patch list (MOCK MODE) for: %s", source_file)
        return MOCK_EXTRACTION_TEXT

    if isinstance(images, Image.Image):
        images = [images]
    if not images:
        raise AIServiceError("No pages to extract from")

    logger.info(
        "Extracting patch list from %d page(s) of '%s' with %s",
        len(images),
        source_file,
        model,
    )

    try:
        response = client.chat.completions.create(
            model=model,
            messages=[
                {"role": "system", "content": EXTRACTION_SYSTEM_PROMPT},
                {"role": "user", "content": build_message_content(images)},
            ],
        )
    except Exception as e:
        logger.exception("Patch list extraction request failed")
        raise AIServiceError(f"Patch list extraction failed: {e}") from e

    if not response.choices:
        raise AIServiceError("Empty response from OpenAI")
    text = response.choices[0].message.content
    if not text:
        raise AIServiceError("Empty response from OpenAI")

    logger.debug("Raw extraction text: %s", text[:500])
    return text
