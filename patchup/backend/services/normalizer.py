"""
Normalization of raw AI extraction text into a storage-ready patch list.

Handles:
- Unwrapping markdown code fences around the JSON payload
- Strict JSON parsing
- Required field validation and per-row filtering
- Deriving the artist's storage key

All functions here are synchronous and perform no I/O.
"""

import json
import logging
import re
from typing import Any

from ..models import ENTRY_FIELDS, PatchEntry

logger = logging.getLogger(__name__)

CODE_FENCE_PATTERN = re.compile(r"```json\s*(.*?)\s*```", re.DOTALL)
_WHITESPACE_RUN = re.compile(r"\s+")
_DISALLOWED_KEY_CHARS = re.compile(r"[^A-Za-z0-9_]")


# =============================================================================
# Errors
# =============================================================================


class NormalizationError(Exception):
    """Base class for failures turning AI output into a patch list."""

    kind = "NormalizationError"

    def to_detail(self) -> dict[str, Any]:
        """Serializable description for HTTP error responses."""
        return {"error": self.kind, "message": str(self)}


class ParseError(NormalizationError):
    """Raised when the AI response is not valid JSON."""

    kind = "ParseError"

    def __init__(self, cause: json.JSONDecodeError):
        super().__init__(
            f"Invalid JSON format in extracted data: {cause.msg} "
            f"(line {cause.lineno}, column {cause.colno})"
        )
        self.cause = cause


class ValidationError(NormalizationError):
    """Raised when parsed JSON does not describe a usable patch list."""

    kind = "ValidationError"


class MissingRequiredFieldError(ValidationError):
    """A top-level required field is absent or empty."""

    kind = "MissingRequiredField"

    def __init__(self, fields: list[str]):
        super().__init__(f"Missing required field(s): {', '.join(fields)}")
        self.fields = fields

    def to_detail(self) -> dict[str, Any]:
        detail = super().to_detail()
        detail["fields"] = self.fields
        return detail


class NoValidEntriesError(ValidationError):
    """Every patch list row was missing a required column."""

    kind = "NoValidEntries"

    def __init__(self, excluded_count: int):
        super().__init__(
            f"No valid patch list entries found ({excluded_count} row(s) excluded)"
        )
        self.excluded_count = excluded_count


class EmptyStorageKeyError(ValidationError):
    """The artist name contains no characters usable in a storage key."""

    kind = "EmptyStorageKey"

    def __init__(self, main_artist: str):
        super().__init__(
            f"Artist name {main_artist!r} does not produce a usable storage key"
        )
        self.main_artist = main_artist


# =============================================================================
# Result Types
# =============================================================================


class ValidatedRecord:
    """A parsed record whose required fields and rows have been checked."""

    def __init__(
        self,
        record: dict[str, Any],
        main_artist: str,
        entries: list[PatchEntry],
        excluded_count: int,
    ):
        self.record = record
        self.main_artist = main_artist
        self.entries = entries
        self.excluded_count = excluded_count

    @property
    def instruments_and_backlines(self) -> list[Any] | None:
        value = self.record.get("instruments_and_backlines")
        return value if isinstance(value, list) else None


class NormalizedExtraction:
    """Storage-ready patch list for one artist."""

    def __init__(self, validated: ValidatedRecord, storage_key: str):
        self.main_artist = validated.main_artist
        self.storage_key = storage_key
        self.entries = validated.entries
        self.excluded_count = validated.excluded_count
        self.instruments_and_backlines = validated.instruments_and_backlines

    def to_dict(self) -> dict[str, Any]:
        return {
            "mainArtist": self.main_artist,
            "storageKey": self.storage_key,
            "entries": [entry.to_document() for entry in self.entries],
        }


class NormalizationResult:
    """Outcome of normalize_extraction: either an extraction or an error."""

    def __init__(
        self,
        extraction: NormalizedExtraction | None = None,
        error: NormalizationError | None = None,
    ):
        self.extraction = extraction
        self.error = error

    @property
    def ok(self) -> bool:
        return self.error is None


# =============================================================================
# Pipeline Steps
# =============================================================================


def unwrap_code_fence(text: str) -> str:
    """
    Strip a ```json fenced code block spanning the whole string.

    Text that is not entirely a json-tagged fence is returned unchanged.
    """
    match = CODE_FENCE_PATTERN.fullmatch(text)
    if match and match.group(1):
        return match.group(1)
    return text


def parse_record(text: str) -> Any:
    """
    Parse JSON text without any schema coercion.

    Raises:
        ParseError: If the text is not syntactically valid JSON.
    """
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise ParseError(e) from e


def _read_main_artist(value: Any) -> str | None:
    if isinstance(value, str):
        return value or None
    # Band names like "311" may come back as JSON numbers
    if isinstance(value, (int, float)) and not isinstance(value, bool) and value:
        return str(value)
    return None


def _read_entry(row: Any) -> PatchEntry | None:
    """Build a PatchEntry from a table row, or None if the row is unusable."""
    if not isinstance(row, dict):
        return None
    if any(name not in row for name in ENTRY_FIELDS):
        return None
    return PatchEntry.model_validate({name: row[name] for name in ENTRY_FIELDS})


def validate_record(record: Any) -> ValidatedRecord:
    """
    Check required fields and filter patch list rows.

    Rows missing any entry column are excluded and counted; they do not
    fail validation on their own. Present-but-falsy values such as 0 or
    an empty string are kept.

    Raises:
        MissingRequiredFieldError: main_artist or patch_list_table is absent or empty.
        NoValidEntriesError: No row survived filtering.
    """
    fields = record if isinstance(record, dict) else {}

    main_artist = _read_main_artist(fields.get("main_artist"))
    table = fields.get("patch_list_table")

    missing = []
    if main_artist is None:
        missing.append("main_artist")
    if not table or not isinstance(table, list):
        missing.append("patch_list_table")
    if missing:
        raise MissingRequiredFieldError(missing)

    entries: list[PatchEntry] = []
    excluded_count = 0
    for row in table:
        entry = _read_entry(row)
        if entry is None:
            excluded_count += 1
        else:
            entries.append(entry)

    if not entries:
        raise NoValidEntriesError(excluded_count)

    return ValidatedRecord(
        record=fields,
        main_artist=main_artist,
        entries=entries,
        excluded_count=excluded_count,
    )


def sanitize_storage_key(main_artist: str) -> str:
    """
    Derive a collection name from an artist name.

    Each whitespace run becomes one underscore, then anything outside
    [A-Za-z0-9_] is removed. May return an empty string.
    """
    underscored = _WHITESPACE_RUN.sub("_", main_artist)
    return _DISALLOWED_KEY_CHARS.sub("", underscored)


def normalize_extraction(raw_text: str) -> NormalizationResult:
    """
    Run the full pipeline over raw AI output.

    Never raises NormalizationError; failures are returned on the result.

    Args:
        raw_text: Text returned by the extraction model.

    Returns:
        NormalizationResult holding either the extraction or the error.
    """
    try:
        record = parse_record(unwrap_code_fence(raw_text))
        validated = validate_record(record)

        storage_key = sanitize_storage_key(validated.main_artist)
        if not storage_key:
            raise EmptyStorageKeyError(validated.main_artist)
    except NormalizationError as e:
        logger.warning("Extraction normalization failed (%s): %s", e.kind, e)
        return NormalizationResult(error=e)

    if validated.excluded_count:
        logger.info(
            "Excluded %d patch row(s) with missing fields for '%s'",
            validated.excluded_count,
            storage_key,
        )
    logger.info(
        "Normalized %d patch entries for '%s'",
        len(validated.entries),
        storage_key,
    )
    return NormalizationResult(
        extraction=NormalizedExtraction(validated, storage_key),
    )
