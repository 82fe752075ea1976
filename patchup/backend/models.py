"""
Pydantic models for the patch list extraction pipeline.

Defines the canonical patch entry type and the request/response
payloads of the HTTP API.
"""

import json
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

ENTRY_FIELDS = ("channelNumber", "micOrDi", "patchName", "commentsOrStand")


class PatchEntry(BaseModel):
    """
    One row of a technical patch list.

    Field names on the wire follow the extraction prompt (camelCase);
    Python attributes are snake_case.

    Attributes:
        channel_number: Console channel, as a string or number.
        mic_or_di: Microphone model or DI box.
        patch_name: Source being patched (e.g. "Kick In").
        comments_or_stand: Stand type or free-text comments.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    channel_number: str | int | float | None = Field(
        ...,
        alias="channelNumber",
        description="Console channel number",
        examples=[1, "1a"],
    )
    mic_or_di: str | None = Field(
        ...,
        alias="micOrDi",
        description="Microphone or DI used on the channel",
        examples=["SM58", "DI"],
    )
    patch_name: str | None = Field(
        ...,
        alias="patchName",
        description="Name of the patched source",
        examples=["Kick", "Snare Top"],
    )
    comments_or_stand: str | None = Field(
        ...,
        alias="commentsOrStand",
        description="Stand type or comments",
        examples=["short boom"],
    )

    @field_validator("channel_number", mode="before")
    @classmethod
    def channel_to_scalar(cls, v: Any) -> Any:
        """Booleans and nested values become their JSON text."""
        if isinstance(v, (bool, dict, list)):
            return json.dumps(v)
        return v

    @field_validator("mic_or_di", "patch_name", "comments_or_stand", mode="before")
    @classmethod
    def cell_to_text(cls, v: Any) -> Any:
        """Render non-string cells the way they appeared in JSON."""
        if isinstance(v, (bool, int, float, dict, list)):
            return json.dumps(v)
        return v

    @property
    def document_id(self) -> str:
        """Identifier of this entry within its artist's collection."""
        if isinstance(self.channel_number, str):
            return self.channel_number
        return json.dumps(self.channel_number)

    def to_document(self) -> dict[str, Any]:
        """Serialize with wire field names."""
        return self.model_dump(by_alias=True)


# =============================================================================
# API Response Models
# =============================================================================


class HealthResponse(BaseModel):
    """Response model for health check endpoints."""

    status: str = Field(..., description="Service health status")
    message: str = Field(..., description="Status message")
    version: str = Field(default="1.0.0", description="API version")


class UploadResponse(BaseModel):
    """Response model for a processed tech rider upload."""

    model_config = ConfigDict(populate_by_name=True)

    message: str = Field(..., description="Status message")
    upload_confirmation: str = Field(
        ...,
        alias="uploadConfirmation",
        description="Upload status message",
    )
    main_artist: str = Field(..., alias="mainArtist", description="Artist named on the rider")
    storage_key: str = Field(
        ...,
        alias="storageKey",
        description="Collection the entries were stored under",
    )
    entries: list[PatchEntry] = Field(
        default_factory=list,
        description="Valid patch list entries",
    )
    instruments_and_backlines: list[Any] | None = Field(
        default=None,
        alias="instrumentsAndBacklines",
        description="Backline list, when the rider contains one",
    )
    excluded_count: int = Field(
        default=0,
        ge=0,
        alias="excludedCount",
        description="Rows dropped for missing fields",
    )
    saved_count: int = Field(
        default=0,
        ge=0,
        alias="savedCount",
        description="Documents written to the store",
    )


class PatchListResponse(BaseModel):
    """Stored patch list for one artist."""

    model_config = ConfigDict(populate_by_name=True)

    storage_key: str = Field(..., alias="storageKey", description="Artist storage key")
    entries: list[PatchEntry] = Field(
        default_factory=list,
        description="Stored entries ordered by channel",
    )
