"""Tests for Pydantic models."""

import pytest
from pydantic import ValidationError

from patchup.backend.models import PatchEntry, UploadResponse


class TestPatchEntry:
    """Tests for PatchEntry model."""

    def test_from_wire_names(self):
        """Test creating an entry from camelCase keys."""
        entry = PatchEntry.model_validate(
            {
                "channelNumber": 4,
                "micOrDi": "e604",
                "patchName": "Tom 1",
                "commentsOrStand": "clip",
            }
        )
        assert entry.channel_number == 4
        assert entry.mic_or_di == "e604"
        assert entry.patch_name == "Tom 1"
        assert entry.comments_or_stand == "clip"

    def test_from_python_names(self):
        """Test that snake_case names are also accepted."""
        entry = PatchEntry(
            channel_number="1a",
            mic_or_di="DI",
            patch_name="Keys L",
            comments_or_stand="",
        )
        assert entry.channel_number == "1a"

    def test_to_document_uses_wire_names(self):
        """Test serialization back to camelCase."""
        entry = PatchEntry(
            channel_number=1,
            mic_or_di="SM58",
            patch_name="Vox",
            comments_or_stand="tall boom",
        )
        assert entry.to_document() == {
            "channelNumber": 1,
            "micOrDi": "SM58",
            "patchName": "Vox",
            "commentsOrStand": "tall boom",
        }

    @pytest.mark.parametrize(
        "channel, expected",
        [(1, "1"), ("01", "01"), (2.5, "2.5"), (None, "null"), (0, "0"), ("", "")],
    )
    def test_document_id(self, channel, expected):
        """Test the document id derived from the channel number."""
        entry = PatchEntry(
            channel_number=channel,
            mic_or_di="DI",
            patch_name="Bass",
            comments_or_stand="",
        )
        assert entry.document_id == expected

    def test_numeric_cells_become_text(self):
        """Test that numbers in text columns are kept as their JSON text."""
        entry = PatchEntry.model_validate(
            {
                "channelNumber": 1,
                "micOrDi": 57,
                "patchName": 1.5,
                "commentsOrStand": True,
            }
        )
        assert entry.mic_or_di == "57"
        assert entry.patch_name == "1.5"
        assert entry.comments_or_stand == "true"

    def test_nested_values_become_text(self):
        """Test that nested cells are stored as their JSON text."""
        entry = PatchEntry.model_validate(
            {
                "channelNumber": [1, 2],
                "micOrDi": "DI",
                "patchName": "Bass",
                "commentsOrStand": {"stand": "none"},
            }
        )
        assert entry.channel_number == "[1, 2]"
        assert entry.comments_or_stand == '{"stand": "none"}'
        assert entry.document_id == "[1, 2]"

    def test_missing_field_rejected(self):
        """Test that every column is required."""
        with pytest.raises(ValidationError):
            PatchEntry.model_validate({"channelNumber": 1, "micOrDi": "DI"})

    def test_entries_are_immutable(self):
        """Test that entries cannot be changed after creation."""
        entry = PatchEntry(
            channel_number=1,
            mic_or_di="DI",
            patch_name="Bass",
            comments_or_stand="",
        )
        with pytest.raises(ValidationError):
            entry.patch_name = "Keys"


class TestUploadResponse:
    """Tests for UploadResponse model."""

    def test_serializes_with_aliases(self):
        """Test the response body uses camelCase keys."""
        response = UploadResponse(
            message="ok",
            upload_confirmation="File Upload successful.",
            main_artist="Band",
            storage_key="Band",
            entries=[],
            saved_count=0,
        )
        body = response.model_dump(by_alias=True)
        assert body["uploadConfirmation"] == "File Upload successful."
        assert body["mainArtist"] == "Band"
        assert body["storageKey"] == "Band"
        assert body["excludedCount"] == 0
        assert body["instrumentsAndBacklines"] is None

    def test_negative_counts_rejected(self):
        """Test count fields must be non-negative."""
        with pytest.raises(ValidationError):
            UploadResponse(
                message="ok",
                upload_confirmation="ok",
                main_artist="Band",
                storage_key="Band",
                excluded_count=-1,
            )
