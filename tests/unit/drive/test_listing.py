"""Unit tests for drive/listing.py — pagination, query and folder lookups."""

from unittest.mock import MagicMock

import pytest

from drive_gallery.drive.client import DriveApiError
from drive_gallery.drive.listing import LIST_FIELDS, FileLister, media_query
from drive_gallery.drive.models import DriveFile, FolderRef

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_lister(page_size: int = 1000) -> tuple[FileLister, MagicMock]:
    """Return (lister, mock_drive_client)."""
    mock_client = MagicMock()
    return FileLister(client=mock_client, page_size=page_size), mock_client


def _raw(id: str, mime: str = "image/jpeg", **extra: object) -> dict:  # type: ignore[type-arg]
    return {"id": id, "name": f"{id}.bin", "mimeType": mime, **extra}


# ---------------------------------------------------------------------------
# Query construction
# ---------------------------------------------------------------------------


class TestListParams:
    def test_query_is_exact(self) -> None:
        assert media_query("F1") == (
            "'F1' in parents and trashed=false"
            " and (mimeType contains 'image/' or mimeType contains 'video/')"
        )

    def test_first_page_params(self) -> None:
        lister, _ = _make_lister()
        params = lister.list_params("F1")
        assert params == {
            "q": media_query("F1"),
            "fields": "files(id,name,mimeType,thumbnailLink,createdTime),nextPageToken",
            "pageSize": "1000",
            "supportsAllDrives": "true",
            "includeItemsFromAllDrives": "true",
        }
        assert LIST_FIELDS == params["fields"]

    def test_page_token_added_on_later_pages(self) -> None:
        lister, _ = _make_lister()
        assert lister.list_params("F1", "tok-2")["pageToken"] == "tok-2"

    def test_page_size_capped_at_api_maximum(self) -> None:
        lister, _ = _make_lister(page_size=5000)
        assert lister.list_params("F1")["pageSize"] == "1000"


# ---------------------------------------------------------------------------
# list_files tests
# ---------------------------------------------------------------------------


class TestListFiles:
    def test_concatenates_all_pages_in_order(self) -> None:
        lister, mock_client = _make_lister()
        mock_client.get.side_effect = [
            {"files": [_raw("a"), _raw("b")], "nextPageToken": "t1"},
            {"files": [_raw("c"), _raw("d")], "nextPageToken": "t2"},
            {"files": [_raw("e"), _raw("f")]},
        ]

        result = lister.list_files("F1")

        assert [f.id for f in result] == ["a", "b", "c", "d", "e", "f"]
        assert mock_client.get.call_count == 3
        tokens = [c.args[1].get("pageToken") for c in mock_client.get.call_args_list]
        assert tokens == [None, "t1", "t2"]
        assert all(c.args[0] == "/files" for c in mock_client.get.call_args_list)

    def test_empty_folder_returns_empty_list(self) -> None:
        lister, mock_client = _make_lister()
        mock_client.get.return_value = {}

        assert lister.list_files("F1") == []
        mock_client.get.assert_called_once()

    def test_empty_page_token_ends_pagination(self) -> None:
        lister, mock_client = _make_lister()
        mock_client.get.return_value = {"files": [_raw("a")], "nextPageToken": ""}

        assert [f.id for f in lister.list_files("F1")] == ["a"]
        mock_client.get.assert_called_once()

    def test_drops_non_media_and_trashed_records(self) -> None:
        lister, mock_client = _make_lister()
        mock_client.get.return_value = {
            "files": [
                _raw("img", "image/png"),
                _raw("doc", "application/pdf"),
                _raw("gone", "video/mp4", trashed=True),
                _raw("vid", "video/mp4"),
                _raw("txt", "text/plain"),
            ]
        }

        result = lister.list_files("F1")

        assert [f.id for f in result] == ["img", "vid"]

    def test_maps_optional_fields(self) -> None:
        lister, mock_client = _make_lister()
        mock_client.get.return_value = {
            "files": [
                _raw(
                    "a",
                    thumbnailLink="https://lh3.googleusercontent.com/x=s220",
                    createdTime="2024-01-01T00:00:00Z",
                ),
            ]
        }

        (record,) = lister.list_files("F1")

        assert record == DriveFile(
            id="a",
            name="a.bin",
            mime_type="image/jpeg",
            thumbnail_link="https://lh3.googleusercontent.com/x=s220",
            created_time="2024-01-01T00:00:00Z",
        )

    def test_error_on_later_page_propagates(self) -> None:
        lister, mock_client = _make_lister()
        mock_client.get.side_effect = [
            {"files": [_raw("a")], "nextPageToken": "t1"},
            DriveApiError(500, "https://www.googleapis.com/drive/v3/files", "backend error"),
        ]

        with pytest.raises(DriveApiError) as exc_info:
            lister.list_files("F1")

        assert exc_info.value.status_code == 500


# ---------------------------------------------------------------------------
# resolve_folder tests
# ---------------------------------------------------------------------------


class TestResolveFolder:
    def test_named_folder_is_returned_without_request(self) -> None:
        lister, mock_client = _make_lister()
        ref = FolderRef(id="F1", name="Holidays")

        assert lister.resolve_folder(ref) is ref
        mock_client.get.assert_not_called()

    def test_fetches_missing_name(self) -> None:
        lister, mock_client = _make_lister()
        mock_client.get.return_value = {"id": "F1", "name": "Holidays"}

        result = lister.resolve_folder(FolderRef(id="F1"))

        assert result == FolderRef(id="F1", name="Holidays")
        mock_client.get.assert_called_once_with(
            "/files/F1", {"fields": "id,name", "supportsAllDrives": "true"}
        )

    def test_lookup_failure_names_the_folder(self) -> None:
        lister, mock_client = _make_lister()
        mock_client.get.side_effect = DriveApiError(404, "https://x/files/F9", "not found")

        with pytest.raises(DriveApiError) as exc_info:
            lister.resolve_folder(FolderRef(id="F9"))

        assert exc_info.value.status_code == 404
        assert "F9" in str(exc_info.value)
        assert "not found" in str(exc_info.value)
