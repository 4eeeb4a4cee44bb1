"""Tests for data models and exceptions."""

from datetime import datetime
from types import SimpleNamespace

from supabase_storage_debug.core.exceptions import StorageApiError, ValidationError
from supabase_storage_debug.core.models import (
    Bucket,
    ErrorKind,
    OperationResult,
    StorageObject,
)


class TestBucket:
    """Tests for Bucket.from_api."""

    def test_from_sdk_object(self):
        raw = SimpleNamespace(
            id="avatars",
            name="avatars",
            public=True,
            created_at="2024-03-01T10:00:00Z",
            file_size_limit=1048576,
            allowed_mime_types=["image/png", "image/jpeg"],
        )

        bucket = Bucket.from_api(raw)

        assert bucket.name == "avatars"
        assert bucket.public is True
        assert isinstance(bucket.created_at, datetime)
        assert bucket.file_size_limit == 1048576
        assert bucket.allowed_mime_types == ["image/png", "image/jpeg"]

    def test_from_dict_with_optional_fields_missing(self):
        bucket = Bucket.from_api({"id": "docs", "name": "docs", "public": False})

        assert bucket.public is False
        assert bucket.created_at is None
        assert bucket.file_size_limit is None
        assert bucket.allowed_mime_types is None

    def test_empty_mime_list_means_any(self):
        bucket = Bucket.from_api({"id": "docs", "name": "docs", "allowed_mime_types": []})
        assert bucket.allowed_mime_types is None


class TestStorageObject:
    """Tests for directory/file classification."""

    def test_entry_without_id_is_directory(self):
        entry = StorageObject.from_api({"name": "folder", "id": None, "metadata": None})
        assert entry.is_directory is True

    def test_entry_with_id_is_file(self):
        entry = StorageObject.from_api(
            {
                "name": "photo.png",
                "id": "0b7c-11ee",
                "metadata": {"size": 2048, "mimetype": "image/png"},
            }
        )

        assert entry.is_directory is False
        assert entry.size == 2048
        assert entry.mime_type == "image/png"

    def test_file_metadata_defaults(self):
        entry = StorageObject.from_api({"name": "blob", "id": "abc"})

        assert entry.is_directory is False
        assert entry.size == 0
        assert entry.mime_type == "N/A"


class TestOperationResult:
    """Tests for result constructors."""

    def test_success(self):
        result = OperationResult.success("a/b.txt")
        assert result.ok is True
        assert result.value == "a/b.txt"
        assert result.kind is None

    def test_failure(self):
        result = OperationResult.failure(ErrorKind.API, "Object not found")
        assert result.ok is False
        assert result.kind == ErrorKind.API
        assert result.message == "Object not found"


class TestExceptions:
    """Tests for exception helpers."""

    def test_from_exception_dict_payload(self):
        error = StorageApiError.from_exception(
            Exception({"statusCode": "404", "error": "not_found", "message": "Object not found"}),
            "download",
        )

        assert error.message == "Object not found"
        assert error.status_code == 404
        assert error.operation == "download"

    def test_from_exception_message_attribute(self):
        class AuthError(Exception):
            def __init__(self, message, status):
                super().__init__(message)
                self.message = message
                self.status = status

        error = StorageApiError.from_exception(AuthError("Auth session missing!", 400))

        assert error.message == "Auth session missing!"
        assert error.status_code == 400

    def test_from_exception_plain(self):
        error = StorageApiError.from_exception(ConnectionError("refused"))
        assert error.message == "ConnectionError: refused"
        assert error.status_code is None

    def test_validation_error_str(self):
        error = ValidationError("bucket", "", "Bucket name required.")
        assert str(error) == "Bucket name required."
        assert error.details == {"field": "bucket", "value": ""}
