"""Local payloads: generated test files, MIME guessing and the temp directory."""

import base64
import logging
import shutil
from datetime import datetime, timezone
from pathlib import Path
from typing import Union

from .exceptions import LocalFileError, ValidationError
from .models import LocalTestFile

logger = logging.getLogger(__name__)

DEFAULT_TEMP_DIR = "supabase-debug-temp"
DEFAULT_UPLOAD_PATH_PREFIX = "supabase-debug-tool"
TEST_TEXT_FILENAME = "debug-text.txt"
TEST_IMAGE_FILENAME = "debug-image.png"

# 1x1 transparent PNG
TEST_IMAGE_BASE64 = (
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAQAAAC1HAwCAAAAC0lEQVR42mNkYAAAAAYAAjCB0C8AAAAASUVORK5CYII="
)

DEFAULT_MIME_TYPE = "application/octet-stream"
MIME_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
    ".pdf": "application/pdf",
    ".txt": "text/plain",
    ".html": "text/html",
    ".json": "application/json",
}

TEST_FILENAMES = {
    "text": TEST_TEXT_FILENAME,
    "image": TEST_IMAGE_FILENAME,
}
PAYLOAD_KINDS = tuple(TEST_FILENAMES)


def guess_content_type(file_path: Union[str, Path]) -> str:
    """Guess a MIME type from the file extension."""
    return MIME_TYPES.get(Path(file_path).suffix.lower(), DEFAULT_MIME_TYPE)


def format_bytes(num_bytes: int, decimals: int = 2) -> str:
    """Human-readable size, e.g. 1536 -> '1.5 KB'."""
    if not num_bytes or num_bytes <= 0:
        return "0 Bytes"

    sizes = ["Bytes", "KB", "MB", "GB", "TB"]
    index = 0
    value = float(num_bytes)
    while value >= 1024 and index < len(sizes) - 1:
        value /= 1024
        index += 1

    decimals = max(decimals, 0)
    formatted = f"{value:.{decimals}f}"
    if "." in formatted:
        formatted = formatted.rstrip("0").rstrip(".")
    return f"{formatted} {sizes[index]}"


def default_storage_path(category: str, filename: str) -> str:
    """Default destination for uploads made by this tool."""
    return f"{DEFAULT_UPLOAD_PATH_PREFIX}/{category}/{filename}"


def prepare_test_file(kind: str, temp_dir: Union[str, Path]) -> LocalTestFile:
    """Write a fresh throwaway payload into the temp directory.

    Args:
        kind: "text" for a timestamped text file, "image" for a 1x1 PNG
        temp_dir: Directory to write into (created if missing)

    Returns:
        The generated file with its content type and size

    Raises:
        ValidationError: Unknown payload kind
        LocalFileError: The file could not be written
    """
    if kind not in PAYLOAD_KINDS:
        raise ValidationError("kind", kind, f"Unknown test file type: {kind}")

    temp_dir = Path(temp_dir)
    file_path = temp_dir / TEST_FILENAMES[kind]
    if kind == "text":
        timestamp = datetime.now(timezone.utc).isoformat()
        content = f"Supabase Storage Debug Tool: Test file generated at {timestamp}".encode("utf-8")
        content_type = "text/plain"
    else:
        content = base64.b64decode(TEST_IMAGE_BASE64)
        content_type = "image/png"

    try:
        temp_dir.mkdir(parents=True, exist_ok=True)
        file_path.write_bytes(content)
    except OSError as e:
        raise LocalFileError(f"Failed to prepare test {kind} file: {e}", str(file_path)) from e

    logger.debug(f"Prepared {kind} payload at {file_path} ({len(content)} bytes)")
    return LocalTestFile(path=file_path, content_type=content_type, size=len(content))


def remove_temp_dir(temp_dir: Union[str, Path]) -> bool:
    """Recursively remove the temp directory.

    Returns:
        True if something was removed, False if it did not exist

    Raises:
        OSError: Removal failed part way
    """
    temp_dir = Path(temp_dir)
    if not temp_dir.exists():
        return False
    shutil.rmtree(temp_dir)
    return True
