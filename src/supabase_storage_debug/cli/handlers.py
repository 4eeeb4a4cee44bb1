"""Interactive menu handlers.

Each handler prompts for what it needs, then calls into the core operations.
All share the signature ``(session) -> OperationResult``.
"""

from rich.markup import escape

from ..core.exceptions import ValidationError
from ..core.models import OperationResult
from ..core.operations import (
    check_connectivity,
    cleanup_temp_dir,
    download_file,
    invalid_input,
    list_buckets,
    list_files,
    require,
    resolve_local_file,
    run_full_diagnostics,
    upload_generated_file,
    upload_local_file,
)
from ..core.payloads import TEST_FILENAMES, default_storage_path, guess_content_type
from ..core.session import DiagnosticSession


def _start(session: DiagnosticSession, title: str) -> None:
    session.console.clear()
    session.console.header(title)


def _ask_required(session: DiagnosticSession, question: str, field: str, message: str) -> str:
    return require(session.ask(question), field, message)


def handle_connectivity(session: DiagnosticSession) -> OperationResult:
    _start(session, "CONNECTION & CONFIGURATION TEST")
    return check_connectivity(session)


def handle_list_buckets(session: DiagnosticSession) -> OperationResult:
    _start(session, "STORAGE BUCKETS LIST")
    return list_buckets(session)


def _handle_generated_upload(session: DiagnosticSession, kind: str) -> OperationResult:
    _start(session, f"GENERATED {kind.upper()} FILE UPLOAD")
    try:
        bucket = _ask_required(session, "Enter bucket name:", "bucket", "Bucket name required.")
    except ValidationError as e:
        return invalid_input(session, e)

    default_path = default_storage_path(kind, TEST_FILENAMES[kind])
    path = session.ask(f"Enter storage path (default: {escape(default_path)}):")
    return upload_generated_file(session, bucket, kind, path or default_path)


def handle_upload_text(session: DiagnosticSession) -> OperationResult:
    return _handle_generated_upload(session, "text")


def handle_upload_image(session: DiagnosticSession) -> OperationResult:
    return _handle_generated_upload(session, "image")


def handle_upload_custom(session: DiagnosticSession) -> OperationResult:
    """Upload a local file, asking for content type and destination."""
    _start(session, "CUSTOM FILE UPLOAD")
    try:
        file_path = resolve_local_file(session.ask("Enter FULL local file path:"))
        bucket = _ask_required(session, "Enter bucket name:", "bucket", "Bucket name required.")
    except ValidationError as e:
        return invalid_input(session, e)

    guessed = guess_content_type(file_path)
    content_type = session.ask(f"Enter content type (guessed: {guessed}):") or guessed

    default_path = default_storage_path("custom", file_path.name)
    path = session.ask(f"Enter storage path (default: {escape(default_path)}):") or default_path
    return upload_local_file(session, str(file_path), bucket, content_type, path)


def handle_list_files(session: DiagnosticSession) -> OperationResult:
    _start(session, "LIST FILES IN BUCKET")
    try:
        bucket = _ask_required(session, "Enter bucket name:", "bucket", "Bucket name required.")
    except ValidationError as e:
        return invalid_input(session, e)

    prefix = session.ask("Enter path prefix (optional, e.g., 'folder/subfolder'):")
    return list_files(session, bucket, prefix)


def handle_download(session: DiagnosticSession) -> OperationResult:
    _start(session, "DOWNLOAD TEST")
    try:
        bucket = _ask_required(session, "Enter bucket name:", "bucket", "Bucket name required.")
        path = _ask_required(
            session, "Enter full file path in bucket:", "path", "File path required."
        )
    except ValidationError as e:
        return invalid_input(session, e)

    return download_file(session, bucket, path)


def handle_full_diagnostics(session: DiagnosticSession) -> OperationResult:
    _start(session, "ADVANCED DIAGNOSTICS")
    return run_full_diagnostics(session)


def handle_exit(session: DiagnosticSession) -> OperationResult:
    session.console.header("Exiting Supabase Storage Debug Tool.")
    return cleanup_temp_dir(session)
