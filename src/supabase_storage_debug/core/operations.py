"""Storage operations driven by the menu and the one-shot commands.

Each public function takes the DiagnosticSession first, prints its progress to
the session console and returns an OperationResult. Nothing raises past this
module: API errors are reported with a hint, anything else is logged and
reported as an unexpected failure.
"""

import functools
import logging
import time
from pathlib import Path, PurePosixPath
from typing import Optional, Union

from rich.markup import escape

from .config import ENV_ANON_KEY, ENV_SERVICE_KEY, ENV_SUPABASE_URL
from .exceptions import LocalFileError, StorageApiError, ValidationError
from .hints import get_error_hint
from .models import (
    Bucket,
    DiagnosticsReport,
    ErrorKind,
    OperationResult,
    ProbeResult,
)
from .payloads import (
    DEFAULT_UPLOAD_PATH_PREFIX,
    TEST_FILENAMES,
    default_storage_path,
    format_bytes,
    guess_content_type,
    prepare_test_file,
    remove_temp_dir,
)
from .session import DiagnosticSession

logger = logging.getLogger(__name__)

LIST_PAGE_SIZE = 100
DIAGNOSTICS_TEST_PATH = f"{DEFAULT_UPLOAD_PATH_PREFIX}/diagnostics-rw-test.txt"
MISSING_OBJECT_NAME = "nonexistent-test-file.txt"
FALLBACK_BUCKET = "test-bucket"
NO_SESSION_MESSAGE = "Auth session missing!"
NO_SESSION_INFO = "No active user session (normal for service key or unauthenticated anon key)."
CORS_TIP = "Verify CORS settings in Supabase Dashboard: Project Settings > API > Storage."


def operation_boundary(label: str):
    """Turn any unexpected exception into an UNEXPECTED failure."""

    def decorator(func):
        @functools.wraps(func)
        def wrapper(session: DiagnosticSession, *args, **kwargs) -> OperationResult:
            try:
                return func(session, *args, **kwargs)
            except Exception as e:
                logger.exception(f"Unexpected error {label}")
                session.console.error(f"Unexpected error {label}: {e}")
                return OperationResult.failure(ErrorKind.UNEXPECTED, str(e))

        return wrapper

    return decorator


def require(value: Optional[str], field: str, message: str) -> str:
    """Return the stripped value or raise ValidationError when empty."""
    value = (value or "").strip()
    if not value:
        raise ValidationError(field, value, message)
    return value


def resolve_local_file(local_path: Optional[str]) -> Path:
    """Resolve a user-supplied path to an existing regular file."""
    raw = (local_path or "").strip()
    path = Path(raw).expanduser()
    if not raw or not path.is_file():
        raise ValidationError("local_path", raw, f"File not found or path invalid: {raw}")
    return path


def invalid_input(session: DiagnosticSession, error: ValidationError) -> OperationResult:
    session.console.error(error.message)
    return OperationResult.failure(ErrorKind.VALIDATION, error.message)


def _api_failure(session: DiagnosticSession, label: str, error: StorageApiError) -> OperationResult:
    session.console.error(f"{label}: {error.message}")
    session.console.tip(get_error_hint(error))
    return OperationResult.failure(ErrorKind.API, error.message)


def _join_path(prefix: str, name: str) -> str:
    return f"{prefix}/{name}" if prefix else name


def report_public_url(session: DiagnosticSession, bucket: str, path: str) -> Optional[ProbeResult]:
    """Build an object's public URL and probe it.

    An unreachable URL is only a warning: private buckets are a legitimate
    setup.

    Returns:
        The probe result, or None when no URL could be built
    """
    console = session.console
    try:
        public_url = session.client.get_public_url(bucket, path)
    except StorageApiError as e:
        console.warn(f"Could not retrieve public URL: {e.message}")
        return None

    if not public_url:
        console.warn("Could not retrieve public URL. Bucket might be private or an issue occurred.")
        return None

    console.info(f"Public URL: {public_url}")
    console.info("Checking public URL accessibility...")
    result = session.prober.check(public_url)
    if result.accessible:
        console.success(f"Public URL accessible (Status: {result.status_code}).")
    else:
        console.warn(
            f"Public URL check returned Status {result.status_code} "
            f"(Error: {result.error or 'N/A'}). May indicate RLS, CORS, or private bucket issue."
        )
    return result


@operation_boundary("during upload")
def upload_file(
    session: DiagnosticSession,
    bucket: str,
    path: str,
    source: Union[str, Path, bytes],
    content_type: str,
    size: int,
) -> OperationResult:
    """Upload a file or buffer, then check its public URL.

    Args:
        session: Diagnostic session
        bucket: Target bucket
        path: Destination path inside the bucket
        source: Local file path or in-memory bytes
        content_type: MIME type to store
        size: Size in bytes, for display only

    Returns:
        Success carrying the stored path, or a failure
    """
    try:
        bucket = require(bucket, "bucket", "Bucket name required.")
        path = require(path, "path", "Storage path required.")
    except ValidationError as e:
        return invalid_input(session, e)

    console = session.console
    console.info(f"Attempting upload: {bucket}/{path} ({format_bytes(size)}) Type: {content_type}")
    start_time = time.monotonic()
    try:
        stored_path = session.client.upload(bucket, path, source, content_type)
    except StorageApiError as e:
        return _api_failure(session, "Upload FAILED", e)
    except LocalFileError as e:
        console.error(e.message)
        return OperationResult.failure(ErrorKind.LOCAL, e.message)

    duration_ms = int((time.monotonic() - start_time) * 1000)
    console.success(f"Upload SUCCEEDED in {duration_ms}ms. Path: {stored_path}")
    report_public_url(session, bucket, path)
    return OperationResult.success(stored_path)


@operation_boundary("during generated upload")
def upload_generated_file(
    session: DiagnosticSession,
    bucket: str,
    kind: str = "text",
    path: Optional[str] = None,
) -> OperationResult:
    """Generate a throwaway text or PNG payload and upload it.

    The local payload is deleted afterwards whatever the upload outcome.
    """
    try:
        bucket = require(bucket, "bucket", "Bucket name required.")
        test_file = prepare_test_file(kind, session.temp_dir)
    except ValidationError as e:
        return invalid_input(session, e)
    except LocalFileError as e:
        session.console.error(e.message)
        return OperationResult.failure(ErrorKind.LOCAL, e.message)

    storage_path = (path or "").strip() or default_storage_path(kind, TEST_FILENAMES[kind])
    try:
        return upload_file(
            session,
            bucket,
            storage_path,
            test_file.path,
            test_file.content_type,
            test_file.size,
        )
    finally:
        try:
            test_file.path.unlink()
            session.console.info(f"Cleaned up local test file: {test_file.path}")
        except OSError as e:
            session.console.warn(f"Failed to cleanup local test file: {e}")


@operation_boundary("during custom upload")
def upload_local_file(
    session: DiagnosticSession,
    local_path: str,
    bucket: str,
    content_type: Optional[str] = None,
    path: Optional[str] = None,
) -> OperationResult:
    """Upload an existing local file.

    The content type is guessed from the extension unless given.
    """
    try:
        file_path = resolve_local_file(local_path)
        bucket = require(bucket, "bucket", "Bucket name required.")
    except ValidationError as e:
        return invalid_input(session, e)

    content_type = (content_type or "").strip() or guess_content_type(file_path)
    storage_path = (path or "").strip() or default_storage_path("custom", file_path.name)
    return upload_file(
        session,
        bucket,
        storage_path,
        file_path,
        content_type,
        file_path.stat().st_size,
    )


@operation_boundary("during download")
def download_file(session: DiagnosticSession, bucket: str, path: str) -> OperationResult:
    """Download an object into the temp directory, then probe its public URL.

    The public URL probe runs even when the download fails; the two answer
    different questions.

    Returns:
        Success carrying the local inspection path, or the download failure
    """
    try:
        bucket = require(bucket, "bucket", "Bucket name required.")
        path = require(path, "path", "File path required.")
    except ValidationError as e:
        return invalid_input(session, e)

    console = session.console
    console.info(f"1. Attempting download via Supabase client: {bucket}/{path}")
    start_time = time.monotonic()
    try:
        data = session.client.download(bucket, path)
    except StorageApiError as e:
        result = _api_failure(session, "Download FAILED", e)
    else:
        duration_ms = int((time.monotonic() - start_time) * 1000)
        console.success(
            f"Download SUCCEEDED in {duration_ms}ms. Size: {format_bytes(len(data))}, "
            f"Type: {guess_content_type(path)}"
        )
        local_copy = session.temp_dir / f"download_{PurePosixPath(path).name}"
        try:
            session.temp_dir.mkdir(parents=True, exist_ok=True)
            local_copy.write_bytes(data)
        except OSError as e:
            console.warn(f"Could not save downloaded file locally: {e}")
            result = OperationResult.success(None)
        else:
            console.info(f"File saved locally to: {local_copy} (for inspection)")
            result = OperationResult.success(local_copy)

    console.info("2. Checking public URL accessibility (if any):")
    report_public_url(session, bucket, path)
    return result


def _print_bucket(session: DiagnosticSession, bucket: Bucket) -> None:
    console = session.console
    public = "[green]Yes[/green]" if bucket.public else "[yellow]No[/yellow]"
    created = bucket.created_at.strftime("%Y-%m-%d %H:%M:%S") if bucket.created_at else "N/A"
    size_limit = format_bytes(bucket.file_size_limit) if bucket.file_size_limit else "N/A"
    mime_types = ", ".join(bucket.allowed_mime_types) if bucket.allowed_mime_types else "Any"

    console.print(f"[bold]- Name: {escape(bucket.name)}[/bold]")
    console.print(f"  ID: {escape(bucket.id)}")
    console.print(f"  Public: {public}")
    console.print(f"  Created: {created}")
    console.print(f"  File Size Limit: {size_limit}")
    console.print(f"  Allowed MIME Types: {escape(mime_types)}")
    console.print()


@operation_boundary("listing buckets")
def list_buckets(session: DiagnosticSession) -> OperationResult:
    """Print every bucket. An empty project is a warning, not a failure."""
    try:
        buckets = session.client.list_buckets()
    except StorageApiError as e:
        return _api_failure(session, "Failed to list buckets", e)

    if not buckets:
        session.console.warn("No buckets found. Create buckets in your Supabase dashboard.")
        return OperationResult.success([])

    session.console.success(f"Found {len(buckets)} buckets:")
    session.console.print()
    for bucket in buckets:
        _print_bucket(session, bucket)
    return OperationResult.success(buckets)


@operation_boundary("listing files")
def list_files(session: DiagnosticSession, bucket: str, prefix: str = "") -> OperationResult:
    """Print the first page of entries under a prefix.

    Files also get their public URL printed; it is not probed here.
    """
    try:
        bucket = require(bucket, "bucket", "Bucket name required.")
    except ValidationError as e:
        return invalid_input(session, e)

    console = session.console
    prefix = (prefix or "").strip().strip("/")
    console.info(f"Listing files in '{bucket}' (prefix: '{prefix or '/'}')...")
    try:
        entries = session.client.list_objects(bucket, prefix, limit=LIST_PAGE_SIZE, offset=0)
    except StorageApiError as e:
        return _api_failure(session, "Failed to list files", e)

    if not entries:
        console.warn("No files or folders found at this location.")
        return OperationResult.success([])

    console.success(f"Found {len(entries)} items:")
    console.print()
    for entry in entries:
        name = escape(entry.name)
        if entry.is_directory:
            console.print(f"📁 {name} [dim](Directory)[/dim]")
            continue

        console.print(
            f"📄 {name} [dim]({format_bytes(entry.size)}, MIME: {escape(entry.mime_type)})[/dim]"
        )
        try:
            public_url = session.client.get_public_url(bucket, _join_path(prefix, entry.name))
        except StorageApiError as e:
            console.warn(f"Could not retrieve public URL for {entry.name}: {e.message}")
            continue
        if public_url:
            console.print(f"   [cyan]URL: {escape(public_url)}[/cyan]")
    return OperationResult.success(entries)


@operation_boundary("during connectivity test")
def check_connectivity(session: DiagnosticSession) -> OperationResult:
    """Client, auth session, storage API and public endpoint checks, in order."""
    console = session.console

    console.info("1. Basic Supabase Client & Auth Status:")
    if session.client is None:
        console.error("Supabase client instance MISSING.")
        return OperationResult.failure(ErrorKind.UNEXPECTED, "Supabase client instance missing")
    console.success("Supabase client instance exists.")

    try:
        user = session.client.get_current_user()
    except StorageApiError as e:
        # Service and anon keys have no auth session; that error is expected
        if e.message == NO_SESSION_MESSAGE:
            console.info(NO_SESSION_INFO)
        else:
            console.warn(f"Auth check warning: {e.message}")
    else:
        if user:
            console.success(
                f"Authenticated as user: {getattr(user, 'id', 'unknown')} "
                f"({getattr(user, 'role', None) or 'no role'})"
            )
        else:
            console.info(NO_SESSION_INFO)

    console.info("2. Storage API Test (Listing Buckets):")
    storage_error = None
    try:
        buckets = session.client.list_buckets()
    except StorageApiError as e:
        storage_error = e
        console.error(f"Storage API test FAILED: {e.message}")
        console.tip(get_error_hint(e))
    else:
        console.success(f"Storage API accessible. Found {len(buckets)} buckets.")

    console.info("3. CORS Check (Public Storage Endpoint):")
    probe = session.prober.check(session.config.storage_public_base)
    # 400 means the endpoint answered but refuses to list the bare public path
    if probe.accessible or probe.status_code == 400:
        console.success(f"Storage public endpoint seems accessible (Status: {probe.status_code}).")
    else:
        console.warn(
            f"Storage public endpoint check (Status: {probe.status_code}, "
            f"Error: {probe.error or 'N/A'}). Possible CORS issue."
        )
        console.tip(CORS_TIP)

    if storage_error is not None:
        return OperationResult.failure(ErrorKind.API, storage_error.message)
    return OperationResult.success(probe)


def _print_environment_status(session: DiagnosticSession) -> None:
    config = session.config
    console = session.console

    def flag(is_set: bool, missing_style: str = "yellow", detail: str = "") -> str:
        if is_set:
            return f"[green]SET{escape(detail)}[/green]"
        return f"[{missing_style}]NOT SET[/{missing_style}]"

    if config.service_key_set:
        using_key = "Service Role (Optimal)"
    elif config.anon_key_set:
        using_key = "Anon Key (Limited)"
    else:
        using_key = "NONE (Critical!)"

    console.print(
        f"   {ENV_SUPABASE_URL}: "
        f"{flag(bool(config.service_url), 'red', f' ({config.service_url})')}"
    )
    console.print(f"   {ENV_SERVICE_KEY}: {flag(config.service_key_set)}")
    console.print(f"   {ENV_ANON_KEY}: {flag(config.anon_key_set)}")
    console.print(f"   Using Key: {using_key}")
    if session.client is not None:
        console.success("Supabase client: Initialized.")
    else:
        console.error("Supabase client: NOT Initialized.")


def _run_round_trip(session: DiagnosticSession, bucket: str, report: DiagnosticsReport) -> None:
    """Upload, download and delete one generated file in a bucket."""
    console = session.console
    console.info(f"Using bucket '{bucket}' for R/W test.")
    try:
        test_file = prepare_test_file("text", session.temp_dir)
    except LocalFileError as e:
        logger.error(e.message)
        console.error("Could not prepare test file for R/W diagnostics.")
        return

    try:
        upload = upload_file(
            session,
            bucket,
            DIAGNOSTICS_TEST_PATH,
            test_file.path,
            test_file.content_type,
            test_file.size,
        )
        report.upload_ok = upload.ok
        if not upload.ok:
            console.error(f"Upload portion of R/W test failed for bucket '{bucket}'.")
            return

        console.info(f"Attempting to download test file: {bucket}/{DIAGNOSTICS_TEST_PATH}")
        try:
            session.client.download(bucket, DIAGNOSTICS_TEST_PATH)
        except StorageApiError as e:
            report.download_ok = False
            console.error(f"Download test: FAILED ({e.message})")
        else:
            report.download_ok = True
            console.success("Download test: OK")

        console.info(f"Attempting to delete test file: {bucket}/{DIAGNOSTICS_TEST_PATH}")
        try:
            session.client.remove(bucket, [DIAGNOSTICS_TEST_PATH])
        except StorageApiError as e:
            report.delete_ok = False
            console.warn(f"Delete test: FAILED ({e.message}). Manual cleanup may be needed.")
        else:
            report.delete_ok = True
            console.success("Delete test: OK")
    finally:
        try:
            test_file.path.unlink()
        except OSError as e:
            logger.debug(f"Could not remove {test_file.path}: {e}")


@operation_boundary("during full diagnostics")
def run_full_diagnostics(session: DiagnosticSession) -> OperationResult:
    """Environment, per-bucket listing, R/W round trip and public URL checks.

    Buckets are checked one at a time so the output order is stable.

    Returns:
        Success carrying a DiagnosticsReport
    """
    console = session.console
    report = DiagnosticsReport()

    console.section("1. Environment & Client Status")
    _print_environment_status(session)

    console.section("2. Bucket Overview & Basic Permissions")
    buckets = []
    try:
        buckets = session.client.list_buckets()
    except StorageApiError as e:
        console.error(f"Bucket listing failed: {e.message}")
    else:
        report.bucket_count = len(buckets)
        if not buckets:
            console.warn("No buckets found.")
        else:
            console.success(f"Found {len(buckets)} buckets. Testing basic ops:")
        for bucket in buckets:
            console.print(
                f"   - Bucket: [bold]{escape(bucket.name)}[/bold] "
                f"(Public: {'Yes' if bucket.public else 'No'})"
            )
            try:
                entries = session.client.list_objects(bucket.name, "", limit=1)
            except StorageApiError as e:
                report.bucket_listing[bucket.name] = False
                console.warn(f"List files in '{bucket.name}': FAILED ({e.message})")
            else:
                report.bucket_listing[bucket.name] = True
                console.success(f"List files in '{bucket.name}': OK ({len(entries)} items at root)")

    console.section("3. Storage Upload/Download Permission Test (using first available bucket)")
    target_bucket = buckets[0].name if buckets else None
    report.rw_bucket = target_bucket
    if target_bucket:
        _run_round_trip(session, target_bucket, report)
    else:
        console.warn("No buckets available to perform R/W permission test.")

    console.section("4. CORS/Public URL Check")
    sample_url = (
        f"{session.config.storage_public_base}{target_bucket or FALLBACK_BUCKET}/{MISSING_OBJECT_NAME}"
    )
    console.info(f"Pinging sample public URL: {sample_url}")
    probe = session.prober.check(sample_url)
    report.public_probe = probe
    # The object does not exist, so 404 is the healthy answer
    if probe.status_code == 404:
        console.success("Public URL endpoint seems responsive (expected 404 for test file).")
    elif probe.status_code > 0:
        console.warn(
            f"Public URL endpoint check returned status {probe.status_code}. "
            "Might indicate CORS/config issues."
        )
    else:
        console.error(
            f"Public URL endpoint check FAILED (Error: {probe.error or 'Unknown'}). "
            "Likely CORS or network issue."
        )
    console.tip(
        "Ensure your Supabase project's CORS settings (Dashboard > Project Settings > API > Storage) "
        "include your origin or '*' for testing."
    )

    return OperationResult.success(report)


def cleanup_temp_dir(session: DiagnosticSession) -> OperationResult:
    """Remove the temp directory. Failure is only a warning."""
    try:
        removed = remove_temp_dir(session.temp_dir)
    except OSError as e:
        session.console.warn(f"Could not fully clean up temp directory {session.temp_dir}: {e}")
        return OperationResult.failure(ErrorKind.LOCAL, str(e))
    if removed:
        session.console.info("Temporary directory cleaned up.")
    return OperationResult.success(removed)
