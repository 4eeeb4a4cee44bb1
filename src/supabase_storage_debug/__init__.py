"""
Supabase Storage Debug Tool - interactive diagnostics for Supabase Storage.

This package provides:
- Interactive menu and one-shot CLI commands
- Environment and key validation
- Upload/download/list round trips with public URL reachability probes
- Best-effort remediation hints for storage errors
"""

__version__ = "1.0.0"

from .core.client import StorageClient
from .core.config import is_valid_url, validate_environment
from .core.exceptions import (
    ConfigurationError,
    LocalFileError,
    StorageApiError,
    StorageDebugError,
    ValidationError,
)
from .core.hints import get_error_hint
from .core.models import (
    Bucket,
    DiagnosticsReport,
    ErrorKind,
    KeyKind,
    OperationResult,
    ProbeResult,
    SessionConfig,
    StorageObject,
)
from .core.probe import ReachabilityProber, check_url
from .core.session import DiagnosticSession, initialize_session

__all__ = [
    # Session
    "DiagnosticSession",
    "initialize_session",
    "StorageClient",
    "ReachabilityProber",
    "check_url",
    "validate_environment",
    "is_valid_url",
    "get_error_hint",
    # Models
    "Bucket",
    "DiagnosticsReport",
    "ErrorKind",
    "KeyKind",
    "OperationResult",
    "ProbeResult",
    "SessionConfig",
    "StorageObject",
    # Exceptions
    "StorageDebugError",
    "ConfigurationError",
    "LocalFileError",
    "StorageApiError",
    "ValidationError",
    # Metadata
    "__version__",
]
