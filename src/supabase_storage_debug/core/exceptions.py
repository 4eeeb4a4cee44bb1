"""
Exception classes for the Supabase Storage debug tool.

Errors raised inside the core are turned into ``OperationResult`` failures at
the operation boundary, so none of these escape to the menu loop.
"""

from typing import Any, Dict, Optional


class StorageDebugError(Exception):
    """Base exception for all debug tool errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} (Details: {self.details})"
        return self.message


class ConfigurationError(StorageDebugError):
    """Raised when the client cannot be built from the session config."""

    def __init__(self, message: str) -> None:
        super().__init__(message)


class ValidationError(StorageDebugError):
    """Raised for input validation errors."""

    def __init__(self, field: str, value: Any, message: str) -> None:
        super().__init__(message, {"field": field, "value": value})
        self.field = field
        self.value = value

    def __str__(self) -> str:
        return self.message


class StorageApiError(StorageDebugError):
    """Raised when the remote storage API rejects a call."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        operation: Optional[str] = None,
    ) -> None:
        details = {"status_code": status_code} if status_code else {}
        super().__init__(message, details)
        self.status_code = status_code
        self.operation = operation

    def __str__(self) -> str:
        return self.message

    @classmethod
    def from_exception(cls, exc: Exception, operation: Optional[str] = None) -> "StorageApiError":
        """Build from whatever the SDK raised.

        storage3 raises with a dict payload as the first argument
        (``{"statusCode": ..., "error": ..., "message": ...}``); auth errors
        carry ``message`` and ``status`` attributes.
        """
        payload = exc.args[0] if exc.args else None
        status_code = None
        if isinstance(payload, dict):
            message = payload.get("message") or payload.get("error") or str(payload)
            status_code = payload.get("statusCode") or payload.get("status")
        else:
            message = getattr(exc, "message", None)
            status_code = getattr(exc, "status", None) or getattr(exc, "status_code", None)
            if not message:
                # Transport errors (httpx.ReadTimeout etc.) only make sense with their type
                message = f"{type(exc).__name__}: {exc}" if str(exc) else type(exc).__name__

        try:
            status_code = int(status_code) if status_code is not None else None
        except (TypeError, ValueError):
            status_code = None

        return cls(str(message), status_code=status_code, operation=operation)


class LocalFileError(StorageDebugError):
    """Raised when a local payload cannot be prepared or written."""

    def __init__(self, message: str, file_path: Optional[str] = None) -> None:
        details = {"file_path": file_path} if file_path else {}
        super().__init__(message, details)
        self.file_path = file_path
