"""
Pydantic models for the Supabase Storage debug tool.

Everything here is transient: the remote API is the only source of truth, so
buckets and listings are rebuilt from fresh API responses on every call.
"""

from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class KeyKind(str, Enum):
    """Credential tier used for the session."""

    SERVICE = "service"
    ANON = "anon"


class ErrorKind(str, Enum):
    """Failure category carried by an OperationResult."""

    VALIDATION = "validation"
    API = "api"
    LOCAL = "local"
    UNEXPECTED = "unexpected"


class SessionConfig(BaseModel):
    """Connection settings read once from the environment."""

    service_url: str = Field(..., description="Supabase project URL")
    api_key: str = Field(..., description="Key used to build the client")
    key_kind: KeyKind = Field(..., description="Which key tier api_key is")
    service_key_set: bool = Field(False, description="Service role key present")
    anon_key_set: bool = Field(False, description="Anon key present")

    class Config:
        """Pydantic config."""

        frozen = True

    @property
    def storage_public_base(self) -> str:
        """Base URL for public object access."""
        return f"{self.service_url.rstrip('/')}/storage/v1/object/public/"


class Bucket(BaseModel):
    """Read-only view of a remote bucket."""

    id: str = Field(..., description="Bucket identifier")
    name: str = Field(..., description="Bucket name")
    public: bool = Field(False, description="Whether objects are publicly readable")
    created_at: Optional[datetime] = Field(None, description="Creation timestamp")
    file_size_limit: Optional[int] = Field(None, description="Max object size in bytes")
    allowed_mime_types: Optional[List[str]] = Field(
        None, description="Allowed MIME types, None means any"
    )

    @classmethod
    def from_api(cls, raw: Any) -> "Bucket":
        """Build from a storage3 bucket object or a plain dict."""
        if not isinstance(raw, dict):
            raw = {
                key: getattr(raw, key, None)
                for key in (
                    "id",
                    "name",
                    "public",
                    "created_at",
                    "file_size_limit",
                    "allowed_mime_types",
                )
            }
        name = raw.get("name") or raw.get("id") or ""
        return cls(
            id=raw.get("id") or name,
            name=name,
            public=bool(raw.get("public")),
            created_at=raw.get("created_at") or None,
            file_size_limit=raw.get("file_size_limit") or None,
            allowed_mime_types=raw.get("allowed_mime_types") or None,
        )


class StorageObject(BaseModel):
    """One entry of a bucket listing.

    The API returns folders as entries without an id.
    """

    name: str = Field(..., description="Entry name relative to the listed prefix")
    id: Optional[str] = Field(None, description="Object id, absent for folders")
    metadata: Optional[Dict[str, Any]] = Field(None, description="Object metadata")

    @property
    def is_directory(self) -> bool:
        return not self.id

    @property
    def size(self) -> int:
        return int((self.metadata or {}).get("size") or 0)

    @property
    def mime_type(self) -> str:
        return (self.metadata or {}).get("mimetype") or "N/A"

    @classmethod
    def from_api(cls, raw: Dict[str, Any]) -> "StorageObject":
        return cls(
            name=raw.get("name", ""),
            id=raw.get("id") or None,
            metadata=raw.get("metadata") or None,
        )


class ProbeResult(BaseModel):
    """Outcome of a reachability probe."""

    accessible: bool = Field(..., description="True iff 200 <= status < 400")
    status_code: int = Field(0, description="HTTP status, 0 when no response")
    error: Optional[str] = Field(None, description="Timeout or Network error")


class LocalTestFile(BaseModel):
    """A generated payload written to the temp directory."""

    path: Path = Field(..., description="Local file path")
    content_type: str = Field(..., description="MIME type of the payload")
    size: int = Field(..., description="Size in bytes")


class OperationResult(BaseModel):
    """Outcome of one operation: a value on success, kind and message on failure."""

    ok: bool
    value: Any = None
    kind: Optional[ErrorKind] = None
    message: Optional[str] = None

    @classmethod
    def success(cls, value: Any = None) -> "OperationResult":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, kind: ErrorKind, message: str) -> "OperationResult":
        return cls(ok=False, kind=kind, message=message)


class DiagnosticsReport(BaseModel):
    """Summary of a full diagnostics run."""

    bucket_count: int = Field(0, description="Buckets returned by the API")
    bucket_listing: Dict[str, bool] = Field(
        default_factory=dict, description="Per-bucket shallow listing outcome"
    )
    rw_bucket: Optional[str] = Field(None, description="Bucket used for the round trip")
    upload_ok: Optional[bool] = Field(None, description="Round-trip upload outcome")
    download_ok: Optional[bool] = Field(None, description="Round-trip download outcome")
    delete_ok: Optional[bool] = Field(None, description="Round-trip delete outcome")
    public_probe: Optional[ProbeResult] = Field(
        None, description="Probe of a missing object's public URL"
    )
