"""
Uploads component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field

# --- Validation Error ---


@dataclass(frozen=True)
class UploadValidationError:
    """Upload validation error with actionable message."""

    code: str
    message: str
    field: str = "image"


# --- Input Models ---


@dataclass(frozen=True)
class UploadImageInput:
    """Input for uploading an image into a room."""

    room_name: str
    data: bytes
    filename: str
    content_type: str


@dataclass(frozen=True)
class GetImageInput:
    """Input for fetching an uploaded image."""

    room_name: str
    filename: str


# --- Output Models ---


@dataclass(frozen=True)
class StoredImage:
    """Metadata of an image stored for a room."""

    room_name: str
    filename: str
    original_name: str
    mime_type: str
    size_bytes: int
    storage_path: str


@dataclass
class UploadOutput:
    """Output from upload operation."""

    image: StoredImage | None = None
    errors: list[UploadValidationError] = field(default_factory=list)
    success: bool = True


@dataclass
class ImageContentOutput:
    """Output containing image bytes."""

    data: bytes | None = None
    mime_type: str = "application/octet-stream"
    errors: list[UploadValidationError] = field(default_factory=list)
    success: bool = True
