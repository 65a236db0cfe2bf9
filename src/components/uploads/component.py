"""
Uploads component - images placed on a room's canvas.

Invariants:
- I1: Only allow-listed image types within the size limit are stored
- I2: Stored names are server-generated; client filenames are kept as metadata only
- I3: Files live under their room's directory and can't escape it
"""

from __future__ import annotations

import logging
import re
import secrets

from .models import (
    GetImageInput,
    ImageContentOutput,
    StoredImage,
    UploadImageInput,
    UploadOutput,
    UploadValidationError,
)
from .ports import NamingPolicyPort, RulesPort, StoragePort, TimePort

logger = logging.getLogger(__name__)

MIME_EXTENSIONS = {
    "image/png": "png",
    "image/jpeg": "jpg",
    "image/gif": "gif",
    "image/webp": "webp",
    "image/svg+xml": "svg",
}
EXTENSION_MIMES = {ext: mime for mime, ext in MIME_EXTENSIONS.items()} | {"jpeg": "image/jpeg"}

DEFAULT_MAX_BYTES = 10 * 1024 * 1024

_FILENAME_RE = re.compile(r"^[A-Za-z0-9_-][A-Za-z0-9._-]*$")


def validate_image(
    data: bytes,
    content_type: str,
    rules: RulesPort | None,
) -> list[UploadValidationError]:
    errors: list[UploadValidationError] = []
    allowed = rules.get_allowed_mime_types() if rules else list(MIME_EXTENSIONS)
    max_bytes = rules.get_max_upload_bytes() if rules else DEFAULT_MAX_BYTES

    if content_type not in allowed or content_type not in MIME_EXTENSIONS:
        errors.append(
            UploadValidationError(
                code="mime_not_allowed",
                message=f"File type {content_type or 'unknown'} is not allowed",
            )
        )
    if not data:
        errors.append(UploadValidationError(code="empty_file", message="File is empty"))
    elif len(data) > max_bytes:
        errors.append(
            UploadValidationError(
                code="too_large",
                message=f"File exceeds maximum size of {max_bytes} bytes",
            )
        )
    return errors


def stored_filename(content_type: str, time: TimePort) -> str:
    epoch_ms = int(time.now_utc().timestamp() * 1000)
    return f"{epoch_ms}-{secrets.token_hex(4)}.{MIME_EXTENSIONS[content_type]}"


def run_upload(
    inp: UploadImageInput,
    *,
    storage: StoragePort,
    policy: NamingPolicyPort,
    time: TimePort,
    rules: RulesPort | None = None,
) -> UploadOutput:
    if not policy.is_valid_room_name(inp.room_name):
        return UploadOutput(
            success=False,
            errors=[UploadValidationError(code="invalid_room", message="Invalid room name", field="roomName")],
        )

    errors = validate_image(inp.data, inp.content_type, rules)
    if errors:
        return UploadOutput(success=False, errors=errors)

    filename = stored_filename(inp.content_type, time)
    path = storage.save(f"{inp.room_name}/{filename}", inp.data)
    logger.info("Stored upload %s for room %s (%d bytes)", filename, inp.room_name, len(inp.data))

    return UploadOutput(
        image=StoredImage(
            room_name=inp.room_name,
            filename=filename,
            original_name=inp.filename,
            mime_type=inp.content_type,
            size_bytes=len(inp.data),
            storage_path=path,
        ),
        success=True,
    )


def run_get(
    inp: GetImageInput,
    *,
    storage: StoragePort,
    policy: NamingPolicyPort,
) -> ImageContentOutput:
    not_found = ImageContentOutput(
        success=False,
        errors=[UploadValidationError(code="not_found", message="Image not found")],
    )
    if not policy.is_valid_room_name(inp.room_name) or not _FILENAME_RE.match(inp.filename):
        return not_found

    try:
        data = storage.get(f"{inp.room_name}/{inp.filename}")
    except (FileNotFoundError, ValueError):
        return not_found

    ext = inp.filename.rsplit(".", 1)[-1].lower() if "." in inp.filename else ""
    return ImageContentOutput(
        data=data,
        mime_type=EXTENSION_MIMES.get(ext, "application/octet-stream"),
        success=True,
    )


def run(
    inp: UploadImageInput | GetImageInput,
    *,
    storage: StoragePort,
    policy: NamingPolicyPort,
    time: TimePort | None = None,
    rules: RulesPort | None = None,
) -> UploadOutput | ImageContentOutput:
    if isinstance(inp, UploadImageInput):
        assert time
        return run_upload(inp, storage=storage, policy=policy, time=time, rules=rules)
    elif isinstance(inp, GetImageInput):
        return run_get(inp, storage=storage, policy=policy)
    else:
        raise ValueError(f"Unknown input type: {type(inp)}")
