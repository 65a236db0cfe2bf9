"""
Image upload routes.

Images are stored per room and served back to every member of the room.

Headers on served images:
- ETag: SHA256 of the bytes; stored names never change content
- Cache-Control: long-lived, since stored names are unique
- Content-Disposition: inline, attachment for anything that can carry script (SVG)
- Content-Security-Policy: sandboxed, no script or external loads
"""

import hashlib
from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile
from fastapi.responses import Response

from src.adapters.clock import SystemClock
from src.adapters.fs.filestore import FileSystemStore
from src.api.deps import (
    UploadRulesAdapter,
    get_clock,
    get_policy,
    get_upload_rules,
    get_upload_store,
)
from src.api.schemas import UploadResponse
from src.components.uploads import GetImageInput, UploadImageInput, run_get, run_upload
from src.domain.policy import PolicyEngine

router = APIRouter()

CACHE_CONTROL = "public, max-age=86400"
IMAGE_CSP = "default-src 'none'; style-src 'unsafe-inline'; sandbox"

# Served as downloads so the browser never renders them on our origin
ATTACHMENT_MIME_TYPES = frozenset({"image/svg+xml"})


def build_etag(data: bytes) -> str:
    return f'"{hashlib.sha256(data).hexdigest()[:16]}"'


def build_content_disposition(filename: str, mime_type: str) -> str:
    safe_filename = filename.replace('"', "_").replace("\n", "_")
    disposition = "attachment" if mime_type in ATTACHMENT_MIME_TYPES else "inline"
    return f'{disposition}; filename="{safe_filename}"'


def check_if_none_match(request: Request, etag: str) -> bool:
    if_none_match = request.headers.get("if-none-match")
    if if_none_match:
        client_etags = [e.strip() for e in if_none_match.split(",")]
        return etag in client_etags or "*" in client_etags
    return False


@router.post("/upload/image", response_model=UploadResponse, status_code=201)
async def upload_image(
    image: Annotated[UploadFile, File()],
    room_name: Annotated[str, Form(alias="roomName")],
    storage: FileSystemStore = Depends(get_upload_store),
    policy: PolicyEngine = Depends(get_policy),
    clock: SystemClock = Depends(get_clock),
    rules: UploadRulesAdapter = Depends(get_upload_rules),
) -> UploadResponse:
    # One byte past the limit is enough for the size check to reject it
    content = await image.read(rules.get_max_upload_bytes() + 1)

    inp = UploadImageInput(
        room_name=room_name,
        data=content,
        filename=image.filename or "unknown",
        content_type=image.content_type or "",
    )
    result = run_upload(inp, storage=storage, policy=policy, time=clock, rules=rules)

    if not result.success or result.image is None:
        err = result.errors[0]
        code = 413 if err.code == "too_large" else 400
        raise HTTPException(status_code=code, detail=err.message)

    stored = result.image
    return UploadResponse(
        filename=stored.filename,
        original_name=stored.original_name,
        size=stored.size_bytes,
        mime_type=stored.mime_type,
        url=f"/api/uploads/{stored.room_name}/{stored.filename}",
    )


@router.get("/uploads/{room_name}/{filename}")
def get_image(
    request: Request,
    room_name: str,
    filename: str,
    storage: FileSystemStore = Depends(get_upload_store),
    policy: PolicyEngine = Depends(get_policy),
) -> Response:
    result = run_get(GetImageInput(room_name=room_name, filename=filename), storage=storage, policy=policy)
    if not result.success or result.data is None:
        raise HTTPException(status_code=404, detail="Image not found")

    etag = build_etag(result.data)
    if check_if_none_match(request, etag):
        return Response(status_code=304, headers={"ETag": etag, "Cache-Control": CACHE_CONTROL})

    return Response(
        content=result.data,
        media_type=result.mime_type,
        headers={
            "ETag": etag,
            "Cache-Control": CACHE_CONTROL,
            "Content-Disposition": build_content_disposition(filename, result.mime_type),
            "Content-Security-Policy": IMAGE_CSP,
            "X-Content-Type-Options": "nosniff",
        },
    )
