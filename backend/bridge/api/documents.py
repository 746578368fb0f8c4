from pathlib import PurePath

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, Response
from loguru import logger
from starlette.datastructures import UploadFile
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.formparsers import MultiPartException

from bridge.api.deps import get_app_settings, get_upstream
from bridge.clients.upstream import UpstreamClient, relay
from bridge.config import Settings
from bridge.core import files as file_ops
from bridge.core.errors import (
    ClientInputError,
    UpstreamParseError,
    UpstreamStatusError,
    UpstreamUnavailable,
)

router = APIRouter(prefix="/api", tags=["documents"])

# Allowance for multipart boundaries and part headers on top of the file itself.
MULTIPART_OVERHEAD = 64 * 1024


def check_upload(filename: str, size: int | None, settings: Settings) -> None:
    """Reject unsupported extensions and oversized files before any upstream call."""
    ext = PurePath(filename).suffix.lower()
    if ext not in settings.allowed_extensions:
        raise ClientInputError("File type not supported")
    if size is not None and size > settings.max_upload_bytes:
        raise ClientInputError("File too large or invalid")


def _declared_length(request: Request) -> int | None:
    value = request.headers.get("content-length", "")
    return int(value) if value.isdigit() else None


@router.post("/upload")
async def upload_file(
    request: Request,
    upstream: UpstreamClient = Depends(get_upstream),
    settings: Settings = Depends(get_app_settings),
):
    declared = _declared_length(request)
    if declared is not None and declared > settings.max_upload_bytes + MULTIPART_OVERHEAD:
        logger.warning("Upload rejected: declared body of {} bytes", declared)
        raise ClientInputError("File too large or invalid")

    try:
        form = await request.form()
    except (MultiPartException, StarletteHTTPException) as e:
        logger.warning("Error parsing multipart form: {}", e)
        raise ClientInputError("File too large or invalid") from e

    try:
        upload = form.get("file")
        if not isinstance(upload, UploadFile) or not upload.filename:
            raise ClientInputError("No file provided")

        check_upload(upload.filename, upload.size, settings)
        content = await upload.read()
        check_upload(upload.filename, len(content), settings)

        resp = await upstream.ingest_file(upload.filename, content, upload.content_type)
    finally:
        await form.close()

    logger.info("File uploaded: {} ({} bytes), upstream status {}", upload.filename, len(content), resp.status_code)
    return Response(content=resp.content, status_code=resp.status_code, media_type="application/json")


@router.get("/files")
async def list_files(upstream: UpstreamClient = Depends(get_upstream)):
    listing = await file_ops.list_files(upstream)
    return listing.model_dump()


# Registered before /files/{doc_id} so "delete-all" is never taken for an id.
@router.delete("/files/delete-all")
async def delete_all_files(upstream: UpstreamClient = Depends(get_upstream)):
    try:
        result = await file_ops.delete_all(upstream)
    except UpstreamUnavailable as e:
        logger.error("Error getting file list for deletion: {}", e.details)
        return JSONResponse(
            status_code=502,
            content={"success": False, "error": "Failed to get file list from upstream", "details": e.details},
        )
    except UpstreamStatusError as e:
        logger.error("Upstream returned error status for file list: {}", e.status_code)
        return JSONResponse(
            status_code=e.status_code,
            content={"success": False, "error": f"Upstream error getting file list (status {e.status_code})"},
        )
    except UpstreamParseError as e:
        logger.error("Error parsing file list for deletion: {}", e.details)
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": "Failed to parse file list", "details": e.details},
        )
    return result.model_dump()


@router.delete("/files/{doc_id:path}")
async def delete_file(doc_id: str, upstream: UpstreamClient = Depends(get_upstream)):
    if not doc_id:
        raise ClientInputError("Document ID required")
    resp = await upstream.delete_ingested(doc_id)
    logger.info("File delete requested: {} (status {})", doc_id, resp.status_code)
    if resp.status_code == 200:
        return {"message": "File deleted successfully"}
    return relay(resp)


@router.get("/processing-status")
async def get_processing_status(filename: str = "", upstream: UpstreamClient = Depends(get_upstream)):
    if not filename:
        raise ClientInputError("filename parameter is required")

    try:
        status = await file_ops.processing_status(upstream, filename)
    except UpstreamParseError as e:
        logger.error("Error parsing file list: {}", e.details)
        return JSONResponse(
            status_code=500,
            content={"error": "Failed to parse response", "filename": filename, "processing": False},
        )
    except (UpstreamUnavailable, UpstreamStatusError) as e:
        logger.error("Error checking processing status for {}: {}", filename, e.message)
        return JSONResponse(
            status_code=502,
            content={"error": "Failed to check upstream status", "filename": filename, "processing": False},
        )
    return status.model_dump()
