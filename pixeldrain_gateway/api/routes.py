from typing import NoReturn, Optional
from fastapi import APIRouter, Depends, File, HTTPException, Query, Request, UploadFile
from fastapi.responses import JSONResponse, StreamingResponse
import logging

from pixeldrain_gateway import __version__
from pixeldrain_gateway.config.app_config import settings
from pixeldrain_gateway.schemas.error_schemas import ErrorResponse
from pixeldrain_gateway.schemas.file_schemas import FileInfoResponse, HealthResponse, ResolveResponse
from pixeldrain_gateway.schemas.upload_schemas import UploadResult
from pixeldrain_gateway.utils.caller_auth import require_trusted_caller
from pixeldrain_gateway.utils.file_validation import (
    validate_file_id,
    validate_pixeldrain_url,
    validate_upload_file,
)
from pixeldrain_gateway.utils.handle_upload_file import read_upload_file
from pixeldrain_gateway.utils.pixeldrain_client import (
    PixeldrainError,
    PixeldrainTimeoutError,
    pixeldrain_client,
)
from pixeldrain_gateway.utils.rate_limit import limiter

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/pixeldrain",
    tags=["pixeldrain"],
    dependencies=[Depends(require_trusted_caller)],
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        429: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
        504: {"model": ErrorResponse},
    },
)
health_router = APIRouter(tags=["health"])


def upstream_status(e: PixeldrainError) -> int:
    """Map a Pixeldrain failure onto the HTTP status returned to the caller."""
    if isinstance(e, PixeldrainTimeoutError):
        return 504
    if e.status == 413 or e.code == "file_too_large":
        return 413
    if e.status == 404 or e.code == "not_found":
        return 404
    return 502


def raise_upstream_error(e: PixeldrainError, action: str) -> NoReturn:
    raise HTTPException(status_code=upstream_status(e), detail=f"{action} failed: {e.message}")


def upload_failure(status_code: int, error: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=UploadResult.failure(error).to_response())


@router.post("/upload", response_model=UploadResult, response_model_exclude_none=True)
@limiter.limit(settings.RATE_LIMIT)
async def upload_file(
    request: Request,
    file: Optional[UploadFile] = File(None, description="File to upload to Pixeldrain"),
):
    """
    Upload one file to Pixeldrain.
    
    Accepts multipart form data with the file in the `file` field.
    Returns `{"ok": true, "url": ...}` on success and
    `{"ok": false, "error": ...}` on failure.
    """
    try:
        upload = validate_upload_file(file)
        logger.info(f"Received upload request for: {upload.filename}")
        
        content = await read_upload_file(upload, settings.max_upload_bytes)
        url = await pixeldrain_client.upload_file(content, upload.filename, upload.content_type)
        
        result = UploadResult.success(url)
        return JSONResponse(status_code=200, content=result.to_response())
    except HTTPException as e:
        logger.warning(f"Upload rejected: {e.detail}")
        return upload_failure(e.status_code, str(e.detail))
    except PixeldrainError as e:
        logger.error(f"Pixeldrain upload failed: {e.message}")
        return upload_failure(upstream_status(e), f"Upload failed: {e.message}")
    except Exception as e:
        logger.error(f"Error in upload endpoint: {e}")
        return upload_failure(500, "Internal server error")
    finally:
        if file is not None:
            await file.close()


@router.get("/info/{file_id}", response_model=FileInfoResponse)
@limiter.limit(settings.RATE_LIMIT)
async def get_file_info(request: Request, file_id: str):
    """
    Get information about a file stored on Pixeldrain.
    
    Args:
        file_id: Pixeldrain file ID
        
    Returns:
        FileInfoResponse with name, size and links of the file
    """
    validate_file_id(file_id)
    try:
        logger.info(f"Received info request for: {file_id}")
        info = await pixeldrain_client.get_file_info(file_id)
        return FileInfoResponse(
            **info.model_dump(),
            url=pixeldrain_client.file_url(info.id),
            download_url=pixeldrain_client.download_url(info.id),
        )
    except PixeldrainError as e:
        logger.error(f"Pixeldrain info lookup for {file_id} failed: {e.message}")
        raise_upstream_error(e, "Info lookup")


@router.get("/resolve", response_model=ResolveResponse)
@limiter.limit(settings.RATE_LIMIT)
async def resolve_link(
    request: Request,
    url: str = Query(..., description="Pixeldrain share link", examples=["https://pixeldrain.com/u/abc123"]),
):
    """
    Resolve a Pixeldrain share link to a direct download URL.
    
    Name and size are included when the file info lookup succeeds.
    """
    file_id = validate_pixeldrain_url(url)
    
    filename = None
    size = None
    try:
        info = await pixeldrain_client.get_file_info(file_id)
        filename = info.name
        size = info.size
    except PixeldrainError as e:
        # The direct link is still usable without metadata
        logger.warning(f"Could not fetch info for {file_id} while resolving {url}: {e.message}")
    
    return ResolveResponse(
        id=file_id,
        url=pixeldrain_client.download_url(file_id),
        filename=filename,
        size=size,
    )


@router.get("/download/{file_id}", response_class=StreamingResponse)
@limiter.limit(settings.RATE_LIMIT)
async def download_file(request: Request, file_id: str):
    """Stream a file from Pixeldrain to the caller."""
    validate_file_id(file_id)
    try:
        logger.info(f"Received download request for: {file_id}")
        stream = await pixeldrain_client.open_download(file_id)
    except PixeldrainError as e:
        logger.error(f"Pixeldrain download of {file_id} failed: {e.message}")
        raise_upstream_error(e, "Download")
    
    headers = {name: value for name, value in stream.headers.items() if name != "Content-Type"}
    return StreamingResponse(
        stream.chunks,
        media_type=stream.headers.get("Content-Type", "application/octet-stream"),
        headers=headers,
    )


@health_router.get("/health", response_model=HealthResponse)
async def health():
    """Liveness check; does not contact Pixeldrain."""
    return HealthResponse(
        status="healthy",
        version=__version__,
        api_key_configured=bool(pixeldrain_client.api_key),
    )
