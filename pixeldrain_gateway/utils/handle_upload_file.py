"""
Read uploaded files from multipart requests.
"""

from fastapi import UploadFile, HTTPException
import logging

logger = logging.getLogger(__name__)

READ_CHUNK_SIZE = 1024 * 1024


async def read_upload_file(file: UploadFile, max_bytes: int) -> bytes:
    """
    Read the full content of an uploaded file, enforcing a size limit.
    
    Args:
        file: UploadFile object
        max_bytes: Largest accepted payload in bytes
        
    Returns:
        bytes: File content
        
    Raises:
        HTTPException: 413 if the file is too large, 400 if it is empty or unreadable
    """
    # Reject early when the part declared its size
    if file.size is not None and file.size > max_bytes:
        raise HTTPException(
            status_code=413,
            detail=f"File exceeds the {max_bytes // (1024 * 1024)} MB upload limit"
        )
    
    chunks = []
    total = 0
    try:
        while True:
            chunk = await file.read(READ_CHUNK_SIZE)
            if not chunk:
                break
            total += len(chunk)
            if total > max_bytes:
                raise HTTPException(
                    status_code=413,
                    detail=f"File exceeds the {max_bytes // (1024 * 1024)} MB upload limit"
                )
            chunks.append(chunk)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error reading uploaded file {file.filename}: {e}")
        raise HTTPException(status_code=400, detail="Failed to read uploaded file")
    
    if total == 0:
        raise HTTPException(status_code=400, detail="Uploaded file is empty")
    
    logger.info(f"Read {total} bytes from uploaded file: {file.filename}")
    return b"".join(chunks)
