"""
Validation utilities for uploads, file IDs and Pixeldrain share links.
"""

import re
from typing import Optional
from urllib.parse import urlparse
from fastapi import UploadFile, HTTPException
import logging

logger = logging.getLogger(__name__)

FILE_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{1,64}$")

URL_PATTERN = re.compile(
    r'^https?://'  # http:// or https://
    r'(?:(?:[A-Z0-9](?:[A-Z0-9-]{0,61}[A-Z0-9])?\.)+[A-Z]{2,6}\.?|'  # domain...
    r'localhost|'  # localhost...
    r'\d{1,3}\.\d{1,3}\.\d{1,3}\.\d{1,3})'  # ...or ip
    r'(?::\d+)?'  # optional port
    r'(?:/?|[/?]\S+)$', re.IGNORECASE)


def validate_upload_file(file: Optional[UploadFile]) -> UploadFile:
    """
    Check that the request carried a named file.
    
    Args:
        file: UploadFile object from the multipart form, if any
        
    Returns:
        UploadFile: The validated file
        
    Raises:
        HTTPException: If no file or no filename was sent
    """
    if file is None:
        raise HTTPException(status_code=400, detail="No file uploaded; send it in the 'file' form field")
    
    if not file.filename or not file.filename.strip():
        raise HTTPException(status_code=400, detail="Filename is required")
    
    logger.info(f"File validation passed for: {file.filename}")
    return file


def is_valid_file_id(file_id: str) -> bool:
    return bool(FILE_ID_PATTERN.match(file_id or ""))


def validate_file_id(file_id: str) -> str:
    """Reject file IDs that cannot be Pixeldrain IDs."""
    if not is_valid_file_id(file_id):
        raise HTTPException(status_code=400, detail=f"Invalid Pixeldrain file ID: {file_id!r}")
    return file_id


def is_pixeldrain_url(url: str) -> bool:
    """Check whether a URL points at pixeldrain.com or one of its subdomains."""
    try:
        hostname = (urlparse(url).hostname or "").lower()
    except ValueError:
        return False
    return hostname == "pixeldrain.com" or hostname.endswith(".pixeldrain.com")


def extract_pixeldrain_file_id(url: str) -> Optional[str]:
    """
    Extract the file ID from a Pixeldrain link.
    
    Supports the share link (/u/<id>), the API link (/api/file/<id>)
    and bare links where the ID is the only path segment (/<id>).
    """
    try:
        path = urlparse(url).path
    except ValueError:
        return None
    
    parts = [part for part in path.split("/") if part]
    candidate = None
    if len(parts) >= 2 and parts[0] == "u":
        candidate = parts[1]
    elif len(parts) >= 3 and parts[0] == "api" and parts[1] == "file":
        candidate = parts[2]
    elif len(parts) == 1:
        candidate = parts[0]
    
    if candidate and is_valid_file_id(candidate):
        return candidate
    return None


def validate_pixeldrain_url(url: str) -> str:
    """
    Validate a Pixeldrain link and return its file ID.
    
    Args:
        url: Link to resolve
        
    Returns:
        str: File ID
        
    Raises:
        HTTPException: If the link is malformed or not a Pixeldrain link
    """
    if not url or not URL_PATTERN.match(url.strip()):
        raise HTTPException(status_code=400, detail="Invalid URL format")
    
    url = url.strip()
    if not is_pixeldrain_url(url):
        raise HTTPException(status_code=400, detail="Not a Pixeldrain link")
    
    file_id = extract_pixeldrain_file_id(url)
    if file_id is None:
        raise HTTPException(status_code=400, detail="Could not find a file ID in the Pixeldrain link")
    
    logger.info(f"URL validation passed for: {url} (file ID {file_id})")
    return file_id
