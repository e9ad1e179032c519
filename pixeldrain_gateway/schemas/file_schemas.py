"""
Schemas for file info, link resolution and health responses.
"""

from pydantic import BaseModel, Field
from typing import Optional


class FileInfo(BaseModel):
    """Subset of the file information Pixeldrain reports."""
    
    id: str = Field(..., description="Pixeldrain file ID")
    name: str = Field(..., description="File name")
    size: int = Field(0, description="File size in bytes", ge=0)
    mime_type: Optional[str] = Field(None, description="MIME type detected by Pixeldrain")
    views: int = Field(0, description="View count")
    downloads: int = Field(0, description="Download count")
    date_upload: Optional[str] = Field(None, description="Upload timestamp (ISO 8601)")
    hash_sha256: Optional[str] = Field(None, description="SHA-256 of the file content")


class FileInfoResponse(FileInfo):
    """Schema for file info response."""
    
    ok: bool = Field(True, description="Always true on success")
    url: str = Field(..., description="Public share link")
    download_url: str = Field(..., description="Direct download link")


class ResolveResponse(BaseModel):
    """Schema for share link resolution response."""
    
    ok: bool = Field(True, description="Always true on success")
    id: str = Field(..., description="Pixeldrain file ID")
    url: str = Field(..., description="Direct download link")
    filename: Optional[str] = Field(None, description="File name, when known")
    size: Optional[int] = Field(None, description="File size in bytes, when known")


class HealthResponse(BaseModel):
    """Schema for health check response."""
    
    ok: bool = True
    status: str
    version: str
    api_key_configured: bool
