"""
Caller trust checks for the gateway routes.
The gateway is meant to be called by the local desktop shell only.
"""

import secrets
from typing import Optional
from fastapi import Header, HTTPException, Request
import logging

from pixeldrain_gateway.config.app_config import settings

logger = logging.getLogger(__name__)


def is_allowed_client(host: Optional[str]) -> bool:
    allowed = settings.ALLOWED_CLIENTS
    if "*" in allowed:
        return True
    return host is not None and host in allowed


def is_allowed_origin(origin: Optional[str]) -> bool:
    # Non-browser callers send no Origin header
    if not origin:
        return True
    allowed = settings.CORS_ORIGINS
    return "*" in allowed or origin in allowed


async def require_trusted_caller(
    request: Request,
    x_gateway_token: Optional[str] = Header(None, description="Shared secret, required when GATEWAY_TOKEN is set"),
) -> None:
    """
    Reject callers that are not on the allow list or lack the shared token.
    
    Raises:
        HTTPException: 403 for untrusted hosts or browser origins, 401 for a missing or wrong token
    """
    host = request.client.host if request.client else None
    if not is_allowed_client(host):
        logger.warning(f"Rejected request from untrusted client {host} to {request.url.path}")
        raise HTTPException(status_code=403, detail=f"Client {host} is not allowed to use this gateway")

    origin = request.headers.get("origin")
    if not is_allowed_origin(origin):
        logger.warning(f"Rejected request from origin {origin} to {request.url.path}")
        raise HTTPException(status_code=403, detail=f"Origin {origin} is not allowed to use this gateway")
    
    if settings.GATEWAY_TOKEN:
        if not x_gateway_token or not secrets.compare_digest(x_gateway_token, settings.GATEWAY_TOKEN):
            logger.warning(f"Rejected request with missing or invalid gateway token from {host}")
            raise HTTPException(status_code=401, detail="Missing or invalid gateway token")
