from time import perf_counter
import uuid
import logging
from fastapi import Request

logger = logging.getLogger(__name__)


async def log_requests(request: Request, call_next):
    """HTTP middleware: tag each request with an id and log its outcome."""
    request_id = uuid.uuid4().hex[:12]
    request.state.request_id = request_id
    start_time = perf_counter()

    response = await call_next(request)

    duration_ms = int((perf_counter() - start_time) * 1000)
    response.headers["X-Request-ID"] = request_id
    logger.info(
        f"[{request_id}] {request.method} {request.url.path} -> {response.status_code} "
        f"({duration_ms} ms, content_length={request.headers.get('content-length')})"
    )
    return response
