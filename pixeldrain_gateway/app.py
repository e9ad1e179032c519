from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging
import uvicorn

from pixeldrain_gateway import __version__
from pixeldrain_gateway.api import router as pixeldrain_router, health_router
from pixeldrain_gateway.config.app_config import settings
from pixeldrain_gateway.config.pixeldrain_config import pixeldrain_settings
from pixeldrain_gateway.schemas.error_schemas import ErrorResponse
from pixeldrain_gateway.utils.pixeldrain_client import pixeldrain_client
from pixeldrain_gateway.utils.rate_limit import limiter
from pixeldrain_gateway.utils.request_context import log_requests

# Set up logging
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for FastAPI startup and shutdown events."""
    # Startup
    logger.info(f"Starting Pixeldrain Gateway {__version__}...")

    if not pixeldrain_client.api_key:
        logger.warning("PIXELDRAIN_API_KEY is not set; Pixeldrain may reject uploads.")

    if settings.GATEWAY_TOKEN:
        logger.info("Gateway token authentication enabled.")

    try:
        if pixeldrain_settings.CHECK_ON_STARTUP:
            logger.info("Checking Pixeldrain connection...")
            if not await pixeldrain_client.test_connection():
                logger.error("Failed to connect to Pixeldrain. Please check your configuration.")
    except Exception as e:
        logger.error(f"Error during Pixeldrain connection check: {e}")

    yield

    # Shutdown
    logger.info("Shutting down Pixeldrain Gateway...")


def error_response(status_code: int, message: str, headers: dict | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=message or "Request failed").model_dump(),
        headers=headers,
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return error_response(exc.status_code, str(exc.detail), getattr(exc, "headers", None))


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()))
        problems.append(f"{location}: {error.get('msg', 'invalid value')}")
    return error_response(422, "Invalid request: " + "; ".join(problems))


async def rate_limit_exception_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    logger.warning(f"Rate limit exceeded for {request.client.host if request.client else 'unknown'}")
    return error_response(429, f"Rate limit exceeded: {exc.detail}")


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return error_response(500, "Internal server error")


app = FastAPI(
    title="Pixeldrain Gateway",
    version=__version__,
    lifespan=lifespan
)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exception_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)
app.middleware("http")(log_requests)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(health_router)
app.include_router(pixeldrain_router)


def main():
    uvicorn.run(
        app,
        host=settings.APP_HOST,
        port=settings.APP_PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
