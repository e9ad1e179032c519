"""
Pixeldrain API Client
Handles uploads, file info lookups and download streaming against the Pixeldrain API.
"""

import asyncio
from dataclasses import dataclass
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, Optional, TypeVar
from urllib.parse import quote
import aiohttp # type: ignore
import logging

from pixeldrain_gateway.config.pixeldrain_config import pixeldrain_settings
from pixeldrain_gateway.schemas.file_schemas import FileInfo

logger = logging.getLogger(__name__)

T = TypeVar("T")

RETRYABLE_STATUSES = {429, 500, 502, 503, 504}
DOWNLOAD_CHUNK_SIZE = 64 * 1024
FORWARDED_DOWNLOAD_HEADERS = ("Content-Type", "Content-Length", "Content-Encoding", "Content-Disposition")


class PixeldrainError(Exception):
    """Raised when Pixeldrain rejects a request or cannot be reached."""

    def __init__(self, message: str, status: Optional[int] = None, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.status = status
        self.code = code

    @property
    def is_transient(self) -> bool:
        # No status means the request never got an answer (network failure)
        return self.status is None or self.status in RETRYABLE_STATUSES


class PixeldrainTimeoutError(PixeldrainError):
    """Raised when Pixeldrain does not answer within the configured timeout."""

    @property
    def is_transient(self) -> bool:
        return True


@dataclass
class DownloadStream:
    """An open download: headers to forward and the body as an async byte iterator."""
    headers: Dict[str, str]
    chunks: AsyncIterator[bytes]


def _to_int(value: Any) -> int:
    try:
        return max(0, int(value))
    except (TypeError, ValueError):
        return 0


def _to_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) and value else None


class PixeldrainClient:
    """Async client for the Pixeldrain file API."""

    def __init__(
        self,
        api_url: Optional[str] = None,
        public_url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
        retry_delay: Optional[float] = None,
    ):
        self.api_url: str = (api_url or pixeldrain_settings.API_URL).rstrip("/")
        self.public_url: str = (public_url or pixeldrain_settings.PUBLIC_URL).rstrip("/")
        self.api_key: str = pixeldrain_settings.API_KEY if api_key is None else api_key
        self.timeout: float = pixeldrain_settings.TIMEOUT if timeout is None else timeout
        self.max_retries: int = pixeldrain_settings.MAX_RETRIES if max_retries is None else max_retries
        self.retry_delay: float = pixeldrain_settings.RETRY_DELAY if retry_delay is None else retry_delay

    def file_url(self, file_id: str) -> str:
        """Public share link for a file."""
        return f"{self.public_url}/u/{quote(file_id, safe='')}"

    def download_url(self, file_id: str) -> str:
        """Direct download link for a file."""
        return f"{self.api_url}/file/{quote(file_id, safe='')}"

    def _auth(self) -> Optional[aiohttp.BasicAuth]:
        if not self.api_key:
            return None
        return aiohttp.BasicAuth(login="", password=self.api_key)

    @staticmethod
    async def _read_json(response: aiohttp.ClientResponse) -> Dict[str, Any]:
        try:
            payload = await response.json(content_type=None)
        except ValueError:
            text = await response.text(errors="replace")
            return {"message": text.strip()[:200]} if text.strip() else {}
        return payload if isinstance(payload, dict) else {}

    def _error_from_response(self, status: int, payload: Dict[str, Any]) -> PixeldrainError:
        code = _to_str(payload.get("value"))
        message = _to_str(payload.get("message")) or code or f"Pixeldrain returned HTTP {status}"
        if status == 401 and not self.api_key:
            message = f"{message} (no Pixeldrain API key configured)"
        return PixeldrainError(message, status=status, code=code)

    async def _send(
        self,
        method: str,
        path: str,
        data_factory: Optional[Callable[[], Any]] = None,
    ) -> Dict[str, Any]:
        """Perform a single API request and return its JSON body."""
        url = f"{self.api_url}{path}"
        data = data_factory() if data_factory else None
        timeout = aiohttp.ClientTimeout(total=self.timeout)
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.request(method, url, data=data, auth=self._auth()) as response:
                    payload = await self._read_json(response)
                    if response.status >= 400:
                        raise self._error_from_response(response.status, payload)
                    if payload.get("success") is False:
                        raise self._error_from_response(response.status, payload)
                    return payload
        except asyncio.TimeoutError:
            raise PixeldrainTimeoutError(f"Pixeldrain did not respond within {self.timeout:g} seconds")
        except aiohttp.ClientError as e:
            raise PixeldrainError(f"Could not reach Pixeldrain: {e}")

    async def _with_retries(self, description: str, attempt: Callable[[], Awaitable[T]]) -> T:
        """Run an upstream call, retrying transient failures with exponential backoff."""
        attempts = self.max_retries + 1
        for number in range(1, attempts + 1):
            try:
                return await attempt()
            except PixeldrainError as e:
                if number == attempts or not e.is_transient:
                    raise
                delay = self.retry_delay * (2 ** (number - 1))
                logger.warning(
                    f"{description} failed (attempt {number}/{attempts}): {e.message}; retrying in {delay:.1f}s"
                )
                await asyncio.sleep(delay)
        raise PixeldrainError(f"{description} failed")

    async def upload_file(
        self,
        content: bytes,
        filename: str,
        content_type: Optional[str] = None,
    ) -> str:
        """
        Upload file bytes to Pixeldrain.

        Args:
            content: File content
            filename: Name to store the file under
            content_type: MIME type of the content

        Returns:
            str: Public share link of the uploaded file

        Raises:
            PixeldrainError: If the upload fails after retries
        """
        def build_form() -> aiohttp.FormData:
            # FormData can only be serialized once, so every attempt gets a fresh one
            form = aiohttp.FormData()
            form.add_field(
                "file",
                content,
                filename=filename,
                content_type=content_type or "application/octet-stream",
            )
            return form

        logger.info(f"Uploading {filename} ({len(content)} bytes) to Pixeldrain")
        payload = await self._with_retries(
            f"Upload of {filename}",
            lambda: self._send("POST", "/file", data_factory=build_form),
        )

        file_id = _to_str(payload.get("id"))
        if not file_id:
            raise PixeldrainError("Pixeldrain response did not include a file id")

        url = self.file_url(file_id)
        logger.info(f"Uploaded {filename} to {url}")
        return url

    async def get_file_info(self, file_id: str) -> FileInfo:
        """
        Fetch file information from Pixeldrain.

        Args:
            file_id: Pixeldrain file ID

        Returns:
            FileInfo: Normalized file information
        """
        payload = await self._with_retries(
            f"Info lookup for {file_id}",
            lambda: self._send("GET", f"/file/{quote(file_id, safe='')}/info"),
        )
        return FileInfo(
            id=_to_str(payload.get("id")) or file_id,
            name=_to_str(payload.get("name")) or file_id,
            size=_to_int(payload.get("size")),
            mime_type=_to_str(payload.get("mime_type")),
            views=_to_int(payload.get("views")),
            downloads=_to_int(payload.get("downloads")),
            date_upload=_to_str(payload.get("date_upload")),
            hash_sha256=_to_str(payload.get("hash_sha256")),
        )

    async def open_download(self, file_id: str) -> DownloadStream:
        """
        Open a streaming download of a file.

        The returned stream owns its HTTP session; it is closed once the body
        iterator is exhausted or closed.
        """
        url = self.download_url(file_id)

        async def attempt() -> DownloadStream:
            # No total timeout: large downloads may legitimately take long
            timeout = aiohttp.ClientTimeout(total=None, sock_connect=self.timeout, sock_read=self.timeout)
            # Bytes are relayed as received, so Content-Length and Content-Encoding stay valid
            session = aiohttp.ClientSession(timeout=timeout, auto_decompress=False)
            try:
                response = await session.get(
                    url,
                    auth=self._auth(),
                    headers={"Accept-Encoding": "identity"},
                )
                if response.status >= 400:
                    payload = await self._read_json(response)
                    response.release()
                    raise self._error_from_response(response.status, payload)
            except asyncio.TimeoutError:
                await session.close()
                raise PixeldrainTimeoutError(f"Pixeldrain did not respond within {self.timeout:g} seconds")
            except aiohttp.ClientError as e:
                await session.close()
                raise PixeldrainError(f"Could not reach Pixeldrain: {e}")
            except PixeldrainError:
                await session.close()
                raise

            headers = {
                name: response.headers[name]
                for name in FORWARDED_DOWNLOAD_HEADERS
                if name in response.headers
            }
            return DownloadStream(headers=headers, chunks=self._iter_body(session, response))

        logger.info(f"Opening download of {file_id}")
        return await self._with_retries(f"Download of {file_id}", attempt)

    @staticmethod
    async def _iter_body(
        session: aiohttp.ClientSession,
        response: aiohttp.ClientResponse,
    ) -> AsyncIterator[bytes]:
        try:
            async for chunk in response.content.iter_chunked(DOWNLOAD_CHUNK_SIZE):
                yield chunk
        finally:
            response.release()
            await session.close()

    async def test_connection(self) -> bool:
        """Test the API connection and authentication."""
        try:
            payload = await self._send("GET", "/user")
            username = payload.get("username", "unknown")
            logger.info(f"Pixeldrain connection successful. Authenticated as '{username}'.")
            return True
        except PixeldrainError as e:
            logger.error(f"Pixeldrain connection failed: {e.message}")
            return False


pixeldrain_client = PixeldrainClient()
