"""
Pytest configuration and common fixtures for testing.
"""

import asyncio
import pytest
import pytest_asyncio
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple
from unittest.mock import AsyncMock, Mock
from aiohttp import web
from aiohttp.test_utils import TestServer
from fastapi.testclient import TestClient

from pixeldrain_gateway.app import app
from pixeldrain_gateway.api import routes
from pixeldrain_gateway.config.app_config import settings
from pixeldrain_gateway.schemas.file_schemas import FileInfo
from pixeldrain_gateway.utils.rate_limit import limiter


@pytest.fixture
def api_client(monkeypatch):
    """TestClient whose caller ("testclient") is trusted, sends no Origin and is not rate limited."""
    monkeypatch.setattr(settings, "ALLOWED_CLIENTS", ["testclient"])
    monkeypatch.setattr(settings, "GATEWAY_TOKEN", "")
    monkeypatch.setattr(settings, "CORS_ORIGINS", [])
    monkeypatch.setattr(limiter, "enabled", False)
    return TestClient(app)


@pytest.fixture
def mock_pixeldrain(monkeypatch):
    """Replace the upstream client used by the routes."""
    client = Mock()
    client.api_key = ""
    client.upload_file = AsyncMock(return_value="https://pixeldrain.com/u/abc123")
    client.get_file_info = AsyncMock(
        return_value=FileInfo(
            id="abc123",
            name="game.zip",
            size=1024,
            mime_type="application/zip",
            views=3,
            downloads=2,
            date_upload="2024-05-01T10:00:00Z",
        )
    )
    client.open_download = AsyncMock()
    client.file_url = Mock(side_effect=lambda file_id: f"https://pixeldrain.com/u/{file_id}")
    client.download_url = Mock(side_effect=lambda file_id: f"https://pixeldrain.com/api/file/{file_id}")
    monkeypatch.setattr(routes, "pixeldrain_client", client)
    return client


@pytest.fixture
def sample_file():
    """Sample multipart file tuple for uploads."""
    return ("game.zip", b"PK\x03\x04 sample archive content", "application/zip")


@dataclass
class FakePixeldrain:
    """In-process stand-in for the Pixeldrain API."""
    base_url: str = ""
    files: Dict[str, Tuple[str, bytes, str]] = field(default_factory=dict)
    upload_responses: List[Tuple[int, Any]] = field(default_factory=list)
    info_responses: List[Tuple[int, Any]] = field(default_factory=list)
    uploads: List[Dict[str, Any]] = field(default_factory=list)
    auth_headers: List[Optional[str]] = field(default_factory=list)
    requests: List[str] = field(default_factory=list)
    slow_seconds: float = 0.0
    # None, "negotiate" (honour Accept-Encoding) or "gzip" (always compress)
    download_compression: Optional[str] = None
    accept_encodings: List[Optional[str]] = field(default_factory=list)

    def add_file(self, file_id: str, name: str, content: bytes, mime_type: str = "application/octet-stream"):
        self.files[file_id] = (name, content, mime_type)

    def _record(self, request: web.Request):
        self.requests.append(f"{request.method} {request.path}")
        self.auth_headers.append(request.headers.get("Authorization"))

    async def handle_upload(self, request: web.Request) -> web.Response:
        self._record(request)
        reader = await request.multipart()
        part = await reader.next()
        content = await part.read()
        self.uploads.append({
            "field": part.name,
            "filename": part.filename,
            "content": bytes(content),
            "content_type": part.headers.get("Content-Type"),
        })
        if self.upload_responses:
            status, body = self.upload_responses.pop(0)
            if isinstance(body, str):
                return web.Response(status=status, text=body)
            return web.json_response(body, status=status)
        file_id = f"file{len(self.uploads)}"
        self.add_file(file_id, part.filename or "", bytes(content))
        return web.json_response({"success": True, "id": file_id}, status=201)

    async def handle_info(self, request: web.Request) -> web.Response:
        self._record(request)
        if self.slow_seconds:
            await asyncio.sleep(self.slow_seconds)
        if self.info_responses:
            status, body = self.info_responses.pop(0)
            return web.json_response(body, status=status)
        file_id = request.match_info["file_id"]
        if file_id not in self.files:
            return web.json_response(
                {"success": False, "value": "not_found", "message": "The entity you requested could not be found"},
                status=404,
            )
        name, content, mime_type = self.files[file_id]
        return web.json_response({
            "id": file_id,
            "name": name,
            "size": len(content),
            "views": 7,
            "downloads": 4,
            "date_upload": "2024-05-01T10:00:00Z",
            "mime_type": mime_type,
            "hash_sha256": "ab" * 32,
        })

    async def handle_download(self, request: web.Request) -> web.Response:
        self._record(request)
        file_id = request.match_info["file_id"]
        if file_id not in self.files:
            return web.json_response(
                {"success": False, "value": "not_found", "message": "The entity you requested could not be found"},
                status=404,
            )
        self.accept_encodings.append(request.headers.get("Accept-Encoding"))
        name, content, mime_type = self.files[file_id]
        response = web.Response(
            body=content,
            content_type=mime_type,
            headers={"Content-Disposition": f'attachment; filename="{name}"'},
        )
        if self.download_compression == "negotiate":
            response.enable_compression()
        elif self.download_compression == "gzip":
            response.enable_compression(force=web.ContentCoding.gzip)
        return response

    async def handle_user(self, request: web.Request) -> web.Response:
        self._record(request)
        if not request.headers.get("Authorization"):
            return web.json_response(
                {"success": False, "value": "authentication_required", "message": "Authentication required"},
                status=401,
            )
        return web.json_response({"username": "gateway-user"})


@pytest_asyncio.fixture
async def fake_pixeldrain():
    """Start a fake Pixeldrain API server for client tests."""
    state = FakePixeldrain()
    fake_app = web.Application()
    fake_app.router.add_post("/api/file", state.handle_upload)
    fake_app.router.add_get("/api/file/{file_id}/info", state.handle_info)
    fake_app.router.add_get("/api/file/{file_id}", state.handle_download)
    fake_app.router.add_get("/api/user", state.handle_user)

    server = TestServer(fake_app)
    await server.start_server()
    state.base_url = str(server.make_url("/api"))
    yield state
    await server.close()


# Test markers
def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
