from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from serv.config import ServerSettings
from serv.main import create_app


TEST_API_KEY = "test-api-key"
TEST_PUBLIC_ENDPOINT = "https://i.example.test"


def png_bytes(tail: bytes = b"\x00" * 128) -> bytes:
    # Signature + padding; the server only sniffs magic bytes.
    return b"\x89PNG\r\n\x1a\n" + tail


def jpeg_bytes() -> bytes:
    return b"\xff\xd8\xff\xe0" + (b"\x00" * 64) + b"\xff\xd9"


@pytest.fixture()
def settings(tmp_path: Path) -> ServerSettings:
    return ServerSettings(
        api_key=TEST_API_KEY,
        data_dir=tmp_path / "data",
        public_endpoint=TEST_PUBLIC_ENDPOINT + "/",
    )


@pytest.fixture()
def app_ctx(settings: ServerSettings) -> dict:
    app = create_app(settings)
    return {"app": app, "base_dir": settings.data_dir, "secret": TEST_API_KEY}


@pytest.fixture()
def client(app_ctx: dict):
    with TestClient(app_ctx["app"]) as c:
        yield c


@pytest.fixture()
def base_dir(app_ctx: dict) -> Path:
    return app_ctx["base_dir"]


@pytest.fixture()
def upload_secret(app_ctx: dict) -> str:
    return app_ctx["secret"]
