import logging
import os
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_BIND_ADDR = "127.0.0.1:8080"
DEFAULT_DATA_DIR = "./data/"
DEFAULT_PUBLIC_ENDPOINT = "http://localhost:8080"
DEFAULT_MAX_MB = 25
DEFAULT_TIMEOUT_S = 30.0
DEFAULT_QUEUE_SIZE = 256

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)


def split_bind_addr(addr: str) -> tuple[str, int]:
    host, sep, port = addr.strip().rpartition(":")
    if not sep or not host or not port.isdigit():
        raise ValueError(f"bind address must look like host:port, got {addr!r}")
    return host.strip("[]"), int(port)


class ServerSettings(BaseModel):
    model_config = ConfigDict(frozen=True, validate_default=True)

    bind_addr: str = DEFAULT_BIND_ADDR
    api_key: str = Field(min_length=1)
    data_dir: Path = Path(DEFAULT_DATA_DIR)
    public_endpoint: str = DEFAULT_PUBLIC_ENDPOINT
    max_mb: int = Field(default=DEFAULT_MAX_MB, ge=1)
    api_key_query_param: str | None = None
    log_level: str = "INFO"

    @field_validator("bind_addr")
    @classmethod
    def _check_bind_addr(cls, v: str) -> str:
        split_bind_addr(v)
        return v.strip()

    @field_validator("data_dir")
    @classmethod
    def _resolve_data_dir(cls, v: Path) -> Path:
        return v.expanduser().resolve()

    @field_validator("public_endpoint")
    @classmethod
    def _strip_endpoint(cls, v: str) -> str:
        return v.strip().rstrip("/")

    @property
    def bind_host(self) -> str:
        return split_bind_addr(self.bind_addr)[0]

    @property
    def bind_port(self) -> int:
        return split_bind_addr(self.bind_addr)[1]

    @property
    def max_bytes(self) -> int:
        return self.max_mb * 1024 * 1024

    @classmethod
    def from_env(cls, environ=None) -> "ServerSettings":
        env = os.environ if environ is None else environ
        api_key = env.get("API_KEY", "")
        if not api_key:
            raise RuntimeError("API_KEY is required")
        return cls(
            bind_addr=env.get("BIND_ADDR", DEFAULT_BIND_ADDR),
            api_key=api_key,
            data_dir=Path(env.get("DATA_DIR", DEFAULT_DATA_DIR)),
            public_endpoint=env.get("PUBLIC_ENDPOINT", DEFAULT_PUBLIC_ENDPOINT),
            max_mb=int(env.get("UPLOAD_MAX_MB", str(DEFAULT_MAX_MB))),
            api_key_query_param=(env.get("API_KEY_QUERY_PARAM") or "").strip() or None,
            log_level=env.get("LOG_LEVEL", "INFO"),
        )


class ClientSettings(BaseModel):
    """Settings for the watch client, taken from the command line."""

    model_config = ConfigDict(frozen=True, validate_default=True)

    watch_path: Path
    server_url: str
    api_key: str = Field(min_length=1)
    timeout: float | None = DEFAULT_TIMEOUT_S
    queue_size: int = Field(default=DEFAULT_QUEUE_SIZE, ge=0)
    log_level: str = "INFO"

    @field_validator("server_url")
    @classmethod
    def _strip_url(cls, v: str) -> str:
        return v.strip().rstrip("/")

    @property
    def upload_url(self) -> str:
        return f"{self.server_url}/upload"
