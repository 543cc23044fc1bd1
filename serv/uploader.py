import logging
from typing import Callable, Iterable

import httpx
import pyperclip

from serv.config import ClientSettings
from serv.errors import ClipboardFailure, TransportFailure
from serv.watcher import WatchEvent

logger = logging.getLogger(__name__)


def copy_to_clipboard(text: str) -> None:
    try:
        pyperclip.copy(text)
    except pyperclip.PyperclipException as e:
        raise ClipboardFailure(str(e)) from e


class UploadClient:
    """Uploads finished files and puts the returned URL on the clipboard."""

    def __init__(
        self,
        settings: ClientSettings,
        http: httpx.Client | None = None,
        copy: Callable[[str], None] = copy_to_clipboard,
    ):
        self.settings = settings
        self._http = http or httpx.Client(timeout=settings.timeout)
        self._http.headers["Authorization"] = settings.api_key
        self._copy = copy

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "UploadClient":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def upload(self, content: bytes) -> str:
        """POST ``content`` and return the public URL the server hands back."""
        try:
            res = self._http.post(self.settings.upload_url, content=content)
        except httpx.HTTPError as e:
            raise TransportFailure(f"upload failed: {e!r}") from e
        if not res.is_success:
            raise TransportFailure(f"upload rejected: {res.status_code} {res.text.strip()}")
        return res.text.strip()

    def handle(self, event: WatchEvent) -> str | None:
        """Process one watch event; returns the URL when an upload happened.

        Failures are logged and swallowed so the watch loop keeps going.
        """
        if not event.is_write_finalized:
            return None
        path = event.path
        try:
            content = path.read_bytes()
        except OSError as e:
            logger.error("could not read %s: %s", path, e)
            return None

        logger.info("uploading %s (%d bytes)", path, len(content))
        try:
            url = self.upload(content)
        except TransportFailure as e:
            logger.error("error uploading %s: %s", path, e)
            return None

        logger.info("file uploaded: %s", url)
        try:
            self._copy(url)
        except ClipboardFailure as e:
            logger.debug("clipboard unavailable: %s", e)
        return url

    def run(self, events: Iterable[WatchEvent]) -> int:
        """Drain ``events`` one at a time; returns the number of uploads."""
        uploaded = 0
        for event in events:
            if self.handle(event) is not None:
                uploaded += 1
        return uploaded

