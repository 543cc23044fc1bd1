"""Directory watcher feeding a bounded event queue.

The watchdog observer thread is the producer; whoever iterates the
``FileWatcher`` is the single consumer. Closing the watcher stops the
observer and ends iteration.
"""
import logging
import os
import queue
import threading
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from watchdog.events import (
    EVENT_TYPE_CLOSED,
    EVENT_TYPE_CLOSED_NO_WRITE,
    EVENT_TYPE_CREATED,
    EVENT_TYPE_DELETED,
    EVENT_TYPE_MODIFIED,
    EVENT_TYPE_MOVED,
    EVENT_TYPE_OPENED,
    FileSystemEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer

logger = logging.getLogger(__name__)


class WatchEventKind(Enum):
    WRITE_FINALIZED = "write_finalized"
    CREATED = "created"
    MODIFIED = "modified"
    DELETED = "deleted"
    MOVED = "moved"
    OPENED = "opened"
    CLOSED_NO_WRITE = "closed_no_write"
    OTHER = "other"


_KINDS = {
    EVENT_TYPE_CLOSED: WatchEventKind.WRITE_FINALIZED,
    EVENT_TYPE_CREATED: WatchEventKind.CREATED,
    EVENT_TYPE_MODIFIED: WatchEventKind.MODIFIED,
    EVENT_TYPE_DELETED: WatchEventKind.DELETED,
    EVENT_TYPE_MOVED: WatchEventKind.MOVED,
    EVENT_TYPE_OPENED: WatchEventKind.OPENED,
    EVENT_TYPE_CLOSED_NO_WRITE: WatchEventKind.CLOSED_NO_WRITE,
}


@dataclass(frozen=True, slots=True)
class WatchEvent:
    path: Path
    kind: WatchEventKind

    @property
    def is_write_finalized(self) -> bool:
        return self.kind is WatchEventKind.WRITE_FINALIZED


def translate(event: FileSystemEvent) -> WatchEvent:
    src = event.src_path
    if isinstance(src, bytes):
        src = os.fsdecode(src)
    kind = _KINDS.get(event.event_type, WatchEventKind.OTHER)
    if event.is_directory and kind is WatchEventKind.WRITE_FINALIZED:
        kind = WatchEventKind.OTHER
    return WatchEvent(path=Path(src), kind=kind)


_CLOSED = object()
_PUT_POLL_S = 0.5


class _QueueingHandler(FileSystemEventHandler):
    def __init__(self, watcher: "FileWatcher"):
        super().__init__()
        self._watcher = watcher

    def dispatch(self, event: FileSystemEvent) -> None:
        self._watcher.push(translate(event))


class FileWatcher:
    def __init__(self, path: Path, queue_size: int = 256):
        self.path = Path(path)
        self._queue: queue.Queue = queue.Queue(maxsize=queue_size)
        self._closed = threading.Event()
        self._observer = None

    def start(self) -> None:
        """Install the subscription. Errors here are fatal to the caller."""
        if not self.path.is_dir():
            raise NotADirectoryError(f"not a directory: {self.path}")
        observer = Observer()
        observer.schedule(_QueueingHandler(self), str(self.path), recursive=False)
        observer.start()
        self._observer = observer
        logger.info("watching %s", self.path)

    def push(self, event: WatchEvent) -> None:
        while not self._closed.is_set():
            try:
                self._queue.put(event, timeout=_PUT_POLL_S)
                return
            except queue.Full:
                continue

    def close(self) -> None:
        if self._closed.is_set():
            return
        self._closed.set()
        if self._observer is not None:
            self._observer.stop()
            self._observer.join()
        while True:
            try:
                self._queue.put_nowait(_CLOSED)
                return
            except queue.Full:
                # Make room for the sentinel; pending events are dropped on close.
                try:
                    self._queue.get_nowait()
                except queue.Empty:
                    pass

    def __iter__(self):
        while True:
            item = self._queue.get()
            if item is _CLOSED:
                return
            yield item

    def __enter__(self) -> "FileWatcher":
        self.start()
        return self

    def __exit__(self, *exc) -> None:
        self.close()
