import logging
import os
import random
import re
import secrets
import string
from pathlib import Path

from serv.errors import InvalidKey, NotFound, StorageIOFailure
from serv.filetype import EXTENSIONS, FileType

logger = logging.getLogger(__name__)

NAME_LENGTH = 7
NAME_ALPHABET = string.ascii_letters + string.digits
KEY_RE = re.compile(r"^[A-Za-z0-9]{1,64}\.([a-z]{1,8})$")

_system_random = secrets.SystemRandom()


def generate_key(file_type: FileType, rng: random.Random | None = None) -> str:
    """Return a fresh ``{7 alphanumerics}.{ext}`` storage key.

    Nothing checks the result against keys already on disk.
    """
    rng = rng or _system_random
    name = "".join(rng.choice(NAME_ALPHABET) for _ in range(NAME_LENGTH))
    return f"{name}.{file_type.ext}"


def key_extension(key: str) -> str:
    return key.rpartition(".")[2]


def safe_key(key: str) -> str:
    m = KEY_RE.fullmatch(key)
    if not m or m.group(1) not in EXTENSIONS:
        raise InvalidKey(key)
    return key


class FileStore:
    """Flat directory of stored files, addressed by storage key."""

    def __init__(self, root: Path):
        self.root = Path(root).resolve()

    def ensure_root(self) -> None:
        self.root.mkdir(parents=True, exist_ok=True)

    def path_for(self, key: str) -> Path:
        key = safe_key(key)
        p = (self.root / key).resolve()
        if not p.is_relative_to(self.root) or p.parent != self.root:
            raise InvalidKey(key)
        return p

    def put(self, key: str, data: bytes) -> Path:
        target = self.path_for(key)
        tmp = self.root / f".{key}.{secrets.token_hex(4)}.part"
        try:
            tmp.write_bytes(data)
            os.replace(tmp, target)
        except OSError as e:
            tmp.unlink(missing_ok=True)
            raise StorageIOFailure(f"write {key}") from e
        logger.info("stored %s (%d bytes)", key, len(data))
        return target

    def exists(self, key: str) -> bool:
        p = self.path_for(key)
        try:
            return p.is_file()
        except OSError as e:
            raise StorageIOFailure(f"stat {key}") from e

    def get(self, key: str) -> bytes:
        p = self.path_for(key)
        try:
            return p.read_bytes()
        except (FileNotFoundError, IsADirectoryError) as e:
            raise NotFound(key) from e
        except OSError as e:
            raise StorageIOFailure(f"read {key}") from e
