"""
Filesystem paste store: one file per paste, named by its id, holding
exactly the raw content bytes.
"""

import errno
import logging
import os
import tempfile
from contextlib import suppress
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import List

from .errors import PasteExists, PasteNotFound, StorageError
from .ids import is_valid_id

TMP_PREFIX = ".tmp."

# os.link failures meaning the filesystem has no hard links
NO_LINK_ERRNOS = {errno.EPERM, errno.EOPNOTSUPP, errno.ENOTSUP}

logger = logging.getLogger("pastel.store")


@dataclass(frozen=True)
class PasteInfo:
    id: str
    size: int
    last_modified_at: datetime


def _utc(timestamp: float) -> datetime:
    return datetime.fromtimestamp(timestamp, tz=timezone.utc)


def _info_from_stat(paste_id: str, st: os.stat_result) -> PasteInfo:
    return PasteInfo(
        id=paste_id,
        size=st.st_size,
        last_modified_at=_utc(st.st_mtime),
    )


class PasteStore:
    """
    Durable id -> content mapping.

    Writes go to a temporary file in the same directory and are then
    published atomically, so a reader either sees the old content, the new
    content or PasteNotFound, never a partial paste.
    """

    def __init__(self, root: Path):
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)
        self._hard_links = True

    def _path(self, paste_id: str) -> Path:
        if not is_valid_id(paste_id):
            raise PasteNotFound(paste_id)
        return self.root / paste_id

    def _write_temp(self, content: bytes) -> str:
        fd, tmp_path = tempfile.mkstemp(prefix=TMP_PREFIX, dir=self.root)
        try:
            with os.fdopen(fd, 'wb') as f:
                f.write(content)
                f.flush()
                os.fsync(f.fileno())
        except BaseException:
            with suppress(OSError):
                os.unlink(tmp_path)
            raise
        return tmp_path

    def exists(self, paste_id: str) -> bool:
        if not is_valid_id(paste_id):
            return False
        try:
            return (self.root / paste_id).is_file()
        except OSError:
            return False

    def write(self, paste_id: str, content: bytes) -> None:
        """Create or overwrite a paste"""
        path = self._path(paste_id)
        try:
            tmp_path = self._write_temp(content)
        except OSError as e:
            raise StorageError(f"Failed to write paste {paste_id}: {e}") from e
        try:
            os.replace(tmp_path, path)
        except OSError as e:
            with suppress(OSError):
                os.unlink(tmp_path)
            raise StorageError(f"Failed to write paste {paste_id}: {e}") from e

    def create(self, paste_id: str, content: bytes) -> None:
        """
        Publish a new paste only if the id is free.

        Raises:
            PasteExists: if another paste already holds the id
        """
        path = self._path(paste_id)
        try:
            tmp_path = self._write_temp(content)
        except OSError as e:
            raise StorageError(f"Failed to write paste {paste_id}: {e}") from e
        try:
            self._publish_new(tmp_path, path)
        except FileExistsError:
            raise PasteExists(paste_id)
        except OSError as e:
            raise StorageError(f"Failed to write paste {paste_id}: {e}") from e
        finally:
            with suppress(OSError):
                os.unlink(tmp_path)

    def _publish_new(self, tmp_path: str, path: Path) -> None:
        """Move tmp_path to path, raising FileExistsError if path is taken"""
        if self._hard_links:
            try:
                os.link(tmp_path, path)
                return
            except OSError as e:
                if e.errno not in NO_LINK_ERRNOS:
                    raise
                logger.warning(f"Hard links not supported in {self.root} ({e}), "
                               f"reserving new paste names with O_EXCL instead")
                self._hard_links = False
        # reserve the name, then swap the content in; readers may briefly see an empty paste
        fd = os.open(path, os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o644)
        os.close(fd)
        os.replace(tmp_path, path)

    def read(self, paste_id: str) -> bytes:
        path = self._path(paste_id)
        try:
            with open(path, 'rb') as f:
                return f.read()
        except (FileNotFoundError, IsADirectoryError):
            raise PasteNotFound(paste_id)
        except OSError as e:
            raise StorageError(f"Failed to read paste {paste_id}: {e}") from e

    def remove(self, paste_id: str) -> None:
        path = self._path(paste_id)
        try:
            os.unlink(path)
        except FileNotFoundError:
            raise PasteNotFound(paste_id)
        except OSError as e:
            raise StorageError(f"Failed to delete paste {paste_id}: {e}") from e

    def stat(self, paste_id: str) -> PasteInfo:
        path = self._path(paste_id)
        try:
            return _info_from_stat(paste_id, path.stat())
        except FileNotFoundError:
            raise PasteNotFound(paste_id)
        except OSError as e:
            raise StorageError(f"Failed to stat paste {paste_id}: {e}") from e

    def list_all(self) -> List[PasteInfo]:
        """Metadata for every published paste; temp files are skipped"""
        pastes = []
        try:
            with os.scandir(self.root) as entries:
                for entry in entries:
                    if not is_valid_id(entry.name):
                        continue
                    try:
                        if not entry.is_file(follow_symlinks=False):
                            continue
                        pastes.append(_info_from_stat(entry.name, entry.stat(follow_symlinks=False)))
                    except FileNotFoundError:
                        # deleted while we were scanning
                        continue
        except OSError as e:
            raise StorageError(f"Failed to list pastes in {self.root}: {e}") from e
        return pastes
