import logging
import mimetypes
import os
from abc import ABC, abstractmethod
from pathlib import Path

from texteditor.errors import HintError
from texteditor.models import FileDescriptor

logger = logging.getLogger(__name__)

DIRECTORY_MIMETYPE = "httpd/unix-directory"
DEFAULT_MIMETYPE = "application/octet-stream"


class FileStore(ABC):
    """File access for the acting user, paths relative to their files root."""

    @abstractmethod
    def stat(self, path: str) -> FileDescriptor: ...

    @abstractmethod
    def read_bytes(self, path: str) -> bytes | None:
        """Full file content, or ``None`` when it cannot be read."""

    @abstractmethod
    def write_bytes(self, path: str, data: bytes) -> bool: ...

    @abstractmethod
    def invalidate_stat_cache(self) -> None: ...


class LocalFileStore(FileStore):
    def __init__(self, root_dir: str, user_id: str):
        self.root = Path(root_dir)
        self.user_id = user_id
        self._stat_cache: dict[str, FileDescriptor] = {}

    def _user_dir(self) -> Path:
        root = self.root.resolve()
        if (root / self.user_id).resolve().parent != root:
            raise HintError(f"user id escapes storage root: {self.user_id!r}", hint="Invalid user id supplied.")
        user_path = root / self.user_id / "files"
        user_path.mkdir(parents=True, exist_ok=True)
        return user_path.resolve()

    def _resolve(self, path: str) -> Path:
        user_dir = self._user_dir()
        target = (user_dir / path.lstrip("/")).resolve()
        if target != user_dir and user_dir not in target.parents:
            raise HintError(f"path escapes user directory: {path}", hint="Invalid file path supplied.")
        return target

    def stat(self, path: str) -> FileDescriptor:
        if path in self._stat_cache:
            return self._stat_cache[path]

        target = self._resolve(path)
        try:
            st = target.stat()
        except FileNotFoundError as exc:
            raise HintError(f"no such file: {path}", hint="File not found.") from exc

        if target.is_dir():
            file_type, mimetype = "folder", DIRECTORY_MIMETYPE
        else:
            file_type = "file"
            mimetype = mimetypes.guess_type(target.name)[0] or DEFAULT_MIMETYPE

        descriptor = FileDescriptor(
            path=path,
            size=st.st_size,
            mtime=int(st.st_mtime),
            mimetype=mimetype,
            owner=self.user_id,
            updatable=os.access(target, os.W_OK),
            file_type=file_type,
            file_id=str(st.st_ino),
        )
        self._stat_cache[path] = descriptor
        return descriptor

    def read_bytes(self, path: str) -> bytes | None:
        target = self._resolve(path)
        try:
            return target.read_bytes()
        except OSError:
            logger.warning("Cannot read %s for user %s", path, self.user_id, exc_info=True)
            return None

    def write_bytes(self, path: str, data: bytes) -> bool:
        target = self._resolve(path)
        try:
            previous_mtime = int(target.stat().st_mtime) if target.exists() else None
            target.write_bytes(data)
            # mtime is the editor's version marker, so every write must advance it
            current_mtime = int(target.stat().st_mtime)
            if previous_mtime is not None and current_mtime <= previous_mtime:
                bumped = previous_mtime + 1
                os.utime(target, (bumped, bumped))
        except OSError:
            logger.error("Cannot write %s for user %s", path, self.user_id, exc_info=True)
            return False
        return True

    def invalidate_stat_cache(self) -> None:
        self._stat_cache.clear()
