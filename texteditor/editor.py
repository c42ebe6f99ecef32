"""Load and save handlers of the text editor, plus HTML preview link derivation.

Handlers never raise: every outcome is either a response model or a
:class:`~texteditor.errors.Failure` that the HTTP layer renders as a client
error.
"""

import logging
from datetime import datetime, timezone

from texteditor.cache import LinkCache
from texteditor.config import Settings
from texteditor.encoding import decode_text, to_utf8
from texteditor.errors import ErrorKind, Failure, HintError
from texteditor.models import LoadResponse, SaveResponse, ShareRecord
from texteditor.repository import ShareRegistry
from texteditor.signing import PreviewLinkSigner
from texteditor.storage import FileStore

logger = logging.getLogger(__name__)

HTML_MIMETYPE = "text/html"
FILE_SALT_KEY_PREFIX = "filesalt_"
EXPIRATION_FORMAT = "%Y-%m-%d %H:%M:%S"

MSG_INVALID_PATH = "Invalid file path supplied."
MSG_TOO_BIG = "This file is too big to be opened. Please download the file instead."
MSG_CANNOT_READ = "Cannot read the file."
MSG_PATH_MISSING = "File path not supplied"
MSG_MTIME_MISSING = "File mtime not supplied"
MSG_MODIFIED = "Cannot save file as it has been modified since opening"
MSG_NO_PERMISSION = "Insufficient permissions"
MSG_CANNOT_SAVE = "Cannot save the file."
MSG_INTERNAL = "An internal server error occurred."


def to_timestamp(value: datetime) -> int:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return int(value.timestamp())


class FileEditor:
    def __init__(
        self,
        *,
        file_store: FileStore,
        share_registry: ShareRegistry,
        link_cache: LinkCache,
        settings: Settings,
        signer: PreviewLinkSigner,
    ):
        self.file_store = file_store
        self.share_registry = share_registry
        self.link_cache = link_cache
        self.settings = settings
        self.signer = signer

    def load(self, directory: str, filename: str) -> LoadResponse | Failure:
        try:
            return self._load(directory, filename)
        except HintError as exc:
            logger.warning("Load of %s/%s refused: %s", directory, filename, exc)
            return Failure(ErrorKind.INTERNAL_FAULT, exc.hint)
        except Exception:
            logger.exception("Load of %s/%s failed", directory, filename)
            return Failure(ErrorKind.INTERNAL_FAULT, MSG_INTERNAL)

    def _load(self, directory: str, filename: str) -> LoadResponse | Failure:
        if not filename:
            return Failure(ErrorKind.INVALID_INPUT, MSG_INVALID_PATH)

        path = f"{directory}/{filename}"
        if self.file_store.stat(path).size > self.settings.max_edit_size_bytes:
            return Failure(ErrorKind.FILE_TOO_LARGE, MSG_TOO_BIG)

        raw = self.file_store.read_bytes(path)
        if raw is None:
            return Failure(ErrorKind.READ_FAILED, MSG_CANNOT_READ)

        contents, encoding = decode_text(raw)
        logger.debug("Loaded %s as %s", path, encoding)

        info = self.file_store.stat(path)
        preview_url = ""
        if info.mimetype == HTML_MIMETYPE:
            preview_url = self.derive_preview_link(path, info.owner)

        return LoadResponse(
            file_contents=contents,
            writable=info.updatable,
            mime=info.mimetype,
            mtime=info.mtime,
            preview_url=preview_url,
        )

    def save(self, path: str, file_contents: str | bytes, mtime: int | None) -> SaveResponse | Failure:
        try:
            return self._save(path, file_contents, mtime)
        except HintError as exc:
            logger.warning("Save of %s refused: %s", path, exc)
            return Failure(ErrorKind.INTERNAL_FAULT, exc.hint)
        except Exception:
            logger.exception("Save of %s failed", path)
            return Failure(ErrorKind.INTERNAL_FAULT, MSG_INTERNAL)

    def _save(self, path: str, file_contents: str | bytes, mtime: int | None) -> SaveResponse | Failure:
        if not path:
            logger.error("No file path supplied")
            return Failure(ErrorKind.INVALID_INPUT, MSG_PATH_MISSING)
        if not isinstance(mtime, int) or isinstance(mtime, bool) or mtime <= 0:
            logger.error("No file mtime supplied for %s", path)
            return Failure(ErrorKind.INVALID_INPUT, MSG_MTIME_MISSING)

        # check-then-act: a write landing between this stat and ours is not detected
        info = self.file_store.stat(path)
        if info.mtime != mtime:
            logger.error("File: %s modified since opening.", path)
            return Failure(ErrorKind.CONFLICTING_MODIFICATION, MSG_MODIFIED)
        if not info.updatable:
            logger.error("User does not have permission to write to file: %s", path)
            return Failure(ErrorKind.PERMISSION_DENIED, MSG_NO_PERMISSION)

        if not self.file_store.write_bytes(path, to_utf8(file_contents)):
            return Failure(ErrorKind.INTERNAL_FAULT, MSG_CANNOT_SAVE)

        self.file_store.invalidate_stat_cache()
        updated = self.file_store.stat(path)
        return SaveResponse(mtime=updated.mtime, size=updated.size)

    def derive_preview_link(self, path: str, owner: str) -> str:
        info = self.file_store.stat(path)
        shares = self.share_registry.shares_for(info.file_type, info.file_id)

        share: ShareRecord | None = None
        for candidate in shares:
            if candidate.owner_user_id == owner:
                share = candidate
        if share is None:
            return ""

        salt = self.settings.get_system_value("html_preview_salt")
        prefix = self.settings.get_system_value("html_preview_prefix")
        domain = self.settings.get_system_value("html_preview_domain")
        if not salt or not prefix:
            logger.error("html_preview_salt or html_preview_prefix not set")
            return ""

        if share.expiration is not None:
            expires = to_timestamp(share.expiration)
        else:
            expires = to_timestamp(
                datetime.strptime(self.settings.default_preview_expiration, EXPIRATION_FORMAT)
            )

        secret_path = f"/{owner}/files/{path.lstrip('/')}"
        self.link_cache.set(
            FILE_SALT_KEY_PREFIX + secret_path,
            share.token,
            self.settings.preview_token_ttl_seconds,
        )
        return self.signer.get_secret_link(secret_path, expires, share.token, salt, prefix, domain)
