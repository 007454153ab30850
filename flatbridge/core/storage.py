"""Managed directory for uploaded sources and exported files."""

import os
import re
import time
import uuid
from typing import BinaryIO, Optional

from flatbridge.exceptions import ValidationError
from flatbridge.logging import get_logger

logger = get_logger(__name__)

COPY_CHUNK_SIZE = 1024 * 1024

UPLOAD_NAME_PATTERN = re.compile(r"^\d+-[0-9a-f]{8}-.+$")


def timestamp_ms() -> int:
    return int(time.time() * 1000)


class UploadStorage:
    """Owns every file flatbridge reads from or writes to.

    The root is created once and passed explicitly to whoever needs it.
    Paths handed back to callers are absolute and always inside the root.
    """

    def __init__(self, root: str):
        self.root = os.path.abspath(root)
        os.makedirs(self.root, exist_ok=True)

    def _safe_name(self, name: str) -> str:
        base = os.path.basename((name or "").replace("\\", "/")).strip()
        if not base or base in (".", ".."):
            raise ValidationError(f"Invalid file name: {name!r}")
        return base

    def resolve(self, path: str) -> str:
        """Return the absolute form of ``path``, which must lie in the root.

        Relative paths are taken relative to the root.

        Raises:
            ValidationError: If the path escapes the storage root
        """
        if not path:
            raise ValidationError("File path is required")
        candidate = os.path.abspath(os.path.join(self.root, path))
        if os.path.commonpath([self.root, candidate]) != self.root:
            raise ValidationError(f"File path is outside the storage directory: {path}")
        return candidate

    def save_upload(self, stream: BinaryIO, original_name: str) -> str:
        """Copy an uploaded stream to a uniquely named file and return its path."""
        name = f"{timestamp_ms()}-{uuid.uuid4().hex[:8]}-{self._safe_name(original_name)}"
        path = os.path.join(self.root, name)
        try:
            with open(path, "wb") as f:
                while True:
                    chunk = stream.read(COPY_CHUNK_SIZE)
                    if not chunk:
                        break
                    f.write(chunk)
        except Exception:
            self.discard(path)
            raise
        logger.info(f"Stored upload {original_name!r} as {name}")
        return path

    def is_upload(self, path: str) -> bool:
        """True if ``path`` is a file stored by ``save_upload``."""
        return (
            os.path.dirname(os.path.abspath(path)) == self.root
            and UPLOAD_NAME_PATTERN.match(os.path.basename(path)) is not None
        )

    def export_path(self, file_name: Optional[str], table_name: str) -> str:
        """Path for an export: the caller's name or ``{table}_export_{ts}.csv``."""
        if file_name:
            name = self._safe_name(file_name)
        else:
            name = f"{table_name}_export_{timestamp_ms()}.csv"
        return os.path.join(self.root, name)

    def discard(self, path: str) -> bool:
        """Delete ``path``; failures are logged, never raised."""
        try:
            os.remove(path)
            logger.info(f"Removed {path}")
            return True
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.error(f"Error cleaning up file {path}: {e}")
            return False
