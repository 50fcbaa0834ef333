# =============================================================================
# core/services/storage_service.py - Local File Storage
# =============================================================================
# Handles uploaded files on the local filesystem:
# - store(): copy an upload to <root>/<uuid>.<ext>, return /uploads/<uuid>.<ext>
# - delete(): remove a stored file (missing files are fine)
# - transaction(): stage stores and deletes so a failed operation
#   leaves the directory exactly as it was
#
# Files live flat under one root directory which is passed in explicitly.
# =============================================================================

from __future__ import annotations

import logging
import os
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO
from uuid import uuid4

from app.exceptions import StorageError

logger = logging.getLogger(__name__)

DEFAULT_EXTENSION = "bin"


@dataclass
class IncomingFile:
    """An uploaded payload, independent of the web framework."""

    filename: str | None
    stream: BinaryIO
    size: int

    @property
    def is_empty(self) -> bool:
        return self.size <= 0


def has_content(incoming: IncomingFile | None) -> bool:
    """True when a payload was sent and it isn't empty."""
    return incoming is not None and not incoming.is_empty


class FileStore:
    """
    Stores uploaded files flat under `root`.

    Rows reference files as `<url_prefix><name>`; `path_for` maps such a
    reference back to a path under `root`.
    """

    def __init__(self, root: str | Path, url_prefix: str = "/uploads/"):
        self.root = Path(root)
        self.url_prefix = url_prefix if url_prefix.endswith("/") else url_prefix + "/"
        self._root_ready = False

    # -------------------------------------------------------------------------
    # Naming
    # -------------------------------------------------------------------------

    @staticmethod
    def file_extension(filename: str | None) -> str:
        """
        Extension after the last '.' of the file's base name.

        Falls back to "bin" when the name is missing or has no extension.
        """
        if not filename:
            return DEFAULT_EXTENSION
        base = filename.replace("\\", "/").rsplit("/", 1)[-1]
        if "." not in base:
            return DEFAULT_EXTENSION
        return base.rsplit(".", 1)[1] or DEFAULT_EXTENSION

    def generate_name(self, filename: str | None) -> str:
        return f"{uuid4()}.{self.file_extension(filename)}"

    def url_for(self, name: str) -> str:
        return f"{self.url_prefix}{name}"

    def path_for(self, url: str) -> Path:
        """Resolve a stored reference to its path under the root."""
        name = url
        if name.startswith(self.url_prefix):
            name = name[len(self.url_prefix):]
        # Only the final component, so references can't escape the root
        name = name.replace("\\", "/").rsplit("/", 1)[-1]
        if not name:
            raise StorageError(f"Invalid file reference: {url!r}", path=url)
        return self.root / name

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    def ensure_root(self) -> None:
        """
        Create the root directory if needed and check it is writable.

        Raises:
            StorageError: If the directory can't be created or written to
        """
        if self._root_ready:
            return

        if not self.root.exists():
            try:
                self.root.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                logger.error(f"Failed to create upload directory {self.root}: {e}")
                raise StorageError(
                    f"Failed to create upload directory: {self.root}", path=str(self.root)
                )
            logger.info(f"Created upload directory: {self.root}")

        if not self.root.is_dir() or not os.access(self.root, os.W_OK):
            logger.error(f"Upload directory is not writable: {self.root}")
            raise StorageError(
                f"Upload directory is not writable: {self.root}", path=str(self.root)
            )

        self._root_ready = True

    def store(self, stream: BinaryIO, filename: str | None) -> str:
        """
        Copy a byte stream to a freshly named file.

        Args:
            stream: Readable binary stream with the upload content
            filename: Original filename, used only for its extension

        Returns:
            Stored reference, e.g. "/uploads/<uuid>.mp4"

        Raises:
            StorageError: If the file can't be written
        """
        self.ensure_root()

        name = self.generate_name(filename)
        path = self.root / name

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            if hasattr(stream, "seek"):
                stream.seek(0)
            with open(path, "wb") as target:
                shutil.copyfileobj(stream, target)
        except OSError as e:
            logger.error(f"Failed to store {filename!r} at {path}: {e}")
            raise StorageError(f"File upload failed: {e}", path=str(path))

        logger.info(f"Stored file: {path}")
        return self.url_for(name)

    def delete(self, url: str) -> None:
        """
        Delete a stored file. A file that is already gone is not an error.

        Raises:
            StorageError: If the file exists but can't be removed
        """
        path = self.path_for(url)
        try:
            path.unlink()
        except FileNotFoundError:
            logger.debug(f"File already absent: {path}")
            return
        except OSError as e:
            logger.error(f"Failed to delete {path}: {e}")
            raise StorageError(f"File deletion failed: {e}", path=str(path))

        logger.info(f"Deleted file: {path}")

    def retire(self, url: str) -> tuple[Path, Path] | None:
        """
        Move a stored file aside so it can be restored or purged later.

        Returns:
            (original path, retired path), or None if the file was absent

        Raises:
            StorageError: If the file exists but can't be moved
        """
        self.ensure_root()

        path = self.path_for(url)
        retired = path.with_name(f".{path.name}.{uuid4().hex}.retired")
        try:
            os.replace(path, retired)
        except FileNotFoundError:
            logger.debug(f"File already absent: {path}")
            return None
        except OSError as e:
            logger.error(f"Failed to remove {path}: {e}")
            raise StorageError(f"File deletion failed: {e}", path=str(path))

        return path, retired

    def transaction(self) -> FileTransaction:
        return FileTransaction(self)


class FileTransaction:
    """
    Groups file changes that belong to one database write.

    New files are written immediately; old files are moved aside rather
    than deleted. On success the moved-aside files are purged, on failure
    new files are deleted and old ones moved back.

    Usage:
        with store.transaction() as files:
            software.video_url = files.replace(software.video_url, video)
            db.commit()
    """

    def __init__(self, store: FileStore):
        self.store = store
        self._created: list[str] = []
        self._retired: list[tuple[Path, Path]] = []
        self._closed = False

    def __enter__(self) -> FileTransaction:
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if exc_type is None:
            self.commit()
        else:
            self.rollback()
        return False

    def add(self, incoming: IncomingFile) -> str:
        """Store a new file; it is deleted again on rollback."""
        url = self.store.store(incoming.stream, incoming.filename)
        self._created.append(url)
        return url

    def remove(self, url: str | None) -> None:
        """Retire an existing file; it is restored on rollback."""
        if not url:
            return
        moved = self.store.retire(url)
        if moved is not None:
            self._retired.append(moved)

    def replace(self, old_url: str | None, incoming: IncomingFile) -> str:
        """Retire the old file, then store its replacement."""
        self.remove(old_url)
        return self.add(incoming)

    def commit(self) -> None:
        if self._closed:
            return
        self._closed = True
        for original, retired in self._retired:
            try:
                retired.unlink()
                logger.info(f"Deleted file: {original}")
            except OSError as e:
                # The rows are already committed; a leftover file is only clutter
                logger.warning(f"Could not purge retired file {retired}: {e}")

    def rollback(self) -> None:
        if self._closed:
            return
        self._closed = True
        for url in reversed(self._created):
            try:
                self.store.delete(url)
            except StorageError as e:
                logger.error(f"Rollback could not delete {url}: {e.message}")
        for original, retired in reversed(self._retired):
            try:
                os.replace(retired, original)
            except OSError as e:
                logger.error(f"Rollback could not restore {original}: {e}")
        if self._created or self._retired:
            logger.warning(
                f"Rolled back file changes ({len(self._created)} stored, "
                f"{len(self._retired)} removed)"
            )
