"""Local filesystem storage implementation."""

from __future__ import annotations

import errno
import logging
import os
import shutil
from pathlib import Path
from typing import BinaryIO

from .abstract_storage import AbstractStorage, Content
from .exceptions import (
    ConflictError,
    InvalidInputError,
    StorageError,
    StorageInitializationError,
    StorageIOError,
    StoredFileNotFoundError,
)
from .naming import build_unique_filename, validate_name

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


class LocalStorage(AbstractStorage):
    """Persist files to the local filesystem under a fixed root directory.

    The root is resolved once at construction and never changes afterwards.
    Every caller-supplied name is resolved against it and must stay inside
    it; the instance holds no other state, so it can be shared between
    request workers.
    """

    def __init__(self, root: str | os.PathLike[str]):
        self._root = Path(root).expanduser().resolve()
        try:
            os.makedirs(self._root, exist_ok=True)
        except OSError as exc:
            logger.error(
                "Could not create the directory where the uploaded files will be stored."
            )
            raise StorageInitializationError(
                f"Could not initialize storage at {self._root}: {exc}"
            ) from exc
        logger.info("Storage directory initialized at: %s", self._root)

    @property
    def root(self) -> Path:
        return self._root

    def _access_error(self, name, exc: Exception) -> StorageError:
        """Translate a failed path lookup into a typed storage error."""

        too_long = getattr(exc, "errno", None) == errno.ENAMETOOLONG
        if isinstance(exc, ValueError) or too_long:
            return InvalidInputError(f"Invalid file name: {name!r}", name=str(name))
        return StorageIOError(f"Could not access {name}: {exc}", name=str(name))

    def _contained(
        self, name: str | os.PathLike[str], allow_root: bool = False
    ) -> Path:
        """Resolve ``name`` under the root, rejecting anything that escapes it."""

        if not name:
            raise InvalidInputError("A file name is required.", name=str(name))
        validate_name(str(name))

        try:
            candidate = (self._root / name).resolve()
        except (OSError, ValueError) as exc:
            raise self._access_error(name, exc) from exc
        try:
            relative = candidate.relative_to(self._root)
        except ValueError:
            raise InvalidInputError(
                f"Path escapes the storage directory: {name}", name=str(name)
            ) from None
        if not relative.parts and not allow_root:
            raise InvalidInputError(
                f"Path refers to the storage directory itself: {name}", name=str(name)
            )
        return candidate

    def resolve(self, name: str) -> Path:
        """Return the absolute path of an existing stored file."""

        path = self._contained(name)
        try:
            found = path.is_file()
        except (OSError, ValueError) as exc:
            raise self._access_error(name, exc) from exc
        if not found:
            raise StoredFileNotFoundError(f"File not found: {name}", name=name)
        return path

    def store(self, content: Content, original_name: str | None = None) -> str:
        """Write ``content`` under a new unique name and return that name.

        A write that fails part way removes the partial file before the
        error propagates.
        """

        if isinstance(content, (bytes, bytearray, memoryview)):
            head, stream = bytes(content), None
        else:
            head, stream = content.read(CHUNK_SIZE), content
        if not head:
            raise InvalidInputError("Cannot upload empty file.", name=original_name)

        unique_name = build_unique_filename(original_name)
        destination = self._contained(unique_name)
        try:
            self._write(destination, head, stream)
        except OSError as exc:
            raise StorageIOError(
                f"Could not store file: {exc}", name=unique_name
            ) from exc

        logger.info("File stored successfully: %s", unique_name)
        return unique_name

    def _write(self, destination: Path, head: bytes, stream) -> None:
        try:
            with open(destination, "wb") as output:
                output.write(head)
                if stream is not None:
                    shutil.copyfileobj(stream, output, CHUNK_SIZE)
        except Exception:
            try:
                destination.unlink()
            except FileNotFoundError:
                pass
            except OSError:
                logger.warning("Could not remove partial upload: %s", destination)
            raise

    def load(self, name: str) -> Path:
        return self.resolve(name)

    def open(self, name: str) -> BinaryIO:
        path = self.resolve(name)
        try:
            return open(path, "rb")
        except OSError as exc:
            raise StorageIOError(f"Could not open file: {name}", name=name) from exc

    def exists(self, name: str) -> bool:
        try:
            self.resolve(name)
        except (InvalidInputError, StoredFileNotFoundError):
            return False
        return True

    def delete(self, name: str) -> None:
        path = self.resolve(name)
        try:
            path.unlink()
        except FileNotFoundError:
            raise StoredFileNotFoundError(f"File not found: {name}", name=name) from None
        except OSError as exc:
            raise StorageIOError(f"Could not delete file: {name}", name=name) from exc
        logger.info("File deleted successfully: %s", name)

    def rename(self, old_name: str, new_name: str) -> str:
        """Rename a stored file; an occupied target raises ``ConflictError``.

        The existence check and the move are separate filesystem calls, so two
        concurrent renames onto the same target can still race.
        """

        old_path = self.resolve(old_name)
        new_path = self._contained(new_name)

        try:
            occupied = new_path.exists()
        except (OSError, ValueError) as exc:
            raise self._access_error(new_name, exc) from exc
        if occupied:
            raise ConflictError(
                f"File with new name already exists: {new_name}", name=new_name
            )

        try:
            os.replace(old_path, new_path)
        except OSError as exc:
            raise StorageIOError(
                f"Could not rename {old_name} to {new_name}: {exc}", name=old_name
            ) from exc
        logger.info("File renamed from %s to %s", old_name, new_name)
        return new_name

    def move(self, name: str, new_location: str) -> str:
        """Move a stored file into ``new_location``, keeping its file name.

        ``new_location`` is a directory inside the storage root; it is created
        when missing. An existing file at the target is overwritten.
        """

        old_path = self.resolve(name)
        new_dir = self._contained(new_location, allow_root=True)
        try:
            os.makedirs(new_dir, exist_ok=True)
        except OSError as exc:
            raise StorageIOError(
                f"Could not create directory: {new_location}", name=new_location
            ) from exc

        new_path = new_dir / old_path.name
        try:
            os.replace(old_path, new_path)
        except OSError as exc:
            raise StorageIOError(
                f"Could not move {name} to {new_location}: {exc}", name=name
            ) from exc
        logger.info("File moved to %s/%s", new_location, old_path.name)
        return str(new_path)
