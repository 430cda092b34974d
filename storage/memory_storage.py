"""In-memory storage backend for tests and throwaway deployments."""

from __future__ import annotations

import io
import posixpath
import threading
from pathlib import PurePosixPath
from typing import BinaryIO

from .abstract_storage import AbstractStorage, Content
from .exceptions import (
    ConflictError,
    InvalidInputError,
    StorageIOError,
    StoredFileNotFoundError,
)
from .naming import build_unique_filename, validate_name


class MemoryStorage(AbstractStorage):
    """Keep stored files in a dict keyed by their path under a virtual root.

    Directories are implicit: a key is a directory while some stored file
    lives below it. Moving a file into ``a/b`` needs no prior creation step,
    and renaming into a missing directory succeeds. A path cannot be a file
    and a directory at once, the same as on disk.
    """

    def __init__(self, root: str = "/memory"):
        self.root = PurePosixPath(posixpath.normpath(posixpath.join("/", root)))
        self._files: dict[PurePosixPath, bytes] = {}
        self._lock = threading.Lock()

    def _key(self, name: str, allow_root: bool = False) -> PurePosixPath:
        if not name:
            raise InvalidInputError("A file name is required.", name=name)
        validate_name(name)

        joined = posixpath.normpath(posixpath.join(str(self.root), name))
        relative = posixpath.relpath(joined, str(self.root))
        if relative == ".." or relative.startswith("../"):
            raise InvalidInputError(
                f"Path escapes the storage directory: {name}", name=name
            )
        if relative == "." and not allow_root:
            raise InvalidInputError(
                f"Path refers to the storage directory itself: {name}", name=name
            )
        return PurePosixPath(relative)

    def _existing_key(self, name: str) -> PurePosixPath:
        key = self._key(name)
        if key not in self._files:
            raise StoredFileNotFoundError(f"File not found: {name}", name=name)
        return key

    def _is_directory(self, key: PurePosixPath) -> bool:
        return any(key in stored.parents for stored in self._files)

    def _under_file(self, key: PurePosixPath) -> bool:
        return any(parent in self._files for parent in key.parents)

    def store(self, content: Content, original_name: str | None = None) -> str:
        if isinstance(content, (bytes, bytearray, memoryview)):
            data = bytes(content)
        else:
            data = content.read()
        if not data:
            raise InvalidInputError("Cannot upload empty file.", name=original_name)

        unique_name = build_unique_filename(original_name)
        with self._lock:
            self._files[PurePosixPath(unique_name)] = data
        return unique_name

    def load(self, name: str) -> PurePosixPath:
        with self._lock:
            return self.root / self._existing_key(name)

    def open(self, name: str) -> BinaryIO:
        with self._lock:
            return io.BytesIO(self._files[self._existing_key(name)])

    def exists(self, name: str) -> bool:
        try:
            key = self._key(name)
        except InvalidInputError:
            return False
        with self._lock:
            return key in self._files

    def delete(self, name: str) -> None:
        with self._lock:
            del self._files[self._existing_key(name)]

    def rename(self, old_name: str, new_name: str) -> str:
        with self._lock:
            old_key = self._existing_key(old_name)
            new_key = self._key(new_name)
            if new_key in self._files or self._is_directory(new_key):
                raise ConflictError(
                    f"File with new name already exists: {new_name}", name=new_name
                )
            if self._under_file(new_key):
                raise StorageIOError(
                    f"Could not rename {old_name} to {new_name}: not a directory",
                    name=old_name,
                )
            self._files[new_key] = self._files.pop(old_key)
        return new_name

    def move(self, name: str, new_location: str) -> str:
        with self._lock:
            old_key = self._existing_key(name)
            dir_key = self._key(new_location, allow_root=True)
            if dir_key in self._files or self._under_file(dir_key):
                raise StorageIOError(
                    f"Could not create directory: {new_location}", name=new_location
                )
            new_key = dir_key / old_key.name
            if self._is_directory(new_key):
                raise StorageIOError(
                    f"Could not move {name} to {new_location}: is a directory",
                    name=name,
                )
            self._files[new_key] = self._files.pop(old_key)
        return str(self.root / new_key)
