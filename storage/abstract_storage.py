"""Storage abstraction layer."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import PurePath
from typing import IO, BinaryIO, Union

Content = Union[bytes, IO[bytes]]


class AbstractStorage(ABC):
    """Interface for storage backends."""

    @abstractmethod
    def store(self, content: Content, original_name: str | None = None) -> str:
        """Persist content under a freshly generated name and return that name."""

    @abstractmethod
    def load(self, name: str) -> PurePath:
        """Return the location of a stored file."""

    @abstractmethod
    def open(self, name: str) -> BinaryIO:
        """Open a stored file for binary reading."""

    @abstractmethod
    def exists(self, name: str) -> bool:
        """Return whether a stored file exists under the given name."""

    @abstractmethod
    def delete(self, name: str) -> None:
        """Remove a stored file."""

    @abstractmethod
    def rename(self, old_name: str, new_name: str) -> str:
        """Give a stored file a new name, refusing to clobber an existing one."""

    @abstractmethod
    def move(self, name: str, new_location: str) -> str:
        """Relocate a stored file into another directory and return its new path."""
