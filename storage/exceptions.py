"""Errors raised by storage backends."""

from __future__ import annotations


class StorageError(Exception):
    """Base class for storage failures surfaced to callers."""

    def __init__(self, message: str, name: str | None = None):
        super().__init__(message)
        self.name = name


class InvalidInputError(StorageError):
    """The caller violated a precondition (empty upload, unsafe name)."""


class StoredFileNotFoundError(StorageError):
    """No stored file backs the referenced name."""


class ConflictError(StorageError):
    """The rename target is already occupied."""


class StorageIOError(StorageError):
    """The underlying filesystem call failed."""


class StorageInitializationError(StorageError):
    """The storage root could not be prepared."""
