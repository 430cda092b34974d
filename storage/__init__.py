"""Storage backends."""

from __future__ import annotations

from .abstract_storage import AbstractStorage
from .exceptions import (
    ConflictError,
    InvalidInputError,
    StorageError,
    StorageInitializationError,
    StorageIOError,
    StoredFileNotFoundError,
)
from .local_storage import LocalStorage
from .memory_storage import MemoryStorage

BACKENDS = {
    "local": LocalStorage,
    "memory": MemoryStorage,
}


def create_storage(backend: str, root: str) -> AbstractStorage:
    """Build the storage backend registered under ``backend``."""

    try:
        storage_class = BACKENDS[backend.strip().lower()]
    except KeyError:
        allowed = ", ".join(sorted(BACKENDS))
        raise ValueError(
            f"Unknown storage backend {backend!r}. Allowed backends: {allowed}."
        ) from None
    return storage_class(root)


__all__ = [
    "AbstractStorage",
    "LocalStorage",
    "MemoryStorage",
    "create_storage",
    "StorageError",
    "InvalidInputError",
    "StoredFileNotFoundError",
    "ConflictError",
    "StorageIOError",
    "StorageInitializationError",
]
