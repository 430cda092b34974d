"""Helpers for turning upload names into storage names."""

from __future__ import annotations

import posixpath
import uuid

from werkzeug.utils import secure_filename

from .exceptions import InvalidInputError

NAME_MAX = 255


def clean_filename(original: str | None) -> str:
    """Normalize separators and dot segments, keeping only the final component.

    ``"..\\..\\etc\\report.pdf"`` becomes ``"report.pdf"``.
    """

    if not original:
        return ""
    normalized = posixpath.normpath(original.replace("\\", "/"))
    return posixpath.basename(normalized)


def extract_extension(filename: str) -> str:
    """Return the suffix from the last ``.`` (inclusive), or an empty string."""

    dot_index = filename.rfind(".")
    if dot_index < 0:
        return ""
    # secure_filename keeps the suffix free of separators and control characters
    return "." + secure_filename(filename[dot_index + 1 :])


def build_unique_filename(original: str | None) -> str:
    return f"{uuid.uuid4().hex}{extract_extension(clean_filename(original))}"


def validate_name(name: str) -> None:
    """Reject names the filesystem cannot represent.

    Raises ``InvalidInputError`` for embedded NUL bytes and for path
    components longer than ``NAME_MAX`` bytes.
    """

    if "\x00" in name:
        raise InvalidInputError(f"Invalid file name: {name!r}", name=name)
    for part in name.split("/"):
        if len(part.encode("utf-8", "surrogateescape")) > NAME_MAX:
            raise InvalidInputError(
                f"File name component exceeds {NAME_MAX} bytes.", name=name
            )
