"""Utilities for validating incoming Flask requests."""

from __future__ import annotations

from typing import Iterable

from flask import Request
from werkzeug.exceptions import BadRequest


def parse_json_request(
    req: Request,
    *,
    required_keys: Iterable[str] | None = None,
) -> dict:
    """Return the parsed JSON body or raise a 400 error."""

    if not req.is_json:
        raise BadRequest("Request content type must be application/json.")

    data = req.get_json(silent=False)
    if data is None:
        raise BadRequest("Request JSON body is required.")

    if not isinstance(data, dict):
        raise BadRequest("Request JSON payload must be an object.")

    if not data:
        raise BadRequest("Request JSON body must not be empty.")

    if required_keys:
        _require_keys(data, required_keys)

    return data


def parse_form_or_json(req: Request, *, required_keys: Iterable[str]) -> dict:
    """Return request parameters from a JSON body, form fields or query string."""

    if req.is_json:
        return parse_json_request(req, required_keys=required_keys)

    data = req.values.to_dict()
    _require_keys(data, required_keys)
    return data


def _require_keys(data: dict, required_keys: Iterable[str]) -> None:
    """Require each key to hold a non-empty string."""

    required_keys = tuple(required_keys)
    missing = [key for key in required_keys if not data.get(key)]
    if missing:
        raise BadRequest(
            "Missing required fields: {}.".format(", ".join(sorted(missing)))
        )

    invalid = [key for key in required_keys if not isinstance(data[key], str)]
    if invalid:
        raise BadRequest(
            "Fields must be strings: {}.".format(", ".join(sorted(invalid)))
        )
