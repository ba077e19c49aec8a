"""Utilities for validating incoming Flask requests."""

from __future__ import annotations

from typing import Iterable

from flask import Request

from utils.errors import ValidationError


def parse_json_request(
    req: Request,
    *,
    required_keys: Iterable[str] | None = None,
    allow_empty: bool = False,
) -> dict:
    """Return the parsed JSON body or raise a 400 error."""

    if not req.is_json:
        raise ValidationError("Request content type must be application/json.")

    data = req.get_json(silent=True)
    if data is None:
        raise ValidationError("Request JSON body is required.")

    if not isinstance(data, dict):
        raise ValidationError("Request JSON payload must be an object.")

    if not data and not allow_empty:
        raise ValidationError("Request JSON body must not be empty.")

    if required_keys:
        missing = [key for key in required_keys if not data.get(key)]
        if missing:
            raise ValidationError(
                "Missing required fields: {}.".format(
                    ", ".join(sorted(missing))
                )
            )

    return data


def validate_name(raw_name: object, min_length: int = 2) -> str:
    """Return the trimmed name or raise if it is shorter than ``min_length``."""

    name = raw_name.strip() if isinstance(raw_name, str) else ""
    if len(name) < min_length:
        raise ValidationError(
            f"Name must be at least {min_length} characters long."
        )
    return name


def optional_string(raw_value: object, field: str) -> str | None:
    """Return a stripped string, None for null/blank, or raise on other types."""

    if raw_value is None:
        return None
    if not isinstance(raw_value, str):
        raise ValidationError(f"{field} must be a string.")
    return raw_value.strip() or None
