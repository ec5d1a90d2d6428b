"""Utilities for validating incoming Flask requests."""

from __future__ import annotations

from typing import Iterable

from flask import Request

from .errors import ValidationError


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
                "Missing required fields: {}.".format(", ".join(sorted(missing)))
            )

    return data


def parse_bool(value: object) -> bool | None:
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in {"1", "true", "yes", "y", "on"}:
        return True
    if text in {"0", "false", "no", "n", "off"}:
        return False
    return None


def normalize_extensions(configured: str | Iterable[str] | None, default: Iterable[str]) -> set[str]:
    """Turn a configured list of file types into a set of bare, lowercase extensions.

    Accepts ``"jpg,png"``, ``[".jpg", "image/png"]`` and similar spellings.
    """

    if not configured:
        return set(default)
    values: Iterable[str] = configured.split(",") if isinstance(configured, str) else configured

    normalized: set[str] = set()
    for raw in values:
        if not isinstance(raw, str):
            continue
        item = raw.strip().lower()
        if "/" in item and not item.startswith("."):
            item = item.rsplit("/", 1)[-1]
        item = item.lstrip(".")
        if item:
            normalized.add(item)

    if not normalized:
        return set(default)
    if "jpeg" in normalized or "jpg" in normalized:
        normalized.update({"jpg", "jpeg"})
    return normalized
