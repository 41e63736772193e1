"""Shared coercion helpers for reading provider-native payloads.

Provider payloads are untrusted JSON or XML. These helpers read a field and
return a well-typed value or ``None`` so that normalizers degrade a malformed
record instead of failing the batch.
"""

from __future__ import annotations

import collections.abc as cabc
import typing as typ

_SCALAR_TYPES = (str, int, float)


def coerce_str(value: object) -> str | None:
    """Return ``value`` as stripped text, or ``None`` when absent or blank.

    Parameters
    ----------
    value : object
        Candidate value. Strings are stripped; integers and floats (but not
        booleans) are formatted with ``str``; every other type yields
        ``None``.

    Returns
    -------
    str | None
        Non-empty text, or ``None``.
    """
    if isinstance(value, bool) or not isinstance(value, _SCALAR_TYPES):
        return None
    text = str(value).strip()
    return text or None


def coerce_mapping(value: object) -> cabc.Mapping[str, typ.Any]:
    """Return ``value`` when it is a mapping, else an empty mapping."""
    if isinstance(value, cabc.Mapping):
        return value
    return {}


def coerce_records(value: object) -> list[object]:
    """Return ``value`` when it is a list of records, else an empty list."""
    if isinstance(value, list):
        return value
    return []


def coerce_str_list(value: object) -> tuple[str, ...]:
    """Return the non-blank strings of a list value."""
    if not isinstance(value, list):
        return ()
    return tuple(text for item in value if (text := coerce_str(item)) is not None)


def http_url(value: object) -> str | None:
    """Return ``value`` when it is an absolute http(s) URL."""
    text = coerce_str(value)
    if text is None or not text.lower().startswith(("http://", "https://")):
        return None
    return text
