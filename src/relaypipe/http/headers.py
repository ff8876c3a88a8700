# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Header helpers.

HTTP header field names are case-insensitive (RFC 9110). Requests and responses
carry headers as plain dicts, so lookups and edits here match names without
regard to case and always return new dicts.
"""

from __future__ import annotations

from collections.abc import Mapping


def normalize_headers(headers: Mapping[object, object] | None) -> dict[str, str]:
    """Return a lowercase-keyed copy of a header mapping."""
    if not headers:
        return {}
    out: dict[str, str] = {}
    for key, value in headers.items():
        if key is None:
            continue
        name = str(key).strip().lower()
        if not name:
            continue
        out[name] = "" if value is None else str(value)
    return out


def header_value(headers: Mapping[str, str] | None, name: str, default: str = "") -> str:
    """Return a header value using case-insensitive key matching."""
    if not headers or not name:
        return default
    if name in headers:
        value = headers[name]
        return default if value is None else str(value).strip()
    lower = name.lower()
    for key, value in headers.items():
        if key is not None and str(key).lower() == lower:
            return default if value is None else str(value).strip()
    return default


def with_header(headers: Mapping[str, str] | None, name: str, value: str) -> dict[str, str]:
    """Copy ``headers`` with ``name`` set to ``value``, replacing any casing of the same name."""
    updated = without_header(headers, name)
    updated[name] = value
    return updated


def without_header(headers: Mapping[str, str] | None, name: str) -> dict[str, str]:
    """Copy ``headers`` with every casing of ``name`` removed."""
    lower = name.lower()
    return {key: value for key, value in (headers or {}).items() if str(key).lower() != lower}


__all__ = ["header_value", "normalize_headers", "with_header", "without_header"]
