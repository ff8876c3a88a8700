# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""HTTP request/response data models exchanged with connectors and transformers."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from .headers import normalize_headers

Headers = dict[str, str]

_RESERVED_MAPPING_KEYS = {"ok", "status_code", "headers", "body", "url", "error_message", "error_type"}


@dataclass
class HttpRequest:
    """Normalized request representation consumed by connectors."""

    url: str
    method: str = "GET"
    headers: Headers | None = None
    body: bytes | str | None = None
    timeout: float | None = None
    allow_redirects: bool = True


@dataclass
class HttpResponse:
    """Normalized HTTP response handed back through the response pipeline."""

    ok: bool
    status_code: int | None = None
    headers: Headers = field(default_factory=dict)
    text: str = ""
    content: bytes = b""
    url: str | None = None
    error_message: str | None = None
    error_type: str | None = None
    meta: dict[str, Any] = field(default_factory=dict)

    @property
    def is_success(self) -> bool:
        """True when the exchange completed with a 2xx status."""
        return self.ok and self.status_code is not None and 200 <= self.status_code < 300

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> HttpResponse:
        """Helper to normalize dictionary-like responses (e.g., canned test fixtures)."""
        raw_headers: Any = data.get("headers") or {}
        if raw_headers and not isinstance(raw_headers, Mapping):
            try:
                raw_headers = dict(raw_headers)
            except (TypeError, ValueError):
                raw_headers = {}
        headers = normalize_headers(raw_headers)

        raw_body = data.get("body")
        content: bytes = b""
        text: str = ""
        if isinstance(raw_body, (bytes, bytearray, memoryview)):
            content = bytes(raw_body)
            text = content.decode("utf-8", errors="replace")
        elif isinstance(raw_body, str):
            text = raw_body
            content = raw_body.encode("utf-8")

        status_code = data.get("status_code")
        ok = data.get("ok")
        return cls(
            ok=bool(ok) if ok is not None else status_code is not None,
            status_code=status_code,
            headers=headers,
            text=text,
            content=content,
            url=data.get("url"),
            error_message=data.get("error_message"),
            error_type=data.get("error_type"),
            meta={k: v for k, v in data.items() if k not in _RESERVED_MAPPING_KEYS},
        )
