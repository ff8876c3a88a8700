# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Stock header transformers for request and response pipelines."""

from __future__ import annotations

from dataclasses import replace

from ..http.headers import with_header, without_header
from ..http.models import HttpRequest, HttpResponse
from .models import RequestTransformer, ResponseTransformer


def add_request_header(name: str, value: str) -> RequestTransformer:
    def transform(request: HttpRequest) -> HttpRequest:
        return replace(request, headers=with_header(request.headers, name, value))

    transform.__name__ = f"add_request_header[{name}]"
    return transform


def remove_request_header(name: str) -> RequestTransformer:
    def transform(request: HttpRequest) -> HttpRequest:
        return replace(request, headers=without_header(request.headers, name))

    transform.__name__ = f"remove_request_header[{name}]"
    return transform


def add_response_header(name: str, value: str) -> ResponseTransformer:
    def transform(response: HttpResponse) -> HttpResponse:
        return replace(response, headers=with_header(response.headers, name, value))

    transform.__name__ = f"add_response_header[{name}]"
    return transform


def remove_response_header(name: str) -> ResponseTransformer:
    def transform(response: HttpResponse) -> HttpResponse:
        return replace(response, headers=without_header(response.headers, name))

    transform.__name__ = f"remove_response_header[{name}]"
    return transform


__all__ = [
    "add_request_header",
    "add_response_header",
    "remove_request_header",
    "remove_response_header",
]
