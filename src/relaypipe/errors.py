# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Error taxonomy and exception helpers."""

from __future__ import annotations

import socket
import ssl as ssl_module
from enum import Enum
from typing import TYPE_CHECKING

import httpx

if TYPE_CHECKING:
    from .http.models import HttpResponse


class ErrorCategory(str, Enum):
    TIMEOUT = "TIMEOUT"
    SSL_ERROR = "SSL_ERROR"
    CONNECTION_ERROR = "CONNECTION_ERROR"
    DNS_ERROR = "DNS_ERROR"
    INVALID_URI = "INVALID_URI"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"
    NONE = "NONE"


class RelayPipeError(Exception):
    """Base class for every error raised by relaypipe."""


class DestinationNotFoundError(RelayPipeError, LookupError):
    def __init__(self, name: str):
        super().__init__(f"No destination registered under {name!r}")
        self.name = name


class DestinationUnavailableError(RelayPipeError):
    """The destination is marked DOWN; no request was sent."""

    def __init__(self, name: str, env: str):
        super().__init__(f"Destination {name!r} in env {env!r} is marked down")
        self.name = name
        self.env = env


class ConnectorSetupTimeout(RelayPipeError, TimeoutError):
    """Connector setup did not finish within the connecting timeout."""

    def __init__(self, name: str, timeout: float):
        super().__init__(f"Connector setup for {name!r} timed out after {timeout:g}s")
        self.name = name
        self.timeout = timeout
        self.category = ErrorCategory.TIMEOUT


class ConnectorSetupError(RelayPipeError):
    """The transport could not establish a connector; the cause is chained."""

    def __init__(self, name: str, cause: BaseException, category: ErrorCategory | None = None):
        self.name = name
        self.cause = cause
        self.category = category or categorize_exception(cause)
        super().__init__(f"Connector setup for {name!r} failed: {error_category_to_reason(self.category)} ({cause})")


class UnsuccessfulResponseError(RelayPipeError):
    """The exchange completed but the response status was not a success."""

    def __init__(self, response: HttpResponse):
        if response.status_code is None:
            detail = response.error_message or "no response"
        else:
            detail = f"status {response.status_code}"
        super().__init__(f"Unsuccessful response: {detail}")
        self.response = response


class MalformedOutputError(RelayPipeError):
    """A successful response whose body could not be decoded to the requested type."""

    def __init__(self, description: str):
        super().__init__(description)
        self.description = description


def categorize_exception(exc: BaseException) -> ErrorCategory:
    """
    Map Python/httpx exceptions to ErrorCategory.
    """
    if isinstance(exc, (httpx.TimeoutException, TimeoutError)):
        return ErrorCategory.TIMEOUT

    if isinstance(exc, (ssl_module.SSLError, ssl_module.CertificateError)):
        return ErrorCategory.SSL_ERROR

    if isinstance(exc, (socket.gaierror, socket.herror)):
        return ErrorCategory.DNS_ERROR

    if isinstance(
        exc, (httpx.ConnectError, httpx.RemoteProtocolError, httpx.NetworkError, httpx.ProxyError)
    ):
        return ErrorCategory.CONNECTION_ERROR

    if isinstance(exc, (ConnectionError, ConnectionRefusedError, ConnectionResetError)):
        return ErrorCategory.CONNECTION_ERROR

    if isinstance(exc, (httpx.InvalidURL, ValueError)):
        return ErrorCategory.INVALID_URI

    return ErrorCategory.UNKNOWN_ERROR


def error_category_to_reason(category: ErrorCategory | None) -> str:
    """User-facing reason string."""
    mapping = {
        ErrorCategory.TIMEOUT: "Network timeout",
        ErrorCategory.SSL_ERROR: "TLS/certificate issue",
        ErrorCategory.CONNECTION_ERROR: "Network connectivity issue",
        ErrorCategory.DNS_ERROR: "DNS resolution failure",
        ErrorCategory.INVALID_URI: "Invalid endpoint URI",
        ErrorCategory.UNKNOWN_ERROR: "Unexpected transport error",
        ErrorCategory.NONE: "",
        None: "",
    }
    return mapping.get(category, "Transport error")
