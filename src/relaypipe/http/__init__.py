# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""HTTP models and transport exports."""

from .adapters import StubConnector, StubTransport
from .headers import header_value, normalize_headers, with_header, without_header
from .httpx_transport import HttpxConnector, HttpxTransport
from .models import Headers, HttpRequest, HttpResponse
from .transport import ConnectionType, Connector, ConnectorSetup, Transport, create_default_transport

__all__ = [
    "ConnectionType",
    "Connector",
    "ConnectorSetup",
    "Headers",
    "HttpRequest",
    "HttpResponse",
    "HttpxConnector",
    "HttpxTransport",
    "StubConnector",
    "StubTransport",
    "Transport",
    "create_default_transport",
    "header_value",
    "normalize_headers",
    "with_header",
    "without_header",
]
