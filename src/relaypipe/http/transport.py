# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Transport collaborator abstraction and factory."""

from __future__ import annotations

import ssl
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Protocol
from urllib.parse import urlsplit

from .models import HttpRequest, HttpResponse

if TYPE_CHECKING:
    from ..destination import HostSettings


class ConnectionType(str, Enum):
    """Proxy routing for a connector. AUTO_PROXIED reads the proxy environment variables."""

    AUTO_PROXIED = "AUTO_PROXIED"
    DIRECT = "DIRECT"
    PROXIED = "PROXIED"


@dataclass(frozen=True)
class ConnectorSetup:
    """Everything a transport needs to bind a connector to one host/port/security mode."""

    host: str
    port: int
    secure: bool
    ssl_context: ssl.SSLContext | None
    connection_type: ConnectionType
    host_settings: HostSettings
    proxy_url: str | None = None
    path: str = ""
    query: str = ""

    @property
    def origin(self) -> str:
        scheme = "https" if self.secure else "http"
        host = f"[{self.host}]" if ":" in self.host else self.host
        return f"{scheme}://{host}:{self.port}"

    @property
    def endpoint_url(self) -> str:
        """The configured endpoint, path and query exactly as given."""
        url = self.origin + self.path
        return f"{url}?{self.query}" if self.query else url

    @property
    def pool_key(self) -> tuple:
        """Fields that decide which pooled channel serves this setup; path and query do not."""
        return (
            self.host,
            self.port,
            self.secure,
            self.ssl_context,
            self.connection_type,
            self.proxy_url,
            self.host_settings,
        )

    def target_url(self, request_url: str) -> str:
        """
        Resolve a request URL against the endpoint.

        An empty URL targets the endpoint itself. Absolute URLs pass through.
        Relative paths are appended to the endpoint path; the request's own
        query wins over the endpoint's.
        """
        if not request_url:
            return self.endpoint_url
        parts = urlsplit(request_url)
        if parts.scheme:
            return request_url
        if parts.path:
            url = self.origin + self.path.rstrip("/") + "/" + parts.path.lstrip("/")
        else:
            url = self.origin + self.path
        query = parts.query or self.query
        return f"{url}?{query}" if query else url


class Connector(Protocol):
    """A live channel to one resolved endpoint."""

    async def send(self, request: HttpRequest) -> HttpResponse: ...


class Transport(Protocol):
    """Establishes connectors; owns pooling and send/receive timeouts."""

    async def setup_connector(self, setup: ConnectorSetup) -> Connector: ...

    async def aclose(self) -> None:  # pragma: no cover - optional for adapters
        ...


def create_default_transport() -> Transport:
    """Factory for the default httpx-backed transport."""
    from .httpx_transport import HttpxTransport

    return HttpxTransport()
