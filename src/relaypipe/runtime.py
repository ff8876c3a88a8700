# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""High-level relaypipe facade: named destinations in, responses or typed values out."""

from __future__ import annotations

import ssl
from typing import Any

from .config import ClientSettings, load_client_settings
from .destination import (
    DEFAULT_ENV,
    ConnectionType,
    Destination,
    EndpointConfig,
    HostSettings,
    InMemoryRegistry,
    Status,
)
from .http.models import Headers, HttpRequest, HttpResponse
from .http.transport import Transport, create_default_transport
from .manager import PipelineManager
from .pipeline.classify import classify
from .pipeline.models import Pipeline


class RelayPipe:
    """
    Convenience wrapper that wires a registry, a transport and a pipeline manager.

    Every call looks the destination up by name, resolves a fresh invocation
    (so status flips are seen immediately) and sends one request. Connector
    pooling stays inside the transport, which is closed with ``aclose``.
    """

    def __init__(
        self,
        registry: InMemoryRegistry | None = None,
        transport: Transport | None = None,
        settings: ClientSettings | None = None,
    ):
        self.registry = registry or InMemoryRegistry()
        self.transport = transport or create_default_transport()
        self.settings = settings or load_client_settings()
        self.manager = PipelineManager(self.transport)

    def register(
        self,
        name: str,
        uri: str,
        *,
        env: str = DEFAULT_ENV,
        pipeline: Pipeline | None = None,
        ssl_context: ssl.SSLContext | None = None,
        connection_type: ConnectionType = ConnectionType.AUTO_PROXIED,
        proxy_url: str | None = None,
        host_settings: HostSettings | None = None,
        status: Status = Status.UP,
    ) -> Destination:
        config = EndpointConfig(
            uri=uri,
            ssl_context=ssl_context,
            connection_type=connection_type,
            proxy_url=proxy_url,
            host_settings=host_settings or HostSettings.from_client_settings(self.settings),
            pipeline=pipeline,
        )
        return self.registry.register(Destination(name=name, config=config, env=env, status=status))

    def mark_up(self, name: str) -> None:
        self.registry.mark_up(name)

    def mark_down(self, name: str) -> None:
        self.registry.mark_down(name)

    async def request(self, name: str, request: HttpRequest) -> HttpResponse:
        destination = self.registry.get(name)
        invocation = await self.manager.resolve_invocation(destination)
        return await invocation(request)

    async def get(
        self,
        name: str,
        url: str = "",
        *,
        headers: Headers | None = None,
        expected_type: Any = None,
    ) -> Any:
        response = await self.request(name, HttpRequest(url=url, method="GET", headers=headers))
        return response if expected_type is None else classify(response, expected_type)

    async def post(
        self,
        name: str,
        url: str = "",
        *,
        body: bytes | str | None = None,
        headers: Headers | None = None,
        expected_type: Any = None,
    ) -> Any:
        response = await self.request(name, HttpRequest(url=url, method="POST", headers=headers, body=body))
        return response if expected_type is None else classify(response, expected_type)

    async def aclose(self) -> None:
        await self.transport.aclose()

    async def __aenter__(self) -> "RelayPipe":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:  # noqa: ANN001
        await self.aclose()
