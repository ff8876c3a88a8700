# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""httpx-backed Transport implementation."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from .headers import header_value, with_header
from .models import HttpRequest, HttpResponse
from .transport import ConnectionType, Connector, ConnectorSetup, Transport

logger = logging.getLogger(__name__)


class HttpxConnector(Connector):
    """Connector bound to one pooled ``httpx.AsyncClient``."""

    def __init__(self, client: httpx.AsyncClient, setup: ConnectorSetup):
        self._client = client
        self.setup = setup

    async def send(self, request: HttpRequest) -> HttpResponse:
        connection = self.setup.host_settings.connection_settings
        headers = dict(request.headers or {})
        if not header_value(headers, "User-Agent"):
            headers = with_header(headers, "User-Agent", connection.user_agent)
        url = self.setup.target_url(request.url)

        try:
            max_body_bytes = connection.max_body_bytes
            if max_body_bytes <= 0:
                max_body_bytes = 16 * 1024 * 1024

            timeout: Any = httpx.USE_CLIENT_DEFAULT if request.timeout is None else request.timeout

            async with self._client.stream(
                request.method,
                url,
                headers=headers,
                content=request.body,
                timeout=timeout,
                follow_redirects=request.allow_redirects,
            ) as resp:
                content = bytearray()
                truncated = False
                async for chunk in resp.aiter_bytes():
                    if not chunk:
                        continue
                    remaining = max_body_bytes - len(content)
                    if remaining <= 0:
                        truncated = True
                        break
                    if len(chunk) > remaining:
                        content.extend(chunk[:remaining])
                        truncated = True
                        break
                    content.extend(chunk)

                encoding = resp.encoding or "utf-8"
                try:
                    text = bytes(content).decode(encoding, errors="replace")
                except LookupError:
                    text = bytes(content).decode("utf-8", errors="replace")

            return HttpResponse(
                ok=True,
                status_code=resp.status_code,
                headers=dict(resp.headers),
                text=text,
                content=bytes(content),
                url=str(resp.url),
                meta={
                    "body_truncated": truncated,
                    "body_bytes_read": len(content),
                    "body_bytes_limit": max_body_bytes,
                },
            )
        except httpx.HTTPError as exc:
            logger.debug("Exchange with %s failed: %s", url, exc)
            return HttpResponse(
                ok=False,
                error_message=str(exc),
                error_type=type(exc).__name__,
            )


class HttpxTransport(Transport):
    """Pools one ``httpx.AsyncClient`` per host, port, security mode and settings."""

    def __init__(self) -> None:
        self._clients: dict[tuple, httpx.AsyncClient] = {}

    def _build_client(self, setup: ConnectorSetup) -> httpx.AsyncClient:
        connection = setup.host_settings.connection_settings
        kwargs: dict[str, Any] = {
            "timeout": httpx.Timeout(
                connection.request_timeout,
                connect=connection.connecting_timeout,
                pool=connection.idle_timeout,
            ),
            "limits": httpx.Limits(max_connections=setup.host_settings.max_connections),
            "trust_env": setup.connection_type == ConnectionType.AUTO_PROXIED,
        }
        if setup.ssl_context is not None:
            kwargs["verify"] = setup.ssl_context
        if setup.connection_type == ConnectionType.PROXIED:
            if not setup.proxy_url:
                raise ValueError("PROXIED connection type requires a proxy_url")
            kwargs["proxy"] = setup.proxy_url
        return httpx.AsyncClient(**kwargs)

    async def setup_connector(self, setup: ConnectorSetup) -> Connector:
        key = setup.pool_key
        client = self._clients.get(key)
        if client is None or client.is_closed:
            client = self._build_client(setup)
            self._clients[key] = client
            logger.debug("Opened pooled client for %s", setup.origin)
        return HttpxConnector(client, setup)

    async def aclose(self) -> None:
        clients = list(self._clients.values())
        self._clients.clear()
        for client in clients:
            await client.aclose()

    @property
    def pool_size(self) -> int:
        return len(self._clients)
