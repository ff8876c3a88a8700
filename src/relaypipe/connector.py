# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Connector resolution.

Turns a destination into a live connector: parse the endpoint URI, pick the
TLS context, and ask the transport for a connector while waiting no longer
than the destination's connecting timeout.
"""

from __future__ import annotations

import asyncio
import logging
import ssl
from urllib.parse import urlsplit

from .config import ClientSettings, load_client_settings
from .destination import Destination, EndpointConfig
from .errors import ConnectorSetupError, ConnectorSetupTimeout, ErrorCategory
from .http.transport import Connector, ConnectorSetup, Transport

logger = logging.getLogger(__name__)

_DEFAULT_PORTS = {"http": 80, "https": 443}
_PLATFORM_CONTEXTS: dict[bool, ssl.SSLContext] = {}


def insecure_ssl_context() -> ssl.SSLContext:
    """Client context that skips certificate and hostname checks (lab/self-signed targets)."""
    context = ssl.create_default_context()
    context.check_hostname = False
    context.verify_mode = ssl.CERT_NONE
    return context


def _platform_context(verify: bool) -> ssl.SSLContext:
    # One platform context per verify mode keeps the transport pool key stable.
    context = _PLATFORM_CONTEXTS.get(verify)
    if context is None:
        context = ssl.create_default_context() if verify else insecure_ssl_context()
        _PLATFORM_CONTEXTS[verify] = context
    return context


def resolve_ssl_context(config: EndpointConfig, settings: ClientSettings | None = None) -> ssl.SSLContext:
    """
    Return the endpoint's explicit TLS context, else the platform default.

    Evaluated on every setup so environment changes apply to the next resolution.
    """
    if config.ssl_context is not None:
        return config.ssl_context
    settings = settings or load_client_settings()
    return _platform_context(settings.verify_ssl)


def build_connector_setup(destination: Destination) -> ConnectorSetup:
    """Parse the destination's endpoint URI into a ConnectorSetup; raises ValueError if unparseable."""
    config = destination.config
    uri = destination.endpoint_uri()
    parts = urlsplit(uri)
    host = parts.hostname
    if not host:
        raise ValueError(f"Endpoint URI {uri!r} has no host")
    scheme = parts.scheme.lower()
    secure = scheme == "https"
    port = parts.port or _DEFAULT_PORTS.get(scheme) or 80
    return ConnectorSetup(
        host=host,
        port=port,
        secure=secure,
        ssl_context=resolve_ssl_context(config) if secure else None,
        connection_type=config.connection_type,
        host_settings=config.host_settings,
        proxy_url=config.proxy_url,
        path=parts.path,
        query=parts.query,
    )


class ConnectorResolver:
    """Requests connectors from a transport with a bounded wait."""

    def __init__(self, transport: Transport):
        self.transport = transport

    async def resolve(self, destination: Destination) -> Connector:
        timeout = destination.config.connecting_timeout
        try:
            setup = build_connector_setup(destination)
        except ValueError as exc:
            raise ConnectorSetupError(destination.name, exc, ErrorCategory.INVALID_URI) from exc

        logger.debug(
            "Setting up connector for %s (%s:%d secure=%s, timeout=%gs)",
            destination.name,
            setup.host,
            setup.port,
            setup.secure,
            timeout,
        )
        task = asyncio.ensure_future(self.transport.setup_connector(setup))
        try:
            done, _ = await asyncio.wait({task}, timeout=timeout)
        except asyncio.CancelledError:
            task.cancel()
            raise

        if task not in done:
            # A connector that arrives after the deadline is never handed out.
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)
            logger.warning("Connector setup for %s timed out after %gs", destination.name, timeout)
            raise ConnectorSetupTimeout(destination.name, timeout)

        exc = task.exception()
        if exc is None:
            return task.result()
        if isinstance(exc, ConnectorSetupError):
            raise exc
        raise ConnectorSetupError(destination.name, exc) from exc


__all__ = [
    "ConnectorResolver",
    "build_connector_setup",
    "insecure_ssl_context",
    "resolve_ssl_context",
]
