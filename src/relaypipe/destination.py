# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Destinations and the registry that owns their availability status.

A destination is a logical remote service addressed by name. Its endpoint
configuration is long-lived; its status is flipped by the registry and read
by the pipeline manager on every resolution, never cached.
"""

from __future__ import annotations

import ssl
from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol

from .config import DEFAULT_USER_AGENT, ClientSettings, load_client_settings
from .errors import DestinationNotFoundError
from .http.transport import ConnectionType
from .pipeline.models import EMPTY_PIPELINE, Pipeline

DEFAULT_ENV = "default"


class Status(str, Enum):
    UP = "UP"
    DOWN = "DOWN"


@dataclass(frozen=True)
class ConnectionSettings:
    """Per-connection limits; all durations are seconds."""

    connecting_timeout: float = 10.0
    request_timeout: float = 30.0
    idle_timeout: float = 60.0
    max_body_bytes: int = 16 * 1024 * 1024
    user_agent: str = DEFAULT_USER_AGENT

    @classmethod
    def from_client_settings(cls, settings: ClientSettings) -> ConnectionSettings:
        return cls(
            connecting_timeout=settings.connect_timeout,
            request_timeout=settings.request_timeout,
            idle_timeout=settings.idle_timeout,
            max_body_bytes=settings.max_body_bytes,
            user_agent=settings.user_agent,
        )


@dataclass(frozen=True)
class HostSettings:
    max_connections: int = 10
    connection_settings: ConnectionSettings = field(default_factory=ConnectionSettings)

    @classmethod
    def from_client_settings(cls, settings: ClientSettings | None = None) -> HostSettings:
        settings = settings or load_client_settings()
        return cls(
            max_connections=settings.max_connections,
            connection_settings=ConnectionSettings.from_client_settings(settings),
        )


@dataclass(frozen=True)
class EndpointConfig:
    uri: str
    ssl_context: ssl.SSLContext | None = None
    connection_type: ConnectionType = ConnectionType.AUTO_PROXIED
    proxy_url: str | None = None
    host_settings: HostSettings = field(default_factory=HostSettings)
    pipeline: Pipeline | None = None

    @property
    def connecting_timeout(self) -> float:
        return self.host_settings.connection_settings.connecting_timeout

    def effective_pipeline(self) -> Pipeline:
        return self.pipeline if self.pipeline is not None else EMPTY_PIPELINE


@dataclass
class Destination:
    name: str
    config: EndpointConfig
    env: str = DEFAULT_ENV
    status: Status = Status.UP

    def endpoint_uri(self) -> str:
        return self.config.uri


class DestinationRegistry(Protocol):
    """Read side of the destination registry."""

    def get(self, name: str) -> Destination: ...

    def get_config(self, name: str) -> EndpointConfig: ...

    def get_status(self, name: str) -> Status: ...


class InMemoryRegistry(DestinationRegistry):
    """Process-local registry; status transitions happen in place on the stored destination."""

    def __init__(self, destinations: list[Destination] | None = None):
        self._destinations: dict[str, Destination] = {}
        for destination in destinations or []:
            self._destinations[destination.name] = destination

    def register(self, destination: Destination) -> Destination:
        self._destinations[destination.name] = destination
        return destination

    def remove(self, name: str) -> None:
        self._destinations.pop(name, None)

    def names(self) -> list[str]:
        return sorted(self._destinations)

    def get(self, name: str) -> Destination:
        try:
            return self._destinations[name]
        except KeyError:
            raise DestinationNotFoundError(name) from None

    def get_config(self, name: str) -> EndpointConfig:
        return self.get(name).config

    def get_status(self, name: str) -> Status:
        return self.get(name).status

    def mark_up(self, name: str) -> None:
        self.get(name).status = Status.UP

    def mark_down(self, name: str) -> None:
        self.get(name).status = Status.DOWN


__all__ = [
    "DEFAULT_ENV",
    "ConnectionSettings",
    "ConnectionType",
    "Destination",
    "DestinationRegistry",
    "EndpointConfig",
    "HostSettings",
    "InMemoryRegistry",
    "Status",
]
