# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
relaypipe package entrypoint.

Callers address named destinations instead of raw connections. A pipeline
manager resolves each destination to a transport connector, wraps it in the
destination's request and response transformers, and refuses destinations
that are marked down. Transport behavior is abstracted behind an injectable
interface, and domain objects are modeled with typed dataclasses.
"""

from .config import ClientSettings, load_client_settings
from .connector import ConnectorResolver, build_connector_setup, resolve_ssl_context
from .destination import (
    ConnectionSettings,
    ConnectionType,
    Destination,
    DestinationRegistry,
    EndpointConfig,
    HostSettings,
    InMemoryRegistry,
    Status,
)
from .errors import (
    ConnectorSetupError,
    ConnectorSetupTimeout,
    DestinationNotFoundError,
    DestinationUnavailableError,
    ErrorCategory,
    MalformedOutputError,
    RelayPipeError,
    UnsuccessfulResponseError,
)
from .http import (
    HttpRequest,
    HttpResponse,
    HttpxTransport,
    StubConnector,
    StubTransport,
    Transport,
    create_default_transport,
)
from .log import setup_logging
from .manager import Invocation, PipelineManager, PipelineShape, pipeline_shape
from .pipeline import (
    EMPTY_PIPELINE,
    Classification,
    Pipeline,
    PipelineHandler,
    RequestPipelineHandler,
    ResponsePipelineHandler,
    classify,
    try_classify,
)
from .runtime import RelayPipe
from .version import __version__

__all__ = [
    "EMPTY_PIPELINE",
    "Classification",
    "ClientSettings",
    "ConnectionSettings",
    "ConnectionType",
    "ConnectorResolver",
    "ConnectorSetupError",
    "ConnectorSetupTimeout",
    "Destination",
    "DestinationNotFoundError",
    "DestinationRegistry",
    "DestinationUnavailableError",
    "EndpointConfig",
    "ErrorCategory",
    "HostSettings",
    "HttpRequest",
    "HttpResponse",
    "HttpxTransport",
    "InMemoryRegistry",
    "Invocation",
    "MalformedOutputError",
    "Pipeline",
    "PipelineHandler",
    "PipelineManager",
    "PipelineShape",
    "RelayPipe",
    "RelayPipeError",
    "RequestPipelineHandler",
    "ResponsePipelineHandler",
    "Status",
    "StubConnector",
    "StubTransport",
    "Transport",
    "UnsuccessfulResponseError",
    "build_connector_setup",
    "classify",
    "create_default_transport",
    "load_client_settings",
    "pipeline_shape",
    "resolve_ssl_context",
    "setup_logging",
    "try_classify",
    "__version__",
]
