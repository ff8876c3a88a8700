# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Pipeline manager.

Wraps a destination's connector in its request and response transformer
chains and refuses destinations that are marked down. Two entry points share
the same composition rules:

- ``resolve_invocation`` sets up a connector through the resolver first.
- ``resolve_invocation_without_setup`` reuses a connector the caller already
  holds (from a pool or a test double) and performs no setup at all.

The returned invocation is an ``async`` callable ``HttpRequest -> HttpResponse``.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from enum import Enum

from .connector import ConnectorResolver
from .destination import Destination, Status
from .errors import DestinationUnavailableError
from .http.models import HttpRequest, HttpResponse
from .http.transport import Connector, Transport, create_default_transport
from .pipeline.models import (
    Pipeline,
    RequestTransformer,
    ResponseTransformer,
    compose_requests,
    compose_responses,
)

logger = logging.getLogger(__name__)

Invocation = Callable[[HttpRequest], Awaitable[HttpResponse]]


class PipelineShape(str, Enum):
    PASS_THROUGH = "PASS_THROUGH"
    RESPONSE_ONLY = "RESPONSE_ONLY"
    REQUEST_ONLY = "REQUEST_ONLY"
    FULL = "FULL"


def pipeline_shape(pipeline: Pipeline) -> PipelineShape:
    has_requests = pipeline.has_request_transformers
    has_responses = pipeline.has_response_transformers
    if not has_requests and not has_responses:
        return PipelineShape.PASS_THROUGH
    if not has_requests:
        return PipelineShape.RESPONSE_ONLY
    if not has_responses:
        return PipelineShape.REQUEST_ONLY
    return PipelineShape.FULL


def _then_responses(send: Invocation, respond: ResponseTransformer) -> Invocation:
    async def invoke(request: HttpRequest) -> HttpResponse:
        return respond(await send(request))

    return invoke


def _requests_then(prepare: RequestTransformer, send: Invocation) -> Invocation:
    async def invoke(request: HttpRequest) -> HttpResponse:
        return await send(prepare(request))

    return invoke


def _requests_then_responses(prepare: RequestTransformer, send: Invocation, respond: ResponseTransformer) -> Invocation:
    async def invoke(request: HttpRequest) -> HttpResponse:
        return respond(await send(prepare(request)))

    return invoke


def compose_invocation(pipeline: Pipeline, send: Invocation) -> Invocation:
    """Wrap ``send`` in ``pipeline``; an empty pipeline returns ``send`` itself."""
    shape = pipeline_shape(pipeline)
    if shape == PipelineShape.PASS_THROUGH:
        return send
    if shape == PipelineShape.RESPONSE_ONLY:
        return _then_responses(send, compose_responses(pipeline.response_transformers))
    if shape == PipelineShape.REQUEST_ONLY:
        return _requests_then(compose_requests(pipeline.request_transformers), send)
    return _requests_then_responses(
        compose_requests(pipeline.request_transformers),
        send,
        compose_responses(pipeline.response_transformers),
    )


def ensure_available(destination: Destination, status: Status) -> None:
    if status == Status.DOWN:
        logger.warning("Rejecting call to %s (%s): destination is marked down", destination.name, destination.env)
        raise DestinationUnavailableError(destination.name, destination.env)


class PipelineManager:
    """Resolves destinations into ready-to-call invocations."""

    def __init__(self, transport: Transport | None = None, resolver: ConnectorResolver | None = None):
        self.transport = transport or create_default_transport()
        self.resolver = resolver or ConnectorResolver(self.transport)

    async def resolve_invocation(self, destination: Destination) -> Invocation:
        # Setup runs before the status check, so a destination that is down
        # still pays for one connector setup before it is rejected.
        connector = await self.resolver.resolve(destination)
        return self.resolve_invocation_without_setup(destination, connector)

    def resolve_invocation_without_setup(self, destination: Destination, connector: Connector) -> Invocation:
        pipeline = destination.config.effective_pipeline()
        status = destination.status
        ensure_available(destination, status)
        invocation = compose_invocation(pipeline, connector.send)
        logger.debug(
            "Composed %s invocation for %s (%d request, %d response transformers)",
            pipeline_shape(pipeline).value,
            destination.name,
            len(pipeline.request_transformers),
            len(pipeline.response_transformers),
        )
        return invocation


__all__ = [
    "Invocation",
    "PipelineManager",
    "PipelineShape",
    "compose_invocation",
    "ensure_available",
    "pipeline_shape",
]
