# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Transformer and pipeline model.

A pipeline is an ordered pair of transformer chains. Request transformers run
in declared order before the request reaches the connector (the first one sees
the caller's request); response transformers run in declared order on the raw
response (the first one sees what the connector returned).
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from functools import reduce
from typing import TypeVar

from ..http.models import HttpRequest, HttpResponse

RequestTransformer = Callable[[HttpRequest], HttpRequest]
ResponseTransformer = Callable[[HttpResponse], HttpResponse]

T = TypeVar("T")


def identity(value: T) -> T:
    return value


def _and_then(first: Callable[[T], T], second: Callable[[T], T]) -> Callable[[T], T]:
    def composed(value: T) -> T:
        return second(first(value))

    return composed


def compose_requests(transformers: Iterable[RequestTransformer]) -> RequestTransformer:
    """Fold request transformers into one function; the first declared runs first."""
    return reduce(_and_then, transformers, identity)


def compose_responses(transformers: Iterable[ResponseTransformer]) -> ResponseTransformer:
    """Fold response transformers into one function; the first declared runs first."""
    return reduce(_and_then, transformers, identity)


class PipelineHandler:
    """An object contributing one request step and one response step to a pipeline."""

    def process_request(self, request: HttpRequest) -> HttpRequest:
        raise NotImplementedError

    def process_response(self, response: HttpResponse) -> HttpResponse:
        raise NotImplementedError


class RequestPipelineHandler(PipelineHandler):
    """Handler that only rewrites requests."""

    def process_response(self, response: HttpResponse) -> HttpResponse:
        return response


class ResponsePipelineHandler(PipelineHandler):
    """Handler that only rewrites responses."""

    def process_request(self, request: HttpRequest) -> HttpRequest:
        return request


@dataclass(frozen=True)
class Pipeline:
    request_transformers: tuple[RequestTransformer, ...] = ()
    response_transformers: tuple[ResponseTransformer, ...] = ()

    def __post_init__(self) -> None:
        # Accept any sequence but store tuples so pipelines stay immutable.
        object.__setattr__(self, "request_transformers", tuple(self.request_transformers))
        object.__setattr__(self, "response_transformers", tuple(self.response_transformers))

    @property
    def has_request_transformers(self) -> bool:
        return bool(self.request_transformers)

    @property
    def has_response_transformers(self) -> bool:
        return bool(self.response_transformers)

    @classmethod
    def of(
        cls,
        requests: Sequence[RequestTransformer] = (),
        responses: Sequence[ResponseTransformer] = (),
    ) -> Pipeline:
        return cls(tuple(requests), tuple(responses))

    @classmethod
    def from_handlers(cls, handlers: Iterable[PipelineHandler]) -> Pipeline:
        """
        Build a pipeline from handler objects in declared order.

        Request-only and response-only handlers contribute to their side alone,
        so they do not add identity steps to the other chain.
        """
        requests: list[RequestTransformer] = []
        responses: list[ResponseTransformer] = []
        for handler in handlers:
            if not isinstance(handler, ResponsePipelineHandler):
                requests.append(handler.process_request)
            if not isinstance(handler, RequestPipelineHandler):
                responses.append(handler.process_response)
        return cls(tuple(requests), tuple(responses))


EMPTY_PIPELINE = Pipeline()


__all__ = [
    "EMPTY_PIPELINE",
    "Pipeline",
    "PipelineHandler",
    "RequestPipelineHandler",
    "RequestTransformer",
    "ResponsePipelineHandler",
    "ResponseTransformer",
    "compose_requests",
    "compose_responses",
    "identity",
]
