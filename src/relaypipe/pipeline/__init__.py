# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Transformer pipelines and response classification."""

from .classify import Classification, classify, try_classify
from .models import (
    EMPTY_PIPELINE,
    Pipeline,
    PipelineHandler,
    RequestPipelineHandler,
    RequestTransformer,
    ResponsePipelineHandler,
    ResponseTransformer,
    compose_requests,
    compose_responses,
)
from .transformers import (
    add_request_header,
    add_response_header,
    remove_request_header,
    remove_response_header,
)

__all__ = [
    "EMPTY_PIPELINE",
    "Classification",
    "Pipeline",
    "PipelineHandler",
    "RequestPipelineHandler",
    "RequestTransformer",
    "ResponsePipelineHandler",
    "ResponseTransformer",
    "add_request_header",
    "add_response_header",
    "classify",
    "compose_requests",
    "compose_responses",
    "remove_request_header",
    "remove_response_header",
    "try_classify",
]
