# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Turn a completed response into a typed value or a classified failure."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from pydantic import TypeAdapter, ValidationError

from ..errors import MalformedOutputError, RelayPipeError, UnsuccessfulResponseError
from ..http.models import HttpResponse

T = TypeVar("T")


@dataclass(frozen=True)
class Classification(Generic[T]):
    ok: bool
    value: T | None = None
    error: RelayPipeError | None = None


def _decode(response: HttpResponse, expected_type: Any) -> Any:
    if expected_type is str:
        return response.text
    if expected_type is bytes:
        return response.content
    adapter = TypeAdapter(expected_type)
    return adapter.validate_json(response.content or response.text)


def classify(response: HttpResponse, expected_type: type[T] | Any) -> T:
    """
    Decode a successful response body into ``expected_type``.

    Raises UnsuccessfulResponseError for anything other than a completed 2xx
    exchange (the body is not looked at), and MalformedOutputError when a 2xx
    body does not validate against ``expected_type``.
    """
    if not response.is_success:
        raise UnsuccessfulResponseError(response)
    try:
        return _decode(response, expected_type)
    except ValidationError as exc:
        raise MalformedOutputError(str(exc)) from exc


def try_classify(response: HttpResponse, expected_type: type[T] | Any) -> Classification[T]:
    try:
        return Classification(ok=True, value=classify(response, expected_type))
    except (UnsuccessfulResponseError, MalformedOutputError) as exc:
        return Classification(ok=False, error=exc)


__all__ = ["Classification", "classify", "try_classify"]
