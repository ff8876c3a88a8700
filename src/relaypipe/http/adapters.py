# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Programmable transport collaborators for tests and offline use."""

from __future__ import annotations

import asyncio
from collections.abc import Callable

from .models import HttpRequest, HttpResponse
from .transport import Connector, ConnectorSetup, Transport


class StubConnector(Connector):
    """Deterministic connector returning canned responses keyed by request URL."""

    def __init__(
        self,
        responses: dict[str, HttpResponse] | None = None,
        *,
        default: HttpResponse | Callable[[HttpRequest], HttpResponse] | None = None,
    ):
        self._responses = responses or {}
        self._default = default
        self.requests: list[HttpRequest] = []

    def add(self, url: str, response: HttpResponse) -> None:
        self._responses[url] = response

    async def send(self, request: HttpRequest) -> HttpResponse:
        self.requests.append(request)
        if request.url in self._responses:
            return self._responses[request.url]
        if callable(self._default):
            return self._default(request)
        if self._default is not None:
            return self._default
        return HttpResponse(ok=False, status_code=None, error_message="No stubbed response configured")


class StubTransport(Transport):
    """
    Transport that hands out one shared StubConnector.

    ``setup_delay`` makes setup sleep before answering and ``setup_error`` makes
    it raise, so timeout and failure paths can be driven without a network.
    """

    def __init__(
        self,
        connector: StubConnector | None = None,
        *,
        setup_delay: float = 0.0,
        setup_error: BaseException | None = None,
    ):
        self.connector = connector or StubConnector()
        self.setup_delay = setup_delay
        self.setup_error = setup_error
        self.setups: list[ConnectorSetup] = []
        self.completed_setups = 0
        self.closed = False

    async def setup_connector(self, setup: ConnectorSetup) -> Connector:
        self.setups.append(setup)
        if self.setup_delay > 0:
            await asyncio.sleep(self.setup_delay)
        if self.setup_error is not None:
            raise self.setup_error
        self.completed_setups += 1
        return self.connector

    async def aclose(self) -> None:
        self.closed = True
