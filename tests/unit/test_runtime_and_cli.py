# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import json

import pytest
from pydantic import BaseModel

from relaypipe.cli import main as cli_main
from relaypipe.config import ClientSettings
from relaypipe.destination import Status
from relaypipe.errors import (
    DestinationNotFoundError,
    DestinationUnavailableError,
    UnsuccessfulResponseError,
)
from relaypipe.http.adapters import StubConnector, StubTransport
from relaypipe.http.models import HttpRequest, HttpResponse
from relaypipe.pipeline.models import Pipeline
from relaypipe.pipeline.transformers import add_request_header
from relaypipe.runtime import RelayPipe


class Order(BaseModel):
    id: int


def _relay(connector=None, **transport_kwargs):
    transport = StubTransport(connector or StubConnector(), **transport_kwargs)
    return RelayPipe(transport=transport, settings=ClientSettings(connect_timeout=0.5)), transport


@pytest.mark.asyncio
async def test_register_uses_client_settings_for_host_defaults():
    relay, _ = _relay()
    destination = relay.register("orders", "http://svc:8080", env="prod")
    assert destination.env == "prod"
    assert destination.status == Status.UP
    assert destination.config.connecting_timeout == 0.5
    assert relay.registry.names() == ["orders"]


@pytest.mark.asyncio
async def test_get_with_expected_type_classifies():
    connector = StubConnector(default=HttpResponse(ok=True, status_code=200, text='{"id": 3}', content=b'{"id": 3}'))
    relay, _ = _relay(connector)
    relay.register("orders", "http://svc", pipeline=Pipeline.of(requests=[add_request_header("X-Trace", "1")]))

    order = await relay.get("orders", "/orders/3", expected_type=Order)

    assert order == Order(id=3)
    assert connector.requests[0].url == "/orders/3"
    assert connector.requests[0].headers == {"X-Trace": "1"}


@pytest.mark.asyncio
async def test_post_without_expected_type_returns_response():
    connector = StubConnector(default=HttpResponse(ok=True, status_code=500))
    relay, _ = _relay(connector)
    relay.register("orders", "http://svc")

    response = await relay.post("orders", "/orders", body="{}")
    assert response.status_code == 500
    assert connector.requests[0].method == "POST"
    assert connector.requests[0].body == "{}"

    with pytest.raises(UnsuccessfulResponseError):
        await relay.post("orders", "/orders", expected_type=Order)


@pytest.mark.asyncio
async def test_mark_down_and_up_are_seen_on_next_call():
    relay, _ = _relay(StubConnector(default=HttpResponse(ok=True, status_code=204)))
    relay.register("orders", "http://svc")

    assert (await relay.request("orders", HttpRequest(url="/"))).status_code == 204
    relay.mark_down("orders")
    with pytest.raises(DestinationUnavailableError):
        await relay.request("orders", HttpRequest(url="/"))
    relay.mark_up("orders")
    assert (await relay.request("orders", HttpRequest(url="/"))).status_code == 204


@pytest.mark.asyncio
async def test_unknown_destination_raises_lookup_error():
    relay, _ = _relay()
    with pytest.raises(DestinationNotFoundError):
        await relay.get("missing")


@pytest.mark.asyncio
async def test_context_manager_closes_transport():
    relay, transport = _relay()
    async with relay:
        pass
    assert transport.closed is True


def _patch_relay(monkeypatch, transport):
    def factory(*args, **kwargs):
        kwargs["transport"] = transport
        return RelayPipe(*args, **kwargs)

    monkeypatch.setattr(cli_main, "RelayPipe", factory)


def test_cli_prints_json_and_exits_zero(monkeypatch, capsys):
    connector = StubConnector(default=HttpResponse(ok=True, status_code=200, headers={"a": "b"}, text="hello"))
    transport = StubTransport(connector)
    _patch_relay(monkeypatch, transport)

    code = cli_main.main(["http://svc:8080/x", "--json", "-H", "X-Trace: 1", "-X", "post", "-d", "body"])

    assert code == cli_main.EXIT_OK
    payload = json.loads(capsys.readouterr().out)
    assert payload["status_code"] == 200
    assert payload["body"] == "hello"
    assert connector.requests[0].method == "POST"
    assert connector.requests[0].headers == {"X-Trace": "1"}
    assert transport.setups[0].port == 8080
    assert transport.closed is True


def test_cli_reports_unsuccessful_response(monkeypatch, capsys):
    transport = StubTransport(StubConnector(default=HttpResponse(ok=True, status_code=404, text="missing")))
    _patch_relay(monkeypatch, transport)

    code = cli_main.main(["http://svc"])

    captured = capsys.readouterr()
    assert code == cli_main.EXIT_UNSUCCESSFUL
    assert "missing" in captured.out
    assert "404" in captured.err


def test_cli_reports_setup_failure(monkeypatch, capsys):
    transport = StubTransport(setup_error=ConnectionRefusedError("refused"))
    _patch_relay(monkeypatch, transport)

    code = cli_main.main(["http://svc", "--connect-timeout", "0.5"])

    assert code == cli_main.EXIT_SETUP_FAILED
    assert "Network connectivity issue" in capsys.readouterr().err


def test_cli_reports_setup_timeout(monkeypatch, capsys):
    transport = StubTransport(setup_delay=0.5)
    _patch_relay(monkeypatch, transport)

    code = cli_main.main(["http://svc", "--connect-timeout", "0.01"])

    assert code == cli_main.EXIT_SETUP_FAILED
    assert "timed out" in capsys.readouterr().err


def test_cli_rejects_malformed_header(monkeypatch):
    _patch_relay(monkeypatch, StubTransport())
    with pytest.raises(SystemExit):
        cli_main.main(["http://svc", "-H", "no-colon"])
