# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

from dataclasses import replace

import pytest

from relaypipe.destination import Destination, EndpointConfig, InMemoryRegistry, Status
from relaypipe.errors import ConnectorSetupTimeout, DestinationUnavailableError
from relaypipe.http.adapters import StubConnector, StubTransport
from relaypipe.http.models import HttpRequest, HttpResponse
from relaypipe.manager import PipelineManager, PipelineShape, compose_invocation, pipeline_shape
from relaypipe.pipeline.models import EMPTY_PIPELINE, Pipeline
from relaypipe.pipeline.transformers import add_request_header, remove_response_header

RAW = HttpResponse(ok=True, status_code=200, headers={"Set-Cookie": "sid=1", "X-Upstream": "svc"}, text="raw")


def _destination(pipeline=None, status=Status.UP, uri="http://svc:8080/x"):
    return Destination(name="orders", env="qa", status=status, config=EndpointConfig(uri=uri, pipeline=pipeline))


def _manager(connector=None, **transport_kwargs):
    connector = connector or StubConnector(default=RAW)
    transport = StubTransport(connector, **transport_kwargs)
    return PipelineManager(transport), transport, connector


def _recording_request(tag, calls):
    def transform(request: HttpRequest) -> HttpRequest:
        calls.append(tag)
        return replace(request, url=request.url + "/" + tag)

    return transform


def _recording_response(tag, calls):
    def transform(response: HttpResponse) -> HttpResponse:
        calls.append(tag)
        return replace(response, text=response.text + "|" + tag)

    return transform


def test_pipeline_shape_covers_all_four_cases():
    def req(r):
        return r

    assert pipeline_shape(EMPTY_PIPELINE) == PipelineShape.PASS_THROUGH
    assert pipeline_shape(Pipeline.of(responses=[req])) == PipelineShape.RESPONSE_ONLY
    assert pipeline_shape(Pipeline.of(requests=[req])) == PipelineShape.REQUEST_ONLY
    assert pipeline_shape(Pipeline.of(requests=[req], responses=[req])) == PipelineShape.FULL


def test_pass_through_returns_raw_send():
    connector = StubConnector(default=RAW)
    assert compose_invocation(EMPTY_PIPELINE, connector.send) == connector.send


@pytest.mark.asyncio
async def test_empty_pipeline_returns_raw_transport_response():
    manager, transport, connector = _manager()
    invocation = await manager.resolve_invocation(_destination())

    response = await invocation(HttpRequest(url="", method="GET"))

    assert response is RAW
    assert transport.completed_setups == 1
    assert transport.setups[0].host == "svc"
    assert transport.setups[0].port == 8080
    assert connector.requests[0].method == "GET"


@pytest.mark.asyncio
async def test_missing_pipeline_defaults_to_empty():
    manager, _, connector = _manager()
    invocation = manager.resolve_invocation_without_setup(_destination(pipeline=None), connector)
    assert invocation == connector.send


@pytest.mark.asyncio
async def test_trace_header_added_and_cookie_stripped():
    pipeline = Pipeline.of(
        requests=[add_request_header("X-Trace", "1")],
        responses=[remove_response_header("Set-Cookie")],
    )
    manager, _, connector = _manager()
    invocation = await manager.resolve_invocation(_destination(pipeline))

    response = await invocation(HttpRequest(url="", method="GET"))

    assert "Set-Cookie" not in response.headers
    assert response.headers["X-Upstream"] == "svc"
    assert connector.requests[0].headers == {"X-Trace": "1"}
    assert "Set-Cookie" in RAW.headers


@pytest.mark.asyncio
async def test_transformer_order_is_request_then_send_then_response():
    calls = []

    def respond(request):
        calls.append("send")
        return HttpResponse(ok=True, status_code=200, text="raw", url=request.url)

    pipeline = Pipeline.of(
        requests=[_recording_request("f1", calls), _recording_request("f2", calls)],
        responses=[_recording_response("g1", calls), _recording_response("g2", calls)],
    )
    manager, _, connector = _manager(StubConnector(default=respond))
    invocation = manager.resolve_invocation_without_setup(_destination(pipeline), connector)

    response = await invocation(HttpRequest(url=""))

    assert calls == ["f1", "f2", "send", "g1", "g2"]
    assert connector.requests[0].url == "/f1/f2"
    assert response.text == "raw|g1|g2"


@pytest.mark.asyncio
async def test_request_only_pipeline_leaves_response_untouched():
    calls = []
    manager, _, connector = _manager()
    invocation = manager.resolve_invocation_without_setup(
        _destination(Pipeline.of(requests=[_recording_request("f1", calls)])), connector
    )
    response = await invocation(HttpRequest(url=""))
    assert response is RAW
    assert connector.requests[0].url == "/f1"


@pytest.mark.asyncio
async def test_response_only_pipeline_sends_caller_request_unchanged():
    calls = []
    manager, _, connector = _manager()
    invocation = manager.resolve_invocation_without_setup(
        _destination(Pipeline.of(responses=[_recording_response("g1", calls)])), connector
    )
    request = HttpRequest(url="/orders/1")
    response = await invocation(request)
    assert connector.requests[0] is request
    assert response.text == "raw|g1"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "pipeline",
    [
        EMPTY_PIPELINE,
        Pipeline.of(requests=[add_request_header("X-Trace", "1")]),
        Pipeline.of(responses=[remove_response_header("Set-Cookie")]),
        Pipeline.of(requests=[add_request_header("X-Trace", "1")], responses=[remove_response_header("Set-Cookie")]),
    ],
)
async def test_down_destination_is_rejected_without_sending(pipeline):
    manager, transport, connector = _manager()

    with pytest.raises(DestinationUnavailableError) as excinfo:
        await manager.resolve_invocation(_destination(pipeline, status=Status.DOWN))
    with pytest.raises(DestinationUnavailableError):
        manager.resolve_invocation_without_setup(_destination(pipeline, status=Status.DOWN), connector)

    assert excinfo.value.name == "orders"
    assert excinfo.value.env == "qa"
    assert connector.requests == []
    # Setup still happens on the resolving path before the status check.
    assert transport.completed_setups == 1


@pytest.mark.asyncio
async def test_without_setup_never_touches_transport():
    manager, transport, connector = _manager()
    invocation = manager.resolve_invocation_without_setup(_destination(), connector)
    await invocation(HttpRequest(url=""))
    assert transport.setups == []
    assert len(connector.requests) == 1


@pytest.mark.asyncio
async def test_destination_marked_down_mid_session():
    registry = InMemoryRegistry([_destination()])
    manager, _, connector = _manager()

    invocation = await manager.resolve_invocation(registry.get("orders"))
    assert (await invocation(HttpRequest(url=""))) is RAW

    registry.mark_down("orders")
    with pytest.raises(DestinationUnavailableError):
        await manager.resolve_invocation(registry.get("orders"))

    registry.mark_up("orders")
    again = await manager.resolve_invocation(registry.get("orders"))
    assert (await again(HttpRequest(url=""))) is RAW
    assert len(connector.requests) == 2


@pytest.mark.asyncio
async def test_resolving_twice_yields_equivalent_invocations():
    pipeline = Pipeline.of(requests=[add_request_header("X-Trace", "1")])
    manager, _, connector = _manager()
    destination = _destination(pipeline)

    first = await manager.resolve_invocation(destination)
    second = await manager.resolve_invocation(destination)

    first_response = await first(HttpRequest(url="/a"))
    second_response = await second(HttpRequest(url="/a"))
    assert first_response == second_response
    assert connector.requests[0] == connector.requests[1]


@pytest.mark.asyncio
async def test_invocation_can_be_called_repeatedly():
    manager, transport, connector = _manager()
    invocation = await manager.resolve_invocation(_destination())
    for path in ("/a", "/b", "/c"):
        await invocation(HttpRequest(url=path))
    assert [r.url for r in connector.requests] == ["/a", "/b", "/c"]
    assert transport.completed_setups == 1


@pytest.mark.asyncio
async def test_setup_timeout_propagates_unchanged():
    manager, _, connector = _manager(setup_delay=0.5)
    destination = _destination()
    destination.config = replace(
        destination.config,
        host_settings=replace(
            destination.config.host_settings,
            connection_settings=replace(destination.config.host_settings.connection_settings, connecting_timeout=0.05),
        ),
    )
    with pytest.raises(ConnectorSetupTimeout):
        await manager.resolve_invocation(destination)
    assert connector.requests == []


def test_registry_reads_and_status_transitions():
    destination = _destination()
    registry = InMemoryRegistry()
    registry.register(destination)

    assert registry.get_config("orders") is destination.config
    assert registry.get_status("orders") == Status.UP
    registry.mark_down("orders")
    assert registry.get_status("orders") == Status.DOWN
    assert destination.status == Status.DOWN
    assert destination.endpoint_uri() == "http://svc:8080/x"

    registry.remove("orders")
    assert registry.names() == []
