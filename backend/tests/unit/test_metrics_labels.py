"""Unit tests for the request metrics path label."""
from types import SimpleNamespace
from typing import Any

from starlette.requests import Request

from mssp.middleware.metrics import route_template


def make_request(path: str, route: Any = None) -> Request:
    scope = {
        "type": "http",
        "method": "GET",
        "path": path,
        "root_path": "",
        "query_string": b"",
        "headers": [],
    }
    if route is not None:
        scope["route"] = route
    return Request(scope)


def test_full_route_path_is_used_as_is() -> None:
    route = SimpleNamespace(path="/v1/clients/{client_id}")

    assert route_template(make_request("/v1/clients/42", route)) == "/v1/clients/{client_id}"


def test_router_prefix_is_restored() -> None:
    """Test a template relative to its router still yields the full label."""
    route = SimpleNamespace(path="/clients/{client_id}")

    assert route_template(make_request("/v1/clients/42", route)) == "/v1/clients/{client_id}"


def test_path_format_preferred_over_path() -> None:
    """Test convertor suffixes never reach the label."""
    route = SimpleNamespace(
        path="/entities/{entity_type}/{entity_id:int}",
        path_format="/entities/{entity_type}/{entity_id}",
    )

    assert route_template(make_request("/v1/entities/client/7", route)) == "/v1/entities/{entity_type}/{entity_id}"


def test_unmatched_request_uses_raw_path() -> None:
    assert route_template(make_request("/nope/123")) == "/nope/123"
