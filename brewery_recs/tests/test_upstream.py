from __future__ import annotations

import asyncio
from dataclasses import replace

import httpx
import pytest

from brewery_recs.config import AppConfig
from brewery_recs.upstream.client import (
    BreweryClient,
    UpstreamNotFound,
    UpstreamRejected,
    UpstreamUnavailable,
    camelize_keys,
)

BASE_CONFIG = AppConfig(brewery_api_url="http://brewery.test")
TOKEN = "Bearer mock-token"


def _client(handler, config: AppConfig = BASE_CONFIG) -> BreweryClient:
    return BreweryClient(config, transport=httpx.MockTransport(handler))


def _run(coro):
    return asyncio.run(coro)


class Recorder:
    """MockTransport handler serving canned JSON per path."""

    def __init__(self, routes: dict):
        self.routes = routes
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        result = self.routes.get(request.url.path)
        if result is None:
            return httpx.Response(404, json={"message": "Not found"})
        if isinstance(result, Exception):
            raise result
        if isinstance(result, httpx.Response):
            return result
        return httpx.Response(200, json=result)


# ── Endpoints ────────────────────────────────────────────────────────────


def test_fetch_user_profile():
    recorder = Recorder({"/api/user/1": {"id": 1, "tasteProfile": {"primaryFlavor": "Hoppy"}}})
    profile = _run(_client(recorder).fetch_user_profile(1, TOKEN))

    assert profile.taste_profile.primary_flavor == "Hoppy"
    assert str(recorder.requests[0].url) == "http://brewery.test/api/user/1"


def test_user_profile_path_is_configurable():
    config = replace(BASE_CONFIG, user_profile_path="/api/auth/{user_id}")
    recorder = Recorder({"/api/auth/42": {"tasteProfile": {"sweetness": "Low"}}})
    profile = _run(_client(recorder, config).fetch_user_profile(42))

    assert profile.taste_profile.sweetness == "Low"
    assert recorder.requests[0].url.path == "/api/auth/42"


def test_fetch_inventory():
    recorder = Recorder({
        "/api/inventory": [
            {"id": 1, "name": "Hoppy Beer", "tasteProfile": {"primaryFlavor": "Hoppy"}, "stockQuantity": 10},
            {"id": 2, "name": "Plain", "tasteProfile": None, "stockQuantity": 3, "abv": 4.5},
        ]
    })
    inventory = _run(_client(recorder).fetch_inventory())

    assert [item.id for item in inventory] == [1, 2]
    assert inventory[0].stock_quantity == 10
    assert inventory[1].taste_profile.primary_flavor is None
    assert inventory[1].abv == 4.5


def test_fetch_inventory_item():
    recorder = Recorder({"/api/inventory/7": {"id": 7, "name": "Stout", "stockQuantity": 2}})
    item = _run(_client(recorder).fetch_inventory_item(7))

    assert item.id == 7
    assert item.name == "Stout"
    assert recorder.requests[0].url.path == "/api/inventory/7"


# ── Authorization forwarding ─────────────────────────────────────────────


def test_authorization_forwarded_verbatim():
    recorder = Recorder({"/api/inventory": []})
    _run(_client(recorder).fetch_inventory("Bearer abc.def.ghi"))
    assert recorder.requests[0].headers["authorization"] == "Bearer abc.def.ghi"


def test_no_authorization_header_when_absent():
    recorder = Recorder({"/api/inventory": []})
    _run(_client(recorder).fetch_inventory())
    assert "authorization" not in recorder.requests[0].headers


def test_forwarding_can_be_disabled():
    config = replace(BASE_CONFIG, forward_authorization=False)
    recorder = Recorder({"/api/inventory": []})
    _run(_client(recorder, config).fetch_inventory(TOKEN))
    assert "authorization" not in recorder.requests[0].headers


# ── Field casing ─────────────────────────────────────────────────────────


def test_camelize_keys_is_recursive():
    payload = {"TasteProfile": {"PrimaryFlavor": "Hoppy", "Aroma": ["Pine"]}, "Items": [{"Id": 1}]}
    assert camelize_keys(payload) == {
        "tasteProfile": {"primaryFlavor": "Hoppy", "aroma": ["Pine"]},
        "items": [{"id": 1}],
    }


def test_pascal_case_upstream():
    config = replace(BASE_CONFIG, field_casing="pascal")
    recorder = Recorder({
        "/api/inventory": [
            {"Id": 1, "Name": "Hoppy Beer", "TasteProfile": {"PrimaryFlavor": "Hoppy"}, "StockQuantity": 10},
        ]
    })
    inventory = _run(_client(recorder, config).fetch_inventory())

    assert inventory[0].id == 1
    assert inventory[0].name == "Hoppy Beer"
    assert inventory[0].taste_profile.primary_flavor == "Hoppy"
    assert inventory[0].stock_quantity == 10


def test_pascal_case_error_body():
    config = replace(BASE_CONFIG, field_casing="pascal")
    recorder = Recorder({
        "/api/user/1": httpx.Response(404, json={"Message": "User not found"}),
    })
    with pytest.raises(UpstreamNotFound) as excinfo:
        _run(_client(recorder, config).fetch_user_profile(1))
    assert excinfo.value.response_body == {"message": "User not found"}


# ── Failures ─────────────────────────────────────────────────────────────


def test_not_found_carries_body():
    recorder = Recorder({
        "/api/inventory/9": httpx.Response(404, json={"message": "Product not found"}),
    })
    with pytest.raises(UpstreamNotFound) as excinfo:
        _run(_client(recorder).fetch_inventory_item(9))

    assert excinfo.value.status_code == 404
    assert excinfo.value.response_body == {"message": "Product not found"}
    assert str(excinfo.value) == "Request failed with status code 404"


def test_rejected_with_non_json_body():
    recorder = Recorder({"/api/inventory": httpx.Response(503, text="Service Unavailable")})
    with pytest.raises(UpstreamRejected) as excinfo:
        _run(_client(recorder).fetch_inventory())

    assert excinfo.value.status_code == 503
    assert excinfo.value.response_body == {"raw": "Service Unavailable"}


def test_transport_failure():
    recorder = Recorder({"/api/inventory": httpx.ConnectError("Network error")})
    with pytest.raises(UpstreamUnavailable) as excinfo:
        _run(_client(recorder).fetch_inventory())

    assert excinfo.value.status_code is None
    assert excinfo.value.message == "Network error"


def test_invalid_payload_is_bad_gateway():
    recorder = Recorder({"/api/inventory": [{"name": "No id"}]})
    with pytest.raises(UpstreamRejected) as excinfo:
        _run(_client(recorder).fetch_inventory())

    assert excinfo.value.status_code == 502
    assert "errors" in excinfo.value.response_body


def test_malformed_json_is_bad_gateway():
    recorder = Recorder({"/api/inventory": httpx.Response(200, text="not json{{{")})
    with pytest.raises(UpstreamRejected) as excinfo:
        _run(_client(recorder).fetch_inventory())

    assert excinfo.value.status_code == 502


def test_undecodable_body_is_bad_gateway():
    recorder = Recorder({"/api/inventory": httpx.Response(200, content=b'[{"id":1,"name":"\xff\xfe"}]')})
    with pytest.raises(UpstreamRejected) as excinfo:
        _run(_client(recorder).fetch_inventory())

    assert excinfo.value.status_code == 502


def test_undecodable_error_body_keeps_status():
    recorder = Recorder({"/api/inventory": httpx.Response(500, content=b'{"message":"\xff"}')})
    with pytest.raises(UpstreamRejected) as excinfo:
        _run(_client(recorder).fetch_inventory())

    assert excinfo.value.status_code == 500
    assert "raw" in excinfo.value.response_body


def test_client_reopens_after_close():
    recorder = Recorder({"/api/inventory": []})
    client = _client(recorder)

    async def _twice():
        await client.fetch_inventory()
        await client.aclose()
        return await client.fetch_inventory()

    assert _run(_twice()) == []
    assert len(recorder.requests) == 2
