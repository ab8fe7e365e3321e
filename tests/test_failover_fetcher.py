from __future__ import annotations

import asyncio

import httpx
import pytest

from qingmusic.utils import (
    AllMirrorsFailedError,
    FailoverFetcher,
    TransportError,
    UpstreamShapeError,
    UpstreamStatusError,
    rewrite_origin,
)

HOSTS = ["https://h1.test", "https://h2.test", "https://h3.test"]


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def test_rewrite_origin_keeps_path_and_query() -> None:
    url = "https://piped.video/api/v1/search?q=lemon%20tree&x=1"

    assert rewrite_origin(url, "http://mirror.test:8080/") == "http://mirror.test:8080/api/v1/search?q=lemon%20tree&x=1"


def test_rewrite_origin_keeps_query_without_path() -> None:
    assert rewrite_origin("https://h1.test?x=1", "https://h2.test") == "https://h2.test?x=1"


def test_rewrite_origin_accepts_bare_paths() -> None:
    assert rewrite_origin("/api/v1/streams/abc", "https://h1.test") == "https://h1.test/api/v1/streams/abc"


def test_failover_tries_hosts_in_order_until_one_succeeds() -> None:
    seen: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.url.host)
        if request.url.host == "h1.test":
            raise httpx.ConnectError("refused", request=request)
        if request.url.host == "h2.test":
            return httpx.Response(502, text="bad gateway")
        return httpx.Response(200, json={"host": "h3"})

    async def run():
        async with _client(handler) as client:
            fetcher = FailoverFetcher(HOSTS, client=client)
            return await fetcher.fetch_json("https://h1.test/api/v1/streams/abc?x=1")

    result = asyncio.run(run())

    assert result == {"host": "h3"}
    assert seen == ["h1.test", "h2.test", "h3.test"]


def test_failover_stops_at_first_success() -> None:
    seen: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.url.host)
        return httpx.Response(200, json=[1, 2])

    async def run():
        async with _client(handler) as client:
            return await FailoverFetcher(HOSTS, client=client).fetch_json("https://h1.test/x")

    assert asyncio.run(run()) == [1, 2]
    assert seen == ["h1.test"]


def test_failover_treats_non_json_body_as_failure() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.host == "h1.test":
            return httpx.Response(200, text="<html>maintenance</html>")
        return httpx.Response(200, json={"ok": True})

    async def run():
        async with _client(handler) as client:
            return await FailoverFetcher(HOSTS, client=client).fetch_json("https://h1.test/x")

    assert asyncio.run(run()) == {"ok": True}


def test_failover_exhaustion_wraps_last_host_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.host == "h3.test":
            return httpx.Response(503, text="down")
        raise httpx.ConnectError("refused", request=request)

    async def run():
        async with _client(handler) as client:
            await FailoverFetcher(HOSTS, client=client).fetch_json("https://h1.test/x")

    with pytest.raises(AllMirrorsFailedError) as excinfo:
        asyncio.run(run())

    error = excinfo.value
    assert isinstance(error.last_error, UpstreamStatusError)
    assert error.last_error.status_code == 503
    assert error.last_error.url == "https://h3.test/x"
    assert error.__cause__ is error.last_error
    assert error.attempted == tuple(HOSTS)


def test_single_request_without_hosts_raises_status_error() -> None:
    calls = {"n": 0}

    def handler(request: httpx.Request) -> httpx.Response:
        calls["n"] += 1
        return httpx.Response(412, json={"code": -412})

    async def run():
        async with _client(handler) as client:
            await FailoverFetcher(client=client).fetch_json("https://api.test/x")

    with pytest.raises(UpstreamStatusError) as excinfo:
        asyncio.run(run())

    assert excinfo.value.status_code == 412
    assert calls["n"] == 1


def test_single_request_without_hosts_raises_transport_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectTimeout("timed out", request=request)

    async def run():
        async with _client(handler) as client:
            await FailoverFetcher(client=client).fetch_json("https://api.test/x")

    with pytest.raises(TransportError) as excinfo:
        asyncio.run(run())

    assert isinstance(excinfo.value.__cause__, httpx.ConnectTimeout)


def test_single_request_rejects_invalid_json() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="not json")

    async def run():
        async with _client(handler) as client:
            await FailoverFetcher(client=client).fetch_json("https://api.test/x")

    with pytest.raises(UpstreamShapeError):
        asyncio.run(run())


def test_request_headers_are_forwarded() -> None:
    seen: dict[str, str] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["referer"] = request.headers.get("referer", "")
        return httpx.Response(200, json={})

    async def run():
        async with _client(handler) as client:
            await FailoverFetcher(client=client).fetch_json(
                "https://api.test/x", headers={"Referer": "https://www.bilibili.com"}
            )

    asyncio.run(run())

    assert seen["referer"] == "https://www.bilibili.com"
