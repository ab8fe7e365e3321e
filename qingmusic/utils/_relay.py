from typing import Optional

import httpx

from qingmusic import config


class RelayTransport(httpx.AsyncBaseTransport):
    """
    Sends every request through a CORS relay as ``GET {relay}?url=<target>``.

    The relay expects the upstream referrer in ``x-ref``; the request's own
    ``Referer`` is moved there, or ``default_referer`` is used.
    """

    def __init__(
            self,
            relay_url: str,
            default_referer: str = config.BILIBILI_REFERER,
            transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.relay_url = httpx.URL(relay_url)
        self.default_referer = default_referer
        self._transport = transport or httpx.AsyncHTTPTransport()

    def relay_request(self, request: httpx.Request) -> httpx.Request:
        headers = httpx.Headers(request.headers)
        headers.pop("host", None)
        referer = headers.pop("referer", None) or self.default_referer
        headers["x-ref"] = referer
        return httpx.Request(
            "GET",
            self.relay_url.copy_merge_params({"url": str(request.url)}),
            headers=headers,
            extensions=request.extensions,
        )

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        return await self._transport.handle_async_request(self.relay_request(request))

    async def aclose(self) -> None:
        await self._transport.aclose()
