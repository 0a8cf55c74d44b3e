"""HTTP client for the remote assistant endpoint."""

from __future__ import annotations

import httpx
from loguru import logger

from webhook_chat.application.exceptions import CrossOriginRejectedError, RemoteHTTPError
from webhook_chat.domain.models import OutboundMessage

JSON_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json",
}


class WebhookClient:
    """POSTs chat messages as JSON and returns the raw reply body.

    The reply is treated as opaque text: the endpoint may answer with plain
    text or JSON and neither is parsed here.

    Parameters
    ----------
    timeout:
        Seconds before the request fails with ``httpx.TimeoutException``.
    expected_origin:
        When set, sent as the ``Origin`` header; the reply must carry a
        matching ``Access-Control-Allow-Origin`` or ``*``.
    transport:
        Optional httpx transport, e.g. ``httpx.MockTransport`` in tests.
    """

    def __init__(
        self,
        timeout: float = 30.0,
        expected_origin: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.timeout = timeout
        self.expected_origin = expected_origin
        self._transport = transport

    async def post_message(self, url: str, payload: OutboundMessage) -> str:
        headers = dict(JSON_HEADERS)
        if self.expected_origin:
            headers["Origin"] = self.expected_origin

        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            response = await client.post(url, content=payload.to_json(), headers=headers)

        body = response.text
        logger.debug("Webhook replied | status={} bytes={}", response.status_code, len(body))

        # Checked first: a browser would hide the status of a refused response too
        if self.expected_origin and not self._origin_allowed(response):
            raise CrossOriginRejectedError(
                f"origin {self.expected_origin!r} not allowed by {url} "
                f"(Access-Control-Allow-Origin="
                f"{response.headers.get('access-control-allow-origin')!r})"
            )

        if not response.is_success:
            raise RemoteHTTPError(response.status_code, body)

        return body

    def _origin_allowed(self, response: httpx.Response) -> bool:
        allowed = response.headers.get("access-control-allow-origin")
        return allowed is not None and allowed.strip() in ("*", self.expected_origin)
