"""Service interfaces (ports) the application layer depends on."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from webhook_chat.domain.models import OutboundMessage


@runtime_checkable
class IWebhookClient(Protocol):
    """Delivers one message to the remote endpoint and returns the reply text.

    Implementations raise ``RemoteHTTPError`` for non-2xx answers,
    ``CrossOriginRejectedError`` when the origin is refused, and let
    transport failures propagate.

    Implementations: WebhookClient (httpx).
    """

    async def post_message(self, url: str, payload: OutboundMessage) -> str: ...
