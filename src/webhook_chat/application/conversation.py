"""Conversation — the state container handed to a presentation layer.

Wires identity validation, the session gate, the dispatch engine and the
notification channel together. It has **no dependency on FastAPI** and is
shared by the HTTP API and the terminal client.
"""

from __future__ import annotations

from collections.abc import Callable

from webhook_chat.application.dispatch import DispatchEngine
from webhook_chat.application.identity_validator import IdentityValidator
from webhook_chat.application.notifications import NotificationQueue
from webhook_chat.application.session_gate import SessionGate
from webhook_chat.config import Settings, get_settings
from webhook_chat.domain.messages import get_catalog
from webhook_chat.domain.models import ChatTurn, DispatchState, Identity, SessionState, Toast
from webhook_chat.domain.protocols import IWebhookClient
from webhook_chat.infrastructure.webhook_client import WebhookClient


class Conversation:
    """One client's chat: identity capture, transcript and sends."""

    def __init__(
        self,
        validator: IdentityValidator,
        gate: SessionGate,
        engine: DispatchEngine,
        notifications: NotificationQueue,
    ) -> None:
        self.validator = validator
        self.gate = gate
        self.engine = engine
        self.notifications = notifications

    @classmethod
    def from_settings(
        cls,
        settings: Settings | None = None,
        client: IWebhookClient | None = None,
        settings_provider: Callable[[], Settings] | None = None,
    ) -> Conversation:
        """Build a conversation from settings.

        ``settings_provider`` is consulted on every dispatch for the endpoint
        URL. It defaults to ``get_settings`` when *settings* is omitted, and to
        the fixed *settings* object otherwise.
        """
        if settings_provider is None:
            settings_provider = get_settings if settings is None else (lambda: settings)
        settings = settings or settings_provider()
        catalog = get_catalog(settings.locale)
        gate = SessionGate(catalog)
        notifications = NotificationQueue()
        client = client or WebhookClient(
            timeout=settings.request_timeout_seconds,
            expected_origin=settings.expected_origin,
        )
        engine = DispatchEngine(gate, client, notifications, settings_provider=settings_provider)
        return cls(
            validator=IdentityValidator(verify_checksum=settings.verify_national_id_checksum),
            gate=gate,
            engine=engine,
            notifications=notifications,
        )

    # ------------------------------------------------------------------
    # Presentation boundary
    # ------------------------------------------------------------------

    @property
    def session_state(self) -> SessionState:
        return self.gate.state

    @property
    def dispatch_state(self) -> DispatchState:
        return self.engine.state

    @property
    def identity(self) -> Identity | None:
        session = self.gate.session
        return session.identity if session else None

    def start(self, full_name: str, national_id: str, consent: bool) -> Identity:
        """Validate the form and admit the identity.

        Raises:
            IdentityValidationError: If the form is rejected (state unchanged).
            SessionAlreadyActiveError: If a session is already active.
        """
        identity = self.validator.validate(full_name, national_id, consent)
        self.gate.admit(identity)
        return identity

    async def send(self, text: str) -> bool:
        return await self.engine.send(text)

    def logout(self) -> SessionState:
        return self.gate.release()

    def transcript(self) -> tuple[ChatTurn, ...]:
        session = self.gate.session
        return session.log.snapshot() if session else ()

    def drain_notifications(self) -> list[Toast]:
        return self.notifications.drain()
