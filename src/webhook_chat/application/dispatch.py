"""Dispatch engine — the send / receive lifecycle of one outbound message.

Every failure is recovered here: it becomes one assistant turn with a fixed
sentence plus one diagnostic toast, and the session returns to ``Idle``.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from datetime import UTC, datetime

from loguru import logger

from webhook_chat.application.error_classifier import ErrorClassifier
from webhook_chat.application.exceptions import ConfigurationMissingError
from webhook_chat.application.notifications import NotificationQueue
from webhook_chat.application.session_gate import ChatSession, SessionGate
from webhook_chat.config import Settings, get_settings
from webhook_chat.domain.models import (
    ClassifiedError,
    DispatchState,
    ErrorKind,
    OutboundMessage,
    Sender,
    Toast,
)
from webhook_chat.domain.protocols import IWebhookClient


class DispatchEngine:
    """Funnels user sends to the remote endpoint, one at a time per session.

    Parameters
    ----------
    gate:
        Session gate supplying the active session and its identity.
    client:
        Webhook client used for the outbound POST.
    notifications:
        Channel receiving one toast per failed dispatch.
    classifier:
        Failure classifier; defaults to one using the gate's catalog.
    settings_provider:
        Called on every dispatch to read the endpoint URL.
    """

    def __init__(
        self,
        gate: SessionGate,
        client: IWebhookClient,
        notifications: NotificationQueue,
        classifier: ErrorClassifier | None = None,
        settings_provider: Callable[[], Settings] = get_settings,
    ) -> None:
        self.gate = gate
        self.client = client
        self.notifications = notifications
        self.classifier = classifier or ErrorClassifier(gate.catalog)
        self.settings_provider = settings_provider

    @property
    def state(self) -> DispatchState:
        session = self.gate.session
        return session.dispatch_state if session else DispatchState.IDLE

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def send(self, text: str) -> bool:
        """Echo *text* into the transcript, deliver it and record the outcome.

        Returns ``False`` without touching the transcript when *text* is
        blank or another dispatch is still pending; ``True`` otherwise.

        Raises:
            NoActiveSessionError: If no identity has been admitted.
        """
        session = self.gate.require_session()

        if not text.strip():
            return False
        if session.dispatch_state is DispatchState.PENDING:
            logger.debug("Send ignored while a dispatch is pending | session={}", session.id)
            return False

        session.log.record(text, Sender.USER)
        session.dispatch_state = DispatchState.PENDING

        try:
            reply = await self._deliver(session, text)
        except Exception as exc:
            self._settle_failure(session, self.classifier.classify(exc), exc)
        else:
            self._settle_success(session, reply)
        finally:
            session.dispatch_state = DispatchState.IDLE

        return True

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    async def _deliver(self, session: ChatSession, text: str) -> str:
        url = self.settings_provider().webhook_url
        if not url:
            raise ConfigurationMissingError(
                "WEBHOOK_URL is not configured. Set it in the environment or .env file."
            )

        payload = OutboundMessage.build(text, session.identity, datetime.now(UTC))
        logger.info("Dispatch started | session={} url={} chars={}", session.id, url, len(text))

        t0 = time.perf_counter()
        reply = await self.client.post_message(url, payload)
        latency = int((time.perf_counter() - t0) * 1000)

        logger.info(
            "Dispatch settled | session={} latency={}ms bytes={}", session.id, latency, len(reply)
        )
        return reply

    def _settle_success(self, session: ChatSession, reply: str) -> None:
        if not self.gate.is_current(session):
            logger.info("Discarding reply for released session | session={}", session.id)
            return

        content = reply if reply.strip() else self.gate.catalog.empty_reply
        session.log.record(content, Sender.ASSISTANT)
        session.dispatch_state = DispatchState.SETTLED

    def _settle_failure(self, session: ChatSession, error: ClassifiedError, exc: Exception) -> None:
        if error.kind is ErrorKind.UNKNOWN:
            logger.opt(exception=exc).warning(
                "Dispatch failed | session={} kind={}", session.id, error.kind.value
            )
        else:
            logger.warning(
                "Dispatch failed | session={} kind={} status={} detail={}",
                session.id,
                error.kind.value,
                error.status,
                error.detail,
            )

        if not self.gate.is_current(session):
            logger.info("Discarding failure for released session | session={}", session.id)
            return

        session.log.record(error.user_message, Sender.ASSISTANT)
        session.dispatch_state = DispatchState.SETTLED
        self.notifications.publish(
            Toast(title=self.gate.catalog.toast_title, description=error.detail)
        )
