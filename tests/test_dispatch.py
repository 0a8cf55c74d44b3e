"""Tests for DispatchEngine — the send / receive lifecycle."""

from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from tests.conftest import WEBHOOK_URL, RecordingHandler, make_settings
from webhook_chat.application.conversation import Conversation
from webhook_chat.application.dispatch import DispatchEngine
from webhook_chat.application.exceptions import NoActiveSessionError
from webhook_chat.application.notifications import NotificationQueue
from webhook_chat.application.session_gate import SessionGate
from webhook_chat.config import get_settings
from webhook_chat.domain.messages import EN
from webhook_chat.domain.models import DispatchState, ErrorKind, Identity, Sender, SessionState
from webhook_chat.infrastructure.webhook_client import WebhookClient


def _contents(conversation: Conversation) -> list[tuple[str, str]]:
    return [(t.sender.value, t.content) for t in conversation.transcript()]


class SlowHandler:
    """Async handler that holds every request until ``release`` is set."""

    def __init__(self, status_code: int = 200, text: str = "late reply"):
        self.release = asyncio.Event()
        self.status_code = status_code
        self.text = text
        self.calls = 0

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls += 1
        await self.release.wait()
        return httpx.Response(self.status_code, text=self.text)


# ---------------------------------------------------------------------------
# Identity capture through the conversation
# ---------------------------------------------------------------------------


class TestSessionStart:
    def test_valid_identity_activates_with_greeting(self, build_conversation, reply):
        conversation = build_conversation(reply)
        conversation.start("Maria Silva", "12345678901", True)

        assert conversation.session_state is SessionState.ACTIVE
        turns = conversation.transcript()
        assert len(turns) == 1
        assert "Maria" in turns[0].content
        assert turns[0].sender is Sender.ASSISTANT

    def test_invalid_identity_keeps_unauthenticated(self, build_conversation, reply):
        conversation = build_conversation(reply)
        with pytest.raises(ValueError):
            conversation.start("Maria Silva", "1234", True)
        assert conversation.session_state is SessionState.UNAUTHENTICATED
        assert conversation.transcript() == ()

    async def test_send_without_session_raises(self, build_conversation, reply):
        conversation = build_conversation(reply)
        with pytest.raises(NoActiveSessionError):
            await conversation.send("Hello")
        assert reply.requests == []


# ---------------------------------------------------------------------------
# Successful dispatch
# ---------------------------------------------------------------------------


class TestSuccess:
    async def test_reply_appended_after_user_turn(self, build_conversation, reply):
        conversation = build_conversation(reply)
        conversation.start("Maria Silva", "12345678901", True)

        assert await conversation.send("Hello") is True

        assert _contents(conversation)[1:] == [("user", "Hello"), ("assistant", "Hi there")]
        assert conversation.dispatch_state is DispatchState.IDLE
        assert conversation.drain_notifications() == []

    async def test_payload_carries_identity(self, build_conversation, reply):
        conversation = build_conversation(reply)
        conversation.start("Maria Silva", "123.456.789-01", True)
        await conversation.send("Hello")

        body = json.loads(reply.requests[0].content)
        assert body["message"] == "Hello"
        assert body["fullName"] == "Maria Silva"
        assert body["nationalId"] == "12345678901"
        assert body["timestamp"].endswith("Z")

    async def test_empty_body_uses_fallback(self, build_conversation):
        conversation = build_conversation(RecordingHandler(200, ""))
        conversation.start("Maria Silva", "12345678901", True)
        await conversation.send("Hello")

        assert _contents(conversation)[-1] == ("assistant", EN.empty_reply)

    async def test_blank_text_is_ignored(self, build_conversation, reply):
        conversation = build_conversation(reply)
        conversation.start("Maria Silva", "12345678901", True)

        assert await conversation.send("   ") is False
        assert len(conversation.transcript()) == 1
        assert reply.requests == []

    async def test_user_turn_precedes_reply_for_every_send(self, build_conversation, reply):
        conversation = build_conversation(reply)
        conversation.start("Maria Silva", "12345678901", True)
        for text in ("one", "two", "three"):
            await conversation.send(text)

        turns = conversation.transcript()[1:]
        assert [t.sender for t in turns] == [Sender.USER, Sender.ASSISTANT] * 3
        assert [t.content for t in turns[::2]] == ["one", "two", "three"]
        ids = [t.id for t in conversation.transcript()]
        assert ids == sorted(ids)
        assert len(set(ids)) == len(ids)


# ---------------------------------------------------------------------------
# Failed dispatch
# ---------------------------------------------------------------------------


class TestFailures:
    async def test_not_found(self, build_conversation):
        conversation = build_conversation(RecordingHandler(404, "unknown hook"))
        conversation.start("Maria Silva", "12345678901", True)
        await conversation.send("Hello")

        assert _contents(conversation)[1:] == [
            ("user", "Hello"),
            ("assistant", EN.errors[ErrorKind.NOT_FOUND]),
        ]
        toasts = conversation.drain_notifications()
        assert len(toasts) == 1
        assert toasts[0].description == "HTTP 404: unknown hook"
        assert toasts[0].variant == "destructive"
        assert conversation.dispatch_state is DispatchState.IDLE

    async def test_method_not_allowed(self, build_conversation):
        conversation = build_conversation(RecordingHandler(405))
        conversation.start("Maria Silva", "12345678901", True)
        await conversation.send("Hello")

        assert _contents(conversation)[-1] == ("assistant", EN.errors[ErrorKind.METHOD_NOT_ALLOWED])

    async def test_server_error(self, build_conversation):
        conversation = build_conversation(RecordingHandler(503, "maintenance"))
        conversation.start("Maria Silva", "12345678901", True)
        await conversation.send("Hello")

        assert _contents(conversation)[-1] == ("assistant", EN.errors[ErrorKind.HTTP_ERROR])
        assert conversation.drain_notifications()[0].description == "HTTP 503: maintenance"

    async def test_missing_endpoint_makes_no_request(self, build_conversation, reply):
        conversation = build_conversation(reply, webhook_url=None)
        conversation.start("Maria Silva", "12345678901", True)
        await conversation.send("Hi")

        assert reply.requests == []
        assert _contents(conversation)[1:] == [
            ("user", "Hi"),
            ("assistant", EN.errors[ErrorKind.CONFIGURATION_MISSING]),
        ]
        assert len(conversation.drain_notifications()) == 1
        assert conversation.dispatch_state is DispatchState.IDLE

    async def test_transport_error(self, build_conversation):
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        conversation = build_conversation(refuse)
        conversation.start("Maria Silva", "12345678901", True)
        await conversation.send("Hello")

        assert _contents(conversation)[-1] == ("assistant", EN.errors[ErrorKind.TRANSPORT_ERROR])
        assert "ConnectError" in conversation.drain_notifications()[0].description

    async def test_cross_origin_rejected(self, build_conversation, reply):
        conversation = build_conversation(reply, expected_origin="https://chat.example.test")
        conversation.start("Maria Silva", "12345678901", True)
        await conversation.send("Hello")

        assert _contents(conversation)[-1] == (
            "assistant",
            EN.errors[ErrorKind.CROSS_ORIGIN_REJECTED],
        )

    async def test_unexpected_exception_is_recovered(self, build_conversation):
        def explode(request: httpx.Request) -> httpx.Response:
            raise RuntimeError("handler bug")

        conversation = build_conversation(explode)
        conversation.start("Maria Silva", "12345678901", True)
        await conversation.send("Hello")

        assert _contents(conversation)[-1] == ("assistant", EN.errors[ErrorKind.UNKNOWN])
        assert conversation.drain_notifications()[0].description == "handler bug"
        assert conversation.dispatch_state is DispatchState.IDLE

    async def test_retry_after_failure(self, build_conversation):
        handler = RecordingHandler(500, "boom")
        conversation = build_conversation(handler)
        conversation.start("Maria Silva", "12345678901", True)
        await conversation.send("Hello")

        handler.status_code, handler.text = 200, "Back online"
        assert await conversation.send("Hello again") is True
        assert _contents(conversation)[-1] == ("assistant", "Back online")


class TestEndpointLookup:
    async def test_endpoint_read_on_every_dispatch(self):
        handler = RecordingHandler(200, "Hi there")
        current = {"settings": make_settings(webhook_url=None)}
        gate = SessionGate(EN)
        engine = DispatchEngine(
            gate,
            WebhookClient(transport=httpx.MockTransport(handler)),
            NotificationQueue(),
            settings_provider=lambda: current["settings"],
        )
        gate.admit(Identity(full_name="Maria Silva", national_id="12345678901"))

        await engine.send("first")
        current["settings"] = make_settings()
        await engine.send("second")

        contents = [t.content for t in gate.require_session().log.snapshot()[1:]]
        assert contents == [
            "first",
            EN.errors[ErrorKind.CONFIGURATION_MISSING],
            "second",
            "Hi there",
        ]
        assert len(handler.requests) == 1


# ---------------------------------------------------------------------------
# Single flight and cancellation
# ---------------------------------------------------------------------------


class TestSingleFlight:
    async def test_send_while_pending_is_a_no_op(self, build_conversation):
        handler = SlowHandler(text="Hi there")
        conversation = build_conversation(handler)
        conversation.start("Maria Silva", "12345678901", True)

        task = asyncio.create_task(conversation.send("Hello"))
        await asyncio.sleep(0)
        assert conversation.dispatch_state is DispatchState.PENDING
        assert _contents(conversation)[-1] == ("user", "Hello")

        assert await conversation.send("Hello again") is False
        assert [c for s, c in _contents(conversation) if s == "user"] == ["Hello"]

        handler.release.set()
        assert await task is True

        assert _contents(conversation)[1:] == [("user", "Hello"), ("assistant", "Hi there")]
        assert conversation.dispatch_state is DispatchState.IDLE
        assert handler.calls == 1


class TestCancellation:
    async def test_release_while_pending_drops_reply(self, build_conversation):
        handler = SlowHandler()
        conversation = build_conversation(handler)
        conversation.start("Maria Silva", "12345678901", True)
        old_session = conversation.gate.require_session()

        task = asyncio.create_task(conversation.send("Hello"))
        await asyncio.sleep(0)
        conversation.logout()

        handler.release.set()
        await task

        assert conversation.session_state is SessionState.UNAUTHENTICATED
        assert conversation.transcript() == ()
        assert old_session.log.snapshot() == ()
        assert conversation.drain_notifications() == []

    async def test_late_failure_does_not_reach_new_session(self, build_conversation):
        handler = SlowHandler(status_code=500, text="boom")
        conversation = build_conversation(handler)
        conversation.start("Maria Silva", "12345678901", True)

        task = asyncio.create_task(conversation.send("Hello"))
        await asyncio.sleep(0)
        conversation.logout()
        conversation.start("João Souza", "52998224725", True)

        handler.release.set()
        await task

        turns = conversation.transcript()
        assert len(turns) == 1
        assert "João" in turns[0].content
        assert conversation.dispatch_state is DispatchState.IDLE
        assert conversation.drain_notifications() == []


class TestEndpointFromEnvironment:
    @pytest.fixture(autouse=True)
    def _fresh_settings(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.delenv("VITE_WEBHOOK_URL", raising=False)
        monkeypatch.setenv("WEBHOOK_URL", "")
        monkeypatch.setenv("LOCALE", "en")
        get_settings.cache_clear()
        yield
        get_settings.cache_clear()

    async def test_default_wiring_reads_endpoint_per_dispatch(self, monkeypatch):
        handler = RecordingHandler(200, "Hi there")
        conversation = Conversation.from_settings(
            client=WebhookClient(transport=httpx.MockTransport(handler))
        )
        conversation.start("Maria Silva", "12345678901", True)

        await conversation.send("first")
        monkeypatch.setenv("WEBHOOK_URL", "https://hooks.example.test/late")
        get_settings.cache_clear()
        await conversation.send("second")

        assert _contents(conversation)[1:] == [
            ("user", "first"),
            ("assistant", EN.errors[ErrorKind.CONFIGURATION_MISSING]),
            ("user", "second"),
            ("assistant", "Hi there"),
        ]
        assert [str(r.url) for r in handler.requests] == ["https://hooks.example.test/late"]

    async def test_explicit_settings_stay_fixed(self, monkeypatch):
        handler = RecordingHandler(200, "Hi there")
        conversation = Conversation.from_settings(
            make_settings(),
            client=WebhookClient(transport=httpx.MockTransport(handler)),
        )
        conversation.start("Maria Silva", "12345678901", True)

        monkeypatch.setenv("WEBHOOK_URL", "https://hooks.example.test/other")
        get_settings.cache_clear()
        await conversation.send("Hello")

        assert [str(r.url) for r in handler.requests] == [WEBHOOK_URL]
