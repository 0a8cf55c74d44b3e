"""Shared fixtures for the chat client tests."""

from __future__ import annotations

from collections.abc import Callable

import httpx
import pytest

from webhook_chat.application.conversation import Conversation
from webhook_chat.config import Settings
from webhook_chat.infrastructure.webhook_client import WebhookClient

WEBHOOK_URL = "https://hooks.example.test/chat"


def make_settings(**overrides) -> Settings:
    """Settings for tests. ``_env_file=None`` keeps a developer's .env out of the run."""
    values = {"webhook_url": WEBHOOK_URL, "locale": "en"}
    values.update(overrides)
    return Settings(_env_file=None, **values)


class RecordingHandler:
    """``httpx.MockTransport`` handler that records requests and returns a canned reply."""

    def __init__(self, status_code: int = 200, text: str = "", headers: dict | None = None):
        self.status_code = status_code
        self.text = text
        self.headers = headers or {}
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, text=self.text, headers=self.headers)


@pytest.fixture()
def reply() -> RecordingHandler:
    return RecordingHandler(200, "Hi there")


@pytest.fixture()
def build_conversation() -> Callable[..., Conversation]:
    """Factory: a Conversation whose webhook is served by the given handler."""

    def _build(handler, **settings_overrides) -> Conversation:
        settings = make_settings(**settings_overrides)
        client = WebhookClient(
            timeout=settings.request_timeout_seconds,
            expected_origin=settings.expected_origin,
            transport=httpx.MockTransport(handler),
        )
        return Conversation.from_settings(settings, client=client)

    return _build
