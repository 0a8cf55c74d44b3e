"""FastAPI dependencies shared by the route modules."""

from __future__ import annotations

from fastapi import Request

from webhook_chat.application.conversation import Conversation


def get_conversation(request: Request) -> Conversation:
    """The process-wide conversation created at startup."""
    return request.app.state.conversation
