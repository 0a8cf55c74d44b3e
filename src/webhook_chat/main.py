"""FastAPI application exposing the chat client to a UI.

This module is a thin **presentation layer**. All session and dispatch
logic lives in the ``application`` package.
"""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from webhook_chat import __version__
from webhook_chat.application.conversation import Conversation
from webhook_chat.config import Settings, get_settings
from webhook_chat.logging_config import setup_logging
from webhook_chat.presentation.routes import chat, session


def create_app(
    settings: Settings | None = None,
    conversation: Conversation | None = None,
) -> FastAPI:
    """Build the application. Tests pass their own settings or conversation."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        resolved = settings or get_settings()
        app.state.settings = resolved
        app.state.conversation = conversation or Conversation.from_settings(settings)
        if not resolved.webhook_url:
            logger.warning("WEBHOOK_URL is not set; every message will fail until it is")
        logger.info("Application startup complete | locale={}", resolved.locale)
        yield
        app.state.conversation.logout()
        logger.info("Application shutdown complete")

    app = FastAPI(
        title="Webhook Chat",
        description="Single-session chat client relaying messages to a remote webhook.",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(chat.router)
    app.include_router(session.router)
    return app


def _configure_logging() -> None:
    settings = get_settings()
    setup_logging(level=settings.log_level, json=settings.log_json)


# Configure loguru before anything else
_configure_logging()

app = create_app()
