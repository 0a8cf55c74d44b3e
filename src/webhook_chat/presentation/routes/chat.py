"""Chat routes — transcript, sending and diagnostic notifications."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from loguru import logger

from webhook_chat.application.conversation import Conversation
from webhook_chat.application.exceptions import NoActiveSessionError
from webhook_chat.domain.models import DispatchState
from webhook_chat.presentation.dependencies import get_conversation
from webhook_chat.presentation.schemas import (
    SendMessageRequest,
    ToastResponse,
    TranscriptResponse,
    TurnResponse,
)

router = APIRouter(tags=["chat"])


def _transcript_response(conversation: Conversation) -> TranscriptResponse:
    return TranscriptResponse(
        dispatch_state=conversation.dispatch_state,
        messages=[TurnResponse.from_turn(t) for t in conversation.transcript()],
    )


@router.get("/health")
async def health():
    """Simple liveness / readiness check."""
    return {"status": "ok"}


@router.get("/messages", response_model=TranscriptResponse)
async def get_messages(conversation: Conversation = Depends(get_conversation)):
    """Transcript snapshot, oldest first."""
    return _transcript_response(conversation)


@router.post("/messages", response_model=TranscriptResponse)
async def send_message(
    request: SendMessageRequest,
    conversation: Conversation = Depends(get_conversation),
):
    """Send a message and wait for the assistant turn it produces.

    Failures of the remote endpoint still answer 200: they appear as an
    assistant turn plus a toast on ``GET /notifications``.
    """
    if conversation.dispatch_state is DispatchState.PENDING:
        raise HTTPException(status_code=409, detail="A message is already being sent")

    logger.info("POST /messages | msg={}", request.message[:60])

    try:
        await conversation.send(request.message)
    except NoActiveSessionError as exc:
        raise HTTPException(status_code=401, detail=str(exc))

    return _transcript_response(conversation)


@router.get("/notifications", response_model=list[ToastResponse])
async def drain_notifications(conversation: Conversation = Depends(get_conversation)):
    """Return and clear the pending toasts."""
    return [ToastResponse.from_toast(t) for t in conversation.drain_notifications()]
