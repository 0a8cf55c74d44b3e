"""Session routes — identity capture and logout."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from webhook_chat.application.conversation import Conversation
from webhook_chat.application.exceptions import IdentityValidationError, SessionAlreadyActiveError
from webhook_chat.presentation.dependencies import get_conversation
from webhook_chat.presentation.schemas import (
    IdentityResponse,
    SessionResponse,
    StartSessionRequest,
    TurnResponse,
)

router = APIRouter(tags=["session"])


def _session_response(conversation: Conversation) -> SessionResponse:
    identity = conversation.identity
    return SessionResponse(
        state=conversation.session_state,
        identity=IdentityResponse.from_identity(identity) if identity else None,
        messages=[TurnResponse.from_turn(t) for t in conversation.transcript()],
    )


@router.post("/session", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
async def start_session(
    request: StartSessionRequest,
    conversation: Conversation = Depends(get_conversation),
):
    """Validate the registration form and start the chat session."""
    try:
        conversation.start(request.full_name, request.national_id, request.consent)
    except IdentityValidationError as exc:
        raise HTTPException(
            status_code=422,
            detail={"message": "Identity rejected", "problems": exc.problems},
        )
    except SessionAlreadyActiveError as exc:
        raise HTTPException(status_code=409, detail=str(exc))

    return _session_response(conversation)


@router.get("/session", response_model=SessionResponse)
async def get_session(conversation: Conversation = Depends(get_conversation)):
    """Current session state and identity."""
    return _session_response(conversation)


@router.delete("/session", response_model=SessionResponse)
async def end_session(conversation: Conversation = Depends(get_conversation)):
    """Log out. The transcript is discarded and any reply still in flight is dropped."""
    conversation.logout()
    return _session_response(conversation)
