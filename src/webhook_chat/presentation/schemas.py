"""HTTP request/response schemas (Pydantic models) for the REST API."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from webhook_chat.domain.models import ChatTurn, DispatchState, Identity, SessionState, Toast

# ---------------------------------------------------------------------------
# Transcript
# ---------------------------------------------------------------------------


class TurnResponse(BaseModel):
    id: str
    content: str
    sender: str
    created_at: datetime

    @classmethod
    def from_turn(cls, turn: ChatTurn) -> TurnResponse:
        return cls(
            id=turn.id,
            content=turn.content,
            sender=turn.sender.value,
            created_at=turn.created_at,
        )


class TranscriptResponse(BaseModel):
    """Transcript snapshot plus the dispatch state of the session."""

    dispatch_state: DispatchState
    messages: list[TurnResponse] = Field(default_factory=list)


class SendMessageRequest(BaseModel):
    """Request body for POST /messages."""

    message: str = Field(description="The new user message")

    @field_validator("message")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("message must not be blank")
        return value


# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------


class StartSessionRequest(BaseModel):
    """Request body for POST /session (the registration form)."""

    full_name: str = Field(description="Full name, at least 2 characters")
    national_id: str = Field(description="CPF, with or without punctuation")
    consent: bool = Field(default=False, description="Consent to data processing")


class IdentityResponse(BaseModel):
    full_name: str
    first_name: str
    national_id: str = Field(description="Display form, 000.000.000-00")

    @classmethod
    def from_identity(cls, identity: Identity) -> IdentityResponse:
        return cls(
            full_name=identity.full_name,
            first_name=identity.first_name,
            national_id=identity.display_national_id,
        )


class SessionResponse(BaseModel):
    """Response from the /session endpoints."""

    state: SessionState
    identity: IdentityResponse | None = None
    messages: list[TurnResponse] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Notifications
# ---------------------------------------------------------------------------


class ToastResponse(BaseModel):
    title: str
    description: str
    variant: str

    @classmethod
    def from_toast(cls, toast: Toast) -> ToastResponse:
        return cls(title=toast.title, description=toast.description, variant=toast.variant)
