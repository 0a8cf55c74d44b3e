"""Domain entities and value objects.

These are the core data structures of the chat session,
independent of any transport or presentation concerns.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from webhook_chat.domain.national_id import format_national_id


class Sender(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class SessionState(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    ACTIVE = "active"


class DispatchState(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    SETTLED = "settled"


class ErrorKind(str, Enum):
    """Stable taxonomy for dispatch-time failures."""

    CONFIGURATION_MISSING = "configuration_missing"
    METHOD_NOT_ALLOWED = "method_not_allowed"
    NOT_FOUND = "not_found"
    CROSS_ORIGIN_REJECTED = "cross_origin_rejected"
    HTTP_ERROR = "http_error"
    TRANSPORT_ERROR = "transport_error"
    UNKNOWN = "unknown"


# ---------------------------------------------------------------------------
# Identity
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Identity:
    """A validated user identity. ``national_id`` always holds 11 raw digits."""

    full_name: str
    national_id: str

    @property
    def first_name(self) -> str:
        return self.full_name.split()[0]

    @property
    def display_national_id(self) -> str:
        return format_national_id(self.national_id)

    @property
    def masked_national_id(self) -> str:
        """Identifier safe for log lines: only the check digits are kept."""
        return "*" * 9 + self.national_id[-2:]


# ---------------------------------------------------------------------------
# Transcript
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ChatTurn:
    id: str
    content: str
    sender: Sender
    created_at: datetime


# ---------------------------------------------------------------------------
# Failure classification
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ClassifiedError:
    """Outcome of classifying a failed dispatch.

    ``user_message`` goes into the transcript; ``detail`` carries the raw
    diagnostic for the toast and the logs.
    """

    kind: ErrorKind
    user_message: str
    detail: str
    status: int | None = None


@dataclass(frozen=True)
class Toast:
    title: str
    description: str
    variant: str = "destructive"


# ---------------------------------------------------------------------------
# Wire DTO (request body sent to the remote endpoint)
# ---------------------------------------------------------------------------


class OutboundMessage(BaseModel):
    """JSON body of the webhook POST. Serialised with camelCase keys."""

    message: str
    full_name: str = Field(serialization_alias="fullName")
    national_id: str = Field(serialization_alias="nationalId", pattern=r"^[0-9]{11}$")
    timestamp: str = Field(description="ISO-8601 UTC instant")

    @classmethod
    def build(cls, text: str, identity: Identity, now: datetime) -> OutboundMessage:
        return cls(
            message=text,
            full_name=identity.full_name,
            national_id=identity.national_id,
            timestamp=now.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
        )

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)
