"""Session gate — binds one identity at a time and owns its transcript."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field

from loguru import logger

from webhook_chat.application.exceptions import NoActiveSessionError, SessionAlreadyActiveError
from webhook_chat.domain.message_log import MessageLog
from webhook_chat.domain.messages import PT_BR, MessageCatalog
from webhook_chat.domain.models import DispatchState, Identity, Sender, SessionState


@dataclass(eq=False)
class ChatSession:
    """One admitted identity together with its transcript and dispatch state.

    Dispatches keep a reference to the session they started in; the gate
    compares that reference against its current session to drop late replies.
    """

    identity: Identity
    log: MessageLog = field(default_factory=MessageLog)
    dispatch_state: DispatchState = DispatchState.IDLE
    id: str = field(default_factory=lambda: uuid.uuid4().hex)


class SessionGate:
    """Holds the ``Unauthenticated`` / ``Active`` state.

    Parameters
    ----------
    catalog:
        Message catalog used for the greeting seeded on admission.
    """

    def __init__(self, catalog: MessageCatalog = PT_BR) -> None:
        self.catalog = catalog
        self._session: ChatSession | None = None

    @property
    def state(self) -> SessionState:
        if self._session is None:
            return SessionState.UNAUTHENTICATED
        return SessionState.ACTIVE

    @property
    def session(self) -> ChatSession | None:
        return self._session

    def require_session(self) -> ChatSession:
        if self._session is None:
            raise NoActiveSessionError("no active session; admit an identity first")
        return self._session

    def is_current(self, session: ChatSession) -> bool:
        return self._session is session

    def admit(self, identity: Identity) -> SessionState:
        """Bind *identity* and seed the transcript with a greeting.

        Raises:
            SessionAlreadyActiveError: If a session is already bound.
        """
        if self._session is not None:
            raise SessionAlreadyActiveError("release the current session before admitting another")

        session = ChatSession(identity=identity)
        session.log.record(self.catalog.greet(identity.first_name), Sender.ASSISTANT)
        self._session = session

        logger.info(
            "Session admitted | session={} name={} national_id={}",
            session.id,
            identity.first_name,
            identity.masked_national_id,
        )
        return SessionState.ACTIVE

    def release(self) -> SessionState:
        """End the session, discarding its transcript.

        A dispatch still in flight keeps its reference to the old session and
        finds it is no longer current when the reply arrives.
        """
        session = self._session
        if session is None:
            return SessionState.UNAUTHENTICATED

        self._session = None
        session.log.clear()
        logger.info(
            "Session released | session={} pending_dispatch={}",
            session.id,
            session.dispatch_state is DispatchState.PENDING,
        )
        return SessionState.UNAUTHENTICATED
