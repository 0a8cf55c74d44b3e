"""Maps dispatch failures onto the stable ``ErrorKind`` taxonomy."""

from __future__ import annotations

import httpx

from webhook_chat.application.exceptions import (
    ConfigurationMissingError,
    CrossOriginRejectedError,
    RemoteHTTPError,
)
from webhook_chat.domain.messages import PT_BR, MessageCatalog
from webhook_chat.domain.models import ClassifiedError, ErrorKind

_STATUS_KINDS: dict[int, ErrorKind] = {
    404: ErrorKind.NOT_FOUND,
    405: ErrorKind.METHOD_NOT_ALLOWED,
}

# Remote bodies can be whole HTML error pages
MAX_DETAIL_CHARS = 200


class ErrorClassifier:
    """Classify by exception type and HTTP status, never by message text."""

    def __init__(self, catalog: MessageCatalog = PT_BR) -> None:
        self.catalog = catalog

    def classify(self, failure: BaseException) -> ClassifiedError:
        kind, status = self._kind_of(failure)
        return ClassifiedError(
            kind=kind,
            user_message=self.catalog.for_error(kind),
            detail=self._detail(failure),
            status=status,
        )

    @staticmethod
    def _kind_of(failure: BaseException) -> tuple[ErrorKind, int | None]:
        if isinstance(failure, ConfigurationMissingError):
            return ErrorKind.CONFIGURATION_MISSING, None
        if isinstance(failure, CrossOriginRejectedError):
            return ErrorKind.CROSS_ORIGIN_REJECTED, None
        if isinstance(failure, RemoteHTTPError):
            return _STATUS_KINDS.get(failure.status, ErrorKind.HTTP_ERROR), failure.status
        if isinstance(failure, httpx.HTTPStatusError):
            status = failure.response.status_code
            return _STATUS_KINDS.get(status, ErrorKind.HTTP_ERROR), status
        if isinstance(failure, httpx.TransportError):
            return ErrorKind.TRANSPORT_ERROR, None
        return ErrorKind.UNKNOWN, None

    @staticmethod
    def _detail(failure: BaseException) -> str:
        text = str(failure)
        if not text:
            return type(failure).__name__
        if isinstance(failure, httpx.TransportError):
            text = f"{type(failure).__name__}: {text}"
        if len(text) > MAX_DETAIL_CHARS:
            return text[: MAX_DETAIL_CHARS - 3] + "..."
        return text
