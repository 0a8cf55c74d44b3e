"""Application-level exceptions.

These are business-logic errors, not HTTP errors. The presentation layer
(FastAPI routes, the terminal client) translates them into responses.
"""

from __future__ import annotations


# ---------------------------------------------------------------------------
# Identity capture and session gating
# ---------------------------------------------------------------------------


class IdentityValidationError(ValueError):
    """Raised when the registration form is rejected.

    ``problems`` maps field name (``consent``, ``full_name``, ``national_id``)
    to a short reason.
    """

    def __init__(self, problems: dict[str, str]) -> None:
        self.problems = dict(problems)
        summary = "; ".join(f"{field}: {reason}" for field, reason in self.problems.items())
        super().__init__(f"identity rejected ({summary})")


class SessionAlreadyActiveError(RuntimeError):
    """Raised when admitting an identity while another session is bound."""


class NoActiveSessionError(RuntimeError):
    """Raised when a session-scoped operation runs with no active session."""


# ---------------------------------------------------------------------------
# Dispatch failures (always recovered inside the dispatch engine)
# ---------------------------------------------------------------------------


class ConfigurationMissingError(RuntimeError):
    """The remote endpoint URL is not configured."""


class RemoteHTTPError(RuntimeError):
    """The remote endpoint answered with a non-2xx status."""

    def __init__(self, status: int, body: str = "") -> None:
        self.status = status
        self.body = body
        super().__init__(f"HTTP {status}: {body or 'no response body'}")


class CrossOriginRejectedError(RuntimeError):
    """The remote endpoint does not allow requests from the configured origin."""
