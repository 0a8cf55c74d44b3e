"""Identity capture: validates the registration form before a session starts."""

from __future__ import annotations

from webhook_chat.application.exceptions import IdentityValidationError
from webhook_chat.domain.models import Identity
from webhook_chat.domain.national_id import NATIONAL_ID_LENGTH, is_valid_cpf, strip_non_digits

MIN_NAME_LENGTH = 2


class IdentityValidator:
    """Pure validation of the two identity fields plus the consent flag.

    Parameters
    ----------
    verify_checksum:
        Also require valid CPF check digits. Off by default; the length rule
        alone is what the registration form enforces.
    """

    def __init__(self, verify_checksum: bool = False) -> None:
        self.verify_checksum = verify_checksum

    def validate(self, raw_name: str, raw_national_id: str, consent_given: bool) -> Identity:
        """Return a normalised ``Identity`` or raise ``IdentityValidationError``.

        All problems are collected so a form can show them together.
        """
        problems: dict[str, str] = {}

        if not consent_given:
            problems["consent"] = "consent to data processing is required"

        full_name = (raw_name or "").strip()
        if len(full_name) < MIN_NAME_LENGTH:
            problems["full_name"] = f"must have at least {MIN_NAME_LENGTH} characters"

        digits = strip_non_digits(raw_national_id or "")
        if len(digits) != NATIONAL_ID_LENGTH:
            problems["national_id"] = f"must contain exactly {NATIONAL_ID_LENGTH} digits"
        elif self.verify_checksum and not is_valid_cpf(digits):
            problems["national_id"] = "check digits do not match"

        if problems:
            raise IdentityValidationError(problems)

        return Identity(full_name=full_name, national_id=digits)
