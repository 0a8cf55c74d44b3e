"""Normalisation and display helpers for the 11-digit national identifier (CPF)."""

from __future__ import annotations

import re

NATIONAL_ID_LENGTH = 11

_NON_DIGITS = re.compile(r"[^0-9]")
_GROUPS = re.compile(r"^([0-9]{3})([0-9]{3})([0-9]{3})([0-9]{2})$")


def strip_non_digits(value: str) -> str:
    return _NON_DIGITS.sub("", value)


def format_national_id(value: str) -> str:
    """Apply the ``000.000.000-00`` mask.

    Behaves like an as-you-type input mask: partial input is returned as bare
    digits and input with more than 11 digits is returned untouched.
    """
    digits = strip_non_digits(value)
    if len(digits) > NATIONAL_ID_LENGTH:
        return value
    return _GROUPS.sub(r"\1.\2.\3-\4", digits)


def _check_digit(digits: str, first_weight: int) -> int:
    total = sum(int(d) * w for d, w in zip(digits, range(first_weight, 1, -1)))
    remainder = (total * 10) % 11
    return 0 if remainder == 10 else remainder


def is_valid_cpf(digits: str) -> bool:
    """Verify both CPF check digits. Expects exactly 11 digits."""
    if len(digits) != NATIONAL_ID_LENGTH or strip_non_digits(digits) != digits:
        return False
    # 000.000.000-00, 111.111.111-11, ... pass the arithmetic but are not issued
    if len(set(digits)) == 1:
        return False
    return _check_digit(digits[:9], 10) == int(digits[9]) and _check_digit(
        digits[:10], 11
    ) == int(digits[10])
