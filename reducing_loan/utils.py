"""Utility functions for the loan calculator.

This module provides helpers for parsing user input into whole numbers and
for displaying amounts. Every input collector (the web form, the JSON API and
the command line) goes through ``parse_whole_number`` so they all reject the
same values with the same messages.
"""

from __future__ import annotations

import math
import re
from decimal import Decimal
from typing import Any, Optional

# Optional sign, digits, optional fractional digits. No exponents.
NUMBER_PATTERN = re.compile(r"[+-]?\d+(\.\d+)?")

FIELD_LABELS = {
    "principal": "Principal amount",
    "monthly_rate_percent": "Interest rate",
    "duration_months": "Duration",
}


class InvalidInput(ValueError):
    """Raised when a loan input is missing, unparsable or out of range.

    Attributes
    ----------
    field: str or None
        The offending input (``"principal"``, ``"monthly_rate_percent"`` or
        ``"duration_months"``), or ``None`` when the failure concerns the
        combination of inputs.
    kind: str
        One of ``"missing"``, ``"not_numeric"``, ``"not_integer"`` or
        ``"out_of_range"``. Collectors that want distinct messages for a
        blank field and a bad number can branch on it.
    """

    def __init__(self, message: str, *, field: Optional[str] = None, kind: str = "out_of_range") -> None:
        super().__init__(message)
        self.message = message
        self.field = field
        self.kind = kind


def _label(field: str) -> str:
    return FIELD_LABELS.get(field, field)


def parse_whole_number(value: Any, field: str) -> int:
    """Convert a raw input value into an ``int``.

    Parameters
    ----------
    value:
        An ``int``, an integral ``float``/``Decimal``, or a string such as
        ``"120000"``, ``" 120,000 "`` or ``"12.0"``.
    field: str
        Name of the input, used in error messages.

    Raises
    ------
    InvalidInput
        If the value is missing, not a number, or has a fractional part.
        The sign is not checked here.
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        raise InvalidInput(f"{_label(field)} is required", field=field, kind="missing")
    # bool is an int subclass but never a meaningful amount
    if isinstance(value, bool):
        raise InvalidInput(f"{_label(field)} must be a number", field=field, kind="not_numeric")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        cleaned = value.strip().replace(",", "").replace("_", "")
        if not NUMBER_PATTERN.fullmatch(cleaned):
            raise InvalidInput(
                f"{_label(field)} must be a number, got {value!r}", field=field, kind="not_numeric"
            )
        number = Decimal(cleaned)
    elif isinstance(value, float):
        if not math.isfinite(value):
            raise InvalidInput(f"{_label(field)} must be a number", field=field, kind="not_numeric")
        number = Decimal(value)
    elif isinstance(value, Decimal):
        number = value
    else:
        raise InvalidInput(
            f"{_label(field)} must be a number, got {type(value).__name__}", field=field, kind="not_numeric"
        )

    if not number.is_finite():
        raise InvalidInput(f"{_label(field)} must be a number", field=field, kind="not_numeric")
    if number != number.to_integral_value():
        raise InvalidInput(
            f"{_label(field)} must be a whole number, got {value}", field=field, kind="not_integer"
        )
    return int(number)


def format_amount(value: int, prefix: str = "", suffix: str = "") -> str:
    """Format an amount with thousands separators, e.g. ``"₦120,000"``."""
    return f"{prefix}{value:,}{suffix}"
