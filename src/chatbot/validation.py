"""Shared backend validation for storefront form submissions.

The frontend submits checkout steps, reviews and chat actions as dictionaries.
These validators ensure important fields are present and well-formed.

On validation failure, raise `FormValidationError` so the API can return HTTP 422
with structured `field_errors`.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, Optional

from src.integrations.contracts.newsletter import is_valid_email


@dataclass
class FormValidationError(Exception):
    """Exception raised for form validation failures.

    Attributes:
        field_errors: mapping of field name -> human-readable error message.
        message: optional top-level message.
    """

    field_errors: Dict[str, str]
    message: str = "Validation failed"

    def __str__(self) -> str:  # pragma: no cover
        return self.message


def _as_str(v: Any) -> str:
    return "" if v is None else str(v)


def _strip(v: Any) -> str:
    return _as_str(v).strip()


def add_error(errors: Dict[str, str], field: str, message: str) -> None:
    if field not in errors:
        errors[field] = message


def require_str(payload: Dict[str, Any], field: str, errors: Dict[str, str], *, label: Optional[str] = None, max_length: Optional[int] = None) -> str:
    value = _strip(payload.get(field))
    if not value:
        add_error(errors, field, f"{label or field} is required")
    elif max_length is not None and len(value) > max_length:
        add_error(errors, field, f"{label or field} must be at most {max_length} characters")
    return value


def parse_int(payload: Dict[str, Any], field: str, errors: Dict[str, str], *, min_value: Optional[int] = None, max_value: Optional[int] = None, required: bool = False) -> int:
    raw = payload.get(field)
    if raw is None or _strip(raw) == "":
        if required:
            add_error(errors, field, f"{field} is required")
        return 0
    if isinstance(raw, bool):
        add_error(errors, field, f"{field} must be a whole number")
        return 0
    try:
        val = int(str(raw))
    except ValueError:
        add_error(errors, field, f"{field} must be a whole number")
        return 0
    if min_value is not None and val < min_value:
        add_error(errors, field, f"{field} must be at least {min_value}")
    if max_value is not None and val > max_value:
        add_error(errors, field, f"{field} must be at most {max_value}")
    return val


def validate_email(value: str, errors: Dict[str, str], field: str = "email") -> str:
    value = _strip(value)
    if not value:
        add_error(errors, field, "Email is required")
        return value
    if not is_valid_email(value):
        add_error(errors, field, "Email is not valid")
    return value


def validate_phone(value: str, errors: Dict[str, str], field: str = "phone") -> str:
    """Accept 7-15 digits once spaces, dashes, brackets and a leading + are removed."""
    raw = _strip(value)
    if not raw:
        add_error(errors, field, "Phone number is required")
        return raw
    digits = re.sub(r"[\s\-\(\)]", "", raw)
    if digits.startswith("+"):
        digits = digits[1:]
    if not digits.isdigit() or not 7 <= len(digits) <= 15:
        add_error(errors, field, "Phone number format is not valid")
    return raw


def validate_card_number(value: str, errors: Dict[str, str], field: str = "card_number") -> str:
    digits = re.sub(r"[\s\-]", "", _strip(value))
    if not digits:
        add_error(errors, field, "Card number is required")
    elif not digits.isdigit() or not 13 <= len(digits) <= 19:
        add_error(errors, field, "Card number must be 13-19 digits")
    return digits


_EXPIRY_RE = re.compile(r"^(0[1-9]|1[0-2])/(\d{2})$")


def validate_expiry(value: str, errors: Dict[str, str], *, today: date, field: str = "expiry") -> str:
    raw = _strip(value)
    match = _EXPIRY_RE.match(raw)
    if not match:
        add_error(errors, field, "Expiry must be in MM/YY format")
        return raw
    month, year = int(match.group(1)), 2000 + int(match.group(2))
    if (year, month) < (today.year, today.month):
        add_error(errors, field, "Card has expired")
    return raw


def validate_cvv(value: str, errors: Dict[str, str], field: str = "cvv") -> str:
    raw = _strip(value)
    if not (raw.isdigit() and len(raw) in (3, 4)):
        add_error(errors, field, "CVV must be 3 or 4 digits")
    return raw


def raise_if_errors(errors: Dict[str, str], message: str = "Please correct the highlighted fields") -> None:
    if errors:
        raise FormValidationError(field_errors=errors, message=message)
