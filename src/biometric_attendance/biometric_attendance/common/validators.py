from __future__ import annotations

import re
from typing import Optional

from ..core.exceptions import ValidationError

_DIGITS = re.compile(r"[0-9]+")


def require_non_negative(value: int, field_name: str) -> int:
    if value is None or int(value) < 0:
        raise ValidationError(f"{field_name} must be >= 0")
    return int(value)


def require_positive(value: int, field_name: str) -> int:
    if value is None or int(value) <= 0:
        raise ValidationError(f"{field_name} must be > 0")
    return int(value)


def parse_employee_number(user_id: Optional[str]) -> Optional[int]:
    """Strict all-digits parse of a device user id; None when malformed."""

    if user_id is None:
        return None
    text = str(user_id).strip()
    if not _DIGITS.fullmatch(text):
        return None
    return int(text, 10)
