from __future__ import annotations

from typing import Optional

from ..core.exceptions import ValidationError


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_roll_number(value: Optional[str]) -> str:
    roll = require_non_empty(value, "Roll Number")
    if "/" in roll:
        raise ValidationError("Roll Number cannot contain slashes")
    return roll
