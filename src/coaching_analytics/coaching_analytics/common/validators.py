from __future__ import annotations

from datetime import date
from enum import Enum
from typing import Any, Mapping, Optional, Type, TypeVar

from ..core.exceptions import ValidationError
from .datetime_utils import parse_iso_date

E = TypeVar("E", bound=Enum)


def require_non_empty(value: Any, field_name: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def optional_str(payload: Mapping[str, Any], key: str) -> Optional[str]:
    value = payload.get(key)
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def require_iso_date(value: Any, field_name: str) -> date:
    try:
        return parse_iso_date(str(value).strip())
    except ValueError:
        raise ValidationError(f"{field_name} must be a date in YYYY-MM-DD format")


def optional_iso_date(payload: Mapping[str, Any], key: str) -> Optional[date]:
    value = optional_str(payload, key)
    if value is None:
        return None
    return require_iso_date(value, key)


def require_number(value: Any, field_name: str) -> float:
    if value is None or isinstance(value, bool) or (isinstance(value, str) and not value.strip()):
        raise ValidationError(f"{field_name} is required")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number")
    if number != number or number in (float("inf"), float("-inf")):
        raise ValidationError(f"{field_name} must be a finite number")
    return number


def require_enum(value: Any, enum_type: Type[E], field_name: str) -> E:
    try:
        return enum_type(str(value).strip())
    except ValueError:
        allowed = ", ".join(member.value for member in enum_type)
        raise ValidationError(f"{field_name} must be one of: {allowed}")


def require_mark_range(marks: float, max_marks: float, *, student_id: Optional[str] = None) -> None:
    """Enforce 0 <= marks <= max_marks with a message naming the violated bound."""
    suffix = f" for student {student_id}" if student_id else ""
    if max_marks <= 0:
        raise ValidationError(f"maxMarks must be greater than 0{suffix}")
    if marks < 0 or marks > max_marks:
        raise ValidationError(f"Marks must be between 0 and {max_marks:g}{suffix}")
