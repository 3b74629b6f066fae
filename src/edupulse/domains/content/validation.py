# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Input checks shared by the progress tracker and interaction logger.

All helpers raise ValidationError and never touch storage.
"""

from enum import Enum
from typing import TypeVar

from edupulse.core.exceptions import ValidationError

E = TypeVar("E", bound=Enum)


def require_id(value: str | None, field: str) -> str:
    """Return a stripped identifier, rejecting missing or blank values."""
    if value is None or not str(value).strip():
        raise ValidationError(f"{field} is required", field=field)
    return str(value).strip()


def parse_enum(enum_cls: type[E], value: E | str | None, field: str) -> E | None:
    """Parse an optional enum value from its string form.

    Args:
        enum_cls: Target enum class.
        value: Enum member, its value, or None.
        field: Field name used in the error message.

    Returns:
        Enum member, or None when value is None.

    Raises:
        ValidationError: If value is not a member of enum_cls.
    """
    if value is None or isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ValidationError(
            f"{field} must be one of: {allowed}",
            field=field,
            details={"value": value},
        ) from None


def check_range(
    value: float | None,
    field: str,
    minimum: float,
    maximum: float | None = None,
) -> None:
    """Check that an optional number lies within [minimum, maximum]."""
    if value is None:
        return
    if value < minimum or (maximum is not None and value > maximum):
        if maximum is None:
            message = f"{field} must be >= {minimum:g}"
        else:
            message = f"{field} must be between {minimum:g} and {maximum:g}"
        raise ValidationError(message, field=field, details={"value": value})
