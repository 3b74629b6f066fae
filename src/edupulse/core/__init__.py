# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Core configuration and error types for EduPulse."""

from edupulse.core.exceptions import (
    EduPulseError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)

__all__ = [
    "EduPulseError",
    "ValidationError",
    "NotFoundError",
    "PersistenceError",
]
