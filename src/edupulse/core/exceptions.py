# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Exception hierarchy shared by the content and analytics domains.

- EduPulseError: Base exception for all service errors
- ValidationError: Malformed or out-of-range input, raised before any write
- NotFoundError: A referenced content item or topic does not exist
- PersistenceError: Storage-layer failure, raised by the repository
"""


class EduPulseError(Exception):
    """Base exception for all EduPulse errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional error context.
    """

    def __init__(self, message: str, details: dict | None = None):
        """Initialize the error.

        Args:
            message: Human-readable error description.
            details: Optional dictionary with additional error context.
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation with details if available."""
        if self.details:
            return f"{self.message} - Details: {self.details}"
        return self.message


class ValidationError(EduPulseError):
    """Input failed validation.

    Raised by the core before any persistence call is made, so a
    rejected request never leaves a partial write behind.

    Attributes:
        field: Name of the offending field, when one can be singled out.
    """

    def __init__(self, message: str, field: str | None = None, details: dict | None = None):
        """Initialize validation error.

        Args:
            message: Human-readable error description.
            field: Name of the offending field.
            details: Optional dictionary with additional error context.
        """
        self.field = field
        super().__init__(message, details)


class NotFoundError(EduPulseError):
    """Referenced entity does not exist.

    Attributes:
        entity: Entity kind ("content", "topic").
        entity_id: Identifier that failed to resolve.
    """

    def __init__(self, entity: str, entity_id: str):
        """Initialize not found error.

        Args:
            entity: Entity kind.
            entity_id: Identifier that failed to resolve.
        """
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity.capitalize()} {entity_id} not found")


class PersistenceError(EduPulseError):
    """Storage-layer failure.

    Core components pass this through unchanged; there is no retry at
    the core level.

    Attributes:
        original_error: The underlying SQLAlchemy or driver error.
    """

    def __init__(self, message: str, original_error: Exception | None = None):
        """Initialize persistence error.

        Args:
            message: Human-readable error description.
            original_error: The underlying exception that caused this error.
        """
        self.original_error = original_error
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation of the error."""
        if self.original_error:
            return f"{self.message}: {self.original_error}"
        return self.message
