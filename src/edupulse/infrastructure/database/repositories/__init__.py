# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Repository implementations over SQLAlchemy async sessions."""

from edupulse.infrastructure.database.repositories.content import (
    SQLAlchemyContentRepository,
    status_from_storage,
    status_to_storage,
)

__all__ = [
    "SQLAlchemyContentRepository",
    "status_from_storage",
    "status_to_storage",
]
