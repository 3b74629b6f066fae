# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Database infrastructure for EduPulse.

This package provides:
- Database: async engine and session management
- SQLAlchemy models for content, topics, progress and interaction logs
- SQLAlchemyContentRepository: the content repository implementation
"""

from edupulse.infrastructure.database.connection import Database
from edupulse.infrastructure.database.repositories import SQLAlchemyContentRepository

__all__ = [
    "Database",
    "SQLAlchemyContentRepository",
]
