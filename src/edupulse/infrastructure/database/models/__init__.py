# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""SQLAlchemy models for the EduPulse database."""

from edupulse.infrastructure.database.models.base import (
    Base,
    TimestampMixin,
    UUIDPrimaryKeyMixin,
    generate_uuid,
)
from edupulse.infrastructure.database.models.content import (
    Content,
    ContentInteractionLog,
    ContentProgress,
    ContentTopic,
    Topic,
)

__all__ = [
    "Base",
    "TimestampMixin",
    "UUIDPrimaryKeyMixin",
    "generate_uuid",
    "Topic",
    "Content",
    "ContentTopic",
    "ContentProgress",
    "ContentInteractionLog",
]
