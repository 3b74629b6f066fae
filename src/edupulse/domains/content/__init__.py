# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Content engagement domain package.

This package provides the write path for content engagement:
- Per-user progress tracking over content items
- Append-only interaction logging
- The storage port shared with the analytics domain
"""

from edupulse.domains.content.enums import (
    AbandonmentReason,
    CameFrom,
    DeviceType,
    InteractionAction,
    PlatformType,
    PriorityTier,
    ProgressStatus,
)
from edupulse.domains.content.interactions import InteractionLogger
from edupulse.domains.content.progress import BulkProgressEntry, ProgressTracker
from edupulse.domains.content.records import (
    ContentRecord,
    InteractionEvent,
    InteractionLog,
    ProgressRecord,
    ProgressUpdate,
    TopicRecord,
    UserProgress,
)
from edupulse.domains.content.repository import ContentRepository

__all__ = [
    # Services
    "ProgressTracker",
    "BulkProgressEntry",
    "InteractionLogger",
    # Storage port
    "ContentRepository",
    # Records
    "ContentRecord",
    "TopicRecord",
    "ProgressRecord",
    "ProgressUpdate",
    "UserProgress",
    "InteractionEvent",
    "InteractionLog",
    # Enums
    "ProgressStatus",
    "InteractionAction",
    "DeviceType",
    "PlatformType",
    "AbandonmentReason",
    "CameFrom",
    "PriorityTier",
]
