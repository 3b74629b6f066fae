# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Domain records exchanged between the core and the repository.

The repository maps ORM rows into these plain dataclasses so the
trackers and analyzers never touch SQLAlchemy objects directly.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from edupulse.domains.content.enums import (
    AbandonmentReason,
    CameFrom,
    DeviceType,
    InteractionAction,
    PlatformType,
    ProgressStatus,
)
from edupulse.utils.datetime import format_iso


@dataclass
class ContentRecord:
    """Content item as seen by the analytics core.

    view_count, completion_count and rating_average are denormalized
    counters maintained elsewhere; they are read, never written, here.
    """

    id: str
    title: str
    view_count: int = 0
    completion_count: int = 0
    rating_average: float | None = None
    rating_count: int = 0
    is_published: bool = True
    target_age_min: int | None = None
    target_age_max: int | None = None

    @property
    def counter_completion_rate(self) -> float:
        """Completion rate from the denormalized counters, in percent."""
        if self.view_count <= 0:
            return 0.0
        return self.completion_count / self.view_count * 100


@dataclass
class TopicRecord:
    """Topic used as a grouping key for content."""

    id: str
    name: str
    slug: str | None = None


@dataclass
class ProgressRecord:
    """Persisted progress row for one (user, content) pair."""

    user_id: str
    content_id: str
    status: ProgressStatus
    progress_percentage: float = 0.0
    time_spent_seconds: int = 0
    last_position_seconds: int = 0
    completion_rating: int | None = None
    completion_feedback: str | None = None
    first_accessed_at: datetime | None = None
    last_accessed_at: datetime | None = None
    completed_at: datetime | None = None
    content_title: str | None = None


@dataclass
class ProgressUpdate:
    """Partial progress report.

    A field left as None is absent from the report and keeps its stored
    value on update.
    """

    status: ProgressStatus | str | None = None
    progress_percentage: float | None = None
    time_spent_seconds: int | None = None
    last_position_seconds: int | None = None
    completion_rating: int | None = None
    completion_feedback: str | None = None


@dataclass
class InteractionEvent:
    """Interaction reported by a client, before it is persisted."""

    user_id: str
    content_id: str
    action: InteractionAction | str | None
    session_id: str | None = None
    progress_at_action: float | None = None
    time_spent_seconds: int | None = None
    device_type: DeviceType | str | None = None
    platform: PlatformType | str | None = None
    abandonment_reason: AbandonmentReason | str | None = None
    came_from: CameFrom | str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass
class InteractionLog:
    """Immutable interaction log entry."""

    id: str
    user_id: str
    content_id: str
    session_id: str
    action: InteractionAction
    action_timestamp: datetime
    progress_at_action: float | None = None
    time_spent_seconds: int | None = None
    device_type: DeviceType | None = None
    platform: PlatformType | None = None
    abandonment_reason: AbandonmentReason | None = None
    came_from: CameFrom | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for API response."""
        return {
            "id": self.id,
            "user_id": self.user_id,
            "content_id": self.content_id,
            "session_id": self.session_id,
            "action": self.action.value,
            "action_timestamp": format_iso(self.action_timestamp),
            "progress_at_action": self.progress_at_action,
            "time_spent_seconds": self.time_spent_seconds,
            "device_type": self.device_type.value if self.device_type else None,
            "platform": self.platform.value if self.platform else None,
            "abandonment_reason": self.abandonment_reason.value if self.abandonment_reason else None,
            "came_from": self.came_from.value if self.came_from else None,
            "metadata": self.metadata,
        }


@dataclass
class UserProgress:
    """Progress read model returned to callers."""

    content_id: str
    title: str
    status: ProgressStatus
    progress_percentage: float
    time_spent_seconds: int
    last_position_seconds: int
    first_accessed_at: datetime | None = None
    last_accessed_at: datetime | None = None
    completed_at: datetime | None = None
    completion_rating: int | None = None
    completion_feedback: str | None = None

    @classmethod
    def from_record(cls, record: ProgressRecord, title: str | None = None) -> "UserProgress":
        """Shape a persisted progress row as a read model.

        Args:
            record: Progress row.
            title: Content title; falls back to the title joined on the row.

        Returns:
            UserProgress read model.
        """
        return cls(
            content_id=record.content_id,
            title=title if title is not None else (record.content_title or ""),
            status=record.status,
            progress_percentage=record.progress_percentage,
            time_spent_seconds=record.time_spent_seconds,
            last_position_seconds=record.last_position_seconds,
            first_accessed_at=record.first_accessed_at,
            last_accessed_at=record.last_accessed_at,
            completed_at=record.completed_at,
            completion_rating=record.completion_rating,
            completion_feedback=record.completion_feedback,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for API response."""
        return {
            "content_id": self.content_id,
            "title": self.title,
            "status": self.status.value,
            "progress_percentage": self.progress_percentage,
            "time_spent_seconds": self.time_spent_seconds,
            "last_position_seconds": self.last_position_seconds,
            "first_accessed_at": format_iso(self.first_accessed_at),
            "last_accessed_at": format_iso(self.last_accessed_at),
            "completed_at": format_iso(self.completed_at),
            "completion_rating": self.completion_rating,
            "completion_feedback": self.completion_feedback,
        }
