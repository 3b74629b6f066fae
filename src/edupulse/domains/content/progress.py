# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Progress tracking for users over content items.

This module provides the ProgressTracker class for:
- Upserting the per-(user, content) progress row
- Reading a user's progress back as read models
- Atomic bulk progress tracking

Derived timestamps follow these rules:
- first_accessed_at and last_accessed_at are set on insert
- last_accessed_at is refreshed on every report
- completed_at is set to the report time whenever the reported status
  is completed, and cleared when another status is reported
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from edupulse.core.exceptions import NotFoundError, ValidationError
from edupulse.domains.content.enums import ProgressStatus
from edupulse.domains.content.records import ProgressUpdate, UserProgress
from edupulse.domains.content.repository import ContentRepository
from edupulse.domains.content.validation import check_range, parse_enum, require_id
from edupulse.utils.datetime import utc_now

logger = logging.getLogger(__name__)


@dataclass
class BulkProgressEntry:
    """One entry of a bulk progress report."""

    user_id: str
    content_id: str
    update: ProgressUpdate


class ProgressTracker:
    """Service for tracking user progress over content.

    Attributes:
        repository: Storage port for content and progress rows.
    """

    def __init__(self, repository: ContentRepository) -> None:
        """Initialize progress tracker.

        Args:
            repository: Storage port, bound to the request's session.
        """
        self.repository = repository

    async def track_progress(
        self,
        user_id: str,
        content_id: str,
        update: ProgressUpdate,
    ) -> UserProgress:
        """Record a progress report for a user on a content item.

        Args:
            user_id: User identifier.
            content_id: Content identifier.
            update: Partial progress report; absent fields keep their value.

        Returns:
            The post-upsert progress row as a read model.

        Raises:
            ValidationError: If identifiers are blank or a value is out of range.
            NotFoundError: If the content item does not exist.
            PersistenceError: On storage failure.
        """
        user_id, content_id, status = self._validate(user_id, content_id, update)

        content = await self.repository.get_content(content_id)
        if content is None:
            raise NotFoundError("content", content_id)

        insert_values, update_values = self._build_values(update, status, utc_now())
        record = await self.repository.upsert_progress(
            user_id,
            content_id,
            insert_values,
            update_values,
        )

        logger.info(
            "Tracked progress: user=%s, content=%s, status=%s",
            user_id,
            content_id,
            record.status.value,
        )

        return UserProgress.from_record(record, title=content.title)

    async def bulk_track_progress(self, entries: list[BulkProgressEntry]) -> int:
        """Record several progress reports atomically.

        Every entry is validated and every content id resolved before the
        first write; the upserts then run in one transaction.

        Args:
            entries: Progress reports to apply.

        Returns:
            Number of progress rows written.

        Raises:
            ValidationError: If the batch is empty or any entry is invalid.
            NotFoundError: If any entry references unknown content.
            PersistenceError: On storage failure; nothing is written.
        """
        if not entries:
            raise ValidationError("At least one progress entry is required", field="entries")

        prepared = []
        for entry in entries:
            user_id, content_id, status = self._validate(
                entry.user_id,
                entry.content_id,
                entry.update,
            )
            prepared.append((user_id, content_id, status, entry.update))

        for content_id in dict.fromkeys(item[1] for item in prepared):
            if await self.repository.get_content(content_id) is None:
                raise NotFoundError("content", content_id)

        now = utc_now()
        async with self.repository.transaction():
            for user_id, content_id, status, update in prepared:
                insert_values, update_values = self._build_values(update, status, now)
                await self.repository.upsert_progress(
                    user_id,
                    content_id,
                    insert_values,
                    update_values,
                )

        logger.info("Bulk tracked progress: entries=%d", len(prepared))
        return len(prepared)

    async def get_progress(self, user_id: str, content_id: str) -> UserProgress | None:
        """Get a user's progress on one content item.

        Args:
            user_id: User identifier.
            content_id: Content identifier.

        Returns:
            Progress read model, or None if the user never reported progress.
        """
        user_id = require_id(user_id, "user_id")
        content_id = require_id(content_id, "content_id")

        record = await self.repository.get_progress(user_id, content_id)
        if record is None:
            return None
        return UserProgress.from_record(record)

    async def get_progress_history(
        self,
        user_id: str,
        status: ProgressStatus | str | None = None,
    ) -> list[UserProgress]:
        """List a user's progress, most recently accessed first.

        Args:
            user_id: User identifier.
            status: Optional status filter (e.g. completed, in_progress).

        Returns:
            Progress read models.
        """
        user_id = require_id(user_id, "user_id")
        status = parse_enum(ProgressStatus, status, "status")

        records = await self.repository.query_progress_by_user(user_id, status)
        return [UserProgress.from_record(record) for record in records]

    def _validate(
        self,
        user_id: str,
        content_id: str,
        update: ProgressUpdate,
    ) -> tuple[str, str, ProgressStatus | None]:
        """Validate a progress report before any storage access."""
        user_id = require_id(user_id, "user_id")
        content_id = require_id(content_id, "content_id")
        status = parse_enum(ProgressStatus, update.status, "status")

        check_range(update.progress_percentage, "progress_percentage", 0, 100)
        check_range(update.time_spent_seconds, "time_spent_seconds", 0)
        check_range(update.last_position_seconds, "last_position_seconds", 0)
        check_range(update.completion_rating, "completion_rating", 1, 5)

        return user_id, content_id, status

    def _build_values(
        self,
        update: ProgressUpdate,
        status: ProgressStatus | None,
        now: datetime,
    ) -> tuple[dict[str, Any], dict[str, Any]]:
        """Build the insert and update column values for an upsert.

        Args:
            update: Validated progress report.
            status: Parsed status, None when not reported.
            now: Report time.

        Returns:
            Tuple of (insert values, update values).
        """
        reported: dict[str, Any] = {
            name: value
            for name, value in (
                ("progress_percentage", update.progress_percentage),
                ("time_spent_seconds", update.time_spent_seconds),
                ("last_position_seconds", update.last_position_seconds),
                ("completion_rating", update.completion_rating),
                ("completion_feedback", update.completion_feedback),
            )
            if value is not None
        }

        update_values: dict[str, Any] = {**reported, "last_accessed_at": now}
        if status is not None:
            update_values["status"] = status
            update_values["completed_at"] = now if status is ProgressStatus.COMPLETED else None

        insert_status = status or ProgressStatus.NOT_STARTED
        insert_values: dict[str, Any] = {
            "status": insert_status,
            "progress_percentage": 0,
            "time_spent_seconds": 0,
            "last_position_seconds": 0,
            **reported,
            "first_accessed_at": now,
            "last_accessed_at": now,
            "completed_at": now if insert_status is ProgressStatus.COMPLETED else None,
        }

        return insert_values, update_values
