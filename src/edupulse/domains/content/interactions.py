# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Interaction logging for content engagement.

Interaction events are append-only. Rows are persisted verbatim with a
server-side timestamp; every aggregate is computed at read time by the
analytics domain.
"""

import logging
from typing import Any
from uuid import uuid4

from edupulse.core.exceptions import ValidationError
from edupulse.domains.content.enums import (
    AbandonmentReason,
    CameFrom,
    DeviceType,
    InteractionAction,
    PlatformType,
)
from edupulse.domains.content.records import InteractionEvent, InteractionLog
from edupulse.domains.content.repository import ContentRepository
from edupulse.domains.content.validation import check_range, parse_enum, require_id
from edupulse.utils.datetime import utc_now

logger = logging.getLogger(__name__)


def generate_session_id() -> str:
    """Generate a session id for events reported without one."""
    return f"session-{uuid4().hex}"


class InteractionLogger:
    """Service for recording and reading interaction events.

    Attributes:
        repository: Storage port for interaction log rows.
    """

    def __init__(self, repository: ContentRepository) -> None:
        self.repository = repository

    async def log_interaction(self, event: InteractionEvent) -> InteractionLog:
        """Record a single interaction event.

        Args:
            event: Interaction reported by the client.

        Returns:
            The persisted log entry.

        Raises:
            ValidationError: If a required field is missing or a value is invalid.
            PersistenceError: On storage failure.
        """
        values = self._prepare(event)
        log = await self.repository.insert_interaction_log(values, utc_now())

        logger.info(
            "Logged interaction: user=%s, content=%s, action=%s",
            log.user_id,
            log.content_id,
            log.action.value,
        )
        return log

    async def bulk_log_interactions(self, events: list[InteractionEvent]) -> int:
        """Record several interaction events atomically.

        The whole batch is validated before anything is written. A single
        invalid event rejects the batch.

        Args:
            events: Interactions reported by the client.

        Returns:
            Number of rows written.

        Raises:
            ValidationError: If the batch is empty or any event is invalid.
            PersistenceError: On storage failure; nothing is written.
        """
        if not events:
            raise ValidationError("At least one interaction is required", field="interactions")

        rows = []
        for index, event in enumerate(events):
            try:
                rows.append(self._prepare(event))
            except ValidationError as e:
                e.details.setdefault("index", index)
                raise

        async with self.repository.transaction():
            await self.repository.insert_interaction_logs_batch(rows, utc_now())

        logger.info("Bulk logged interactions: count=%d", len(rows))
        return len(rows)

    async def get_content_interactions(
        self,
        content_id: str,
        action: InteractionAction | str | None = None,
    ) -> list[InteractionLog]:
        """List interactions recorded for a content item, newest first.

        Args:
            content_id: Content identifier.
            action: Optional action filter.

        Returns:
            Interaction log entries.
        """
        content_id = require_id(content_id, "content_id")
        action = parse_enum(InteractionAction, action, "action")
        return await self.repository.query_interaction_logs_by_content(content_id, action)

    async def get_user_interactions(
        self,
        user_id: str,
        content_id: str | None = None,
    ) -> list[InteractionLog]:
        """List a user's interactions, newest first, optionally for one item."""
        user_id = require_id(user_id, "user_id")
        if content_id is not None:
            content_id = require_id(content_id, "content_id")
        return await self.repository.query_interaction_logs_by_user(user_id, content_id)

    def _prepare(self, event: InteractionEvent) -> dict[str, Any]:
        """Validate an event and return the column values to insert."""
        user_id = require_id(event.user_id, "user_id")
        content_id = require_id(event.content_id, "content_id")
        if event.action is None or not str(event.action).strip():
            raise ValidationError("action is required", field="action")
        action = parse_enum(InteractionAction, event.action, "action")

        check_range(event.progress_at_action, "progress_at_action", 0, 100)
        check_range(event.time_spent_seconds, "time_spent_seconds", 0)

        abandonment_reason = parse_enum(
            AbandonmentReason,
            event.abandonment_reason,
            "abandonment_reason",
        )
        if abandonment_reason is not None and action is not InteractionAction.ABANDON:
            raise ValidationError(
                "abandonment_reason is only allowed with the abandon action",
                field="abandonment_reason",
                details={"action": action.value},
            )

        session_id = event.session_id.strip() if event.session_id else ""

        return {
            "user_id": user_id,
            "content_id": content_id,
            "session_id": session_id or generate_session_id(),
            "action": action,
            "progress_at_action": event.progress_at_action,
            "time_spent_seconds": event.time_spent_seconds,
            "device_type": parse_enum(DeviceType, event.device_type, "device_type"),
            "platform": parse_enum(PlatformType, event.platform, "platform"),
            "abandonment_reason": abandonment_reason,
            "came_from": parse_enum(CameFrom, event.came_from, "came_from"),
            "metadata": dict(event.metadata or {}),
        }
