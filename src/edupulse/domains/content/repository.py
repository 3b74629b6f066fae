# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Storage port for the content and analytics domains.

The trackers and analyzers depend on this protocol only. The SQLAlchemy
implementation lives in edupulse.infrastructure.database.repositories;
tests substitute AsyncMock instances.

Every method may raise PersistenceError on storage failure.
"""

from contextlib import AbstractAsyncContextManager
from datetime import datetime
from typing import Any, Protocol

from edupulse.domains.content.enums import InteractionAction, ProgressStatus
from edupulse.domains.content.records import (
    ContentRecord,
    InteractionLog,
    ProgressRecord,
    TopicRecord,
)


class ContentRepository(Protocol):
    """Repository-style access to content, progress and interaction rows."""

    def transaction(self) -> AbstractAsyncContextManager[None]:
        """Scope in which every write is committed together or not at all."""
        ...

    async def get_content(self, content_id: str) -> ContentRecord | None:
        """Fetch a content item by id."""
        ...

    async def get_topic(self, topic_id: str) -> TopicRecord | None:
        """Fetch a topic by id."""
        ...

    async def upsert_progress(
        self,
        user_id: str,
        content_id: str,
        insert_values: dict[str, Any],
        update_values: dict[str, Any],
    ) -> ProgressRecord:
        """Insert or update the progress row for (user_id, content_id) atomically.

        insert_values is applied when no row exists yet, update_values
        when one does. Both use ProgressRecord field names.
        """
        ...

    async def get_progress(self, user_id: str, content_id: str) -> ProgressRecord | None:
        """Fetch one progress row with its content title."""
        ...

    async def query_progress_by_user(
        self,
        user_id: str,
        status: ProgressStatus | None = None,
    ) -> list[ProgressRecord]:
        """List a user's progress rows, most recently accessed first."""
        ...

    async def query_progress_by_content(
        self,
        content_id: str,
        status: ProgressStatus | None = None,
    ) -> list[ProgressRecord]:
        """List progress rows for a content item."""
        ...

    async def query_progress_by_contents(
        self,
        content_ids: list[str],
        status: ProgressStatus | None = None,
    ) -> list[ProgressRecord]:
        """List progress rows for several content items in one query."""
        ...

    async def insert_interaction_log(
        self,
        values: dict[str, Any],
        action_timestamp: datetime,
    ) -> InteractionLog:
        """Append one interaction log row."""
        ...

    async def insert_interaction_logs_batch(
        self,
        rows: list[dict[str, Any]],
        action_timestamp: datetime,
    ) -> None:
        """Append several interaction log rows in one statement."""
        ...

    async def query_interaction_logs_by_content(
        self,
        content_id: str,
        action: InteractionAction | None = None,
    ) -> list[InteractionLog]:
        """List interaction log rows for a content item, newest first."""
        ...

    async def query_interaction_logs_by_contents(
        self,
        content_ids: list[str],
        action: InteractionAction | None = None,
    ) -> list[InteractionLog]:
        """List interaction log rows for several content items in one query."""
        ...

    async def query_interaction_logs_by_user(
        self,
        user_id: str,
        content_id: str | None = None,
    ) -> list[InteractionLog]:
        """List interaction log rows for a user, newest first."""
        ...

    async def query_content_by_topic(self, topic_id: str) -> list[ContentRecord]:
        """List content items associated with a topic, in association order."""
        ...

    async def query_published_content(self, limit: int) -> list[ContentRecord]:
        """List at most limit published content items."""
        ...

    async def query_topics_by_content(self, content_id: str) -> list[TopicRecord]:
        """List topics a content item belongs to."""
        ...
