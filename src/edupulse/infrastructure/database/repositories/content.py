# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""SQLAlchemy implementation of the content repository.

Maps ORM rows to the domain records and back. Enum spellings are
normalized here and nowhere else: progress status is stored upper-case
and read back in any case or with dashes; every other enum column holds
the lower-case value.

All SQLAlchemy errors are re-raised as PersistenceError.
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime
from enum import Enum
from typing import Any, AsyncIterator, TypeVar

from sqlalchemy import desc, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from edupulse.core.exceptions import NotFoundError, PersistenceError
from edupulse.domains.content.enums import (
    AbandonmentReason,
    CameFrom,
    DeviceType,
    InteractionAction,
    PlatformType,
    ProgressStatus,
)
from edupulse.domains.content.records import (
    ContentRecord,
    InteractionLog,
    ProgressRecord,
    TopicRecord,
)
from edupulse.infrastructure.database.models import (
    Content,
    ContentInteractionLog,
    ContentProgress,
    ContentTopic,
    Topic,
)
from edupulse.utils.datetime import ensure_utc

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Enum)

PROGRESS_UNIQUE_CONSTRAINT = "uq_content_progress_user_content"
FOREIGN_KEY_VIOLATION = "23503"


def status_to_storage(status: ProgressStatus) -> str:
    """Convert a progress status to its stored spelling."""
    return status.value.upper()


def status_from_storage(value: str) -> ProgressStatus:
    """Convert a stored progress status to the domain enum.

    Accepts "COMPLETED", "completed" and "in-progress" style spellings.
    """
    return ProgressStatus(value.strip().lower().replace("-", "_"))


def _enum_to_storage(value: Enum | None) -> str | None:
    return value.value if value is not None else None


def _enum_from_storage(enum_cls: type[E], value: str | None) -> E | None:
    if value is None:
        return None
    return enum_cls(value.strip().lower())


def _is_foreign_key_violation(error: IntegrityError) -> bool:
    """Check the driver error for SQLSTATE 23503 (foreign_key_violation)."""
    for source in (error.orig, getattr(error.orig, "__cause__", None)):
        code = getattr(source, "sqlstate", None) or getattr(source, "pgcode", None)
        if code == FOREIGN_KEY_VIOLATION:
            return True
    return False


class SQLAlchemyContentRepository:
    """Content repository bound to one AsyncSession.

    Attributes:
        session: Session of the current unit of work.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    @asynccontextmanager
    async def _guard(self, operation: str, content_id: str | None = None) -> AsyncIterator[None]:
        """Re-raise SQLAlchemy errors as PersistenceError.

        A foreign-key violation on a write naming content_id means the
        content row does not exist and is raised as NotFoundError.
        """
        try:
            yield
        except IntegrityError as e:
            if content_id is not None and _is_foreign_key_violation(e):
                logger.warning("Write references unknown content: %s: %s", operation, content_id)
                raise NotFoundError("content", content_id) from e
            logger.error("Database operation failed: %s: %s", operation, e)
            raise PersistenceError(f"Failed to {operation}", e) from e
        except SQLAlchemyError as e:
            logger.error("Database operation failed: %s: %s", operation, e)
            raise PersistenceError(f"Failed to {operation}", e) from e

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        """Run the enclosed writes all-or-nothing.

        Uses a savepoint when the session already has a transaction open,
        so a failed batch is rolled back without ending the outer unit
        of work.
        """
        if self.session.in_transaction():
            scope = self.session.begin_nested()
        else:
            scope = self.session.begin()

        async with self._guard("commit transaction"):
            async with scope:
                yield

    # =========================================================================
    # Content and topics
    # =========================================================================

    async def get_content(self, content_id: str) -> ContentRecord | None:
        async with self._guard("get content"):
            content = await self.session.get(Content, content_id)
        return self._content_record(content) if content is not None else None

    async def get_topic(self, topic_id: str) -> TopicRecord | None:
        async with self._guard("get topic"):
            topic = await self.session.get(Topic, topic_id)
        return self._topic_record(topic) if topic is not None else None

    async def query_content_by_topic(self, topic_id: str) -> list[ContentRecord]:
        query = (
            select(Content)
            .join(ContentTopic, ContentTopic.content_id == Content.id)
            .where(ContentTopic.topic_id == topic_id)
            .order_by(ContentTopic.created_at, Content.id)
        )
        async with self._guard("query content by topic"):
            result = await self.session.execute(query)
        return [self._content_record(c) for c in result.scalars().all()]

    async def query_published_content(self, limit: int) -> list[ContentRecord]:
        query = (
            select(Content)
            .where(Content.is_published.is_(True))
            .order_by(Content.created_at, Content.id)
            .limit(limit)
        )
        async with self._guard("query published content"):
            result = await self.session.execute(query)
        return [self._content_record(c) for c in result.scalars().all()]

    async def query_topics_by_content(self, content_id: str) -> list[TopicRecord]:
        query = (
            select(Topic)
            .join(ContentTopic, ContentTopic.topic_id == Topic.id)
            .where(ContentTopic.content_id == content_id)
            .order_by(ContentTopic.created_at, Topic.id)
        )
        async with self._guard("query topics by content"):
            result = await self.session.execute(query)
        return [self._topic_record(t) for t in result.scalars().all()]

    # =========================================================================
    # Progress
    # =========================================================================

    async def upsert_progress(
        self,
        user_id: str,
        content_id: str,
        insert_values: dict[str, Any],
        update_values: dict[str, Any],
    ) -> ProgressRecord:
        """Insert or update a progress row with one INSERT ... ON CONFLICT.

        Args:
            user_id: User identifier.
            content_id: Content identifier.
            insert_values: Column values for a new row.
            update_values: Column values applied to an existing row.

        Returns:
            The row as stored after the statement.
        """
        insert_row = self._progress_columns(insert_values)
        update_row = self._progress_columns(update_values)
        update_row["updated_at"] = update_values["last_accessed_at"]

        stmt = (
            insert(ContentProgress)
            .values(user_id=user_id, content_id=content_id, **insert_row)
            .on_conflict_do_update(constraint=PROGRESS_UNIQUE_CONSTRAINT, set_=update_row)
            .returning(ContentProgress)
            .execution_options(populate_existing=True)
        )

        async with self._guard("upsert progress", content_id):
            result = await self.session.execute(stmt)
            row = result.scalars().one()

        return self._progress_record(row)

    async def get_progress(self, user_id: str, content_id: str) -> ProgressRecord | None:
        query = (
            select(ContentProgress, Content.title)
            .join(Content, Content.id == ContentProgress.content_id)
            .where(
                ContentProgress.user_id == user_id,
                ContentProgress.content_id == content_id,
            )
        )
        async with self._guard("get progress"):
            result = await self.session.execute(query)
            row = result.first()

        if row is None:
            return None
        return self._progress_record(row[0], title=row[1])

    async def query_progress_by_user(
        self,
        user_id: str,
        status: ProgressStatus | None = None,
    ) -> list[ProgressRecord]:
        query = (
            select(ContentProgress, Content.title)
            .join(Content, Content.id == ContentProgress.content_id)
            .where(ContentProgress.user_id == user_id)
            .order_by(desc(ContentProgress.last_accessed_at))
        )
        if status is not None:
            query = query.where(ContentProgress.status == status_to_storage(status))

        async with self._guard("query progress by user"):
            result = await self.session.execute(query)
            rows = result.all()

        return [self._progress_record(progress, title=title) for progress, title in rows]

    async def query_progress_by_content(
        self,
        content_id: str,
        status: ProgressStatus | None = None,
    ) -> list[ProgressRecord]:
        query = select(ContentProgress).where(ContentProgress.content_id == content_id)
        if status is not None:
            query = query.where(ContentProgress.status == status_to_storage(status))

        async with self._guard("query progress by content"):
            result = await self.session.execute(query)
        return [self._progress_record(p) for p in result.scalars().all()]

    async def query_progress_by_contents(
        self,
        content_ids: list[str],
        status: ProgressStatus | None = None,
    ) -> list[ProgressRecord]:
        if not content_ids:
            return []
        query = select(ContentProgress).where(ContentProgress.content_id.in_(content_ids))
        if status is not None:
            query = query.where(ContentProgress.status == status_to_storage(status))

        async with self._guard("query progress by contents"):
            result = await self.session.execute(query)
        return [self._progress_record(p) for p in result.scalars().all()]

    # =========================================================================
    # Interaction logs
    # =========================================================================

    async def insert_interaction_log(
        self,
        values: dict[str, Any],
        action_timestamp: datetime,
    ) -> InteractionLog:
        log = ContentInteractionLog(**self._log_columns(values, action_timestamp))

        async with self._guard("insert interaction log", values["content_id"]):
            self.session.add(log)
            await self.session.flush()

        return self._log_record(log)

    async def insert_interaction_logs_batch(
        self,
        rows: list[dict[str, Any]],
        action_timestamp: datetime,
    ) -> None:
        if not rows:
            return
        content_ids = ", ".join(sorted({values["content_id"] for values in rows}))
        async with self._guard("insert interaction logs", content_ids):
            await self.session.execute(
                insert(ContentInteractionLog),
                [self._log_columns(values, action_timestamp) for values in rows],
            )

    async def query_interaction_logs_by_content(
        self,
        content_id: str,
        action: InteractionAction | None = None,
    ) -> list[InteractionLog]:
        query = (
            select(ContentInteractionLog)
            .where(ContentInteractionLog.content_id == content_id)
            .order_by(desc(ContentInteractionLog.action_timestamp))
        )
        if action is not None:
            query = query.where(ContentInteractionLog.action == action.value)

        async with self._guard("query interaction logs by content"):
            result = await self.session.execute(query)
        return [self._log_record(log) for log in result.scalars().all()]

    async def query_interaction_logs_by_contents(
        self,
        content_ids: list[str],
        action: InteractionAction | None = None,
    ) -> list[InteractionLog]:
        if not content_ids:
            return []
        query = (
            select(ContentInteractionLog)
            .where(ContentInteractionLog.content_id.in_(content_ids))
            .order_by(desc(ContentInteractionLog.action_timestamp))
        )
        if action is not None:
            query = query.where(ContentInteractionLog.action == action.value)

        async with self._guard("query interaction logs by contents"):
            result = await self.session.execute(query)
        return [self._log_record(log) for log in result.scalars().all()]

    async def query_interaction_logs_by_user(
        self,
        user_id: str,
        content_id: str | None = None,
    ) -> list[InteractionLog]:
        query = (
            select(ContentInteractionLog)
            .where(ContentInteractionLog.user_id == user_id)
            .order_by(desc(ContentInteractionLog.action_timestamp))
        )
        if content_id is not None:
            query = query.where(ContentInteractionLog.content_id == content_id)

        async with self._guard("query interaction logs by user"):
            result = await self.session.execute(query)
        return [self._log_record(log) for log in result.scalars().all()]

    # =========================================================================
    # Mapping helpers
    # =========================================================================

    @staticmethod
    def _progress_columns(values: dict[str, Any]) -> dict[str, Any]:
        columns = dict(values)
        if columns.get("status") is not None:
            columns["status"] = status_to_storage(columns["status"])
        return columns

    @staticmethod
    def _log_columns(values: dict[str, Any], action_timestamp: datetime) -> dict[str, Any]:
        return {
            "user_id": values["user_id"],
            "content_id": values["content_id"],
            "session_id": values["session_id"],
            "action": values["action"].value,
            "action_timestamp": action_timestamp,
            "progress_at_action": values.get("progress_at_action"),
            "time_spent_seconds": values.get("time_spent_seconds"),
            "device_type": _enum_to_storage(values.get("device_type")),
            "platform": _enum_to_storage(values.get("platform")),
            "abandonment_reason": _enum_to_storage(values.get("abandonment_reason")),
            "came_from": _enum_to_storage(values.get("came_from")),
            "extra_data": values.get("metadata") or {},
        }

    @staticmethod
    def _content_record(content: Content) -> ContentRecord:
        return ContentRecord(
            id=content.id,
            title=content.title,
            view_count=content.view_count or 0,
            completion_count=content.completion_count or 0,
            rating_average=content.rating_average,
            rating_count=content.rating_count or 0,
            is_published=content.is_published,
            target_age_min=content.target_age_min,
            target_age_max=content.target_age_max,
        )

    @staticmethod
    def _topic_record(topic: Topic) -> TopicRecord:
        return TopicRecord(id=topic.id, name=topic.name, slug=topic.slug)

    @staticmethod
    def _progress_record(progress: ContentProgress, title: str | None = None) -> ProgressRecord:
        return ProgressRecord(
            user_id=progress.user_id,
            content_id=progress.content_id,
            status=status_from_storage(progress.status),
            progress_percentage=float(progress.progress_percentage or 0),
            time_spent_seconds=progress.time_spent_seconds or 0,
            last_position_seconds=progress.last_position_seconds or 0,
            completion_rating=progress.completion_rating,
            completion_feedback=progress.completion_feedback,
            first_accessed_at=ensure_utc(progress.first_accessed_at),
            last_accessed_at=ensure_utc(progress.last_accessed_at),
            completed_at=ensure_utc(progress.completed_at),
            content_title=title,
        )

    @staticmethod
    def _log_record(log: ContentInteractionLog) -> InteractionLog:
        return InteractionLog(
            id=log.id,
            user_id=log.user_id,
            content_id=log.content_id,
            session_id=log.session_id,
            action=InteractionAction(log.action.strip().lower()),
            action_timestamp=ensure_utc(log.action_timestamp),
            progress_at_action=log.progress_at_action,
            time_spent_seconds=log.time_spent_seconds,
            device_type=_enum_from_storage(DeviceType, log.device_type),
            platform=_enum_from_storage(PlatformType, log.platform),
            abandonment_reason=_enum_from_storage(AbandonmentReason, log.abandonment_reason),
            came_from=_enum_from_storage(CameFrom, log.came_from),
            metadata=dict(log.extra_data or {}),
        )
