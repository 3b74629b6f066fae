# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Content engagement models.

Tables:
- topics: Grouping keys for content
- contents: Content items with denormalized engagement counters
- content_topics: Content/topic association
- content_progress: One progress row per (user, content)
- content_interaction_logs: Append-only interaction events

Progress status is stored upper-case (e.g. "IN_PROGRESS"); every other
enum column stores the lower-case value. The repository converts both
to the domain enums.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    SmallInteger,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from edupulse.domains.content.enums import ContentType
from edupulse.infrastructure.database.models.base import (
    Base,
    TimestampMixin,
    UUIDPrimaryKeyMixin,
)
from edupulse.utils.datetime import utc_now


class Topic(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """Topic grouping content items."""

    __tablename__ = "topics"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    slug: Mapped[str | None] = mapped_column(String(200), unique=True)
    description: Mapped[str | None] = mapped_column(Text)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    content_topics: Mapped[list["ContentTopic"]] = relationship(back_populates="topic")

    def __repr__(self) -> str:
        return f"<Topic(id={self.id}, name={self.name})>"


class Content(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """Content item (article, video, quiz, ...)."""

    __tablename__ = "contents"

    title: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    content_type: Mapped[str] = mapped_column(
        String(20),
        default=ContentType.ARTICLE.value,
        nullable=False,
    )
    difficulty_level: Mapped[str | None] = mapped_column(String(20))
    target_age_min: Mapped[int | None] = mapped_column(Integer)
    target_age_max: Mapped[int | None] = mapped_column(Integer)
    duration_minutes: Mapped[int | None] = mapped_column(Integer)
    is_published: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    view_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    completion_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    rating_average: Mapped[float | None] = mapped_column(Float)
    rating_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    content_topics: Mapped[list["ContentTopic"]] = relationship(back_populates="content")
    progress: Mapped[list["ContentProgress"]] = relationship(back_populates="content")

    __table_args__ = (Index("ix_contents_is_published", "is_published"),)

    def __repr__(self) -> str:
        return f"<Content(id={self.id}, title={self.title})>"


class ContentTopic(Base):
    """Association between content and topics."""

    __tablename__ = "content_topics"

    content_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("contents.id", ondelete="CASCADE"),
        primary_key=True,
    )
    topic_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("topics.id", ondelete="CASCADE"),
        primary_key=True,
    )
    is_primary: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
    )

    content: Mapped["Content"] = relationship(back_populates="content_topics")
    topic: Mapped["Topic"] = relationship(back_populates="content_topics")


class ContentProgress(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """Progress of one user over one content item."""

    __tablename__ = "content_progress"

    user_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    content_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("contents.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    status: Mapped[str] = mapped_column(String(20), default="NOT_STARTED", nullable=False)
    progress_percentage: Mapped[float] = mapped_column(Float, default=0, nullable=False)
    time_spent_seconds: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    last_position_seconds: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    completion_rating: Mapped[int | None] = mapped_column(SmallInteger)
    completion_feedback: Mapped[str | None] = mapped_column(Text)
    first_accessed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
    )
    last_accessed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
    )
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    content: Mapped["Content"] = relationship(back_populates="progress")

    __table_args__ = (
        UniqueConstraint("user_id", "content_id", name="uq_content_progress_user_content"),
        CheckConstraint(
            "progress_percentage >= 0 AND progress_percentage <= 100",
            name="ck_content_progress_percentage",
        ),
        CheckConstraint(
            "completion_rating IS NULL OR (completion_rating >= 1 AND completion_rating <= 5)",
            name="ck_content_progress_rating",
        ),
        Index("ix_content_progress_user_last_accessed", "user_id", "last_accessed_at"),
    )

    @property
    def is_completed(self) -> bool:
        """Check whether the stored status is completed."""
        return self.status == "COMPLETED"

    def __repr__(self) -> str:
        return (
            f"<ContentProgress(user_id={self.user_id}, content_id={self.content_id}, "
            f"status={self.status})>"
        )


class ContentInteractionLog(UUIDPrimaryKeyMixin, Base):
    """Immutable interaction event."""

    __tablename__ = "content_interaction_logs"

    user_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    content_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("contents.id", ondelete="CASCADE"),
        nullable=False,
    )
    session_id: Mapped[str] = mapped_column(String(100), nullable=False)
    action: Mapped[str] = mapped_column(String(20), nullable=False)
    action_timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
    )
    progress_at_action: Mapped[float | None] = mapped_column(Float)
    time_spent_seconds: Mapped[int | None] = mapped_column(Integer)
    device_type: Mapped[str | None] = mapped_column(String(20))
    platform: Mapped[str | None] = mapped_column(String(20))
    abandonment_reason: Mapped[str | None] = mapped_column(String(30))
    came_from: Mapped[str | None] = mapped_column(String(30))
    # "metadata" is reserved on declarative classes.
    extra_data: Mapped[dict[str, Any]] = mapped_column(
        "metadata",
        JSONB,
        default=dict,
        nullable=False,
    )

    __table_args__ = (
        Index("ix_content_interaction_logs_content_action", "content_id", "action"),
        Index("ix_content_interaction_logs_timestamp", "action_timestamp"),
    )

    def __repr__(self) -> str:
        return (
            f"<ContentInteractionLog(id={self.id}, content_id={self.content_id}, "
            f"action={self.action})>"
        )
