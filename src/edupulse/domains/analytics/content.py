# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Per-item content analytics.

Views, completions and the completion rate come from the content's
denormalized counters. The rate derived from COMPLETED progress rows is
reported next to it as a diagnostic only.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from edupulse.core.exceptions import NotFoundError
from edupulse.domains.content.enums import ProgressStatus
from edupulse.domains.content.repository import ContentRepository
from edupulse.domains.content.validation import require_id
from edupulse.utils.datetime import seconds_to_human

logger = logging.getLogger(__name__)


@dataclass
class TopicEngagement:
    """Topic the content item belongs to, with the item's own figures."""

    topic_id: str
    name: str
    view_count: int
    completion_rate: float


@dataclass
class ContentAnalytics:
    """Engagement figures for one content item."""

    content_id: str
    title: str
    total_views: int = 0
    total_completions: int = 0
    completion_rate: float = 0.0
    average_time_spent: float = 0.0
    average_rating: float = 0.0
    engagement_score: float = 0.0
    abandonment_rate: float = 0.0
    progress_completion_rate: float = 0.0
    popular_topics: list[TopicEngagement] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for API response."""
        return {
            "contentId": self.content_id,
            "title": self.title,
            "totalViews": self.total_views,
            "totalCompletions": self.total_completions,
            "completionRate": self.completion_rate,
            "averageTimeSpent": self.average_time_spent,
            "averageTimeSpentHuman": seconds_to_human(self.average_time_spent),
            "averageRating": self.average_rating,
            "engagementScore": self.engagement_score,
            "abandonmentRate": self.abandonment_rate,
            "progressCompletionRate": self.progress_completion_rate,
            "popularTopics": [
                {
                    "topicId": t.topic_id,
                    "name": t.name,
                    "viewCount": t.view_count,
                    "completionRate": t.completion_rate,
                }
                for t in self.popular_topics
            ],
        }


class ContentAnalyzer:
    """Read-side analyzer for a single content item."""

    def __init__(self, repository: ContentRepository) -> None:
        self.repository = repository

    async def get_content_analytics(self, content_id: str) -> ContentAnalytics:
        """Get engagement analytics for a content item.

        Args:
            content_id: Content identifier.

        Returns:
            ContentAnalytics for the item.

        Raises:
            ValidationError: If content_id is blank.
            NotFoundError: If the content item does not exist.
            PersistenceError: On storage failure.
        """
        content_id = require_id(content_id, "content_id")

        content = await self.repository.get_content(content_id)
        if content is None:
            raise NotFoundError("content", content_id)

        progress = await self.repository.query_progress_by_content(content_id)
        topics = await self.repository.query_topics_by_content(content_id)

        completion_rate = content.counter_completion_rate
        rating = content.rating_average or 0.0

        completed_rows = sum(1 for row in progress if row.status is ProgressStatus.COMPLETED)
        progress_rate = (
            completed_rows / content.view_count * 100 if content.view_count > 0 else 0.0
        )

        return ContentAnalytics(
            content_id=content.id,
            title=content.title,
            total_views=content.view_count,
            total_completions=content.completion_count,
            completion_rate=completion_rate,
            average_time_spent=(
                sum(row.time_spent_seconds for row in progress) / len(progress)
                if progress
                else 0.0
            ),
            average_rating=rating,
            engagement_score=(completion_rate + rating * 20) / 2,
            abandonment_rate=100 - completion_rate,
            progress_completion_rate=progress_rate,
            popular_topics=[
                TopicEngagement(
                    topic_id=topic.id,
                    name=topic.name,
                    view_count=content.view_count,
                    completion_rate=completion_rate,
                )
                for topic in topics
            ],
        )
