# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Effectiveness analytics for a topic.

Aggregates the denormalized counters of every content item associated
with a topic, the time spent over their progress rows, and ranks the
items by rating. Ties in the ranking keep fetch order.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from edupulse.core.exceptions import NotFoundError
from edupulse.domains.content.records import ContentRecord
from edupulse.domains.content.repository import ContentRepository
from edupulse.domains.content.validation import require_id

logger = logging.getLogger(__name__)

DEFAULT_RANKING_SIZE = 5


@dataclass
class EngagedContent:
    """Content item entry in an engagement ranking."""

    id: str
    title: str
    completion_rate: float
    average_rating: float

    @classmethod
    def from_record(cls, content: ContentRecord) -> "EngagedContent":
        return cls(
            id=content.id,
            title=content.title,
            completion_rate=content.counter_completion_rate,
            average_rating=content.rating_average or 0.0,
        )


@dataclass
class EffectivenessAnalytics:
    """Aggregated engagement figures for one topic."""

    topic_id: str
    topic_name: str
    total_content: int = 0
    total_views: int = 0
    total_completions: int = 0
    average_completion_rate: float = 0.0
    average_time_spent: float = 0.0
    average_rating: float = 0.0
    most_engaged_content: list[EngagedContent] = field(default_factory=list)
    least_engaged_content: list[EngagedContent] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for API response."""

        def ranking(entries: list[EngagedContent]) -> list[dict[str, Any]]:
            return [
                {
                    "id": entry.id,
                    "title": entry.title,
                    "completionRate": entry.completion_rate,
                    "averageRating": entry.average_rating,
                }
                for entry in entries
            ]

        return {
            "topicId": self.topic_id,
            "topicName": self.topic_name,
            "totalContent": self.total_content,
            "totalViews": self.total_views,
            "totalCompletions": self.total_completions,
            "averageCompletionRate": self.average_completion_rate,
            "averageTimeSpent": self.average_time_spent,
            "averageRating": self.average_rating,
            "mostEngagedContent": ranking(self.most_engaged_content),
            "leastEngagedContent": ranking(self.least_engaged_content),
        }


class EffectivenessAnalyzer:
    """Read-side analyzer aggregating content by topic.

    Attributes:
        repository: Storage port for topics, content and progress rows.
        ranking_size: Number of entries in each engagement ranking.
    """

    def __init__(
        self,
        repository: ContentRepository,
        ranking_size: int = DEFAULT_RANKING_SIZE,
    ) -> None:
        """Initialize effectiveness analyzer.

        Args:
            repository: Storage port.
            ranking_size: Entries in the most/least engaged rankings.
        """
        self.repository = repository
        self.ranking_size = ranking_size

    async def get_effectiveness_analytics(self, topic_id: str) -> EffectivenessAnalytics:
        """Get effectiveness analytics for a topic.

        Args:
            topic_id: Topic identifier.

        Returns:
            EffectivenessAnalytics for the topic's content items.

        Raises:
            ValidationError: If topic_id is blank.
            NotFoundError: If the topic does not exist.
            PersistenceError: On storage failure.
        """
        topic_id = require_id(topic_id, "topic_id")

        topic = await self.repository.get_topic(topic_id)
        if topic is None:
            raise NotFoundError("topic", topic_id)

        contents = await self.repository.query_content_by_topic(topic_id)

        total_content = len(contents)
        total_views = sum(c.view_count for c in contents)
        total_completions = sum(c.completion_count for c in contents)

        progress = await self.repository.query_progress_by_contents([c.id for c in contents])
        time_spent = [row.time_spent_seconds for row in progress]

        rating_sum = sum(c.rating_average or 0.0 for c in contents)
        average_rating = rating_sum / total_content if total_content else 0.0

        by_rating_desc = sorted(contents, key=lambda c: c.rating_average or 0.0, reverse=True)
        by_rating_asc = sorted(contents, key=lambda c: c.rating_average or 0.0)

        analytics = EffectivenessAnalytics(
            topic_id=topic_id,
            topic_name=topic.name,
            total_content=total_content,
            total_views=total_views,
            total_completions=total_completions,
            average_completion_rate=(
                total_completions / total_views * 100 if total_views > 0 else 0.0
            ),
            average_time_spent=sum(time_spent) / len(time_spent) if time_spent else 0.0,
            average_rating=average_rating,
            most_engaged_content=[
                EngagedContent.from_record(c) for c in by_rating_desc[: self.ranking_size]
            ],
            least_engaged_content=[
                EngagedContent.from_record(c) for c in by_rating_asc[: self.ranking_size]
            ],
        )

        logger.debug(
            "Effectiveness analytics: topic=%s, content=%d, views=%d",
            topic_id,
            total_content,
            total_views,
        )
        return analytics
