# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Problematic-content detection.

A published content item is problematic when its completion rate,
computed from COMPLETED progress rows over the item's view counter, is
below a threshold. Each hit gets a priority tier and a recommendation.

The limit bounds the candidate fetch, not the result: the result may be
shorter than limit even when more problematic content exists outside
the fetch window. Progress rows and abandon rows are each loaded with
one query over the whole window.
"""

import logging
from collections import Counter, defaultdict
from dataclasses import dataclass
from typing import Any

from edupulse.core.exceptions import ValidationError
from edupulse.domains.analytics.abandonment import average_abandonment_point
from edupulse.domains.content.enums import InteractionAction, PriorityTier, ProgressStatus
from edupulse.domains.content.records import ContentRecord, InteractionLog
from edupulse.domains.content.repository import ContentRepository

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD = 30.0
DEFAULT_FETCH_LIMIT = 20
MAX_FETCH_LIMIT = 100
DEFAULT_DIVERGENCE_TOLERANCE = 10.0

EARLY_ABANDONMENT_POINT = 25.0
LATE_ABANDONMENT_POINT = 75.0

TIER_RECOMMENDATIONS = {
    PriorityTier.CRITICAL: "Urgent review needed: content may be too complex or unengaging",
    PriorityTier.HIGH: "Consider redesigning the content",
    PriorityTier.MEDIUM: "Review for minor improvements",
    PriorityTier.LOW: "Review the content for possible improvements",
}


@dataclass
class ProblematicContent:
    """Content item flagged for low completion."""

    content_id: str
    title: str
    completion_rate: float
    priority: PriorityTier
    recommendation: str
    avg_abandonment_point: float | None = None
    counter_completion_rate: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for API response."""
        return {
            "contentId": self.content_id,
            "title": self.title,
            "completionRate": self.completion_rate,
            "avgAbandonmentPoint": self.avg_abandonment_point,
            "priority": self.priority.value,
            "recommendation": self.recommendation,
            "counterCompletionRate": self.counter_completion_rate,
        }


def priority_for_rate(completion_rate: float) -> PriorityTier:
    """Map a completion rate (percent) to a priority tier.

    Lower rates never map to a less severe tier.
    """
    if completion_rate < 20:
        return PriorityTier.CRITICAL
    if completion_rate < 40:
        return PriorityTier.HIGH
    if completion_rate < 60:
        return PriorityTier.MEDIUM
    return PriorityTier.LOW


def build_recommendation(priority: PriorityTier, avg_abandonment_point: float | None) -> str:
    """Build the recommendation text for a problematic item.

    Args:
        priority: Tier of the item.
        avg_abandonment_point: Mean progress at abandon actions, if any.

    Returns:
        Recommendation sentence(s).
    """
    parts = [TIER_RECOMMENDATIONS[priority]]

    if avg_abandonment_point is not None:
        if avg_abandonment_point < EARLY_ABANDONMENT_POINT:
            parts.append("Users abandon early; improve the introduction")
        elif avg_abandonment_point > LATE_ABANDONMENT_POINT:
            parts.append("Users abandon near the end; shorten or strengthen the ending")

    return ". ".join(parts) + "."


def _row_completion_rate(content: ContentRecord, completed_rows: int) -> float:
    """Completed progress rows over the view counter, in percent."""
    if content.view_count <= 0:
        return 0.0
    return completed_rows / content.view_count * 100


class ProblematicContentDetector:
    """Read-side detector of low-completion published content.

    Attributes:
        repository: Storage port.
        default_threshold: Threshold (percent) used by identify_problematic_content
            callers that pass no value.
        fetch_limit: Candidate fetch bound used by identify_problematic_content.
        divergence_tolerance: Percentage points between the row-derived and
            counter-derived rates above which a warning is logged.
    """

    def __init__(
        self,
        repository: ContentRepository,
        default_threshold: float = DEFAULT_THRESHOLD,
        fetch_limit: int = DEFAULT_FETCH_LIMIT,
        divergence_tolerance: float = DEFAULT_DIVERGENCE_TOLERANCE,
    ) -> None:
        self.repository = repository
        self.default_threshold = default_threshold
        self.fetch_limit = fetch_limit
        self.divergence_tolerance = divergence_tolerance

    async def find_problematic_content(
        self,
        threshold_percent: float | None = None,
        limit: int | None = None,
    ) -> list[ProblematicContent]:
        """Find published content whose completion rate is below a threshold.

        Args:
            threshold_percent: Completion-rate cutoff in [0, 100].
            limit: Maximum number of published items considered, 1 to MAX_FETCH_LIMIT.

        Returns:
            Problematic items, sorted by completion rate ascending.

        Raises:
            ValidationError: If threshold or limit is out of range.
            PersistenceError: On storage failure.
        """
        if threshold_percent is None:
            threshold_percent = self.default_threshold
        if limit is None:
            limit = self.fetch_limit

        if not 0 <= threshold_percent <= 100:
            raise ValidationError(
                "threshold must be between 0 and 100",
                field="threshold",
                details={"value": threshold_percent},
            )
        if not 1 <= limit <= MAX_FETCH_LIMIT:
            raise ValidationError(
                f"limit must be between 1 and {MAX_FETCH_LIMIT}",
                field="limit",
                details={"value": limit},
            )

        contents = await self.repository.query_published_content(limit)
        completed = await self._completed_counts(contents)

        flagged: list[tuple[ContentRecord, float]] = []
        for content in contents:
            completion_rate = _row_completion_rate(content, completed[content.id])
            self._check_divergence(content, completion_rate)
            if completion_rate < threshold_percent:
                flagged.append((content, completion_rate))

        abandons = await self._abandon_logs([content.id for content, _ in flagged])

        results: list[ProblematicContent] = []
        for content, completion_rate in flagged:
            avg_point = average_abandonment_point(abandons[content.id])
            priority = priority_for_rate(completion_rate)

            results.append(
                ProblematicContent(
                    content_id=content.id,
                    title=content.title,
                    completion_rate=completion_rate,
                    priority=priority,
                    recommendation=build_recommendation(priority, avg_point),
                    avg_abandonment_point=avg_point,
                    counter_completion_rate=content.counter_completion_rate,
                )
            )

        results.sort(key=lambda item: item.completion_rate)

        logger.info(
            "Problematic content: threshold=%.1f, fetched=%d, flagged=%d",
            threshold_percent,
            len(contents),
            len(results),
        )
        return results

    async def identify_problematic_content(
        self,
        threshold: float | None = None,
    ) -> list[ProblematicContent]:
        """Find problematic content with the threshold given as a fraction.

        Args:
            threshold: Completion-rate cutoff in [0, 1]; defaults to the
                configured threshold.

        Returns:
            Problematic items, as find_problematic_content.

        Raises:
            ValidationError: If threshold is outside [0, 1].
        """
        if threshold is None:
            return await self.find_problematic_content(self.default_threshold, self.fetch_limit)

        if not 0 <= threshold <= 1:
            raise ValidationError(
                "threshold must be between 0 and 1",
                field="threshold",
                details={"value": threshold},
            )
        return await self.find_problematic_content(threshold * 100, self.fetch_limit)

    async def _completed_counts(self, contents: list[ContentRecord]) -> Counter[str]:
        """Count COMPLETED progress rows per viewed content item in one query."""
        viewed = [content.id for content in contents if content.view_count > 0]
        if not viewed:
            return Counter()
        rows = await self.repository.query_progress_by_contents(
            viewed,
            ProgressStatus.COMPLETED,
        )
        return Counter(row.content_id for row in rows)

    async def _abandon_logs(self, content_ids: list[str]) -> dict[str, list[InteractionLog]]:
        """Group abandon rows of the given content items in one query."""
        grouped: dict[str, list[InteractionLog]] = defaultdict(list)
        if not content_ids:
            return grouped
        logs = await self.repository.query_interaction_logs_by_contents(
            content_ids,
            InteractionAction.ABANDON,
        )
        for log in logs:
            grouped[log.content_id].append(log)
        return grouped

    def _check_divergence(self, content: ContentRecord, completion_rate: float) -> None:
        """Log a warning when the counters disagree with the progress rows."""
        counter_rate = content.counter_completion_rate
        if abs(counter_rate - completion_rate) > self.divergence_tolerance:
            logger.warning(
                "Completion rate divergence: content=%s, rows=%.1f, counters=%.1f",
                content.id,
                completion_rate,
                counter_rate,
            )
