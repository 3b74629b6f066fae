# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Abandonment analytics for a single content item.

All figures are derived from the interaction log at read time:
- totalStarts / totalCompletions: counts of start / complete actions
- completionRate: completions per start, in percent, capped at 100
- avgAbandonmentPoint: mean progress at abandon actions
- abandonmentByDevice: abandon actions grouped by device type

Content without any interaction rows yields zero-valued analytics rather
than NotFoundError, so dashboards render "no data" for it.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from edupulse.domains.content.enums import InteractionAction
from edupulse.domains.content.records import InteractionLog
from edupulse.domains.content.repository import ContentRepository
from edupulse.domains.content.validation import require_id

logger = logging.getLogger(__name__)

UNKNOWN_DEVICE = "unknown"


@dataclass
class AbandonmentAnalytics:
    """Abandonment figures for one content item."""

    content_id: str
    total_starts: int = 0
    total_completions: int = 0
    completion_rate: float = 0.0
    avg_abandonment_point: float = 0.0
    abandonment_by_device: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for API response."""
        return {
            "contentId": self.content_id,
            "totalStarts": self.total_starts,
            "totalCompletions": self.total_completions,
            "completionRate": self.completion_rate,
            "avgAbandonmentPoint": self.avg_abandonment_point,
            "abandonmentByDevice": dict(self.abandonment_by_device),
        }


def average_abandonment_point(logs: Iterable[InteractionLog]) -> float | None:
    """Mean progress_at_action over abandon rows.

    A missing progress value counts as 0.

    Args:
        logs: Interaction log rows for one content item.

    Returns:
        Mean abandonment point, or None when there are no abandon rows.
    """
    points = [
        log.progress_at_action or 0.0
        for log in logs
        if log.action is InteractionAction.ABANDON
    ]
    if not points:
        return None
    return sum(points) / len(points)


def completion_rate(starts: int, completions: int) -> float:
    """Completions per start in percent, within [0, 100].

    The log is stored verbatim, so it can hold more complete than start
    actions (e.g. a start logged on another device before the log
    existed). Such content counts as fully completed.
    """
    if starts <= 0:
        return 0.0
    if completions >= starts:
        return 100.0
    return completions / starts * 100


def summarize_abandonment(
    content_id: str,
    logs: Iterable[InteractionLog],
) -> AbandonmentAnalytics:
    """Aggregate interaction log rows into abandonment analytics.

    Args:
        content_id: Content the rows belong to.
        logs: Interaction log rows for that content item.

    Returns:
        AbandonmentAnalytics computed from the rows only.
    """
    logs = list(logs)

    starts = sum(1 for log in logs if log.action is InteractionAction.START)
    completions = sum(1 for log in logs if log.action is InteractionAction.COMPLETE)

    by_device: dict[str, int] = {}
    for log in logs:
        if log.action is not InteractionAction.ABANDON:
            continue
        device = log.device_type.value if log.device_type else UNKNOWN_DEVICE
        by_device[device] = by_device.get(device, 0) + 1

    return AbandonmentAnalytics(
        content_id=content_id,
        total_starts=starts,
        total_completions=completions,
        completion_rate=completion_rate(starts, completions),
        avg_abandonment_point=average_abandonment_point(logs) or 0.0,
        abandonment_by_device=by_device,
    )


class AbandonmentAnalyzer:
    """Read-side analyzer over the interaction log."""

    def __init__(self, repository: ContentRepository) -> None:
        self.repository = repository

    async def get_abandonment_analytics(self, content_id: str) -> AbandonmentAnalytics:
        """Get abandonment analytics for a content item.

        Args:
            content_id: Content identifier.

        Returns:
            AbandonmentAnalytics; zero-valued when the item has no interactions.

        Raises:
            ValidationError: If content_id is blank.
            PersistenceError: On storage failure.
        """
        content_id = require_id(content_id, "content_id")

        logs = await self.repository.query_interaction_logs_by_content(content_id)
        analytics = summarize_abandonment(content_id, logs)

        logger.debug(
            "Abandonment analytics: content=%s, starts=%d, completions=%d",
            content_id,
            analytics.total_starts,
            analytics.total_completions,
        )
        return analytics
