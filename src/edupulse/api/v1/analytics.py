# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Content analytics API endpoints.

This module provides read-only analytics endpoints:
- GET /content/{content_id} - Per-item engagement analytics
- GET /content/{content_id}/abandonment - Abandonment analytics
- GET /topics/{topic_id}/effectiveness - Topic effectiveness analytics
- GET /problematic - Published content with low completion

Example:
    GET /api/v1/analytics/problematic?threshold=40&limit=20
"""

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query

from edupulse.api.dependencies import (
    get_abandonment_analyzer,
    get_content_analyzer,
    get_effectiveness_analyzer,
    get_problematic_content_detector,
)
from edupulse.api.v1.errors import to_http_exception
from edupulse.core.exceptions import EduPulseError
from edupulse.domains.analytics import (
    AbandonmentAnalyzer,
    ContentAnalyzer,
    EffectivenessAnalyzer,
    ProblematicContentDetector,
)
from edupulse.domains.analytics.problematic import MAX_FETCH_LIMIT

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/content/{content_id}", summary="Get content analytics")
async def get_content_analytics(
    content_id: str,
    analyzer: ContentAnalyzer = Depends(get_content_analyzer),
) -> dict[str, Any]:
    """Get engagement analytics for a content item.

    Raises:
        HTTPException: 404 for unknown content.
    """
    try:
        analytics = await analyzer.get_content_analytics(content_id)
    except EduPulseError as e:
        raise to_http_exception(e) from e

    return analytics.to_dict()


@router.get("/content/{content_id}/abandonment", summary="Get abandonment analytics")
async def get_abandonment_analytics(
    content_id: str,
    analyzer: AbandonmentAnalyzer = Depends(get_abandonment_analyzer),
) -> dict[str, Any]:
    """Get abandonment analytics; zero-valued for content without interactions."""
    try:
        analytics = await analyzer.get_abandonment_analytics(content_id)
    except EduPulseError as e:
        raise to_http_exception(e) from e

    return analytics.to_dict()


@router.get("/topics/{topic_id}/effectiveness", summary="Get topic effectiveness")
async def get_effectiveness_analytics(
    topic_id: str,
    analyzer: EffectivenessAnalyzer = Depends(get_effectiveness_analyzer),
) -> dict[str, Any]:
    """Get effectiveness analytics for a topic.

    Raises:
        HTTPException: 404 for unknown topic.
    """
    try:
        analytics = await analyzer.get_effectiveness_analytics(topic_id)
    except EduPulseError as e:
        raise to_http_exception(e) from e

    return analytics.to_dict()


@router.get("/problematic", summary="Find problematic content")
async def find_problematic_content(
    threshold: Annotated[float | None, Query(description="Completion-rate cutoff 0-100")] = None,
    limit: Annotated[
        int | None,
        Query(ge=1, le=MAX_FETCH_LIMIT, description="Published items considered"),
    ] = None,
    detector: ProblematicContentDetector = Depends(get_problematic_content_detector),
) -> list[dict[str, Any]]:
    """Find published content whose completion rate is below the threshold.

    Omitted parameters use the configured defaults.

    Raises:
        HTTPException: 400 if threshold is out of range, 422 if limit is.
    """
    try:
        items = await detector.find_problematic_content(threshold, limit)
    except EduPulseError as e:
        raise to_http_exception(e) from e

    return [item.to_dict() for item in items]
