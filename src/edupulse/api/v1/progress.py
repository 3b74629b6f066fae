# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Content progress API endpoints.

This module provides endpoints for per-user content progress:
- PUT /content/{content_id}/progress - Report progress for a user
- POST /content/progress/bulk - Report several progress entries atomically
- GET /content/{content_id}/progress/{user_id} - Get one progress row
- GET /users/{user_id}/progress - List a user's progress

Example:
    PUT /api/v1/content/c-1/progress
    {"user_id": "u-1", "status": "in_progress", "progress_percentage": 50}
"""

import logging
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field

from edupulse.api.dependencies import get_progress_tracker
from edupulse.api.v1.errors import to_http_exception
from edupulse.core.exceptions import EduPulseError
from edupulse.domains.content import BulkProgressEntry, ProgressTracker, ProgressUpdate

logger = logging.getLogger(__name__)

router = APIRouter()


# ============================================================================
# Request / Response Models
# ============================================================================


class ProgressFields(BaseModel):
    """Progress fields shared by single and bulk reports.

    Omitted fields keep their stored value.
    """

    status: str | None = Field(None, description="not_started, in_progress, completed or paused")
    progress_percentage: float | None = Field(None, description="Progress 0-100")
    time_spent_seconds: int | None = Field(None, description="Total time spent in seconds")
    last_position_seconds: int | None = Field(None, description="Playback/reading position")
    completion_rating: int | None = Field(None, description="Rating 1-5")
    completion_feedback: str | None = Field(None, description="Free-text feedback")

    def to_update(self) -> ProgressUpdate:
        """Convert to the domain progress update."""
        return ProgressUpdate(
            status=self.status,
            progress_percentage=self.progress_percentage,
            time_spent_seconds=self.time_spent_seconds,
            last_position_seconds=self.last_position_seconds,
            completion_rating=self.completion_rating,
            completion_feedback=self.completion_feedback,
        )


class TrackProgressRequest(ProgressFields):
    """Progress report for one user on the content item in the path."""

    user_id: str = Field(description="User ID")


class BulkProgressItem(ProgressFields):
    """One entry of a bulk progress report."""

    user_id: str = Field(description="User ID")
    content_id: str = Field(description="Content ID")


class BulkProgressRequest(BaseModel):
    """Bulk progress report."""

    entries: list[BulkProgressItem] = Field(description="Progress entries")


class BulkProgressResponse(BaseModel):
    """Bulk progress result."""

    processed: int = Field(description="Number of progress rows written")


class ProgressResponse(BaseModel):
    """Progress of a user on a content item."""

    content_id: str = Field(description="Content ID")
    title: str = Field(description="Content title")
    status: str = Field(description="Progress status")
    progress_percentage: float = Field(description="Progress 0-100")
    time_spent_seconds: int = Field(description="Total time spent")
    last_position_seconds: int = Field(description="Last position")
    first_accessed_at: datetime | None = Field(None, description="First access time")
    last_accessed_at: datetime | None = Field(None, description="Last access time")
    completed_at: datetime | None = Field(None, description="Completion time")
    completion_rating: int | None = Field(None, description="Rating 1-5")
    completion_feedback: str | None = Field(None, description="Feedback")


# ============================================================================
# Endpoints
# ============================================================================


@router.put(
    "/content/{content_id}/progress",
    response_model=ProgressResponse,
    summary="Track progress",
    description="Create or update a user's progress on a content item.",
)
async def track_progress(
    content_id: str,
    data: TrackProgressRequest,
    tracker: ProgressTracker = Depends(get_progress_tracker),
) -> ProgressResponse:
    """Track progress for a user on a content item.

    Args:
        content_id: Content ID from path.
        data: Progress report.
        tracker: Progress tracker service.

    Returns:
        Progress after the update.

    Raises:
        HTTPException: 400 on invalid input, 404 for unknown content.
    """
    try:
        progress = await tracker.track_progress(data.user_id, content_id, data.to_update())
    except EduPulseError as e:
        raise to_http_exception(e) from e

    return ProgressResponse(**progress.to_dict())


@router.post(
    "/content/progress/bulk",
    response_model=BulkProgressResponse,
    summary="Bulk track progress",
    description="Apply several progress reports in one transaction.",
)
async def bulk_track_progress(
    data: BulkProgressRequest,
    tracker: ProgressTracker = Depends(get_progress_tracker),
) -> BulkProgressResponse:
    """Apply several progress reports atomically."""
    entries = [
        BulkProgressEntry(
            user_id=item.user_id,
            content_id=item.content_id,
            update=item.to_update(),
        )
        for item in data.entries
    ]

    try:
        processed = await tracker.bulk_track_progress(entries)
    except EduPulseError as e:
        raise to_http_exception(e) from e

    return BulkProgressResponse(processed=processed)


@router.get(
    "/content/{content_id}/progress/{user_id}",
    response_model=ProgressResponse,
    summary="Get progress",
)
async def get_progress(
    content_id: str,
    user_id: str,
    tracker: ProgressTracker = Depends(get_progress_tracker),
) -> ProgressResponse:
    """Get a user's progress on a content item.

    Raises:
        HTTPException: 404 if the user has no progress on the item.
    """
    try:
        progress = await tracker.get_progress(user_id, content_id)
    except EduPulseError as e:
        raise to_http_exception(e) from e

    if progress is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Progress not found",
        )
    return ProgressResponse(**progress.to_dict())


@router.get(
    "/users/{user_id}/progress",
    response_model=list[ProgressResponse],
    summary="List user progress",
    description="List a user's progress, most recently accessed first.",
)
async def get_progress_history(
    user_id: str,
    progress_status: str | None = Query(None, alias="status", description="Status filter"),
    tracker: ProgressTracker = Depends(get_progress_tracker),
) -> list[ProgressResponse]:
    """List a user's progress, optionally filtered by status."""
    try:
        history = await tracker.get_progress_history(user_id, progress_status)
    except EduPulseError as e:
        raise to_http_exception(e) from e

    return [ProgressResponse(**progress.to_dict()) for progress in history]
