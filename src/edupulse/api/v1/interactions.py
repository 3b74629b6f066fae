# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Content interaction API endpoints.

This module provides endpoints for the interaction log:
- POST /interactions - Log one interaction
- POST /interactions/bulk - Log several interactions atomically
- GET /content/{content_id}/interactions - Interactions for a content item
- GET /users/{user_id}/interactions - Interactions of a user
"""

import logging
from datetime import datetime
from typing import Any

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field

from edupulse.api.dependencies import get_interaction_logger
from edupulse.api.v1.errors import to_http_exception
from edupulse.core.exceptions import EduPulseError
from edupulse.domains.content import InteractionEvent, InteractionLog, InteractionLogger

logger = logging.getLogger(__name__)

router = APIRouter()


# ============================================================================
# Request / Response Models
# ============================================================================


class InteractionRequest(BaseModel):
    """Interaction reported by a client."""

    user_id: str = Field(description="User ID")
    content_id: str = Field(description="Content ID")
    action: str = Field(description="start, pause, resume, complete or abandon")
    session_id: str | None = Field(None, description="Client session ID; generated if omitted")
    progress_at_action: float | None = Field(None, description="Progress 0-100 at the action")
    time_spent_seconds: int | None = Field(None, description="Time spent so far")
    device_type: str | None = Field(None, description="mobile, tablet or desktop")
    platform: str | None = Field(None, description="ios, android or web")
    abandonment_reason: str | None = Field(None, description="Only with the abandon action")
    came_from: str | None = Field(None, description="Navigation origin")
    search_query: str | None = Field(None, description="Search query that led to the content")
    topic_id: str | None = Field(None, description="Topic the content was opened from")
    recommendation_source: str | None = Field(None, description="Recommendation source")
    metadata: dict[str, Any] = Field(default_factory=dict, description="Free-form metadata")

    def to_event(self) -> InteractionEvent:
        """Convert to the domain event, folding context fields into metadata."""
        metadata = dict(self.metadata)
        for key in ("search_query", "topic_id", "recommendation_source"):
            value = getattr(self, key)
            if value is not None:
                metadata[key] = value

        return InteractionEvent(
            user_id=self.user_id,
            content_id=self.content_id,
            action=self.action,
            session_id=self.session_id,
            progress_at_action=self.progress_at_action,
            time_spent_seconds=self.time_spent_seconds,
            device_type=self.device_type,
            platform=self.platform,
            abandonment_reason=self.abandonment_reason,
            came_from=self.came_from,
            metadata=metadata,
        )


class BulkInteractionRequest(BaseModel):
    """Bulk interaction report."""

    interactions: list[InteractionRequest] = Field(description="Interactions to log")


class BulkInteractionResponse(BaseModel):
    """Bulk interaction result."""

    processed: int = Field(description="Number of interactions logged")


class InteractionResponse(BaseModel):
    """Persisted interaction log entry."""

    id: str = Field(description="Log entry ID")
    user_id: str = Field(description="User ID")
    content_id: str = Field(description="Content ID")
    session_id: str = Field(description="Session ID")
    action: str = Field(description="Action")
    action_timestamp: datetime = Field(description="Server-side timestamp")
    progress_at_action: float | None = None
    time_spent_seconds: int | None = None
    device_type: str | None = None
    platform: str | None = None
    abandonment_reason: str | None = None
    came_from: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_log(cls, log: InteractionLog) -> "InteractionResponse":
        return cls(**log.to_dict())


# ============================================================================
# Endpoints
# ============================================================================


@router.post(
    "/interactions",
    response_model=InteractionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Log interaction",
)
async def log_interaction(
    data: InteractionRequest,
    interaction_logger: InteractionLogger = Depends(get_interaction_logger),
) -> InteractionResponse:
    """Log a single interaction event.

    Raises:
        HTTPException: 400 on invalid input.
    """
    try:
        log = await interaction_logger.log_interaction(data.to_event())
    except EduPulseError as e:
        raise to_http_exception(e) from e

    return InteractionResponse.from_log(log)


@router.post(
    "/interactions/bulk",
    response_model=BulkInteractionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Bulk log interactions",
    description="Log several interactions; an invalid entry rejects the whole batch.",
)
async def bulk_log_interactions(
    data: BulkInteractionRequest,
    interaction_logger: InteractionLogger = Depends(get_interaction_logger),
) -> BulkInteractionResponse:
    """Log several interaction events atomically."""
    try:
        processed = await interaction_logger.bulk_log_interactions(
            [item.to_event() for item in data.interactions]
        )
    except EduPulseError as e:
        raise to_http_exception(e) from e

    return BulkInteractionResponse(processed=processed)


@router.get(
    "/content/{content_id}/interactions",
    response_model=list[InteractionResponse],
    summary="List content interactions",
)
async def get_content_interactions(
    content_id: str,
    action: str | None = Query(None, description="Action filter"),
    interaction_logger: InteractionLogger = Depends(get_interaction_logger),
) -> list[InteractionResponse]:
    """List interactions recorded for a content item, newest first."""
    try:
        logs = await interaction_logger.get_content_interactions(content_id, action)
    except EduPulseError as e:
        raise to_http_exception(e) from e

    return [InteractionResponse.from_log(log) for log in logs]


@router.get(
    "/users/{user_id}/interactions",
    response_model=list[InteractionResponse],
    summary="List user interactions",
)
async def get_user_interactions(
    user_id: str,
    content_id: str | None = Query(None, description="Content filter"),
    interaction_logger: InteractionLogger = Depends(get_interaction_logger),
) -> list[InteractionResponse]:
    """List a user's interactions, newest first."""
    try:
        logs = await interaction_logger.get_user_interactions(user_id, content_id)
    except EduPulseError as e:
        raise to_http_exception(e) from e

    return [InteractionResponse.from_log(log) for log in logs]
