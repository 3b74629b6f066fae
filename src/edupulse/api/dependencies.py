# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""FastAPI dependency injection definitions.

This module provides dependency functions for FastAPI endpoints.
Dependencies are used to:
- Get the Database handle created at startup
- Get a request-scoped database session and repository
- Get service instances bound to that repository

Example:
    @router.get("/analytics/content/{content_id}")
    async def content_analytics(
        content_id: str,
        analyzer: ContentAnalyzer = Depends(get_content_analyzer),
    ):
        ...
"""

import logging
from typing import AsyncGenerator

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from edupulse.core.config import Settings, get_settings
from edupulse.domains.analytics import (
    AbandonmentAnalyzer,
    ContentAnalyzer,
    EffectivenessAnalyzer,
    ProblematicContentDetector,
)
from edupulse.domains.content import (
    ContentRepository,
    InteractionLogger,
    ProgressTracker,
)
from edupulse.infrastructure.database import Database, SQLAlchemyContentRepository

logger = logging.getLogger(__name__)


def get_database(request: Request) -> Database:
    """Get the Database handle stored on application state.

    Args:
        request: HTTP request.

    Returns:
        Database created during application startup.

    Raises:
        HTTPException: If the database has not been initialized.
    """
    database: Database | None = getattr(request.app.state, "database", None)
    if database is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database not initialized",
        )
    return database


async def get_db(
    database: Database = Depends(get_database),
) -> AsyncGenerator[AsyncSession, None]:
    """Get a database session for the current request.

    Committed when the request succeeds, rolled back otherwise.

    Yields:
        AsyncSession for the request.
    """
    async with database.session() as session:
        yield session


def get_repository(db: AsyncSession = Depends(get_db)) -> ContentRepository:
    """Get the content repository bound to the request session."""
    return SQLAlchemyContentRepository(db)


# =========================================================================
# Service Dependencies
# =========================================================================


def get_progress_tracker(
    repository: ContentRepository = Depends(get_repository),
) -> ProgressTracker:
    """Get progress tracker service."""
    return ProgressTracker(repository)


def get_interaction_logger(
    repository: ContentRepository = Depends(get_repository),
) -> InteractionLogger:
    """Get interaction logger service."""
    return InteractionLogger(repository)


def get_abandonment_analyzer(
    repository: ContentRepository = Depends(get_repository),
) -> AbandonmentAnalyzer:
    """Get abandonment analyzer."""
    return AbandonmentAnalyzer(repository)


def get_effectiveness_analyzer(
    repository: ContentRepository = Depends(get_repository),
    settings: Settings = Depends(get_settings),
) -> EffectivenessAnalyzer:
    """Get effectiveness analyzer with the configured ranking size."""
    return EffectivenessAnalyzer(
        repository,
        ranking_size=settings.analytics.engagement_ranking_size,
    )


def get_problematic_content_detector(
    repository: ContentRepository = Depends(get_repository),
    settings: Settings = Depends(get_settings),
) -> ProblematicContentDetector:
    """Get problematic-content detector with configured defaults."""
    return ProblematicContentDetector(
        repository,
        default_threshold=settings.analytics.problematic_threshold,
        fetch_limit=settings.analytics.problematic_fetch_limit,
        divergence_tolerance=settings.analytics.counter_divergence_tolerance,
    )


def get_content_analyzer(
    repository: ContentRepository = Depends(get_repository),
) -> ContentAnalyzer:
    """Get content analyzer."""
    return ContentAnalyzer(repository)
