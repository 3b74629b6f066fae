# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""API v1 routes package.

This package contains all v1 API endpoint definitions.
Each module provides a FastAPI router for a specific domain.

Modules:
    progress: Per-user content progress endpoints.
    interactions: Interaction log endpoints.
    analytics: Abandonment, effectiveness and problematic-content analytics.
"""

from fastapi import APIRouter

from edupulse.api.v1 import analytics, interactions, progress

# Create the main v1 router
router = APIRouter(prefix="/api/v1")

# Include domain routers
router.include_router(progress.router, tags=["Progress"])
router.include_router(interactions.router, tags=["Interactions"])
router.include_router(analytics.router, prefix="/analytics", tags=["Analytics"])

__all__ = ["router"]
