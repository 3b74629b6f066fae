# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pytest configuration and shared fixtures.

This module provides fixtures used across all test types:
- Unit tests
- Integration tests
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from edupulse.domains.content import ContentRecord, TopicRecord


# =============================================================================
# Marker Configuration
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )


# =============================================================================
# Repository Fixtures
# =============================================================================


@asynccontextmanager
async def _transaction() -> AsyncIterator[None]:
    yield


@pytest.fixture
def mock_repository():
    """Create a mock content repository.

    Every query method is an AsyncMock; transaction() returns a no-op
    async context manager so its use can be asserted.
    """
    repository = AsyncMock()
    repository.transaction = MagicMock(side_effect=lambda: _transaction())
    return repository


# =============================================================================
# Helper Fixtures
# =============================================================================


@pytest.fixture
def sample_user_id() -> str:
    """Provide a sample user ID for testing."""
    return "550e8400-e29b-41d4-a716-446655440001"


@pytest.fixture
def sample_content_id() -> str:
    """Provide a sample content ID for testing."""
    return "550e8400-e29b-41d4-a716-446655440002"


@pytest.fixture
def sample_topic_id() -> str:
    """Provide a sample topic ID for testing."""
    return "550e8400-e29b-41d4-a716-446655440003"


@pytest.fixture
def sample_content(sample_content_id) -> ContentRecord:
    """Provide a published content item with 100 views and 20 completions."""
    return ContentRecord(
        id=sample_content_id,
        title="Fractions for Beginners",
        view_count=100,
        completion_count=20,
        rating_average=4.0,
        rating_count=12,
    )


@pytest.fixture
def sample_topic(sample_topic_id) -> TopicRecord:
    """Provide a sample topic."""
    return TopicRecord(id=sample_topic_id, name="Mathematics", slug="mathematics")


@pytest.fixture
def fixed_now() -> datetime:
    """Provide a fixed UTC timestamp."""
    return datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)
