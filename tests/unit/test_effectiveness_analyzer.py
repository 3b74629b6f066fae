# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for topic effectiveness analytics."""

import pytest

from edupulse.core.exceptions import NotFoundError
from edupulse.domains.analytics import EffectivenessAnalyzer
from edupulse.domains.content import ContentRecord, ProgressRecord, ProgressStatus


def make_content(content_id, views, completions, rating) -> ContentRecord:
    """Build a content record."""
    return ContentRecord(
        id=content_id,
        title=f"Content {content_id}",
        view_count=views,
        completion_count=completions,
        rating_average=rating,
    )


@pytest.fixture
def topic_contents() -> list[ContentRecord]:
    """Seven content items; b and e share a rating, g has none."""
    return [
        make_content("a", 100, 50, 3.0),
        make_content("b", 200, 20, 4.5),
        make_content("c", 0, 0, 2.0),
        make_content("d", 50, 25, 5.0),
        make_content("e", 10, 1, 4.5),
        make_content("f", 40, 4, 1.0),
        make_content("g", 0, 0, None),
    ]


@pytest.fixture
def analyzer(mock_repository, sample_topic, topic_contents):
    """Create an analyzer over a topic with seven items."""
    mock_repository.get_topic.return_value = sample_topic
    mock_repository.query_content_by_topic.return_value = topic_contents

    mock_repository.query_progress_by_contents.return_value = [
        ProgressRecord("u1", "a", ProgressStatus.COMPLETED, time_spent_seconds=100),
        ProgressRecord("u2", "a", ProgressStatus.IN_PROGRESS, time_spent_seconds=300),
        ProgressRecord("u1", "d", ProgressStatus.PAUSED, time_spent_seconds=200),
    ]
    return EffectivenessAnalyzer(mock_repository)


class TestEffectivenessAnalyzer:
    """Tests for get_effectiveness_analytics."""

    @pytest.mark.asyncio
    async def test_totals(self, analyzer, sample_topic_id):
        """Test totals and the counter-based completion rate."""
        analytics = await analyzer.get_effectiveness_analytics(sample_topic_id)

        assert analytics.topic_name == "Mathematics"
        assert analytics.total_content == 7
        assert analytics.total_views == 400
        assert analytics.total_completions == 100
        assert analytics.average_completion_rate == 25.0

    @pytest.mark.asyncio
    async def test_average_time_spent_over_progress_rows(self, analyzer, sample_topic_id):
        """Test that time spent is averaged over all progress rows of the topic."""
        analytics = await analyzer.get_effectiveness_analytics(sample_topic_id)

        assert analytics.average_time_spent == 200.0

    @pytest.mark.asyncio
    async def test_progress_loaded_in_one_query(
        self, analyzer, mock_repository, sample_topic_id
    ):
        """Test that progress for every item of the topic is fetched at once."""
        await analyzer.get_effectiveness_analytics(sample_topic_id)

        mock_repository.query_progress_by_contents.assert_awaited_once_with(
            ["a", "b", "c", "d", "e", "f", "g"]
        )
        mock_repository.query_progress_by_content.assert_not_called()

    @pytest.mark.asyncio
    async def test_average_rating_treats_missing_as_zero(self, analyzer, sample_topic_id):
        """Test that missing ratings count as 0 in the average."""
        analytics = await analyzer.get_effectiveness_analytics(sample_topic_id)

        assert analytics.average_rating == pytest.approx(20.0 / 7)

    @pytest.mark.asyncio
    async def test_rankings_keep_fetch_order_among_ties(self, analyzer, sample_topic_id):
        """Test top/bottom five by rating with ties in fetch order."""
        analytics = await analyzer.get_effectiveness_analytics(sample_topic_id)

        assert [c.id for c in analytics.most_engaged_content] == ["d", "b", "e", "a", "c"]
        assert [c.id for c in analytics.least_engaged_content] == ["g", "f", "c", "a", "b"]

    @pytest.mark.asyncio
    async def test_ranking_entries_carry_item_completion_rate(self, analyzer, sample_topic_id):
        """Test that each ranked item has its own completion rate."""
        analytics = await analyzer.get_effectiveness_analytics(sample_topic_id)

        by_id = {c.id: c for c in analytics.most_engaged_content}
        assert by_id["d"].completion_rate == 50.0
        assert by_id["c"].completion_rate == 0.0
        assert analytics.least_engaged_content[0].average_rating == 0.0

    @pytest.mark.asyncio
    async def test_ranking_size_configurable(
        self, mock_repository, analyzer, sample_topic_id
    ):
        """Test that the ranking size can be changed."""
        small = EffectivenessAnalyzer(mock_repository, ranking_size=2)

        analytics = await small.get_effectiveness_analytics(sample_topic_id)

        assert len(analytics.most_engaged_content) == 2
        assert len(analytics.least_engaged_content) == 2

    @pytest.mark.asyncio
    async def test_empty_topic(self, mock_repository, sample_topic, sample_topic_id):
        """Test that a topic without content yields zeros."""
        mock_repository.get_topic.return_value = sample_topic
        mock_repository.query_content_by_topic.return_value = []

        analytics = await EffectivenessAnalyzer(mock_repository).get_effectiveness_analytics(
            sample_topic_id
        )

        assert analytics.total_content == 0
        assert analytics.average_completion_rate == 0.0
        assert analytics.average_time_spent == 0.0
        assert analytics.average_rating == 0.0
        assert analytics.most_engaged_content == []

    @pytest.mark.asyncio
    async def test_unknown_topic_raises_not_found(self, mock_repository):
        """Test that an unknown topic raises NotFoundError."""
        mock_repository.get_topic.return_value = None

        with pytest.raises(NotFoundError) as exc_info:
            await EffectivenessAnalyzer(mock_repository).get_effectiveness_analytics("missing")

        assert exc_info.value.entity == "topic"
        mock_repository.query_content_by_topic.assert_not_called()

    @pytest.mark.asyncio
    async def test_to_dict_uses_camel_case_keys(self, analyzer, sample_topic_id):
        """Test the response payload keys."""
        analytics = await analyzer.get_effectiveness_analytics(sample_topic_id)

        payload = analytics.to_dict()

        assert payload["topicId"] == sample_topic_id
        assert set(payload["mostEngagedContent"][0]) == {
            "id",
            "title",
            "completionRate",
            "averageRating",
        }
