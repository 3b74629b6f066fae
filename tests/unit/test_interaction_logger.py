# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for the interaction logger."""

from datetime import datetime, timezone
from unittest.mock import patch

import pytest

from edupulse.core.exceptions import ValidationError
from edupulse.domains.content import (
    AbandonmentReason,
    DeviceType,
    InteractionAction,
    InteractionEvent,
    InteractionLog,
    InteractionLogger,
)

NOW = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def interaction_logger(mock_repository):
    """Create interaction logger whose repository echoes inserted rows."""

    async def insert(values, action_timestamp):
        return InteractionLog(id="log-1", action_timestamp=action_timestamp, **values)

    mock_repository.insert_interaction_log.side_effect = insert
    return InteractionLogger(mock_repository)


def make_event(**overrides) -> InteractionEvent:
    """Build a valid interaction event with optional overrides."""
    values = {
        "user_id": "user-1",
        "content_id": "content-1",
        "action": "start",
    }
    values.update(overrides)
    return InteractionEvent(**values)


class TestLogInteraction:
    """Tests for single interaction logging."""

    @pytest.mark.asyncio
    async def test_logs_with_server_timestamp(self, interaction_logger, mock_repository):
        """Test that the row gets the server-side timestamp."""
        with patch("edupulse.domains.content.interactions.utc_now", return_value=NOW):
            log = await interaction_logger.log_interaction(
                make_event(device_type="MOBILE", progress_at_action=12.5)
            )

        assert log.action_timestamp == NOW
        assert log.action == InteractionAction.START
        assert log.device_type == DeviceType.MOBILE
        assert log.progress_at_action == 12.5
        mock_repository.insert_interaction_log.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_session_id_generated_when_missing(self, interaction_logger):
        """Test that a session id is generated when the client sends none."""
        first = await interaction_logger.log_interaction(make_event())
        second = await interaction_logger.log_interaction(make_event(session_id="  "))

        assert first.session_id.startswith("session-")
        assert second.session_id.startswith("session-")
        assert first.session_id != second.session_id

    @pytest.mark.asyncio
    async def test_client_session_id_kept(self, interaction_logger):
        """Test that a client session id is stored as given."""
        log = await interaction_logger.log_interaction(make_event(session_id="abc"))

        assert log.session_id == "abc"

    @pytest.mark.asyncio
    async def test_metadata_persisted_verbatim(self, interaction_logger):
        """Test that metadata is stored without transformation."""
        log = await interaction_logger.log_interaction(
            make_event(metadata={"search_query": "fractions", "page": 2})
        )

        assert log.metadata == {"search_query": "fractions", "page": 2}

    @pytest.mark.asyncio
    async def test_abandonment_reason_with_abandon(self, interaction_logger):
        """Test that abandonment_reason is accepted with the abandon action."""
        log = await interaction_logger.log_interaction(
            make_event(action="abandon", abandonment_reason="lost_interest")
        )

        assert log.abandonment_reason == AbandonmentReason.LOST_INTEREST

    @pytest.mark.asyncio
    async def test_abandonment_reason_rejected_for_other_actions(
        self, interaction_logger, mock_repository
    ):
        """Test that abandonment_reason on a non-abandon action is rejected."""
        with pytest.raises(ValidationError) as exc_info:
            await interaction_logger.log_interaction(
                make_event(action="pause", abandonment_reason="other")
            )

        assert exc_info.value.field == "abandonment_reason"
        mock_repository.insert_interaction_log.assert_not_called()

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "overrides, field",
        [
            ({"user_id": ""}, "user_id"),
            ({"content_id": None}, "content_id"),
            ({"action": None}, "action"),
            ({"action": "rewind"}, "action"),
            ({"device_type": "watch"}, "device_type"),
            ({"progress_at_action": 101}, "progress_at_action"),
            ({"time_spent_seconds": -5}, "time_spent_seconds"),
        ],
    )
    async def test_invalid_event_rejected(
        self, interaction_logger, mock_repository, overrides, field
    ):
        """Test that invalid events fail validation before any write."""
        with pytest.raises(ValidationError) as exc_info:
            await interaction_logger.log_interaction(make_event(**overrides))

        assert exc_info.value.field == field
        mock_repository.insert_interaction_log.assert_not_called()


class TestBulkLogInteractions:
    """Tests for batch interaction logging."""

    @pytest.mark.asyncio
    async def test_batch_written_in_one_statement(self, interaction_logger, mock_repository):
        """Test that a valid batch is written once inside a transaction."""
        events = [make_event(), make_event(action="complete"), make_event(action="abandon")]

        with patch("edupulse.domains.content.interactions.utc_now", return_value=NOW):
            count = await interaction_logger.bulk_log_interactions(events)

        assert count == 3
        mock_repository.transaction.assert_called_once()
        mock_repository.insert_interaction_logs_batch.assert_awaited_once()
        rows, timestamp = mock_repository.insert_interaction_logs_batch.await_args.args
        assert len(rows) == 3
        assert timestamp == NOW
        assert [row["action"] for row in rows] == [
            InteractionAction.START,
            InteractionAction.COMPLETE,
            InteractionAction.ABANDON,
        ]

    @pytest.mark.asyncio
    async def test_one_invalid_event_rejects_batch(self, interaction_logger, mock_repository):
        """Test that a single invalid event rejects the whole batch."""
        events = [make_event(), make_event(user_id=None), make_event()]

        with pytest.raises(ValidationError) as exc_info:
            await interaction_logger.bulk_log_interactions(events)

        assert exc_info.value.details["index"] == 1
        mock_repository.insert_interaction_logs_batch.assert_not_called()
        mock_repository.transaction.assert_not_called()

    @pytest.mark.asyncio
    async def test_empty_batch_rejected(self, interaction_logger):
        """Test that an empty batch is a validation error."""
        with pytest.raises(ValidationError):
            await interaction_logger.bulk_log_interactions([])


class TestInteractionQueries:
    """Tests for interaction read operations."""

    @pytest.mark.asyncio
    async def test_content_interactions_parse_action(self, interaction_logger, mock_repository):
        """Test that the action filter is parsed before querying."""
        mock_repository.query_interaction_logs_by_content.return_value = []

        await interaction_logger.get_content_interactions("content-1", "Abandon")

        mock_repository.query_interaction_logs_by_content.assert_awaited_once_with(
            "content-1", InteractionAction.ABANDON
        )

    @pytest.mark.asyncio
    async def test_user_interactions_optional_content(self, interaction_logger, mock_repository):
        """Test that the user query passes the optional content filter."""
        mock_repository.query_interaction_logs_by_user.return_value = []

        await interaction_logger.get_user_interactions("user-1")

        mock_repository.query_interaction_logs_by_user.assert_awaited_once_with("user-1", None)
