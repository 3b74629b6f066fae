# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for the SQLAlchemy content repository.

The session is mocked; statements are compiled against the PostgreSQL
dialect to check the emitted SQL.
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.dialects import postgresql
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError

from edupulse.core.exceptions import NotFoundError, PersistenceError
from edupulse.domains.content import (
    DeviceType,
    InteractionAction,
    ProgressStatus,
)
from edupulse.infrastructure.database.models import (
    Content,
    ContentInteractionLog,
    ContentProgress,
)
from edupulse.infrastructure.database.repositories.content import (
    SQLAlchemyContentRepository,
    status_from_storage,
    status_to_storage,
)

NOW = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


def compile_pg(stmt) -> str:
    """Compile a statement for PostgreSQL."""
    return str(stmt.compile(dialect=postgresql.dialect()))


class DriverIntegrityError(Exception):
    """Stand-in for a DBAPI integrity error carrying a SQLSTATE."""

    def __init__(self, sqlstate: str):
        super().__init__(f"sqlstate {sqlstate}")
        self.sqlstate = sqlstate


def integrity_error(sqlstate: str) -> IntegrityError:
    """Build the SQLAlchemy wrapper raised for a constraint violation."""
    return IntegrityError("INSERT", {}, DriverIntegrityError(sqlstate))


@pytest.fixture
def session():
    """Create a mock AsyncSession."""
    session = AsyncMock()
    session.add = MagicMock()
    session.in_transaction = MagicMock(return_value=False)
    return session


@pytest.fixture
def repository(session):
    """Create a repository over the mock session."""
    return SQLAlchemyContentRepository(session)


class TestStatusSpelling:
    """Tests for progress status normalization."""

    def test_status_stored_upper_case(self):
        """Test that statuses are written upper-case."""
        assert status_to_storage(ProgressStatus.IN_PROGRESS) == "IN_PROGRESS"

    @pytest.mark.parametrize("stored", ["COMPLETED", "completed", " Completed "])
    def test_status_read_in_any_case(self, stored):
        """Test that stored statuses are read regardless of case."""
        assert status_from_storage(stored) is ProgressStatus.COMPLETED

    def test_dashed_status_read(self):
        """Test that dashed spellings are accepted."""
        assert status_from_storage("in-progress") is ProgressStatus.IN_PROGRESS


class TestUpsertProgress:
    """Tests for the progress upsert statement."""

    @pytest.mark.asyncio
    async def test_single_insert_on_conflict_statement(self, repository, session):
        """Test that the upsert is one INSERT ... ON CONFLICT DO UPDATE."""
        result = MagicMock()
        result.scalars.return_value.one.return_value = ContentProgress(
            user_id="u-1",
            content_id="c-1",
            status="COMPLETED",
            progress_percentage=50,
            time_spent_seconds=0,
            last_position_seconds=0,
            first_accessed_at=NOW,
            last_accessed_at=NOW,
            completed_at=NOW,
        )
        session.execute.return_value = result

        record = await repository.upsert_progress(
            "u-1",
            "c-1",
            {"status": ProgressStatus.COMPLETED, "first_accessed_at": NOW, "last_accessed_at": NOW},
            {"status": ProgressStatus.COMPLETED, "last_accessed_at": NOW, "completed_at": NOW},
        )

        session.execute.assert_awaited_once()
        stmt = session.execute.await_args.args[0]
        sql = compile_pg(stmt)
        assert "ON CONFLICT ON CONSTRAINT uq_content_progress_user_content DO UPDATE" in sql
        assert "RETURNING" in sql
        assert "COMPLETED" in stmt.compile(dialect=postgresql.dialect()).params.values()

        assert record.status is ProgressStatus.COMPLETED
        assert record.progress_percentage == 50.0
        assert record.completed_at == NOW

    @pytest.mark.asyncio
    async def test_upsert_failure_wrapped(self, repository, session):
        """Test that a driver failure surfaces as PersistenceError."""
        error = OperationalError("INSERT", {}, Exception("connection lost"))
        session.execute.side_effect = error

        with pytest.raises(PersistenceError) as exc_info:
            await repository.upsert_progress(
                "u-1", "c-1", {"last_accessed_at": NOW}, {"last_accessed_at": NOW}
            )

        assert exc_info.value.original_error is error


class TestQueries:
    """Tests for read queries."""

    @pytest.mark.asyncio
    async def test_get_content_maps_record(self, repository, session):
        """Test that a content row maps to a ContentRecord."""
        session.get.return_value = Content(
            id="c-1",
            title="Fractions",
            view_count=10,
            completion_count=None,
            rating_count=0,
            is_published=True,
        )

        record = await repository.get_content("c-1")

        assert record.title == "Fractions"
        assert record.completion_count == 0

    @pytest.mark.asyncio
    async def test_get_content_missing(self, repository, session):
        """Test that a missing row maps to None."""
        session.get.return_value = None

        assert await repository.get_content("missing") is None

    @pytest.mark.asyncio
    async def test_read_failure_wrapped(self, repository, session):
        """Test that SQLAlchemy errors on reads become PersistenceError."""
        session.get.side_effect = SQLAlchemyError("boom")

        with pytest.raises(PersistenceError):
            await repository.get_topic("t-1")

    @pytest.mark.asyncio
    async def test_progress_status_filter_uses_stored_spelling(self, repository, session):
        """Test that the status filter compares against the upper-case value."""
        result = MagicMock()
        result.scalars.return_value.all.return_value = []
        session.execute.return_value = result

        await repository.query_progress_by_content("c-1", ProgressStatus.COMPLETED)

        stmt = session.execute.await_args.args[0]
        assert "COMPLETED" in stmt.compile(dialect=postgresql.dialect()).params.values()

    @pytest.mark.asyncio
    async def test_progress_for_several_contents_single_statement(self, repository, session):
        """Test that batched progress reads use one IN query."""
        result = MagicMock()
        result.scalars.return_value.all.return_value = []
        session.execute.return_value = result

        await repository.query_progress_by_contents(["c-1", "c-2"], ProgressStatus.COMPLETED)

        session.execute.assert_awaited_once()
        sql = compile_pg(session.execute.await_args.args[0])
        assert "content_progress.content_id IN" in sql

    @pytest.mark.asyncio
    async def test_batched_reads_skip_empty_id_list(self, repository, session):
        """Test that no statement is issued for an empty id list."""
        assert await repository.query_progress_by_contents([]) == []
        assert await repository.query_interaction_logs_by_contents([]) == []

        session.execute.assert_not_called()

    @pytest.mark.asyncio
    async def test_interaction_rows_normalized(self, repository, session):
        """Test that stored enum spellings map to domain enums."""
        result = MagicMock()
        result.scalars.return_value.all.return_value = [
            ContentInteractionLog(
                id="log-1",
                user_id="u-1",
                content_id="c-1",
                session_id="s-1",
                action="ABANDON",
                action_timestamp=NOW,
                device_type="Mobile",
                extra_data=None,
            )
        ]
        session.execute.return_value = result

        logs = await repository.query_interaction_logs_by_content("c-1")

        assert logs[0].action is InteractionAction.ABANDON
        assert logs[0].device_type is DeviceType.MOBILE
        assert logs[0].metadata == {}


class TestInteractionWrites:
    """Tests for interaction log inserts."""

    @pytest.mark.asyncio
    async def test_batch_insert_single_execute(self, repository, session):
        """Test that a batch is written with one executemany call."""
        rows = [
            {
                "user_id": "u-1",
                "content_id": "c-1",
                "session_id": "s-1",
                "action": InteractionAction.START,
                "device_type": DeviceType.TABLET,
                "metadata": {"page": 1},
            },
            {
                "user_id": "u-2",
                "content_id": "c-1",
                "session_id": "s-2",
                "action": InteractionAction.ABANDON,
            },
        ]

        await repository.insert_interaction_logs_batch(rows, NOW)

        session.execute.assert_awaited_once()
        params = session.execute.await_args.args[1]
        assert [p["action"] for p in params] == ["start", "abandon"]
        assert params[0]["device_type"] == "tablet"
        assert params[0]["extra_data"] == {"page": 1}
        assert params[1]["extra_data"] == {}
        assert all(p["action_timestamp"] == NOW for p in params)

    @pytest.mark.asyncio
    async def test_empty_batch_skips_execute(self, repository, session):
        """Test that an empty batch issues no statement."""
        await repository.insert_interaction_logs_batch([], NOW)

        session.execute.assert_not_called()


class TestTransaction:
    """Tests for transaction scoping."""

    @pytest.mark.asyncio
    async def test_begins_transaction_when_none_open(self, repository, session):
        """Test that a new transaction is begun on an idle session."""
        entered = []

        @asynccontextmanager
        async def scope():
            entered.append(True)
            yield

        session.begin = MagicMock(side_effect=lambda: scope())
        session.begin_nested = MagicMock()

        async with repository.transaction():
            pass

        assert entered == [True]
        session.begin_nested.assert_not_called()

    @pytest.mark.asyncio
    async def test_uses_savepoint_inside_open_transaction(self, repository, session):
        """Test that a savepoint is used when a transaction is already open."""

        @asynccontextmanager
        async def scope():
            yield

        session.in_transaction.return_value = True
        session.begin = MagicMock()
        session.begin_nested = MagicMock(side_effect=lambda: scope())

        async with repository.transaction():
            pass

        session.begin_nested.assert_called_once()
        session.begin.assert_not_called()

    @pytest.mark.asyncio
    async def test_commit_failure_wrapped(self, repository, session):
        """Test that a failing commit surfaces as PersistenceError."""

        @asynccontextmanager
        async def scope():
            yield
            raise SQLAlchemyError("commit failed")

        session.begin = MagicMock(side_effect=lambda: scope())

        with pytest.raises(PersistenceError):
            async with repository.transaction():
                pass


class TestForeignKeyViolations:
    """Tests for writes that reference missing content."""

    @pytest.mark.asyncio
    async def test_interaction_for_unknown_content_not_found(self, repository, session):
        """Test that a foreign-key violation surfaces as NotFoundError."""
        session.flush.side_effect = integrity_error("23503")

        with pytest.raises(NotFoundError) as exc_info:
            await repository.insert_interaction_log(
                {
                    "user_id": "u-1",
                    "content_id": "c-404",
                    "session_id": "s-1",
                    "action": InteractionAction.START,
                },
                NOW,
            )

        assert exc_info.value.entity == "content"
        assert exc_info.value.entity_id == "c-404"

    @pytest.mark.asyncio
    async def test_progress_for_unknown_content_not_found(self, repository, session):
        """Test that the upsert maps a foreign-key violation to NotFoundError."""
        session.execute.side_effect = integrity_error("23503")

        with pytest.raises(NotFoundError):
            await repository.upsert_progress(
                "u-1", "c-404", {"last_accessed_at": NOW}, {"last_accessed_at": NOW}
            )

    @pytest.mark.asyncio
    async def test_batch_names_every_content_id(self, repository, session):
        """Test that a failed batch reports the distinct content ids."""
        session.execute.side_effect = integrity_error("23503")
        rows = [
            {
                "user_id": "u-1",
                "content_id": cid,
                "session_id": "s-1",
                "action": InteractionAction.START,
            }
            for cid in ("c-2", "c-1", "c-2")
        ]

        with pytest.raises(NotFoundError) as exc_info:
            await repository.insert_interaction_logs_batch(rows, NOW)

        assert exc_info.value.entity_id == "c-1, c-2"

    @pytest.mark.asyncio
    async def test_other_integrity_errors_stay_persistence_errors(self, repository, session):
        """Test that a unique violation is still a storage failure."""
        error = integrity_error("23505")
        session.execute.side_effect = error

        with pytest.raises(PersistenceError) as exc_info:
            await repository.upsert_progress(
                "u-1", "c-1", {"last_accessed_at": NOW}, {"last_accessed_at": NOW}
            )

        assert exc_info.value.original_error is error
