"""Tests for calendar invite dispatch log queries."""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.dialects import postgresql

from core.enums import InviteDispatchStatus


def compile_call(mock_conn, index=0):
    stmt = mock_conn.execute.call_args_list[index][0][0]
    return stmt.compile(dialect=postgresql.dialect())


def result_with(row):
    mock_result = MagicMock()
    mock_result.mappings.return_value.first.return_value = row
    return mock_result


class TestClaimDispatch:
    @pytest.mark.asyncio
    async def test_new_key_inserts_pending_row(self):
        from core.queries.invite_dispatches import claim_dispatch

        row = {"dispatch_id": 1, "status": InviteDispatchStatus.pending}
        mock_conn = AsyncMock()
        mock_conn.execute.return_value = result_with(row)

        dispatch, created = await claim_dispatch(
            mock_conn, "t1:req-1", "t1", "u1", ["a@x.com", "b@x.com"]
        )

        assert created is True
        assert dispatch == row
        stmt = compile_call(mock_conn)
        assert "ON CONFLICT (idempotency_key) DO NOTHING" in str(stmt)
        assert stmt.params["recipients"] == "a@x.com, b@x.com"
        assert stmt.params["status"] == InviteDispatchStatus.pending

    @pytest.mark.asyncio
    async def test_existing_key_returns_stored_row(self):
        from core.queries.invite_dispatches import claim_dispatch

        existing = {"dispatch_id": 1, "status": InviteDispatchStatus.sent}
        mock_conn = AsyncMock()
        mock_conn.execute.side_effect = [result_with(None), result_with(existing)]

        dispatch, created = await claim_dispatch(
            mock_conn, "t1:req-1", "t1", "u1", ["a@x.com"]
        )

        assert created is False
        assert dispatch == existing
        assert compile_call(mock_conn, 1).params["idempotency_key_1"] == "t1:req-1"


class TestDispatchTransitions:
    @pytest.mark.asyncio
    async def test_reopen_only_matches_failed_rows(self):
        from core.queries.invite_dispatches import reopen_failed_dispatch

        mock_conn = AsyncMock()
        mock_conn.execute.return_value = result_with(None)

        assert await reopen_failed_dispatch(mock_conn, 3, ["a@x.com"]) is None

        params = compile_call(mock_conn).params
        assert params["status_1"] == InviteDispatchStatus.failed
        assert params["status"] == InviteDispatchStatus.pending
        assert params["error_message"] is None

    @pytest.mark.asyncio
    async def test_mark_sent_stores_message_id(self):
        from core.queries.invite_dispatches import mark_dispatch_sent

        mock_conn = AsyncMock()
        await mark_dispatch_sent(mock_conn, 3, "msg-1")

        params = compile_call(mock_conn).params
        assert params["status"] == InviteDispatchStatus.sent
        assert params["provider_message_id"] == "msg-1"
        assert params["completed_at"] is not None

    @pytest.mark.asyncio
    async def test_mark_failed_stores_error(self):
        from core.queries.invite_dispatches import mark_dispatch_failed

        mock_conn = AsyncMock()
        await mark_dispatch_failed(mock_conn, 3, "SendGrid 500")

        params = compile_call(mock_conn).params
        assert params["status"] == InviteDispatchStatus.failed
        assert params["error_message"] == "SendGrid 500"


class TestStalePending:
    @pytest.mark.asyncio
    async def test_filters_by_age(self):
        from core.queries.invite_dispatches import get_stale_pending_dispatches

        mock_conn = AsyncMock()
        mock_result = MagicMock()
        mock_result.mappings.return_value = [{"dispatch_id": 9}]
        mock_conn.execute.return_value = mock_result

        results = await get_stale_pending_dispatches(
            mock_conn, older_than=timedelta(minutes=30)
        )
        after = datetime.now(timezone.utc)

        assert results == [{"dispatch_id": 9}]
        params = compile_call(mock_conn).params
        assert params["status_1"] == InviteDispatchStatus.pending
        assert params["created_at_1"] <= after - timedelta(minutes=30)
