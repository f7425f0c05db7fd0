"""
Unit Tests for Supabase Repositories
Tests query construction and tenant scoping against a mocked client
"""
import pytest
from datetime import datetime
from unittest.mock import MagicMock, call

import pytz
from postgrest.exceptions import APIError

from churchcomm.domain.interfaces.outreach_store import PeopleQuery
from churchcomm.infrastructure.storage import (
    SupabaseChurchMemorySearch,
    SupabaseMemberMemorySearch,
    SupabaseOutreachRepository,
)
from churchcomm.utils.tenant_filter import apply_tenant_filter

NOW = datetime(2024, 6, 15, 17, 0, tzinfo=pytz.UTC)

BUILDER_METHODS = ("select", "insert", "update", "eq", "in_", "gte", "lt", "is_", "order", "limit")


def make_client(data=None):
    """Supabase client whose query builder returns itself for every filter."""
    query = MagicMock()
    for name in BUILDER_METHODS:
        getattr(query, name).return_value = query
    query.not_ = query
    query.execute.return_value = MagicMock(data=data if data is not None else [])

    client = MagicMock()
    client.table.return_value = query
    client.rpc.return_value = query
    return client, query


ATTEMPT_ROW = {
    "id": "a1",
    "organization_id": "org-1",
    "person_id": "p1",
    "script_id": "s1",
    "trigger_type": "birthday",
    "phone_number": "+15551234567",
    "status": "scheduled",
    "recurrence_bucket": "2024-06-15",
    "scheduled_at": "2024-06-15T17:00:00+00:00",
    "created_at": "2024-06-15T17:00:00+00:00",
    "retry_count": 0,
}


class TestTenantFilter:
    """Tests for apply_tenant_filter"""

    def test_adds_organization_filter(self):
        query = MagicMock()

        apply_tenant_filter(query, "org-1")

        query.eq.assert_called_once_with("organization_id", "org-1")

    def test_empty_organization_rejected(self):
        with pytest.raises(ValueError, match="organization_id is required"):
            apply_tenant_filter(MagicMock(), "")


class TestSupabaseOutreachRepository:
    """Tests for SupabaseOutreachRepository"""

    @pytest.mark.asyncio
    async def test_list_enabled_triggers_scoped(self):
        client, query = make_client([{
            "id": "t1", "organization_id": "org-1", "trigger_type": "birthday",
            "enabled": True, "script_id": "s1", "delay_hours": None, "anniversary_milestones": None,
        }])

        triggers = await SupabaseOutreachRepository(client).list_enabled_triggers("org-1")

        client.table.assert_called_with("auto_triggers")
        query.eq.assert_any_call("organization_id", "org-1")
        query.eq.assert_any_call("enabled", True)
        assert triggers[0].delay_hours == 24
        assert triggers[0].anniversary_milestones == [1, 6, 12]

    @pytest.mark.asyncio
    async def test_unknown_trigger_kind_dropped(self):
        """A trigger kind the scheduler does not know leaves the other triggers usable"""
        client, _ = make_client([
            {"id": "t1", "organization_id": "org-1", "trigger_type": "birthday",
             "enabled": True, "script_id": "s1"},
            {"id": "t2", "organization_id": "org-1", "trigger_type": "event_reminder",
             "enabled": True, "script_id": "s2"},
        ])

        triggers = await SupabaseOutreachRepository(client).list_enabled_triggers("org-1")

        assert [t.id for t in triggers] == ["t1"]
        assert triggers[0].trigger_type == "birthday"

    @pytest.mark.asyncio
    async def test_null_organization_name(self):
        client, _ = make_client([
            {"id": "org-1", "name": "Grace Community Church"},
            {"id": "org-2", "name": None},
        ])

        organizations = await SupabaseOutreachRepository(client).list_organizations()

        assert [o.id for o in organizations] == ["org-1", "org-2"]
        assert organizations[1].name == ""

    @pytest.mark.asyncio
    async def test_invalid_organization_row_skipped(self):
        client, _ = make_client([
            {"id": None, "name": "Broken"},
            {"id": "org-2", "name": "Hope Chapel"},
        ])

        organizations = await SupabaseOutreachRepository(client).list_organizations()

        assert [o.id for o in organizations] == ["org-2"]

    @pytest.mark.asyncio
    async def test_latest_minute_usage(self):
        client, query = make_client([{
            "organization_id": "org-1", "billing_period_start": "2024-06-01T00:00:00+00:00",
            "minutes_used": "12.5", "minutes_included": 100, "overage_approved": None,
        }])

        usage = await SupabaseOutreachRepository(client).get_latest_minute_usage("org-1")

        query.order.assert_called_with("billing_period_start", desc=True)
        query.limit.assert_called_with(1)
        assert usage.minutes_used == 12.5
        assert usage.overage_approved is False

    @pytest.mark.asyncio
    async def test_no_minute_usage(self):
        client, _ = make_client([])

        assert await SupabaseOutreachRepository(client).get_latest_minute_usage("org-1") is None

    @pytest.mark.asyncio
    async def test_list_people_filters(self):
        client, query = make_client([])
        people_query = PeopleQuery(
            statuses=["first_time_visitor"],
            created_from=NOW,
            created_before=NOW,
            require_birthday=True,
        )

        await SupabaseOutreachRepository(client).list_people("org-1", people_query)

        query.eq.assert_any_call("organization_id", "org-1")
        query.eq.assert_any_call("do_not_call", False)
        query.is_.assert_any_call("phone_number", "null")
        query.is_.assert_any_call("birthday", "null")
        query.in_.assert_called_once_with("member_status", ["first_time_visitor"])
        query.gte.assert_called_once_with("created_at", NOW.isoformat())
        query.lt.assert_called_once_with("created_at", NOW.isoformat())

    @pytest.mark.asyncio
    async def test_get_script_scoped(self):
        client, query = make_client([])

        assert await SupabaseOutreachRepository(client).get_script("org-1", "s1") is None
        query.eq.assert_any_call("organization_id", "org-1")
        query.eq.assert_any_call("id", "s1")

    @pytest.mark.asyncio
    async def test_find_attempt_since(self):
        client, query = make_client([ATTEMPT_ROW])

        attempt = await SupabaseOutreachRepository(client).find_attempt("org-1", "p1", "birthday", since=NOW)

        query.gte.assert_called_once_with("scheduled_at", NOW.isoformat())
        assert attempt.id == "a1"
        assert attempt.recurrence_bucket == "2024-06-15"

    @pytest.mark.asyncio
    async def test_insert_duplicate_returns_none(self):
        client, query = make_client()
        query.execute.side_effect = APIError({
            "message": "duplicate key value violates unique constraint",
            "code": "23505",
            "hint": None,
            "details": None,
        })

        result = await SupabaseOutreachRepository(client).insert_attempt(dict(ATTEMPT_ROW))

        assert result is None

    @pytest.mark.asyncio
    async def test_insert_other_errors_propagate(self):
        client, query = make_client()
        query.execute.side_effect = APIError({
            "message": "permission denied", "code": "42501", "hint": None, "details": None,
        })

        with pytest.raises(APIError):
            await SupabaseOutreachRepository(client).insert_attempt(dict(ATTEMPT_ROW))

    @pytest.mark.asyncio
    async def test_schedulable_excludes_claimed(self):
        client, query = make_client([ATTEMPT_ROW])

        attempts = await SupabaseOutreachRepository(client).list_schedulable_attempts("org-1", 10)

        query.eq.assert_any_call("status", "scheduled")
        query.is_.assert_called_with("dispatch_claimed_at", "null")
        query.order.assert_called_with("scheduled_at")
        query.limit.assert_called_with(10)
        assert len(attempts) == 1

    @pytest.mark.asyncio
    async def test_retryable_filters(self):
        client, query = make_client([])

        await SupabaseOutreachRepository(client).list_retryable_attempts("org-1", 2, NOW)

        query.eq.assert_any_call("status", "failed")
        query.lt.assert_called_once_with("retry_count", 2)
        query.gte.assert_called_once_with("created_at", NOW.isoformat())

    @pytest.mark.asyncio
    async def test_claim_is_conditional(self):
        client, query = make_client([{"id": "a1"}])

        claimed = await SupabaseOutreachRepository(client).claim_attempt("org-1", "a1", NOW)

        query.update.assert_called_once_with({"dispatch_claimed_at": NOW.isoformat()})
        query.eq.assert_has_calls([
            call("organization_id", "org-1"),
            call("id", "a1"),
            call("status", "scheduled"),
        ])
        query.is_.assert_called_with("dispatch_claimed_at", "null")
        assert claimed is True

    @pytest.mark.asyncio
    async def test_claim_lost(self):
        client, _ = make_client([])

        assert await SupabaseOutreachRepository(client).claim_attempt("org-1", "a1", NOW) is False

    @pytest.mark.asyncio
    async def test_requeue_clears_claim(self):
        client, query = make_client([])

        await SupabaseOutreachRepository(client).requeue_attempt("org-1", "a1", NOW)

        query.update.assert_called_once_with({
            "status": "scheduled",
            "scheduled_at": NOW.isoformat(),
            "dispatch_claimed_at": None,
        })
        query.eq.assert_any_call("status", "failed")

    @pytest.mark.asyncio
    async def test_mark_in_progress_requires_call_id(self):
        client, _ = make_client([])

        with pytest.raises(ValueError):
            await SupabaseOutreachRepository(client).mark_in_progress("org-1", "a1", "", NOW)

    @pytest.mark.asyncio
    async def test_mark_failed(self):
        client, query = make_client([])

        await SupabaseOutreachRepository(client).mark_failed("org-1", "a1", "boom", 1)

        query.update.assert_called_once_with({
            "status": "failed",
            "error_message": "boom",
            "retry_count": 1,
        })


class TestMemorySearch:
    """Tests for the pgvector RPC wrappers"""

    @pytest.mark.asyncio
    async def test_member_match_rpc(self):
        client, _ = make_client([{"id": "m1", "content": "Prays for family", "memory_type": "prayer_request",
                                  "similarity": 0.82}])

        memories = await SupabaseMemberMemorySearch(client).match("p1", [0.1] * 768, 0.5, 5)

        name, params = client.rpc.call_args.args
        assert name == "match_member_memories"
        assert params["p_person_id"] == "p1"
        assert params["match_count"] == 5
        assert memories[0].label == "Prayer request"

    @pytest.mark.asyncio
    async def test_member_recent_rpc(self):
        client, _ = make_client([])

        await SupabaseMemberMemorySearch(client).recent("p1", 3)

        client.rpc.assert_called_once_with("get_recent_member_memories", {"p_person_id": "p1", "p_limit": 3})

    @pytest.mark.asyncio
    async def test_church_match_rpc(self):
        client, _ = make_client([{"id": "c1", "content": "VBS next week", "metadata": None}])

        memories = await SupabaseChurchMemorySearch(client).match("org-1", [0.1] * 1536, 0.5, 5)

        name, params = client.rpc.call_args.args
        assert name == "match_church_memories"
        assert params["p_organization_id"] == "org-1"
        assert memories[0].category == "general"
