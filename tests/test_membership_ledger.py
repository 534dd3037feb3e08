"""Unit tests for MembershipLedger against the in-memory gateway."""

import asyncio
import random

import pytest
from unittest.mock import AsyncMock

from common.utils.exceptions import ValidationException
from studygroups.exceptions import (
    AlreadyMember,
    CreatorCannotLeave,
    GroupFull,
    GroupNotFound,
    MalformedScheduleError,
    MissingRequiredField,
    NotAMember,
    NotGroupCreator,
    TransportFailure,
    WriteConflict,
)
from studygroups.models import StudySession
from studygroups.services.membership_ledger import MembershipLedger


def assert_roster_consistent(group):
    assert group.member_count == len(group.members)
    assert len(set(group.members)) == len(group.members)
    assert group.member_count <= group.max_members
    assert group.created_by in group.members


# ─────────────────────────────────────────────────────────────────
# create
# ─────────────────────────────────────────────────────────────────


class TestCreate:
    @pytest.mark.asyncio
    async def test_creator_is_only_member(self, ledger, gateway, make_group, creator_id):
        group = make_group(members=["someone-else", "another"], group_id="")

        created = await ledger.create(group)

        assert created.group_id
        assert created.members == [creator_id]
        assert created.member_count == 1
        stored = gateway.groups[created.group_id]
        assert stored.members == [creator_id]
        assert stored.version == 0
        assert stored.created_at is not None

    @pytest.mark.asyncio
    async def test_supplied_id_cannot_replace_existing_group(self, ledger, gateway, stored_group, make_group, creator_id):
        existing = stored_group(members=[creator_id, "B", "C"])

        created = await ledger.create(make_group(group_id=existing.group_id, created_by="intruder"))

        assert created.group_id != existing.group_id
        kept = gateway.groups[existing.group_id]
        assert kept.created_by == creator_id
        assert kept.members == [creator_id, "B", "C"]
        assert gateway.groups[created.group_id].members == ["intruder"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("attribute,field", [
        ("name", "groupName"),
        ("description", "description"),
        ("year", "year"),
        ("category", "category"),
    ])
    async def test_rejects_blank_required_fields(self, ledger, gateway, make_group, attribute, field):
        with pytest.raises(MissingRequiredField) as exc:
            await ledger.create(make_group(**{attribute: " "}))

        assert exc.value.field == field
        assert gateway.groups == {}

    @pytest.mark.asyncio
    async def test_rejects_zero_capacity(self, ledger, gateway, make_group):
        with pytest.raises(ValidationException) as exc:
            await ledger.create(make_group(max_members=0))

        assert exc.value.code == "INVALID_MAX_MEMBERS"
        assert gateway.groups == {}

    @pytest.mark.asyncio
    async def test_rejects_malformed_schedule(self, ledger, gateway, make_group):
        with pytest.raises(MalformedScheduleError):
            await ledger.create(make_group(schedule="2025-02-01 - 2025-01-01"))
        assert gateway.groups == {}


# ─────────────────────────────────────────────────────────────────
# join
# ─────────────────────────────────────────────────────────────────


class TestJoin:
    @pytest.mark.asyncio
    async def test_join_then_full(self, ledger, gateway, stored_group):
        group = stored_group(members=["A"], created_by="A", max_members=2)

        count = await ledger.join(group.group_id, "B")

        assert count == 2
        assert gateway.groups[group.group_id].members == ["A", "B"]

        before = gateway.groups[group.group_id]
        with pytest.raises(GroupFull) as exc:
            await ledger.join(group.group_id, "C")

        assert exc.value.code == "GROUP_FULL"
        after = gateway.groups[group.group_id]
        assert after.members == ["A", "B"]
        assert after.member_count == 2
        assert after.version == before.version

    @pytest.mark.asyncio
    async def test_already_member(self, ledger, gateway, stored_group, creator_id):
        group = stored_group(members=[creator_id, "B"])

        with pytest.raises(AlreadyMember):
            await ledger.join(group.group_id, "B")

        assert gateway.update_calls == 0

    @pytest.mark.asyncio
    async def test_unknown_group(self, ledger):
        with pytest.raises(GroupNotFound):
            await ledger.join("missing", "B")

    @pytest.mark.asyncio
    async def test_reads_fresh_snapshot_each_call(self, ledger, gateway, stored_group, creator_id):
        group = stored_group(max_members=3)
        gateway.groups[group.group_id].members.append("X")
        gateway.groups[group.group_id].member_count = 2
        gateway.groups[group.group_id].version = 4

        count = await ledger.join(group.group_id, "B")

        assert count == 3
        assert gateway.groups[group.group_id].members == [creator_id, "X", "B"]

    @pytest.mark.asyncio
    async def test_concurrent_joins_both_land(self, ledger, gateway, stored_group):
        group = stored_group(members=[], created_by="owner", max_members=2)

        counts = await asyncio.gather(
            ledger.join(group.group_id, "A"),
            ledger.join(group.group_id, "B"),
        )

        stored = gateway.groups[group.group_id]
        assert sorted(counts) == [1, 2]
        assert sorted(stored.members) == ["A", "B"]
        assert stored.member_count == 2
        assert gateway.conflicts >= 1

    @pytest.mark.asyncio
    async def test_concurrent_joins_never_overfill(self, ledger, gateway, stored_group, creator_id):
        group = stored_group(max_members=4)
        users = [f"user-{i}" for i in range(8)]

        results = await asyncio.gather(
            *(ledger.join(group.group_id, u) for u in users),
            return_exceptions=True,
        )

        stored = gateway.groups[group.group_id]
        assert stored.member_count == 4
        assert_roster_consistent(stored)
        failures = [r for r in results if isinstance(r, Exception)]
        assert all(isinstance(f, (GroupFull, WriteConflict)) for f in failures)

    @pytest.mark.asyncio
    async def test_gives_up_after_repeated_conflicts(self, gateway, stored_group):
        group = stored_group()
        gateway.update_group_fields = AsyncMock(side_effect=WriteConflict(group.group_id, 0))
        ledger = MembershipLedger(gateway, write_attempts=3)

        with pytest.raises(WriteConflict) as exc:
            await ledger.join(group.group_id, "B")

        assert exc.value.retryable is True
        assert gateway.update_group_fields.await_count == 3


# ─────────────────────────────────────────────────────────────────
# leave
# ─────────────────────────────────────────────────────────────────


class TestLeave:
    @pytest.mark.asyncio
    async def test_member_leaves(self, ledger, gateway, stored_group, creator_id):
        group = stored_group(members=[creator_id, "B", "C"])

        count = await ledger.leave(group.group_id, "B")

        assert count == 2
        assert gateway.groups[group.group_id].members == [creator_id, "C"]

    @pytest.mark.asyncio
    async def test_non_member_cannot_leave(self, ledger, gateway, stored_group):
        group = stored_group()

        with pytest.raises(NotAMember) as exc:
            await ledger.leave(group.group_id, "stranger")

        assert exc.value.code == "NOT_A_MEMBER"
        assert gateway.groups[group.group_id].version == 0
        assert gateway.update_calls == 0

    @pytest.mark.asyncio
    async def test_creator_cannot_leave(self, ledger, gateway, stored_group, creator_id):
        group = stored_group(members=[creator_id, "B"])

        with pytest.raises(CreatorCannotLeave):
            await ledger.leave(group.group_id, creator_id)

        assert gateway.groups[group.group_id].members == [creator_id, "B"]

    @pytest.mark.asyncio
    async def test_concurrent_leaves_both_land(self, ledger, gateway, stored_group, creator_id):
        group = stored_group(members=[creator_id, "A", "B"])

        await asyncio.gather(
            ledger.leave(group.group_id, "A"),
            ledger.leave(group.group_id, "B"),
        )

        stored = gateway.groups[group.group_id]
        assert stored.members == [creator_id]
        assert stored.member_count == 1


# ─────────────────────────────────────────────────────────────────
# invariants over mixed sequences
# ─────────────────────────────────────────────────────────────────


class TestRosterInvariant:
    @pytest.mark.asyncio
    async def test_count_matches_roster_after_random_sequence(self, ledger, gateway, stored_group):
        group = stored_group(max_members=5)
        rng = random.Random(1234)
        users = [f"u{i}" for i in range(8)]

        for _ in range(200):
            user = rng.choice(users)
            operation = rng.choice([ledger.join, ledger.leave])
            try:
                await operation(group.group_id, user)
            except (AlreadyMember, NotAMember, GroupFull):
                pass
            assert_roster_consistent(gateway.groups[group.group_id])


# ─────────────────────────────────────────────────────────────────
# delete
# ─────────────────────────────────────────────────────────────────


class TestDelete:
    @pytest.mark.asyncio
    async def test_creator_deletes_group_and_sessions(self, ledger, gateway, stored_group, creator_id):
        group = stored_group()
        other = stored_group()
        for sid, gid in (("s1", group.group_id), ("s2", group.group_id), ("s3", other.group_id)):
            gateway.sessions[sid] = StudySession(
                session_id=sid, group_id=gid, title="t", description="d",
                session_date_time=None, location="Online", is_online=True,
            )

        await ledger.delete(group.group_id, creator_id)

        assert group.group_id not in gateway.groups
        assert list(gateway.sessions) == ["s3"]

    @pytest.mark.asyncio
    async def test_member_cannot_delete(self, ledger, gateway, stored_group, creator_id):
        group = stored_group(members=[creator_id, "B"])

        with pytest.raises(NotGroupCreator):
            await ledger.delete(group.group_id, "B")

        assert group.group_id in gateway.groups

    @pytest.mark.asyncio
    async def test_failed_session_sweep_keeps_group_for_retry(self, ledger, gateway, stored_group, creator_id):
        group = stored_group()
        gateway.sessions["s1"] = StudySession(
            session_id="s1", group_id=group.group_id, title="t", description="d",
            session_date_time=None, location="Online", is_online=True,
        )
        gateway.delete_sessions_for_group = AsyncMock(
            side_effect=TransportFailure("delete_sessions_for_group", "timed out")
        )

        with pytest.raises(TransportFailure):
            await ledger.delete(group.group_id, creator_id)

        assert group.group_id in gateway.groups
        assert "s1" in gateway.sessions

        del gateway.delete_sessions_for_group
        await ledger.delete(group.group_id, creator_id)

        assert gateway.groups == {}
        assert gateway.sessions == {}

    @pytest.mark.asyncio
    async def test_session_added_during_delete_is_swept(self, ledger, gateway, stored_group, creator_id):
        group = stored_group()
        remove_group = gateway.delete_group

        async def delete_group_after_late_session(group_id):
            gateway.sessions["late"] = StudySession(
                session_id="late", group_id=group_id, title="t", description="d",
                session_date_time=None, location="Online", is_online=True,
            )
            await remove_group(group_id)

        gateway.delete_group = delete_group_after_late_session

        await ledger.delete(group.group_id, creator_id)

        assert gateway.groups == {}
        assert gateway.sessions == {}


class TestAcademicYears:
    @pytest.mark.asyncio
    async def test_unknown_year_rejected(self, gateway, make_group):
        ledger = MembershipLedger(gateway, academic_years=["SD1", "SD2", "SD3", "SD4"])

        with pytest.raises(ValidationException) as exc:
            await ledger.create(make_group(year="SD9"))

        assert exc.value.code == "INVALID_YEAR"
        assert gateway.groups == {}

    @pytest.mark.asyncio
    async def test_known_year_accepted(self, gateway, make_group):
        ledger = MembershipLedger(gateway, academic_years=["SD1", "SD2"])

        created = await ledger.create(make_group(year="SD2"))

        assert created.group_id in gateway.groups
