"""
Tests for the SQLite repositories.

These tests verify the statements each repository issues, the row mapping
and the folding of the member/goal join.
"""

import sqlite3
from datetime import datetime, timedelta, timezone

import pytest

from team_pulse.models import Mood
from team_pulse.store import format_timestamp, parse_timestamp

T0 = datetime(2026, 10, 18, 9, 30, 0, tzinfo=timezone.utc)


class TestTimestamps:
    def test_format_uses_fixed_utc_text(self):
        assert format_timestamp(T0) == "2026-10-18 09:30:00"

        plus_two = T0.astimezone(timezone(timedelta(hours=2)))
        assert format_timestamp(plus_two) == "2026-10-18 09:30:00"

    def test_parse_returns_aware_utc(self):
        parsed = parse_timestamp("2026-10-18 09:30:00")
        assert parsed == T0
        assert parsed.tzinfo is timezone.utc
        assert parse_timestamp(None) is None


class TestTeamMemberRepository:
    @pytest.fixture(autouse=True)
    def _setup(self, store, seed_members):
        self.store = store
        self.seed = seed_members
        self.repo = store.team_members

    async def test_list_all_orders_by_name(self):
        self.seed("Charlie", "alice", "Bob", "Alice")

        members = await self.repo.list_all()

        assert [m.name for m in members] == ["Alice", "Bob", "Charlie", "alice"]
        assert all(m.goals == [] for m in members)
        assert all(m.current_mood is None for m in members)

    async def test_list_all_with_goals_folds_join(self):
        alice, bob, carol = self.seed("Alice", "Bob", "Carol")
        goals = self.store.goals
        await goals.insert(bob, "first", created_at=T0)
        await goals.insert(alice, "older", created_at=T0)
        await goals.insert(alice, "newer", created_at=T0 + timedelta(minutes=5))
        await goals.insert(alice, "same second", created_at=T0 + timedelta(minutes=5))

        members = await self.repo.list_all(include_goals=True)

        assert [m.id for m in members] == [alice, bob, carol]
        assert [g.goal_text for g in members[0].goals] == ["same second", "newer", "older"]
        assert [g.goal_text for g in members[1].goals] == ["first"]
        assert members[2].goals == []
        assert all(g.team_member_id == alice for g in members[0].goals)

    async def test_get_missing_returns_none(self):
        assert await self.repo.get(99999) is None

    async def test_update_mood_writes_both_columns(self):
        (member_id,) = self.seed("Alice")

        affected = await self.repo.update_mood(member_id, Mood.HAPPY, T0)

        assert affected == 1
        member = await self.repo.get(member_id)
        assert member.current_mood == Mood.HAPPY
        assert member.mood_updated_at == T0

        with self.store.db.cursor() as cur:
            row = cur.execute(
                "SELECT CurrentMood, MoodUpdatedAt FROM TeamMembers WHERE Id = ?",
                (member_id,),
            ).fetchone()
        assert tuple(row) == ("Happy", "2026-10-18 09:30:00")

    async def test_update_mood_missing_affects_nothing(self):
        assert await self.repo.update_mood(99999, Mood.HAPPY, T0) == 0

    async def test_counts_and_mood_breakdown(self):
        ids = self.seed("Alice", "Bob", "Carol", "Dan")
        await self.repo.update_mood(ids[0], Mood.HAPPY, T0)
        await self.repo.update_mood(ids[1], Mood.HAPPY, T0)
        await self.repo.update_mood(ids[2], Mood.STRESSED, T0)

        assert await self.repo.count() == 4
        assert await self.repo.mood_breakdown() == {"Happy": 2, "Stressed": 1}


class TestGoalRepository:
    @pytest.fixture(autouse=True)
    def _setup(self, store, seed_members):
        self.store = store
        self.seed = seed_members
        self.repo = store.goals
        (self.member_id,) = seed_members("Alice")

    async def test_insert_assigns_fresh_ids(self):
        first = await self.repo.insert(self.member_id, "one", created_at=T0)
        second = await self.repo.insert(self.member_id, "two", created_at=T0)

        assert first.id != second.id
        stored = await self.repo.get(first.id)
        assert stored == first
        assert stored.is_completed is False

    async def test_insert_requires_existing_member(self):
        with pytest.raises(sqlite3.IntegrityError):
            await self.repo.insert(99999, "orphan", created_at=T0)

    async def test_toggle_flips_flag(self):
        goal = await self.repo.insert(self.member_id, "flip", created_at=T0)

        assert await self.repo.toggle_completion(goal.id) == 1
        assert (await self.repo.get(goal.id)).is_completed is True

        assert await self.repo.toggle_completion(goal.id) == 1
        assert (await self.repo.get(goal.id)).is_completed is False

    async def test_toggle_missing_is_noop(self):
        assert await self.repo.toggle_completion(99999) == 0

    async def test_delete_reports_affected_rows(self):
        goal = await self.repo.insert(self.member_id, "gone", created_at=T0)

        assert await self.repo.delete(goal.id) == 1
        assert await self.repo.get(goal.id) is None
        assert await self.repo.delete(goal.id) == 0

    async def test_completion_counts(self):
        assert await self.repo.completion_counts() == (0, 0)

        goal = await self.repo.insert(self.member_id, "a", created_at=T0)
        await self.repo.insert(self.member_id, "b", created_at=T0)
        await self.repo.toggle_completion(goal.id)

        assert await self.repo.completion_counts() == (2, 1)
