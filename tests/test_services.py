"""
Tests for the service layer.

These tests verify the existence checks, error kinds and timestamps applied
by TeamMemberService, GoalService and StatsService.
"""

from datetime import date, datetime, timedelta, timezone

import pytest

from team_pulse.errors import GoalNotFound, TeamMemberNotFound
from team_pulse.models import Mood
from team_pulse.services import GoalService, StatsService, TeamMemberService, utc_now

T0 = datetime(2026, 10, 18, 9, 30, 0, tzinfo=timezone.utc)


class FakeClock:
    """Clock that advances by a fixed step on every call."""

    def __init__(self, start: datetime = T0, step: timedelta = timedelta(seconds=1)):
        self.now = start
        self.step = step

    def __call__(self) -> datetime:
        current = self.now
        self.now += self.step
        return current


def test_utc_now_is_whole_second_utc():
    now = utc_now()
    assert now.tzinfo is timezone.utc
    assert now.microsecond == 0


class TestTeamMemberService:
    @pytest.fixture(autouse=True)
    def _setup(self, store, seed_members):
        self.store = store
        self.clock = FakeClock()
        self.service = TeamMemberService(store.team_members, clock=self.clock)
        self.goals = GoalService(store.goals, store.team_members, clock=self.clock)
        self.alice, self.bob = seed_members("Bob", "Alice")[::-1]

    async def test_list_all_without_goals(self):
        await self.goals.create(self.alice, "hidden")

        members = await self.service.list_all(include_goals=False)

        assert [m.name for m in members] == ["Alice", "Bob"]
        assert all(m.goals == [] for m in members)

    async def test_list_all_with_goals_newest_first(self):
        first = await self.goals.create(self.alice, "first")
        second = await self.goals.create(self.alice, "second")
        await self.goals.create(self.bob, "bob's")

        members = await self.service.list_all(include_goals=True)

        assert [m.name for m in members] == ["Alice", "Bob"]
        assert [g.id for g in members[0].goals] == [second.id, first.id]
        created = [g.created_at for g in members[0].goals]
        assert created == sorted(created, reverse=True)
        assert [g.goal_text for g in members[1].goals] == ["bob's"]

    async def test_update_mood_sets_mood_and_timestamp_together(self):
        member = await self.service.update_mood(self.alice, Mood.STRESSED)

        assert member.id == self.alice
        assert member.name == "Alice"
        assert member.current_mood == Mood.STRESSED
        assert member.mood_updated_at == T0

        stored = await self.store.team_members.get(self.alice)
        assert stored.current_mood == Mood.STRESSED
        assert stored.mood_updated_at == T0

    async def test_update_mood_timestamps_never_decrease(self):
        stamps = []
        for mood in (Mood.HAPPY, Mood.NEUTRAL, Mood.HAPPY):
            member = await self.service.update_mood(self.bob, mood)
            assert member.current_mood is not None
            assert member.mood_updated_at is not None
            stamps.append(member.mood_updated_at)

        assert stamps == sorted(stamps)

    async def test_update_mood_missing_member(self):
        with pytest.raises(TeamMemberNotFound) as exc_info:
            await self.service.update_mood(99999, Mood.HAPPY)

        assert str(exc_info.value) == "Team member with ID 99999 does not exist"
        assert self.clock.now == T0


class TestGoalService:
    @pytest.fixture(autouse=True)
    def _setup(self, store, seed_members):
        self.store = store
        self.clock = FakeClock()
        self.service = GoalService(store.goals, store.team_members, clock=self.clock)
        (self.member_id,) = seed_members("Alice")

    async def test_create_returns_open_goal_with_fresh_id(self):
        ids = set()
        for text in ("Ship v1", "Write docs", "Ship v1"):
            goal = await self.service.create(self.member_id, text)
            assert goal.is_completed is False
            assert goal.created_at is not None
            assert goal.team_member_id == self.member_id
            assert goal.goal_text == text
            assert goal.id not in ids
            ids.add(goal.id)

    @pytest.mark.parametrize("goal_text", ["Ship v1", "", "x" * 600])
    async def test_create_missing_member_regardless_of_text(self, goal_text):
        with pytest.raises(TeamMemberNotFound):
            await self.service.create(99999, goal_text)

        assert await self.store.goals.completion_counts() == (0, 0)

    async def test_toggle_is_an_involution(self):
        goal = await self.service.create(self.member_id, "Ship v1")

        once = await self.service.toggle_completion(goal.id)
        twice = await self.service.toggle_completion(goal.id)

        assert once.is_completed is True
        assert twice.is_completed is False
        assert twice == goal

    async def test_toggle_missing_goal(self):
        with pytest.raises(GoalNotFound) as exc_info:
            await self.service.toggle_completion(42)

        assert str(exc_info.value) == "Goal with ID 42 does not exist"

    async def test_delete(self):
        goal = await self.service.create(self.member_id, "Ship v1")

        await self.service.delete(goal.id)

        assert await self.store.goals.get(goal.id) is None
        with pytest.raises(GoalNotFound):
            await self.service.delete(goal.id)

    async def test_delete_missing_goal(self):
        with pytest.raises(GoalNotFound) as exc_info:
            await self.service.delete(42)

        assert exc_info.value.goal_id == 42


class TestStatsService:
    @pytest.fixture(autouse=True)
    def _setup(self, store, seed_members):
        self.clock = FakeClock()
        self.stats = StatsService(store.goals, store.team_members, clock=self.clock)
        self.goals = GoalService(store.goals, store.team_members, clock=self.clock)
        self.members = TeamMemberService(store.team_members, clock=self.clock)
        self.ids = seed_members("Alice", "Bob", "Carol")

    async def test_empty_team_has_zero_rate(self):
        summary = await self.stats.summary()

        assert summary.as_of == date(2026, 10, 18)
        assert summary.team_size == 3
        assert summary.total_goals == 0
        assert summary.completion_rate == 0.0
        assert summary.mood_breakdown == {}

    async def test_summary(self):
        alice, bob, _ = self.ids
        done = await self.goals.create(alice, "a")
        await self.goals.create(alice, "b")
        await self.goals.create(bob, "c")
        await self.goals.toggle_completion(done.id)
        await self.members.update_mood(alice, Mood.HAPPY)
        await self.members.update_mood(bob, Mood.HAPPY)

        summary = await self.stats.summary()

        assert summary.total_goals == 3
        assert summary.completed_goals == 1
        assert summary.completion_rate == 0.3333
        assert summary.mood_breakdown == {"Happy": 2}
