"""
Business logic for team members, goals and the team summary.

Services raise ``TeamMemberNotFound`` / ``GoalNotFound`` for missing
entities; request validation happens before a service is called.
"""

import logging
from collections.abc import Callable
from datetime import datetime, timezone

from .errors import GoalNotFound, TeamMemberNotFound
from .models import Goal, Mood, Stats, TeamMember
from .store import GoalRepository, TeamMemberRepository

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Current UTC time at the stored (whole second) precision."""
    return datetime.now(timezone.utc).replace(microsecond=0)


class TeamMemberService:
    def __init__(self, team_members: TeamMemberRepository, clock: Clock = utc_now) -> None:
        self.team_members = team_members
        self.clock = clock

    async def list_all(self, include_goals: bool = False) -> list[TeamMember]:
        return await self.team_members.list_all(include_goals)

    async def update_mood(self, team_member_id: int, mood: Mood) -> TeamMember:
        """
        Set a member's mood and stamp it with the service clock.

        Raises:
            TeamMemberNotFound: No team member has ``team_member_id``
        """
        member = await self.team_members.get(team_member_id)
        if member is None:
            raise TeamMemberNotFound(team_member_id)

        timestamp = self.clock()
        await self.team_members.update_mood(team_member_id, mood, timestamp)
        logger.info("Team member %s mood set to %s", team_member_id, mood.value)

        return member.model_copy(
            update={"current_mood": mood, "mood_updated_at": timestamp}
        )


class GoalService:
    def __init__(
        self,
        goals: GoalRepository,
        team_members: TeamMemberRepository,
        clock: Clock = utc_now,
    ) -> None:
        self.goals = goals
        self.team_members = team_members
        self.clock = clock

    async def create(self, team_member_id: int, goal_text: str) -> Goal:
        """
        Create an open goal for an existing team member.

        Raises:
            TeamMemberNotFound: Checked before anything is written
        """
        if await self.team_members.get(team_member_id) is None:
            raise TeamMemberNotFound(team_member_id)

        goal = await self.goals.insert(
            team_member_id, goal_text, created_at=self.clock(), is_completed=False
        )
        logger.info("Created goal %s for team member %s", goal.id, team_member_id)
        return goal

    async def toggle_completion(self, goal_id: int) -> Goal:
        """
        Flip a goal's completion flag and return the stored result.

        The update is unconditional; a missing goal is detected by the
        re-read coming back empty.

        Raises:
            GoalNotFound: No goal has ``goal_id``
        """
        await self.goals.toggle_completion(goal_id)

        goal = await self.goals.get(goal_id)
        if goal is None:
            raise GoalNotFound(goal_id)

        logger.info("Goal %s completed=%s", goal_id, goal.is_completed)
        return goal

    async def delete(self, goal_id: int) -> None:
        """
        Raises:
            GoalNotFound: The delete affected no rows
        """
        if await self.goals.delete(goal_id) == 0:
            raise GoalNotFound(goal_id)
        logger.info("Deleted goal %s", goal_id)


class StatsService:
    def __init__(
        self,
        goals: GoalRepository,
        team_members: TeamMemberRepository,
        clock: Clock = utc_now,
    ) -> None:
        self.goals = goals
        self.team_members = team_members
        self.clock = clock

    async def summary(self) -> Stats:
        total, completed = await self.goals.completion_counts()
        rate = round(completed / total, 4) if total else 0.0

        return Stats(
            as_of=self.clock().date(),
            total_goals=total,
            completed_goals=completed,
            completion_rate=rate,
            mood_breakdown=await self.team_members.mood_breakdown(),
            team_size=await self.team_members.count(),
        )
