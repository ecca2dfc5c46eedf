"""
FastAPI server for the Team Pulse service.

This module implements the HTTP API for listing team members, reporting
moods and managing goals. Successful responses are wrapped as
``{"data": ...}``; failures are rendered by the handlers in ``errors``.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Annotated

from fastapi import APIRouter, FastAPI, Path, Query, Response, status
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from . import __version__
from .config import Settings
from .config import settings as default_settings
from .errors import register_error_handlers
from .logging_config import setup_logging
from .models import CamelModel, Goal, Mood, Stats, TeamMember
from .services import GoalService, StatsService, TeamMemberService
from .store import TeamPulseStore

logger = logging.getLogger(__name__)

# SQLite INTEGER range
MIN_ID = -(2**63)
MAX_ID = 2**63 - 1

EntityId = Annotated[int, Path(ge=MIN_ID, le=MAX_ID)]


# API Request/Response Schemas
class GoalCreateRequest(CamelModel):
    """Payload for goal creation."""

    team_member_id: int = Field(
        ..., ge=MIN_ID, le=MAX_ID, description="Owner of the new goal"
    )
    goal_text: str = Field(..., min_length=1, max_length=500)


class MoodUpdateRequest(CamelModel):
    """Payload for mood updates."""

    mood: Mood = Field(..., description="The new mood value")


class GoalResponse(BaseModel):
    data: Goal


class TeamMemberResponse(BaseModel):
    data: TeamMember


class TeamMembersResponse(BaseModel):
    data: list[TeamMember]


class StatsResponse(BaseModel):
    data: Stats


def create_app(
    store: TeamPulseStore | None = None, settings: Settings | None = None
) -> FastAPI:
    """
    Create a FastAPI application backed by the given store.

    Args:
        store: Store to use; defaults to one at ``settings.database_path``
        settings: Settings to use; defaults to the environment settings

    Returns:
        Configured FastAPI application
    """
    settings = settings or default_settings
    store = store or TeamPulseStore(settings.database_path)
    setup_logging(settings.log_level)

    team_member_service = TeamMemberService(store.team_members)
    goal_service = GoalService(store.goals, store.team_members)
    stats_service = StatsService(store.goals, store.team_members)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Create the schema on startup."""
        store.initialize()
        logger.info("Team Pulse started with database %s", store.db.path)
        yield
        logger.info("Team Pulse stopped")

    app = FastAPI(
        title="Team Pulse",
        description="Team mood and goal tracker",
        version=__version__,
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_error_handlers(app)

    @app.get("/")
    async def root() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "team-pulse"}

    # MARK: - Goals

    goals = APIRouter(prefix="/goals", tags=["Goals"])

    @goals.post("", status_code=status.HTTP_201_CREATED)
    async def create_goal(request: GoalCreateRequest) -> GoalResponse:
        """Create a goal for an existing team member."""
        goal = await goal_service.create(request.team_member_id, request.goal_text)
        return GoalResponse(data=goal)

    @goals.put("/{goal_id}/toggle")
    async def toggle_goal(goal_id: EntityId) -> GoalResponse:
        """Flip a goal between open and completed."""
        return GoalResponse(data=await goal_service.toggle_completion(goal_id))

    @goals.delete("/{goal_id}", status_code=status.HTTP_204_NO_CONTENT)
    async def delete_goal(goal_id: EntityId) -> Response:
        await goal_service.delete(goal_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    # MARK: - Team members

    team_members = APIRouter(prefix="/team-members", tags=["Team members"])

    @team_members.get("")
    async def list_team_members(
        include_goals: bool = Query(False, alias="includeGoals"),
    ) -> TeamMembersResponse:
        """
        List all team members by name.

        Args:
            include_goals: Attach each member's goals, newest first
        """
        members = await team_member_service.list_all(include_goals)
        return TeamMembersResponse(data=members)

    @team_members.put("/{team_member_id}/mood")
    async def update_mood(
        team_member_id: EntityId, request: MoodUpdateRequest
    ) -> TeamMemberResponse:
        """Report a team member's current mood."""
        member = await team_member_service.update_mood(team_member_id, request.mood)
        return TeamMemberResponse(data=member)

    # MARK: - Stats

    stats = APIRouter(prefix="/stats", tags=["Stats"])

    @stats.get("")
    async def get_stats() -> StatsResponse:
        """Summarise goal completion and moods across the team."""
        return StatsResponse(data=await stats_service.summary())

    for router in (goals, team_members, stats):
        app.include_router(router, prefix=settings.api_prefix)

    return app


def main() -> None:
    """Main entry point for the server."""
    import uvicorn

    uvicorn.run(
        "team_pulse.server:create_app",
        factory=True,
        host=default_settings.host,
        port=default_settings.port,
        log_level=default_settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
