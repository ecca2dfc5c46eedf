"""
Shared data models for the Team Pulse service.

This module defines the core domain models used across multiple layers
of the application (business logic, CLI, API). Attributes are snake_case in
Python and camelCase on the wire.
"""

from datetime import date, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Mood(str, Enum):
    """The closed set of moods a team member can report."""

    HAPPY = "Happy"
    CONTENT = "Content"
    NEUTRAL = "Neutral"
    STRESSED = "Stressed"
    FRUSTRATED = "Frustrated"


class CamelModel(BaseModel):
    """Base model that reads and writes camelCase JSON."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Goal(CamelModel):
    """A personal objective owned by one team member."""

    id: int = Field(..., description="Goal identifier")
    team_member_id: int = Field(..., description="Owning team member")
    goal_text: str = Field(..., description="Free-text goal description")
    created_at: datetime = Field(..., description="UTC creation time")
    is_completed: bool = Field(False, description="Completion flag")


class TeamMember(CamelModel):
    """A team member with their current mood and, optionally, their goals."""

    id: int = Field(..., description="Team member identifier")
    name: str = Field(..., description="Display name")
    current_mood: Mood | None = Field(None, description="Last reported mood")
    mood_updated_at: datetime | None = Field(
        None, description="UTC time the mood was last reported"
    )
    goals: list[Goal] = Field(default_factory=list)


class Stats(CamelModel):
    """Point-in-time summary of the team."""

    as_of: date = Field(..., alias="date", description="UTC day of the summary")
    total_goals: int
    completed_goals: int
    completion_rate: float
    mood_breakdown: dict[str, int] = Field(default_factory=dict)
    team_size: int
