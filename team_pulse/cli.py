"""
Command-line interface for the Team Pulse service.
"""

import asyncio
import json
from collections.abc import Callable, Coroutine
from pathlib import Path
from typing import Any

import httpx
import typer

from .client import DEFAULT_API_PREFIX, DEFAULT_BASE_URL, ApiError, TeamPulseClient
from .config import settings
from .models import Goal, Mood, TeamMember
from .session import ClientSession, JsonFileStorage
from .store import TeamPulseStore

DEFAULT_SESSION_FILE = Path.home() / ".config" / "team-pulse" / "session.json"

app = typer.Typer(help="Team Pulse CLI tools")

BaseUrlOption = typer.Option(
    DEFAULT_BASE_URL,
    "--url",
    "-u",
    envvar="TEAM_PULSE_URL",
    help="Base URL of the Team Pulse service",
)
PrefixOption = typer.Option(
    settings.api_prefix,
    "--prefix",
    envvar="TEAM_PULSE_API_PREFIX",
    help="Path prefix the API is mounted under",
)
SessionFileOption = typer.Option(
    DEFAULT_SESSION_FILE,
    "--session-file",
    envvar="TEAM_PULSE_SESSION_FILE",
    help="Where the selected team member is remembered",
)
MemberOption = typer.Option(
    None, "--member", "-m", help="Team member ID (defaults to the selected one)"
)


# MARK: - Identity


@app.command()
def use(
    team_member_id: int = typer.Argument(..., help="Team member ID to act as"),
    session_file: Path = SessionFileOption,
) -> None:
    """Remember which team member this client acts as."""
    _session(session_file).select(team_member_id)
    print(f"Acting as team member {team_member_id}")


@app.command()
def whoami(session_file: Path = SessionFileOption) -> None:
    """Show the selected team member."""
    current = _session(session_file).current_user_id
    print("No team member selected" if current is None else current)


@app.command()
def logout(session_file: Path = SessionFileOption) -> None:
    """Forget the selected team member."""
    _session(session_file).clear()
    print("Team member cleared")


# MARK: - API commands


@app.command()
def members(
    goals: bool = typer.Option(False, "--goals", "-g", help="Include each member's goals"),
    base_url: str = BaseUrlOption,
    api_prefix: str = PrefixOption,
    json_output: bool = typer.Option(False, "--json", "-j", help="Output raw JSON"),
) -> None:
    """List team members."""

    async def _members(client: TeamPulseClient) -> None:
        result = await client.list_team_members(include_goals=goals)

        if json_output:
            data = [member.model_dump(mode="json", by_alias=True) for member in result]
            print(json.dumps(data, indent=2))
            return

        if not result:
            print("No team members")
        for member in result:
            print(_format_member(member))
            for goal in member.goals:
                print(f"    {_format_goal(goal)}")

    _run_with_error_handling(_members, base_url, api_prefix)


@app.command()
def mood(
    value: Mood = typer.Argument(..., case_sensitive=False, help="The mood to report"),
    member: int | None = MemberOption,
    base_url: str = BaseUrlOption,
    api_prefix: str = PrefixOption,
    session_file: Path = SessionFileOption,
) -> None:
    """Report a mood for a team member."""
    team_member_id = _resolve_member(member, session_file)

    async def _mood(client: TeamPulseClient) -> None:
        updated = await client.update_mood(team_member_id, value)
        print(_format_member(updated))

    _run_with_error_handling(_mood, base_url, api_prefix)


@app.command("goal-add")
def goal_add(
    text: str = typer.Argument(..., help="Goal description (1-500 characters)"),
    member: int | None = MemberOption,
    base_url: str = BaseUrlOption,
    api_prefix: str = PrefixOption,
    session_file: Path = SessionFileOption,
) -> None:
    """Add a goal for a team member."""
    team_member_id = _resolve_member(member, session_file)

    async def _goal_add(client: TeamPulseClient) -> None:
        goal = await client.create_goal(team_member_id, text)
        print(f"Created {_format_goal(goal)}")

    _run_with_error_handling(_goal_add, base_url, api_prefix)


@app.command("goal-toggle")
def goal_toggle(
    goal_id: int = typer.Argument(..., help="Goal ID"),
    base_url: str = BaseUrlOption,
    api_prefix: str = PrefixOption,
) -> None:
    """Mark a goal completed, or open again."""

    async def _goal_toggle(client: TeamPulseClient) -> None:
        print(_format_goal(await client.toggle_goal(goal_id)))

    _run_with_error_handling(_goal_toggle, base_url, api_prefix)


@app.command("goal-delete")
def goal_delete(
    goal_id: int = typer.Argument(..., help="Goal ID"),
    base_url: str = BaseUrlOption,
    api_prefix: str = PrefixOption,
) -> None:
    """Delete a goal."""

    async def _goal_delete(client: TeamPulseClient) -> None:
        await client.delete_goal(goal_id)
        print(f"Deleted goal {goal_id}")

    _run_with_error_handling(_goal_delete, base_url, api_prefix)


@app.command()
def stats(
    base_url: str = BaseUrlOption,
    api_prefix: str = PrefixOption,
) -> None:
    """Show goal completion and the team's moods."""

    async def _stats(client: TeamPulseClient) -> None:
        summary = await client.get_stats()
        print(f"Date:        {summary.as_of.isoformat()}")
        print(f"Team size:   {summary.team_size}")
        print(
            f"Goals:       {summary.completed_goals}/{summary.total_goals} "
            f"completed ({summary.completion_rate:.0%})"
        )
        for name, count in summary.mood_breakdown.items():
            print(f"  {name}: {count}")

    _run_with_error_handling(_stats, base_url, api_prefix)


# MARK: - Local database commands


@app.command("init-db")
def init_db(
    database: str = typer.Option(
        settings.database_path, "--database", "-d", help="SQLite database file"
    ),
) -> None:
    """Create the database schema."""
    TeamPulseStore(database).initialize()
    print(f"Initialised {database}")


@app.command()
def seed(
    names: list[str] = typer.Argument(..., help="Names of team members to add"),
    database: str = typer.Option(
        settings.database_path, "--database", "-d", help="SQLite database file"
    ),
) -> None:
    """Add team members directly to the database."""
    store = TeamPulseStore(database)
    store.initialize()

    async def _seed() -> list[TeamMember]:
        return [await store.team_members.insert(name) for name in names]

    for member in asyncio.run(_seed()):
        print(f"Added {member.name} (ID {member.id})")


# MARK: - Private Helpers


def _session(session_file: Path) -> ClientSession:
    return ClientSession(JsonFileStorage(session_file))


def _resolve_member(member: int | None, session_file: Path) -> int:
    """Pick the explicit member or fall back to the session's identity."""
    if member is not None:
        return member

    current = _session(session_file).current_user_id
    if current is None:
        print("Error: no team member selected, pass --member or run 'use ID'")
        raise typer.Exit(1)
    return current


def _format_member(member: TeamMember) -> str:
    if member.current_mood is None:
        return f"[{member.id}] {member.name}: no mood"

    updated = (
        member.mood_updated_at.strftime("%Y-%m-%d %H:%M:%S")
        if member.mood_updated_at
        else "?"
    )
    return f"[{member.id}] {member.name}: {member.current_mood.value} (since {updated})"


def _format_goal(goal: Goal) -> str:
    mark = "x" if goal.is_completed else " "
    return f"[{mark}] #{goal.id} {goal.goal_text}"


def _run_with_error_handling(
    command: Callable[[TeamPulseClient], Coroutine[Any, Any, Any]],
    base_url: str,
    api_prefix: str = DEFAULT_API_PREFIX,
) -> None:
    """Run an async command against the API with standardized error handling."""

    async def _with_client() -> None:
        async with httpx.AsyncClient(base_url=base_url) as http:
            await command(TeamPulseClient(http, api_prefix=api_prefix))

    try:
        asyncio.run(_with_client())
    except KeyboardInterrupt:
        print("\nStopped")
        raise typer.Exit(0)
    except httpx.ConnectError:
        print(f"Error: Could not connect to {base_url}")
        raise typer.Exit(1)
    except ApiError as e:
        print(f"Error: {e.message} ({e.code})")
        raise typer.Exit(1)
    except Exception as e:
        error_msg = str(e) if str(e) else f"Unknown error of type {type(e).__name__}"
        print(f"Error: {error_msg}")
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
