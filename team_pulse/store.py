"""
SQLite persistence for the Team Pulse service.

This module provides a connection factory (``Database``) and one repository
per table. Every repository call opens its own connection, runs a single
statement, commits and closes the connection again. The blocking sqlite3
work runs in a worker thread so callers only await persistence I/O.
"""

import asyncio
import sqlite3
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import TypeVar

from .models import Goal, Mood, TeamMember

T = TypeVar("T")

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

SCHEMA = """
CREATE TABLE IF NOT EXISTS TeamMembers (
    Id INTEGER PRIMARY KEY AUTOINCREMENT,
    Name TEXT NOT NULL,
    CurrentMood TEXT,
    MoodUpdatedAt TEXT
);

CREATE TABLE IF NOT EXISTS Goals (
    Id INTEGER PRIMARY KEY AUTOINCREMENT,
    TeamMemberId INTEGER NOT NULL,
    GoalText TEXT NOT NULL,
    CreatedAt TEXT NOT NULL,
    IsCompleted INTEGER NOT NULL DEFAULT 0,
    FOREIGN KEY (TeamMemberId) REFERENCES TeamMembers(Id)
);

CREATE INDEX IF NOT EXISTS IX_Goals_TeamMemberId ON Goals(TeamMemberId);
"""


# MARK: - Row mapping


def format_timestamp(value: datetime) -> str:
    """Render a datetime as the stored UTC text format."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.strftime(TIMESTAMP_FORMAT)


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse a stored UTC timestamp back into an aware datetime."""
    if value is None:
        return None
    return datetime.strptime(value, TIMESTAMP_FORMAT).replace(tzinfo=timezone.utc)


def _team_member_from_row(row: sqlite3.Row) -> TeamMember:
    mood = row["CurrentMood"]
    return TeamMember(
        id=row["Id"],
        name=row["Name"],
        current_mood=Mood(mood) if mood is not None else None,
        mood_updated_at=parse_timestamp(row["MoodUpdatedAt"]),
    )


def _goal_from_row(row: sqlite3.Row, prefix: str = "") -> Goal:
    return Goal(
        id=row[f"{prefix}Id"],
        team_member_id=row[f"{prefix}TeamMemberId"],
        goal_text=row[f"{prefix}GoalText"],
        created_at=parse_timestamp(row[f"{prefix}CreatedAt"]),
        is_completed=bool(row[f"{prefix}IsCompleted"]),
    )


# MARK: - Connections


class Database:
    """
    Connection factory for a SQLite database file.

    Args:
        path: Filesystem path of the database file
    """

    def __init__(self, path: str) -> None:
        self.path = path

    def connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.path)
        conn.row_factory = sqlite3.Row
        # Foreign keys are off by default in SQLite, per connection
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    @contextmanager
    def cursor(self) -> Iterator[sqlite3.Cursor]:
        """Yield a cursor, commit on success and always close the connection."""
        conn = self.connect()
        try:
            yield conn.cursor()
            conn.commit()
        finally:
            conn.close()

    async def run(self, fn: Callable[[sqlite3.Cursor], T]) -> T:
        """Run ``fn`` against a fresh cursor in a worker thread."""

        def _call() -> T:
            with self.cursor() as cur:
                return fn(cur)

        return await asyncio.to_thread(_call)

    def initialize(self) -> None:
        """Create the tables if they do not exist yet."""
        conn = self.connect()
        try:
            conn.executescript(SCHEMA)
            conn.commit()
        finally:
            conn.close()


# MARK: - Repositories


class TeamMemberRepository:
    """Statements against the ``TeamMembers`` table."""

    def __init__(self, db: Database) -> None:
        self.db = db

    async def list_all(self, include_goals: bool = False) -> list[TeamMember]:
        """
        Fetch all team members ordered by name.

        With ``include_goals`` a single LEFT JOIN is folded into members,
        keyed by member id, with goals newest first.
        """
        if not include_goals:
            rows = await self.db.run(
                lambda cur: cur.execute(
                    "SELECT Id, Name, CurrentMood, MoodUpdatedAt "
                    "FROM TeamMembers ORDER BY Name, Id"
                ).fetchall()
            )
            return [_team_member_from_row(row) for row in rows]

        rows = await self.db.run(
            lambda cur: cur.execute(
                """
                SELECT
                    tm.Id, tm.Name, tm.CurrentMood, tm.MoodUpdatedAt,
                    g.Id AS GoalId, g.TeamMemberId AS GoalTeamMemberId,
                    g.GoalText AS GoalGoalText, g.CreatedAt AS GoalCreatedAt,
                    g.IsCompleted AS GoalIsCompleted
                FROM TeamMembers tm
                LEFT JOIN Goals g ON tm.Id = g.TeamMemberId
                ORDER BY tm.Name, tm.Id, g.CreatedAt DESC, g.Id DESC
                """
            ).fetchall()
        )

        members: dict[int, TeamMember] = {}
        for row in rows:
            member = members.get(row["Id"])
            if member is None:
                member = members[row["Id"]] = _team_member_from_row(row)
            if row["GoalId"] is not None:
                member.goals.append(_goal_from_row(row, prefix="Goal"))
        return list(members.values())

    async def get(self, team_member_id: int) -> TeamMember | None:
        row = await self.db.run(
            lambda cur: cur.execute(
                "SELECT Id, Name, CurrentMood, MoodUpdatedAt "
                "FROM TeamMembers WHERE Id = ?",
                (team_member_id,),
            ).fetchone()
        )
        return _team_member_from_row(row) if row is not None else None

    async def update_mood(
        self, team_member_id: int, mood: Mood, timestamp: datetime
    ) -> int:
        """Write mood and timestamp together; returns the affected row count."""
        return await self.db.run(
            lambda cur: cur.execute(
                "UPDATE TeamMembers SET CurrentMood = ?, MoodUpdatedAt = ? "
                "WHERE Id = ?",
                (mood.value, format_timestamp(timestamp), team_member_id),
            ).rowcount
        )

    async def insert(self, name: str) -> TeamMember:
        team_member_id = await self.db.run(
            lambda cur: cur.execute(
                "INSERT INTO TeamMembers (Name) VALUES (?)", (name,)
            ).lastrowid
        )
        return TeamMember(id=team_member_id, name=name)

    async def count(self) -> int:
        return await self.db.run(
            lambda cur: cur.execute("SELECT COUNT(*) FROM TeamMembers").fetchone()[0]
        )

    async def mood_breakdown(self) -> dict[str, int]:
        """Count members per current mood, ignoring members without one."""
        rows = await self.db.run(
            lambda cur: cur.execute(
                "SELECT CurrentMood, COUNT(*) AS Total FROM TeamMembers "
                "WHERE CurrentMood IS NOT NULL GROUP BY CurrentMood "
                "ORDER BY CurrentMood"
            ).fetchall()
        )
        return {row["CurrentMood"]: row["Total"] for row in rows}


class GoalRepository:
    """Statements against the ``Goals`` table."""

    def __init__(self, db: Database) -> None:
        self.db = db

    async def insert(
        self,
        team_member_id: int,
        goal_text: str,
        created_at: datetime,
        is_completed: bool = False,
    ) -> Goal:
        goal_id = await self.db.run(
            lambda cur: cur.execute(
                "INSERT INTO Goals (TeamMemberId, GoalText, CreatedAt, IsCompleted) "
                "VALUES (?, ?, ?, ?)",
                (
                    team_member_id,
                    goal_text,
                    format_timestamp(created_at),
                    1 if is_completed else 0,
                ),
            ).lastrowid
        )
        return Goal(
            id=goal_id,
            team_member_id=team_member_id,
            goal_text=goal_text,
            created_at=created_at,
            is_completed=is_completed,
        )

    async def get(self, goal_id: int) -> Goal | None:
        row = await self.db.run(
            lambda cur: cur.execute(
                "SELECT Id, TeamMemberId, GoalText, CreatedAt, IsCompleted "
                "FROM Goals WHERE Id = ?",
                (goal_id,),
            ).fetchone()
        )
        return _goal_from_row(row) if row is not None else None

    async def toggle_completion(self, goal_id: int) -> int:
        """Flip ``IsCompleted``; a missing row is a no-op."""
        return await self.db.run(
            lambda cur: cur.execute(
                "UPDATE Goals "
                "SET IsCompleted = CASE WHEN IsCompleted = 0 THEN 1 ELSE 0 END "
                "WHERE Id = ?",
                (goal_id,),
            ).rowcount
        )

    async def delete(self, goal_id: int) -> int:
        """Delete a goal; returns the affected row count."""
        return await self.db.run(
            lambda cur: cur.execute(
                "DELETE FROM Goals WHERE Id = ?", (goal_id,)
            ).rowcount
        )

    async def completion_counts(self) -> tuple[int, int]:
        """Return ``(total, completed)`` goal counts."""
        row = await self.db.run(
            lambda cur: cur.execute(
                "SELECT COUNT(*) AS Total, COALESCE(SUM(IsCompleted), 0) AS Completed "
                "FROM Goals"
            ).fetchone()
        )
        return row["Total"], row["Completed"]


class TeamPulseStore:
    """Bundles the database and its repositories for the app factory."""

    def __init__(self, path: str) -> None:
        self.db = Database(path)
        self.team_members = TeamMemberRepository(self.db)
        self.goals = GoalRepository(self.db)

    def initialize(self) -> None:
        self.db.initialize()
