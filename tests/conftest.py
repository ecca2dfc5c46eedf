"""
Shared fixtures for the Team Pulse test suite.
"""

import pytest

from team_pulse.store import TeamPulseStore


@pytest.fixture
def store(tmp_path) -> TeamPulseStore:
    """A freshly initialised store backed by a temporary database file."""
    store = TeamPulseStore(str(tmp_path / "team-pulse.db"))
    store.initialize()
    return store


@pytest.fixture
def seed_members(store):
    """Insert team members synchronously and return their IDs in order."""

    def _seed(*names: str) -> list[int]:
        ids = []
        with store.db.cursor() as cur:
            for name in names:
                cur.execute("INSERT INTO TeamMembers (Name) VALUES (?)", (name,))
                ids.append(cur.lastrowid)
        return ids

    return _seed
