"""
Async HTTP client for the Team Pulse API.
"""

from typing import Any

import httpx

from .models import Goal, Mood, Stats, TeamMember

DEFAULT_BASE_URL = "http://localhost:8000"
DEFAULT_API_PREFIX = "/api"


class ApiError(Exception):
    """A non-2xx response, carrying the server's error envelope."""

    def __init__(self, status_code: int, code: str, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.code = code
        self.message = message

    @classmethod
    def from_response(cls, response: httpx.Response) -> "ApiError":
        try:
            error = response.json().get("error") or {}
        except ValueError:
            error = {}
        return cls(
            response.status_code,
            error.get("code", "UNKNOWN_ERROR"),
            error.get("message", f"HTTP {response.status_code}"),
        )


class TeamPulseClient:
    """
    Thin wrapper over the REST surface that unwraps ``{"data": ...}``.

    Args:
        http: The ``httpx.AsyncClient`` to send requests with; its
            ``base_url`` should point at the server root
        api_prefix: Path prefix the API routes are mounted under
    """

    def __init__(self, http: httpx.AsyncClient, api_prefix: str = DEFAULT_API_PREFIX) -> None:
        self.http = http
        self.api_prefix = api_prefix

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        response = await self.http.request(method, f"{self.api_prefix}{path}", **kwargs)
        if response.is_error:
            raise ApiError.from_response(response)
        if response.status_code == httpx.codes.NO_CONTENT:
            return None
        return response.json()["data"]

    async def list_team_members(self, include_goals: bool = False) -> list[TeamMember]:
        data = await self._request(
            "GET",
            "/team-members",
            params={"includeGoals": "true" if include_goals else "false"},
        )
        return [TeamMember.model_validate(item) for item in data]

    async def update_mood(self, team_member_id: int, mood: Mood) -> TeamMember:
        data = await self._request(
            "PUT", f"/team-members/{team_member_id}/mood", json={"mood": mood.value}
        )
        return TeamMember.model_validate(data)

    async def create_goal(self, team_member_id: int, goal_text: str) -> Goal:
        data = await self._request(
            "POST",
            "/goals",
            json={"teamMemberId": team_member_id, "goalText": goal_text},
        )
        return Goal.model_validate(data)

    async def toggle_goal(self, goal_id: int) -> Goal:
        return Goal.model_validate(await self._request("PUT", f"/goals/{goal_id}/toggle"))

    async def delete_goal(self, goal_id: int) -> None:
        await self._request("DELETE", f"/goals/{goal_id}")

    async def get_stats(self) -> Stats:
        return Stats.model_validate(await self._request("GET", "/stats"))
