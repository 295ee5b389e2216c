"""
Async client for the (unofficial) Peloton REST API.

Authentication is a plain username/password login that returns a session id;
every later request carries it as the `peloton_session_id` cookie.

Only the endpoints the sync pipeline needs are wrapped:
  POST /auth/login
  GET  /api/user/{user_id}/workouts        recent workouts, newest first
  GET  /api/workout/{workout_id}           workout detail (ride, times, totals)
  GET  /api/workout/{workout_id}/performance_graph   per-second metrics
"""
from typing import Any, Dict, List, Optional

import httpx

BASE_URL_DEFAULT = "https://api.onepeloton.com"
REQUEST_TIMEOUT = 30.0
SESSION_COOKIE = "peloton_session_id"


class PelotonApiError(RuntimeError):
    """Raised when Peloton rejects a request or cannot be reached."""


class PelotonClient:
    """
    Thin async wrapper over httpx for the Peloton API.

    Call login() before any data methods. Use as an async context manager
    (or call close()) so the underlying connection pool is released.
    """

    def __init__(
        self,
        email: str,
        password: str,
        http_client: Optional[httpx.AsyncClient] = None,
        base_url: str = BASE_URL_DEFAULT,
    ):
        """
        Args:
            email: Peloton account email or username.
            password: Peloton account password.
            http_client: Pre-built httpx client (tests pass one with a MockTransport).
            base_url: API root, overridable for testing.
        """
        self._email = email
        self._password = password
        self._http = http_client or httpx.AsyncClient(timeout=REQUEST_TIMEOUT)
        self._base_url = base_url.rstrip("/")
        self.user_id: Optional[str] = None
        self._session_id: Optional[str] = None

    async def __aenter__(self) -> "PelotonClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self) -> None:
        await self._http.aclose()

    async def login(self) -> None:
        """
        Exchange credentials for a session id.

        Raises:
            PelotonApiError: if credentials are missing or rejected.
        """
        if not self._email or not self._password:
            raise PelotonApiError(
                "Peloton credentials are not configured. "
                "Set PELOTON_EMAIL and PELOTON_PASSWORD."
            )
        data = await self._request(
            "POST",
            "/auth/login",
            json={"username_or_email": self._email, "password": self._password},
        )
        self.user_id = data.get("user_id")
        self._session_id = data.get("session_id")
        if not self.user_id or not self._session_id:
            raise PelotonApiError("Peloton login response did not include a session.")

    async def get_recent_workouts(self, limit: int) -> List[Dict[str, Any]]:
        """Fetch the `limit` most recent workouts (summary dicts, newest first)."""
        self._require_login()
        data = await self._request(
            "GET",
            f"/api/user/{self.user_id}/workouts",
            params={
                "joins": "peloton.ride",
                "limit": limit,
                "page": 0,
                "sort_by": "-created",
            },
        )
        return data.get("data", [])

    async def get_workout(self, workout_id: str) -> Dict[str, Any]:
        self._require_login()
        return await self._request("GET", f"/api/workout/{workout_id}")

    async def get_workout_samples(self, workout_id: str) -> Dict[str, Any]:
        """Fetch the per-second performance graph for a workout."""
        self._require_login()
        return await self._request(
            "GET",
            f"/api/workout/{workout_id}/performance_graph",
            params={"every_n": 1},
        )

    # ─── Internal helpers ─────────────────────────────────────────────────────

    def _require_login(self) -> None:
        if self._session_id is None:
            raise PelotonApiError("Not logged in. Call login() first.")

    async def _request(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        headers = {"Cookie": f"{SESSION_COOKIE}={self._session_id}"} if self._session_id else None
        try:
            resp = await self._http.request(
                method, f"{self._base_url}{path}", headers=headers, **kwargs
            )
            resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise PelotonApiError(
                f"Peloton {method} {path} failed with status {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise PelotonApiError(f"Peloton {method} {path} failed: {exc}") from exc
        return resp.json()
