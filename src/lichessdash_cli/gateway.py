"""HTTP client for the dashboard gateway.

The dashboard never talks to Lichess directly; every view goes through the
gateway's ``/api`` routes and turns error responses back into the library's
exception taxonomy with user-facing messages.
"""

import requests

from lichessdash.core.exceptions import (
    NotFoundError,
    UpstreamError,
    UpstreamUnavailableError,
    ValidationError,
)
from lichessdash.core.models import (
    LeaderboardEntry,
    PlayerProfile,
    TournamentSummary,
)

_TIMEOUT_MSG = "Lichess servers are currently slow. Please try again in a moment."
_CONNECTION_MSG = (
    "Unable to connect to Lichess. Please check your internet connection."
)


class GatewayClient:
    """Thin client for the gateway JSON API.

    Args:
        base_url: Gateway API root, e.g. ``"http://localhost:5000/api"``.
        timeout: Per-request timeout in seconds.  Generous, because a
            top-profiles request fans out to many upstream lookups.
    """

    def __init__(self, base_url: str, timeout: float = 60.0):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers.update({"Accept": "application/json"})

    def get_top_profiles(
        self, nb: int = 15, game_type: str = "bullet"
    ) -> list[PlayerProfile]:
        data = self._get(
            "/profiles",
            "profiles",
            params={"nb": nb, "gameType": game_type},
        )
        return [PlayerProfile.from_dict(p) for p in data]

    def get_profile(self, username: str) -> PlayerProfile:
        data = self._get(f"/profile/{username}", "profile")
        return PlayerProfile.from_dict(data)

    def get_leaderboard(
        self, game_type: str = "bullet", nb: int = 50
    ) -> list[LeaderboardEntry]:
        data = self._get(
            f"/leaderboards/{game_type}",
            "leaderboard data",
            params={"nb": nb},
        )
        return [LeaderboardEntry.from_dict(e) for e in data]

    def get_tournaments(self) -> list[TournamentSummary]:
        data = self._get("/tournaments", "tournaments data")
        return [TournamentSummary.from_dict(t) for t in data]

    # -------------------------
    # Internal helpers
    # -------------------------

    def _get(self, path: str, subject: str, params: dict | None = None):
        """GET a gateway route and decode the JSON body.

        Args:
            path: Route below the API root, e.g. ``"/tournaments"``.
            subject: What is being fetched, used in generic error messages.
            params: Optional query parameters.

        Returns:
            The decoded JSON body.

        Raises:
            NotFoundError: On HTTP 404.
            UpstreamUnavailableError: On HTTP 503, or when the gateway
                itself cannot be reached.
            UpstreamError: On any other error response or a bad body.
        """
        try:
            r = self.session.get(
                f"{self.base_url}{path}", params=params, timeout=self.timeout
            )
        except requests.Timeout as exc:
            raise UpstreamUnavailableError(
                f"The dashboard gateway at {self.base_url} timed out.",
                kind=UpstreamUnavailableError.TIMEOUT,
            ) from exc
        except requests.RequestException as exc:
            raise UpstreamUnavailableError(
                f"Cannot reach the dashboard gateway at {self.base_url}. "
                "Is 'lichessdash serve' running?",
            ) from exc

        if r.status_code == 404:
            raise NotFoundError("User not found. Please check the username.")
        if r.status_code == 503:
            body = self._error_body(r)
            code = body.get("code")
            if code == "TIMEOUT":
                raise UpstreamUnavailableError(
                    _TIMEOUT_MSG, kind=UpstreamUnavailableError.TIMEOUT
                )
            if code == "CONNECTION_ERROR":
                raise UpstreamUnavailableError(_CONNECTION_MSG)
            raise UpstreamUnavailableError(
                body.get("error") or "Lichess API is currently unavailable."
            )
        if r.status_code == 400:
            body = self._error_body(r)
            raise ValidationError(body.get("error") or "Invalid request.")
        if not r.ok:
            raise UpstreamError(
                f"Failed to fetch {subject}. Please try again later."
            )

        try:
            return r.json()
        except ValueError as exc:
            raise UpstreamError(
                f"Failed to fetch {subject}. Please try again later."
            ) from exc

    @staticmethod
    def _error_body(r: requests.Response) -> dict:
        try:
            body = r.json()
        except ValueError:
            return {}
        return body if isinstance(body, dict) else {}
