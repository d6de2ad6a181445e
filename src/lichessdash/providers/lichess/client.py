"""Lichess provider backed by the public REST API."""

from dataclasses import replace

import requests

from lichessdash.core.exceptions import (
    NotFoundError,
    UpstreamError,
    UpstreamUnavailableError,
)
from lichessdash.core.interfaces import RatingProvider
from lichessdash.core.models import (
    NO_BIO,
    LeaderboardEntry,
    PlayerProfile,
    Rating,
    TournamentClock,
    TournamentStatus,
    TournamentSummary,
)
from lichessdash.core.retry import RetryPolicy
from lichessdash.logging_utils import get_logger

logger = get_logger(__name__)

INVALID_RESPONSE = "Invalid response from Lichess API"


def _as_dict(value) -> dict:
    return value if isinstance(value, dict) else {}


class LichessClient(RatingProvider):
    """Provider for Lichess using the public, unauthenticated API.

    Every outbound call goes through a :class:`~lichessdash.core.retry
    .RetryPolicy` (by default two retries, one second apart) and a fixed
    per-request timeout.  Once the policy is exhausted, the final
    ``requests`` failure is translated into the domain taxonomy:

    * timeouts become :class:`UpstreamUnavailableError` (``"timeout"``);
    * DNS and connection failures become
      :class:`UpstreamUnavailableError` (``"connection"``);
    * HTTP 404 on a named user becomes :class:`NotFoundError`;
    * anything else, malformed payloads included, becomes
      :class:`UpstreamError`.
    """

    BASE_URL = "https://lichess.org/api"

    def __init__(
        self,
        user_agent: str,
        base_url: str | None = None,
        timeout: float = 10.0,
        retry: RetryPolicy | None = None,
    ):
        """Initialise the client.

        Args:
            user_agent: The User-Agent header value for all HTTP requests.
            base_url: Override for :attr:`BASE_URL`.
            timeout: Per-request timeout in seconds.
            retry: Retry policy applied to every call.  Defaults to two
                retries with a one-second delay.
        """
        self.base_url = (base_url or self.BASE_URL).rstrip("/")
        self.timeout = timeout
        # Only transport and HTTP failures are retried.
        self.retry = replace(
            retry or RetryPolicy(), retry_on=(requests.RequestException,)
        )

        self.session = requests.Session()
        self.session.headers.update({
            "User-Agent": user_agent,
            "Accept": "application/json",
        })

    def get_leaderboard(self, variant: str, count: int) -> list[LeaderboardEntry]:
        """Return the top players for a variant.

        The rating of each entry is read from the variant-specific
        performance block (``perfs.<variant>.rating``), falling back to a
        top-level ``rating`` field when the block is absent.

        Args:
            variant: The Lichess perf type (e.g. ``"blitz"``).
            count: Number of players to request.

        Returns:
            A list of :class:`~lichessdash.core.models.LeaderboardEntry`
            instances in upstream order, at most *count* long.

        Raises:
            UpstreamUnavailableError: On timeout or connection failure.
            UpstreamError: On any other failure or a malformed payload.
        """
        data = self._get(f"/player/top/{count}/{variant}")
        users = data.get("users") if isinstance(data, dict) else None
        if not isinstance(users, list):
            raise UpstreamError(INVALID_RESPONSE)
        logger.info("Got %d players from %s leaderboard", len(users), variant)
        try:
            return [
                self._parse_leaderboard_entry(u, variant)
                for u in users[:count]
                if isinstance(u, dict)
            ]
        except (AttributeError, TypeError, ValueError) as exc:
            raise UpstreamError(INVALID_RESPONSE) from exc

    def get_profile(self, username: str) -> PlayerProfile:
        """Return the public profile of a player.

        Args:
            username: The player's Lichess username.

        Returns:
            A :class:`~lichessdash.core.models.PlayerProfile` instance with
            fallback values for any field Lichess omits.

        Raises:
            NotFoundError: If Lichess reports the user does not exist.
            UpstreamUnavailableError: On timeout or connection failure.
            UpstreamError: On any other failure or a malformed payload.
        """
        data = self._get(f"/user/{username}", not_found="User not found")
        if not isinstance(data, dict):
            raise UpstreamError(INVALID_RESPONSE)
        try:
            return self._parse_profile(data, username)
        except (AttributeError, TypeError, ValueError) as exc:
            raise UpstreamError(INVALID_RESPONSE) from exc

    def get_tournaments(self) -> list[TournamentSummary]:
        """Return created and started tournaments, created ones first.

        Returns:
            A list of :class:`~lichessdash.core.models.TournamentSummary`
            instances.  Finished tournaments are not included.

        Raises:
            UpstreamUnavailableError: On timeout or connection failure.
            UpstreamError: On any other failure or a malformed payload.
        """
        data = self._get("/tournament")
        if not isinstance(data, dict):
            raise UpstreamError(INVALID_RESPONSE)
        try:
            raw = [*(data.get("created") or []), *(data.get("started") or [])]
            return [
                self._parse_tournament(t) for t in raw if isinstance(t, dict)
            ]
        except (AttributeError, TypeError, ValueError) as exc:
            raise UpstreamError(INVALID_RESPONSE) from exc

    # -------------------------
    # Internal helpers
    # -------------------------

    def _fetch(self, url: str) -> requests.Response:
        r = self.session.get(url, timeout=self.timeout)
        r.raise_for_status()
        return r

    def _get(self, path: str, not_found: str | None = None):
        """Perform a GET request under the retry policy and decode the body.

        Args:
            path: The API path, e.g. ``"/user/DrNykterstein"``.
            not_found: Message for :class:`NotFoundError` when the final
                attempt returns HTTP 404.  When ``None``, a 404 is reported
                as a generic :class:`UpstreamError`.

        Returns:
            The decoded JSON body.

        Raises:
            NotFoundError: On HTTP 404 when *not_found* is set.
            UpstreamUnavailableError: On timeout or connection failure.
            UpstreamError: On any other failure or an undecodable body.
        """
        url = f"{self.base_url}{path}"
        try:
            r = self.retry.call(self._fetch, url, logger=logger)
        except requests.Timeout as exc:
            raise UpstreamUnavailableError(
                "Lichess API is currently unavailable. Please try again later.",
                kind=UpstreamUnavailableError.TIMEOUT,
            ) from exc
        except requests.ConnectionError as exc:
            raise UpstreamUnavailableError(
                "Cannot connect to Lichess. Please check your internet connection.",
                kind=UpstreamUnavailableError.CONNECTION,
            ) from exc
        except requests.HTTPError as exc:
            status = getattr(exc.response, "status_code", None)
            if status == 404 and not_found is not None:
                raise NotFoundError(not_found) from exc
            raise UpstreamError(
                f"Lichess API returned HTTP {status} for {path}"
            ) from exc
        except requests.RequestException as exc:
            raise UpstreamError(f"Request to {path} failed: {exc}") from exc

        try:
            return r.json()
        except ValueError as exc:
            raise UpstreamError(INVALID_RESPONSE) from exc

    @staticmethod
    def _parse_rating(raw: dict) -> Rating:
        return Rating(
            rating=raw.get("rating"),
            games=raw.get("games") or 0,
            rd=raw.get("rd"),
            progress=raw.get("prog"),
            provisional=bool(raw.get("prov", False)),
        )

    @staticmethod
    def _parse_leaderboard_entry(raw: dict, variant: str) -> LeaderboardEntry:
        """Map a raw top-players entry to a LeaderboardEntry domain model.

        Args:
            raw: One element of the ``users`` array.
            variant: The perf type the leaderboard was requested for.

        Returns:
            A :class:`~lichessdash.core.models.LeaderboardEntry` instance.
        """
        perf = _as_dict(_as_dict(raw.get("perfs")).get(variant))
        return LeaderboardEntry(
            username=raw.get("username", ""),
            title=raw.get("title") or None,
            rating=perf.get("rating") or raw.get("rating"),
            progress=perf.get("progress") or raw.get("progress") or 0,
            online=bool(raw.get("online", False)),
            patron=bool(raw.get("patron", False)),
        )

    @classmethod
    def _parse_profile(cls, raw: dict, username: str) -> PlayerProfile:
        """Map a raw user document to a PlayerProfile domain model.

        Perf entries without a rating (e.g. Puzzle Storm scores) are skipped.
        The nested ``profile``, ``perfs`` and ``count`` blocks must be
        objects when present.

        Args:
            raw: The decoded ``/user/{username}`` response.
            username: The requested username, used when the payload omits it.

        Returns:
            A :class:`~lichessdash.core.models.PlayerProfile` instance.

        Raises:
            UpstreamError: If a nested block has the wrong shape.
        """
        for key in ("profile", "perfs", "count"):
            if raw.get(key) is not None and not isinstance(raw[key], dict):
                raise UpstreamError(INVALID_RESPONSE)
        profile = raw.get("profile") or {}
        perfs = raw.get("perfs") or {}
        return PlayerProfile(
            username=raw.get("username") or username,
            bio=profile.get("bio") or NO_BIO,
            games_played=(raw.get("count") or {}).get("all") or 0,
            ratings={
                variant: cls._parse_rating(perf)
                for variant, perf in perfs.items()
                if isinstance(perf, dict) and "rating" in perf
            },
            profile_image=profile.get("avatar") or None,
            title=raw.get("title") or None,
            online=bool(raw.get("online", False)),
            country=profile.get("country") or profile.get("flag") or None,
        )

    @staticmethod
    def _parse_tournament(raw: dict) -> TournamentSummary:
        """Map a raw tournament dictionary to a TournamentSummary.

        Args:
            raw: One element of the ``created`` or ``started`` arrays.

        Returns:
            A :class:`~lichessdash.core.models.TournamentSummary` instance.
        """
        clock = raw.get("clock")
        winner = raw.get("winner")
        perf = raw.get("perf")
        return TournamentSummary(
            id=str(raw.get("id", "")),
            name=raw.get("fullName") or raw.get("name") or "",
            variant=_as_dict(raw.get("variant")).get("name") or "Standard",
            rated=bool(raw.get("rated", False)),
            clock=(
                TournamentClock(
                    limit=clock.get("limit") or 0,
                    increment=clock.get("increment") or 0,
                )
                if isinstance(clock, dict)
                else None
            ),
            starts_at=raw.get("startsAt"),
            status=TournamentStatus.from_code(raw.get("status")),
            nb_players=raw.get("nbPlayers") or 0,
            winner=winner.get("name") if isinstance(winner, dict) else winner,
            perf=perf.get("name") if isinstance(perf, dict) else perf,
            minutes=raw.get("minutes"),
            system=raw.get("system") or "arena",
        )
