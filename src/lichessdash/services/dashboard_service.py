"""Service layer that wraps a RatingProvider for dashboard operations."""

from concurrent.futures import ThreadPoolExecutor

from lichessdash.core.exceptions import DashboardError
from lichessdash.core.interfaces import RatingProvider
from lichessdash.core.models import (
    NO_BIO,
    LeaderboardEntry,
    PlayerProfile,
    Rating,
    TournamentSummary,
)
from lichessdash.logging_utils import get_logger

logger = get_logger(__name__)

DEFAULT_VARIANT = "bullet"


class DashboardService:
    """Provides business-logic methods for the dashboard gateway.

    Delegates all upstream calls to the injected provider so that the
    service layer remains independent of any specific chess platform.
    """

    def __init__(
        self,
        provider: RatingProvider,
        max_profile_lookups: int = 15,
        tournament_limit: int = 20,
    ):
        """Initialise the service.

        Args:
            provider: A concrete implementation of :class:`RatingProvider`.
            max_profile_lookups: Maximum number of per-player profile
                lookups issued by :meth:`get_top_profiles`, whatever the
                requested count.
            tournament_limit: Maximum number of tournaments returned by
                :meth:`get_tournaments`.
        """
        self.provider = provider
        self.max_profile_lookups = max_profile_lookups
        self.tournament_limit = tournament_limit

    def get_top_profiles(
        self, count: int, variant: str = DEFAULT_VARIANT
    ) -> list[PlayerProfile]:
        """Return full profiles for the top players of a variant.

        Fetches the top-*count* leaderboard, then looks up the first
        :attr:`max_profile_lookups` players concurrently.  Lookups are
        independent: a failed one degrades to a profile built from the
        leaderboard entry (see :meth:`degraded_profile`) instead of failing
        the batch.

        Args:
            count: Number of players to request from the leaderboard.
            variant: The variant key.  Defaults to ``"bullet"``.

        Returns:
            One :class:`PlayerProfile` per looked-up player, in leaderboard
            order.

        Raises:
            DashboardError: Only if the leaderboard fetch itself fails.
        """
        logger.info("Fetching top %s %s players...", count, variant)
        entries = self.provider.get_leaderboard(variant, count)
        candidates = entries[: self.max_profile_lookups]
        if not candidates:
            return []

        def resolve(entry: LeaderboardEntry) -> PlayerProfile:
            try:
                return self.provider.get_profile(entry.username)
            except DashboardError as e:
                logger.warning(
                    "Failed to fetch profile for %s: %s", entry.username, e
                )
                return self.degraded_profile(entry, variant)

        with ThreadPoolExecutor(max_workers=len(candidates)) as pool:
            profiles = list(pool.map(resolve, candidates))

        degraded = sum(1 for p in profiles if p.degraded)
        logger.info(
            "Resolved %d profiles (%d degraded)", len(profiles), degraded
        )
        return profiles

    @staticmethod
    def degraded_profile(entry: LeaderboardEntry, variant: str) -> PlayerProfile:
        """Build a profile from leaderboard data alone.

        Args:
            entry: The leaderboard entry of the player.
            variant: The variant the leaderboard was fetched for.

        Returns:
            A :class:`PlayerProfile` with the entry's username, title and
            online flag, a single rating (with progress) for *variant*, and
            default bio, game count and country.
        """
        return PlayerProfile(
            username=entry.username,
            bio=NO_BIO,
            games_played=0,
            ratings={
                variant: Rating(
                    rating=entry.rating or 0, games=0, progress=entry.progress
                )
            },
            profile_image=None,
            title=entry.title,
            online=entry.online,
            country=None,
            degraded=True,
        )

    def get_profile(self, username: str) -> PlayerProfile:
        """Return the profile of a single player.

        Args:
            username: The player's username.

        Returns:
            A :class:`PlayerProfile` instance.
        """
        logger.info("Fetching profile for: %s", username)
        return self.provider.get_profile(username)

    def get_leaderboard(
        self, variant: str = DEFAULT_VARIANT, count: int = 50
    ) -> list[LeaderboardEntry]:
        """Return the top-*count* leaderboard for a variant.

        Args:
            variant: The variant key.
            count: Number of players to return.

        Returns:
            At most *count* :class:`LeaderboardEntry` instances in
            descending rating order, as supplied upstream.
        """
        logger.info("Fetching %s leaderboard (%s players)...", variant, count)
        return self.provider.get_leaderboard(variant, count)[:count]

    def get_tournaments(self) -> list[TournamentSummary]:
        """Return current tournaments, created ones before started ones.

        Truncation to :attr:`tournament_limit` is applied after the two
        groups are concatenated.

        Returns:
            A list of :class:`TournamentSummary` instances.
        """
        logger.info("Fetching tournaments...")
        tournaments = self.provider.get_tournaments()[: self.tournament_limit]
        logger.info("Found %d tournaments", len(tournaments))
        return tournaments
