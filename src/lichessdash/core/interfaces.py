"""Abstract interface for chess rating providers."""

from abc import ABC, abstractmethod

from lichessdash.core.models import (
    LeaderboardEntry,
    PlayerProfile,
    TournamentSummary,
)


class RatingProvider(ABC):
    """Abstract base class for chess rating and tournament providers.

    Concrete providers translate every transport failure into the
    :mod:`lichessdash.core.exceptions` taxonomy, so the service layer never
    has to know which HTTP library (or platform) sits underneath.
    """

    @abstractmethod
    def get_leaderboard(self, variant: str, count: int) -> list[LeaderboardEntry]:
        """Return the top players for a variant.

        Args:
            variant: The variant key (e.g. ``"bullet"``, ``"blitz"``).
            count: Number of players to request.

        Returns:
            A list of :class:`LeaderboardEntry` instances in the provider's
            order (descending rating).

        Raises:
            UpstreamUnavailableError: On timeout or connection failure.
            UpstreamError: On any other failure or a malformed payload.
        """

    @abstractmethod
    def get_profile(self, username: str) -> PlayerProfile:
        """Return the public profile of a player.

        Args:
            username: The player's username (case-insensitive).

        Returns:
            A :class:`PlayerProfile` instance.

        Raises:
            NotFoundError: If the player does not exist.
            UpstreamUnavailableError: On timeout or connection failure.
            UpstreamError: On any other failure or a malformed payload.
        """

    @abstractmethod
    def get_tournaments(self) -> list[TournamentSummary]:
        """Return current tournaments, created ones first, then started ones.

        Returns:
            A list of :class:`TournamentSummary` instances.

        Raises:
            UpstreamUnavailableError: On timeout or connection failure.
            UpstreamError: On any other failure or a malformed payload.
        """
