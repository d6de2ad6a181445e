"""Data model dataclasses shared across providers and the dashboard."""

from dataclasses import dataclass, field
from enum import IntEnum

NO_BIO = "No bio available"
"""Placeholder used when a player has no bio (or it could not be fetched)."""


# ----------------------
# Rating
# ----------------------


@dataclass
class Rating:
    """A player's rating in a single variant."""

    rating: int | None
    games: int = 0
    rd: float | None = None
    """Glicko-2 rating deviation, when the provider reports it."""

    progress: int | None = None
    """Short-term rating change reported alongside the rating."""

    provisional: bool = False

    def to_dict(self) -> dict:
        data: dict = {"rating": self.rating, "games": self.games}
        if self.rd is not None:
            data["rd"] = self.rd
        if self.progress is not None:
            data["prog"] = self.progress
        if self.provisional:
            data["prov"] = True
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Rating":
        return cls(
            rating=data.get("rating"),
            games=data.get("games") or 0,
            rd=data.get("rd"),
            progress=data.get("prog", data.get("progress")),
            provisional=bool(data.get("prov", False)),
        )


# ----------------------
# PlayerProfile
# ----------------------


@dataclass
class PlayerProfile:
    """Represents a player's public profile."""

    username: str
    bio: str = NO_BIO
    games_played: int = 0
    ratings: dict[str, Rating] = field(default_factory=dict)
    """Ratings keyed by variant name (``"bullet"``, ``"blitz"``, ...)."""

    profile_image: str | None = None
    title: str | None = None
    online: bool = False
    country: str | None = None

    degraded: bool = False
    """``True`` when the profile was filled from leaderboard data alone
    because the detailed profile lookup failed.  Not serialised."""

    def to_dict(self) -> dict:
        """Return the camelCase wire representation."""
        return {
            "username": self.username,
            "bio": self.bio,
            "gamesPlayed": self.games_played,
            "ratings": {
                variant: rating.to_dict()
                for variant, rating in self.ratings.items()
            },
            "profileImage": self.profile_image,
            "title": self.title,
            "online": self.online,
            "country": self.country,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "PlayerProfile":
        """Build a profile from its wire representation."""
        return cls(
            username=data.get("username", ""),
            bio=data.get("bio") or NO_BIO,
            games_played=data.get("gamesPlayed") or 0,
            ratings={
                variant: Rating.from_dict(raw)
                for variant, raw in (data.get("ratings") or {}).items()
            },
            profile_image=data.get("profileImage"),
            title=data.get("title"),
            online=bool(data.get("online", False)),
            country=data.get("country"),
        )


# ----------------------
# LeaderboardEntry
# ----------------------


@dataclass
class LeaderboardEntry:
    """Represents one row of a variant leaderboard."""

    username: str
    title: str | None
    rating: int | None
    progress: int = 0
    online: bool = False
    patron: bool = False

    def to_dict(self) -> dict:
        return {
            "username": self.username,
            "title": self.title,
            "rating": self.rating,
            "progress": self.progress,
            "online": self.online,
            "patron": self.patron,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "LeaderboardEntry":
        return cls(
            username=data.get("username", ""),
            title=data.get("title"),
            rating=data.get("rating"),
            progress=data.get("progress") or 0,
            online=bool(data.get("online", False)),
            patron=bool(data.get("patron", False)),
        )


# ----------------------
# Tournament
# ----------------------


class TournamentStatus(IntEnum):
    """Lifecycle state of a tournament, using the provider's numeric codes."""

    UNKNOWN = 0
    CREATED = 10
    STARTING = 20
    STARTED = 30

    @classmethod
    def from_code(cls, code: object) -> "TournamentStatus":
        """Map a raw status code to a member, ``UNKNOWN`` when unmapped."""
        try:
            return cls(int(code))
        except (TypeError, ValueError):
            return cls.UNKNOWN


@dataclass
class TournamentClock:
    """Time control of a tournament."""

    limit: int
    """Initial clock time in seconds."""

    increment: int
    """Increment per move in seconds."""

    def to_dict(self) -> dict:
        return {"limit": self.limit, "increment": self.increment}


@dataclass
class TournamentSummary:
    """Represents a created or running tournament."""

    id: str
    name: str
    variant: str = "Standard"
    rated: bool = False
    clock: TournamentClock | None = None
    starts_at: int | None = None
    """Start time as a Unix timestamp in milliseconds."""

    status: TournamentStatus = TournamentStatus.UNKNOWN
    nb_players: int = 0
    winner: str | None = None
    perf: str | None = None
    """Display name of the performance category (e.g. ``"Blitz"``)."""

    minutes: int | None = None
    """Scheduled duration in minutes."""

    system: str = "arena"

    def to_dict(self) -> dict:
        """Return the camelCase wire representation."""
        return {
            "id": self.id,
            "name": self.name,
            "variant": self.variant,
            "rated": self.rated,
            "timeControl": self.clock.to_dict() if self.clock else None,
            "startsAt": self.starts_at,
            "status": int(self.status),
            "nbPlayers": self.nb_players,
            "winner": self.winner,
            "perf": self.perf,
            "minutes": self.minutes,
            "system": self.system,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "TournamentSummary":
        """Build a tournament summary from its wire representation."""
        clock = data.get("timeControl")
        return cls(
            id=str(data.get("id", "")),
            name=data.get("name", ""),
            variant=data.get("variant") or "Standard",
            rated=bool(data.get("rated", False)),
            clock=(
                TournamentClock(
                    limit=clock.get("limit", 0),
                    increment=clock.get("increment", 0),
                )
                if clock
                else None
            ),
            starts_at=data.get("startsAt"),
            status=TournamentStatus.from_code(data.get("status")),
            nb_players=data.get("nbPlayers") or 0,
            winner=data.get("winner"),
            perf=data.get("perf"),
            minutes=data.get("minutes"),
            system=data.get("system") or "arena",
        )
