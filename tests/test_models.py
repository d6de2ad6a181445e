"""Unit tests for core domain models."""

from lichessdash.core.models import (
    NO_BIO,
    LeaderboardEntry,
    PlayerProfile,
    Rating,
    TournamentClock,
    TournamentStatus,
    TournamentSummary,
)


class TestRating:
    def test_optional_fields_default(self):
        rating = Rating(rating=1500)
        assert rating.games == 0
        assert rating.rd is None
        assert rating.progress is None
        assert rating.provisional is False

    def test_to_dict_omits_unset_fields(self):
        assert Rating(rating=1500, games=10).to_dict() == {
            "rating": 1500,
            "games": 10,
        }

    def test_to_dict_includes_deviation_and_progress(self):
        data = Rating(
            rating=2100, games=5, rd=80.5, progress=-3, provisional=True
        ).to_dict()
        assert data["rd"] == 80.5
        assert data["prog"] == -3
        assert data["prov"] is True


class TestPlayerProfile:
    def test_defaults(self):
        profile = PlayerProfile(username="alice")
        assert profile.bio == NO_BIO
        assert profile.games_played == 0
        assert profile.ratings == {}
        assert profile.online is False
        assert profile.degraded is False

    def test_to_dict_uses_camel_case_and_hides_degraded(self):
        profile = PlayerProfile(
            username="alice",
            games_played=12,
            ratings={"blitz": Rating(rating=1800, games=12)},
            profile_image="https://example.org/a.png",
            degraded=True,
        )
        data = profile.to_dict()
        assert data["gamesPlayed"] == 12
        assert data["profileImage"] == "https://example.org/a.png"
        assert data["ratings"] == {"blitz": {"rating": 1800, "games": 12}}
        assert "degraded" not in data

    def test_from_dict_fills_missing_bio(self):
        profile = PlayerProfile.from_dict(
            {"username": "bob", "bio": "", "ratings": {"rapid": {"rating": 1600}}}
        )
        assert profile.bio == NO_BIO
        assert profile.ratings["rapid"].rating == 1600
        assert profile.ratings["rapid"].games == 0


class TestLeaderboardEntry:
    def test_from_dict_defaults(self):
        entry = LeaderboardEntry.from_dict({"username": "carol", "rating": 2900})
        assert entry.title is None
        assert entry.progress == 0
        assert entry.online is False
        assert entry.patron is False


class TestTournamentStatus:
    def test_known_codes(self):
        assert TournamentStatus.from_code(10) is TournamentStatus.CREATED
        assert TournamentStatus.from_code(20) is TournamentStatus.STARTING
        assert TournamentStatus.from_code(30) is TournamentStatus.STARTED

    def test_unknown_codes(self):
        assert TournamentStatus.from_code(99) is TournamentStatus.UNKNOWN
        assert TournamentStatus.from_code(None) is TournamentStatus.UNKNOWN
        assert TournamentStatus.from_code("x") is TournamentStatus.UNKNOWN


class TestTournamentSummary:
    def test_defaults(self):
        t = TournamentSummary(id="abc", name="Arena")
        assert t.variant == "Standard"
        assert t.system == "arena"
        assert t.status is TournamentStatus.UNKNOWN
        assert t.clock is None

    def test_to_dict_wire_shape(self):
        t = TournamentSummary(
            id="abc",
            name="Hourly Bullet Arena",
            clock=TournamentClock(limit=60, increment=0),
            starts_at=1700000000000,
            status=TournamentStatus.STARTED,
            nb_players=120,
        )
        data = t.to_dict()
        assert data["timeControl"] == {"limit": 60, "increment": 0}
        assert data["startsAt"] == 1700000000000
        assert data["status"] == 30
        assert data["nbPlayers"] == 120

    def test_from_dict_without_clock(self):
        t = TournamentSummary.from_dict(
            {"id": "x", "name": "Y", "timeControl": None, "status": 10}
        )
        assert t.clock is None
        assert t.status is TournamentStatus.CREATED
