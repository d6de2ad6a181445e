"""Tests for the gateway HTTP API.

The app is built around a FakeProvider, or around a LichessClient whose
session is faked, so no test reaches Lichess.
"""

import pytest
import requests
from fastapi.testclient import TestClient

from fakes import FakeProvider, FakeResponse, FakeSession, RoutedSession
from lichessdash.config import Settings
from lichessdash.core.exceptions import UpstreamError, UpstreamUnavailableError
from lichessdash.core.models import (
    LeaderboardEntry,
    PlayerProfile,
    Rating,
    TournamentClock,
    TournamentStatus,
    TournamentSummary,
)
from lichessdash.core.retry import RetryPolicy
from lichessdash.providers.lichess import LichessClient
from lichessdash_server.main import create_app


def _client(provider) -> TestClient:
    return TestClient(create_app(Settings(), provider=provider))


def _leaderboard(n, variant="bullet"):
    return [
        LeaderboardEntry(username=f"p{i}", title="GM", rating=3000 - i)
        for i in range(n)
    ]


def _profiles(entries, variant="bullet"):
    return {
        e.username: PlayerProfile(
            username=e.username,
            bio="Chess player",
            games_played=500,
            ratings={variant: Rating(rating=e.rating, games=500)},
        )
        for e in entries
    }


# ---------------------------------------------------------------------------
# Health and index
# ---------------------------------------------------------------------------


def test_health():
    response = _client(FakeProvider()).get("/api/test")
    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Server is working"
    assert body["status"] == "healthy"
    assert body["timestamp"]


def test_index_lists_endpoints():
    body = _client(FakeProvider()).get("/").json()
    assert body["message"] == "Lichess API Backend Server"
    assert any("/api/tournaments" in e for e in body["endpoints"])


def test_cors_allows_dashboard_origin():
    response = _client(FakeProvider()).get(
        "/api/test", headers={"Origin": "http://localhost:5173"}
    )
    assert response.headers["access-control-allow-origin"] == (
        "http://localhost:5173"
    )


# ---------------------------------------------------------------------------
# /api/profiles
# ---------------------------------------------------------------------------


def test_profiles_for_blitz():
    entries = _leaderboard(5, "blitz")
    provider = FakeProvider(
        leaderboard=entries, profiles=_profiles(entries, "blitz")
    )

    response = _client(provider).get(
        "/api/profiles", params={"nb": 5, "gameType": "blitz"}
    )

    assert response.status_code == 200
    body = response.json()
    assert provider.leaderboard_calls == [("blitz", 5)]
    assert [p["username"] for p in body] == [f"p{i}" for i in range(5)]
    assert body[0]["ratings"]["blitz"] == {"rating": 3000, "games": 500}
    assert body[0]["gamesPlayed"] == 500


def test_profiles_default_params():
    provider = FakeProvider(leaderboard=_leaderboard(20))
    provider.profiles = _profiles(provider.leaderboard)
    body = _client(provider).get("/api/profiles").json()
    assert provider.leaderboard_calls == [("bullet", 20)]
    assert len(body) == 15


def test_profiles_degrade_individual_failures():
    entries = _leaderboard(15)
    provider = FakeProvider(
        leaderboard=entries,
        profiles=_profiles(entries),
        profile_errors={
            "p4": UpstreamUnavailableError(
                "slow", kind=UpstreamUnavailableError.TIMEOUT
            ),
            "p9": UpstreamUnavailableError(
                "slow", kind=UpstreamUnavailableError.TIMEOUT
            ),
        },
    )

    response = _client(provider).get("/api/profiles", params={"nb": 15})

    assert response.status_code == 200
    body = response.json()
    assert len(body) == 15
    for i in (4, 9):
        assert body[i]["username"] == f"p{i}"
        assert body[i]["bio"] == "No bio available"
        assert body[i]["gamesPlayed"] == 0
        assert body[i]["ratings"] == {
            "bullet": {"rating": 3000 - i, "games": 0, "prog": 0}
        }
        assert body[i]["title"] == "GM"
    assert body[0]["bio"] == "Chess player"


@pytest.mark.parametrize("nb", ["0", "201", "abc"])
def test_profiles_invalid_nb(nb):
    response = _client(FakeProvider()).get("/api/profiles", params={"nb": nb})
    assert response.status_code == 400
    assert "nb" in response.json()["error"]


def test_profiles_leaderboard_timeout():
    provider = FakeProvider(
        leaderboard_error=UpstreamUnavailableError(
            "Lichess API is currently unavailable. Please try again later.",
            kind=UpstreamUnavailableError.TIMEOUT,
        )
    )
    response = _client(provider).get("/api/profiles")
    assert response.status_code == 503
    assert response.json()["code"] == "TIMEOUT"


def test_profiles_other_failure():
    provider = FakeProvider(leaderboard_error=UpstreamError("bad"))
    response = _client(provider).get("/api/profiles")
    assert response.status_code == 500
    assert response.json() == {"error": "Failed to fetch profiles"}


# ---------------------------------------------------------------------------
# /api/profile/{username}
# ---------------------------------------------------------------------------


def test_single_profile():
    provider = FakeProvider(
        profiles={"alice": PlayerProfile(username="alice", country="FR")}
    )
    response = _client(provider).get("/api/profile/alice")
    assert response.status_code == 200
    assert response.json()["country"] == "FR"


def test_single_profile_not_found():
    response = _client(FakeProvider()).get("/api/profile/nobody")
    assert response.status_code == 404
    assert response.json() == {"error": "User not found"}


def test_single_profile_connection_error():
    provider = FakeProvider(
        profile_errors={"alice": UpstreamUnavailableError("offline")}
    )
    response = _client(provider).get("/api/profile/alice")
    assert response.status_code == 503
    assert response.json() == {"error": "offline", "code": "CONNECTION_ERROR"}


def test_single_profile_other_failure():
    provider = FakeProvider(profile_errors={"alice": UpstreamError("bad")})
    response = _client(provider).get("/api/profile/alice")
    assert response.status_code == 500
    assert response.json() == {"error": "Failed to fetch user profile"}


# ---------------------------------------------------------------------------
# /api/leaderboards
# ---------------------------------------------------------------------------


def test_leaderboard_for_variant():
    provider = FakeProvider(leaderboard=_leaderboard(60))
    response = _client(provider).get("/api/leaderboards/rapid")
    assert response.status_code == 200
    body = response.json()
    assert provider.leaderboard_calls == [("rapid", 50)]
    assert len(body) == 50
    assert body[0] == {
        "username": "p0",
        "title": "GM",
        "rating": 3000,
        "progress": 0,
        "online": False,
        "patron": False,
    }


def test_default_leaderboard_is_bullet():
    provider = FakeProvider(leaderboard=_leaderboard(3))
    response = _client(provider).get("/api/leaderboards", params={"nb": 3})
    assert response.status_code == 200
    assert provider.leaderboard_calls == [("bullet", 3)]


def test_leaderboard_failure():
    provider = FakeProvider(leaderboard_error=UpstreamError("bad"))
    response = _client(provider).get("/api/leaderboards/blitz")
    assert response.status_code == 500
    assert response.json() == {"error": "Failed to fetch leaderboards"}


# ---------------------------------------------------------------------------
# /api/tournaments
# ---------------------------------------------------------------------------


def test_tournaments():
    provider = FakeProvider(
        tournaments=[
            TournamentSummary(
                id=str(i),
                name=f"Arena {i}",
                clock=TournamentClock(limit=180, increment=2),
                status=TournamentStatus.CREATED,
            )
            for i in range(25)
        ]
    )
    response = _client(provider).get("/api/tournaments")
    assert response.status_code == 200
    body = response.json()
    assert len(body) == 20
    assert body[0]["timeControl"] == {"limit": 180, "increment": 2}
    assert body[0]["status"] == 10


def test_tournaments_failure():
    provider = FakeProvider(tournaments_error=UpstreamError("bad"))
    response = _client(provider).get("/api/tournaments")
    assert response.status_code == 500
    assert response.json() == {"error": "Failed to fetch tournaments"}


# ---------------------------------------------------------------------------
# Wiring with the real provider
# ---------------------------------------------------------------------------


def test_lichess_timeout_reaches_client_as_503():
    lichess = LichessClient(
        user_agent="LichessProfileViewer/1.0",
        retry=RetryPolicy(sleep=lambda _: None),
    )
    lichess.session = FakeSession([requests.Timeout("timed out")])

    response = _client(lichess).get("/api/profile/alice")

    assert response.status_code == 503
    assert response.json()["code"] == "TIMEOUT"
    assert len(lichess.session.calls) == 3


def test_lichess_unknown_user_reaches_client_as_404():
    lichess = LichessClient(
        user_agent="LichessProfileViewer/1.0",
        retry=RetryPolicy(sleep=lambda _: None),
    )
    lichess.session = FakeSession([FakeResponse(status_code=404)])

    response = _client(lichess).get("/api/profile/nobody")

    assert response.status_code == 404
    assert response.json() == {"error": "User not found"}


def test_malformed_profile_degrades_within_batch():
    lichess = LichessClient(
        user_agent="LichessProfileViewer/1.0",
        retry=RetryPolicy(sleep=lambda _: None),
    )
    lichess.session = RoutedSession({
        "/player/top/3/bullet": FakeResponse(
            json_data={
                "users": [
                    {"username": f"p{i}", "perfs": {"bullet": {"rating": 2900 - i}}}
                    for i in range(3)
                ]
            }
        ),
        "/user/p0": FakeResponse(json_data={"username": "p0"}),
        "/user/p1": FakeResponse(json_data={"username": "p1", "profile": "oops"}),
        "/user/p2": FakeResponse(json_data={"username": "p2"}),
    })

    response = _client(lichess).get("/api/profiles", params={"nb": 3})

    assert response.status_code == 200
    body = response.json()
    assert [p["username"] for p in body] == ["p0", "p1", "p2"]
    assert body[1]["bio"] == "No bio available"
    assert body[1]["ratings"]["bullet"]["rating"] == 2899


def test_malformed_single_profile_is_json_500():
    lichess = LichessClient(
        user_agent="LichessProfileViewer/1.0",
        retry=RetryPolicy(sleep=lambda _: None),
    )
    lichess.session = FakeSession(
        [FakeResponse(json_data={"username": "bad", "perfs": ["x"]})]
    )

    response = _client(lichess).get("/api/profile/bad")

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to fetch user profile"}
