"""CLI entry point for the lichessdash dashboard.

This module is the client-side composition root.  Each view (profiles,
leaderboards, tournaments) issues one gateway call through
:class:`~lichessdash_cli.gateway.GatewayClient`, shows a spinner while it
loads, prints the error on failure and renders the data otherwise.  The
dashboard never calls Lichess directly.
"""

import csv
import io
import json
import sys
from datetime import datetime
from enum import Enum

# Ensure UTF-8 output on Windows where stdout may default to cp1252.
# reconfigure() is a no-op when encoding is already utf-8.
if hasattr(sys.stdout, "reconfigure"):
    sys.stdout.reconfigure(encoding="utf-8", errors="replace")
if hasattr(sys.stderr, "reconfigure"):
    sys.stderr.reconfigure(encoding="utf-8", errors="replace")

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from lichessdash.config import get_settings
from lichessdash.core.exceptions import DashboardError
from lichessdash.core.models import Rating, TournamentClock, TournamentStatus
from lichessdash_cli.gateway import GatewayClient

app = typer.Typer(help="Terminal dashboard for Lichess profiles, leaderboards and tournaments.")

console = Console(legacy_windows=False)

GAME_TYPES: dict[str, str] = {
    "bullet": "Bullet",
    "blitz": "Blitz",
    "rapid": "Rapid",
    "classical": "Classical",
    "correspondence": "Correspondence",
    "chess960": "Chess960",
    "kingOfTheHill": "King of the Hill",
    "threeCheck": "Three-check",
    "antichess": "Antichess",
    "atomic": "Atomic",
    "horde": "Horde",
    "racingKings": "Racing Kings",
    "crazyhouse": "Crazyhouse",
}


# ---------------------------------------------------------------------------
# Output format
# ---------------------------------------------------------------------------


class OutputFormat(str, Enum):
    """Supported output formats for dashboard views."""

    table = "table"
    json = "json"
    csv = "csv"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _get_gateway() -> GatewayClient:
    """Build a gateway client from the ``LICHESSDASH_GATEWAY_URL`` setting."""
    return GatewayClient(get_settings().gateway_url)


def _fail(e: DashboardError) -> None:
    console.print(
        Panel(
            f"{escape(str(e))}\n[dim]Run the command again to retry.[/dim]",
            title="[red]Error[/red]",
            border_style="red",
            width=80,
        ),
        highlight=False,
    )
    raise typer.Exit(1)


def _to_csv(rows: list[dict], fieldnames: list[str]) -> str:
    """Serialise a list of dicts to a CSV string.

    Args:
        rows: List of dictionaries to serialise.
        fieldnames: Ordered column names.  Extra keys in ``rows`` are ignored.

    Returns:
        A CSV-formatted string including a header row.
    """
    buf = io.StringIO()
    writer = csv.DictWriter(
        buf, fieldnames=fieldnames, extrasaction="ignore"
    )
    writer.writeheader()
    writer.writerows(rows)
    return buf.getvalue()


def _rating_style(rating: int | None) -> str:
    """Return the colour band for a rating.

    Args:
        rating: A rating value, or ``None``.

    Returns:
        A Rich colour (hex string).  Missing ratings share the lowest band.
    """
    if not rating or rating < 1200:
        return "#666666"
    if rating < 1400:
        return "#996633"
    if rating < 1600:
        return "#669900"
    if rating < 1800:
        return "#0099cc"
    if rating < 2000:
        return "#9966cc"
    if rating < 2200:
        return "#ff9900"
    return "#ff6600"


def _fmt_rating(rating: int | None) -> str:
    if not rating:
        return "N/A"
    style = _rating_style(rating)
    return f"[{style}]{rating}[/{style}]"


def _rank_medal(rank: int) -> str:
    """Return a medal glyph for ranks 1-3 and ``#n`` otherwise."""
    return {1: "🥇", 2: "🥈", 3: "🥉"}.get(rank, f"#{rank}")


def _fmt_progress(progress: int) -> str:
    sign = "+" if progress > 0 else ""
    style = "green" if progress >= 0 else "red"
    return f"[{style}]{sign}{progress}[/{style}]"


def _fmt_player(title: str | None, username: str, online: bool = False) -> str:
    name = escape(username)
    if title:
        name = f"[bold yellow]{escape(title)}[/bold yellow] {name}"
    return f"{name} [green]●[/green]" if online else name


def _flag(country: str | None) -> str:
    """Convert a two-letter country code to a flag emoji.

    Lichess also uses regional codes (``"GB-ENG"``) and pseudo-flags
    (``"_earth"``); those are returned unchanged.

    Args:
        country: A country code, or ``None``.

    Returns:
        The flag emoji, the raw code, or ``""`` when absent.
    """
    if not country:
        return ""
    code = country.upper()
    if len(code) != 2 or not code.isalpha():
        return country
    return "".join(chr(0x1F1E6 + ord(c) - ord("A")) for c in code)


_STATUS_LABEL: dict[TournamentStatus, str] = {
    TournamentStatus.STARTED: "Started",
    TournamentStatus.STARTING: "Starting Soon",
    TournamentStatus.CREATED: "Created",
}

_STATUS_STYLE: dict[TournamentStatus, str] = {
    TournamentStatus.STARTED: "#4CAF50",
    TournamentStatus.STARTING: "#FF9800",
    TournamentStatus.CREATED: "#2196F3",
}

_VARIANT_ICON: dict[str, str] = {
    "standard": "♔",
    "chess960": "🎲",
    "king of the hill": "⛰️",
    "three-check": "✓",
    "antichess": "💀",
    "atomic": "💥",
    "horde": "🏰",
    "racing kings": "🏃",
    "crazyhouse": "🏠",
}


def _fmt_status(status: TournamentStatus) -> str:
    label = _STATUS_LABEL.get(status, "Unknown")
    style = _STATUS_STYLE.get(status, "#666666")
    return f"[{style}]{label}[/{style}]"


def _fmt_variant(variant: str) -> str:
    return f"{_VARIANT_ICON.get(variant.lower(), '♔')} {variant}"


def _fmt_time_control(clock: TournamentClock | None) -> str:
    """Format a clock as ``"minutes+increment"`` (e.g. ``"3+2"``).

    Args:
        clock: The tournament clock, or ``None``.

    Returns:
        The formatted time control, or ``"N/A"`` when absent.
    """
    if clock is None:
        return "N/A"
    return f"{clock.limit // 60}+{clock.increment}"


def _fmt_starts_at(timestamp_ms: int | None) -> str:
    """Format a millisecond timestamp as ``"Mon DD, HH:MM"`` local time.

    Args:
        timestamp_ms: A Unix timestamp in milliseconds, or ``None``.

    Returns:
        The formatted date, or ``"TBD"`` when absent.
    """
    if not timestamp_ms:
        return "TBD"
    return datetime.fromtimestamp(timestamp_ms / 1000).strftime("%b %d, %H:%M")


def _top_ratings(ratings: dict[str, Rating], limit: int = 3) -> str:
    """Return the best *limit* played ratings as a compact styled string."""
    played = [
        (variant, r) for variant, r in ratings.items()
        if r.rating and r.games > 0
    ]
    played.sort(key=lambda item: item[1].rating, reverse=True)
    return "  ".join(
        f"{escape(variant)} {_fmt_rating(r.rating)}"
        for variant, r in played[:limit]
    ) or "—"


def _short_bio(bio: str, width: int = 50) -> str:
    return f"{bio[:width]}..." if len(bio) > width else bio


# ---------------------------------------------------------------------------
# Profile view
# ---------------------------------------------------------------------------

_PROFILE_FIELDS = [
    "username", "title", "country", "gamesPlayed", "online", "bio",
    "profileImage",
]


@app.command()
def profiles(
    nb: int = typer.Option(
        15, "--nb", "-n", min=1, max=200,
        help="Number of top players to request (at most 15 are looked up).",
    ),
    game_type: str = typer.Option(
        "bullet", "--game-type", "-g", help="Variant of the leaderboard."
    ),
    output: OutputFormat = typer.Option(
        OutputFormat.table, "--output", "-o", help="Output format."
    ),
):
    """Show profiles of the top Lichess players."""
    gateway = _get_gateway()
    try:
        with console.status("[dim]Loading top players…[/dim]", spinner="dots"):
            data = gateway.get_top_profiles(nb=nb, game_type=game_type)
    except DashboardError as e:
        _fail(e)

    if output == OutputFormat.json:
        print(json.dumps([p.to_dict() for p in data], indent=2))
    elif output == OutputFormat.csv:
        print(_to_csv([p.to_dict() for p in data], _PROFILE_FIELDS), end="")
    else:
        table = Table(title="♔ Top Lichess players", show_lines=False)
        table.add_column("#", justify="right", style="dim", width=4)
        table.add_column("Player")
        table.add_column("Country", justify="center")
        table.add_column("Games", justify="right")
        table.add_column("Top ratings")
        table.add_column("Bio", style="dim", no_wrap=False)

        for i, p in enumerate(data, 1):
            table.add_row(
                f"#{i}",
                _fmt_player(p.title, p.username, p.online),
                _flag(p.country),
                f"{p.games_played:,}",
                _top_ratings(p.ratings),
                escape(_short_bio(p.bio)),
            )

        console.print(table)
        console.print(
            f"[dim]Total: {len(data)} players. Use "
            "[bold]lichessdash profile <username>[/bold] for a single lookup.[/]"
        )


@app.command()
def profile(
    username: str,
    output: OutputFormat = typer.Option(
        OutputFormat.table, "--output", "-o", help="Output format."
    ),
):
    """Look up a single player's profile by username."""
    if not username.strip():
        console.print("[red]Error:[/red] Please enter a username")
        raise typer.Exit(2)

    gateway = _get_gateway()
    try:
        with console.status("[dim]Searching…[/dim]", spinner="dots"):
            p = gateway.get_profile(username.strip())
    except DashboardError as e:
        _fail(e)

    if output == OutputFormat.json:
        print(json.dumps(p.to_dict(), indent=2))
        return
    if output == OutputFormat.csv:
        print(_to_csv([p.to_dict()], _PROFILE_FIELDS), end="")
        return

    header = _fmt_player(p.title, p.username, p.online)
    lines = [f"[bold]{header}[/bold]"]
    if p.country:
        lines.append(f"📍 {escape(_flag(p.country))}")
    lines.append("")
    lines.append(escape(p.bio))
    lines.append("")
    lines.append(f"Total games: [cyan]{p.games_played:,}[/cyan]")
    console.print(Panel("\n".join(lines), padding=(0, 2), width=80))

    ratings = Table(title="Ratings", show_lines=False)
    ratings.add_column("Variant", style="cyan")
    ratings.add_column("Rating", justify="right")
    ratings.add_column("Games", justify="right")
    ratings.add_column("RD", justify="right", style="dim")
    for variant, r in p.ratings.items():
        ratings.add_row(
            escape(GAME_TYPES.get(variant, variant[:1].upper() + variant[1:])),
            _fmt_rating(r.rating),
            f"{r.games:,} games",
            f"±{round(r.rd)}" if r.rd else "",
        )
    console.print(ratings)


# ---------------------------------------------------------------------------
# Leaderboards view
# ---------------------------------------------------------------------------


@app.command()
def leaderboard(
    game_type: str = typer.Argument(
        "bullet", help=f"One of: {', '.join(GAME_TYPES)}."
    ),
    nb: int = typer.Option(
        50, "--nb", "-n", min=1, max=200, help="Number of players to show."
    ),
    output: OutputFormat = typer.Option(
        OutputFormat.table, "--output", "-o", help="Output format."
    ),
):
    """Show the top players for a game type."""
    if game_type not in GAME_TYPES:
        console.print(
            f"[red]Error:[/red] Unknown game type [bold]{game_type!r}[/bold]. "
            f"Choose one of: {', '.join(GAME_TYPES)}.",
            highlight=False,
        )
        raise typer.Exit(2)

    gateway = _get_gateway()
    try:
        with console.status("[dim]Loading leaderboard…[/dim]", spinner="dots"):
            data = gateway.get_leaderboard(game_type=game_type, nb=nb)
    except DashboardError as e:
        _fail(e)

    if output == OutputFormat.json:
        print(json.dumps([e.to_dict() for e in data], indent=2))
    elif output == OutputFormat.csv:
        print(
            _to_csv(
                [e.to_dict() for e in data],
                ["username", "title", "rating", "progress", "online", "patron"],
            ),
            end="",
        )
    else:
        table = Table(
            title=f"{GAME_TYPES[game_type]} Top Players", show_lines=False
        )
        table.add_column("Rank", justify="right", width=5)
        table.add_column("Player")
        table.add_column("Rating", justify="right", style="bold")
        table.add_column("Progress", justify="right")

        for i, entry in enumerate(data, 1):
            player = _fmt_player(entry.title, entry.username, entry.online)
            if entry.patron:
                player += " [magenta]★[/magenta]"
            table.add_row(
                _rank_medal(i),
                player,
                _fmt_rating(entry.rating),
                _fmt_progress(entry.progress),
            )

        console.print(table)
        if not data:
            console.print("[yellow]No players available.[/yellow]")


# ---------------------------------------------------------------------------
# Tournaments view
# ---------------------------------------------------------------------------

_TOURNAMENT_FIELDS = [
    "id", "name", "variant", "rated", "startsAt", "status", "nbPlayers",
    "winner", "perf", "minutes", "system",
]


@app.command()
def tournaments(
    output: OutputFormat = typer.Option(
        OutputFormat.table, "--output", "-o", help="Output format."
    ),
):
    """Show upcoming and ongoing Lichess tournaments."""
    gateway = _get_gateway()
    try:
        with console.status("[dim]Loading tournaments…[/dim]", spinner="dots"):
            data = gateway.get_tournaments()
    except DashboardError as e:
        _fail(e)

    if output == OutputFormat.json:
        print(json.dumps([t.to_dict() for t in data], indent=2))
        return
    if output == OutputFormat.csv:
        print(
            _to_csv([t.to_dict() for t in data], _TOURNAMENT_FIELDS), end=""
        )
        return

    if not data:
        console.print("[yellow]No tournaments available at the moment.[/yellow]")
        console.print("[dim]Run the command again to retry.[/dim]")
        return

    table = Table(title="🎯 Tournaments", show_lines=False)
    table.add_column("Status")
    table.add_column("Name", style="cyan", no_wrap=False)
    table.add_column("Variant")
    table.add_column("Time", justify="center")
    table.add_column("Starts", justify="right")
    table.add_column("Players", justify="right")
    table.add_column("Rated", justify="center")
    table.add_column("Category")
    table.add_column("Winner")
    table.add_column("Link", no_wrap=True)

    for t in data:
        table.add_row(
            _fmt_status(t.status),
            escape(t.name),
            escape(_fmt_variant(t.variant)),
            _fmt_time_control(t.clock),
            _fmt_starts_at(t.starts_at),
            str(t.nb_players),
            "Yes" if t.rated else "No",
            escape(t.perf or "—"),
            f"🥇 {escape(t.winner)}" if t.winner else "—",
            f"[link=https://lichess.org/tournament/{t.id}]view[/link]",
        )

    console.print(table)
    console.print(f"[dim]Total: {len(data)} tournaments[/]")


# ---------------------------------------------------------------------------
# Gateway process
# ---------------------------------------------------------------------------


@app.command()
def serve(
    host: str | None = typer.Option(None, "--host", help="Bind address."),
    port: int | None = typer.Option(None, "--port", "-p", help="Port."),
    reload: bool = typer.Option(
        False, "--reload", help="Reload on code changes (development)."
    ),
) -> None:
    """Run the dashboard gateway (HTTP API) with uvicorn."""
    from lichessdash_server.main import run

    run(host=host, port=port, reload=reload)
