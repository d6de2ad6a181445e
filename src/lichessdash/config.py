"""Runtime settings resolved from environment variables.

A ``.env`` file in the working directory is loaded first, so any variable
below can be set there instead of in the shell.
"""

import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

from lichessdash.core.exceptions import ValidationError

DEFAULT_LICHESS_API = "https://lichess.org/api"
DEFAULT_USER_AGENT = "LichessProfileViewer/1.0"
DEFAULT_GATEWAY_URL = "http://localhost:5000/api"
DEFAULT_CORS_ORIGINS = ("http://localhost:5173", "http://localhost:5174")


def _env_str(name: str, default: str) -> str:
    value = os.getenv(name)
    return value.strip() if value and value.strip() else default


def _env_int(name: str, default: int, minimum: int = 0) -> int:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        parsed = int(value)
    except ValueError as exc:
        raise ValidationError(f"{name} must be an integer, got {value!r}") from exc
    if parsed < minimum:
        raise ValidationError(f"{name} must be >= {minimum}, got {parsed}")
    return parsed


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        parsed = float(value)
    except ValueError as exc:
        raise ValidationError(f"{name} must be a number, got {value!r}") from exc
    if parsed < 0:
        raise ValidationError(f"{name} must be >= 0, got {parsed}")
    return parsed


def _env_list(name: str, default: tuple[str, ...]) -> list[str]:
    value = os.getenv(name)
    if value is None or not value.strip():
        return list(default)
    return [item.strip() for item in value.split(",") if item.strip()]


@dataclass
class Settings:
    """Gateway and dashboard settings.

    Attributes:
        lichess_base_url: Base URL of the upstream Lichess API.
        user_agent: User-Agent header sent upstream.
        request_timeout_s: Per-request timeout for every outbound call.
        retry_attempts: Additional attempts after a failed outbound call.
        retry_delay_s: Fixed delay between attempts.
        max_profile_lookups: Cap on concurrent profile lookups per
            top-profiles request.
        tournament_limit: Maximum number of tournaments returned.
        cors_origins: Origins allowed to call the gateway from a browser.
        host: Interface the gateway binds to.
        port: Port the gateway listens on.
        log_level: Logging level name.
        gateway_url: Gateway base URL used by the dashboard CLI.
    """

    lichess_base_url: str = DEFAULT_LICHESS_API
    user_agent: str = DEFAULT_USER_AGENT
    request_timeout_s: float = 10.0
    retry_attempts: int = 2
    retry_delay_s: float = 1.0
    max_profile_lookups: int = 15
    tournament_limit: int = 20
    cors_origins: list[str] = field(
        default_factory=lambda: list(DEFAULT_CORS_ORIGINS)
    )
    host: str = "127.0.0.1"
    port: int = 5000
    log_level: str = "INFO"
    gateway_url: str = DEFAULT_GATEWAY_URL

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from environment variables.

        Raises:
            ValidationError: If a numeric variable cannot be parsed or is
                out of range.
        """
        return cls(
            lichess_base_url=_env_str(
                "LICHESSDASH_API_BASE_URL", DEFAULT_LICHESS_API
            ).rstrip("/"),
            user_agent=_env_str("LICHESSDASH_USER_AGENT", DEFAULT_USER_AGENT),
            request_timeout_s=_env_float("LICHESSDASH_TIMEOUT_S", 10.0),
            retry_attempts=_env_int("LICHESSDASH_RETRY_ATTEMPTS", 2),
            retry_delay_s=_env_float("LICHESSDASH_RETRY_DELAY_S", 1.0),
            max_profile_lookups=_env_int(
                "LICHESSDASH_MAX_PROFILE_LOOKUPS", 15, minimum=1
            ),
            tournament_limit=_env_int(
                "LICHESSDASH_TOURNAMENT_LIMIT", 20, minimum=1
            ),
            cors_origins=_env_list(
                "LICHESSDASH_CORS_ORIGINS", DEFAULT_CORS_ORIGINS
            ),
            host=_env_str("HOST", "127.0.0.1"),
            port=_env_int("PORT", 5000, minimum=1),
            log_level=_env_str("LICHESSDASH_LOG_LEVEL", "INFO").upper(),
            gateway_url=_env_str(
                "LICHESSDASH_GATEWAY_URL", DEFAULT_GATEWAY_URL
            ).rstrip("/"),
        )


def get_settings() -> Settings:
    """Return settings with ``.env`` and environment overrides applied."""
    load_dotenv()
    return Settings.from_env()
