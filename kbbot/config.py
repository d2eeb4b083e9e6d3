"""
Configuration and environment variable validation.
"""
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from kbbot.logger import logger

# Load .env from the project root (one level up from this package)
_env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_env_path, override=False)


def _optional_int(name: str) -> Optional[int]:
    value = os.environ.get(name, "").strip()
    return int(value) if value else None


def _optional_float(name: str) -> Optional[float]:
    value = os.environ.get(name, "").strip()
    return float(value) if value else None


def validate_environment_variables() -> None:
    """
    Validate all required environment variables at startup.
    Exits the application with a clear error message if any are missing.
    """
    required_vars = {
        "SLACK_BOT_TOKEN": "Slack bot token for posting messages",
        "SLACK_SIGNING_SECRET": "Slack signing secret for request verification",
    }

    optional_vars = {
        "SLACK_COMMAND": "Slash command to answer (defaults to /sbhelp)",
        "SIGNATURE_MAX_AGE": "Allowed request age in seconds (defaults to 300)",
        "KB_LANDING_URL": "Knowledge base index page (defaults to the SessionBoard knowledge base)",
        "KB_SITE_ORIGIN": "Origin relative article links resolve against",
        "KB_LINK_SEGMENT": "Path segment identifying article links (defaults to /knowledge-base/)",
        "KB_MAX_ARTICLES": "Articles processed per search (defaults to 10)",
        "KB_FETCH_DELAY": "Pause between article fetches in seconds (defaults to 0.5)",
        "KB_MAX_RESULTS": "Results posted per search (defaults to 5)",
        "KB_REQUEST_TIMEOUT": "Per-request fetch timeout in seconds (defaults to 10)",
        "KB_CACHE_MAX_ENTRIES": "Article cache capacity (unbounded if not set)",
        "KB_CACHE_TTL_SECONDS": "Article cache expiry (never expires if not set)",
        "DEFAULT_QUERY": "Query used when the command has no text (defaults to 'getting started')",
        "LOG_LEVEL": "Logging level (defaults to DEBUG)",
        "PORT": "Server port (defaults to 3000 if not set)",
        "ENV": "Environment (prod/dev, defaults to dev if not set)",
    }

    missing_vars = []

    for var_name, description in required_vars.items():
        value = os.getenv(var_name)
        if not value or not value.strip():
            missing_vars.append(f"  - {var_name}: {description}")
            logger.error(f"Missing required environment variable: {var_name}")

    if missing_vars:
        error_message = (
            "Missing required environment variables:\n"
            + "\n".join(missing_vars)
            + "\n\nPlease set these variables before starting the application."
        )
        logger.critical(error_message)
        print(error_message, file=sys.stderr)
        sys.exit(1)

    for var_name, description in optional_vars.items():
        value = os.getenv(var_name)
        if not value or not value.strip():
            logger.info(f"Optional environment variable not set: {var_name} - {description}")
        else:
            logger.debug(f"Environment variable set: {var_name}")

    logger.info("Environment variable validation completed successfully")


@dataclass
class Settings:
    # Slack
    slack_bot_token: str = field(
        default_factory=lambda: os.environ.get("SLACK_BOT_TOKEN", "")
    )
    slack_signing_secret: str = field(
        default_factory=lambda: os.environ.get("SLACK_SIGNING_SECRET", "")
    )
    slack_command: str = field(
        default_factory=lambda: os.environ.get("SLACK_COMMAND", "/sbhelp")
    )
    # Maximum allowed clock skew for signed requests, in seconds
    signature_max_age: int = field(
        default_factory=lambda: int(os.environ.get("SIGNATURE_MAX_AGE", "300"))
    )

    # Knowledge base scraping
    kb_landing_url: str = field(
        default_factory=lambda: os.environ.get(
            "KB_LANDING_URL", "https://learn.sessionboard.com/en/knowledge-base"
        )
    )
    kb_site_origin: str = field(
        default_factory=lambda: os.environ.get(
            "KB_SITE_ORIGIN", "https://learn.sessionboard.com"
        )
    )
    kb_link_segment: str = field(
        default_factory=lambda: os.environ.get("KB_LINK_SEGMENT", "/knowledge-base/")
    )
    kb_max_articles: int = field(
        default_factory=lambda: int(os.environ.get("KB_MAX_ARTICLES", "10"))
    )
    kb_fetch_delay: float = field(
        default_factory=lambda: float(os.environ.get("KB_FETCH_DELAY", "0.5"))
    )
    kb_max_results: int = field(
        default_factory=lambda: int(os.environ.get("KB_MAX_RESULTS", "5"))
    )
    kb_request_timeout: float = field(
        default_factory=lambda: float(os.environ.get("KB_REQUEST_TIMEOUT", "10.0"))
    )
    kb_cache_max_entries: Optional[int] = field(
        default_factory=lambda: _optional_int("KB_CACHE_MAX_ENTRIES")
    )
    kb_cache_ttl_seconds: Optional[float] = field(
        default_factory=lambda: _optional_float("KB_CACHE_TTL_SECONDS")
    )
    default_query: str = field(
        default_factory=lambda: os.environ.get("DEFAULT_QUERY", "getting started")
    )

    # Server
    port: int = field(default_factory=lambda: int(os.environ.get("PORT", "3000")))
    env: str = field(default_factory=lambda: os.environ.get("ENV", "dev"))
