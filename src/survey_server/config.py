"""Server settings, read once from ``SERVER_*`` / ``SURVEY_*`` environment variables.

Defaults suit local development: listen on every interface, accept any
origin, log at INFO and seed nothing at startup.
"""

import os
from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class ServerSettings:
    host: str = "0.0.0.0"
    port: int = 8080

    # Browser origins allowed to call the API; ["*"] allows all
    cors_origins: list[str] = field(default_factory=lambda: ["*"])

    log_level: str = "INFO"

    # Directory of survey YAML files upserted into the database on startup
    seed_dir: Optional[str] = None


def _split_csv(raw: str) -> list[str]:
    return [part.strip() for part in raw.split(",") if part.strip()]


def load_settings() -> ServerSettings:
    """Build :class:`ServerSettings` from the environment.

    ``SERVER_CORS_ORIGINS`` is comma-separated; ``SURVEY_SEED_DIR`` unset
    or empty disables startup seeding.
    """
    return ServerSettings(
        host=os.getenv("SERVER_HOST", "0.0.0.0"),
        port=int(os.getenv("SERVER_PORT", "8080")),
        cors_origins=_split_csv(os.getenv("SERVER_CORS_ORIGINS", "*")),
        log_level=os.getenv("SERVER_LOG_LEVEL", "INFO").upper(),
        seed_dir=os.getenv("SURVEY_SEED_DIR") or None,
    )
