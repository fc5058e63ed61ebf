"""Configuration utilities for the media diet project."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .errors import ConfigurationError

DEFAULT_DATA_DIR = Path("data")
DEFAULT_PORT = 8787
DEFAULT_REQUEST_TIMEOUT = 10


def _parse_number(value: Optional[str], fallback: int) -> int:
    if not value:
        return fallback
    try:
        return int(value)
    except ValueError:
        return fallback


@dataclass(frozen=True)
class Config:
    """Runtime configuration values for a run and for the read API."""

    letterboxd_username: str = ""
    goodreads_rss_url: str = ""
    data_dir: Path = DEFAULT_DATA_DIR
    deploy_hook_url: str = ""
    port: int = DEFAULT_PORT
    request_timeout: int = DEFAULT_REQUEST_TIMEOUT

    def validate(self) -> None:
        """Raise ConfigurationError when a feed source is not configured."""

        if not self.letterboxd_username:
            raise ConfigurationError("LETTERBOXD_USERNAME is required.")
        if not self.goodreads_rss_url:
            raise ConfigurationError("GOODREADS_RSS_URL is required.")


def load_config() -> Config:
    """Load configuration from environment variables and defaults."""

    return Config(
        letterboxd_username=os.getenv("LETTERBOXD_USERNAME", "").strip(),
        goodreads_rss_url=os.getenv("GOODREADS_RSS_URL", "").strip(),
        data_dir=Path(os.getenv("DATA_DIR") or DEFAULT_DATA_DIR),
        deploy_hook_url=os.getenv("CF_PAGES_DEPLOY_HOOK_URL", "").strip(),
        port=_parse_number(os.getenv("PORT"), DEFAULT_PORT),
        request_timeout=_parse_number(os.getenv("REQUEST_TIMEOUT"), DEFAULT_REQUEST_TIMEOUT),
    )
