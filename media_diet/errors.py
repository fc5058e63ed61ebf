"""Exceptions raised by a media diet run."""

from __future__ import annotations

from typing import Optional


class MediaDietError(Exception):
    """Base class for errors that abort a run."""


class ConfigurationError(MediaDietError):
    """Required configuration is missing."""


class FetchError(MediaDietError):
    """A feed could not be fetched."""

    def __init__(self, source: str, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(f"{source} feed failed: {message}")
        self.source = source
        self.status_code = status_code


class StoreError(MediaDietError):
    """A persisted file exists but cannot be read."""


__all__ = ["ConfigurationError", "FetchError", "MediaDietError", "StoreError"]
