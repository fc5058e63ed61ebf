"""Feed sources for the film and book logs."""

from __future__ import annotations

import logging
from typing import Any, Generic, List, Mapping, TypeVar
from urllib.parse import quote

import feedparser
import requests

from .config import DEFAULT_REQUEST_TIMEOUT
from .errors import FetchError
from .models import RawBookItem, RawFilmItem

LOGGER = logging.getLogger(__name__)

ItemT = TypeVar("ItemT")


class FeedSource(Generic[ItemT]):
    """Base class for source-specific RSS fetchers.

    ``fetch`` raises FetchError on any transport failure or non-2xx status.
    Parsing is lenient: whatever entries feedparser recovers are returned.
    """

    name: str = "base"

    def __init__(self, timeout: int = DEFAULT_REQUEST_TIMEOUT) -> None:
        self.timeout = timeout

    @property
    def url(self) -> str:
        raise NotImplementedError

    def parse_entry(self, entry: Mapping[str, Any]) -> ItemT:
        raise NotImplementedError

    def fetch(self) -> List[ItemT]:
        try:
            response = requests.get(self.url, timeout=self.timeout)
            response.raise_for_status()
        except requests.HTTPError as exc:
            status = exc.response.status_code if exc.response is not None else None
            LOGGER.error("%s RSS request failed with status %s", self.name, status)
            raise FetchError(self.name, str(exc), status_code=status) from exc
        except requests.RequestException as exc:
            LOGGER.error("%s RSS request failed: %s", self.name, exc)
            raise FetchError(self.name, str(exc)) from exc

        feed = feedparser.parse(response.content)
        if getattr(feed, "bozo", False):
            LOGGER.debug("%s feed is not well-formed: %s", self.name, feed.get("bozo_exception"))
        items = [self.parse_entry(entry) for entry in feed.entries]
        LOGGER.info("Fetched %d items from %s RSS", len(items), self.name)
        return items


class LetterboxdFeed(FeedSource[RawFilmItem]):
    name = "letterboxd"

    RSS_URL = "https://letterboxd.com/{username}/rss/"

    def __init__(self, username: str, timeout: int = DEFAULT_REQUEST_TIMEOUT) -> None:
        super().__init__(timeout=timeout)
        self.username = username

    @property
    def url(self) -> str:
        return self.RSS_URL.format(username=quote(self.username, safe=""))

    def parse_entry(self, entry: Mapping[str, Any]) -> RawFilmItem:
        return RawFilmItem.from_entry(entry)


class GoodreadsFeed(FeedSource[RawBookItem]):
    name = "goodreads"

    def __init__(self, rss_url: str, timeout: int = DEFAULT_REQUEST_TIMEOUT) -> None:
        super().__init__(timeout=timeout)
        self.rss_url = rss_url

    @property
    def url(self) -> str:
        return self.rss_url

    def parse_entry(self, entry: Mapping[str, Any]) -> RawBookItem:
        return RawBookItem.from_entry(entry)


__all__ = ["FeedSource", "GoodreadsFeed", "LetterboxdFeed"]
