"""High-level orchestration for one media diet run."""

from __future__ import annotations

import enum
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, List, Optional, Protocol, Sequence, Tuple, TypeVar

from .config import Config, load_config
from .deploy import DeployHook
from .diff import has_changed
from .fetchers import GoodreadsFeed, LetterboxdFeed
from .merge import merge_by_identity
from .models import BookRecord, FilmRecord, RawBookItem, RawFilmItem
from .normalizers import normalize_books, normalize_films
from .payload import build_media_payload
from .store import MediaStore, StagedWrite

LOGGER = logging.getLogger(__name__)

A = TypeVar("A")
B = TypeVar("B")


class FilmSource(Protocol):
    def fetch(self) -> Sequence[RawFilmItem]: ...


class BookSource(Protocol):
    def fetch(self) -> Sequence[RawBookItem]: ...


class Notifier(Protocol):
    def notify(self) -> bool: ...


class RunOutcome(enum.Enum):
    PERSISTED = "persisted"
    UNCHANGED = "unchanged"


@dataclass
class RunResult:
    outcome: RunOutcome
    movies: List[FilmRecord]
    books: List[BookRecord]
    movies_changed: bool
    books_changed: bool
    notified: bool = False

    @property
    def changed(self) -> bool:
        return self.movies_changed or self.books_changed


def in_parallel(first: Callable[[], A], second: Callable[[], B]) -> Tuple[A, B]:
    """Run two calls concurrently and wait for both before returning.

    If either call raised, its exception is re-raised after both finished,
    the first call's error taking precedence.
    """

    with ThreadPoolExecutor(max_workers=2) as executor:
        first_future = executor.submit(first)
        second_future = executor.submit(second)
    return first_future.result(), second_future.result()


class Pipeline:
    """Load, fetch, normalize, merge, diff and conditionally persist."""

    def __init__(
        self,
        config: Config,
        store: Optional[MediaStore] = None,
        film_source: Optional[FilmSource] = None,
        book_source: Optional[BookSource] = None,
        notifier: Optional[Notifier] = None,
    ) -> None:
        self.config = config
        self.store = store or MediaStore(config.data_dir)
        self.film_source = film_source or LetterboxdFeed(config.letterboxd_username, timeout=config.request_timeout)
        self.book_source = book_source or GoodreadsFeed(config.goodreads_rss_url, timeout=config.request_timeout)
        self.notifier = notifier or DeployHook(config.deploy_hook_url, timeout=config.request_timeout)

    def run(self) -> RunResult:
        self.config.validate()
        LOGGER.info("Starting media diet run")

        old_movies, old_books = in_parallel(self.store.load_movies, self.store.load_books)
        LOGGER.info("Loaded %d stored movies and %d stored books", len(old_movies), len(old_books))

        raw_movies, raw_books = in_parallel(self.film_source.fetch, self.book_source.fetch)
        fetched_movies = normalize_films(raw_movies)
        fetched_books = normalize_books(raw_books)

        new_movies = merge_by_identity(old_movies, fetched_movies)
        new_books = merge_by_identity(old_books, fetched_books)

        movies_changed = has_changed(old_movies, new_movies)
        books_changed = has_changed(old_books, new_books)
        result = RunResult(
            outcome=RunOutcome.UNCHANGED,
            movies=new_movies,
            books=new_books,
            movies_changed=movies_changed,
            books_changed=books_changed,
        )

        if not result.changed:
            LOGGER.info("No changes detected; nothing persisted")
            return result

        self._persist(new_movies, new_books)
        result.outcome = RunOutcome.PERSISTED
        LOGGER.info(
            "Persisted %d movies (changed=%s) and %d books (changed=%s)",
            len(new_movies),
            movies_changed,
            len(new_books),
            books_changed,
        )
        result.notified = self._notify()
        return result

    def _persist(self, movies: List[FilmRecord], books: List[BookRecord]) -> None:
        """Stage all three files, then replace them together.

        A failure while staging leaves every persisted file untouched.
        """

        with ThreadPoolExecutor(max_workers=2) as executor:
            futures = [
                executor.submit(self.store.stage_movies, movies),
                executor.submit(self.store.stage_books, books),
            ]
        staged: List[StagedWrite] = [future.result() for future in futures if future.exception() is None]
        try:
            for future in futures:
                future.result()
            staged.append(self.store.stage_media(build_media_payload(movies, books)))
            self.store.commit(staged)
        finally:
            self.store.discard(staged)

    def _notify(self) -> bool:
        try:
            return bool(self.notifier.notify())
        except Exception as exc:
            LOGGER.warning("Deploy notification failed: %s", exc)
            return False


def run(config: Config | None = None) -> RunResult:
    config = config or load_config()
    return Pipeline(config).run()


__all__ = [
    "Pipeline",
    "RunOutcome",
    "RunResult",
    "in_parallel",
    "run",
]
