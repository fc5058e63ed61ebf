"""Turn raw Letterboxd and Goodreads items into sorted media records."""

from __future__ import annotations

import logging
from typing import Callable, Iterable, List, Optional, Sequence, TypeVar, Union
from urllib.parse import urlparse, urlunparse

from .extractors import (
    extract_image_url,
    extract_year,
    normalize_text,
    normalize_title,
    parse_flag,
    parse_rating,
    parse_timestamp,
    resolve_identity,
    suffix_year,
)
from .models import BookRecord, FilmRecord, MediaRecord, RawBookItem, RawFilmItem, Skipped

LOGGER = logging.getLogger(__name__)

GOODREADS_BOOK_URL = "https://www.goodreads.com/book/show/{book_id}"

ItemT = TypeVar("ItemT")
RecordT = TypeVar("RecordT", bound=MediaRecord)


def _film_slug(link: str) -> Optional[str]:
    """Return the film slug of a ``/<user>/film/<slug>/...`` path."""

    parts = [part for part in urlparse(link).path.split("/") if part]
    if len(parts) >= 3 and parts[1] == "film":
        return parts[2]
    return None


def canonical_film_url(link: str) -> str:
    """Rewrite a member's film link to the shared ``/film/<slug>/`` page."""

    slug = _film_slug(link)
    if not slug:
        return link
    parsed = urlparse(link)
    return urlunparse(parsed._replace(path=f"/film/{slug}/"))


def canonical_book_url(book_id: Optional[str], link: Optional[str]) -> str:
    if book_id:
        return GOODREADS_BOOK_URL.format(book_id=book_id)
    return link or ""


def normalize_film(item: RawFilmItem) -> Union[FilmRecord, Skipped[RawFilmItem]]:
    link = normalize_text(item.link)
    if not link:
        return Skipped("missing link", item)
    title = normalize_title(item.film_title or item.title)
    if not title:
        return Skipped("missing title", item)
    consumed_at = parse_timestamp(item.pub_date) or parse_timestamp(item.watched_date)
    if not consumed_at:
        return Skipped("missing or invalid date", item)

    canonical_url = canonical_film_url(link)
    return FilmRecord(
        identity=resolve_identity(_film_slug(link), canonical_url, title),
        title=title,
        canonical_url=canonical_url,
        image_url=extract_image_url(
            item.media_content,
            item.media_thumbnail,
            item.enclosures,
            description=item.description,
        ),
        publication_year=extract_year(item.film_year, suffix_year(item.title), item.title),
        rating=parse_rating(item.member_rating),
        consumed_at=consumed_at,
        rewatch=parse_flag(item.rewatch),
    )


def normalize_book(item: RawBookItem) -> Union[BookRecord, Skipped[RawBookItem]]:
    consumed_at = parse_timestamp(item.user_read_at)
    if not consumed_at:
        return Skipped("missing or invalid read date", item)
    book_id = normalize_text(item.book_id)
    link = normalize_text(item.link)
    if not book_id and not link:
        return Skipped("missing book id and link", item)
    title = normalize_title(item.title)
    if not title:
        return Skipped("missing title", item)

    return BookRecord(
        identity=resolve_identity(book_id, link, title),
        title=title,
        canonical_url=canonical_book_url(book_id, link),
        image_url=extract_image_url(
            item.book_large_image_url,
            item.book_image_url,
            item.book_medium_image_url,
            item.book_small_image_url,
            description=item.description,
        ),
        publication_year=extract_year(item.book_published, suffix_year(item.title), item.title),
        rating=parse_rating(item.user_rating, integer=True),
        consumed_at=consumed_at,
        author=normalize_text(item.author_name) or None,
    )


def _as_list(items: Union[None, ItemT, Sequence[ItemT]]) -> List[ItemT]:
    if items is None:
        return []
    if isinstance(items, (list, tuple)):
        return list(items)
    return [items]  # type: ignore[list-item]


def sort_by_consumed_desc(records: Iterable[RecordT]) -> List[RecordT]:
    """Sort newest first; ties keep their order and undated records go last."""

    return sorted(records, key=lambda record: record.consumed_at or "", reverse=True)


def _normalize_all(
    items: Union[None, ItemT, Sequence[ItemT]],
    normalize: Callable[[ItemT], Union[RecordT, Skipped[ItemT]]],
    label: str,
) -> List[RecordT]:
    records: List[RecordT] = []
    skipped = 0
    for item in _as_list(items):
        try:
            result = normalize(item)
        except (ValueError, TypeError, AttributeError) as exc:
            result = Skipped(f"malformed item: {exc}", item)
        if isinstance(result, Skipped):
            skipped += 1
            LOGGER.debug("Skipping %s item (%s): %r", label, result.reason, result.item)
            continue
        records.append(result)

    LOGGER.info("Normalized %d %s records (skipped %d)", len(records), label, skipped)
    return sort_by_consumed_desc(records)


def normalize_films(items: Union[None, RawFilmItem, Sequence[RawFilmItem]]) -> List[FilmRecord]:
    """Normalize Letterboxd items into film records, newest first."""

    return _normalize_all(items, normalize_film, "film")


def normalize_books(items: Union[None, RawBookItem, Sequence[RawBookItem]]) -> List[BookRecord]:
    """Normalize Goodreads items into book records, newest first."""

    return _normalize_all(items, normalize_book, "book")


__all__ = [
    "canonical_book_url",
    "canonical_film_url",
    "normalize_book",
    "normalize_books",
    "normalize_film",
    "normalize_films",
    "sort_by_consumed_desc",
]
