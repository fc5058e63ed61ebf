"""Shared dataclasses and type definitions for media records and raw feed items."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Dict, Generic, Mapping, Optional, TypeVar, Union

Rating = Union[int, float]


@dataclass(frozen=True)
class MediaRecord:
    """Normalized consumption record shared by films and books."""

    media_type: ClassVar[str] = "media"

    identity: str
    title: str
    canonical_url: str
    image_url: Optional[str] = None
    publication_year: Optional[int] = None
    rating: Optional[Rating] = None
    consumed_at: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Return the persisted JSON shape, leaving out absent values."""

        data: Dict[str, Any] = {
            "id": self.identity,
            "type": self.media_type,
            "title": self.title,
            "url": self.canonical_url,
            "imageUrl": self.image_url,
            "year": self.publication_year,
            "rating": self.rating,
            "dateConsumed": self.consumed_at,
        }
        data.update(self._extra_fields())
        return {key: value for key, value in data.items() if value is not None}

    def _extra_fields(self) -> Dict[str, Any]:
        return {}

    @classmethod
    def _base_kwargs(cls, data: Mapping[str, Any]) -> Dict[str, Any]:
        return {
            "identity": str(data.get("id") or ""),
            "title": str(data.get("title") or ""),
            "canonical_url": str(data.get("url") or ""),
            "image_url": data.get("imageUrl"),
            "publication_year": data.get("year"),
            "rating": data.get("rating"),
            "consumed_at": data.get("dateConsumed"),
        }


@dataclass(frozen=True)
class FilmRecord(MediaRecord):
    media_type: ClassVar[str] = "movie"

    rewatch: Optional[bool] = None

    def _extra_fields(self) -> Dict[str, Any]:
        return {"rewatch": self.rewatch}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FilmRecord":
        return cls(rewatch=data.get("rewatch"), **cls._base_kwargs(data))


@dataclass(frozen=True)
class BookRecord(MediaRecord):
    media_type: ClassVar[str] = "book"

    author: Optional[str] = None

    def _extra_fields(self) -> Dict[str, Any]:
        return {"author": self.author}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "BookRecord":
        return cls(author=data.get("author"), **cls._base_kwargs(data))


def _text(entry: Mapping[str, Any], key: str) -> Optional[str]:
    value = entry.get(key)
    if value is None:
        return None
    return str(value)


@dataclass
class RawFilmItem:
    """A Letterboxd RSS item as parsed by feedparser.

    Every field is optional; the normalizer decides what is mandatory.
    """

    title: Optional[str] = None
    link: Optional[str] = None
    pub_date: Optional[str] = None
    watched_date: Optional[str] = None
    film_title: Optional[str] = None
    film_year: Optional[str] = None
    member_rating: Optional[str] = None
    rewatch: Optional[str] = None
    description: Optional[str] = None
    media_content: Any = None
    media_thumbnail: Any = None
    enclosures: Any = None

    @classmethod
    def from_entry(cls, entry: Mapping[str, Any]) -> "RawFilmItem":
        return cls(
            title=_text(entry, "title"),
            link=_text(entry, "link"),
            pub_date=_text(entry, "published"),
            watched_date=_text(entry, "letterboxd_watcheddate"),
            film_title=_text(entry, "letterboxd_filmtitle"),
            film_year=_text(entry, "letterboxd_filmyear"),
            member_rating=_text(entry, "letterboxd_memberrating"),
            rewatch=_text(entry, "letterboxd_rewatch"),
            description=_text(entry, "summary"),
            media_content=entry.get("media_content"),
            media_thumbnail=entry.get("media_thumbnail"),
            enclosures=entry.get("enclosures"),
        )


@dataclass
class RawBookItem:
    """A Goodreads RSS item as parsed by feedparser."""

    title: Optional[str] = None
    link: Optional[str] = None
    pub_date: Optional[str] = None
    book_id: Optional[str] = None
    author_name: Optional[str] = None
    user_rating: Optional[str] = None
    user_read_at: Optional[str] = None
    book_published: Optional[str] = None
    book_image_url: Optional[str] = None
    book_small_image_url: Optional[str] = None
    book_medium_image_url: Optional[str] = None
    book_large_image_url: Optional[str] = None
    description: Optional[str] = None

    @classmethod
    def from_entry(cls, entry: Mapping[str, Any]) -> "RawBookItem":
        return cls(
            title=_text(entry, "title"),
            link=_text(entry, "link"),
            pub_date=_text(entry, "published"),
            book_id=_text(entry, "book_id"),
            author_name=_text(entry, "author_name"),
            user_rating=_text(entry, "user_rating"),
            user_read_at=_text(entry, "user_read_at"),
            book_published=_text(entry, "book_published"),
            book_image_url=_text(entry, "book_image_url"),
            book_small_image_url=_text(entry, "book_small_image_url"),
            book_medium_image_url=_text(entry, "book_medium_image_url"),
            book_large_image_url=_text(entry, "book_large_image_url"),
            description=_text(entry, "summary"),
        )


ItemT = TypeVar("ItemT")


@dataclass(frozen=True)
class Skipped(Generic[ItemT]):
    """A raw item that normalization dropped, with the reason why."""

    reason: str
    item: ItemT


__all__ = [
    "BookRecord",
    "FilmRecord",
    "MediaRecord",
    "Rating",
    "RawBookItem",
    "RawFilmItem",
    "Skipped",
]
