"""Combined read payload served to the static site."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Optional, Sequence

from .models import BookRecord, FilmRecord
from .normalizers import sort_by_consumed_desc


def build_media_payload(
    movies: Sequence[FilmRecord],
    books: Sequence[BookRecord],
    generated_at: Optional[datetime] = None,
) -> Dict[str, Any]:
    """Return ``{generatedAt, movies, books}`` with both lists newest first."""

    generated_at = generated_at or datetime.now(timezone.utc)
    return {
        "generatedAt": generated_at.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z"),
        "movies": [record.to_dict() for record in sort_by_consumed_desc(movies)],
        "books": [record.to_dict() for record in sort_by_consumed_desc(books)],
    }


__all__ = ["build_media_payload"]
