"""JSON file store holding the persisted media records."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from .errors import StoreError
from .models import BookRecord, FilmRecord, MediaRecord

LOGGER = logging.getLogger(__name__)

MOVIES_KEY = "movies"
BOOKS_KEY = "books"
MEDIA_KEY = "media"


@dataclass(frozen=True)
class StagedWrite:
    temp: Path
    target: Path


class MediaStore:
    """Key/value store where each key is a pretty-printed ``<key>.json`` file."""

    def __init__(self, data_dir: Path) -> None:
        self.data_dir = Path(data_dir)

    def path_for(self, key: str) -> Path:
        return self.data_dir / f"{key}.json"

    def read(self, key: str) -> Optional[Any]:
        """Return the decoded contents of ``key``, or None when the file is missing."""

        path = self.path_for(key)
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise StoreError(f"Could not read {path}: {exc}") from exc
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise StoreError(f"Could not parse {path}: {exc}") from exc

    def stage(self, key: str, payload: Any) -> StagedWrite:
        """Write ``payload`` as indented JSON to a temp file beside ``key``'s file.

        Nothing is visible to readers until the staged write is committed.
        """

        output = json.dumps(payload, indent=2, ensure_ascii=False) + "\n"
        temp_name: Optional[str] = None
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w", encoding="utf-8", delete=False, dir=str(self.data_dir), prefix=f".{key}.", suffix=".tmp"
            ) as handle:
                temp_name = handle.name
                handle.write(output)
        except OSError as exc:
            if temp_name and os.path.exists(temp_name):
                os.remove(temp_name)
            raise StoreError(f"Could not write {self.path_for(key)}: {exc}") from exc
        return StagedWrite(temp=Path(temp_name), target=self.path_for(key))

    def commit(self, staged: Sequence[StagedWrite]) -> None:
        """Move staged files over their targets, in order."""

        for write in staged:
            try:
                os.replace(write.temp, write.target)
            except OSError as exc:
                raise StoreError(f"Could not replace {write.target}: {exc}") from exc
            LOGGER.debug("Wrote %s", write.target)

    def discard(self, staged: Sequence[StagedWrite]) -> None:
        for write in staged:
            if write.temp.exists():
                write.temp.unlink()

    def write(self, key: str, payload: Any) -> None:
        """Replace ``key`` atomically with ``payload`` as indented JSON."""

        staged = [self.stage(key, payload)]
        try:
            self.commit(staged)
        finally:
            self.discard(staged)

    def _load_list(self, key: str) -> List[Dict[str, Any]]:
        data = self.read(key)
        if data is None:
            return []
        if not isinstance(data, list) or not all(isinstance(entry, dict) for entry in data):
            raise StoreError(f"Expected a JSON array of objects in {self.path_for(key)}")
        return data

    def load_movies(self) -> List[FilmRecord]:
        return [FilmRecord.from_dict(entry) for entry in self._load_list(MOVIES_KEY)]

    def load_books(self) -> List[BookRecord]:
        return [BookRecord.from_dict(entry) for entry in self._load_list(BOOKS_KEY)]

    def _save_records(self, key: str, records: Sequence[MediaRecord]) -> None:
        self.write(key, [record.to_dict() for record in records])

    def save_movies(self, records: Sequence[FilmRecord]) -> None:
        self._save_records(MOVIES_KEY, records)

    def save_books(self, records: Sequence[BookRecord]) -> None:
        self._save_records(BOOKS_KEY, records)

    def save_media(self, payload: Dict[str, Any]) -> None:
        self.write(MEDIA_KEY, payload)

    def stage_movies(self, records: Sequence[FilmRecord]) -> StagedWrite:
        return self.stage(MOVIES_KEY, [record.to_dict() for record in records])

    def stage_books(self, records: Sequence[BookRecord]) -> StagedWrite:
        return self.stage(BOOKS_KEY, [record.to_dict() for record in records])

    def stage_media(self, payload: Dict[str, Any]) -> StagedWrite:
        return self.stage(MEDIA_KEY, payload)


__all__ = ["BOOKS_KEY", "MEDIA_KEY", "MOVIES_KEY", "MediaStore", "StagedWrite"]
