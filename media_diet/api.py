"""Read-only HTTP API serving the persisted media JSON."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import FastAPI

from .config import Config, load_config
from .payload import build_media_payload
from .store import MediaStore

LOGGER = logging.getLogger(__name__)


def create_app(config: Optional[Config] = None, store: Optional[MediaStore] = None) -> FastAPI:
    config = config or load_config()
    store = store or MediaStore(config.data_dir)

    app = FastAPI(
        title="Media Diet API",
        description="Films and books from the Letterboxd and Goodreads logs",
    )

    @app.get("/healthz")
    def healthz() -> Dict[str, bool]:
        return {"ok": True}

    @app.get("/api/movies.json")
    def movies() -> List[Dict[str, Any]]:
        return [record.to_dict() for record in store.load_movies()]

    @app.get("/api/books.json")
    def books() -> List[Dict[str, Any]]:
        return [record.to_dict() for record in store.load_books()]

    @app.get("/api/media.json")
    def media() -> Dict[str, Any]:
        return build_media_payload(store.load_movies(), store.load_books())

    LOGGER.debug("Serving media from %s", store.data_dir)
    return app


__all__ = ["create_app"]
